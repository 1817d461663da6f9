"""
Global test fixtures for mongo-init.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock) for index tests
- In-memory user administration (usersInfo/createUser/grantRolesToUser)
  for provisioning tests, which mongomock does not implement
"""

from typing import Any, Dict, List

import mongomock
import pytest
from pymongo.errors import OperationFailure

from mongo_init.db.users import USER_ALREADY_EXISTS, UserDeclaration

# Server error codes used by the fake
USER_NOT_FOUND = 11


# =============================================================================
# MongoDB Fixtures (mongomock)
# =============================================================================

@pytest.fixture
def mock_mongo_client():
    """
    Create a mock MongoDB client using mongomock.

    This provides an in-memory MongoDB that behaves like the real thing
    for index creation and uniqueness checks.
    """
    client = mongomock.MongoClient()
    yield client
    client.close()


# =============================================================================
# User Administration Fakes
# =============================================================================

class FakeUserAdminDatabase:
    """
    A database handle that only understands the user management commands.

    Users are stored per database, as on a real server. `fail_on` maps a
    command name to an error code to raise instead of running it.
    """

    def __init__(self, name: str):
        self.name = name
        self.users: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.fail_on: Dict[str, int] = {}

    def command(self, command: str, value: Any = None, **kwargs) -> Dict[str, Any]:
        self.calls.append(command)

        if command in self.fail_on:
            raise OperationFailure(f"{command} failed", code=self.fail_on[command])

        if command == "usersInfo":
            user = self.users.get(value)
            if user is None:
                return {"users": [], "ok": 1.0}
            return {
                "users": [{"user": value, "db": self.name, "roles": list(user["roles"])}],
                "ok": 1.0,
            }

        if command == "createUser":
            if value in self.users:
                raise OperationFailure(
                    f'User "{value}@{self.name}" already exists', code=USER_ALREADY_EXISTS
                )
            self.users[value] = {"pwd": kwargs["pwd"], "roles": list(kwargs["roles"])}
            return {"ok": 1.0}

        if command == "grantRolesToUser":
            user = self.users.get(value)
            if user is None:
                raise OperationFailure(
                    f"Could not find user \"{value}\" for db \"{self.name}\"",
                    code=USER_NOT_FOUND,
                )
            for role in kwargs["roles"]:
                if role not in user["roles"]:
                    user["roles"].append(role)
            return {"ok": 1.0}

        raise OperationFailure(f"no such command: '{command}'", code=59)


class FakeUserAdminClient:
    """Client returning one FakeUserAdminDatabase per name."""

    def __init__(self):
        self.databases: Dict[str, FakeUserAdminDatabase] = {}
        self.closed = False

    def __getitem__(self, name: str) -> FakeUserAdminDatabase:
        if name not in self.databases:
            self.databases[name] = FakeUserAdminDatabase(name)
        return self.databases[name]

    def close(self):
        self.closed = True


@pytest.fixture
def user_admin_client() -> FakeUserAdminClient:
    """In-memory client supporting the user management commands."""
    return FakeUserAdminClient()


@pytest.fixture
def root_user() -> UserDeclaration:
    """The tipster application user."""
    return UserDeclaration(
        username="root",
        password="pass.123",
        role="readWrite",
        database="tipster",
    )
