"""
User Provisioner - Application database accounts.

Each application database gets one user with a single readWrite role
scoped to that database. Provisioning checks for the user first and
branches explicitly:
- missing user: createUser
- existing user: grantRolesToUser

A createUser that loses a race to another bootstrap (UserAlreadyExists)
falls back to the grant. Every other failure is raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import OperationFailure, PyMongoError

from mongo_init.config import get_password
from mongo_init.errors import BootstrapError, ProvisioningError

logger = logging.getLogger("mongo_init.users")

# Server error code for createUser on an existing user
USER_ALREADY_EXISTS = 51003


class ProvisionOutcome(str, Enum):
    """How a user ended up provisioned."""
    CREATED = "created"
    GRANTED = "granted"


@dataclass(frozen=True)
class UserDeclaration:
    """An application user and the role it should hold."""
    username: str
    password: str
    role: str
    database: str

    def roles(self) -> List[Dict[str, str]]:
        return [{"role": self.role, "db": self.database}]


def default_users() -> List[UserDeclaration]:
    """The application users, with passwords resolved from the environment."""
    return [
        UserDeclaration(
            username="root",
            password=get_password("TIPSTER_ROOT_PASSWORD", "pass.123"),
            role="readWrite",
            database="tipster",
        ),
        UserDeclaration(
            username="support",
            password=get_password("TRANSACTION_SUPPORT_PASSWORD", "pass.123"),
            role="readWrite",
            database="transaction",
        ),
    ]


# =============================================================================
# User management commands
# =============================================================================

def user_exists(db: Database, username: str) -> bool:
    """Check whether a user is defined on the database."""
    result = db.command("usersInfo", username)
    return bool(result.get("users"))


def create_user(db: Database, declaration: UserDeclaration) -> None:
    db.command(
        "createUser",
        declaration.username,
        pwd=declaration.password,
        roles=declaration.roles(),
    )


def grant_roles(db: Database, declaration: UserDeclaration) -> None:
    db.command(
        "grantRolesToUser",
        declaration.username,
        roles=declaration.roles(),
    )


class UserProvisioner:
    """
    Provisions application users against a MongoDB deployment.

    The client must be authenticated with a user allowed to run
    createUser and grantRolesToUser on the target databases.
    """

    def __init__(self, client: MongoClient):
        self.client = client

    def provision(self, declaration: UserDeclaration) -> ProvisionOutcome:
        """
        Create the user, or grant its role if it already exists.

        Args:
            declaration: User to provision

        Returns:
            ProvisionOutcome.CREATED or ProvisionOutcome.GRANTED

        Raises:
            ProvisioningError: If creation fails for any reason other than
                the user already existing, or if the grant fails
        """
        db = self.client[declaration.database]
        username = declaration.username

        try:
            exists = user_exists(db, username)
        except PyMongoError as e:
            raise ProvisioningError(username, f"usersInfo failed: {e}", e) from e

        if exists:
            logger.info(f"User {username} already exists on {declaration.database}, granting role")
            self._grant(db, declaration)
            return ProvisionOutcome.GRANTED

        try:
            create_user(db, declaration)
        except PyMongoError as e:
            if not isinstance(e, OperationFailure) or e.code != USER_ALREADY_EXISTS:
                logger.error(f"Creating user {username} failed: {e}")
                raise ProvisioningError(username, f"createUser failed: {e}", e) from e
            logger.warning(f"Creating user {username} failed ({e}), falling back to role grant")
            self._grant(db, declaration)
            return ProvisionOutcome.GRANTED

        logger.info(
            f"Created user {username} on {declaration.database} "
            f"with role {declaration.role}"
        )
        return ProvisionOutcome.CREATED

    def provision_all(
        self,
        declarations: Optional[Iterable[UserDeclaration]] = None,
        databases: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Provision several users in order, stopping at the first error.

        Args:
            declarations: Users to provision (default: default_users())
            databases: Optional database names to restrict the run to

        Returns:
            Dict mapping username to its ProvisionOutcome

        Raises:
            BootstrapError: If a requested database has no user declaration
        """
        if declarations is None:
            declarations = default_users()
        declarations = list(declarations)
        if databases:
            databases = list(databases)
            declared = {d.database for d in declarations}
            for db_name in databases:
                if db_name not in declared:
                    raise BootstrapError(f"No user declarations for database '{db_name}'")
            wanted = set(databases)
            declarations = [d for d in declarations if d.database in wanted]

        outcomes: Dict[str, Any] = {}
        for declaration in declarations:
            outcomes[declaration.username] = self.provision(declaration)
        return outcomes

    def _grant(self, db: Database, declaration: UserDeclaration) -> None:
        try:
            grant_roles(db, declaration)
        except PyMongoError as e:
            logger.error(f"Granting role to {declaration.username} failed: {e}")
            raise ProvisioningError(
                declaration.username, f"grantRolesToUser failed: {e}", e
            ) from e
        logger.info(
            f"Granted {declaration.role} on {declaration.database} to {declaration.username}"
        )
