"""
Database Layer - MongoDB connection and bootstrap procedures.

This package provides:
- Database: Connection manager owning the MongoClient for one run
- Index Initializer (indexes): named index creation per database
- User Provisioner (users): application user accounts

Usage:
    from mongo_init.db import Database

    with Database(connection_string) as db:
        db.create_indexes()
        db.provision_users()
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from mongo_init import config
from mongo_init.errors import IndexInitError
from .indexes import (
    IndexDeclaration,
    IndexSet,
    discover_index_sets,
    index_status,
    run_index_initializers,
    select_index_sets,
)
from .users import ProvisionOutcome, UserDeclaration, UserProvisioner, default_users

logger = logging.getLogger("mongo_init.db")


class Database:
    """
    MongoDB connection for a bootstrap run.

    Opens one client with connection-level timeouts and runs the
    bootstrap procedures against the databases reachable through it.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        client: Optional[MongoClient] = None,
    ):
        if client is None:
            client = MongoClient(
                connection_string or config.get_mongo_uri(),
                serverSelectionTimeoutMS=config.SERVER_SELECTION_TIMEOUT_MS,
                connectTimeoutMS=config.CONNECT_TIMEOUT_MS,
                socketTimeoutMS=config.SOCKET_TIMEOUT_MS,
            )
        self.client = client

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def create_indexes(self, databases: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Run the Index Initializer. See indexes.run_index_initializers."""
        return run_index_initializers(self.client, databases)

    def provision_users(
        self,
        databases: Optional[Iterable[str]] = None,
        declarations: Optional[Iterable[UserDeclaration]] = None,
    ) -> Dict[str, Any]:
        """Run the User Provisioner. See users.UserProvisioner.provision_all."""
        return UserProvisioner(self.client).provision_all(declarations, databases)

    def index_status(self, databases: Optional[Iterable[str]] = None) -> Dict[str, Dict[str, List[str]]]:
        """
        Present/missing/mismatched index names per database.

        Raises:
            IndexInitError: If an index listing fails
        """
        status = {}
        for index_set in select_index_sets(databases):
            try:
                status[index_set.db_name] = index_status(self.client[index_set.db_name], index_set)
            except PyMongoError as e:
                logger.error(f"Reading indexes of {index_set.db_name} failed: {e}")
                raise IndexInitError(index_set.db_name, str(e), e) from e
        return status


__all__ = [
    "Database",
    "IndexDeclaration",
    "IndexSet",
    "ProvisionOutcome",
    "UserDeclaration",
    "UserProvisioner",
    "default_users",
    "discover_index_sets",
    "run_index_initializers",
]
