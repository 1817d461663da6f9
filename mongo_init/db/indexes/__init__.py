"""
Index Initializer

Creates the fixed, named indexes of each application database.
Each database has one module in this folder (ix_tipster.py,
ix_transaction.py, ...) that defines:
- DB_NAME: str - Target database name
- DESCRIPTION: str - Human-readable description
- INDEXES: List[IndexDeclaration] - Ordered index declarations

Declarations are applied in order and unconditionally. Re-applying an
identical declaration is a no-op on the server; redefining a name with
different options fails and aborts the run.
"""

import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pymongo import MongoClient
from pymongo.collation import Collation
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from mongo_init.errors import IndexInitError

logger = logging.getLogger("mongo_init.indexes")


@dataclass(frozen=True)
class IndexDeclaration:
    """A single named index on a collection."""
    collection: str
    keys: List[Tuple[str, int]]
    name: str
    unique: bool = False
    partial_filter: Optional[Dict[str, Any]] = None
    collation: Optional[Collation] = None

    def options(self) -> Dict[str, Any]:
        """Keyword options for Collection.create_index."""
        opts: Dict[str, Any] = {"name": self.name}
        if self.unique:
            opts["unique"] = True
        if self.partial_filter is not None:
            opts["partialFilterExpression"] = self.partial_filter
        if self.collation is not None:
            opts["collation"] = self.collation
        return opts


@dataclass
class IndexSet:
    """All index declarations of one database."""
    db_name: str
    description: str
    indexes: List[IndexDeclaration] = field(default_factory=list)

    def collections(self) -> List[str]:
        """Collection names in declaration order, without duplicates."""
        seen: List[str] = []
        for decl in self.indexes:
            if decl.collection not in seen:
                seen.append(decl.collection)
        return seen


# =============================================================================
# Declaration helpers
# =============================================================================

def exists_filter(field_name: str) -> Dict[str, Any]:
    """Partial filter restricting an index to documents that have the field."""
    return {field_name: {"$exists": True}}


def create_index(collection: Collection, declaration: IndexDeclaration) -> str:
    """
    Create one declared index.

    Driver errors (conflicting definition, duplicate keys in existing data)
    are not handled here.

    Args:
        collection: MongoDB collection
        declaration: Index to create

    Returns:
        Index name
    """
    logger.debug(
        f"Creating index {collection.name}.{declaration.name} on {declaration.keys}"
    )
    return collection.create_index(declaration.keys, **declaration.options())


def apply_index_set(db: Database, index_set: IndexSet) -> List[str]:
    """
    Apply every declaration of an index set, in order.

    Args:
        db: Target database
        index_set: Declarations for that database

    Returns:
        Names of the indexes created (or already present)
    """
    names = []
    for declaration in index_set.indexes:
        names.append(create_index(db[declaration.collection], declaration))
    return names


# =============================================================================
# Discovery and running
# =============================================================================

def discover_index_sets() -> List[IndexSet]:
    """
    Discover all index modules in this folder.

    Looks for files named ix_*.py and loads their DB_NAME, DESCRIPTION
    and INDEXES.

    Returns:
        List of IndexSet objects sorted by database name
    """
    index_sets = []
    indexes_dir = Path(__file__).parent

    for file_path in indexes_dir.glob("ix_*.py"):
        module_name = file_path.stem

        module = importlib.import_module(f".{module_name}", package=__name__)

        db_name = getattr(module, "DB_NAME", None)
        indexes = getattr(module, "INDEXES", None)

        if db_name is None:
            logger.warning(f"Index module {module_name} missing DB_NAME, skipping")
            continue

        if indexes is None:
            logger.warning(f"Index module {module_name} missing INDEXES, skipping")
            continue

        index_sets.append(IndexSet(
            db_name=db_name,
            description=getattr(module, "DESCRIPTION", ""),
            indexes=list(indexes),
        ))

    index_sets.sort(key=lambda s: s.db_name)
    return index_sets


def select_index_sets(databases: Optional[Iterable[str]] = None) -> List[IndexSet]:
    """
    Get the discovered index sets, optionally restricted to some databases.

    Raises:
        IndexInitError: If a requested database has no index module
    """
    index_sets = discover_index_sets()
    if not databases:
        return index_sets

    by_name = {s.db_name: s for s in index_sets}
    selected = []
    for db_name in databases:
        if db_name not in by_name:
            raise IndexInitError(db_name, "no index declarations for this database")
        selected.append(by_name[db_name])
    return selected


def run_index_initializers(
    client: MongoClient,
    databases: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """
    Apply all (or the selected) index sets.

    Args:
        client: MongoDB client
        databases: Optional database names to restrict the run to

    Returns:
        Dict with run statistics:
        {
            "databases": [database names processed],
            "indexes": {database name: [index names]}
        }

    Raises:
        IndexInitError: On the first failure; the run stops there
    """
    stats: Dict[str, Any] = {
        "databases": [],
        "indexes": {},
    }

    index_sets = select_index_sets(databases)
    logger.info(f"Discovered {len(index_sets)} index sets")

    for index_set in index_sets:
        try:
            logger.info(
                f"Applying {len(index_set.indexes)} indexes to {index_set.db_name}: "
                f"{index_set.description}"
            )
            names = apply_index_set(client[index_set.db_name], index_set)
        except PyMongoError as e:
            logger.error(f"Index initialization for {index_set.db_name} failed: {e}")
            raise IndexInitError(index_set.db_name, str(e), e) from e

        stats["databases"].append(index_set.db_name)
        stats["indexes"][index_set.db_name] = names
        logger.info(f"Indexes applied to {index_set.db_name}")

    return stats


def _matches(declaration: IndexDeclaration, info: Dict[str, Any]) -> bool:
    """Whether an existing index has the declared keys, uniqueness and filter."""
    return (
        [tuple(k) for k in info.get("key", [])] == [tuple(k) for k in declaration.keys]
        and bool(info.get("unique", False)) == declaration.unique
        and info.get("partialFilterExpression") == declaration.partial_filter
    )


def index_status(db: Database, index_set: IndexSet) -> Dict[str, List[str]]:
    """
    Compare declared indexes to those present in the database.

    An index with the declared name but different keys, uniqueness or
    partial filter is reported as mismatched; the next run would fail on
    it. Collations are not compared (the server reports them with all
    defaults filled in).

    Args:
        db: Target database
        index_set: Declarations for that database

    Returns:
        {"present": [names], "missing": [names], "mismatched": [names]},
        in declaration order
    """
    existing = {}
    for coll_name in index_set.collections():
        existing[coll_name] = db[coll_name].index_information()

    status: Dict[str, List[str]] = {"present": [], "missing": [], "mismatched": []}
    for declaration in index_set.indexes:
        info = existing[declaration.collection].get(declaration.name)
        if info is None:
            status["missing"].append(declaration.name)
        elif _matches(declaration, info):
            status["present"].append(declaration.name)
        else:
            status["mismatched"].append(declaration.name)
    return status
