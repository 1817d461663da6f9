"""
Transaction database indexes.

Platform identities are unique per platform, compared case-insensitively,
and only enforced for documents that carry that platform's identity.
"""

from pymongo import ASCENDING
from pymongo.collation import Collation, CollationStrength

from . import IndexDeclaration, exists_filter

DB_NAME = "transaction"
DESCRIPTION = "Unique platform identity indexes"

CASE_INSENSITIVE = Collation(locale="en", strength=CollationStrength.SECONDARY)

INDEXES = [
    IndexDeclaration(
        "transaction.test",
        [("Telegram.PlatformIdentity", ASCENDING)],
        "tgIX",
        unique=True,
        partial_filter=exists_filter("Telegram.PlatformIdentity"),
        collation=CASE_INSENSITIVE,
    ),
    IndexDeclaration(
        "transaction.test",
        [("Google.PlatformIdentity", ASCENDING)],
        "gooIX",
        unique=True,
        partial_filter=exists_filter("Google.PlatformIdentity"),
        collation=CASE_INSENSITIVE,
    ),
]
