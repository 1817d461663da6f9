"""
Tipster database indexes.

Collections:
- users: User profiles
- tips: Tips published by tipsters
- comments: Threaded comments on tips
- transactions: Payment transactions
- transaction_logs: Transaction state change log

`tags` is an array field on users and tips, so its indexes are multikey.
"""

from pymongo import ASCENDING, DESCENDING

from . import IndexDeclaration

DB_NAME = "tipster"
DESCRIPTION = "User, tip, comment and transaction indexes"

INDEXES = [
    # Users collection
    IndexDeclaration("users", [("username", ASCENDING)], "idx_username"),
    IndexDeclaration("users", [("email", ASCENDING)], "idx_email_unique", unique=True),
    IndexDeclaration("users", [("tags", ASCENDING)], "idx_user_tags"),
    IndexDeclaration("users", [("createdAt", DESCENDING)], "idx_user_createdAt"),
    IndexDeclaration("users", [("updatedAt", DESCENDING)], "idx_user_updatedAt"),

    # Tips collection
    IndexDeclaration("tips", [("tipsterId", ASCENDING)], "idx_tipsterId"),
    IndexDeclaration("tips", [("tags", ASCENDING)], "idx_tip_tags"),
    IndexDeclaration("tips", [("createdAt", DESCENDING)], "idx_tip_createdAt"),
    IndexDeclaration("tips", [("updatedAt", DESCENDING)], "idx_tip_updatedAt"),

    # Comments collection
    IndexDeclaration("comments", [("tipId", ASCENDING)], "idx_comment_tipId"),
    IndexDeclaration("comments", [("userId", ASCENDING)], "idx_comment_userId"),
    IndexDeclaration("comments", [("parentId", ASCENDING)], "idx_comment_parentId"),
    IndexDeclaration("comments", [("createdAt", DESCENDING)], "idx_comment_createdAt"),
    IndexDeclaration("comments", [("updatedAt", DESCENDING)], "idx_comment_updatedAt"),

    # Transactions collection
    IndexDeclaration(
        "transactions", [("transactionId", ASCENDING)], "idx_transactionId_unique", unique=True
    ),
    IndexDeclaration("transactions", [("orderId", ASCENDING)], "idx_transaction_orderId"),

    # Transaction logs collection
    IndexDeclaration("transaction_logs", [("logId", ASCENDING)], "idx_logId_unique", unique=True),
    IndexDeclaration("transaction_logs", [("transactionId", ASCENDING)], "idx_log_transactionId"),
    IndexDeclaration("transaction_logs", [("orderId", ASCENDING)], "idx_log_orderId"),
]
