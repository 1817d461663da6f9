"""
Environment-derived settings.

Values are read at call time so a .env file loaded by the entry point
(or a test's monkeypatch) is picked up.
"""

import os

DEFAULT_MONGO_URI = "mongodb://localhost:27017"

# Connection-level timeouts (milliseconds)
SERVER_SELECTION_TIMEOUT_MS = 5000
CONNECT_TIMEOUT_MS = 5000
SOCKET_TIMEOUT_MS = 10000


def get_mongo_uri() -> str:
    """Get MongoDB URI from environment."""
    return os.environ.get("MONGODB_URI", DEFAULT_MONGO_URI)


def get_password(env_var: str, default: str) -> str:
    """Get a user password, allowing an environment override."""
    return os.environ.get(env_var) or default
