"""
Bootstrap errors.

Driver failures are re-raised wrapped in one of these, chained to the
original pymongo error.
"""


class BootstrapError(Exception):
    """Base class for bootstrap failures."""


class IndexInitError(BootstrapError):
    """Raised when an index set cannot be applied"""

    def __init__(self, db_name: str, message: str, original_error: Exception = None):
        self.db_name = db_name
        self.original_error = original_error
        super().__init__(f"Index initialization for '{db_name}' failed: {message}")


class ProvisioningError(BootstrapError):
    """Raised when a user cannot be created or granted its role"""

    def __init__(self, username: str, message: str, original_error: Exception = None):
        self.username = username
        self.original_error = original_error
        super().__init__(f"Provisioning user '{username}' failed: {message}")
