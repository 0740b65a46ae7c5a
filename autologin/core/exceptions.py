"""
Exceptions raised by the autologin token lifecycle.

A token that cannot be found is not an error: lookups return None instead.
"""


class AutologinError(Exception):
    """Base class for all autologin errors."""


class ConfigurationError(AutologinError):
    """Token length, lifetime or generation bounds are unusable."""


class StorageError(AutologinError):
    """The token store failed to read or write."""


class TokenCollisionError(StorageError):
    """Insert rejected because another row already holds the same token."""

    def __init__(self, token_prefix: str):
        self.token_prefix = token_prefix
        super().__init__(f"Token starting with '{token_prefix}' already exists")
