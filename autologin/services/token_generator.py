import logging
import secrets
import string
from typing import Awaitable, Callable

from autologin.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_letters + string.digits

DEFAULT_MAX_ATTEMPTS = 10


class TokenGenerator:
    """Generates random tokens that are not yet held by any stored record.

    The existence check runs before the insert, so two concurrent callers can
    still draw the same token. The unique constraint on the token column is
    what ultimately rejects the loser.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if max_attempts <= 0:
            raise ConfigurationError(f"max_attempts must be positive, got {max_attempts}")
        self.max_attempts = max_attempts

    @staticmethod
    def random_token(length: int) -> str:
        """Draw a random alphanumeric string of exactly ``length`` characters."""
        if length <= 0:
            raise ConfigurationError(f"Token length must be positive, got {length}")
        return ''.join(secrets.choice(ALPHABET) for _ in range(length))

    async def generate(self, length: int, exists: Callable[[str], Awaitable[bool]]) -> str:
        """Generate a token of ``length`` characters for which ``exists`` is false."""
        for attempt in range(1, self.max_attempts + 1):
            token = self.random_token(length)

            if not await exists(token):
                return token

            logger.debug(f"Token collision on attempt {attempt}/{self.max_attempts}")

        raise ConfigurationError(
            f"Failed to generate a unique token of length {length} "
            f"after {self.max_attempts} attempts"
        )
