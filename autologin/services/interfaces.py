"""
Narrow interfaces the autologin service depends on.

The service never talks to a concrete web framework or database directly:
subjects, token storage and URL generation are all reached through the
protocols below.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Tuple, Union

from autologin.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class AutologinConfig:
    """Token configuration, read once when the service is built."""

    length: int
    lifetime_minutes: int
    remove_expired_on_issue: bool = True
    count_redemptions: bool = True
    redemption_route_name: str = "autologin"
    redirect_url: str = "/"
    max_generation_attempts: int = 10
    strict_expiry: bool = False

    def __post_init__(self):
        if self.length <= 0:
            raise ConfigurationError(f"Token length must be positive, got {self.length}")
        if self.lifetime_minutes <= 0:
            raise ConfigurationError(
                f"Token lifetime must be a positive number of minutes, got {self.lifetime_minutes}"
            )
        if self.max_generation_attempts <= 0:
            raise ConfigurationError(
                f"Generation attempts must be positive, got {self.max_generation_attempts}"
            )
        if not self.redemption_route_name:
            raise ConfigurationError("A redemption route name is required")


class SubjectIdentity(Protocol):
    """Anything that can be logged in: only its identifier matters here."""

    def get_auth_identifier(self) -> Any:
        ...


class TokenRecord(Protocol):
    id: Any
    user_id: Any
    token: str
    path: Optional[str]
    count: int
    created_at: datetime


class TokenStore(Protocol):
    """Persistence capability consumed by the service."""

    async def find_by_token(self, token: str) -> Optional[TokenRecord]:
        ...

    async def token_exists(self, token: str) -> bool:
        ...

    async def create_token(self, user_id: Any, token: str, path: Optional[str] = None,
                           created_at: Optional[datetime] = None) -> TokenRecord:
        ...

    async def delete_expired(self, cutoff: datetime) -> int:
        ...

    async def increment_count(self, record: TokenRecord) -> Optional[TokenRecord]:
        ...


# A literal path, or a (route name, parameters) pair.
PathSpec = Union[str, Tuple[str, Dict[str, Any]]]


class Router(Protocol):
    """URL generation capability consumed by the service."""

    def to(self, path: str, extra: Optional[Dict[str, Any]] = None,
           secure: Optional[bool] = None) -> str:
        ...

    def route(self, name: str, parameters: Optional[Dict[str, Any]] = None,
              absolute: bool = True) -> str:
        ...

    def resolve(self, spec: PathSpec) -> str:
        ...
