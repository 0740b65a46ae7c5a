from datetime import datetime, timedelta, timezone
from typing import Callable

from autologin.core.exceptions import ConfigurationError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ExpiryPolicy:
    """Computes the instant before which tokens count as expired."""

    def __init__(self, lifetime_minutes: int, clock: Clock = utcnow):
        if lifetime_minutes <= 0:
            raise ConfigurationError(
                f"Token lifetime must be a positive number of minutes, got {lifetime_minutes}"
            )
        self.lifetime = timedelta(minutes=lifetime_minutes)
        self.clock = clock

    def cutoff(self) -> datetime:
        return as_utc(self.clock()) - self.lifetime

    def is_expired(self, created_at: datetime) -> bool:
        # Strictly before the cutoff, same as the sweep.
        return as_utc(created_at) < self.cutoff()
