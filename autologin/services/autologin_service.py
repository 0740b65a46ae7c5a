from typing import Any, Dict, Optional
import logging

from autologin.repositories.unit_of_work import AbstractUnitOfWork
from autologin.services.expiry import Clock, ExpiryPolicy, utcnow
from autologin.services.interfaces import AutologinConfig, Router, SubjectIdentity, TokenRecord, TokenStore
from autologin.services.token_generator import TokenGenerator

logger = logging.getLogger(__name__)


def _prefix(token: str) -> str:
    return f"{token[:6]}..."


class AutologinService:
    """Issues autologin links and redeems their tokens."""

    def __init__(self, uow: AbstractUnitOfWork, link_builder: Router, config: AutologinConfig,
                 clock: Clock = utcnow, generator: Optional[TokenGenerator] = None):
        self.uow = uow
        self.tokens: TokenStore = uow.autologin_tokens
        self.link_builder = link_builder
        self.config = config
        self.clock = clock
        self.expiry = ExpiryPolicy(config.lifetime_minutes, clock)
        self.generator = generator or TokenGenerator(config.max_generation_attempts)

    async def user(self, subject: SubjectIdentity) -> str:
        """Link that logs ``subject`` in and goes to the default redirect."""
        return await self.issue(subject)

    async def to(self, subject: SubjectIdentity, path: str,
                 extra: Optional[Dict[str, Any]] = None, secure: Optional[bool] = None) -> str:
        """Link that logs ``subject`` in and then redirects to ``path``."""
        destination = self.link_builder.to(path, extra, secure)
        return await self.issue(subject, destination)

    async def route(self, subject: SubjectIdentity, name: str,
                    parameters: Optional[Dict[str, Any]] = None, absolute: bool = True) -> str:
        """Link that logs ``subject`` in and then redirects to a named route."""
        destination = self.link_builder.route(name, parameters, absolute)
        return await self.issue(subject, destination)

    async def issue(self, subject: SubjectIdentity, path: Optional[str] = None) -> str:
        """Create a token for ``subject`` and return its redemption URL.

        Storage failures, including TokenCollisionError when a concurrent
        issue stored the same token first, propagate to the caller.
        """
        if self.config.remove_expired_on_issue:
            await self.sweep(commit=False)

        user_id = subject.get_auth_identifier()
        token = await self.generator.generate(self.config.length, self.tokens.token_exists)

        await self.tokens.create_token(
            user_id=user_id,
            token=token,
            path=path,
            created_at=self.clock(),
        )
        await self.uow.commit()

        logger.info(f"Issued autologin token {_prefix(token)} for user {user_id}")
        return self.link_builder.route(self.config.redemption_route_name, {"token": token})

    async def validate(self, token: str) -> Optional[TokenRecord]:
        """Return the stored record for ``token``, or None.

        None covers unknown, swept and (with strict expiry) stale tokens
        alike. When counting is enabled the usage counter is incremented.
        """
        record = await self.tokens.find_by_token(token)
        if not record:
            return None

        if self.config.strict_expiry and self.expiry.is_expired(record.created_at):
            logger.debug(f"Autologin token {_prefix(token)} is past its lifetime")
            return None

        if self.config.count_redemptions:
            record = await self.tokens.increment_count(record)
            if not record:
                # Removed between lookup and increment
                return None
            await self.uow.commit()

        logger.info(f"Validated autologin token {_prefix(token)} for user {record.user_id}")
        return record

    async def sweep(self, commit: bool = True) -> int:
        """Delete tokens older than the configured lifetime."""
        cutoff = self.expiry.cutoff()
        deleted = await self.tokens.delete_expired(cutoff)
        if commit:
            await self.uow.commit()

        if deleted:
            logger.info(f"Removed {deleted} expired autologin tokens created before {cutoff.isoformat()}")
        return deleted
