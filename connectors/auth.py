"""Authentication token lifecycle for ERP adapters.

Each adapter instance owns one ``TokenManager``. The token is absent at
construction, obtained lazily on the first outbound call, reused while
``now < expires_at`` and regenerated on expiry or after the ERP rejects it.

Refresh is single-flight: the running credential exchange is kept as a shared
future, so concurrent callers holding a missing or rejected token
await that one exchange and all receive its token or its error.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.observability.logging import get_logger

logger = get_logger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


@dataclass
class AuthToken:
    """Access token (SAP session id, OAuth bearer) with expiry tracking."""
    token: str
    expires_at: datetime
    token_type: str = "Bearer"
    obtained_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_lifetime(
        cls,
        token: str,
        lifetime_seconds: float,
        now: Optional[datetime] = None,
        token_type: str = "Bearer",
    ) -> "AuthToken":
        now = now or datetime.utcnow()
        return cls(
            token=token,
            expires_at=now + timedelta(seconds=lifetime_seconds),
            token_type=token_type,
            obtained_at=now,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) >= self.expires_at


class TokenManager:
    """Owns one adapter's token and serialises credential exchanges.

    Usage:
        manager = TokenManager(exchange=self._exchange_credentials, provider="sap")
        token = await manager.get_token()
        ...
        # after a 401/403 with that token
        token = await manager.refresh(stale=token)
    """

    def __init__(
        self,
        exchange: Callable[[], Awaitable[AuthToken]],
        provider: str = "",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize token manager.

        Args:
            exchange: Coroutine function performing the credential exchange
            provider: Provider name for logs
            clock: Returns the current UTC time (injectable for tests)
        """
        self._exchange = exchange
        self.provider = provider
        self._clock = clock or datetime.utcnow
        self._token: Optional[AuthToken] = None
        self._invalidated = False
        self._inflight: Optional["asyncio.Future[AuthToken]"] = None
        self.exchange_count = 0
        self.exchange_attempts = 0

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    def now(self) -> datetime:
        return self._clock()

    @property
    def state(self) -> AuthState:
        if self._token is None:
            return AuthState.EXPIRED if self._invalidated else AuthState.UNAUTHENTICATED
        if self._token.is_expired(self._clock()):
            return AuthState.EXPIRED
        return AuthState.AUTHENTICATED

    def _is_usable(self, token: Optional[AuthToken]) -> bool:
        return token is not None and not token.is_expired(self._clock())

    async def get_token(self) -> AuthToken:
        """Return a valid token, exchanging credentials if needed."""
        token = self._token
        if self._is_usable(token):
            return token
        return await self._shared_exchange()

    async def refresh(self, stale: Optional[AuthToken] = None) -> AuthToken:
        """Invalidate ``stale`` and return a fresh token.

        Only the first caller holding the rejected token triggers an
        exchange; later callers with the same stale token get the token
        (or the error) that exchange produced.
        """
        current = self._token
        if current is not None and current is not stale and self._is_usable(current):
            return current
        if self._inflight is None:
            self._token = None
            self._invalidated = True
        return await self._shared_exchange()

    def invalidate(self) -> None:
        """Drop the current token (authenticated -> expired)."""
        if self._token is not None:
            self._invalidated = True
        self._token = None

    async def _shared_exchange(self) -> AuthToken:
        # Joiners get the in-flight exchange's token or its exception
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run_exchange())
        return await asyncio.shield(self._inflight)

    async def _run_exchange(self) -> AuthToken:
        logger.info(f"Exchanging credentials for {self.provider or 'ERP'} token")
        self.exchange_attempts += 1
        try:
            token = await self._exchange()
        finally:
            self._inflight = None
        self._token = token
        self._invalidated = False
        self.exchange_count += 1
        return token
