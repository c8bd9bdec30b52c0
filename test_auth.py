"""
Tests for the token lifecycle: lazy exchange, expiry and single-flight refresh.
"""

import asyncio
from datetime import datetime, timedelta

from conftest import FakeClock


def make_manager(clock, lifetime_seconds=60, delay=0.0):
    from connectors.auth import AuthToken, TokenManager

    issued = []

    async def exchange():
        await asyncio.sleep(delay)
        issued.append(len(issued) + 1)
        return AuthToken.from_lifetime(f"token-{len(issued)}", lifetime_seconds, now=clock())

    return TokenManager(exchange=exchange, provider="test", clock=clock), issued


class TestAuthToken:

    def test_expiry_is_inclusive(self):
        from connectors.auth import AuthToken
        now = datetime(2024, 1, 1)
        token = AuthToken.from_lifetime("abc", 60, now=now)

        assert token.expires_at == now + timedelta(seconds=60)
        assert not token.is_expired(now + timedelta(seconds=59))
        assert token.is_expired(now + timedelta(seconds=60))


class TestTokenManager:

    def test_token_obtained_lazily_and_reused(self):
        from connectors.auth import AuthState
        clock = FakeClock()
        manager, issued = make_manager(clock)
        assert manager.state == AuthState.UNAUTHENTICATED
        assert issued == []

        async def run():
            first = await manager.get_token()
            second = await manager.get_token()
            return first, second

        first, second = asyncio.run(run())
        assert first is second
        assert manager.exchange_count == 1
        assert manager.state == AuthState.AUTHENTICATED

    def test_expired_token_is_regenerated(self):
        from connectors.auth import AuthState
        clock = FakeClock()
        manager, _ = make_manager(clock, lifetime_seconds=60)

        async def run():
            first = await manager.get_token()
            clock.advance(seconds=61)
            assert manager.state == AuthState.EXPIRED
            second = await manager.get_token()
            return first, second

        first, second = asyncio.run(run())
        assert first.token == "token-1"
        assert second.token == "token-2"
        assert manager.exchange_count == 2

    def test_concurrent_callers_share_one_exchange(self):
        clock = FakeClock()
        manager, issued = make_manager(clock, delay=0.01)

        async def run():
            return await asyncio.gather(*(manager.get_token() for _ in range(10)))

        tokens = asyncio.run(run())
        assert len(issued) == 1
        assert {t.token for t in tokens} == {"token-1"}

    def test_concurrent_refresh_of_rejected_token_is_single_flight(self):
        clock = FakeClock()
        manager, issued = make_manager(clock, delay=0.01)

        async def run():
            stale = await manager.get_token()
            return await asyncio.gather(*(manager.refresh(stale=stale) for _ in range(5)))

        tokens = asyncio.run(run())
        # One initial exchange plus one refresh
        assert len(issued) == 2
        assert {t.token for t in tokens} == {"token-2"}

    def test_invalidate_marks_expired(self):
        from connectors.auth import AuthState
        clock = FakeClock()
        manager, _ = make_manager(clock)

        asyncio.run(manager.get_token())
        manager.invalidate()
        assert manager.token is None
        assert manager.state == AuthState.EXPIRED

    def test_failed_exchange_leaves_no_token(self):
        import pytest
        from connectors.auth import TokenManager
        from connectors.errors import ERPAuthenticationError

        async def exchange():
            raise ERPAuthenticationError("bad credentials", 401)

        manager = TokenManager(exchange=exchange, provider="test", clock=FakeClock())
        with pytest.raises(ERPAuthenticationError):
            asyncio.run(manager.get_token())
        assert manager.token is None
        assert manager.exchange_count == 0

    def test_failed_exchange_is_shared_by_concurrent_callers(self):
        import pytest
        from connectors.auth import TokenManager
        from connectors.errors import ERPNetworkError

        attempts = []

        async def exchange():
            attempts.append(1)
            await asyncio.sleep(0.01)
            raise ERPNetworkError("auth endpoint unreachable")

        manager = TokenManager(exchange=exchange, provider="test", clock=FakeClock())

        async def run():
            return await asyncio.gather(
                *(manager.get_token() for _ in range(10)), return_exceptions=True
            )

        results = asyncio.run(run())
        assert len(attempts) == 1
        assert manager.exchange_attempts == 1
        assert all(isinstance(r, ERPNetworkError) for r in results)

        # The next caller triggers exactly one new exchange
        with pytest.raises(ERPNetworkError):
            asyncio.run(manager.get_token())
        assert len(attempts) == 2
