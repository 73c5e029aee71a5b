"""Tests for SessionDiscovery: bounded retries, restart on auth events."""

import asyncio

from storefront.application.session_discovery import SessionDiscovery
from storefront.domain.exceptions import GatewayError
from storefront.domain.model.identity import AuthEvent, Session
from tests.fakes import FakeSessionService

ALICE = Session(user_id="u1", email="alice@example.com")


def _setup(script=(), session=None, retry_delay=0.0):
    sessions = FakeSessionService(list(script), session=session)
    found: list[Session] = []

    async def on_session(session):
        found.append(session)

    discovery = SessionDiscovery(sessions, on_session, max_attempts=5, retry_delay=retry_delay)
    return discovery, sessions, found


class TestRetries:

    def test_gives_up_as_guest_after_max_attempts(self):
        async def scenario():
            discovery, sessions, found = _setup(script=[GatewayError("auth down")] * 5)
            discovery.start()
            result = await discovery.wait()
            return discovery, sessions, found, result

        discovery, sessions, found, result = asyncio.run(scenario())
        assert result is None
        assert sessions.lookups == 5
        assert not discovery.identity.is_authenticated
        assert found == []

    def test_session_found_on_third_attempt(self):
        async def scenario():
            discovery, sessions, found = _setup(script=[None, GatewayError("slow")], session=ALICE)
            discovery.start()
            result = await discovery.wait()
            return discovery, found, result

        discovery, found, result = asyncio.run(scenario())
        assert result == ALICE
        assert discovery.attempts == 3
        assert discovery.identity.user_id == "u1"
        assert found == [ALICE]


class TestAuthEvents:

    def test_auth_event_restarts_with_fresh_counter(self):
        async def scenario():
            discovery, sessions, found = _setup(retry_delay=0.01)
            discovery.start()
            await asyncio.sleep(0.025)
            sessions.session = ALICE
            sessions.emit(AuthEvent.SIGNED_IN, ALICE)
            result = await discovery.wait()
            return discovery, result

        discovery, result = asyncio.run(scenario())
        assert result == ALICE
        assert discovery.attempts == 1

    def test_signed_out_cancels_and_goes_anonymous(self):
        async def scenario():
            discovery, sessions, _ = _setup(retry_delay=10.0)
            discovery.start()
            await asyncio.sleep(0)
            sessions.emit(AuthEvent.SIGNED_OUT, None)
            result = await discovery.wait()
            return discovery, result

        discovery, result = asyncio.run(scenario())
        assert result is None
        assert not discovery.is_running
        assert not discovery.identity.is_authenticated

    def test_close_cancels_pending_retry(self):
        async def scenario():
            discovery, sessions, _ = _setup(retry_delay=10.0)
            discovery.start()
            await asyncio.sleep(0)
            discovery.close()
            await asyncio.sleep(0)
            return discovery, sessions

        discovery, sessions = asyncio.run(scenario())
        assert not discovery.is_running
        assert sessions.handlers == []
        assert sessions.lookups == 1
