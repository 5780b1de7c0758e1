"""
Firenotes — Navigation & Client Session Tests
==============================================

What we test:
    ✅ Back stack transitions with pop-up-to (inclusive and exclusive)
    ✅ The root screen cannot be popped
    ✅ Registry tokens are opaque and unique; dropping closes the context
    ✅ Expired, signed-out and idle contexts are evicted on lookup and on register
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from firenotes.navigation import START_DESTINATION, Destination, Navigator
from firenotes.services.home_controller import HomeController
from firenotes.services.identity_gateway import IdentityGateway
from firenotes.services.record_gateway import RecordStoreGateway
from firenotes.services.sessions import ClientContext, SessionRegistry


class TestNavigator:
    def test_starts_on_login(self):
        navigator = Navigator()
        assert START_DESTINATION == Destination.LOGIN
        assert navigator.back_stack == [Destination.LOGIN]

    def test_login_to_home_pops_login(self):
        navigator = Navigator()
        navigator.navigate(Destination.HOME, pop_up_to=Destination.LOGIN, inclusive=True)

        assert navigator.back_stack == [Destination.HOME]
        assert navigator.pop() is None

    def test_sign_up_to_home_pops_login_and_sign_up(self):
        navigator = Navigator([Destination.LOGIN])
        navigator.navigate(Destination.SIGN_UP)
        navigator.navigate(Destination.HOME, pop_up_to=Destination.LOGIN, inclusive=True)

        assert navigator.back_stack == [Destination.HOME]

    def test_logout_pops_home(self):
        navigator = Navigator([Destination.HOME])
        navigator.navigate(Destination.LOGIN, pop_up_to=Destination.HOME, inclusive=True)

        assert navigator.back_stack == [Destination.LOGIN]

    def test_exclusive_pop_keeps_target(self):
        navigator = Navigator([Destination.LOGIN, Destination.SIGN_UP])
        navigator.navigate(Destination.FORGOT_PASSWORD, pop_up_to=Destination.LOGIN)

        assert navigator.back_stack == [Destination.LOGIN, Destination.FORGOT_PASSWORD]
        assert navigator.pop() == Destination.LOGIN

    def test_absent_pop_target_only_pushes(self):
        navigator = Navigator([Destination.LOGIN])
        navigator.navigate(Destination.SIGN_UP, pop_up_to=Destination.HOME, inclusive=True)

        assert navigator.back_stack == [Destination.LOGIN, Destination.SIGN_UP]


@pytest.fixture
def new_context(identity_provider, sql_store, fake_firebase):
    """Factory for contexts whose identity is signed in."""
    fake_firebase.add_user("ada@example.com", "secret123")

    async def build() -> ClientContext:
        records = RecordStoreGateway(sql_store)
        context = ClientContext(
            identity=IdentityGateway(identity_provider),
            records=records,
            controller=HomeController(records),
        )
        await context.identity.sign_in("ada@example.com", "secret123")
        return context

    return build


def expire(context: ClientContext) -> None:
    """Move the context's ID token expiry two hours into the past."""
    session = context.identity.session
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    context.identity._session = replace(session, expires_at=past)


class TestSessionRegistry:
    @pytest.mark.asyncio
    async def test_register_and_get(self, new_context):
        registry = SessionRegistry()
        first = await new_context()
        second = await new_context()

        token_a = registry.register(first)
        token_b = registry.register(second)

        assert token_a != token_b
        assert len(token_a) >= 32
        assert registry.get(token_a) is first
        assert len(registry) == 2

    @pytest.mark.asyncio
    async def test_drop_closes_context(self, new_context):
        registry = SessionRegistry()
        context = await new_context()
        token = registry.register(context)

        assert registry.drop(token) is context
        assert context.controller.closed
        assert registry.get(token) is None
        assert registry.drop(token) is None

    @pytest.mark.asyncio
    async def test_close_all(self, new_context):
        registry = SessionRegistry()
        contexts = [await new_context() for _ in range(3)]
        for context in contexts:
            registry.register(context)

        registry.close_all()

        assert len(registry) == 0
        assert all(c.controller.closed for c in contexts)

    @pytest.mark.asyncio
    async def test_dropped_context_is_signed_out(self, new_context):
        registry = SessionRegistry()
        context = await new_context()

        registry.drop(registry.register(context))

        assert context.identity.get_current_user() is None


class TestSessionEviction:
    @pytest.mark.asyncio
    async def test_expired_token_is_evicted_on_get(self, new_context):
        registry = SessionRegistry()
        context = await new_context()
        token = registry.register(context)

        expire(context)

        assert registry.get(token) is None
        assert len(registry) == 0
        assert context.controller.closed

    @pytest.mark.asyncio
    async def test_signed_out_context_is_evicted_on_get(self, new_context):
        registry = SessionRegistry()
        context = await new_context()
        token = registry.register(context)

        context.identity.sign_out()

        assert registry.get(token) is None
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_idle_context_is_evicted(self, new_context):
        registry = SessionRegistry(idle_timeout_seconds=60)
        context = await new_context()
        token = registry.register(context)

        context.last_seen -= timedelta(minutes=5)

        assert registry.get(token) is None

    @pytest.mark.asyncio
    async def test_get_keeps_active_context_alive(self, new_context):
        registry = SessionRegistry(idle_timeout_seconds=60)
        context = await new_context()
        token = registry.register(context)
        context.last_seen -= timedelta(seconds=50)

        assert registry.get(token) is context
        assert datetime.now(timezone.utc) - context.last_seen < timedelta(seconds=10)

    @pytest.mark.asyncio
    async def test_register_sweeps_stale_contexts(self, new_context):
        registry = SessionRegistry(idle_timeout_seconds=60)
        expired = await new_context()
        idle = await new_context()
        live = await new_context()
        for context in (expired, idle, live):
            registry.register(context)
        expire(expired)
        idle.last_seen -= timedelta(minutes=5)

        registry.register(await new_context())

        assert len(registry) == 2
        assert expired.controller.closed and idle.controller.closed
        assert not live.controller.closed
