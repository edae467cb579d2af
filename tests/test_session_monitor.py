"""Tests for periodic session verification."""

import asyncio

from frame_lab.domain.accounts import AuthUser
from frame_lab.services.sessions import SessionGuard, SessionMonitor
from tests.conftest import (
    TEST_EMAIL,
    TEST_PASSWORD,
    FakeAuthGateway,
    InMemoryProfileRepository,
)


class ExplodingGateway(FakeAuthGateway):
    def get_user(self) -> AuthUser | None:
        raise RuntimeError("network down")


def test_tick_skips_verification_when_signed_out(
    session_guard: SessionGuard, auth_gateway: FakeAuthGateway
) -> None:
    monitor = SessionMonitor(guard=session_guard)

    monitor.tick()

    assert auth_gateway.sign_out_count == 0


def test_tick_logs_out_after_takeover(
    session_guard: SessionGuard,
    profile_repository: InMemoryProfileRepository,
    account_id: str,
) -> None:
    session_guard.login(TEST_EMAIL, TEST_PASSWORD)
    profile_repository.set_active_session(account_id, "other-device")
    monitor = SessionMonitor(guard=session_guard)

    monitor.tick()

    assert not session_guard.context.is_authenticated


def test_tick_survives_verification_errors(
    session_guard: SessionGuard, auth_gateway: FakeAuthGateway, account_id: str
) -> None:
    session_guard.login(TEST_EMAIL, TEST_PASSWORD)
    session_guard.auth_gateway = ExplodingGateway(
        backend=auth_gateway.backend, current=auth_gateway.current
    )
    monitor = SessionMonitor(guard=session_guard)

    monitor.tick()

    assert session_guard.context.is_authenticated


def test_monitor_runs_in_background_until_stopped(
    session_guard: SessionGuard,
    profile_repository: InMemoryProfileRepository,
    account_id: str,
) -> None:
    session_guard.login(TEST_EMAIL, TEST_PASSWORD)
    profile_repository.set_active_session(account_id, "other-device")
    monitor = SessionMonitor(guard=session_guard, interval_seconds=0)

    async def scenario() -> tuple[bool, bool]:
        monitor.start()
        started = monitor.running
        await asyncio.sleep(0.05)
        await monitor.stop()
        return started, monitor.running

    started, running_after_stop = asyncio.run(scenario())

    assert started is True
    assert running_after_stop is False
    assert not session_guard.context.is_authenticated
