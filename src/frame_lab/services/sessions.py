"""Single-active-session enforcement for an authenticated client."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

from frame_lab.domain.accounts import (
    AuthEvent,
    AuthEventKind,
    AuthSession,
    AuthUser,
    Profile,
)
from frame_lab.domain.errors import InactiveAccountError, ProfileUnavailableError
from frame_lab.services.local_store import LocalStore
from frame_lab.services.media import MediaStore

logger = logging.getLogger(__name__)

SESSION_ID_STORAGE_KEY = "active_session_id"


class AuthGateway(Protocol):
    """Interface for the hosted credential store."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Authenticate with a password and return the provider session."""

    def sign_up(self, email: str, password: str) -> None:
        """Register a new account."""

    def sign_out(self) -> None:
        """End the provider session."""

    def get_session(self) -> AuthSession | None:
        """Return the current provider session, if any."""

    def get_user(self) -> AuthUser | None:
        """Return the identity behind the current session, if any."""

    def subscribe(
        self, listener: Callable[[AuthEvent], None]
    ) -> Callable[[], None]:
        """Deliver auth events to a listener; return an unsubscribe callable."""


class ProfileRepository(Protocol):
    """Persistence interface for account profiles."""

    def get_profile(self, user_id: str) -> Profile | None:
        """Return the profile for an account, if present."""

    def set_active_session(self, user_id: str, session_id: str) -> None:
        """Make a session token the account's authoritative session."""

    def clear_active_session(self, user_id: str, session_id: str) -> None:
        """Clear the authoritative session only while it still equals session_id."""


@dataclass
class AuthContext:
    """In-memory authentication state of this client instance."""

    user: AuthUser | None = None
    session: AuthSession | None = None
    loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def adopt(self, session: AuthSession) -> None:
        self.session = session
        self.user = session.user

    def clear(self) -> None:
        self.session = None
        self.user = None


@dataclass
class SessionGuard:
    """Issues session tokens and invalidates sessions taken over elsewhere.

    The account profile stores one authoritative token; this client keeps its
    own copy in the local store. Any divergence between the two logs this
    client out without touching the remote field.
    """

    auth_gateway: AuthGateway
    profile_repository: ProfileRepository
    local_store: LocalStore
    media_store: MediaStore | None = None
    context: AuthContext = field(default_factory=AuthContext)
    token_factory: Callable[[], str] = field(default=lambda: str(uuid4()))
    _unsubscribe: Callable[[], None] | None = field(
        default=None, init=False, repr=False
    )

    def login(self, email: str, password: str) -> AuthSession:
        """Sign in and claim the account's single active session."""
        session = self.auth_gateway.sign_in(email, password)
        try:
            profile = self.profile_repository.get_profile(session.user.id)
            if profile is None:
                raise ProfileUnavailableError("Unable to verify your profile.")
            if not profile.is_active:
                raise InactiveAccountError()
            token = self.token_factory()
            self.profile_repository.set_active_session(session.user.id, token)
            self.local_store.set(SESSION_ID_STORAGE_KEY, token)
        except Exception:
            self.auth_gateway.sign_out()
            raise
        # Set directly; the provider's SIGNED_IN notification is ignored.
        self.context.adopt(session)
        logger.info("Started session for user %s", session.user.id)
        return session

    def verify_session(self) -> None:
        """Force a local logout when the remote token no longer matches ours."""
        user = self.auth_gateway.get_user()
        if user is None:
            return
        local_session_id = self.local_store.get(SESSION_ID_STORAGE_KEY)
        if not local_session_id:
            logger.info("No local session token for user %s", user.id)
            self.logout(forced=True)
            return
        profile = self.profile_repository.get_profile(user.id)
        if profile is not None and profile.active_session_id != local_session_id:
            logger.info("Session for user %s was taken over elsewhere", user.id)
            self.logout(forced=True)

    def check_initial_session(self) -> None:
        """Adopt a persisted provider session only if it is still authoritative."""
        try:
            session = self.auth_gateway.get_session()
            if session is None:
                self.local_store.remove(SESSION_ID_STORAGE_KEY)
                return
            local_session_id = self.local_store.get(SESSION_ID_STORAGE_KEY)
            if not local_session_id:
                self.logout(forced=True)
                return
            try:
                profile = self.profile_repository.get_profile(session.user.id)
            except Exception:
                logger.exception("Failed to load profile during startup check")
                profile = None
            if (
                profile is None
                or not profile.is_active
                or profile.active_session_id != local_session_id
            ):
                self.logout(forced=True)
                return
            self.context.adopt(session)
        finally:
            self.context.loading = False

    def logout(self, forced: bool = False) -> None:
        """Sign out, releasing the remote session token unless forced.

        A graceful logout clears the profile's token only while it still holds
        this client's token, so a newer session from another device survives.
        """
        user = self.auth_gateway.get_user()
        local_session_id = self.local_store.get(SESSION_ID_STORAGE_KEY)
        if user is not None and local_session_id and not forced:
            self.profile_repository.clear_active_session(user.id, local_session_id)
        self.auth_gateway.sign_out()
        self._clear_local_state()

    def handle_auth_event(self, event: AuthEvent) -> None:
        """React to provider auth notifications."""
        if event.kind is AuthEventKind.SIGNED_OUT:
            self._clear_local_state()
        elif event.kind is AuthEventKind.TOKEN_REFRESHED and event.session:
            try:
                self.verify_session()
            except Exception:
                logger.exception("Session verification after token refresh failed")

    def attach(self) -> None:
        """Subscribe to provider auth notifications."""
        if self._unsubscribe is None:
            self._unsubscribe = self.auth_gateway.subscribe(self.handle_auth_event)

    def detach(self) -> None:
        """Stop receiving provider auth notifications."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _clear_local_state(self) -> None:
        self.context.clear()
        self.local_store.remove(SESSION_ID_STORAGE_KEY)
        if self.media_store is not None:
            self.media_store.clear()


@dataclass
class SessionMonitor:
    """Runs session verification on a fixed interval while authenticated."""

    guard: SessionGuard
    interval_seconds: float = 30.0
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background verification loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the background verification loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def tick(self) -> None:
        """Run one verification if the client is authenticated."""
        if not self.guard.context.is_authenticated:
            return
        try:
            self.guard.verify_session()
        except Exception:
            logger.exception("Periodic session verification failed")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()
