"""Supabase Auth gateway."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import AuthError, Client

from frame_lab.domain.accounts import AuthEvent, AuthEventKind, AuthSession, AuthUser
from frame_lab.domain.errors import AuthenticationError
from frame_lab.services.sessions import AuthGateway

logger = logging.getLogger(__name__)

_EVENT_KINDS = {kind.value: kind for kind in AuthEventKind}


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Credential store backed by Supabase Auth."""

    client: Client

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthenticationError(exc.message) from exc
        if response.user is None or response.session is None:
            raise AuthenticationError("Failed to retrieve user data after login.")
        return _to_session(response.session)

    def sign_up(self, email: str, password: str) -> None:
        """Register a new account."""
        try:
            self.client.auth.sign_up({"email": email, "password": password})
        except AuthError as exc:
            raise AuthenticationError(exc.message) from exc

    def sign_out(self) -> None:
        """End the Supabase session."""
        self.client.auth.sign_out()

    def get_session(self) -> AuthSession | None:
        """Return the persisted Supabase session, if any."""
        try:
            session = self.client.auth.get_session()
        except AuthError as exc:
            logger.warning("Could not restore session: %s", exc.message)
            return None
        if session is None:
            return None
        return _to_session(session)

    def get_user(self) -> AuthUser | None:
        """Return the user for the current session, if any."""
        try:
            response = self.client.auth.get_user()
        except AuthError as exc:
            logger.warning("Could not load current user: %s", exc.message)
            return None
        if response is None or response.user is None:
            return None
        return AuthUser(id=response.user.id, email=response.user.email)

    def subscribe(
        self, listener: Callable[[AuthEvent], None]
    ) -> Callable[[], None]:
        """Forward sign-out and token-refresh notifications to a listener."""

        def on_change(event: str, session) -> None:  # type: ignore[no-untyped-def]
            kind = _EVENT_KINDS.get(event)
            if kind is None:
                return
            listener(
                AuthEvent(
                    kind=kind,
                    session=_to_session(session) if session is not None else None,
                )
            )

        subscription = self.client.auth.on_auth_state_change(on_change)
        return subscription.unsubscribe


def _to_session(session) -> AuthSession:  # type: ignore[no-untyped-def]
    user = session.user
    return AuthSession(
        access_token=session.access_token,
        user=AuthUser(id=user.id, email=user.email),
    )
