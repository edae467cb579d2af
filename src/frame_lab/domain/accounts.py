"""Domain models for accounts and authenticated sessions."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the credential store."""

    id: str
    email: str | None = None


@dataclass(frozen=True)
class AuthSession:
    """Provider session for a signed-in user."""

    access_token: str
    user: AuthUser


@dataclass(frozen=True)
class Profile:
    """Account profile row holding activation and the authoritative session."""

    id: str
    is_active: bool
    active_session_id: str | None


class AuthEventKind(Enum):
    """Auth state notifications the session guard reacts to."""

    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class AuthEvent:
    """Tagged auth state notification."""

    kind: AuthEventKind
    session: AuthSession | None = None
