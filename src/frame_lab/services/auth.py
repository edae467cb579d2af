"""Login, registration and logout flows."""

from dataclasses import dataclass

from frame_lab.domain.accounts import AuthSession
from frame_lab.domain.errors import INACTIVE_ACCOUNT_MESSAGE
from frame_lab.services.sessions import AuthGateway, SessionGuard

REGISTRATION_MESSAGE = (
    "Registration successful. Please contact the administrator to activate "
    "your account."
)
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

_AUTH_ERROR_MESSAGES: tuple[tuple[str, str], ...] = (
    ("Invalid login credentials", "Incorrect email or password. Please try again."),
    ("User not found", "User not found."),
    ("rate limit", "Too many attempts. Please try again later."),
    (INACTIVE_ACCOUNT_MESSAGE, INACTIVE_ACCOUNT_MESSAGE),
)


@dataclass
class AuthService:
    """Application service for account entry and exit."""

    guard: SessionGuard
    auth_gateway: AuthGateway

    def login(self, email: str, password: str) -> AuthSession:
        """Sign in and take over the account's active session."""
        return self.guard.login(email, password)

    def register(self, email: str, password: str) -> str:
        """Create an account and return the notice shown to the user."""
        self.auth_gateway.sign_up(email, password)
        return REGISTRATION_MESSAGE

    def logout(self) -> None:
        """Gracefully sign out, releasing this client's session token."""
        self.guard.logout(forced=False)


def describe_auth_error(message: str | None) -> str:
    """Map a provider auth error to the message shown on the login form."""
    if not message:
        return UNKNOWN_ERROR_MESSAGE
    for fragment, friendly in _AUTH_ERROR_MESSAGES:
        if fragment in message:
            return friendly
    return message
