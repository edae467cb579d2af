"""Supabase-backed profile repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from frame_lab.domain.accounts import Profile
from frame_lab.domain.errors import ProfileUnavailableError, SessionStartError
from frame_lab.services.sessions import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for account profiles."""

    client: Client

    def get_profile(self, user_id: str) -> Profile | None:
        """Return the profile row for an account, if present."""
        try:
            response = (
                self.client.table("profiles")
                .select("id, is_active, active_session_id")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except APIError as exc:
            raise ProfileUnavailableError(
                f"Unable to verify your profile: {_describe(exc)}"
            ) from exc
        if not response.data:
            return None
        row = response.data[0]
        return Profile(
            id=row["id"],
            is_active=bool(row.get("is_active")),
            active_session_id=row.get("active_session_id"),
        )

    def set_active_session(self, user_id: str, session_id: str) -> None:
        """Write a new authoritative session token."""
        try:
            response = (
                self.client.table("profiles")
                .update({"active_session_id": session_id})
                .eq("id", user_id)
                .execute()
            )
        except APIError as exc:
            raise SessionStartError(
                f"Failed to start a secure session: {_describe(exc)}"
            ) from exc
        if not response.data:
            raise SessionStartError("Failed to start a secure session.")

    def clear_active_session(self, user_id: str, session_id: str) -> None:
        """Clear the session token if it still matches session_id."""
        self.client.table("profiles").update({"active_session_id": None}).eq(
            "id", user_id
        ).eq("active_session_id", session_id).execute()


def _describe(exc: APIError) -> str:
    return exc.message or str(exc)
