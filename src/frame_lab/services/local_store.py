"""Client-local persistent key-value slot."""

from typing import Protocol


class LocalStore(Protocol):
    """Persistent string slots owned by this client instance."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""
