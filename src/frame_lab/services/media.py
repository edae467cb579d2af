"""Local media store backing playable URLs for downloaded results."""

import secrets
from typing import Protocol

from frame_lab.domain.media import MediaBlob

MEDIA_URL_PREFIX = "/media/"


class MediaStore(Protocol):
    """Store that hands out local URLs for media content."""

    def put(self, content: bytes, mime_type: str) -> str:
        """Store content and return its local URL."""

    def get(self, token: str) -> MediaBlob | None:
        """Return stored content for a token, if present."""

    def revoke(self, token: str) -> None:
        """Release stored content for a token."""

    def clear(self) -> None:
        """Release all stored content."""


class InMemoryMediaStore(MediaStore):
    """Process-local media store."""

    def __init__(self) -> None:
        self._blobs: dict[str, MediaBlob] = {}

    def put(self, content: bytes, mime_type: str) -> str:
        """Store content under a fresh unguessable token."""
        token = secrets.token_urlsafe(16)
        self._blobs[token] = MediaBlob(content=content, mime_type=mime_type)
        return f"{MEDIA_URL_PREFIX}{token}"

    def get(self, token: str) -> MediaBlob | None:
        """Return stored content for a token."""
        return self._blobs.get(token)

    def revoke(self, token: str) -> None:
        """Drop stored content; unknown tokens are ignored."""
        self._blobs.pop(token, None)

    def clear(self) -> None:
        """Drop all stored content."""
        self._blobs.clear()
