"""Provider API key provisioning and storage."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from frame_lab.config import is_placeholder_api_key
from frame_lab.services.generation import GenerationService
from frame_lab.services.local_store import LocalStore

logger = logging.getLogger(__name__)

API_KEY_STORAGE_KEY = "gemini_api_key"


class ApiKeyEndpointClient(Protocol):
    """Interface for the endpoint that hands out the provider API key."""

    async def fetch_api_key(self) -> str | None:
        """Return the key published by the endpoint, if any."""


@dataclass
class ApiKeyService:
    """Keeps the provider API key used by generation calls."""

    local_store: LocalStore
    generation_service: GenerationService
    configured_key: str | None = None
    endpoint_client: ApiKeyEndpointClient | None = None

    @property
    def api_key(self) -> str:
        return self.local_store.get(API_KEY_STORAGE_KEY) or ""

    @property
    def is_set(self) -> bool:
        return bool(self.api_key)

    def set_api_key(self, key: str) -> None:
        """Store a trimmed key; an empty key removes the stored one."""
        trimmed = key.strip()
        if trimmed:
            self.local_store.set(API_KEY_STORAGE_KEY, trimmed)
        else:
            self.local_store.remove(API_KEY_STORAGE_KEY)

    async def provision(self) -> None:
        """Adopt a key from configuration or the key endpoint if none is stored.

        Endpoint failures are logged and leave the key unset.
        """
        if self.is_set:
            return
        if not is_placeholder_api_key(self.configured_key):
            self.set_api_key(self.configured_key or "")
            return
        if self.endpoint_client is None:
            logger.warning("No API key configured and no key endpoint available")
            return
        try:
            fetched = await self.endpoint_client.fetch_api_key()
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to fetch API key from endpoint")
            return
        if is_placeholder_api_key(fetched):
            logger.warning("Key endpoint returned no usable API key")
            return
        self.set_api_key(fetched or "")

    async def validate(self, key: str) -> bool:
        """Check whether a key can authenticate with the provider."""
        return await self.generation_service.validate_key(key.strip())
