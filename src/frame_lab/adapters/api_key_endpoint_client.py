"""Client for the same-origin API key endpoint."""

from dataclasses import dataclass

import httpx

from frame_lab.services.api_keys import ApiKeyEndpointClient


@dataclass
class HttpxApiKeyEndpointClient(ApiKeyEndpointClient):
    """Fetches ``{"apiKey": ...}`` from a configured endpoint."""

    endpoint_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, endpoint_url: str) -> "HttpxApiKeyEndpointClient":
        """Create an endpoint client with a managed httpx session."""
        return cls(endpoint_url=endpoint_url, http_client=httpx.AsyncClient())

    async def fetch_api_key(self) -> str | None:
        """Return the published key, or None when the payload has none."""
        response = await self.http_client.get(self.endpoint_url, timeout=10)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            return None
        api_key = payload.get("apiKey")
        return api_key if isinstance(api_key, str) else None

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
