"""Download client for generated video files."""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from frame_lab.domain.errors import VideoDownloadError
from frame_lab.domain.media import MediaBlob
from frame_lab.services.generation import VideoFetcher

logger = logging.getLogger(__name__)


@dataclass
class HttpxVideoDownloadClient(VideoFetcher):
    """Video fetcher using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxVideoDownloadClient":
        """Create a download client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def download(self, uri: str, api_key: str) -> MediaBlob:
        """Download a result file, authenticating with the API key."""
        response = await self.http_client.get(with_api_key(uri, api_key), timeout=120)
        if response.is_error:
            logger.error("Failed to download generated video: %s", response.status_code)
            raise VideoDownloadError(
                "Failed to download the generated video file. "
                f"Server response: {response.text}"
            )
        mime_type = response.headers.get("content-type", "video/mp4").split(";")[0]
        return MediaBlob(content=response.content, mime_type=mime_type.strip())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def with_api_key(uri: str, api_key: str) -> str:
    """Append the API key as a query parameter, keeping any existing query."""
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}key={quote(api_key, safe='')}"
