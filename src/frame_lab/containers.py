"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from frame_lab.adapters.api_key_endpoint_client import HttpxApiKeyEndpointClient
from frame_lab.adapters.file_local_store import JsonFileLocalStore
from frame_lab.adapters.gemini_client import GeminiGenerativeClient
from frame_lab.adapters.supabase_auth_gateway import SupabaseAuthGateway
from frame_lab.adapters.supabase_profile_repository import SupabaseProfileRepository
from frame_lab.adapters.video_download_client import HttpxVideoDownloadClient
from frame_lab.config import Settings
from frame_lab.services.api_keys import ApiKeyService
from frame_lab.services.auth import AuthService
from frame_lab.services.generation import GenerationService
from frame_lab.services.media import InMemoryMediaStore, MediaStore
from frame_lab.services.retry import RetryPolicy
from frame_lab.services.sessions import SessionGuard, SessionMonitor

LOCAL_STORE_FILENAME = "local_storage.json"


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_guard: SessionGuard
    session_monitor: SessionMonitor
    auth_service: AuthService
    generation_service: GenerationService
    api_key_service: ApiKeyService
    media_store: MediaStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    auth_gateway = SupabaseAuthGateway(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    local_store = JsonFileLocalStore(
        Path(resolved_settings.data_dir) / LOCAL_STORE_FILENAME
    )
    media_store = InMemoryMediaStore()
    session_guard = SessionGuard(
        auth_gateway=auth_gateway,
        profile_repository=profile_repository,
        local_store=local_store,
        media_store=media_store,
    )
    session_monitor = SessionMonitor(
        guard=session_guard,
        interval_seconds=resolved_settings.session_check_interval_seconds,
    )
    auth_service = AuthService(guard=session_guard, auth_gateway=auth_gateway)
    video_download_client = HttpxVideoDownloadClient.create()
    generation_service = GenerationService(
        client_factory=GeminiGenerativeClient.create,
        video_fetcher=video_download_client,
        media_store=media_store,
        retry_policy=RetryPolicy(
            max_retries=resolved_settings.retry_max_attempts,
            initial_delay=resolved_settings.retry_initial_delay_seconds,
        ),
        poll_interval_seconds=resolved_settings.video_poll_interval_seconds,
        image_edit_model=resolved_settings.image_edit_model,
        image_generation_model=resolved_settings.image_generation_model,
        prompt_model=resolved_settings.prompt_model,
    )
    endpoint_client = (
        HttpxApiKeyEndpointClient.create(resolved_settings.api_key_endpoint)
        if resolved_settings.api_key_endpoint
        else None
    )
    api_key_service = ApiKeyService(
        local_store=local_store,
        generation_service=generation_service,
        configured_key=resolved_settings.gemini_api_key,
        endpoint_client=endpoint_client,
    )

    async def close_resources() -> None:
        await video_download_client.close()
        if endpoint_client is not None:
            await endpoint_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_guard=session_guard,
        session_monitor=session_monitor,
        auth_service=auth_service,
        generation_service=generation_service,
        api_key_service=api_key_service,
        media_store=media_store,
        close_resources=close_resources,
    )
