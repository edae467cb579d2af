"""Shared test fixtures."""

import base64
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from io import BytesIO
from uuid import uuid4

import pytest
from PIL import Image

from frame_lab.config import Settings
from frame_lab.containers import AppContainer
from frame_lab.domain.accounts import (
    AuthEvent,
    AuthEventKind,
    AuthSession,
    AuthUser,
    Profile,
)
from frame_lab.domain.errors import AuthenticationError, SessionStartError
from frame_lab.domain.media import (
    ImagePayload,
    MediaBlob,
    VideoJob,
    VideoOutcome,
    VideoReady,
)
from frame_lab.services.api_keys import ApiKeyEndpointClient, ApiKeyService
from frame_lab.services.auth import AuthService
from frame_lab.services.generation import (
    ContentPart,
    GenerationService,
    GenerativeClient,
    VideoFetcher,
)
from frame_lab.services.local_store import LocalStore
from frame_lab.services.media import InMemoryMediaStore
from frame_lab.services.retry import RetryPolicy
from frame_lab.services.sessions import (
    AuthGateway,
    ProfileRepository,
    SessionGuard,
    SessionMonitor,
)

TEST_EMAIL = "maker@example.com"
TEST_PASSWORD = "secret-pass"
TEST_IMAGE = ImagePayload(data="aW1hZ2UtYnl0ZXM=", mime_type="image/png")


def png_payload(width: int, height: int) -> ImagePayload:
    """Build a real PNG payload of the given size."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), (10, 20, 30)).save(buffer, format="PNG")
    return ImagePayload(
        data=base64.b64encode(buffer.getvalue()).decode("utf-8"),
        mime_type="image/png",
    )


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class InMemoryLocalStore(LocalStore):
    """In-memory local store for tests."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class FakeAuthBackend:
    """Credential table shared by every simulated device."""

    accounts: dict[str, tuple[str, str]] = field(default_factory=dict)
    registered: list[str] = field(default_factory=list)

    def add_account(self, email: str, password: str) -> str:
        user_id = str(uuid4())
        self.accounts[email] = (password, user_id)
        return user_id


@dataclass
class FakeAuthGateway(AuthGateway):
    """Per-device auth gateway over a shared backend."""

    backend: FakeAuthBackend
    current: AuthSession | None = None
    sign_out_count: int = 0
    listeners: list[Callable[[AuthEvent], None]] = field(default_factory=list)

    def sign_in(self, email: str, password: str) -> AuthSession:
        account = self.backend.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthenticationError("Invalid login credentials")
        self.current = AuthSession(
            access_token=f"access-{uuid4()}",
            user=AuthUser(id=account[1], email=email),
        )
        return self.current

    def sign_up(self, email: str, password: str) -> None:
        if email in self.backend.accounts:
            raise AuthenticationError("User already registered")
        self.backend.add_account(email, password)
        self.backend.registered.append(email)

    def sign_out(self) -> None:
        self.sign_out_count += 1
        self.current = None
        self.emit(AuthEvent(kind=AuthEventKind.SIGNED_OUT))

    def get_session(self) -> AuthSession | None:
        return self.current

    def get_user(self) -> AuthUser | None:
        return self.current.user if self.current else None

    def subscribe(
        self, listener: Callable[[AuthEvent], None]
    ) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, event: AuthEvent) -> None:
        for listener in list(self.listeners):
            listener(event)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile table for tests."""

    profiles: dict[str, Profile] = field(default_factory=dict)
    fail_on_set: bool = False
    read_error: Exception | None = None
    clear_calls: list[tuple[str, str]] = field(default_factory=list)

    def add_profile(self, user_id: str, is_active: bool = True) -> None:
        self.profiles[user_id] = Profile(
            id=user_id, is_active=is_active, active_session_id=None
        )

    def get_profile(self, user_id: str) -> Profile | None:
        if self.read_error is not None:
            raise self.read_error
        return self.profiles.get(user_id)

    def set_active_session(self, user_id: str, session_id: str) -> None:
        if self.fail_on_set:
            raise SessionStartError("Failed to start a secure session.")
        self.profiles[user_id] = replace(
            self.profiles[user_id], active_session_id=session_id
        )

    def clear_active_session(self, user_id: str, session_id: str) -> None:
        self.clear_calls.append((user_id, session_id))
        profile = self.profiles.get(user_id)
        if profile is not None and profile.active_session_id == session_id:
            self.profiles[user_id] = replace(profile, active_session_id=None)


@dataclass
class FakeGenerativeClient(GenerativeClient):
    """Fake generative provider with scripted responses."""

    list_error: Exception | None = None
    submit_errors: list[Exception] = field(default_factory=list)
    video_outcomes: list[VideoOutcome | None] = field(
        default_factory=lambda: [VideoReady(uri="https://files.example/video.mp4")]
    )
    content_parts: list[ContentPart] = field(
        default_factory=lambda: ["Here is your image.", TEST_IMAGE]
    )
    images: list[ImagePayload] = field(default_factory=lambda: [TEST_IMAGE])
    text: str = '\n  [{"prompt": "A sunrise over the bay"}]  \n'
    submitted: list[dict[str, object]] = field(default_factory=list)
    content_calls: list[dict[str, object]] = field(default_factory=list)
    image_calls: list[dict[str, object]] = field(default_factory=list)
    text_calls: list[dict[str, object]] = field(default_factory=list)
    list_count: int = 0
    refresh_count: int = 0

    async def list_models(self) -> None:
        self.list_count += 1
        if self.list_error is not None:
            raise self.list_error

    async def submit_video(
        self, *, model: str, prompt: str, image: ImagePayload | None
    ) -> VideoJob:
        if self.submit_errors:
            raise self.submit_errors.pop(0)
        self.submitted.append({"model": model, "prompt": prompt, "image": image})
        return VideoJob(handle="operations/video-1")

    async def refresh_video(self, job: VideoJob) -> VideoJob:
        self.refresh_count += 1
        if len(self.video_outcomes) > 1:
            outcome = self.video_outcomes.pop(0)
        else:
            outcome = self.video_outcomes[0]
        return VideoJob(handle=job.handle, outcome=outcome)

    async def generate_content(
        self, *, model: str, parts: list[ContentPart]
    ) -> list[ContentPart]:
        self.content_calls.append({"model": model, "parts": parts})
        return self.content_parts

    async def generate_images(
        self, *, model: str, prompt: str, aspect_ratio: str
    ) -> list[ImagePayload]:
        self.image_calls.append(
            {"model": model, "prompt": prompt, "aspect_ratio": aspect_ratio}
        )
        return self.images

    async def generate_text(
        self,
        *,
        model: str,
        parts: list[ContentPart],
        system_instruction: str,
        response_mime_type: str,
    ) -> str:
        self.text_calls.append(
            {
                "model": model,
                "parts": parts,
                "system_instruction": system_instruction,
                "response_mime_type": response_mime_type,
            }
        )
        return self.text


@dataclass
class FakeVideoFetcher(VideoFetcher):
    """Fake downloader returning static bytes."""

    content: bytes = b"fake-video-bytes"
    downloads: list[tuple[str, str]] = field(default_factory=list)

    async def download(self, uri: str, api_key: str) -> MediaBlob:
        self.downloads.append((uri, api_key))
        return MediaBlob(content=self.content, mime_type="video/mp4")


@dataclass
class FakeApiKeyEndpointClient(ApiKeyEndpointClient):
    """Fake key endpoint."""

    api_key: str | None = "endpoint-key"
    error: Exception | None = None

    async def fetch_api_key(self) -> str | None:
        if self.error is not None:
            raise self.error
        return self.api_key


def make_generation_service(
    client: FakeGenerativeClient,
    fetcher: FakeVideoFetcher | None = None,
    sleep: RecordingSleep | None = None,
    media_store: InMemoryMediaStore | None = None,
) -> GenerationService:
    """Build a generation service whose sleeps return immediately."""
    recording_sleep = sleep or RecordingSleep()
    return GenerationService(
        client_factory=lambda api_key: client,
        video_fetcher=fetcher or FakeVideoFetcher(),
        media_store=media_store or InMemoryMediaStore(),
        retry_policy=RetryPolicy(sleep=recording_sleep),
        sleep=recording_sleep,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoiYW5vbiJ9.c2lnbmF0dXJl"
        ),
    )


@pytest.fixture
def auth_backend() -> FakeAuthBackend:
    return FakeAuthBackend()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def account_id(
    auth_backend: FakeAuthBackend, profile_repository: InMemoryProfileRepository
) -> str:
    user_id = auth_backend.add_account(TEST_EMAIL, TEST_PASSWORD)
    profile_repository.add_profile(user_id)
    return user_id


@pytest.fixture
def auth_gateway(auth_backend: FakeAuthBackend) -> FakeAuthGateway:
    return FakeAuthGateway(backend=auth_backend)


@pytest.fixture
def local_store() -> InMemoryLocalStore:
    return InMemoryLocalStore()


@pytest.fixture
def media_store() -> InMemoryMediaStore:
    return InMemoryMediaStore()


@pytest.fixture
def session_guard(
    auth_gateway: FakeAuthGateway,
    profile_repository: InMemoryProfileRepository,
    local_store: InMemoryLocalStore,
    media_store: InMemoryMediaStore,
) -> SessionGuard:
    return SessionGuard(
        auth_gateway=auth_gateway,
        profile_repository=profile_repository,
        local_store=local_store,
        media_store=media_store,
    )


@pytest.fixture
def generative_client() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def container(
    settings: Settings,
    session_guard: SessionGuard,
    auth_gateway: FakeAuthGateway,
    local_store: InMemoryLocalStore,
    generative_client: FakeGenerativeClient,
    media_store: InMemoryMediaStore,
) -> AppContainer:
    generation_service = make_generation_service(
        generative_client, media_store=media_store
    )
    api_key_service = ApiKeyService(
        local_store=local_store,
        generation_service=generation_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_guard=session_guard,
        session_monitor=SessionMonitor(guard=session_guard, interval_seconds=3600),
        auth_service=AuthService(guard=session_guard, auth_gateway=auth_gateway),
        generation_service=generation_service,
        api_key_service=api_key_service,
        media_store=media_store,
        close_resources=close_resources,
    )
