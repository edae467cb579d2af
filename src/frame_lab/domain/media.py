"""Domain models for generated media and generation jobs."""

import base64
from dataclasses import dataclass
from typing import Literal

VideoModel = Literal[
    "veo-3.0-generate-preview",
    "veo-3.0-generate-001",
    "veo-3.0-fast-generate-001",
    "veo-2.0-generate-001",
]
AspectRatio = Literal["16:9", "9:16"]
ImageAspectRatio = Literal["16:9", "9:16", "1:1"]
Resolution = Literal["1080p", "720p"]
VisualStyle = Literal[
    "Cinematic", "Realistic", "Anime", "Pixar3D", "Cyberpunk", "Retro 80's"
]
CharacterVoice = Literal["none", "english", "bahasa-indonesia"]


@dataclass(frozen=True)
class ImagePayload:
    """Base64-encoded image bytes with their MIME type."""

    data: str
    mime_type: str

    @classmethod
    def from_bytes(cls, content: bytes, mime_type: str) -> "ImagePayload":
        return cls(data=base64.b64encode(content).decode("utf-8"), mime_type=mime_type)

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


@dataclass(frozen=True)
class VideoRequest:
    """Prompt, optional starting image and model for a video job."""

    prompt: str | list[object] | dict[str, object]
    model: str
    image: ImagePayload | None = None


@dataclass(frozen=True)
class VideoReady:
    """Job finished with a downloadable result."""

    uri: str


@dataclass(frozen=True)
class VideoEmpty:
    """Job finished without error but produced no video."""


@dataclass(frozen=True)
class VideoFailed:
    """Job finished with a provider error."""

    message: str | None


VideoOutcome = VideoReady | VideoEmpty | VideoFailed


@dataclass(frozen=True)
class VideoJob:
    """Remote long-running video generation operation.

    ``handle`` is the provider's operation object, passed back when polling.
    ``outcome`` stays ``None`` until the provider reports the job done.
    """

    handle: object
    outcome: VideoOutcome | None = None

    @property
    def done(self) -> bool:
        return self.outcome is not None


@dataclass(frozen=True)
class MediaBlob:
    """Locally held media content served under a local URL."""

    content: bytes
    mime_type: str
