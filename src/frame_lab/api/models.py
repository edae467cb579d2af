"""Pydantic models for the HTTP surface."""

import base64
import binascii
import re

from pydantic import BaseModel, field_validator

from frame_lab.domain.media import (
    AspectRatio,
    CharacterVoice,
    ImageAspectRatio,
    ImagePayload,
    Resolution,
    VideoModel,
    VisualStyle,
)
from frame_lab.services.images import detect_mime_type

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class CredentialsRequest(BaseModel):
    """Login or registration form."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Email is required.")
        if not _EMAIL_PATTERN.match(cleaned):
            raise ValueError("Please enter a valid email address.")
        return cleaned

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required.")
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
            )
        return value


class ImagePayloadModel(BaseModel):
    """Base64 image; the MIME type is sniffed when omitted."""

    data: str
    mime_type: str | None = None

    @field_validator("data")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Image data must be base64 encoded.") from exc
        return value

    def to_payload(self) -> ImagePayload:
        mime_type = self.mime_type or detect_mime_type(base64.b64decode(self.data))
        return ImagePayload(data=self.data, mime_type=mime_type)

    @classmethod
    def from_payload(cls, payload: ImagePayload) -> "ImagePayloadModel":
        return cls(data=payload.data, mime_type=payload.mime_type)


class SessionStatus(BaseModel):
    """Authentication state of this client."""

    authenticated: bool
    email: str | None = None
    loading: bool = False


class MessageResponse(BaseModel):
    """Plain message for the user."""

    message: str


class ApiKeyRequest(BaseModel):
    """API key entered in settings."""

    api_key: str


class ApiKeyStatus(BaseModel):
    """Whether an API key is configured."""

    is_set: bool


class ApiKeyValidation(BaseModel):
    """Result of testing an API key."""

    valid: bool


class VideoGenerationRequest(BaseModel):
    """Video generation form."""

    prompt: str | list[object] | dict[str, object]
    image: ImagePayloadModel | None = None
    model: VideoModel | None = None
    aspect_ratio: AspectRatio = "16:9"
    enable_sound: bool = False
    resolution: Resolution = "720p"
    character_voice: CharacterVoice = "none"
    visual_style: VisualStyle = "Cinematic"


class VideoGenerationResponse(BaseModel):
    """Local URL of a finished video."""

    url: str


class ImageEditRequest(BaseModel):
    """Image plus an edit instruction."""

    image: ImagePayloadModel
    prompt: str


class ImageGenerationRequest(BaseModel):
    """Text-to-image request."""

    prompt: str
    aspect_ratio: ImageAspectRatio = "1:1"


class AspectRatioChangeRequest(BaseModel):
    """Image to expand onto a new aspect ratio."""

    image: ImagePayloadModel
    aspect_ratio: ImageAspectRatio


class VideoPromptRequest(BaseModel):
    """Short idea to expand into a scene list."""

    description: str


class VideoPromptFromImageRequest(BaseModel):
    """Image to describe as a scene list."""

    image: ImagePayloadModel


class VideoPromptResponse(BaseModel):
    """Raw JSON scene list produced by the model."""

    prompt: str
