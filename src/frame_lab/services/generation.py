"""Video, image and prompt generation through the generative provider."""

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Protocol

from frame_lab.domain.errors import (
    VIDEO_FAILED_MESSAGE,
    EmptyVideoResultError,
    MissingApiKeyError,
    NoImageGeneratedError,
    VideoGenerationError,
)
from frame_lab.domain.media import (
    ImagePayload,
    MediaBlob,
    VideoFailed,
    VideoJob,
    VideoReady,
    VideoRequest,
)
from frame_lab.services.media import MediaStore
from frame_lab.services.retry import RetryPolicy, Sleep

logger = logging.getLogger(__name__)

ContentPart = ImagePayload | str

ASPECT_RATIO_INSTRUCTION = (
    "Expand the first image to fill the canvas of the second image (which defines "
    "the new aspect ratio). Maintain the original style and create a coherent "
    "extension of the scene."
)

TEXT_PROMPT_SYSTEM_INSTRUCTION = """You are an expert at creating detailed, structured JSON prompts for a powerful text-to-video generation model called VEO.
Your task is to take a user's simple text description and expand it into a rich, multi-scene JSON prompt.
The JSON structure should be an array of objects, where each object represents a scene.
Each scene object must have a 'prompt' key with a detailed description of the visual action for that scene.
A scene can also optionally include 'duration_seconds' (e.g., 2, 4, 8) and 'motion_scale' (0-10, where higher means more camera motion).
Generate a creative and visually interesting sequence of 2-4 scenes based on the user's input. Ensure the scenes flow logically.
Output ONLY the raw JSON string, with no markdown or other text."""

IMAGE_PROMPT_SYSTEM_INSTRUCTION = """You are an expert at creating detailed, structured JSON prompts for a powerful image-to-video generation model called VEO.
Your task is to analyze an input image and generate a rich, multi-scene JSON prompt that animates the image or creates a video starting from it.
The JSON structure should be an array of objects, where each object represents a scene.
The first scene should describe the input image and add a subtle motion to it. Subsequent scenes should continue the action logically.
Each scene object must have a 'prompt' key with a detailed description of the visual action.
A scene can also optionally include 'duration_seconds' (e.g., 2, 4, 8) and 'motion_scale' (0-10, where higher means more camera motion).
Generate a creative and visually interesting sequence of 2-3 scenes based on the image.
Output ONLY the raw JSON string, with no markdown or other text."""


class GenerativeClient(Protocol):
    """Interface for the generative provider, bound to one API key."""

    async def list_models(self) -> None:
        """Issue a cheap authenticated call."""

    async def submit_video(
        self, *, model: str, prompt: str, image: ImagePayload | None
    ) -> VideoJob:
        """Submit a video generation job."""

    async def refresh_video(self, job: VideoJob) -> VideoJob:
        """Return the latest state of a submitted job."""

    async def generate_content(
        self, *, model: str, parts: list[ContentPart]
    ) -> list[ContentPart]:
        """Send image and text parts to an image+text model; return response parts."""

    async def generate_images(
        self, *, model: str, prompt: str, aspect_ratio: str
    ) -> list[ImagePayload]:
        """Generate PNG images from a text prompt."""

    async def generate_text(
        self,
        *,
        model: str,
        parts: list[ContentPart],
        system_instruction: str,
        response_mime_type: str,
    ) -> str:
        """Return the model's text output for the given parts."""


class VideoFetcher(Protocol):
    """Interface for downloading generated video files."""

    async def download(self, uri: str, api_key: str) -> MediaBlob:
        """Download the file behind a result locator."""


ClientFactory = Callable[[str], GenerativeClient]


@dataclass
class GenerationService:
    """Builds provider requests, retries them and resolves their results."""

    client_factory: ClientFactory
    video_fetcher: VideoFetcher
    media_store: MediaStore
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    poll_interval_seconds: float = 10.0
    image_edit_model: str = "gemini-2.5-flash-image"
    image_generation_model: str = "imagen-4.0-generate-001"
    prompt_model: str = "gemini-2.5-flash"
    sleep: Sleep = asyncio.sleep

    async def validate_key(self, api_key: str) -> bool:
        """Return whether the key can make an authenticated call. Never raises."""
        if not api_key:
            return False
        try:
            client = self._client(api_key)
            await self.retry_policy.run(client.list_models)
        except Exception:
            logger.warning("API key validation failed", exc_info=True)
            return False
        return True

    async def generate_video(  # noqa: PLR0913
        self,
        api_key: str,
        request: VideoRequest,
        aspect_ratio: str,
        enable_sound: bool,
        resolution: str,
        character_voice: str,
        visual_style: str,
    ) -> str:
        """Run a video job to completion and return a local playable URL."""
        client = self._client(api_key)
        prompt = build_video_prompt(
            request.prompt,
            has_image=request.image is not None,
            aspect_ratio=aspect_ratio,
            enable_sound=enable_sound,
            resolution=resolution,
            character_voice=character_voice,
            visual_style=visual_style,
        )
        logger.info("Submitting video job with model %s", request.model)
        job = await self.retry_policy.run(
            partial(
                client.submit_video,
                model=request.model,
                prompt=prompt,
                image=request.image,
            )
        )
        while not job.done:
            await self.sleep(self.poll_interval_seconds)
            job = await self.retry_policy.run(partial(client.refresh_video, job))
            logger.info("Polling video generation status (done=%s)", job.done)

        outcome = job.outcome
        if isinstance(outcome, VideoFailed):
            logger.error("Video generation failed: %s", outcome.message)
            raise VideoGenerationError(outcome.message or VIDEO_FAILED_MESSAGE)
        if not isinstance(outcome, VideoReady):
            logger.error("Video generation finished without a download link")
            raise EmptyVideoResultError()

        blob = await self.video_fetcher.download(outcome.uri, api_key)
        return self.media_store.put(blob.content, blob.mime_type)

    async def edit_image(
        self, api_key: str, image: ImagePayload, prompt: str
    ) -> ImagePayload:
        """Apply a text instruction to an image."""
        client = self._client(api_key)
        parts = await self.retry_policy.run(
            partial(
                client.generate_content,
                model=self.image_edit_model,
                parts=[image, prompt],
            )
        )
        return _first_inline_image(parts)

    async def generate_image(
        self, api_key: str, prompt: str, aspect_ratio: str
    ) -> ImagePayload:
        """Generate a single image from text."""
        client = self._client(api_key)
        images = await self.retry_policy.run(
            partial(
                client.generate_images,
                model=self.image_generation_model,
                prompt=prompt,
                aspect_ratio=aspect_ratio,
            )
        )
        if not images or not images[0].data:
            raise NoImageGeneratedError()
        return images[0]

    async def change_image_aspect_ratio(
        self,
        api_key: str,
        main_image: ImagePayload,
        reference_image: ImagePayload,
    ) -> ImagePayload:
        """Outpaint ``main_image`` onto the canvas shape of ``reference_image``."""
        client = self._client(api_key)
        parts = await self.retry_policy.run(
            partial(
                client.generate_content,
                model=self.image_edit_model,
                parts=[main_image, reference_image, ASPECT_RATIO_INSTRUCTION],
            )
        )
        return _first_inline_image(parts)

    async def generate_video_prompt(self, api_key: str, description: str) -> str:
        """Expand a short description into raw multi-scene JSON text."""
        client = self._client(api_key)
        text = await self.retry_policy.run(
            partial(
                client.generate_text,
                model=self.prompt_model,
                parts=[
                    "Create a detailed JSON video prompt for the following idea: "
                    f'"{description}"'
                ],
                system_instruction=TEXT_PROMPT_SYSTEM_INSTRUCTION,
                response_mime_type="application/json",
            )
        )
        return text.strip()

    async def generate_video_prompt_from_image(
        self, api_key: str, image: ImagePayload, aspect_ratio: str
    ) -> str:
        """Describe an image as raw multi-scene JSON text that animates it."""
        client = self._client(api_key)
        text = await self.retry_policy.run(
            partial(
                client.generate_text,
                model=self.prompt_model,
                parts=[
                    image,
                    "Create a detailed JSON video prompt that animates this image. "
                    f"The aspect ratio is {aspect_ratio}.",
                ],
                system_instruction=IMAGE_PROMPT_SYSTEM_INSTRUCTION,
                response_mime_type="application/json",
            )
        )
        return text.strip()

    def _client(self, api_key: str) -> GenerativeClient:
        if not api_key:
            raise MissingApiKeyError()
        return self.client_factory(api_key)


def build_video_prompt(  # noqa: PLR0913
    prompt: str | list[object] | dict[str, object],
    *,
    has_image: bool,
    aspect_ratio: str,
    enable_sound: bool,
    resolution: str,
    character_voice: str,
    visual_style: str,
) -> str:
    """Compose the final provider prompt for a video job.

    Structured prompts are sent as JSON text without any added clauses.
    """
    if not isinstance(prompt, str):
        return json.dumps(prompt, ensure_ascii=False)

    text = f"Animate this image. {prompt}" if has_image else prompt
    if aspect_ratio == "9:16":
        text = (
            f"{text} The video must be a full-screen vertical video "
            "with a 9:16 aspect ratio."
        )
    else:
        text = f"{text} The video must be a widescreen video with a 16:9 aspect ratio."

    parts = [
        text,
        f"The visual style should be {visual_style}.",
        f"The video resolution should be {resolution}.",
    ]
    if enable_sound and character_voice != "none":
        parts.append(
            f"The video should include audio with a character voice in {character_voice}."
        )
    elif enable_sound:
        parts.append("The video should include ambient sound.")
    else:
        parts.append("The video should be silent.")
    return " ".join(parts)


def _first_inline_image(parts: list[ContentPart]) -> ImagePayload:
    """Return the first image part of a response."""
    for part in parts:
        if isinstance(part, ImagePayload):
            return part
    raise NoImageGeneratedError()
