"""Google Gen AI client for Veo, Imagen and Gemini models."""

from dataclasses import dataclass

from google import genai
from google.genai import types

from frame_lab.domain.media import (
    ImagePayload,
    VideoEmpty,
    VideoFailed,
    VideoJob,
    VideoReady,
)
from frame_lab.services.generation import ContentPart, GenerativeClient

_IMAGE_AND_TEXT = ["IMAGE", "TEXT"]


@dataclass
class GeminiGenerativeClient(GenerativeClient):
    """Generative client backed by the google-genai async API."""

    client: genai.Client

    @classmethod
    def create(cls, api_key: str) -> "GeminiGenerativeClient":
        """Create a client bound to an API key."""
        return cls(client=genai.Client(api_key=api_key))

    async def list_models(self) -> None:
        """List models as a cheap authenticated call."""
        await self.client.aio.models.list()

    async def submit_video(
        self, *, model: str, prompt: str, image: ImagePayload | None
    ) -> VideoJob:
        """Submit a Veo generation job for a single video."""
        operation = await self.client.aio.models.generate_videos(
            model=model,
            prompt=prompt,
            image=(
                types.Image(image_bytes=image.to_bytes(), mime_type=image.mime_type)
                if image
                else None
            ),
            config=types.GenerateVideosConfig(number_of_videos=1),
        )
        return _to_video_job(operation)

    async def refresh_video(self, job: VideoJob) -> VideoJob:
        """Fetch the latest state of a Veo operation."""
        operation = await self.client.aio.operations.get(operation=job.handle)
        return _to_video_job(operation)

    async def generate_content(
        self, *, model: str, parts: list[ContentPart]
    ) -> list[ContentPart]:
        """Call an image+text model and return its response parts."""
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=_to_parts(parts),
            config=types.GenerateContentConfig(response_modalities=_IMAGE_AND_TEXT),
        )
        return _response_parts(response)

    async def generate_images(
        self, *, model: str, prompt: str, aspect_ratio: str
    ) -> list[ImagePayload]:
        """Generate one PNG image with Imagen."""
        response = await self.client.aio.models.generate_images(
            model=model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type="image/png",
                aspect_ratio=aspect_ratio,
            ),
        )
        images: list[ImagePayload] = []
        for generated in response.generated_images or []:
            if generated.image and generated.image.image_bytes:
                images.append(
                    ImagePayload.from_bytes(generated.image.image_bytes, "image/png")
                )
        return images

    async def generate_text(
        self,
        *,
        model: str,
        parts: list[ContentPart],
        system_instruction: str,
        response_mime_type: str,
    ) -> str:
        """Return the text output of a Gemini call."""
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=_to_parts(parts),
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type=response_mime_type,
            ),
        )
        return response.text or ""


def _to_parts(parts: list[ContentPart]) -> list[types.Part]:
    converted: list[types.Part] = []
    for part in parts:
        if isinstance(part, ImagePayload):
            converted.append(
                types.Part.from_bytes(data=part.to_bytes(), mime_type=part.mime_type)
            )
        else:
            converted.append(types.Part.from_text(text=part))
    return converted


def _response_parts(response: types.GenerateContentResponse) -> list[ContentPart]:
    """Flatten the first candidate into image payloads and text."""
    if not response.candidates:
        return []
    content = response.candidates[0].content
    if content is None or not content.parts:
        return []
    parts: list[ContentPart] = []
    for part in content.parts:
        if part.inline_data and part.inline_data.data:
            parts.append(
                ImagePayload.from_bytes(
                    part.inline_data.data,
                    part.inline_data.mime_type or "image/png",
                )
            )
        elif part.text:
            parts.append(part.text)
    return parts


def _to_video_job(operation: types.GenerateVideosOperation) -> VideoJob:
    """Translate a Veo operation into a job with an explicit outcome."""
    if not operation.done:
        return VideoJob(handle=operation)
    if operation.error:
        message = operation.error.get("message")
        return VideoJob(
            handle=operation,
            outcome=VideoFailed(message=str(message) if message else None),
        )
    videos = operation.response.generated_videos if operation.response else None
    video = videos[0].video if videos else None
    if video is None or not video.uri:
        return VideoJob(handle=operation, outcome=VideoEmpty())
    return VideoJob(handle=operation, outcome=VideoReady(uri=video.uri))
