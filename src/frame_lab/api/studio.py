"""Video, image and prompt generation endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from PIL import UnidentifiedImageError

from frame_lab.api.auth import require_session
from frame_lab.api.models import (
    AspectRatioChangeRequest,
    ImageEditRequest,
    ImageGenerationRequest,
    ImagePayloadModel,
    VideoGenerationRequest,
    VideoGenerationResponse,
    VideoPromptFromImageRequest,
    VideoPromptRequest,
    VideoPromptResponse,
)
from frame_lab.domain.media import VideoRequest
from frame_lab.services.images import create_aspect_ratio_canvas, describe_aspect_ratio

if TYPE_CHECKING:
    from frame_lab.containers import AppContainer

router = APIRouter(tags=["studio"], dependencies=[Depends(require_session)])


@router.post("/videos")
async def generate_video(
    body: VideoGenerationRequest, request: Request
) -> VideoGenerationResponse:
    """Generate a video and return its local URL."""
    container: AppContainer = request.app.state.container
    video_request = VideoRequest(
        prompt=body.prompt,
        model=body.model or container.settings.default_video_model,
        image=body.image.to_payload() if body.image else None,
    )
    url = await container.generation_service.generate_video(
        container.api_key_service.api_key,
        video_request,
        aspect_ratio=body.aspect_ratio,
        enable_sound=body.enable_sound,
        resolution=body.resolution,
        character_voice=body.character_voice,
        visual_style=body.visual_style,
    )
    return VideoGenerationResponse(url=url)


@router.get("/media/{token}")
async def get_media(token: str, request: Request) -> Response:
    """Serve downloaded media by its local token."""
    container: AppContainer = request.app.state.container
    blob = container.media_store.get(token)
    if blob is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=blob.content, media_type=blob.mime_type)


@router.delete("/media/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_media(token: str, request: Request) -> None:
    """Release downloaded media."""
    container: AppContainer = request.app.state.container
    container.media_store.revoke(token)


@router.post("/images/edit")
async def edit_image(body: ImageEditRequest, request: Request) -> ImagePayloadModel:
    """Edit an image with a text instruction."""
    container: AppContainer = request.app.state.container
    result = await container.generation_service.edit_image(
        container.api_key_service.api_key, body.image.to_payload(), body.prompt
    )
    return ImagePayloadModel.from_payload(result)


@router.post("/images/generate")
async def generate_image(
    body: ImageGenerationRequest, request: Request
) -> ImagePayloadModel:
    """Generate an image from text."""
    container: AppContainer = request.app.state.container
    result = await container.generation_service.generate_image(
        container.api_key_service.api_key, body.prompt, body.aspect_ratio
    )
    return ImagePayloadModel.from_payload(result)


@router.post("/images/aspect-ratio")
async def change_aspect_ratio(
    body: AspectRatioChangeRequest, request: Request
) -> ImagePayloadModel:
    """Expand an image onto a canvas of the requested aspect ratio."""
    container: AppContainer = request.app.state.container
    result = await container.generation_service.change_image_aspect_ratio(
        container.api_key_service.api_key,
        body.image.to_payload(),
        create_aspect_ratio_canvas(body.aspect_ratio),
    )
    return ImagePayloadModel.from_payload(result)


@router.post("/prompts/video")
async def generate_video_prompt(
    body: VideoPromptRequest, request: Request
) -> VideoPromptResponse:
    """Expand an idea into a JSON scene list."""
    container: AppContainer = request.app.state.container
    prompt = await container.generation_service.generate_video_prompt(
        container.api_key_service.api_key, body.description
    )
    return VideoPromptResponse(prompt=prompt)


@router.post("/prompts/video-from-image")
async def generate_video_prompt_from_image(
    body: VideoPromptFromImageRequest, request: Request
) -> VideoPromptResponse:
    """Describe an image as a JSON scene list that animates it."""
    container: AppContainer = request.app.state.container
    image = body.image.to_payload()
    try:
        aspect_ratio = describe_aspect_ratio(image)
    except UnidentifiedImageError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Unsupported image file.",
        ) from exc
    prompt = await container.generation_service.generate_video_prompt_from_image(
        container.api_key_service.api_key, image, aspect_ratio
    )
    return VideoPromptResponse(prompt=prompt)
