"""Image helpers for uploads and aspect-ratio canvases."""

from io import BytesIO

from PIL import Image

from frame_lab.domain.media import ImagePayload

PREVIEW_WIDTH = 512


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def parse_aspect_ratio(aspect_ratio: str) -> tuple[float, float]:
    """Parse a ``W:H`` ratio into positive numbers."""
    width_part, _, height_part = aspect_ratio.partition(":")
    try:
        width_ratio = float(width_part)
        height_ratio = float(height_part)
    except ValueError:
        width_ratio = height_ratio = 0.0
    if width_ratio <= 0 or height_ratio <= 0:
        raise ValueError('Invalid aspect ratio format. Expected format like "16:9".')
    return width_ratio, height_ratio


def create_aspect_ratio_canvas(aspect_ratio: str) -> ImagePayload:
    """Return a transparent PNG whose shape defines a target aspect ratio."""
    width_ratio, height_ratio = parse_aspect_ratio(aspect_ratio)
    height = max(1, int(PREVIEW_WIDTH * height_ratio / width_ratio))
    canvas = Image.new("RGBA", (PREVIEW_WIDTH, height), (0, 0, 0, 0))
    buffer = BytesIO()
    canvas.save(buffer, format="PNG")
    return ImagePayload.from_bytes(buffer.getvalue(), "image/png")


def describe_aspect_ratio(image: ImagePayload) -> str:
    """Describe an image's pixel ratio, e.g. ``1024:576 (approx 1.78:1)``."""
    with Image.open(BytesIO(image.to_bytes())) as opened:
        width, height = opened.size
    return f"{width}:{height} (approx {width / height:.2f}:1)"
