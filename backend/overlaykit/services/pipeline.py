import io
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from overlaykit.core.config import get_settings
from overlaykit.core.errors import DecodeError, SizeLimitExceeded
from overlaykit.schemas.overlay import Canvas, TextOverlay, Variant
from overlaykit.services.compositor import ImageLayer, build_overlay_layer, compose_static, encode_static
from overlaykit.services.fonts import FontHandle, font_cache
from overlaykit.services.gif_compositor import compose_frames, decode_gif, encode_gif

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    content: bytes
    content_type: str
    filename: Optional[str] = None


@contextmanager
def open_image(data: bytes) -> Iterator[Image.Image]:
    """Open without decoding pixels; only the header is read here."""
    try:
        im = Image.open(io.BytesIO(data))
    except Image.DecompressionBombError as e:
        raise SizeLimitExceeded(str(e))
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"Unsupported or corrupt image: {e}")
    with im:
        yield im


def _check_bytes(data: bytes, limit: int) -> None:
    if len(data) > limit:
        raise SizeLimitExceeded(f"Payload of {len(data)} bytes exceeds {limit} bytes")


def _check_dimensions(width: int, height: int) -> None:
    settings = get_settings()
    if width > settings.MAX_CANVAS_WIDTH or height > settings.MAX_CANVAS_HEIGHT:
        raise SizeLimitExceeded(
            f"Dimensions {width}x{height} exceed "
            f"{settings.MAX_CANVAS_WIDTH}x{settings.MAX_CANVAS_HEIGHT}"
        )


def _is_animated(im: Image.Image) -> bool:
    return im.format == "GIF" and getattr(im, "n_frames", 1) > 1


def _filename(ext: str, variant: Variant, download: bool) -> Optional[str]:
    if not download:
        return None
    suffix = "" if variant == Variant.default else f"-{variant.value}"
    return f"overlay-{int(time.time() * 1000)}{suffix}.{ext}"


def decode_image(data: bytes) -> Image.Image:
    """Decode an overlay image (first frame for animations) into RGBA pixels."""
    _check_bytes(data, get_settings().MAX_IMAGE_BYTES)
    with open_image(data) as im:
        _check_dimensions(*im.size)
        try:
            return im.convert("RGBA")
        except (OSError, ValueError) as e:
            raise DecodeError(f"Failed to decode image: {e}")


def probe_dimensions(data: bytes) -> Dict[str, object]:
    with open_image(data) as im:
        kind = (im.format or "unknown").lower()
        return {"width": im.width, "height": im.height, "type": "jpg" if kind == "jpeg" else kind}


def _render_static(
    im: Image.Image,
    canvas: Canvas,
    text_overlays: Sequence[TextOverlay],
    image_layers: Sequence[ImageLayer],
    variant: Variant,
    download: bool,
    font: FontHandle,
) -> RenderResult:
    sized = canvas.sized(im.size)
    _check_dimensions(*im.size)
    _check_dimensions(sized.width, sized.height)
    try:
        im.load()
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to decode image: {e}")

    composed = compose_static(im, sized, image_layers, text_overlays, font, variant)
    content, content_type, ext = encode_static(composed, get_settings().JPEG_QUALITY)
    logger.info("Rendered %dx%d %s, %d bytes", sized.width, sized.height, content_type, len(content))
    return RenderResult(content, content_type, _filename(ext, variant, download))


def _render_gif(
    im: Image.Image,
    canvas: Canvas,
    text_overlays: Sequence[TextOverlay],
    image_layers: Sequence[ImageLayer],
    variant: Variant,
    download: bool,
    font: FontHandle,
) -> RenderResult:
    settings = get_settings()
    width, height = im.size
    frame_count = getattr(im, "n_frames", 1)
    _check_dimensions(width, height)
    if frame_count > settings.MAX_GIF_FRAMES:
        raise SizeLimitExceeded(f"GIF has {frame_count} frames, limit is {settings.MAX_GIF_FRAMES}")
    if width * height * frame_count > settings.MAX_GIF_PIXELS:
        raise SizeLimitExceeded(f"GIF of {frame_count} frames at {width}x{height} is too large")

    logger.info("Found %d frames in GIF, dimensions %dx%d", frame_count, width, height)
    frames = decode_gif(im)
    layer = build_overlay_layer(im.size, image_layers, text_overlays, font, variant)
    content = encode_gif(compose_frames(frames, im.size, layer, canvas.brightness))
    logger.info("GIF encoding complete, output size: %d", len(content))
    return RenderResult(content, "image/gif", _filename("gif", variant, download))


def render(
    background: bytes,
    canvas: Canvas,
    text_overlays: Sequence[TextOverlay] = (),
    image_layers: Sequence[ImageLayer] = (),
    variant: Variant = Variant.default,
    download: bool = False,
    font: Optional[FontHandle] = None,
) -> RenderResult:
    """
    Render overlays onto `background` (encoded bytes).

    Animated GIFs are re-encoded frame by frame at their logical size; any
    other image goes through the static path. All size bounds are checked
    before pixels are decoded.
    """
    settings = get_settings()
    _check_bytes(background, max(settings.MAX_IMAGE_BYTES, settings.MAX_GIF_BYTES))
    font = font or font_cache.get()

    with open_image(background) as im:
        if _is_animated(im):
            _check_bytes(background, settings.MAX_GIF_BYTES)
            return _render_gif(im, canvas, text_overlays, image_layers, variant, download, font)
        _check_bytes(background, settings.MAX_IMAGE_BYTES)
        return _render_static(im, canvas, text_overlays, image_layers, variant, download, font)


def render_animated(
    background: bytes,
    canvas: Canvas,
    text_overlays: Sequence[TextOverlay] = (),
    image_layers: Sequence[ImageLayer] = (),
    variant: Variant = Variant.default,
    download: bool = False,
    font: Optional[FontHandle] = None,
) -> RenderResult:
    """GIF-only sibling of `render`; single-frame GIFs come back as one-frame GIFs."""
    settings = get_settings()
    _check_bytes(background, settings.MAX_GIF_BYTES)
    font = font or font_cache.get()

    with open_image(background) as im:
        if im.format != "GIF":
            raise DecodeError(f"Expected a GIF, got {im.format or 'unknown format'}")
        return _render_gif(im, canvas, text_overlays, image_layers, variant, download, font)
