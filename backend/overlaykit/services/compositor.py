import io
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw

from overlaykit.core.errors import EncodeError
from overlaykit.schemas.overlay import Canvas, ImageOverlay, TextOverlay, Variant
from overlaykit.services.coordinates import image_rect, text_geometry
from overlaykit.services.fonts import FontHandle
from overlaykit.services.layout import WRAP_WIDTH_FRACTION, DrawInstruction, layout_text
from overlaykit.services.markup import parse_markup
from overlaykit.services.transform import paste_rgba, transform_background

logger = logging.getLogger(__name__)


@dataclass
class ImageLayer:
    """An image overlay together with its already-decoded pixels."""

    overlay: ImageOverlay
    image: Image.Image


def adjust_brightness(image: Image.Image, percent: float) -> Image.Image:
    """Scale R, G and B by percent/100, clamped to 0..255. Alpha is untouched."""
    if percent == 100:
        return image
    ratio = percent / 100
    lut = [min(255, max(0, round(v * ratio))) for v in range(256)]
    r, g, b, a = image.convert("RGBA").split()
    return Image.merge("RGBA", (r.point(lut), g.point(lut), b.point(lut), a))


def text_instructions(
    overlay: TextOverlay,
    font: FontHandle,
    variant: Variant,
    canvas_size: Tuple[int, int],
) -> List[DrawInstruction]:
    if not overlay.text.strip():
        return []
    geometry = text_geometry(overlay, variant, canvas_size)
    # device variants wrap long lines at 80% of the canvas width
    max_width = canvas_size[0] * WRAP_WIDTH_FRACTION if variant != Variant.default else None
    return layout_text(
        parse_markup(overlay.text),
        geometry.x,
        geometry.y,
        geometry.font_size,
        font,
        all_caps=overlay.all_caps,
        max_width=max_width,
    )


def _draw_text(layer: Image.Image, overlay: TextOverlay, instructions: Sequence[DrawInstruction], font: FontHandle) -> None:
    mask = Image.new("L", layer.size, 0)
    draw = ImageDraw.Draw(mask)
    for ins in instructions:
        draw.text((ins.x, ins.y), ins.text, fill=255, font=font.font(ins.size_px), anchor="ls")

    rgba = ImageColor.getrgb(overlay.font_color)
    alpha = rgba[3] if len(rgba) == 4 else 255
    if alpha < 255:
        mask = mask.point(lambda v: v * alpha // 255)
    fill = Image.new("RGBA", layer.size, rgba[:3] + (255,))
    fill.putalpha(mask)
    layer.alpha_composite(fill)


def build_overlay_layer(
    size: Tuple[int, int],
    image_layers: Sequence[ImageLayer],
    text_overlays: Sequence[TextOverlay],
    font: FontHandle,
    variant: Variant = Variant.default,
) -> Image.Image:
    """
    Rasterize every overlay onto one transparent layer: image overlays first,
    then text overlays, each group in input order.
    """
    layer = Image.new("RGBA", size, (0, 0, 0, 0))

    for item in image_layers:
        rect = image_rect(item.overlay, variant, size)
        scaled = item.image.convert("RGBA").resize((rect.width, rect.height), Image.Resampling.LANCZOS)
        paste_rgba(layer, scaled, rect.left, rect.top)

    for overlay in text_overlays:
        instructions = text_instructions(overlay, font, variant, size)
        if instructions:
            _draw_text(layer, overlay, instructions, font)

    return layer


def compose_static(
    background: Image.Image,
    canvas: Canvas,
    image_layers: Sequence[ImageLayer],
    text_overlays: Sequence[TextOverlay],
    font: FontHandle,
    variant: Variant = Variant.default,
) -> Image.Image:
    canvas = canvas.sized(background.size)
    frame = transform_background(background, canvas)
    frame = adjust_brightness(frame, canvas.brightness)
    frame.alpha_composite(build_overlay_layer(frame.size, image_layers, text_overlays, font, variant))
    return frame


def has_transparency(image: Image.Image) -> bool:
    return image.mode == "RGBA" and image.getchannel("A").getextrema()[0] < 255


def encode_static(image: Image.Image, jpeg_quality: int = 90) -> Tuple[bytes, str, str]:
    """
    Encode a composed frame. Anything with a non-opaque pixel becomes PNG,
    everything else JPEG. Returns (bytes, content type, file extension).
    """
    buf = io.BytesIO()
    try:
        if has_transparency(image):
            image.save(buf, format="PNG")
            content_type, ext = "image/png", "png"
        else:
            image.convert("RGB").save(buf, format="JPEG", quality=jpeg_quality)
            content_type, ext = "image/jpeg", "jpg"
    except (OSError, ValueError) as e:
        raise EncodeError(f"Failed to encode image: {e}")
    return buf.getvalue(), content_type, ext
