from dataclasses import dataclass
from typing import Tuple, Union

from overlaykit.schemas.overlay import ImageOverlay, TextOverlay, Variant

Overlayish = Union[TextOverlay, ImageOverlay]


def percent_to_pixel(value: float, dimension: float) -> float:
    return (value / 100) * dimension


def resolve(overlay: Overlayish, field: str, variant: Variant) -> float:
    """
    Variant-specific value of `field` when the overlay has one, else the
    generic value. `resolve(o, "x", Variant.mobile)` reads `mobile_x`, then `x`.
    """
    if variant != Variant.default:
        specific = getattr(overlay, f"{variant.value}_{field}", None)
        if specific is not None:
            return specific
    return getattr(overlay, field)


@dataclass(frozen=True)
class TextGeometry:
    x: float
    y: float
    font_size: int


@dataclass(frozen=True)
class ImageRect:
    left: int
    top: int
    width: int
    height: int


def text_geometry(
    overlay: TextOverlay, variant: Variant, canvas_size: Tuple[int, int]
) -> TextGeometry:
    width, height = canvas_size
    return TextGeometry(
        x=percent_to_pixel(resolve(overlay, "x", variant), width),
        y=percent_to_pixel(resolve(overlay, "y", variant), height),
        font_size=round(percent_to_pixel(resolve(overlay, "font_size", variant), width)),
    )


def image_rect(
    overlay: ImageOverlay, variant: Variant, canvas_size: Tuple[int, int]
) -> ImageRect:
    # both width and height are expressed in units of canvas width
    width, height = canvas_size
    return ImageRect(
        left=round(percent_to_pixel(resolve(overlay, "x", variant), width)),
        top=round(percent_to_pixel(resolve(overlay, "y", variant), height)),
        width=max(1, round(percent_to_pixel(resolve(overlay, "width", variant), width))),
        height=max(1, round(percent_to_pixel(resolve(overlay, "height", variant), width))),
    )
