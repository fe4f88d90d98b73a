from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from overlaykit.schemas.overlay import Anchor, Canvas, FitMode


@dataclass(frozen=True)
class Placement:
    """Where the resampled background lands on the canvas (may overhang)."""

    width: float
    height: float
    left: float
    top: float


def fit_placement(natural: Tuple[int, int], canvas: Tuple[int, int], fit: FitMode, anchor: Anchor) -> Placement:
    wn, hn = natural
    wc, hc = canvas

    if fit == FitMode.stretch:
        return Placement(wc, hc, 0, 0)

    pick = max if fit == FitMode.cover else min
    scale = pick(wc / wn, hc / hn)
    width, height = wn * scale, hn * scale

    left = (wc - width) / 2
    top = (hc - height) / 2
    if anchor == Anchor.top:
        top = 0
    elif anchor == Anchor.bottom:
        top = hc - height
    elif anchor == Anchor.left:
        left = 0
    elif anchor == Anchor.right:
        left = wc - width
    return Placement(width, height, left, top)


def compute_placement(natural: Tuple[int, int], canvas: Canvas) -> Placement:
    """
    Fit mode and zoom/pan as one transform.

    The fitted canvas is scaled by `zoom` and the view is shifted by
    `(Wc * zoom - Wc) * pan / 100`, so pan 0 shows the top-left of the zoomed
    image and pan 100 the bottom-right.
    """
    wc, hc = canvas.width, canvas.height
    fitted = fit_placement(natural, (wc, hc), canvas.fit, canvas.anchor)
    zoom = canvas.zoom
    offset_x = (wc * zoom - wc) * canvas.pan_x / 100
    offset_y = (hc * zoom - hc) * canvas.pan_y / 100
    return Placement(
        width=fitted.width * zoom,
        height=fitted.height * zoom,
        left=fitted.left * zoom - offset_x,
        top=fitted.top * zoom - offset_y,
    )


def transform_background(image: Image.Image, canvas: Canvas) -> Image.Image:
    """Resample `image` once onto a transparent RGBA canvas of the requested size."""
    placement = compute_placement(image.size, canvas)
    size = (max(1, round(placement.width)), max(1, round(placement.height)))
    resized = image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)

    out = Image.new("RGBA", (canvas.width, canvas.height), (0, 0, 0, 0))
    paste_rgba(out, resized, round(placement.left), round(placement.top))
    return out


def paste_rgba(base: Image.Image, layer: Image.Image, left: int, top: int) -> None:
    """Alpha-composite `layer` onto `base` in place, clipping at every edge."""
    if left >= base.width or top >= base.height or -left >= layer.width or -top >= layer.height:
        return
    if left < 0 or top < 0:
        layer = layer.crop((max(0, -left), max(0, -top), layer.width, layer.height))
        left, top = max(0, left), max(0, top)
    if left + layer.width > base.width or top + layer.height > base.height:
        layer = layer.crop((0, 0, min(layer.width, base.width - left), min(layer.height, base.height - top)))
    base.alpha_composite(layer, dest=(left, top))
