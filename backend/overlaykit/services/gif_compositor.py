"""
Animated GIF compositing.

Frames are replayed through a disposal state machine so that partial frame
patches accumulate the way a GIF viewer would show them. The overlay layer is
identical for every frame and is rasterized once.
"""
import io
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from overlaykit.core.errors import DecodeError, EncodeError
from overlaykit.services.compositor import adjust_brightness
from overlaykit.services.transform import paste_rgba

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 100
TRANSPARENT_INDEX = 255


class Disposal(IntEnum):
    UNSPECIFIED = 0
    DO_NOT_DISPOSE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_TO_PREVIOUS = 3

    @classmethod
    def from_code(cls, code: Optional[int]) -> "Disposal":
        # codes 4-7 are reserved in GIF89a; viewers treat them as 0
        try:
            return cls(code or 0)
        except ValueError:
            return cls.UNSPECIFIED


@dataclass(frozen=True)
class Rect:
    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.left + self.width, self.top + self.height)


@dataclass
class GifFrame:
    index: int
    patch: Image.Image          # RGBA, rect-sized
    rect: Rect
    delay_ms: Optional[int]     # None when the frame carries no delay
    disposal: Disposal = Disposal.UNSPECIFIED


def decode_gif(im: Image.Image) -> List[GifFrame]:
    """
    Read every frame of an opened GIF as (patch, rect, delay, disposal).

    The patch is the frame's region as Pillow renders it, so pixels the raw
    frame leaves transparent already hold what was underneath.
    """
    frames: List[GifFrame] = []
    try:
        for index in range(getattr(im, "n_frames", 1)):
            im.seek(index)
            extent = getattr(im, "dispose_extent", None) or (0, 0) + im.size
            rgba = im.convert("RGBA")
            left, top, right, bottom = extent
            frames.append(
                GifFrame(
                    index=index,
                    patch=rgba.crop(extent),
                    rect=Rect(left, top, right - left, bottom - top),
                    delay_ms=im.info.get("duration") or None,
                    disposal=Disposal.from_code(getattr(im, "disposal_method", 0)),
                )
            )
    except (OSError, EOFError, ValueError) as e:
        raise DecodeError(f"Corrupt GIF frame {len(frames)}: {e}")
    if not frames:
        raise DecodeError("No frames found in GIF")
    return frames


class DisposalState:
    """
    The persistent composite canvas carried from frame to frame.

    `begin()` builds the frame canvas (composite + patch); `dispose()` then
    updates the composite according to that frame's disposal method. Every
    disposal method has a transition.
    """

    def __init__(self, size: Tuple[int, int]):
        self.size = size
        self.composite = Image.new("RGBA", size, (0, 0, 0, 0))
        self._snapshot: Optional[Image.Image] = None
        self._transitions: Dict[Disposal, Callable[[GifFrame, Image.Image], None]] = {
            Disposal.UNSPECIFIED: self._keep,
            Disposal.DO_NOT_DISPOSE: self._keep,
            Disposal.RESTORE_BACKGROUND: self._clear_patch,
            Disposal.RESTORE_TO_PREVIOUS: self._restore_snapshot,
        }

    def begin(self, frame: GifFrame) -> Image.Image:
        if frame.disposal == Disposal.RESTORE_TO_PREVIOUS:
            self._snapshot = self.composite.copy()
        canvas = self.composite.copy()
        paste_rgba(canvas, frame.patch, frame.rect.left, frame.rect.top)
        return canvas

    def dispose(self, frame: GifFrame, canvas: Image.Image) -> None:
        self._transitions[frame.disposal](frame, canvas)

    def _keep(self, frame: GifFrame, canvas: Image.Image) -> None:
        self.composite = canvas

    def _clear_patch(self, frame: GifFrame, canvas: Image.Image) -> None:
        clear = Image.new("RGBA", (frame.rect.width, frame.rect.height), (0, 0, 0, 0))
        self.composite.paste(clear, (frame.rect.left, frame.rect.top))

    def _restore_snapshot(self, frame: GifFrame, canvas: Image.Image) -> None:
        if self._snapshot is not None:
            self.composite = self._snapshot
        self._snapshot = None


def compose_frames(
    frames: Sequence[GifFrame],
    size: Tuple[int, int],
    overlay_layer: Optional[Image.Image] = None,
    brightness: float = 100,
) -> Iterator[Tuple[Image.Image, int]]:
    """
    Yield (output frame, delay ms) in order.

    Brightness and overlays go on a copy of the frame canvas; the composite
    carries the unadjusted pixels so brightness is never applied twice.
    """
    state = DisposalState(size)
    delay = DEFAULT_DELAY_MS
    for frame in frames:
        logger.debug("Processing frame %d/%d", frame.index + 1, len(frames))
        canvas = state.begin(frame)

        # brightness and overlays go on the output copy only; the composite stays unadjusted
        out = adjust_brightness(canvas.copy(), brightness)
        if overlay_layer is not None:
            out.alpha_composite(overlay_layer)

        delay = frame.delay_ms or delay
        yield out, delay

        state.dispose(frame, canvas)


def _unused_color(frames: Sequence[Image.Image]) -> Tuple[int, int, int]:
    used = set()
    for frame in frames:
        palette = frame.getpalette() or []
        used.update(zip(palette[0::3], palette[1::3], palette[2::3]))
    for value in range(1 << 24):
        color = (value >> 16, (value >> 8) & 0xFF, value & 0xFF)
        if color not in used:
            return color
    raise EncodeError("No free palette colour for transparency")


def to_palette_frames(images: Sequence[Image.Image]) -> List[Image.Image]:
    """
    Quantize RGBA frames to 255 colours each plus `TRANSPARENT_INDEX`.

    Pixels with alpha below 128 map to the transparent index. Its palette
    entry is a colour no frame uses, so the encoder never mistakes an opaque
    pixel for cleared background.
    """
    quantized = []
    for image in images:
        rgba = image.convert("RGBA")
        clear = rgba.getchannel("A").point(lambda a: 255 if a < 128 else 0)
        quantized.append((rgba.convert("RGB").quantize(colors=TRANSPARENT_INDEX), clear))

    reserved = list(_unused_color([frame for frame, _ in quantized]))
    frames = []
    for frame, clear in quantized:
        palette = frame.getpalette()[: TRANSPARENT_INDEX * 3]
        palette += [0] * (TRANSPARENT_INDEX * 3 - len(palette)) + reserved
        frame.putpalette(palette)
        frame.paste(TRANSPARENT_INDEX, mask=clear)
        frame.info["transparency"] = TRANSPARENT_INDEX
        frames.append(frame)
    return frames


def encode_gif(frames: Iterator[Tuple[Image.Image, int]]) -> bytes:
    images: List[Image.Image] = []
    delays: List[int] = []
    for image, delay in frames:
        images.append(image)
        delays.append(delay)
    if not images:
        raise EncodeError("No frames to encode")
    images = to_palette_frames(images)

    buf = io.BytesIO()
    try:
        images[0].save(
            buf,
            format="GIF",
            save_all=True,
            append_images=images[1:],
            duration=delays,
            loop=0,          # loop forever
            disposal=2,      # every output frame is a full canvas
            transparency=TRANSPARENT_INDEX,
            optimize=False,  # keep every frame's palette and transparent index in place
        )
    except (OSError, ValueError) as e:
        raise EncodeError(f"Failed to encode GIF: {e}")
    return buf.getvalue()
