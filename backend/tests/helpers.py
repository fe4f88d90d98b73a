from __future__ import annotations

import io
from typing import List, Sequence, Tuple

from PIL import Image


class FixedMetrics:
    """Every character advances half the font size."""

    def advance_width(self, text: str, size_px: float) -> float:
        return len(text) * size_px * 0.5


def encode(image: Image.Image, fmt: str, **params) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt, **params)
    return buf.getvalue()


def solid(size: Tuple[int, int], color, mode: str = "RGB") -> Image.Image:
    return Image.new(mode, size, color)


def gif_bytes(frames: Sequence[Image.Image], durations: Sequence[int], disposal: List[int] | int = 1) -> bytes:
    return encode(
        frames[0],
        "GIF",
        save_all=True,
        append_images=list(frames[1:]),
        duration=list(durations),
        disposal=disposal,
        loop=0,
    )


def _lzw_literals(indices: Sequence[int], min_code_size: int = 2) -> bytes:
    # A clear code before every literal keeps the code width fixed, so no
    # dictionary is needed; valid but uncompressed LZW.
    clear, end = 1 << min_code_size, (1 << min_code_size) + 1
    width = min_code_size + 1
    codes = [c for index in indices for c in (clear, index)] + [end]

    bits = acc = 0
    out = bytearray()
    for code in codes:
        acc |= code << bits
        bits += width
        while bits >= 8:
            out.append(acc & 0xFF)
            acc >>= 8
            bits -= 8
    if bits:
        out.append(acc & 0xFF)

    blocks = bytearray([min_code_size])
    for i in range(0, len(out), 255):
        chunk = out[i : i + 255]
        blocks += bytes([len(chunk)]) + chunk
    return bytes(blocks + b"\x00")


def patch_gif(
    size: Tuple[int, int],
    palette: Sequence[Tuple[int, int, int]],
    frames: Sequence[Tuple[Tuple[int, int, int, int], Sequence[int], int]],
    delay_cs: int = 10,
) -> bytes:
    """
    Hand-assemble a GIF89a whose frames are partial patches.

    `palette` holds exactly four colours. Each frame is
    ((left, top, width, height), palette indices row by row, disposal).
    """
    width, height = size
    out = bytearray(b"GIF89a")
    out += width.to_bytes(2, "little") + height.to_bytes(2, "little")
    out += bytes([0x91, 0, 0])  # global table of 4 colours
    for color in palette:
        out += bytes(color)
    for (left, top, w, h), indices, disposal in frames:
        out += bytes([0x21, 0xF9, 0x04, disposal << 2]) + delay_cs.to_bytes(2, "little") + b"\x00\x00"
        out += b"\x2c" + b"".join(v.to_bytes(2, "little") for v in (left, top, w, h)) + b"\x00"
        out += _lzw_literals(indices)
    out += b"\x3b"
    return bytes(out)
