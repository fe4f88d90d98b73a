"""
Turns parsed markup lines into positioned draw instructions.

Positions are baseline origins: the y of an instruction is where the glyph
baseline sits, and superscripts are already raised.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from overlaykit.services.markup import Alignment, LayoutLine, Run

SUPERSCRIPT_SCALE = 0.7
SUPERSCRIPT_RAISE = 0.3
LINE_HEIGHT = 1.2
WRAP_WIDTH_FRACTION = 0.8

_WHITESPACE = re.compile(r"(\s+)")


class Metrics(Protocol):
    def advance_width(self, text: str, size_px: float) -> float: ...


@dataclass(frozen=True)
class DrawInstruction:
    text: str
    x: float
    y: float
    size_px: float
    superscript: bool = False


def run_size(run: Run, font_size_px: float) -> float:
    return font_size_px * SUPERSCRIPT_SCALE if run.superscript else font_size_px


def line_width(runs: Sequence[Run], font_size_px: float, metrics: Metrics) -> float:
    return sum(metrics.advance_width(r.text, run_size(r, font_size_px)) for r in runs)


def _upper(line: LayoutLine) -> LayoutLine:
    return LayoutLine(
        alignment=line.alignment,
        runs=tuple(Run(r.text.upper(), r.superscript) for r in line.runs),
    )


def _words(line: LayoutLine) -> List[List[Run]]:
    # A word may span runs: "H^{2}O" is a single word of three runs.
    words: List[List[Run]] = []
    current: List[Run] = []
    for run in line.runs:
        for piece in _WHITESPACE.split(run.text):
            if not piece:
                continue
            if piece.isspace():
                if current:
                    words.append(current)
                    current = []
            else:
                current.append(Run(piece, run.superscript))
    if current:
        words.append(current)
    return words


def _merge(runs: List[Run]) -> tuple:
    merged: List[Run] = []
    for run in runs:
        if merged and merged[-1].superscript == run.superscript:
            merged[-1] = Run(merged[-1].text + run.text, run.superscript)
        else:
            merged.append(run)
    return tuple(merged)


def wrap_line(
    line: LayoutLine, font_size_px: float, metrics: Metrics, max_width: float
) -> List[LayoutLine]:
    """
    Greedy word wrap on whitespace. Sub-lines keep the parent's alignment;
    a word wider than `max_width` gets a line of its own.
    """
    words = _words(line)
    if not words:
        return [LayoutLine(alignment=line.alignment)]

    space = metrics.advance_width(" ", font_size_px)
    wrapped: List[LayoutLine] = []
    current: List[Run] = []
    width = 0.0
    for word in words:
        word_width = line_width(word, font_size_px, metrics)
        if current and width + space + word_width > max_width:
            wrapped.append(LayoutLine(line.alignment, _merge(current)))
            current, width = [], 0.0
        if current:
            current.append(Run(" "))
            width += space
        current.extend(word)
        width += word_width
    wrapped.append(LayoutLine(line.alignment, _merge(current)))
    return wrapped


def line_start_x(alignment: Alignment, x: float, total_width: float) -> float:
    if alignment == Alignment.center:
        return x - total_width / 2
    if alignment == Alignment.right:
        return x - total_width
    return x


def layout_text(
    lines: Sequence[LayoutLine],
    x: float,
    y: float,
    font_size_px: float,
    metrics: Metrics,
    all_caps: bool = False,
    max_width: Optional[float] = None,
) -> List[DrawInstruction]:
    if all_caps:
        lines = [_upper(line) for line in lines]
    if max_width is not None:
        lines = [sub for line in lines for sub in wrap_line(line, font_size_px, metrics, max_width)]

    instructions: List[DrawInstruction] = []
    for index, line in enumerate(lines):
        baseline = y + index * font_size_px * LINE_HEIGHT
        cursor = line_start_x(line.alignment, x, line_width(line.runs, font_size_px, metrics))
        for run in line.runs:
            size = run_size(run, font_size_px)
            if run.text:
                run_y = baseline - font_size_px * SUPERSCRIPT_RAISE if run.superscript else baseline
                instructions.append(DrawInstruction(run.text, cursor, run_y, size, run.superscript))
            cursor += metrics.advance_width(run.text, size)
    return instructions
