"""
Overlay text markup.

A text overlay is plain text with two kinds of inline directives:

  - ``[left]``, ``[center]``, ``[right]`` set the alignment for the line they
    appear on *and every following line*, until another directive changes it.
  - ``^{...}`` renders the enclosed text as a superscript run (one level only).

Malformed spans never fail a render: an unterminated ``^{`` and an empty
``^{}`` are kept as literal text. ``strict=True`` raises ``MarkupError``
instead, for callers that want to validate input.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from overlaykit.core.errors import MarkupError

logger = logging.getLogger(__name__)

SUPERSCRIPT_OPEN = "^{"
SUPERSCRIPT_CLOSE = "}"


class Alignment(str, Enum):
    left = "left"
    center = "center"
    right = "right"


DIRECTIVES = {f"[{a.value}]": a for a in Alignment}


@dataclass(frozen=True)
class Run:
    text: str
    superscript: bool = False


@dataclass(frozen=True)
class LayoutLine:
    alignment: Alignment
    runs: Tuple[Run, ...] = ()


def _strip_once(line: str) -> Tuple[str, Optional[Alignment]]:
    out: List[str] = []
    found: Optional[Alignment] = None
    i = 0
    while i < len(line):
        if line[i] == "[":
            end = line.find("]", i + 1)
            if end != -1 and line[i:end + 1] in DIRECTIVES:
                found = DIRECTIVES[line[i:end + 1]]
                i = end + 1
                continue
        out.append(line[i])
        i += 1
    return "".join(out), found


def _strip_directives(line: str) -> Tuple[str, Optional[Alignment]]:
    """Remove every alignment directive; the last one found wins."""
    found: Optional[Alignment] = None
    while True:
        # "[cen[center]ter]" leaves a directive behind after one pass
        line, latest = _strip_once(line)
        if latest is None:
            return line, found
        found = latest


def _scan_runs(line: str, strict: bool) -> Tuple[Run, ...]:
    runs: List[Run] = []
    plain: List[str] = []
    i = 0
    while i < len(line):
        if line.startswith(SUPERSCRIPT_OPEN, i):
            start = i + len(SUPERSCRIPT_OPEN)
            end = line.find(SUPERSCRIPT_CLOSE, start)
            if end == -1 or end == start:
                reason = "unterminated" if end == -1 else "empty"
                if strict:
                    raise MarkupError(f"{reason} superscript span at column {i}: {line!r}")
                logger.warning("Rendering %s superscript span literally: %r", reason, line)
                if end == -1:
                    plain.append(line[i:])
                    break
                plain.append(line[i:end + 1])
                i = end + 1
                continue
            if plain:
                runs.append(Run("".join(plain)))
                plain = []
            runs.append(Run(line[start:end], superscript=True))
            i = end + 1
            continue
        plain.append(line[i])
        i += 1
    if plain:
        runs.append(Run("".join(plain)))
    return tuple(runs)


def parse_markup(
    text: str,
    alignment: Alignment = Alignment.left,
    strict: bool = False,
) -> List[LayoutLine]:
    """
    Split `text` into lines of styled runs.

    `alignment` is the starting alignment; it is carried from line to line
    and only changes where a directive appears.
    """
    lines: List[LayoutLine] = []
    current = alignment
    for raw in text.split("\n"):
        stripped, found = _strip_directives(raw)
        if found is not None:
            current = found
        lines.append(LayoutLine(alignment=current, runs=_scan_runs(stripped, strict)))
    return lines


def to_markup(lines: List[LayoutLine]) -> str:
    """Serialize parsed lines back into markup that parses to the same lines."""
    out: List[str] = []
    current = Alignment.left
    for line in lines:
        prefix = ""
        if line.alignment != current:
            prefix = f"[{line.alignment.value}]"
            current = line.alignment
        body = "".join(
            f"{SUPERSCRIPT_OPEN}{run.text}{SUPERSCRIPT_CLOSE}" if run.superscript else run.text
            for run in line.runs
        )
        out.append(prefix + body)
    return "\n".join(out)
