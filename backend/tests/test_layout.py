import pytest

from overlaykit.services.layout import layout_text, line_start_x, wrap_line
from overlaykit.services.markup import Alignment, LayoutLine, Run, parse_markup


class WidthTable:
    """Reports a fixed total width for a whole line of text."""

    def __init__(self, width: float):
        self.width = width

    def advance_width(self, text: str, size_px: float) -> float:
        return self.width if text else 0.0


@pytest.mark.parametrize(
    "directive, expected",
    [("[left]", 200), ("[center]", 140), ("[right]", 80)],
)
def test_alignment_geometry(directive, expected):
    # 120px line at x=50% of a 400px canvas
    lines = parse_markup(f"{directive}Hello")
    (ins,) = layout_text(lines, x=200, y=50, font_size_px=20, metrics=WidthTable(120))
    assert ins.x == pytest.approx(expected)
    assert ins.y == 50


def test_line_start_x():
    assert line_start_x(Alignment.left, 200, 120) == 200
    assert line_start_x(Alignment.center, 200, 120) == 140
    assert line_start_x(Alignment.right, 200, 120) == 80


def test_lines_advance_by_line_height(metrics):
    instructions = layout_text(parse_markup("a\nb\nc"), 0, 100, 20, metrics)
    assert [i.y for i in instructions] == pytest.approx([100, 124, 148])


def test_superscript_is_smaller_raised_and_advances_cursor(metrics):
    instructions = layout_text(parse_markup("H^{2}O"), 10, 100, 20, metrics)
    h, two, o = instructions

    assert (h.text, h.x, h.y, h.size_px, h.superscript) == ("H", 10, 100, 20, False)
    assert two.superscript
    assert two.size_px == pytest.approx(14)
    assert two.y == pytest.approx(100 - 6)
    assert two.x == pytest.approx(10 + 10)           # "H" is 10px wide at 20px
    assert o.x == pytest.approx(10 + 10 + 7)         # "2" is 7px wide at 14px
    assert o.y == 100


def test_centered_width_counts_superscripts_at_their_size(metrics):
    # "H" 10px + "2" 7px + "O" 10px = 27px total
    instructions = layout_text(parse_markup("[center]H^{2}O"), 100, 0, 20, metrics)
    assert instructions[0].x == pytest.approx(100 - 13.5)


def test_all_caps_applies_to_measurement_and_text():
    class UpperOnly:
        def advance_width(self, text, size_px):
            return 10.0 * sum(1 for c in text if c.isupper())

    instructions = layout_text(parse_markup("[right]ab^{c}"), 100, 0, 20, UpperOnly(), all_caps=True)
    assert [i.text for i in instructions] == ["AB", "C"]
    assert instructions[0].x == pytest.approx(100 - 30)


def test_empty_line_consumes_a_slot(metrics):
    instructions = layout_text(parse_markup("a\n\nb"), 0, 0, 10, metrics)
    assert [i.text for i in instructions] == ["a", "b"]
    assert instructions[1].y == pytest.approx(24)


def _text(line):
    return "".join(run.text for run in line.runs)


def test_wrap_is_greedy_on_whitespace(metrics):
    # each char 5px at size 10, space 5px
    line = LayoutLine(Alignment.center, (Run("aaaa bbbb cccc"),))
    wrapped = wrap_line(line, 10, metrics, max_width=50)
    assert [_text(w) for w in wrapped] == ["aaaa bbbb", "cccc"]
    assert all(w.alignment == Alignment.center for w in wrapped)


def test_wrap_keeps_long_word_whole(metrics):
    line = LayoutLine(Alignment.left, (Run("tiny enormousword x"),))
    wrapped = wrap_line(line, 10, metrics, max_width=30)
    assert [_text(w) for w in wrapped] == ["tiny", "enormousword", "x"]


def test_wrap_keeps_superscripts_inside_words(metrics):
    line = parse_markup("H^{2}O is water")[0]
    wrapped = wrap_line(line, 10, metrics, max_width=40)
    assert wrapped[0].runs == (Run("H"), Run("2", True), Run("O is"))
    assert wrapped[1].runs == (Run("water"),)


def test_wrapped_lines_take_their_own_vertical_slots(metrics):
    instructions = layout_text(parse_markup("aaaa bbbb\nc"), 0, 0, 10, metrics, max_width=25)
    assert [(i.text, i.y) for i in instructions] == [("aaaa", 0), ("bbbb", 12), ("c", 24)]
