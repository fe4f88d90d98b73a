import pytest

from overlaykit.core.errors import MarkupError
from overlaykit.services.markup import Alignment, LayoutLine, Run, parse_markup, to_markup


def _text(line):
    return "".join(run.text for run in line.runs)


def _shape(lines):
    return [(line.alignment.value, _text(line)) for line in lines]


def test_alignment_sticks_across_lines():
    lines = parse_markup("[center]A\nB\n[left]C")
    assert _shape(lines) == [("center", "A"), ("center", "B"), ("left", "C")]


def test_directive_may_appear_mid_line():
    lines = parse_markup("Total [right]42\nnext")
    assert _shape(lines) == [("right", "Total 42"), ("right", "next")]


def test_last_directive_in_a_line_wins():
    lines = parse_markup("[center][right]A")
    assert lines[0].alignment == Alignment.right
    assert _text(lines[0]) == "A"


def test_directive_uncovered_by_stripping_is_also_removed():
    lines = parse_markup("[cen[center]ter]X")
    assert lines[0].alignment == Alignment.center
    assert _text(lines[0]) == "X"


def test_unknown_brackets_are_literal():
    lines = parse_markup("[top]A [b]")
    assert lines[0].alignment == Alignment.left
    assert lines[0].runs == (Run("[top]A [b]"),)


def test_superscript_extraction():
    lines = parse_markup("H^{2}O")
    assert list(lines[0].runs) == [Run("H", False), Run("2", True), Run("O", False)]


def test_superscript_at_line_edges():
    (line,) = parse_markup("^{a}mid^{b}")
    assert line.runs == (Run("a", True), Run("mid"), Run("b", True))


def test_unterminated_superscript_is_literal():
    (line,) = parse_markup("E=mc^{2")
    assert line.runs == (Run("E=mc^{2"),)


def test_empty_superscript_is_literal():
    (line,) = parse_markup("a^{}b^{c}")
    assert line.runs == (Run("a^{}b"), Run("c", True))


def test_superscripts_do_not_nest():
    (line,) = parse_markup("x^{a^{b}}")
    assert line.runs == (Run("x"), Run("a^{b", True), Run("}"))


def test_strict_mode_raises_on_malformed_span():
    with pytest.raises(MarkupError):
        parse_markup("oops ^{", strict=True)
    with pytest.raises(MarkupError):
        parse_markup("oops ^{}", strict=True)


def test_empty_lines_are_kept():
    lines = parse_markup("[right]A\n\nB")
    assert len(lines) == 3
    assert lines[1] == LayoutLine(Alignment.right, ())


def test_initial_alignment_is_owned_by_the_call():
    assert parse_markup("A", alignment=Alignment.center)[0].alignment == Alignment.center
    assert parse_markup("A")[0].alignment == Alignment.left


@pytest.mark.parametrize(
    "text",
    [
        "[center]A\nB\n[left]C",
        "H^{2}O and CO^{2}",
        "[right]x^{a^{b}}\n^{}\nE=mc^{2",
        "plain",
        "[center]\n\n[right]^{only}",
    ],
)
def test_markup_round_trip(text):
    parsed = parse_markup(text)
    assert parse_markup(to_markup(parsed)) == parsed


def test_to_markup_emits_directives_only_on_change():
    lines = parse_markup("[center]A\nB\n[left]C")
    assert to_markup(lines) == "[center]A\nB\n[left]C"
