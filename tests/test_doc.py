import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcfmt.mcfmt_doc import (
    Concat,
    Group,
    Text,
    break_parent,
    concat,
    fill,
    group,
    hardline,
    indent,
    join,
    line,
    line_suffix,
    propagate_breaks,
    render,
    softline,
    text,
    will_break,
)


def call(name: str, args: list[str]) -> object:
    return group([name, "(", indent([softline, join([",", line], args)]), softline, ")"])


def test_text_and_concat() -> None:
    assert render(concat(text("a"), "b", ["c", Text("d")])) == "abcd"
    nested = concat(concat("a", "b"), "c")
    assert isinstance(nested, Concat) and nested.parts == ("a", "b", "c")


def test_group_stays_flat_when_it_fits() -> None:
    assert render(call("f", ["a", "b"])) == "f(a, b)"


def test_group_breaks_when_too_wide() -> None:
    doc = call("f", ["aaaa", "bbbb", "cccc"])
    assert render(doc, print_width=10) == "f(\n    aaaa,\n    bbbb,\n    cccc\n)"


def test_tab_width_controls_indent() -> None:
    doc = call("f", ["aaaa", "bbbb"])
    assert render(doc, print_width=5, tab_width=2) == "f(\n  aaaa,\n  bbbb\n)"


def test_outer_group_breaks_inner_stays_flat() -> None:
    doc = group(["[", indent([softline, join([",", line], [call("f", ["x"]), "yyyyyyyy"])]), softline, "]"])
    assert render(doc, print_width=12) == "[\n    f(x),\n    yyyyyyyy\n]"


def test_hardline_forces_enclosing_group_to_break() -> None:
    doc = group(["a", line, "b", hardline, "c"])
    assert render(doc) == "a\nb\nc"
    assert will_break(doc)


def test_break_parent_propagates() -> None:
    inner = group(["x", line, "y", break_parent])
    outer = group(["(", inner, ")"])
    propagated = propagate_breaks(outer)
    assert isinstance(propagated, Group) and propagated.should_break
    assert render(outer) == "(x\ny)"


def test_should_break_group() -> None:
    assert render(group(["{", line, "a", line, "}"], should_break=True)) == "{\na\n}"


def test_multiline_text_counts_as_break() -> None:
    assert will_break(group(["a", "b\nc"]))
    assert not will_break(group(["a", line, "b"]))


def test_group_vs_fill() -> None:
    words = ["aaaa", "bbbb", "cccc", "dddd"]
    as_group = render(group(join(line, words)), print_width=10)
    as_fill = render(fill(join(line, words)), print_width=10)
    assert as_group == "aaaa\nbbbb\ncccc\ndddd"
    assert as_fill == "aaaa bbbb\ncccc dddd"
    assert as_group != as_fill


def test_fill_keeps_everything_on_one_line_when_it_fits() -> None:
    assert render(fill(join(line, ["1,", "2,", "3"]))) == "1, 2, 3"


def test_line_suffix_is_flushed_before_newline() -> None:
    doc = ["a", line_suffix(" // c"), ";", hardline, "b"]
    assert render(doc) == "a; // c\nb"


def test_line_suffix_flushed_at_end() -> None:
    assert render(["a", line_suffix(" // end")]) == "a // end"


def test_pending_line_suffix_breaks_next_group() -> None:
    assert render(["a +", group([line, "b"])]) == "a + b"
    assert render(["a +", line_suffix(" // c"), group([line, "b"])]) == "a + // c\nb"


def test_trailing_whitespace_trimmed() -> None:
    doc = ["a   ", hardline, indent([hardline, "b"]), " "]
    assert render(doc) == "a\n\n    b"


def test_indent_applies_after_breaks_only() -> None:
    doc = ["x", indent([hardline, "y", indent([hardline, "z"])])]
    assert render(doc) == "x\n    y\n        z"


def test_softline_vanishes_in_flat_mode() -> None:
    assert render(group(["a", softline, "b"])) == "ab"


def test_render_rejects_non_documents() -> None:
    with pytest.raises(TypeError, match="Not a document"):
        render([1])  # type: ignore[list-item]


@given(
    st.lists(st.text(alphabet="abcxyz", min_size=1, max_size=6), min_size=1, max_size=12),
    st.integers(min_value=8, max_value=60),
)
def test_fill_lines_respect_width(words: list[str], width: int) -> None:
    out = render(fill(join(line, words)), print_width=width)
    assert out.split() == words
    for row in out.split("\n"):
        # a line only overflows when it holds a single word
        assert len(row) <= width or " " not in row


@given(
    st.lists(st.text(alphabet="abc", min_size=1, max_size=5), min_size=1, max_size=8),
    st.integers(min_value=1, max_value=40),
)
def test_rendering_is_deterministic(args: list[str], width: int) -> None:
    doc = call("f", args)
    assert render(doc, print_width=width) == render(doc, print_width=width)
