"""
Document algebra and width-constrained renderer.

Printers describe layout as a tree of document commands instead of text. The
renderer then picks, for every `Group`, whether it fits flat on the current
line or must break.

Commands:
    Text: Literal text. Plain `str` values are accepted anywhere a doc is.
    Concat: A sequence of docs. Plain `list` values are accepted too.
    Indent: Increase indentation for line breaks within the child.
    Line: A space when flat, a newline when broken.
    SoftLine: Nothing when flat, a newline when broken.
    HardLine: Always a newline; forces enclosing groups to break.
    Group: Render the child flat if it fits, else broken.
    Fill: Alternating content/separator items; each separator breaks only if
        the next content item doesn't fit.
    LineSuffix: Content deferred until just before the next newline.
    BreakParent: Forces all enclosing groups to break.

Example:
    >>> render(group(["f(", indent([softline, "x"]), softline, ")"]))
    'f(x)'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Literal

type Mode = Literal["flat", "break"]


@dataclass(frozen=True, slots=True)
class Text:
    s: str


@dataclass(frozen=True, slots=True)
class Concat:
    parts: tuple[Doc, ...]


@dataclass(frozen=True, slots=True)
class Indent:
    child: Doc


@dataclass(frozen=True, slots=True)
class Line:
    """A space in flat mode, a newline in break mode."""


@dataclass(frozen=True, slots=True)
class SoftLine:
    """Nothing in flat mode, a newline in break mode."""


@dataclass(frozen=True, slots=True)
class HardLine:
    """Always a newline."""


@dataclass(frozen=True, slots=True)
class Group:
    """Try to render child in 'flat' mode if it fits; else 'break' mode."""

    child: Doc
    should_break: bool = False


@dataclass(frozen=True, slots=True)
class Fill:
    """Content and separator items, alternating, starting with content."""

    parts: tuple[Doc, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class LineSuffix:
    child: Doc


@dataclass(frozen=True, slots=True)
class BreakParent:
    pass


type Doc = (
    str
    | list[Doc]
    | Text
    | Concat
    | Indent
    | Line
    | SoftLine
    | HardLine
    | Group
    | Fill
    | LineSuffix
    | BreakParent
)

line = Line()
softline = SoftLine()
hardline = HardLine()
break_parent = BreakParent()


def text(s: str) -> Doc:
    return Text(s)


def concat(*parts: Doc) -> Doc:
    flat: list[Doc] = []
    for p in parts:
        if isinstance(p, Concat):
            flat.extend(p.parts)
        else:
            flat.append(p)
    return Concat(tuple(flat))


def join(sep: Doc, parts: Iterable[Doc]) -> list[Doc]:
    out: list[Doc] = []
    for i, p in enumerate(parts):
        if i:
            out.append(sep)
        out.append(p)
    return out


def group(d: Doc, should_break: bool = False) -> Doc:
    return Group(d, should_break)


def indent(d: Doc) -> Doc:
    return Indent(d)


def fill(parts: Iterable[Doc]) -> Doc:
    return Fill(tuple(parts))


def line_suffix(d: Doc) -> Doc:
    return LineSuffix(d)


def _children(d: Doc) -> tuple[Doc, ...]:
    if isinstance(d, list):
        return tuple(d)
    if isinstance(d, (Concat, Fill)):
        return d.parts
    if isinstance(d, (Indent, Group, LineSuffix)):
        return (d.child,)
    return ()


def will_break(d: Doc) -> bool:
    """Whether `d` contains a forced break (outside any line suffix)."""
    if isinstance(d, (HardLine, BreakParent)):
        return True
    if isinstance(d, (str, Text)):
        return "\n" in (d if isinstance(d, str) else d.s)
    if isinstance(d, Group) and d.should_break:
        return True
    if isinstance(d, LineSuffix):
        return False
    return any(will_break(c) for c in _children(d))


def propagate_breaks(d: Doc) -> Doc:
    """Return `d` with every group containing a forced break marked broken."""
    return _propagate(d)[0]


def _propagate(d: Doc) -> tuple[Doc, bool]:
    if isinstance(d, (HardLine, BreakParent)):
        return d, True
    if isinstance(d, (str, Text)):
        # verbatim multi-line text (ignored nodes, block comments)
        return d, "\n" in (d if isinstance(d, str) else d.s)
    if isinstance(d, (Line, SoftLine)):
        return d, False
    if isinstance(d, list):
        results = [_propagate(c) for c in d]
        return [r[0] for r in results], any(r[1] for r in results)
    if isinstance(d, (Concat, Fill)):
        results = [_propagate(c) for c in d.parts]
        return replace(d, parts=tuple(r[0] for r in results)), any(
            r[1] for r in results
        )
    if isinstance(d, Group):
        child, breaks = _propagate(d.child)
        broken = breaks or d.should_break
        return Group(child, broken), broken
    if isinstance(d, (Indent, LineSuffix)):
        child, breaks = _propagate(d.child)
        return replace(d, child=child), breaks
    raise TypeError(f"Not a document: {d!r}")


@dataclass(frozen=True, slots=True)
class _Frame:
    indent: int
    mode: Mode
    doc: Doc


def _trim(out: list[str]) -> None:
    while out:
        trimmed = out[-1].rstrip(" \t")
        if trimmed:
            out[-1] = trimmed
            return
        out.pop()


def render(doc: Doc, *, print_width: int = 80, tab_width: int = 4) -> str:
    """Render `doc` into a string, wrapping at `print_width` columns."""
    out: list[str] = []
    col = 0
    suffixes: list[_Frame] = []

    stack: list[_Frame] = [_Frame(0, "break", propagate_breaks(doc))]

    while stack or suffixes:
        if not stack:
            stack.extend(reversed(suffixes))
            suffixes.clear()
            continue

        frame = stack.pop()
        ind, mode, d = frame.indent, frame.mode, frame.doc

        if isinstance(d, (str, Text)):
            s = d if isinstance(d, str) else d.s
            out.append(s)
            newline = s.rfind("\n")
            col = col + len(s) if newline < 0 else len(s) - newline - 1
            continue

        if isinstance(d, (list, Concat)):
            # push in reverse so first part is processed first
            for p in reversed(_children(d)):
                stack.append(_Frame(ind, mode, p))
            continue

        if isinstance(d, Indent):
            stack.append(_Frame(ind + tab_width, mode, d.child))
            continue

        if isinstance(d, Group):
            if mode == "flat" and not d.should_break:
                stack.append(_Frame(ind, "flat", d.child))
            elif not d.should_break and _fits(
                _Frame(ind, "flat", d.child),
                stack,
                print_width - col,
                pending_suffix=bool(suffixes),
            ):
                stack.append(_Frame(ind, "flat", d.child))
            else:
                stack.append(_Frame(ind, "break", d.child))
            continue

        if isinstance(d, Fill):
            _expand_fill(d, ind, mode, stack, print_width - col)
            continue

        if isinstance(d, LineSuffix):
            suffixes.append(_Frame(ind, mode, d.child))
            continue

        if isinstance(d, BreakParent):
            continue

        if isinstance(d, (Line, SoftLine, HardLine)):
            if mode == "flat" and not isinstance(d, HardLine):
                if isinstance(d, Line):
                    out.append(" ")
                    col += 1
                continue
            if suffixes:
                stack.append(frame)
                stack.extend(reversed(suffixes))
                suffixes.clear()
                continue
            _trim(out)
            out.append("\n" + " " * ind)
            col = ind
            continue

        raise TypeError(f"Not a document: {d!r}")

    _trim(out)
    return "".join(out)


def _expand_fill(
    d: Fill, ind: int, mode: Mode, stack: list[_Frame], width: int
) -> None:
    """Push the next content/separator pair of a fill, deciding the separator."""
    parts = d.parts
    if not parts:
        return
    content = parts[0]
    content_flat = _Frame(ind, "flat", content)
    content_break = _Frame(ind, "break", content)
    content_fits = _fits(content_flat, [], width, must_be_flat=True)
    if len(parts) == 1:
        stack.append(content_flat if content_fits else content_break)
        return
    sep = parts[1]
    sep_flat = _Frame(ind, "flat", sep)
    sep_break = _Frame(ind, "break", sep)
    if len(parts) == 2:
        if content_fits:
            stack.extend([sep_flat, content_flat])
        else:
            stack.extend([sep_break, content_break])
        return
    stack.append(_Frame(ind, mode, Fill(parts[2:])))
    pair = _Frame(ind, "flat", [content, sep, parts[2]])
    if _fits(pair, [], width, must_be_flat=True):
        stack.extend([sep_flat, content_flat])
    elif content_fits:
        stack.extend([sep_break, content_flat])
    else:
        stack.extend([sep_break, content_break])


def _fits(
    first: _Frame,
    rest: list[_Frame],
    width: int,
    must_be_flat: bool = False,
    pending_suffix: bool = False,
) -> bool:
    """
    Lookahead: simulate rendering (without producing output) until:
    - we exceed the width => doesn't fit
    - we reach a newline that will really be emitted => fits
    - a line suffix is pending and a line would print flat => doesn't fit,
      so the suffix (an end-of-line comment) stays where it was written.
    """
    rest_index = len(rest)
    probe: list[_Frame] = [first]

    while width >= 0:
        if not probe:
            if rest_index == 0:
                return True
            rest_index -= 1
            probe.append(rest[rest_index])
            continue

        fr = probe.pop()
        d = fr.doc

        if isinstance(d, (str, Text)):
            s = d if isinstance(d, str) else d.s
            newline = s.find("\n")
            if newline >= 0:
                return newline <= width
            width -= len(s)
            continue

        if isinstance(d, (list, Concat, Fill)):
            for p in reversed(_children(d)):
                probe.append(_Frame(fr.indent, fr.mode, p))
            continue

        if isinstance(d, Indent):
            probe.append(_Frame(fr.indent, fr.mode, d.child))
            continue

        if isinstance(d, Group):
            if must_be_flat and d.should_break:
                return False
            mode: Mode = "break" if d.should_break else fr.mode
            probe.append(_Frame(fr.indent, mode, d.child))
            continue

        if isinstance(d, HardLine):
            return True

        if isinstance(d, (Line, SoftLine)):
            if fr.mode == "break":
                return True
            if pending_suffix:
                return False
            if isinstance(d, Line):
                width -= 1
            continue

        # LineSuffix and BreakParent take no room on the current line

    return False


__all__ = [
    "BreakParent",
    "Concat",
    "Doc",
    "Fill",
    "Group",
    "HardLine",
    "Indent",
    "Line",
    "LineSuffix",
    "SoftLine",
    "Text",
    "break_parent",
    "concat",
    "fill",
    "group",
    "hardline",
    "indent",
    "join",
    "line",
    "line_suffix",
    "propagate_breaks",
    "render",
    "softline",
    "text",
    "will_break",
]
