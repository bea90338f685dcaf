"""
Comment attachment and comment printing.

Comments are collected by the lexer outside the tree. `attach_comments` gives
each one an owner node and a placement:

    leading: printed before the owner.
    trailing: printed after the owner (end-of-line comments go into a line
        suffix so they stay on the owner's last line).
    dangling: printed inside the owner, e.g. in an empty block.

To find the owner, the attacher descends from the root to the smallest node
whose span encloses the comment, then binary-searches that node's children
(as reported by the printer's visitor keys, skipping nodes the printer refuses
comments on) for the nearest preceding and following child. Which of those
gets the comment depends on whether the comment sits on its own line, ends a
line that has code before it, or sits between code on both sides.

A node whose leading comment reads `mcfmt-ignore` is printed exactly as it
appears in the source.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from mcfmt.mcfmt_ast import ASTNode, Comment, child_nodes
from mcfmt.mcfmt_doc import (
    Doc,
    break_parent,
    hardline,
    join,
    line,
    line_suffix,
)
from mcfmt.mcfmt_errors import SpanInvariantError

logger = logging.getLogger(__name__)

IGNORE_DIRECTIVE = "mcfmt-ignore"

CanAttach = Callable[[ASTNode], bool]

# statements whose body (or branches) are always printed as braced blocks
_BLOCK_OWNERS = frozenset(
    {"IfStatement", "WhileStatement", "DoWhileStatement", "ForStatement"}
)


# text scanning helpers


def skip_spaces(text: str, index: int, backwards: bool = False) -> int:
    step = -1 if backwards else 1
    while 0 <= index < len(text) and text[index] in " \t":
        index += step
    return index


def has_newline(text: str, index: int, backwards: bool = False) -> bool:
    """Whether only spaces separate `index` from a line break.

    Looking backwards, the start of the text counts as a line break.
    """
    if backwards:
        i = skip_spaces(text, index - 1, backwards=True)
        return i < 0 or text[i] in "\r\n"
    i = skip_spaces(text, index)
    return skip_newline(text, i) != i


def skip_newline(text: str, index: int) -> int:
    if text.startswith("\r\n", index):
        return index + 2
    if index < len(text) and text[index] in "\r\n":
        return index + 1
    return index


def is_next_line_empty(text: str, end: int) -> bool:
    """Whether the line after the one containing offset `end` is blank."""
    i = end
    while True:
        i = skip_spaces(text, i)
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close < 0 or "\n" in text[i:close]:
                break
            i = close + 2
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = len(text) if newline < 0 else newline
        break
    after = skip_newline(text, i)
    if after == i:
        return False
    after = skip_spaces(text, after)
    return after < len(text) and text[after] in "\r\n"


# attachment


class CommentAttacher:
    """Binds comments to nodes of one tree.

    Args:
        text: The source text the comments (and node spans) refer to.
        can_attach: Predicate deciding which nodes may own comments.
    """

    def __init__(self, text: str, can_attach: CanAttach) -> None:
        self.text = text
        self.can_attach = can_attach
        self._children: dict[int, list[ASTNode]] = {}

    def sorted_children(self, node: ASTNode) -> list[ASTNode]:
        cached = self._children.get(id(node))
        if cached is not None:
            return cached
        result: list[ASTNode] = []
        for child in child_nodes(node):
            if self.can_attach(child):
                result.append(child)
            else:
                result.extend(self.sorted_children(child))
        result.sort(key=lambda n: n.start)
        self._children[id(node)] = result
        return result

    def decorate(
        self, node: ASTNode, comment: Comment
    ) -> tuple[ASTNode, ASTNode | None, ASTNode | None]:
        """Return (enclosing, preceding, following) for `comment` under `node`."""
        enclosing = node
        while True:
            children = self.sorted_children(enclosing)
            preceding = following = None
            left, right = 0, len(children)
            descended = False
            while left < right:
                middle = (left + right) // 2
                child = children[middle]
                if child.start <= comment.start and comment.end <= child.end:
                    enclosing = child
                    descended = True
                    break
                if child.end <= comment.start:
                    preceding = child
                    left = middle + 1
                    continue
                if comment.end <= child.start:
                    following = child
                    right = middle
                    continue
                raise SpanInvariantError(
                    f"Comment at [{comment.start}, {comment.end}) overlaps "
                    f"{child.kind} [{child.start}, {child.end})"
                )
            if not descended:
                return enclosing, preceding, following

    def attach(self, root: ASTNode, comments: list[Comment]) -> None:
        for comment in comments:
            enclosing, preceding, following = self.decorate(root, comment)
            text = self.text
            comment.breaks_after = not comment.is_block or has_newline(
                text, comment.end
            )
            if (
                enclosing.kind in _BLOCK_OWNERS
                and following is not None
                and following.kind == "BlockStatement"
            ):
                # the `{` is printed right after the header, so the comment
                # goes inside the block
                _add_block_first_comment(following, comment)
            elif _follows_attributes(enclosing, preceding, following, comment):
                add_comment(enclosing, comment, "leading")
            elif _inside_empty_arguments(enclosing, following, comment):
                add_comment(enclosing, comment, "dangling")
            elif has_newline(text, comment.start, backwards=True):
                # on a line of its own
                if following is not None:
                    add_comment(following, comment, "leading")
                elif preceding is not None:
                    add_comment(preceding, comment, "trailing")
                else:
                    add_comment(enclosing, comment, "dangling")
            elif has_newline(text, comment.end):
                # ends a line that has code before it
                if preceding is not None:
                    add_comment(preceding, comment, "trailing")
                elif following is not None:
                    add_comment(following, comment, "leading")
                else:
                    add_comment(enclosing, comment, "dangling")
            elif preceding is not None and following is not None:
                gap = text[comment.end : following.start]
                if gap.strip(" \t") == "":
                    add_comment(following, comment, "leading")
                else:
                    add_comment(preceding, comment, "trailing")
            elif preceding is not None:
                add_comment(preceding, comment, "trailing")
            elif following is not None:
                add_comment(following, comment, "leading")
            else:
                add_comment(enclosing, comment, "dangling")


def _add_block_first_comment(block: ASTNode, comment: Comment) -> None:
    body = [n for n in block.get("body") or [] if isinstance(n, ASTNode)]
    if body:
        add_comment(body[0], comment, "leading")
    else:
        add_comment(block, comment, "dangling")


def _follows_attributes(
    enclosing: ASTNode,
    preceding: ASTNode | None,
    following: ASTNode | None,
    comment: Comment,
) -> bool:
    # between a declaration's attribute list and its keyword
    attrs = enclosing.get("attrs")
    if not isinstance(attrs, ASTNode) or following is None:
        return False
    return (
        attrs.start <= comment.start
        and following.start >= attrs.end
        and (preceding is None or preceding.end <= attrs.end)
    )


def _inside_empty_arguments(
    enclosing: ASTNode, following: ASTNode | None, comment: Comment
) -> bool:
    if enclosing.kind not in ("CallExpression", "NewExpression"):
        return False
    callee = enclosing.get("callee")
    return (
        following is None
        and not enclosing.get("arguments")
        and isinstance(callee, ASTNode)
        and comment.start >= callee.end
    )


def add_comment(node: ASTNode, comment: Comment, placement: str) -> None:
    comment.leading = placement == "leading"
    comment.trailing = placement == "trailing"
    comment.printed = False
    node.comments.append(comment)


def attach_comments(
    root: ASTNode, comments: list[Comment], text: str, can_attach: CanAttach
) -> None:
    """Attach every comment in `comments` to a node of `root` (in place)."""
    if not comments:
        return
    CommentAttacher(text, can_attach).attach(root, sorted(comments, key=lambda c: c.start))
    logger.debug("Attached %d comments", len(comments))


# printing

PrintComment = Callable[[Comment], Doc]


def has_ignore_comment(node: ASTNode) -> bool:
    return any(
        c.leading and c.value.strip() == IGNORE_DIRECTIVE for c in node.comments
    )


def print_leading_comment(comment: Comment, text: str, print_comment: PrintComment) -> Doc:
    contents = print_comment(comment)
    comment.printed = True
    if comment.is_block:
        if has_newline(text, comment.end):
            separator = (
                hardline if has_newline(text, comment.start, backwards=True) else line
            )
        else:
            separator = " "
        parts: list[Doc] = [contents, separator]
    else:
        parts = [contents, hardline]
    index = skip_newline(text, skip_spaces(text, comment.end))
    if has_newline(text, index):
        parts.append(hardline)
    return parts


def print_trailing_comment(
    comment: Comment,
    text: str,
    print_comment: PrintComment,
    previous_suffix: bool,
) -> tuple[Doc, bool]:
    """Print one trailing comment; the flag says whether it used a line suffix."""
    contents = print_comment(comment)
    comment.printed = True
    if has_newline(text, comment.start, backwards=True):
        # a comment on its own line after the end of a nested structure
        blank = _is_previous_line_empty(text, comment.start)
        return line_suffix([hardline, hardline if blank else "", contents]), True
    if not comment.is_block or previous_suffix:
        return [line_suffix([" ", contents]), "" if comment.is_block else break_parent], True
    return [" ", contents], False


def _is_previous_line_empty(text: str, start: int) -> bool:
    i = skip_spaces(text, start - 1, backwards=True)
    if i < 0 or text[i] not in "\r\n":
        return False
    i -= 1
    if i >= 0 and text[i] == "\r" and text[i + 1] == "\n":
        i -= 1
    i = skip_spaces(text, i, backwards=True)
    return i >= 0 and text[i] in "\r\n"


def print_dangling_comments(
    node: ASTNode, text: str, print_comment: PrintComment
) -> Doc:
    """Dangling comments of `node`, one per line; "" when there are none."""
    parts: list[Doc] = []
    for comment in node.comments:
        if comment.leading or comment.trailing or comment.printed:
            continue
        comment.printed = True
        parts.append(print_comment(comment))
    if not parts:
        return ""
    return join(hardline, parts)


def has_dangling_comments(node: ASTNode) -> bool:
    return any(not (c.leading or c.trailing) for c in node.comments)


def print_comments(
    node: ASTNode, doc: Doc, text: str, print_comment: PrintComment
) -> Doc:
    """Surround `doc` with the leading and trailing comments of `node`."""
    if not node.comments:
        return doc
    leading: list[Doc] = []
    trailing: list[Doc] = []
    previous_suffix = False
    for comment in node.comments:
        if comment.printed:
            continue
        if comment.leading:
            leading.append(print_leading_comment(comment, text, print_comment))
        else:
            # dangling comments the node's printer had no place for end up
            # after the node
            printed, previous_suffix = print_trailing_comment(
                comment, text, print_comment, previous_suffix
            )
            trailing.append(printed)
    if not leading and not trailing:
        return doc
    return [leading, doc, trailing]


__all__ = [
    "CommentAttacher",
    "IGNORE_DIRECTIVE",
    "add_comment",
    "attach_comments",
    "has_dangling_comments",
    "has_ignore_comment",
    "has_newline",
    "is_next_line_empty",
    "print_comments",
    "print_dangling_comments",
    "print_leading_comment",
    "print_trailing_comment",
]
