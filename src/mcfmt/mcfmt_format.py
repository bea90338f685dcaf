"""
Formatting pipeline facade.

    parse -> preprocess -> attach comments -> print to document -> render

`Formatter` owns a resolved printer. Build one per process (or per thread
pool) and pass it to whoever formats; its methods keep no per-call state, so
a single instance can format many files.

Entry points:
    Formatter.format_source(source, options): Parse and format Monkey C text.
    Formatter.format_ast(root, comments, source, options): Format a tree that
        was produced elsewhere.
    Formatter.format_json_payload(payload, options): Format a serialized
        tree, optionally preceded by its original source text.

Raises:
    MonkeyCSyntaxError: From parsing.
    PayloadError: For a malformed JSON payload.
    UnsupportedNodeError: For node kinds no printer knows.
    PrinterNotInitializedError: If the printer was never initialized.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Iterable

from mcfmt.mcfmt_ast import ASTNode, Comment, walk
from mcfmt.mcfmt_comments import (
    IGNORE_DIRECTIVE,
    attach_comments,
    has_ignore_comment,
    print_comments,
)
from mcfmt.mcfmt_doc import Doc, render
from mcfmt.mcfmt_errors import PayloadError
from mcfmt.mcfmt_literals import LITERAL_INTEGER_RE
from mcfmt.mcfmt_options import FormatOptions, PrintContext
from mcfmt.mcfmt_parser import parse
from mcfmt.mcfmt_path import AstPath
from mcfmt.printers.monkeyc_printer import MonkeyCPrinter
from mcfmt.printers.printer_registry import Printer

logger = logging.getLogger(__name__)

# original text, a line break, then the JSON tree on the last line
_PAYLOAD_RE = re.compile(r"\A(.*)(\r\n|[\n\r\u2028\u2029])([^\n\r\u2028\u2029]+)\Z", re.DOTALL)


def _integer_from_raw(raw: str) -> int:
    digits = raw.rstrip("lL")
    sign = -1 if digits.startswith("-") else 1
    digits = digits.lstrip("-")
    if digits[:2].lower() == "0x":
        return sign * int(digits[2:], 16)
    return sign * int(digits, 10)


def recover_integer_literals(root: ASTNode) -> int:
    """Restore integer literal values that lost precision in transit.

    Returns:
        The number of literals whose value was replaced.
    """
    recovered = 0
    for node in walk(root):
        if node.kind != "Literal":
            continue
        raw, value = node.get("raw"), node.get("value")
        if not isinstance(raw, str) or not LITERAL_INTEGER_RE.match(raw):
            continue
        if isinstance(value, int) and not isinstance(value, bool):
            continue
        node.set("value", _integer_from_raw(raw))
        recovered += 1
    return recovered


class Formatter:
    """Formats Monkey C sources and trees.

    Args:
        options: Defaults for calls that don't pass their own.
        printer: The printer to use; a `MonkeyCPrinter` by default.
        registry: Where the printer looks up its delegate (the global
            printer registry by default).

    The printer is initialized eagerly, so a misconfigured registry fails
    here rather than on the first file.
    """

    def __init__(
        self,
        options: FormatOptions | None = None,
        printer: MonkeyCPrinter | None = None,
        registry: dict[str, Printer] | None = None,
    ) -> None:
        self.options = options or FormatOptions()
        self.printer = printer or MonkeyCPrinter()
        self.printer.initialize(registry)

    def format_source(self, source: str, options: FormatOptions | None = None) -> str:
        options = options or self.options
        started = time.perf_counter()
        root, comments = parse(source, options)
        result = self.format_ast(root, comments, source, options)
        logger.debug(
            "Formatted %s in %.1f ms",
            options.origin_path or "<source>",
            (time.perf_counter() - started) * 1000,
        )
        return result

    def format_ast(
        self,
        root: ASTNode,
        comments: Iterable[Comment] = (),
        source: str = "",
        options: FormatOptions | None = None,
    ) -> str:
        """
        Format an already parsed tree.

        Args:
            root: The tree. It is not modified, apart from the comment lists
                of its nodes, which are rebuilt from `comments`.
            comments: Comments to attach; their spans refer to `source`.
            source: The text the tree was parsed from, or "" if unknown.
            options: Formatting options (defaults to the formatter's).
        """
        options = options or self.options
        ctx = PrintContext(options, source)
        root = self.printer.preprocess(root, ctx)
        for node in walk(root):
            node.comments = []
        comment_list = list(comments)
        if comment_list:
            attach_comments(root, comment_list, source, self.printer.can_attach_comment)
        doc = self.print_to_doc(root, ctx)
        unprinted = [c for c in comment_list if not c.printed]
        if unprinted:
            logger.warning("%d comments were not printed: %r", len(unprinted), unprinted)
        return render(doc, print_width=options.print_width, tab_width=options.tab_width)

    def format_json_payload(
        self, payload: str, options: FormatOptions | None = None
    ) -> str:
        """
        Format a tree serialized as JSON.

        The payload is either just the JSON tree, or the original source text
        followed by a line break and the JSON tree on one line. Comments in
        the tree are only printed when the original text is present and long
        enough to cover the tree; comments containing the ignore directive are
        dropped, since honoring them would print stale source text.

        Raises:
            PayloadError: If the JSON is malformed or isn't a node.
        """
        match = _PAYLOAD_RE.match(payload)
        source = match.group(1) if match else ""
        json_text = match.group(3) if match else payload
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as exc:
            raise PayloadError(f"Malformed JSON tree: {exc}") from exc
        if not isinstance(data, dict):
            raise PayloadError("JSON tree must be an object")
        try:
            root = ASTNode.from_dict(data)
        except ValueError as exc:
            raise PayloadError(str(exc)) from exc

        end = data.get("end") or 0
        if not source or len(source) < end:
            source = ""
            comments: list[Comment] = []
        else:
            comments = [
                Comment.from_dict(c)
                for c in data.get("comments") or []
                if IGNORE_DIRECTIVE not in c.get("value", "")
            ]
        recovered = recover_integer_literals(root)
        if recovered:
            logger.debug("Recovered %d integer literals from their raw text", recovered)
        return self.format_ast(root, comments, source, options)

    def print_to_doc(self, root: ASTNode, ctx: PrintContext) -> Doc:
        """Print `root` with the formatter's printer, comments included."""
        printer = self.printer
        path = AstPath(root)

        def print_current(p: AstPath) -> Doc:
            node = p.node
            if not isinstance(node, ASTNode):
                return printer.print(p, ctx, main_print)
            if ctx.source and has_ignore_comment(node):
                doc: Doc = self._print_ignored(node, ctx.source)
            else:
                doc = printer.print(p, ctx, main_print)
            if printer.will_print_own_comments(p):
                return doc
            return print_comments(node, doc, ctx.source, printer.print_comment)

        def main_print(*selector: str | int | AstPath) -> Doc:
            if not selector or isinstance(selector[0], AstPath):
                return print_current(path)
            return path.call(print_current, *selector)  # type: ignore[arg-type]

        return main_print()

    @staticmethod
    def _print_ignored(node: ASTNode, source: str) -> Doc:
        for inner in walk(node):
            for comment in inner.comments:
                # the node's own leading comments are still printed normally
                if inner is not node or not (comment.leading or comment.trailing):
                    comment.printed = True
        return source[node.start : node.end]


__all__ = ["Formatter", "recover_integer_literals"]
