"""
Printer protocol and the registry printers are looked up in.

A printer turns the node at the tip of an `AstPath` into a document. Printers
register themselves under a tag ("estree" for the generic printer); a printer
that specializes another one looks its delegate up by tag instead of importing
a concrete class.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from mcfmt.mcfmt_ast import ASTNode, Comment
from mcfmt.mcfmt_doc import Doc
from mcfmt.mcfmt_options import PrintContext
from mcfmt.mcfmt_path import AstPath

PrintFn = Callable[..., Doc]


class Printer(Protocol):
    def print(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc: ...

    def preprocess(self, root: ASTNode, ctx: PrintContext) -> ASTNode: ...

    def get_visitor_keys(self, node: ASTNode) -> tuple[str, ...]: ...

    def can_attach_comment(self, node: Any) -> bool: ...

    def will_print_own_comments(self, path: AstPath) -> bool: ...

    def print_comment(self, comment: Comment) -> Doc: ...

    def is_block_comment(self, comment: Comment) -> bool: ...


PRINTERS: dict[str, Printer] = {}


def register_printer(tag: str, printer: Printer) -> Printer:
    PRINTERS[tag] = printer
    return printer


def find_printer(tag: str, registry: dict[str, Printer] | None = None) -> Printer:
    """Return the printer registered under `tag`.

    Raises:
        LookupError: When nothing is registered under `tag`.
    """
    printers = PRINTERS if registry is None else registry
    try:
        return printers[tag]
    except KeyError:
        raise LookupError(f"Printer setup failure: no printer registered as {tag!r}") from None


__all__ = ["PRINTERS", "PrintFn", "Printer", "find_printer", "register_printer"]
