"""
Monkey C printer.

Specializes the generic printer registered under "estree". The delegate is
resolved once, by tag, in `initialize`; after that this printer:

    - prints the node kinds only Monkey C has (modules, typedefs, `using`,
      attribute lists, type specs, sized arrays, enums, `instanceof` cases,
      multiple catch clauses) and the ones whose ESTree spelling is wrong for
      Monkey C (dictionary properties, literals, byte arrays, `self`)
    - hands every other kind to the delegate
    - runs the parenthesization preprocessor after the delegate's own
    - refuses comments on attribute lists, so they attach to their contents
    - lets the caller print comments around every node

All other printer entries (`get_visitor_keys`, `print_comment`,
`is_block_comment`, ...) are the delegate's, looked up on demand.

Using the printer before `initialize` raises `PrinterNotInitializedError`.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from mcfmt.mcfmt_ast import ASTNode
from mcfmt.mcfmt_doc import (
    Doc,
    group,
    hardline,
    indent,
    join,
    line,
    render,
    softline,
)
from mcfmt.mcfmt_errors import PrinterNotInitializedError
from mcfmt.mcfmt_literals import normalize_numeric_literal
from mcfmt.mcfmt_options import PrintContext
from mcfmt.mcfmt_path import AstPath
from mcfmt.mcfmt_preprocess import preprocess
from mcfmt.printers.estree_printer import EstreePrinter, method_name
from mcfmt.printers.printer_registry import Printer, PrintFn, find_printer

logger = logging.getLogger(__name__)

DELEGATE_TAG = EstreePrinter.tag


class MonkeyCPrinter:
    """Printer for Monkey C trees, layered over the generic ESTree printer.

    Attributes:
        tag (str): Registry tag, "monkeyc".
    """

    tag = "monkeyc"

    def __init__(self) -> None:
        self._delegate: Printer | None = None
        self._lock = threading.Lock()

    def initialize(self, registry: dict[str, Printer] | None = None) -> MonkeyCPrinter:
        """Resolve the delegate printer. Safe to call repeatedly, from any thread.

        Raises:
            LookupError: When no printer is registered as "estree".
        """
        with self._lock:
            if self._delegate is None:
                self._delegate = find_printer(DELEGATE_TAG, registry)
                logger.debug(
                    "Resolved %r delegate: %s",
                    DELEGATE_TAG,
                    type(self._delegate).__name__,
                )
        return self

    @property
    def initialized(self) -> bool:
        return self._delegate is not None

    @property
    def delegate(self) -> Printer:
        if self._delegate is None:
            raise PrinterNotInitializedError(
                "Something went wrong: printer not initialized!"
            )
        return self._delegate

    def __getattr__(self, name: str) -> Any:
        # everything not overridden below comes from the delegate
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.delegate, name)

    # overridden printer entries

    def print(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        delegate = self.delegate
        node = path.node
        if node is None:
            return ""
        if isinstance(node, str):
            return node
        # class lookup, so delegate methods never leak in through __getattr__
        method = getattr(type(self), method_name(node.kind), None)
        if method is None:
            return delegate.print(path, ctx, print_fn)
        return method(self, path, ctx, print_fn)

    def preprocess(self, root: ASTNode, ctx: PrintContext) -> ASTNode:
        return preprocess(self.delegate.preprocess(root, ctx))

    def can_attach_comment(self, node: Any) -> bool:
        return (
            isinstance(node, ASTNode)
            and node.kind != "AttributeList"
            and self.delegate.can_attach_comment(node)
        )

    def will_print_own_comments(self, path: AstPath) -> bool:
        return False

    # node kinds

    def _with_attrs(self, path: AstPath, print_fn: PrintFn, body: Doc) -> Doc:
        if path.node.get("attrs") is not None:
            return [print_fn("attrs"), body]
        return body

    def print_module_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        body = group(
            [
                group(["module", line, indent(print_fn("id")), line]),
                print_fn("body"),
            ]
        )
        return self._with_attrs(path, print_fn, body)

    def print_typedef_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        body = [
            group(["typedef", indent(line), print_fn("id")]),
            print_fn("ts"),
            ";",
        ]
        return self._with_attrs(path, print_fn, body)

    def print_property(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        return group([group([print_fn("key"), line, "=>", line]), print_fn("value")])

    def print_import_module(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return group(["import", line, print_fn("id"), ";"])

    def print_using(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        body: list[Doc] = ["using", line, print_fn("id")]
        if path.node.get("as") is not None:
            body.extend([line, "as", line, print_fn("as")])
        body.append(";")
        return group(body)

    def print_identifier(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        name = node.get("name")
        original = node.get("original")
        if original and original != name:
            return f"{name} /*>{original}<*/"
        return name

    def print_type_spec_list(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        body = path.map(print_fn, "ts")
        if len(body) == 2 and body[1] == "Null":
            return [body[0], "?"]
        return group(join([" or", indent(line)], body))

    def print_parenthesized_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        # Statement-level dictionaries are wrapped so the delegate doesn't see
        # them at the start of a statement (it would add parens of its own).
        # Those parens, and those of a parentless wrapper, are never printed.
        node = path.node
        parent = path.parent
        expression = node.get("expression")
        if parent is None or (
            isinstance(expression, ASTNode)
            and expression.kind == "ObjectExpression"
            and (parent.kind != "BinaryExpression" or parent.get("operator") != "as")
        ):
            return print_fn("expression")
        return self.delegate.print(path, ctx, print_fn)

    def print_type_spec_part(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        body: list[Doc] = [print_fn("name") if node.get("name") else ""]
        generics = node.get("generics")
        if generics:
            # `Array<Array<Number>>` must not end in ">>", which the parser
            # would read as a shift
            last = generics[-1].get("ts") or []
            final = line if last and last[-1].get("generics") else softline
            body.append(
                group(
                    [
                        "<",
                        indent([softline, join([",", line], path.map(print_fn, "generics"))]),
                        final,
                        ">",
                    ]
                )
            )
        if node.get("callspec") is not None:
            body.insert(0, "(")
            body.extend([indent([softline, print_fn("callspec")]), softline, ")"])
        if node.get("nullable"):
            body.append("?")
        return body[0] if len(body) == 1 else body

    def print_array_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return [self.delegate.print(path, ctx, print_fn), path.node.get("byte") or ""]

    def print_sized_array_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        ts = node.get("ts")
        type_doc: Doc = ""
        if ts is not None:
            # new Foo [size], but new Array<Number>[size]
            has_generics = isinstance(ts, ASTNode) and bool(ts.get("generics"))
            type_doc = [print_fn("ts"), "" if has_generics else " "]
        return group(
            ["new ", type_doc, "[", indent(print_fn("size")), "]", node.get("byte") or ""]
        )

    def print_variable_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return self._with_attrs(path, print_fn, self.delegate.print(path, ctx, print_fn))

    print_function_declaration = print_variable_declaration
    print_class_declaration = print_variable_declaration

    def print_enum_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        head: list[Doc] = ["enum"]
        if path.node.get("id") is not None:
            head.append(print_fn("id"))
        body = self._with_attrs(path, print_fn, join(" ", head))
        return [body, " ", print_fn("body")]

    def print_attributes(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return group(
            [
                "(",
                indent([softline, group(join([",", line], path.map(print_fn, "elements")))]),
                softline,
                ")",
            ]
        )

    def print_attribute_list(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        body = ""
        access = node.get("access")
        if access:
            body = " ".join(sorted(set(access))) + " "
        if node.get("attributes") is None:
            return body
        return [print_fn("attributes"), hardline, body]

    def print_class_element(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return print_fn("item")

    def print_catch_clauses(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return join(" ", path.map(print_fn, "catches"))

    def print_this_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return path.node.get("text") or "self"

    def print_instance_of_case(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return ["instanceof ", print_fn("id")]

    def print_literal(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        value, raw = node.get("value"), node.get("raw")
        if isinstance(value, str) and raw is not None:
            return raw
        if isinstance(value, (int, float)) and not isinstance(value, bool) and raw:
            rendered = render(
                self.delegate.print(path, ctx, print_fn),
                print_width=ctx.options.print_width,
                tab_width=ctx.options.tab_width,
            )
            return normalize_numeric_literal(raw, value, rendered)
        return self.delegate.print(path, ctx, print_fn)


__all__ = ["DELEGATE_TAG", "MonkeyCPrinter"]
