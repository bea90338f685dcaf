"""
Generic ESTree printer.

Prints the JavaScript-shaped part of the tree: programs, blocks, statements,
declarations, control flow, every expression kind, enum and class bodies and
method signatures. Language-specific node kinds (attributes, type specs,
modules, ...) are left to a specializing printer that delegates here for
everything else.

Layout choices follow the usual ESTree pretty-printing conventions:

    - blocks and bodies are always broken, one statement per line, keeping at
      most one blank line where the source had any
    - argument, parameter and array lists break all-or-nothing; arrays of
      numbers fill lines instead
    - binary chains of equal precedence are flattened and break before each
      operand, indented under the first
    - dictionaries stay expanded if the source had a newline after `{`

Parenthesization is derived from the generic operator ranks (the first column
of `BINARY_OP_PRECEDENCE`) plus the usual rules for logical, conditional,
assignment and sequence operands, unary operands, member objects, callees and
object literals at the start of a statement. `ParenthesizedExpression` nodes
inserted by a preprocessor are printed as `(` expression `)`.

Dispatch:
    `print` looks up `print_<snake_case_kind>` on the printer; a kind without a
    method raises `UnsupportedNodeError`.
"""

from __future__ import annotations

import json
import re
from typing import Any

from mcfmt.mcfmt_ast import ASTNode, Comment, get_visitor_keys
from mcfmt.mcfmt_comments import (
    has_dangling_comments,
    is_next_line_empty,
    print_comments,
    print_dangling_comments,
)
from mcfmt.mcfmt_constants import generic_rank
from mcfmt.mcfmt_doc import (
    Doc,
    fill,
    group,
    hardline,
    indent,
    join,
    line,
    softline,
)
from mcfmt.mcfmt_errors import UnsupportedNodeError
from mcfmt.mcfmt_literals import print_number
from mcfmt.mcfmt_options import PrintContext
from mcfmt.mcfmt_path import AstPath
from mcfmt.printers.printer_registry import PrintFn, register_printer

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# generic view of the logical operators, looser than every binary operator
# except `has` (a logical operand of a binary operator always gets parens)
_LOGICAL_RANKS = {"&&": 80, "and": 80, "||": 90, "or": 90}

_BITWISE_OPERATORS = frozenset({"<<", ">>", "&", "|", "^"})
_EQUALITY_OPERATORS = frozenset({"==", "!="})
_MULTIPLICATIVE_OPERATORS = frozenset({"*", "/", "%"})
_SHIFT_OPERATORS = frozenset({"<<", ">>"})

_STATEMENT_TESTS = {
    "IfStatement": "test",
    "WhileStatement": "test",
    "DoWhileStatement": "test",
    "SwitchStatement": "discriminant",
}

# (parent kind, field) pairs where a child prints first in its parent
_LEFTMOST_FIELDS = frozenset(
    {
        ("MemberExpression", "object"),
        ("CallExpression", "callee"),
        ("BinaryExpression", "left"),
        ("LogicalExpression", "left"),
        ("AssignmentExpression", "left"),
        ("ConditionalExpression", "test"),
    }
)

# right-hand sides that never move to their own line after `=`
_KEEP_AFTER_OPERATOR = frozenset(
    {
        "CallExpression",
        "NewExpression",
        "ObjectExpression",
        "ArrayExpression",
        "SizedArrayExpression",
        "Literal",
        "Identifier",
        "ThisExpression",
        "MemberExpression",
        "UnaryExpression",
        "UpdateExpression",
    }
)

_PUNCTUATING_UNARY = frozenset({"!", "~", "-", "+"})


def method_name(kind: str) -> str:
    return "print_" + _CAMEL_BOUNDARY.sub("_", kind).lower()


def rank(operator: str) -> int | None:
    if operator in _LOGICAL_RANKS:
        return _LOGICAL_RANKS[operator]
    return generic_rank(operator)


def is_binaryish(node: Any) -> bool:
    return isinstance(node, ASTNode) and node.kind in (
        "BinaryExpression",
        "LogicalExpression",
    )


def should_flatten(parent_op: str, node_op: str) -> bool:
    """Whether `a <node_op> b <parent_op> c` may print without inner parens."""
    if rank(parent_op) != rank(node_op):
        return False
    # x == y == z --> (x == y) == z
    if parent_op in _EQUALITY_OPERATORS and node_op in _EQUALITY_OPERATORS:
        return False
    # x * y % z --> (x * y) % z
    if (node_op == "%" and parent_op in _MULTIPLICATIVE_OPERATORS) or (
        parent_op == "%" and node_op in _MULTIPLICATIVE_OPERATORS
    ):
        return False
    # x * y / z --> (x * y) / z
    if (
        node_op != parent_op
        and node_op in _MULTIPLICATIVE_OPERATORS
        and parent_op in _MULTIPLICATIVE_OPERATORS
    ):
        return False
    # x << y << z --> (x << y) << z
    if parent_op in _SHIFT_OPERATORS and node_op in _SHIFT_OPERATORS:
        return False
    return True


def _is_numeric(node: ASTNode) -> bool:
    if node.kind == "UnaryExpression" and node.get("operator") in ("-", "+"):
        node = node.get("argument")
    return (
        isinstance(node, ASTNode)
        and node.kind == "Literal"
        and isinstance(node.get("value"), (int, float))
        and not isinstance(node.get("value"), bool)
    )


def _is_nonempty_collection(node: Any) -> bool:
    if not isinstance(node, ASTNode):
        return False
    if node.kind == "ObjectExpression":
        return bool(node.get("properties"))
    if node.kind == "ArrayExpression":
        return bool(node.get("elements"))
    return False


def _is_concisely_printed_array(node: ASTNode) -> bool:
    elements = node.get("elements") or []
    return len(elements) > 1 and all(
        isinstance(e, ASTNode) and _is_numeric(e) for e in elements
    )


def _should_break_array(node: ASTNode) -> bool:
    """Arrays of several multi-entry arrays or dictionaries are always broken."""
    elements = node.get("elements") or []
    if len(elements) < 2:
        return False
    first = elements[0]
    if not isinstance(first, ASTNode) or first.kind not in (
        "ObjectExpression",
        "ArrayExpression",
    ):
        return False
    field = "properties" if first.kind == "ObjectExpression" else "elements"
    return all(
        isinstance(e, ASTNode)
        and e.kind == first.kind
        and len(e.get(field) or []) > 1
        for e in elements
    )


def _should_inline_logical(node: ASTNode) -> bool:
    return node.kind == "LogicalExpression" and _is_nonempty_collection(
        node.get("right")
    )


class EstreePrinter:
    """Prints ESTree-shaped nodes.

    Attributes:
        tag (str): Registry tag, "estree".
    """

    tag = "estree"

    # printer protocol

    def print(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        if node is None:
            return ""
        if isinstance(node, str):
            return node
        method = getattr(self, method_name(node.kind), None)
        if method is None:
            raise UnsupportedNodeError(f"No printer for node kind {node.kind!r}")
        doc = method(path, ctx, print_fn)
        if self.needs_parens(path):
            return ["(", doc, ")"]
        return doc

    def preprocess(self, root: ASTNode, ctx: PrintContext) -> ASTNode:
        return root

    def get_visitor_keys(self, node: ASTNode) -> tuple[str, ...]:
        return get_visitor_keys(node)

    def can_attach_comment(self, node: Any) -> bool:
        return isinstance(node, ASTNode)

    def will_print_own_comments(self, path: AstPath) -> bool:
        return False

    def is_block_comment(self, comment: Comment) -> bool:
        return comment.is_block

    def print_comment(self, comment: Comment) -> Doc:
        if not comment.is_block:
            return "//" + comment.value.rstrip()
        if self._is_indentable_block_comment(comment):
            lines = comment.value.split("\n")
            last = len(lines) - 1
            return [
                "/*",
                join(
                    hardline,
                    [
                        text.rstrip()
                        if i == 0
                        else " " + (text.strip() if i < last else text.lstrip())
                        for i, text in enumerate(lines)
                    ],
                ),
                "*/",
            ]
        return "/*" + comment.value + "*/"

    @staticmethod
    def _is_indentable_block_comment(comment: Comment) -> bool:
        # javadoc-style: every line starts with "*"
        lines = f"*{comment.value}*".split("\n")
        return len(lines) > 1 and all(text.lstrip().startswith("*") for text in lines)

    # parentheses

    def needs_parens(self, path: AstPath) -> bool:
        node = path.node
        parent = path.parent
        if parent is None or not isinstance(node, ASTNode):
            return False
        if path.index is not None and parent.kind in (
            "SequenceExpression",
            "ArrayExpression",
            "Attributes",
        ):
            return False
        kind, parent_kind, key = node.kind, parent.kind, path.key

        if kind == "ObjectExpression":
            return self._starts_statement(path)

        if kind in ("BinaryExpression", "LogicalExpression"):
            if parent_kind == "UnaryExpression":
                return parent.get("operator") in _PUNCTUATING_UNARY
            if parent_kind == "UpdateExpression":
                return True
            if parent_kind == "MemberExpression":
                return key == "object"
            if parent_kind in ("CallExpression", "NewExpression"):
                return key == "callee"
            if kind == "LogicalExpression" and parent_kind == "BinaryExpression":
                # every Monkey C binary operator binds tighter than && and ||
                return True
            if parent_kind in ("BinaryExpression", "LogicalExpression"):
                return self._binary_needs_parens(node, parent, key)
            return False

        if kind == "ConditionalExpression":
            if parent_kind in (
                "BinaryExpression",
                "LogicalExpression",
                "UpdateExpression",
            ):
                return True
            if parent_kind == "UnaryExpression":
                return parent.get("operator") in _PUNCTUATING_UNARY
            if parent_kind == "ConditionalExpression":
                return key == "test"
            if parent_kind == "MemberExpression":
                return key == "object"
            if parent_kind in ("CallExpression", "NewExpression"):
                return key == "callee"
            return False

        if kind == "AssignmentExpression":
            if parent_kind in ("ExpressionStatement", "ForStatement", "SequenceExpression"):
                return False
            if parent_kind == "AssignmentExpression":
                return key != "right"
            return True

        if kind == "SequenceExpression":
            return parent_kind not in (
                "ForStatement",
                "ExpressionStatement",
                "SequenceExpression",
            )

        if kind == "UnaryExpression":
            operator = node.get("operator")
            if operator not in _PUNCTUATING_UNARY:
                return False
            if parent_kind == "UnaryExpression":
                return operator in ("-", "+") and parent.get("operator") == operator
            if parent_kind == "MemberExpression":
                return key == "object"
            if parent_kind in ("CallExpression", "NewExpression"):
                return key == "callee"
            return False

        if kind == "UpdateExpression" and node.get("prefix"):
            if parent_kind == "MemberExpression":
                return key == "object"
            if parent_kind in ("CallExpression", "NewExpression"):
                return key == "callee"
            return False

        if kind == "NewExpression":
            return parent_kind == "CallExpression" and key == "callee"

        if kind == "CallExpression":
            return parent_kind == "NewExpression" and key == "callee"

        return False

    @staticmethod
    def _binary_needs_parens(node: ASTNode, parent: ASTNode, key: str | None) -> bool:
        parent_op = parent.get("operator")
        node_op = node.get("operator")
        parent_rank = rank(parent_op)
        node_rank = rank(node_op)
        if parent_rank is None or node_rank is None:
            return False
        if parent_rank < node_rank:
            return True
        if parent_rank == node_rank and key == "right":
            return True
        if parent_rank == node_rank and not should_flatten(parent_op, node_op):
            return True
        if parent_rank > node_rank and node_op == "%":
            return parent_op in ("+", "-")
        return parent_op in _BITWISE_OPERATORS

    @staticmethod
    def _starts_statement(path: AstPath) -> bool:
        """Whether the current node is the first thing printed in its statement."""
        stack = path.stack
        i = len(stack) - 1
        while i >= 2:
            key, parent = stack[i - 1], stack[i - 2]
            if not isinstance(key, str) or not isinstance(parent, ASTNode):
                return False
            if parent.kind == "ExpressionStatement":
                return True
            if (parent.kind, key) not in _LEFTMOST_FIELDS and not (
                parent.kind == "UpdateExpression" and not parent.get("prefix")
            ):
                return False
            i -= 2
        return False

    # shared layouts

    def print_statement_sequence(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn, field: str = "body"
    ) -> list[Doc]:
        """Statements one per line, keeping single blank lines from the source."""
        parts: list[Doc] = []
        last = len(path.node.get(field) or []) - 1

        def print_one(p: AstPath) -> None:
            parts.append(print_fn())
            if p.index is not None and p.index < last:
                parts.append(hardline)
                if ctx.source and is_next_line_empty(ctx.source, p.node.end):
                    parts.append(hardline)

        path.each(print_one, field)
        return parts

    def print_braced_body(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn, field: str = "body"
    ) -> Doc:
        node = path.node
        if not node.get(field):
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if dangling == "":
                return "{}"
            return ["{", indent([hardline, dangling]), hardline, "}"]
        body = self.print_statement_sequence(path, ctx, print_fn, field)
        return ["{", indent([hardline, body]), hardline, "}"]

    def print_params(self, path: AstPath, print_fn: PrintFn) -> Doc:
        if not path.node.get("params"):
            return "()"
        printed = path.map(print_fn, "params")
        return group(["(", indent([softline, join([",", line], printed)]), softline, ")"])

    def print_call_arguments(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        args = node.get("arguments") or []
        if not args:
            if not has_dangling_comments(node):
                return "()"
            inline = all(
                c.is_block for c in node.comments if not (c.leading or c.trailing)
            )
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if inline:
                return ["(", dangling, ")"]
            return ["(", indent([hardline, dangling]), hardline, ")"]
        printed = path.map(print_fn, "arguments")
        if len(args) == 1 and _is_nonempty_collection(args[0]):
            # hug a sole dictionary or array argument
            return ["(", printed[0], ")"]
        return group(["(", indent([softline, join([",", line], printed)]), softline, ")"])

    @staticmethod
    def print_assignment(
        left: Doc, operator: str, right_node: ASTNode | None, right: Doc
    ) -> Doc:
        if isinstance(right_node, ASTNode) and right_node.kind in _KEEP_AFTER_OPERATOR:
            return group([group(left), operator, " ", right])
        return group([group(left), operator, group(indent([line, right]))])

    @staticmethod
    def print_test_clause(print_fn: PrintFn) -> Doc:
        """The condition between `(` and `)`, indented on its own lines if too long."""
        return group([indent([softline, print_fn("test")]), softline])

    def adjust_clause(self, node: ASTNode | None, clause: Doc, force_space: bool = False) -> Doc:
        if node is None:
            return ";"
        if node.kind == "BlockStatement" or force_space:
            return [" ", clause]
        return indent([line, clause])

    # program and blocks

    def print_program(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        if not node.get("body"):
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            return "" if dangling == "" else [dangling, hardline]
        return [self.print_statement_sequence(path, ctx, print_fn), hardline]

    def print_block_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return self.print_braced_body(path, ctx, print_fn)

    def print_class_body(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        return self.print_braced_body(path, ctx, print_fn)

    # declarations

    def print_variable_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        declarations = node.get("declarations") or []
        printed = path.map(print_fn, "declarations")
        has_value = any(d.get("init") is not None for d in declarations)
        parts: list[Doc] = [
            node.get("kind") or "var",
            " ",
            printed[0] if printed else "",
            indent([[",", hardline if has_value else line, p] for p in printed[1:]]),
        ]
        parent = path.parent
        if not (parent is not None and parent.kind == "ForStatement" and path.key == "init"):
            parts.append(";")
        return group(parts)

    def print_variable_declarator(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        ident = print_fn("id")
        if node.get("init") is None:
            return ident
        return self.print_assignment(ident, " =", node.get("init"), print_fn("init"))

    def print_function_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        signature = group([self.print_params(path, print_fn), print_fn("returnType")])
        parts: list[Doc] = ["function ", print_fn("id"), signature]
        if node.get("body") is None:
            parts.append(";")
        else:
            parts.extend([" ", print_fn("body")])
        return parts

    def print_method_definition(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        key = path.node.get("key")
        key_doc = print_fn("key") if isinstance(key, ASTNode) else (key or "")
        return [key_doc, group([self.print_params(path, print_fn), print_fn("returnType")])]

    def print_class_declaration(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        parts: list[Doc] = ["class ", print_fn("id")]
        if node.get("superClass") is not None:
            parts.extend([" extends ", print_fn("superClass")])
        parts.extend([" ", print_fn("body")])
        return parts

    def print_enum_string_body(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        if not node.get("members"):
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if dangling == "":
                return "{}"
            return ["{", indent([hardline, dangling]), hardline, "}"]
        members = path.map(print_fn, "members")
        return ["{", indent([hardline, join([",", hardline], members)]), hardline, "}"]

    def print_enum_string_member(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        ident = print_fn("id")
        if node.get("init") is None:
            return ident
        return self.print_assignment(ident, " =", node.get("init"), print_fn("init"))

    # statements

    def print_expression_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return [print_fn("expression"), ";"]

    def print_if_statement(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        consequent = node.get("consequent")
        parts: list[Doc] = [
            group(
                [
                    "if (",
                    self.print_test_clause(print_fn),
                    ")",
                    self.adjust_clause(consequent, print_fn("consequent")),
                ]
            )
        ]
        alternate = node.get("alternate")
        if alternate is not None:
            same_line = isinstance(consequent, ASTNode) and consequent.kind == "BlockStatement"
            parts.append(" " if same_line else hardline)
            parts.append(
                [
                    "else",
                    group(
                        self.adjust_clause(
                            alternate,
                            print_fn("alternate"),
                            alternate.kind == "IfStatement",
                        )
                    ),
                ]
            )
        return parts

    def print_while_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        body = path.node.get("body")
        return group(
            [
                "while (",
                self.print_test_clause(print_fn),
                ")",
                self.adjust_clause(body, print_fn("body")),
            ]
        )

    def print_do_while_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        body = path.node.get("body")
        is_block = isinstance(body, ASTNode) and body.kind == "BlockStatement"
        return [
            group(["do", self.adjust_clause(body, print_fn("body"))]),
            " " if is_block else hardline,
            "while (",
            self.print_test_clause(print_fn),
            ");",
        ]

    def print_for_statement(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        body = self.adjust_clause(node.get("body"), print_fn("body"))
        if node.get("init") is None and node.get("test") is None and node.get("update") is None:
            return ["for (;;)", body]
        header = group(
            [
                indent(
                    [
                        softline,
                        print_fn("init"),
                        ";",
                        line,
                        print_fn("test"),
                        ";",
                        line,
                        print_fn("update"),
                    ]
                ),
                softline,
            ]
        )
        return ["for (", header, ")", body]

    def print_switch_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        parts: list[Doc] = [
            group(["switch (", indent([softline, print_fn("discriminant")]), softline, ")"]),
            " {",
        ]
        if node.get("cases"):
            parts.append(indent([hardline, self.print_statement_sequence(path, ctx, print_fn, "cases")]))
        else:
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if dangling != "":
                parts.append(indent([hardline, dangling]))
        parts.extend([hardline, "}"])
        return parts

    def print_switch_case(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        parts: list[Doc] = (
            ["case ", print_fn("test"), ":"] if node.get("test") is not None else ["default:"]
        )
        consequent = node.get("consequent") or []
        if len(consequent) == 1 and consequent[0].kind == "BlockStatement":
            parts.extend([" ", path.call(print_fn, "consequent", 0)])
        elif consequent:
            parts.append(
                indent([hardline, self.print_statement_sequence(path, ctx, print_fn, "consequent")])
            )
        return parts

    def print_try_statement(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        parts: list[Doc] = ["try ", print_fn("block")]
        if node.get("handler") is not None:
            parts.extend([" ", print_fn("handler")])
        if node.get("finalizer") is not None:
            parts.extend([" finally ", print_fn("finalizer")])
        return parts

    def print_catch_clause(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        if path.node.get("param") is None:
            return ["catch ", print_fn("body")]
        return ["catch (", print_fn("param"), ") ", print_fn("body")]

    def print_return_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        if path.node.get("argument") is None:
            return "return;"
        return ["return ", print_fn("argument"), ";"]

    def print_throw_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return ["throw ", print_fn("argument"), ";"]

    def print_break_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return "break;"

    def print_continue_statement(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return "continue;"

    # expressions

    def print_identifier(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        return path.node.get("name")

    def print_this_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return path.node.get("text") or "self"

    def print_literal(self, path: AstPath, ctx: PrintContext, print_fn: PrintFn) -> Doc:
        node = path.node
        value, raw = node.get("value"), node.get("raw")
        if isinstance(value, bool) or value is None:
            return raw or json.dumps(value)
        if isinstance(value, (int, float)):
            return print_number(raw or repr(value))
        return raw or json.dumps(value)

    def print_parenthesized_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return ["(", print_fn("expression"), ")"]

    def print_unary_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        operator = path.node.get("operator")
        space = " " if operator[-1:].isalpha() else ""
        return [operator, space, print_fn("argument")]

    def print_update_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        if node.get("prefix"):
            return [node.get("operator"), print_fn("argument")]
        return [print_fn("argument"), node.get("operator")]

    def _print_binaryish_parts(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn, nested: bool = False
    ) -> list[Doc]:
        node = path.node
        operator = node.get("operator")
        left = node.get("left")
        parts: list[Doc] = []
        if is_binaryish(left) and should_flatten(operator, left.get("operator")):
            # flatten `a + b + c` into one chain
            parts = path.call(
                lambda p: self._print_binaryish_parts(p, ctx, print_fn, nested=True), "left"
            )
        else:
            parts.append(group(print_fn("left")))
        inline = _should_inline_logical(node)
        right: Doc = [operator, " " if inline else line, print_fn("right")]
        parent = path.parent
        right_node = node.get("right")
        should_group = (
            (parent is None or parent.kind != node.kind)
            and not (isinstance(left, ASTNode) and left.kind == node.kind)
            and not (isinstance(right_node, ASTNode) and right_node.kind == node.kind)
        )
        parts.extend([" ", group(right) if should_group else right])
        if nested and node.comments:
            # the chain bypasses the main print callback for flattened operands
            return [print_comments(node, parts, ctx.source, self.print_comment)]
        return parts

    def print_binary_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        parent = path.parent
        parts = self._print_binaryish_parts(path, ctx, print_fn)
        if parent is None:
            return group(parts)
        if _STATEMENT_TESTS.get(parent.kind) == path.key:
            return parts
        if parent.kind == "UnaryExpression" or (
            parent.kind == "ArrayExpression" and path.index is not None
        ):
            return group([indent([softline, parts]), softline])
        grandparent = path.get_parent_node(1)
        should_not_indent = (
            parent.kind in ("ReturnStatement", "ThrowStatement", "ForStatement")
            or (
                parent.kind == "ConditionalExpression"
                and (
                    grandparent is None
                    or grandparent.kind
                    not in ("ReturnStatement", "ThrowStatement", "CallExpression", "NewExpression")
                )
            )
        )
        should_indent_if_inlining = parent.kind in (
            "AssignmentExpression",
            "VariableDeclarator",
            "Property",
            "EnumStringMember",
        )
        left = node.get("left")
        same_precedence_left = is_binaryish(left) and should_flatten(
            node.get("operator"), left.get("operator")
        )
        inline = _should_inline_logical(node)
        if (
            should_not_indent
            or (inline and not same_precedence_left)
            or (not inline and should_indent_if_inlining)
        ):
            return group(parts)
        return group([parts[0], indent(parts[1:])])

    print_logical_expression = print_binary_expression

    def print_assignment_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        return self.print_assignment(
            print_fn("left"), " " + node.get("operator"), node.get("right"), print_fn("right")
        )

    def print_conditional_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return group(
            [
                print_fn("test"),
                indent(
                    [
                        line,
                        "? ",
                        print_fn("consequent"),
                        line,
                        ": ",
                        print_fn("alternate"),
                    ]
                ),
            ]
        )

    def print_sequence_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return group(join([",", line], path.map(print_fn, "expressions")))

    def print_member_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        if path.node.get("computed"):
            return [print_fn("object"), "[", print_fn("property"), "]"]
        return [print_fn("object"), ".", print_fn("property")]

    def print_call_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return [print_fn("callee"), self.print_call_arguments(path, ctx, print_fn)]

    def print_new_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        return ["new ", print_fn("callee"), self.print_call_arguments(path, ctx, print_fn)]

    def print_array_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        elements = node.get("elements") or []
        if not elements:
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if dangling == "":
                return "[]"
            return group(["[", indent([softline, dangling]), softline, "]"], True)
        printed = path.map(print_fn, "elements")
        if _is_concisely_printed_array(node):
            items: list[Doc] = []
            for i, (element, doc) in enumerate(zip(elements, printed)):
                if i == len(printed) - 1:
                    items.append(doc)
                    break
                items.append([doc, ","])
                if ctx.source and is_next_line_empty(ctx.source, element.end):
                    items.append([hardline, hardline])
                else:
                    items.append(line)
            body: Doc = fill(items)
        else:
            body = join([",", line], printed)
        return group(
            ["[", indent([softline, body]), softline, "]"],
            _should_break_array(node),
        )

    def print_object_expression(
        self, path: AstPath, ctx: PrintContext, print_fn: PrintFn
    ) -> Doc:
        node = path.node
        properties = node.get("properties") or []
        if not properties:
            dangling = print_dangling_comments(node, ctx.source, self.print_comment)
            if dangling == "":
                return "{}"
            return ["{", indent([hardline, dangling]), hardline, "}"]
        # keep dictionaries expanded when the source breaks after the brace
        expanded = bool(ctx.source) and "\n" in ctx.source[node.start : properties[0].start]
        printed = path.map(print_fn, "properties")
        return group(
            ["{", indent([line, join([",", line], printed)]), line, "}"],
            expanded,
        )


register_printer(EstreePrinter.tag, EstreePrinter())


__all__ = ["EstreePrinter", "is_binaryish", "method_name", "rank", "should_flatten"]
