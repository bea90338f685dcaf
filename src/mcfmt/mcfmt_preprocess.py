"""
Parenthesization preprocessor.

The generic ESTree printer decides where parentheses go using JavaScript's
operator precedence. Monkey C disagrees about several operators (`<<` binds as
tightly as `*`, `&` as tightly as `*`, `==` as loosely as `<`, ...), so the
generic printer would drop parentheses that Monkey C needs. Before printing,
this pass wraps exactly those subexpressions in `ParenthesizedExpression`
nodes, which every printer prints verbatim.

It also turns the single-statement bodies of `if`, `while`, `do` and `for`
into one-statement blocks, so braces are always printed.

The input tree is never modified: nodes along a changed path are copied, all
other nodes are shared with the input.
"""

from __future__ import annotations

import logging

from mcfmt.mcfmt_ast import ASTNode, get_visitor_keys
from mcfmt.mcfmt_constants import BINARY_OP_PRECEDENCE

logger = logging.getLogger(__name__)

# Kinds that may stand alone as an expression statement, or as the left
# operand of `as`, without parentheses.
TOP_LEVEL_SAFE = frozenset(
    {
        "ThisExpression",
        "Identifier",
        "SizedArrayExpression",
        "ArrayExpression",
        "Literal",
        "MemberExpression",
        "NewExpression",
        "CallExpression",
        "UnaryExpression",
        "ParenthesizedExpression",
        "AssignmentExpression",
        "UpdateExpression",
    }
)

_BODY_FIELDS = {
    "WhileStatement": "body",
    "DoWhileStatement": "body",
    "ForStatement": "body",
}


def is_top_level_safe(node: ASTNode) -> bool:
    return node.kind in TOP_LEVEL_SAFE


def node_needs_parens(node: ASTNode, parent: ASTNode, key: str | None) -> bool:
    """
    Decide whether `node`, found under `parent.<key>`, must be wrapped.

    Args:
        node: The candidate subexpression.
        parent: The node whose (non-list) field holds `node`.
        key: The name of that field.
    """
    if parent.kind == "ExpressionStatement":
        return not is_top_level_safe(node)

    if parent.kind == "BinaryExpression" and parent.get("operator") == "as":
        if key == "right":
            return False
        return not is_top_level_safe(node)

    if node.kind == "BinaryExpression":
        operator = node.get("operator")
        if parent.kind == "BinaryExpression":
            node_rank = BINARY_OP_PRECEDENCE.get(operator)
            parent_rank = BINARY_OP_PRECEDENCE.get(parent.get("operator"))
            if node_rank is None or parent_rank is None:
                return False
            is_right = key == "right"
            needs_in_source = parent_rank[1] < node_rank[1] or (
                is_right and parent_rank[1] == node_rank[1]
            )
            needs_generically = parent_rank[0] < node_rank[0] or (
                is_right and parent_rank[0] == node_rank[0]
            )
            return needs_in_source and not needs_generically
        if parent.kind == "ConditionalExpression":
            return operator == "as" and key == "test"
        if parent.kind == "LogicalExpression":
            return operator == "as"
        if parent.kind == "MemberExpression":
            return operator == "as" and key == "object"
        if parent.kind in ("NewExpression", "CallExpression"):
            return operator == "as" and key == "callee"
        return False

    if node.kind == "NewExpression":
        return parent.kind == "MemberExpression"

    return False


def wrap_body(statement: ASTNode) -> ASTNode:
    """Return `statement` as a block, wrapping it if it isn't one already."""
    if statement.kind == "BlockStatement":
        return statement
    return ASTNode("BlockStatement", body=[statement]).span_from(statement)


def parenthesize(node: ASTNode) -> ASTNode:
    return ASTNode("ParenthesizedExpression", expression=node).span_from(node)


class Preprocessor:
    """Single-use rewriter; `wrapped` counts the parentheses it inserted."""

    def __init__(self) -> None:
        self.wrapped = 0

    def rewrite(
        self, node: ASTNode, parent: ASTNode | None = None, key: str | None = None
    ) -> ASTNode:
        changes: dict[str, object] = {}
        for name in get_visitor_keys(node):
            value = node.get(name)
            if isinstance(value, ASTNode):
                new_value = self.rewrite(value, node, name)
                if new_value is not value:
                    changes[name] = new_value
            elif isinstance(value, list):
                # list elements are rewritten as if they had no parent
                new_list = [
                    self.rewrite(item) if isinstance(item, ASTNode) else item
                    for item in value
                ]
                if any(a is not b for a, b in zip(new_list, value)):
                    changes[name] = new_list

        if node.kind == "IfStatement":
            consequent = changes.get("consequent", node.get("consequent"))
            if isinstance(consequent, ASTNode):
                wrapped = wrap_body(consequent)
                if wrapped is not consequent:
                    changes["consequent"] = wrapped
            alternate = changes.get("alternate", node.get("alternate"))
            if isinstance(alternate, ASTNode) and alternate.kind != "IfStatement":
                wrapped = wrap_body(alternate)
                if wrapped is not alternate:
                    changes["alternate"] = wrapped
        elif node.kind in _BODY_FIELDS:
            field = _BODY_FIELDS[node.kind]
            body = changes.get(field, node.get(field))
            if isinstance(body, ASTNode):
                wrapped = wrap_body(body)
                if wrapped is not body:
                    changes[field] = wrapped

        if changes:
            node = node.copy(**changes)

        if parent is not None and node_needs_parens(node, parent, key):
            self.wrapped += 1
            return parenthesize(node)
        return node


def preprocess(root: ASTNode) -> ASTNode:
    """Return a rewritten copy of `root`; `root` itself is left untouched."""
    preprocessor = Preprocessor()
    result = preprocessor.rewrite(root)
    logger.debug("Inserted %d parenthesized wrappers", preprocessor.wrapped)
    return result


__all__ = [
    "Preprocessor",
    "TOP_LEVEL_SAFE",
    "is_top_level_safe",
    "node_needs_parens",
    "parenthesize",
    "preprocess",
    "wrap_body",
]
