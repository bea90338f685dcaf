"""
Defines the syntax tree node structure for Monkey C sources.

Classes:
    ASTNode:
        A node in the syntax tree. Every node has a `kind` discriminant
        (ESTree-style names such as "BinaryExpression" or "ClassDeclaration"),
        a character span (`start`, `end`), a line/column span, attached
        comments, and a set of named fields holding child nodes, lists of
        child nodes, or plain values.

    Comment:
        A `//` or `/* */` comment collected by the lexer. Comments live
        outside the tree until `mcfmt_comments.attach_comments` binds each one
        to an owning node.

    ASTDict:
        TypedDict representation used when serializing nodes to JSON.

Functions:
    get_visitor_keys(node): Names of the child-bearing fields, in source order.
    child_nodes(node): The node's direct children, in source order.
    walk(node): Depth-first iteration over a subtree.
    validate_spans(node): Check the span invariant recursively.

Each ASTNode tracks:
    kind (str): The syntactic construct type.
    start (int), end (int): Character offsets into the source, end exclusive.
    line, col, end_line, end_col (int): 1-based line/column span.
    comments (list[Comment]): Comments attached to this node.
    fields (dict[str, Any]): Named children and attributes.

Example:
    node = ASTNode("Identifier", start=0, end=3, name="foo")
    node.name  # "foo"
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, TypedDict

from mcfmt.mcfmt_errors import SpanInvariantError

VISITOR_KEYS: dict[str, tuple[str, ...]] = {
    "Program": ("body",),
    "ModuleDeclaration": ("attrs", "id", "body"),
    "ClassDeclaration": ("attrs", "id", "superClass", "body"),
    "ClassBody": ("body",),
    "ClassElement": ("item",),
    "FunctionDeclaration": ("attrs", "id", "params", "returnType", "body"),
    "MethodDefinition": ("params", "returnType"),
    "VariableDeclaration": ("attrs", "declarations"),
    "VariableDeclarator": ("id", "init"),
    "EnumDeclaration": ("attrs", "id", "body"),
    "EnumStringBody": ("members",),
    "EnumStringMember": ("id", "init"),
    "TypedefDeclaration": ("attrs", "id", "ts"),
    "ImportModule": ("id",),
    "Using": ("id", "as"),
    "AttributeList": ("attributes",),
    "Attributes": ("elements",),
    "BlockStatement": ("body",),
    "ExpressionStatement": ("expression",),
    "IfStatement": ("test", "consequent", "alternate"),
    "WhileStatement": ("test", "body"),
    "DoWhileStatement": ("body", "test"),
    "ForStatement": ("init", "test", "update", "body"),
    "SwitchStatement": ("discriminant", "cases"),
    "SwitchCase": ("test", "consequent"),
    "InstanceOfCase": ("id",),
    "TryStatement": ("block", "handler", "finalizer"),
    "CatchClauses": ("catches",),
    "CatchClause": ("param", "body"),
    "ReturnStatement": ("argument",),
    "ThrowStatement": ("argument",),
    "BreakStatement": (),
    "ContinueStatement": (),
    "Identifier": (),
    "Literal": (),
    "ThisExpression": (),
    "UnaryExpression": ("argument",),
    "UpdateExpression": ("argument",),
    "BinaryExpression": ("left", "right"),
    "LogicalExpression": ("left", "right"),
    "AssignmentExpression": ("left", "right"),
    "MemberExpression": ("object", "property"),
    "CallExpression": ("callee", "arguments"),
    "NewExpression": ("callee", "arguments"),
    "ConditionalExpression": ("test", "consequent", "alternate"),
    "SequenceExpression": ("expressions",),
    "ArrayExpression": ("elements",),
    "SizedArrayExpression": ("ts", "size"),
    "ObjectExpression": ("properties",),
    "Property": ("key", "value"),
    "ParenthesizedExpression": ("expression",),
    "TypeSpecList": ("ts",),
    "TypeSpecPart": ("name", "generics", "callspec"),
}


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        type (str): The node kind, under its ESTree name. A `kind` key, if
            present, is the node's own `kind` field ("var", "init", ...).
        start (int), end (int): Character span.
        loc (dict): `{"start": {"line", "column"}, "end": {"line", "column"}}`.
        comments (list[dict]): Serialized comments (root node only).
    Any other key is a node field, serialized recursively.
    """

    type: str
    start: int
    end: int
    loc: dict[str, dict[str, int]]
    comments: list[dict[str, Any]]


class Comment:
    """A source comment.

    Attributes:
        kind (str): "Line" for `//` comments, "Block" for `/* */` comments.
        value (str): The comment text without its delimiters.
        start (int), end (int): Character span including delimiters.
        line, col, end_line, end_col (int): Line/column span.
        leading (bool), trailing (bool): Placement relative to the owner, set
            by the comment attacher. Neither set means dangling.
        breaks_after (bool): Whether printing this comment must be followed
            by a line break.
        printed (bool): Set once the printer has emitted the comment.
    """

    def __init__(
        self,
        kind: str,
        value: str,
        start: int = 0,
        end: int = 0,
        line: int = 0,
        col: int = 0,
        end_line: int = 0,
        end_col: int = 0,
    ) -> None:
        self.kind = kind
        self.value = value
        self.start = start
        self.end = end
        self.line = line
        self.col = col
        self.end_line = end_line
        self.end_col = end_col
        self.leading = False
        self.trailing = False
        self.breaks_after = kind == "Line"
        self.printed = False

    @property
    def is_block(self) -> bool:
        return self.kind == "Block"

    @property
    def text(self) -> str:
        return f"/*{self.value}*/" if self.is_block else f"//{self.value}"

    def __repr__(self) -> str:
        return f"Comment({self.kind}, {self.value!r}, {self.start}-{self.end})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Comment)
            and self.kind == other.kind
            and self.value == other.value
            and self.start == other.start
            and self.end == other.end
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.start, self.end))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "value": self.value,
            "start": self.start,
            "end": self.end,
            "loc": {
                "start": {"line": self.line, "column": self.col},
                "end": {"line": self.end_line, "column": self.end_col},
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        loc = data.get("loc") or {}
        first = loc.get("start") or {}
        last = loc.get("end") or {}
        return cls(
            data.get("type") or data.get("kind") or "Line",
            data.get("value", ""),
            start=data.get("start", 0),
            end=data.get("end", 0),
            line=first.get("line", 0),
            col=first.get("column", 0),
            end_line=last.get("line", 0),
            end_col=last.get("column", 0),
        )


class ASTNode:
    """
    Represents a node in the Monkey C syntax tree.

    Args:
        kind (str): The node kind (e.g., "IfStatement", "Literal").
        start (int): Offset of the node's first character.
        end (int): Offset just past the node's last character.
        line (int): Line of the first character (default 0 for synthetic nodes).
        col (int): Column of the first character.
        end_line (int): Line of the last character.
        end_col (int): Column just past the last character.
        **fields: Named children and attributes (e.g. `left=`, `operator=`).

    Methods:
        get(name, default): Field lookup with a default.
        copy(**changes): Shallow copy with some fields replaced.
        span_from(other): Copy another node's span onto this one.
        to_dict() / from_dict(): JSON-friendly conversion.
    """

    def __init__(
        self,
        kind: str,
        /,
        start: int = 0,
        end: int = 0,
        line: int = 0,
        col: int = 0,
        end_line: int = 0,
        end_col: int = 0,
        **fields: Any,
    ) -> None:
        # `kind` is positional-only: declarations and properties have a
        # `kind` field of their own ("var", "const", "init", ...)
        self.kind = kind
        self.start = start
        self.end = end
        self.line = line
        self.col = col
        self.end_line = end_line
        self.end_col = end_col
        self.comments: list[Comment] = []
        self.fields: dict[str, Any] = fields

    def __getattr__(self, name: str) -> Any:
        # only reached when regular attribute lookup fails
        if name == "fields" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self.fields[name]
        except KeyError:
            raise AttributeError(
                f"{self.kind} node has no field {name!r}"
            ) from None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def copy(self, **changes: Any) -> ASTNode:
        node = ASTNode(
            self.kind,
            self.start,
            self.end,
            self.line,
            self.col,
            self.end_line,
            self.end_col,
            **{**self.fields, **changes},
        )
        node.comments = list(self.comments)
        return node

    def span_from(self, other: ASTNode) -> ASTNode:
        self.start, self.end = other.start, other.end
        self.line, self.col = other.line, other.col
        self.end_line, self.end_col = other.end_line, other.end_col
        return self

    def __repr__(self) -> str:
        parts = [self.kind]
        for key, value in self.fields.items():
            if value is None:
                continue
            if isinstance(value, list):
                preview = ", ".join(repr(v) for v in value[:3])
                if len(value) > 3:
                    preview += ", ..."
                parts.append(f"{key}=[{preview}]")
            else:
                parts.append(f"{key}={value!r}")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.start == other.start
            and self.end == other.end
            and self.fields == other.fields
        )

    def to_dict(self) -> ASTDict:
        def convert(value: Any) -> Any:
            if isinstance(value, ASTNode):
                return value.to_dict()
            if isinstance(value, list):
                return [convert(v) for v in value]
            return value

        data: dict[str, Any] = {
            "type": self.kind,
            "start": self.start,
            "end": self.end,
            "loc": {
                "start": {"line": self.line, "column": self.col},
                "end": {"line": self.end_line, "column": self.end_col},
            },
        }
        for key, value in self.fields.items():
            data[key] = convert(value)
        return data  # type: ignore[return-value]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ASTNode:
        """Rebuild a tree from `to_dict` output (or any ESTree-shaped dict)."""

        def convert(value: Any) -> Any:
            if isinstance(value, dict) and "type" in value:
                return cls.from_dict(value)
            if isinstance(value, list):
                return [convert(v) for v in value]
            return value

        kind = data.get("type")
        if not isinstance(kind, str):
            raise ValueError(f"Node dictionary without a type: {sorted(data)}")
        loc = data.get("loc") or {}
        first = loc.get("start") or {}
        last = loc.get("end") or {}
        fields = {
            key: convert(value)
            for key, value in data.items()
            if key not in ("type", "start", "end", "loc", "range", "comments")
        }
        return cls(
            kind,
            data.get("start") or 0,
            data.get("end") or 0,
            first.get("line", 0),
            first.get("column", 0),
            last.get("line", 0),
            last.get("column", 0),
            **fields,
        )


def get_visitor_keys(node: ASTNode) -> tuple[str, ...]:
    """Return the child-bearing fields of `node`, in source order."""
    keys = VISITOR_KEYS.get(node.kind)
    if keys is not None:
        return keys
    # unknown kinds (e.g. injected through JSON): every field holding nodes
    return tuple(
        key
        for key, value in node.fields.items()
        if isinstance(value, ASTNode)
        or (isinstance(value, list) and any(isinstance(v, ASTNode) for v in value))
    )


def child_nodes(node: ASTNode) -> list[ASTNode]:
    children: list[ASTNode] = []
    for key in get_visitor_keys(node):
        value = node.get(key)
        if isinstance(value, ASTNode):
            children.append(value)
        elif isinstance(value, list):
            children.extend(v for v in value if isinstance(v, ASTNode))
    return children


def walk(node: ASTNode) -> Iterator[ASTNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(child_nodes(current)))


def validate_spans(node: ASTNode) -> None:
    """
    Check that every child lies inside its parent, and that siblings are
    ordered and disjoint.

    Raises:
        SpanInvariantError: On the first violation found.
    """
    previous: ASTNode | None = None
    for child in child_nodes(node):
        if child.start < node.start or child.end > node.end:
            raise SpanInvariantError(
                f"{child.kind} [{child.start}, {child.end}) escapes its parent "
                f"{node.kind} [{node.start}, {node.end})"
            )
        if previous is not None and child.start < previous.end:
            raise SpanInvariantError(
                f"{child.kind} [{child.start}, {child.end}) overlaps or precedes "
                f"its sibling {previous.kind} [{previous.start}, {previous.end})"
            )
        validate_spans(child)
        previous = child


__all__ = [
    "ASTDict",
    "ASTNode",
    "Comment",
    "VISITOR_KEYS",
    "child_nodes",
    "get_visitor_keys",
    "validate_spans",
    "walk",
]
