"""
Tree cursor handed to printers.

`AstPath` keeps the chain of values from the root down to the node being
printed, interleaved with the field names (or list indices) used to reach
them:

    [Program, "body", [stmt0, stmt1], 1, stmt1, "expression", expr]

Printers never recurse on child nodes directly. They ask the path to descend
(`call`, `map`) so the parent chain stays available to whoever prints the
child, e.g. to decide whether a parenthesized expression may drop its parens.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mcfmt.mcfmt_ast import ASTNode


class AstPath:
    """Cursor over a syntax tree.

    Attributes:
        stack (list): Alternating values and the keys that reached them,
            starting with the root value.
    """

    def __init__(self, root: Any) -> None:
        self.stack: list[Any] = [root]

    @property
    def node(self) -> Any:
        return self.stack[-1]

    @property
    def key(self) -> str | None:
        """The field name under which the current node hangs off its parent node."""
        for i in range(len(self.stack) - 2, 0, -2):
            if isinstance(self.stack[i], str):
                return self.stack[i]
        return None

    @property
    def index(self) -> int | None:
        if len(self.stack) >= 2 and isinstance(self.stack[-2], int):
            return self.stack[-2]
        return None

    @property
    def parent(self) -> ASTNode | None:
        return self.get_parent_node()

    def get_parent_node(self, level: int = 0) -> ASTNode | None:
        """The `level`-th enclosing ASTNode (0 is the direct parent), or None."""
        seen = -1
        for value in reversed(self.stack[:-1]):
            if isinstance(value, ASTNode):
                seen += 1
                if seen == level:
                    return value
        return None

    def _descend(self, name: str | int) -> None:
        current = self.stack[-1]
        if isinstance(name, int):
            value = current[name]
        elif isinstance(current, ASTNode):
            value = current.get(name)
        else:
            value = current[name]
        self.stack.append(name)
        self.stack.append(value)

    def call(self, callback: Callable[[AstPath], Any], *names: str | int) -> Any:
        """Descend along `names`, invoke `callback(self)`, then climb back."""
        depth = len(self.stack)
        try:
            for name in names:
                self._descend(name)
            return callback(self)
        finally:
            del self.stack[depth:]

    def each(self, callback: Callable[[AstPath], Any], *names: str | int) -> None:
        """Invoke `callback` once per element of the list reached through `names`."""
        depth = len(self.stack)
        try:
            for name in names:
                self._descend(name)
            for i in range(len(self.stack[-1] or ())):
                self._descend(i)
                callback(self)
                del self.stack[-2:]
        finally:
            del self.stack[depth:]

    def map(self, callback: Callable[[AstPath], Any], *names: str | int) -> list[Any]:
        results: list[Any] = []
        self.each(lambda path: results.append(callback(path)), *names)
        return results


__all__ = ["AstPath"]
