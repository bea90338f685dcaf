"""Formatting options and parser start rules."""

from dataclasses import dataclass, replace
from enum import StrEnum


class StartRule(StrEnum):
    """Grammar entry point used by the parser."""

    PROGRAM = "Program"
    SINGLE_EXPRESSION = "SingleExpression"
    ALTERNATE_GRAMMAR = "AlternateGrammar"


@dataclass(frozen=True, slots=True)
class FormatOptions:
    """Settings shared by the parser, the printers and the renderer.

    Attributes:
        print_width: Target maximum line width.
        tab_width: Columns added per indentation level.
        start_rule: Which grammar entry point to parse with.
        alternate_grammar_param: For `AlternateGrammar`, either "statements"
            (the default) or "class".
        origin_path: Path of the file being formatted, used in diagnostics.
    """

    print_width: int = 80
    tab_width: int = 4
    start_rule: StartRule = StartRule.PROGRAM
    alternate_grammar_param: str | None = None
    origin_path: str | None = None

    def __post_init__(self) -> None:
        if self.print_width < 1:
            raise ValueError(f"print_width must be positive, got {self.print_width}")
        if self.tab_width < 0:
            raise ValueError(f"tab_width must not be negative, got {self.tab_width}")

    def with_origin(self, origin_path: str | None) -> "FormatOptions":
        return replace(self, origin_path=origin_path)


@dataclass(frozen=True, slots=True)
class PrintContext:
    """What a printer may consult besides the tree: options and source text.

    `source` is empty when the tree did not come with its original text; no
    comments are attached in that case.
    """

    options: FormatOptions
    source: str = ""


__all__ = ["FormatOptions", "PrintContext", "StartRule"]
