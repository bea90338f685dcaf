"""
Lexical and operator tables for the Monkey C formatter.

Tables:
    token_hashmap: Maps keywords and punctuators to canonical token types.
        The lexer uses it for longest-match operator recognition and keyword
        detection.
    ACCESS_MODIFIERS: Keywords that may prefix a declaration.
    THIS_KEYWORDS: Spellings of the receiver expression.
    BINARY_OP_PRECEDENCE: Per binary operator, the pair
        `(generic_rank, source_rank)`. Lower ranks bind tighter. The first
        column is what the generic ESTree printer believes, the second is
        what Monkey C actually does.
    LOGICAL_OPERATORS, ASSIGNMENT_OPERATORS: Operator sets used by the parser.
"""

from typing import Final

token_hashmap: dict[str, str] = {
    # declarations
    "module": "MODULE",
    "class": "CLASS",
    "extends": "EXTENDS",
    "function": "FUNCTION",
    "var": "VAR",
    "const": "CONST",
    "enum": "ENUM",
    "typedef": "TYPEDEF",
    "using": "USING",
    "import": "IMPORT",
    "as": "AS",
    # access modifiers
    "static": "ACCESS",
    "private": "ACCESS",
    "protected": "ACCESS",
    "hidden": "ACCESS",
    "public": "ACCESS",
    # statements
    "if": "IF",
    "else": "ELSE",
    "while": "WHILE",
    "do": "DO",
    "for": "FOR",
    "switch": "SWITCH",
    "case": "CASE",
    "default": "DEFAULT",
    "break": "BREAK",
    "continue": "CONTINUE",
    "return": "RETURN",
    "throw": "THROW",
    "try": "TRY",
    "catch": "CATCH",
    "finally": "FINALLY",
    # expressions
    "new": "NEW",
    "instanceof": "INSTANCEOF",
    "has": "HAS",
    "and": "AND",
    "or": "OR",
    "self": "THIS",
    "me": "THIS",
    "true": "LITERAL",
    "false": "LITERAL",
    "null": "LITERAL",
    "NaN": "LITERAL",
    # punctuators
    "{": "LBRACE",
    "}": "RBRACE",
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    ";": "SEMI",
    ",": "COMMA",
    ".": "DOT",
    ":": "COLON",
    "?": "QUESTION",
    "=>": "ARROW",
    "=": "ASSIGN",
    "+=": "ASSIGN",
    "-=": "ASSIGN",
    "*=": "ASSIGN",
    "/=": "ASSIGN",
    "%=": "ASSIGN",
    "&=": "ASSIGN",
    "|=": "ASSIGN",
    "^=": "ASSIGN",
    "<<=": "ASSIGN",
    ">>=": "ASSIGN",
    "++": "UPDATE",
    "--": "UPDATE",
    "&&": "AND",
    "||": "OR",
    "==": "BINOP",
    "!=": "BINOP",
    "<": "LT",
    "<=": "BINOP",
    ">": "GT",
    ">=": "BINOP",
    "<<": "BINOP",
    ">>": "SHR",
    "+": "PLUS",
    "-": "MINUS",
    "*": "BINOP",
    "/": "BINOP",
    "%": "BINOP",
    "&": "BINOP",
    "|": "BINOP",
    "^": "BINOP",
    "!": "BANG",
    "~": "TILDE",
}

ACCESS_MODIFIERS: Final = ("hidden", "private", "protected", "public", "static")

THIS_KEYWORDS: Final = ("self", "me")

LOGICAL_OPERATORS: Final = ("&&", "||", "and", "or")

ASSIGNMENT_OPERATORS: Final = tuple(
    k for k, v in token_hashmap.items() if v == "ASSIGN"
)

# Prettier's JS printer drops parens it doesn't think JS needs, so both
# columns are required to decide when Monkey C needs them anyway.
BINARY_OP_PRECEDENCE: dict[str, tuple[int, int]] = {
    "*": (0, 0),
    "/": (0, 0),
    "%": (0, 0),
    "+": (10, 10),
    "-": (10, 10),
    "<<": (20, 0),
    ">>": (20, 0),
    "<": (30, 30),
    "<=": (30, 30),
    ">": (30, 30),
    ">=": (30, 30),
    "instanceof": (30, 5),
    "has": (99, 5),
    # an "as" under any binary operator always gets parens from us, never
    # from the generic printer
    "as": (-1, 99),
    "==": (40, 30),
    "!=": (40, 30),
    "&": (50, 0),
    "^": (60, 10),
    "|": (70, 10),
}


def source_rank(operator: str) -> int | None:
    entry = BINARY_OP_PRECEDENCE.get(operator)
    return entry[1] if entry else None


def generic_rank(operator: str) -> int | None:
    entry = BINARY_OP_PRECEDENCE.get(operator)
    return entry[0] if entry else None


__all__ = [
    "ACCESS_MODIFIERS",
    "ASSIGNMENT_OPERATORS",
    "BINARY_OP_PRECEDENCE",
    "LOGICAL_OPERATORS",
    "THIS_KEYWORDS",
    "generic_rank",
    "source_rank",
    "token_hashmap",
]
