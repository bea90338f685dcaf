"""
Lexical analyzer for Monkey C.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source span.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace; collects `//` and `/* */` comments into `Lexer.comments`
      instead of emitting them as tokens.
    - Supports longest-match recognition of operators and keywords
    - Recognizes:
        * Identifiers and keywords
        * Numbers (decimal, hex, float/double/long suffixes, exponents)
        * Strings and character literals (with escape sequences)
        * Operators and punctuation

Raises:
    MonkeyCSyntaxError: On unterminated strings, characters or block comments.

Example:
    >>> lexer = Lexer(CharacterStream("var x = 42;"))
    >>> lexer.next_token()
    Token(VAR, var)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
    - token_hashmap
"""

from typing import Any

from mcfmt.mcfmt_ast import Comment
from mcfmt.mcfmt_constants import token_hashmap
from mcfmt.mcfmt_errors import MonkeyCSyntaxError, SourceLocation


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.position)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'NUMBER', 'EOF').
        value (str): The raw source text of the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
        start (int): Offset of the first character.
        end (int): Offset just past the last character.
        end_line (int), end_col (int): Position just past the last character.
    """

    def __init__(
        self,
        type_: str,
        value: str,
        line: int = 0,
        col: int = 0,
        start: int = 0,
        end: int = 0,
        end_line: int = 0,
        end_col: int = 0,
    ):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col
        self.start = start
        self.end = end
        self.end_line = end_line
        self.end_col = end_col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))

    def location(self) -> SourceLocation:
        return SourceLocation(self.line, self.col, self.start)


class Lexer:
    """Lexical analyzer for Monkey C.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        comments (list[Comment]): Every comment seen so far, in source order.
        origin (str | None): Source path used in error messages.
    """

    def __init__(self, stream: CharacterStream, origin: str | None = None) -> None:
        self.stream = stream
        self.comments: list[Comment] = []
        self.origin = origin

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def error(self, message: str, location: SourceLocation) -> MonkeyCSyntaxError:
        return MonkeyCSyntaxError(message, location, self.origin)

    def skip_whitespace(self) -> None:
        """Skips whitespace, recording any comments encountered."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\r\n\f\v\ufeff":
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.read_line_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.read_block_comment()
            else:
                break

    def read_line_comment(self) -> None:
        loc = self.stream.location()
        self.advance()
        self.advance()
        value = ""
        while not self.stream.end_of_file() and self.peek() not in "\r\n":
            value += self.advance()
        self.comments.append(self._comment("Line", value, loc))

    def read_block_comment(self) -> None:
        loc = self.stream.location()
        self.advance()
        self.advance()
        value = ""
        while not (self.peek() == "*" and self.peek(1) == "/"):
            if self.stream.end_of_file():
                raise self.error("Unterminated comment", loc)
            value += self.advance()
        self.advance()
        self.advance()
        self.comments.append(self._comment("Block", value, loc))

    def _comment(self, kind: str, value: str, loc: SourceLocation) -> Comment:
        return Comment(
            kind,
            value,
            start=loc.offset,
            end=self.stream.position,
            line=loc.line,
            col=loc.column,
            end_line=self.stream.line,
            end_col=self.stream.column,
        )

    def make_token(self, type_: str, value: str, loc: SourceLocation) -> Token:
        return Token(
            type_,
            value,
            loc.line,
            loc.column,
            loc.offset,
            self.stream.position,
            self.stream.line,
            self.stream.column,
        )

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position."""
        loc = self.stream.location()
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(3):  # longest punctuator is three characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return self.make_token(token_hashmap[max_token], max_token, loc)

        return None

    def read_number(self) -> Token:
        loc = self.stream.location()
        num = ""
        is_float = False

        if self.peek() == "0" and self.peek(1) in ("x", "X"):
            num += self.advance() + self.advance()
            while self.peek() and self.peek() in "0123456789abcdefABCDEF":
                num += self.advance()
            if len(num) == 2:
                raise self.error("Invalid hex literal", loc)
            if self.peek() in ("l", "L"):
                num += self.advance()
            return self.make_token("NUMBER", num, loc)

        while self.peek().isdigit():
            num += self.advance()
        if self.peek() == "." and self.peek(1).isdigit():
            is_float = True
            num += self.advance()
            while self.peek().isdigit():
                num += self.advance()
        elif self.peek() == "." and num and not self.peek(1).isalpha():
            # "1." is a float, "1.toString()" is a member access
            is_float = True
            num += self.advance()
        if self.peek() in ("e", "E") and (
            self.peek(1).isdigit()
            or (self.peek(1) in ("+", "-") and self.peek(2).isdigit())
        ):
            is_float = True
            num += self.advance()
            if self.peek() in ("+", "-"):
                num += self.advance()
            while self.peek().isdigit():
                num += self.advance()
        suffix = self.peek()
        if suffix in ("f", "F", "d", "D"):
            is_float = True
            num += self.advance()
        elif suffix in ("l", "L") and not is_float:
            num += self.advance()
        if self.peek().isalnum() or self.peek() == "_":
            raise self.error(f"Invalid number literal {num + self.peek()!r}", loc)
        return self.make_token("FLOAT" if is_float else "NUMBER", num, loc)

    def read_quoted(self, quote: str) -> Token:
        loc = self.stream.location()
        raw = self.advance()
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "\\":
                raw += self.advance()
                if not self.stream.end_of_file():
                    raw += self.advance()
            elif ch == quote:
                raw += self.advance()
                return self.make_token("STRING" if quote == '"' else "CHAR", raw, loc)
            elif ch == "\n":
                break
            else:
                raw += self.advance()
        kind = "string" if quote == '"' else "character"
        raise self.error(f"Unterminated {kind} literal", loc)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            MonkeyCSyntaxError: If a malformed token is encountered.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return self.make_token("EOF", "EOF", self.stream.location())

        ch = self.peek()
        loc = self.stream.location()

        # 1. Identifier or keyword
        if ch.isalpha() or ch in "_$":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() in "_$"
            ):
                ident += self.advance()
            if ident in token_hashmap:
                return self.make_token(token_hashmap[ident], ident, loc)
            return self.make_token("IDENT", ident, loc)

        # 2. Number
        if ch.isdigit() or (ch == "." and self.peek(1).isdigit()):
            return self.read_number()

        # 3. String or character
        if ch in ('"', "'"):
            return self.read_quoted(ch)

        # 4. Compound or symbolic operator
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character, reported by the parser
        self.advance()
        return self.make_token("ERROR", ch, loc)


def tokenize(source: str, origin: str | None = None) -> tuple[list[Token], list[Comment]]:
    """Lex `source` completely. The token list always ends with an EOF token."""
    lexer = Lexer(CharacterStream(source), origin)
    tokens = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == "EOF":
            break
    return tokens, lexer.comments


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
