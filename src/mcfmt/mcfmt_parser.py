"""
Monkey C Parser

Parses Monkey C source tokens into an ESTree-shaped syntax tree of `ASTNode`s.

This module implements a recursive-descent parser over the token list produced
by `mcfmt_lexer`. Every node records its character span and line/column span
so the printer, the comment attacher and external tools can map nodes back to
source ranges.

Supported Constructs
--------------------
- Declarations:
    * `module`, `class ... extends ...`, `function`, `var`/`const`, `enum`, `typedef`
    * `using X.Y as Z;`, `import X.Y;`
    * Attribute lists: `(:test, debug(1))` followed by access modifiers
      (`static`, `private`, `protected`, `hidden`, `public`)

- Statements:
    * Blocks, `if`/`else`, `while`, `do ... while`, `for`
    * `switch` with `case expr:`, `case instanceof T:` and `default:`
    * `try`/`catch (e instanceof T)`/`finally`
    * `return`, `break`, `continue`, `throw`, expression statements

- Expressions:
    * Monkey C operator precedence, including `instanceof`, `has` and `as`
    * Symbols (`:foo`), byte arrays (`[1, 2]b`), dictionaries (`{k => v}`)
    * `new T(...)`, sized arrays (`new [n]`, `new Array<Number>[n]`)

- Type specs:
    * `A or B`, generics `Array<Number>`, nullable `Number?`,
      callable types `(Method(a as Number) as Void)`

Parser Behavior
---------------
- Fail-fast: raises `MonkeyCSyntaxError` on the first malformed construct.
- Source parentheses are not kept in the tree; the printer re-derives them.

Entry Points
------------
- `parse(source, options)`: Parse according to `options.start_rule`.
- `Parser.parse_program()`: Parse a full compilation unit.
- `Parser.parse_single_expression()`: Parse exactly one expression.
- `Parser.parse_fragment(param)`: Parse a statement or class-member fragment.

Raises
------
MonkeyCSyntaxError
    Raised when malformed input is encountered, unexpected tokens appear,
    or grammar rules are violated.
"""

from __future__ import annotations

from typing import Any

from mcfmt.mcfmt_ast import ASTNode, Comment
from mcfmt.mcfmt_constants import THIS_KEYWORDS, source_rank
from mcfmt.mcfmt_errors import MonkeyCSyntaxError
from mcfmt.mcfmt_lexer import Token, tokenize
from mcfmt.mcfmt_options import FormatOptions, StartRule

Span = Token | ASTNode

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

# tokens that may legally follow a complete type, used to tell `Number?`
# apart from `x as Number ? a : b`
_AFTER_TYPE = {
    "RPAREN",
    "COMMA",
    "SEMI",
    "ASSIGN",
    "LBRACE",
    "RBRACE",
    "RBRACK",
    "GT",
    "SHR",
    "QUESTION",
    "EOF",
}


def _unescape(body: str) -> str:
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(_ESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def literal_value(tok: Token) -> Any:
    """Compute the runtime value of a literal token from its raw text."""
    raw = tok.value
    if tok.type == "NUMBER":
        digits = raw[:-1] if raw[-1] in "lL" else raw
        if digits[:2] in ("0x", "0X"):
            return int(digits, 16)
        return int(digits, 10)
    if tok.type == "FLOAT":
        digits = raw[:-1] if raw[-1] in "fFdD" else raw
        return float(digits)
    if tok.type in ("STRING", "CHAR"):
        return _unescape(raw[1:-1])
    return {"true": True, "false": False, "null": None, "NaN": float("nan")}[raw]


class Parser:
    """
    Monkey C Parser Class

    Responsible for transforming a list of lexical tokens into a syntax tree
    rooted at a `Program` node (or at an expression for the single-expression
    entry point).

    Attributes
    ----------
    tokens : list[Token]
        The input token stream, terminated by an EOF token.
    position : int
        Current index into the token stream.
    last : Token | None
        The most recently consumed token; node spans end at it.
    source : str
        The original text, used for the `Program` span.
    origin : str | None
        Source path for error messages.

    Raises
    ------
    MonkeyCSyntaxError
        When an invalid construct or malformed syntax is encountered during parsing.
    """

    def __init__(
        self, tokens: list[Token], source: str = "", origin: str | None = None
    ) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.last: Token | None = None
        self.source = source
        self.origin = origin

    # token helpers

    def current(self) -> Token:
        return self.tokens[self.position]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.current()
        if tok.type != "EOF":
            self.position += 1
        self.last = tok
        return tok

    def at(self, *types: str) -> bool:
        return self.current().type in types

    def at_value(self, type_: str, value: str) -> bool:
        tok = self.current()
        return tok.type == type_ and tok.value == value

    def match(self, *types: str, strict: bool = True) -> Token | None:
        tok = self.current()
        if tok.type in types:
            return self.advance()
        if strict:
            raise self.error(f"Expected one of {types}, got {tok}", tok)
        return None

    def expect(self, type_: str, what: str) -> Token:
        tok = self.current()
        if tok.type != type_:
            found = "end of input" if tok.type == "EOF" else repr(tok.value)
            raise self.error(f"Expected {what}, found {found}", tok)
        return self.advance()

    def error(self, message: str, tok: Token) -> MonkeyCSyntaxError:
        return MonkeyCSyntaxError(message, tok.location(), self.origin)

    def finish(self, kind: str, first: Span, /, **fields: Any) -> ASTNode:
        """Build a node spanning from `first` to the last consumed token."""
        last = self.last if self.last is not None else first
        return ASTNode(
            kind,
            first.start,
            last.end,
            first.line,
            first.col,
            last.end_line,
            last.end_col,
            **fields,
        )

    def spanning(
        self, kind: str, first: Span, last: Span, /, **fields: Any
    ) -> ASTNode:
        return ASTNode(
            kind,
            first.start,
            last.end,
            first.line,
            first.col,
            last.end_line,
            last.end_col,
            **fields,
        )

    # entry points

    def parse_program(self) -> ASTNode:
        """Parse a complete compilation unit."""
        body: list[ASTNode] = []
        while not self.at("EOF"):
            body.append(self.parse_top_level())
        return self._program(body)

    def parse_single_expression(self) -> ASTNode:
        """Parse exactly one expression, followed by end of input."""
        expr = self.parse_expression()
        self.expect("EOF", "end of input")
        return expr

    def parse_fragment(self, param: str | None) -> ASTNode:
        """Parse a bare list of statements (default) or class members (`class`)."""
        kind = param or "statements"
        if kind not in ("statements", "class"):
            raise ValueError(f"Unknown alternate grammar parameter: {param!r}")
        body: list[ASTNode] = []
        while not self.at("EOF"):
            if kind == "class":
                body.append(self.parse_class_element())
            else:
                body.append(self.parse_statement())
        return self._program(body)

    def _program(self, body: list[ASTNode]) -> ASTNode:
        eof = self.current()
        lines = self.source.split("\n")
        return ASTNode(
            "Program",
            0,
            max(len(self.source), eof.end),
            1,
            1,
            len(lines),
            len(lines[-1]) + 1,
            body=body,
        )

    # declarations

    def parse_top_level(self) -> ASTNode:
        if self.at("USING"):
            return self.parse_using()
        if self.at("IMPORT"):
            return self.parse_import()
        return self.parse_declaration(allow_module=True)

    def parse_using(self) -> ASTNode:
        """Parse `using A.B [as C];`."""
        first = self.advance()
        name = self.parse_scoped_name()
        alias = None
        if self.match("AS", strict=False):
            alias = self.parse_identifier()
        self.expect("SEMI", "';' after using")
        return self.finish("Using", first, id=name, **{"as": alias})

    def parse_import(self) -> ASTNode:
        """Parse `import A.B;`."""
        first = self.advance()
        name = self.parse_scoped_name()
        self.expect("SEMI", "';' after import")
        return self.finish("ImportModule", first, id=name)

    def parse_attribute_list(self) -> ASTNode | None:
        """Parse an optional `(attr, ...)` list followed by access modifiers."""
        first = self.current()
        attributes = None
        if self.at("LPAREN"):
            open_tok = self.advance()
            elements: list[ASTNode] = []
            while not self.at("RPAREN"):
                elements.append(self.parse_postfix())
                if not self.match("COMMA", strict=False):
                    break
            self.expect("RPAREN", "')' to close the attribute list")
            attributes = self.finish("Attributes", open_tok, elements=elements)
        access: list[str] = []
        while self.at("ACCESS"):
            access.append(self.advance().value)
        if attributes is None and not access:
            return None
        return self.finish(
            "AttributeList", first, attributes=attributes, access=access or None
        )

    def parse_declaration(self, allow_module: bool = False) -> ASTNode:
        """Parse one declaration, including its attribute list."""
        attrs = self.parse_attribute_list()
        tok = self.current()
        first: Span = attrs if attrs is not None else tok
        if tok.type == "MODULE" and allow_module:
            return self.parse_module(first, attrs)
        if tok.type == "CLASS":
            return self.parse_class(first, attrs)
        if tok.type == "FUNCTION":
            return self.parse_function(first, attrs)
        if tok.type in ("VAR", "CONST"):
            decl = self.parse_variable_declaration(first, attrs)
            self.expect("SEMI", "';' after variable declaration")
            return self.finish("VariableDeclaration", first, **decl.fields)
        if tok.type == "ENUM":
            return self.parse_enum(first, attrs)
        if tok.type == "TYPEDEF":
            return self.parse_typedef(first, attrs)
        raise self.error(f"Expected a declaration, found {tok.value!r}", tok)

    def parse_module(self, first: Span, attrs: ASTNode | None) -> ASTNode:
        """Parse `module Name { declarations }`."""
        self.advance()
        name = self.parse_identifier()
        open_tok = self.expect("LBRACE", "'{' to open the module body")
        body: list[ASTNode] = []
        while not self.at("RBRACE"):
            if self.at("EOF"):
                raise self.error("Expected closing '}', got EOF", self.current())
            body.append(self.parse_top_level())
        self.advance()
        block = self.finish("BlockStatement", open_tok, body=body)
        return self.finish("ModuleDeclaration", first, attrs=attrs, id=name, body=block)

    def parse_class(self, first: Span, attrs: ASTNode | None) -> ASTNode:
        """Parse `class Name [extends Base] { members }`."""
        self.advance()
        name = self.parse_identifier()
        super_class = None
        if self.match("EXTENDS", strict=False):
            super_class = self.parse_scoped_name()
        open_tok = self.expect("LBRACE", "'{' to open the class body")
        members: list[ASTNode] = []
        while not self.at("RBRACE"):
            if self.at("EOF"):
                raise self.error("Expected closing '}', got EOF", self.current())
            members.append(self.parse_class_element())
        self.advance()
        body = self.finish("ClassBody", open_tok, body=members)
        return self.finish(
            "ClassDeclaration",
            first,
            attrs=attrs,
            id=name,
            superClass=super_class,
            body=body,
        )

    def parse_class_element(self) -> ASTNode:
        item = self.parse_declaration()
        return self.spanning("ClassElement", item, item, item=item)

    def parse_function(self, first: Span, attrs: ASTNode | None) -> ASTNode:
        """Parse a function with typed parameters, return type and body."""
        self.advance()
        name = self.parse_identifier()
        params = self.parse_params()
        return_type = self.parse_optional_return_type()
        body = None
        if not self.match("SEMI", strict=False):
            body = self.parse_block()
        return self.finish(
            "FunctionDeclaration",
            first,
            attrs=attrs,
            id=name,
            params=params,
            returnType=return_type,
            body=body,
        )

    def parse_params(self) -> list[ASTNode]:
        self.expect("LPAREN", "'(' to open the parameter list")
        params: list[ASTNode] = []
        while not self.at("RPAREN"):
            params.append(self.parse_typed_identifier())
            if not self.match("COMMA", strict=False):
                break
        self.expect("RPAREN", "')' to close the parameter list")
        return params

    def parse_typed_identifier(self) -> ASTNode:
        ident = self.parse_identifier()
        if self.match("AS", strict=False):
            ts = self.parse_type_spec_list()
            return self.finish(
                "BinaryExpression", ident, operator="as", left=ident, right=ts
            )
        return ident

    def parse_optional_return_type(self) -> ASTNode | None:
        if not self.at("AS"):
            return None
        as_tok = self.advance()
        ts = self.parse_type_spec_list()
        return self.finish(
            "UnaryExpression", as_tok, operator=" as", argument=ts, prefix=True
        )

    def parse_variable_declaration(
        self, first: Span, attrs: ASTNode | None = None
    ) -> ASTNode:
        """Parse `var a as T = x, b` (without the terminating semicolon)."""
        kind = self.advance().value
        declarations: list[ASTNode] = []
        while True:
            ident = self.parse_typed_identifier()
            init = None
            if self.at_value("ASSIGN", "="):
                self.advance()
                init = self.parse_assignment()
            declarations.append(
                self.finish("VariableDeclarator", ident, id=ident, init=init, kind=kind)
            )
            if not self.match("COMMA", strict=False):
                break
        return self.finish(
            "VariableDeclaration",
            first,
            attrs=attrs,
            declarations=declarations,
            kind=kind,
        )

    def parse_enum(self, first: Span, attrs: ASTNode | None) -> ASTNode:
        """Parse `enum [Name] { A, B = expr }`."""
        self.advance()
        name = self.parse_identifier() if self.at("IDENT") else None
        open_tok = self.expect("LBRACE", "'{' to open the enum body")
        members: list[ASTNode] = []
        while not self.at("RBRACE"):
            ident = self.parse_identifier()
            if self.at_value("ASSIGN", "="):
                self.advance()
                init = self.parse_assignment()
                members.append(
                    self.finish("EnumStringMember", ident, id=ident, init=init)
                )
            else:
                members.append(ident)
            if not self.match("COMMA", strict=False):
                break
        self.expect("RBRACE", "'}' to close the enum body")
        body = self.finish("EnumStringBody", open_tok, members=members)
        node = self.finish("EnumDeclaration", first, attrs=attrs, id=name, body=body)
        self.match("SEMI", strict=False)
        return node

    def parse_typedef(self, first: Span, attrs: ASTNode | None) -> ASTNode:
        """Parse `typedef Name as TypeSpec;`."""
        self.advance()
        name = self.parse_identifier()
        ts = self.parse_optional_return_type()
        if ts is None:
            raise self.error("Expected 'as' in typedef", self.current())
        self.expect("SEMI", "';' after typedef")
        return self.finish("TypedefDeclaration", first, attrs=attrs, id=name, ts=ts)

    # type specs

    def parse_type_spec_list(self) -> ASTNode:
        """Parse `T1 or T2 or ...`."""
        first = self.current()
        parts = [self.parse_single_type_spec()]
        while self.at_value("OR", "or"):
            self.advance()
            parts.append(self.parse_single_type_spec())
        return self.finish("TypeSpecList", first, ts=parts)

    def parse_single_type_spec(self) -> ASTNode:
        first = self.current()
        if first.type == "LPAREN" and self.peek().value == "Method":
            self.advance()
            name = self.parse_identifier()
            callspec_first = self.current()
            params = self.parse_params()
            return_type = self.parse_optional_return_type()
            callspec = self.finish(
                "MethodDefinition",
                callspec_first,
                kind="method",
                key="",
                params=params,
                returnType=return_type,
            )
            self.expect("RPAREN", "')' to close the callable type")
            part = self.finish("TypeSpecPart", first, name=name, callspec=callspec)
        elif first.type == "LBRACE":
            raise self.error("Dictionary type specs are not supported", first)
        else:
            name = self.parse_scoped_name()
            generics = self.parse_optional_generics()
            part = self.finish("TypeSpecPart", first, name=name, generics=generics)
        if self.at("QUESTION") and self.peek().type in _AFTER_TYPE:
            self.advance()
            part = self.finish("TypeSpecPart", first, **{**part.fields, "nullable": True})
        return part

    def parse_optional_generics(self) -> list[ASTNode] | None:
        if not self.at("LT"):
            return None
        self.advance()
        generics = [self.parse_type_spec_list()]
        while self.match("COMMA", strict=False):
            generics.append(self.parse_type_spec_list())
        self.close_angle()
        return generics

    def close_angle(self) -> None:
        tok = self.current()
        if tok.type == "GT":
            self.advance()
            return
        if tok.type == "SHR":
            # `Array<Array<Number>>`: consume one '>' and leave the other
            first_half = Token(
                "GT", ">", tok.line, tok.col, tok.start, tok.start + 1, tok.line, tok.col + 1
            )
            self.tokens[self.position] = Token(
                "GT",
                ">",
                tok.line,
                tok.col + 1,
                tok.start + 1,
                tok.end,
                tok.end_line,
                tok.end_col,
            )
            self.last = first_half
            return
        raise self.error("Expected '>' to close the generic argument list", tok)

    # statements

    def parse_block(self) -> ASTNode:
        """Parse a `{}`-enclosed block of statements."""
        open_tok = self.expect("LBRACE", "'{'")
        body: list[ASTNode] = []
        while not self.at("RBRACE"):
            if self.at("EOF"):
                raise self.error("Expected closing '}', got EOF", self.current())
            body.append(self.parse_statement())
        self.advance()
        return self.finish("BlockStatement", open_tok, body=body)

    def parse_statement(self) -> ASTNode:
        """Parse a single statement."""
        tok = self.current()
        handler = {
            "LBRACE": self.parse_block,
            "IF": self.parse_if,
            "WHILE": self.parse_while,
            "DO": self.parse_do_while,
            "FOR": self.parse_for,
            "SWITCH": self.parse_switch,
            "TRY": self.parse_try,
            "RETURN": self.parse_return,
            "THROW": self.parse_throw,
            "BREAK": self.parse_jump,
            "CONTINUE": self.parse_jump,
        }.get(tok.type)
        if handler is not None:
            return handler()
        if tok.type in ("VAR", "CONST"):
            decl = self.parse_variable_declaration(tok)
            self.expect("SEMI", "';' after variable declaration")
            return self.finish("VariableDeclaration", tok, **decl.fields)
        expr = self.parse_expression()
        self.expect("SEMI", "';' after expression")
        return self.finish("ExpressionStatement", tok, expression=expr)

    def parse_paren_test(self) -> ASTNode:
        self.expect("LPAREN", "'('")
        test = self.parse_expression()
        self.expect("RPAREN", "')'")
        return test

    def parse_if(self) -> ASTNode:
        """Parse an if statement with optional else branch."""
        first = self.advance()
        test = self.parse_paren_test()
        consequent = self.parse_statement()
        alternate = None
        if self.match("ELSE", strict=False):
            alternate = self.parse_statement()
        return self.finish(
            "IfStatement", first, test=test, consequent=consequent, alternate=alternate
        )

    def parse_while(self) -> ASTNode:
        first = self.advance()
        test = self.parse_paren_test()
        body = self.parse_statement()
        return self.finish("WhileStatement", first, test=test, body=body)

    def parse_do_while(self) -> ASTNode:
        first = self.advance()
        body = self.parse_statement()
        self.expect("WHILE", "'while' after do body")
        test = self.parse_paren_test()
        self.expect("SEMI", "';' after do-while")
        return self.finish("DoWhileStatement", first, body=body, test=test)

    def parse_for(self) -> ASTNode:
        """Parse `for (init; test; update) body`."""
        first = self.advance()
        self.expect("LPAREN", "'(' after for")
        init = None
        if self.at("VAR"):
            init = self.parse_variable_declaration(self.current())
        elif not self.at("SEMI"):
            init = self.parse_sequence()
        self.expect("SEMI", "';' after for initializer")
        test = None if self.at("SEMI") else self.parse_expression()
        self.expect("SEMI", "';' after for test")
        update = None if self.at("RPAREN") else self.parse_sequence()
        self.expect("RPAREN", "')' to close for header")
        body = self.parse_statement()
        return self.finish(
            "ForStatement", first, init=init, test=test, update=update, body=body
        )

    def parse_switch(self) -> ASTNode:
        """Parse a switch statement and its cases."""
        first = self.advance()
        discriminant = self.parse_paren_test()
        self.expect("LBRACE", "'{' to open the switch body")
        cases: list[ASTNode] = []
        while not self.at("RBRACE"):
            case_tok = self.current()
            if case_tok.type == "CASE":
                self.advance()
                if self.at("INSTANCEOF"):
                    inst_tok = self.advance()
                    name = self.parse_scoped_name()
                    test: ASTNode | None = self.finish(
                        "InstanceOfCase", inst_tok, id=name
                    )
                else:
                    test = self.parse_expression()
            elif case_tok.type == "DEFAULT":
                self.advance()
                test = None
            else:
                raise self.error("Expected 'case' or 'default'", case_tok)
            self.expect("COLON", "':' after case label")
            consequent: list[ASTNode] = []
            while not self.at("CASE", "DEFAULT", "RBRACE", "EOF"):
                consequent.append(self.parse_statement())
            cases.append(
                self.finish("SwitchCase", case_tok, test=test, consequent=consequent)
            )
        self.expect("RBRACE", "'}' to close the switch body")
        return self.finish(
            "SwitchStatement", first, discriminant=discriminant, cases=cases
        )

    def parse_try(self) -> ASTNode:
        """Parse `try { } catch (e [instanceof T]) { } ... [finally { }]`."""
        first = self.advance()
        block = self.parse_block()
        catches: list[ASTNode] = []
        while self.at("CATCH"):
            catch_tok = self.advance()
            param = None
            if self.match("LPAREN", strict=False):
                param = self.parse_identifier()
                if self.at("INSTANCEOF"):
                    self.advance()
                    name = self.parse_scoped_name()
                    param = self.finish(
                        "BinaryExpression",
                        param,
                        operator="instanceof",
                        left=param,
                        right=name,
                    )
                self.expect("RPAREN", "')' after catch parameter")
            body = self.parse_block()
            catches.append(self.finish("CatchClause", catch_tok, param=param, body=body))
        handler = None
        if len(catches) == 1:
            handler = catches[0]
        elif catches:
            handler = self.spanning(
                "CatchClauses", catches[0], catches[-1], catches=catches
            )
        finalizer = None
        if self.match("FINALLY", strict=False):
            finalizer = self.parse_block()
        if handler is None and finalizer is None:
            raise self.error("Expected 'catch' or 'finally' after try block", self.current())
        return self.finish(
            "TryStatement", first, block=block, handler=handler, finalizer=finalizer
        )

    def parse_return(self) -> ASTNode:
        first = self.advance()
        argument = None if self.at("SEMI") else self.parse_expression()
        self.expect("SEMI", "';' after return")
        return self.finish("ReturnStatement", first, argument=argument)

    def parse_throw(self) -> ASTNode:
        first = self.advance()
        argument = self.parse_expression()
        self.expect("SEMI", "';' after throw")
        return self.finish("ThrowStatement", first, argument=argument)

    def parse_jump(self) -> ASTNode:
        first = self.advance()
        self.expect("SEMI", f"';' after {first.value}")
        kind = "BreakStatement" if first.type == "BREAK" else "ContinueStatement"
        return self.finish(kind, first)

    # expressions

    def parse_sequence(self) -> ASTNode:
        first = self.parse_expression()
        if not self.at("COMMA"):
            return first
        expressions = [first]
        while self.match("COMMA", strict=False):
            expressions.append(self.parse_expression())
        return self.finish("SequenceExpression", first, expressions=expressions)

    def parse_expression(self) -> ASTNode:
        return self.parse_assignment()

    def parse_assignment(self) -> ASTNode:
        """Parse a (right associative) assignment or a conditional expression."""
        left = self.parse_conditional()
        if not self.at("ASSIGN"):
            return left
        op_tok = self.current()
        if left.kind not in ("Identifier", "MemberExpression"):
            raise self.error("Invalid assignment target", op_tok)
        self.advance()
        right = self.parse_assignment()
        return self.finish(
            "AssignmentExpression", left, operator=op_tok.value, left=left, right=right
        )

    def parse_conditional(self) -> ASTNode:
        test = self.parse_logical_or()
        if not self.match("QUESTION", strict=False):
            return test
        consequent = self.parse_assignment()
        self.expect("COLON", "':' in conditional expression")
        alternate = self.parse_assignment()
        return self.finish(
            "ConditionalExpression",
            test,
            test=test,
            consequent=consequent,
            alternate=alternate,
        )

    def parse_logical_or(self) -> ASTNode:
        left = self.parse_logical_and()
        while self.at("OR"):
            op = self.advance().value
            right = self.parse_logical_and()
            left = self.finish(
                "LogicalExpression", left, operator=op, left=left, right=right
            )
        return left

    def parse_logical_and(self) -> ASTNode:
        left = self.parse_binary()
        while self.at("AND"):
            op = self.advance().value
            right = self.parse_binary()
            left = self.finish(
                "LogicalExpression", left, operator=op, left=left, right=right
            )
        return left

    def binary_operator(self) -> str | None:
        tok = self.current()
        if tok.type in ("BINOP", "LT", "GT", "SHR", "PLUS", "MINUS"):
            return tok.value
        if tok.type in ("INSTANCEOF", "HAS", "AS"):
            return tok.value
        return None

    def parse_binary(self, max_rank: int = 99) -> ASTNode:
        """Precedence climbing over Monkey C's binary operator ranks."""
        left = self.parse_unary()
        while True:
            op = self.binary_operator()
            if op is None:
                break
            rank = source_rank(op)
            if rank is None or rank > max_rank:
                break
            self.advance()
            if op == "as":
                right = self.parse_type_spec_list()
            elif op == "instanceof":
                right = self.parse_scoped_name()
            else:
                right = self.parse_binary(rank - 1)
            left = self.finish(
                "BinaryExpression", left, operator=op, left=left, right=right
            )
        return left

    def parse_unary(self) -> ASTNode:
        tok = self.current()
        if tok.type in ("BANG", "TILDE", "MINUS", "PLUS"):
            self.advance()
            argument = self.parse_unary()
            return self.finish(
                "UnaryExpression", tok, operator=tok.value, argument=argument, prefix=True
            )
        if tok.type == "UPDATE":
            self.advance()
            argument = self.parse_unary()
            return self.finish(
                "UpdateExpression", tok, operator=tok.value, argument=argument, prefix=True
            )
        return self.parse_postfix()

    def parse_postfix(self) -> ASTNode:
        """Parse member access, indexing, calls and postfix updates."""
        expr = self.parse_primary()
        while True:
            if self.match("DOT", strict=False):
                prop = self.parse_identifier()
                expr = self.finish(
                    "MemberExpression", expr, object=expr, property=prop, computed=False
                )
            elif self.match("LBRACK", strict=False):
                prop = self.parse_expression()
                self.expect("RBRACK", "']'")
                expr = self.finish(
                    "MemberExpression", expr, object=expr, property=prop, computed=True
                )
            elif self.at("LPAREN"):
                args = self.parse_arguments()
                expr = self.finish("CallExpression", expr, callee=expr, arguments=args)
            elif self.at("UPDATE"):
                op = self.advance().value
                expr = self.finish(
                    "UpdateExpression", expr, operator=op, argument=expr, prefix=False
                )
            else:
                return expr

    def parse_arguments(self) -> list[ASTNode]:
        self.expect("LPAREN", "'('")
        args: list[ASTNode] = []
        while not self.at("RPAREN"):
            args.append(self.parse_expression())
            if not self.match("COMMA", strict=False):
                break
        self.expect("RPAREN", "')' to close the argument list")
        return args

    def parse_primary(self) -> ASTNode:
        tok = self.current()
        if tok.type == "IDENT":
            return self.parse_identifier()
        if tok.type == "THIS":
            self.advance()
            return self.finish("ThisExpression", tok, text=tok.value)
        if tok.type in ("NUMBER", "FLOAT", "STRING", "CHAR", "LITERAL"):
            self.advance()
            return self.finish("Literal", tok, value=literal_value(tok), raw=tok.value)
        if tok.type == "LPAREN":
            self.advance()
            expr = self.parse_expression()
            self.expect("RPAREN", "')'")
            return expr
        if tok.type == "LBRACK":
            return self.parse_array()
        if tok.type == "LBRACE":
            return self.parse_object()
        if tok.type == "COLON":
            self.advance()
            name = self.parse_identifier()
            return self.finish(
                "UnaryExpression", tok, operator=":", argument=name, prefix=True
            )
        if tok.type == "NEW":
            return self.parse_new()
        found = "end of input" if tok.type == "EOF" else repr(tok.value)
        raise self.error(f"Unexpected {found}", tok)

    def parse_byte_suffix(self) -> str | None:
        tok = self.current()
        if (
            tok.type == "IDENT"
            and tok.value == "b"
            and self.last is not None
            and tok.start == self.last.end
        ):
            self.advance()
            return "b"
        return None

    def parse_array(self) -> ASTNode:
        """Parse `[a, b, c]` with an optional `b` byte-array suffix."""
        first = self.advance()
        elements: list[ASTNode] = []
        while not self.at("RBRACK"):
            elements.append(self.parse_expression())
            if not self.match("COMMA", strict=False):
                break
        self.expect("RBRACK", "']' to close the array")
        byte = self.parse_byte_suffix()
        return self.finish("ArrayExpression", first, elements=elements, byte=byte)

    def parse_object(self) -> ASTNode:
        """Parse a dictionary literal `{ key => value, ... }`."""
        first = self.advance()
        properties: list[ASTNode] = []
        while not self.at("RBRACE"):
            key = self.parse_expression()
            self.expect("ARROW", "'=>' in dictionary literal")
            value = self.parse_expression()
            properties.append(
                self.finish("Property", key, key=key, value=value, kind="init")
            )
            if not self.match("COMMA", strict=False):
                break
        self.expect("RBRACE", "'}' to close the dictionary")
        return self.finish("ObjectExpression", first, properties=properties)

    def parse_new(self) -> ASTNode:
        """Parse `new T(args)`, `new [n]`, `new T[n]` and `new T<G>[n]`."""
        first = self.advance()
        ts = None
        if not self.at("LBRACK"):
            type_first = self.current()
            name = self.parse_scoped_name()
            generics = self.parse_optional_generics()
            if self.at("LPAREN"):
                if generics is not None:
                    raise self.error(
                        "Generic arguments are not allowed in a constructor call",
                        self.current(),
                    )
                args = self.parse_arguments()
                return self.finish("NewExpression", first, callee=name, arguments=args)
            ts = self.finish("TypeSpecPart", type_first, name=name, generics=generics)
        self.expect("LBRACK", "'[' or '(' after new")
        size = self.parse_expression()
        self.expect("RBRACK", "']' to close the array size")
        byte = self.parse_byte_suffix()
        return self.finish("SizedArrayExpression", first, size=size, ts=ts, byte=byte)

    def parse_identifier(self) -> ASTNode:
        tok = self.expect("IDENT", "an identifier")
        return self.finish("Identifier", tok, name=tok.value)

    def parse_scoped_name(self) -> ASTNode:
        """Parse `A.B.C` into nested non-computed member expressions."""
        name = self.parse_identifier()
        while self.at("DOT"):
            self.advance()
            prop = self.parse_identifier()
            name = self.finish(
                "MemberExpression", name, object=name, property=prop, computed=False
            )
        return name


def parse(
    source: str, options: FormatOptions | None = None
) -> tuple[ASTNode, list[Comment]]:
    """
    Parse `source` according to `options.start_rule`.

    Returns:
        The root node and the list of comments found in the source.

    Raises:
        MonkeyCSyntaxError: With the location of the first problem.
    """
    options = options or FormatOptions()
    tokens, comments = tokenize(source, options.origin_path)
    for tok in tokens:
        if tok.type == "ERROR":
            raise MonkeyCSyntaxError(
                f"Unexpected character {tok.value!r}",
                tok.location(),
                options.origin_path,
            )
    parser = Parser(tokens, source, options.origin_path)
    if options.start_rule == StartRule.SINGLE_EXPRESSION:
        root = parser.parse_single_expression()
    elif options.start_rule == StartRule.ALTERNATE_GRAMMAR:
        root = parser.parse_fragment(options.alternate_grammar_param)
    else:
        root = parser.parse_program()
    return root, comments


__all__ = ["Parser", "THIS_KEYWORDS", "literal_value", "parse"]
