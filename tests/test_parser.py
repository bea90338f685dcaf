import math
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mcfmt.mcfmt_ast import ASTNode
from mcfmt.mcfmt_errors import MonkeyCSyntaxError
from mcfmt.mcfmt_lexer import tokenize
from mcfmt.mcfmt_options import FormatOptions, StartRule
from mcfmt.mcfmt_parser import Parser, literal_value, parse


def program(source: str) -> ASTNode:
    root, _ = parse(source)
    assert root.kind == "Program"
    return root


def first(source: str) -> ASTNode:
    body: list[ASTNode] = program(source).body
    return body[0]


def expr(source: str) -> ASTNode:
    root, _ = parse(source, FormatOptions(start_rule=StartRule.SINGLE_EXPRESSION))
    return root


def shape(node: Any) -> Any:
    """Operators and names only, for comparing expression structure."""
    if not isinstance(node, ASTNode):
        return node
    if node.kind == "Identifier":
        return node.name
    if node.kind == "Literal":
        return node.raw
    if node.kind in ("BinaryExpression", "LogicalExpression"):
        return (node.operator, shape(node.left), shape(node.right))
    if node.kind == "UnaryExpression":
        return (node.operator, shape(node.argument))
    return node.kind


# declarations


def test_using_with_alias() -> None:
    node = first("using Toybox.WatchUi as Ui;")
    assert node.kind == "Using"
    assert node.id.kind == "MemberExpression"
    assert node.get("as").name == "Ui"


def test_import() -> None:
    node = first("import Toybox.Lang;")
    assert node.kind == "ImportModule"
    assert node.id.property.name == "Lang"


def test_module_body_is_block() -> None:
    node = first("module M { var x; function f() {} }")
    assert node.kind == "ModuleDeclaration"
    assert node.body.kind == "BlockStatement"
    assert [s.kind for s in node.body.body] == ["VariableDeclaration", "FunctionDeclaration"]


def test_class_with_members_and_attributes() -> None:
    node = first("(:glance, test(1)) class A extends B.C { hidden static var x; }")
    assert node.kind == "ClassDeclaration"
    assert node.superClass.kind == "MemberExpression"
    attrs = node.attrs
    assert attrs.kind == "AttributeList"
    assert [e.kind for e in attrs.attributes.elements] == [
        "UnaryExpression",
        "CallExpression",
    ]
    member = node.body.body[0]
    assert member.kind == "ClassElement"
    assert member.item.attrs.access == ["hidden", "static"]
    assert (member.start, member.end) == (member.item.start, member.item.end)


def test_access_only_attribute_list() -> None:
    node = first("private function f();")
    assert node.attrs.attributes is None
    assert node.attrs.access == ["private"]
    assert node.body is None


def test_function_signature() -> None:
    node = first("function f(a as Number, b) as String or Null { return a; }")
    a, b = node.params
    assert (a.kind, a.operator, a.left.name) == ("BinaryExpression", "as", "a")
    assert b.kind == "Identifier"
    assert node.returnType.operator == " as"
    parts = node.returnType.argument.ts
    assert [p.name.name for p in parts] == ["String", "Null"]


def test_variable_declaration_kind_and_declarators() -> None:
    node = first("const a = 1, b as Float;")
    assert node.get("kind") == "const"
    assert [d.get("kind") for d in node.declarations] == ["const", "const"]
    assert node.declarations[1].init is None


def test_enum_members() -> None:
    node = first("enum Color { RED, GREEN = 2 };")
    assert node.kind == "EnumDeclaration"
    red, green = node.body.members
    assert red.kind == "Identifier"
    assert green.kind == "EnumStringMember"
    assert green.init.value == 2


def test_anonymous_enum() -> None:
    node = first("enum { A }")
    assert node.id is None


def test_typedef_with_callable_type() -> None:
    node = first("typedef Cb as (Method(x as Number) as Void);")
    part = node.ts.argument.ts[0]
    assert part.name.name == "Method"
    callspec = part.callspec
    assert callspec.kind == "MethodDefinition"
    assert callspec.get("kind") == "method"
    assert callspec.params[0].left.name == "x"


def test_nested_generics_split_shift_token() -> None:
    node = first("var a as Array<Array<Number>>;")
    outer = node.declarations[0].id.right.ts[0]
    inner = outer.generics[0].ts[0]
    assert inner.name.name == "Array"
    assert inner.generics[0].ts[0].name.name == "Number"


def test_nullable_type() -> None:
    node = first("var a as Number?;")
    assert node.declarations[0].id.right.ts[0].nullable is True


def test_question_after_cast_is_conditional() -> None:
    node = expr("x as Number ? a : b")
    assert node.kind == "ConditionalExpression"
    assert node.test.operator == "as"
    assert node.test.right.ts[0].get("nullable") is None


def test_dictionary_type_spec_unsupported() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="Dictionary type specs"):
        parse("var a as { :a as Number };")


# statements


def test_if_else_chain() -> None:
    node = program("function f() { if (a) { b(); } else if (c) d(); else { } }").body[0]
    stmt = node.body.body[0]
    assert stmt.kind == "IfStatement"
    assert stmt.alternate.kind == "IfStatement"
    assert stmt.alternate.consequent.kind == "ExpressionStatement"


def test_loops() -> None:
    body = program(
        "function f() { while (a) { } do { } while (b); for (var i = 0, j; i < 3; i++, j--) { } for (;;) { } }"
    ).body[0].body.body
    assert [s.kind for s in body] == [
        "WhileStatement",
        "DoWhileStatement",
        "ForStatement",
        "ForStatement",
    ]
    for_stmt = body[2]
    assert for_stmt.init.kind == "VariableDeclaration"
    assert for_stmt.update.kind == "SequenceExpression"
    assert body[3].init is None and body[3].test is None


def test_switch_cases() -> None:
    stmt = program(
        "function f() { switch (x) { case 1: a(); case instanceof Lang.String: default: b(); } }"
    ).body[0].body.body[0]
    cases = stmt.cases
    assert cases[0].test.raw == "1"
    assert cases[1].test.kind == "InstanceOfCase"
    assert cases[1].consequent == []
    assert cases[2].test is None


def test_try_with_several_catches() -> None:
    stmt = program(
        "function f() { try { } catch (e instanceof A) { } catch (e) { } finally { } }"
    ).body[0].body.body[0]
    assert stmt.handler.kind == "CatchClauses"
    first_catch = stmt.handler.catches[0]
    assert first_catch.param.operator == "instanceof"
    assert stmt.finalizer.kind == "BlockStatement"


def test_try_with_one_catch() -> None:
    stmt = program("function f() { try { } catch (e) { } }").body[0].body.body[0]
    assert stmt.handler.kind == "CatchClause"
    assert stmt.finalizer is None


def test_try_needs_catch_or_finally() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="'catch' or 'finally'"):
        parse("function f() { try { } }")


# expressions


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,expected",
    [
        ("a + b * c", ("+", "a", ("*", "b", "c"))),
        ("a - b - c", ("-", ("-", "a", "b"), "c")),
        ("1 << x % 3", ("%", ("<<", "1", "x"), "3")),
        ("a & b == c", ("==", ("&", "a", "b"), "c")),
        ("a | b + c", ("+", ("|", "a", "b"), "c")),
        ("a == b < c", ("<", ("==", "a", "b"), "c")),
        ("a has :b && c", ("&&", ("has", "a", (":", "b")), "c")),
        ("a || b and c", ("||", "a", ("and", "b", "c"))),
        ("(a + b) * c", ("*", ("+", "a", "b"), "c")),
        ("-a * !b", ("*", ("-", "a"), ("!", "b"))),
    ],
)
def test_operator_precedence(source: str, expected: Any) -> None:
    assert shape(expr(source)) == expected


def test_as_binds_loosest() -> None:
    node = expr("a + b as Number")
    assert node.operator == "as"
    assert node.left.operator == "+"


def test_instanceof_takes_scoped_name() -> None:
    node = expr("x instanceof Toybox.Lang.Number")
    assert node.right.kind == "MemberExpression"


def test_assignment_is_right_associative() -> None:
    stmt = first("function f() { a = b += 1; }").body.body[0].expression
    assert stmt.operator == "="
    assert stmt.right.operator == "+="


def test_invalid_assignment_target() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="Invalid assignment target"):
        parse("function f() { a + b = c; }")


def test_postfix_chain() -> None:
    node = expr("a.b[c](d)++")
    assert node.kind == "UpdateExpression" and node.prefix is False
    call = node.argument
    assert call.kind == "CallExpression"
    assert call.callee.computed is True
    assert call.callee.object.computed is False


def test_byte_arrays_need_adjacent_suffix() -> None:
    assert expr("[1, 2]b").byte == "b"
    with pytest.raises(MonkeyCSyntaxError):
        parse("[1, 2] b", FormatOptions(start_rule=StartRule.SINGLE_EXPRESSION))


def test_dictionary_literal() -> None:
    node = expr('{"a" => 1, :b => [2]}')
    assert node.kind == "ObjectExpression"
    assert [p.get("kind") for p in node.properties] == ["init", "init"]
    assert node.properties[1].key.operator == ":"


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,has_type,has_generics",
    [
        ("new [10]", False, False),
        ("new Number[n]b", True, False),
        ("new Array<Number>[n]", True, True),
    ],
)
def test_sized_arrays(source: str, has_type: bool, has_generics: bool) -> None:
    node = expr(source)
    assert node.kind == "SizedArrayExpression"
    assert (node.ts is not None) is has_type
    if has_type:
        assert bool(node.ts.generics) is has_generics


def test_new_expression() -> None:
    node = expr("new Lang.Exception(1, 2)")
    assert node.kind == "NewExpression"
    assert len(node.arguments) == 2


def test_this_keeps_spelling() -> None:
    assert expr("me").text == "me"


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,value",
    [
        ("42", 42),
        ("0x1F", 31),
        ("100L", 100),
        ("3.5f", 3.5),
        ("3.", 3.0),
        ('"a\\tb"', "a\tb"),
        ("'x'", "x"),
        ("true", True),
        ("null", None),
    ],
)
def test_literal_values(source: str, value: Any) -> None:
    node = expr(source)
    assert node.kind == "Literal"
    assert node.raw == source
    assert node.value == value


def test_nan_literal() -> None:
    tokens, _ = tokenize("NaN")
    assert math.isnan(literal_value(tokens[0]))


# entry points and errors


def test_single_expression_requires_end_of_input() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="end of input"):
        expr("a b")


def test_alternate_grammar_statements_and_class() -> None:
    stmts, _ = parse(
        "x = 1; return x;", FormatOptions(start_rule=StartRule.ALTERNATE_GRAMMAR)
    )
    assert [s.kind for s in stmts.body] == ["ExpressionStatement", "ReturnStatement"]
    members, _ = parse(
        "var x; function f() {}",
        FormatOptions(start_rule=StartRule.ALTERNATE_GRAMMAR, alternate_grammar_param="class"),
    )
    assert [m.kind for m in members.body] == ["ClassElement", "ClassElement"]


def test_alternate_grammar_unknown_param() -> None:
    options = FormatOptions(start_rule=StartRule.ALTERNATE_GRAMMAR, alternate_grammar_param="x")
    with pytest.raises(ValueError, match="Unknown alternate grammar parameter"):
        parse("a;", options)


def test_syntax_error_location() -> None:
    with pytest.raises(MonkeyCSyntaxError) as exc:
        parse("var x = 1;\nvar = 2;", FormatOptions(origin_path="a.mc"))
    err = exc.value
    assert err.message == "Expected an identifier, found '='"
    assert (err.location.line, err.location.column, err.location.offset) == (2, 5, 15)
    assert err.origin == "a.mc"
    assert err.to_dict()["location"] == {"line": 2, "column": 5, "offset": 15}


def test_unexpected_character() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="Unexpected character '@'"):
        parse("var x = @;")


def test_missing_closing_brace() -> None:
    with pytest.raises(MonkeyCSyntaxError, match="got EOF"):
        parse("class A { var x;")


def test_parser_match_non_strict() -> None:
    tokens, _ = tokenize("a")
    parser = Parser(tokens)
    assert parser.match("SEMI", strict=False) is None
    with pytest.raises(MonkeyCSyntaxError, match="Expected one of"):
        parser.match("SEMI")


def test_comments_returned_alongside_tree() -> None:
    root, comments = parse("// c\nvar x;")
    assert [c.value for c in comments] == [" c"]
    assert root.comments == []


@settings(max_examples=50)
@given(
    st.lists(
        st.tuples(st.sampled_from(["a", "b", "c"]), st.sampled_from(["+", "*", "<<", "&", "=="])),
        min_size=1,
        max_size=6,
    )
)
def test_binary_expressions_always_parse(pairs: list[tuple[str, str]]) -> None:
    source = " ".join(f"{name} {op}" for name, op in pairs) + " z"
    node = expr(source)
    assert node.kind == "BinaryExpression"
    assert (node.start, node.end) == (0, len(source))
