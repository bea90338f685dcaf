import pytest

from mcfmt.mcfmt_ast import ASTNode, Comment
from mcfmt.mcfmt_comments import (
    CommentAttacher,
    attach_comments,
    has_dangling_comments,
    has_ignore_comment,
    has_newline,
    is_next_line_empty,
    print_comments,
    print_dangling_comments,
)
from mcfmt.mcfmt_doc import hardline, render
from mcfmt.mcfmt_errors import SpanInvariantError
from mcfmt.mcfmt_options import FormatOptions, StartRule
from mcfmt.mcfmt_parser import parse
from mcfmt.mcfmt_preprocess import preprocess

STATEMENTS = FormatOptions(start_rule=StartRule.ALTERNATE_GRAMMAR)


def attached(
    source: str, options: FormatOptions = STATEMENTS
) -> tuple[ASTNode, list[Comment]]:
    root, comments = parse(source, options)
    attach_comments(root, comments, source, lambda node: True)
    return root, comments


def plain(comment: Comment) -> str:
    return comment.text


@pytest.mark.parametrize(  # type: ignore[misc]
    "text,index,backwards,expected",
    [
        ("a  \nb", 1, False, True),
        ("a b", 1, False, False),
        ("a\r\nb", 1, False, True),
        ("  x", 2, True, True),
        ("a\n  x", 4, True, True),
        ("a x", 2, True, False),
    ],
)
def test_has_newline(text: str, index: int, backwards: bool, expected: bool) -> None:
    assert has_newline(text, index, backwards) is expected


@pytest.mark.parametrize(  # type: ignore[misc]
    "text,end,expected",
    [
        ("a;\n\nb", 2, True),
        ("a;\nb", 2, False),
        ("a; // c\n\nb", 2, True),
        ("a; /* c */\n  \nb", 2, True),
        ("a; b", 2, False),
    ],
)
def test_is_next_line_empty(text: str, end: int, expected: bool) -> None:
    assert is_next_line_empty(text, end) is expected


def test_end_of_line_comment_trails_previous_statement() -> None:
    root, comments = attached("var a = 1; // one\n// lead\nvar b = 2;\n")
    first, second = root.body
    assert first.comments == [comments[0]]
    assert comments[0].trailing and not comments[0].leading
    assert second.comments == [comments[1]]
    assert comments[1].leading
    assert all(c.breaks_after for c in comments)


def test_inline_block_comment_leads_next_argument() -> None:
    root, comments = attached("f(a, /* x */ b);")
    call = root.body[0].expression
    assert call.arguments[1].comments == comments
    assert comments[0].leading
    assert not comments[0].breaks_after


def test_comment_in_empty_block_dangles() -> None:
    root, comments = attached("function f() { // only\n}", FormatOptions())
    body = root.body[0].body
    assert body.kind == "BlockStatement"
    assert body.comments == comments
    assert not comments[0].leading and not comments[0].trailing
    assert has_dangling_comments(body)


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    ["if (a) // c\n    return 1;", "if (a)\n    // c\n    return 1;", "while (a) // c\n{ b(); }"],
)
def test_comment_before_body_goes_into_block(source: str) -> None:
    root, comments = parse(source, STATEMENTS)
    root = preprocess(root)
    attach_comments(root, comments, source, lambda node: True)
    statement = root.body[0]
    block = statement.body if statement.kind == "WhileStatement" else statement.consequent
    assert block.kind == "BlockStatement"
    assert block.body[0].comments == comments
    assert comments[0].leading


def test_comment_between_branches_leads_else_body() -> None:
    root, comments = attached("if (a) {\n    b();\n} // c\nelse {\n    d();\n}")
    assert root.body[0].alternate.body[0].comments == comments


def test_comment_before_empty_body_dangles_in_block() -> None:
    root, comments = attached("while (a) // c\n{}")
    block = root.body[0].body
    assert block.comments == comments
    assert has_dangling_comments(block)


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    ["(:test)\n// between\nfunction f() {}", "hidden // c\nvar x;"],
)
def test_comment_after_attributes_leads_declaration(source: str) -> None:
    root, comments = attached(source, FormatOptions())
    declaration = root.body[0]
    assert declaration.comments == comments
    assert comments[0].leading


def test_comment_in_empty_arguments_dangles_on_call() -> None:
    root, comments = attached("foo(/* x */);")
    call = root.body[0].expression
    assert call.comments == comments
    assert has_dangling_comments(call)
    root, _ = attached("foo(a /* x */);")
    assert not has_dangling_comments(root.body[0].expression)


def test_comment_after_last_statement_trails_it() -> None:
    root, comments = attached("function f() {\n    x();\n    // done\n}", FormatOptions())
    statement = root.body[0].body.body[0]
    assert statement.comments == comments
    assert comments[0].trailing


def test_skipped_nodes_expose_their_children() -> None:
    root, _ = parse("a; b;", STATEMENTS)
    attacher = CommentAttacher("a; b;", lambda node: node.kind != "ExpressionStatement")
    assert [n.get("name") for n in attacher.sorted_children(root)] == ["a", "b"]


def test_comment_crossing_a_node_is_rejected() -> None:
    root = ASTNode("Program", 0, 20, body=[ASTNode("Identifier", 2, 8, name="abcdef")])
    with pytest.raises(SpanInvariantError, match="overlaps"):
        attach_comments(root, [Comment("Block", "", 5, 10)], " " * 20, lambda node: True)


def test_ignore_directive_detection() -> None:
    root, _ = attached("// mcfmt-ignore\nvar   x=1;\nvar y=2;")
    assert has_ignore_comment(root.body[0])
    assert not has_ignore_comment(root.body[1])


def test_print_leading_line_comment() -> None:
    text = "// lead\nx;"
    root, comments = attached(text)
    statement = root.body[0]
    assert render(print_comments(statement, "x;", text, plain)) == "// lead\nx;"
    assert comments[0].printed


def test_print_leading_comment_keeps_blank_line() -> None:
    text = "// lead\n\nx;"
    root, _ = attached(text)
    assert render(print_comments(root.body[0], "x;", text, plain)) == "// lead\n\nx;"


def test_print_trailing_line_comment_uses_line_suffix() -> None:
    text = "x; // t"
    root, _ = attached(text)
    doc = print_comments(root.body[0], "x;", text, plain)
    assert render([doc, hardline]) == "x; // t\n"


def test_print_trailing_block_comment_inline() -> None:
    text = "x; /* t */"
    root, _ = attached(text)
    assert render(print_comments(root.body[0], "x;", text, plain)) == "x; /* t */"


def test_printed_comments_are_not_repeated() -> None:
    text = "x; // t"
    root, comments = attached(text)
    comments[0].printed = True
    assert print_comments(root.body[0], "x;", text, plain) == "x;"


def test_print_dangling_comments() -> None:
    node = ASTNode("BlockStatement", 0, 30, body=[])
    node.comments = [Comment("Line", " a"), Comment("Block", " b ")]
    assert render(print_dangling_comments(node, "", plain)) == "// a\n/* b */"
    assert all(c.printed for c in node.comments)
    assert print_dangling_comments(node, "", plain) == ""
