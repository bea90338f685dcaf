from concurrent.futures import ThreadPoolExecutor

import pytest

from mcfmt.mcfmt_ast import ASTNode, Comment
from mcfmt.mcfmt_doc import render
from mcfmt.mcfmt_errors import PrinterNotInitializedError, UnsupportedNodeError
from mcfmt.mcfmt_format import Formatter
from mcfmt.mcfmt_options import FormatOptions, PrintContext, StartRule
from mcfmt.mcfmt_path import AstPath
from mcfmt.printers.estree_printer import EstreePrinter, method_name, rank, should_flatten
from mcfmt.printers.monkeyc_printer import MonkeyCPrinter
from mcfmt.printers.printer_registry import PRINTERS, find_printer


def fmt(formatter: Formatter, source: str, options: FormatOptions | None = None) -> str:
    return formatter.format_source(source, options or FormatOptions())


def stmt(formatter: Formatter, source: str, print_width: int = 80) -> str:
    options = FormatOptions(print_width=print_width, start_rule=StartRule.ALTERNATE_GRAMMAR)
    return formatter.format_source(source, options)


# registry and initialization


def test_estree_printer_is_registered() -> None:
    assert isinstance(find_printer("estree"), EstreePrinter)
    assert PRINTERS["estree"] is find_printer("estree")


def test_find_printer_unknown_tag() -> None:
    with pytest.raises(LookupError, match="no printer registered as 'nope'"):
        find_printer("nope")
    with pytest.raises(LookupError):
        find_printer("estree", {})


def test_uninitialized_printer_refuses_to_work() -> None:
    printer = MonkeyCPrinter()
    assert not printer.initialized
    path = AstPath(ASTNode("Identifier", name="a"))
    ctx = PrintContext(FormatOptions())
    with pytest.raises(PrinterNotInitializedError, match="printer not initialized"):
        printer.print(path, ctx, lambda *a: "")
    with pytest.raises(PrinterNotInitializedError):
        printer.print_comment(Comment("Line", " x"))


def test_private_names_are_not_delegated() -> None:
    printer = MonkeyCPrinter().initialize()
    with pytest.raises(AttributeError):
        printer._missing  # noqa: B018


def test_initialize_is_idempotent() -> None:
    printer = MonkeyCPrinter()
    assert printer.initialize() is printer
    delegate = printer.delegate
    printer.initialize({"estree": EstreePrinter()})
    assert printer.delegate is delegate
    assert printer.initialized


def test_initialize_from_many_threads() -> None:
    printer = MonkeyCPrinter()
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: printer.initialize(), range(16)))
    assert all(r is printer for r in results)
    assert printer.delegate is find_printer("estree")


def test_formatter_with_empty_registry_fails_early() -> None:
    with pytest.raises(LookupError, match="Printer setup failure"):
        Formatter(registry={})


def test_formatter_with_private_registry() -> None:
    delegate = EstreePrinter()
    formatter = Formatter(registry={"estree": delegate})
    assert formatter.printer.delegate is delegate
    assert formatter.format_source("var x=1;") == "var x = 1;\n"


def test_delegated_entries() -> None:
    printer = MonkeyCPrinter().initialize()
    assert printer.get_visitor_keys(ASTNode("IfStatement")) == ("test", "consequent", "alternate")
    assert printer.is_block_comment(Comment("Block", " x "))
    assert printer.print_comment(Comment("Line", " hi  ")) == "// hi"


def test_comments_never_attach_to_attribute_lists() -> None:
    printer = MonkeyCPrinter().initialize()
    assert not printer.can_attach_comment(ASTNode("AttributeList"))
    assert printer.can_attach_comment(ASTNode("Identifier", name="a"))
    assert not printer.can_attach_comment("text")


def test_unknown_node_kind(formatter: Formatter) -> None:
    root = ASTNode("Program", body=[ASTNode("Mystery")])
    with pytest.raises(UnsupportedNodeError, match="'Mystery'"):
        formatter.format_ast(root)


# helpers


@pytest.mark.parametrize(  # type: ignore[misc]
    "kind,expected",
    [
        ("Program", "print_program"),
        ("SizedArrayExpression", "print_sized_array_expression"),
        ("ThisExpression", "print_this_expression"),
    ],
)
def test_method_name(kind: str, expected: str) -> None:
    assert method_name(kind) == expected


def test_generic_ranks() -> None:
    assert rank("&&") == rank("and") == 80
    assert rank("or") == 90
    assert rank("*") == 0
    assert rank("???") is None


@pytest.mark.parametrize(  # type: ignore[misc]
    "parent_op,node_op,expected",
    [
        ("+", "-", True),
        ("==", "==", False),
        ("*", "%", False),
        ("*", "/", False),
        ("<<", "<<", False),
        ("+", "*", False),
        ("&&", "and", True),
    ],
)
def test_should_flatten(parent_op: str, node_op: str, expected: bool) -> None:
    assert should_flatten(parent_op, node_op) is expected


def test_javadoc_comment_is_realigned() -> None:
    printer = EstreePrinter()
    doc = printer.print_comment(Comment("Block", "*\n   * a\n   "))
    assert render(doc) == "/**\n * a\n */"
    assert printer.print_comment(Comment("Block", " plain ")) == "/* plain */"


# output


def test_attributes_print_flat_before_declaration(formatter: Formatter) -> None:
    assert fmt(formatter, "(foo, bar(1)) function f() {}") == "(foo, bar(1))\nfunction f() {}\n"


def test_symbol_attribute_on_class(formatter: Formatter) -> None:
    assert fmt(formatter, "(:background) class A {}") == "(:background)\nclass A {}\n"


def test_access_modifiers_are_sorted(formatter: Formatter) -> None:
    source = "class A { static hidden var x; }"
    assert fmt(formatter, source) == "class A {\n    hidden static var x;\n}\n"


def test_nullable_and_generic_type(formatter: Formatter) -> None:
    assert fmt(formatter, "var names as Array<String>?;") == "var names as Array<String>?;\n"


def test_nested_generics_never_close_with_shift(formatter: Formatter) -> None:
    out = fmt(formatter, "var a as Array<Array<Number>>;")
    assert out == "var a as Array<Array<Number> >;\n"


def test_or_null_prints_as_nullable(formatter: Formatter) -> None:
    assert fmt(formatter, "var a as Number or Null;") == "var a as Number?;\n"
    assert fmt(formatter, "var a as Number or String;") == "var a as Number or String;\n"


def test_callable_typedef(formatter: Formatter) -> None:
    source = "typedef Callback as (Method(x as Number) as Void);"
    assert fmt(formatter, source) == source + "\n"


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,expected",
    [
        ("var a = new [5]b;", "var a = new [5]b;\n"),
        ("var a = new Foo[3];", "var a = new Foo [3];\n"),
        ("var a = new Array<Number>[n];", "var a = new Array<Number>[n];\n"),
    ],
)
def test_sized_arrays(formatter: Formatter, source: str, expected: str) -> None:
    assert fmt(formatter, source) == expected


def test_dictionary_and_byte_array(formatter: Formatter) -> None:
    source = 'var d = {"a"=>1,"b"=>[1,2,3]b};'
    assert fmt(formatter, source) == 'var d = { "a" => 1, "b" => [1, 2, 3]b };\n'


def test_dictionary_stays_expanded(formatter: Formatter) -> None:
    source = 'var d = {\n"a" => 1};'
    assert fmt(formatter, source) == 'var d = {\n    "a" => 1\n};\n'


def test_enum_members_one_per_line(formatter: Formatter) -> None:
    out = fmt(formatter, "enum Color { RED, GREEN = 2 };")
    assert out == "enum Color {\n    RED,\n    GREEN = 2\n}\n"


def test_using_and_import(formatter: Formatter) -> None:
    out = fmt(formatter, "using Toybox.WatchUi  as Ui;\nimport Toybox.Lang;")
    assert out == "using Toybox.WatchUi as Ui;\nimport Toybox.Lang;\n"


def test_module_declaration(formatter: Formatter) -> None:
    out = fmt(formatter, "module M { const A = 1; }")
    assert out == "module M {\n    const A = 1;\n}\n"


def test_self_and_me_are_kept(formatter: Formatter) -> None:
    assert stmt(formatter, "self.x = 1; me.y = 2;") == "self.x = 1;\nme.y = 2;\n"


def test_statement_level_binary_gets_parens(formatter: Formatter) -> None:
    assert stmt(formatter, "1 << (x % 3);") == "(1 << (x % 3));\n"


def test_redundant_parens_dropped(formatter: Formatter) -> None:
    assert stmt(formatter, "x = ((a)) + (b * c);") == "x = a + b * c;\n"


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    ["x = (a && b) has c;", "x = a has (b || c);", "x = (a or b) + c;", "x = a == (b and c);"],
)
def test_logical_operand_of_binary_keeps_parens(formatter: Formatter, source: str) -> None:
    assert stmt(formatter, source) == source + "\n"


@pytest.mark.parametrize("keyword", ["if", "while"])  # type: ignore[misc]
def test_long_condition_is_indented(formatter: Formatter, keyword: str) -> None:
    source = f"{keyword} (aaaaaa && bbbbbb || cccccc && dddddd) {{ x(); }}"
    expected = (
        f"{keyword} (\n    aaaaaa && bbbbbb ||\n    cccccc && dddddd\n) {{\n    x();\n}}\n"
    )
    assert stmt(formatter, source, print_width=30) == expected
    assert stmt(formatter, f"{keyword} (a) {{ x(); }}", print_width=30).startswith(
        f"{keyword} (a) {{\n"
    )


def test_comment_in_empty_arguments(formatter: Formatter) -> None:
    assert stmt(formatter, "foo(/* x */);") == "foo(/* x */);\n"
    assert stmt(formatter, "foo(// why\n);") == "foo(\n    // why\n);\n"


def test_bodies_always_braced(formatter: Formatter) -> None:
    out = stmt(formatter, "if (a) b(); else c();\nwhile (a) b();")
    assert out == "if (a) {\n    b();\n} else {\n    c();\n}\nwhile (a) {\n    b();\n}\n"


def test_do_while_and_for(formatter: Formatter) -> None:
    out = stmt(formatter, "do { a(); } while (b);\nfor (var i = 0; i < 3; i++) { x(); }")
    assert out == "do {\n    a();\n} while (b);\nfor (var i = 0; i < 3; i++) {\n    x();\n}\n"


def test_call_arguments_break_all_or_nothing(formatter: Formatter) -> None:
    out = stmt(formatter, "foo(aaaaaaaaaa, bbbbbbbbbb, cccccccccc);", print_width=30)
    assert out == "foo(\n    aaaaaaaaaa,\n    bbbbbbbbbb,\n    cccccccccc\n);\n"


def test_function_signature(formatter: Formatter) -> None:
    out = fmt(formatter, "function f(a as Number,b) as Void { return a+b; }")
    assert out == "function f(a as Number, b) as Void {\n    return a + b;\n}\n"


def test_conditional_expression(formatter: Formatter) -> None:
    assert stmt(formatter, "x = a?b:c;") == "x = a ? b : c;\n"


def test_numbers_keep_their_type(formatter: Formatter) -> None:
    out = stmt(formatter, "x = [3., 3.0, 100L, 0xFF, 4294967296];")
    assert out == "x = [3f, 3.0, 100l, 0xff, 4294967296l];\n"


def test_blank_lines_are_kept_once(formatter: Formatter) -> None:
    assert stmt(formatter, "a();\n\n\n\nb();\nc();") == "a();\n\nb();\nc();\n"


def test_identifier_with_original_name(formatter: Formatter) -> None:
    ident = ASTNode("Identifier", name="a", original="count")
    root = ASTNode("Program", body=[ASTNode("ExpressionStatement", expression=ident)])
    assert formatter.format_ast(root) == "a /*>count<*/;\n"


def test_empty_program(formatter: Formatter) -> None:
    assert fmt(formatter, "") == ""
