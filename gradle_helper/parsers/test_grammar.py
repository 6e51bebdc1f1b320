import re

import pytest

from ..core.enums import GradleDsl
from ..core.errors import ParseError
from .grammar import describe_failure, parse_script, unescape
from .syntax import (
    Assignment,
    Attribute,
    Call,
    Declaration,
    Index,
    ListNode,
    Literal,
    Name,
    Skipped,
    dotted_path,
)


def _value(source):
    (assignment,) = parse_script(f"x = {source}").statements
    assert isinstance(assignment, Assignment)
    return assignment.value


# --- Tokens ---


@pytest.mark.parametrize(
    "source, expected",
    [
        ('"plain"', "plain"),
        ("'single'", "single"),
        (r'"tab\there"', "tab\there"),
        (r'"\$flutterRoot"', "$flutterRoot"),
        (r'"é"', "é"),
        (r'"say \"hi\""', 'say "hi"'),
        ('"""raw \\n"""', "raw \\n"),
    ],
)
def test_string_literals(source, expected):
    assert _value(source) == Literal(expected, line=1)


@pytest.mark.parametrize(
    "source, expected",
    [("21", 21), ("100L", 100), ("-3", -3), ("1.5f", 1.5), ("true", True), ("null", None)],
)
def test_scalar_literals(source, expected):
    assert _value(source).value == expected


def test_unescape_keeps_unknown_escapes():
    assert unescape(r"a\\b\qc") == "a\\bqc"


def test_comments_are_ignored():
    text = "// header\nminSdk = 21 // trailing\n/* block\n comment */ targetSdk = 34"
    statements = parse_script(text).statements
    assert [dotted_path(s.target) for s in statements] == [("minSdk",), ("targetSdk",)]


def test_statement_line_numbers():
    (android,) = parse_script('android {\n    namespace = "a.b"\n}').statements
    (namespace,) = android.block.statements
    assert namespace.line == 2
    assert namespace.value.line == 2


def test_semicolon_separates_statements():
    statements = parse_script("a = 1; b = 2").statements
    assert [s.value.value for s in statements] == [1, 2]


def test_crlf_line_endings():
    statements = parse_script("android {\r\n    minSdk = 21\r\n}\r\n").statements
    assert statements[0].block.statements[0].value.value == 21


# --- Statements ---


def test_parse_block_with_assignment():
    script = parse_script('android {\n    compileSdk = flutter.compileSdkVersion\n}')
    (android,) = script.statements
    assert isinstance(android, Call)
    assert dotted_path(android.callee) == ("android",)
    (assignment,) = android.block.statements
    assert isinstance(assignment, Assignment)
    assert isinstance(assignment.value, Attribute)
    assert dotted_path(assignment.value) == ("flutter", "compileSdkVersion")


def test_parse_call_with_trailing_block():
    (statement,) = parse_script('getByName("release") {\n    isMinifyEnabled = false\n}').statements
    assert dotted_path(statement.callee) == ("getByName",)
    assert statement.args == [Literal("release", line=1)]
    assert len(statement.block.statements) == 1


def test_parse_groovy_command_expression():
    (statement,) = parse_script("implementation 'androidx.multidex:multidex:2.0.1'").statements
    assert isinstance(statement, Call)
    assert statement.callee == Name("implementation", line=1)
    assert statement.args[0].value == "androidx.multidex:multidex:2.0.1"


def test_parse_named_arguments():
    (statement,) = parse_script("apply plugin: 'kotlin-android'").statements
    assert isinstance(statement, Call)
    assert isinstance(statement.kwargs["plugin"], Literal)
    assert statement.kwargs["plugin"].value == "kotlin-android"


def test_parse_multiline_call_arguments():
    text = 'create("release") {\n    foo(\n        "a",\n        key = [1, 2],\n    )\n}'
    (statement,) = parse_script(text).statements
    (call,) = statement.block.statements
    assert call.args == [Literal("a", line=3)]
    assert isinstance(call.kwargs["key"], ListNode)
    assert [item.value for item in call.kwargs["key"].items] == [1, 2]


def test_parse_kotlin_infix_chain():
    (statement,) = parse_script('id("com.android.application") version "8.7.0" apply false').statements
    assert isinstance(statement, Call)
    assert statement.callee.name == "apply"
    inner = statement.callee.receiver
    assert inner.callee.name == "version"
    assert inner.callee.receiver.args[0].value == "com.android.application"


def test_parse_index_expression():
    value = _value('keystoreProperties["storeFile"]')
    assert isinstance(value, Index)
    assert value.key.value == "storeFile"


def test_parse_declarations():
    statements = parse_script(
        "val keystoreProperties = Properties()\ndef code = '1'\nvar later: String"
    ).statements
    assert [type(s) for s in statements] == [Declaration, Declaration, Declaration]
    assert statements[1].value.value == "1"
    assert statements[2].value is None


def test_new_expression():
    (declaration,) = parse_script("def localProperties = new Properties()").statements
    assert isinstance(declaration.value, Call)
    assert declaration.value.callee == Name("Properties", line=1)


def test_imperative_statements_are_skipped():
    text = (
        "if (keystorePropertiesFile.exists()) {\n"
        "    keystoreProperties.load(FileInputStream(keystorePropertiesFile))\n"
        "}\n"
        "minSdk = 21\n"
    )
    statements = parse_script(text).statements
    assert isinstance(statements[0], Skipped)
    assert statements[0].text.startswith("if (keystorePropertiesFile.exists()) {")
    assert statements[0].text.endswith("}")
    assert isinstance(statements[1], Assignment)


def test_operator_expression_is_skipped():
    statements = parse_script("versionCode = base + 1\nversionName = '1.0'").statements
    assert statements[0] == Skipped("versionCode = base + 1", line=1)
    assert isinstance(statements[1], Assignment)


def test_closure_parameters_are_skipped_inside_the_block():
    text = "android {\n    applicationVariants.all { variant -> variant.outputs }\n    minSdk = 21\n}"
    (android,) = parse_script(text).statements
    variants, assignment = android.block.statements
    assert dotted_path(variants.callee) == ("applicationVariants", "all")
    assert variants.block.statements == [Skipped("variant -> variant.outputs", line=2)]
    assert isinstance(assignment, Assignment)


# --- Errors ---


@pytest.mark.parametrize(
    "text, message",
    [
        ("android {\n    minSdk = 21\n", "Unclosed '{'"),
        ("android {\n}\n}", "Unmatched '}'"),
        ("if (a {\n}", "Unclosed '('"),
        ('minSdk = "unterminated', "Unterminated string literal"),
        ("minSdk = 21 /* never closed", "Unterminated block comment"),
    ],
)
def test_structural_errors_raise(text, message):
    with pytest.raises(ParseError, match=re.escape(message)):
        parse_script(text)


def test_unterminated_string_reports_position():
    with pytest.raises(ParseError) as exc_info:
        parse_script('a = 1\nb = "oops')
    assert exc_info.value.context.line == 2
    assert exc_info.value.context.column == 5


def test_error_names_the_dialect():
    with pytest.raises(ParseError, match="in groovy build script"):
        parse_script("android {\n", dsl=GradleDsl.GROOVY)


def test_describe_failure_at_end_of_script():
    assert describe_failure("android {\n", 10) == "Unexpected end of script"
