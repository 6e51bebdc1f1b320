#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pyparsing grammar for the declarative subset of Gradle build scripts.

Both dialects reduce to the same few shapes:

- blocks: ``android { ... }``, ``getByName("release") { ... }``
- assignments: ``minSdk = 21``
- calls and Groovy commands: ``id("x")``, ``minSdkVersion 21``,
  ``implementation 'g:n:v'``, ``apply plugin: 'x'``
- Kotlin infix calls: ``id("x") version "8.7.0" apply false``
- declarations: ``val x = ...``, ``def x = ...``

Newlines and ``;`` end statements, so the grammar only skips spaces and tabs.
Imperative code (``if``, closures with parameters, operators) becomes a
:class:`Skipped` statement holding its original text, so the declarative
parts around it still parse.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional

from pyparsing import (
    FollowedBy,
    Forward,
    Keyword,
    OneOrMore,
    Opt,
    ParseException,
    ParserElement,
    QuotedString,
    Regex,
    StringEnd,
    Suppress,
    ZeroOrMore,
    alphanums,
    cpp_style_comment,
    lineno,
    nested_expr,
    original_text_for,
)

from ..core.enums import GradleDsl
from ..core.errors import ParseError
from .syntax import (
    Assignment,
    Attribute,
    Block,
    Call,
    Declaration,
    Index,
    ListNode,
    Literal,
    Name,
    Node,
    Skipped,
)

SCRIPT_WHITESPACE = " \t\r"
IDENTIFIER_CHARS = alphanums + "_$"

# Keywords that open imperative statements
CONTROL_KEYWORDS = (
    "if", "else", "for", "while", "do", "when", "try", "catch", "finally",
    "return", "throw", "import", "package", "class", "fun", "object",
)
LITERAL_KEYWORDS = {"true": True, "false": False, "null": None}
_RESERVED = (*CONTROL_KEYWORDS, *LITERAL_KEYWORDS, "new", "val", "var", "def")

_IDENTIFIER = r"[A-Za-z_$][\w$]*|`[^`\n]+`"
_ESCAPE_SEQUENCE = re.compile(r"\\(u[0-9A-Fa-f]{4}|.)", re.DOTALL)
_ESCAPED_CHARS = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "0": "\0"}
_CLOSERS = {"{": "}", "(": ")", "[": "]"}


def unescape(text: str) -> str:
    """Resolve backslash escapes in the body of a quoted string."""

    def replace(match: re.Match) -> str:
        escaped = match.group(1)
        if len(escaped) == 5:
            return chr(int(escaped[1:], 16))
        return _ESCAPED_CHARS.get(escaped, escaped)

    return _ESCAPE_SEQUENCE.sub(replace, text)


# Intermediate tokens folded into nodes by the parse actions

@dataclass
class _Suffix:
    kind: str
    value: Any
    line: int


@dataclass
class _NamedArgument:
    key: str
    value: Node


def _call(callee: Node, arguments: List[Any], line: int, block: Optional[Block] = None) -> Call:
    call = Call(callee, line=line, block=block)
    for argument in arguments:
        if isinstance(argument, _NamedArgument):
            call.kwargs[argument.key] = argument.value
        else:
            call.args.append(argument)
    return call


# Parse actions

def _string(s: str, loc: int, toks) -> Literal:
    raw = toks[0]
    if raw[:3] in ('"""', "'''"):
        return Literal(raw[3:-3], line=lineno(loc, s))
    return Literal(unescape(raw[1:-1]), line=lineno(loc, s))


def _number(s: str, loc: int, toks) -> Literal:
    text = toks[0].rstrip("LlFfDd")
    value = float(text) if "." in text else int(text)
    return Literal(value, line=lineno(loc, s))


def _keyword_literal(s: str, loc: int, toks) -> Literal:
    return Literal(LITERAL_KEYWORDS[toks[0]], line=lineno(loc, s))


def _identifier(toks) -> str:
    return toks[0].strip("`")


def _name(s: str, loc: int, toks) -> Name:
    return Name(toks[0], line=lineno(loc, s))


def _list(s: str, loc: int, toks) -> ListNode:
    return ListNode(list(toks), line=lineno(loc, s))


def _block(s: str, loc: int, toks) -> Block:
    return Block(list(toks), line=lineno(loc, s))


def _suffix(kind: str):
    def action(s: str, loc: int, toks) -> _Suffix:
        value = toks[0] if kind in ("attribute", "index", "block") else list(toks)
        return _Suffix(kind, value, lineno(loc, s))

    return action


def _infix(s: str, loc: int, toks) -> _Suffix:
    return _Suffix("infix", (toks[0], toks[1]), lineno(loc, s))


def _named_argument(toks) -> _NamedArgument:
    return _NamedArgument(toks[0], toks[1])


def _fold_postfix(s: str, loc: int, toks) -> Node:
    node = toks[0]
    for suffix in toks[1:]:
        match suffix.kind:
            case "attribute":
                node = Attribute(node, suffix.value, line=suffix.line)
            case "call":
                node = _call(node, suffix.value, suffix.line)
            case "index":
                if isinstance(node, Literal):
                    raise ParseException(s, loc, "a literal cannot be indexed")
                node = Index(node, suffix.value, line=suffix.line)
            case "block":
                if isinstance(node, Call) and node.block is None:
                    node = Call(node.callee, node.args, node.kwargs, suffix.value, line=node.line)
                elif isinstance(node, (Name, Attribute)):
                    node = Call(node, block=suffix.value, line=suffix.line)
                else:
                    raise ParseException(s, loc, "a block must follow a name or a call")
    return node


def _expression_statement(s: str, loc: int, toks) -> Node:
    node = toks[0]
    for part in toks[1:]:
        if part.kind == "command":
            if not isinstance(node, (Name, Attribute)):
                raise ParseException(s, loc, "command arguments must follow a name")
            arguments = list(part.value)
            block = arguments.pop() if arguments and isinstance(arguments[-1], Block) else None
            node = _call(node, arguments, node.line, block)
        else:
            if not isinstance(node, Call):
                raise ParseException(s, loc, "an infix call needs a call receiver")
            name, argument = part.value
            node = Call(Attribute(node, name, line=part.line), [argument], line=part.line)
    return node


def _assignment(s: str, loc: int, toks) -> Assignment:
    return Assignment(toks[0], toks[1], line=lineno(loc, s))


def _declaration(s: str, loc: int, toks) -> Declaration:
    return Declaration(toks[0], toks[1] if len(toks) > 1 else None, line=lineno(loc, s))


def _skipped(s: str, loc: int, toks) -> Skipped:
    return Skipped(toks[0], line=lineno(loc, s))


@contextmanager
def _script_whitespace() -> Iterator[None]:
    default = ParserElement.DEFAULT_WHITE_CHARS
    ParserElement.set_default_whitespace_chars(SCRIPT_WHITESPACE)
    try:
        yield
    finally:
        ParserElement.set_default_whitespace_chars(default)


def build_script_grammar() -> ParserElement:
    """
    Build the grammar for a whole build script.

    The result parses to the list of top-level statements. Every element is
    created while newlines are significant, including the comment and string
    expressions given to ``ignore`` and ``nested_expr``.

    Returns:
        Parser for a build script
    """
    with _script_whitespace():
        comment = cpp_style_comment.copy()
        newline = Regex(r"\n|;")
        gap = Suppress(ZeroOrMore(Regex(r"\n")))
        equals = Suppress(Regex(r"=(?!=)"))

        # Strings: triple-quoted strings are raw, the others resolve escapes
        string_token = (
            QuotedString('"""', multiline=True, unquote_results=False)
            | QuotedString("'''", multiline=True, unquote_results=False)
            | QuotedString('"', esc_char="\\", unquote_results=False)
            | QuotedString("'", esc_char="\\", unquote_results=False)
        )
        string = string_token.copy().set_parse_action(_string)
        number = Regex(r"-?\d+(?:\.\d+)?[LlFfDd]?(?![\w$])").set_parse_action(_number)
        keyword_literal = (
            Keyword("true", ident_chars=IDENTIFIER_CHARS)
            | Keyword("false", ident_chars=IDENTIFIER_CHARS)
            | Keyword("null", ident_chars=IDENTIFIER_CHARS)
        ).set_parse_action(_keyword_literal)

        word = Regex(_IDENTIFIER).set_parse_action(_identifier)
        reserved = "|".join(_RESERVED)
        name = (
            Regex(rf"(?!(?:{reserved})(?![\w$]))(?:{_IDENTIFIER})")
            .set_parse_action(_identifier)
            .add_parse_action(_name)
        )

        expression = Forward()
        statement = Forward()

        body = ZeroOrMore(Suppress(newline) | statement)
        block = (Suppress("{") + body + Suppress("}")).set_parse_action(_block)

        named_argument = (
            word + Suppress(Regex(r"=(?!=)|:(?!:)")) + gap + expression
        ).set_parse_action(_named_argument)
        argument = named_argument | expression
        arguments = argument + ZeroOrMore(Suppress(",") + gap + argument)

        parenthesized = Suppress("(") + gap + expression + gap + Suppress(")")
        list_literal = (
            Suppress("[")
            + gap
            + Opt(expression + ZeroOrMore(Suppress(",") + gap + expression) + Opt(Suppress(",")))
            + gap
            + Suppress("]")
        ).set_parse_action(_list)
        atom = Opt(Suppress(Keyword("new", ident_chars=IDENTIFIER_CHARS))) + (
            string | number | keyword_literal | name | parenthesized | list_literal
        )

        attribute_suffix = (Suppress(Regex(r"\??\.(?!\.)")) + gap + word).set_parse_action(
            _suffix("attribute")
        )
        call_suffix = (
            Suppress("(") + gap + Opt(arguments + Opt(Suppress(","))) + gap + Suppress(")")
        ).set_parse_action(_suffix("call"))
        index_suffix = (Suppress("[") + gap + expression + gap + Suppress("]")).set_parse_action(
            _suffix("index")
        )
        block_suffix = block.copy().add_parse_action(_suffix("block"))

        postfix = (
            atom + ZeroOrMore(attribute_suffix | call_suffix | index_suffix | block_suffix)
        ).set_parse_action(_fold_postfix)
        expression <<= postfix

        # Kotlin infix call: receiver name argument
        infix = (word + ~Suppress("(") + expression).set_parse_action(_infix)
        # Groovy command expression: name arg1, key: value { ... }
        command = (arguments + Opt(block)).set_parse_action(_suffix("command"))
        expression_statement = (
            postfix + Opt(OneOrMore(infix) | (command + ZeroOrMore(infix)))
        ).set_parse_action(_expression_statement)

        target = (name + ZeroOrMore(attribute_suffix | index_suffix)).set_parse_action(_fold_postfix)
        assignment = (target + equals + gap + expression).set_parse_action(_assignment)

        declaration = (
            Suppress(
                Keyword("val", ident_chars=IDENTIFIER_CHARS)
                | Keyword("var", ident_chars=IDENTIFIER_CHARS)
                | Keyword("def", ident_chars=IDENTIFIER_CHARS)
            )
            + word
            + Opt(Suppress(":") + Suppress(Regex(r"[^=\n;{}]+")))
            + Opt(equals + gap + expression)
        ).set_parse_action(_declaration)

        terminator = FollowedBy(newline | Suppress("}") | StringEnd())
        declarative = (declaration | assignment | expression_statement) + terminator

        # Anything else: a balanced run of text up to the end of the line
        balanced = string_token | comment
        skipped = original_text_for(
            OneOrMore(
                string_token
                | nested_expr("(", ")", ignore_expr=balanced)
                | nested_expr("{", "}", ignore_expr=balanced)
                | nested_expr("[", "]", ignore_expr=balanced)
                | Regex(r"""(?:(?!/[/*])[^\s{}()\[\]"';])+""")
            )
        ).add_parse_action(_skipped)

        statement <<= declarative | skipped

        script = body.copy()
        script.ignore(comment)
        script.parse_with_tabs()
    return script


SCRIPT_GRAMMAR = build_script_grammar()


class ScriptSyntaxParser:
    """
    Parses build script text into a :class:`Block` with :data:`SCRIPT_GRAMMAR`.

    Raises ``ParseError`` only for structural problems (unbalanced brackets,
    unterminated strings and comments); anything else the grammar cannot
    read becomes a :class:`Skipped` statement.
    """

    def __init__(
        self, dsl: GradleDsl = GradleDsl.KOTLIN, source_file: Optional[Path] = None
    ) -> None:
        self.dsl = dsl
        self.source_file = source_file

    def parse(self, text: str) -> Block:
        """Parse a whole script."""
        try:
            statements = SCRIPT_GRAMMAR.parse_string(text, parse_all=True)
        except ParseException as e:
            raise ParseError(
                f"{describe_failure(text, e.loc)} in {self.dsl.value} build script",
                source_file=self.source_file,
                line=e.lineno,
                column=e.col,
            ) from None
        return Block(list(statements), line=1)


def describe_failure(text: str, loc: int) -> str:
    """Name the structural problem at the position the grammar stopped."""
    rest = text[loc:]
    if not rest.strip():
        return "Unexpected end of script"
    char = rest[0]
    if rest.startswith("/*"):
        return "Unterminated block comment"
    if char in _CLOSERS:
        return f"Unclosed '{char}'"
    if char in _CLOSERS.values():
        return f"Unmatched '{char}'"
    if char in "\"'":
        return "Unterminated string literal"
    return f"Unexpected character {char!r}"


def parse_script(
    text: str, source_file: Optional[Path] = None, dsl: GradleDsl = GradleDsl.KOTLIN
) -> Block:
    """Parse a build script into a syntax tree."""
    return ScriptSyntaxParser(dsl, source_file).parse(text)
