"""
Parser modules for Gradle build scripts.

This module provides the pyparsing grammar and the mapper that turn Kotlin
DSL and Groovy DSL build scripts into configuration records.
"""

from .base import ConfigurationParser
from .gradle import GradleScriptParser
from .factory import ParserFactory
from .grammar import SCRIPT_GRAMMAR, ScriptSyntaxParser, build_script_grammar, parse_script
from .mapper import ConfigurationMapper

__all__ = [
    'ConfigurationParser',
    'GradleScriptParser',
    'ParserFactory',
    'ConfigurationMapper',
    'ScriptSyntaxParser',
    'SCRIPT_GRAMMAR',
    'build_script_grammar',
    'parse_script',
]
