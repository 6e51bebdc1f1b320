"""
Parser factory for creating appropriate parser instances.

This module provides a factory for creating configuration parsers based on the
build script dialect or file name.
"""

from pathlib import Path
from typing import Union

from ..core.enums import GradleDsl
from .base import ConfigurationParser
from .gradle import GradleScriptParser


class ParserFactory:
    """Factory for creating appropriate build script parser instances."""

    @staticmethod
    def create_parser(dsl: Union[GradleDsl, str, Path]) -> ConfigurationParser:
        """
        Create and return the parser for a dialect, a dialect name, or a script path.

        Raises:
            ValueError: If the dialect or file type is not supported.
        """
        if isinstance(dsl, Path):
            dsl = GradleDsl.from_path(dsl)
        elif isinstance(dsl, str) and not isinstance(dsl, GradleDsl):
            dsl = GradleDsl.from_string(dsl)

        match dsl:
            case GradleDsl.KOTLIN:
                return GradleScriptParser(GradleDsl.KOTLIN)
            case GradleDsl.GROOVY:
                return GradleScriptParser(GradleDsl.GROOVY)
            case _:
                raise ValueError(f"Unsupported Gradle dialect: {dsl}")

    @staticmethod
    def is_build_script(file_path: Union[str, Path]) -> bool:
        try:
            GradleDsl.from_path(file_path)
        except ValueError:
            return False
        return True
