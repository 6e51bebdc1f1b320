"""
Gradle build script parser.

This module ties the grammar and the mapper together for Kotlin DSL
(``build.gradle.kts``) and Groovy DSL (``build.gradle``) scripts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..core.enums import GradleDsl
from ..core.errors import ConfigurationError
from ..core.models import BuildConfiguration
from .mapper import ConfigurationMapper
from .grammar import parse_script


class GradleScriptParser:
    """Parser for Android application module build scripts."""

    def __init__(self, dsl: GradleDsl = GradleDsl.KOTLIN) -> None:
        """Initialize the parser for one dialect."""
        self.dsl = dsl

    def parse(self, text: str, source_file: Optional[Path] = None) -> BuildConfiguration:
        """
        Parse build script text.

        Raises:
            ParseError: If the script is structurally malformed.
            ConfigurationError: If a declared value is invalid.
        """
        script = parse_script(text, source_file, self.dsl)
        return ConfigurationMapper(source_file).map(script)

    def parse_file(self, file_path: Union[str, Path]) -> BuildConfiguration:
        """Read and parse a build script file."""
        path = Path(file_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read build script: {e}", config_file=path, cause=e
            ) from e

        logger.debug(f"Parsing {self.dsl.value} build script {path}")
        return self.parse(text, path)
