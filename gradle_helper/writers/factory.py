"""
Writer factory for creating appropriate writer instances.
"""

from pathlib import Path
from typing import Union

from ..core.enums import GradleDsl, OutputFormat
from .base import ConfigurationWriter
from .json_writer import JsonWriter
from .script_writer import GroovyScriptWriter, KotlinScriptWriter


class WriterFactory:
    """Factory for creating configuration writers."""

    @staticmethod
    def create_writer(output_format: Union[OutputFormat, str]) -> ConfigurationWriter:
        """
        Create a writer for the given output format.

        Raises:
            ValueError: If the format is not supported.
        """
        if not isinstance(output_format, OutputFormat):
            output_format = OutputFormat.from_string(output_format)

        match output_format:
            case OutputFormat.KTS:
                return KotlinScriptWriter()
            case OutputFormat.GROOVY:
                return GroovyScriptWriter()
            case OutputFormat.JSON:
                return JsonWriter()
            case _:
                raise ValueError(f"Unsupported output format: {output_format}")

    @staticmethod
    def format_for_path(path: Union[str, Path]) -> OutputFormat:
        """Pick the output format matching a destination file name."""
        if Path(path).suffix.lower() == ".json":
            return OutputFormat.JSON
        match GradleDsl.from_path(path):
            case GradleDsl.KOTLIN:
                return OutputFormat.KTS
            case _:
                return OutputFormat.GROOVY
