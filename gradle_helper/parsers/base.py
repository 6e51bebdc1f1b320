"""
Base parser interface.

This module defines the protocol that all build configuration parsers must
implement.
"""

from pathlib import Path
from typing import Optional, Protocol, Union

from ..core.models import BuildConfiguration


class ConfigurationParser(Protocol):
    """Protocol defining interface for build configuration parsers."""

    def parse(self, text: str, source_file: Optional[Path] = None) -> BuildConfiguration:
        """Parse source text into a BuildConfiguration."""
        ...

    def parse_file(self, file_path: Union[str, Path]) -> BuildConfiguration:
        """Read and parse a file into a BuildConfiguration."""
        ...
