"""
Base writer interface.

This module defines the protocol that all configuration writers must implement.
"""

from typing import Protocol
from pathlib import Path

from ..core.models import BuildConfiguration


class ConfigurationWriter(Protocol):
    """Protocol defining interface for configuration writers."""

    def render(self, record: BuildConfiguration) -> str:
        """Render the record as text."""
        ...

    def write(self, record: BuildConfiguration, output_path: Path) -> None:
        """Write the rendered record to the specified path."""
        ...
