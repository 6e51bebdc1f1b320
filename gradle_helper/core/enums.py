"""
Enums for the Gradle configuration helper.

This module contains the enumeration types shared by the models, parsers,
validators and writers.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Union


class SigningConfigRef(StrEnum):
    """Signing identities a build variant can reference."""

    DEBUG = "debug"
    RELEASE = "release"

    @classmethod
    def from_string(cls, name: str) -> SigningConfigRef:
        """Convert a signing configuration name to an enum value."""
        normalized = name.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(ref.value for ref in cls)
            raise ValueError(
                f"Unsupported signing config: {name}. Valid signing configs: {valid}"
            ) from None


class Severity(StrEnum):
    """Severity of a validation issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Ordering key, most severe first."""
        return {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}[self]


class GradleDsl(StrEnum):
    """Build script dialects understood by the parsers."""

    KOTLIN = "kotlin"
    GROOVY = "groovy"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> GradleDsl:
        """Detect the dialect from a build script file name."""
        name = Path(path).name.lower()
        if name.endswith(".gradle.kts") or name.endswith(".kts"):
            return cls.KOTLIN
        if name.endswith(".gradle"):
            return cls.GROOVY
        raise ValueError(f"Not a Gradle build script: {path}")

    @classmethod
    def from_string(cls, name: str) -> GradleDsl:
        """Convert a dialect name (``kotlin``, ``kts``, ``groovy``) to an enum value."""
        aliases = {"kts": cls.KOTLIN, "kotlin": cls.KOTLIN, "groovy": cls.GROOVY}
        normalized = name.strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        raise ValueError(f"Unsupported Gradle dialect: {name}")


class OutputFormat(StrEnum):
    """Formats a configuration record can be written in."""

    KTS = "kts"
    GROOVY = "groovy"
    JSON = "json"

    @classmethod
    def from_string(cls, format_name: str) -> OutputFormat:
        """Convert string format name to enum value."""
        normalized = format_name.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unsupported output format: {format_name}") from None
