#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Resolution of the property references a build script borrows from Flutter.

A Flutter application module writes ``compileSdk = flutter.compileSdkVersion``
and similar; the Flutter Gradle plugin fills those in from its own defaults,
from ``local.properties`` and, indirectly, from ``pubspec.yaml``. This module
reproduces that lookup so a record can be validated before Gradle runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..utils.properties import read_properties, read_pubspec_version
from .enums import GradleDsl
from .errors import ErrorContext, ResolutionError
from .models import BuildConfiguration, PropertyReference

# Values the Flutter Gradle plugin supplies when nothing overrides them
DEFAULT_FLUTTER_PROPERTIES: Dict[str, str] = {
    "flutter.compileSdkVersion": "35",
    "flutter.targetSdkVersion": "35",
    "flutter.minSdkVersion": "21",
    "flutter.ndkVersion": "27.0.12077973",
    "flutter.versionCode": "1",
    "flutter.versionName": "1.0",
}

DEFAULT_FLUTTER_SOURCE = "../.."


class FlutterProperties(BaseModel):
    """Layered property values used to resolve references."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    values: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_FLUTTER_PROPERTIES)
    )
    sources: List[str] = Field(
        default_factory=lambda: ["defaults"],
        description="Where values came from, lowest priority first",
    )

    def get(self, expression: str) -> Optional[str]:
        return self.values.get(expression)

    def __contains__(self, expression: object) -> bool:
        return expression in self.values

    def with_overrides(
        self, overrides: Mapping[str, str], source: str = "overrides"
    ) -> FlutterProperties:
        """Return a copy where ``overrides`` win over existing values."""
        if not overrides:
            return self
        return FlutterProperties(
            values={**self.values, **{k: str(v) for k, v in overrides.items()}},
            sources=[*self.sources, source],
        )

    @classmethod
    def discover(
        cls,
        location: Union[BuildConfiguration, Path, str, None] = None,
        *,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> FlutterProperties:
        """
        Collect property values for a record or a Flutter project directory.

        Layers, lowest priority first: plugin defaults, ``pubspec.yaml``,
        ``android/local.properties``, explicit ``overrides``.

        Args:
            location: A record read from a build script (its ``flutter.source``
                locates the project), a Flutter project directory, or None
                for defaults only.
            overrides: Values that win over every discovered source.

        Raises:
            ConfigurationError: If a discovered file is unreadable.
        """
        properties = cls()
        flutter_root, android_dir = cls._locate(location)

        if flutter_root is not None:
            pubspec = flutter_root / "pubspec.yaml"
            if pubspec.is_file():
                version = read_pubspec_version(pubspec)
                if version is not None:
                    build_name, build_number = version
                    layer = {"flutter.versionName": build_name}
                    if build_number is not None:
                        layer["flutter.versionCode"] = str(build_number)
                    properties = properties.with_overrides(layer, str(pubspec))

        if android_dir is not None:
            local_properties = android_dir / "local.properties"
            if local_properties.is_file():
                properties = properties.with_overrides(
                    read_properties(local_properties), str(local_properties)
                )

        properties = properties.with_overrides(overrides or {})
        logger.debug(f"Flutter properties resolved from: {', '.join(properties.sources)}")
        return properties

    @staticmethod
    def _locate(location):
        if location is None:
            return None, None

        if isinstance(location, BuildConfiguration):
            if location.source_file is None:
                return None, None
            source_file = Path(location.source_file).resolve()
            if not _is_build_script(source_file):
                # data files sit in the Flutter project directory
                return source_file.parent, source_file.parent / "android"
            module_dir = source_file.parent
            flutter_root = (
                module_dir / (location.flutter_source or DEFAULT_FLUTTER_SOURCE)
            ).resolve()
            return flutter_root, module_dir.parent

        project_dir = Path(location).resolve()
        return project_dir, project_dir / "android"


def _is_build_script(path: Path) -> bool:
    try:
        GradleDsl.from_path(path)
    except ValueError:
        return False
    return True


class ConfigurationResolver:
    """Replaces every property reference in a record with a concrete value."""

    def __init__(self, properties: Optional[FlutterProperties] = None) -> None:
        self.properties = properties or FlutterProperties()

    def resolve_reference(
        self, field_name: str, reference: PropertyReference, source_file: Optional[Path] = None
    ) -> Union[int, str]:
        """
        Resolve one reference for one field.

        Raises:
            ResolutionError: If the reference is unknown, or an integer field
                receives a non-integer value.
        """
        raw = self.properties.get(reference.expression)
        if raw is None:
            known = ", ".join(sorted(self.properties.values))
            raise ResolutionError(
                f"Unknown property reference '{reference.expression}'. Known properties: {known}",
                reference=reference.expression,
                field_name=field_name,
                context=ErrorContext(source_file=source_file),
            )

        if field_name not in BuildConfiguration.INTEGER_FIELDS:
            return raw

        try:
            return int(raw.strip())
        except ValueError:
            raise ResolutionError(
                f"Property '{reference.expression}' must be an integer, got {raw!r}",
                reference=reference.expression,
                field_name=field_name,
                context=ErrorContext(source_file=source_file),
            ) from None

    def resolve(self, record: BuildConfiguration) -> BuildConfiguration:
        """Return a resolved copy of ``record``; the input is left untouched."""
        references = record.references()
        if not references:
            return record

        updates = {
            field_name: self.resolve_reference(field_name, reference, record.source_file)
            for field_name, reference in references.items()
        }
        for field_name, value in updates.items():
            logger.debug(f"Resolved {field_name}: {references[field_name]} -> {value!r}")
        return record.model_copy(update=updates)


def resolve_configuration(
    record: BuildConfiguration,
    overrides: Optional[Mapping[str, str]] = None,
) -> BuildConfiguration:
    """Discover properties for ``record`` and resolve it in one step."""
    properties = FlutterProperties.discover(record, overrides=overrides)
    return ConfigurationResolver(properties).resolve(record)
