#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data models for Android build configuration records.

The central model is :class:`BuildConfiguration`, an immutable view of what an
application module's ``build.gradle(.kts)`` declares. Values the Flutter tool
only supplies at build time are held as :class:`PropertyReference` until a
resolver replaces them.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Tuple, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .enums import SigningConfigRef
from .errors import ConfigurationError

# Plugin identifiers a Flutter application module applies
ANDROID_APPLICATION_PLUGIN = "com.android.application"
KOTLIN_ANDROID_PLUGIN = "kotlin-android"
FLUTTER_GRADLE_PLUGIN = "dev.flutter.flutter-gradle-plugin"

# Well-known library coordinates
DESUGARING_CONFIGURATION = "coreLibraryDesugaring"
DESUGAR_JDK_LIBS = ("com.android.tools", "desugar_jdk_libs")
MULTIDEX_LIBRARY = ("androidx.multidex", "multidex")

_REFERENCE_PATTERN = re.compile(r"^flutter\.[A-Za-z_]\w*$")
# Validation context key: strings are literal values, never references
LITERAL_STRINGS = "literal_strings"
_COORDINATE_PART = re.compile(r"^[A-Za-z0-9_.\-]+$")


class PropertyReference(BaseModel):
    """A symbolic value supplied by the external build tool, e.g. ``flutter.versionCode``."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    expression: str = Field(min_length=1, description="Property expression")

    @property
    def namespace(self) -> Optional[str]:
        """Owner of the property (``flutter`` for ``flutter.versionCode``)."""
        head, sep, _ = self.expression.partition(".")
        return head if sep else None

    @property
    def property_name(self) -> str:
        """Name of the property without its owner."""
        return self.expression.rpartition(".")[2]

    def __str__(self) -> str:
        return self.expression


IntValue: TypeAlias = Union[int, PropertyReference]
StrValue: TypeAlias = Union[str, PropertyReference]


def _coerce_reference(value: Any) -> Any:
    if isinstance(value, str) and _REFERENCE_PATTERN.match(value.strip()):
        return PropertyReference(expression=value.strip())
    return value


class Dependency(BaseModel):
    """An external library declared in the ``dependencies`` block."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    configuration: str = Field(description="Gradle configuration, e.g. implementation")
    group: str = Field(description="Maven group id")
    name: str = Field(description="Maven artifact id")
    version: Optional[str] = Field(default=None, description="Requested version")

    @field_validator("configuration", "group", "name")
    @classmethod
    def validate_part(cls, v: str) -> str:
        if not _COORDINATE_PART.match(v):
            raise ValueError(f"invalid coordinate part: {v!r}")
        return v

    @classmethod
    def from_coordinate(cls, configuration: str, notation: str) -> Dependency:
        """
        Build a dependency from ``group:name[:version]`` notation.

        Raises:
            ConfigurationError: If the notation is not a Maven coordinate.
        """
        parts = notation.strip().split(":")
        if len(parts) not in (2, 3) or not all(parts[:2]):
            raise ConfigurationError(
                f"Invalid dependency coordinate: {notation!r} "
                "(expected group:name:version)",
                invalid_option=configuration,
            )
        version = parts[2] if len(parts) == 3 and parts[2] else None
        try:
            return cls(
                configuration=configuration,
                group=parts[0],
                name=parts[1],
                version=version,
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid dependency coordinate: {notation!r}",
                invalid_option=configuration,
                cause=e,
            ) from e

    @property
    def coordinate(self) -> str:
        """``group:name`` without the version."""
        return f"{self.group}:{self.name}"

    @property
    def notation(self) -> str:
        """``group:name:version`` as written in a build script."""
        if self.version:
            return f"{self.coordinate}:{self.version}"
        return self.coordinate

    def matches(self, group: str, name: str) -> bool:
        return self.group == group and self.name == name


class BuildType(BaseModel):
    """A build variant from the ``buildTypes`` block."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1, description="Build type name")
    signing_config: Optional[SigningConfigRef] = Field(
        default=None, description="Signing identity used by this variant"
    )
    minify_enabled: Optional[bool] = None
    shrink_resources: Optional[bool] = None
    debuggable: Optional[bool] = None

    @field_validator("signing_config", mode="before")
    @classmethod
    def validate_signing_config(cls, v: Any) -> Any:
        if isinstance(v, str):
            return SigningConfigRef.from_string(v)
        return v


class BuildConfiguration(BaseModel):
    """
    Build Configuration Record of an Android application module.

    Authored once by a developer and re-read on every build; never mutated.
    Use ``model_copy(update=...)`` to derive a modified record.
    """

    model_config = ConfigDict(
        extra="forbid", frozen=True, str_strip_whitespace=True
    )

    plugins: List[str] = Field(default_factory=list, description="Applied plugin ids")
    application_id: Optional[StrValue] = Field(
        default=None, description="Reverse-domain application identifier"
    )
    namespace: Optional[StrValue] = Field(default=None, description="Package namespace")
    compile_sdk: Optional[IntValue] = Field(default=None, description="compileSdk")
    min_sdk: Optional[IntValue] = Field(default=None, description="minSdk")
    target_sdk: Optional[IntValue] = Field(default=None, description="targetSdk")
    version_code: Optional[IntValue] = Field(default=None, description="versionCode")
    version_name: Optional[StrValue] = Field(default=None, description="versionName")
    ndk_version: Optional[StrValue] = Field(default=None, description="ndkVersion")

    desugaring_enabled: bool = Field(
        default=False, description="Core library desugaring"
    )
    multidex_enabled: bool = Field(default=False, description="Multidex support")

    source_compatibility: Optional[str] = None
    target_compatibility: Optional[str] = None
    jvm_target: Optional[str] = None

    build_types: List[BuildType] = Field(default_factory=list)
    signing_configs: List[str] = Field(
        default_factory=list, description="Declared signing identities"
    )
    dependencies: List[Dependency] = Field(default_factory=list)
    flutter_source: Optional[str] = Field(
        default=None, description="Flutter project path relative to the module"
    )

    source_file: Optional[Path] = Field(
        default=None, exclude=True, description="File this record was read from"
    )

    @field_validator(
        "application_id",
        "namespace",
        "compile_sdk",
        "min_sdk",
        "target_sdk",
        "version_code",
        "version_name",
        "ndk_version",
        mode="before",
    )
    @classmethod
    def coerce_references(cls, v: Any, info: ValidationInfo) -> Any:
        """
        Turn ``flutter.x`` strings from data files into references.

        Build scripts spell references without quotes, so a record mapped from
        a script is validated with ``context={LITERAL_STRINGS: True}`` and its
        quoted strings stay strings.
        """
        if isinstance(v, bool):
            raise ValueError("boolean is not a valid value")
        if isinstance(v, (int, float)) and info.field_name not in cls.INTEGER_FIELDS:
            return str(v)
        if info.context and info.context.get(LITERAL_STRINGS):
            return v
        return _coerce_reference(v)

    @field_validator("source_compatibility", "target_compatibility", "jvm_target", mode="before")
    @classmethod
    def normalize_java_version(cls, v: Any) -> Any:
        """Accept ``11``, ``"11"``, ``"VERSION_11"`` and ``"JavaVersion.VERSION_1_8"``."""
        if v is None:
            return v
        return java_version_string(v)

    @field_validator("plugins", "signing_configs")
    @classmethod
    def dedupe(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(item.strip() for item in v if item.strip()))

    # Reference handling

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = (
        "application_id",
        "namespace",
        "compile_sdk",
        "min_sdk",
        "target_sdk",
        "version_code",
        "version_name",
        "ndk_version",
    )
    INTEGER_FIELDS: ClassVar[Tuple[str, ...]] = ("compile_sdk", "min_sdk", "target_sdk", "version_code")

    def references(self) -> Dict[str, PropertyReference]:
        """Map of field name to the reference it still holds."""
        return {
            name: value
            for name in self.REFERENCE_FIELDS
            if isinstance(value := getattr(self, name), PropertyReference)
        }

    @property
    def is_resolved(self) -> bool:
        return not self.references()

    # Lookups

    def find_dependency(
        self, group: str, name: str, configuration: Optional[str] = None
    ) -> Optional[Dependency]:
        """First dependency on ``group:name``, optionally within one configuration."""
        for dependency in self.dependencies:
            if dependency.matches(group, name) and (
                configuration is None or dependency.configuration == configuration
            ):
                return dependency
        return None

    def has_dependency(
        self, group: str, name: str, configuration: Optional[str] = None
    ) -> bool:
        return self.find_dependency(group, name, configuration) is not None

    def build_type(self, name: str) -> Optional[BuildType]:
        for build_type in self.build_types:
            if build_type.name == name:
                return build_type
        return None

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self.plugins

    @property
    def declared_signing_configs(self) -> List[str]:
        """Declared signing identities; ``debug`` is always provided by the Android plugin."""
        return list(dict.fromkeys([SigningConfigRef.DEBUG.value, *self.signing_configs]))

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view with references written as their expressions."""
        data = self.model_dump(mode="json", exclude={"source_file"})
        for name in self.REFERENCE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, PropertyReference):
                data[name] = value.expression
        return data


def java_version_string(value: Any) -> str:
    """
    Normalize a Java language level.

    ``11``, ``"11"``, ``"VERSION_11"``, ``"JavaVersion.VERSION_11"`` all become
    ``"11"``; ``"VERSION_1_8"`` becomes ``"1.8"``.
    """
    text = str(value).strip().strip("'\"")
    if text.startswith("JavaVersion."):
        text = text[len("JavaVersion."):]
    if text.startswith("VERSION_"):
        text = text[len("VERSION_"):].replace("_", ".")
    if not re.fullmatch(r"\d+(\.\d+)?", text):
        raise ValueError(f"invalid Java version: {value!r}")
    return text
