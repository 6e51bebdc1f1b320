#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Validation rules for build configuration records.

Each rule inspects one concern and yields :class:`ValidationIssue` objects.
Rules are registered by id with :func:`register_rule`; a rule that needs a
value which is missing or still a property reference stays silent, because
``required-fields`` and ``unresolved-reference`` already report those.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type

from ..core.enums import Severity, SigningConfigRef
from ..core.models import (
    ANDROID_APPLICATION_PLUGIN,
    DESUGAR_JDK_LIBS,
    DESUGARING_CONFIGURATION,
    FLUTTER_GRADLE_PLUGIN,
    MULTIDEX_LIBRARY,
    BuildConfiguration,
)
from ..core.report import ValidationIssue

MIN_SDK_FOR_DESUGARING = 21
MIN_DESUGAR_JDK_LIBS_VERSION = (2, 1, 4)
MAX_VERSION_CODE = 2_100_000_000

# Names used in messages, as they appear in a build script
FIELD_LABELS: Dict[str, str] = {
    "application_id": "applicationId",
    "namespace": "namespace",
    "compile_sdk": "compileSdk",
    "min_sdk": "minSdk",
    "target_sdk": "targetSdk",
    "version_code": "versionCode",
    "version_name": "versionName",
    "ndk_version": "ndkVersion",
    "source_compatibility": "sourceCompatibility",
    "target_compatibility": "targetCompatibility",
    "jvm_target": "jvmTarget",
}

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$")

RULE_REGISTRY: Dict[str, Type[ValidationRule]] = {}


def register_rule(rule_class: Type[ValidationRule]) -> Type[ValidationRule]:
    """Class decorator adding a rule to the default rule set."""
    if rule_class.rule_id in RULE_REGISTRY:
        raise ValueError(f"Duplicate validation rule id: {rule_class.rule_id}")
    RULE_REGISTRY[rule_class.rule_id] = rule_class
    return rule_class


def default_rules() -> List[ValidationRule]:
    """Fresh instances of every registered rule, in registration order."""
    return [rule_class() for rule_class in RULE_REGISTRY.values()]


def _int(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def version_tuple(version: str) -> Optional[Tuple[int, ...]]:
    """``"2.1.4"`` as ``(2, 1, 4)``; None when the version is not numeric."""
    base = version.strip().split("-")[0]
    if not re.fullmatch(r"\d+(\.\d+)*", base):
        return None
    return tuple(int(part) for part in base.split("."))


class ValidationRule(ABC):
    """Base class for validation rules."""

    rule_id: ClassVar[str]
    description: ClassVar[str]
    severity: ClassVar[Severity] = Severity.ERROR

    @abstractmethod
    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        """Yield the issues this rule finds in ``record``."""

    def issue(
        self,
        message: str,
        field: Optional[str] = None,
        severity: Optional[Severity] = None,
    ) -> ValidationIssue:
        return ValidationIssue(
            rule=self.rule_id,
            severity=severity or self.severity,
            message=message,
            field=field,
        )


@register_rule
class RequiredFieldsRule(ValidationRule):
    rule_id = "required-fields"
    description = "Identifiers, SDK levels and version fields are set"

    REQUIRED = (
        "application_id",
        "namespace",
        "compile_sdk",
        "min_sdk",
        "target_sdk",
        "version_code",
        "version_name",
    )

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        for field_name in self.REQUIRED:
            value = getattr(record, field_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                yield self.issue(f"{FIELD_LABELS[field_name]} is not set", field_name)


@register_rule
class UnresolvedReferenceRule(ValidationRule):
    rule_id = "unresolved-reference"
    description = "No field still refers to a value supplied at build time"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        for field_name, reference in record.references().items():
            yield self.issue(
                f"{FIELD_LABELS[field_name]} refers to '{reference}', which has not been resolved",
                field_name,
            )


@register_rule
class DesugaringMinSdkRule(ValidationRule):
    rule_id = "desugaring-min-sdk"
    description = f"Desugaring requires minSdk >= {MIN_SDK_FOR_DESUGARING}"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        min_sdk = _int(record.min_sdk)
        if record.desugaring_enabled and min_sdk is not None and min_sdk < MIN_SDK_FOR_DESUGARING:
            yield self.issue(
                f"Core library desugaring requires minSdk >= {MIN_SDK_FOR_DESUGARING}, "
                f"but minSdk is {min_sdk}",
                "min_sdk",
            )


@register_rule
class DesugaringLibraryRule(ValidationRule):
    rule_id = "desugaring-library"
    description = "Desugaring requires the desugar_jdk_libs dependency"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        if not record.desugaring_enabled:
            return
        if record.has_dependency(*DESUGAR_JDK_LIBS, configuration=DESUGARING_CONFIGURATION):
            return

        coordinate = ":".join(DESUGAR_JDK_LIBS)
        misplaced = record.find_dependency(*DESUGAR_JDK_LIBS)
        if misplaced is not None:
            message = (
                f"{coordinate} is declared under '{misplaced.configuration}' but "
                f"desugaring needs it under '{DESUGARING_CONFIGURATION}'"
            )
        else:
            message = (
                f"Core library desugaring is enabled but no "
                f"{DESUGARING_CONFIGURATION}(\"{coordinate}:<version>\") dependency is declared"
            )
        yield self.issue(message, "dependencies")


@register_rule
class DesugaringLibraryVersionRule(ValidationRule):
    rule_id = "desugaring-library-version"
    description = "desugar_jdk_libs is at least the recommended version"
    severity = Severity.WARNING

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        dependency = record.find_dependency(
            *DESUGAR_JDK_LIBS, configuration=DESUGARING_CONFIGURATION
        )
        if dependency is None:
            return
        minimum = ".".join(str(part) for part in MIN_DESUGAR_JDK_LIBS_VERSION)
        if not dependency.version:
            yield self.issue(
                f"{dependency.coordinate} has no version; use {minimum} or newer",
                "dependencies",
            )
            return
        version = version_tuple(dependency.version)
        if version is not None and version < MIN_DESUGAR_JDK_LIBS_VERSION:
            yield self.issue(
                f"{dependency.notation} is older than the recommended {minimum}",
                "dependencies",
            )


@register_rule
class DesugaringLibraryUnusedRule(ValidationRule):
    rule_id = "desugaring-library-unused"
    description = "desugar_jdk_libs is only declared when desugaring is enabled"
    severity = Severity.WARNING

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        if record.desugaring_enabled:
            return
        dependency = record.find_dependency(
            *DESUGAR_JDK_LIBS, configuration=DESUGARING_CONFIGURATION
        )
        if dependency is not None:
            yield self.issue(
                f"{dependency.notation} is declared but core library desugaring is disabled",
                "desugaring_enabled",
            )


@register_rule
class MultidexLibraryRule(ValidationRule):
    rule_id = "multidex-library"
    description = "Multidex requires the androidx multidex dependency"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        if record.multidex_enabled and not record.has_dependency(*MULTIDEX_LIBRARY):
            yield self.issue(
                f"Multidex is enabled but {':'.join(MULTIDEX_LIBRARY)} is not declared",
                "dependencies",
            )


@register_rule
class SdkOrderingRule(ValidationRule):
    rule_id = "sdk-ordering"
    description = "minSdk <= targetSdk <= compileSdk"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        min_sdk = _int(record.min_sdk)
        target_sdk = _int(record.target_sdk)
        compile_sdk = _int(record.compile_sdk)

        if min_sdk is not None and target_sdk is not None and min_sdk > target_sdk:
            yield self.issue(
                f"minSdk ({min_sdk}) is higher than targetSdk ({target_sdk})", "min_sdk"
            )
        if target_sdk is not None and compile_sdk is not None and target_sdk > compile_sdk:
            yield self.issue(
                f"targetSdk ({target_sdk}) is higher than compileSdk ({compile_sdk})",
                "target_sdk",
                severity=Severity.WARNING,
            )


@register_rule
class VersionCodeRangeRule(ValidationRule):
    rule_id = "version-code-range"
    description = f"versionCode is between 1 and {MAX_VERSION_CODE}"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        version_code = _int(record.version_code)
        if version_code is not None and not 1 <= version_code <= MAX_VERSION_CODE:
            yield self.issue(
                f"versionCode must be between 1 and {MAX_VERSION_CODE}, got {version_code}",
                "version_code",
            )


@register_rule
class IdentifierFormatRule(ValidationRule):
    rule_id = "identifier-format"
    description = "applicationId and namespace are dotted identifiers"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        for field_name in ("application_id", "namespace"):
            value = _text(getattr(record, field_name))
            if value is not None and not _IDENTIFIER_PATTERN.match(value):
                yield self.issue(
                    f"{FIELD_LABELS[field_name]} '{value}' must have at least two "
                    "dot-separated segments, each starting with a letter",
                    field_name,
                )


@register_rule
class RequiredPluginsRule(ValidationRule):
    rule_id = "required-plugins"
    description = "The Android application and Flutter Gradle plugins are applied"

    REQUIRED = (ANDROID_APPLICATION_PLUGIN, FLUTTER_GRADLE_PLUGIN)

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        for plugin_id in self.REQUIRED:
            if not record.has_plugin(plugin_id):
                yield self.issue(f"Plugin '{plugin_id}' is not applied", "plugins")


@register_rule
class SigningConfigDeclaredRule(ValidationRule):
    rule_id = "signing-config-declared"
    description = "Referenced signing identities are declared"

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        declared = record.declared_signing_configs
        for build_type in record.build_types:
            reference = build_type.signing_config
            if reference is not None and reference.value not in declared:
                yield self.issue(
                    f"Build type '{build_type.name}' uses signing config "
                    f"'{reference.value}', which is not declared in signingConfigs",
                    "build_types",
                )


@register_rule
class ReleaseDebugSigningRule(ValidationRule):
    rule_id = "release-debug-signing"
    description = "The release build type is not signed with the debug key"
    severity = Severity.WARNING

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        release = record.build_type(SigningConfigRef.RELEASE.value)
        if release is not None and release.signing_config == SigningConfigRef.DEBUG:
            yield self.issue(
                "The release build type is signed with the debug key; "
                "declare a release signing config before publishing",
                "build_types",
            )


@register_rule
class JavaCompatibilityRule(ValidationRule):
    rule_id = "java-compatibility"
    description = "Java source, target and JVM target levels agree"
    severity = Severity.WARNING

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        levels = {
            FIELD_LABELS[name]: value
            for name in ("source_compatibility", "target_compatibility", "jvm_target")
            if (value := getattr(record, name)) is not None
        }
        if len(set(levels.values())) > 1:
            described = ", ".join(f"{label}={value}" for label, value in levels.items())
            yield self.issue(f"Java levels disagree: {described}", "jvm_target")


@register_rule
class DuplicateDependencyRule(ValidationRule):
    rule_id = "duplicate-dependency"
    description = "A library is not declared with conflicting versions"
    severity = Severity.WARNING

    def check(self, record: BuildConfiguration) -> Iterator[ValidationIssue]:
        versions: Dict[str, List[str]] = defaultdict(list)
        for dependency in record.dependencies:
            if dependency.version and dependency.version not in versions[dependency.coordinate]:
                versions[dependency.coordinate].append(dependency.version)

        for coordinate, declared in versions.items():
            if len(declared) > 1:
                yield self.issue(
                    f"{coordinate} is declared with conflicting versions: {', '.join(declared)}",
                    "dependencies",
                )
