#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mapping of a build script syntax tree onto a :class:`BuildConfiguration`.

The mapper walks blocks keeping track of the path it is in
(``android`` → ``defaultConfig``) and recognises the properties a Flutter
application module declares, under both their Kotlin DSL and Groovy DSL names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ConfigurationError, ErrorContext, handle_error
from ..core.models import (
    FLUTTER_GRADLE_PLUGIN,
    LITERAL_STRINGS,
    BuildConfiguration,
    Dependency,
    PropertyReference,
    java_version_string,
)
from .syntax import (
    Assignment,
    Attribute,
    Block,
    Call,
    Declaration,
    Index,
    ListNode,
    Literal,
    Name,
    Node,
    Skipped,
    dotted_path,
    render,
)

ScopePath = Tuple[str, ...]

ANDROID = ("android",)
DEFAULT_CONFIG = ("android", "defaultConfig")
COMPILE_OPTIONS = ("android", "compileOptions")
KOTLIN_OPTIONS = ("android", "kotlinOptions")
BUILD_TYPES = ("android", "buildTypes")
SIGNING_CONFIGS = ("android", "signingConfigs")

# (scope, property name) -> record field
PROPERTY_FIELDS: Dict[Tuple[ScopePath, str], str] = {
    (ANDROID, "namespace"): "namespace",
    (ANDROID, "compileSdk"): "compile_sdk",
    (ANDROID, "compileSdkVersion"): "compile_sdk",
    (ANDROID, "ndkVersion"): "ndk_version",
    (DEFAULT_CONFIG, "applicationId"): "application_id",
    (DEFAULT_CONFIG, "minSdk"): "min_sdk",
    (DEFAULT_CONFIG, "minSdkVersion"): "min_sdk",
    (DEFAULT_CONFIG, "targetSdk"): "target_sdk",
    (DEFAULT_CONFIG, "targetSdkVersion"): "target_sdk",
    (DEFAULT_CONFIG, "versionCode"): "version_code",
    (DEFAULT_CONFIG, "versionName"): "version_name",
    (DEFAULT_CONFIG, "multiDexEnabled"): "multidex_enabled",
    (COMPILE_OPTIONS, "sourceCompatibility"): "source_compatibility",
    (COMPILE_OPTIONS, "targetCompatibility"): "target_compatibility",
    (COMPILE_OPTIONS, "isCoreLibraryDesugaringEnabled"): "desugaring_enabled",
    (COMPILE_OPTIONS, "coreLibraryDesugaringEnabled"): "desugaring_enabled",
    (KOTLIN_OPTIONS, "jvmTarget"): "jvm_target",
    (("kotlinOptions",), "jvmTarget"): "jvm_target",
    (("kotlin", "compilerOptions"), "jvmTarget"): "jvm_target",
    (("flutter",), "source"): "flutter_source",
}

BUILD_TYPE_FIELDS: Dict[str, str] = {
    "signingConfig": "signing_config",
    "isMinifyEnabled": "minify_enabled",
    "minifyEnabled": "minify_enabled",
    "isShrinkResources": "shrink_resources",
    "shrinkResources": "shrink_resources",
    "isDebuggable": "debuggable",
    "debuggable": "debuggable",
}

BOOLEAN_FIELDS = frozenset(
    {"desugaring_enabled", "multidex_enabled", "minify_enabled", "shrink_resources", "debuggable"}
)
JAVA_VERSION_FIELDS = frozenset({"source_compatibility", "target_compatibility", "jvm_target"})

# Container accessors that name an element: getByName("release") { }
_NAMED_ACCESSORS = frozenset({"getByName", "create", "maybeCreate", "register", "named"})
_PASS_THROUGH_CALLS = frozenset({"toInt", "toInteger", "toString", "trim"})
_KOTLIN_PLUGIN_PREFIX = "org.jetbrains.kotlin."


class _Unevaluable(Exception):
    """Raised when an expression has no static value."""


@dataclass
class _MappingState:
    fields: Dict[str, Any] = field(default_factory=dict)
    plugins: List[str] = field(default_factory=list)
    build_types: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    signing_configs: List[str] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    variables: Dict[str, Any] = field(default_factory=dict)


class ConfigurationMapper:
    """Turns a parsed build script into a configuration record."""

    def __init__(self, source_file: Optional[Path] = None) -> None:
        self.source_file = source_file
        self._state = _MappingState()

    def map(self, script: Block) -> BuildConfiguration:
        """
        Map a whole script.

        Raises:
            ConfigurationError: If a declared value is invalid for its field
                (e.g. a malformed dependency coordinate or unknown signing config).
        """
        self._state = _MappingState()
        self._walk(script.statements, ())

        state = self._state
        data: Dict[str, Any] = dict(state.fields)
        data["plugins"] = state.plugins
        data["signing_configs"] = state.signing_configs
        data["dependencies"] = state.dependencies
        data["build_types"] = [
            {"name": name, **values} for name, values in state.build_types.items()
        ]

        try:
            record = BuildConfiguration.model_validate(
                {**data, "source_file": self.source_file}, context={LITERAL_STRINGS: True}
            )
        except PydanticValidationError as e:
            raise handle_error(
                "map", e, context=ErrorContext(source_file=self.source_file)
            ) from e

        logger.debug(
            f"Mapped build script: {len(record.plugins)} plugin(s), "
            f"{len(record.dependencies)} dependenc(ies), "
            f"{len(record.build_types)} build type(s)"
        )
        return record

    # Walking

    def _walk(self, statements: List[Node], scope: ScopePath) -> None:
        for statement in statements:
            match statement:
                case Declaration(name=name, value=value):
                    self._state.variables[name] = self._try_evaluate(value) if value else None
                case Assignment(target=target, value=value):
                    path = dotted_path(target)
                    if path is None:
                        logger.debug(f"Ignoring assignment to {render(target)} at line {statement.line}")
                        continue
                    full = scope + path
                    self._set_property(full[:-1], full[-1], value)
                case Call(args=args, kwargs=kwargs) if scope == ("dependencies",) and (args or kwargs):
                    # implementation("g:n:v") { exclude(...) }
                    self._handle_call(scope, statement)
                case Call(block=Block() as block):
                    self._enter_block(scope, statement, block)
                case Call():
                    self._handle_call(scope, statement)
                case Skipped(text=text):
                    logger.debug(f"Skipped statement at line {statement.line}: {text[:60]}")
                case _:
                    logger.debug(f"Ignoring statement {render(statement)} at line {statement.line}")

    def _enter_block(self, scope: ScopePath, call: Call, block: Block) -> None:
        path = dotted_path(call.callee)
        if path is None:
            logger.debug(f"Ignoring block {render(call.callee)} at line {call.line}")
            return

        full = scope + path
        if full[-1] in _NAMED_ACCESSORS and full[:-1] in (BUILD_TYPES, SIGNING_CONFIGS):
            name = self._first_string_argument(call)
            if name is None:
                logger.debug(f"Ignoring unnamed {full[-1]} block at line {call.line}")
                return
            full = full[:-1] + (name,)

        if len(full) == 3 and full[:2] == BUILD_TYPES:
            self._state.build_types.setdefault(full[2], {})
        elif len(full) == 3 and full[:2] == SIGNING_CONFIGS:
            if full[2] not in self._state.signing_configs:
                self._state.signing_configs.append(full[2])
            # keystore details are never part of the record
            return

        self._walk(block.statements, full)

    def _handle_call(self, scope: ScopePath, call: Call) -> None:
        if scope == ("plugins",):
            self._add_plugin_from_call(call)
            return

        path = dotted_path(call.callee)
        if path is None:
            logger.debug(f"Ignoring call {render(call)} at line {call.line}")
            return

        if scope == ("dependencies",) and len(path) == 1:
            self._add_dependency(path[0], call)
            return

        full = scope + path
        if full == ("apply",):
            self._apply(call)
            return

        if len(call.args) == 1 and not call.kwargs:
            self._set_property(full[:-1], full[-1], call.args[0])
        else:
            logger.debug(f"Ignoring call {render(call)} at line {call.line}")

    # Plugins

    def _add_plugin(self, plugin_id: str) -> None:
        if plugin_id not in self._state.plugins:
            self._state.plugins.append(plugin_id)

    def _add_plugin_from_call(self, call: Call) -> None:
        # id("x") version "1.0" apply false
        while isinstance(call.callee, Attribute) and isinstance(call.callee.receiver, Call):
            call = call.callee.receiver

        match dotted_path(call.callee):
            case ("id",):
                plugin_id = self._first_string_argument(call)
            case ("kotlin",):
                name = self._first_string_argument(call)
                plugin_id = _KOTLIN_PLUGIN_PREFIX + name if name else None
            case _:
                plugin_id = None

        if plugin_id is None:
            logger.debug(f"Ignoring plugin declaration {render(call)} at line {call.line}")
            return
        self._add_plugin(plugin_id)

    def _apply(self, call: Call) -> None:
        """Groovy ``apply plugin: 'x'`` and the legacy ``apply from: .../flutter.gradle``."""
        if "plugin" in call.kwargs:
            plugin_id = self._try_evaluate(call.kwargs["plugin"])
            if isinstance(plugin_id, str):
                self._add_plugin(plugin_id)
                return
        if "from" in call.kwargs:
            script = self._try_evaluate(call.kwargs["from"])
            if isinstance(script, str) and script.endswith("flutter.gradle"):
                self._add_plugin(FLUTTER_GRADLE_PLUGIN)
                return
        logger.debug(f"Ignoring apply {render(call)} at line {call.line}")

    # Dependencies

    def _add_dependency(self, configuration: str, call: Call) -> None:
        if call.kwargs and not call.args:
            values = {key: self._try_evaluate(node) for key, node in call.kwargs.items()}
            group, name = values.get("group"), values.get("name")
            if isinstance(group, str) and isinstance(name, str):
                version = values.get("version")
                notation = f"{group}:{name}" + (f":{version}" if isinstance(version, str) else "")
                self._state.dependencies.append(
                    self._dependency(configuration, notation, call)
                )
                return

        if len(call.args) != 1:
            logger.debug(f"Ignoring dependency declaration {render(call)} at line {call.line}")
            return

        notation = self._try_evaluate(call.args[0])
        if isinstance(notation, PropertyReference):
            # libs.androidx.multidex, a version catalog alias or an outside variable
            logger.warning(
                f"Cannot resolve dependency {configuration}({notation}) at line {call.line}; "
                "it is not part of the record"
            )
            return
        if not isinstance(notation, str):
            # project(":x"), platform(...), files(...)
            logger.debug(
                f"Skipping non-coordinate dependency {render(call.args[0])} at line {call.line}"
            )
            return
        self._state.dependencies.append(self._dependency(configuration, notation, call))

    def _dependency(self, configuration: str, notation: str, call: Call) -> Dependency:
        try:
            return Dependency.from_coordinate(configuration, notation)
        except ConfigurationError as e:
            raise e.with_context(source_file=self.source_file, line=call.line) from e

    # Properties

    def _set_property(self, scope: ScopePath, name: str, node: Node) -> None:
        if len(scope) == 3 and scope[:2] == BUILD_TYPES and name in BUILD_TYPE_FIELDS:
            target = BUILD_TYPE_FIELDS[name]
            values = self._state.build_types.setdefault(scope[2], {})
            value = self._field_value(target, node)
            if value is not _MISSING:
                values[target] = value
            return

        target = PROPERTY_FIELDS.get((scope, name))
        if target is None:
            logger.debug(f"Ignoring property {'.'.join(scope + (name,))} at line {node.line}")
            return

        value = self._field_value(target, node)
        if value is not _MISSING:
            self._state.fields[target] = value

    def _field_value(self, target: str, node: Node) -> Any:
        try:
            value = self._evaluate(node)
        except _Unevaluable:
            if target in BuildConfiguration.REFERENCE_FIELDS:
                logger.warning(
                    f"Cannot evaluate {render(node)} for {target} at line {node.line}; "
                    "keeping it as a property reference"
                )
                return PropertyReference(expression=render(node))
            logger.warning(f"Cannot evaluate {render(node)} for {target} at line {node.line}; ignored")
            return _MISSING

        if target in BOOLEAN_FIELDS and not isinstance(value, bool):
            logger.warning(f"Expected a boolean for {target} at line {node.line}, got {render(node)}; ignored")
            return _MISSING
        if target in JAVA_VERSION_FIELDS and not isinstance(value, (str, int, float)):
            logger.warning(f"Cannot use {render(node)} as a Java version at line {node.line}; ignored")
            return _MISSING
        if target in JAVA_VERSION_FIELDS and isinstance(value, (str, int, float)):
            try:
                return java_version_string(value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid Java version {render(node)}",
                    invalid_option=target,
                    context=ErrorContext(source_file=self.source_file, line=node.line),
                ) from None
        return value

    # Evaluation

    def _try_evaluate(self, node: Node) -> Any:
        try:
            return self._evaluate(node)
        except _Unevaluable:
            return None

    def _evaluate(self, node: Node) -> Any:
        match node:
            case Literal(value=value):
                return value
            case ListNode(items=items):
                return [self._evaluate(item) for item in items]
            case Name(name=name):
                if name in self._state.variables:
                    value = self._state.variables[name]
                    if value is None:
                        raise _Unevaluable(name)
                    return value
                return PropertyReference(expression=name)
            case Attribute():
                return self._evaluate_attribute(node)
            case Index(receiver=receiver, key=key):
                key_value = self._evaluate(key)
                if not isinstance(key_value, str):
                    raise _Unevaluable(render(node))
                if dotted_path(receiver) == ("signingConfigs",):
                    return key_value
                return PropertyReference(expression=key_value)
            case Call():
                return self._evaluate_call(node)
            case _:
                raise _Unevaluable(render(node))

    def _evaluate_attribute(self, node: Attribute) -> Any:
        path = dotted_path(node)
        if path is None:
            raise _Unevaluable(render(node))
        match path:
            case ("JavaVersion", version):
                return _java_version(version, node)
            case ("JvmTarget", version) if version.startswith("JVM_"):
                return _java_version(version[len("JVM_"):].replace("_", "."), node)
            case ("signingConfigs", name):
                return name
            case (head, *_) if head in self._state.variables:
                raise _Unevaluable(render(node))
            case _:
                return PropertyReference(expression=".".join(path))

    def _evaluate_call(self, node: Call) -> Any:
        callee = node.callee
        if not isinstance(callee, Attribute):
            raise _Unevaluable(render(node))

        if callee.name in _PASS_THROUGH_CALLS and not node.args:
            value = self._evaluate(callee.receiver)
            if isinstance(value, PropertyReference):
                return value
            if callee.name in ("toInt", "toInteger"):
                try:
                    return int(str(value).strip())
                except ValueError:
                    raise _Unevaluable(render(node)) from None
            if callee.name == "trim":
                return str(value).strip()
            return value if isinstance(value, str) else _to_string(value)

        if callee.name == "getProperty" and node.args:
            key = self._evaluate(node.args[0])
            if isinstance(key, str):
                return PropertyReference(expression=key)

        if callee.name == "getByName" and dotted_path(callee.receiver) == ("signingConfigs",):
            name = self._first_string_argument(node)
            if name is not None:
                return name

        raise _Unevaluable(render(node))

    def _first_string_argument(self, call: Call) -> Optional[str]:
        if not call.args:
            return None
        value = self._try_evaluate(call.args[0])
        return value if isinstance(value, str) else None


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


_MISSING = _Missing()


def _java_version(text: str, node: Node) -> str:
    try:
        return java_version_string(text)
    except ValueError:
        raise _Unevaluable(render(node)) from None


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)
