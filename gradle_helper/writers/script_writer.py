#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Build script writers.

Render a :class:`BuildConfiguration` back into the shape of an Android
application module script. Property references are written as the expressions
they stand for, so a rendered script still defers those values to Flutter.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from ..core.enums import SigningConfigRef
from ..core.errors import handle_error
from ..core.models import BuildConfiguration, BuildType, PropertyReference

INDENT = "    "


class ScriptWriter:
    """Shared layout for Kotlin DSL and Groovy DSL scripts."""

    quote = '"'

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._depth = 0

    # Dialect hooks

    def plugin(self, plugin_id: str) -> str:
        raise NotImplementedError

    def dependency(self, configuration: str, notation: str) -> str:
        raise NotImplementedError

    def signing_config_ref(self, name: str) -> str:
        raise NotImplementedError

    def build_type_header(self, name: str) -> str:
        raise NotImplementedError

    def signing_config_header(self, name: str) -> str:
        raise NotImplementedError

    def desugaring_property(self) -> str:
        raise NotImplementedError

    def build_type_property(self, field_name: str) -> str:
        raise NotImplementedError

    def jvm_target(self, version: str) -> str:
        return self.java_version(version)

    # Value rendering

    def string(self, text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace(self.quote, "\\" + self.quote)
        escaped = escaped.replace("$", "\\$")
        return f"{self.quote}{escaped}{self.quote}"

    def value(self, value: Any) -> str:
        if isinstance(value, PropertyReference):
            return value.expression
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        return self.string(str(value))

    @staticmethod
    def java_version(version: str) -> str:
        return f"JavaVersion.VERSION_{version.replace('.', '_')}"

    # Layout helpers

    def _line(self, text: str = "") -> None:
        self._lines.append(f"{INDENT * self._depth}{text}" if text else "")

    def _open(self, header: str) -> None:
        self._line(f"{header} {{")
        self._depth += 1

    def _close(self) -> None:
        self._depth -= 1
        self._line("}")

    def _assign(self, name: str, rendered: Optional[str]) -> None:
        if rendered is not None:
            self._line(f"{name} = {rendered}")

    def _blank(self) -> None:
        if self._lines and self._lines[-1] != "" and not self._lines[-1].endswith("{"):
            self._lines.append("")

    def _optional(self, value: Any) -> Optional[str]:
        return None if value is None else self.value(value)

    # Sections

    def render(self, record: BuildConfiguration) -> str:
        """Render the record as build script text."""
        self._lines = []
        self._depth = 0

        if record.plugins:
            self._open("plugins")
            for plugin_id in record.plugins:
                self._line(self.plugin(plugin_id))
            self._close()
            self._line()

        self._open("android")
        self._android(record)
        self._close()

        if record.flutter_source is not None:
            self._line()
            self._open("flutter")
            self._assign("source", self.string(record.flutter_source))
            self._close()

        if record.dependencies:
            self._line()
            self._open("dependencies")
            for dependency in record.dependencies:
                self._line(self.dependency(dependency.configuration, dependency.notation))
            self._close()

        return "\n".join(self._lines) + "\n"

    def _android(self, record: BuildConfiguration) -> None:
        self._assign("namespace", self._optional(record.namespace))
        self._assign("compileSdk", self._optional(record.compile_sdk))
        self._assign("ndkVersion", self._optional(record.ndk_version))

        compile_options = [
            ("sourceCompatibility", record.source_compatibility),
            ("targetCompatibility", record.target_compatibility),
        ]
        if any(value is not None for _, value in compile_options) or record.desugaring_enabled:
            self._blank()
            self._open("compileOptions")
            for name, version in compile_options:
                if version is not None:
                    self._assign(name, self.java_version(version))
            if record.desugaring_enabled:
                self._assign(self.desugaring_property(), "true")
            self._close()

        if record.jvm_target is not None:
            self._blank()
            self._open("kotlinOptions")
            self._assign("jvmTarget", self.jvm_target(record.jvm_target))
            self._close()

        default_config = [
            ("applicationId", record.application_id),
            ("minSdk", record.min_sdk),
            ("targetSdk", record.target_sdk),
            ("versionCode", record.version_code),
            ("versionName", record.version_name),
        ]
        if any(value is not None for _, value in default_config) or record.multidex_enabled:
            self._blank()
            self._open("defaultConfig")
            for name, value in default_config:
                self._assign(name, self._optional(value))
            if record.multidex_enabled:
                self._assign("multiDexEnabled", "true")
            self._close()

        if record.signing_configs:
            self._blank()
            self._open("signingConfigs")
            for name in record.signing_configs:
                self._open(self.signing_config_header(name))
                self._close()
            self._close()

        if record.build_types:
            self._blank()
            self._open("buildTypes")
            for build_type in record.build_types:
                self._build_type(build_type)
            self._close()

    def _build_type(self, build_type: BuildType) -> None:
        self._open(self.build_type_header(build_type.name))
        if build_type.signing_config is not None:
            self._assign("signingConfig", self.signing_config_ref(build_type.signing_config.value))
        for field_name in ("minify_enabled", "shrink_resources", "debuggable"):
            value = getattr(build_type, field_name)
            if value is not None:
                self._assign(self.build_type_property(field_name), self.value(value))
        self._close()

    def write(self, record: BuildConfiguration, output_path: Path) -> None:
        """Write the rendered script to ``output_path``."""
        try:
            output_path.write_text(self.render(record), encoding="utf-8")
        except OSError as e:
            raise handle_error("write", e) from e
        logger.info(f"Build script written to {output_path}")


class KotlinScriptWriter(ScriptWriter):
    """Writer for ``build.gradle.kts``."""

    _BUILD_TYPE_PROPERTIES = {
        "minify_enabled": "isMinifyEnabled",
        "shrink_resources": "isShrinkResources",
        "debuggable": "isDebuggable",
    }

    def plugin(self, plugin_id: str) -> str:
        return f"id({self.string(plugin_id)})"

    def dependency(self, configuration: str, notation: str) -> str:
        return f"{configuration}({self.string(notation)})"

    def signing_config_ref(self, name: str) -> str:
        return f"signingConfigs.getByName({self.string(name)})"

    def build_type_header(self, name: str) -> str:
        if name in (SigningConfigRef.DEBUG.value, SigningConfigRef.RELEASE.value):
            return name
        return f"create({self.string(name)})"

    def signing_config_header(self, name: str) -> str:
        if name == SigningConfigRef.DEBUG.value:
            return f"getByName({self.string(name)})"
        return f"create({self.string(name)})"

    def desugaring_property(self) -> str:
        return "isCoreLibraryDesugaringEnabled"

    def build_type_property(self, field_name: str) -> str:
        return self._BUILD_TYPE_PROPERTIES[field_name]

    def jvm_target(self, version: str) -> str:
        return f"{self.java_version(version)}.toString()"


class GroovyScriptWriter(ScriptWriter):
    """Writer for ``build.gradle``."""

    _BUILD_TYPE_PROPERTIES = {
        "minify_enabled": "minifyEnabled",
        "shrink_resources": "shrinkResources",
        "debuggable": "debuggable",
    }

    def plugin(self, plugin_id: str) -> str:
        return f"id {self.string(plugin_id)}"

    def dependency(self, configuration: str, notation: str) -> str:
        return f"{configuration} {self.string(notation)}"

    def signing_config_ref(self, name: str) -> str:
        return f"signingConfigs.{name}"

    def build_type_header(self, name: str) -> str:
        return name

    def signing_config_header(self, name: str) -> str:
        return name

    def desugaring_property(self) -> str:
        return "coreLibraryDesugaringEnabled"

    def build_type_property(self, field_name: str) -> str:
        return self._BUILD_TYPE_PROPERTIES[field_name]
