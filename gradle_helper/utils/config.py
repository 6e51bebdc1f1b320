#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration record loading from build scripts and data files.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ConfigurationError, ErrorContext, handle_error
from ..core.models import LITERAL_STRINGS, BuildConfiguration
from ..parsers.factory import ParserFactory


class ConfigLoader:
    """
    Utility class for loading configuration records from files.

    Records come either from Gradle build scripts (``.gradle.kts``,
    ``.gradle``) or from data files (JSON, YAML, TOML) using the record's
    field names, optionally nested under a ``gradle`` section.
    """

    # Supported data file extensions
    _SUPPORTED_EXTENSIONS = {
        ".json": "json",
        ".yaml": "yaml",
        ".yml": "yaml",
        ".toml": "toml",
    }

    # File names searched by auto_discover, in order of preference
    _DISCOVERY_NAMES = (
        "gradle_config.json",
        "gradle_config.yaml",
        "gradle_config.yml",
        "gradle_config.toml",
        "android/app/build.gradle.kts",
        "android/app/build.gradle",
        "build.gradle.kts",
        "build.gradle",
    )

    _SECTION = "gradle"

    @classmethod
    def supported_suffixes(cls) -> List[str]:
        return [".gradle.kts", ".gradle", *cls._SUPPORTED_EXTENSIONS]

    @classmethod
    def load_from_file(cls, file_path: Union[Path, str]) -> BuildConfiguration:
        """
        Load a configuration record from a build script or data file.

        Args:
            file_path: Path to the file.

        Returns:
            BuildConfiguration: The record as declared (references unresolved).

        Raises:
            ConfigurationError: If the file is missing, unsupported or invalid.
            ParseError: If a build script is malformed.
        """
        config_path = Path(file_path)

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                config_file=config_path,
            )

        if not config_path.is_file():
            raise ConfigurationError(
                f"Configuration path is not a file: {config_path}",
                config_file=config_path,
            )

        if ParserFactory.is_build_script(config_path):
            return ParserFactory.create_parser(config_path).parse_file(config_path)

        suffix = config_path.suffix.lower()
        if suffix not in cls._SUPPORTED_EXTENSIONS:
            supported = ", ".join(cls.supported_suffixes())
            raise ConfigurationError(
                f"Unsupported configuration file format: {suffix}. Supported formats: {supported}",
                config_file=config_path,
            )

        try:
            content = config_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigurationError(
                f"Failed to read configuration file (encoding error): {e}",
                config_file=config_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read configuration file: {e}",
                config_file=config_path,
                cause=e,
            ) from e

        format_type = cls._SUPPORTED_EXTENSIONS[suffix]
        logger.debug(f"Loading {format_type.upper()} configuration from {config_path}")

        match format_type:
            case "json":
                return cls.load_from_json(content, config_path)
            case "yaml":
                return cls.load_from_yaml(content, config_path)
            case "toml":
                return cls.load_from_toml(content, config_path)
            case _:
                raise ConfigurationError(
                    f"Internal error: unhandled format type {format_type}",
                    config_file=config_path,
                )

    @classmethod
    def load_from_json(
        cls, json_str: str, source_file: Optional[Path] = None
    ) -> BuildConfiguration:
        """Load a record from a JSON string."""
        try:
            config_data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON configuration: {e.msg}",
                config_file=source_file,
                context=ErrorContext(line=e.lineno, column=e.colno),
                cause=e,
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "JSON configuration must be an object/dictionary",
                config_file=source_file,
            )
        return cls._normalize_config(config_data, source_file)

    @classmethod
    def load_from_yaml(
        cls, yaml_str: str, source_file: Optional[Path] = None
    ) -> BuildConfiguration:
        """Load a record from a YAML string."""
        try:
            config_data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            line = column = None
            if mark := getattr(e, "problem_mark", None):
                line, column = mark.line + 1, mark.column + 1
            raise ConfigurationError(
                f"Invalid YAML configuration: {e}",
                config_file=source_file,
                context=ErrorContext(line=line, column=column),
                cause=e,
            ) from e

        if config_data is None:
            config_data = {}
        elif not isinstance(config_data, dict):
            raise ConfigurationError(
                "YAML configuration must be a mapping/dictionary",
                config_file=source_file,
            )
        return cls._normalize_config(config_data, source_file)

    @classmethod
    def load_from_toml(
        cls, toml_str: str, source_file: Optional[Path] = None
    ) -> BuildConfiguration:
        """Load a record from a TOML string."""
        try:
            config_data = tomllib.loads(toml_str)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                f"Invalid TOML configuration: {e}", config_file=source_file, cause=e
            ) from e
        return cls._normalize_config(config_data, source_file)

    @classmethod
    def _normalize_config(
        cls, config_data: Dict[str, Any], source_file: Optional[Path] = None
    ) -> BuildConfiguration:
        """Validate raw data against the record model."""
        if isinstance(config_data.get(cls._SECTION), dict):
            config_data = config_data[cls._SECTION]

        config_data = dict(config_data)
        config_data.pop("source_file", None)
        try:
            return BuildConfiguration(**config_data, source_file=source_file)
        except PydanticValidationError as e:
            raise handle_error(
                "load", e, context=ErrorContext(source_file=source_file)
            ) from e

    @classmethod
    def find_config_files(cls, directory: Path) -> List[Path]:
        """Potential record files in ``directory``, in order of preference."""
        return [
            directory / name
            for name in cls._DISCOVERY_NAMES
            if (directory / name).is_file()
        ]

    @classmethod
    def auto_discover(
        cls, start_directory: Union[Path, str]
    ) -> Optional[BuildConfiguration]:
        """
        Discover and load a record from common locations.

        Searches ``start_directory`` and its parents.

        Returns:
            BuildConfiguration if one is found, None otherwise
        """
        search_dir = Path(start_directory).resolve()

        for directory in [search_dir, *search_dir.parents]:
            config_files = cls.find_config_files(directory)
            if config_files:
                logger.info(f"Auto-discovered configuration file: {config_files[0]}")
                return cls.load_from_file(config_files[0])

        logger.debug("No configuration file auto-discovered")
        return None

    @classmethod
    def merge_configs(cls, *configs: BuildConfiguration) -> BuildConfiguration:
        """
        Merge records, with fields set explicitly in later records taking precedence.

        Returns:
            Merged BuildConfiguration
        """
        if not configs:
            return BuildConfiguration()

        merged: Dict[str, Any] = {}
        source_file = None
        for config in configs:
            for name in config.model_fields_set - {"source_file"}:
                merged[name] = getattr(config, name)
            source_file = config.source_file or source_file

        try:
            return BuildConfiguration.model_validate(
                {**merged, "source_file": source_file}, context={LITERAL_STRINGS: True}
            )
        except PydanticValidationError as e:
            raise handle_error("merge_configs", e) from e


def load_configuration(file_path: Union[Path, str]) -> BuildConfiguration:
    """Shortcut for :meth:`ConfigLoader.load_from_file`."""
    return ConfigLoader.load_from_file(file_path)
