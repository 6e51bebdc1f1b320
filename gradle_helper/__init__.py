#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Gradle Configuration Helper

Reads the Android application module build script of a Flutter project,
resolves the values it borrows from the Flutter tool, and validates the result
before the build tool compiles anything.
"""

import sys

from loguru import logger

from .core.errors import (
    GradleHelperError, ParseError, ConfigurationError,
    ResolutionError, ValidationError
)
from .core.enums import GradleDsl, OutputFormat, Severity, SigningConfigRef
from .core.models import BuildConfiguration, BuildType, Dependency, PropertyReference
from .core.report import ValidationIssue, ValidationReport
from .core.resolver import ConfigurationResolver, FlutterProperties, resolve_configuration
from .parsers.factory import ParserFactory
from .parsers.gradle import GradleScriptParser
from .utils.config import ConfigLoader, load_configuration
from .validation.validator import ConfigurationValidator, validate_configuration
from .writers.factory import WriterFactory

# Configure loguru with defaults
logger.remove()
logger.add(
    sys.stderr,
    level="WARNING",
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True
)

# Package metadata
__version__ = "1.0.0"
__license__ = "GPL-3.0-or-later"


def get_tool_info() -> dict:
    """
    Get metadata about the gradle_helper module.

    Returns:
        dict: Module metadata including name, version, description, license,
              available functions, requirements and classes.
    """
    return {
        "name": "gradle_helper",
        "version": __version__,
        "description": "Validation of Flutter Android application build configurations",
        "license": __license__,
        "supported": True,
        "platform": ["windows", "linux", "macos"],
        "functions": [
            "load_configuration",
            "resolve_configuration",
            "validate_configuration",
            "get_tool_info"
        ],
        "requirements": [
            "python>=3.11",
            "loguru",
            "pydantic>=2",
            "pyyaml",
            "rich"
        ],
        "capabilities": [
            "kotlin-dsl-parsing",
            "groovy-dsl-parsing",
            "flutter-property-resolution",
            "rule-based-validation",
            "script-rendering"
        ],
        "classes": {
            "BuildConfiguration": "Settings the build tool needs to compile the application",
            "ConfigLoader": "Loads records from build scripts and data files",
            "ConfigurationResolver": "Replaces Flutter property references with values",
            "ConfigurationValidator": "Accepts or rejects a record before compilation",
            "ParserFactory": "Creates the parser for a build script dialect",
            "WriterFactory": "Creates the writer for an output format",
            "ValidationReport": "Outcome of validating one record"
        }
    }


__all__ = [
    'BuildConfiguration', 'BuildType', 'Dependency', 'PropertyReference',
    'GradleDsl', 'OutputFormat', 'Severity', 'SigningConfigRef',
    'GradleHelperError', 'ParseError', 'ConfigurationError',
    'ResolutionError', 'ValidationError',
    'ValidationIssue', 'ValidationReport',
    'ConfigurationResolver', 'FlutterProperties', 'resolve_configuration',
    'ConfigurationValidator', 'validate_configuration',
    'ConfigLoader', 'load_configuration',
    'GradleScriptParser', 'ParserFactory', 'WriterFactory',
    'get_tool_info',
    '__version__', '__license__'
]
