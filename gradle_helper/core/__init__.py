"""
Core data model, errors and property resolution.
"""

from .errors import (
    ErrorContext,
    GradleHelperError,
    ParseError,
    ConfigurationError,
    ResolutionError,
    ValidationError,
    handle_error,
)
from .enums import GradleDsl, OutputFormat, Severity, SigningConfigRef
from .models import (
    BuildConfiguration,
    BuildType,
    Dependency,
    PropertyReference,
)
from .report import ValidationIssue, ValidationReport
from .resolver import (
    ConfigurationResolver,
    FlutterProperties,
    resolve_configuration,
)

__all__ = [
    'ErrorContext',
    'GradleHelperError',
    'ParseError',
    'ConfigurationError',
    'ResolutionError',
    'ValidationError',
    'handle_error',
    'GradleDsl',
    'OutputFormat',
    'Severity',
    'SigningConfigRef',
    'BuildConfiguration',
    'BuildType',
    'Dependency',
    'PropertyReference',
    'ValidationIssue',
    'ValidationReport',
    'ConfigurationResolver',
    'FlutterProperties',
    'resolve_configuration',
]
