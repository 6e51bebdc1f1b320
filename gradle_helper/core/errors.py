#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception hierarchy for the Gradle configuration helper with error context.
"""

from __future__ import annotations

import copy
import dataclasses
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from .report import ValidationReport


@dataclasses.dataclass(frozen=True)
class ErrorContext:
    """Context information for helper errors."""

    source_file: Optional[Path] = None
    line: Optional[int] = None
    column: Optional[int] = None
    field: Optional[str] = None
    additional_info: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for structured logging."""
        return {
            "source_file": str(self.source_file) if self.source_file else None,
            "line": self.line,
            "column": self.column,
            "field": self.field,
            "additional_info": self.additional_info,
        }

    @property
    def location(self) -> Optional[str]:
        """Human readable ``file:line:column`` location, if any is known."""
        parts = []
        if self.source_file:
            parts.append(str(self.source_file))
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts) if parts else None


class GradleHelperError(Exception):
    """
    Base exception class for helper errors with context tracking.

    Carries the location in the build script or record file that caused the
    error and, when wrapping another exception, its cause.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.cause = cause
        self.traceback_str = traceback.format_exc() if cause else None

        logger.bind(
            error_context=self.context.to_dict(),
            original_cause=str(cause) if cause else None,
        ).debug(f"{self.__class__.__name__}: {message}")

    def __str__(self) -> str:
        """String representation with location and cause."""
        base_msg = super().__str__()

        if location := self.context.location:
            base_msg = f"{location}: {base_msg}"

        if self.context.field:
            base_msg += f" (field: {self.context.field})"

        if self.cause:
            base_msg += f"\nCaused by: {self.cause}"

        return base_msg

    def with_context(self, **kwargs: Any) -> GradleHelperError:
        """Create a new exception of the same type with additional context."""
        new_context = ErrorContext(
            source_file=kwargs.get("source_file", self.context.source_file),
            line=kwargs.get("line", self.context.line),
            column=kwargs.get("column", self.context.column),
            field=kwargs.get("field", self.context.field),
            additional_info={
                **self.context.additional_info,
                **kwargs.get("additional_info", {}),
            },
        )

        clone = copy.copy(self)
        clone.context = new_context
        return clone


class ParseError(GradleHelperError):
    """Exception raised when a build script cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        source_file: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", None) or ErrorContext(
            source_file=Path(source_file) if source_file else None,
            line=line,
            column=column,
        )
        super().__init__(message, context=context, **kwargs)


class ConfigurationError(GradleHelperError):
    """Exception raised for unreadable or invalid configuration records."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Optional[Union[str, Path]] = None,
        invalid_option: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", None) or ErrorContext()
        context = ErrorContext(
            source_file=(
                Path(config_file) if config_file else context.source_file
            ),
            line=context.line,
            column=context.column,
            field=invalid_option or context.field,
            additional_info=dict(context.additional_info),
        )
        super().__init__(message, context=context, **kwargs)


class ResolutionError(GradleHelperError):
    """Exception raised when a property reference cannot be resolved."""

    def __init__(
        self,
        message: str,
        *,
        reference: Optional[str] = None,
        field_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", None) or ErrorContext()
        additional_info = dict(context.additional_info)
        if reference:
            additional_info["reference"] = reference
        context = ErrorContext(
            source_file=context.source_file,
            line=context.line,
            column=context.column,
            field=field_name or context.field,
            additional_info=additional_info,
        )
        super().__init__(message, context=context, **kwargs)
        self.reference = reference


class ValidationError(GradleHelperError):
    """Exception raised when a configuration record is rejected."""

    def __init__(self, message: str, *, report: ValidationReport, **kwargs: Any) -> None:
        context = kwargs.pop("context", None) or ErrorContext(
            source_file=report.source_file,
            additional_info={
                "errors": len(report.errors),
                "warnings": len(report.warnings),
            },
        )
        super().__init__(message, context=context, **kwargs)
        self.report = report

    def __str__(self) -> str:
        lines = [super().__str__()]
        lines.extend(f"  - {issue}" for issue in self.report.failing_issues)
        return "\n".join(lines)


def handle_error(
    func_name: str,
    error: Exception,
    *,
    context: Optional[ErrorContext] = None,
) -> GradleHelperError:
    """
    Convert generic exceptions to GradleHelperError with context.

    Args:
        func_name: Name of the function where error occurred
        error: The original exception
        context: Error context information

    Returns:
        GradleHelperError with context
    """
    if isinstance(error, GradleHelperError):
        return error

    message = f"Error in {func_name}: {error}"

    if isinstance(error, FileNotFoundError):
        return ConfigurationError(
            message,
            config_file=error.filename,
            context=context,
            cause=error,
        )
    elif isinstance(error, PydanticValidationError):
        first = error.errors()[0] if error.errors() else {}
        invalid_option = ".".join(str(part) for part in first.get("loc", ())) or None
        return ConfigurationError(
            f"Error in {func_name}: invalid configuration record: "
            f"{first.get('msg', error)}",
            invalid_option=invalid_option,
            context=context,
            cause=error,
        )
    elif isinstance(error, (OSError, UnicodeDecodeError)):
        return ConfigurationError(message, context=context, cause=error)
    else:
        return GradleHelperError(message, context=context, cause=error)
