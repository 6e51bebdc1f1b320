#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration validator running the registered rules over a record.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from loguru import logger

from ..core.enums import Severity
from ..core.errors import ConfigurationError, ValidationError, handle_error
from ..core.models import BuildConfiguration
from ..core.report import ValidationReport
from .rules import RULE_REGISTRY, ValidationRule, default_rules


class ConfigurationValidator:
    """
    Validates build configuration records before compilation.

    Accepting a record means the external build tool may proceed; a rejected
    record comes with a report describing every issue found.

    Attributes:
        rules: Active rule instances, in the order they run.
        strict: Treat warnings as failures.
    """

    def __init__(
        self,
        rules: Optional[Iterable[ValidationRule]] = None,
        *,
        strict: bool = False,
        disabled: Iterable[str] = (),
    ) -> None:
        disabled = set(disabled)
        unknown = disabled - set(RULE_REGISTRY)
        if unknown:
            raise ConfigurationError(
                f"Unknown validation rule(s): {', '.join(sorted(unknown))}. "
                f"Available rules: {', '.join(RULE_REGISTRY)}",
                invalid_option="disable",
            )

        candidates = list(rules) if rules is not None else default_rules()
        self.rules: List[ValidationRule] = [
            rule for rule in candidates if rule.rule_id not in disabled
        ]
        self.strict = strict

    def rule_ids(self) -> List[str]:
        return [rule.rule_id for rule in self.rules]

    def validate(self, record: BuildConfiguration) -> ValidationReport:
        """Run every active rule and collect the issues."""
        report = ValidationReport(source_file=record.source_file, strict=self.strict)

        for rule in self.rules:
            try:
                issues = list(rule.check(record))
            except Exception as e:
                raise handle_error(f"rule {rule.rule_id}", e) from e

            for issue in issues:
                report.add_issue(issue)
                match issue.severity:
                    case Severity.ERROR:
                        logger.error(str(issue))
                    case Severity.WARNING:
                        logger.warning(str(issue))
                    case _:
                        logger.info(str(issue))

        if report.accepted:
            logger.success(report.summary())
        else:
            logger.error(report.summary())
        return report

    def validate_or_raise(self, record: BuildConfiguration) -> ValidationReport:
        """
        Validate and raise when the record is rejected.

        Raises:
            ValidationError: Carrying the report, if the record is not accepted.
        """
        report = self.validate(record)
        if not report.accepted:
            raise ValidationError(
                f"Configuration rejected with {len(report.failing_issues)} issue(s)",
                report=report,
            )
        return report


def validate_configuration(
    record: BuildConfiguration, *, strict: bool = False
) -> ValidationReport:
    """Validate ``record`` with the default rule set."""
    return ConfigurationValidator(strict=strict).validate(record)
