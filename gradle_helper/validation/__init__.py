"""
Validation of build configuration records.

This module provides the rule set and the validator that accepts or rejects a
record before it is handed to the external build tool.
"""

from .rules import (
    RULE_REGISTRY,
    ValidationRule,
    default_rules,
    register_rule,
)
from .validator import ConfigurationValidator, validate_configuration

__all__ = [
    "RULE_REGISTRY",
    "ValidationRule",
    "default_rules",
    "register_rule",
    "ConfigurationValidator",
    "validate_configuration",
]
