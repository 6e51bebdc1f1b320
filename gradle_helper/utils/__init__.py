#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for the Gradle configuration helper.

This module provides record loading from build scripts and data files, and
readers for the property files the Flutter tool maintains.
"""

from __future__ import annotations

from .properties import (
    parse_properties,
    read_properties,
    parse_pubspec_version,
    read_pubspec_version,
)
from .config import ConfigLoader, load_configuration

__all__ = [
    "ConfigLoader",
    "load_configuration",
    "parse_properties",
    "read_properties",
    "parse_pubspec_version",
    "read_pubspec_version",
]
