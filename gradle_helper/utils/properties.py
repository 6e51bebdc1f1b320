#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Readers for the files the Flutter tool leaves next to an Android project.

``local.properties`` uses the Java properties format; ``pubspec.yaml`` carries
the ``version: <name>+<code>`` line the Flutter tool turns into
``flutter.versionName`` and ``flutter.versionCode``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import yaml
from loguru import logger

from ..core.errors import ConfigurationError

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATOR = re.compile(r"(?<!\\)(?:\\\\)*[=:\s]")


def _unescape(text: str) -> str:
    result = []
    chars = iter(text)
    for char in chars:
        if char != "\\":
            result.append(char)
            continue
        escaped = next(chars, "")
        if escaped == "u":
            code = "".join(next(chars, "") for _ in range(4))
            try:
                result.append(chr(int(code, 16)))
            except ValueError:
                raise ValueError(f"Malformed \\u escape: \\u{code}") from None
        else:
            result.append(_ESCAPES.get(escaped, escaped))
    return "".join(result)


def _logical_lines(text: str):
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip() if pending else raw.strip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse Java ``.properties`` content.

    Supports ``=``, ``:`` and whitespace separators, ``#``/``!`` comments,
    backslash escapes (``C\\:\\\\sdk``) and line continuations.
    """
    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        line = line.strip()
        match = _SEPARATOR.search(line)
        if match is None:
            key, value = line, ""
        else:
            end = match.end()
            key = line[: end - 1]
            rest = line[end:].lstrip()
            if match.group().endswith((" ", "\t")) and rest[:1] in ("=", ":"):
                rest = rest[1:].lstrip()
            value = rest
        properties[_unescape(key)] = _unescape(value)
    return properties


def read_properties(file_path: Union[str, Path]) -> Dict[str, str]:
    """
    Read a Java properties file.

    Raises:
        ConfigurationError: If the file cannot be read or decoded.
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        # Properties files are traditionally ISO-8859-1
        content = path.read_text(encoding="latin-1")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read properties file: {e}", config_file=path, cause=e
        ) from e

    try:
        properties = parse_properties(content)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid properties file: {e}", config_file=path, cause=e
        ) from e

    logger.debug(f"Read {len(properties)} properties from {path}")
    return properties


def parse_pubspec_version(version: str) -> Tuple[str, Optional[int]]:
    """
    Split a pubspec ``version`` into build name and build number.

    ``"1.2.3+4"`` gives ``("1.2.3", 4)``; ``"1.2.3"`` gives ``("1.2.3", None)``.
    """
    name, sep, number = str(version).strip().partition("+")
    if not name:
        raise ValueError(f"Invalid pubspec version: {version!r}")
    if not sep:
        return name, None
    if not number.isdigit():
        raise ValueError(f"Invalid build number in pubspec version: {version!r}")
    return name, int(number)


def read_pubspec_version(file_path: Union[str, Path]) -> Optional[Tuple[str, Optional[int]]]:
    """
    Read the ``version`` entry of a ``pubspec.yaml``.

    Returns:
        ``(build_name, build_number)`` or None when the pubspec has no version.

    Raises:
        ConfigurationError: If the file is unreadable or the version malformed.
    """
    path = Path(file_path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read pubspec: {e}", config_file=path, cause=e
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid pubspec YAML: {e}", config_file=path, cause=e
        ) from e

    if not isinstance(data, dict) or data.get("version") is None:
        logger.debug(f"No version declared in {path}")
        return None

    try:
        return parse_pubspec_version(data["version"])
    except ValueError as e:
        raise ConfigurationError(
            str(e), config_file=path, invalid_option="version", cause=e
        ) from e
