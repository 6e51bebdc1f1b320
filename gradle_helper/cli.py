#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command-line interface for checking Flutter Android build configurations.

Exit codes: 0 when the configuration is accepted, 1 when it is rejected and
2 when it cannot be read, parsed or resolved.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape

from . import __version__
from .core.enums import OutputFormat
from .core.errors import ConfigurationError, GradleHelperError
from .core.models import BuildConfiguration
from .core.resolver import ConfigurationResolver, FlutterProperties
from .utils.config import ConfigLoader
from .validation.rules import RULE_REGISTRY
from .validation.validator import ConfigurationValidator
from .writers.factory import WriterFactory
from .writers.json_writer import JsonReportWriter
from .writers.report_writer import ConsoleReportFormatter

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2

console = Console()


def setup_logging(args: argparse.Namespace) -> None:
    """Set up loguru sinks from the command-line options."""
    logger.remove()

    log_level = "DEBUG" if args.verbose else args.log_level

    if log_level in ["DEBUG", "TRACE"]:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        log_format = "<level>{level: <8}</level> | <level>{message}</level>"

    logger.add(sys.stderr, level=log_level, format=log_format, colorize=True)

    if args.log_file:
        logger.add(
            args.log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention=3,
            enqueue=True,
        )

    logger.debug(f"Logging initialized at {log_level} level")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradle-helper",
        description="Validate and render Flutter Android application build configurations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  %(prog)s validate android/app/build.gradle.kts\n"
               "  %(prog)s validate . --strict --format json\n"
               "  %(prog)s show android/app/build.gradle --set flutter.minSdkVersion=23\n"
               "  %(prog)s render gradle_config.yaml --output build.gradle.kts",
    )
    parser.add_argument("--version", action="version",
                        version=f"gradle-helper {__version__}")

    logging_group = parser.add_argument_group("Logging")
    logging_group.add_argument("--log-level", dest="log_level",
                               choices=["TRACE", "DEBUG", "INFO", "SUCCESS",
                                        "WARNING", "ERROR", "CRITICAL"],
                               default="WARNING",
                               help="Set the logging level (default: %(default)s)")
    logging_group.add_argument("-v", "--verbose", action="store_true",
                               help="Log at DEBUG level")
    logging_group.add_argument("--log-file", dest="log_file", type=Path,
                               help="Also write a DEBUG log to this file")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    validate = subparsers.add_parser(
        "validate", help="Validate a build script or configuration file")
    _add_input_arguments(validate)
    rules_group = validate.add_argument_group("Rules")
    rules_group.add_argument("--strict", action="store_true",
                             help="Reject the configuration on warnings too")
    rules_group.add_argument("--disable", action="append", default=[], metavar="RULE",
                             help="Skip a rule id (repeatable)")
    validate.add_argument("--format", dest="report_format", choices=["text", "json"],
                          default="text", help="Report format (default: %(default)s)")
    validate.set_defaults(handler=cmd_validate)

    show = subparsers.add_parser(
        "show", help="Print the configuration record as JSON")
    _add_input_arguments(show)
    show.set_defaults(handler=cmd_show)

    render = subparsers.add_parser(
        "render", help="Write the configuration as a build script or JSON")
    render.add_argument("path", type=Path,
                        help="Build script, configuration file or project directory")
    render.add_argument("--format", dest="output_format",
                        choices=[fmt.value for fmt in OutputFormat],
                        help="Output format (default: from --output, else kts)")
    render.add_argument("-o", "--output", type=Path,
                        help="Write to this file instead of standard output")
    render.set_defaults(handler=cmd_render)

    rules = subparsers.add_parser("rules", help="List the validation rules")
    rules.set_defaults(handler=cmd_rules)

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=Path,
                        help="Build script, configuration file or project directory")
    resolution_group = parser.add_argument_group("Property resolution")
    resolution_group.add_argument("--no-resolve", dest="resolve", action="store_false",
                                  help="Keep flutter.* references unresolved")
    resolution_group.add_argument("--set", dest="overrides", action="append", default=[],
                                  metavar="KEY=VALUE",
                                  help="Override a property (e.g. flutter.minSdkVersion=23)")


def parse_overrides(values: List[str]) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` pairs.

    Raises:
        ConfigurationError: If a pair has no ``=`` or an empty key.
    """
    overrides: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(
                f"Invalid property override: {item} (expected KEY=VALUE)",
                invalid_option="set",
            )
        overrides[key.strip()] = value.strip()
        logger.debug(f"Property override: {key.strip()}={value.strip()}")
    return overrides


def load_record(
    path: Path,
    *,
    resolve: bool = True,
    overrides: Optional[Dict[str, str]] = None,
) -> BuildConfiguration:
    """
    Load a record from a file, or discover one from a directory, and resolve it.

    Raises:
        ConfigurationError: If nothing can be found or read.
        ParseError: If a build script is malformed.
        ResolutionError: If a property reference cannot be resolved.
    """
    if path.is_dir():
        record = ConfigLoader.auto_discover(path)
        if record is None:
            raise ConfigurationError(
                f"No build script or configuration file found under {path}",
                config_file=path,
            )
    else:
        record = ConfigLoader.load_from_file(path)

    if not resolve:
        if overrides:
            logger.warning("Property overrides are ignored with --no-resolve")
        return record

    properties = FlutterProperties.discover(record, overrides=overrides)
    return ConfigurationResolver(properties).resolve(record)


def cmd_validate(args: argparse.Namespace) -> int:
    validator = ConfigurationValidator(strict=args.strict, disabled=args.disable)
    record = load_record(args.path, resolve=args.resolve,
                         overrides=parse_overrides(args.overrides))
    report = validator.validate(record)

    if args.report_format == "json":
        print(JsonReportWriter().render_report(report))
    else:
        ConsoleReportFormatter(console).print_report(report)

    return EXIT_ACCEPTED if report.accepted else EXIT_REJECTED


def cmd_show(args: argparse.Namespace) -> int:
    record = load_record(args.path, resolve=args.resolve,
                         overrides=parse_overrides(args.overrides))
    print(WriterFactory.create_writer(OutputFormat.JSON).render(record))
    return EXIT_ACCEPTED


def cmd_render(args: argparse.Namespace) -> int:
    record = load_record(args.path, resolve=False)

    if args.output_format:
        output_format = OutputFormat.from_string(args.output_format)
    elif args.output:
        try:
            output_format = WriterFactory.format_for_path(args.output)
        except ValueError as e:
            raise ConfigurationError(
                f"{e}; pass --format explicitly", invalid_option="output"
            ) from e
    else:
        output_format = OutputFormat.KTS

    writer = WriterFactory.create_writer(output_format)
    if args.output:
        writer.write(record, args.output)
        console.print(f"[green]✔[/green] Wrote {output_format.value} output to {args.output}")
    else:
        print(writer.render(record), end="")
    return EXIT_ACCEPTED


def cmd_rules(args: argparse.Namespace) -> int:
    for rule_id, rule_class in RULE_REGISTRY.items():
        console.print(
            f"[bold cyan]{rule_id}[/bold cyan] ({rule_class.severity.value}): "
            f"{rule_class.description}"
        )
    return EXIT_ACCEPTED


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args)

    try:
        return args.handler(args)
    except GradleHelperError as e:
        logger.opt(exception=e).debug("Command failed")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
