"""Command-line interface for mtextparser."""

from __future__ import annotations

import argparse
import io
import logging
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mtextparser.errors import ConfigError

CONFIG_FILENAME = "mtextparser.toml"
OUTPUT_FORMATS = ("tokens", "plain")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    context: dict[str, Any] = field(default_factory=dict)
    properties: bool = False
    output_format: str = "tokens"
    escape_line_endings: bool = False
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="mtextparser",
        description="Tokenize MText inline formatting",
    )
    p.add_argument("input", help="Input file with MText content ('-' for stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-s",
        "--set",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Initial context setting, VALUE in TOML syntax (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    p.add_argument(
        "--properties",
        action="store_true",
        default=None,
        help="Report property commands as PROPERTIES_CHANGED tokens",
    )
    p.add_argument(
        "--plain",
        action="store_true",
        help="Print the plain text content instead of the token listing",
    )
    p.add_argument(
        "--escape-line-endings",
        action="store_true",
        default=None,
        help="Convert CR/LF line endings of the input to \\P before parsing",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug messages to stderr")
    return p


def parse_set_arg(s: str) -> tuple[str, Any]:
    """Parse a NAME=VALUE string, VALUE being a TOML value, into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid setting format (expected NAME=VALUE): {s}")
    name, _, raw = s.partition("=")
    try:
        value = tomllib.loads(f"value = {raw}")["value"]
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid value for {name!r}: {raw}") from exc
    return name.strip(), value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Initial context: config < CLI
    context: dict[str, Any] = {}
    cfg_context = config.get("context")
    if isinstance(cfg_context, dict):
        context.update(cfg_context)
    for raw in args.set:
        name, value = parse_set_arg(raw)
        context[name] = value

    cfg_output = config.get("output")
    if not isinstance(cfg_output, dict):
        cfg_output = {}

    properties = bool(cfg_output.get("properties", False))
    if args.properties is not None:
        properties = args.properties

    output_format = str(cfg_output.get("format", "tokens"))
    if args.plain:
        output_format = "plain"
    if output_format not in OUTPUT_FORMATS:
        raise ConfigError(f"unknown output format {output_format!r}")

    cfg_input = config.get("input")
    escape_line_endings = False
    if isinstance(cfg_input, dict):
        escape_line_endings = bool(cfg_input.get("escape_line_endings", False))
    if args.escape_line_endings is not None:
        escape_line_endings = args.escape_line_endings

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        context=context,
        properties=properties,
        output_format=output_format,
        escape_line_endings=escape_line_endings,
        verbose=args.verbose,
    )


def process(options: CliOptions, content: str) -> str:
    """Tokenize ``content`` according to ``options`` and return the report."""
    from mtextparser.context import FormattingContext
    from mtextparser.debug import dump_tokens
    from mtextparser.lexer import Lexer
    from mtextparser.strings import escape_dxf_line_endings, plain_text

    ctx = FormattingContext.from_mapping(options.context)
    if options.escape_line_endings:
        content = escape_dxf_line_endings(content)

    if options.output_format == "plain":
        return plain_text(content, ctx) + "\n"

    out = io.StringIO()
    lexer = Lexer(content, ctx, yield_property_commands=options.properties)
    dump_tokens(lexer.parse(), file=out, base=ctx)
    return out.getvalue()


def read_input(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        report = process(options, read_input(options))
    except (ConfigError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if options.output_file:
        options.output_file.write_text(report, encoding="utf-8")
    else:
        sys.stdout.write(report)

    return 0
