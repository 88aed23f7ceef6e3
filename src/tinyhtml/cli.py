"""Command-line interface for TinyHTML."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tinyhtml import __version__
from tinyhtml.compiler import (
    OUTPUT_SUFFIX,
    PROJECT_OUTPUT_DIR,
    PROJECT_SOURCE_DIR,
    SOURCE_SUFFIX,
    Compiler,
    DirectoryReport,
    init_project,
)
from tinyhtml.errors import ParseError, TmlError
from tinyhtml.formatter import DEFAULT_COMMAND, DEFAULT_TIMEOUT, ExternalFormatter
from tinyhtml.generator import GeneratorOptions, IndentStyle

CONFIG_FILENAME = "tinyhtml.toml"
_POLL_INTERVAL = 0.5


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_path: Path | None
    output_path: Path | None
    generator: GeneratorOptions
    format_command: tuple[str, ...]
    format_timeout: float
    project_source: Path
    project_output: Path
    recursive: bool
    watch: bool
    init: bool
    debug: bool
    verbosity: int


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tinyhtml",
        description="Compile TinyHTML (.tml) files to HTML",
    )
    p.add_argument(
        "input",
        nargs="?",
        help="Input .tml file or directory (default: compile the whole project)",
    )
    p.add_argument("-o", "--output", help="Output file or directory ('-' for stdout)")
    p.add_argument("-w", "--watch", action="store_true", help="Watch for changes and recompile")
    p.add_argument(
        "-r", "--recursive", action="store_true", help="Process directories recursively"
    )
    p.add_argument("--minify", action="store_true", help="Emit HTML without whitespace")
    p.add_argument(
        "--indent-width",
        type=int,
        default=None,
        metavar="N",
        help="Spaces per indentation level (default: 2)",
    )
    p.add_argument(
        "--indent-style",
        choices=[style.value for style in IndentStyle],
        default=None,
        help="Indent with spaces or tabs (default: spaces)",
    )
    p.add_argument(
        "--no-format",
        action="store_true",
        help="Skip the external formatter and use the built-in normalizer",
    )
    p.add_argument(
        "--format-timeout",
        type=float,
        default=None,
        metavar="SECS",
        help=f"External formatter timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    p.add_argument("--init", action="store_true", help="Create a new project skeleton")
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or debugging details (-vv)",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_path = Path(args.input) if args.input else None
    if input_path is None:
        base_dir = Path(".")
    elif input_path.is_dir():
        base_dir = input_path
    else:
        base_dir = input_path.parent if input_path.parent.parts else Path(".")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, base_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    # Output settings: config < CLI
    cfg_output = _section(config, "output")
    indent_width = 2
    if _is_number(cfg_output.get("indent_width")):
        indent_width = int(cfg_output["indent_width"])
    if args.indent_width is not None:
        indent_width = args.indent_width

    indent_style = str(cfg_output.get("indent_style", IndentStyle.SPACES.value))
    if args.indent_style is not None:
        indent_style = args.indent_style

    minify = bool(cfg_output.get("minify", False)) or args.minify

    # External formatter: config < CLI
    cfg_format = _section(config, "format")
    use_formatter = bool(cfg_format.get("enabled", True)) and not args.no_format

    format_command = DEFAULT_COMMAND
    cfg_command = cfg_format.get("command")
    if isinstance(cfg_command, list) and cfg_command:
        format_command = tuple(str(part) for part in cfg_command)

    format_timeout = DEFAULT_TIMEOUT
    if _is_number(cfg_format.get("timeout")):
        format_timeout = float(cfg_format["timeout"])
    if args.format_timeout is not None:
        format_timeout = args.format_timeout

    # Project layout: config only
    cfg_project = _section(config, "project")
    project_source = Path(str(cfg_project.get("source", PROJECT_SOURCE_DIR)))
    project_output = Path(str(cfg_project.get("output", PROJECT_OUTPUT_DIR)))

    try:
        generator = GeneratorOptions(
            indent_width=indent_width,
            indent_style=IndentStyle(indent_style),
            minify=minify,
            use_external_formatter=use_formatter,
        )
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc

    return CliOptions(
        input_path=input_path,
        output_path=Path(args.output) if args.output else None,
        generator=generator,
        format_command=format_command,
        format_timeout=format_timeout,
        project_source=project_source,
        project_output=project_output,
        recursive=args.recursive,
        watch=args.watch,
        init=args.init,
        debug=args.debug,
        verbosity=args.verbose,
    )


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def build_compiler(options: CliOptions) -> Compiler:
    formatter = ExternalFormatter(options.format_command, options.format_timeout)
    return Compiler(options.generator, formatter=formatter, debug=options.debug)


def print_error(path: Path | None, exc: Exception) -> None:
    """Print a compilation error to stderr, with source context when available."""
    if isinstance(exc, ParseError):
        print(exc.format(str(path) if path else "input.tml"), file=sys.stderr)
    elif path is not None:
        print(f"error: {path}: {exc}", file=sys.stderr)
    else:
        print(f"error: {exc}", file=sys.stderr)


def _print_report(report: DirectoryReport) -> None:
    for source, target in report.compiled:
        print(f"Compiled {source} -> {target}", file=sys.stderr)
    for source, exc in report.failed:
        print_error(source, exc)


def compile_target(options: CliOptions, compiler: Compiler) -> bool:
    """Compile whatever the options point at; returns True when nothing failed."""
    input_path = options.input_path

    if input_path is None:
        report = compiler.compile_project(
            ".", str(options.project_source), str(options.project_output)
        )
        _print_report(report)
        return report.ok

    if input_path.is_dir():
        report = compiler.compile_directory(
            input_path, options.output_path, recursive=options.recursive
        )
        _print_report(report)
        return report.ok

    if options.output_path is not None and str(options.output_path) == "-":
        html = compiler.compile(input_path.read_text(encoding="utf-8"))
        sys.stdout.write(html if html.endswith("\n") else html + "\n")
        return True

    target = compiler.compile_file(input_path, options.output_path)
    print(f"Compiled {input_path} -> {target}", file=sys.stderr)
    return True


def watched_files(options: CliOptions) -> list[Path]:
    """Return the .tml files a watch session polls."""
    input_path = options.input_path
    if input_path is None:
        root, recursive = options.project_source, True
    elif input_path.is_dir():
        root, recursive = input_path, options.recursive
    else:
        return [input_path]

    if not root.is_dir():
        return []
    pattern = f"*{SOURCE_SUFFIX}"
    found = root.rglob(pattern) if recursive else root.glob(pattern)
    return sorted(path for path in found if path.is_file())


def watch_target(path: Path, options: CliOptions) -> Path | None:
    """Output path for a watched file; None means next to the source."""
    input_path = options.input_path
    if input_path is None:
        src_root, out_root = options.project_source, options.project_output
    elif input_path.is_dir():
        src_root, out_root = input_path, options.output_path
    else:
        return options.output_path

    if out_root is None:
        return None
    return (out_root / path.relative_to(src_root)).with_suffix(OUTPUT_SUFFIX)


def watch_loop(options: CliOptions, compiler: Compiler) -> None:
    """Poll input files for changes, recompile each modified file."""
    mtimes: dict[Path, float] = {}
    target = options.input_path or options.project_source
    print(f"Watching {target} for changes...", file=sys.stderr)
    try:
        while True:
            for path in watched_files(options):
                try:
                    mtime = path.stat().st_mtime
                except OSError:
                    continue
                if mtimes.get(path) == mtime:
                    continue
                mtimes[path] = mtime
                try:
                    output = compiler.compile_file(path, watch_target(path, options))
                    print(f"Compiled {path} -> {output}", file=sys.stderr)
                except (TmlError, OSError) as exc:
                    print_error(path, exc)
            time.sleep(_POLL_INTERVAL)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    configure_logging(options.verbosity)

    if options.init:
        for path in init_project(options.input_path or Path(".")):
            print(f"Created {path}", file=sys.stderr)
        return 0

    compiler = build_compiler(options)
    try:
        if options.watch:
            watch_loop(options, compiler)
            return 0
        ok = compile_target(options, compiler)
    except (TmlError, OSError) as exc:
        print_error(options.input_path, exc)
        return 1
    finally:
        compiler.dispose()

    return 0 if ok else 1


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())
