"""CLI entry point for building the concatenated prompt document."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from mdx_prompt.core.logging import configure_logger

from .assembler import Category
from .config import (
    CONFIG_FILENAME,
    ConfigError,
    ConfigOverrides,
    load_config,
    write_template,
)
from .executor import (
    ConcatenationError,
    ConcatenationSummary,
    run_concatenation,
)

LOGGER_NAME = "mdx_prompt.concatenate"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdx-prompt",
        description=(
            "Convert background and anti-pattern MDX fragments into plain "
            "Markdown and concatenate them into a single prompt document."
        ),
        epilog=(
            "Run `mdx-prompt config init` to scaffold the default "
            f"{CONFIG_FILENAME}."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            f"Path to a TOML config file (defaults to ./{CONFIG_FILENAME} "
            "when present)."
        ),
    )
    parser.add_argument(
        "--root",
        type=Path,
        help="Project root used to resolve relative paths.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Destination file for the assembled document.",
    )
    parser.add_argument(
        "--background-dir",
        type=Path,
        help="Directory holding background fragments.",
    )
    parser.add_argument(
        "--anti-patterns-dir",
        type=Path,
        help="Directory holding anti-pattern fragments.",
    )
    parser.add_argument(
        "--extension",
        help="Fragment file extension (defaults to mdx).",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = _build_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        root=args.root,
        background_dir=args.background_dir,
        anti_patterns_dir=args.anti_patterns_dir,
        output_path=args.output,
        extension=args.extension,
        log_level=args.log_level,
    )

    try:
        load_result = load_config(config_path=args.config, overrides=overrides)
    except ConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=config.log_dir,
        level=config.log_level,
        verbose=args.verbose,
        filename="mdx_prompt.log",
    )
    logger.debug(
        "mdx-prompt CLI invoked",
        extra={"config_path": load_result.config_path},
    )

    try:
        summary = run_concatenation(config, logger=logger)
    except ConcatenationError as exc:
        logger.error("Concatenation failed", extra={"reason": str(exc)})
        sys.stderr.write(f"Error concatenating documentation: {exc}\n")
        return 1

    _print_summary(summary, log_path)
    return 0


def _print_summary(summary: ConcatenationSummary, log_path: Path) -> None:
    if not summary.written:
        lines = ["No fragments found; nothing written."]
    else:
        lines = [
            "mdx-prompt summary:",
            "  background:    {0}".format(
                summary.counts.get(Category.BACKGROUND, 0)
            ),
            "  anti-patterns: {0}".format(
                summary.counts.get(Category.ANTI_PATTERNS, 0)
            ),
            "  fallbacks:     {0}".format(summary.fallback_count),
            "  output:        {0}".format(summary.output_path),
        ]
    lines.append("  log file:      {0}".format(log_path))
    sys.stdout.write("\n".join(lines) + "\n")


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)

    target = args.path.expanduser() if args.path else Path(CONFIG_FILENAME)
    if not target.is_absolute():
        target = (Path.cwd() / target).resolve()

    try:
        written = write_template(target, overwrite=args.force)
    except ConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote mdx-prompt config to {written}\n")
    return 0


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdx-prompt config",
        description="Manage mdx-prompt configuration files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Write the default {CONFIG_FILENAME} template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML "
            f"(defaults to ./{CONFIG_FILENAME})."
        ),
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
