"""CLI entry point for the Markdown to PDF/HTML converter."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from .config import (
    PAPER_SIZES,
    Config,
    MarkdownParser,
    load_config,
    merge_config,
)
from .converter import MarkdownInput, OutputType, convert
from .core import config_templates
from .core.config_templates import ConfigTemplateError
from .core.errors import ConfigError, DependencyError
from .core.logging import configure_logger
from .executor import ExecutionSummary, run_conversion

DEFAULT_CONFIG_FILENAME = "md-to-pdf.toml"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md-to-pdf",
        description=(
            "Convert Markdown files into styled PDF (or HTML) documents. "
            "Reads stdin when no paths are given."
        ),
        epilog=(
            "Run `md-to-pdf config init` to scaffold the default "
            f"{DEFAULT_CONFIG_FILENAME} template."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Markdown files to convert (non-Markdown files are skipped).",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        help="Path to a TOML config file (defaults to $MD_TO_PDF_CONFIG).",
    )
    parser.add_argument(
        "--basedir",
        help="Base directory for relative stylesheets, scripts and images.",
    )
    parser.add_argument(
        "--stylesheet",
        action="append",
        help="Stylesheet path or URL; repeat to add several.",
    )
    parser.add_argument("--css", help="Inline CSS appended after stylesheets.")
    parser.add_argument(
        "--body-class",
        action="append",
        help="Class added to the <body> element; repeat to add several.",
    )
    parser.add_argument("--document-title", help="Value of the <title> tag.")
    parser.add_argument(
        "--page-media-type",
        choices=["screen", "print"],
        help="CSS media type used when rendering the PDF.",
    )
    parser.add_argument(
        "--highlight-style",
        help="Pygments style for fenced code blocks ('' disables it).",
    )
    parser.add_argument(
        "--markdown-parser",
        choices=[member.value for member in MarkdownParser],
        help="Markdown engine used to render the body.",
    )
    parser.add_argument("--page-format", choices=sorted(PAPER_SIZES))
    parser.add_argument(
        "--landscape",
        action="store_const",
        const=True,
        default=None,
    )
    parser.add_argument(
        "--margin",
        help="CSS margin shorthand (e.g. '20mm' or '1in 0.5in').",
    )
    parser.add_argument("--md-file-encoding")
    parser.add_argument("--stylesheet-encoding")
    parser.add_argument(
        "--as-html",
        action="store_const",
        const=True,
        default=None,
        help="Write HTML instead of PDF.",
    )
    parser.add_argument(
        "--dest",
        help="Output file (only valid with a single input or stdin).",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        help="Directory for JSON log files (no log file by default).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log messages to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = _build_parser()
    args = parser.parse_args(args_list)

    if args.dest and len(args.paths) > 1:
        parser.error("--dest can only be used with a single input.")

    overrides = _overrides_from_args(args)
    try:
        config = load_config(config_path=args.config_file)
        # Fail on bad overrides before any file is touched.
        merge_config(config, overrides)
    except ConfigError as exc:
        parser.error(str(exc))

    logger, log_path = configure_logger(
        "md_to_pdf",
        log_dir=args.log_dir,
        level=args.log_level,
        verbose=args.verbose,
    )
    logger.debug("md-to-pdf CLI invoked")

    if not args.paths:
        return _convert_stdin(config, overrides)

    summary = run_conversion(
        args.paths,
        config=config,
        overrides=overrides,
        logger=logger,
    )
    _print_summary(summary, log_path)
    return summary.exit_code


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    simple = {
        "basedir": args.basedir,
        "stylesheet": args.stylesheet,
        "css": args.css,
        "body_class": args.body_class,
        "document_title": args.document_title,
        "page_media_type": args.page_media_type,
        "highlight_style": args.highlight_style,
        "markdown_parser": args.markdown_parser,
        "md_file_encoding": args.md_file_encoding,
        "stylesheet_encoding": args.stylesheet_encoding,
        "as_html": args.as_html,
        "dest": args.dest,
    }
    for key, value in simple.items():
        if value is not None:
            overrides[key] = value

    pdf_options: dict[str, Any] = {}
    if args.page_format is not None:
        pdf_options["format"] = args.page_format
    if args.landscape is not None:
        pdf_options["landscape"] = args.landscape
    if args.margin is not None:
        pdf_options["margin"] = args.margin
    if pdf_options:
        overrides["pdf_options"] = pdf_options
    return overrides


def _convert_stdin(config: Config, overrides: dict[str, Any]) -> int:
    text = sys.stdin.read()
    try:
        outcome = convert(
            MarkdownInput(content=text), config=config, overrides=overrides
        )
    except (ConfigError, DependencyError, OSError) as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    if outcome.output_path is None:
        if outcome.filetype is OutputType.HTML:
            sys.stdout.write(str(outcome.content))
        else:
            sys.stdout.buffer.write(bytes(outcome.content))
            sys.stdout.flush()
    return 0


def _print_summary(summary: ExecutionSummary, log_path: Optional[Path]) -> None:
    lines = [
        "md-to-pdf summary:",
        "  converted: {0}".format(summary.success_count),
        "  skipped:   {0}".format(summary.skipped_count),
        "  failed:    {0}".format(summary.failure_count),
    ]
    for result in summary.results:
        if result.output_path is not None:
            lines.append("  wrote: {0}".format(result.output_path))
        elif result.reason:
            lines.append(
                "  {0}: {1} ({2})".format(
                    result.status.value, result.source, result.reason
                )
            )
    if log_path is not None:
        lines.append("  log file:  {0}".format(log_path))
    sys.stdout.write("\n".join(lines) + "\n")


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)

    template = config_templates.get_template("md_to_pdf")
    target = (args.path or Path(DEFAULT_CONFIG_FILENAME)).expanduser()
    if not target.is_absolute():
        target = (Path.cwd() / target).resolve()
    try:
        written = template.write(target, overwrite=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote md-to-pdf config to {written}\n")
    return 0


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md-to-pdf config",
        description="Manage md-to-pdf configuration files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Write the default {DEFAULT_CONFIG_FILENAME} template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            f"Destination for the config TOML (defaults to "
            f"./{DEFAULT_CONFIG_FILENAME})."
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
