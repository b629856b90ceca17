"""Convert Markdown documents into styled HTML and PDF files."""

from __future__ import annotations

from .config import (
    Config,
    Margin,
    MarkdownParser,
    PdfOptions,
    default_config,
    get_margin_object,
    load_config,
    merge_config,
)
from .converter import ConversionOutcome, MarkdownInput, OutputType, convert
from .core.errors import ConfigError, DependencyError
from .document import assemble_document, get_html
from .front_matter import FrontMatterError, FrontMatterOptions, parse_front_matter
from .renderers import build_render_function

__all__ = [
    "Config",
    "ConfigError",
    "ConversionOutcome",
    "DependencyError",
    "FrontMatterError",
    "FrontMatterOptions",
    "Margin",
    "MarkdownInput",
    "MarkdownParser",
    "OutputType",
    "PdfOptions",
    "assemble_document",
    "build_render_function",
    "convert",
    "default_config",
    "get_html",
    "get_margin_object",
    "load_config",
    "merge_config",
    "parse_front_matter",
]
