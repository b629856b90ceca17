"""Stylesheet, script and page CSS resolution for assembled documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pygments.formatters import HtmlFormatter

from .config import Config, PdfOptions
from .core.files import is_http_url, read_file

__all__ = [
    "DocumentAssets",
    "Script",
    "Style",
    "build_page_css",
    "highlight_css",
    "load_assets",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Style:
    """A stylesheet reference (``href``) or an inline CSS block."""

    href: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class Script:
    """A script reference (``src``) or an inline script block."""

    src: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class DocumentAssets:
    """Resolved head contents, in injection order."""

    styles: tuple[Style, ...] = ()
    scripts: tuple[Script, ...] = ()


def highlight_css(style_name: str) -> str:
    formatter = HtmlFormatter(style=style_name)
    return formatter.get_style_defs(".highlight")


def build_page_css(pdf_options: PdfOptions) -> str:
    """Return the ``@page`` rule for ``pdf_options``.

    The margin declaration is only emitted when a margin record is set.
    """

    lines = ["@page {", f"  size: {pdf_options.size};"]
    if pdf_options.margin is not None:
        lines.append(f"  margin: {pdf_options.margin.as_css()};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def load_assets(config: Config) -> DocumentAssets:
    """Resolve configured stylesheets and scripts for ``config``.

    Remote stylesheets and scripts are referenced; local files are read
    relative to ``config.basedir`` (or the working directory) and inlined.
    Both are decoded with ``stylesheet_encoding``. Missing files raise
    ``OSError`` unchanged.
    """

    styles: list[Style] = []
    for entry in config.stylesheet:
        if is_http_url(entry):
            styles.append(Style(href=entry))
            continue
        path = _resolve_local(config.basedir, entry)
        styles.append(
            Style(content=read_file(path, config.stylesheet_encoding))
        )
    if config.highlight_style:
        styles.append(Style(content=highlight_css(config.highlight_style)))
    if config.css:
        styles.append(Style(content=config.css))

    scripts: list[Script] = []
    for entry in config.script:
        if "url" in entry:
            scripts.append(Script(src=entry["url"]))
        elif "path" in entry:
            path = _resolve_local(config.basedir, entry["path"])
            scripts.append(
                Script(content=read_file(path, config.stylesheet_encoding))
            )
        else:
            scripts.append(Script(content=entry["content"]))

    logger.debug(
        "Resolved document assets",
        extra={"style_count": len(styles), "script_count": len(scripts)},
    )
    return DocumentAssets(styles=tuple(styles), scripts=tuple(scripts))


def _resolve_local(basedir: Optional[Path], entry: str) -> Path:
    path = Path(entry).expanduser()
    if not path.is_absolute():
        path = (basedir or Path.cwd()) / path
    return path
