"""Single-document conversion pipeline: Markdown in, HTML or PDF out."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .config import Config, default_config, merge_config
from .core.files import get_output_file_path, read_file
from .document import get_html
from .front_matter import FrontMatterError, parse_front_matter
from .pdf import write_pdf

__all__ = [
    "ConversionOutcome",
    "MarkdownInput",
    "OutputType",
    "convert",
]

logger = logging.getLogger(__name__)

# Keys a document may not set: they name code to import or call.
_CALLER_ONLY_KEYS = frozenset({"mistune_renderer", "front_matter_options"})

# Plugin names a document may use; dotted or ``module:attr`` names are
# reserved for config files and callers.
_PLUGIN_NAME_RE = re.compile(r"[a-z][a-z0-9_]*")


class OutputType(Enum):
    """Kind of file produced by a conversion."""

    PDF = "pdf"
    HTML = "html"


@dataclass(frozen=True)
class MarkdownInput:
    """Markdown source: a file ``path`` or in-memory ``content``."""

    path: Optional[Path] = None
    content: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.content is None):
            raise ValueError(
                "MarkdownInput needs exactly one of 'path' or 'content'."
            )


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of converting a single Markdown source."""

    source: Optional[Path]
    filetype: OutputType
    content: Union[str, bytes]
    output_path: Optional[Path]
    config: Config


def convert(
    source: Union[MarkdownInput, str, "os.PathLike[str]"],
    *,
    config: Optional[Config] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ConversionOutcome:
    """Convert one Markdown source to HTML or PDF.

    ``config`` holds the defaults and config-file layers; the document's
    front matter is merged over it, then ``overrides``. A file source is
    written next to itself (``.pdf`` or ``.html``) unless ``dest`` is set;
    in-memory content is only written when ``dest`` is set. Errors are
    never swallowed, and nothing is written when any step fails.
    """

    if not isinstance(source, MarkdownInput):
        source = MarkdownInput(path=Path(source))

    base = config or default_config()
    # Overrides decide how the source is read and how front matter is found.
    reading = merge_config(base, overrides)

    source_path: Optional[Path] = None
    if source.path is not None:
        source_path = Path(source.path).expanduser().resolve()
        text = read_file(source_path, reading.md_file_encoding)
    else:
        text = source.content or ""

    front_matter = parse_front_matter(text, reading.front_matter_options)
    effective = merge_config(
        base, _checked_front_matter(front_matter.data), strict=False
    )
    effective = merge_config(effective, overrides)
    if effective.basedir is None:
        basedir = source_path.parent if source_path else Path.cwd()
        effective = replace(effective, basedir=basedir)

    filetype = OutputType.HTML if effective.as_html else OutputType.PDF
    output_path = _resolve_output_path(source_path, effective, filetype)

    html = get_html(front_matter.content, effective)
    content: Union[str, bytes]
    if filetype is OutputType.HTML:
        content = html
        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html, encoding="utf-8")
    else:
        content = write_pdf(html, effective, output_path)

    logger.info(
        "Converted document",
        extra={
            "source": str(source_path) if source_path else "<content>",
            "filetype": filetype.value,
            "output_path": str(output_path) if output_path else None,
        },
    )
    return ConversionOutcome(
        source=source_path,
        filetype=filetype,
        content=content,
        output_path=output_path,
        config=effective,
    )


def _resolve_output_path(
    source_path: Optional[Path], config: Config, filetype: OutputType
) -> Optional[Path]:
    if config.dest is not None:
        return Path(config.dest).expanduser()
    if source_path is None:
        return None
    return Path(get_output_file_path(source_path, filetype.value))


def _checked_front_matter(data: Mapping[str, Any]) -> Mapping[str, Any]:
    for key in _CALLER_ONLY_KEYS.intersection(data):
        raise FrontMatterError(
            f"'{key}' cannot be set from front matter; use a config file."
        )

    plugins = data.get("markdown_it_plugins")
    if plugins is not None:
        names = plugins if isinstance(plugins, Mapping) else {}
        _check_plugin_names("markdown_it_plugins", names)

    plugins = data.get("mistune_plugins")
    if plugins is not None:
        names = plugins if isinstance(plugins, (list, tuple)) else ()
        _check_plugin_names("mistune_plugins", names)
    return data


def _check_plugin_names(key: str, names: Any) -> None:
    for name in names:
        if not isinstance(name, str) or not _PLUGIN_NAME_RE.fullmatch(name):
            raise FrontMatterError(
                f"{key} entry '{name}' is not a built-in plugin name; "
                "import paths are only accepted from config files."
            )
