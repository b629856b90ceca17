"""Front matter extraction for Markdown sources.

A front matter block sits at the very top of a document::

    ---
    document_title: Release notes
    body_class: [wide]
    ---

    # Body starts here

The opening delimiter may carry a language name (``---toml``); otherwise
:attr:`FrontMatterOptions.language` is used. Each language is parsed by the
matching entry in :attr:`FrontMatterOptions.engines`. The ``python`` engine
would evaluate code and is therefore disabled: callers that really want it
must supply their own engine.
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping

import yaml

from .core.errors import ConfigError

__all__ = [
    "DEFAULT_ENGINES",
    "FrontMatter",
    "FrontMatterEngine",
    "FrontMatterError",
    "FrontMatterOptions",
    "parse_front_matter",
]

FrontMatterEngine = Callable[[str], Any]


class FrontMatterError(ConfigError):
    """Raised when a front matter block cannot be parsed."""


def _disabled_python_engine(source: str) -> Any:
    raise FrontMatterError(
        "The python engine for front matter is disabled by default."
    )


def _load_yaml(source: str) -> Any:
    try:
        return yaml.safe_load(source)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid YAML front matter: {exc}") from exc


def _load_toml(source: str) -> Any:
    try:
        return tomllib.loads(source)
    except tomllib.TOMLDecodeError as exc:
        raise FrontMatterError(f"Invalid TOML front matter: {exc}") from exc


def _load_json(source: str) -> Any:
    text = source.strip()
    if not text:
        return None
    # Allow both ``{...}`` and the bare ``"key": value`` form.
    if not text.startswith("{"):
        text = "{" + text + "}"
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FrontMatterError(f"Invalid JSON front matter: {exc}") from exc


DEFAULT_ENGINES: Mapping[str, FrontMatterEngine] = MappingProxyType(
    {
        "yaml": _load_yaml,
        "toml": _load_toml,
        "json": _load_json,
        "python": _disabled_python_engine,
    }
)


@dataclass(frozen=True)
class FrontMatterOptions:
    """How front matter blocks are recognised and parsed."""

    delimiter: str = "---"
    language: str = "yaml"
    engines: Mapping[str, FrontMatterEngine] = field(
        default_factory=lambda: DEFAULT_ENGINES
    )


@dataclass(frozen=True)
class FrontMatter:
    """Parsed front matter plus the remaining document body."""

    data: Mapping[str, Any]
    content: str
    language: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.data


def parse_front_matter(
    text: str, options: FrontMatterOptions | None = None
) -> FrontMatter:
    """Split ``text`` into front matter data and the Markdown body."""

    options = options or FrontMatterOptions()
    delimiter = options.delimiter
    source = text[1:] if text.startswith("\ufeff") else text

    if not source.startswith(delimiter):
        return FrontMatter(data=MappingProxyType({}), content=text)

    lines = source.splitlines(keepends=True)
    opener = lines[0].rstrip("\r\n")
    language = opener[len(delimiter):].strip().lower()
    # ``----`` or ``---foo bar`` is not an opening delimiter.
    if language and not re.fullmatch(r"[a-z][\w-]*", language):
        return FrontMatter(data=MappingProxyType({}), content=text)

    end_index = -1
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n").rstrip() == delimiter:
            end_index = index
            break
    if end_index < 0:
        return FrontMatter(data=MappingProxyType({}), content=text)

    language = language or options.language
    engine = options.engines.get(language)
    if engine is None:
        raise FrontMatterError(
            f"No front matter engine registered for '{language}'."
        )

    block = "".join(lines[1:end_index])
    parsed = engine(block)
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise FrontMatterError(
            "Front matter must be a mapping, found {0}.".format(
                type(parsed).__name__
            )
        )

    body = "".join(lines[end_index + 1:])
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]

    return FrontMatter(
        data=MappingProxyType(dict(parsed)),
        content=body,
        language=language,
    )
