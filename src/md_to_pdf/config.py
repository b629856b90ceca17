"""Configuration model and layered merge for Markdown conversions.

The effective configuration of a conversion is built from ordered layers::

    defaults < config file < front matter < caller overrides

Each layer is a plain mapping keyed by :class:`Config` field names. Later
layers win; option bags (``mistune_options``, ``pdf_options`` ...) merge
key by key instead of being replaced wholesale. :func:`merge_config` never
mutates its inputs and always returns a new frozen :class:`Config`.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .core import config as core_config
from .core.errors import ConfigError
from .core.files import normalize_encoding
from .front_matter import FrontMatterOptions

__all__ = [
    "CONFIG_ENV",
    "DEFAULT_STYLESHEET",
    "PAPER_SIZES",
    "Config",
    "ConfigError",
    "Margin",
    "MarkdownParser",
    "PdfOptions",
    "default_config",
    "get_margin_object",
    "load_config",
    "load_config_file",
    "merge_config",
    "resolve_config_path",
]

logger = logging.getLogger(__name__)

CONFIG_ENV = "MD_TO_PDF_CONFIG"

DEFAULT_STYLESHEET = (
    Path(__file__).resolve().parent / "resources" / "markdown.css"
)

PAPER_SIZES = {
    "a3": "A3",
    "a4": "A4",
    "a5": "A5",
    "legal": "Legal",
    "letter": "Letter",
    "ledger": "Ledger",
}

_MEDIA_TYPES = frozenset({"screen", "print"})

_CSS_LENGTH_RE = re.compile(
    r"^(?:0|-?(?:\d+\.?\d*|\.\d+)"
    r"(?:px|em|rem|ex|ch|in|cm|mm|q|pt|pc|vw|vh|vmin|vmax|%))$",
    re.IGNORECASE,
)


class MarkdownParser(Enum):
    """Supported Markdown rendering engines."""

    MISTUNE = "mistune"
    MARKDOWN_IT = "markdown-it"

    @classmethod
    def from_value(cls, value: object) -> "MarkdownParser":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        expected = ", ".join(member.value for member in cls)
        raise ConfigError(
            f"Unknown markdown parser '{value}'. Expected one of: {expected}."
        )


@dataclass(frozen=True)
class Margin:
    """Four-sided page margin, each side a CSS length."""

    top: str
    right: str
    bottom: str
    left: str

    def as_css(self) -> str:
        return f"{self.top} {self.right} {self.bottom} {self.left}"


@dataclass(frozen=True)
class PdfOptions:
    """Page setup plus extra keyword arguments for the PDF engine."""

    format: str = "a4"
    landscape: bool = False
    margin: Optional[Margin] = field(
        default_factory=lambda: Margin("30mm", "40mm", "30mm", "20mm")
    )
    extra: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def size(self) -> str:
        orientation = "landscape" if self.landscape else "portrait"
        return f"{PAPER_SIZES[self.format]} {orientation}"


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class Config:
    """Fully resolved configuration for a single conversion."""

    basedir: Optional[Path] = None
    stylesheet: tuple[str, ...] = (str(DEFAULT_STYLESHEET),)
    css: str = ""
    script: tuple[Mapping[str, str], ...] = ()
    document_title: str = ""
    body_class: tuple[str, ...] = ()
    page_media_type: str = "screen"
    highlight_style: str = "default"
    markdown_parser: MarkdownParser = MarkdownParser.MISTUNE
    mistune_options: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({"escape": False})
    )
    mistune_plugins: tuple[Any, ...] = ("strikethrough", "table", "url")
    mistune_renderer: Mapping[str, Callable[..., str]] = field(
        default_factory=lambda: _frozen({})
    )
    markdown_it_preset: str = "commonmark"
    markdown_it_options: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({"html": True})
    )
    markdown_it_plugins: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({})
    )
    markdown_it_rules: tuple[str, ...] = ()
    pdf_options: PdfOptions = field(default_factory=PdfOptions)
    front_matter_options: FrontMatterOptions = field(
        default_factory=FrontMatterOptions
    )
    md_file_encoding: str = "utf-8"
    stylesheet_encoding: str = "utf-8"
    as_html: bool = False
    dest: Optional[Path] = None


def default_config() -> Config:
    """Return the packaged default configuration."""

    return Config()


# ------------- Margin shorthand -------------


def get_margin_object(margin: str) -> Optional[Margin]:
    """Expand a CSS margin shorthand into a :class:`Margin`.

    ``""`` yields ``None`` (no margin at all, which is not the same as a zero
    margin). One to four lengths follow the CSS shorthand rule; any other
    count raises :class:`ConfigError`. Non-string input raises ``TypeError``.
    """

    if not isinstance(margin, str):
        raise TypeError(
            f"margin must be a string, found {type(margin).__name__}."
        )
    if margin == "":
        return None

    values = [_validate_length(part) for part in margin.split()]
    if len(values) == 1:
        top = right = bottom = left = values[0]
    elif len(values) == 2:
        top = bottom = values[0]
        right = left = values[1]
    elif len(values) == 3:
        top, right, bottom = values
        left = right
    elif len(values) == 4:
        top, right, bottom, left = values
    else:
        raise ConfigError(
            "margin accepts 1-4 CSS lengths (e.g. '1in' or '1in 0.5in'), "
            f"found {len(values)}."
        )
    return Margin(top=top, right=right, bottom=bottom, left=left)


def _validate_length(value: str) -> str:
    if not _CSS_LENGTH_RE.match(value):
        raise ConfigError(
            f"Invalid CSS length '{value}'. Use a number with a unit "
            "(e.g. '1in', '10mm', '2em')."
        )
    return value


# ------------- Layered merge -------------


def merge_config(
    base: Config,
    *layers: Optional[Mapping[str, Any]],
    strict: bool = True,
) -> Config:
    """Merge ``layers`` over ``base`` in order and return a new config.

    With ``strict`` an unknown key raises :class:`ConfigError`; otherwise it
    is ignored, which suits front matter that also carries document
    metadata.
    """

    merged = base
    for layer in layers:
        if not layer:
            continue
        if not isinstance(layer, Mapping):
            raise ConfigError(
                "Configuration layers must be mappings, found {0}.".format(
                    type(layer).__name__
                )
            )
        merged = _apply_layer(merged, layer, strict=strict)
    return merged


def _apply_layer(
    config: Config, layer: Mapping[str, Any], *, strict: bool
) -> Config:
    changes: dict[str, Any] = {}
    for key, value in layer.items():
        coerce = _FIELD_COERCERS.get(key)
        if coerce is None:
            if strict:
                raise ConfigError(f"Unknown configuration key '{key}'.")
            logger.debug(
                "Ignoring unknown configuration key", extra={"key": key}
            )
            continue
        current = changes.get(key, getattr(config, key))
        changes[key] = coerce(current, value, key)
    return replace(config, **changes)


def _coerce_path(current: Any, value: Any, key: str) -> Path:
    if isinstance(value, (str, os.PathLike)) and str(value).strip():
        return Path(value).expanduser()
    raise ConfigError(f"{key} must be a non-empty path.")


def _coerce_optional_path(current: Any, value: Any, key: str) -> Optional[Path]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _coerce_path(current, value, key)


def _coerce_string(current: Any, value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string.")
    return value


def _coerce_bool(current: Any, value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false.")
    return value


def _coerce_string_tuple(current: Any, value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        items = tuple(value)
        if all(isinstance(item, str) for item in items):
            return items
    raise ConfigError(f"{key} must be a string or a list of strings.")


def _coerce_scripts(
    current: Any, value: Any, key: str
) -> tuple[Mapping[str, str], ...]:
    if value is None:
        return ()
    if isinstance(value, (str, Mapping)) or not isinstance(value, Sequence):
        raise ConfigError(f"{key} must be a list of tables.")
    scripts: list[Mapping[str, str]] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ConfigError(f"{key} entries must be tables.")
        kinds = [kind for kind in ("url", "path", "content") if kind in entry]
        if len(kinds) != 1 or not isinstance(entry[kinds[0]], str):
            raise ConfigError(
                f"{key} entries need exactly one of url, path or content."
            )
        scripts.append(_frozen({kinds[0]: entry[kinds[0]]}))
    return tuple(scripts)


def _coerce_media_type(current: Any, value: Any, key: str) -> str:
    if isinstance(value, str) and value.strip().lower() in _MEDIA_TYPES:
        return value.strip().lower()
    raise ConfigError(f"{key} must be one of: print, screen.")


def _coerce_highlight_style(current: Any, value: Any, key: str) -> str:
    style = _coerce_string(current, value, key).strip()
    if not style:
        return ""
    try:
        get_style_by_name(style)
    except ClassNotFound as exc:
        raise ConfigError(f"Unknown highlight style '{style}'.") from exc
    return style


def _coerce_parser(current: Any, value: Any, key: str) -> MarkdownParser:
    return MarkdownParser.from_value(value)


def _coerce_encoding(current: Any, value: Any, key: str) -> str:
    normalize_encoding(value)
    return value.strip()


def _coerce_options(
    current: Mapping[str, Any], value: Any, key: str
) -> Mapping[str, Any]:
    if value is None:
        return current
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a table.")
    return _frozen(core_config.deep_merge(current, value))


def _coerce_plugins(current: Any, value: Any, key: str) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, Mapping)) or not isinstance(value, Sequence):
        raise ConfigError(f"{key} must be a list of plugin names.")
    items = tuple(value)
    for item in items:
        if not (isinstance(item, str) or callable(item)):
            raise ConfigError(
                f"{key} entries must be plugin names or callables."
            )
    return items


def _coerce_renderer(
    current: Mapping[str, Any], value: Any, key: str
) -> Mapping[str, Any]:
    if value is None:
        return current
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must map renderer methods to callables.")
    for name, method in value.items():
        if not callable(method):
            raise ConfigError(f"{key}.{name} must be callable.")
    merged = dict(current)
    merged.update(value)
    return _frozen(merged)


def _coerce_pdf_options(
    current: PdfOptions, value: Any, key: str
) -> PdfOptions:
    if isinstance(value, PdfOptions):
        return value
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a table.")

    changes: dict[str, Any] = {}
    extra = dict(current.extra)
    for name, option in value.items():
        if name == "format":
            if not isinstance(option, str):
                raise ConfigError(f"{key}.format must be a string.")
            fmt = option.strip().lower()
            if fmt not in PAPER_SIZES:
                raise ConfigError(
                    f"Unsupported paper format: {option}. Choose from "
                    f"{sorted(PAPER_SIZES)}"
                )
            changes["format"] = fmt
        elif name == "landscape":
            changes["landscape"] = _coerce_bool(None, option, f"{key}.landscape")
        elif name == "margin":
            changes["margin"] = _coerce_margin(option, f"{key}.margin")
        else:
            # Anything else is handed to the PDF engine untouched.
            extra[name] = option
    changes["extra"] = _frozen(extra)
    return replace(current, **changes)


def _coerce_margin(value: Any, key: str) -> Optional[Margin]:
    if isinstance(value, Margin):
        return value
    if isinstance(value, Mapping):
        sides = ("top", "right", "bottom", "left")
        missing = [side for side in sides if side not in value]
        if missing:
            raise ConfigError(
                f"{key} is missing sides: {', '.join(missing)}."
            )
        return Margin(
            **{side: _validate_length(str(value[side])) for side in sides}
        )
    return get_margin_object(value)


def _coerce_front_matter_options(
    current: FrontMatterOptions, value: Any, key: str
) -> FrontMatterOptions:
    if isinstance(value, FrontMatterOptions):
        return value
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a table.")

    changes: dict[str, Any] = {}
    for name, option in value.items():
        if name in ("delimiter", "language"):
            if not isinstance(option, str) or not option.strip():
                raise ConfigError(f"{key}.{name} must be a non-empty string.")
            changes[name] = option.strip()
        elif name == "engines":
            if not isinstance(option, Mapping):
                raise ConfigError(f"{key}.engines must be a table.")
            engines = dict(current.engines)
            for language, engine in option.items():
                if not callable(engine):
                    raise ConfigError(
                        f"{key}.engines.{language} must be callable."
                    )
                engines[language] = engine
            changes["engines"] = _frozen(engines)
        else:
            raise ConfigError(f"Unknown configuration key '{key}.{name}'.")
    return replace(current, **changes)


_FIELD_COERCERS: Mapping[str, Callable[[Any, Any, str], Any]] = {
    "basedir": _coerce_optional_path,
    "stylesheet": _coerce_string_tuple,
    "css": _coerce_string,
    "script": _coerce_scripts,
    "document_title": _coerce_string,
    "body_class": _coerce_string_tuple,
    "page_media_type": _coerce_media_type,
    "highlight_style": _coerce_highlight_style,
    "markdown_parser": _coerce_parser,
    "mistune_options": _coerce_options,
    "mistune_plugins": _coerce_plugins,
    "mistune_renderer": _coerce_renderer,
    "markdown_it_preset": _coerce_string,
    "markdown_it_options": _coerce_options,
    "markdown_it_plugins": _coerce_options,
    "markdown_it_rules": _coerce_string_tuple,
    "pdf_options": _coerce_pdf_options,
    "front_matter_options": _coerce_front_matter_options,
    "md_file_encoding": _coerce_encoding,
    "stylesheet_encoding": _coerce_encoding,
    "as_html": _coerce_bool,
    "dest": _coerce_optional_path,
}


# ------------- Config files -------------


def resolve_config_path(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Return the config file to load, or ``None`` when there is none."""

    if config_path is not None:
        return Path(config_path).expanduser()
    env_map = os.environ if env is None else env
    candidate = env_map.get(CONFIG_ENV, "").strip()
    if candidate:
        return Path(candidate).expanduser()
    return None


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load a TOML config layer from ``path``.

    A relative ``basedir`` in the file is resolved against the file's
    directory.
    """

    table = dict(core_config.load_toml(path))
    basedir = table.get("basedir")
    if isinstance(basedir, str) and basedir.strip():
        candidate = Path(basedir).expanduser()
        if not candidate.is_absolute():
            table["basedir"] = str((path.parent / candidate).resolve())
    return table


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load defaults, then the config file, then ``overrides``."""

    layers: list[Mapping[str, Any]] = []
    path = resolve_config_path(config_path, env)
    if path is not None:
        layers.append(load_config_file(path))
        logger.debug("Loaded config file", extra={"config_path": str(path)})
    if overrides:
        layers.append(overrides)
    return merge_config(default_config(), *layers)
