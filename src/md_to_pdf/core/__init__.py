"""Core shared helpers for md_to_pdf."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    deep_merge,
    load_toml,
    write_toml_template,
)
from .config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
    get_template,
    iter_templates,
)
from .errors import ConfigError, DependencyError
from .files import (
    MARKDOWN_EXTENSIONS,
    get_dir,
    get_output_file_path,
    is_http_url,
    is_md_file,
    normalize_encoding,
    read_file,
)
from .logging import JsonLogFormatter, configure_logger

__all__ = [
    "ConfigError",
    "DependencyError",
    "TomlConfigError",
    "deep_merge",
    "load_toml",
    "write_toml_template",
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
    "MARKDOWN_EXTENSIONS",
    "get_dir",
    "get_output_file_path",
    "is_http_url",
    "is_md_file",
    "normalize_encoding",
    "read_file",
    "configure_logger",
    "JsonLogFormatter",
]
