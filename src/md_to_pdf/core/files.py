"""Common file and path utilities shared across md_to_pdf modules."""

from __future__ import annotations

import codecs
import os
import re
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from .errors import ConfigError

__all__ = [
    "MARKDOWN_EXTENSIONS",
    "get_dir",
    "get_output_file_path",
    "is_http_url",
    "is_md_file",
    "normalize_encoding",
    "read_file",
]

PathLike = Union[str, "os.PathLike[str]"]

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("md", "mkd", "mdown", "markdown")

# ``foo.md`` and ``foo.md.txt`` both count; anything else after the Markdown
# extension does not.
_MD_FILE_RE = re.compile(
    r"\.(?:{0})(?:\.txt)?$".format("|".join(MARKDOWN_EXTENSIONS)),
    re.IGNORECASE,
)

_HTTP_SCHEMES = frozenset({"http", "https"})


def read_file(path: PathLike, encoding: str = "utf-8") -> str:
    """Read ``path`` and decode it with ``encoding``.

    The decoded text is returned unmodified. Encoding names are resolved
    through :mod:`codecs` so aliases such as ``windows1252`` work; an unknown
    name raises :class:`ConfigError` before the file is opened. I/O errors
    propagate unchanged.
    """

    codec = normalize_encoding(encoding)
    data = Path(path).read_bytes()
    return data.decode(codec)


def normalize_encoding(encoding: str) -> str:
    """Return the canonical codec name for ``encoding``."""
    if not isinstance(encoding, str) or not encoding.strip():
        raise ConfigError("File encoding must be a non-empty string.")
    name = encoding.strip()
    try:
        return codecs.lookup(name).name
    except LookupError:
        pass
    # ``windows1252`` style names (no separator) are common in configs.
    match = re.fullmatch(r"(?i)(windows|cp)-?(\d+)", name)
    if match:
        try:
            return codecs.lookup(f"cp{match.group(2)}").name
        except LookupError:
            pass
    raise ConfigError(f"Unsupported file encoding '{encoding}'.")


def is_md_file(filename: PathLike) -> bool:
    """Return whether ``filename`` names a Markdown file."""

    return bool(_MD_FILE_RE.search(os.fspath(filename)))


def is_http_url(value: str) -> bool:
    """Return whether ``value`` parses as an ``http``/``https`` URL."""

    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in _HTTP_SCHEMES and bool(parsed.netloc)


def get_output_file_path(path: PathLike, extension: str) -> str:
    """Return ``path`` with its final extension replaced by ``extension``."""

    source = Path(os.fspath(path))
    suffix = extension if extension.startswith(".") else f".{extension}"
    return os.path.normpath(str(source.with_suffix(suffix)))


def get_dir(path: PathLike) -> str:
    """Return the directory containing ``path`` using native separators."""

    return os.path.normpath(os.path.dirname(os.path.abspath(os.fspath(path))))
