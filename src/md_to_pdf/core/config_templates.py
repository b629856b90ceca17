"""Packaged TOML templates written by ``md-to-pdf config init``."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from .config import TomlConfigError, write_toml_template
from .errors import ConfigError

__all__ = [
    "DEFAULT_TEMPLATE",
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
]

DEFAULT_TEMPLATE = "md_to_pdf"

_RESOURCE_PACKAGE = "md_to_pdf.resources"


class ConfigTemplateError(ConfigError):
    """Raised when a template is unknown or cannot be written."""


@dataclass(frozen=True)
class ConfigTemplate:
    """A TOML file shipped in :mod:`md_to_pdf.resources`."""

    name: str
    resource: str
    summary: str

    def read_text(self) -> str:
        source = resources.files(_RESOURCE_PACKAGE).joinpath(self.resource)
        if not source.is_file():
            raise ConfigTemplateError(
                f"Template '{self.name}' is missing from the package "
                f"({self.resource})."
            )
        return source.read_text(encoding="utf-8")

    def write(
        self,
        path: Union[str, "os.PathLike[str]"],
        *,
        overwrite: bool = False,
    ) -> Path:
        """Write the template to ``path``; an existing file needs ``overwrite``."""

        try:
            return write_toml_template(
                Path(path).expanduser(),
                template=self.read_text(),
                overwrite=overwrite,
            )
        except TomlConfigError as exc:
            raise ConfigTemplateError(str(exc)) from exc


_TEMPLATES: Mapping[str, ConfigTemplate] = MappingProxyType(
    {
        DEFAULT_TEMPLATE: ConfigTemplate(
            name=DEFAULT_TEMPLATE,
            resource="template.toml",
            summary="Defaults for every md-to-pdf configuration key.",
        ),
    }
)


def get_template(name: str = DEFAULT_TEMPLATE) -> ConfigTemplate:
    template = _TEMPLATES.get(name)
    if template is None:
        known = ", ".join(sorted(_TEMPLATES))
        raise ConfigTemplateError(
            f"Unknown config template '{name}'. Available: {known}."
        )
    return template


def iter_templates() -> Iterable[ConfigTemplate]:
    return tuple(_TEMPLATES.values())
