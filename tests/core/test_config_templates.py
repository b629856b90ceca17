from __future__ import annotations

from pathlib import Path

import pytest

from md_to_pdf.core import config_templates
from md_to_pdf.core.config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
)


def test_get_template_returns_md_to_pdf_template(tmp_path: Path) -> None:
    template = config_templates.get_template("md_to_pdf")
    assert isinstance(template, ConfigTemplate)

    contents = template.read_text()
    assert "[pdf_options]" in contents
    assert "markdown_parser" in contents

    target = tmp_path / "md-to-pdf.toml"
    written = template.write(target)
    assert written == target
    assert target.read_text(encoding="utf-8") == contents

    with pytest.raises(ConfigTemplateError):
        template.write(target)

    updated = template.write(target, overwrite=True)
    assert updated == target


def test_template_loads_as_valid_config(tmp_path: Path) -> None:
    from md_to_pdf.config import default_config, load_config

    target = tmp_path / "md-to-pdf.toml"
    config_templates.get_template("md_to_pdf").write(target)

    config = load_config(config_path=target, env={})

    defaults = default_config()
    assert config.pdf_options == defaults.pdf_options
    assert config.markdown_parser is defaults.markdown_parser


def test_iter_templates_returns_registered_templates() -> None:
    names = {template.name for template in config_templates.iter_templates()}
    assert names == {"md_to_pdf"}


@pytest.mark.parametrize("unknown", ["missing", "", "convert_markdown"])
def test_get_template_unknown_raises(unknown: str) -> None:
    with pytest.raises(ConfigTemplateError):
        config_templates.get_template(unknown)
