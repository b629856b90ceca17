from __future__ import annotations

from pathlib import Path

import pytest

from md_to_pdf.core import config as core_config
from md_to_pdf.core.errors import ConfigError


def test_load_toml_reads_tables(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        'css = "body { color: red; }"\n[pdf_options]\nformat = "letter"\n',
        encoding="utf-8",
    )

    data = core_config.load_toml(path)

    assert data["css"] == "body { color: red; }"
    assert data["pdf_options"] == {"format": "letter"}


def test_load_toml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.load_toml(tmp_path / "missing.toml")

    assert "not found" in str(excinfo.value)


def test_load_toml_invalid_document(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("css = \n", encoding="utf-8")

    with pytest.raises(ConfigError):
        core_config.load_toml(path)


def test_deep_merge_merges_nested_mappings() -> None:
    base = {"a": 1, "nested": {"x": 1, "y": 2}}
    override = {"b": 2, "nested": {"y": 3, "z": 4}}

    merged = core_config.deep_merge(base, override)

    assert merged == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3, "z": 4}}
    assert base == {"a": 1, "nested": {"x": 1, "y": 2}}
    assert override == {"b": 2, "nested": {"y": 3, "z": 4}}


def test_deep_merge_replaces_non_mapping_values() -> None:
    merged = core_config.deep_merge({"a": {"x": 1}}, {"a": [1, 2]})

    assert merged == {"a": [1, 2]}


def test_write_toml_template_respects_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "config.toml"

    written = core_config.write_toml_template(target, template="a = 1\n")
    assert written == target
    assert target.read_text(encoding="utf-8") == "a = 1\n"

    with pytest.raises(core_config.TomlConfigError):
        core_config.write_toml_template(target, template="a = 2\n")

    core_config.write_toml_template(target, template="a = 2\n", overwrite=True)
    assert target.read_text(encoding="utf-8") == "a = 2\n"
