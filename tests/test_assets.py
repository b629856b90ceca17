from __future__ import annotations

from pathlib import Path

import pytest

from fixtures import build_tree
from md_to_pdf import assets
from md_to_pdf.config import Margin, PdfOptions, default_config, merge_config


def test_build_page_css_with_margin() -> None:
    css = assets.build_page_css(PdfOptions())

    assert css == (
        "@page {\n"
        "  size: A4 portrait;\n"
        "  margin: 30mm 40mm 30mm 20mm;\n"
        "}\n"
    )


def test_build_page_css_without_margin() -> None:
    css = assets.build_page_css(PdfOptions(format="letter", landscape=True, margin=None))

    assert css == "@page {\n  size: Letter landscape;\n}\n"
    assert "margin" not in css


def test_build_page_css_zero_margin_is_kept() -> None:
    css = assets.build_page_css(PdfOptions(margin=Margin("0", "0", "0", "0")))

    assert "margin: 0 0 0 0;" in css


def test_highlight_css_targets_highlight_class() -> None:
    css = assets.highlight_css("default")

    assert ".highlight" in css


def test_load_assets_default_stylesheet_is_inlined() -> None:
    loaded = assets.load_assets(default_config())

    first = loaded.styles[0]
    assert first.href is None
    assert "font-family" in first.content
    # Highlight styles follow the stylesheets.
    assert ".highlight" in loaded.styles[1].content
    assert loaded.scripts == ()


def test_load_assets_orders_styles(tmp_path: Path) -> None:
    build_tree(tmp_path, {"css": {"local.css": "p { color: blue; }"}})
    config = merge_config(
        default_config(),
        {
            "basedir": str(tmp_path),
            "stylesheet": ["https://example.com/remote.css", "css/local.css"],
            "highlight_style": "",
            "css": "h1 { color: red; }",
        },
    )

    loaded = assets.load_assets(config)

    assert [style.href for style in loaded.styles] == [
        "https://example.com/remote.css",
        None,
        None,
    ]
    assert loaded.styles[1].content == "p { color: blue; }"
    assert loaded.styles[2].content == "h1 { color: red; }"


def test_load_assets_reads_stylesheets_with_encoding(tmp_path: Path) -> None:
    (tmp_path / "style.css").write_bytes('p::after { content: "é"; }'.encode("cp1252"))
    config = merge_config(
        default_config(),
        {
            "basedir": str(tmp_path),
            "stylesheet": ["style.css"],
            "stylesheet_encoding": "windows1252",
            "highlight_style": "",
        },
    )

    loaded = assets.load_assets(config)

    assert loaded.styles[0].content == 'p::after { content: "é"; }'


def test_load_assets_scripts(tmp_path: Path) -> None:
    build_tree(tmp_path, {"js": {"local.js": "console.log('local');"}})
    config = merge_config(
        default_config(),
        {
            "basedir": str(tmp_path),
            "script": [
                {"url": "https://cdn.example.com/lib.js"},
                {"path": "js/local.js"},
                {"content": "init();"},
            ],
        },
    )

    loaded = assets.load_assets(config)

    assert loaded.scripts == (
        assets.Script(src="https://cdn.example.com/lib.js"),
        assets.Script(content="console.log('local');"),
        assets.Script(content="init();"),
    )


def test_load_assets_missing_stylesheet_raises(tmp_path: Path) -> None:
    config = merge_config(
        default_config(),
        {"basedir": str(tmp_path), "stylesheet": ["missing.css"]},
    )

    with pytest.raises(FileNotFoundError):
        assets.load_assets(config)


def test_load_assets_reads_scripts_with_encoding(tmp_path: Path) -> None:
    (tmp_path / "app.js").write_bytes("label = 'café';".encode("cp1252"))
    config = merge_config(
        default_config(),
        {
            "basedir": str(tmp_path),
            "script": [{"path": "app.js"}],
            "stylesheet_encoding": "windows1252",
        },
    )

    loaded = assets.load_assets(config)

    assert loaded.scripts == (assets.Script(content="label = 'café';"),)
