from __future__ import annotations

from dataclasses import replace

import mistune
import pytest

from md_to_pdf import renderers
from md_to_pdf.config import default_config, merge_config
from md_to_pdf.core.errors import ConfigError

FENCED_PYTHON = "```python\nprint(1)\n```\n"


def _render(markdown: str, **layer) -> str:
    config = merge_config(default_config(), layer)
    return renderers.build_render_function(config)(markdown)


@pytest.mark.parametrize("parser", ["mistune", "markdown-it"])
def test_heading_renders_with_both_engines(parser: str) -> None:
    assert _render("# Foo", markdown_parser=parser).strip() == "<h1>Foo</h1>"


@pytest.mark.parametrize("parser", ["mistune", "markdown-it"])
def test_raw_html_passes_through_by_default(parser: str) -> None:
    html = _render("<div class=\"note\">x</div>\n", markdown_parser=parser)
    assert '<div class="note">x</div>' in html


def test_mistune_escape_option() -> None:
    html = _render(
        "<div>x</div>\n", mistune_options={"escape": True}
    )
    assert "&lt;div&gt;" in html


def test_mistune_default_plugins_enabled() -> None:
    html = _render("~~gone~~\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")

    assert "<del>gone</del>" in html
    assert "<table>" in html


def test_mistune_custom_renderer_instance() -> None:
    renderer = mistune.HTMLRenderer()
    renderer.link = (  # type: ignore[method-assign]
        lambda text, url, title=None: f'<a class="custom" href="{url}">{text}</a>'
    )

    html = _render("[Foo](/bar)", mistune_options={"renderer": renderer})

    assert '<a class="custom" href="/bar">Foo</a>' in html


def test_mistune_renderer_overrides_replace_methods() -> None:
    def link(text, url, title=None):  # noqa: ANN001
        return f'<a class="custom" href="{url}">{text}</a>'

    html = _render("[Foo](/bar)", mistune_renderer={"link": link})

    assert '<a class="custom" href="/bar">Foo</a>' in html


def test_mistune_renderer_overrides_do_not_leak_between_builds() -> None:
    def link(text, url, title=None):  # noqa: ANN001
        return "LINK"

    assert "LINK" in _render("[Foo](/bar)", mistune_renderer={"link": link})
    assert "LINK" not in _render("[Foo](/bar)")


def test_mistune_rejects_renderer_instance_with_overrides() -> None:
    with pytest.raises(ConfigError):
        _render(
            "text",
            mistune_options={"renderer": mistune.HTMLRenderer()},
            mistune_renderer={"link": lambda text, url, title=None: text},
        )


def test_mistune_rejects_non_renderer_object() -> None:
    with pytest.raises(ConfigError):
        _render("text", mistune_options={"renderer": object()})


@pytest.mark.parametrize("plugin", ["no_such_plugin", "no.such.module"])
def test_mistune_unknown_plugin(plugin: str) -> None:
    with pytest.raises(ConfigError):
        _render("text", mistune_plugins=[plugin])


def test_mistune_unknown_option() -> None:
    with pytest.raises(ConfigError):
        _render("text", mistune_options={"not_an_option": True})


@pytest.mark.parametrize("parser", ["mistune", "markdown-it"])
def test_fenced_code_is_highlighted(parser: str) -> None:
    html = _render(FENCED_PYTHON, markdown_parser=parser)

    assert '<pre class="highlight"><code class="language-python">' in html
    assert '<span class="nb">print</span>' in html


@pytest.mark.parametrize("parser", ["mistune", "markdown-it"])
def test_highlighting_can_be_disabled(parser: str) -> None:
    html = _render(FENCED_PYTHON, markdown_parser=parser, highlight_style="")

    assert 'class="highlight"' not in html
    assert '<code class="language-python">print(1)' in html


@pytest.mark.parametrize("parser", ["mistune", "markdown-it"])
def test_unknown_code_language_falls_back(parser: str) -> None:
    html = _render("```nosuchlang\nx\n```\n", markdown_parser=parser)

    assert 'class="highlight"' not in html
    assert '<code class="language-nosuchlang">' in html


def test_highlight_code_unknown_language() -> None:
    assert renderers.highlight_code("x", "nosuchlang") is None
    assert renderers.highlight_code("x", None) is None


def test_markdown_it_rules_are_enabled() -> None:
    table = "| a | b |\n|---|---|\n| 1 | 2 |\n"

    assert "<table>" not in _render(table, markdown_parser="markdown-it")
    assert "<table>" in _render(
        table, markdown_parser="markdown-it", markdown_it_rules=["table"]
    )


def test_markdown_it_unknown_rule() -> None:
    with pytest.raises(ConfigError):
        _render(
            "text", markdown_parser="markdown-it", markdown_it_rules=["nope"]
        )


def test_markdown_it_unknown_preset() -> None:
    with pytest.raises(ConfigError):
        _render("text", markdown_parser="markdown-it", markdown_it_preset="nope")


def test_markdown_it_plugin_by_name() -> None:
    html = _render(
        "Text[^1]\n\n[^1]: A note.\n",
        markdown_parser="markdown-it",
        markdown_it_plugins={"footnote": {}},
    )

    assert 'class="footnotes"' in html
    assert "A note." in html


def test_markdown_it_plugin_by_import_path() -> None:
    html = _render(
        "- [x] done\n- [ ] todo\n",
        markdown_parser="markdown-it",
        markdown_it_plugins={
            "mdit_py_plugins.tasklists:tasklists_plugin": {"enabled": True}
        },
    )

    assert 'type="checkbox"' in html
    assert 'checked="checked"' in html


def test_markdown_it_disabled_plugin_is_skipped() -> None:
    html = _render(
        "Text[^1]\n\n[^1]: A note.\n",
        markdown_parser="markdown-it",
        markdown_it_plugins={"footnote": False},
    )

    assert 'class="footnotes"' not in html


def test_markdown_it_unknown_plugin() -> None:
    with pytest.raises(ConfigError):
        _render(
            "text",
            markdown_parser="markdown-it",
            markdown_it_plugins={"no_such_plugin": {}},
        )


def test_build_render_function_rejects_unknown_parser() -> None:
    config = replace(default_config(), markdown_parser="marked")

    with pytest.raises(ConfigError):
        renderers.build_render_function(config)


def test_mistune_renderer_overrides_plugin_registered_methods() -> None:
    def table(text):  # noqa: ANN001
        return f'<table class="custom">{text}</table>\n'

    def strikethrough(text):  # noqa: ANN001
        return f"<s>{text}</s>"

    html = _render(
        "~~gone~~\n\n| a | b |\n|---|---|\n| 1 | 2 |\n",
        mistune_renderer={"table": table, "strikethrough": strikethrough},
    )

    assert '<table class="custom">' in html
    assert "<s>gone</s>" in html
    assert "<del>" not in html
