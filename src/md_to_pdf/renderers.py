"""Build a ``markdown -> html`` render function from a :class:`Config`.

Two engines are supported and selected by ``Config.markdown_parser``:

- ``mistune``: configured with ``mistune_options``, ``mistune_plugins``
  (registered in order) and an optional renderer. A renderer instance given
  as ``mistune_options["renderer"]`` is used as-is; otherwise a default
  highlighting renderer is created and the ``mistune_renderer`` overrides
  (method name -> callable) replace its methods one by one.
- ``markdown-it``: a ``MarkdownIt`` instance built from
  ``markdown_it_preset`` and ``markdown_it_options``, with
  ``markdown_it_rules`` enabled and every ``markdown_it_plugins`` entry
  applied in order.

Both paths return a plain ``Callable[[str], str]``. Every call builds fresh
engine instances, so render functions are never shared between conversions.
"""

from __future__ import annotations

import importlib
import logging
from html import escape
from typing import Any, Callable, Mapping, Optional

import mistune
from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .config import Config, MarkdownParser
from .core.errors import ConfigError

__all__ = [
    "HighlightRenderer",
    "RenderFunction",
    "build_render_function",
    "highlight_code",
]

logger = logging.getLogger(__name__)

RenderFunction = Callable[[str], str]


# ------------- Syntax highlighting -------------


def highlight_code(code: str, lang: Optional[str]) -> Optional[str]:
    """Return Pygments markup for ``code`` or ``None`` for unknown languages.

    The result is wrapped in ``<pre class="highlight">`` so the stylesheet
    from :func:`md_to_pdf.assets.highlight_css` applies to both engines.
    """

    if not lang:
        return None
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return None
    body = highlight(code, lexer, HtmlFormatter(nowrap=True))
    return (
        f'<pre class="highlight"><code class="language-{escape(lang)}">'
        f"{body}</code></pre>\n"
    )


class HighlightRenderer(mistune.HTMLRenderer):
    """mistune HTML renderer that highlights fenced code with Pygments."""

    def block_code(self, code: str, info: Optional[str] = None) -> str:
        if info:
            lang = info.strip().split(None, 1)[0]
            highlighted = highlight_code(code, lang)
            if highlighted is not None:
                return highlighted
        return super().block_code(code, info)


# ------------- mistune -------------


def _build_mistune(config: Config) -> RenderFunction:
    options = dict(config.mistune_options)
    renderer = options.pop("renderer", None)
    overrides = config.mistune_renderer

    if renderer is None:
        renderer = _default_mistune_renderer(
            config, escape=bool(options.get("escape", True))
        )
    elif not isinstance(renderer, mistune.BaseRenderer):
        raise ConfigError(
            "mistune_options.renderer must be a mistune renderer instance."
        )
    elif overrides:
        raise ConfigError(
            "mistune_renderer overrides cannot be combined with a custom "
            "renderer instance; override the methods on the instance."
        )

    try:
        markdown = mistune.create_markdown(
            renderer=renderer,
            plugins=list(config.mistune_plugins),
            **options,
        )
    except TypeError as exc:
        raise ConfigError(f"Invalid mistune options: {exc}") from exc
    except (ImportError, AttributeError, ValueError) as exc:
        raise ConfigError(f"Unknown mistune plugin: {exc}") from exc

    _apply_renderer_overrides(renderer, overrides)

    def render(text: str) -> str:
        return markdown(text)

    return render


def _default_mistune_renderer(
    config: Config, *, escape: bool
) -> mistune.HTMLRenderer:
    if config.highlight_style:
        return HighlightRenderer(escape=escape)
    return mistune.HTMLRenderer(escape=escape)


def _apply_renderer_overrides(
    renderer: mistune.BaseRenderer,
    overrides: Mapping[str, Callable[..., str]],
) -> None:
    # Instance attributes win over both class methods and plugin-registered
    # renderers in mistune's method lookup.
    for name, method in overrides.items():
        if not callable(method):
            raise ConfigError(f"mistune_renderer.{name} must be callable.")
        setattr(renderer, name, method)


# ------------- markdown-it -------------


def _markdown_it_highlight(content: str, lang: str, attrs: str) -> str:
    return highlight_code(content, lang) or ""


def _build_markdown_it(config: Config) -> RenderFunction:
    options = dict(config.markdown_it_options)
    if config.highlight_style and "highlight" not in options:
        options["highlight"] = _markdown_it_highlight

    try:
        md = MarkdownIt(config.markdown_it_preset, options_update=options)
    except (KeyError, ValueError) as exc:
        raise ConfigError(
            f"Unknown markdown-it preset '{config.markdown_it_preset}'."
        ) from exc

    if config.markdown_it_rules:
        try:
            md.enable(list(config.markdown_it_rules))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    for name, plugin_options in config.markdown_it_plugins.items():
        if plugin_options is False:
            continue
        plugin = _resolve_markdown_it_plugin(name)
        _use_plugin(md, plugin, plugin_options)

    def render(text: str) -> str:
        return md.render(text)

    return render


def _resolve_markdown_it_plugin(name: str) -> Callable[..., Any]:
    """Resolve ``footnote`` or ``package.module:attr`` to a plugin callable."""

    module_name, _, attr = name.partition(":")
    if not attr:
        module_name = f"mdit_py_plugins.{name}"
        attr = f"{name}_plugin"
    try:
        module = importlib.import_module(module_name)
        plugin = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigError(f"Unknown markdown-it plugin '{name}'.") from exc
    if not callable(plugin):
        raise ConfigError(f"markdown-it plugin '{name}' is not callable.")
    return plugin


def _use_plugin(
    md: MarkdownIt, plugin: Callable[..., Any], options: Any
) -> None:
    if options is None or options is True:
        md.use(plugin)
    elif isinstance(options, Mapping):
        md.use(plugin, **options)
    elif isinstance(options, (list, tuple)):
        md.use(plugin, *options)
    else:
        md.use(plugin, options)


# ------------- Selection -------------

_ENGINE_BUILDERS: Mapping[MarkdownParser, Callable[[Config], RenderFunction]] = {
    MarkdownParser.MISTUNE: _build_mistune,
    MarkdownParser.MARKDOWN_IT: _build_markdown_it,
}


def build_render_function(config: Config) -> RenderFunction:
    """Return a render function for the engine named by ``config``.

    Configuration problems (unknown engine, plugin, rule or option) raise
    :class:`ConfigError` here, before anything is rendered.
    """

    parser = MarkdownParser.from_value(config.markdown_parser)
    render = _ENGINE_BUILDERS[parser](config)
    logger.debug(
        "Built markdown renderer",
        extra={"markdown_parser": parser.value},
    )
    return render
