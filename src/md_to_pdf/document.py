"""HTML document assembly.

:func:`assemble_document` wraps rendered Markdown in a complete HTML page:

- ``<!DOCTYPE html>`` followed by a single ``<head>`` holding the ``@page``
  rule, the configured styles, the configured scripts and, last, a
  ``<title>`` (left out entirely when no title is configured);
- a single ``<body>`` whose ``class`` attribute is always present, even
  when empty, and whose content is the rendered HTML, untouched.

Output only depends on its inputs, so identical inputs give identical
documents.
"""

from __future__ import annotations

from typing import Optional

from jinja2 import Environment, Template

from .assets import DocumentAssets, build_page_css, load_assets
from .config import Config
from .renderers import build_render_function

__all__ = [
    "assemble_document",
    "default_document_template",
    "get_html",
]

_DOCUMENT_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
{{ page_css|safe }}</style>
{% for style in styles %}
{% if style.href %}
<link rel="stylesheet" href="{{ style.href }}">
{% else %}
<style>
{{ style.content|safe }}
</style>
{% endif %}
{% endfor %}
{% for script in scripts %}
{% if script.src %}
<script src="{{ script.src }}"></script>
{% else %}
<script>
{{ script.content|safe }}
</script>
{% endif %}
{% endfor %}
{% if title %}
<title>{{ title }}</title>
{% endif %}
</head>
<body class="{{ body_class }}">
{{ body|safe }}
</body>
</html>
"""


def default_document_template() -> Template:
    env = Environment(
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return env.from_string(_DOCUMENT_TEMPLATE)


def assemble_document(
    body_html: str,
    config: Config,
    assets: Optional[DocumentAssets] = None,
) -> str:
    """Build a full HTML document string around ``body_html``."""

    if assets is None:
        assets = load_assets(config)
    return default_document_template().render(
        page_css=build_page_css(config.pdf_options),
        styles=assets.styles,
        scripts=assets.scripts,
        title=config.document_title,
        body_class=" ".join(config.body_class),
        body=body_html,
    )


def get_html(
    markdown: str,
    config: Config,
    assets: Optional[DocumentAssets] = None,
) -> str:
    """Render ``markdown`` with the configured engine and assemble a page."""

    render = build_render_function(config)
    return assemble_document(render(markdown), config, assets)
