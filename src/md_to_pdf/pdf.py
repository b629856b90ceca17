"""WeasyPrint boundary: finished HTML in, PDF bytes out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .config import Config
from .core.errors import DependencyError

__all__ = ["write_pdf"]

logger = logging.getLogger(__name__)


def write_pdf(
    html: str,
    config: Config,
    target: Optional[Path] = None,
) -> bytes:
    """Render ``html`` to PDF and return the bytes.

    Page size and margins come from the ``@page`` rule already in ``html``;
    ``pdf_options.extra`` is passed to ``write_pdf`` as keyword arguments.

    The bytes are also written to ``target`` when one is given. Rendering
    errors from WeasyPrint propagate unchanged.
    """

    html_cls = _load_weasyprint()
    options = dict(config.pdf_options.extra)
    document = html_cls(
        string=html,
        base_url=_resolve_base_url(config),
        media_type=config.page_media_type,
    )

    pdf_bytes = document.write_pdf(**options)
    if target is not None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(pdf_bytes)
        logger.debug("Wrote PDF", extra={"output_path": str(target)})
    return pdf_bytes


def _load_weasyprint() -> Any:
    try:
        from weasyprint import HTML
    except (ImportError, OSError) as exc:
        raise DependencyError(
            "WeasyPrint is required for PDF output. Install system libraries "
            "(Pango) and the 'weasyprint' package, or use --as-html."
        ) from exc
    return HTML


def _resolve_base_url(config: Config) -> str:
    basedir = config.basedir or Path.cwd()
    return Path(basedir).expanduser().resolve().as_uri() + "/"
