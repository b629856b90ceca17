from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed.
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import HTMLStub  # noqa: E402

from md_to_pdf import pdf as pdf_mod  # noqa: E402


@pytest.fixture
def weasyprint_stub(monkeypatch: pytest.MonkeyPatch) -> Iterator[type[HTMLStub]]:
    """Route PDF rendering through :class:`HTMLStub` and expose its calls."""

    HTMLStub.pop_calls()
    monkeypatch.setattr(pdf_mod, "_load_weasyprint", lambda: HTMLStub)
    yield HTMLStub
    HTMLStub.pop_calls()
