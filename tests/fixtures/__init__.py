"""Shared testing fixtures and stubs for the md_to_pdf test suite."""

from .files import build_tree  # noqa: F401
from .weasyprint import FAKE_PDF, GeneratedPDF, HTMLStub  # noqa: F401

__all__ = [
    "FAKE_PDF",
    "GeneratedPDF",
    "HTMLStub",
    "build_tree",
]
