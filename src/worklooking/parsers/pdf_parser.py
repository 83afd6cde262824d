"""Plain-text extraction from PDF files (PyMuPDF)."""

from __future__ import annotations

from pathlib import Path


def extract_pdf_text(file_path: str | Path) -> str:
    import fitz  # pymupdf

    doc = fitz.open(str(file_path))
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()
