"""HTML to PDF conversion (WeasyPrint)."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def html_to_pdf(html: str, base_url: str | Path | None = None) -> bytes:
    """Convert an HTML string to PDF bytes.

    ``base_url`` resolves relative images and stylesheets, usually the
    directory of the source HTML file. Page size and margins come from the
    document's ``@page`` rule (the bundled themes use A4).
    """
    from weasyprint import HTML

    pdf = HTML(string=html, base_url=str(base_url) if base_url else None).write_pdf()
    logger.debug("Rendered PDF: %d bytes", len(pdf))
    return pdf
