"""Resume export: themed HTML rendering and PDF conversion."""
from worklooking.export.pdf_renderer import html_to_pdf
from worklooking.export.renderer import (
    AVAILABLE_THEMES,
    DEFAULT_THEME,
    render_resume,
)

__all__ = ["render_resume", "html_to_pdf", "AVAILABLE_THEMES", "DEFAULT_THEME"]
