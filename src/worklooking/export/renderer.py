"""Render JSON-Resume documents to standalone themed HTML (Jinja2)."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import markdown
from jinja2 import Environment, FileSystemLoader, TemplateError
from markupsafe import Markup

from worklooking.errors import RenderFailed
from worklooking.models.resume import ResumeDocument

logger = logging.getLogger(__name__)

THEMES_DIR = Path(__file__).parent / "themes"

AVAILABLE_THEMES = ("modern-sidebar", "classic")
DEFAULT_THEME = "modern-sidebar"

_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y")


def render_resume(resume: ResumeDocument | dict[str, Any], theme: str = DEFAULT_THEME) -> str:
    """Render a resume to a full HTML page with inlined CSS.

    Unknown theme names fall back to the default theme.
    """
    if theme not in AVAILABLE_THEMES:
        logger.info("Unknown theme %r, using %s", theme, DEFAULT_THEME)
        theme = DEFAULT_THEME
    data = resume.to_json_dict() if isinstance(resume, ResumeDocument) else resume

    try:
        css = (THEMES_DIR / f"{theme}.css").read_text(encoding="utf-8")
        template = _environment().get_template(f"{theme}.html")
        return template.render(css=Markup(css), resume=data)
    except (TemplateError, OSError, TypeError, ValueError) as exc:
        logger.error("Failed to render theme %s", theme, exc_info=True)
        raise RenderFailed(f"Theme rendering failed: {exc}") from exc


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(THEMES_DIR)),
        autoescape=True,
    )
    env.filters.update(
        {
            "safe_image": safe_image,
            "paragraph_split": paragraph_split,
            "space_to_dash": space_to_dash,
            "markdown": markdown_to_html,
            "my": lambda value: format_date(value, "my"),
            "y": lambda value: format_date(value, "y"),
            "dmy": lambda value: format_date(value, "dmy"),
        }
    )
    return env


def safe_image(image: str | None) -> Markup:
    """Emit an image source unescaped so long data URLs are not mangled."""
    if not image:
        return Markup("")
    if image.startswith(("data:image/", "https://", "http://")):
        return Markup(image)
    return Markup("")


def paragraph_split(text: str | None) -> Markup:
    if not text:
        return Markup("")
    lines = re.split(r"\r\n|\r|\n", text)
    return Markup("").join(Markup("<p>{}</p>").format(line) for line in lines if line)


def space_to_dash(text: str | None) -> str:
    return re.sub(r"\s", "-", text or "").lower()


def markdown_to_html(text: str | None) -> Markup:
    """Render markdown; raw HTML tags in ``text`` come out as literal text.

    Only ``<`` is neutralized up front so blockquotes (``>``) and entities
    (``&amp;``) keep their markdown meaning.
    """
    if not text:
        return Markup("")
    return Markup(markdown.markdown(str(text).replace("<", "&lt;"), extensions=["nl2br"]))


def format_date(value: Any, style: str) -> str:
    """Format an ISO-ish date (YYYY, YYYY-MM or YYYY-MM-DD); other values pass through.

    ``style`` is "my" (March 2021), "y" (2021) or "dmy" (5 March 2021).
    """
    if not value:
        return ""
    text = str(value)
    for candidate in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, candidate)
        except ValueError:
            continue
        if style == "y" or candidate == "%Y":
            return str(parsed.year)
        if style == "dmy":
            return f"{parsed.day} {parsed.strftime('%B %Y')}"
        return parsed.strftime("%B %Y")
    return text
