"""Conservative detection of pages that sit behind a login wall.

Only flags a page when the evidence is explicit. A missed login page just
yields useless text; a false positive would abort a legitimate fetch.
"""

from __future__ import annotations

from urllib.parse import urlparse

AUTH_PATH_MARKERS = ("/login", "/signin", "/sign-in", "/auth", "/authenticate")
REDIRECT_LOGIN_MARKERS = ("login", "signin")
TITLE_MARKERS = ("sign in", "log in")


def detects_auth_required(initial_url: str, final_url: str, page_title: str) -> bool:
    """Return True when the navigation clearly ended on an authentication page."""
    final_lower = final_url.lower()
    title_lower = page_title.strip().lower()

    if any(marker in final_lower for marker in AUTH_PATH_MARKERS):
        return True

    initial_host = urlparse(initial_url).hostname
    final_host = urlparse(final_url).hostname
    if (
        initial_host
        and final_host
        and initial_host != final_host
        and any(marker in final_lower for marker in REDIRECT_LOGIN_MARKERS)
    ):
        return True

    if any(marker in title_lower for marker in TITLE_MARKERS) or title_lower == "login":
        return True

    return False
