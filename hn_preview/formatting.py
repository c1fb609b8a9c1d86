"""Plain-text helpers for rendering stories and comments."""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Optional

from hn_preview.constants import TIME_DISPLAY_FORMAT

_PARAGRAPH_RE = re.compile(r"<p\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def html_to_text(text: Optional[str]) -> str:
    """
    Item text arrives as an HTML fragment. Paragraph tags become blank
    lines, other tags are stripped and entities decoded.
    """
    if not text:
        return ""
    txt = _PARAGRAPH_RE.sub("\n\n", text)
    txt = _TAG_RE.sub("", txt)
    return html.unescape(txt).strip()


def format_local_time(ts: datetime) -> str:
    return ts.astimezone().strftime(TIME_DISPLAY_FORMAT)
