#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

utils.py - Shared helpers for ids, names, dates and HTML text
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

RandomBytes = Callable[[int], bytes]

HTML_TAG_RE = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
PARAGRAPH_BREAK_RE = re.compile(r"\n\n+")

# Formats tried after ISO-8601 when reading free-form workbook dates
DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
]


# ============================================================================
# ID Generation
# ============================================================================

def generate_id(random_bytes: Optional[RandomBytes] = None) -> str:
    """Generate a 32-character hex id for OLX url_name attributes."""
    source = random_bytes or secrets.token_bytes
    return source(16).hex()


def sanitize_url_name(value: str) -> str:
    """Lowercase a display name into a url_name-safe token (max 60 chars)."""
    safe = re.sub(r"[^a-z0-9_-]", "_", str(value).lower())
    safe = re.sub(r"_+", "_", safe)
    safe = re.sub(r"^_|_$", "", safe)
    return safe[:60]


# ============================================================================
# Dates
# ============================================================================

def parse_date(value: str) -> Optional[datetime]:
    """Parse a free-form date string into a naive UTC datetime, or None."""
    text = (value or "").strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text[-1] in "Zz" else text
    parsed = None
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_edx_date(value: str) -> str:
    """
    Format a date string as ISO-8601 with a trailing Z.

    Returns "" for blank or unparseable input so callers can omit the
    attribute instead of failing.
    """
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return parsed.strftime("%Y-%m-%dT%H:%M:%SZ")


# ============================================================================
# HTML
# ============================================================================

def text_to_html(text: str) -> str:
    """Wrap plain text into <p> paragraphs unless it already contains HTML."""
    if not text:
        return ""
    if HTML_TAG_RE.search(text):
        return text
    paragraphs = PARAGRAPH_BREAK_RE.split(text)
    return "\n".join(f"<p>{p.replace(chr(10), '<br/>')}</p>" for p in paragraphs)
