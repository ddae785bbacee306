# yt_digest/retrieval/video_id.py
"""
Video identifier extraction.

Accepts anything a user might paste (watch URL, short link, embed URL,
shorts URL, URL with extra query parameters, bare 11-character id) and
returns the canonical id, or None. Malformed input is expected and never raises.
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

# Tried in order; the first capturing group of the first match wins
VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^?&/#\s]+)"),
    re.compile(r"youtube\.com/watch.*?[?&]v=([^?&/#\s]+)"),
    re.compile(r"youtube\.com/shorts/([^?&/#\s]+)"),
)
BARE_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(reference: Any) -> Optional[str]:
    """Return the video id referenced by ``reference``, or None."""
    if not reference or not isinstance(reference, str):
        return None

    reference = reference.strip()
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(reference)
        if match and match.group(1):
            return match.group(1)

    if BARE_VIDEO_ID.match(reference):
        return reference

    return _video_id_from_query(reference)


def _video_id_from_query(reference: str) -> Optional[str]:
    try:
        parsed = urlparse(reference)
    except ValueError:
        return None

    if "youtube.com" not in (parsed.hostname or ""):
        return None

    values = parse_qs(parsed.query).get("v")
    if values and values[0]:
        return values[0]
    return None
