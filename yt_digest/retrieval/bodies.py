# yt_digest/retrieval/bodies.py
"""
Transcript body parsers.

Two formats come back from caption endpoints:
- cue-timed JSON ("json3"): {"events": [{"segs": [{"utf8": "..."}]}]}
- markup-tag text: repeated <text ...>content</text> elements

Both produce plain text in document order.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, Union

from yt_digest.retrieval.entities import decode_entities
from yt_digest.retrieval.errors import ParseFailureError

TEXT_ELEMENT = re.compile(r"<text\b[^>]*>(.*?)</text>", re.DOTALL | re.IGNORECASE)


def parse_cue_events(payload: Union[str, bytes, Mapping[str, Any], None]) -> str:
    """
    Flatten a cue-timed payload.

    Segment text within an event is joined with single spaces, then
    non-empty events are joined with single spaces. Missing or malformed
    event lists yield an empty string.
    """
    if payload is None:
        return ""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ParseFailureError(f"Cue-timed payload is not JSON: {exc}") from exc

    if not isinstance(payload, Mapping):
        return ""
    events = payload.get("events")
    if not isinstance(events, list):
        return ""

    lines: List[str] = []
    for event in events:
        if not isinstance(event, Mapping):
            continue
        segments = event.get("segs") or []
        if not isinstance(segments, list):
            continue
        parts = []
        for segment in segments:
            if isinstance(segment, Mapping):
                text = str(segment.get("utf8") or "").strip()
                if text:
                    parts.append(text)
        if parts:
            lines.append(" ".join(parts))

    return " ".join(lines)


def parse_text_markup(raw: Union[str, bytes, None]) -> str:
    """Extract, decode and join the content of every <text> element."""
    if not raw:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    fragments = []
    for match in TEXT_ELEMENT.finditer(raw):
        text = decode_entities(match.group(1)).strip()
        if text:
            fragments.append(text)
    return " ".join(fragments)
