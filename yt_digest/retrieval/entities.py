# yt_digest/retrieval/entities.py
"""Decoding of markup entities found in scraped caption text."""

from __future__ import annotations

import re

NAMED_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
)

NUMERIC_ENTITY = re.compile(r"&#([xX][0-9a-fA-F]+|\d+);")


def _replace_numeric(match: re.Match) -> str:
    ref = match.group(1)
    try:
        codepoint = int(ref[1:], 16) if ref[0] in "xX" else int(ref)
        return chr(codepoint)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_entities(text: str) -> str:
    """
    Decode named entities, then numeric character references.

    Text without entities is returned unchanged; numeric references that do
    not map to a character are left as literal text.
    """
    if not text:
        return ""

    decoded = text
    for entity, char in NAMED_ENTITIES:
        decoded = decoded.replace(entity, char)

    return NUMERIC_ENTITY.sub(_replace_numeric, decoded)
