# yt_digest/retrieval/title.py
"""
Best-effort video title lookup.

oEmbed first, then the watch page markup, then yt-dlp metadata. Each step
returns None on any failure; the placeholder title is the last resort.
Used to annotate outcomes only, never required for a transcript.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from uuid import UUID

import yt_dlp

from yt_digest.logging_core.logger import get_logger, log_event
from yt_digest.retrieval.entities import decode_entities
from yt_digest.retrieval.errors import TranscriptError
from yt_digest.retrieval.http import HttpClient
from yt_digest.retrieval.schema import UNKNOWN_TITLE

OEMBED_URL = "https://www.youtube.com/oembed"
WATCH_URL = "https://www.youtube.com/watch"

TITLE_TAG = re.compile(r"<title>([^<]*)</title>", re.IGNORECASE)
META_TITLE = re.compile(r'<meta\s+name="title"\s+content="([^"]+)"', re.IGNORECASE)
SITE_SUFFIX = re.compile(r"\s*-\s*YouTube$")

YDL_PARAMS = {
    "quiet": True,
    "no_warnings": True,
    "skip_download": True,
    "noplaylist": True,
    "socket_timeout": 5,
}


def _title_from_oembed(video_id: str, http: HttpClient) -> Optional[str]:
    try:
        data = http.get_json(
            OEMBED_URL,
            params={"url": f"{WATCH_URL}?v={video_id}", "format": "json"},
        )
    except TranscriptError:
        return None
    title = data.get("title") if isinstance(data, dict) else None
    return title.strip() if isinstance(title, str) and title.strip() else None


def title_from_watch_page(html: str) -> Optional[str]:
    match = TITLE_TAG.search(html or "")
    if match:
        title = SITE_SUFFIX.sub("", match.group(1)).strip()
        if title:
            return decode_entities(title)

    match = META_TITLE.search(html or "")
    if match and match.group(1).strip():
        return decode_entities(match.group(1).strip())
    return None


def _title_from_page(video_id: str, http: HttpClient) -> Optional[str]:
    try:
        html = http.get_text(WATCH_URL, params={"v": video_id})
    except TranscriptError:
        return None
    return title_from_watch_page(html)


def _title_from_ytdlp(video_id: str) -> Optional[str]:
    try:
        with yt_dlp.YoutubeDL(YDL_PARAMS) as ydl:
            info = ydl.extract_info(f"{WATCH_URL}?v={video_id}", download=False)
    except yt_dlp.DownloadError:
        return None
    title = (info or {}).get("title")
    return title if isinstance(title, str) and title.strip() else None


def lookup_title(
    video_id: Optional[str],
    http: HttpClient,
    run_id: Optional[UUID] = None,
    use_ytdlp: bool = True,
) -> str:
    """Return a human-readable title, or the placeholder. Never raises."""
    logger = get_logger(run_id)
    if not video_id:
        return UNKNOWN_TITLE

    steps = [
        ("oembed", lambda: _title_from_oembed(video_id, http)),
        ("watch_page", lambda: _title_from_page(video_id, http)),
    ]
    if use_ytdlp:
        steps.append(("yt_dlp", lambda: _title_from_ytdlp(video_id)))

    for source, step in steps:
        try:
            title = step()
        except Exception as exc:  # pylint: disable=broad-except
            log_event(
                logger,
                logging.WARNING,
                "Title lookup step raised",
                event_type="attempt",
                metadata={"source": source, "exception": str(exc)},
            )
            continue
        if title:
            log_event(
                logger,
                logging.INFO,
                "Title resolved",
                event_type="success",
                metadata={"source": source, "video_id": video_id},
            )
            return title

    log_event(
        logger,
        logging.WARNING,
        "Title unavailable, using placeholder",
        event_type="failure",
        metadata={"video_id": video_id},
    )
    return UNKNOWN_TITLE
