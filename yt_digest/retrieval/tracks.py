# yt_digest/retrieval/tracks.py
"""
Caption track catalog parsing and track selection.

The catalog endpoint answers with tag-attribute markup that is not reliably
well-formed XML, so parsing is pattern based and never raises. Selection is
a fixed priority order, deterministic for a given catalog and preference.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence

from yt_digest.retrieval.entities import decode_entities
from yt_digest.retrieval.schema import ENGLISH_FAMILY, CaptionTrack, TrackKind

ASR_KIND = "asr"

TRACK_TAG = re.compile(r"<track\b([^>]*)>", re.IGNORECASE)
ATTRIBUTE = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
# Looser shape seen on older listings
ALT_TRACK = re.compile(r'lang="([^"]*)"[^>]*?name="([^"]*)"')


def _attributes(fragment: str) -> dict:
    attrs = {}
    for match in ATTRIBUTE.finditer(fragment):
        name = match.group(1).lower()
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attrs.setdefault(name, value or "")
    return attrs


def track_kind(raw_kind: Optional[str]) -> TrackKind:
    raw_kind = (raw_kind or "").strip().lower()
    if not raw_kind:
        return TrackKind.UNSPECIFIED
    if raw_kind == ASR_KIND:
        return TrackKind.AUTO_GENERATED
    return TrackKind.MANUAL


def parse_track_catalog(raw: Optional[str]) -> List[CaptionTrack]:
    """Parse a catalog listing into tracks, in listing order."""
    if not raw:
        return []

    tracks: List[CaptionTrack] = []
    for match in TRACK_TAG.finditer(raw):
        attrs = _attributes(match.group(1))
        language_code = attrs.get("lang_code", "").strip()
        if not language_code:
            continue
        display_name = attrs.get("name") or attrs.get("lang_translated") or attrs.get("lang_original") or ""
        tracks.append(
            CaptionTrack(
                language_code=language_code,
                display_name=decode_entities(display_name),
                kind=track_kind(attrs.get("kind")),
            )
        )

    if tracks:
        return tracks

    for match in ALT_TRACK.finditer(raw):
        language_code = match.group(1).strip()
        if language_code:
            tracks.append(
                CaptionTrack(
                    language_code=language_code,
                    display_name=decode_entities(match.group(2) or ""),
                )
            )
    return tracks


def _first(tracks: Iterable[CaptionTrack], predicate: Callable[[CaptionTrack], bool]) -> Optional[CaptionTrack]:
    return next((track for track in tracks if predicate(track)), None)


def _match_language(
    tracks: Sequence[CaptionTrack],
    language: str,
    code_of: Callable[[CaptionTrack], str],
) -> Optional[CaptionTrack]:
    """
    Exact (case-insensitive) match first, then a regional variant of
    ``language``, then the base language of a regional preference
    (``en-US`` accepts ``en``).
    """
    exact = _first(tracks, lambda t: code_of(t).lower() == language)
    if exact is not None:
        return exact
    variant = _first(tracks, lambda t: code_of(t).lower().startswith(language + "-"))
    if variant is not None:
        return variant
    base = language.split("-")[0]
    if base == language:
        return None
    return _first(tracks, lambda t: code_of(t).lower() == base)


def _is_fallback_language(language: str, fallback: Sequence[str]) -> bool:
    bases = {code.split("-")[0] for code in fallback}
    return language in fallback or language.split("-")[0] in bases


def select_track(
    tracks: Sequence[CaptionTrack],
    preferred_language: Optional[str] = None,
    fallback_languages: Sequence[str] = ENGLISH_FAMILY,
) -> Optional[CaptionTrack]:
    """
    Pick one track from a catalog.

    Priority:
        1. manual track in the preferred language
        2. manual fallback-family track (only when the preference is not in that family)
        3. auto-generated track in the preferred language (``a.`` prefix accepted)
        4. auto-generated fallback-family track
        5. the first track listed

    Returns None only for an empty catalog.
    """
    if not tracks:
        return None

    preferred = (preferred_language or "").strip().lower() or None
    fallback = tuple(code.lower() for code in fallback_languages)
    manual = [track for track in tracks if not track.is_auto_generated]
    auto = [track for track in tracks if track.is_auto_generated]

    if preferred:
        track = _match_language(manual, preferred, lambda t: t.language_code)
        if track is not None:
            return track

    if not preferred or not _is_fallback_language(preferred, fallback):
        track = _first(manual, lambda t: t.language_code.lower() in fallback)
        if track is not None:
            return track

    if preferred:
        track = _match_language(auto, preferred, lambda t: t.base_language)
        if track is not None:
            return track

    track = _first(auto, lambda t: t.base_language.lower() in fallback)
    if track is not None:
        return track

    return tracks[0]
