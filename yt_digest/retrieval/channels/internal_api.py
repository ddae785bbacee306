# yt_digest/retrieval/channels/internal_api.py
"""
Internal-API channel: the structured get_transcript endpoint.

The watch page supplies an API key and a client version; the transcript
request carries a generated client nonce and a base64 params blob. The
response nests the transcript renderer in one of several known places.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import time
import uuid
from typing import Any, Iterable, List, Mapping, Optional

from yt_digest.logging_core.logger import log_event
from yt_digest.retrieval.channels.base import Channel, timer
from yt_digest.retrieval.errors import UpstreamShapeError
from yt_digest.retrieval.schema import SourceChannel, TranscriptResult

GET_TRANSCRIPT_URL = "https://www.youtube.com/youtubei/v1/get_transcript"

API_KEY_PATTERN = re.compile(r'"INNERTUBE_API_KEY":\s*"([^"]+)"')
CLIENT_VERSION_PATTERN = re.compile(r'"INNERTUBE_CLIENT_VERSION":\s*"([^"]+)"')
TRANSCRIPT_PARAMS_PATTERN = re.compile(r'"getTranscriptEndpoint":\s*\{\s*"params":\s*"([^"]+)"')


def scrape_api_key(html: str) -> Optional[str]:
    match = API_KEY_PATTERN.search(html or "")
    return match.group(1) if match else None


def scrape_client_version(html: str) -> Optional[str]:
    match = CLIENT_VERSION_PATTERN.search(html or "")
    return match.group(1) if match else None


def scrape_transcript_params(html: str) -> Optional[str]:
    match = TRANSCRIPT_PARAMS_PATTERN.search(html or "")
    return match.group(1) if match else None


def generate_nonce(timestamp: Optional[int] = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    return base64.b64encode(f"{timestamp}_{uuid.uuid4().hex[:9]}".encode()).decode()


def encode_params(video_id: str) -> str:
    return base64.b64encode(json.dumps({"videoId": video_id}).encode()).decode()


def _get(node: Any, *path: Any) -> Any:
    """Walk nested dicts/lists; None as soon as a step is missing."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
        elif not isinstance(node, Mapping):
            return None
        node = node[step] if isinstance(step, int) else node.get(step)
        if node is None:
            return None
    return node


def find_transcript_renderer(data: Any) -> Optional[Mapping[str, Any]]:
    action = _get(data, "actions", 0)
    renderer = _get(action, "updateEngagementPanelAction", "content", "transcriptRenderer")
    if renderer is None:
        renderer = _get(action, "appendContinuationItemsAction", "continuationItems", 0, "transcriptRenderer")
    return renderer if isinstance(renderer, Mapping) else None


def _text_of(node: Any) -> str:
    if not isinstance(node, Mapping):
        return ""
    if isinstance(node.get("simpleText"), str):
        return node["simpleText"]
    runs = node.get("runs")
    if isinstance(runs, list):
        return "".join(str(run.get("text", "")) for run in runs if isinstance(run, Mapping))
    return ""


def _cue_group_texts(renderer: Mapping[str, Any]) -> Iterable[str]:
    groups = _get(renderer, "body", "transcriptBodyRenderer", "cueGroups") or []
    for group in groups:
        cues = _get(group, "transcriptCueGroupRenderer", "cues") or []
        texts = [_text_of(_get(cue, "transcriptCueRenderer", "cue")).strip() for cue in cues]
        yield " ".join(text for text in texts if text)


def _segment_texts(renderer: Mapping[str, Any]) -> Iterable[str]:
    segments = _get(
        renderer,
        "content", "transcriptSearchPanelRenderer", "body",
        "transcriptSegmentListRenderer", "initialSegments",
    ) or []
    for segment in segments:
        yield _text_of(_get(segment, "transcriptSegmentRenderer", "snippet")).strip()


def extract_transcript_text(renderer: Mapping[str, Any]) -> str:
    texts: List[str] = [text for text in _cue_group_texts(renderer) if text]
    if not texts:
        texts = [text for text in _segment_texts(renderer) if text]
    return " ".join(texts)


def extract_language(renderer: Mapping[str, Any]) -> Optional[str]:
    language = _get(renderer, "header", "transcriptHeaderRenderer", "languageCode")
    return language if isinstance(language, str) and language else None


class InternalApiChannel(Channel):
    name = SourceChannel.INTERNAL_API

    def build_request(self, video_id: str, client_version: str, params: Optional[str]) -> dict:
        return {
            "context": {
                "client": {
                    "clientName": "WEB",
                    "clientVersion": client_version,
                    "hl": "en",
                    "gl": "US",
                    "userAgent": self.config.user_agent,
                    "timeZone": "UTC",
                    "utcOffsetMinutes": 0,
                },
                "request": {
                    "useSsl": True,
                    "internalExperimentFlags": [],
                    "consistencyTokenJars": [],
                },
                "user": {},
                "clientScreenNonce": generate_nonce(),
            },
            "params": params or encode_params(video_id),
        }

    def fetch(
        self,
        video_id: str,
        preferred_language: Optional[str] = None,
        run_id: Optional[uuid.UUID] = None,
    ) -> TranscriptResult:
        logger = self.logger(run_id)

        with timer() as elapsed:
            html = self.fetch_watch_page(video_id)
            api_key = scrape_api_key(html)
            client_version = scrape_client_version(html)
            if not api_key or not client_version:
                raise UpstreamShapeError("Could not find API key or client version in watch page")

            data = self.http.post_json(
                GET_TRANSCRIPT_URL,
                self.build_request(video_id, client_version, scrape_transcript_params(html)),
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                timeout=self.config.page_timeout,
            )

            renderer = find_transcript_renderer(data)
            if renderer is None:
                raise UpstreamShapeError("Transcript renderer not found in response")

            text = self.accept(extract_transcript_text(renderer), "internal transcript")
            language = extract_language(renderer) or "unknown"

            log_event(
                logger,
                logging.INFO,
                "Internal transcript fetched",
                channel=self.name.value,
                event_type="success",
                metadata={"language": language, "elapsed_ms": elapsed()},
            )

        return TranscriptResult(
            text=text,
            language_code=language,
            is_auto_generated=False,
            source_channel=self.name,
        )
