import json

import pytest

from yt_digest.retrieval.errors import UpstreamShapeError, UpstreamStatusError


class FakeHttp:
    """Routes requests by URL and a subset of query params; unknown routes 404."""

    def __init__(self):
        self.routes = []
        self.calls = []

    def route(self, url, response, **params):
        self.routes.append((url, params, response))
        return self

    def _resolve(self, method, url, params, payload=None):
        params = dict(params or {})
        self.calls.append({"method": method, "url": url, "params": params, "payload": payload})
        matches = [
            (len(route_params), response)
            for route_url, route_params, response in self.routes
            if route_url == url and all(params.get(k) == v for k, v in route_params.items())
        ]
        if not matches:
            raise UpstreamStatusError(404, url)
        _, response = max(matches, key=lambda item: item[0])
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def get_text(self, url, params=None, headers=None, timeout=None):
        response = self._resolve("GET", url, params)
        return response if isinstance(response, str) else json.dumps(response)

    def get_json(self, url, params=None, headers=None, timeout=None):
        response = self._resolve("GET", url, params)
        if isinstance(response, str):
            try:
                return json.loads(response)
            except ValueError as exc:
                raise UpstreamShapeError("not json") from exc
        return response

    def post_json(self, url, payload, params=None, headers=None, timeout=None):
        return self._resolve("POST", url, params, payload)

    def close(self):
        pass

    def calls_to(self, url, **params):
        return [
            call for call in self.calls
            if call["url"] == url and all(call["params"].get(k) == v for k, v in params.items())
        ]


@pytest.fixture
def fake_http():
    return FakeHttp()


LONG_SENTENCE = "This is a caption line that is comfortably longer than twenty characters."

CATALOG_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript_list docid="42">'
    '<track id="0" name="" lang_code="de" lang_original="Deutsch" lang_translated="German"/>'
    '<track id="1" name="English" lang_code="en" lang_original="English" lang_translated="English" lang_default="true"/>'
    '<track id="2" name="" lang_code="en" kind="asr" lang_original="English (auto-generated)"/>'
    "</transcript_list>"
)


def json3_payload(*lines):
    return {"events": [{"tStartMs": i * 1000, "segs": [{"utf8": line}]} for i, line in enumerate(lines)]}


def xml_body(*lines):
    return "<transcript>" + "".join(f'<text start="{i}" dur="1.0">{line}</text>' for i, line in enumerate(lines)) + "</transcript>"
