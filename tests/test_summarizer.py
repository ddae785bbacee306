from types import SimpleNamespace

import httpx
import openai
import pytest
import tenacity

from yt_digest.config import Settings
from yt_digest.summarization import summarizer
from yt_digest.summarization.summarizer import TRUNCATION_MARKER, summarize, truncate_transcript

TRANSCRIPT = "This video explains how caption tracks are selected and fetched. " * 3


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))])


def fake_client(*outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


@pytest.fixture
def settings():
    return Settings(openai_api_key="test-key", summary_max_chars=15000)


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(summarizer, "RETRY_WAIT", tenacity.wait_none())


def test_truncate_keeps_head_and_tail():
    text = "a" * 600 + "b" * 400 + "c" * 1000
    truncated = truncate_transcript(text, max_chars=1000)

    head, tail = truncated.split(TRUNCATION_MARKER)
    assert head == "a" * 600
    assert tail == "c" * 400
    assert truncate_transcript("short", max_chars=1000) == "short"


def test_summarize_success(settings):
    client, completions = fake_client("  Overview: captions.  ")

    result = summarize(TRANSCRIPT, "Captions 101", settings=settings, client=client)

    assert result.success
    assert result.summary == "Overview: captions."
    assert not result.truncated
    request = completions.requests[0]
    assert request["model"] == "gpt-3.5-turbo"
    assert request["temperature"] == 0.5
    assert request["max_tokens"] == 1000
    assert request["messages"][1]["content"].startswith("Title: Captions 101")


def test_summarize_default_title_and_truncation(settings):
    client, completions = fake_client("Summary")
    long_settings = settings.model_copy(update={"summary_max_chars": 100})

    result = summarize(TRANSCRIPT * 10, None, settings=long_settings, client=client)

    assert result.truncated
    assert "Title: YouTube Video" in completions.requests[0]["messages"][1]["content"]
    assert TRUNCATION_MARKER in completions.requests[0]["messages"][1]["content"]


def test_summarize_rejects_short_transcript(settings):
    client, completions = fake_client("unused")

    result = summarize("tiny", settings=settings, client=client)

    assert not result.success
    assert result.error == "Transcript is too short or empty"
    assert completions.requests == []


def test_transient_errors_are_retried(settings):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    client, completions = fake_client(openai.APIConnectionError(request=request), "Recovered summary")

    result = summarize(TRANSCRIPT, "t", settings=settings, client=client)

    assert result.success
    assert result.summary == "Recovered summary"
    assert len(completions.requests) == 2


def test_retries_give_up_after_max_attempts(settings):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    errors = [openai.APIConnectionError(request=request) for _ in range(3)]
    client, completions = fake_client(*errors)

    result = summarize(TRANSCRIPT, "t", settings=settings, client=client)

    assert not result.success
    assert len(completions.requests) == 3


def test_non_transient_error_not_retried(settings):
    client, completions = fake_client(ValueError("bad request"))

    result = summarize(TRANSCRIPT, "t", settings=settings, client=client)

    assert not result.success
    assert result.error == "bad request"
    assert len(completions.requests) == 1


def test_empty_completion_is_failure(settings):
    client, _ = fake_client("   ")

    result = summarize(TRANSCRIPT, "t", settings=settings, client=client)

    assert not result.success
    assert result.error == "Failed to generate summary"
