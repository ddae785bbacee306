from types import SimpleNamespace

from conftest import LONG_SENTENCE

from yt_digest.config import Settings
from yt_digest.digest import run_digest
from yt_digest.retrieval.schema import FailureType, RetrievalOutcome, SourceChannel, TranscriptResult


class StubRetriever:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def retrieve(self, reference, preferred_language=None):
        self.calls.append((reference, preferred_language))
        return self.outcome


def success_outcome():
    result = TranscriptResult(text=LONG_SENTENCE, language_code="en", source_channel=SourceChannel.CATALOG_API)
    return RetrievalOutcome.succeeded(result, reference="dQw4w9WgXcQ", video_id="dQw4w9WgXcQ", title="T", attempts=[])


def llm_returning(content):
    def create(**kwargs):
        if isinstance(content, Exception):
            raise content
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_digest_success():
    retriever = StubRetriever(success_outcome())

    result = run_digest(
        "dQw4w9WgXcQ",
        preferred_language="en",
        settings=Settings(openai_api_key="k"),
        llm_client=llm_returning("A summary"),
        retriever=retriever,
    )

    assert result.success
    assert result.summary == "A summary"
    assert result.error is None
    assert result.outcome.transcript == LONG_SENTENCE
    assert retriever.calls == [("dQw4w9WgXcQ", "en")]


def test_digest_transcript_failure_skips_summary():
    outcome = RetrievalOutcome.failed("Could not extract video ID from URL", FailureType.INPUT_ERROR, reference="x")

    result = run_digest(
        "x",
        settings=Settings(openai_api_key="k"),
        llm_client=llm_returning(RuntimeError("should not be called")),
        retriever=StubRetriever(outcome),
    )

    assert not result.success
    assert result.error == "Could not extract video ID from URL"
    assert result.summary is None


def test_digest_summary_failure_keeps_transcript():
    result = run_digest(
        "dQw4w9WgXcQ",
        settings=Settings(openai_api_key="k"),
        llm_client=llm_returning(ValueError("quota exceeded")),
        retriever=StubRetriever(success_outcome()),
    )

    assert result.success
    assert result.summary is None
    assert result.error == "Summary generation failed: quota exceeded"
    assert result.outcome.success
