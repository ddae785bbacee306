from yt_digest.summarization.summarizer import SummaryResult, summarize, truncate_transcript

__all__ = ["SummaryResult", "summarize", "truncate_transcript"]
