"""yt_digest: best-effort video transcript retrieval and summarization."""

__version__ = "0.1.0"
