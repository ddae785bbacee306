# yt_digest/config.py
"""Environment-driven settings (env vars or a .env file)."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from yt_digest.retrieval.schema import RetrievalConfig


class Settings(BaseSettings):
    # Retrieval
    preferred_language: Optional[str] = "en"
    request_timeout: float = 5.0
    page_timeout: float = 8.0
    lookup_title: bool = True
    title_timeout: float = 10.0

    # Summarization
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    summary_max_chars: int = 15000
    summary_temperature: float = 0.5
    summary_max_tokens: int = 1000
    summary_max_attempts: int = 3

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def retrieval_config(self) -> RetrievalConfig:
        return RetrievalConfig(
            preferred_language=self.preferred_language,
            request_timeout=self.request_timeout,
            page_timeout=self.page_timeout,
            lookup_title=self.lookup_title,
            title_timeout=self.title_timeout,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
