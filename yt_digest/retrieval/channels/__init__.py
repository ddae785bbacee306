# yt_digest/retrieval/channels/__init__.py
"""Channel adapters, in the order the orchestrator tries them."""

from yt_digest.retrieval.channels.base import Channel
from yt_digest.retrieval.channels.catalog_api import CatalogApiChannel
from yt_digest.retrieval.channels.embedded_page import EmbeddedPageChannel
from yt_digest.retrieval.channels.internal_api import InternalApiChannel

DEFAULT_CHANNEL_TYPES = (CatalogApiChannel, EmbeddedPageChannel, InternalApiChannel)

__all__ = [
    "Channel",
    "CatalogApiChannel",
    "EmbeddedPageChannel",
    "InternalApiChannel",
    "DEFAULT_CHANNEL_TYPES",
]
