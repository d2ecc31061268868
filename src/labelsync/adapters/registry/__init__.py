"""Public interface for the registry adapter."""

from __future__ import annotations

from .client import ARTICLE_INFO_PATH, ARTICLES_PATH, RegistryAPIError, RegistryClient
from .schema import ArticleListResponse, ArticlePayload
from .translator import build_payload, parse_record, serialize_records

__all__ = [
    "ARTICLES_PATH",
    "ARTICLE_INFO_PATH",
    "ArticleListResponse",
    "ArticlePayload",
    "RegistryAPIError",
    "RegistryClient",
    "build_payload",
    "parse_record",
    "serialize_records",
]
