"""HTTP client for the registry's article API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter, ValidationError

from labelsync.adapters.http_resilience import ResilientClient
from labelsync.config import RegistryConfig, get_registry_config

from .schema import ArticleListResponse, ArticlePayload, ErrorResponse
from .translator import parse_record, serialize_records

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from labelsync.config import ResilienceConfig
    from labelsync.domain.model import ExternalRecord
    from labelsync.domain.ports import RecordFetcher, RecordPusher

log = getLogger(__name__)

ARTICLES_PATH = "/common/api/v2/common/articles"
ARTICLE_INFO_PATH = "/common/api/v2/common/config/article/info"

_ARTICLE_ARRAY = TypeAdapter(list[ArticlePayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class RegistryAPIError(RuntimeError):
    """Raised when the registry rejects a request or answers with an unusable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class RegistryClient:
    """Reads and writes registry articles for one company/store pair."""

    config: RegistryConfig = field(default_factory=get_registry_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    # Ports ----------------------------------------------------------------------

    def push_records(self, records: Sequence[ExternalRecord]) -> None:
        if not records:
            return
        asyncio.run(self._push_async(list(records)))

    def fetch_records(self, page: int, page_size: int) -> list[ExternalRecord]:
        return asyncio.run(self._fetch_page_async(page, page_size))

    # Requests -------------------------------------------------------------------

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }

    def _tenant_params(self) -> dict[str, str | int]:
        return {"company": self.config.company, "store": self.config.store}

    async def _push_async(self, records: list[ExternalRecord]) -> None:
        body = serialize_records(records)
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(
                self._url(ARTICLES_PATH),
                params=self._tenant_params(),
                json=body,
                headers=self._headers,
            )
        self._raise_for_error(response, action="Push articles")
        log.info("Pushed %s article(s) to store %s", len(records), self.config.store)

    async def _fetch_page_async(self, page: int, page_size: int) -> list[ExternalRecord]:
        params = self._tenant_params() | {"page": page, "size": page_size}
        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(
                self._url(ARTICLE_INFO_PATH),
                params=params,
                headers=self._headers,
            )
        self._raise_for_error(response, action="Fetch articles")

        payloads = self._parse_articles(response)
        log.debug("Fetched %s article(s) from page %s", len(payloads), page)
        return [parse_record(payload) for payload in payloads]

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    # Responses ------------------------------------------------------------------

    @staticmethod
    def _raise_for_error(response: httpx.Response, *, action: str) -> None:
        if response.is_success:
            return
        message = f"{action} failed: HTTP {response.status_code}"
        try:
            error_payload = ErrorResponse.model_validate_json(response.content)
        except ValidationError:
            pass
        else:
            message = f"{message}: {error_payload.message}"
        log.error(message)
        raise RegistryAPIError(message, status_code=response.status_code)

    @staticmethod
    def _parse_articles(response: httpx.Response) -> list[ArticlePayload]:
        if response.status_code == httpx.codes.NO_CONTENT or not response.content.strip():
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryAPIError(
                "Invalid JSON response from registry", status_code=response.status_code
            ) from exc

        try:
            if isinstance(payload, list):
                return _ARTICLE_ARRAY.validate_python(payload)
            if isinstance(payload, dict):
                return ArticleListResponse.model_validate(payload).articles
        except ValidationError as exc:
            raise RegistryAPIError(
                "Unexpected article payload from registry", status_code=response.status_code
            ) from exc
        raise RegistryAPIError(
            "Unexpected registry response payload", status_code=response.status_code
        )


if TYPE_CHECKING:
    _fetcher_check: RecordFetcher = RegistryClient()
    _pusher_check: RecordPusher = RegistryClient()
