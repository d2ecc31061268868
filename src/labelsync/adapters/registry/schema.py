"""Pydantic models describing the registry's article payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RegistryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ArticlePayload(RegistryBaseModel):
    """One article as the registry stores it: an id, a name and flat string data."""

    article_id: str = Field(alias="articleId", min_length=1)
    article_name: str = Field(default="", alias="articleName")
    data: dict[str, str] = Field(default_factory=dict)

    @field_validator("article_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator("article_name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> str:
        return _stringify(value)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: object) -> object:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[object, object], value)
            return {str(key): _stringify(item) for key, item in mapping_value.items()}
        return value


class ArticleListResponse(RegistryBaseModel):
    """Paged article listing.

    Deployments disagree on the envelope key, so ``content`` and ``data`` are
    accepted as alternatives to ``articleList``.
    """

    article_list: list[ArticlePayload] | None = Field(default=None, alias="articleList")
    content: list[ArticlePayload] | None = None
    data: list[ArticlePayload] | None = None
    total_article_count: int | None = Field(default=None, alias="totalArticleCnt")

    @property
    def articles(self) -> list[ArticlePayload]:
        for candidate in (self.article_list, self.content, self.data):
            if candidate:
                return candidate
        return []


class ErrorResponse(RegistryBaseModel):
    error: str | None = None
    response_code: str | None = Field(default=None, alias="responseCode")
    response_message: object = Field(default=None, alias="responseMessage")

    @property
    def message(self) -> str:
        if self.error:
            return self.error
        if isinstance(self.response_message, str) and self.response_message:
            return self.response_message
        return "Unknown registry error"


__all__ = ["ArticleListResponse", "ArticlePayload", "ErrorResponse"]
