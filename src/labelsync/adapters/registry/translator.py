"""Translate registry article payloads to and from external records."""

from __future__ import annotations

from labelsync.domain.model import ExternalRecord

from .schema import ArticlePayload


def parse_record(payload: ArticlePayload) -> ExternalRecord:
    return ExternalRecord(
        slot_id=payload.article_id,
        display_name=payload.article_name,
        fields=dict(payload.data),
    )


def build_payload(record: ExternalRecord) -> ArticlePayload:
    return ArticlePayload(
        article_id=record.slot_id,
        article_name=record.display_name,
        data=dict(record.fields),
    )


def serialize_records(records: list[ExternalRecord]) -> list[dict[str, object]]:
    """JSON-ready body for a push request."""

    return [build_payload(record).model_dump(by_alias=True) for record in records]
