"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from labelsync.adapters.registry import RegistryClient
from labelsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from labelsync.config import get_codec_config, get_sync_config
from labelsync.domain.data_integration import PullResult, pull_from_registry
from labelsync.domain.membership import Group, derive_groups
from labelsync.domain.pool import allocate_batch
from labelsync.domain.ports.unit_of_work import EntityUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterable

    from labelsync.domain.codec import CodecConfig
    from labelsync.domain.ports import RecordFetcher

UnitOfWorkFactory = Callable[[], EntityUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def pull_registry(
    *,
    fetcher: RecordFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    page_size: int | None = None,
    codec_config: CodecConfig | None = None,
) -> PullResult:
    """Fetch the registry snapshot and store the reconciled entities locally."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_fetcher = fetcher or RegistryClient()
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    effective_page_size = page_size or get_sync_config().page_size
    log.info("Starting registry pull: page_size=%s", effective_page_size)

    result = pull_from_registry(
        fetcher=effective_fetcher,
        unit_of_work_factory=effective_uow,
        page_size=effective_page_size,
        config=codec_config or get_codec_config(),
    )

    log.info(
        "Finished registry pull: fetched=%s, stored=%s, skipped_empty=%s, new_groups=%s",
        result.fetched,
        result.stored,
        result.skipped_empty,
        len(result.discovered_groups),
    )
    return result


def preview_allocation(
    count: int,
    *,
    preferred_ids: Iterable[str] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    codec_config: CodecConfig | None = None,
) -> list[str]:
    """Return the placeholder slots the next import of ``count`` rows would receive."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    pool = (codec_config or get_codec_config()).pool
    with effective_uow() as uow:
        used = uow.repositories.entities.used_placeholder_slots()
    return allocate_batch(count, used, preferred_ids, config=pool)


def list_groups(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[Group]:
    """Derive the groups referenced by locally stored entities."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    with effective_uow() as uow:
        entities = uow.repositories.entities.list()
    return derive_groups(entities)
