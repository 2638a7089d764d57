from __future__ import annotations

import logging
from enum import Enum

from pagewise.adapters.base import Projection
from pagewise.adapters.records import JobManager, JobRecord
from pagewise.core.snapshot import key_of
from pagewise.core.view import CollectionView, maybe_await
from pagewise.utils.exceptions import NotFound, ValidationError
from pagewise.utils.pagination import PageResult

logger = logging.getLogger(__name__)


class UpdateType(str, Enum):
    """Kinds of metadata update a client may request."""

    FULL_EXTRACTION = "full_extraction"
    INCREMENTAL_EXTRACTION = "incremental_extraction"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str | None) -> UpdateType:
        """Case-insensitive lookup.

        Raises:
            ValidationError: If value is empty or unknown
        """
        if not value:
            raise ValidationError(f"Invalid updateType = '{value}'", value=value)
        try:
            return cls(value.lower())
        except ValueError:
            raise ValidationError(f"Invalid updateType = '{value}'", value=value)


class JobProjection(Projection):
    """View of the metadata job queue, cursor-paged in creation order."""

    class Settings:
        collection = "mdupdate_jobs"

    def __init__(self, manager: JobManager) -> None:
        self._manager = manager

    def jobs(self) -> CollectionView[JobRecord]:
        return CollectionView(
            self._manager.get_jobs,
            key=key_of("sequence", "job_id"),
            name=self.collection_name,
        )

    async def fetch_page(self, limit: int, token: str | None = None) -> PageResult[JobRecord]:
        return await self.jobs().cursor_paginate(limit, token)

    async def status(self, job_id: str) -> JobRecord:
        job = await maybe_await(self._manager.get_job(job_id))
        if job is None:
            raise NotFound(f"No job found for jobid = '{job_id}'")
        return job

    async def schedule(self, auid: str | None, update_type: str | None) -> JobRecord:
        """Queue a metadata update for an AU.

        Raises:
            ValidationError: If auid or update_type is missing or update_type is unknown
            NotFound: If the job manager does not know the AU
        """
        if not auid:
            raise ValidationError(f"Invalid auid = '{auid}'", value=auid)
        kind = UpdateType.parse(update_type)
        logger.debug("Scheduling %s for auid '%s'", kind.value, auid)

        if kind is UpdateType.DELETE:
            return await maybe_await(self._manager.schedule_metadata_removal(auid))
        return await maybe_await(
            self._manager.schedule_metadata_extraction(auid, kind is UpdateType.FULL_EXTRACTION)
        )

    async def remove(self, job_id: str) -> JobRecord:
        job = await maybe_await(self._manager.remove_job(job_id))
        if job is None:
            raise NotFound(f"No job found for jobid = '{job_id}'")
        return job

    async def remove_all(self) -> int:
        removed = await maybe_await(self._manager.remove_all_jobs())
        logger.info("Removed %d metadata job(s)", removed)
        return removed
