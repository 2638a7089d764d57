"""Records and interfaces of the collaborators that own the paged collections.

Collaborators (the metadata store, the metadata job manager, the poll
manager) are injected into projections. Their methods may be plain or
``async``; projections await coroutine results. Every read must return a
consistent point-in-time copy: projections take one read per request and
never hold on to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Iterable, Optional, Protocol, Union


# --- Metadata ---


@dataclass(frozen=True)
class MetadataItem:
    """One metadata item of an AU. ``md_item_seq`` grows with insertion."""

    md_item_seq: int
    scalar_map: dict[str, Any] = field(default_factory=dict)
    list_map: dict[str, list[Any]] = field(default_factory=dict)


class MetadataStore(Protocol):
    def get_au_items(
        self, auid: str
    ) -> Union[Optional[Iterable[MetadataItem]], Awaitable[Optional[Iterable[MetadataItem]]]]:
        """Return the AU's metadata items, or None if the AU is unknown."""
        ...


# --- Jobs ---


@dataclass(frozen=True)
class JobRecord:
    """A metadata extraction or removal job."""

    job_id: str
    auid: str
    type: str
    sequence: int
    creation_date: Optional[str] = None
    status_code: str = "queued"
    status_message: Optional[str] = None
    description: Optional[str] = None


class JobManager(Protocol):
    def get_jobs(self) -> Union[Iterable[JobRecord], Awaitable[Iterable[JobRecord]]]: ...

    def get_job(self, job_id: str) -> Union[Optional[JobRecord], Awaitable[Optional[JobRecord]]]: ...

    def schedule_metadata_extraction(
        self, auid: str, full: bool
    ) -> Union[JobRecord, Awaitable[JobRecord]]:
        """Queue an extraction job. Raises NotFound for an unknown AU."""
        ...

    def schedule_metadata_removal(self, auid: str) -> Union[JobRecord, Awaitable[JobRecord]]:
        """Queue a removal job. Raises NotFound for an unknown AU."""
        ...

    def remove_job(self, job_id: str) -> Union[Optional[JobRecord], Awaitable[Optional[JobRecord]]]: ...

    def remove_all_jobs(self) -> Union[int, Awaitable[int]]: ...


# --- Polls ---


@dataclass(frozen=True)
class CachedUriSetSpec:
    """Scope of a poll inside an AU."""

    url_prefix: Optional[str] = None
    lower_bound: Optional[str] = None
    upper_bound: Optional[str] = None


@dataclass(frozen=True)
class ParticipantRecord:
    """A peer taking part in a poll we call.

    The URL lists are None when the peer's vote was not recorded per URL.
    """

    peer_id: str
    status: str = ""
    has_voted: bool = False
    agreement: float = 0.0
    agreed_urls: Optional[frozenset[str]] = None
    disagreed_urls: Optional[frozenset[str]] = None
    poller_only_urls: Optional[frozenset[str]] = None
    voter_only_urls: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class TallyRecord:
    agreed: frozenset[str] = frozenset()
    disagreed: frozenset[str] = frozenset()
    error: frozenset[str] = frozenset()
    no_quorum: frozenset[str] = frozenset()
    too_close: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RepairRecord:
    url: str
    repair_from: str
    result: Optional[str] = None


@dataclass(frozen=True)
class RepairQueueRecord:
    active: tuple[RepairRecord, ...] = ()
    pending: tuple[RepairRecord, ...] = ()
    completed: tuple[RepairRecord, ...] = ()


@dataclass(frozen=True)
class PollerRecord:
    """A poll called by this node."""

    poll_key: str
    auid: str
    status: str
    create_time: int
    deadline: Optional[int] = None
    poll_end: Optional[int] = None
    variant: str = "PoR"
    hash_algorithm: Optional[str] = None
    quorum: Optional[int] = None
    no_au_peers: tuple[str, ...] = ()
    participants: tuple[ParticipantRecord, ...] = ()
    tally: TallyRecord = TallyRecord()
    repairs: RepairQueueRecord = RepairQueueRecord()


@dataclass(frozen=True)
class VoterRecord:
    """A poll called by another peer in which this node votes."""

    poll_key: str
    auid: str
    caller: str
    status: str
    create_time: int
    deadline: Optional[int] = None
    hash_algorithm: Optional[str] = None
    agreement: Optional[float] = None


class PollManager(Protocol):
    def get_pollers(self) -> Union[Iterable[PollerRecord], Awaitable[Iterable[PollerRecord]]]: ...

    def get_voters(self) -> Union[Iterable[VoterRecord], Awaitable[Iterable[VoterRecord]]]: ...

    def get_poll(
        self, poll_key: str
    ) -> Union[PollerRecord, VoterRecord, None, Awaitable[Union[PollerRecord, VoterRecord, None]]]: ...

    def get_poll_for_au(self, auid: str) -> Union[Optional[PollerRecord], Awaitable[Optional[PollerRecord]]]: ...

    def request_poll(
        self, auid: str, spec: Optional[CachedUriSetSpec]
    ) -> Union[None, Awaitable[None]]:
        """Call a poll. Raises NotFound for an unknown AU, Forbidden if not eligible."""
        ...

    def stop_poll(self, auid: str) -> Union[Optional[PollerRecord], Awaitable[Optional[PollerRecord]]]: ...
