"""Request and response models of the REST boundary."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pagewise.adapters.polls import PeerUrlKind, RepairKind, TallyBucket
from pagewise.adapters.records import (
    CachedUriSetSpec,
    JobRecord,
    MetadataItem,
    ParticipantRecord,
    PollerRecord,
    RepairRecord,
    VoterRecord,
)
from pagewise.core.links import LinkBuilder


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _detail_path(kind: str, poll_key: str) -> str:
    return f"/polls/{kind}/{_segment(poll_key)}/details"


class LinkDesc(ApiModel):
    link: str

    @classmethod
    def make(cls, links: LinkBuilder, path: str, params: list[tuple[str, Any]] | None = None) -> Optional[LinkDesc]:
        url = links.resource_link(path, params or [])
        return cls(link=url) if url is not None else None


# --- Metadata ---


class ItemMetadata(ApiModel):
    scalar_map: dict[str, Any] = {}
    list_map: dict[str, list[Any]] = {}

    @classmethod
    def from_record(cls, item: MetadataItem) -> ItemMetadata:
        return cls(scalar_map=dict(item.scalar_map), list_map=dict(item.list_map))


# --- Jobs ---


class MetadataUpdateSpec(ApiModel):
    auid: Optional[str] = None
    update_type: Optional[str] = None


class JobStatus(ApiModel):
    code: str
    msg: Optional[str] = None

    @classmethod
    def from_record(cls, job: JobRecord) -> JobStatus:
        return cls(code=job.status_code, msg=job.status_message)


class Job(ApiModel):
    id: str
    auid: str
    type: str
    description: Optional[str] = None
    creation_date: Optional[str] = None
    status: JobStatus

    @classmethod
    def from_record(cls, job: JobRecord) -> Job:
        return cls(
            id=job.job_id,
            auid=job.auid,
            type=job.type,
            description=job.description,
            creation_date=job.creation_date,
            status=JobStatus.from_record(job),
        )


# --- Polls ---


class CuSetSpec(ApiModel):
    url_prefix: Optional[str] = None
    lower_bound: Optional[str] = None
    upper_bound: Optional[str] = None

    def to_record(self) -> CachedUriSetSpec:
        return CachedUriSetSpec(
            url_prefix=self.url_prefix,
            lower_bound=self.lower_bound,
            upper_bound=self.upper_bound,
        )


class PollDesc(ApiModel):
    au_id: Optional[str] = None
    cu_set_spec: Optional[CuSetSpec] = None


class TallyData(ApiModel):
    num_agree: int
    num_disagree: int
    num_error: int
    num_no_quorum: int
    num_too_close: int
    agree_link: Optional[LinkDesc] = None
    disagree_link: Optional[LinkDesc] = None
    error_link: Optional[LinkDesc] = None
    no_quorum_link: Optional[LinkDesc] = None
    too_close_link: Optional[LinkDesc] = None

    @classmethod
    def from_record(cls, poll: PollerRecord, links: LinkBuilder) -> TallyData:
        path = f"/polls/{_segment(poll.poll_key)}/tally"
        tally = poll.tally

        def link(bucket: TallyBucket) -> Optional[LinkDesc]:
            return LinkDesc.make(links, path, [("tally", bucket.value)])

        return cls(
            num_agree=len(tally.agreed),
            num_disagree=len(tally.disagreed),
            num_error=len(tally.error),
            num_no_quorum=len(tally.no_quorum),
            num_too_close=len(tally.too_close),
            agree_link=link(TallyBucket.AGREE),
            disagree_link=link(TallyBucket.DISAGREE),
            error_link=link(TallyBucket.ERROR),
            no_quorum_link=link(TallyBucket.NO_QUORUM),
            too_close_link=link(TallyBucket.TOO_CLOSE),
        )


class RepairQueueData(ApiModel):
    num_active: int
    num_pending: int
    num_completed: int
    active_link: Optional[LinkDesc] = None
    pending_link: Optional[LinkDesc] = None
    completed_link: Optional[LinkDesc] = None

    @classmethod
    def from_record(cls, poll: PollerRecord, links: LinkBuilder) -> RepairQueueData:
        path = f"/polls/{_segment(poll.poll_key)}/repairs"
        queue = poll.repairs

        def link(kind: RepairKind) -> Optional[LinkDesc]:
            return LinkDesc.make(links, path, [("repair", kind.value)])

        return cls(
            num_active=len(queue.active),
            num_pending=len(queue.pending),
            num_completed=len(queue.completed),
            active_link=link(RepairKind.ACTIVE),
            pending_link=link(RepairKind.PENDING),
            completed_link=link(RepairKind.COMPLETED),
        )


class PollerSummary(ApiModel):
    poll_key: str
    au_id: str
    status: str
    start: int
    variant: str
    deadline: Optional[int] = None
    poll_end: Optional[int] = None
    participants: int
    num_tallied_urls: int
    num_agree_urls: int
    num_hash_errors: int
    num_completed_repairs: int
    detail_link: Optional[LinkDesc] = None
    tally: Optional[TallyData] = None
    repair_queue: Optional[RepairQueueData] = None

    @classmethod
    def from_record(cls, poll: PollerRecord, links: LinkBuilder, detailed: bool = False) -> PollerSummary:
        tally = poll.tally
        tallied = len(tally.agreed) + len(tally.disagreed) + len(tally.no_quorum) + len(tally.too_close)
        return cls(
            poll_key=poll.poll_key,
            au_id=poll.auid,
            status=poll.status,
            start=poll.create_time,
            variant=poll.variant,
            deadline=poll.deadline,
            poll_end=poll.poll_end,
            participants=len(poll.participants),
            num_tallied_urls=tallied,
            num_agree_urls=len(tally.agreed),
            num_hash_errors=len(tally.error),
            num_completed_repairs=len(poll.repairs.completed),
            detail_link=LinkDesc.make(links, _detail_path("poller", poll.poll_key)),
            tally=TallyData.from_record(poll, links) if detailed else None,
            repair_queue=RepairQueueData.from_record(poll, links) if detailed else None,
        )


class VoterSummary(ApiModel):
    poll_key: str
    au_id: str
    caller: str
    status: str
    start: int
    deadline: Optional[int] = None
    detail_link: Optional[LinkDesc] = None

    @classmethod
    def from_record(cls, poll: VoterRecord, links: LinkBuilder) -> VoterSummary:
        return cls(
            poll_key=poll.poll_key,
            au_id=poll.auid,
            caller=poll.caller,
            status=poll.status,
            start=poll.create_time,
            deadline=poll.deadline,
            detail_link=LinkDesc.make(links, _detail_path("voter", poll.poll_key)),
        )


class PeerData(ApiModel):
    """One participant of a poll we called.

    Counts and links are present only for a peer whose vote was recorded
    per URL; the links lead to its paged URL lists.
    """

    peer_id: str
    status: str
    agreement: float
    num_agree: Optional[int] = None
    num_disagree: Optional[int] = None
    num_poller_only: Optional[int] = None
    num_voter_only: Optional[int] = None
    agree_link: Optional[LinkDesc] = None
    disagree_link: Optional[LinkDesc] = None
    poller_only_link: Optional[LinkDesc] = None
    voter_only_link: Optional[LinkDesc] = None

    @classmethod
    def from_record(cls, peer: ParticipantRecord, poll_key: str, links: LinkBuilder) -> PeerData:
        data = cls(peer_id=peer.peer_id, status=peer.status, agreement=peer.agreement)
        if not peer.has_voted:
            return data
        path = f"/polls/{_segment(poll_key)}/peer/{_segment(peer.peer_id)}"

        def count_and_link(urls: Optional[frozenset[str]], kind: PeerUrlKind):
            if urls is None:
                return None, None
            return len(urls), LinkDesc.make(links, path, [("urls", kind.value)])

        data.num_agree, data.agree_link = count_and_link(peer.agreed_urls, PeerUrlKind.AGREED)
        data.num_disagree, data.disagree_link = count_and_link(peer.disagreed_urls, PeerUrlKind.DISAGREED)
        data.num_poller_only, data.poller_only_link = count_and_link(peer.poller_only_urls, PeerUrlKind.POLLER_ONLY)
        data.num_voter_only, data.voter_only_link = count_and_link(peer.voter_only_urls, PeerUrlKind.VOTER_ONLY)
        return data


class PollerDetail(ApiModel):
    poll_key: str
    poll_desc: PollDesc
    status: str
    variant: str
    create_time: int
    deadline: Optional[int] = None
    poll_end: Optional[int] = None
    hash_algorithm: Optional[str] = None
    quorum: Optional[int] = None
    no_au_peers: list[str] = []
    voted_peers: list[PeerData] = []
    tally: TallyData
    repair_queue: RepairQueueData

    @classmethod
    def from_record(cls, poll: PollerRecord, links: LinkBuilder) -> PollerDetail:
        return cls(
            poll_key=poll.poll_key,
            poll_desc=PollDesc(au_id=poll.auid),
            status=poll.status,
            variant=poll.variant,
            create_time=poll.create_time,
            deadline=poll.deadline,
            poll_end=poll.poll_end,
            hash_algorithm=poll.hash_algorithm,
            quorum=poll.quorum,
            no_au_peers=list(poll.no_au_peers),
            voted_peers=[PeerData.from_record(p, poll.poll_key, links) for p in poll.participants],
            tally=TallyData.from_record(poll, links),
            repair_queue=RepairQueueData.from_record(poll, links),
        )


class VoterDetail(ApiModel):
    poll_key: str
    poll_desc: PollDesc
    caller_id: str
    status: str
    create_time: int
    deadline: Optional[int] = None
    hash_algorithm: Optional[str] = None
    agreement: Optional[float] = None

    @classmethod
    def from_record(cls, poll: VoterRecord) -> VoterDetail:
        return cls(
            poll_key=poll.poll_key,
            poll_desc=PollDesc(au_id=poll.auid),
            caller_id=poll.caller,
            status=poll.status,
            create_time=poll.create_time,
            deadline=poll.deadline,
            hash_algorithm=poll.hash_algorithm,
            agreement=poll.agreement,
        )


class RepairData(ApiModel):
    repair_url: str
    repair_from: str
    result: Optional[str] = None

    @classmethod
    def from_record(cls, repair: RepairRecord, include_result: bool = False) -> RepairData:
        return cls(
            repair_url=repair.url,
            repair_from=repair.repair_from,
            result=repair.result if include_result else None,
        )
