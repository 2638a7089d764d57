from pagewise.adapters.base import Projection, parse_selector
from pagewise.adapters.records import (
    MetadataItem,
    MetadataStore,
    JobRecord,
    JobManager,
    CachedUriSetSpec,
    ParticipantRecord,
    TallyRecord,
    RepairRecord,
    RepairQueueRecord,
    PollerRecord,
    VoterRecord,
    PollManager,
)
from pagewise.adapters.metadata import MetadataProjection
from pagewise.adapters.jobs import JobProjection, UpdateType
from pagewise.adapters.polls import PollProjection, TallyBucket, RepairKind, PeerUrlKind

__all__ = [
    "Projection",
    "parse_selector",
    "MetadataItem",
    "MetadataStore",
    "JobRecord",
    "JobManager",
    "CachedUriSetSpec",
    "ParticipantRecord",
    "TallyRecord",
    "RepairRecord",
    "RepairQueueRecord",
    "PollerRecord",
    "VoterRecord",
    "PollManager",
    "MetadataProjection",
    "JobProjection",
    "UpdateType",
    "PollProjection",
    "TallyBucket",
    "RepairKind",
    "PeerUrlKind",
]
