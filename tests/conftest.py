import pytest

from pagewise import disable_tracing, clear_request_context
from pagewise.adapters.records import (
    JobRecord,
    MetadataItem,
    ParticipantRecord,
    PollerRecord,
    RepairQueueRecord,
    RepairRecord,
    TallyRecord,
    VoterRecord,
)
from pagewise.utils.exceptions import Forbidden, NotFound


class FakeMetadataStore:
    """Metadata store holding AU items in insertion order."""

    def __init__(self) -> None:
        self.aus: dict[str, list[MetadataItem]] = {}

    def add_au(self, auid: str, count: int) -> None:
        self.aus[auid] = [
            MetadataItem(md_item_seq=seq, scalar_map={"title": f"Article {seq}"})
            for seq in range(1, count + 1)
        ]

    def append(self, auid: str, count: int) -> None:
        items = self.aus[auid]
        start = max((i.md_item_seq for i in items), default=0) + 1
        items.extend(MetadataItem(md_item_seq=seq) for seq in range(start, start + count))

    def remove(self, auid: str, seq: int) -> None:
        self.aus[auid] = [i for i in self.aus[auid] if i.md_item_seq != seq]

    def get_au_items(self, auid: str):
        items = self.aus.get(auid)
        return None if items is None else list(items)


class FakeJobManager:
    """Async job manager: jobs keyed by id, ordered by sequence."""

    def __init__(self, known_aus=("au-1", "au-2")) -> None:
        self.jobs: dict[str, JobRecord] = {}
        self.known_aus = set(known_aus)
        self._sequence = 0

    def _add(self, auid: str, job_type: str) -> JobRecord:
        if auid not in self.known_aus:
            raise NotFound(f"No Archival Unit found for auid = '{auid}'")
        self._sequence += 1
        job = JobRecord(
            job_id=f"job-{self._sequence:04d}",
            auid=auid,
            type=job_type,
            sequence=self._sequence,
            creation_date="2026-10-17T12:00:00Z",
        )
        self.jobs[job.job_id] = job
        return job

    async def get_jobs(self):
        return list(self.jobs.values())

    async def get_job(self, job_id: str):
        return self.jobs.get(job_id)

    async def schedule_metadata_extraction(self, auid: str, full: bool):
        return self._add(auid, "full_extraction" if full else "incremental_extraction")

    async def schedule_metadata_removal(self, auid: str):
        return self._add(auid, "delete")

    async def remove_job(self, job_id: str):
        return self.jobs.pop(job_id, None)

    async def remove_all_jobs(self) -> int:
        removed = len(self.jobs)
        self.jobs.clear()
        return removed


def make_poller(key: str, auid: str, create_time: int, **kwargs) -> PollerRecord:
    return PollerRecord(poll_key=key, auid=auid, status="Running", create_time=create_time, **kwargs)


class FakePollManager:
    """Synchronous poll manager."""

    def __init__(self) -> None:
        self.pollers: dict[str, PollerRecord] = {}
        self.voters: dict[str, VoterRecord] = {}
        self.known_aus: set[str] = set()
        self.ineligible: set[str] = set()
        self.requested: list[tuple] = []

    def get_pollers(self):
        return list(self.pollers.values())

    def get_voters(self):
        return list(self.voters.values())

    def get_poll(self, poll_key: str):
        return self.pollers.get(poll_key) or self.voters.get(poll_key)

    def get_poll_for_au(self, auid: str):
        for poll in self.pollers.values():
            if poll.auid == auid:
                return poll
        return None

    def request_poll(self, auid: str, spec):
        if auid not in self.known_aus:
            raise NotFound(f"No valid au: {auid}")
        if auid in self.ineligible:
            raise Forbidden(f"AU {auid} is not eligible for a poll")
        self.requested.append((auid, spec))

    def stop_poll(self, auid: str):
        poll = self.get_poll_for_au(auid)
        if poll is not None:
            del self.pollers[poll.poll_key]
        return poll


@pytest.fixture(autouse=True)
def reset_state():
    """Reset observability state and request context between tests."""
    yield
    disable_tracing()
    clear_request_context()


@pytest.fixture
def metadata_store():
    store = FakeMetadataStore()
    store.add_au("au-1", 10)
    store.add_au("au-empty", 0)
    return store


@pytest.fixture
def job_manager():
    return FakeJobManager()


@pytest.fixture
def poll_manager():
    manager = FakePollManager()
    manager.known_aus = {"au-1", "au-2", "au-3"}
    tally = TallyRecord(
        agreed=frozenset(f"http://example.org/a/{i:02d}" for i in range(7)),
        disagreed=frozenset({"http://example.org/d/1"}),
        error=frozenset({"http://example.org/e/1", "http://example.org/e/2"}),
    )
    repairs = RepairQueueRecord(
        active=(RepairRecord(url="http://example.org/r/1", repair_from="peer-b"),),
        pending=tuple(RepairRecord(url=f"http://example.org/p/{i}", repair_from="peer-c") for i in range(3)),
        completed=(RepairRecord(url="http://example.org/c/1", repair_from="peer-b", result="AGREE"),),
    )
    participants = (
        ParticipantRecord(
            peer_id="peer-b",
            status="Complete",
            has_voted=True,
            agreed_urls=frozenset({"http://example.org/a/00", "http://example.org/a/01"}),
            disagreed_urls=frozenset(),
            poller_only_urls=frozenset({"http://example.org/po/1"}),
            voter_only_urls=frozenset(),
        ),
        ParticipantRecord(peer_id="peer-c", status="Waiting", has_voted=False),
    )
    for i, auid in enumerate(["au-1", "au-2", "au-3"]):
        poller = make_poller(
            f"poll-{i}",
            auid,
            create_time=1000 + i,
            participants=participants if i == 0 else (),
            tally=tally if i == 0 else TallyRecord(),
            repairs=repairs if i == 0 else RepairQueueRecord(),
        )
        manager.pollers[poller.poll_key] = poller
    for i in range(5):
        voter = VoterRecord(
            poll_key=f"vote-{i}",
            auid=f"au-v{i}",
            caller="peer-z",
            status="Voting",
            create_time=2000 - i,
        )
        manager.voters[voter.poll_key] = voter
    return manager
