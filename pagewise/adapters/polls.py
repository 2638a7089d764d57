from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pagewise.adapters.base import Projection, parse_selector
from pagewise.adapters.records import (
    CachedUriSetSpec,
    ParticipantRecord,
    PollerRecord,
    PollManager,
    RepairRecord,
    VoterRecord,
)
from pagewise.core.offset import OffsetPaginator
from pagewise.core.snapshot import key_of
from pagewise.core.view import CollectionView, maybe_await
from pagewise.utils.exceptions import NotFound, ValidationError
from pagewise.utils.pagination import OffsetPage

logger = logging.getLogger(__name__)


class TallyBucket(str, Enum):
    AGREE = "agree"
    DISAGREE = "disagree"
    ERROR = "error"
    NO_QUORUM = "noQuorum"
    TOO_CLOSE = "tooClose"

    @classmethod
    def parse(cls, value: str | None) -> TallyBucket:
        return parse_selector(cls, value, "tally")


class RepairKind(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | None) -> RepairKind:
        return parse_selector(cls, value, "repair")


class PeerUrlKind(str, Enum):
    AGREED = "agreed"
    DISAGREED = "disagreed"
    POLLER_ONLY = "pollerOnly"
    VOTER_ONLY = "voterOnly"

    @classmethod
    def parse(cls, value: str | None) -> PeerUrlKind:
        return parse_selector(cls, value, "urls")


_TALLY_FIELDS = {
    TallyBucket.AGREE: "agreed",
    TallyBucket.DISAGREE: "disagreed",
    TallyBucket.ERROR: "error",
    TallyBucket.NO_QUORUM: "no_quorum",
    TallyBucket.TOO_CLOSE: "too_close",
}

_PEER_URL_FIELDS = {
    PeerUrlKind.AGREED: "agreed_urls",
    PeerUrlKind.DISAGREED: "disagreed_urls",
    PeerUrlKind.POLLER_ONLY: "poller_only_urls",
    PeerUrlKind.VOTER_ONLY: "voter_only_urls",
}


class PollProjection(Projection):
    """Offset-paged views of the poll manager's pollers, voters and poll sub-collections."""

    class Settings:
        collection = "polls"

    def __init__(self, manager: PollManager) -> None:
        self._manager = manager

    def _paginator(self, name: str) -> OffsetPaginator:
        return OffsetPaginator(f"{self.collection_name}.{name}", max_size=self._max_page_size)

    def _size(self, size: int | None) -> int:
        return self.default_page_size if size is None else size

    # --- Poll listings ---

    def pollers_view(self) -> CollectionView[PollerRecord]:
        return CollectionView(
            self._manager.get_pollers,
            key=key_of("create_time", "poll_key"),
            name=f"{self.collection_name}.poller",
            max_size=self._max_page_size,
        )

    def voters_view(self) -> CollectionView[VoterRecord]:
        return CollectionView(
            self._manager.get_voters,
            key=key_of("create_time", "poll_key"),
            name=f"{self.collection_name}.voter",
            max_size=self._max_page_size,
        )

    async def pollers(self, page: int = 1, size: int | None = None) -> OffsetPage[PollerRecord]:
        return await self.pollers_view().paginate(page, self._size(size))

    async def voters(self, page: int = 1, size: int | None = None) -> OffsetPage[VoterRecord]:
        return await self.voters_view().paginate(page, self._size(size))

    # --- Single polls ---

    async def poll(self, poll_key: str) -> PollerRecord:
        """Return the poll we called under poll_key.

        Raises:
            NotFound: If there is no such poll or it is a voter poll
        """
        poll = await maybe_await(self._manager.get_poll(poll_key))
        if not isinstance(poll, PollerRecord):
            raise NotFound(f"No poller poll found for poll key '{poll_key}'")
        return poll

    async def poller_detail(self, poll_key: str) -> PollerRecord:
        logger.debug("request poller details for poll with %s", poll_key)
        return await self.poll(poll_key)

    async def voter_detail(self, poll_key: str) -> VoterRecord:
        """Return the poll another peer called under poll_key.

        Raises:
            NotFound: If there is no such poll or it is a poller poll
        """
        logger.debug("request voter details for poll with %s", poll_key)
        poll = await maybe_await(self._manager.get_poll(poll_key))
        if not isinstance(poll, VoterRecord):
            raise NotFound(f"No voter poll found for poll key '{poll_key}'")
        return poll

    async def poll_for_au(self, auid: str) -> PollerRecord:
        poll = await maybe_await(self._manager.get_poll_for_au(auid))
        if poll is None:
            raise NotFound(f"No poll found for auid '{auid}'")
        return poll

    async def call_poll(self, auid: str | None, spec: Optional[CachedUriSetSpec] = None) -> str:
        """Ask the poll manager to call a poll on an AU.

        Raises:
            ValidationError: If auid is empty
            NotFound: If the AU is unknown (raised by the manager)
            Forbidden: If the AU is not eligible for a poll (raised by the manager)
        """
        if not auid:
            raise ValidationError(f"No valid au: '{auid}'", value=auid)
        logger.debug("Request to start a poll for au: %s", auid)
        await maybe_await(self._manager.request_poll(auid, spec))
        return auid

    async def cancel_poll(self, auid: str) -> PollerRecord:
        stopped = await maybe_await(self._manager.stop_poll(auid))
        if stopped is None:
            raise NotFound(f"No poll to cancel for auid '{auid}'")
        return stopped

    # --- Poll sub-collections ---

    async def tally_urls(
        self, poll_key: str, bucket: TallyBucket, page: int = 1, size: int | None = None
    ) -> OffsetPage[str]:
        poll = await self.poll(poll_key)
        urls = sorted(getattr(poll.tally, _TALLY_FIELDS[bucket]))
        return self._paginator(f"tally.{bucket.value}").page(urls, page, self._size(size))

    async def repairs(
        self, poll_key: str, kind: RepairKind, page: int = 1, size: int | None = None
    ) -> OffsetPage[RepairRecord]:
        """Page through a repair queue in queue order."""
        poll = await self.poll(poll_key)
        queue: tuple[RepairRecord, ...] = getattr(poll.repairs, kind.value)
        return self._paginator(f"repairs.{kind.value}").page(queue, page, self._size(size))

    async def peer_urls(
        self,
        poll_key: str,
        peer_id: str,
        kind: PeerUrlKind,
        page: int = 1,
        size: int | None = None,
    ) -> OffsetPage[str]:
        """Page through the URLs a participant voted on in a given way.

        Raises:
            NotFound: If the poll or peer is unknown, or the peer has no per-URL vote record
        """
        poll = await self.poll(poll_key)
        participant = self._participant(poll, peer_id)
        urls = getattr(participant, _PEER_URL_FIELDS[kind]) if participant else None
        if participant is None or not participant.has_voted or urls is None:
            raise NotFound(f"No recorded votes from peer '{peer_id}' in poll '{poll_key}'")
        return self._paginator(f"peer.{kind.value}").page(sorted(urls), page, self._size(size))

    @staticmethod
    def _participant(poll: PollerRecord, peer_id: str) -> ParticipantRecord | None:
        for participant in poll.participants:
            if participant.peer_id == peer_id:
                return participant
        return None
