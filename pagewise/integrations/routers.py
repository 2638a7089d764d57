"""Listing and mutation endpoints over the projections.

Each factory closes over the projection it serves; nothing is looked up
globally, so tests can mount routers over in-memory collaborators.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from pagewise.adapters.jobs import JobProjection
from pagewise.adapters.metadata import MetadataProjection
from pagewise.adapters.polls import PeerUrlKind, PollProjection, RepairKind, TallyBucket
from pagewise.core.envelope import CursorEnvelope, OffsetEnvelope
from pagewise.integrations.fastapi import (
    Authorizer,
    CursorParams,
    OffsetParams,
    authorize,
    links_for,
)
from pagewise.integrations.schemas import (
    ItemMetadata,
    Job,
    JobStatus,
    MetadataUpdateSpec,
    PollDesc,
    PollerDetail,
    PollerSummary,
    RepairData,
    VoterDetail,
    VoterSummary,
)
from pagewise.utils.exceptions import ValidationError
from pagewise.utils.types import CONTENT_ADMIN_ROLE

logger = logging.getLogger(__name__)


def _json(model, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump(mode="json", by_alias=True))


def metadata_router(projection: MetadataProjection) -> APIRouter:
    router = APIRouter(tags=["metadata"])

    @router.get("/metadata/aus/{auid:path}")
    async def get_metadata_aus_auid(auid: str, request: Request, params: CursorParams = Depends()):
        """Page through the metadata of an AU."""
        logger.debug("auid = %s, limit = %s, continuationToken = %s", auid, params.limit, params.token)
        result = await projection.fetch_page(auid, params.limit, params.token)
        envelope = CursorEnvelope.from_result(
            result.map(ItemMetadata.from_record), links_for(request), params.token
        )
        return JSONResponse(envelope.dump("items"))

    return router


def mdupdates_router(projection: JobProjection, authorizer: Optional[Authorizer] = None) -> APIRouter:
    router = APIRouter(tags=["mdupdates"])

    @router.get("/mdupdates")
    async def get_mdupdates(request: Request, params: CursorParams = Depends()):
        """Page through the queued and active metadata jobs."""
        logger.debug("limit = %s, continuationToken = %s", params.limit, params.token)
        result = await projection.fetch_page(params.limit, params.token)
        envelope = CursorEnvelope.from_result(result.map(Job.from_record), links_for(request), params.token)
        return JSONResponse(envelope.dump("jobs"))

    @router.post("/mdupdates")
    async def post_mdupdates(request: Request, spec: Optional[MetadataUpdateSpec] = Body(None)):
        """Schedule a metadata extraction or removal; 202 with the job."""
        await authorize(authorizer, request, CONTENT_ADMIN_ROLE)
        if spec is None:
            raise ValidationError("Invalid metadata update specification: null")
        job = await projection.schedule(spec.auid, spec.update_type)
        return _json(Job.from_record(job), status.HTTP_202_ACCEPTED)

    @router.delete("/mdupdates")
    async def delete_mdupdates(request: Request):
        await authorize(authorizer, request, CONTENT_ADMIN_ROLE)
        return JSONResponse(await projection.remove_all())

    @router.get("/mdupdates/{jobid}")
    async def get_mdupdates_jobid(jobid: str):
        return _json(JobStatus.from_record(await projection.status(jobid)))

    @router.delete("/mdupdates/{jobid}")
    async def delete_mdupdates_jobid(jobid: str, request: Request):
        await authorize(authorizer, request, CONTENT_ADMIN_ROLE)
        return _json(Job.from_record(await projection.remove(jobid)))

    return router


def polls_router(projection: PollProjection, authorizer: Optional[Authorizer] = None) -> APIRouter:
    router = APIRouter(tags=["polls"])
    style = projection.link_style

    @router.post("/polls")
    async def call_poll(request: Request, body: Optional[PollDesc] = Body(None)):
        """Call a poll on an AU; 202 with the auid."""
        await authorize(authorizer, request, CONTENT_ADMIN_ROLE)
        if body is None:
            raise ValidationError("Invalid poll description: null")
        spec = body.cu_set_spec.to_record() if body.cu_set_spec else None
        auid = await projection.call_poll(body.au_id, spec)
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=auid)

    @router.get("/polls/poller")
    async def get_polls_as_poller(request: Request, params: OffsetParams = Depends()):
        links = links_for(request)
        page = await projection.pollers(params.page, params.size)
        envelope = OffsetEnvelope.from_page(
            page.map(lambda poll: PollerSummary.from_record(poll, links)), links, style
        )
        return JSONResponse(envelope.dump("polls"))

    @router.get("/polls/voter")
    async def get_polls_as_voter(request: Request, params: OffsetParams = Depends()):
        links = links_for(request)
        page = await projection.voters(params.page, params.size)
        envelope = OffsetEnvelope.from_page(
            page.map(lambda poll: VoterSummary.from_record(poll, links)), links, style
        )
        return JSONResponse(envelope.dump("polls"))

    @router.get("/polls/poller/{poll_key}/details")
    async def get_poller_poll_details(poll_key: str, request: Request):
        poll = await projection.poller_detail(poll_key)
        return _json(PollerDetail.from_record(poll, links_for(request)))

    @router.get("/polls/voter/{poll_key}/details")
    async def get_voter_poll_details(poll_key: str):
        return _json(VoterDetail.from_record(await projection.voter_detail(poll_key)))

    @router.get("/polls/{poll_key}/tally")
    async def get_tally_urls(
        poll_key: str,
        request: Request,
        tally: Optional[str] = Query(None),
        params: OffsetParams = Depends(),
    ):
        bucket = TallyBucket.parse(tally)
        page = await projection.tally_urls(poll_key, bucket, params.page, params.size)
        return JSONResponse(OffsetEnvelope.from_page(page, links_for(request), style).dump("urls"))

    @router.get("/polls/{poll_key}/repairs")
    async def get_repair_queue_data(
        poll_key: str,
        request: Request,
        repair: Optional[str] = Query(None),
        params: OffsetParams = Depends(),
    ):
        kind = RepairKind.parse(repair)
        include_result = kind is RepairKind.COMPLETED
        page = await projection.repairs(poll_key, kind, params.page, params.size)
        envelope = OffsetEnvelope.from_page(
            page.map(lambda r: RepairData.from_record(r, include_result)), links_for(request), style
        )
        return JSONResponse(envelope.dump("repairs"))

    @router.get("/polls/{poll_key}/peer/{peer_id}")
    async def get_poll_peer_vote_urls(
        poll_key: str,
        peer_id: str,
        request: Request,
        urls: Optional[str] = Query(None),
        params: OffsetParams = Depends(),
    ):
        kind = PeerUrlKind.parse(urls)
        page = await projection.peer_urls(poll_key, peer_id, kind, params.page, params.size)
        return JSONResponse(OffsetEnvelope.from_page(page, links_for(request), style).dump("urls"))

    @router.get("/polls/{ps_id}")
    async def get_poll_status(ps_id: str, request: Request):
        poll = await projection.poll_for_au(ps_id)
        return _json(PollerSummary.from_record(poll, links_for(request), detailed=True))

    @router.delete("/polls/{ps_id}")
    async def cancel_poll(ps_id: str, request: Request):
        await authorize(authorizer, request, CONTENT_ADMIN_ROLE)
        await projection.cancel_poll(ps_id)
        return JSONResponse(status_code=status.HTTP_200_OK, content=None)

    return router
