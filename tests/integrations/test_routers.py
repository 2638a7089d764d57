from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pagewise import (
    JobProjection,
    MetadataProjection,
    PollProjection,
    add_listener,
    enable_tracing,
    init_app,
)
from pagewise.integrations.fastapi import HeaderRoleAuthorizer

ADMIN = {"x-user-roles": "contentAdminRole"}


class UriPollProjection(PollProjection):
    class Settings:
        collection = "polls"
        default_page_size = 2
        link_style = "uri"


@pytest.fixture
def client(metadata_store, job_manager, poll_manager):
    app = init_app(
        FastAPI(),
        metadata=MetadataProjection(metadata_store),
        jobs=JobProjection(job_manager),
        polls=PollProjection(poll_manager),
        authorizer=HeaderRoleAuthorizer(),
    )
    return TestClient(app)


def _follow(client, path, limit, field):
    """Collect every item by following nextLink."""
    items, pages = [], []
    resp = client.get(path, params={"limit": limit})
    while True:
        assert resp.status_code == 200
        body = resp.json()
        items.extend(body[field])
        pages.append(body["pageInfo"])
        next_link = body["pageInfo"].get("nextLink")
        if next_link is None:
            return items, pages
        resp = client.get(next_link)


class TestMetadataRoute:
    def test_first_page(self, client):
        resp = client.get("/metadata/aus/au-1", params={"limit": 4})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["items"]) == 4
        assert body["items"][0] == {"scalarMap": {"title": "Article 1"}, "listMap": {}}
        info = body["pageInfo"]
        assert info["resultsPerPage"] == 4
        assert info["curLink"] == "http://testserver/metadata/aus/au-1?limit=4"
        token = info["continuationToken"]
        assert info["nextLink"] == f"http://testserver/metadata/aus/au-1?limit=4&continuationToken={token}"

    def test_follow_next_links(self, client):
        items, pages = _follow(client, "/metadata/aus/au-1", 3, "items")
        assert [i["scalarMap"]["title"] for i in items] == [f"Article {n}" for n in range(1, 11)]
        assert [p["resultsPerPage"] for p in pages] == [3, 3, 3, 1]
        assert "continuationToken" not in pages[-1]

    def test_zero_limit_echoes_token(self, client):
        first = client.get("/metadata/aus/au-1", params={"limit": 2}).json()
        token = first["pageInfo"]["continuationToken"]
        resp = client.get("/metadata/aus/au-1", params={"limit": 0, "continuationToken": token})
        assert resp.json()["items"] == []
        assert resp.json()["pageInfo"]["continuationToken"] == token

    def test_unknown_au(self, client):
        resp = client.get("/metadata/aus/au-missing", params={"limit": 5})
        assert resp.status_code == 404

    def test_missing_limit(self, client):
        assert client.get("/metadata/aus/au-1").status_code == 400

    def test_bad_token(self, client):
        resp = client.get("/metadata/aus/au-1", params={"limit": 5, "continuationToken": "xyz"})
        assert resp.status_code == 400

    def test_conflict_after_removal(self, client, metadata_store):
        first = client.get("/metadata/aus/au-1", params={"limit": 4}).json()
        metadata_store.remove("au-1", 2)
        resp = client.get(first["pageInfo"]["nextLink"])
        assert resp.status_code == 409

    def test_growth_between_pages(self, client, metadata_store):
        first = client.get("/metadata/aus/au-1", params={"limit": 8}).json()
        metadata_store.append("au-1", 3)
        token = first["pageInfo"]["continuationToken"]
        resp = client.get("/metadata/aus/au-1", params={"limit": 20, "continuationToken": token})
        assert resp.json()["pageInfo"]["resultsPerPage"] == 5

    def test_request_id_reaches_page_events(self, client):
        received = []
        enable_tracing()
        add_listener(received.append)
        client.get("/metadata/aus/au-1", params={"limit": 1}, headers={"x-request-id": "req-7"})
        assert [e.request_id for e in received] == ["req-7"]


class TestMdupdatesRoutes:
    def test_schedule_requires_role(self, client):
        resp = client.post("/mdupdates", json={"auid": "au-1", "updateType": "full_extraction"})
        assert resp.status_code == 403

    def test_schedule(self, client, job_manager):
        resp = client.post("/mdupdates", json={"auid": "au-1", "updateType": "full_extraction"}, headers=ADMIN)
        assert resp.status_code == 202
        body = resp.json()
        assert body["auid"] == "au-1"
        assert body["type"] == "full_extraction"
        assert body["status"] == {"code": "queued", "msg": None}
        assert body["creationDate"] == "2026-10-17T12:00:00Z"
        assert body["id"] in job_manager.jobs

    def test_schedule_without_body(self, client):
        resp = client.post("/mdupdates", headers=ADMIN)
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "spec, status",
        [
            ({"updateType": "delete"}, 400),
            ({"auid": "au-1", "updateType": "reindex"}, 400),
            ({"auid": "au-1"}, 400),
            ({"auid": "au-404", "updateType": "delete"}, 404),
        ],
    )
    def test_schedule_rejected(self, client, spec, status):
        assert client.post("/mdupdates", json=spec, headers=ADMIN).status_code == status

    def test_list_jobs(self, client):
        for auid in ["au-1", "au-2", "au-1"]:
            client.post("/mdupdates", json={"auid": auid, "updateType": "delete"}, headers=ADMIN)
        jobs, pages = _follow(client, "/mdupdates", 2, "jobs")
        assert [j["id"] for j in jobs] == ["job-0001", "job-0002", "job-0003"]
        assert len(pages) == 2

    def test_list_empty_queue(self, client):
        body = client.get("/mdupdates", params={"limit": 10}).json()
        assert body == {"jobs": [], "pageInfo": {"resultsPerPage": 0, "curLink": "http://testserver/mdupdates?limit=10"}}

    def test_job_status(self, client):
        job = client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}, headers=ADMIN).json()
        resp = client.get(f"/mdupdates/{job['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"code": "queued", "msg": None}

    def test_job_status_unknown(self, client):
        assert client.get("/mdupdates/job-9999").status_code == 404

    def test_delete_job(self, client):
        job = client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}, headers=ADMIN).json()
        assert client.delete(f"/mdupdates/{job['id']}").status_code == 403
        resp = client.delete(f"/mdupdates/{job['id']}", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["id"] == job["id"]
        assert client.delete(f"/mdupdates/{job['id']}", headers=ADMIN).status_code == 404

    def test_delete_all_jobs(self, client):
        for _ in range(3):
            client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}, headers=ADMIN)
        assert client.delete("/mdupdates").status_code == 403
        resp = client.delete("/mdupdates", headers=ADMIN)
        assert resp.json() == 3

    def test_conflict_after_job_removed(self, client):
        for _ in range(4):
            client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}, headers=ADMIN)
        first = client.get("/mdupdates", params={"limit": 2}).json()
        client.delete("/mdupdates/job-0001", headers=ADMIN)
        assert client.get(first["pageInfo"]["nextLink"]).status_code == 409

    def test_collaborator_failure_is_500(self, job_manager):
        async def broken():
            raise RuntimeError("job store unavailable")

        job_manager.get_jobs = broken
        app = init_app(FastAPI(), jobs=JobProjection(job_manager))
        resp = TestClient(app, raise_server_exceptions=False).get("/mdupdates", params={"limit": 1})
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal Server Error"}

    def test_default_authorizer_checks_role_header(self, job_manager):
        client = TestClient(init_app(FastAPI(), jobs=JobProjection(job_manager)))
        assert client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}).status_code == 403
        assert client.delete("/mdupdates").status_code == 403
        assert job_manager.jobs == {}
        resp = client.post("/mdupdates", json={"auid": "au-1", "updateType": "delete"}, headers=ADMIN)
        assert resp.status_code == 202
        assert client.delete("/mdupdates", headers=ADMIN).json() == 1


class TestPollRoutes:
    def test_call_poll(self, client, poll_manager):
        resp = client.post(
            "/polls",
            json={"auId": "au-1", "cuSetSpec": {"urlPrefix": "http://example.org/"}},
            headers=ADMIN,
        )
        assert resp.status_code == 202
        assert resp.json() == "au-1"
        auid, spec = poll_manager.requested[0]
        assert auid == "au-1"
        assert spec.url_prefix == "http://example.org/"

    @pytest.mark.parametrize(
        "body, status",
        [(None, 400), ({}, 400), ({"auId": "au-9"}, 404)],
    )
    def test_call_poll_rejected(self, client, body, status):
        assert client.post("/polls", json=body, headers=ADMIN).status_code == status

    def test_call_poll_ineligible(self, client, poll_manager):
        poll_manager.ineligible.add("au-2")
        assert client.post("/polls", json={"auId": "au-2"}, headers=ADMIN).status_code == 403

    def test_call_poll_requires_role(self, client, poll_manager):
        assert client.post("/polls", json={"auId": "au-1"}).status_code == 403
        assert poll_manager.requested == []

    def test_pollers(self, client):
        resp = client.get("/polls/poller", params={"page": 1, "size": 2})
        body = resp.json()
        assert [p["pollKey"] for p in body["polls"]] == ["poll-0", "poll-1"]
        assert body["pageDesc"] == {"total": 3, "size": 2, "page": 1, "nextPage": 2}
        first = body["polls"][0]
        assert first["auId"] == "au-1"
        assert first["numAgreeUrls"] == 7
        assert first["numHashErrors"] == 2
        assert first["participants"] == 2
        assert first["detailLink"] == {"link": "http://testserver/polls/poller/poll-0/details"}

    def test_voters_default_size(self, client):
        body = client.get("/polls/voter").json()
        assert len(body["polls"]) == 5
        assert body["pageDesc"] == {"total": 5, "size": 20, "page": 1}
        assert body["polls"][0]["caller"] == "peer-z"
        assert body["polls"][0]["detailLink"] == {"link": "http://testserver/polls/voter/vote-4/details"}

    def test_voters_clamped(self, client):
        body = client.get("/polls/voter", params={"page": 0, "size": 0}).json()
        assert body["pageDesc"] == {"total": 5, "size": 1, "page": 1, "nextPage": 2}

    def test_tally_urls(self, client):
        body = client.get("/polls/poll-0/tally", params={"tally": "agree", "page": 3, "size": 3}).json()
        assert body["urls"] == ["http://example.org/a/06"]
        assert body["pageDesc"] == {"total": 7, "size": 3, "page": 3, "prevPage": 2}

    @pytest.mark.parametrize("params", [{}, {"tally": "bogus"}])
    def test_tally_bad_selector(self, client, params):
        resp = client.get("/polls/poll-0/tally", params=params)
        assert resp.status_code == 400
        assert "expected one of" in resp.json()["detail"]

    def test_tally_unknown_poll(self, client):
        assert client.get("/polls/nope/tally", params={"tally": "agree"}).status_code == 404

    def test_repairs(self, client):
        body = client.get("/polls/poll-0/repairs", params={"repair": "pending"}).json()
        assert [r["repairUrl"] for r in body["repairs"]] == [f"http://example.org/p/{i}" for i in range(3)]
        assert body["repairs"][0]["result"] is None

    def test_completed_repairs_carry_result(self, client):
        body = client.get("/polls/poll-0/repairs", params={"repair": "completed"}).json()
        assert body["repairs"] == [{"repairUrl": "http://example.org/c/1", "repairFrom": "peer-b", "result": "AGREE"}]

    def test_peer_urls(self, client):
        body = client.get("/polls/poll-0/peer/peer-b", params={"urls": "pollerOnly"}).json()
        assert body["urls"] == ["http://example.org/po/1"]

    def test_peer_urls_not_voted(self, client):
        assert client.get("/polls/poll-0/peer/peer-c", params={"urls": "agreed"}).status_code == 404

    def test_poll_status(self, client):
        resp = client.get("/polls/au-1")
        assert resp.status_code == 200
        body = resp.json()
        assert body["pollKey"] == "poll-0"
        assert body["tally"]["numAgree"] == 7
        assert body["tally"]["agreeLink"] == {"link": "http://testserver/polls/poll-0/tally?tally=agree"}
        assert body["tally"]["noQuorumLink"] == {"link": "http://testserver/polls/poll-0/tally?tally=noQuorum"}
        assert body["repairQueue"]["numPending"] == 3
        assert body["repairQueue"]["completedLink"] == {
            "link": "http://testserver/polls/poll-0/repairs?repair=completed"
        }

    def test_poll_status_unknown(self, client):
        assert client.get("/polls/au-9").status_code == 404

    def test_poller_details(self, client):
        resp = client.get("/polls/poller/poll-0/details")
        assert resp.status_code == 200
        body = resp.json()
        assert body["pollKey"] == "poll-0"
        assert body["pollDesc"]["auId"] == "au-1"
        assert body["tally"]["numAgree"] == 7
        assert body["repairQueue"]["pendingLink"] == {
            "link": "http://testserver/polls/poll-0/repairs?repair=pending"
        }
        voted, waiting = body["votedPeers"]
        assert voted["peerId"] == "peer-b"
        assert voted["numAgree"] == 2
        assert voted["numPollerOnly"] == 1
        assert voted["agreeLink"] == {"link": "http://testserver/polls/poll-0/peer/peer-b?urls=agreed"}
        assert voted["voterOnlyLink"] == {"link": "http://testserver/polls/poll-0/peer/peer-b?urls=voterOnly"}
        assert waiting["peerId"] == "peer-c"
        assert waiting["agreeLink"] is None

    def test_peer_links_lead_to_url_listings(self, client):
        voted = client.get("/polls/poller/poll-0/details").json()["votedPeers"][0]
        body = client.get(voted["pollerOnlyLink"]["link"]).json()
        assert body["urls"] == ["http://example.org/po/1"]

    def test_summary_detail_links_resolve(self, client):
        poller = client.get("/polls/poller").json()["polls"][1]
        assert client.get(poller["detailLink"]["link"]).json()["pollKey"] == "poll-1"
        voter = client.get("/polls/voter").json()["polls"][0]
        assert client.get(voter["detailLink"]["link"]).json()["pollKey"] == "vote-4"

    def test_voter_details(self, client):
        resp = client.get("/polls/voter/vote-1/details")
        assert resp.status_code == 200
        body = resp.json()
        assert body["pollKey"] == "vote-1"
        assert body["pollDesc"]["auId"] == "au-v1"
        assert body["callerId"] == "peer-z"
        assert body["status"] == "Voting"
        assert body["createTime"] == 1999

    @pytest.mark.parametrize(
        "path",
        [
            "/polls/poller/vote-0/details",
            "/polls/poller/nope/details",
            "/polls/voter/poll-0/details",
            "/polls/voter/nope/details",
        ],
    )
    def test_details_unknown_or_wrong_kind(self, client, path):
        assert client.get(path).status_code == 404

    def test_cancel_poll(self, client):
        assert client.delete("/polls/au-1").status_code == 403
        resp = client.delete("/polls/au-1", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json() is None
        assert client.get("/polls/au-1").status_code == 404
        assert client.delete("/polls/au-1", headers=ADMIN).status_code == 404


class TestUriLinkStyle:
    def test_offset_links_as_uris(self, poll_manager):
        app = init_app(FastAPI(), polls=UriPollProjection(poll_manager))
        body = TestClient(app).get("/polls/voter", params={"page": 2}).json()
        assert len(body["polls"]) == 2
        assert body["pageDesc"] == {
            "total": 5,
            "size": 2,
            "page": 2,
            "nextPage": "http://testserver/polls/voter?page=3&size=2",
            "prevPage": "http://testserver/polls/voter?page=1&size=2",
        }
