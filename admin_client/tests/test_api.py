"""Tests for the resource wrappers: paths, query params, bodies and error mapping."""
import json

import httpx
import pytest

from admin_client.errors import ApiError
from admin_client.session import AdminSession
from admin_client.token_store import MemoryCredentialStore


class Recorder:
    def __init__(self, status_code: int = 200, body: dict | None = None):
        self.status_code = status_code
        self.body = body if body is not None else {"success": True, "message": "", "data": {"items": []}}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code == 204:
            return httpx.Response(204)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_session(recorder: Recorder) -> AdminSession:
    store = MemoryCredentialStore({"accessToken": "at", "refreshToken": "rt"})
    return AdminSession(store, base_url="http://api.test", transport=httpx.MockTransport(recorder.handler))


@pytest.mark.asyncio
async def test_users_drops_unset_params():
    rec = Recorder()
    session = make_session(rec)
    body = await session.admin.users(page=2, page_size=20)
    await session.aclose()
    assert body["success"] is True
    assert rec.last.method == "GET"
    assert rec.last.url.path == "/api/admin/users"
    assert dict(rec.last.url.params) == {"page": "2", "pageSize": "20"}
    assert rec.last.headers["Authorization"] == "Bearer at"


@pytest.mark.asyncio
async def test_all_jobs_uses_backend_param_names():
    rec = Recorder()
    session = make_session(rec)
    await session.admin.all_jobs(page=1, page_size=10, status="active", moderation_status="PENDING")
    await session.aclose()
    assert rec.last.url.path == "/api/admin/jobs/all"
    assert dict(rec.last.url.params) == {
        "page": "1",
        "pageSize": "10",
        "status": "active",
        "moderationStatus": "PENDING",
    }


@pytest.mark.asyncio
async def test_moderation_reject_sends_reason():
    rec = Recorder()
    session = make_session(rec)
    await session.moderation.reject("job-7", "spam")
    await session.aclose()
    assert rec.last.method == "POST"
    assert rec.last.url.path == "/api/moderation/jobs/job-7/reject"
    assert json.loads(rec.last.content) == {"reason": "spam"}


@pytest.mark.asyncio
async def test_moderation_pending_defaults():
    rec = Recorder()
    session = make_session(rec)
    await session.moderation.pending_jobs()
    await session.aclose()
    assert rec.last.url.path == "/api/moderation/jobs/pending"
    assert dict(rec.last.url.params) == {"page": "1", "pageSize": "10"}


@pytest.mark.asyncio
async def test_options_default_language():
    rec = Recorder()
    session = make_session(rec)
    await session.options.by_category("sector")
    await session.options.all(lang="en")
    await session.aclose()
    assert rec.requests[0].url.path == "/api/options/sector"
    assert rec.requests[0].url.params["lang"] == "es"
    assert rec.requests[1].url.params["lang"] == "en"


@pytest.mark.asyncio
async def test_terms_all_without_type_has_no_query():
    rec = Recorder()
    session = make_session(rec)
    await session.terms.all()
    await session.aclose()
    assert rec.last.url.path == "/api/terms/all"
    assert not rec.last.url.query


@pytest.mark.asyncio
async def test_terms_upload_is_multipart():
    rec = Recorder()
    session = make_session(rec)
    await session.terms.upload("terms.pdf", b"%PDF-1.4 test", type="TERMS", version="2.0", description="Update")
    await session.aclose()
    assert rec.last.method == "POST"
    assert rec.last.url.path == "/api/terms/upload"
    assert rec.last.headers["content-type"].startswith("multipart/form-data")
    assert b'filename="terms.pdf"' in rec.last.content
    assert b"%PDF-1.4 test" in rec.last.content
    assert b'name="version"' in rec.last.content


@pytest.mark.asyncio
async def test_plans_crud_paths():
    rec = Recorder()
    session = make_session(rec)
    await session.plans.create({"name": "Basic", "code": "BASIC"})
    await session.plans.update("p1", {"name": "Basic+"})
    await session.plans.toggle_active("p1")
    await session.plans.reorder([{"id": "p1", "order": 2}, {"id": "p2", "order": 1}])
    await session.plans.delete("p1")
    await session.aclose()
    calls = [(r.method, r.url.path) for r in rec.requests]
    assert calls == [
        ("POST", "/api/plans"),
        ("PUT", "/api/plans/p1"),
        ("PATCH", "/api/plans/p1/toggle"),
        ("PUT", "/api/plans/reorder"),
        ("DELETE", "/api/plans/p1"),
    ]
    assert json.loads(rec.requests[3].content) == {"items": [{"id": "p1", "order": 2}, {"id": "p2", "order": 1}]}


@pytest.mark.asyncio
async def test_catalogs_list_filters_by_type():
    rec = Recorder()
    session = make_session(rec)
    await session.catalogs.list(type="SECTOR", page=1, page_size=20, search="")
    await session.aclose()
    assert rec.last.url.path == "/api/catalogs"
    assert dict(rec.last.url.params) == {"type": "SECTOR", "page": "1", "pageSize": "20"}


@pytest.mark.asyncio
async def test_reports_actions():
    rec = Recorder()
    session = make_session(rec)
    await session.reports.mark_reviewed("r1")
    await session.reports.resolve("r1")
    await session.reports.dismiss("r2")
    await session.aclose()
    assert [(r.method, r.url.path) for r in rec.requests] == [
        ("PATCH", "/api/reports/r1/review"),
        ("PATCH", "/api/reports/r1/resolve"),
        ("PATCH", "/api/reports/r2/dismiss"),
    ]


@pytest.mark.asyncio
async def test_error_status_raises_api_error_with_message():
    rec = Recorder(status_code=404, body={"success": False, "message": "Job not found"})
    session = make_session(rec)
    with pytest.raises(ApiError) as exc_info:
        await session.jobs.get("missing")
    await session.aclose()
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Job not found"


@pytest.mark.asyncio
async def test_empty_success_body():
    rec = Recorder(status_code=204)
    session = make_session(rec)
    body = await session.jobs.delete("job-1")
    await session.aclose()
    assert body == {"success": True, "message": "", "data": None}
