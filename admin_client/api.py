"""
Typed wrappers for the backend REST API used by the admin dashboard.
Each call goes through AuthenticatedRequestClient and returns the decoded
ApiResponse envelope: {"success": bool, "message": str, "data": ...}.
"""
from typing import Any

import httpx

from admin_client.config import DEFAULT_LANG, LOGIN_PATH
from admin_client.errors import ApiError
from admin_client.http_client import AuthenticatedRequestClient


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset query parameters so the backend applies its own defaults."""
    return {k: v for k, v in params.items() if v is not None and v != ""}


def _unwrap(response: httpx.Response) -> dict:
    if not response.is_success:
        raise ApiError.from_response(response)
    if not response.content:
        return {"success": True, "message": "", "data": None}
    return response.json()


class _Resource:
    def __init__(self, client: AuthenticatedRequestClient):
        self._client = client

    async def _get(self, path: str, **params) -> dict:
        return _unwrap(await self._client.get(path, params=_clean_params(params)))

    async def _post(self, path: str, json: Any = None, **kwargs) -> dict:
        return _unwrap(await self._client.post(path, json=json, **kwargs))

    async def _put(self, path: str, json: Any = None) -> dict:
        return _unwrap(await self._client.put(path, json=json))

    async def _patch(self, path: str, json: Any = None) -> dict:
        return _unwrap(await self._client.patch(path, json=json))

    async def _delete(self, path: str) -> dict:
        return _unwrap(await self._client.delete(path))


class AuthApi(_Resource):
    async def login(self, email: str, password: str) -> httpx.Response:
        """Raw login response; AdminSession interprets status and tokens."""
        return await self._client.post(LOGIN_PATH, json={"email": email, "password": password})

    async def me(self) -> dict:
        return await self._get("/api/auth/me")


class JobsApi(_Resource):
    async def list(self, page: int | None = None, page_size: int | None = None, search: str | None = None, status: str | None = None) -> dict:
        return await self._get("/api/jobs", page=page, pageSize=page_size, search=search, status=status)

    async def get(self, job_id: str) -> dict:
        return await self._get(f"/api/jobs/{job_id}")

    async def delete(self, job_id: str) -> dict:
        return await self._delete(f"/api/jobs/{job_id}")


class ModerationApi(_Resource):
    async def pending_jobs(self, page: int = 1, page_size: int = 10) -> dict:
        return await self._get("/api/moderation/jobs/pending", page=page, pageSize=page_size)

    async def rejected_jobs(self, page: int = 1, page_size: int = 10) -> dict:
        return await self._get("/api/moderation/jobs/rejected", page=page, pageSize=page_size)

    async def approve(self, job_id: str) -> dict:
        return await self._post(f"/api/moderation/jobs/{job_id}/approve")

    async def reject(self, job_id: str, reason: str) -> dict:
        return await self._post(f"/api/moderation/jobs/{job_id}/reject", json={"reason": reason})

    async def job_details(self, job_id: str) -> dict:
        return await self._get(f"/api/moderation/jobs/{job_id}")


class AdminApi(_Resource):
    async def users(self, page: int | None = None, page_size: int | None = None, user_type: str | None = None) -> dict:
        return await self._get("/api/admin/users", page=page, pageSize=page_size, userType=user_type)

    async def empresas(self, page: int | None = None, page_size: int | None = None) -> dict:
        return await self._get("/api/admin/empresas", page=page, pageSize=page_size)

    async def postulantes(self, page: int | None = None, page_size: int | None = None) -> dict:
        return await self._get("/api/admin/postulantes", page=page, pageSize=page_size)

    async def all_jobs(
        self,
        page: int | None = None,
        page_size: int | None = None,
        status: str | None = None,
        moderation_status: str | None = None,
    ) -> dict:
        return await self._get(
            "/api/admin/jobs/all", page=page, pageSize=page_size, status=status, moderationStatus=moderation_status
        )

    async def applications(self, page: int | None = None, page_size: int | None = None, status: str | None = None) -> dict:
        return await self._get("/api/admin/applications", page=page, pageSize=page_size, status=status)

    async def messages(self, page: int | None = None, page_size: int | None = None) -> dict:
        return await self._get("/api/admin/messages", page=page, pageSize=page_size)

    async def calls(self, page: int | None = None, page_size: int | None = None) -> dict:
        return await self._get("/api/admin/calls", page=page, pageSize=page_size)

    async def subscriptions(self, page: int | None = None, page_size: int | None = None, status: str | None = None) -> dict:
        return await self._get("/api/admin/subscriptions", page=page, pageSize=page_size, status=status)

    async def stats(self) -> dict:
        return await self._get("/api/admin/stats")


class OptionsApi(_Resource):
    async def all(self, lang: str | None = None) -> dict:
        return await self._get("/api/options", lang=lang or DEFAULT_LANG)

    async def by_category(self, category: str, lang: str | None = None) -> dict:
        return await self._get(f"/api/options/{category}", lang=lang or DEFAULT_LANG)


class TermsApi(_Resource):
    async def all(self, type: str | None = None) -> dict:
        return await self._get("/api/terms/all", type=type)

    async def active(self, type: str | None = None) -> dict:
        return await self._get("/api/terms/active", type=type)

    async def upload(
        self,
        filename: str,
        content: bytes,
        type: str,
        version: str,
        description: str | None = None,
        content_type: str = "application/pdf",
    ) -> dict:
        """Multipart upload of a terms document. Content is bytes so a replay can resend it."""
        data = {"type": type, "version": version}
        if description:
            data["description"] = description
        files = {"file": (filename, content, content_type)}
        return await self._post("/api/terms/upload", data=data, files=files)


class _OrderedCatalogResource(_Resource):
    """CRUD + toggle + reorder, shared by catalogs and plans."""

    base_path = ""

    async def list(self, page: int | None = None, page_size: int | None = None, search: str | None = None, **filters) -> dict:
        return await self._get(self.base_path, page=page, pageSize=page_size, search=search, **filters)

    async def create(self, payload: dict) -> dict:
        return await self._post(self.base_path, json=payload)

    async def update(self, item_id: str, payload: dict) -> dict:
        return await self._put(f"{self.base_path}/{item_id}", json=payload)

    async def toggle_active(self, item_id: str) -> dict:
        return await self._patch(f"{self.base_path}/{item_id}/toggle")

    async def delete(self, item_id: str) -> dict:
        return await self._delete(f"{self.base_path}/{item_id}")

    async def reorder(self, items: "list[dict]") -> dict:
        """items: [{"id": ..., "order": ...}, ...]"""
        return await self._put(f"{self.base_path}/reorder", json={"items": items})


class CatalogsApi(_OrderedCatalogResource):
    base_path = "/api/catalogs"

    async def list(self, type: str | None = None, page: int | None = None, page_size: int | None = None, search: str | None = None) -> dict:
        return await super().list(page=page, page_size=page_size, search=search, type=type)


class PlansApi(_OrderedCatalogResource):
    base_path = "/api/plans"


class ReportsApi(_Resource):
    async def list(self, page: int | None = None, page_size: int | None = None, status: str | None = None) -> dict:
        return await self._get("/api/reports", page=page, pageSize=page_size, status=status)

    async def stats(self) -> dict:
        return await self._get("/api/reports/stats")

    async def mark_reviewed(self, report_id: str) -> dict:
        return await self._patch(f"/api/reports/{report_id}/review")

    async def resolve(self, report_id: str) -> dict:
        return await self._patch(f"/api/reports/{report_id}/resolve")

    async def dismiss(self, report_id: str) -> dict:
        return await self._patch(f"/api/reports/{report_id}/dismiss")
