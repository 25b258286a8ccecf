"""
Dev backend — local stand-in for the job marketplace REST API.
Login/refresh with short-lived JWT access tokens; a few admin listings behind Bearer auth.
Port 4000 (the admin client's default API URL).
"""
import math
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from dev_backend import tokens
from dev_backend.config import ADMIN_EMAIL, ADMIN_PASSWORD

app = FastAPI(title="Dev Backend", version="0.1.0")

ADMIN_USER_ID = "admin-1"

USERS = [
    {
        "id": f"user-{i}",
        "email": f"user{i}@example.com",
        "userType": "EMPRESA" if i % 3 == 0 else "POSTULANTE",
        "isVerified": i % 2 == 0,
        "language": "es",
    }
    for i in range(1, 26)
]
JOBS = [
    {"id": f"job-{i}", "title": f"Job {i}", "status": "active", "moderationStatus": "APPROVED" if i % 4 else "PENDING"}
    for i in range(1, 16)
]
CALLS = [{"id": f"call-{i}", "fromUserId": "user-1", "toUserId": f"user-{i + 1}", "status": "ended"} for i in range(1, 6)]


def envelope(data, message: str = "") -> dict:
    return {"success": True, "message": message, "data": data}


def paginate(items: list[dict], page: int, page_size: int) -> dict:
    page = max(1, page)
    page_size = max(1, min(page_size, 100))
    start = (page - 1) * page_size
    return {
        "items": items[start:start + page_size],
        "total": len(items),
        "page": page,
        "pageSize": page_size,
        "totalPages": max(1, math.ceil(len(items) / page_size)),
    }


security = HTTPBearer(auto_error=False)


def require_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict:
    """Valid Bearer access token -> claims. 401 otherwise."""
    if credentials is None or credentials.scheme != "Bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header missing")
    claims = tokens.decode_access_token(credentials.credentials)
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return claims


class LoginBody(BaseModel):
    email: str
    password: str


class RefreshBody(BaseModel):
    refreshToken: str = ""


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "dev_backend"}


@app.post("/api/auth/login")
def login(body: LoginBody):
    if body.email != ADMIN_EMAIL or body.password != ADMIN_PASSWORD:
        return JSONResponse({"success": False, "message": "Invalid credentials", "data": None}, status_code=401)
    return envelope(
        {
            "accessToken": tokens.issue_access_token(ADMIN_USER_ID),
            "refreshToken": tokens.issue_refresh_token(ADMIN_USER_ID),
        }
    )


@app.post("/api/auth/refresh")
async def refresh(body: RefreshBody):
    rotated = tokens.rotate_refresh_token(body.refreshToken) if body.refreshToken else None
    if rotated is None:
        return JSONResponse({"success": False, "message": "Invalid refresh token", "data": None}, status_code=401)
    user_id, new_refresh = rotated
    return envelope({"accessToken": tokens.issue_access_token(user_id), "refreshToken": new_refresh})


@app.get("/api/auth/me")
def me(claims: dict = Depends(require_user)):
    return envelope({"userId": claims["sub"]})


@app.get("/api/admin/users")
def admin_users(page: int = 1, pageSize: int = 10, userType: str | None = None, claims: dict = Depends(require_user)):
    items = [u for u in USERS if userType is None or u["userType"] == userType]
    return envelope(paginate(items, page, pageSize))


@app.get("/api/admin/jobs/all")
def admin_jobs(
    page: int = 1,
    pageSize: int = 10,
    moderationStatus: str | None = None,
    claims: dict = Depends(require_user),
):
    items = [j for j in JOBS if moderationStatus is None or j["moderationStatus"] == moderationStatus]
    return envelope(paginate(items, page, pageSize))


@app.get("/api/admin/calls")
def admin_calls(page: int = 1, pageSize: int = 10, claims: dict = Depends(require_user)):
    return envelope(paginate(CALLS, page, pageSize))


@app.get("/api/admin/stats")
def admin_stats(claims: dict = Depends(require_user)):
    return envelope(
        {
            "users": len(USERS),
            "empresas": sum(1 for u in USERS if u["userType"] == "EMPRESA"),
            "postulantes": sum(1 for u in USERS if u["userType"] == "POSTULANTE"),
            "jobs": len(JOBS),
            "pendingJobs": sum(1 for j in JOBS if j["moderationStatus"] == "PENDING"),
            "calls": len(CALLS),
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dev_backend.main:app",
        host="127.0.0.1",
        port=4000,
        reload=True,
    )
