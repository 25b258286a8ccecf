"""
Admin Dashboard web app.
Login/logout, stats overview and paginated listings, all served through AdminSession.
A failed token refresh anywhere sends the browser back to /login.
Port 8000.
"""
import html
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from admin_client.errors import ApiError, AuthenticationRequired, LoginFailed, RefreshQueueFull
from admin_client.session import AdminSession
from admin_client.token_store import get_default_store

logger = logging.getLogger(__name__)

PAGE_SIZE = 20

# name -> (title, call returning the ApiResponse envelope for a page)
SECTIONS = {
    "users": ("Users", lambda s, page: s.admin.users(page=page, page_size=PAGE_SIZE)),
    "empresas": ("Companies", lambda s, page: s.admin.empresas(page=page, page_size=PAGE_SIZE)),
    "postulantes": ("Applicants", lambda s, page: s.admin.postulantes(page=page, page_size=PAGE_SIZE)),
    "jobs": ("Jobs", lambda s, page: s.admin.all_jobs(page=page, page_size=PAGE_SIZE)),
    "pending-jobs": ("Pending jobs", lambda s, page: s.moderation.pending_jobs(page=page, page_size=PAGE_SIZE)),
    "applications": ("Applications", lambda s, page: s.admin.applications(page=page, page_size=PAGE_SIZE)),
    "messages": ("Messages", lambda s, page: s.admin.messages(page=page, page_size=PAGE_SIZE)),
    "calls": ("Calls", lambda s, page: s.admin.calls(page=page, page_size=PAGE_SIZE)),
    "subscriptions": ("Subscriptions", lambda s, page: s.admin.subscriptions(page=page, page_size=PAGE_SIZE)),
    "reports": ("Reports", lambda s, page: s.reports.list(page=page, page_size=PAGE_SIZE)),
    "plans": ("Plans", lambda s, page: s.plans.list(page=page, page_size=PAGE_SIZE)),
    "catalogs": ("Catalogs", lambda s, page: s.catalogs.list(page=page, page_size=PAGE_SIZE)),
}

_session: AdminSession | None = None


def get_session() -> AdminSession:
    """Dependency: process-wide session over the configured credential store."""
    global _session
    if _session is None:
        _session = AdminSession(get_default_store())
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _session is not None:
        await _session.aclose()


app = FastAPI(title="Admin Dashboard", version="0.1.0", lifespan=lifespan)


def _page(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(title)}</title></head>
<body>
  <h1>{html.escape(title)}</h1>
  {body}
</body>
</html>""",
        status_code=status_code,
    )


def _login_form(message: str = "") -> str:
    note = f"<p>{html.escape(message)}</p>" if message else ""
    return f"""{note}
  <form method="post" action="/login">
    <label>Email <input type="email" name="email" required></label>
    <label>Password <input type="password" name="password" required></label>
    <button type="submit">Log in</button>
  </form>"""


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    logger.info("Redirecting to login: %s", exc)
    return RedirectResponse(url="/login?expired=1", status_code=303)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    status_code = exc.status_code if exc.status_code >= 400 else 502
    return _page(
        "API error",
        f'<p>Backend returned {exc.status_code}: {html.escape(exc.message)}</p>\n  <p><a href="/">Home</a></p>',
        status_code=status_code,
    )


@app.exception_handler(RefreshQueueFull)
async def refresh_queue_full_handler(request: Request, exc: RefreshQueueFull):
    logger.warning("Refresh queue full: %s", exc)
    return _page(
        "API busy",
        f'<p>Too many requests waiting for the session to renew: {html.escape(str(exc))}</p>\n  <p><a href="/">Home</a></p>',
        status_code=503,
    )


@app.exception_handler(httpx.HTTPError)
async def transport_error_handler(request: Request, exc: httpx.HTTPError):
    return _page(
        "API unavailable",
        f'<p>Request failed: {html.escape(str(exc))}</p>\n  <p><a href="/">Home</a></p>',
        status_code=502,
    )


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "admin_dashboard"}


@app.get("/login", response_class=HTMLResponse)
def login_form(expired: int = 0):
    message = "Your session expired. Please log in again." if expired else ""
    return _page("Admin login", _login_form(message))


@app.post("/login")
async def login(
    email: str = Form(...),
    password: str = Form(...),
    session: AdminSession = Depends(get_session),
):
    try:
        await session.login(email, password)
    except LoginFailed:
        return _page("Admin login", _login_form("Invalid email or password."), status_code=401)
    return RedirectResponse(url="/", status_code=303)


@app.get("/logout")
def logout(session: AdminSession = Depends(get_session)):
    session.logout()
    return RedirectResponse(url="/login", status_code=303)


@app.get("/", response_class=HTMLResponse)
async def home(session: AdminSession = Depends(get_session)):
    """Stats overview with links to every section."""
    if not session.is_authenticated:
        return RedirectResponse(url="/login", status_code=303)
    stats = (await session.admin.stats()).get("data") or {}
    if not isinstance(stats, dict):
        stats = {}
    stat_rows = "".join(
        f"<tr><th>{html.escape(str(k))}</th><td>{html.escape(str(v))}</td></tr>" for k, v in stats.items()
    )
    links = "".join(f'<li><a href="/section/{name}">{html.escape(title)}</a></li>' for name, (title, _) in SECTIONS.items())
    return _page(
        "Dashboard",
        f'<table>{stat_rows}</table>\n  <ul>{links}</ul>\n  <p><a href="/logout">Log out</a></p>',
    )


def _extract_items(data) -> tuple[list[dict], int]:
    """Rows and total page count from the different listing shapes the API returns."""
    if isinstance(data, list):
        return data, 1
    if not isinstance(data, dict):
        return [], 1
    items = data.get("items")
    if items is None:
        items = data.get("reports") or []
    total_pages = data.get("totalPages")
    if total_pages is None:
        pagination = data.get("pagination") or {}
        total_pages = pagination.get("totalPages", 1)
    return items, int(total_pages or 1)


def _render_table(items: list[dict]) -> str:
    if not items:
        return "<p>No results</p>"
    columns = [k for k, v in items[0].items() if not isinstance(v, (dict, list))]
    head = "".join(f"<th>{html.escape(c)}</th>" for c in columns)
    rows = "".join(
        "<tr>" + "".join(f"<td>{html.escape(str(item.get(c, '')))}</td>" for c in columns) + "</tr>"
        for item in items
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>{rows}</tbody></table>"


@app.get("/section/{name}", response_class=HTMLResponse)
async def section(name: str, page: int = 1, session: AdminSession = Depends(get_session)):
    if name not in SECTIONS:
        return _page("Not found", f'<p>Unknown section: {html.escape(name)}</p>\n  <p><a href="/">Home</a></p>', 404)
    if not session.is_authenticated:
        return RedirectResponse(url="/login", status_code=303)
    title, fetch = SECTIONS[name]
    page = max(1, page)
    items, total_pages = _extract_items((await fetch(session, page)).get("data"))
    nav = []
    if page > 1:
        nav.append(f'<a href="/section/{name}?page={page - 1}">Previous</a>')
    nav.append(f"Page {page} of {total_pages}")
    if page < total_pages:
        nav.append(f'<a href="/section/{name}?page={page + 1}">Next</a>')
    return _page(
        title,
        f'{_render_table(items)}\n  <p>{" | ".join(nav)}</p>\n  <p><a href="/">Home</a></p>',
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "admin_dashboard.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
