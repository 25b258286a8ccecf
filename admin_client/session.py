"""
Admin session: login/logout on top of AuthenticatedRequestClient, plus the resource wrappers.
A failed token refresh marks the session as forcibly logged out so the UI can send the user
back to the login view.
"""
import logging

from admin_client.api import (
    AdminApi,
    AuthApi,
    CatalogsApi,
    JobsApi,
    ModerationApi,
    OptionsApi,
    PlansApi,
    ReportsApi,
    TermsApi,
)
from admin_client.errors import LoginFailed
from admin_client.http_client import AuthenticatedRequestClient
from admin_client.token_store import CredentialStore, TokenPair

logger = logging.getLogger(__name__)


class AdminSession:
    def __init__(self, store: CredentialStore, client: AuthenticatedRequestClient | None = None, **client_options):
        self.store = store
        self.client = client or AuthenticatedRequestClient(store, **client_options)
        self.client.on_logout = self._on_forced_logout
        self.forced_logout = False

        self.auth = AuthApi(self.client)
        self.jobs = JobsApi(self.client)
        self.moderation = ModerationApi(self.client)
        self.admin = AdminApi(self.client)
        self.options = OptionsApi(self.client)
        self.terms = TermsApi(self.client)
        self.catalogs = CatalogsApi(self.client)
        self.plans = PlansApi(self.client)
        self.reports = ReportsApi(self.client)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.store.access_token)

    async def login(self, email: str, password: str) -> None:
        """Exchange email/password for a token pair and store it. Raises LoginFailed."""
        r = await self.auth.login(email, password)
        if not r.is_success:
            logger.info("Login rejected with status %s", r.status_code)
            raise LoginFailed(f"Login rejected with status {r.status_code}")
        try:
            tokens = TokenPair.from_response_body(r.json())
        except ValueError as e:
            raise LoginFailed(str(e)) from e
        # A refresh token from an earlier session must not outlive it
        self.store.replace_tokens(tokens)
        self.forced_logout = False
        logger.info("Login succeeded")

    def logout(self) -> None:
        self.store.clear()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _on_forced_logout(self) -> None:
        logger.warning("Session expired; forcing logout")
        self.forced_logout = True
