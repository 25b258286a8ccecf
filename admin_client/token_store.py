"""
Credential storage for the admin session.
Access and refresh tokens are kept under fixed keys; a refresh replaces both in one write,
logout or a failed refresh erases both.
"""
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy.orm import Session, sessionmaker

from admin_client.config import CREDENTIAL_STORE
from admin_client.database import SessionLocal, init_db
from admin_client.models import StoredCredential

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str | None = None

    @classmethod
    def from_response_body(cls, body: Any) -> "TokenPair":
        """
        Parse a login/refresh response: either the API envelope {"success", "data": {...}}
        or the bare token object. Raises ValueError if no access token is present.
        """
        if not isinstance(body, dict):
            raise ValueError("Token response is not a JSON object")
        if body.get("success") is False:
            raise ValueError(body.get("message") or "Token response reported failure")
        data = body.get("data", body)
        if not isinstance(data, dict):
            raise ValueError("Token response has no data object")
        access_token = data.get("accessToken")
        if not access_token or not isinstance(access_token, str):
            raise ValueError("Token response has no accessToken")
        refresh_token = data.get("refreshToken") or None
        return cls(access_token=access_token, refresh_token=refresh_token)


class CredentialStore:
    """Key-value credential storage. Subclasses implement get and write."""

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def write(self, values: dict[str, str], remove: Iterable[str] = ()) -> None:
        """Set values and delete keys in remove as one atomic change."""
        raise NotImplementedError

    def set_many(self, values: dict[str, str]) -> None:
        self.write(values)

    def remove_many(self, keys: Iterable[str]) -> None:
        self.write({}, keys)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def remove(self, key: str) -> None:
        self.remove_many([key])

    @property
    def access_token(self) -> str | None:
        return self.get(ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> str | None:
        return self.get(REFRESH_TOKEN_KEY)

    def save_tokens(self, tokens: TokenPair) -> None:
        """Update after a refresh. Keeps the current refresh token when the new pair has none."""
        values = {ACCESS_TOKEN_KEY: tokens.access_token}
        if tokens.refresh_token:
            values[REFRESH_TOKEN_KEY] = tokens.refresh_token
        self.write(values)

    def replace_tokens(self, tokens: TokenPair) -> None:
        """Install a new session's pair; a missing refresh token erases the stored one."""
        if tokens.refresh_token:
            self.write({ACCESS_TOKEN_KEY: tokens.access_token, REFRESH_TOKEN_KEY: tokens.refresh_token})
        else:
            self.write({ACCESS_TOKEN_KEY: tokens.access_token}, [REFRESH_TOKEN_KEY])

    def clear(self) -> None:
        self.remove_many([ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY])


class MemoryCredentialStore(CredentialStore):
    """Process-lifetime store; nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def write(self, values: dict[str, str], remove: Iterable[str] = ()) -> None:
        for key in remove:
            self._values.pop(key, None)
        self._values.update(values)


class SqlCredentialStore(CredentialStore):
    """
    Durable store backed by the stored_credentials table. Each write is one transaction.

    Calls are synchronous and run on the event loop thread when used from the async client.
    That is fine for the default local SQLite file (sub-millisecond reads); a networked
    database URL would stall every request on its round trips.
    """

    def __init__(self, session_factory: sessionmaker | None = None):
        if session_factory is None:
            init_db()
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def get(self, key: str) -> str | None:
        db = self._session()
        try:
            row = db.get(StoredCredential, key)
            return row.value if row is not None else None
        finally:
            db.close()

    def write(self, values: dict[str, str], remove: Iterable[str] = ()) -> None:
        remove = [key for key in remove if key not in values]
        db = self._session()
        try:
            if remove:
                db.query(StoredCredential).filter(StoredCredential.key.in_(remove)).delete(synchronize_session=False)
            for key, value in values.items():
                db.merge(StoredCredential(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def get_default_store() -> CredentialStore:
    """Store selected by ADMIN_CREDENTIAL_STORE."""
    if CREDENTIAL_STORE == "memory":
        return MemoryCredentialStore()
    return SqlCredentialStore()
