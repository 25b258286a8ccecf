"""
Admin client configuration. Values come from the environment with local-dev defaults.
No credentials in this file; tokens live in the credential store.
"""
import os

# Backend REST API base URL
API_BASE_URL = os.environ.get("ADMIN_API_URL", "http://localhost:4000").rstrip("/")

# Endpoints exempt from refresh/retry (a 401 there is a real answer, not an expired token)
LOGIN_PATH = os.environ.get("ADMIN_LOGIN_PATH", "/api/auth/login")
REFRESH_PATH = os.environ.get("ADMIN_REFRESH_PATH", "/api/auth/refresh")

# Per-request timeout (seconds) for ordinary API calls
REQUEST_TIMEOUT = float(os.environ.get("ADMIN_API_TIMEOUT", "10"))

# Timeout (seconds) for the refresh call; bounds how long queued requests wait
REFRESH_TIMEOUT = float(os.environ.get("ADMIN_REFRESH_TIMEOUT", "10"))

# Max requests waiting on one refresh; 0 = unbounded
MAX_PENDING_REFRESH = int(os.environ.get("ADMIN_MAX_PENDING_REFRESH", "100"))

# Credential store backend: "sql" (durable) or "memory"
CREDENTIAL_STORE = os.environ.get("ADMIN_CREDENTIAL_STORE", "sql")

# SQLite file keeps tokens across restarts
CREDENTIALS_DATABASE_URL = os.environ.get(
    "ADMIN_CREDENTIALS_DATABASE_URL", "sqlite:///./admin_credentials.db"
)

# Language sent to the options endpoints when none is given
DEFAULT_LANG = os.environ.get("ADMIN_DEFAULT_LANG", "es")
