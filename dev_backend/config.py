"""
Dev backend configuration. Local stand-in for the job marketplace API; not for production.
"""
import os

# HS256 signing secret for access tokens (dev only; override via env)
SECRET_KEY = os.environ.get("DEV_BACKEND_SECRET", "dev-backend-insecure-secret")
ALGORITHM = "HS256"

# Access token lifetime (seconds). Short so refresh is exercised in local runs
ACCESS_TOKEN_EXPIRES = int(os.environ.get("DEV_BACKEND_ACCESS_TOKEN_EXPIRES", "60"))

# Refresh token lifetime (seconds)
REFRESH_TOKEN_EXPIRES = int(os.environ.get("DEV_BACKEND_REFRESH_TOKEN_EXPIRES", "3600"))

# Seeded admin account
ADMIN_EMAIL = os.environ.get("DEV_BACKEND_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.environ.get("DEV_BACKEND_ADMIN_PASSWORD", "admin")
