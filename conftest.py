"""
Pytest configuration. Use in-memory SQLite for the credential store so tests don't touch the filesystem.
"""
import os

# In-memory SQLite; admin_client.database uses StaticPool so all connections share the same DB
os.environ["ADMIN_CREDENTIALS_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ADMIN_CREDENTIAL_STORE"] = "memory"
# Tests talk to fake transports; keep the base URL fixed regardless of the developer's env
os.environ["ADMIN_API_URL"] = "http://api.test"
