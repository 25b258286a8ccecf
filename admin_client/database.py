"""
Database engine and session for the credential store. SQLite by default.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from admin_client.config import CREDENTIALS_DATABASE_URL
from admin_client.models import Base

# SQLite: in-memory needs StaticPool so all connections share the same DB (for tests)
# File-based SQLite needs check_same_thread=False when used from the dashboard's threads
if CREDENTIALS_DATABASE_URL.startswith("sqlite:///:memory:"):
    engine = create_engine(
        CREDENTIALS_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    connect_args = {"check_same_thread": False} if "sqlite" in CREDENTIALS_DATABASE_URL else {}
    engine = create_engine(CREDENTIALS_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the credentials table if missing."""
    Base.metadata.create_all(bind=engine)
