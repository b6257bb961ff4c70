from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("DOCUMENT_STORAGE_DIR", tempfile.mkdtemp(prefix="showdb-docs-"))
os.environ["EMAIL_PROVIDER"] = "none"

import showdb  # noqa: E402,F401
from showdb.database import Base, build_engine, make_session_factory  # noqa: E402


@pytest.fixture()
def db_session():
    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session = make_session_factory(engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
