"""
Point the app at a throwaway sqlite database, fixed credentials and a temp
image directory. Runs before any test module imports kempoverse.
"""
import os
import tempfile
from pathlib import Path

import pytest

_TMP = Path(tempfile.mkdtemp(prefix="kempoverse-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["AUTH_PASSWORD"] = "test-password"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["IMAGE_STORAGE_DIR"] = str(_TMP / "media")

from kempoverse import models  # noqa: E402,F401  # registers tables on Base.metadata
from kempoverse.db import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    # Tests count entries per category, so every test starts from empty tables
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
