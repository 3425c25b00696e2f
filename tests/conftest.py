from datetime import datetime, timezone

import pytest

from borderwatch.database import create_db_engine, init_db
from borderwatch.pipeline import SubmissionPipeline
from borderwatch.store import RecordStore

from .helpers import FakeUploads


@pytest.fixture
def store(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    record_store = RecordStore(engine)
    yield record_store
    record_store.close()


@pytest.fixture
def uploads():
    return FakeUploads()


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 9, 15, 2, 123000, tzinfo=timezone.utc)


@pytest.fixture
def pipeline(store, uploads):
    return SubmissionPipeline(store, uploads)
