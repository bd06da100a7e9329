# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for SoakMap pipeline tests."""

import os
import uuid

import pytest

# Set test environment variables before importing the pipeline
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DISABLE_LOGGING", "1")

from soakmap.deduplication.types import SpringRecord, SpringRepository  # noqa: E402


class FakeSpringRepository(SpringRepository):
    """In-memory repository that records every call."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.read_calls = 0
        self.delete_calls = []
        self.inserted = []
        self.updates = []

    def read_all(self):
        self.read_calls += 1
        return list(self.records)

    def delete_by_ids(self, ids):
        self.delete_calls.append(list(ids))
        before = len(self.records)
        self.records = [r for r in self.records if r.id not in ids]
        return before - len(self.records)

    def insert_many(self, records, batch_size=None):
        for record in records:
            record.id = str(uuid.uuid4())
            self.records.append(record)
            self.inserted.append(record)
        return len(records)

    def update_fields(self, spring_id, values):
        self.updates.append((spring_id, dict(values)))
        for record in self.records:
            if record.id == spring_id:
                for name, value in values.items():
                    setattr(record, name, value)
                return True
        return False

    def count(self):
        return len(self.records)


@pytest.fixture
def make_spring():
    """Factory for springs with a fresh UUID id."""
    def _make(name: str, state: str = "ID", lat=None, lng=None, **fields) -> SpringRecord:
        fields.setdefault("id", str(uuid.uuid4()))
        return SpringRecord(name=name, state=state, lat=lat, lng=lng, **fields)

    return _make


@pytest.fixture
def fake_repository():
    """Empty in-memory repository."""
    return FakeSpringRepository()


@pytest.fixture
def idaho_springs(make_spring) -> list:
    """A small Idaho corpus with one obvious duplicate pair."""
    return [
        make_spring("Baumgartner Hot Springs", lat=45.10, lng=-115.20, source="gnis"),
        make_spring(
            "Baumgartner Spring", lat=45.1003, lng=-115.2001,
            photo_url="https://example.com/baumgartner.jpg", temp_f=104,
        ),
        make_spring("Jerry Johnson Hot Springs", lat=46.30, lng=-114.90),
        make_spring("Stanley Hot Springs", lat=46.301, lng=-114.901),
        make_spring("Goldbug Hot Springs", lat=45.8301, lng=-114.7498),
    ]


@pytest.fixture
def sqlite_session_factory():
    """Session factory on a fresh in-memory SQLite database with the springs table."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from soakmap.database import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    engine.dispose()
