# SPDX-License-Identifier: MIT
"""Tests for scraped spring ingestion."""

import json

import pytest

from soakmap.deduplication.service import DeduplicationService
from soakmap.ingest import SpringDraftIn, load_drafts, run_ingest


def write_json(tmp_path, items, name="springs.json"):
    path = tmp_path / name
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


class TestSpringDraftIn:
    """Test scraper output validation."""

    def test_valid_draft(self):
        draft = SpringDraftIn.model_validate({
            "name": "  Goldbug Hot Springs ",
            "state": "id",
            "lat": 45.83,
            "lng": -114.75,
            "parking": "trailhead",
            "scraped_at": "2024-01-01",
        })

        assert draft.name == "Goldbug Hot Springs"
        assert draft.state == "ID"
        assert draft.parking == "trailhead"

    def test_unknown_state_rejected(self):
        with pytest.raises(ValueError):
            SpringDraftIn.model_validate({"name": "Somewhere", "state": "XX"})

    def test_unknown_enum_value_rejected(self):
        with pytest.raises(ValueError):
            SpringDraftIn.model_validate({"name": "Goldbug", "state": "ID", "crowd_level": "mobbed"})

    def test_half_coordinates_rejected(self):
        with pytest.raises(ValueError):
            SpringDraftIn.model_validate({"name": "Goldbug", "state": "ID", "lat": 45.8})

    def test_out_of_range_coordinates_rejected(self):
        with pytest.raises(ValueError):
            SpringDraftIn.model_validate({"name": "Goldbug", "state": "ID", "lat": 95.0, "lng": -114.0})

    def test_temperature_range(self):
        with pytest.raises(ValueError):
            SpringDraftIn.model_validate({"name": "Goldbug", "state": "ID", "temp_f": 500})

    def test_to_record(self):
        record = SpringDraftIn.model_validate({
            "name": "Goldbug Hot Springs",
            "state": "ID",
            "description": "Hike   in\n\nto pools",
        }).to_record()

        assert record.id is None
        assert record.name == "Goldbug Hot Springs"
        assert not record.has_coordinates


class TestLoadDrafts:
    """Test reading scraper files."""

    def test_splits_valid_and_invalid(self, tmp_path):
        path = write_json(tmp_path, [
            {"name": "Goldbug Hot Springs", "state": "ID", "lat": 45.83, "lng": -114.75},
            {"name": "Nowhere Springs", "state": "ZZ"},
            "not an object",
        ])

        drafts, errors = load_drafts(path)

        assert [d.name for d in drafts] == ["Goldbug Hot Springs"]
        assert len(errors) == 2
        assert errors[0].startswith("Nowhere Springs:")
        assert errors[1].startswith("item 2:")

    def test_rejects_non_array(self, tmp_path):
        path = tmp_path / "springs.json"
        path.write_text(json.dumps({"name": "Goldbug"}), encoding="utf-8")

        with pytest.raises(ValueError, match="JSON array"):
            load_drafts(path)


class TestRunIngest:
    """Test the ingestion run against an in-memory store."""

    @pytest.fixture
    def scraped_file(self, tmp_path):
        return write_json(tmp_path, [
            {"name": "Goldbug Hot Spring", "state": "ID", "lat": 45.83, "lng": -114.75},
            {"name": "Sunbeam Hot Springs", "state": "ID", "lat": 44.26, "lng": -114.74},
            {"name": "Kirkham Hot Springs", "state": "ID", "lat": 44.07, "lng": -115.54},
            {"name": "", "state": "ID"},
        ])

    def test_inserts_new_and_skips_duplicates(self, fake_repository, idaho_springs, scraped_file):
        fake_repository.records = list(idaho_springs)
        service = DeduplicationService(fake_repository)

        result = run_ingest(scraped_file, service, fake_repository)

        assert result.loaded == 4
        assert result.invalid == 1
        assert result.new == 2
        assert result.inserted == 2
        assert [d.existing_id for d in result.duplicates] == [idaho_springs[4].id]
        assert {r.name for r in fake_repository.inserted} == {"Sunbeam Hot Springs", "Kirkham Hot Springs"}
        assert result.duration_seconds is not None

    def test_dry_run_inserts_nothing(self, fake_repository, idaho_springs, scraped_file):
        fake_repository.records = list(idaho_springs)

        result = run_ingest(scraped_file, DeduplicationService(fake_repository), fake_repository, dry_run=True)

        assert result.new == 2
        assert result.inserted == 0
        assert fake_repository.inserted == []

    def test_limit(self, fake_repository, scraped_file):
        result = run_ingest(scraped_file, DeduplicationService(fake_repository), fake_repository, limit=1)

        assert result.new == 3
        assert result.inserted == 1

    def test_limit_zero_inserts_nothing(self, fake_repository, scraped_file):
        result = run_ingest(scraped_file, DeduplicationService(fake_repository), fake_repository, limit=0)

        assert result.new == 3
        assert result.inserted == 0
        assert fake_repository.inserted == []

    def test_snapshot_invalidated_after_insert(self, fake_repository, scraped_file):
        service = DeduplicationService(fake_repository)

        run_ingest(scraped_file, service, fake_repository)
        assert fake_repository.read_calls == 1

        # Second run sees the springs the first one inserted
        result = run_ingest(scraped_file, service, fake_repository)

        assert fake_repository.read_calls == 2
        assert result.new == 0
        assert len(result.duplicates) == 3
