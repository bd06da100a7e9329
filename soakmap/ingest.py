"""
Ingestion of scraped springs.

Scrapers write their output as a JSON array of spring objects. This module
validates those drafts, withholds the ones that duplicate existing springs,
and inserts the rest.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from soakmap.config import (
    ACCESS_DIFFICULTIES,
    BEST_SEASONS,
    CELL_SERVICE_TYPES,
    CLOTHING_OPTIONAL_TYPES,
    CROWD_LEVELS,
    FEE_TYPES,
    PARKING_TYPES,
    STATE_CODES,
)
from soakmap.deduplication.service import DeduplicationService
from soakmap.deduplication.types import DuplicateMatch, SpringRecord
from soakmap.repository import SqlSpringRepository
from soakmap.utils.geo import is_valid_coordinates
from soakmap.utils.text import clean_description

ENUM_FIELDS = {
    "access_difficulty": ACCESS_DIFFICULTIES,
    "parking": PARKING_TYPES,
    "cell_service": CELL_SERVICE_TYPES,
    "fee_type": FEE_TYPES,
    "crowd_level": CROWD_LEVELS,
    "best_season": BEST_SEASONS,
    "clothing_optional": CLOTHING_OPTIONAL_TYPES,
}


class SpringDraftIn(BaseModel):
    """Validated scraper output for one spring."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    state: str
    lat: float | None = None
    lng: float | None = None
    slug: str | None = None

    description: str | None = None
    temp_f: int | None = Field(default=None, ge=32, le=212)
    photo_url: str | None = None

    access_difficulty: str | None = None
    parking: str | None = None
    fee_type: str | None = None
    clothing_optional: str | None = None
    cell_service: str | None = None
    crowd_level: str | None = None
    best_season: str | None = None
    directions: str | None = None
    safety_notes: str | None = None

    source: str | None = Field(default=None, max_length=100)
    source_id: str | None = Field(default=None, max_length=100)
    enrichment_status: str | None = None

    @field_validator("state")
    @classmethod
    def check_state(cls, v: str) -> str:
        v = v.upper()
        if v not in STATE_CODES:
            raise ValueError(f"unknown state code: {v}")
        return v

    @field_validator(*ENUM_FIELDS.keys())
    @classmethod
    def check_enum(cls, v: str | None, info) -> str | None:
        if v is not None and v not in ENUM_FIELDS[info.field_name]:
            raise ValueError(f"must be one of {', '.join(ENUM_FIELDS[info.field_name])}")
        return v

    @model_validator(mode="after")
    def check_coordinates(self):
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be given together")
        if self.lat is not None and not is_valid_coordinates(self.lat, self.lng):
            raise ValueError(f"invalid coordinates: {self.lat}, {self.lng}")
        return self

    def to_record(self) -> SpringRecord:
        values = self.model_dump()
        values["description"] = clean_description(values["description"])
        return SpringRecord(**values)


@dataclass
class IngestResult:
    """Result of an ingestion run."""
    source_file: str
    loaded: int = 0
    invalid: int = 0
    new: int = 0
    inserted: int = 0
    duplicates: list[DuplicateMatch] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Calculate duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


def load_drafts(path: Path) -> tuple[list[SpringRecord], list[str]]:
    """
    Read and validate a JSON array of scraped springs.

    Args:
        path: JSON file written by a scraper

    Returns:
        Tuple of (valid drafts, error messages for rejected items)
    """
    with open(path, encoding="utf-8") as f:
        items = json.load(f)

    if not isinstance(items, list):
        raise ValueError(f"{path}: expected a JSON array of springs")

    drafts: list[SpringRecord] = []
    errors: list[str] = []

    for i, item in enumerate(items):
        try:
            drafts.append(SpringDraftIn.model_validate(item).to_record())
        except ValidationError as e:
            label = item.get("name", f"item {i}") if isinstance(item, dict) else f"item {i}"
            problems = "; ".join(f"{'.'.join(map(str, err['loc'])) or 'spring'}: {err['msg']}" for err in e.errors())
            errors.append(f"{label}: {problems}")

    return drafts, errors


def run_ingest(
    path: Path,
    service: DeduplicationService,
    repository: SqlSpringRepository,
    dry_run: bool = False,
    limit: int | None = None,
    batch_size: int | None = None,
) -> IngestResult:
    """
    Load scraped springs, skip duplicates of existing springs, insert the rest.

    Args:
        path: Scraper output file
        service: Deduplication service for this run
        repository: Repository to insert into
        dry_run: Classify only, insert nothing
        limit: Insert at most this many new springs
        batch_size: Springs per insert batch

    Returns:
        IngestResult with statistics
    """
    result = IngestResult(source_file=str(path), started_at=datetime.utcnow())

    drafts, errors = load_drafts(path)
    result.loaded = len(drafts) + len(errors)
    result.invalid = len(errors)
    result.errors.extend(errors)
    if errors:
        logger.warning(f"Rejected {len(errors)} invalid springs from {path}")

    # Pre-insert deduplication
    logger.info("Checking for duplicates against existing database...")
    classified = service.classify(drafts)
    result.new = len(classified.new)
    result.duplicates = classified.duplicates

    if classified.duplicates:
        logger.info("Skipping duplicates:")
        for dupe in classified.duplicates[:5]:
            logger.info(f"  - \"{dupe.draft.name}\" (matches existing {dupe.existing_id})")
        if len(classified.duplicates) > 5:
            logger.info(f"  ... and {len(classified.duplicates) - 5} more")

    to_insert = classified.new[:limit] if limit is not None else classified.new

    try:
        if dry_run:
            logger.info(f"[DRY RUN] Would insert {len(to_insert)} springs")
        else:
            result.inserted = repository.insert_many(to_insert, batch_size=batch_size)
    finally:
        # The store changed (or may have)
        service.invalidate_snapshot_cache()
        result.completed_at = datetime.utcnow()

    logger.info(
        f"Ingest complete: {result.inserted} inserted, "
        f"{len(result.duplicates)} duplicates skipped, {result.invalid} invalid"
    )
    return result
