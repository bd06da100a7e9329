"""
SQLAlchemy-backed spring repository.

Implements the SpringRepository interface the deduplication engine consumes,
plus the insert, update and count operations the ingest, validate and
status commands need.
"""

import uuid
from collections.abc import Sequence

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from soakmap.config import settings
from soakmap.database import SessionLocal, Spring
from soakmap.deduplication.types import RepositoryError, SpringRecord, SpringRepository
from soakmap.utils.geo import normalize_coordinates
from soakmap.utils.text import slugify

# Columns copied between Spring rows and SpringRecord
RECORD_FIELDS = (
    "name",
    "state",
    "lat",
    "lng",
    "slug",
    "description",
    "temp_f",
    "photo_url",
    "access_difficulty",
    "parking",
    "fee_type",
    "clothing_optional",
    "cell_service",
    "crowd_level",
    "best_season",
    "directions",
    "safety_notes",
    "source",
    "source_id",
    "enrichment_status",
)


def row_to_record(row: Spring) -> SpringRecord:
    """Convert a Spring row to the engine's record type."""
    values = {name: getattr(row, name) for name in RECORD_FIELDS}
    # Bad coordinates degrade to name-only matching
    values["lat"], values["lng"] = normalize_coordinates(row.lat, row.lng)
    return SpringRecord(id=str(row.id), **values)


def record_to_row(record: SpringRecord) -> Spring:
    """Build a new Spring row from a draft; the store assigns the id."""
    values = {name: getattr(record, name) for name in RECORD_FIELDS}
    values["slug"] = record.slug or slugify(record.name, record.state)
    if values["enrichment_status"] is None:
        values["enrichment_status"] = "pending"
    return Spring(**values)


class SqlSpringRepository(SpringRepository):
    """Spring repository on a SQLAlchemy session factory."""

    def __init__(self, session_factory=None, page_size: int | None = None):
        """
        Args:
            session_factory: Callable returning a new Session (default SessionLocal)
            page_size: Rows per page for read_all (default from settings)
        """
        self.session_factory = session_factory or SessionLocal
        self.page_size = page_size or settings.pipeline.read_page_size

    def read_all(self) -> list[SpringRecord]:
        records: list[SpringRecord] = []
        offset = 0

        session = self.session_factory()
        try:
            while True:
                rows = session.scalars(
                    select(Spring)
                    .order_by(Spring.created_at, Spring.id)
                    .offset(offset)
                    .limit(self.page_size)
                ).all()

                records.extend(row_to_record(row) for row in rows)
                offset += self.page_size
                if len(rows) < self.page_size:
                    break
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load springs: {e}", operation="read_all") from e
        finally:
            session.close()

        logger.debug(f"Read {len(records)} springs in pages of {self.page_size}")
        return records

    def delete_by_ids(self, ids: Sequence[str]) -> int:
        if not ids:
            return 0

        try:
            uuids = [uuid.UUID(i) for i in ids]
        except (TypeError, ValueError) as e:
            raise RepositoryError(f"Refusing to delete malformed ids: {e}", operation="delete") from e

        session = self.session_factory()
        try:
            result = session.execute(
                delete(Spring)
                .where(Spring.id.in_(uuids))
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(f"Failed to delete springs: {e}", operation="delete") from e
        finally:
            session.close()

    def update_fields(self, spring_id: str, values: dict) -> bool:
        """
        Overwrite some columns of one spring.

        Returns:
            True if the spring exists and was updated
        """
        unknown = set(values) - set(RECORD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown spring fields: {', '.join(sorted(unknown))}")

        try:
            spring_uuid = uuid.UUID(spring_id)
        except (TypeError, ValueError) as e:
            raise RepositoryError(f"Refusing to update malformed id: {e}", operation="update") from e

        session = self.session_factory()
        try:
            result = session.execute(
                update(Spring)
                .where(Spring.id == spring_uuid)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(f"Failed to update spring {spring_id}: {e}", operation="update") from e
        finally:
            session.close()

    def insert_many(self, records: Sequence[SpringRecord], batch_size: int | None = None) -> int:
        """
        Insert drafts in batches, skipping any whose slug already exists.

        Returns:
            Number of springs inserted
        """
        batch_size = batch_size or settings.pipeline.batch_size
        inserted = 0
        seen_slugs: set[str] = set()

        session = self.session_factory()
        try:
            for start in range(0, len(records), batch_size):
                rows = [record_to_row(r) for r in records[start:start + batch_size]]

                taken = set(session.scalars(
                    select(Spring.slug).where(Spring.slug.in_([row.slug for row in rows]))
                ).all())

                batch = []
                for row in rows:
                    if row.slug in taken or row.slug in seen_slugs:
                        logger.debug(f"Slug already exists, skipping: {row.slug}")
                        continue
                    seen_slugs.add(row.slug)
                    batch.append(row)

                session.add_all(batch)
                session.commit()
                inserted += len(batch)
                logger.info(f"Committed batch of {len(batch)} springs (total: {inserted})")
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(f"Failed to insert springs: {e}", operation="insert") from e
        finally:
            session.close()

        return inserted

    def count(self) -> int:
        session = self.session_factory()
        try:
            return session.scalar(select(func.count()).select_from(Spring))
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count springs: {e}", operation="count") from e
        finally:
            session.close()
