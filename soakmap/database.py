"""
Database models for the SoakMap pipeline.

Uses SQLAlchemy 2.0 against the PostgreSQL springs table.
"""

import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    create_engine,
    String,
    Integer,
    Float,
    DateTime,
    Text,
    Index,
    Uuid,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.sql import func

from soakmap.config import settings


# =============================================================================
# Database Engine and Session
# =============================================================================

engine = create_engine(
    settings.database.url,
    echo=settings.pipeline.log_level == "DEBUG",
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
    pool_timeout=30,        # Connection timeout to prevent hanging
    pool_recycle=1800,      # Recycle connections every 30 minutes
    connect_args={
        "connect_timeout": 10,  # Connection timeout in seconds
        "options": "-c statement_timeout=60000"  # 60s query timeout
    }
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_session():
    """Context manager for database sessions."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================================
# Base Model
# =============================================================================

class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# =============================================================================
# Spring Model
# =============================================================================

class Spring(Base):
    """
    A spring or swimming hole listed in the directory.

    The id is assigned once on insert and never reused.
    """
    __tablename__ = "springs"

    # Identity
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(250), nullable=False, unique=True)

    # Location
    state: Mapped[str] = mapped_column(String(2), nullable=False, index=True)
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Content
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    temp_f: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Access & experience (enriched)
    access_difficulty: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    parking: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fee_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    clothing_optional: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    cell_service: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    crowd_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    best_season: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    directions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    safety_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Pipeline tracking
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    enrichment_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default="pending")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_springs_source", "source", "source_id"),
    )

    def __repr__(self) -> str:
        return f"<Spring {self.name} ({self.state})>"


# =============================================================================
# Utility Functions
# =============================================================================

def create_all_tables():
    """Create all tables in the database."""
    Base.metadata.create_all(bind=engine)
