# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Database engine and table metadata — single source of truth for DB connectivity.

The schema is portable across SQLite, MySQL and PostgreSQL. Cascades are
performed by the repository inside one transaction rather than relying on
``ON DELETE CASCADE`` (SQLite leaves foreign keys off by default).
"""

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, MetaData, String,
    Table, Text, create_engine, func,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from churchcells.core.config import settings

metadata = MetaData()

districts = Table(
    "districts", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(100), unique=True, nullable=False),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("leader_id", String(64)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
)

zones = Table(
    "zones", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(100), unique=True, nullable=False),
    Column("district_id", Integer,
           ForeignKey("districts.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("leader_id", String(64)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_zones_district_id", "district_id"),
)

homecells = Table(
    "homecells", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(100), unique=True, nullable=False),
    Column("zone_id", Integer,
           ForeignKey("zones.id", ondelete="CASCADE"), nullable=False),
    Column("district_id", Integer,
           ForeignKey("districts.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("leader_id", String(64)),
    Column("meeting_day", String(20)),
    Column("meeting_time", String(5)),
    Column("meeting_location", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_homecells_zone_id", "zone_id"),
    Index("idx_homecells_district_id", "district_id"),
    Index("idx_homecells_name", "name"),
)

members = Table(
    "members", metadata,
    Column("id", String(36), primary_key=True),
    Column("member_id", String(50), unique=True, nullable=False),
    Column("full_name", String(255), nullable=False),
    Column("phone", String(50)),
    Column("email", String(255)),
    Column("gender", String(20)),
    Column("membership_status", String(30), nullable=False, default="Active"),
    # Reference by home-cell *name*; kept in sync on rename by the repository.
    Column("home_cell", String(255)),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_members_home_cell", "home_cell"),
)

homecell_assignments = Table(
    "homecell_assignments", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("member_id", String(36), nullable=False),
    Column("action", String(20), nullable=False),
    Column("from_home_cell", String(255)),
    Column("to_home_cell", String(255)),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_assignments_member_id", "member_id"),
)


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def init_schema(bind: Engine) -> None:
    """Create every table that does not exist yet."""
    metadata.create_all(bind)


def reset_schema(bind: Engine) -> None:
    """Drop and recreate all tables (tests and local resets only)."""
    metadata.drop_all(bind)
    metadata.create_all(bind)


engine = build_engine(settings.DATABASE_URL)
