"""
Snapshot Cache Store

Persists repository snapshots together with their content hash, grouped
under a search key (a ``search_hash`` or the reserved fleet-wide key).
There is no TTL: an entry is valid until it is replaced or cleared.

Backed by SQLAlchemy; any database URL it supports works, the default is
a local SQLite file.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from archmap.shared.exceptions import CacheUnavailableError
from archmap.shared.models import RepositorySnapshot

logger = logging.getLogger("archmap.cache.store")

ALL_PROJECTS_KEY = "initial_load_all_projects"

Base = declarative_base()


class CachedProjectRow(Base):
    __tablename__ = "cached_projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    search_hash = Column(String(64), nullable=False, index=True)
    project_id = Column(Integer, nullable=False)
    project_hash = Column(String(32), nullable=False, index=True)
    payload = Column(Text, nullable=False)
    source = Column(String(16), nullable=False, default="gitlab")
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)


@dataclass
class CachedProject:
    """A cached snapshot with the hash it had when it was stored."""

    project: RepositorySnapshot
    project_hash: str
    search_hash: str
    created_at: datetime
    updated_at: datetime
    source: str = "gitlab"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotCacheStore:
    """
    Hash-keyed snapshot cache.

    Usage
    -----
    store = SnapshotCacheStore("sqlite:///archmap-cache.db")
    store.cache_projects(snapshots, ALL_PROJECTS_KEY, hashes)
    store.get_cached_projects(ALL_PROJECTS_KEY)
    store.close()
    """

    def __init__(self, database_url: str):
        kwargs: dict = {}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        try:
            self._engine = create_engine(database_url, **kwargs)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise CacheUnavailableError(f"could not open snapshot cache: {e}") from e
        self._session = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("Snapshot cache ready (%s)", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ─── Writes ────────────────────────────────────────────

    def cache_projects(
        self,
        projects: list[RepositorySnapshot],
        search_hash: str,
        project_hashes: dict[int, str],
    ) -> None:
        """Replace every entry stored under ``search_hash`` with ``projects``."""
        now = _now()
        with self._session.begin() as session:
            session.execute(delete(CachedProjectRow).where(CachedProjectRow.search_hash == search_hash))
            session.add_all(
                CachedProjectRow(
                    search_hash=search_hash,
                    project_id=project.id,
                    project_hash=project_hashes.get(project.id, ""),
                    payload=json.dumps(project.to_dict()),
                    source="gitlab",
                    created_at=now,
                    updated_at=now,
                )
                for project in projects
            )
        logger.debug("Cached %d projects under %s", len(projects), search_hash)

    def upsert_project(self, search_hash: str, project: RepositorySnapshot, project_hash: str) -> None:
        """Insert or replace a single project under ``search_hash``."""
        now = _now()
        with self._session.begin() as session:
            row = session.scalars(
                select(CachedProjectRow).where(
                    CachedProjectRow.search_hash == search_hash,
                    CachedProjectRow.project_id == project.id,
                )
            ).first()
            if row is None:
                session.add(CachedProjectRow(
                    search_hash=search_hash,
                    project_id=project.id,
                    project_hash=project_hash,
                    payload=json.dumps(project.to_dict()),
                    source="gitlab",
                    created_at=now,
                    updated_at=now,
                ))
            else:
                row.project_hash = project_hash
                row.payload = json.dumps(project.to_dict())
                row.updated_at = now

    def clear_all(self) -> None:
        with self._session.begin() as session:
            session.execute(delete(CachedProjectRow))
        logger.warning("Cleared entire snapshot cache")

    # ─── Reads ─────────────────────────────────────────────

    def _rows(self, search_hash: str) -> list[CachedProjectRow]:
        with self._session() as session:
            return list(session.scalars(
                select(CachedProjectRow)
                .where(CachedProjectRow.search_hash == search_hash)
                .order_by(CachedProjectRow.id)
            ))

    def get_cached_projects(self, search_hash: str) -> list[RepositorySnapshot]:
        return [RepositorySnapshot.from_dict(json.loads(row.payload)) for row in self._rows(search_hash)]

    def get_cached_projects_with_hashes(self, search_hash: str) -> list[CachedProject]:
        return [
            CachedProject(
                project=RepositorySnapshot.from_dict(json.loads(row.payload)),
                project_hash=row.project_hash,
                search_hash=row.search_hash,
                created_at=row.created_at,
                updated_at=row.updated_at,
                source=row.source,
            )
            for row in self._rows(search_hash)
        ]

    def is_cache_valid(self, search_hash: str) -> bool:
        """True if anything is stored under ``search_hash`` (no expiry)."""
        with self._session() as session:
            count = session.scalar(
                select(func.count()).select_from(CachedProjectRow)
                .where(CachedProjectRow.search_hash == search_hash)
            )
        return bool(count)

    def stats(self) -> dict:
        with self._session() as session:
            total = session.scalar(select(func.count()).select_from(CachedProjectRow)) or 0
            per_key = session.execute(
                select(CachedProjectRow.search_hash, func.count())
                .group_by(CachedProjectRow.search_hash)
            ).all()
        return {
            "total_cached_projects": total,
            "search_hashes": {key: count for key, count in per_key},
        }
