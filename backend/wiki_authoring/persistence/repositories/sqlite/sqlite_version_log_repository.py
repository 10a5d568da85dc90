"""SQLite implementation of VersionLogRepository."""
from __future__ import annotations
import json
import logging
import threading
from typing import Dict, List, Optional

from wiki_authoring.domain.wiki.models import (
    DraftContent,
    PublishedFromDraft,
    PublishedVersion,
    RolledBackFromVersion,
    VersionOrigin,
)
from wiki_authoring.domain.wiki.service import now_iso
from wiki_authoring.persistence.db import get_connection
from wiki_authoring.persistence.interfaces.version_log_repository import VersionLogRepository

logger = logging.getLogger(__name__)

_ORIGIN_DRAFT = "draft"
_ORIGIN_ROLLBACK = "rollback"


def _origin_to_columns(origin: VersionOrigin) -> tuple[Optional[str], Optional[int]]:
    if origin is None:
        return None, None
    if isinstance(origin, PublishedFromDraft):
        return _ORIGIN_DRAFT, origin.draft_id
    if isinstance(origin, RolledBackFromVersion):
        return _ORIGIN_ROLLBACK, origin.version_id
    raise TypeError(f"Unknown version origin: {origin!r}")


def _columns_to_origin(kind: Optional[str], ref: Optional[int]) -> VersionOrigin:
    if kind == _ORIGIN_DRAFT:
        return PublishedFromDraft(draft_id=ref)
    if kind == _ORIGIN_ROLLBACK:
        return RolledBackFromVersion(version_id=ref)
    return None


def _row_to_version(row) -> PublishedVersion:
    return PublishedVersion(
        id=row["id"],
        project_id=row["project_id"],
        version_number=row["version_number"],
        content=DraftContent(
            sections=json.loads(row["sections"]),
            counters=json.loads(row["counters"]),
            hidden_section_ids=json.loads(row["hidden_section_ids"]),
        ),
        origin=_columns_to_origin(row["origin_kind"], row["origin_ref"]),
        published_at=row["published_at"],
    )


class ProjectLockRegistry:
    """One lock per project key, handed out under a single registry lock."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def lock_for(self, project_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = self._locks[project_id] = threading.Lock()
            return lock


class SqliteVersionLogRepository(VersionLogRepository):

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path
        self._locks = ProjectLockRegistry()

    def append(self, project_id: int, content: DraftContent, origin: VersionOrigin) -> PublishedVersion:
        origin_kind, origin_ref = _origin_to_columns(origin)
        # The in-process lock orders threads; BEGIN IMMEDIATE orders other processes.
        with self._locks.lock_for(project_id):
            conn = get_connection(self._db_path)
            try:
                conn.execute("BEGIN IMMEDIATE")
                row = conn.execute(
                    "SELECT last_version_number FROM wiki_version_counters WHERE project_id = ?",
                    (project_id,),
                ).fetchone()
                version_number = (row["last_version_number"] if row else 0) + 1
                conn.execute(
                    """
                    INSERT INTO wiki_version_counters (project_id, last_version_number)
                    VALUES (?, ?)
                    ON CONFLICT(project_id) DO UPDATE SET
                        last_version_number = excluded.last_version_number
                    """,
                    (project_id, version_number),
                )
                cur = conn.execute(
                    """
                    INSERT INTO wiki_published_versions (
                        project_id, version_number,
                        sections, counters, hidden_section_ids,
                        origin_kind, origin_ref, published_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        project_id,
                        version_number,
                        json.dumps(content.sections),
                        json.dumps(content.counters),
                        json.dumps(content.hidden_section_ids),
                        origin_kind,
                        origin_ref,
                        now_iso(),
                    ),
                )
                stored = conn.execute(
                    "SELECT * FROM wiki_published_versions WHERE id = ?", (cur.lastrowid,)
                ).fetchone()
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()
        logger.debug("Allocated version %d for project %d", version_number, project_id)
        return _row_to_version(stored)

    def list_versions(self, project_id: int) -> List[PublishedVersion]:
        conn = get_connection(self._db_path)
        rows = conn.execute(
            "SELECT * FROM wiki_published_versions WHERE project_id = ? ORDER BY version_number DESC",
            (project_id,),
        ).fetchall()
        conn.close()
        return [_row_to_version(r) for r in rows]

    def get_version(self, project_id: int, version_number: int) -> Optional[PublishedVersion]:
        conn = get_connection(self._db_path)
        row = conn.execute(
            "SELECT * FROM wiki_published_versions WHERE project_id = ? AND version_number = ?",
            (project_id, version_number),
        ).fetchone()
        conn.close()
        return _row_to_version(row) if row else None

    def get_by_id(self, project_id: int, version_id: int) -> Optional[PublishedVersion]:
        conn = get_connection(self._db_path)
        row = conn.execute(
            "SELECT * FROM wiki_published_versions WHERE id = ? AND project_id = ?",
            (version_id, project_id),
        ).fetchone()
        conn.close()
        return _row_to_version(row) if row else None

    def get_latest_version_number(self, project_id: int) -> Optional[int]:
        conn = get_connection(self._db_path)
        row = conn.execute(
            "SELECT last_version_number FROM wiki_version_counters WHERE project_id = ?",
            (project_id,),
        ).fetchone()
        conn.close()
        return row["last_version_number"] if row else None

    def latest_version_numbers(self) -> Dict[int, int]:
        conn = get_connection(self._db_path)
        rows = conn.execute(
            "SELECT project_id, last_version_number FROM wiki_version_counters"
        ).fetchall()
        conn.close()
        return {r["project_id"]: r["last_version_number"] for r in rows}
