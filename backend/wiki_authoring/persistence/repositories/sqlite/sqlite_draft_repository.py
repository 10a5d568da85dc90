"""SQLite implementation of DraftRepository."""
from __future__ import annotations
import json
from typing import Dict, List, Optional

from wiki_authoring.domain.wiki.models import DraftContent, WikiDraft
from wiki_authoring.domain.wiki.service import now_iso
from wiki_authoring.persistence.db import get_connection
from wiki_authoring.persistence.interfaces.draft_repository import DraftRepository


def _row_to_draft(row) -> WikiDraft:
    return WikiDraft(
        id=row["id"],
        project_id=row["project_id"],
        content=DraftContent(
            sections=json.loads(row["sections"] or "[]"),
            counters=json.loads(row["counters"] or "{}"),
            hidden_section_ids=json.loads(row["hidden_section_ids"] or "[]"),
        ),
        source_published_version_id=row["source_published_version_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _content_params(content: DraftContent) -> dict:
    return {
        "sections": json.dumps(content.sections),
        "counters": json.dumps(content.counters),
        "hidden_section_ids": json.dumps(content.hidden_section_ids),
    }


_SELECT_ONE = "SELECT * FROM wiki_drafts WHERE id = ? AND project_id = ?"


class SqliteDraftRepository(DraftRepository):

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path

    def create(
        self,
        project_id: int,
        content: DraftContent,
        source_published_version_id: Optional[int] = None,
    ) -> WikiDraft:
        now = now_iso()
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute(
                """
                INSERT INTO wiki_drafts (
                    project_id, sections, counters, hidden_section_ids,
                    source_published_version_id, created_at, updated_at
                ) VALUES (
                    :project_id, :sections, :counters, :hidden_section_ids,
                    :source_published_version_id, :now, :now
                )
                """,
                {
                    "project_id": project_id,
                    "source_published_version_id": source_published_version_id,
                    "now": now,
                    **_content_params(content),
                },
            )
            row = conn.execute(_SELECT_ONE, (cur.lastrowid, project_id)).fetchone()
            conn.commit()
        finally:
            conn.close()
        return _row_to_draft(row)

    def get(self, project_id: int, draft_id: int) -> Optional[WikiDraft]:
        conn = get_connection(self._db_path)
        row = conn.execute(_SELECT_ONE, (draft_id, project_id)).fetchone()
        conn.close()
        return _row_to_draft(row) if row else None

    def list_for_project(self, project_id: int) -> List[WikiDraft]:
        conn = get_connection(self._db_path)
        rows = conn.execute(
            "SELECT * FROM wiki_drafts WHERE project_id = ? ORDER BY updated_at DESC, id DESC",
            (project_id,),
        ).fetchall()
        conn.close()
        return [_row_to_draft(r) for r in rows]

    def replace_content(self, project_id: int, draft_id: int, content: DraftContent) -> Optional[WikiDraft]:
        conn = get_connection(self._db_path)
        try:
            cur = conn.execute(
                """
                UPDATE wiki_drafts SET
                    sections           = :sections,
                    counters           = :counters,
                    hidden_section_ids = :hidden_section_ids,
                    updated_at         = MAX(updated_at, :now)
                WHERE id = :id AND project_id = :project_id
                """,
                {"id": draft_id, "project_id": project_id, "now": now_iso(), **_content_params(content)},
            )
            if cur.rowcount == 0:
                conn.rollback()
                return None
            # Read back inside the write transaction so the caller sees its own write.
            row = conn.execute(_SELECT_ONE, (draft_id, project_id)).fetchone()
            conn.commit()
        finally:
            conn.close()
        return _row_to_draft(row)

    def set_source_version(self, project_id: int, draft_id: int, version_id: int) -> None:
        conn = get_connection(self._db_path)
        conn.execute(
            "UPDATE wiki_drafts SET source_published_version_id = ? WHERE id = ? AND project_id = ?",
            (version_id, draft_id, project_id),
        )
        conn.commit()
        conn.close()

    def count_by_project(self) -> Dict[int, int]:
        conn = get_connection(self._db_path)
        rows = conn.execute(
            "SELECT project_id, COUNT(*) AS n FROM wiki_drafts GROUP BY project_id"
        ).fetchall()
        conn.close()
        return {r["project_id"]: r["n"] for r in rows}
