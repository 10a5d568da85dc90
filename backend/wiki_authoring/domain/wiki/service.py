"""Domain service — pure business logic for drafts, snapshots and version history."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, Optional

from wiki_authoring.domain.common.result import Result
from wiki_authoring.domain.wiki.models import (
    DraftContent,
    PublishedFromDraft,
    PublishedVersion,
    RolledBackFromVersion,
    VersionHistory,
    WikiDraft,
)
from wiki_authoring.domain.wiki.rules import validate_draft_content


def now_iso() -> str:
    # Fixed precision keeps stored timestamps lexicographically ordered.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class WikiDomainService:
    """
    Pure domain operations — no I/O. Fallible methods return Result[T].
    The application layer calls these and then persists via the repositories.
    """

    def build_content(self, data: dict) -> Result[DraftContent]:
        """Validate a raw payload and return a DraftContent owned by the caller."""
        return validate_draft_content(data)

    def snapshot_for_publish(self, draft: WikiDraft) -> tuple[DraftContent, PublishedFromDraft]:
        """Freeze a draft's current content for the version log."""
        return draft.content.copy(), PublishedFromDraft(draft_id=draft.id)

    def snapshot_for_rollback(self, target: PublishedVersion) -> tuple[DraftContent, RolledBackFromVersion]:
        """Copy an existing version's content so it can be republished as a new entry."""
        return target.content.copy(), RolledBackFromVersion(version_id=target.id)

    def build_history(
        self,
        project_id: int,
        versions: Iterable[PublishedVersion],
        latest_version_number: Optional[int] = None,
    ) -> VersionHistory:
        ordered = sorted(versions, key=lambda v: v.version_number, reverse=True)
        if latest_version_number is None and ordered:
            latest_version_number = ordered[0].version_number
        return VersionHistory(
            project_id=project_id,
            latest_version_number=latest_version_number,
            versions=ordered,
        )
