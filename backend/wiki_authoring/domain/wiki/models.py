"""Wiki authoring domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class DraftContent:
    sections: List[Dict[str, Any]] = field(default_factory=list)
    counters: Dict[str, Any] = field(default_factory=dict)
    hidden_section_ids: List[str] = field(default_factory=list)

    def copy(self) -> "DraftContent":
        """Deep copy; published snapshots never share storage with their source."""
        return DraftContent(
            sections=copy.deepcopy(self.sections),
            counters=copy.deepcopy(self.counters),
            hidden_section_ids=list(self.hidden_section_ids),
        )

    def to_dict(self) -> dict:
        return {
            "sections": copy.deepcopy(self.sections),
            "counters": copy.deepcopy(self.counters),
            "hidden_section_ids": list(self.hidden_section_ids),
        }


@dataclass
class WikiDraft:
    id: int
    project_id: int
    content: DraftContent
    created_at: str
    updated_at: str
    source_published_version_id: Optional[int] = None


# ------------------------------------------------------------------
# Version origin: exactly one shape, or None for a seeded entry
# ------------------------------------------------------------------
@dataclass(frozen=True)
class PublishedFromDraft:
    draft_id: int


@dataclass(frozen=True)
class RolledBackFromVersion:
    version_id: int


VersionOrigin = Optional[Union[PublishedFromDraft, RolledBackFromVersion]]


@dataclass(frozen=True)
class PublishedVersion:
    id: int
    project_id: int
    version_number: int
    content: DraftContent
    published_at: str
    origin: VersionOrigin = None

    @property
    def published_from_draft_id(self) -> Optional[int]:
        if isinstance(self.origin, PublishedFromDraft):
            return self.origin.draft_id
        return None

    @property
    def rolled_back_from_version_id(self) -> Optional[int]:
        if isinstance(self.origin, RolledBackFromVersion):
            return self.origin.version_id
        return None


@dataclass
class VersionHistory:
    project_id: int
    latest_version_number: Optional[int]
    versions: List[PublishedVersion] = field(default_factory=list)  # most recent first


@dataclass
class ProjectSummary:
    project_id: int
    draft_count: int
    latest_version_number: Optional[int] = None
