"""Abstract repository interface for wiki drafts (the Draft Store)."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from wiki_authoring.domain.wiki.models import DraftContent, WikiDraft


class DraftRepository(ABC):

    @abstractmethod
    def create(
        self,
        project_id: int,
        content: DraftContent,
        source_published_version_id: Optional[int] = None,
    ) -> WikiDraft:
        """Insert a new draft; created_at and updated_at are both stamped now."""
        ...

    @abstractmethod
    def get(self, project_id: int, draft_id: int) -> Optional[WikiDraft]:
        """Return the draft if it belongs to the project, or None."""
        ...

    @abstractmethod
    def list_for_project(self, project_id: int) -> List[WikiDraft]:
        """Return all drafts for a project, most recently updated first."""
        ...

    @abstractmethod
    def replace_content(self, project_id: int, draft_id: int, content: DraftContent) -> Optional[WikiDraft]:
        """
        Overwrite all content fields unconditionally and advance updated_at.
        No version check: concurrent writers race and the last one applied wins.
        Returns the stored draft, or None if it does not exist.
        """
        ...

    @abstractmethod
    def set_source_version(self, project_id: int, draft_id: int, version_id: int) -> None:
        """Record which published version the draft corresponds to. Content is untouched."""
        ...

    @abstractmethod
    def count_by_project(self) -> Dict[int, int]:
        """Return {project_id: number of drafts}."""
        ...
