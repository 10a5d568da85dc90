"""Abstract repository interface for the per-project published version log."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from wiki_authoring.domain.wiki.models import DraftContent, PublishedVersion, VersionOrigin


class VersionLogRepository(ABC):

    @abstractmethod
    def append(self, project_id: int, content: DraftContent, origin: VersionOrigin) -> PublishedVersion:
        """
        Allocate the project's next version number and store an immutable copy of content.
        Allocation is serialized per project, so concurrent appends never share a number.
        """
        ...

    @abstractmethod
    def list_versions(self, project_id: int) -> List[PublishedVersion]:
        """Return every version for a project, ordered by version_number DESC."""
        ...

    @abstractmethod
    def get_version(self, project_id: int, version_number: int) -> Optional[PublishedVersion]:
        """Return a specific version, or None if not found."""
        ...

    @abstractmethod
    def get_by_id(self, project_id: int, version_id: int) -> Optional[PublishedVersion]:
        """Return the version with this id if it belongs to the project, or None."""
        ...

    @abstractmethod
    def get_latest_version_number(self, project_id: int) -> Optional[int]:
        """Return the highest allocated version_number, or None if the log is empty."""
        ...

    @abstractmethod
    def latest_version_numbers(self) -> Dict[int, int]:
        """Return {project_id: latest version_number} for every project with a version."""
        ...
