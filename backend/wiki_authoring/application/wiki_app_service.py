"""Application service — orchestrates validate → domain op → persist for wiki drafts and versions."""
from __future__ import annotations
import logging
import threading
from typing import List, Optional

from wiki_authoring.domain.common.result import ErrorKind, Result
from wiki_authoring.domain.wiki.models import (
    ProjectSummary,
    PublishedVersion,
    VersionHistory,
    WikiDraft,
)
from wiki_authoring.domain.wiki.service import WikiDomainService
from wiki_authoring.generation.content_generator import ContentGenerator, GeneratorError
from wiki_authoring.generation.invoke import call_with_timeout
from wiki_authoring.persistence.interfaces.draft_repository import DraftRepository
from wiki_authoring.persistence.interfaces.version_log_repository import VersionLogRepository

logger = logging.getLogger(__name__)


def _not_found(message: str) -> Result:
    logger.debug(message)
    return Result.not_found(message)


class WikiAuthoringAppService:
    def __init__(
        self,
        drafts: DraftRepository,
        versions: VersionLogRepository,
        generator: Optional[ContentGenerator] = None,
        generator_timeout: Optional[float] = None,
    ):
        self._drafts = drafts
        self._versions = versions
        self._generator = generator
        self._generator_timeout = generator_timeout
        self._domain = WikiDomainService()

    # ------------------------------------------------------------------
    # PROJECTS
    # ------------------------------------------------------------------
    def list_projects(self) -> List[ProjectSummary]:
        draft_counts = self._drafts.count_by_project()
        latest = self._versions.latest_version_numbers()
        return [
            ProjectSummary(
                project_id=pid,
                draft_count=draft_counts.get(pid, 0),
                latest_version_number=latest.get(pid),
            )
            for pid in sorted(set(draft_counts) | set(latest))
        ]

    # ------------------------------------------------------------------
    # READ DRAFTS
    # ------------------------------------------------------------------
    def list_drafts(self, project_id: int) -> List[WikiDraft]:
        return self._drafts.list_for_project(project_id)

    def get_draft(self, project_id: int, draft_id: int) -> Result[WikiDraft]:
        draft = self._drafts.get(project_id, draft_id)
        if not draft:
            return _not_found(f"Draft {draft_id} not found in project {project_id}.")
        return Result.ok(draft)

    # ------------------------------------------------------------------
    # CREATE DRAFTS
    # ------------------------------------------------------------------
    def create_draft(
        self,
        project_id: int,
        data: dict,
        source_published_version_id: Optional[int] = None,
    ) -> Result[WikiDraft]:
        content = self._domain.build_content(data)
        if not content.is_success:
            return content.propagate()

        if source_published_version_id is not None:
            if not self._versions.get_by_id(project_id, source_published_version_id):
                return _not_found(
                    f"Published version id {source_published_version_id} not found in project {project_id}."
                )

        draft = self._drafts.create(project_id, content.value, source_published_version_id)
        logger.info("Created draft %d in project %d", draft.id, project_id)
        return Result.ok(draft)

    def create_draft_from_version(self, project_id: int, version_number: int) -> Result[WikiDraft]:
        """Clone a published version's content into a new, editable draft."""
        version = self._versions.get_version(project_id, version_number)
        if not version:
            return _not_found(f"Version {version_number} not found in project {project_id}.")
        draft = self._drafts.create(project_id, version.content.copy(), version.id)
        logger.info(
            "Created draft %d in project %d from version %d", draft.id, project_id, version_number
        )
        return Result.ok(draft)

    # ------------------------------------------------------------------
    # UPDATE DRAFTS (last write wins: no locking, no version token)
    # ------------------------------------------------------------------
    def update_draft(self, project_id: int, draft_id: int, data: dict) -> Result[WikiDraft]:
        content = self._domain.build_content(data)
        if not content.is_success:
            return content.propagate()

        draft = self._drafts.replace_content(project_id, draft_id, content.value)
        if not draft:
            return _not_found(f"Draft {draft_id} not found in project {project_id}.")
        logger.info("Updated draft %d in project %d", draft_id, project_id)
        return Result.ok(draft)

    def regenerate_draft(
        self,
        project_id: int,
        draft_id: int,
        seed_data: dict,
        cancel_event: Optional[threading.Event] = None,
    ) -> Result[WikiDraft]:
        """
        Replace a draft's content with what the content generator produces from `seed_data`.

        Persistence and concurrency match update_draft. If generation fails, times out
        or is cancelled, nothing is written and a GENERATOR_ERROR result is returned.
        """
        seed = self._domain.build_content(seed_data)
        if not seed.is_success:
            return seed.propagate()

        if not self._drafts.get(project_id, draft_id):
            return _not_found(f"Draft {draft_id} not found in project {project_id}.")

        if self._generator is None:
            return Result.fail("No content generator is configured.", ErrorKind.GENERATOR_ERROR)

        try:
            generated = call_with_timeout(
                self._generator,
                project_id,
                seed.value,
                timeout=self._generator_timeout,
                cancel_event=cancel_event,
            )
        except GeneratorError as e:
            logger.warning("Regenerate failed for draft %d in project %d: %s", draft_id, project_id, e)
            return Result.fail(str(e), ErrorKind.GENERATOR_ERROR)

        content = self._domain.build_content(generated.to_dict())
        if not content.is_success:
            return Result.fail(
                f"Content generator returned malformed content: {content.error}",
                ErrorKind.GENERATOR_ERROR,
            )

        draft = self._drafts.replace_content(project_id, draft_id, content.value)
        if not draft:
            return _not_found(f"Draft {draft_id} not found in project {project_id}.")
        logger.info("Regenerated draft %d in project %d", draft_id, project_id)
        return Result.ok(draft)

    def delete_draft(self, project_id: int, draft_id: int) -> Result[bool]:
        return Result.fail("Deleting drafts is not supported.", ErrorKind.UNSUPPORTED)

    # ------------------------------------------------------------------
    # READ VERSIONS
    # ------------------------------------------------------------------
    def get_history(self, project_id: int) -> VersionHistory:
        # Latest number comes from the same single read as the list, so the view is self-consistent.
        return self._domain.build_history(project_id, self._versions.list_versions(project_id))

    def get_version(self, project_id: int, version_number: int) -> Result[PublishedVersion]:
        version = self._versions.get_version(project_id, version_number)
        if not version:
            return _not_found(f"Version {version_number} not found in project {project_id}.")
        return Result.ok(version)

    # ------------------------------------------------------------------
    # PUBLISH / ROLLBACK / SEED
    # ------------------------------------------------------------------
    def publish(self, project_id: int, draft_id: int) -> Result[VersionHistory]:
        draft = self._drafts.get(project_id, draft_id)
        if not draft:
            return _not_found(f"Draft {draft_id} not found in project {project_id}.")

        content, origin = self._domain.snapshot_for_publish(draft)
        version = self._versions.append(project_id, content, origin)
        self._drafts.set_source_version(project_id, draft_id, version.id)
        logger.info(
            "Published draft %d as version %d in project %d", draft_id, version.version_number, project_id
        )
        return Result.ok(self.get_history(project_id))

    def rollback(self, project_id: int, target_version_number: int) -> Result[VersionHistory]:
        target = self._versions.get_version(project_id, target_version_number)
        if not target:
            return _not_found(f"Version {target_version_number} not found in project {project_id}.")

        content, origin = self._domain.snapshot_for_rollback(target)
        version = self._versions.append(project_id, content, origin)
        logger.info(
            "Rolled back project %d to version %d as new version %d",
            project_id, target_version_number, version.version_number,
        )
        return Result.ok(self.get_history(project_id))

    def seed_version(self, project_id: int, data: dict) -> Result[VersionHistory]:
        """Append a manually supplied entry that has no draft or rollback origin."""
        content = self._domain.build_content(data)
        if not content.is_success:
            return content.propagate()
        version = self._versions.append(project_id, content.value, None)
        logger.info("Seeded version %d in project %d", version.version_number, project_id)
        return Result.ok(self.get_history(project_id))
