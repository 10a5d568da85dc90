"""Wiki authoring API — drafts, publish, rollback and version history endpoints."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from wiki_authoring.application.wiki_app_service import WikiAuthoringAppService
from wiki_authoring.container import get_wiki_app_service
from wiki_authoring.domain.common.result import ErrorKind, Result
from wiki_authoring.domain.wiki.models import (
    DraftContent,
    ProjectSummary,
    PublishedVersion,
    VersionHistory,
    WikiDraft,
)

router = APIRouter(prefix="/api/wiki/admin", tags=["wiki-admin"])


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class DraftContentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sections: List[Dict[str, Any]] = []
    counters: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("currentCounters", "counters"),
    )
    hidden_section_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("hiddenSections", "hiddenSectionIds", "hidden_section_ids"),
    )
    # Only honoured on create; provenance is not a content field.
    source_published_version_id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("sourcePublishedVersionId", "source_published_version_id"),
    )


class PublishBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    draft_id: int = Field(validation_alias=AliasChoices("draftId", "draft_id"))


class RollbackBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_version_number: int = Field(
        validation_alias=AliasChoices("targetVersionNumber", "target_version_number"),
    )


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _serialize_content(c: DraftContent) -> dict:
    return {
        "sections": c.sections,
        "currentCounters": c.counters,
        "hiddenSections": c.hidden_section_ids,
    }


def _serialize_draft(d: WikiDraft) -> dict:
    return {
        "id": d.id,
        "projectId": d.project_id,
        **_serialize_content(d.content),
        "sourcePublishedVersionId": d.source_published_version_id,
        "createdAt": d.created_at,
        "updatedAt": d.updated_at,
    }


def _serialize_version_item(v: PublishedVersion) -> dict:
    return {
        "versionId": v.id,
        "versionNumber": v.version_number,
        "publishedFromDraftId": v.published_from_draft_id,
        "rolledBackFromVersionId": v.rolled_back_from_version_id,
        "publishedAt": v.published_at,
    }


def _serialize_history(h: VersionHistory) -> dict:
    return {
        "projectId": h.project_id,
        "latestVersionNumber": h.latest_version_number,
        "versions": [_serialize_version_item(v) for v in h.versions],
    }


def _serialize_project(p: ProjectSummary) -> dict:
    return {
        "projectId": p.project_id,
        "draftCount": p.draft_count,
        "latestVersionNumber": p.latest_version_number,
    }


# ------------------------------------------------------------------
# Error mapping
# ------------------------------------------------------------------
_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_CONTENT: 422,
    ErrorKind.GENERATOR_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNSUPPORTED: status.HTTP_405_METHOD_NOT_ALLOWED,
}


def _unwrap(result: Result):
    if not result.is_success:
        raise HTTPException(
            status_code=_STATUS_BY_KIND.get(result.error_kind, status.HTTP_400_BAD_REQUEST),
            detail=result.error,
        )
    return result.value


# ------------------------------------------------------------------
# Projects
# ------------------------------------------------------------------
@router.get("/projects")
def list_projects(svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return [_serialize_project(p) for p in svc.list_projects()]


# ------------------------------------------------------------------
# Drafts
# ------------------------------------------------------------------
@router.get("/projects/{project_id}/drafts")
def list_drafts(project_id: int, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return [_serialize_draft(d) for d in svc.list_drafts(project_id)]


@router.post("/projects/{project_id}/drafts", status_code=status.HTTP_201_CREATED)
def create_draft(
    project_id: int,
    body: DraftContentBody,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    data = body.model_dump()
    source = data.pop("source_published_version_id")
    return _serialize_draft(_unwrap(svc.create_draft(project_id, data, source)))


@router.get("/projects/{project_id}/drafts/{draft_id}")
def get_draft(project_id: int, draft_id: int, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return _serialize_draft(_unwrap(svc.get_draft(project_id, draft_id)))


@router.put("/projects/{project_id}/drafts/{draft_id}")
def update_draft(
    project_id: int,
    draft_id: int,
    body: DraftContentBody,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    data = body.model_dump(exclude={"source_published_version_id"})
    return _serialize_draft(_unwrap(svc.update_draft(project_id, draft_id, data)))


@router.delete("/projects/{project_id}/drafts/{draft_id}")
def delete_draft(project_id: int, draft_id: int, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    _unwrap(svc.delete_draft(project_id, draft_id))


@router.post("/projects/{project_id}/drafts/{draft_id}/regenerate")
def regenerate_draft(
    project_id: int,
    draft_id: int,
    body: DraftContentBody,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    data = body.model_dump(exclude={"source_published_version_id"})
    return _serialize_draft(_unwrap(svc.regenerate_draft(project_id, draft_id, data)))


# ------------------------------------------------------------------
# Publish / rollback
# ------------------------------------------------------------------
@router.post("/projects/{project_id}/publish")
def publish(project_id: int, body: PublishBody, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return _serialize_history(_unwrap(svc.publish(project_id, body.draft_id)))


@router.post("/projects/{project_id}/rollback")
def rollback(project_id: int, body: RollbackBody, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return _serialize_history(_unwrap(svc.rollback(project_id, body.target_version_number)))


# ------------------------------------------------------------------
# Version history
# ------------------------------------------------------------------
@router.get("/projects/{project_id}/versions")
def get_history(project_id: int, svc: WikiAuthoringAppService = Depends(get_wiki_app_service)):
    return _serialize_history(svc.get_history(project_id))


@router.post("/projects/{project_id}/versions", status_code=status.HTTP_201_CREATED)
def seed_version(
    project_id: int,
    body: DraftContentBody,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    data = body.model_dump(exclude={"source_published_version_id"})
    return _serialize_history(_unwrap(svc.seed_version(project_id, data)))


@router.get("/projects/{project_id}/versions/{version_number}")
def get_version(
    project_id: int,
    version_number: int,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    version = _unwrap(svc.get_version(project_id, version_number))
    return {**_serialize_version_item(version), **_serialize_content(version.content)}


@router.post("/projects/{project_id}/versions/{version_number}/drafts", status_code=status.HTTP_201_CREATED)
def create_draft_from_version(
    project_id: int,
    version_number: int,
    svc: WikiAuthoringAppService = Depends(get_wiki_app_service),
):
    return _serialize_draft(_unwrap(svc.create_draft_from_version(project_id, version_number)))
