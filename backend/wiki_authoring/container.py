"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from wiki_authoring.core import config
from wiki_authoring.application.wiki_app_service import WikiAuthoringAppService
from wiki_authoring.generation.content_generator import OpenRouterContentGenerator
from wiki_authoring.persistence.repositories.sqlite.sqlite_draft_repository import SqliteDraftRepository
from wiki_authoring.persistence.repositories.sqlite.sqlite_version_log_repository import (
    SqliteVersionLogRepository,
)


@lru_cache(maxsize=1)
def get_draft_repo() -> SqliteDraftRepository:
    return SqliteDraftRepository()


@lru_cache(maxsize=1)
def get_version_log_repo() -> SqliteVersionLogRepository:
    return SqliteVersionLogRepository()


@lru_cache(maxsize=1)
def get_content_generator() -> OpenRouterContentGenerator:
    return OpenRouterContentGenerator(
        url=config.CONTENT_GENERATOR_URL,
        api_key=config.CONTENT_GENERATOR_API_KEY,
        model=config.CONTENT_GENERATOR_MODEL,
        timeout=config.CONTENT_GENERATOR_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_wiki_app_service() -> WikiAuthoringAppService:
    return WikiAuthoringAppService(
        drafts=get_draft_repo(),
        versions=get_version_log_repo(),
        generator=get_content_generator(),
        generator_timeout=config.CONTENT_GENERATOR_TIMEOUT_SECONDS,
    )
