import threading

import pytest

from wiki_authoring.core import config
from wiki_authoring.domain.wiki.models import DraftContent
from wiki_authoring.generation.content_generator import ContentGenerator
from wiki_authoring.persistence.db import init_db
from wiki_authoring.persistence.repositories.sqlite.sqlite_draft_repository import SqliteDraftRepository
from wiki_authoring.persistence.repositories.sqlite.sqlite_version_log_repository import (
    SqliteVersionLogRepository,
)
from wiki_authoring.application.wiki_app_service import WikiAuthoringAppService


class FakeGenerator(ContentGenerator):
    """Returns a fixed result (or raises), recording the seeds it was given."""

    def __init__(self, result=None, error=None, delay_event=None):
        self.result = result
        self.error = error
        self.delay_event = delay_event
        self.seeds = []

    def generate(self, project_id, seed):
        self.seeds.append((project_id, seed))
        if self.delay_event is not None:
            self.delay_event.wait(5)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "wiki.db")
    init_db(path)
    return path


@pytest.fixture
def draft_repo(db_path):
    return SqliteDraftRepository(db_path)


@pytest.fixture
def version_repo(db_path):
    return SqliteVersionLogRepository(db_path)


@pytest.fixture
def generator():
    return FakeGenerator(
        result=DraftContent(
            sections=[{"id": "overview", "body": "regenerated"}],
            counters={"stars": 10},
            hidden_section_ids=[],
        )
    )


@pytest.fixture
def service(draft_repo, version_repo, generator):
    return WikiAuthoringAppService(draft_repo, version_repo, generator=generator, generator_timeout=2.0)


@pytest.fixture
def release():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def app_db(tmp_path, monkeypatch):
    """Point the app's default connection factory at a fresh database file."""
    path = str(tmp_path / "app.db")
    monkeypatch.setattr(config, "DATABASE_PATH", path)
    from wiki_authoring import container
    container.get_draft_repo.cache_clear()
    container.get_version_log_repo.cache_clear()
    container.get_content_generator.cache_clear()
    container.get_wiki_app_service.cache_clear()
    init_db()
    yield path
    container.get_wiki_app_service.cache_clear()


@pytest.fixture
def service_factory(draft_repo, version_repo):
    def make(generator, timeout=None):
        return WikiAuthoringAppService(draft_repo, version_repo, generator=generator, generator_timeout=timeout)
    return make


@pytest.fixture
def slow_generator(release):
    """Blocks until the test finishes, then returns content nobody should see."""
    return FakeGenerator(result=DraftContent(sections=[{"id": "late"}]), delay_event=release)
