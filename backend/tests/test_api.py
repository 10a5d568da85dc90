"""API tests using FastAPI TestClient."""
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from wiki_authoring.generation.content_generator import GeneratorError

BASE = "/api/wiki/admin/projects"

DRAFT_PAYLOAD = {
    "sections": [{"id": "overview", "title": "Overview", "body": "Hello"}],
    "currentCounters": {"stars": 12},
    "hiddenSections": ["changelog"],
}


@pytest.fixture
def client(app_db, service_factory, generator):
    from wiki_authoring.container import get_wiki_app_service
    from wiki_authoring.main import app

    svc = service_factory(generator, timeout=2.0)
    app.dependency_overrides[get_wiki_app_service] = lambda: svc
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, project_id=1, payload=DRAFT_PAYLOAD):
    resp = client.post(f"{BASE}/{project_id}/drafts", json=payload)
    assert resp.status_code == 201
    return resp.json()


# ------------------------------------------------------------------
# Health
# ------------------------------------------------------------------
def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ------------------------------------------------------------------
# Drafts
# ------------------------------------------------------------------
def test_create_draft(client):
    data = _create(client)
    assert data["projectId"] == 1
    assert data["sections"] == DRAFT_PAYLOAD["sections"]
    assert data["currentCounters"] == {"stars": 12}
    assert data["hiddenSections"] == ["changelog"]
    assert data["sourcePublishedVersionId"] is None
    assert data["createdAt"] == data["updatedAt"]


def test_create_draft_invalid_shape(client):
    resp = client.post(f"{BASE}/1/drafts", json={"sections": "nope"})
    assert resp.status_code == 422
    resp = client.post(f"{BASE}/1/drafts", json={"currentCounters": {"nested": {"x": 1}}})
    assert resp.status_code == 422
    assert client.get(f"{BASE}/1/drafts").json() == []


def test_list_and_get_drafts(client):
    first = _create(client)
    second = _create(client)
    _create(client, project_id=2)

    listed = client.get(f"{BASE}/1/drafts").json()
    assert {d["id"] for d in listed} == {first["id"], second["id"]}

    resp = client.get(f"{BASE}/1/drafts/{first['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == first["id"]


def test_get_missing_draft(client):
    assert client.get(f"{BASE}/1/drafts/999").status_code == 404


def test_update_draft(client):
    draft = _create(client)
    resp = client.put(
        f"{BASE}/1/drafts/{draft['id']}",
        json={"sections": [{"id": "new"}], "currentCounters": {}, "hiddenSections": []},
    )
    assert resp.status_code == 200
    assert resp.json()["sections"] == [{"id": "new"}]
    assert resp.json()["hiddenSections"] == []
    assert resp.json()["updatedAt"] >= draft["updatedAt"]


def test_update_missing_draft(client):
    assert client.put(f"{BASE}/1/drafts/999", json=DRAFT_PAYLOAD).status_code == 404


def test_delete_draft_not_allowed(client):
    draft = _create(client)
    assert client.delete(f"{BASE}/1/drafts/{draft['id']}").status_code == 405
    assert client.get(f"{BASE}/1/drafts/{draft['id']}").status_code == 200


def test_concurrent_updates_last_write_wins(client):
    draft = _create(client)
    a = {"sections": [{"id": "A"}], "currentCounters": {"who": "A"}, "hiddenSections": ["A"]}
    b = {"sections": [{"id": "B"}], "currentCounters": {"who": "B"}, "hiddenSections": ["B"]}

    with ThreadPoolExecutor(max_workers=2) as pool:
        codes = list(pool.map(lambda p: client.put(f"{BASE}/1/drafts/{draft['id']}", json=p).status_code, [a, b]))

    assert codes == [200, 200]
    final = client.get(f"{BASE}/1/drafts/{draft['id']}").json()
    stored = {k: final[k] for k in ("sections", "currentCounters", "hiddenSections")}
    assert stored in (a, b)


# ------------------------------------------------------------------
# Regenerate
# ------------------------------------------------------------------
def test_regenerate_draft(client, generator):
    draft = _create(client)
    resp = client.post(f"{BASE}/1/drafts/{draft['id']}/regenerate", json=DRAFT_PAYLOAD)
    assert resp.status_code == 200
    assert resp.json()["sections"] == generator.result.sections
    assert resp.json()["currentCounters"] == generator.result.counters


def test_regenerate_failure_reports_and_keeps_draft(client, generator):
    generator.error = GeneratorError("model overloaded")
    draft = _create(client)

    resp = client.post(f"{BASE}/1/drafts/{draft['id']}/regenerate", json=DRAFT_PAYLOAD)

    assert resp.status_code == 502
    assert "model overloaded" in resp.json()["detail"]
    assert client.get(f"{BASE}/1/drafts/{draft['id']}").json() == draft


def test_regenerate_missing_draft(client):
    assert client.post(f"{BASE}/1/drafts/999/regenerate", json=DRAFT_PAYLOAD).status_code == 404


# ------------------------------------------------------------------
# Publish / rollback / history
# ------------------------------------------------------------------
def test_empty_history(client):
    resp = client.get(f"{BASE}/1/versions")
    assert resp.status_code == 200
    assert resp.json() == {"projectId": 1, "latestVersionNumber": None, "versions": []}


def test_publish_and_rollback_flow(client):
    seeded = client.post(f"{BASE}/1/versions", json={"sections": [{"id": "seed"}]})
    assert seeded.status_code == 201
    seed_version_id = seeded.json()["versions"][0]["versionId"]
    draft = _create(client)

    published = client.post(f"{BASE}/1/publish", json={"draftId": draft["id"]})
    assert published.status_code == 200
    history = published.json()
    assert history["projectId"] == 1
    assert history["latestVersionNumber"] == 2
    assert [v["versionNumber"] for v in history["versions"]] == [2, 1]
    assert history["versions"][0]["publishedFromDraftId"] == draft["id"]
    assert history["versions"][0]["rolledBackFromVersionId"] is None
    assert history["versions"][1]["publishedFromDraftId"] is None

    rolled = client.post(f"{BASE}/1/rollback", json={"targetVersionNumber": 1})
    assert rolled.status_code == 200
    history = rolled.json()
    assert history["latestVersionNumber"] == 3
    assert [v["versionNumber"] for v in history["versions"]] == [3, 2, 1]
    assert history["versions"][0]["rolledBackFromVersionId"] == seed_version_id
    assert history["versions"][0]["publishedFromDraftId"] is None

    v3 = client.get(f"{BASE}/1/versions/3").json()
    assert v3["sections"] == [{"id": "seed"}]
    assert client.get(f"{BASE}/1/versions").json() == history


def test_publish_records_provenance_on_draft(client):
    draft = _create(client)
    history = client.post(f"{BASE}/1/publish", json={"draftId": draft["id"]}).json()
    stored = client.get(f"{BASE}/1/drafts/{draft['id']}").json()
    assert stored["sourcePublishedVersionId"] == history["versions"][0]["versionId"]


def test_publish_missing_draft(client):
    assert client.post(f"{BASE}/1/publish", json={"draftId": 999}).status_code == 404


def test_rollback_missing_version(client):
    assert client.post(f"{BASE}/1/rollback", json={"targetVersionNumber": 1}).status_code == 404


def test_get_missing_version(client):
    assert client.get(f"{BASE}/1/versions/1").status_code == 404


def test_published_content_survives_draft_edits(client):
    draft = _create(client)
    client.post(f"{BASE}/1/publish", json={"draftId": draft["id"]})
    client.put(f"{BASE}/1/drafts/{draft['id']}", json={"sections": [], "currentCounters": {}, "hiddenSections": []})

    version = client.get(f"{BASE}/1/versions/1").json()
    assert version["sections"] == DRAFT_PAYLOAD["sections"]
    assert version["hiddenSections"] == ["changelog"]


def test_create_draft_from_version_and_source_reference(client):
    draft = _create(client)
    history = client.post(f"{BASE}/1/publish", json={"draftId": draft["id"]}).json()
    version_id = history["versions"][0]["versionId"]

    cloned = client.post(f"{BASE}/1/versions/1/drafts")
    assert cloned.status_code == 201
    assert cloned.json()["sections"] == DRAFT_PAYLOAD["sections"]
    assert cloned.json()["sourcePublishedVersionId"] == version_id

    explicit = client.post(f"{BASE}/1/drafts", json={**DRAFT_PAYLOAD, "sourcePublishedVersionId": version_id})
    assert explicit.status_code == 201
    assert explicit.json()["sourcePublishedVersionId"] == version_id

    wrong_project = client.post(f"{BASE}/2/drafts", json={**DRAFT_PAYLOAD, "sourcePublishedVersionId": version_id})
    assert wrong_project.status_code == 404


def test_concurrent_publishes_get_distinct_numbers(client):
    drafts = [_create(client) for _ in range(6)]

    with ThreadPoolExecutor(max_workers=6) as pool:
        responses = list(pool.map(lambda d: client.post(f"{BASE}/1/publish", json={"draftId": d["id"]}), drafts))

    assert all(r.status_code == 200 for r in responses)
    history = client.get(f"{BASE}/1/versions").json()
    assert history["latestVersionNumber"] == 6
    assert [v["versionNumber"] for v in history["versions"]] == [6, 5, 4, 3, 2, 1]
    assert {v["publishedFromDraftId"] for v in history["versions"]} == {d["id"] for d in drafts}


def test_list_projects(client):
    _create(client, project_id=3)
    client.post(f"{BASE}/4/versions", json={})
    projects = client.get(BASE).json()
    assert {"projectId": 3, "draftCount": 1, "latestVersionNumber": None} in projects
    assert {"projectId": 4, "draftCount": 0, "latestVersionNumber": 1} in projects


def test_non_finite_numbers_are_rejected(client):
    headers = {"Content-Type": "application/json"}
    resp = client.post(f"{BASE}/1/drafts", content='{"currentCounters": {"x": NaN}}', headers=headers)
    assert resp.status_code == 422

    resp = client.post(f"{BASE}/1/drafts", content='{"sections": [{"id": "s", "weight": Infinity}]}', headers=headers)
    assert resp.status_code == 422

    assert client.get(f"{BASE}/1/drafts").json() == []
