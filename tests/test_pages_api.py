"""Tests for the /api/projects/{project_id}/pages and /api/pages endpoints."""

from tests.conftest import PROJECT_ID, page_payload

PAGES_URL = f"/api/projects/{PROJECT_ID}/pages"


def _create(client, **overrides) -> dict:
    resp = client.post(PAGES_URL, json=page_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestPageCRUD:
    """Create -> Read -> Update -> Delete lifecycle."""

    def test_create_page(self, client):
        data = _create(client, title="Home", content="# Home")
        assert data["title"] == "Home"
        assert data["path"] == "/Home"
        assert data["project_id"] == PROJECT_ID
        assert data["current_version"] == 1
        assert data["content"] == "# Home"
        assert len(data["content_hash"]) == 64

    def test_create_under_directory(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        child = _create(client, title="Intro", parent_id=folder["id"])
        assert child["path"] == "/Docs/Intro"
        assert child["parent_id"] == folder["id"]

    def test_create_validates_title(self, client):
        resp = client.post(PAGES_URL, json=page_payload(title="a/b"))
        assert resp.status_code == 422

    def test_create_under_document_returns_400(self, client):
        doc = _create(client, title="Doc")
        resp = client.post(PAGES_URL, json=page_payload(title="Child", parent_id=doc["id"]))
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_get_page(self, client):
        page_id = _create(client)["id"]
        resp = client.get(f"/api/pages/{page_id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == page_id

    def test_get_nonexistent_returns_404(self, client):
        resp = client.get("/api/pages/987654321")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "PAGE_NOT_FOUND"
        assert body["details"]["page_id"] == 987654321

    def test_update_content(self, client):
        page_id = _create(client, content="first")["id"]
        resp = client.put(f"/api/pages/{page_id}", json={"content": "second", "editor_id": 4})
        assert resp.status_code == 200
        data = resp.json()
        assert data["content"] == "second"
        assert data["current_version"] == 2

    def test_unchanged_update_keeps_version(self, client):
        page_id = _create(client, content="same")["id"]
        resp = client.put(f"/api/pages/{page_id}", json={"content": "same"})
        assert resp.json()["current_version"] == 1

    def test_delete_page_with_children_returns_400(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        _create(client, title="Intro", parent_id=folder["id"])

        resp = client.delete(f"/api/pages/{folder['id']}")
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert client.get(f"/api/pages/{folder['id']}").status_code == 200

    def test_delete_leaf_page(self, client):
        page = _create(client, title="Loose")
        resp = client.delete(f"/api/pages/{page['id']}")
        assert resp.status_code == 200
        assert resp.json()["deleted_pages"] == 1
        assert client.get(f"/api/pages/{page['id']}").status_code == 404

    def test_delete_page_recursive(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        _create(client, title="Intro", parent_id=folder["id"])

        resp = client.delete(f"/api/pages/{folder['id']}/recursive")
        assert resp.status_code == 200
        assert resp.json()["deleted_pages"] == 2
        assert client.get(f"/api/pages/{folder['id']}").status_code == 404

    def test_page_ids_are_strings(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        child = _create(client, title="Intro", parent_id=folder["id"])
        assert isinstance(child["id"], str)
        assert isinstance(child["parent_id"], str)
        assert int(child["parent_id"]) == int(folder["id"])

        tree = client.get(PAGES_URL).json()
        assert tree[0]["id"] == folder["id"]
        assert tree[0]["children"][0]["parent_id"] == folder["id"]


class TestStructure:

    def test_move_page(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        page = _create(client, title="Loose")

        resp = client.put(f"/api/pages/{page['id']}/move", json={"new_parent_id": folder["id"]})
        assert resp.status_code == 200
        assert resp.json()["path"] == "/Docs/Loose"

    def test_move_into_descendant_returns_400(self, client):
        top = _create(client, title="Top", page_type="DIRECTORY", content=None)
        sub = _create(client, title="Sub", page_type="DIRECTORY", content=None, parent_id=top["id"])

        resp = client.put(f"/api/pages/{top['id']}/move", json={"new_parent_id": sub["id"]})
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_MOVE"

    def test_copy_page(self, client):
        page = _create(client, title="Spec", content="body")
        resp = client.post(f"/api/pages/{page['id']}/copy", json={})
        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] != page["id"]
        assert data["title"] == "Copy of Spec"
        assert data["current_version"] == 1

    def test_update_sort_order(self, client):
        page = _create(client)
        resp = client.put(f"/api/pages/{page['id']}/sort-order", json={"sort_order": 42})
        assert resp.status_code == 200
        assert resp.json()["sort_order"] == 42


class TestProjectEndpoints:

    def test_tree(self, client):
        folder = _create(client, title="Docs", page_type="DIRECTORY", content=None)
        _create(client, title="Intro", parent_id=folder["id"])

        resp = client.get(PAGES_URL)
        assert resp.status_code == 200
        tree = resp.json()
        assert [node["title"] for node in tree] == ["Docs"]
        assert [child["title"] for child in tree[0]["children"]] == ["Intro"]

    def test_statistics(self, client):
        page_id = _create(client, content="a", creator_id=1)["id"]
        client.put(f"/api/pages/{page_id}", json={"content": "b", "editor_id": 2})

        resp = client.get(f"{PAGES_URL}/statistics")
        assert resp.status_code == 200
        stats = resp.json()
        assert stats["total_pages"] == 1
        assert stats["total_versions"] == 2
        assert stats["contributor_count"] == 2

    def test_delete_project(self, client):
        _create(client, title="One")
        _create(client, title="Two")

        resp = client.delete(PAGES_URL)
        assert resp.status_code == 200
        assert resp.json() == {"deleted_pages": 2, "purged_versions": 0}
        assert client.get(PAGES_URL).json() == []

    def test_search_by_title(self, client):
        _create(client, title="Setup Guide")
        _create(client, title="guide for reviewers")
        _create(client, title="Changelog")

        resp = client.get(f"{PAGES_URL}/search", params={"keyword": "GUIDE", "limit": 1})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 2
        assert body["limit"] == 1
        assert [item["title"] for item in body["items"]] == ["Setup Guide"]

        second = client.get(f"{PAGES_URL}/search", params={"keyword": "guide", "skip": 1, "limit": 1}).json()
        assert [item["title"] for item in second["items"]] == ["guide for reviewers"]

    def test_search_requires_keyword(self, client):
        assert client.get(f"{PAGES_URL}/search").status_code == 422
        resp = client.get(f"{PAGES_URL}/search", params={"keyword": "   "})
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "keyword"

    def test_recently_updated(self, client):
        first = _create(client, title="First")
        second = _create(client, title="Second")

        resp = client.get(f"{PAGES_URL}/recent", params={"limit": 5})
        assert resp.status_code == 200
        assert [page["id"] for page in resp.json()] == [second["id"], first["id"]]

    def test_recently_updated_limit_is_bounded(self, client):
        assert client.get(f"{PAGES_URL}/recent", params={"limit": 0}).status_code == 422
