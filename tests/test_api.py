import json

import pytest
from fastapi.testclient import TestClient
from codeecho.api import _token_from_header, create_app
from codeecho.core.exceptions import UpstreamLookupError
from codeecho.core.models import Config

from conftest import FakeSource

AUTH = {"Authorization": "token abc"}


@pytest.fixture
def calls():
    return []


@pytest.fixture
def client(scenario_source, calls):
    def factory(token, config):
        calls.append(token)
        return scenario_source

    return TestClient(create_app(Config(github_token=""), factory))


class TestAuthorization:
    @pytest.mark.parametrize("header,expected", [
        ("token abc", "abc"),
        ("Bearer abc", "abc"),
        ("abc", "abc"),
        ("Basic abc", None),
        ("token ", None),
        ("", None),
        (None, None),
    ])
    def test_token_from_header(self, header, expected):
        assert _token_from_header(header) == expected

    @pytest.mark.parametrize("url", [
        "/api/repos",
        "/api/branches?owner=octo&repo=demo",
        "/api/folderStructure?owner=octo&repo=demo&branch=main",
        "/api/fetchRepo?owner=octo&repo=demo&branch=main",
    ])
    def test_missing_credentials(self, client, calls, url):
        response = client.get(url)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert calls == []


class TestFolderStructure:
    def test_tree(self, client, calls):
        response = client.get("/api/folderStructure?owner=octo&repo=demo&branch=main", headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["path"] == ""
        assert body["type"] == "directory"
        assert body["size"] == 35
        a = next(c for c in body["children"] if c["name"] == "a")
        assert a["size"] == 30
        assert calls == ["abc"]

    def test_bad_branch(self, client):
        response = client.get("/api/folderStructure?owner=octo&repo=demo&branch=nope", headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"error": "Branch not found"}


class TestFetchRepo:
    def test_export(self, client):
        response = client.get("/api/fetchRepo?owner=octo&repo=demo&branch=main", headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["totalTokens"] == 5
        assert "## File: readme.md" in body["text"]
        assert "## File: a/c.png" not in body["text"]

    def test_exclusions(self, client):
        response = client.get(
            "/api/fetchRepo",
            params={"owner": "octo", "repo": "demo", "branch": "main", "exclusions": json.dumps(["a"])},
            headers=AUTH,
        )

        body = response.json()
        assert response.status_code == 200
        assert "## File: a/b.txt" not in body["text"]
        assert body["totalTokens"] == 2

    def test_malformed_exclusions_ignored(self, client):
        response = client.get(
            "/api/fetchRepo",
            params={"owner": "octo", "repo": "demo", "branch": "main", "exclusions": "[not json"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["totalTokens"] == 5

    def test_bad_branch(self, client):
        response = client.get("/api/fetchRepo?owner=octo&repo=demo&branch=nope", headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"error": "Branch not found"}


class TestErrors:
    def test_unexpected_failure_is_generic_500(self, scenario_entries):
        class BrokenSource(FakeSource):
            def list_entries(self, owner, repo, commit_sha):
                raise RuntimeError("connection reset by secret host")

        app = create_app(Config(), lambda token, config: BrokenSource(scenario_entries))
        response = TestClient(app).get("/api/folderStructure?owner=o&repo=r&branch=main", headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    def test_listing_failure_is_400(self, scenario_entries):
        class NoTree(FakeSource):
            def list_entries(self, owner, repo, commit_sha):
                raise UpstreamLookupError("Not Found")

        app = create_app(Config(), lambda token, config: NoTree(scenario_entries))
        response = TestClient(app).get("/api/fetchRepo?owner=o&repo=r&branch=main", headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"error": "Not Found"}


class TestListing:
    def test_repos(self, client):
        response = client.get("/api/repos", headers=AUTH)

        assert response.status_code == 200
        assert response.json()[0]["full_name"] == "octo/demo"

    def test_branches(self, client):
        response = client.get("/api/branches?owner=octo&repo=demo", headers={"Authorization": "Bearer abc"})

        assert response.json() == [{"name": "main"}]
