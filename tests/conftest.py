import base64
from typing import Any, Dict, List, Optional

import pytest

from codeecho.adapters.base import RepositorySource
from codeecho.core.exceptions import BlobFetchError, UpstreamLookupError
from codeecho.core.models import Config, Entry


def b64_payload(text: str) -> Dict[str, str]:
    """Blob payload as the git data API returns it."""
    return {'encoding': 'base64', 'content': base64.b64encode(text.encode('utf-8')).decode('ascii')}


class FakeSource(RepositorySource):
    """In-memory repository source for engine tests."""

    def __init__(
        self,
        entries: List[Entry],
        payloads: Optional[Dict[str, Any]] = None,
        config: Optional[Config] = None,
        branches: Optional[Dict[str, str]] = None,
    ):
        super().__init__(config or Config(github_token='test-token'))
        self.entries = entries
        self.payloads = payloads or {}
        self.branches = branches or {'main': 'abc123'}
        self.fetched: List[str] = []

    def list_repositories(self) -> List[Dict[str, Any]]:
        return [{'id': 1, 'name': 'demo', 'full_name': 'octo/demo', 'owner': 'octo'}]

    def list_branches(self, owner: str, repo: str) -> List[str]:
        return list(self.branches)

    def resolve_branch(self, owner: str, repo: str, branch: str) -> str:
        if branch not in self.branches:
            raise UpstreamLookupError("Branch not found")
        return self.branches[branch]

    def list_entries(self, owner: str, repo: str, commit_sha: str) -> List[Entry]:
        return list(self.entries)

    def fetch_blob(self, owner: str, repo: str, entry: Entry) -> Dict[str, Any]:
        self.fetched.append(entry.path)
        payload = self.payloads.get(entry.path)
        if isinstance(payload, Exception):
            raise BlobFetchError(path=entry.path, message=str(payload))
        if payload is None:
            raise BlobFetchError(path=entry.path, message="Not Found")
        return payload


@pytest.fixture
def scenario_entries():
    """Three blobs, one of them binary, plus a tree marker."""
    return [
        Entry(path="a", kind="tree"),
        Entry(path="a/b.txt", kind="blob", size=10, content_ref="sha-b"),
        Entry(path="a/c.png", kind="blob", size=20, content_ref="sha-c"),
        Entry(path="readme.md", kind="blob", size=5, content_ref="sha-r"),
    ]


@pytest.fixture
def scenario_source(scenario_entries):
    return FakeSource(
        scenario_entries,
        payloads={
            "a/b.txt": b64_payload("0123456789"),
            "a/c.png": b64_payload("not really a png"),
            "readme.md": b64_payload("hello"),
        },
    )


EXPECTED_SCENARIO_TEXT = (
    "# Repository: octo/demo\n"
    "**Branch:** main\n\n"
    "## Folder Structure:\n"
    "```\n"
    "├── a\n"
    "│   ├── b.txt\n"
    "│   └── c.png\n"
    "└── readme.md\n"
    "\n```\n\n"
    "## File: a/b.txt\n```\n0123456789\n```\n\n"
    "## File: readme.md\n```\nhello\n```\n\n"
)
