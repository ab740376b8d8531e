"""GitHub repository source implementation."""
import asyncio
import logging
from itertools import islice
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from ..core.exceptions import AuthenticationError, BlobFetchError, UpstreamLookupError
from ..core.models import Config, Entry, FileResult
from .base import ProgressCallback, RepositorySource

logger = logging.getLogger(__name__)


def _github_message(error: GithubException) -> str:
    """The ``message`` field of a GitHub error payload."""
    data = error.data
    if isinstance(data, dict) and data.get('message'):
        return str(data['message'])
    return f"GitHub API error ({error.status})"


class AsyncGitHubClient:
    """Async client for concurrent blob fetches with bounded parallelism."""

    def __init__(self, token: str, owner: str, repo: str, config: Config):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.semaphore: Optional[asyncio.Semaphore] = None

    async def __aenter__(self):
        """Async context manager entry with session setup."""
        headers = {
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'codeecho'
        }
        limit = max(1, self.config.fetch_concurrency)
        self.semaphore = asyncio.Semaphore(limit)
        self.session = aiohttp.ClientSession(
            headers=headers,
            connector=aiohttp.TCPConnector(limit=limit),
            timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit with guaranteed cleanup."""
        if self.session and not self.session.closed:
            await self.session.close()

    def blob_url(self, entry: Entry) -> str:
        base = self.config.api_base_url.rstrip('/')
        return f"{base}/repos/{self.owner}/{self.repo}/git/blobs/{entry.content_ref}"

    async def fetch_blob(self, entry: Entry) -> Dict[str, Any]:
        """
        Fetch a blob payload.

        Raises:
            BlobFetchError: On a non-200 status, a transport error or a malformed body.
        """
        async with self.semaphore:
            try:
                async with self.session.get(self.blob_url(entry)) as response:
                    if response.status != 200:
                        raise BlobFetchError(path=entry.path, message=f"HTTP {response.status}")
                    return await response.json()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                safe_error = str(e).replace(self.token, "[REDACTED]") if self.token else str(e)
                raise BlobFetchError(path=entry.path, message=f"Network error: {safe_error}") from e
            except ValueError as e:
                raise BlobFetchError(path=entry.path, message="Invalid JSON payload") from e


class GitHubSource(RepositorySource):
    """Repository source backed by the GitHub REST API."""

    def __init__(self, token: str, config: Config):
        """Initialize the GitHub client for one request's credentials."""
        super().__init__(config)

        if not token:
            raise AuthenticationError()

        self.token = token
        self.github = Github(
            auth=Auth.Token(token),
            base_url=config.api_base_url,
            timeout=config.request_timeout,
        )
        self._repos: Dict[str, Repository] = {}

    def _get_repo(self, owner: str, repo: str) -> Repository:
        full_name = f"{owner}/{repo}"
        if full_name not in self._repos:
            self._repos[full_name] = self.github.get_repo(full_name, lazy=True)
        return self._repos[full_name]

    def list_repositories(self) -> List[Dict[str, Any]]:
        """List the first page of the authenticated user's repositories."""
        try:
            repos = islice(self.github.get_user().get_repos(), self.config.repo_list_limit)
            return [
                {
                    'id': r.id,
                    'name': r.name,
                    'full_name': r.full_name,
                    'owner': r.owner.login,
                }
                for r in repos
            ]
        except GithubException as e:
            raise UpstreamLookupError(_github_message(e)) from e

    def list_branches(self, owner: str, repo: str) -> List[str]:
        """List branch names."""
        try:
            return [b.name for b in self._get_repo(owner, repo).get_branches()]
        except GithubException as e:
            raise UpstreamLookupError(_github_message(e)) from e

    def resolve_branch(self, owner: str, repo: str, branch: str) -> str:
        """Resolve a branch to its head commit SHA."""
        try:
            sha = self._get_repo(owner, repo).get_branch(branch).commit.sha
        except GithubException as e:
            raise UpstreamLookupError(_github_message(e)) from e
        logger.debug(f"Resolved {owner}/{repo}@{branch} to {sha}")
        return sha

    def list_entries(self, owner: str, repo: str, commit_sha: str) -> List[Entry]:
        """List the commit's tree recursively."""
        try:
            tree = self._get_repo(owner, repo).get_git_tree(commit_sha, recursive=True)
            return [
                Entry(
                    path=element.path,
                    kind=element.type,
                    size=element.size or 0,
                    content_ref=element.sha,
                )
                for element in tree.tree
            ]
        except GithubException as e:
            raise UpstreamLookupError(_github_message(e)) from e

    def fetch_blob(self, owner: str, repo: str, entry: Entry) -> Dict[str, Any]:
        """Fetch a blob payload through the git data API."""
        try:
            blob = self._get_repo(owner, repo).get_git_blob(entry.content_ref)
        except (GithubException, requests.exceptions.RequestException) as e:
            safe_error = self._sanitize_error(str(e), [self.token])
            raise BlobFetchError(path=entry.path, message=safe_error) from e
        return {'encoding': blob.encoding, 'content': blob.content}

    def fetch_files(
        self,
        owner: str,
        repo: str,
        entries: Sequence[Entry],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[FileResult]:
        """
        Fetch blobs, concurrently when ``fetch_concurrency`` is above 1.

        Results always come back in the order of ``entries``.
        """
        if self.config.fetch_concurrency <= 1 or len(entries) <= 1:
            return super().fetch_files(owner, repo, entries, progress_callback)
        return asyncio.run(self._fetch_files_async(owner, repo, entries, progress_callback))

    async def _fetch_files_async(
        self,
        owner: str,
        repo: str,
        entries: Sequence[Entry],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[FileResult]:
        completed = 0
        total = len(entries)

        async with AsyncGitHubClient(self.token, owner, repo, self.config) as client:

            async def fetch_one(entry: Entry) -> FileResult:
                nonlocal completed
                try:
                    payload = await client.fetch_blob(entry)
                except BlobFetchError as e:
                    result = FileResult(entry.path, error=e.message)
                else:
                    result = self._to_file_result(entry, payload)
                if not result.success:
                    logger.debug(f"Skipping {entry.path}: {result.error}")
                completed += 1
                if progress_callback:
                    progress_callback(completed, total)
                return result

            # gather keeps the input order
            return list(await asyncio.gather(*(fetch_one(e) for e in entries)))
