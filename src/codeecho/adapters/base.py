"""
Base repository source interface.

This module defines the abstract interface that every repository source
implements: branch resolution, recursive tree listing and blob retrieval.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..core.exceptions import BlobFetchError
from ..core.file_analyzer import FileAnalyzer
from ..core.models import Config, Entry, FileResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class RepositorySource(ABC):
    """
    Abstract base class for repository sources.

    Upstream lookup failures raise UpstreamLookupError. Per-blob failures
    raise BlobFetchError, which fetch_file turns into a failed FileResult.
    """

    def __init__(self, config: Config):
        """Initialize source with configuration."""
        self.config = config
        self.file_analyzer = FileAnalyzer(config)

    @abstractmethod
    def list_repositories(self) -> List[Dict[str, Any]]:
        """
        List repositories visible to the current credentials.

        Returns:
            Dicts with ``id``, ``name``, ``full_name`` and ``owner``.
        """
        pass

    @abstractmethod
    def list_branches(self, owner: str, repo: str) -> List[str]:
        """List branch names of a repository."""
        pass

    @abstractmethod
    def resolve_branch(self, owner: str, repo: str, branch: str) -> str:
        """
        Resolve a branch name to the SHA of its head commit.

        Raises:
            UpstreamLookupError: If the repository or branch is unknown.
        """
        pass

    @abstractmethod
    def list_entries(self, owner: str, repo: str, commit_sha: str) -> List[Entry]:
        """
        Recursively list every blob and tree object of a commit.

        Returns:
            Entries in the order the source lists them.

        Raises:
            UpstreamLookupError: If the listing fails.
        """
        pass

    @abstractmethod
    def fetch_blob(self, owner: str, repo: str, entry: Entry) -> Dict[str, Any]:
        """
        Retrieve the raw payload of a blob.

        Returns:
            The upstream payload, expected to carry ``encoding`` and ``content``.

        Raises:
            BlobFetchError: If the request fails.
        """
        pass

    def fetch_file(self, owner: str, repo: str, entry: Entry) -> FileResult:
        """Fetch and decode one blob, never raising for per-file problems."""
        try:
            payload = self.fetch_blob(owner, repo, entry)
        except BlobFetchError as e:
            return FileResult(entry.path, error=e.message)
        return self._to_file_result(entry, payload)

    def _to_file_result(self, entry: Entry, payload: Any) -> FileResult:
        content = self.file_analyzer.decode_blob(payload)
        if content is None:
            return FileResult(entry.path, error="Not a base64 text payload")

        return FileResult(
            entry.path,
            content=content,
            tokens=self.file_analyzer.count_tokens(content),
        )

    def fetch_files(
        self,
        owner: str,
        repo: str,
        entries: Sequence[Entry],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[FileResult]:
        """
        Fetch blobs one at a time in the given order.

        Returns:
            One FileResult per entry, in the same order.
        """
        results = []
        total = len(entries)
        for i, entry in enumerate(entries, start=1):
            result = self.fetch_file(owner, repo, entry)
            if not result.success:
                logger.debug(f"Skipping {entry.path}: {result.error}")
            results.append(result)
            if progress_callback:
                progress_callback(i, total)
        return results

    def _sanitize_error(self, error: str, sensitive_data: Optional[List[str]] = None) -> str:
        """Remove sensitive data from error messages."""
        if not sensitive_data:
            return error

        sanitized = error
        for sensitive in sensitive_data:
            if sensitive:
                sanitized = sanitized.replace(str(sensitive), "[REDACTED]")
        return sanitized
