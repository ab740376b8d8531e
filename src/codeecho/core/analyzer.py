"""Repository aggregation orchestrator."""
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..adapters.base import ProgressCallback, RepositorySource
from ..utils.file_filter import ExclusionFilter
from ..utils.tree_builder import FileTreeBuilder
from .assembler import DocumentAssembler
from .models import Config, Entry, ExportResult, FileResult, TreeNode

logger = logging.getLogger(__name__)


class RepositoryAggregator:
    """
    Turns one repository snapshot into a folder tree or an export document.

    Every call resolves the branch and lists the tree afresh; nothing is
    cached between calls.
    """

    def __init__(self, source: RepositorySource, config: Optional[Config] = None):
        """Initialize aggregator with a repository source."""
        self.source = source
        self.config = config or source.config

    def repositories(self) -> List[Dict[str, Any]]:
        return self.source.list_repositories()

    def branches(self, owner: str, repo: str) -> List[str]:
        return self.source.list_branches(owner, repo)

    def list_entries(self, owner: str, repo: str, branch: str) -> List[Entry]:
        """Resolve ``branch`` and list its tree recursively."""
        commit_sha = self.source.resolve_branch(owner, repo, branch)
        entries = self.source.list_entries(owner, repo, commit_sha)
        logger.info(f"Listed {len(entries)} entries for {owner}/{repo}@{branch}")
        return entries

    def folder_structure(self, owner: str, repo: str, branch: str) -> TreeNode:
        """
        Build the size-annotated folder tree of a branch.

        Raises:
            UpstreamLookupError: If the branch or tree lookup fails.
        """
        return FileTreeBuilder.build(self.list_entries(owner, repo, branch))

    def export(
        self,
        owner: str,
        repo: str,
        branch: str,
        exclusions: Iterable[str] = (),
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExportResult:
        """
        Flatten a branch into a single text document.

        The folder tree covers the whole snapshot. File contents are
        fetched for every blob that is neither binary nor excluded, in
        listing order; files that cannot be fetched or decoded are left
        out without failing the export.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch name
            exclusions: Excluded path prefixes
            progress_callback: Called with (completed, total) after each fetch

        Returns:
            ExportResult with the document and its estimated token total
        """
        entries = self.list_entries(owner, repo, branch)
        tree_text = FileTreeBuilder.render_ascii(FileTreeBuilder.from_entries(entries))

        exclusion_filter = ExclusionFilter(exclusions)
        analyzer = self.source.file_analyzer
        to_fetch: List[Entry] = []
        skipped: List[FileResult] = []

        for entry in entries:
            if not entry.is_blob():
                continue
            if analyzer.is_binary_file(entry.path):
                skipped.append(FileResult(entry.path, error="Binary file"))
            elif exclusion_filter.is_excluded(entry.path):
                skipped.append(FileResult(entry.path, error="Excluded"))
            else:
                to_fetch.append(entry)

        logger.info(f"Fetching {len(to_fetch)} files ({len(skipped)} skipped up front)")
        results = self.source.fetch_files(owner, repo, to_fetch, progress_callback)

        assembler = DocumentAssembler(owner, repo, branch)
        export = assembler.assemble(tree_text, results)
        export.skipped = [(r.path, r.error) for r in skipped] + export.skipped
        return export
