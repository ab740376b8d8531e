"""Assembly of the flattened export document."""

from typing import Iterable

from .models import ExportResult, FileResult


class DocumentAssembler:
    """Builds the markdown export from a rendered tree and fetched files."""

    def __init__(self, owner: str, repo: str, branch: str):
        self.owner = owner
        self.repo = repo
        self.branch = branch

    def format_header(self, tree_text: str) -> str:
        """Repository/branch header followed by the fenced folder tree."""
        return (
            f"# Repository: {self.owner}/{self.repo}\n"
            f"**Branch:** {self.branch}\n\n"
            f"## Folder Structure:\n```\n{tree_text}\n```\n\n"
        )

    @staticmethod
    def format_file(path: str, content: str) -> str:
        return f"## File: {path}\n```\n{content}\n```\n\n"

    def assemble(self, tree_text: str, results: Iterable[FileResult]) -> ExportResult:
        """
        Concatenate the header and every successful file block.

        Failed results are left out of the text and listed in ``skipped``.
        The token total covers file contents only.
        """
        parts = [self.format_header(tree_text)]
        export = ExportResult(text="")

        for result in results:
            if not result.success:
                export.skipped.append((result.path, result.error))
                continue
            parts.append(self.format_file(result.path, result.content))
            export.files.append(result.path)
            export.total_tokens += result.tokens

        export.text = "".join(parts)
        return export
