"""Repository path helpers. Paths are slash-separated with no leading slash."""

from typing import List


class PathUtils:
    """Utilities for consistent repository path handling."""

    @staticmethod
    def split(path: str) -> List[str]:
        """
        Split a repository path into its segments.

        Args:
            path: Slash-separated path, e.g. ``src/utils/helpers.js``

        Returns:
            List of path segments
        """
        return path.split('/')

    @staticmethod
    def child_path(parent_path: str, name: str) -> str:
        """Path of ``name`` under ``parent_path``; the root ("") adds no separator."""
        return f"{parent_path}/{name}" if parent_path else name
