"""
Exclusion filtering for codeecho exports.

A path is excluded when it starts with any member of the exclusion set.
The test is a raw string prefix, not a path-segment match: excluding
``src/utils`` also excludes ``src/utils2/other.js``.
"""

import json
import logging
from typing import AbstractSet, FrozenSet, Iterable, List, Optional

from ..core.models import TreeNode
from .tree_builder import FileTreeBuilder

logger = logging.getLogger(__name__)


class ExclusionFilter:
    """Decides which repository paths are included in an export."""

    def __init__(self, exclusions: Iterable[str] = ()):
        self.exclusions: FrozenSet[str] = frozenset(exclusions)
        self._prefixes = tuple(self.exclusions)

    def is_excluded(self, path: str) -> bool:
        """
        Check if a path equals or starts with an excluded path.

        Args:
            path: Repository path of a file.

        Returns:
            True if the path should be left out of the export.
        """
        return path.startswith(self._prefixes)

    @staticmethod
    def parse(raw: Optional[str]) -> List[str]:
        """
        Parse a JSON-encoded array of excluded paths.

        Malformed JSON or a non-array value gives an empty list; members
        that are not strings are dropped.
        """
        if not raw:
            return []

        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Error parsing exclusions: {e}")
            return []

        if not isinstance(value, list):
            logger.warning(f"Ignoring exclusions that are not a JSON array: {raw!r}")
            return []

        return [item for item in value if isinstance(item, str)]

    @staticmethod
    def descendant_paths(node: TreeNode) -> List[str]:
        """The node's own path followed by every descendant path, pre-order."""
        return [n.path for n in FileTreeBuilder.iter_nodes(node)]

    @staticmethod
    def toggle(node: TreeNode, exclusions: AbstractSet[str]) -> FrozenSet[str]:
        """
        Flip the inclusion state of a node and its whole subtree.

        If the node is currently included (its path is not in the set),
        the node and all descendants are added to the set; otherwise they
        are all removed. The given set is not modified.

        Returns:
            The new exclusion set
        """
        paths = ExclusionFilter.descendant_paths(node)
        if node.path not in exclusions:
            return frozenset(exclusions).union(paths)
        return frozenset(exclusions).difference(paths)
