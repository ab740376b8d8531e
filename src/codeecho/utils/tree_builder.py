"""TreeNode building, size aggregation and ASCII rendering."""

from operator import attrgetter
from typing import Dict, Iterable, List, Tuple

from ..core.models import Entry, TreeNode
from .path_utils import PathUtils

BRANCH = "├── "
CORNER = "└── "
PIPE = "│   "
BLANK = "    "

_by_name = attrgetter('name')


def format_size(num_bytes: int) -> str:
    """Format a byte count as B, KB or MB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    kb = num_bytes / 1024
    if kb < 1024:
        return f"{kb:.2f} KB"
    return f"{kb / 1024:.2f} MB"


class FileTreeBuilder:
    """Utilities for building and walking TreeNode hierarchies."""

    @staticmethod
    def from_entries(entries: Iterable[Entry]) -> TreeNode:
        """
        Build a hierarchical TreeNode tree from a flat repository listing.

        Directory nodes are synthesized from blob paths only; ``tree``
        entries are ignored, so directories with no blobs beneath them
        never appear. Children are keyed by path, which makes the result
        independent of entry order (apart from the order of ``children``
        lists). Sizes of directories stay 0 until aggregate_sizes runs.

        Args:
            entries: Entries from a recursive tree listing

        Returns:
            Root TreeNode (name "", path "")
        """
        root = TreeNode(name="", path="", type="directory")
        nodes: Dict[str, TreeNode] = {"": root}

        for entry in entries:
            if not entry.is_blob():
                continue

            parts = PathUtils.split(entry.path)
            current = root
            for i, part in enumerate(parts):
                is_leaf = i == len(parts) - 1
                path = PathUtils.child_path(current.path, part)
                child = nodes.get(path)
                if child is None:
                    child = TreeNode(
                        name=part,
                        path=path,
                        type="file" if is_leaf else "directory",
                    )
                    current.children.append(child)
                    nodes[path] = child
                if is_leaf:
                    child.size = entry.size or 0
                current = child

        return root

    @staticmethod
    def aggregate_sizes(tree: TreeNode) -> int:
        """
        Set every directory's size to the sum of its descendant file sizes.

        Post-order walk with an explicit stack. File sizes are left as is,
        so running it again yields the same values.

        Returns:
            Total size of the tree
        """
        stack: List[Tuple[TreeNode, bool]] = [(tree, False)]
        while stack:
            node, children_done = stack.pop()
            if node.is_file():
                continue
            if children_done:
                node.size = sum(child.size for child in node.children)
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in node.children)
        return tree.size

    @staticmethod
    def build(entries: Iterable[Entry]) -> TreeNode:
        """Build the tree and aggregate directory sizes."""
        tree = FileTreeBuilder.from_entries(entries)
        FileTreeBuilder.aggregate_sizes(tree)
        return tree

    @staticmethod
    def render_ascii(tree: TreeNode, show_sizes: bool = False) -> str:
        """
        Render the descendants of ``tree`` as a box-drawing text tree.

        Siblings are sorted by name (codepoint order) at every level.
        Every line, including the last, ends with a newline. The node
        passed in is not itself printed.

        Args:
            tree: Node whose descendants to render
            show_sizes: Append a human-readable size to each line
        """
        lines: List[str] = []
        stack: List[Tuple[TreeNode, str, bool]] = []

        def push_children(node: TreeNode, prefix: str) -> None:
            children = sorted(node.children, key=_by_name)
            last = len(children) - 1
            for i in range(last, -1, -1):
                stack.append((children[i], prefix, i == last))

        push_children(tree, "")
        while stack:
            node, prefix, is_last = stack.pop()
            label = node.name
            if show_sizes:
                label = f"{label} ({format_size(node.size)})"
            lines.append(f"{prefix}{CORNER if is_last else BRANCH}{label}\n")
            push_children(node, prefix + (BLANK if is_last else PIPE))

        return "".join(lines)

    @staticmethod
    def iter_nodes(tree: TreeNode) -> Iterable[TreeNode]:
        """Yield ``tree`` and all its descendants in pre-order."""
        stack = [tree]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))
