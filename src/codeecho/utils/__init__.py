"""Utility modules for codeecho."""

from .file_filter import ExclusionFilter
from .path_utils import PathUtils
from .tree_builder import FileTreeBuilder, format_size

__all__ = ["ExclusionFilter", "PathUtils", "FileTreeBuilder", "format_size"]
