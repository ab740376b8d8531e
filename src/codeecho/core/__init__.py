"""Core components for codeecho."""

from .models import Config, Entry, TreeNode, FileResult, ExportResult
from .exceptions import CodeEchoError, AuthenticationError, UpstreamLookupError, BlobFetchError
from .file_analyzer import FileAnalyzer
from .tokenizer import TokenCounter

__all__ = [
    "Config",
    "Entry",
    "TreeNode",
    "FileResult",
    "ExportResult",
    "CodeEchoError",
    "AuthenticationError",
    "UpstreamLookupError",
    "BlobFetchError",
    "FileAnalyzer",
    "TokenCounter",
]
