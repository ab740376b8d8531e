"""
Core data models for codeecho.

This module contains the fundamental data structures used throughout
the application for configuration, repository entries, the folder tree
and export results.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class Config:
    """Configuration settings for codeecho."""

    github_token: str = field(default_factory=lambda: os.getenv('GITHUB_TOKEN', ''))
    api_base_url: str = field(
        default_factory=lambda: os.getenv('CODEECHO_API_URL', 'https://api.github.com')
    )

    # Files skipped at export time (case-insensitive suffix match)
    binary_extensions: Tuple[str, ...] = (
        '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico', '.pdf', '.exe',
    )

    # Encoding fallbacks for decoded blob bytes
    encoding_fallbacks: List[str] = field(default_factory=lambda: [
        'utf-8', 'utf-8-sig', 'latin-1'
    ])

    # 1 keeps blob fetches strictly sequential
    fetch_concurrency: int = 1
    request_timeout: int = 15  # seconds

    # Encoder for the optional exact count only; the export total is always the estimate
    token_encoder: str = "cl100k_base"

    # First page of the user's repositories only
    repo_list_limit: int = 100


@dataclass(frozen=True)
class Entry:
    """One object from a recursive repository listing."""

    path: str
    kind: str  # 'blob' or 'tree'
    size: int = 0
    content_ref: Optional[str] = None  # blob SHA

    def is_blob(self) -> bool:
        return self.kind == 'blob'


@dataclass
class TreeNode:
    """Represents a file or directory in the folder tree."""

    name: str
    path: str
    type: str  # 'file' or 'directory'
    children: List['TreeNode'] = field(default_factory=list)
    size: int = 0

    def is_file(self) -> bool:
        """Check if this node represents a file."""
        return self.type == 'file'

    def is_directory(self) -> bool:
        """Check if this node represents a directory."""
        return self.type == 'directory'

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to nested JSON-serializable dicts."""
        return {
            'name': self.name,
            'path': self.path,
            'type': self.type,
            'children': [child.to_dict() for child in self.children],
            'size': self.size,
        }


@dataclass
class FileResult:
    """Result container for fetching a single blob."""
    path: str
    content: Optional[str] = None
    tokens: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class ExportResult:
    """Result of a repository export."""

    text: str
    total_tokens: int = 0
    files: List[str] = field(default_factory=list)  # Included paths, fetch order
    skipped: List[Tuple[str, str]] = field(default_factory=list)  # (path, reason)

    def to_response(self) -> Dict[str, Any]:
        """Shape used by the HTTP export response."""
        return {'text': self.text, 'totalTokens': self.total_tokens}
