"""Repository sources that supply listings and blob contents."""
from typing import Optional

from ..core.models import Config
from .base import RepositorySource
from .github import GitHubSource


def create_source(token: Optional[str], config: Config) -> RepositorySource:
    """
    Create the repository source for one request.

    Args:
        token: GitHub access token of the caller
        config: Configuration object

    Returns:
        A GitHubSource bound to the token

    Raises:
        AuthenticationError: If no token is given
    """
    return GitHubSource(token or '', config)


__all__ = ['RepositorySource', 'GitHubSource', 'create_source']
