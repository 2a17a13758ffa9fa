"""
Data source abstraction layer for repo-vetter.

This module provides a unified interface for the repository data the metric
evaluators consume, so the scoring core never depends on a transport.
"""

from repo_vetter.datasource.base import BaseDataSource, Contributor, IssueRecord
from repo_vetter.datasource.github import GitHubDataSource

__all__ = [
    "BaseDataSource",
    "Contributor",
    "IssueRecord",
    "GitHubDataSource",
    "get_data_source",
]

# Registry of supported data sources
_PROVIDERS: dict[str, type[BaseDataSource]] = {
    "github": GitHubDataSource,
}


def get_data_source(platform: str = "github", **kwargs) -> BaseDataSource:
    """
    Factory function to get a data source instance.

    Args:
        platform: Platform name. Default: 'github'
        **kwargs: Source-specific configuration (e.g., token)

    Returns:
        Initialized data source instance

    Raises:
        ValueError: If platform is not supported

    Example:
        >>> source = get_data_source("github", token="ghp_xxx")
    """
    platform_lower = platform.lower()

    if platform_lower not in _PROVIDERS:
        supported = ", ".join(sorted(_PROVIDERS.keys()))
        raise ValueError(
            f"Unsupported data source: {platform}. Supported platforms: {supported}"
        )

    return _PROVIDERS[platform_lower](**kwargs)

