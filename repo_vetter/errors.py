"""Exception hierarchy for repo-vetter.

All exceptions inherit from RepoVetterError (single catch point).
"""

from __future__ import annotations


class RepoVetterError(Exception):
    """Base exception for all repo-vetter errors."""


class ConfigError(RepoVetterError):
    """Invalid configuration value."""


class DataSourceError(RepoVetterError):
    """The repository data source could not answer a query."""


class AuthenticationError(DataSourceError):
    """Credentials were rejected by the data source."""


class RateLimitError(DataSourceError):
    """The data source refused the request because the quota is exhausted."""


class RepositoryNotFoundError(DataSourceError):
    """Repository does not exist or is not visible with current credentials."""


class MetricDataError(RepoVetterError):
    """Fetched data is missing, malformed, or cannot be scored."""


class InputError(RepoVetterError):
    """The list of repository URLs could not be read."""
