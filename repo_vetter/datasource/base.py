"""
Abstract data source interface for repo-vetter.

Metric evaluators only talk to a BaseDataSource; the concrete transport
(GitHub REST, fixtures in tests) lives behind it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import NamedTuple


class Contributor(NamedTuple):
    """A contributor and the number of commits attributed to them."""

    login: str
    commit_count: int


class IssueRecord(NamedTuple):
    """One issue or pull request from the repository history."""

    number: int
    is_pull_request: bool
    created_at: datetime
    closed_at: datetime | None = None

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None


class BaseDataSource(ABC):
    """
    Abstract base class for repository data sources.

    Every query may raise a ``DataSourceError`` subclass
    (``AuthenticationError``, ``RateLimitError``, ``RepositoryNotFoundError``).
    Callers must not depend on anything else leaking out.
    """

    @abstractmethod
    def get_platform_name(self) -> str:
        """Return the platform identifier (e.g. 'github')."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Return True if the configured credentials are accepted."""

    @abstractmethod
    async def list_contributors(self, owner: str, repo: str) -> list[Contributor]:
        """Return contributors with their commit counts, in source order."""

    @abstractmethod
    async def get_issues_and_prs(self, owner: str, repo: str) -> list[IssueRecord]:
        """Return recent issues and pull requests in both states."""

    @abstractmethod
    async def get_license(self, owner: str, repo: str) -> str | None:
        """Return the license file text, or None if the repository has none."""

    @abstractmethod
    async def get_readme(self, owner: str, repo: str) -> str | None:
        """Return the README text, or None if the repository has none."""

    @abstractmethod
    async def list_root_entries(self, owner: str, repo: str) -> list[str]:
        """Return the names of files and directories at the repository root."""

    @abstractmethod
    async def get_latest_ci_conclusion(self, owner: str, repo: str) -> str | None:
        """Return the conclusion of the most recent CI run, or None."""
