"""
Shared fixtures: an in-memory data source and config isolation.
"""

from datetime import datetime, timedelta, timezone

import pytest

import repo_vetter.config
from repo_vetter.datasource.base import BaseDataSource, Contributor, IssueRecord
from repo_vetter.errors import DataSourceError

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

MIT_TEXT = """MIT License

Copyright (c) 2024 Example

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction.

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND.
"""

README_TEXT = """# Example

## Installation

pip install example

## Usage

import example
"""


def issue(
    number: int,
    days_open: float | None,
    is_pull_request: bool = False,
) -> IssueRecord:
    """Build an IssueRecord opened at BASE_TIME; None keeps it open."""
    closed_at = None if days_open is None else BASE_TIME + timedelta(days=days_open)
    return IssueRecord(number, is_pull_request, BASE_TIME, closed_at)


class FakeDataSource(BaseDataSource):
    """Data source backed by dictionaries keyed on "owner/name".

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(
        self,
        contributors=None,
        issues=None,
        licenses=None,
        readmes=None,
        root_entries=None,
        ci_conclusions=None,
        valid_token: bool = True,
    ):
        self.contributors = contributors or {}
        self.issues = issues or {}
        self.licenses = licenses or {}
        self.readmes = readmes or {}
        self.root_entries = root_entries or {}
        self.ci_conclusions = ci_conclusions or {}
        self.valid_token = valid_token
        self.calls: list[tuple[str, str]] = []

    def _lookup(self, table: dict, method: str, owner: str, repo: str, default):
        key = f"{owner}/{repo}"
        self.calls.append((method, key))
        value = table.get(key, default)
        if isinstance(value, BaseException):
            raise value
        return value

    def get_platform_name(self) -> str:
        return "fake"

    async def validate_credentials(self) -> bool:
        return self.valid_token

    async def list_contributors(self, owner, repo):
        return self._lookup(self.contributors, "contributors", owner, repo, [])

    async def get_issues_and_prs(self, owner, repo):
        return self._lookup(self.issues, "issues", owner, repo, [])

    async def get_license(self, owner, repo):
        return self._lookup(self.licenses, "license", owner, repo, None)

    async def get_readme(self, owner, repo):
        return self._lookup(self.readmes, "readme", owner, repo, None)

    async def list_root_entries(self, owner, repo):
        return self._lookup(self.root_entries, "root", owner, repo, [])

    async def get_latest_ci_conclusion(self, owner, repo):
        return self._lookup(self.ci_conclusions, "ci", owner, repo, None)


def healthy_source(*slugs: str) -> FakeDataSource:
    """A source where every listed repository scores well on all metrics."""
    contributors = [Contributor(f"dev{i}", 10) for i in range(10)]
    issues = [issue(1, 0.5), issue(2, 0.5, is_pull_request=True), issue(3, 0.25)]
    root = ["README.md", "tests", ".github", "CONTRIBUTING.md", "docs", "examples"]
    return FakeDataSource(
        contributors={slug: contributors for slug in slugs},
        issues={slug: issues for slug in slugs},
        licenses={slug: MIT_TEXT for slug in slugs},
        readmes={slug: README_TEXT for slug in slugs},
        root_entries={slug: root for slug in slugs},
        ci_conclusions={slug: "success" for slug in slugs},
    )


def failing_source(*slugs: str) -> FakeDataSource:
    """A source where every query for the listed repositories fails."""
    error = DataSourceError("boom")
    tables = {slug: error for slug in slugs}
    return FakeDataSource(
        contributors=dict(tables),
        issues=dict(tables),
        licenses=dict(tables),
        readmes=dict(tables),
        root_entries=dict(tables),
        ci_conclusions=dict(tables),
    )


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep process-wide config and environment from leaking between tests."""
    monkeypatch.setattr(repo_vetter.config, "PROJECT_ROOT", tmp_path)
    monkeypatch.setattr(repo_vetter.config, "_THRESHOLD", None)
    monkeypatch.setattr(repo_vetter.config, "VERIFY_SSL", True)
    for name in ("REPO_VETTER_THRESHOLD", "GITHUB_TOKEN", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    yield tmp_path
