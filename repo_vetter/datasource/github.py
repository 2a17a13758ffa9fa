"""
GitHub data source implementation for repo-vetter.

This module implements the GitHub-specific data source using the GitHub REST
API (v3) to fetch the repository data the metric evaluators need.
"""

import base64
import binascii
from datetime import datetime
from typing import Any

import httpx

from repo_vetter.config import get_github_token
from repo_vetter.datasource.base import BaseDataSource, Contributor, IssueRecord
from repo_vetter.errors import (
    AuthenticationError,
    DataSourceError,
    RateLimitError,
    RepositoryNotFoundError,
)
from repo_vetter.http_client import _get_async_http_client

# GitHub API endpoint
GITHUB_REST_API = "https://api.github.com"

# Sample size constants for REST queries
REST_SAMPLE_LIMITS = {
    "contributors_per_page": 100,
    "contributor_pages": 5,
    "issues": 100,
}


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no timezone: {value!r}")
    return parsed


class GitHubDataSource(BaseDataSource):
    """GitHub data source using the REST API."""

    def __init__(self, token: str | None = None):
        """
        Initialize GitHub data source.

        Args:
            token: GitHub Personal Access Token. If not provided, reads from
                   GITHUB_TOKEN environment variable. Without a token the
                   unauthenticated rate limit applies.
        """
        self.token = token or get_github_token()

    def get_platform_name(self) -> str:
        """Return 'github' as the platform identifier."""
        return "github"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """
        Issue a GET request and translate transport failures.

        Raises:
            DataSourceError: If the request could not be completed
        """
        client = await _get_async_http_client()
        try:
            return await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise DataSourceError(f"GitHub request failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, resource: str) -> None:
        """
        Map GitHub error statuses onto the data source error hierarchy.

        Raises:
            AuthenticationError: On 401, or 403 without an exhausted quota
            RateLimitError: On 429, or 403 with ``x-ratelimit-remaining: 0``
            RepositoryNotFoundError: On 404
            DataSourceError: On any other error status
        """
        status = response.status_code
        if status < 400:
            return
        if status == 401:
            raise AuthenticationError(f"GitHub rejected credentials for {resource}.")
        if status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise RateLimitError(
                f"GitHub rate limit exhausted while fetching {resource}."
            )
        if status == 403:
            raise AuthenticationError(f"Access to {resource} is forbidden.")
        if status == 404:
            raise RepositoryNotFoundError(f"{resource} not found or is inaccessible.")
        raise DataSourceError(f"GitHub API error {status} for {resource}.")

    @staticmethod
    def _json(response: httpx.Response, resource: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DataSourceError(f"Malformed response for {resource}: {e}") from e

    async def _get_json(
        self, path: str, resource: str, params: dict[str, Any] | None = None
    ) -> Any:
        response = await self._request(f"{GITHUB_REST_API}{path}", params)
        self._raise_for_status(response, resource)
        return self._json(response, resource)

    async def _get_optional_file(self, path: str, resource: str) -> str | None:
        """Fetch a base64-encoded file endpoint; a 404 means the file is absent."""
        response = await self._request(f"{GITHUB_REST_API}{path}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response, resource)
        payload = self._json(response, resource)
        if not isinstance(payload, dict) or "content" not in payload:
            raise DataSourceError(f"Malformed response for {resource}.")
        if payload.get("encoding", "base64") != "base64":
            return payload["content"]
        try:
            raw = base64.b64decode(payload["content"])
            return raw.decode("utf-8", errors="replace")
        except (binascii.Error, TypeError) as e:
            raise DataSourceError(f"Could not decode {resource}: {e}") from e

    async def validate_credentials(self) -> bool:
        """Check the configured token against the authenticated user endpoint."""
        if not self.token:
            return False
        response = await self._request(f"{GITHUB_REST_API}/user")
        if response.status_code in (401, 403):
            return False
        self._raise_for_status(response, "authenticated user")
        return True

    async def list_contributors(self, owner: str, repo: str) -> list[Contributor]:
        """
        Fetch contributors with commit counts.

        Follows ``Link: rel="next"`` pagination up to
        ``REST_SAMPLE_LIMITS["contributor_pages"]`` pages.

        Raises:
            DataSourceError: If GitHub returns an error or malformed data
        """
        resource = f"contributors of {owner}/{repo}"
        url: str | None = f"{GITHUB_REST_API}/repos/{owner}/{repo}/contributors"
        params: dict[str, Any] | None = {
            "per_page": REST_SAMPLE_LIMITS["contributors_per_page"]
        }
        contributors: list[Contributor] = []

        for _ in range(REST_SAMPLE_LIMITS["contributor_pages"]):
            if url is None:
                break
            response = await self._request(url, params)
            # Empty repositories answer 204 with no body
            if response.status_code == 204:
                break
            self._raise_for_status(response, resource)
            page = self._json(response, resource)
            if not isinstance(page, list):
                raise DataSourceError(f"Malformed response for {resource}.")
            for entry in page:
                try:
                    contributors.append(
                        Contributor(
                            login=entry.get("login")
                            or entry.get("name")
                            or "anonymous",
                            commit_count=int(entry["contributions"]),
                        )
                    )
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    raise DataSourceError(
                        f"Malformed contributor entry for {owner}/{repo}: {e}"
                    ) from e
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        return contributors

    async def get_issues_and_prs(self, owner: str, repo: str) -> list[IssueRecord]:
        """
        Fetch the most recent issues and pull requests in both states.

        Raises:
            DataSourceError: If GitHub returns an error or malformed data
        """
        resource = f"issues of {owner}/{repo}"
        payload = await self._get_json(
            f"/repos/{owner}/{repo}/issues",
            resource,
            params={
                "state": "all",
                "per_page": REST_SAMPLE_LIMITS["issues"],
                "sort": "created",
                "direction": "desc",
            },
        )
        if not isinstance(payload, list):
            raise DataSourceError(f"Malformed response for {resource}.")

        records: list[IssueRecord] = []
        for item in payload:
            try:
                closed_at = item.get("closed_at")
                records.append(
                    IssueRecord(
                        number=int(item["number"]),
                        is_pull_request="pull_request" in item,
                        created_at=_parse_timestamp(item["created_at"]),
                        closed_at=_parse_timestamp(closed_at) if closed_at else None,
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise DataSourceError(
                    f"Malformed issue entry for {owner}/{repo}: {e}"
                ) from e
        return records

    async def get_license(self, owner: str, repo: str) -> str | None:
        """Fetch the license file text detected by GitHub."""
        return await self._get_optional_file(
            f"/repos/{owner}/{repo}/license", f"license of {owner}/{repo}"
        )

    async def get_readme(self, owner: str, repo: str) -> str | None:
        """Fetch the README text."""
        return await self._get_optional_file(
            f"/repos/{owner}/{repo}/readme", f"README of {owner}/{repo}"
        )

    async def list_root_entries(self, owner: str, repo: str) -> list[str]:
        """Fetch the names at the root of the default branch."""
        resource = f"contents of {owner}/{repo}"
        payload = await self._get_json(f"/repos/{owner}/{repo}/contents/", resource)
        if not isinstance(payload, list):
            raise DataSourceError(f"Malformed response for {resource}.")
        return [
            entry["name"]
            for entry in payload
            if isinstance(entry, dict) and "name" in entry
        ]

    async def get_latest_ci_conclusion(self, owner: str, repo: str) -> str | None:
        """Fetch the conclusion of the most recent GitHub Actions run."""
        resource = f"workflow runs of {owner}/{repo}"
        payload = await self._get_json(
            f"/repos/{owner}/{repo}/actions/runs", resource, params={"per_page": 1}
        )
        if not isinstance(payload, dict):
            raise DataSourceError(f"Malformed response for {resource}.")
        runs = payload.get("workflow_runs") or []
        if not isinstance(runs, list):
            raise DataSourceError(f"Malformed response for {resource}.")
        if not runs:
            return None
        if not isinstance(runs[0], dict):
            raise DataSourceError(f"Malformed workflow run for {owner}/{repo}.")
        return runs[0].get("conclusion")

