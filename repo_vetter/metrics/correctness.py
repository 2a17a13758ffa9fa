"""Correctness metric (test and build signals)."""

from typing import NamedTuple

from repo_vetter.datasource.base import BaseDataSource, IssueRecord
from repo_vetter.metrics.base import MetricChecker, MetricSpec, step_scale
from repo_vetter.repository import RepositoryRef

TEST_DIRECTORIES = {"test", "tests", "spec", "__tests__", "testing"}
CI_MARKERS = {
    ".github",
    ".travis.yml",
    ".circleci",
    ".gitlab-ci.yml",
    "azure-pipelines.yml",
    "jenkinsfile",
}

# Satisfied signal count -> score
CORRECTNESS_BANDS = [(0, 0.0), (1, 0.25), (2, 0.5), (3, 0.75)]


class CorrectnessSignals(NamedTuple):
    root_entries: list[str]
    ci_conclusion: str | None
    issues: list[IssueRecord]


def count_correctness_signals(signals: CorrectnessSignals) -> int:
    """
    Count satisfied correctness signals (0-4).

    Signals:
    - a test directory at the repository root
    - a CI configuration at the repository root
    - the latest CI run succeeded
    - at least half of the sampled issues (pull requests excluded) are closed
    """
    names = {entry.lower() for entry in signals.root_entries}
    count = 0
    if names & TEST_DIRECTORIES:
        count += 1
    if names & CI_MARKERS:
        count += 1
    if (signals.ci_conclusion or "").lower() == "success":
        count += 1

    plain_issues = [item for item in signals.issues if not item.is_pull_request]
    if plain_issues:
        closed = sum(1 for item in plain_issues if item.is_closed)
        if closed * 2 >= len(plain_issues):
            count += 1
    return count


class CorrectnessChecker(MetricChecker):
    """Evaluate evidence that the project tests and builds its code."""

    async def fetch(
        self, ref: RepositoryRef, source: BaseDataSource
    ) -> CorrectnessSignals:
        root_entries = await source.list_root_entries(ref.owner, ref.name)
        ci_conclusion = await source.get_latest_ci_conclusion(ref.owner, ref.name)
        issues = await source.get_issues_and_prs(ref.owner, ref.name)
        return CorrectnessSignals(root_entries, ci_conclusion, issues)

    def raw_score(self, data: CorrectnessSignals, threshold: int) -> float:
        return count_correctness_signals(data)

    def scale(self, raw: float, threshold: int) -> float:
        return step_scale(raw, CORRECTNESS_BANDS, top=1.0)


METRIC = MetricSpec(
    name="Correctness",
    checker=CorrectnessChecker(),
    error_log="Correctness for {repo} unavailable: {error}",
)
