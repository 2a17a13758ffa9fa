"""Maintainer responsiveness metric."""

from statistics import median

from repo_vetter.datasource.base import BaseDataSource, IssueRecord
from repo_vetter.errors import MetricDataError
from repo_vetter.metrics.base import MetricChecker, MetricSpec, step_scale
from repo_vetter.repository import RepositoryRef

# Median days to close -> score (faster is better)
RESPONSIVENESS_BANDS = [(1, 1.0), (7, 0.75), (30, 0.5), (90, 0.25)]

SECONDS_PER_DAY = 24 * 60 * 60


def median_days_to_close(items: list[IssueRecord]) -> float:
    """
    Median time from creation to close, in days, over closed issues and PRs.

    Raises:
        MetricDataError: If nothing in the sample has been closed, or a close
            timestamp precedes its creation or cannot be compared with it.
    """
    durations: list[float] = []
    for item in items:
        if item.closed_at is None:
            continue
        try:
            seconds = (item.closed_at - item.created_at).total_seconds()
        except TypeError as e:
            raise MetricDataError(
                f"#{item.number} has unusable timestamps: {e}"
            ) from e
        if seconds < 0:
            raise MetricDataError(f"#{item.number} closed before it was opened.")
        durations.append(seconds / SECONDS_PER_DAY)

    if not durations:
        raise MetricDataError("No closed issues or pull requests to measure.")
    return median(durations)


class ResponsivenessChecker(MetricChecker):
    """
    Evaluate how quickly maintainers close issues and pull requests.

    Scoring (median days to close):
    - <= 1 day: 1.0
    - <= 7 days: 0.75
    - <= 30 days: 0.5
    - <= 90 days: 0.25
    - longer: 0.0
    """

    async def fetch(
        self, ref: RepositoryRef, source: BaseDataSource
    ) -> list[IssueRecord]:
        return await source.get_issues_and_prs(ref.owner, ref.name)

    def raw_score(self, data: list[IssueRecord], threshold: int) -> float:
        return median_days_to_close(data)

    def scale(self, raw: float, threshold: int) -> float:
        return step_scale(raw, RESPONSIVENESS_BANDS, top=0.0)


METRIC = MetricSpec(
    name="ResponsiveMaintainer",
    checker=ResponsivenessChecker(),
    error_log="Responsiveness for {repo} unavailable: {error}",
)
