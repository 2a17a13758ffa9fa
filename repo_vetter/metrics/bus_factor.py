"""Bus factor metric."""

from repo_vetter.datasource.base import BaseDataSource, Contributor
from repo_vetter.errors import MetricDataError
from repo_vetter.metrics.base import MetricChecker, MetricSpec, step_scale
from repo_vetter.repository import RepositoryRef

# Contributor count upper bound -> score
BUS_FACTOR_BANDS = [(2, 0.0), (4, 0.25), (6, 0.5), (8, 0.75)]


def compute_bus_factor(contributors: list[Contributor], threshold: int) -> int:
    """
    Count the fewest top contributors holding ``threshold`` percent of commits.

    Contributors are ranked by commit count, descending; equal counts keep
    the data source's order.

    Args:
        contributors: Contributors with commit counts.
        threshold: Cumulative commit share (percent) to reach.

    Returns:
        Number of contributors needed to reach the threshold.

    Raises:
        MetricDataError: If there are no contributors or no commits.
    """
    if not contributors:
        raise MetricDataError("No contributors returned.")

    total_commits = sum(c.commit_count for c in contributors)
    if total_commits <= 0:
        raise MetricDataError("Contributors have no commits.")

    ranked = sorted(contributors, key=lambda c: c.commit_count, reverse=True)
    running_commits = 0
    bus_factor = 0
    for contributor in ranked:
        running_commits += contributor.commit_count
        bus_factor += 1
        if running_commits / total_commits * 100 >= threshold:
            break
    return bus_factor


def scale_bus_factor(bus_factor: float) -> float:
    """Bucket a raw bus factor: <=2 -> 0, <=4 -> .25, <=6 -> .5, <=8 -> .75, else 1."""
    return step_scale(bus_factor, BUS_FACTOR_BANDS, top=1.0)


class BusFactorChecker(MetricChecker):
    """Evaluate how concentrated commit ownership is."""

    async def fetch(
        self, ref: RepositoryRef, source: BaseDataSource
    ) -> list[Contributor]:
        return await source.list_contributors(ref.owner, ref.name)

    def raw_score(self, data: list[Contributor], threshold: int) -> float:
        return compute_bus_factor(data, threshold)

    def scale(self, raw: float, threshold: int) -> float:
        return scale_bus_factor(raw)


METRIC = MetricSpec(
    name="BusFactor",
    checker=BusFactorChecker(),
    error_log="Bus factor for {repo} unavailable: {error}",
)
