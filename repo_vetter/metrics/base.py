"""
Shared metric types, the evaluation contract and scaling helpers.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Sequence

from repo_vetter import log
from repo_vetter.config import DEFAULT_THRESHOLD
from repo_vetter.datasource.base import BaseDataSource
from repo_vetter.errors import DataSourceError, MetricDataError
from repo_vetter.repository import RepositoryRef

# Reported for both value and latency when a metric cannot be computed
FAILURE_SENTINEL = -1


class MetricResult(NamedTuple):
    """Outcome of one metric evaluation.

    ``failure`` carries the reason when the metric could not be computed; in
    that case ``value`` and ``latency`` both hold FAILURE_SENTINEL.
    """

    value: float
    latency: float
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, reason: str) -> "MetricResult":
        return cls(FAILURE_SENTINEL, FAILURE_SENTINEL, reason)


class MetricChecker(ABC):
    """Fetch, raw-score and normalize steps of a single metric."""

    @abstractmethod
    async def fetch(self, ref: RepositoryRef, source: BaseDataSource) -> Any:
        """Query the data source for everything the metric needs."""

    @abstractmethod
    def raw_score(self, data: Any, threshold: int) -> float:
        """Compute the unscaled score. Raise MetricDataError on unusable data."""

    @abstractmethod
    def scale(self, raw: float, threshold: int) -> float:
        """Map the raw score onto [0, 1] with a monotonic step function."""


class MetricSpec(NamedTuple):
    """Specification for a metric check."""

    name: str
    checker: MetricChecker
    error_log: str | None = None


def step_scale(
    raw: float, bands: Sequence[tuple[float, float]], top: float = 1.0
) -> float:
    """
    Map a raw value through an ordered step table.

    Args:
        raw: Raw metric value.
        bands: ``(upper_bound, score)`` pairs in ascending bound order; the
            first band whose bound is >= raw wins.
        top: Score for values above every bound.

    Returns:
        The score of the matching band.

    Example:
        >>> step_scale(3, [(2, 0.0), (4, 0.25)], top=1.0)
        0.25
    """
    for upper_bound, score in bands:
        if raw <= upper_bound:
            return score
    return top


async def evaluate_metric(
    spec: MetricSpec,
    ref: RepositoryRef,
    source: BaseDataSource,
    threshold: int = DEFAULT_THRESHOLD,
) -> MetricResult:
    """
    Run one metric end to end and time it.

    Data source failures and unusable data become a failed MetricResult.
    Any other exception is a programming error and propagates.

    Args:
        spec: Metric to evaluate.
        ref: Repository under evaluation.
        source: Data source to query.
        threshold: Cumulative-share cutoff percentage.

    Returns:
        MetricResult with a value in [0, 1] and latency in seconds, or the
        failure sentinel pair.
    """
    log.info(f"Running {spec.name} metric for {ref.slug}...")
    start = time.perf_counter()
    try:
        data = await spec.checker.fetch(ref, source)
        raw = spec.checker.raw_score(data, threshold)
        value = spec.checker.scale(raw, threshold)
    except (DataSourceError, MetricDataError) as e:
        if spec.error_log:
            log.error(spec.error_log.format(repo=ref.slug, error=e))
        return MetricResult.failed(str(e) or type(e).__name__)

    latency = max(time.perf_counter() - start, 0.0)
    log.info(f"{spec.name} for {ref.slug}: raw {raw}, scaled {value}")
    return MetricResult(value, latency)
