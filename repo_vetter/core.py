"""
Core scoring logic for repo-vetter: per-repository evaluation and aggregation.
"""

import asyncio
import math
from typing import Any, Mapping, NamedTuple

from repo_vetter.config import DEFAULT_THRESHOLD
from repo_vetter.datasource.base import BaseDataSource
from repo_vetter.metrics import MetricResult, MetricSpec, evaluate_metric
from repo_vetter.repository import RepositoryRef

# --- Constants ---

# Fixed NetScore weights, keyed by metric name. They sum to 1.0.
DEFAULT_WEIGHTS: dict[str, float] = {
    "ResponsiveMaintainer": 0.40,
    "Correctness": 0.30,
    "BusFactor": 0.15,
    "RampUp": 0.10,
    "License": 0.05,
}

METRIC_NAMES = tuple(DEFAULT_WEIGHTS)


# --- Data Structures ---


class NetScoreRecord(NamedTuple):
    """The scored result for one repository."""

    url: str
    net_score: float
    net_score_latency: float
    ramp_up: MetricResult
    correctness: MetricResult
    bus_factor: MetricResult
    responsive_maintainer: MetricResult
    license: MetricResult

    def to_dict(self) -> dict[str, Any]:
        """Return the NDJSON record; key order is part of the output format."""
        return {
            "URL": self.url,
            "NetScore": self.net_score,
            "NetScore_Latency": self.net_score_latency,
            "RampUp": self.ramp_up.value,
            "RampUp_Latency": self.ramp_up.latency,
            "Correctness": self.correctness.value,
            "Correctness_Latency": self.correctness.latency,
            "BusFactor": self.bus_factor.value,
            "BusFactor_Latency": self.bus_factor.latency,
            "ResponsiveMaintainer": self.responsive_maintainer.value,
            "ResponsiveMaintainer_Latency": self.responsive_maintainer.latency,
            "License": self.license.value,
            "License_Latency": self.license.latency,
        }


# --- Aggregation ---


class Aggregator:
    """Combine metric results into a NetScoreRecord using a fixed weight table."""

    def __init__(self, weights: Mapping[str, float] | None = None):
        """
        Args:
            weights: Metric name -> weight. Must cover exactly the five
                metrics and sum to 1.0. Defaults to DEFAULT_WEIGHTS.

        Raises:
            ValueError: If the weight table is incomplete or does not sum to 1.
        """
        table = dict(DEFAULT_WEIGHTS if weights is None else weights)

        missing = set(METRIC_NAMES) - table.keys()
        if missing:
            names = ", ".join(sorted(missing))
            raise ValueError(f"Weights are missing metrics: {names}.")
        unknown = table.keys() - set(METRIC_NAMES)
        if unknown:
            names = ", ".join(sorted(unknown))
            raise ValueError(f"Weights include unknown metrics: {names}.")
        negative = {name: w for name, w in table.items() if w < 0}
        if negative:
            raise ValueError(f"Weights must not be negative: {negative}.")
        if not math.isclose(sum(table.values()), 1.0, abs_tol=1e-9):
            raise ValueError(f"Weights must sum to 1.0, got {sum(table.values())}.")

        # Keep the canonical metric order so sums are deterministic
        self.weights = {name: float(table[name]) for name in METRIC_NAMES}

    @staticmethod
    def _require_all(results: Mapping[str, MetricResult]) -> None:
        missing = set(METRIC_NAMES) - results.keys()
        if missing:
            raise ValueError(f"Missing metric results: {', '.join(sorted(missing))}.")

    def net_score(self, results: Mapping[str, MetricResult]) -> float:
        """
        Weighted sum of metric values; failed metrics contribute 0.

        Returns:
            NetScore, in [0, 1] for well-formed inputs.
        """
        self._require_all(results)
        total = 0.0
        for name, weight in self.weights.items():
            result = results[name]
            if result.succeeded:
                total += weight * max(result.value, 0.0)
        return total

    def net_score_latency(self, results: Mapping[str, MetricResult]) -> float:
        """
        Sum of all metric latencies, failure sentinels included as-is.

        A failed metric contributes -1, so the total can be lower than the
        real elapsed time or even negative.
        """
        self._require_all(results)
        return sum(results[name].latency for name in METRIC_NAMES)

    def combine(self, url: str, results: Mapping[str, MetricResult]) -> NetScoreRecord:
        """Build the NetScoreRecord for one repository. Inputs are not modified."""
        return NetScoreRecord(
            url=url,
            net_score=self.net_score(results),
            net_score_latency=self.net_score_latency(results),
            ramp_up=results["RampUp"],
            correctness=results["Correctness"],
            bus_factor=results["BusFactor"],
            responsive_maintainer=results["ResponsiveMaintainer"],
            license=results["License"],
        )


# --- Evaluation ---


async def evaluate_repository(
    ref: RepositoryRef,
    source: BaseDataSource,
    specs: list[MetricSpec],
    threshold: int = DEFAULT_THRESHOLD,
) -> dict[str, MetricResult]:
    """
    Run every metric for one repository concurrently.

    All evaluations settle before this returns; one metric failing never
    cancels the others. Failed metrics come back as sentinel results. If any
    evaluation raised an unexpected error, the first one in ``specs`` order is
    re-raised after all have finished.

    Args:
        ref: Repository to evaluate.
        source: Data source shared by the evaluations.
        specs: Metrics to run.
        threshold: Cumulative-share cutoff percentage.

    Returns:
        Metric name -> MetricResult.
    """
    outcomes = await asyncio.gather(
        *(evaluate_metric(spec, ref, source, threshold) for spec in specs),
        return_exceptions=True,
    )

    results: dict[str, MetricResult] = {}
    for spec, outcome in zip(specs, outcomes):
        if isinstance(outcome, BaseException):
            raise outcome
        results[spec.name] = outcome
    return results
