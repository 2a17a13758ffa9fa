"""
Metric registry for repo-vetter.

Each builtin metric module exposes a module-level ``METRIC`` MetricSpec.
"""

from repo_vetter.metrics import (
    bus_factor,
    correctness,
    license_compatibility,
    ramp_up,
    responsiveness,
)
from repo_vetter.metrics.base import (
    FAILURE_SENTINEL,
    MetricChecker,
    MetricResult,
    MetricSpec,
    evaluate_metric,
    step_scale,
)

__all__ = [
    "FAILURE_SENTINEL",
    "MetricChecker",
    "MetricResult",
    "MetricSpec",
    "evaluate_metric",
    "load_metric_specs",
    "step_scale",
]

# Evaluation order; also the order unexpected errors are reported in
_BUILTIN_METRICS: list[MetricSpec] = [
    responsiveness.METRIC,
    correctness.METRIC,
    bus_factor.METRIC,
    license_compatibility.METRIC,
    ramp_up.METRIC,
]


def load_metric_specs() -> list[MetricSpec]:
    """
    Return the builtin metric specs.

    Returns:
        A new list of MetricSpecs in evaluation order.
    """
    return list(_BUILTIN_METRICS)
