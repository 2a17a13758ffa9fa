"""
Tests for aggregation and per-repository evaluation.
"""

import asyncio
import json
import math

import pytest
from conftest import FakeDataSource, failing_source, healthy_source

from repo_vetter.core import (
    DEFAULT_WEIGHTS,
    METRIC_NAMES,
    Aggregator,
    evaluate_repository,
)
from repo_vetter.metrics import MetricResult, MetricSpec, load_metric_specs
from repo_vetter.metrics.base import MetricChecker
from repo_vetter.repository import RepositoryRef
from repo_vetter.runner import format_record

REF = RepositoryRef("octo", "repo")


def _results(**values: float) -> dict[str, MetricResult]:
    return {name: MetricResult(values.get(name, 0.0), 0.1) for name in METRIC_NAMES}


# --- Aggregator ---


def test_default_weights_sum_to_one():
    assert math.isclose(sum(DEFAULT_WEIGHTS.values()), 1.0)
    assert DEFAULT_WEIGHTS == {
        "ResponsiveMaintainer": 0.40,
        "Correctness": 0.30,
        "BusFactor": 0.15,
        "RampUp": 0.10,
        "License": 0.05,
    }


def test_net_score_is_weighted_dot_product():
    results = _results(
        ResponsiveMaintainer=1.0,
        Correctness=0.5,
        BusFactor=0.25,
        RampUp=0.75,
        License=1.0,
    )
    expected = 0.40 * 1.0 + 0.30 * 0.5 + 0.15 * 0.25 + 0.10 * 0.75 + 0.05 * 1.0
    assert Aggregator().net_score(results) == pytest.approx(expected)


@pytest.mark.parametrize("value", [0.0, 0.25, 0.5, 0.75, 1.0])
def test_net_score_within_unit_interval(value):
    results = {name: MetricResult(value, 0.2) for name in METRIC_NAMES}
    score = Aggregator().net_score(results)
    assert 0.0 <= score <= 1.0
    assert score == pytest.approx(value)


def test_failed_metric_contributes_zero():
    results = {name: MetricResult(1.0, 0.2) for name in METRIC_NAMES}
    results["Correctness"] = MetricResult.failed("boom")
    assert Aggregator().net_score(results) == pytest.approx(0.70)


def test_all_failed_metrics_score_zero():
    results = {name: MetricResult.failed("boom") for name in METRIC_NAMES}
    assert Aggregator().net_score(results) == 0.0


def test_untagged_negative_value_is_clamped():
    results = _results(BusFactor=1.0)
    results["License"] = MetricResult(-1, -1)
    assert Aggregator().net_score(results) == pytest.approx(0.15)


def test_latency_sums_every_metric_including_sentinels():
    results = {name: MetricResult(1.0, 0.5) for name in METRIC_NAMES}
    assert Aggregator().net_score_latency(results) == pytest.approx(2.5)

    results["RampUp"] = MetricResult.failed("boom")
    assert Aggregator().net_score_latency(results) == pytest.approx(1.0)


def test_latency_can_go_negative_when_metrics_fail():
    results = {name: MetricResult.failed("boom") for name in METRIC_NAMES}
    assert Aggregator().net_score_latency(results) == -5


def test_combine_does_not_mutate_inputs():
    results = _results(BusFactor=0.5)
    snapshot = dict(results)
    record = Aggregator().combine("https://github.com/octo/repo", results)
    assert results == snapshot
    assert record.bus_factor is results["BusFactor"]


def test_custom_weights():
    weights = {name: 0.0 for name in METRIC_NAMES}
    weights["License"] = 1.0
    results = _results(License=0.5, ResponsiveMaintainer=1.0)
    assert Aggregator(weights).net_score(results) == pytest.approx(0.5)


@pytest.mark.parametrize(
    "weights",
    [
        {"ResponsiveMaintainer": 1.0},
        {**DEFAULT_WEIGHTS, "Popularity": 0.0},
        {**DEFAULT_WEIGHTS, "License": 0.5},
        {**DEFAULT_WEIGHTS, "License": -0.05, "RampUp": 0.20},
    ],
)
def test_invalid_weights_rejected(weights):
    with pytest.raises(ValueError):
        Aggregator(weights)


def test_missing_result_rejected():
    results = _results()
    del results["License"]
    with pytest.raises(ValueError, match="License"):
        Aggregator().net_score(results)


def test_record_field_order():
    record = Aggregator().combine("https://github.com/octo/repo", _results())
    line = format_record(record)
    assert list(json.loads(line)) == [
        "URL",
        "NetScore",
        "NetScore_Latency",
        "RampUp",
        "RampUp_Latency",
        "Correctness",
        "Correctness_Latency",
        "BusFactor",
        "BusFactor_Latency",
        "ResponsiveMaintainer",
        "ResponsiveMaintainer_Latency",
        "License",
        "License_Latency",
    ]


# --- evaluate_repository ---


def test_evaluate_repository_all_metrics_succeed():
    source = healthy_source("octo/repo")
    results = asyncio.run(evaluate_repository(REF, source, load_metric_specs()))
    assert set(results) == set(METRIC_NAMES)
    assert all(result.succeeded for result in results.values())
    assert results["BusFactor"].value == 0.5
    assert results["ResponsiveMaintainer"].value == 1.0
    assert results["Correctness"].value == 1.0
    assert results["License"].value == 1.0
    assert results["RampUp"].value == 1.0


def test_evaluate_repository_isolates_failures():
    source = healthy_source("octo/repo")
    source.licenses["octo/repo"] = failing_source("x/y").licenses["x/y"]
    results = asyncio.run(evaluate_repository(REF, source, load_metric_specs()))
    assert results["License"] == MetricResult.failed("boom")
    assert results["BusFactor"].succeeded


def test_evaluate_repository_all_failed():
    source = failing_source("octo/repo")
    results = asyncio.run(evaluate_repository(REF, source, load_metric_specs()))
    assert all((r.value, r.latency) == (-1, -1) for r in results.values())


class _ExplodingChecker(MetricChecker):
    async def fetch(self, ref, source):
        raise RuntimeError("programming error")

    def raw_score(self, data, threshold):
        return 0

    def scale(self, raw, threshold):
        return 0.0


class _RecordingChecker(MetricChecker):
    def __init__(self):
        self.finished = False

    async def fetch(self, ref, source):
        await asyncio.sleep(0.01)
        self.finished = True
        return 1

    def raw_score(self, data, threshold):
        return data

    def scale(self, raw, threshold):
        return 1.0


def test_unexpected_error_raised_after_all_metrics_settle():
    recorder = _RecordingChecker()
    specs = [
        MetricSpec("Exploding", _ExplodingChecker()),
        MetricSpec("Slow", recorder),
    ]
    with pytest.raises(RuntimeError, match="programming error"):
        asyncio.run(evaluate_repository(REF, FakeDataSource(), specs))
    assert recorder.finished
