"""Ramp-up time metric (onboarding documentation coverage)."""

import re
from typing import NamedTuple

from repo_vetter.datasource.base import BaseDataSource
from repo_vetter.metrics.base import MetricChecker, MetricSpec
from repo_vetter.repository import RepositoryRef

# Onboarding signal -> share of the coverage percentage
SIGNAL_WEIGHTS = {
    "readme": 25,
    "installation": 20,
    "usage": 20,
    "contributing": 15,
    "docs": 10,
    "examples": 10,
}

INSTALL_KEYWORDS = ("install", "getting started", "setup", "quick start", "quickstart")
USAGE_KEYWORDS = ("usage", "example", "tutorial", "how to use")
DOCS_DIRECTORIES = {"docs", "doc", "documentation"}
EXAMPLE_DIRECTORIES = {"examples", "example", "samples", "demo", "demos", "tutorials"}

_MARKDOWN_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_UNDERLINE = re.compile(r"^\s*(=+|-+|~+|\^+)\s*$")


class RampUpSignals(NamedTuple):
    readme: str | None
    root_entries: list[str]


def extract_headings(readme: str) -> list[str]:
    """Return lower-cased Markdown (``#``) and underlined reST headings."""
    lines = readme.splitlines()
    headings: list[str] = []
    for index, line in enumerate(lines):
        match = _MARKDOWN_HEADING.match(line)
        if match:
            headings.append(match.group(1).lower())
            continue
        if (
            line.strip()
            and index + 1 < len(lines)
            and _UNDERLINE.match(lines[index + 1])
        ):
            headings.append(line.strip().lower())
    return headings


def _has_section(headings: list[str], keywords: tuple[str, ...]) -> bool:
    return any(keyword in heading for heading in headings for keyword in keywords)


def onboarding_coverage(signals: RampUpSignals) -> int:
    """
    Sum the weights of the onboarding signals present (0-100).

    Signals: a README, README sections on installation and usage, a
    CONTRIBUTING file, a docs directory, an examples directory.
    """
    names = {entry.lower() for entry in signals.root_entries}
    present: set[str] = set()

    if signals.readme and signals.readme.strip():
        present.add("readme")
        headings = extract_headings(signals.readme)
        if _has_section(headings, INSTALL_KEYWORDS):
            present.add("installation")
        if _has_section(headings, USAGE_KEYWORDS):
            present.add("usage")

    if any(name.startswith("contributing") for name in names):
        present.add("contributing")
    if names & DOCS_DIRECTORIES:
        present.add("docs")
    if names & EXAMPLE_DIRECTORIES:
        present.add("examples")

    return sum(SIGNAL_WEIGHTS[signal] for signal in present)


def scale_ramp_up(coverage: float, threshold: int) -> float:
    """
    Bucket onboarding coverage relative to the threshold.

    Below half the threshold scores 0 and below the threshold 0.25; the
    range above the threshold is split into thirds scoring 0.5, 0.75 and 1.
    """
    span = (100 - threshold) / 3
    cutoffs = [
        (threshold / 2, 0.0),
        (threshold, 0.25),
        (threshold + span, 0.5),
        (threshold + 2 * span, 0.75),
    ]
    for cutoff, score in cutoffs:
        if coverage < cutoff:
            return score
    return 1.0


class RampUpChecker(MetricChecker):
    """Evaluate how much onboarding material a newcomer can rely on."""

    async def fetch(self, ref: RepositoryRef, source: BaseDataSource) -> RampUpSignals:
        readme = await source.get_readme(ref.owner, ref.name)
        root_entries = await source.list_root_entries(ref.owner, ref.name)
        return RampUpSignals(readme, root_entries)

    def raw_score(self, data: RampUpSignals, threshold: int) -> float:
        return onboarding_coverage(data)

    def scale(self, raw: float, threshold: int) -> float:
        return scale_ramp_up(raw, threshold)


METRIC = MetricSpec(
    name="RampUp",
    checker=RampUpChecker(),
    error_log="Ramp-up time for {repo} unavailable: {error}",
)
