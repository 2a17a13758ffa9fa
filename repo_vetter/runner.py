"""
Batch scoring: one NDJSON record per repository URL.
"""

import json
import sys
from pathlib import Path
from typing import Callable, Iterable

from repo_vetter import log
from repo_vetter.config import DEFAULT_THRESHOLD
from repo_vetter.core import Aggregator, NetScoreRecord, evaluate_repository
from repo_vetter.datasource.base import BaseDataSource
from repo_vetter.errors import InputError
from repo_vetter.metrics import MetricSpec, load_metric_specs
from repo_vetter.repository import RepositoryRef, parse_repository_url


def read_urls(path: Path) -> list[str]:
    """
    Read repository URLs, one per line, dropping blank lines.

    Raises:
        InputError: If the file is missing or unreadable.
    """
    if not path.is_file():
        raise InputError(f"URL file does not exist: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except OSError as e:
        raise InputError(f"Could not read URL file {path}: {e}") from e


def format_record(record: NetScoreRecord) -> str:
    """Serialize a record as one NDJSON line (without the newline)."""
    return json.dumps(record.to_dict(), ensure_ascii=False)


def _write_stdout(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


async def score_repository(
    url: str,
    ref: RepositoryRef,
    source: BaseDataSource,
    *,
    threshold: int = DEFAULT_THRESHOLD,
    specs: list[MetricSpec] | None = None,
    aggregator: Aggregator | None = None,
) -> NetScoreRecord:
    """
    Evaluate all metrics for one repository and aggregate them.

    Raises:
        Exception: Whatever unexpected error an evaluator raised.
    """
    specs = load_metric_specs() if specs is None else specs
    aggregator = aggregator or Aggregator()
    results = await evaluate_repository(ref, source, specs, threshold)
    return aggregator.combine(url, results)


async def run_batch(
    urls: Iterable[str],
    source: BaseDataSource,
    *,
    threshold: int = DEFAULT_THRESHOLD,
    emit: Callable[[str], None] = _write_stdout,
    specs: list[MetricSpec] | None = None,
    aggregator: Aggregator | None = None,
) -> int:
    """
    Score repositories one after another and emit an NDJSON line for each.

    Lines that do not name a GitHub repository, and repositories whose
    evaluation raises an unexpected error, are logged and skipped; the batch
    always continues with the next line.

    Args:
        urls: Input lines.
        source: Data source for every repository.
        threshold: Cumulative-share cutoff percentage.
        emit: Receives each serialized record.
        specs: Metrics to run (default: builtin metrics).
        aggregator: Aggregator to use (default: fixed weights).

    Returns:
        Number of records emitted.
    """
    specs = load_metric_specs() if specs is None else specs
    aggregator = aggregator or Aggregator()
    emitted = 0

    for raw_url in urls:
        url = raw_url.strip()
        if not url:
            continue

        ref = parse_repository_url(url)
        if ref is None:
            log.error(f"Invalid URL format: {url}")
            continue

        log.info(f"Analyzing {ref.slug}...")
        try:
            record = await score_repository(
                url,
                ref,
                source,
                threshold=threshold,
                specs=specs,
                aggregator=aggregator,
            )
        except Exception as e:
            log.error(f"Error processing repository {ref.slug}: {e!r}")
            continue

        emit(format_record(record))
        emitted += 1

    return emitted
