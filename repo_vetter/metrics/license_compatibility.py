"""License compatibility metric (compatibility with LGPL-2.1)."""

from repo_vetter.datasource.base import BaseDataSource
from repo_vetter.metrics.base import MetricChecker, MetricSpec, step_scale
from repo_vetter.repository import RepositoryRef

TIER_UNKNOWN = 0
TIER_INCOMPATIBLE = 1
TIER_CONDITIONAL = 2
TIER_COMPATIBLE = 3

# Signature phrases per license, most specific first. Matching is done on
# lower-cased text with whitespace collapsed; ties go to the earlier entry.
LICENSE_SIGNATURES: dict[str, list[str]] = {
    "AGPL-3.0": [
        "gnu affero general public license",
        "version 3",
        "remote network interaction",
    ],
    "LGPL-3.0": [
        "gnu lesser general public license",
        "version 3",
        "incorporates the terms and conditions of version 3 of the gnu general "
        "public license",
    ],
    "LGPL-2.1": [
        "gnu lesser general public license",
        "version 2.1",
        "successor of the gnu library public license",
    ],
    "GPL-3.0": [
        "gnu general public license",
        "version 3, 29 june 2007",
        "the gnu general public license is a free, copyleft license",
    ],
    "GPL-2.0": [
        "gnu general public license",
        "version 2, june 1991",
        "the licenses for most software are designed to take away your freedom",
    ],
    "Apache-2.0": [
        "apache license",
        "version 2.0",
        "www.apache.org/licenses/",
        "grant of patent license",
    ],
    "MPL-2.0": [
        "mozilla public license",
        "version 2.0",
        "covered software",
    ],
    "EPL-2.0": [
        "eclipse public license - v 2.0",
        "the accompanying program is provided under the terms of this eclipse "
        "public license",
    ],
    "BSD-3-Clause": [
        "redistribution and use in source and binary forms",
        "redistributions of source code must retain the above copyright notice",
        "neither the name of",
        "endorse or promote products derived from this software",
    ],
    "BSD-2-Clause": [
        "redistribution and use in source and binary forms",
        "redistributions of source code must retain the above copyright notice",
        "redistributions in binary form must reproduce the above copyright notice",
    ],
    "MIT": [
        "permission is hereby granted, free of charge",
        "the above copyright notice and this permission notice shall be included",
        'the software is provided "as is"',
        "mit license",
    ],
    "ISC": [
        "permission to use, copy, modify, and/or distribute this software for any "
        "purpose",
        "with or without fee is hereby granted",
        "isc license",
    ],
    "Zlib": [
        "this software is provided 'as-is', without any express or implied warranty",
        "altered source versions must be plainly marked as such",
        "this notice may not be removed or altered from any source distribution",
    ],
    "Unlicense": [
        "this is free and unencumbered software released into the public domain",
        "unlicense.org",
    ],
    "CC0-1.0": [
        "cc0 1.0 universal",
        "creative commons",
        "statement of purpose",
    ],
    "Proprietary": [
        "all rights reserved",
        "proprietary and confidential",
        "unauthorized copying",
    ],
}

LICENSE_TIERS: dict[str, int] = {
    "AGPL-3.0": TIER_INCOMPATIBLE,
    "GPL-3.0": TIER_INCOMPATIBLE,
    "Proprietary": TIER_INCOMPATIBLE,
    "LGPL-3.0": TIER_CONDITIONAL,
    "Apache-2.0": TIER_CONDITIONAL,
    "MPL-2.0": TIER_CONDITIONAL,
    "EPL-2.0": TIER_CONDITIONAL,
    "LGPL-2.1": TIER_COMPATIBLE,
    "GPL-2.0": TIER_COMPATIBLE,
    "BSD-3-Clause": TIER_COMPATIBLE,
    "BSD-2-Clause": TIER_COMPATIBLE,
    "MIT": TIER_COMPATIBLE,
    "ISC": TIER_COMPATIBLE,
    "Zlib": TIER_COMPATIBLE,
    "Unlicense": TIER_COMPATIBLE,
    "CC0-1.0": TIER_COMPATIBLE,
}

# Tier -> score
LICENSE_BANDS = [(TIER_INCOMPATIBLE, 0.0), (TIER_CONDITIONAL, 0.5)]


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def identify_license(text: str | None, threshold: int) -> str | None:
    """
    Identify a license from its text.

    Each known license scores the percentage of its signature phrases found
    in the text; the best score wins if it reaches ``threshold``.

    Args:
        text: License file text, or None.
        threshold: Minimum phrase match percentage.

    Returns:
        SPDX-style identifier, or None if nothing matches well enough.
    """
    if not text:
        return None

    normalized = _normalize(text)
    best_id: str | None = None
    best_percentage = 0.0
    for license_id, phrases in LICENSE_SIGNATURES.items():
        found = sum(1 for phrase in phrases if phrase in normalized)
        percentage = found / len(phrases) * 100
        if percentage > best_percentage:
            best_id, best_percentage = license_id, percentage

    if best_id is None or best_percentage < threshold:
        return None
    return best_id


def license_tier(text: str | None, threshold: int) -> int:
    """Return the LGPL-2.1 compatibility tier (0-3) of a license text."""
    license_id = identify_license(text, threshold)
    if license_id is None:
        return TIER_UNKNOWN
    return LICENSE_TIERS[license_id]


class LicenseCompatibilityChecker(MetricChecker):
    """
    Evaluate whether the project license can be combined with LGPL-2.1 code.

    Scoring:
    - Compatible (MIT, BSD, ISC, LGPL-2.1, ...): 1.0
    - Conditionally compatible (Apache-2.0, MPL-2.0, LGPL-3.0, ...): 0.5
    - Incompatible, unrecognized or missing: 0.0
    """

    async def fetch(self, ref: RepositoryRef, source: BaseDataSource) -> str | None:
        return await source.get_license(ref.owner, ref.name)

    def raw_score(self, data: str | None, threshold: int) -> float:
        return license_tier(data, threshold)

    def scale(self, raw: float, threshold: int) -> float:
        return step_scale(raw, LICENSE_BANDS, top=1.0)


METRIC = MetricSpec(
    name="License",
    checker=LicenseCompatibilityChecker(),
    error_log="License compatibility for {repo} unavailable: {error}",
)
