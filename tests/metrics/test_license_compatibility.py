"""
Tests for the license_compatibility metric.
"""

import asyncio

import pytest
from conftest import MIT_TEXT, FakeDataSource

from repo_vetter.errors import RateLimitError
from repo_vetter.metrics.base import evaluate_metric
from repo_vetter.metrics.license_compatibility import (
    LICENSE_SIGNATURES,
    LICENSE_TIERS,
    METRIC,
    TIER_COMPATIBLE,
    TIER_CONDITIONAL,
    TIER_INCOMPATIBLE,
    TIER_UNKNOWN,
    LicenseCompatibilityChecker,
    identify_license,
    license_tier,
)
from repo_vetter.repository import RepositoryRef

APACHE_TEXT = """
                                 Apache License
                           Version 2.0, January 2004
                        http://www.apache.org/licenses/

   3. Grant of Patent License. Subject to the terms and conditions of
      this License, each Contributor hereby grants to You a perpetual,
"""

GPL3_TEXT = """
                    GNU GENERAL PUBLIC LICENSE
                       Version 3, 29 June 2007

  The GNU General Public License is a free, copyleft license for
software and other kinds of works.
"""

BSD3_TEXT = """
Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice,
   this list of conditions and the following disclaimer.
2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer.
3. Neither the name of the copyright holder nor the names of its
   contributors may be used to endorse or promote products derived from
   this software without specific prior written permission.
"""


class TestIdentifyLicense:
    def test_mit(self):
        assert identify_license(MIT_TEXT, 50) == "MIT"

    def test_apache(self):
        assert identify_license(APACHE_TEXT, 50) == "Apache-2.0"

    def test_gpl3(self):
        assert identify_license(GPL3_TEXT, 50) == "GPL-3.0"

    def test_bsd3_preferred_over_bsd2_on_full_text(self):
        assert identify_license(BSD3_TEXT, 50) == "BSD-3-Clause"

    def test_missing_text(self):
        assert identify_license(None, 50) is None
        assert identify_license("", 50) is None

    def test_threshold_controls_partial_matches(self):
        partial_mit = "Permission is hereby granted, free of charge, to anyone."
        assert identify_license(partial_mit, 25) == "MIT"
        assert identify_license(partial_mit, 50) is None

    def test_whitespace_and_case_are_ignored(self):
        text = MIT_TEXT.upper().replace(" ", "   \n ")
        assert identify_license(text, 50) == "MIT"


class TestLicenseTier:
    def test_every_signature_has_a_tier(self):
        assert set(LICENSE_SIGNATURES) == set(LICENSE_TIERS)

    @pytest.mark.parametrize(
        ("text", "tier"),
        [
            (MIT_TEXT, TIER_COMPATIBLE),
            (BSD3_TEXT, TIER_COMPATIBLE),
            (APACHE_TEXT, TIER_CONDITIONAL),
            (GPL3_TEXT, TIER_INCOMPATIBLE),
            ("Custom license, ask us.", TIER_UNKNOWN),
            (None, TIER_UNKNOWN),
        ],
    )
    def test_tiers(self, text, tier):
        assert license_tier(text, 50) == tier


class TestLicenseScale:
    @pytest.mark.parametrize(
        ("tier", "expected"),
        [
            (TIER_UNKNOWN, 0.0),
            (TIER_INCOMPATIBLE, 0.0),
            (TIER_CONDITIONAL, 0.5),
            (TIER_COMPATIBLE, 1.0),
        ],
    )
    def test_step_table(self, tier, expected):
        assert LicenseCompatibilityChecker().scale(tier, 50) == expected


class TestLicenseEvaluation:
    REF = RepositoryRef("octo", "repo")

    def test_compatible_license(self):
        source = FakeDataSource(licenses={"octo/repo": MIT_TEXT})
        result = asyncio.run(evaluate_metric(METRIC, self.REF, source, 50))
        assert result.value == 1.0
        assert result.latency >= 0

    def test_missing_license_scores_zero_not_failure(self):
        source = FakeDataSource(licenses={"octo/repo": None})
        result = asyncio.run(evaluate_metric(METRIC, self.REF, source, 50))
        assert result.succeeded
        assert result.value == 0.0

    def test_rate_limit_yields_sentinel(self):
        source = FakeDataSource(licenses={"octo/repo": RateLimitError("slow down")})
        result = asyncio.run(evaluate_metric(METRIC, self.REF, source, 50))
        assert (result.value, result.latency) == (-1, -1)
