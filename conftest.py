"""
Test-session setup shared by every test package.

Hypothesis profiles (select with HYPOTHESIS_PROFILE=dev|ci|fast, default dev):
deadlines are disabled everywhere; keccak and the in-memory host are slow on
cold CI machines and we care about correctness here, not timing.
"""

from __future__ import annotations

import os

from hypothesis import HealthCheck, settings

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow,),
        derandomize=True,
    ),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None))

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))
