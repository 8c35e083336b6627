# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Provides consistent test intensity across all property test modules.
Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(flags=flag_maps)
    @STANDARD_SETTINGS
    def test_something(flags):
        ...

Tiers:
- DETERMINISM_SETTINGS: 500 examples - shuffle fairness and seeded determinism
- STANDARD_SETTINGS: 100 examples - Regular property tests
- SLOW_SETTINGS: 50 examples - I/O bound tests (database, file system)
- QUICK_SETTINGS: 20 examples - Fast validation tests (enums, simple rejection)
"""

from hypothesis import settings

# Seeded shuffles must reproduce exactly; cheap enough to check many seeds
DETERMINISM_SETTINGS = settings(max_examples=500)

# Standard property tests - good balance of coverage and speed
STANDARD_SETTINGS = settings(max_examples=100)

# I/O-bound tests - real database, file system
# Fewer examples due to inherent slowness
SLOW_SETTINGS = settings(max_examples=50)

# Quick validation tests - simple input rejection, enum validation
QUICK_SETTINGS = settings(max_examples=20)
