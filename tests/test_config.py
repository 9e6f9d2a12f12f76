"""
Unit tests for the configuration module.

Tests for:
- Sound tier catalog lookups
- SoundTier ordering
- Sensitivity level slider mapping and parsing
- Sensitivity profile table consistency
"""

import pytest
import sys
import os
from dataclasses import replace

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from somniq.config.sensitivity_profiles import (
    MIN_BASE_ON_THRESHOLD,
    SENSITIVITY_PROFILES,
    SensitivityLevel,
    SensitivityProfileConfig,
    get_default_level,
    get_profile_config,
)
from somniq.config.sound_tiers import (
    SOUND_TIER_MAP,
    category_count,
    get_all_categories,
    get_categories_for_tier,
    get_tier_for_category,
    is_mapped,
)
from somniq.data.contracts import SoundTier


# =============================================================================
# SOUND TIER TESTS
# =============================================================================

class TestSoundTier:
    """Tests for SoundTier ordering."""

    def test_total_order(self):
        assert SoundTier.LOW < SoundTier.MEDIUM < SoundTier.HIGH < SoundTier.CRITICAL

    def test_priorities(self):
        assert [t.priority for t in (SoundTier.LOW, SoundTier.MEDIUM,
                                     SoundTier.HIGH, SoundTier.CRITICAL)] == [1, 2, 3, 4]

    def test_max_picks_critical(self):
        assert max([SoundTier.MEDIUM, SoundTier.CRITICAL, SoundTier.LOW]) == SoundTier.CRITICAL


class TestTierCatalog:
    """Tests for the category to tier lookup."""

    def test_known_categories(self):
        assert get_tier_for_category("Gasping") == SoundTier.CRITICAL
        assert get_tier_for_category("Snoring") == SoundTier.HIGH
        assert get_tier_for_category("Talking") == SoundTier.MEDIUM
        assert get_tier_for_category("Rain") == SoundTier.LOW

    def test_unknown_defaults_to_low(self):
        assert get_tier_for_category("Bagpipes") == SoundTier.LOW
        assert get_tier_for_category("") == SoundTier.LOW

    def test_lookup_is_case_sensitive(self):
        assert not is_mapped("siren")
        assert is_mapped("Siren")

    def test_categories_for_tier_sorted(self):
        critical = get_categories_for_tier(SoundTier.CRITICAL)
        assert critical == ["Alarm", "Choking", "Crash", "Gasping", "Screaming", "Siren"]

    def test_every_category_in_exactly_one_tier(self):
        by_tier = [get_categories_for_tier(t) for t in SoundTier]
        flattened = [c for group in by_tier for c in group]
        assert sorted(flattened) == get_all_categories()
        assert len(flattened) == category_count() == len(SOUND_TIER_MAP) == 31


# =============================================================================
# SENSITIVITY LEVEL TESTS
# =============================================================================

class TestSliderMapping:
    """Tests for the continuous slider to level mapping."""

    @pytest.mark.parametrize("value,expected", [
        (0.0, SensitivityLevel.VERY_CONSERVATIVE),
        (0.124, SensitivityLevel.VERY_CONSERVATIVE),
        (0.125, SensitivityLevel.CONSERVATIVE),
        (0.374, SensitivityLevel.CONSERVATIVE),
        (0.375, SensitivityLevel.BALANCED),
        (0.624, SensitivityLevel.BALANCED),
        (0.625, SensitivityLevel.SENSITIVE),
        (0.874, SensitivityLevel.SENSITIVE),
        (0.875, SensitivityLevel.VERY_SENSITIVE),
        (1.0, SensitivityLevel.VERY_SENSITIVE),
    ])
    def test_buckets(self, value, expected):
        assert SensitivityLevel.from_slider_value(value) == expected

    def test_out_of_range_is_clamped(self):
        assert SensitivityLevel.from_slider_value(-3.0) == SensitivityLevel.VERY_CONSERVATIVE
        assert SensitivityLevel.from_slider_value(7.0) == SensitivityLevel.VERY_SENSITIVE

    def test_canonical_slider_values_round_trip(self):
        for level in SensitivityLevel:
            assert SensitivityLevel.from_slider_value(level.slider_value) == level

    def test_levels_are_ordered(self):
        ranks = [level.rank for level in SensitivityLevel]
        assert ranks == sorted(ranks) == [0, 1, 2, 3, 4]


class TestLevelParsing:
    """Tests for resolving levels by name."""

    def test_display_name(self):
        assert SensitivityLevel.parse("Very Sensitive") == SensitivityLevel.VERY_SENSITIVE

    def test_member_name_any_case(self):
        assert SensitivityLevel.parse("balanced") == SensitivityLevel.BALANCED
        assert SensitivityLevel.parse("VERY_CONSERVATIVE") == SensitivityLevel.VERY_CONSERVATIVE

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError):
            SensitivityLevel.parse("Paranoid")

    def test_descriptions_present(self):
        for level in SensitivityLevel:
            assert level.description


# =============================================================================
# SENSITIVITY PROFILE TESTS
# =============================================================================

class TestSensitivityProfiles:
    """Tests for the profile table."""

    def test_one_profile_per_level(self):
        assert set(SENSITIVITY_PROFILES) == set(SensitivityLevel)
        for level, profile in SENSITIVITY_PROFILES.items():
            assert profile.level == level

    def test_all_profiles_validate(self):
        for profile in SENSITIVITY_PROFILES.values():
            assert profile.validate() is True

    def test_critical_never_windowed(self):
        for profile in SENSITIVITY_PROFILES.values():
            assert profile.prefers_windowed(SoundTier.CRITICAL) is False

    def test_critical_multiplier_smallest(self):
        for profile in SENSITIVITY_PROFILES.values():
            multipliers = [profile.timing_multiplier(t) for t in SoundTier]
            assert profile.critical_multiplier == min(multipliers)
            assert profile.low_multiplier == max(multipliers)

    def test_thresholds_loosen_with_sensitivity(self):
        ordered = [SENSITIVITY_PROFILES[lvl] for lvl in SensitivityLevel]
        on_thresholds = [p.base_on_threshold for p in ordered]
        assert on_thresholds == sorted(on_thresholds, reverse=True)

    def test_default_is_balanced(self):
        assert get_default_level() == SensitivityLevel.BALANCED
        assert get_profile_config("Balanced").uncertainty_difference == 0.15

    def test_invalid_profile_rejected(self):
        bad = SensitivityProfileConfig(
            level=SensitivityLevel.BALANCED,
            uncertainty_threshold=0.4,
            uncertainty_difference=0.15,
            critical_multiplier=1.0,
            high_multiplier=1.0,
            medium_multiplier=1.0,
            low_multiplier=1.0,
            base_on_threshold=0.5,
            base_off_threshold=0.6,
            base_debounce_sec=2.0,
            base_cooldown_sec=15.0,
            windowed_for_low=True,
            windowed_for_medium=True,
            windowed_for_high=True,
            windowed_for_critical=False,
        )
        with pytest.raises(ValueError):
            bad.validate()

    def test_base_on_below_minimum_rejected(self):
        """Too low a base_on leaves no room for the off floor on Critical rules."""
        very_sensitive = SENSITIVITY_PROFILES[SensitivityLevel.VERY_SENSITIVE]
        bad = replace(very_sensitive, base_on_threshold=0.11, base_off_threshold=0.05)
        with pytest.raises(ValueError):
            bad.validate()

        lowest = replace(very_sensitive, base_on_threshold=MIN_BASE_ON_THRESHOLD,
                         base_off_threshold=0.05)
        assert lowest.validate() is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
