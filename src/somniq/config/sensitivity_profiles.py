"""
Sensitivity Profiles for SomniQ.

Five named levels trade alert volume against responsiveness. Each level maps
to one immutable configuration record; rule generation is a pure function of
(tier, profile), so the profile table below is the only place these knobs live.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from ..data.contracts import SoundTier


class SensitivityLevel(Enum):
    """
    Sensitivity levels, ordered from fewest to most alerts.

    The value is the user-facing display name.
    """
    VERY_CONSERVATIVE = "Very Conservative"
    CONSERVATIVE = "Conservative"
    BALANCED = "Balanced"
    SENSITIVE = "Sensitive"
    VERY_SENSITIVE = "Very Sensitive"

    @property
    def description(self) -> str:
        return _LEVEL_DESCRIPTIONS[self]

    @property
    def slider_value(self) -> float:
        """Canonical position of this level on a [0, 1] slider."""
        return _LEVEL_SLIDER_VALUES[self]

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @classmethod
    def from_slider_value(cls, value: float) -> "SensitivityLevel":
        """
        Map a continuous slider position to the nearest level bucket.

        [0, .125) very conservative, [.125, .375) conservative,
        [.375, .625) balanced, [.625, .875) sensitive, [.875, 1] very sensitive.
        Values outside [0, 1] are clamped.
        """
        value = min(max(float(value), 0.0), 1.0)
        if value < 0.125:
            return cls.VERY_CONSERVATIVE
        elif value < 0.375:
            return cls.CONSERVATIVE
        elif value < 0.625:
            return cls.BALANCED
        elif value < 0.875:
            return cls.SENSITIVE
        return cls.VERY_SENSITIVE

    @classmethod
    def parse(cls, name: Union[str, "SensitivityLevel"]) -> "SensitivityLevel":
        """
        Resolve a level from itself, its display name or its member name.

        Raises:
            ValueError: if the name matches no level
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip()
        for level in cls:
            if key == level.value or key.upper().replace(" ", "_") == level.name:
                return level
        raise ValueError(f"Unknown sensitivity level: {name!r}")


_LEVEL_ORDER = [
    SensitivityLevel.VERY_CONSERVATIVE,
    SensitivityLevel.CONSERVATIVE,
    SensitivityLevel.BALANCED,
    SensitivityLevel.SENSITIVE,
    SensitivityLevel.VERY_SENSITIVE,
]

_LEVEL_SLIDER_VALUES: Dict[SensitivityLevel, float] = {
    SensitivityLevel.VERY_CONSERVATIVE: 0.0,
    SensitivityLevel.CONSERVATIVE: 0.25,
    SensitivityLevel.BALANCED: 0.5,
    SensitivityLevel.SENSITIVE: 0.75,
    SensitivityLevel.VERY_SENSITIVE: 1.0,
}

_LEVEL_DESCRIPTIONS: Dict[SensitivityLevel, str] = {
    SensitivityLevel.VERY_CONSERVATIVE:
        "Minimal alerts - only for clear, sustained sounds. Best for heavy sleepers.",
    SensitivityLevel.CONSERVATIVE:
        "Fewer alerts with longer delays. Good for deep sleepers.",
    SensitivityLevel.BALANCED:
        "Balanced sensitivity - default settings for most users.",
    SensitivityLevel.SENSITIVE:
        "More alerts with faster response. Good for light sleepers.",
    SensitivityLevel.VERY_SENSITIVE:
        "Maximum sensitivity - alerts for most sounds quickly. Best for very light sleepers.",
}

# Critical rules scale base_on by 0.85 and need on >= 0.15 so that the 0.05
# off floor still sits 0.1 below it.
MIN_BASE_ON_THRESHOLD = 0.18


@dataclass(frozen=True)
class SensitivityProfileConfig:
    """
    Complete configuration for a sensitivity level.

    The rule generator derives every per-category threshold and timing from
    these values plus the category's tier.
    """
    level: SensitivityLevel

    # === Uncertainty gate ===
    uncertainty_threshold: float    # Top-1 score below this: frame is uncertain
    uncertainty_difference: float   # Top-1 minus top-2 below this: frame is uncertain

    # === Timing multipliers by tier ===
    critical_multiplier: float
    high_multiplier: float
    medium_multiplier: float
    low_multiplier: float

    # === Base thresholds and timings (scaled per tier) ===
    base_on_threshold: float
    base_off_threshold: float
    base_debounce_sec: float
    base_cooldown_sec: float

    # === Detection method preference by tier ===
    windowed_for_low: bool
    windowed_for_medium: bool
    windowed_for_high: bool
    windowed_for_critical: bool

    def validate(self) -> bool:
        """
        Validate configuration consistency.

        Raises:
            ValueError: on the first violated constraint
        """
        if not 0.0 < self.uncertainty_threshold < 1.0:
            raise ValueError(f"{self.level.value}: uncertainty_threshold must be in (0, 1)")
        if not 0.0 <= self.uncertainty_difference < 1.0:
            raise ValueError(f"{self.level.value}: uncertainty_difference must be in [0, 1)")
        if not 0.0 < self.base_off_threshold < self.base_on_threshold < 1.0:
            raise ValueError(f"{self.level.value}: require 0 < base_off < base_on < 1")
        if self.base_on_threshold < MIN_BASE_ON_THRESHOLD:
            raise ValueError(
                f"{self.level.value}: base_on_threshold must be at least {MIN_BASE_ON_THRESHOLD}"
            )
        if self.base_debounce_sec <= 0 or self.base_cooldown_sec <= 0:
            raise ValueError(f"{self.level.value}: base timings must be positive")
        for tier in SoundTier:
            if self.timing_multiplier(tier) <= 0:
                raise ValueError(f"{self.level.value}: {tier.name} multiplier must be positive")
        return True

    def timing_multiplier(self, tier: SoundTier) -> float:
        """Get the timing multiplier for a tier."""
        return {
            SoundTier.CRITICAL: self.critical_multiplier,
            SoundTier.HIGH: self.high_multiplier,
            SoundTier.MEDIUM: self.medium_multiplier,
            SoundTier.LOW: self.low_multiplier,
        }[tier]

    def prefers_windowed(self, tier: SoundTier) -> bool:
        """Whether the given tier uses windowed-mean detection."""
        return {
            SoundTier.CRITICAL: self.windowed_for_critical,
            SoundTier.HIGH: self.windowed_for_high,
            SoundTier.MEDIUM: self.windowed_for_medium,
            SoundTier.LOW: self.windowed_for_low,
        }[tier]


# =============================================================================
# Pre-defined Sensitivity Profiles
# =============================================================================

SENSITIVITY_PROFILES: Dict[SensitivityLevel, SensitivityProfileConfig] = {

    SensitivityLevel.VERY_CONSERVATIVE: SensitivityProfileConfig(
        level=SensitivityLevel.VERY_CONSERVATIVE,

        # Very high confidence with a wide top-2 gap
        uncertainty_threshold=0.7,
        uncertainty_difference=0.3,

        # Critical stays fast, everything else slows down sharply
        critical_multiplier=1.0,
        high_multiplier=2.0,
        medium_multiplier=3.0,
        low_multiplier=4.0,

        base_on_threshold=0.9,
        base_off_threshold=0.7,
        base_debounce_sec=5.0,
        base_cooldown_sec=60.0,

        windowed_for_low=True,
        windowed_for_medium=True,
        windowed_for_high=True,
        windowed_for_critical=False,
    ),

    SensitivityLevel.CONSERVATIVE: SensitivityProfileConfig(
        level=SensitivityLevel.CONSERVATIVE,

        uncertainty_threshold=0.6,
        uncertainty_difference=0.25,

        critical_multiplier=1.0,
        high_multiplier=1.5,
        medium_multiplier=2.0,
        low_multiplier=2.5,

        base_on_threshold=0.8,
        base_off_threshold=0.6,
        base_debounce_sec=3.0,
        base_cooldown_sec=30.0,

        # High tier switches to EMA
        windowed_for_low=True,
        windowed_for_medium=True,
        windowed_for_high=False,
        windowed_for_critical=False,
    ),

    SensitivityLevel.BALANCED: SensitivityProfileConfig(
        level=SensitivityLevel.BALANCED,

        # Production default
        uncertainty_threshold=0.4,
        uncertainty_difference=0.15,

        critical_multiplier=1.0,
        high_multiplier=1.0,
        medium_multiplier=1.0,
        low_multiplier=1.0,

        base_on_threshold=0.7,
        base_off_threshold=0.5,
        base_debounce_sec=2.0,
        base_cooldown_sec=15.0,

        windowed_for_low=True,
        windowed_for_medium=True,
        windowed_for_high=True,
        windowed_for_critical=False,
    ),

    SensitivityLevel.SENSITIVE: SensitivityProfileConfig(
        level=SensitivityLevel.SENSITIVE,

        uncertainty_threshold=0.3,
        uncertainty_difference=0.1,

        critical_multiplier=0.5,
        high_multiplier=0.7,
        medium_multiplier=0.8,
        low_multiplier=1.0,

        base_on_threshold=0.6,
        base_off_threshold=0.4,
        base_debounce_sec=1.0,
        base_cooldown_sec=8.0,

        # EMA everywhere for faster response
        windowed_for_low=False,
        windowed_for_medium=False,
        windowed_for_high=False,
        windowed_for_critical=False,
    ),

    SensitivityLevel.VERY_SENSITIVE: SensitivityProfileConfig(
        level=SensitivityLevel.VERY_SENSITIVE,

        uncertainty_threshold=0.2,
        uncertainty_difference=0.05,

        critical_multiplier=0.3,
        high_multiplier=0.5,
        medium_multiplier=0.6,
        low_multiplier=0.8,

        base_on_threshold=0.5,
        base_off_threshold=0.3,
        base_debounce_sec=0.5,
        base_cooldown_sec=3.0,

        windowed_for_low=False,
        windowed_for_medium=False,
        windowed_for_high=False,
        windowed_for_critical=False,
    ),
}


def get_profile_config(level: Union[str, SensitivityLevel]) -> SensitivityProfileConfig:
    """Get configuration for a sensitivity level or its display name."""
    return SENSITIVITY_PROFILES[SensitivityLevel.parse(level)]


def get_default_level() -> SensitivityLevel:
    """Get the default sensitivity level (BALANCED)."""
    return SensitivityLevel.BALANCED


def print_profile_comparison():
    """Print a comparison table of all sensitivity profiles."""
    print("\n" + "=" * 110)
    print("SENSITIVITY PROFILE COMPARISON")
    print("=" * 110)

    rows = [
        ("Uncertainty threshold", lambda p: f"{p.uncertainty_threshold:.2f}"),
        ("Uncertainty difference", lambda p: f"{p.uncertainty_difference:.2f}"),
        ("Base on / off", lambda p: f"{p.base_on_threshold:.2f}/{p.base_off_threshold:.2f}"),
        ("Base debounce (sec)", lambda p: f"{p.base_debounce_sec:.1f}"),
        ("Base cooldown (sec)", lambda p: f"{p.base_cooldown_sec:.1f}"),
        ("Multipliers C/H/M/L", lambda p: (
            f"{p.critical_multiplier:g}/{p.high_multiplier:g}/"
            f"{p.medium_multiplier:g}/{p.low_multiplier:g}")),
        ("Windowed tiers", lambda p: "".join(
            t.name[0] for t in SoundTier if p.prefers_windowed(t)) or "-"),
    ]

    print(f"\n{'Parameter':<26}" + "".join(f"{lvl.value:>17}" for lvl in _LEVEL_ORDER))
    print("-" * 110)
    for label, fmt in rows:
        print(f"{label:<26}" + "".join(f"{fmt(SENSITIVITY_PROFILES[lvl]):>17}" for lvl in _LEVEL_ORDER))

    print("=" * 110 + "\n")


if __name__ == "__main__":
    print_profile_comparison()
