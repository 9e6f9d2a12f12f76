"""
Sound Category Tiers for SomniQ.

Maps every sound label the classifier can emit to a severity tier.
Not all sounds are equal: a gasp or a smoke alarm must reach the sleeper
faster and with less evidence than rain or a television.
"""

from typing import Dict, List

from ..data.contracts import SoundTier


# =============================================================================
# Category to Tier Mapping
# =============================================================================

SOUND_TIER_MAP: Dict[str, SoundTier] = {
    # Critical: immediate attention required
    "Gasping": SoundTier.CRITICAL,
    "Choking": SoundTier.CRITICAL,
    "Screaming": SoundTier.CRITICAL,
    "Crash": SoundTier.CRITICAL,
    "Siren": SoundTier.CRITICAL,
    "Alarm": SoundTier.CRITICAL,

    # High: significant sleep disruption
    "Snoring": SoundTier.HIGH,
    "Coughing": SoundTier.HIGH,
    "Crying": SoundTier.HIGH,
    "Whimpering": SoundTier.HIGH,
    "Groaning": SoundTier.HIGH,
    "Sobbing": SoundTier.HIGH,
    "Wailing": SoundTier.HIGH,

    # Medium: moderate sleep disruption
    "Talking": SoundTier.MEDIUM,
    "Laughing": SoundTier.MEDIUM,
    "Shouting": SoundTier.MEDIUM,
    "Singing": SoundTier.MEDIUM,
    "Yawning": SoundTier.MEDIUM,
    "Whistling": SoundTier.MEDIUM,
    "Clapping": SoundTier.MEDIUM,

    # Low: ambient
    "Music": SoundTier.LOW,
    "Television": SoundTier.LOW,
    "Applause": SoundTier.LOW,
    "Footsteps": SoundTier.LOW,
    "Door": SoundTier.LOW,
    "Wind": SoundTier.LOW,
    "Rain": SoundTier.LOW,
    "Thunder": SoundTier.LOW,
    "Silence": SoundTier.LOW,
    "Ambient": SoundTier.LOW,
    "Background": SoundTier.LOW,
}

DEFAULT_TIER = SoundTier.LOW


def get_tier_for_category(category: str) -> SoundTier:
    """
    Get the severity tier for a sound category.

    Args:
        category: Sound label as produced by the classifier

    Returns:
        The mapped tier, or LOW for unknown labels
    """
    return SOUND_TIER_MAP.get(category, DEFAULT_TIER)


def get_categories_for_tier(tier: SoundTier) -> List[str]:
    """Get all categories mapped to a tier, sorted by name."""
    return sorted(category for category, t in SOUND_TIER_MAP.items() if t == tier)


def get_all_categories() -> List[str]:
    return sorted(SOUND_TIER_MAP)


def is_mapped(category: str) -> bool:
    return category in SOUND_TIER_MAP


def category_count() -> int:
    return len(SOUND_TIER_MAP)


def print_tier_summary():
    """Print a summary of sound tiers."""
    print("\n" + "=" * 80)
    print("SOUND TIER SUMMARY")
    print("=" * 80)

    for tier in sorted(SoundTier, reverse=True):
        categories = get_categories_for_tier(tier)
        print(f"\n{tier.name} (priority {tier.priority}, {tier.alert_priority})")
        print("-" * len(tier.name))
        print(f"  Categories ({len(categories)}): {', '.join(categories)}")

    print("\n" + "=" * 80 + "\n")


if __name__ == "__main__":
    print_tier_summary()
