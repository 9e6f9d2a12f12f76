"""
Rule Generator for SomniQ.

Derives one AlertRule per catalog category from the category's tier and the
active sensitivity profile. Generation is pure and idempotent: the same
profile always yields the same rule set.

Per-tier behavior lives in lookup tables below, never in branching code:
- Threshold scaling: critical fires on less evidence, low on more
- Timing scaling and floors: critical reacts fastest, low slowest
- Window duration for windowed-mean detection
"""

import logging
from typing import Dict, Mapping, Optional, Tuple

from ..config.sensitivity_profiles import SensitivityProfileConfig
from ..config.sound_tiers import SOUND_TIER_MAP
from ..data.contracts import AlertRule, InvalidRuleError, SoundTier

logger = logging.getLogger(__name__)


# =============================================================================
# TIER-INDEXED TABLES
# =============================================================================

# (on scale, off scale) applied to the profile's base thresholds
TIER_THRESHOLD_SCALE: Dict[SoundTier, Tuple[float, float]] = {
    SoundTier.CRITICAL: (0.85, 0.80),
    SoundTier.HIGH: (0.95, 0.90),
    SoundTier.MEDIUM: (1.00, 1.00),
    SoundTier.LOW: (1.10, 1.15),
}

# (debounce scale, cooldown scale)
TIER_TIMING_SCALE: Dict[SoundTier, Tuple[float, float]] = {
    SoundTier.CRITICAL: (0.5, 0.5),
    SoundTier.HIGH: (0.8, 0.8),
    SoundTier.MEDIUM: (1.0, 1.0),
    SoundTier.LOW: (1.2, 1.5),
}

# (debounce floor sec, cooldown floor sec)
TIER_TIMING_FLOOR: Dict[SoundTier, Tuple[float, float]] = {
    SoundTier.CRITICAL: (0.5, 2.0),
    SoundTier.HIGH: (1.0, 5.0),
    SoundTier.MEDIUM: (1.5, 10.0),
    SoundTier.LOW: (2.0, 15.0),
}

TIER_WINDOW_SEC: Dict[SoundTier, float] = {
    SoundTier.CRITICAL: 2.0,
    SoundTier.HIGH: 3.0,
    SoundTier.MEDIUM: 5.0,
    SoundTier.LOW: 8.0,
}

ON_THRESHOLD_RANGE = (0.1, 0.95)
MIN_OFF_THRESHOLD = 0.05
HYSTERESIS_GAP = 0.1
WINDOW_THRESHOLD_SCALE = 0.9
WINDOW_THRESHOLD_RANGE = (0.5, 0.9)

DEFAULT_FRAME_HZ = 1.0


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_rule(rule: AlertRule) -> AlertRule:
    """
    Validate a rule at the boundary.

    Args:
        rule: Rule produced by the generator or supplied as an override

    Returns:
        The same rule, for chaining

    Raises:
        InvalidRuleError: if thresholds or timings are inconsistent
    """
    name = rule.category
    if not 0.0 < rule.on < 1.0:
        raise InvalidRuleError(f"{name}: on threshold {rule.on} outside (0, 1)")
    if not 0.0 < rule.off < 1.0:
        raise InvalidRuleError(f"{name}: off threshold {rule.off} outside (0, 1)")
    if rule.off >= rule.on:
        raise InvalidRuleError(f"{name}: off ({rule.off}) must be below on ({rule.on})")
    if rule.debounce_sec <= 0:
        raise InvalidRuleError(f"{name}: debounce_sec must be positive")
    if rule.cooldown_sec <= 0:
        raise InvalidRuleError(f"{name}: cooldown_sec must be positive")
    if rule.frame_hz <= 0:
        raise InvalidRuleError(f"{name}: frame_hz must be positive")
    if rule.use_window_mean:
        if rule.window_sec is None or rule.window_sec <= 0:
            raise InvalidRuleError(f"{name}: windowed rule needs positive window_sec")
        if rule.window_thresh is None or not 0.0 < rule.window_thresh <= 1.0:
            raise InvalidRuleError(f"{name}: windowed rule needs window_thresh in (0, 1]")
    return rule


# =============================================================================
# GENERATION
# =============================================================================

def generate_rule(
    category: str,
    tier: SoundTier,
    profile: SensitivityProfileConfig,
    frame_hz: float = DEFAULT_FRAME_HZ,
) -> AlertRule:
    """
    Derive the rule for one category.

    Args:
        category: Sound label
        tier: The category's severity tier
        profile: Active sensitivity profile
        frame_hz: Classification frame rate

    Returns:
        A validated AlertRule
    """
    # Thresholds
    on_scale, off_scale = TIER_THRESHOLD_SCALE[tier]
    on = _clamp(profile.base_on_threshold * on_scale, *ON_THRESHOLD_RANGE)
    off = _clamp(profile.base_off_threshold * off_scale, MIN_OFF_THRESHOLD, on - HYSTERESIS_GAP)

    # Timing
    multiplier = profile.timing_multiplier(tier)
    debounce_scale, cooldown_scale = TIER_TIMING_SCALE[tier]
    debounce_floor, cooldown_floor = TIER_TIMING_FLOOR[tier]
    debounce_sec = max(profile.base_debounce_sec * multiplier * debounce_scale, debounce_floor)
    cooldown_sec = max(profile.base_cooldown_sec * multiplier * cooldown_scale, cooldown_floor)

    # Detection method
    use_window_mean = profile.prefers_windowed(tier)
    window_sec: Optional[float] = None
    window_thresh: Optional[float] = None
    if use_window_mean:
        window_sec = TIER_WINDOW_SEC[tier]
        window_thresh = _clamp(
            profile.base_on_threshold * WINDOW_THRESHOLD_SCALE, *WINDOW_THRESHOLD_RANGE
        )

    return validate_rule(AlertRule(
        category=category,
        tier=tier,
        on=on,
        off=off,
        debounce_sec=debounce_sec,
        cooldown_sec=cooldown_sec,
        frame_hz=frame_hz,
        use_window_mean=use_window_mean,
        window_sec=window_sec,
        window_thresh=window_thresh,
    ))


def generate_rules(
    profile: SensitivityProfileConfig,
    frame_hz: float = DEFAULT_FRAME_HZ,
    catalog: Optional[Mapping[str, SoundTier]] = None,
) -> Dict[str, AlertRule]:
    """
    Derive rules for every catalog category.

    Args:
        profile: Active sensitivity profile
        frame_hz: Classification frame rate
        catalog: Category to tier map (defaults to the shipped catalog)

    Returns:
        Mapping of category to AlertRule
    """
    if catalog is None:
        catalog = SOUND_TIER_MAP
    rules = {
        category: generate_rule(category, tier, profile, frame_hz)
        for category, tier in catalog.items()
    }
    n_windowed = sum(1 for r in rules.values() if r.use_window_mean)
    logger.debug(
        f"Generated {len(rules)} rules for profile {profile.level.value} "
        f"({n_windowed} windowed)"
    )
    return rules
