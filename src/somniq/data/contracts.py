"""
Shared value types for the SomniQ alert core.

These are the contracts passed between the tier catalog, the rule generator
and the alert engine. Rules and events are immutable; per-category state is
mutable and owned by exactly one engine instance.
"""

import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, Mapping, NamedTuple, Optional


# =============================================================================
# ERRORS
# =============================================================================

class InvalidRuleError(ValueError):
    """Raised when an alert rule violates its threshold or timing constraints."""


# =============================================================================
# SOUND TIER
# =============================================================================

class SoundTier(Enum):
    """
    Severity tier assigned to a sound category.

    Tiers are totally ordered by `priority` (LOW < MEDIUM < HIGH < CRITICAL).
    """
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def priority(self) -> int:
        return _TIER_PRIORITY[self]

    @property
    def alert_priority(self) -> str:
        """Delivery-agnostic urgency label for downstream presenters."""
        return _TIER_ALERT_PRIORITY[self]

    def __lt__(self, other):
        if not isinstance(other, SoundTier):
            return NotImplemented
        return self.priority < other.priority

    def __le__(self, other):
        if not isinstance(other, SoundTier):
            return NotImplemented
        return self.priority <= other.priority

    def __gt__(self, other):
        if not isinstance(other, SoundTier):
            return NotImplemented
        return self.priority > other.priority

    def __ge__(self, other):
        if not isinstance(other, SoundTier):
            return NotImplemented
        return self.priority >= other.priority


_TIER_PRIORITY: Dict[SoundTier, int] = {
    SoundTier.LOW: 1,
    SoundTier.MEDIUM: 2,
    SoundTier.HIGH: 3,
    SoundTier.CRITICAL: 4,
}

_TIER_ALERT_PRIORITY: Dict[SoundTier, str] = {
    SoundTier.LOW: "info",
    SoundTier.MEDIUM: "notice",
    SoundTier.HIGH: "warning",
    SoundTier.CRITICAL: "critical",
}


# =============================================================================
# ALERT RULE
# =============================================================================

@dataclass(frozen=True)
class AlertRule:
    """
    Per-category firing rule.

    Two detection methods:
    - EMA/hysteresis (use_window_mean=False): fire once the smoothed
      probability stays >= `on` for `debounce_sec`, deactivate at <= `off`.
    - Windowed mean (use_window_mean=True): fire once the mean of the last
      `window_sec * frame_hz` samples reaches `window_thresh`.
    """
    category: str
    tier: SoundTier
    on: float
    off: float
    debounce_sec: float
    cooldown_sec: float
    frame_hz: float = 1.0
    use_window_mean: bool = False
    window_sec: Optional[float] = None
    window_thresh: Optional[float] = None

    @property
    def window_capacity(self) -> int:
        """Number of samples held by the ring buffer (0 for EMA rules)."""
        if not self.use_window_mean or not self.window_sec:
            return 0
        return max(1, int(round(self.window_sec * self.frame_hz)))

    @property
    def ema_alpha(self) -> float:
        return self.frame_hz / (self.frame_hz + 1.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "tier": self.tier.value,
            "on": self.on,
            "off": self.off,
            "debounce_sec": self.debounce_sec,
            "cooldown_sec": self.cooldown_sec,
            "frame_hz": self.frame_hz,
            "use_window_mean": self.use_window_mean,
            "window_sec": self.window_sec,
            "window_thresh": self.window_thresh,
        }


# =============================================================================
# ALERT STATE
# =============================================================================

@dataclass
class AlertState:
    """
    Mutable detection state for one category.

    NOTE: Owned by a single AlertEngine. Never share across engines.
    """
    ema: float = 0.0
    is_active: bool = False
    cooldown_until: float = float("-inf")
    above_on_since: Optional[float] = None
    ring: Deque[float] = field(default_factory=deque)

    @classmethod
    def for_rule(cls, rule: AlertRule) -> "AlertState":
        """Create a fresh state sized for the rule's window."""
        capacity = rule.window_capacity
        return cls(ring=deque(maxlen=capacity if capacity > 0 else None))

    def in_cooldown(self, current_time: float) -> bool:
        return current_time < self.cooldown_until


# =============================================================================
# ALERT EVENT
# =============================================================================

@dataclass(frozen=True)
class AlertEvent:
    """A fired alert. `duration` is left unset; storage fills it in later."""
    category: str
    tier: SoundTier
    timestamp: float
    confidence: float
    duration: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "tier": self.tier.value,
            "timestamp": self.timestamp,
            "confidence": self.confidence,
            "duration": self.duration,
        }


# =============================================================================
# CLASSIFICATION FRAME
# =============================================================================

class Top2(NamedTuple):
    """The two highest-scoring labels of one classification result."""
    label1: str
    score1: float
    label2: str
    score2: float

    @property
    def margin(self) -> float:
        return self.score1 - self.score2


@dataclass(frozen=True)
class ClassificationFrame:
    """One periodic classifier output, as consumed by the engine."""
    time: float
    probs: Mapping[str, float]
    top2: Top2

    @classmethod
    def from_probs(cls, time: float, probs: Mapping[str, float]) -> "ClassificationFrame":
        """Build a frame, deriving top-2 from the probability map."""
        return cls(time=time, probs=dict(probs), top2=top2_from_probs(probs))


def top2_from_probs(probs: Mapping[str, float]) -> Top2:
    """
    Derive the top-2 label/score pairs from a probability map.

    Missing entries are padded with an empty label and score 0.0.
    """
    ranked = sorted(probs.items(), key=lambda item: item[1], reverse=True)
    first = ranked[0] if len(ranked) > 0 else ("", 0.0)
    second = ranked[1] if len(ranked) > 1 else ("", 0.0)
    return Top2(first[0], float(first[1]), second[0], float(second[1]))
