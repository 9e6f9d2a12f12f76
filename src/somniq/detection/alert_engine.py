"""
Alert Engine for SomniQ.

Stateful per-category processor. Consumes one classification frame at a
time, keeps smoothed/windowed state per category, and decides fire/clear
through the generated rules.

ARCHITECTURE:
- AlertEngineConfig: engine-wide knobs (history cap, frame rate)
- AlertEngine: owns rules, per-category AlertState, active list and history
- EngineSnapshot: immutable view published to subscribers after each change

CONCURRENCY: process_frame must be called serially by a single producer.
The engine holds no locks and owns no timers; subscribers are invoked
synchronously once a frame has been fully applied.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Deque, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..config.sensitivity_profiles import (
    SensitivityLevel,
    SensitivityProfileConfig,
    get_default_level,
    get_profile_config,
)
from ..config.sound_tiers import SOUND_TIER_MAP
from ..data.contracts import AlertEvent, AlertRule, AlertState, SoundTier, Top2
from .rule_generator import generate_rules, validate_rule

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class AlertEngineConfig:
    """Engine-wide configuration."""
    history_limit: int = 100    # Oldest events evicted past this
    frame_hz: float = 1.0       # Classification frames per second


@dataclass(frozen=True)
class EngineSnapshot:
    """Published state after a frame or command has been fully applied."""
    level: SensitivityLevel
    active_alerts: Tuple[AlertEvent, ...]
    alert_history: Tuple[AlertEvent, ...]
    fired: Tuple[str, ...] = ()
    time: Optional[float] = None


Subscriber = Callable[[EngineSnapshot], None]
ProfileLike = Union[SensitivityLevel, SensitivityProfileConfig, str]


def _coerce_prob(value) -> float:
    """Probability as a float; anything unusable (None, text, NaN, inf) counts as 0."""
    if value is None:
        return 0.0
    try:
        prob = float(value)
    except (TypeError, ValueError):
        return 0.0
    return prob if math.isfinite(prob) else 0.0


# =============================================================================
# ALERT ENGINE
# =============================================================================

class AlertEngine:
    """
    Per-category alert decision engine.

    Per frame:
    1. Global uncertainty gate from the top-2 scores
    2. Per category: skip while in cooldown, update EMA, push ring sample
    3. Fire (windowed mean or debounced EMA) or deactivate (EMA <= off)

    Every catalog category has exactly one rule and one state at all times.
    """

    def __init__(
        self,
        level: Optional[ProfileLike] = None,
        config: Optional[AlertEngineConfig] = None,
        catalog: Optional[Mapping[str, SoundTier]] = None,
    ):
        if config is None:
            config = AlertEngineConfig()
        self.config = config
        self.catalog: Dict[str, SoundTier] = dict(catalog if catalog is not None else SOUND_TIER_MAP)

        self._profile = self._resolve_profile(level if level is not None else get_default_level())
        self._rules: Dict[str, AlertRule] = generate_rules(
            self._profile, config.frame_hz, self.catalog
        )
        self._states: Dict[str, AlertState] = {}
        self._active: List[AlertEvent] = []
        self._history: Deque[AlertEvent] = deque(maxlen=config.history_limit)
        self._subscribers: List[Subscriber] = []
        self._recreate_states()

        logger.info(
            f"AlertEngine initialized: profile={self._profile.level.value}, "
            f"{len(self._rules)} categories"
        )

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def profile(self) -> SensitivityProfileConfig:
        return self._profile

    @property
    def level(self) -> SensitivityLevel:
        return self._profile.level

    @property
    def rules(self) -> Mapping[str, AlertRule]:
        return MappingProxyType(self._rules)

    @property
    def active_alerts(self) -> List[AlertEvent]:
        """Active alerts sorted by descending tier priority."""
        return list(self._active)

    @property
    def alert_history(self) -> List[AlertEvent]:
        """Fired alerts, oldest first."""
        return list(self._history)

    def get_rule(self, category: str) -> Optional[AlertRule]:
        return self._rules.get(category)

    def get_state(self, category: str) -> Optional[AlertState]:
        """Copy of a category's detection state, for diagnostics."""
        state = self._states.get(category)
        if state is None:
            return None
        return replace(state, ring=deque(state.ring, maxlen=state.ring.maxlen))

    def get_top_active_alert(self) -> Optional[AlertEvent]:
        """Highest-priority active alert, or None."""
        return self._active[0] if self._active else None

    def snapshot(self, fired: Tuple[str, ...] = (), time: Optional[float] = None) -> EngineSnapshot:
        return EngineSnapshot(
            level=self.level,
            active_alerts=tuple(self._active),
            alert_history=tuple(self._history),
            fired=fired,
            time=time,
        )

    # -------------------------------------------------------------------------
    # Frame processing
    # -------------------------------------------------------------------------

    def is_uncertain(self, top2: Top2) -> bool:
        """Global uncertainty gate: weak top-1 or too small a top-1/top-2 margin."""
        top2 = Top2(*top2)
        return (
            top2.score1 < self._profile.uncertainty_threshold
            or top2.margin < self._profile.uncertainty_difference
        )

    def process_frame(
        self,
        time: float,
        probs: Mapping[str, float],
        top2: Tuple[str, float, str, float],
    ) -> List[str]:
        """
        Apply one classification frame.

        Args:
            time: Seconds since session start, non-decreasing across calls
            probs: Category to probability; absent categories count as 0
            top2: (label1, score1, label2, score2) from the same result

        Returns:
            Categories that fired on this frame (usually empty)
        """
        label1, score1, label2, score2 = top2
        top2 = Top2(label1, _coerce_prob(score1), label2, _coerce_prob(score2))
        uncertain = self.is_uncertain(top2)
        if uncertain:
            logger.debug(
                f"t={time:.2f}: uncertain frame ({top2.label1}={top2.score1:.2f}, "
                f"{top2.label2}={top2.score2:.2f})"
            )

        fired: List[str] = []
        changed = False

        for category, rule in self._rules.items():
            state = self._states[category]

            # Dormant during cooldown: no EMA or ring update
            if state.in_cooldown(time):
                continue

            prob = _coerce_prob(probs.get(category))
            alpha = rule.ema_alpha
            state.ema = alpha * prob + (1.0 - alpha) * state.ema

            if rule.use_window_mean:
                state.ring.append(0.0 if uncertain else prob)

            if self._should_fire(rule, state, time, uncertain):
                if rule.use_window_mean:
                    confidence = float(np.mean(state.ring))
                else:
                    confidence = state.ema
                self._fire(rule, state, time, confidence)
                fired.append(category)
                changed = True
            elif state.is_active and state.ema <= rule.off:
                self._deactivate(category, state)
                logger.info(f"t={time:.2f}: {category} deactivated (ema={state.ema:.3f})")
                changed = True

        if fired:
            self._sort_active()
        if changed:
            self._publish(self.snapshot(tuple(fired), time))
        return fired

    def _should_fire(self, rule: AlertRule, state: AlertState, time: float, uncertain: bool) -> bool:
        if not rule.use_window_mean:
            # Debounce tracking: no partial credit on dips below `on`
            if state.ema >= rule.on:
                if state.above_on_since is None:
                    state.above_on_since = time
            else:
                state.above_on_since = None

        if uncertain or state.is_active:
            return False

        if rule.use_window_mean:
            if len(state.ring) < rule.window_capacity:
                return False
            return float(np.mean(state.ring)) >= rule.window_thresh

        if state.above_on_since is None:
            return False
        return time - state.above_on_since >= rule.debounce_sec

    def _fire(self, rule: AlertRule, state: AlertState, time: float, confidence: float):
        event = AlertEvent(
            category=rule.category,
            tier=rule.tier,
            timestamp=time,
            confidence=confidence,
        )
        self._active.append(event)
        self._history.append(event)

        state.is_active = True
        state.cooldown_until = max(state.cooldown_until, time + rule.cooldown_sec)
        state.above_on_since = None

        logger.info(
            f"t={time:.2f}: ALERT {rule.category} [{rule.tier.value}] "
            f"confidence={confidence:.3f}, cooldown until {state.cooldown_until:.2f}"
        )

    def _deactivate(self, category: str, state: AlertState):
        state.is_active = False
        self._active = [e for e in self._active if e.category != category]

    def _sort_active(self):
        # Stable: chronological order kept within a tier
        self._active.sort(key=lambda e: e.tier.priority, reverse=True)

    # -------------------------------------------------------------------------
    # Management
    # -------------------------------------------------------------------------

    def clear_alert(self, alert_id: str) -> bool:
        """
        Remove one alert from the active list.

        Cooldown, EMA and ring state are untouched, so the category may fire
        again once its cooldown has elapsed.

        Returns:
            True if an alert was removed
        """
        for event in self._active:
            if event.id == alert_id:
                self._active.remove(event)
                state = self._states.get(event.category)
                if state is not None:
                    state.is_active = False
                logger.info(f"Cleared alert {alert_id} ({event.category})")
                self._publish(self.snapshot())
                return True
        return False

    def clear_all_alerts(self):
        """Remove all active alerts; detection state is untouched."""
        count = len(self._active)
        self._active = []
        for state in self._states.values():
            state.is_active = False
        logger.info(f"Cleared all {count} active alerts")
        self._publish(self.snapshot())

    def change_profile(self, level: ProfileLike):
        """
        Switch sensitivity profile.

        Rules are regenerated, all per-category state is discarded and the
        active list is cleared so stale smoothing cannot leak across the
        switch. History is preserved. Rule overrides are dropped.

        If the profile is invalid or its rules cannot be generated, the
        error propagates and the engine keeps its previous profile, rules
        and state.
        """
        profile = self._resolve_profile(level)
        rules = generate_rules(profile, self.config.frame_hz, self.catalog)

        self._profile = profile
        self._rules = rules
        self._recreate_states()
        self._active = []
        logger.info(f"Profile changed to {self._profile.level.value}")
        self._publish(self.snapshot())

    def set_sensitivity(self, slider_value: float) -> SensitivityLevel:
        """Change profile from a continuous [0, 1] slider value."""
        level = SensitivityLevel.from_slider_value(slider_value)
        self.change_profile(level)
        return level

    def set_rule(self, rule: AlertRule):
        """
        Replace a single category's rule.

        Raises:
            InvalidRuleError: if the rule is inconsistent
        """
        validate_rule(rule)
        self._rules[rule.category] = rule
        self._states[rule.category] = AlertState.for_rule(rule)
        self._active = [e for e in self._active if e.category != rule.category]
        logger.info(f"Rule override for {rule.category}: {rule.to_dict()}")
        self._publish(self.snapshot())

    def reset(self):
        """
        Reset session state between monitoring sessions.

        Recreates per-category state and clears active alerts; rules and
        history are preserved.
        """
        count = len(self._active)
        self._recreate_states()
        self._active = []
        logger.info(f"Engine reset - cleared {count} active alerts")
        self._publish(self.snapshot())

    # -------------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber):
        """Register a callback invoked with an EngineSnapshot after each change."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _publish(self, snapshot: EngineSnapshot):
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Alert subscriber {callback!r} failed")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _recreate_states(self):
        self._states = {
            category: AlertState.for_rule(rule)
            for category, rule in self._rules.items()
        }

    @staticmethod
    def _resolve_profile(level: ProfileLike) -> SensitivityProfileConfig:
        if isinstance(level, SensitivityProfileConfig):
            level.validate()
            return level
        return get_profile_config(level)


def create_alert_engine(
    level: Optional[ProfileLike] = None,
    slider_value: Optional[float] = None,
    config: Optional[AlertEngineConfig] = None,
) -> AlertEngine:
    """
    Factory function to create an alert engine.

    Args:
        level: Sensitivity level, display name or full profile config
        slider_value: Continuous [0, 1] sensitivity, used when level is None
        config: Engine configuration

    Returns:
        Configured AlertEngine
    """
    if level is None and slider_value is not None:
        level = SensitivityLevel.from_slider_value(slider_value)
    return AlertEngine(level=level, config=config)
