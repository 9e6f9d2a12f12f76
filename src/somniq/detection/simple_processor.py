"""
Simple Alert Processor for SomniQ.

Lower-fidelity alert mode: fires on the first Critical-tier category whose
probability reaches a flat threshold, then holds one global cooldown.
No smoothing, no hysteresis, no uncertainty gate. It is NOT feature-compatible
with AlertEngine and exists as a distinct mode.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Mapping, Optional, Tuple

from ..config.sound_tiers import get_categories_for_tier
from ..data.contracts import AlertEvent, SoundTier

logger = logging.getLogger(__name__)


@dataclass
class SimpleProcessorConfig:
    confidence_threshold: float = 0.5
    cooldown_sec: float = 30.0
    history_limit: int = 100


class SimpleAlertProcessor:
    """At most one Critical alert per frame, one global cooldown."""

    def __init__(self, config: Optional[SimpleProcessorConfig] = None):
        if config is None:
            config = SimpleProcessorConfig()
        self.config = config
        self.critical_categories: List[str] = get_categories_for_tier(SoundTier.CRITICAL)

        self.active_alerts: List[AlertEvent] = []
        self.alert_history: Deque[AlertEvent] = deque(maxlen=config.history_limit)
        self.last_alert_time: Optional[float] = None

        logger.info(
            f"SimpleAlertProcessor monitoring {len(self.critical_categories)} critical sounds "
            f"at threshold {config.confidence_threshold}"
        )

    def in_cooldown(self, time: float) -> bool:
        if self.last_alert_time is None:
            return False
        return time - self.last_alert_time < self.config.cooldown_sec

    def process_frame(
        self,
        time: float,
        probs: Mapping[str, float],
        top2: Optional[Tuple[str, float, str, float]] = None,
    ) -> List[str]:
        """
        Check Critical categories in name order and fire the first match.

        `top2` is accepted for interface parity and ignored.
        """
        if self.in_cooldown(time):
            remaining = self.config.cooldown_sec - (time - self.last_alert_time)
            logger.debug(f"t={time:.2f}: in cooldown, {remaining:.1f}s remaining")
            return []

        for category in self.critical_categories:
            confidence = float(probs.get(category, 0.0))
            if confidence >= self.config.confidence_threshold:
                event = AlertEvent(
                    category=category,
                    tier=SoundTier.CRITICAL,
                    timestamp=time,
                    confidence=confidence,
                )
                self.last_alert_time = time
                self.active_alerts.append(event)
                self.alert_history.append(event)
                # Most recent first
                self.active_alerts.sort(key=lambda e: e.timestamp, reverse=True)
                logger.info(f"t={time:.2f}: ALERT {category} (confidence={confidence:.3f})")
                return [category]

        return []

    def clear_alert(self, alert_id: str) -> bool:
        before = len(self.active_alerts)
        self.active_alerts = [e for e in self.active_alerts if e.id != alert_id]
        removed = len(self.active_alerts) < before
        if removed:
            logger.info(f"Cleared alert {alert_id}")
        return removed

    def clear_all_alerts(self):
        logger.info(f"Cleared all {len(self.active_alerts)} active alerts")
        self.active_alerts = []

    def get_top_active_alert(self) -> Optional[AlertEvent]:
        return self.active_alerts[0] if self.active_alerts else None

    def reset(self):
        """Clear active alerts and the cooldown (new session)."""
        count = len(self.active_alerts)
        self.active_alerts = []
        self.last_alert_time = None
        logger.info(f"Reset complete - cleared {count} active alerts")
