# Data contracts shared by the alert core

from .contracts import (
    InvalidRuleError,
    SoundTier,
    AlertRule,
    AlertState,
    AlertEvent,
    Top2,
    ClassificationFrame,
    top2_from_probs,
)

__all__ = [
    'InvalidRuleError',
    'SoundTier',
    'AlertRule',
    'AlertState',
    'AlertEvent',
    'Top2',
    'ClassificationFrame',
    'top2_from_probs',
]
