"""
SomniQ alert core.

Decides, per monitored sound category, whether an alert should be raised,
escalated or suppressed from a stream of sound-classification frames.
"""

from importlib.metadata import version, PackageNotFoundError

from .config import SensitivityLevel, get_tier_for_category
from .data import AlertEvent, AlertRule, SoundTier
from .detection import AlertEngine, SimpleAlertProcessor, create_alert_engine, generate_rules

__all__ = [
    'get_version',
    'SensitivityLevel',
    'get_tier_for_category',
    'AlertEvent',
    'AlertRule',
    'SoundTier',
    'AlertEngine',
    'SimpleAlertProcessor',
    'create_alert_engine',
    'generate_rules',
]


def get_version() -> str:
    """Return package version if installed as distribution."""
    try:
        return version("somniq-alerts")
    except PackageNotFoundError:
        return "0.0.0"
