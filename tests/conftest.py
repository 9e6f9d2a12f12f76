"""
pytest configuration and shared fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import pytest
import sys
import os

# Add src to path for all tests
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from somniq.data.contracts import AlertRule, SoundTier  # noqa: E402
from somniq.detection.alert_engine import AlertEngine  # noqa: E402


# =============================================================================
# CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# RULE FIXTURES
# =============================================================================

def make_ema_rule(category="Siren", tier=SoundTier.CRITICAL, on=0.6, off=0.4,
                  debounce_sec=2.0, cooldown_sec=5.0, frame_hz=1.0):
    """EMA/hysteresis rule with explicit thresholds."""
    return AlertRule(
        category=category,
        tier=tier,
        on=on,
        off=off,
        debounce_sec=debounce_sec,
        cooldown_sec=cooldown_sec,
        frame_hz=frame_hz,
        use_window_mean=False,
    )


def make_window_rule(category="Snoring", tier=SoundTier.HIGH, window_sec=3.0,
                     window_thresh=0.7, cooldown_sec=5.0, on=0.6, off=0.4, frame_hz=1.0):
    """Windowed-mean rule with explicit window."""
    return AlertRule(
        category=category,
        tier=tier,
        on=on,
        off=off,
        debounce_sec=1.0,
        cooldown_sec=cooldown_sec,
        frame_hz=frame_hz,
        use_window_mean=True,
        window_sec=window_sec,
        window_thresh=window_thresh,
    )


@pytest.fixture
def ema_rule():
    return make_ema_rule()


@pytest.fixture
def window_rule():
    return make_window_rule()


# =============================================================================
# FRAME FIXTURES
# =============================================================================

@pytest.fixture
def certain_top2():
    """Top-2 that passes every shipped uncertainty gate."""
    return ("Siren", 0.95, "Background", 0.02)


@pytest.fixture
def uncertain_top2():
    """Top-2 with a 0.05 margin, vetoed by the balanced profile (0.15)."""
    return ("Snoring", 0.5, "Coughing", 0.45)


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def small_engine():
    """Balanced engine over a three-category catalog."""
    catalog = {
        "Rain": SoundTier.LOW,
        "Snoring": SoundTier.HIGH,
        "Siren": SoundTier.CRITICAL,
    }
    return AlertEngine(catalog=catalog)


@pytest.fixture
def engine():
    """Balanced engine over the shipped catalog."""
    return AlertEngine()
