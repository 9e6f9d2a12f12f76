# Detection module
# Rule generation, the per-category alert engine and the simple critical-only mode

# Rule generator
from .rule_generator import (
    generate_rules,
    generate_rule,
    validate_rule,
    TIER_THRESHOLD_SCALE,
    TIER_TIMING_SCALE,
    TIER_TIMING_FLOOR,
    TIER_WINDOW_SEC,
)

# Alert engine
from .alert_engine import (
    AlertEngine,
    AlertEngineConfig,
    EngineSnapshot,
    create_alert_engine,
)

# Simple mode
from .simple_processor import (
    SimpleAlertProcessor,
    SimpleProcessorConfig,
)

__all__ = [
    # Rule generator
    'generate_rules',
    'generate_rule',
    'validate_rule',
    'TIER_THRESHOLD_SCALE',
    'TIER_TIMING_SCALE',
    'TIER_TIMING_FLOOR',
    'TIER_WINDOW_SEC',

    # Alert engine
    'AlertEngine',
    'AlertEngineConfig',
    'EngineSnapshot',
    'create_alert_engine',

    # Simple mode
    'SimpleAlertProcessor',
    'SimpleProcessorConfig',
]
