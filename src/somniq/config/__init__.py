"""
Configuration module for SomniQ.

Contains the sound tier catalog and the sensitivity profile table.
"""

from .sound_tiers import (
    SOUND_TIER_MAP,
    DEFAULT_TIER,
    get_tier_for_category,
    get_categories_for_tier,
    get_all_categories,
    is_mapped,
    category_count,
)
from .sensitivity_profiles import (
    SensitivityLevel,
    SensitivityProfileConfig,
    SENSITIVITY_PROFILES,
    get_profile_config,
    get_default_level,
)

__all__ = [
    # Sound tiers
    'SOUND_TIER_MAP',
    'DEFAULT_TIER',
    'get_tier_for_category',
    'get_categories_for_tier',
    'get_all_categories',
    'is_mapped',
    'category_count',

    # Sensitivity profiles
    'SensitivityLevel',
    'SensitivityProfileConfig',
    'SENSITIVITY_PROFILES',
    'get_profile_config',
    'get_default_level',
]
