"""
End-to-End Demo Script for the SomniQ alert core

This script walks through every component on a synthetic night:
1. Sound tier catalog
2. Sensitivity profiles
3. Rule generation
4. Alert engine on a simulated session
5. Profile switch and reset
6. Simple (critical-only) mode
7. Offline replay summary

Run this script to verify all modules are working correctly.
"""

import os
import sys
import numpy as np
import pandas as pd
from datetime import datetime

# Add src to path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.join(script_dir, 'src'))


def print_section(title: str):
    """Print a section header."""
    print("\n" + "=" * 60)
    print(f" {title}")
    print("=" * 60)


def synthetic_night(duration_sec: int = 600, seed: int = 42) -> pd.DataFrame:
    """
    Build one classifier frame per second: background noise, a snoring
    stretch, a short cough burst and a siren near the end.
    """
    rng = np.random.default_rng(seed)
    t = np.arange(duration_sec, dtype=float)
    background = np.clip(rng.normal(0.55, 0.05, duration_sec), 0.0, 1.0)

    snoring = np.where((t >= 60) & (t < 240), rng.uniform(0.75, 0.95, duration_sec), 0.02)
    coughing = np.where((t >= 300) & (t < 304), 0.9, 0.01)
    siren = np.where(t >= 540, rng.uniform(0.85, 0.99, duration_sec), 0.0)

    # Foreground sounds dominate the background when present
    background = np.where((snoring > 0.5) | (coughing > 0.5) | (siren > 0.5), 0.05, background)

    return pd.DataFrame({
        "time": t,
        "Background": background,
        "Snoring": snoring,
        "Coughing": coughing,
        "Siren": siren,
    })


def demo_tier_catalog():
    """Demo: Sound tier catalog."""
    print_section("1. SOUND TIER CATALOG")

    from somniq.config.sound_tiers import category_count, get_categories_for_tier, get_tier_for_category
    from somniq.data.contracts import SoundTier

    print(f"Mapped categories: {category_count()}")
    for tier in sorted(SoundTier, reverse=True):
        print(f"  {tier.value:<9} {', '.join(get_categories_for_tier(tier))}")
    print(f"Unknown label 'Bagpipes' -> {get_tier_for_category('Bagpipes').value}")

    print("✅ Tier catalog working")
    return True


def demo_sensitivity_profiles():
    """Demo: Sensitivity profiles and slider mapping."""
    print_section("2. SENSITIVITY PROFILES")

    from somniq.config.sensitivity_profiles import SENSITIVITY_PROFILES, SensitivityLevel

    for level, profile in SENSITIVITY_PROFILES.items():
        profile.validate()
        print(f"  {level.value:<18} on={profile.base_on_threshold:.2f} "
              f"off={profile.base_off_threshold:.2f} "
              f"cooldown={profile.base_cooldown_sec:>4.0f}s")
    for value in (0.1, 0.4, 0.8):
        print(f"Slider {value:.1f} -> {SensitivityLevel.from_slider_value(value).value}")

    print("✅ Sensitivity profiles working")
    return True


def demo_rule_generation():
    """Demo: Rule generation."""
    print_section("3. RULE GENERATION")

    from somniq.config.sensitivity_profiles import get_profile_config
    from somniq.detection.rule_generator import generate_rules

    rules = generate_rules(get_profile_config("Balanced"))
    for category in ("Siren", "Snoring", "Talking", "Rain"):
        rule = rules[category]
        method = f"window {rule.window_sec:.0f}s >= {rule.window_thresh:.2f}" if rule.use_window_mean else "EMA"
        print(f"  {category:<8} on={rule.on:.3f} off={rule.off:.3f} "
              f"debounce={rule.debounce_sec:.1f}s cooldown={rule.cooldown_sec:.1f}s {method}")

    print("✅ Rule generation working")
    return True


def demo_alert_engine():
    """Demo: Alert engine on a simulated night."""
    print_section("4. ALERT ENGINE")

    from somniq.detection.alert_engine import create_alert_engine
    from somniq.evaluation.replay import frames_from_dataframe

    engine = create_alert_engine()
    published = []
    engine.subscribe(published.append)

    for frame in frames_from_dataframe(synthetic_night()):
        for category in engine.process_frame(frame.time, frame.probs, frame.top2):
            print(f"  t={frame.time:>5.0f}s  ALERT {category}")

    top = engine.get_top_active_alert()
    print(f"Active alerts: {[e.category for e in engine.active_alerts]}")
    print(f"Top active: {top.category if top else None}")
    print(f"History: {len(engine.alert_history)} events, {len(published)} snapshots published")

    print("✅ Alert engine working")
    return True


def demo_profile_switch():
    """Demo: Profile switch and reset."""
    print_section("5. PROFILE SWITCH & RESET")

    from somniq.detection.alert_engine import create_alert_engine

    engine = create_alert_engine(slider_value=0.5)
    for t in range(8):
        engine.process_frame(float(t), {"Rain": 0.9}, ("Rain", 0.9, "Wind", 0.05))
    print(f"Before switch: active={[e.category for e in engine.active_alerts]}")

    level = engine.set_sensitivity(0.8)
    fired = engine.process_frame(8.0, {}, ("Silence", 0.95, "Rain", 0.0))
    print(f"After switch to {level.value}: active={engine.active_alerts}, fired={fired}")

    engine.reset()
    print(f"After reset: history kept ({len(engine.alert_history)} events)")

    print("✅ Profile switch working")
    return True


def demo_simple_mode():
    """Demo: Simple critical-only mode."""
    print_section("6. SIMPLE MODE")

    from somniq.detection.simple_processor import SimpleAlertProcessor
    from somniq.evaluation.replay import frames_from_dataframe

    processor = SimpleAlertProcessor()
    for frame in frames_from_dataframe(synthetic_night()):
        for category in processor.process_frame(frame.time, frame.probs, frame.top2):
            print(f"  t={frame.time:>5.0f}s  ALERT {category}")
    print(f"History: {len(processor.alert_history)} events")

    print("✅ Simple mode working")
    return True


def demo_replay():
    """Demo: Offline replay summary."""
    print_section("7. REPLAY SUMMARY")

    from somniq.config.sensitivity_profiles import SensitivityLevel
    from somniq.detection.alert_engine import create_alert_engine
    from somniq.evaluation.replay import frames_from_dataframe, replay

    frames = frames_from_dataframe(synthetic_night())
    for level in SensitivityLevel:
        result = replay(frames, create_alert_engine(level=level))
        counts = result.summarize()["alerts"].to_dict() if result.events else {}
        print(f"  {level.value:<18} {len(result.events):>3} alerts {counts}")

    print("✅ Replay working")
    return True


def run_all_demos():
    """Run all demos and report results."""
    print("\n" + "=" * 70)
    print(" SOMNIQ ALERT CORE - END-TO-END DEMO")
    print("=" * 70)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    demos = [
        ("Tier Catalog", demo_tier_catalog),
        ("Sensitivity Profiles", demo_sensitivity_profiles),
        ("Rule Generation", demo_rule_generation),
        ("Alert Engine", demo_alert_engine),
        ("Profile Switch", demo_profile_switch),
        ("Simple Mode", demo_simple_mode),
        ("Replay", demo_replay),
    ]

    results = []
    for name, demo_fn in demos:
        try:
            success = demo_fn()
            results.append((name, success))
        except Exception as e:
            print(f"❌ {name} FAILED: {e}")
            results.append((name, False))

    # Summary
    print_section("DEMO SUMMARY")

    passed = sum(1 for _, success in results if success)
    total = len(results)

    print(f"\nResults: {passed}/{total} demos passed\n")

    for name, success in results:
        status = "✅ PASS" if success else "❌ FAIL"
        print(f"  {status}: {name}")

    print("\n" + "=" * 70)
    if passed == total:
        print(" ALL DEMOS PASSED")
    else:
        print(f" {total - passed} demo(s) failed - check implementation")
    print("=" * 70)

    return passed == total


if __name__ == '__main__':
    success = run_all_demos()
    sys.exit(0 if success else 1)
