"""
Integration tests for offline replay.

Tests for:
- DataFrame / CSV frame loading
- Replay through an engine
- Alert summary
- CLI entry point
"""

import pytest
import numpy as np
import pandas as pd
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from somniq.config.sensitivity_profiles import SensitivityLevel
from somniq.data.contracts import ClassificationFrame, Top2
from somniq.detection.alert_engine import create_alert_engine
from somniq.evaluation.replay import (
    frames_from_dataframe,
    load_frames_csv,
    main,
    replay,
)


@pytest.fixture
def siren_session():
    """Ten seconds of a loud siren over faint wind."""
    return pd.DataFrame({
        "time": np.arange(10, dtype=float),
        "Siren": np.full(10, 0.95),
        "Wind": np.full(10, 0.02),
    })


# =============================================================================
# LOADING TESTS
# =============================================================================

class TestFrameLoading:
    """Tests for building frames from tabular data."""

    def test_top2_derived(self, siren_session):
        frames = frames_from_dataframe(siren_session)
        assert len(frames) == 10
        assert frames[0].top2 == Top2("Siren", 0.95, "Wind", 0.02)

    def test_frame_from_probs(self):
        probs = {"Rain": 0.2, "Siren": 0.7}
        frame = ClassificationFrame.from_probs(3.0, probs)
        probs["Rain"] = 0.9

        assert frame.time == 3.0
        assert frame.probs == {"Rain": 0.2, "Siren": 0.7}
        assert frame.top2 == Top2("Siren", 0.7, "Rain", 0.2)
        assert frame.top2.margin == pytest.approx(0.5)

    def test_single_category_pads_top2(self):
        frame = ClassificationFrame.from_probs(0.0, {"Siren": 0.8})
        assert frame.top2 == Top2("Siren", 0.8, "", 0.0)

    def test_explicit_top2_columns(self):
        df = pd.DataFrame({
            "time": [0.0],
            "Siren": [0.9],
            "top1_label": ["Siren"],
            "top1_score": [0.9],
            "top2_label": ["Alarm"],
            "top2_score": [0.85],
        })
        frame = frames_from_dataframe(df)[0]
        assert frame.top2 == Top2("Siren", 0.9, "Alarm", 0.85)
        assert set(frame.probs) == {"Siren"}

    def test_nan_treated_as_absent(self):
        df = pd.DataFrame({"time": [0.0], "Siren": [np.nan], "Rain": [0.4]})
        frame = frames_from_dataframe(df)[0]
        assert frame.probs == {"Rain": 0.4}

    def test_sorted_by_time(self):
        df = pd.DataFrame({"time": [2.0, 0.0, 1.0], "Rain": [0.1, 0.2, 0.3]})
        assert [f.time for f in frames_from_dataframe(df)] == [0.0, 1.0, 2.0]

    def test_missing_time_column(self):
        with pytest.raises(ValueError):
            frames_from_dataframe(pd.DataFrame({"Rain": [0.1]}))

    def test_csv(self, siren_session, tmp_path):
        path = tmp_path / "session.csv"
        siren_session.to_csv(path, index=False)
        frames = load_frames_csv(path)
        assert len(frames) == 10
        assert frames[3].probs["Siren"] == pytest.approx(0.95)


# =============================================================================
# REPLAY TESTS
# =============================================================================

class TestReplay:
    """Tests for replaying frames through an engine."""

    def test_siren_fires_once(self, siren_session):
        # Balanced siren: on 0.595, debounce 1s, cooldown 7.5s
        result = replay(frames_from_dataframe(siren_session))

        assert [e.category for e in result.events] == ["Siren"]
        assert result.events[0].timestamp == 2.0
        assert result.fired_per_frame[2] == ["Siren"]
        assert result.duration_sec == 9.0

    def test_summary(self, siren_session):
        result = replay(frames_from_dataframe(siren_session))
        summary = result.summarize()

        assert list(summary.index) == ["Siren"]
        row = summary.loc["Siren"]
        assert row["tier"] == "Critical"
        assert row["alerts"] == 1
        assert row["first_fire_sec"] == 2.0
        assert row["alerts_per_hour"] == pytest.approx(400.0)

    def test_empty_summary(self):
        df = pd.DataFrame({"time": [0.0, 1.0], "Rain": [0.1, 0.1], "Wind": [0.05, 0.05]})
        result = replay(frames_from_dataframe(df))
        assert result.events == []
        assert result.summarize().empty
        assert result.to_dataframe().empty

    def test_engine_reset_before_replay(self, siren_session):
        engine = create_alert_engine(level=SensitivityLevel.BALANCED)
        frames = frames_from_dataframe(siren_session)
        replay(frames, engine)
        second = replay(frames, engine)

        # Fresh state each run, history accumulates
        assert len(second.events) == 1
        assert len(engine.alert_history) == 2


# =============================================================================
# CLI TESTS
# =============================================================================

@pytest.mark.integration
class TestCli:

    def test_main_prints_summary(self, siren_session, tmp_path, capsys):
        path = tmp_path / "session.csv"
        siren_session.to_csv(path, index=False)

        result = main([str(path), "--level", "BALANCED"])

        out = capsys.readouterr().out
        assert "REPLAY SUMMARY (Balanced" in out
        assert "Siren" in out
        assert len(result.events) == 1

    def test_main_slider(self, siren_session, tmp_path, capsys):
        path = tmp_path / "session.csv"
        siren_session.to_csv(path, index=False)

        result = main([str(path), "--slider", "0.0"])

        assert result.level == SensitivityLevel.VERY_CONSERVATIVE
        capsys.readouterr()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
