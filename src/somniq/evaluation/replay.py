"""
Offline replay of recorded classification frames.

Feeds a recorded session (one row per classification window) through an
AlertEngine and reports what fired. Used to tune sensitivity profiles
against real nights without a microphone in the loop.

Input format (wide CSV / DataFrame):
- `time`: seconds since session start
- one column per category with its probability (missing or NaN = 0)
- optional `top1_label`, `top1_score`, `top2_label`, `top2_score`; derived
  from the category columns when absent
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from ..config.sensitivity_profiles import SensitivityLevel
from ..data.contracts import AlertEvent, ClassificationFrame, Top2
from ..detection.alert_engine import AlertEngine, create_alert_engine

logger = logging.getLogger(__name__)

TIME_COLUMN = "time"
TOP2_COLUMNS = ["top1_label", "top1_score", "top2_label", "top2_score"]


# =============================================================================
# FRAME LOADING
# =============================================================================

def frames_from_dataframe(df: pd.DataFrame) -> List[ClassificationFrame]:
    """
    Convert a wide DataFrame into classification frames, sorted by time.

    Raises:
        ValueError: if the `time` column is missing
    """
    if TIME_COLUMN not in df.columns:
        raise ValueError(f"Replay data needs a '{TIME_COLUMN}' column")

    df = df.sort_values(TIME_COLUMN, kind="stable")
    has_top2 = all(col in df.columns for col in TOP2_COLUMNS)
    category_columns = [
        col for col in df.columns if col != TIME_COLUMN and col not in TOP2_COLUMNS
    ]

    frames = []
    for values in df.to_dict("records"):
        probs = {
            col: float(values[col])
            for col in category_columns
            if pd.notna(values[col])
        }
        time = float(values[TIME_COLUMN])
        if has_top2:
            top2 = Top2(
                str(values["top1_label"]), float(values["top1_score"]),
                str(values["top2_label"]), float(values["top2_score"]),
            )
            frames.append(ClassificationFrame(time, probs, top2))
        else:
            frames.append(ClassificationFrame.from_probs(time, probs))
    return frames


def load_frames_csv(path: Union[str, Path]) -> List[ClassificationFrame]:
    """Load recorded frames from a CSV file."""
    df = pd.read_csv(path)
    logger.info(f"Loaded {len(df)} frames from {path}")
    return frames_from_dataframe(df)


# =============================================================================
# REPLAY
# =============================================================================

@dataclass
class ReplayResult:
    """Outcome of replaying a session."""
    level: SensitivityLevel
    events: List[AlertEvent] = field(default_factory=list)
    frame_times: List[float] = field(default_factory=list)
    fired_per_frame: List[List[str]] = field(default_factory=list)

    @property
    def duration_sec(self) -> float:
        if len(self.frame_times) < 2:
            return 0.0
        return self.frame_times[-1] - self.frame_times[0]

    def to_dataframe(self) -> pd.DataFrame:
        """Fired events as a DataFrame, one row per alert."""
        columns = ["id", "category", "tier", "timestamp", "confidence", "duration"]
        return pd.DataFrame([e.to_dict() for e in self.events], columns=columns)

    def summarize(self) -> pd.DataFrame:
        """
        Per-category alert summary.

        Columns: tier, alerts, first_fire_sec, mean_confidence, alerts_per_hour.
        """
        columns = ["tier", "alerts", "first_fire_sec", "mean_confidence", "alerts_per_hour"]
        events = self.to_dataframe()
        if events.empty:
            return pd.DataFrame(columns=columns).rename_axis("category")

        summary = events.groupby("category").agg(
            tier=("tier", "first"),
            alerts=("id", "count"),
            first_fire_sec=("timestamp", "min"),
            mean_confidence=("confidence", "mean"),
        )
        hours = self.duration_sec / 3600.0
        summary["alerts_per_hour"] = summary["alerts"] / hours if hours > 0 else np.nan
        return summary.sort_values(["alerts", "first_fire_sec"], ascending=[False, True])


def replay(
    frames: Iterable[ClassificationFrame],
    engine: Optional[AlertEngine] = None,
) -> ReplayResult:
    """
    Feed frames through an engine in order.

    The engine is reset first so a previous session cannot leak into this one.
    """
    if engine is None:
        engine = create_alert_engine()
    engine.reset()

    result = ReplayResult(level=engine.level)
    for frame in frames:
        fired = engine.process_frame(frame.time, frame.probs, frame.top2)
        result.frame_times.append(frame.time)
        result.fired_per_frame.append(fired)
        if fired:
            result.events.extend(engine.alert_history[-len(fired):])

    logger.info(
        f"Replayed {len(result.frame_times)} frames at {result.level.value}: "
        f"{len(result.events)} alerts"
    )
    return result


# =============================================================================
# CLI
# =============================================================================

def main(argv: Optional[List[str]] = None) -> ReplayResult:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='Replay recorded sound classifications through the alert engine')
    parser.add_argument('csv', type=str,
                        help='CSV with a time column and one probability column per category')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--level', type=str, default=None,
                       choices=[level.name for level in SensitivityLevel],
                       help='Sensitivity level')
    group.add_argument('--slider', type=float, default=None,
                       help='Continuous sensitivity in [0, 1]')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_alert_engine(level=args.level, slider_value=args.slider)
    result = replay(load_frames_csv(args.csv), engine)

    print("=" * 60)
    print(f"REPLAY SUMMARY ({result.level.value}, {result.duration_sec:.0f}s)")
    print("=" * 60)
    summary = result.summarize()
    if summary.empty:
        print("No alerts fired.")
    else:
        print(summary.to_string(float_format=lambda v: f"{v:.3f}"))

    return result


if __name__ == '__main__':
    main()
