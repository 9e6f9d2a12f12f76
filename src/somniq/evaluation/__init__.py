# Evaluation module
# Offline replay of recorded classification sessions

from .replay import (
    ReplayResult,
    frames_from_dataframe,
    load_frames_csv,
    replay,
)

__all__ = [
    'ReplayResult',
    'frames_from_dataframe',
    'load_frames_csv',
    'replay',
]
