"""Rolling-window features over a player's stat history.

Every function looks only at values before ``end_idx`` (exclusive).
"""

from __future__ import annotations

import math
from typing import Sequence


def _window(vals: Sequence[float], end_idx: int, window: int) -> Sequence[float]:
    """The last ``window`` values before ``end_idx``, clamped to the data."""
    if end_idx <= 0 or not vals:
        return []
    end = min(end_idx, len(vals))
    start = max(0, end - window)
    return vals[start:end]


def rolling_avg(vals: Sequence[float], end_idx: int, window: int) -> float:
    """Mean of the last ``window`` values before ``end_idx``; 0.0 if there are none."""
    values = _window(vals, end_idx, window)
    if not values:
        return 0.0
    return sum(values) / len(values)


def rolling_std(vals: Sequence[float], end_idx: int, window: int) -> float:
    """Sample standard deviation of the window; 0.0 with fewer than two values."""
    values = _window(vals, end_idx, window)
    count = len(values)
    if count < 2:
        return 0.0
    mean = sum(values) / count
    return math.sqrt(sum((v - mean) ** 2 for v in values) / (count - 1))


def z_score(
    vals: Sequence[float],
    end_idx: int,
    lookback_recent: int = 5,
    lookback_season: int = 40,
) -> float:
    """(recent average - season average) / season std; 0.0 without spread or data."""
    if end_idx <= 0 or not vals:
        return 0.0
    season_avg = rolling_avg(vals, end_idx, lookback_season)
    season_std = rolling_std(vals, end_idx, lookback_season)
    recent_avg = rolling_avg(vals, end_idx, lookback_recent)
    if season_std < 1e-9:
        return 0.0
    return (recent_avg - season_avg) / season_std


def hit_rate_over(vals: Sequence[float], end_idx: int, line: float, window: int = 20) -> float:
    """Fraction of window values strictly above ``line``."""
    values = _window(vals, end_idx, window)
    if not values:
        return 0.0
    return sum(1 for v in values if v > line) / len(values)


def hit_rate_under(vals: Sequence[float], end_idx: int, line: float, window: int = 20) -> float:
    """Fraction of window values strictly below ``line``."""
    values = _window(vals, end_idx, window)
    if not values:
        return 0.0
    return sum(1 for v in values if v < line) / len(values)


def per_minute_rate(
    stat_vals: Sequence[float],
    minutes: Sequence[float],
    end_idx: int,
    window: int = 10,
) -> float:
    """sum(stat) / sum(minutes) over the window; 0.0 if no minutes were played."""
    if end_idx <= 0 or not stat_vals or not minutes:
        return 0.0
    n = min(len(stat_vals), len(minutes))
    stats = _window(stat_vals[:n], end_idx, window)
    mins = _window(minutes[:n], end_idx, window)
    if not stats:
        return 0.0
    total_minutes = sum(mins)
    if total_minutes < 1e-9:
        return 0.0
    return sum(stats) / total_minutes