"""Lab configuration: defaults, JSON loading and saving, path expansion."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable


def expand_home(path: str) -> str:
    """Replace a leading ``~`` with ``$HOME`` when HOME is set."""
    if path.startswith("~"):
        home = os.environ.get("HOME")
        if home is not None:
            return home + path[1:]
    return path


def _as_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"config field {key!r} must be a string, got {type(value).__name__}")
    return value


def _as_int(key: str, value: Any) -> int:
    if not isinstance(value, (bool, int, float)):
        raise TypeError(f"config field {key!r} must be a number, got {type(value).__name__}")
    return int(value)


def _as_float(key: str, value: Any) -> float:
    if not isinstance(value, (bool, int, float)):
        raise TypeError(f"config field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"config field {key!r} must be a boolean, got {type(value).__name__}")
    return value


_PATH_FIELDS = (
    "data_dir", "kalshi_dir", "output_dir",
    "knowledge_path", "notify_script", "models_db_path",
)

_WEIGHT_FIELDS = (
    "meanrev_weight", "situational_weight", "twostage_weight", "crossmarket_weight",
    "meta_weight", "bayesian_weight", "ml_props_weight", "moneyline_weight",
    "compound_weight", "residual_weight", "ensemble_weight", "timeseries_weight",
    "neural_weight", "spreads_weight", "totals_weight", "four_factors_weight",
)

# When every weight is zero these are restored; four_factors_weight is left as given.
_RESET_WEIGHT_FIELDS = tuple(f for f in _WEIGHT_FIELDS if f != "four_factors_weight")

_JSON_FIELDS: tuple[tuple[str, Callable[[str, Any], Any]], ...] = (
    *((name, _as_str) for name in _PATH_FIELDS),
    ("fast_workers", _as_int),
    ("slow_workers", _as_int),
    *((name, _as_float) for name in _WEIGHT_FIELDS),
    ("notify_enabled", _as_bool),
    ("notify_min_roi", _as_float),
    ("kalshi_fee_rate", _as_float),
)


@dataclass
class LabConfig:
    """Paths, worker counts and experiment weights for the lab."""

    data_dir: str = ""
    kalshi_dir: str = ""
    output_dir: str = ""
    knowledge_path: str = ""
    notify_script: str = ""
    models_db_path: str = ""

    fast_workers: int = 6
    slow_workers: int = 2

    meanrev_weight: float = 0.20
    situational_weight: float = 0.15
    twostage_weight: float = 0.10
    crossmarket_weight: float = 0.15
    meta_weight: float = 0.10
    bayesian_weight: float = 0.10
    ml_props_weight: float = 0.05
    moneyline_weight: float = 0.05
    compound_weight: float = 0.03
    residual_weight: float = 0.03
    ensemble_weight: float = 0.04
    timeseries_weight: float = 0.05
    neural_weight: float = 0.05
    spreads_weight: float = 0.03
    totals_weight: float = 0.02
    four_factors_weight: float = 0.05

    notify_enabled: bool = True
    notify_min_roi: float = 0.0

    kalshi_fee_rate: float = 0.038
    max_runtime_seconds: float = 0.0  # 0 means run forever

    @classmethod
    def defaults(cls) -> LabConfig:
        """Return a config with the built-in default paths and settings."""
        return cls(
            data_dir="~/Desktop/nba-modeling/data/raw",
            kalshi_dir="~/Desktop/nba-modeling/data/raw/kalshi",
            output_dir="~/Desktop/nba-modeling/results",
            knowledge_path="~/Desktop/nba-modeling/results/lab/knowledge_cpp.json",
            notify_script="~/claude-code-linux-harness/notify.sh",
            models_db_path="~/claude-code-linux-harness/data/models.db",
        )

    @classmethod
    def load(cls, path: str | Path) -> LabConfig:
        """Load from a JSON file; a missing, unreadable or malformed file gives defaults."""
        config = cls.defaults()
        file_path = Path(path)

        if not file_path.exists():
            print(f"Config file not found: {path} (using defaults)", file=sys.stderr)
            return config
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError:
            print(f"Cannot open config file: {path} (using defaults)", file=sys.stderr)
            return config
        try:
            data = json.loads(text)
        except ValueError as exc:
            print(f"Config parse error in {path}: {exc} (using defaults)", file=sys.stderr)
            return config

        if isinstance(data, dict):
            for key, convert in _JSON_FIELDS:
                if key in data:
                    setattr(config, key, convert(key, data[key]))

        config.fast_workers = max(config.fast_workers, 1)
        config.slow_workers = max(config.slow_workers, 0)

        total = sum(getattr(config, name) for name in _WEIGHT_FIELDS)
        if total < 1e-9:
            fresh = cls.defaults()
            for name in _RESET_WEIGHT_FIELDS:
                setattr(config, name, getattr(fresh, name))

        print(f"Config loaded from: {path}")
        return config

    def save(self, path: str | Path) -> None:
        """Write the config as indented JSON, creating parent directories."""
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key, _ in _JSON_FIELDS}
        file_path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")

    def expand_paths(self) -> None:
        """Expand ``~`` to ``$HOME`` in every path field, in place."""
        for name in _PATH_FIELDS:
            setattr(self, name, expand_home(getattr(self, name)))