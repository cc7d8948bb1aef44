"""Persistent record of proven strategy configs and lab run totals."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_TOP_N = 5
_MAX_NET_ROI = 0.25
_MIN_BETS = 30
_TRACK_LIMIT = 100


@dataclass
class ProvenConfig:
    """A strategy config that passed the significance and ROI filters."""

    market: str = ""
    approach: str = ""
    name: str = ""
    roi: float = 0.0
    net_roi: float = 0.0
    pvalue: float = 1.0
    bets: int = 0
    wr: float = 0.0
    config: Any = None
    timestamp: str = ""

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> ProvenConfig:
        entry = cls()
        for key in ("market", "approach", "name", "timestamp"):
            if key in data:
                setattr(entry, key, str(data[key]))
        for key in ("roi", "net_roi", "pvalue", "wr"):
            if key in data:
                setattr(entry, key, float(data[key]))
        if "bets" in data:
            entry.bets = int(data["bets"])
        if "config" in data:
            entry.config = data["config"]
        return entry

    def _to_json(self) -> dict[str, Any]:
        return {
            "market": self.market,
            "approach": self.approach,
            "name": self.name,
            "roi": self.roi,
            "net_roi": self.net_roi,
            "pvalue": self.pvalue,
            "bets": self.bets,
            "wr": self.wr,
            "config": self.config,
            "timestamp": self.timestamp,
        }


def _by_roi(entries: list[ProvenConfig]) -> list[ProvenConfig]:
    return sorted(entries, key=lambda e: e.net_roi, reverse=True)


def _by_pvalue(entries: list[ProvenConfig]) -> list[ProvenConfig]:
    return sorted(entries, key=lambda e: e.pvalue)


class KnowledgeBase:
    """Thread-safe store of proven configs, experiment count and runtime."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._all_proven: list[ProvenConfig] = []
        self._prev_top_roi_names: set[str] = set()
        self._prev_top_sig_names: set[str] = set()
        self._experiments_run = 0
        self._total_runtime_hours = 0.0

    def load(self, path: str | Path) -> None:
        """Merge a saved knowledge file; stale entries (net ROI > 25% or < 30 bets) are dropped."""
        with self._lock:
            file_path = Path(path)
            if not file_path.exists():
                print(f"  KnowledgeBase: no file at {path}, starting fresh")
                return
            try:
                data = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                return
            if not isinstance(data, dict):
                return

            if "experiments_run" in data:
                self._experiments_run = int(data["experiments_run"])
            if "total_runtime_hours" in data:
                self._total_runtime_hours = float(data["total_runtime_hours"])

            skipped = 0
            entries = data.get("all_proven")
            if isinstance(entries, list):
                for raw in entries:
                    entry = ProvenConfig._from_json(raw)
                    if entry.net_roi > _MAX_NET_ROI or entry.bets < _MIN_BETS:
                        skipped += 1
                        continue
                    self._all_proven.append(entry)
            if skipped:
                print(f"  KnowledgeBase: filtered {skipped} stale entries (ROI>25% or <30 bets)")

            self._prev_top_roi_names = {e.name for e in self.top_by_roi(_TOP_N)}
            self._prev_top_sig_names = {e.name for e in self.top_by_significance(_TOP_N)}

            print(
                f"  KnowledgeBase: {len(self._all_proven)} proven configs, "
                f"{self._experiments_run} experiments"
            )

    def save(self, path: str | Path) -> None:
        """Write everything as indented JSON, creating parent directories."""
        if not str(path):
            return
        with self._lock:
            file_path = Path(path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            data = {
                "experiments_run": self._experiments_run,
                "total_runtime_hours": self._total_runtime_hours,
                "all_proven": [entry._to_json() for entry in self._all_proven],
            }
            file_path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")

    def add_proven(self, entry: ProvenConfig) -> bool:
        """Record a proven config; True if either top-5 leaderboard changed.

        Once more than 100 configs are held the comparison is skipped and False returned.
        """
        with self._lock:
            self._all_proven.append(entry)
            if len(self._all_proven) > _TRACK_LIMIT:
                return False

            roi_names = {e.name for e in _by_roi(self._all_proven)[:_TOP_N]}
            sig_names = {e.name for e in _by_pvalue(self._all_proven)[:_TOP_N]}
            changed = roi_names != self._prev_top_roi_names or sig_names != self._prev_top_sig_names
            if changed:
                self._prev_top_roi_names = roi_names
                self._prev_top_sig_names = sig_names
            return changed

    def top_by_roi(self, n: int = _TOP_N) -> list[ProvenConfig]:
        """The ``n`` configs with the highest net ROI."""
        with self._lock:
            return _by_roi(self._all_proven)[:n]

    def top_by_significance(self, n: int = _TOP_N) -> list[ProvenConfig]:
        """The ``n`` configs with the lowest p-value."""
        with self._lock:
            return _by_pvalue(self._all_proven)[:n]

    def all_proven(self) -> list[ProvenConfig]:
        """Every proven config, in the order recorded."""
        return self._all_proven

    def best_per_market(self) -> dict[str, ProvenConfig]:
        """The highest net-ROI config of each market, keyed by market in sorted order."""
        with self._lock:
            best: dict[str, ProvenConfig] = {}
            for entry in self._all_proven:
                current = best.get(entry.market)
                if current is None or entry.net_roi > current.net_roi:
                    best[entry.market] = entry
            return {market: best[market] for market in sorted(best)}

    def experiments_run(self) -> int:
        with self._lock:
            return self._experiments_run

    def increment_experiments(self, n: int = 1) -> None:
        with self._lock:
            self._experiments_run += n

    def total_runtime_hours(self) -> float:
        with self._lock:
            return self._total_runtime_hours

    def add_runtime(self, hours: float) -> None:
        with self._lock:
            self._total_runtime_hours += hours