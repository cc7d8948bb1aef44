"""Storing proven configs in the shared SQLite models database."""

from __future__ import annotations

import json
import sqlite3
import string
import sys
import threading
from pathlib import Path
from typing import Any

from nbalab.knowledge import ProvenConfig

_SCHEMA = """
CREATE TABLE IF NOT EXISTS models (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    stat TEXT NOT NULL,
    market TEXT NOT NULL,
    sides TEXT DEFAULT 'BOTH',
    config_json TEXT NOT NULL,
    roi_raw REAL DEFAULT 0,
    roi_net REAL DEFAULT 0,
    win_rate REAL DEFAULT 0,
    total_bets INTEGER DEFAULT 0,
    p_value REAL DEFAULT 1.0,
    is_active INTEGER DEFAULT 1,
    source TEXT DEFAULT 'cpp_lab',
    created_at TEXT DEFAULT (datetime('now')),
    updated_at TEXT DEFAULT (datetime('now')),
    UNIQUE(name)
);
CREATE INDEX IF NOT EXISTS idx_models_active ON models(is_active);
"""

# New models go in inactive; an existing row is only replaced by a better net ROI,
# and is_active is never touched here.
_UPSERT = """
INSERT INTO models (name, type, stat, market, sides, config_json,
                    roi_raw, roi_net, win_rate, total_bets, p_value, is_active, source)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 'cpp_lab')
ON CONFLICT(name) DO UPDATE SET
    config_json=excluded.config_json,
    roi_raw=excluded.roi_raw,
    roi_net=excluded.roi_net,
    win_rate=excluded.win_rate,
    total_bets=excluded.total_bets,
    p_value=excluded.p_value,
    updated_at=datetime('now')
WHERE excluded.roi_net > models.roi_net
"""

_MARKET_STATS = {
    "player_points": "PTS",
    "player_rebounds": "REB",
    "player_assists": "AST",
    "player_threes": "FG3M",
    "player_steals": "STL",
    "player_blocks": "BLK",
    "h2h": "H2H",
    "spreads": "SPREADS",
    "totals": "TOTALS",
}

_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


def market_to_stat(market: str) -> str:
    """Stat abbreviation of a market, e.g. "player_points" gives "PTS"; else the market upper-cased."""
    return _MARKET_STATS.get(market, market.translate(_ASCII_UPPER))


def extract_sides(config: Any) -> str:
    """Sides of a strategy config as "OVER,UNDER" style text; "BOTH" when not given."""
    if not isinstance(config, dict):
        return "BOTH"
    if "sides" in config:
        sides = config["sides"]
        if isinstance(sides, list):
            for side in sides:
                if not isinstance(side, str):
                    raise TypeError(f"side must be a string, got {type(side).__name__}")
            return ",".join(sides)
        if isinstance(sides, str):
            return sides
    nested = config.get("config")
    if isinstance(nested, dict):
        return extract_sides(nested)
    return "BOTH"


class ModelsDB:
    """Thread-safe writer of proven configs into the models table."""

    def __init__(self) -> None:
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def open(self, path: str | Path) -> bool:
        """Open or create the database and its table; False if that fails."""
        with self._lock:
            if self._conn is not None:
                return True
            try:
                conn = sqlite3.connect(str(path), check_same_thread=False)
            except sqlite3.Error as exc:
                print(f"ModelsDB: cannot open {path}: {exc}", file=sys.stderr)
                return False
            try:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.executescript(_SCHEMA)
            except sqlite3.Error as exc:
                print(f"ModelsDB: schema error: {exc}", file=sys.stderr)
                conn.close()
                return False
            self._conn = conn
            print(f"  ModelsDB: opened {path}")
            return True

    def close(self) -> None:
        """Close the connection, if open."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def upsert_model(self, pc: ProvenConfig) -> bool:
        """Insert a proven config, or improve an existing one of the same name."""
        with self._lock:
            if self._conn is None:
                return False
            config_json = json.dumps(
                pc.config, separators=(",", ":"), sort_keys=True, ensure_ascii=False
            )
            params = (
                pc.name,
                pc.approach,
                market_to_stat(pc.market),
                pc.market,
                extract_sides(pc.config),
                config_json,
                pc.roi,
                pc.net_roi,
                pc.wr,
                pc.bets,
                pc.pvalue,
            )
            try:
                with self._conn:
                    self._conn.execute(_UPSERT, params)
            except sqlite3.Error as exc:
                print(f"ModelsDB: insert error: {exc}", file=sys.stderr)
                return False
            return True

    def is_open(self) -> bool:
        return self._conn is not None

    def __enter__(self) -> ModelsDB:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()