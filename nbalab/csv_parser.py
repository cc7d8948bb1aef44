"""Reading the raw gamelog, prop and odds CSV files."""

from __future__ import annotations

import math
import re
from collections import defaultdict
from pathlib import Path
from typing import Iterator

from nbalab.models import OddsLine, PlayerGame, PropLine

_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT_RE = re.compile(r"\s*([+-]?\d+)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def split_csv_line(line: str) -> list[str]:
    """Split a CSV line on commas, honouring (and dropping) double quotes."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def safe_double(s: str) -> float:
    """Parse the leading number of ``s``; empty, invalid or overflowing text gives 0.0."""
    match = _FLOAT_RE.match(s)
    if not match:
        return 0.0
    text = match.group(1)
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        return 0.0
    return value


def safe_int(s: str) -> int:
    """Parse the leading integer of ``s``; empty, invalid or out-of-range text gives 0."""
    match = _INT_RE.match(s)
    if not match:
        return 0
    value = int(match.group(1))
    if value < _INT32_MIN or value > _INT32_MAX:
        return 0
    return value


def _extract_date(s: str) -> str:
    """Keep the YYYY-MM-DD part of a timestamp such as 2026-03-24T00:00:00."""
    return s[:10] if len(s) >= 10 else s


def _iter_rows(directory: Path, prefix: str, marker: str, min_cols: int) -> Iterator[list[str]]:
    """Yield split data rows of every matching CSV file, header skipped."""
    for path in sorted(directory.iterdir()):
        name = path.name
        if not name.startswith(prefix) or marker not in name or not path.is_file():
            continue
        try:
            handle = path.open(encoding="utf-8", errors="replace")
        except OSError:
            continue
        with handle:
            next(handle, None)
            for raw in handle:
                line = raw.rstrip("\n")
                if not line:
                    continue
                cols = split_csv_line(line)
                if len(cols) >= min_cols:
                    yield cols


def _game_from_columns(cols: list[str]) -> PlayerGame:
    game = PlayerGame(player_id=safe_int(cols[1]), player_name=cols[2])
    if len(cols) >= 70:
        game.team = cols[5]
        game.game_date = _extract_date(cols[8])
        game.matchup = cols[9]
        game.minutes = safe_double(cols[11])
        game.fgm = safe_double(cols[12])
        game.fga = safe_double(cols[13])
        game.fg3m = safe_double(cols[15])
        game.ftm = safe_double(cols[18])
        game.fta = safe_double(cols[19])
        game.reb = safe_double(cols[23])
        game.ast = safe_double(cols[24])
        game.tov = safe_double(cols[25])
        game.stl = safe_double(cols[26])
        game.blk = safe_double(cols[27])
        game.pts = safe_double(cols[31])
        game.plus_minus = safe_double(cols[32])
    else:
        game.team = cols[4]
        game.game_date = _extract_date(cols[7])
        game.matchup = cols[8]
        game.minutes = safe_double(cols[10])
        game.fgm = safe_double(cols[11])
        game.fga = safe_double(cols[12])
        game.fg3m = safe_double(cols[14])
        game.ftm = safe_double(cols[17])
        game.fta = safe_double(cols[18])
        game.reb = safe_double(cols[22])
        game.ast = safe_double(cols[23])
        game.stl = safe_double(cols[24])
        game.blk = safe_double(cols[25])
        game.tov = safe_double(cols[26])
        game.pts = safe_double(cols[28])
        game.plus_minus = safe_double(cols[29])
    game.is_home = "vs." in game.matchup
    return game


def parse_gamelogs(data_dir: str | Path) -> list[PlayerGame]:
    """Parse every player_gamelog_*.csv file in ``data_dir``."""
    return [
        _game_from_columns(cols)
        for cols in _iter_rows(Path(data_dir), "player_gamelog_", ".csv", 30)
    ]


def parse_props(dir_path: str | Path) -> dict[str, list[PropLine]]:
    """Parse every props_*.csv file in ``dir_path``, grouped by date in date order."""
    directory = Path(dir_path)
    if not directory.is_dir():
        return {}
    by_date: defaultdict[str, list[PropLine]] = defaultdict(list)
    for cols in _iter_rows(directory, "props_", ".csv", 12):
        prop = PropLine(
            date=cols[0],
            player_name=cols[5],
            market_type=cols[6],
            line=safe_double(cols[7]),
            over_odds=safe_double(cols[8]),
            under_odds=safe_double(cols[9]),
            bookmaker=cols[10],
            player_id=safe_int(cols[11]),
        )
        by_date[prop.date].append(prop)
    return {date: by_date[date] for date in sorted(by_date)}


def parse_odds(dir_path: str | Path) -> dict[str, list[OddsLine]]:
    """Parse every odds_*.csv file in ``dir_path``, grouped by date in date order."""
    directory = Path(dir_path)
    if not directory.is_dir():
        return {}
    by_date: defaultdict[str, list[OddsLine]] = defaultdict(list)
    for cols in _iter_rows(directory, "odds_", ".csv", 15):
        odds = OddsLine(
            date=cols[0],
            home_team=cols[3],
            away_team=cols[4],
            home_abbr=cols[7],
            away_abbr=cols[8],
            market_type=cols[10],
            home_odds=safe_double(cols[11]),
            away_odds=safe_double(cols[12]),
            home_point=safe_double(cols[13]),
            over_under_point=safe_double(cols[14]),
        )
        by_date[odds.date].append(odds)
    return {date: by_date[date] for date in sorted(by_date)}