"""Odds conversion and settled exchange prices for player props."""

from __future__ import annotations

from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass
from operator import itemgetter
from pathlib import Path

from nbalab.csv_parser import safe_double, split_csv_line

_line_of = itemgetter(0)


def _line_key(line: float) -> str:
    return f"{line:.1f}"


class KalshiCache:
    """Settled yes-prices keyed by (date, player, stat, line), with interpolation."""

    def __init__(self) -> None:
        self._cache: dict[tuple[str, str, str, str], float] = {}
        self._player_lines: dict[tuple[str, str, str], list[tuple[float, float]]] = {}

    def load(self, kalshi_dir: str | Path) -> None:
        """Load every kalshi_*_settled.csv file in ``kalshi_dir``."""
        self._cache = {}
        self._player_lines = {}

        directory = Path(kalshi_dir)
        if not directory.is_dir():
            print(f"  KalshiCache: directory not found: {kalshi_dir}")
            return

        rows_loaded = 0
        groups: defaultdict[tuple[str, str, str], list[tuple[float, float]]] = defaultdict(list)
        for path in sorted(directory.iterdir()):
            name = path.name
            if not name.startswith("kalshi_") or "_settled.csv" not in name or not path.is_file():
                continue
            try:
                handle = path.open(encoding="utf-8", errors="replace")
            except OSError:
                continue
            with handle:
                next(handle, None)  # game_date,stat,player,line,yes_price,result,volume,ticker
                for raw in handle:
                    text = raw.rstrip("\n")
                    if not text:
                        continue
                    cols = split_csv_line(text)
                    if len(cols) < 5:
                        continue
                    game_date, stat, player = cols[0], cols[1], cols[2]
                    line_val = safe_double(cols[3])
                    yes_price = safe_double(cols[4])
                    if not player or not game_date:
                        continue
                    if yes_price < 0.0 or yes_price > 1.0:
                        continue
                    self._cache[(game_date, player, stat, _line_key(line_val))] = yes_price
                    groups[(game_date, player, stat)].append((line_val, yes_price))
                    rows_loaded += 1

        for key, lines in groups.items():
            kept: list[tuple[float, float]] = []
            for entry in sorted(lines):
                if kept and abs(kept[-1][0] - entry[0]) < 0.01:
                    continue
                kept.append(entry)
            self._player_lines[key] = kept

        print(
            f"  KalshiCache: {rows_loaded} rows -> {len(self._cache)} unique keys, "
            f"{len(self._player_lines)} player-date-stat groups"
        )

    def get(self, date: str, player: str, stat: str, line: float) -> float | None:
        """Exact yes-price for the line (rounded to one decimal), or None."""
        return self._cache.get((date, player, stat, _line_key(line)))

    def interpolate(self, date: str, player: str, stat: str, line: float) -> float | None:
        """Exact price, else a linear blend of the two bracketing lines, else None."""
        exact = self.get(date, player, stat, line)
        if exact is not None:
            return exact

        lines = self._player_lines.get((date, player, stat))
        if lines is None or len(lines) < 2:
            return None

        upper = bisect_left(lines, line, key=_line_of)
        if upper == 0 or upper == len(lines):
            return None

        lo_line, lo_price = lines[upper - 1]
        hi_line, hi_price = lines[upper]
        if abs(hi_line - lo_line) < 0.01:
            return lo_price
        t = (line - lo_line) / (hi_line - lo_line)
        return lo_price + t * (hi_price - lo_price)

    def __len__(self) -> int:
        return len(self._cache)


def american_to_decimal(ml: float) -> float:
    """American odds to decimal: +150 gives 2.50, -150 gives 1.667; invalid gives 1.0."""
    if ml >= 100.0:
        return 1.0 + ml / 100.0
    if ml <= -100.0:
        return 1.0 + 100.0 / abs(ml)
    return 1.0


def kalshi_to_decimal(yes_price: float, side: str) -> float:
    """Decimal odds of a yes-price for OVER, or of its complement for UNDER; capped at 100."""
    if side in ("OVER", "over"):
        price = yes_price
    else:
        price = 1.0 - yes_price
    if price < 0.01:
        return 100.0
    return 1.0 / price


@dataclass
class ResolvedOdds:
    """Decimal odds and where they came from: "kalshi", "kalshi_interp" or "dk"."""

    decimal: float = 0.0
    source: str = ""


def resolve(
    cache: KalshiCache,
    date: str,
    player: str,
    stat: str,
    line: float,
    side: str,
    dk_ml: float,
) -> ResolvedOdds:
    """Exchange price if known, else interpolated, else the sportsbook moneyline."""
    exact = cache.get(date, player, stat, line)
    if exact is not None:
        return ResolvedOdds(kalshi_to_decimal(exact, side), "kalshi")
    interp = cache.interpolate(date, player, stat, line)
    if interp is not None:
        return ResolvedOdds(kalshi_to_decimal(interp, side), "kalshi_interp")
    return ResolvedOdds(american_to_decimal(dk_ml), "dk")