"""Per-date, per-market prop lines aggregated across bookmakers."""

from __future__ import annotations

import statistics
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from nbalab.models import PropLine


class _PropSource(Protocol):
    def get_prop_dates(self) -> list[str]: ...

    def get_props(self, date: str) -> list[PropLine]: ...


@dataclass
class AggregatedProp:
    """Median line and odds across bookmakers for one player."""

    player_name: str = ""
    player_id: int = 0
    line: float = 0.0
    over_odds: float = 0.0
    under_odds: float = 0.0


@dataclass
class _RawAgg:
    player_name: str
    player_id: int = 0
    lines: list[float] = field(default_factory=list)
    over_odds: list[float] = field(default_factory=list)
    under_odds: list[float] = field(default_factory=list)


def median(values: Iterable[float]) -> float:
    """Median of the values; 0.0 when there are none."""
    data = list(values)
    if not data:
        return 0.0
    return float(statistics.median(data))


def aggregate_props(props: Iterable[PropLine]) -> list[AggregatedProp]:
    """Group lines by player name, merge name variants sharing an id, take medians."""
    by_name: dict[str, _RawAgg] = {}
    for prop in props:
        agg = by_name.setdefault(prop.player_name, _RawAgg(prop.player_name))
        if prop.player_id != 0:
            agg.player_id = prop.player_id
        agg.lines.append(prop.line)
        agg.over_odds.append(prop.over_odds)
        agg.under_odds.append(prop.under_odds)

    merged: list[_RawAgg] = []
    by_id: dict[int, _RawAgg] = {}
    for agg in by_name.values():
        existing = by_id.get(agg.player_id) if agg.player_id != 0 else None
        if existing is not None:
            existing.lines.extend(agg.lines)
            existing.over_odds.extend(agg.over_odds)
            existing.under_odds.extend(agg.under_odds)
            continue
        if agg.player_id != 0:
            by_id[agg.player_id] = agg
        merged.append(agg)

    return [
        AggregatedProp(
            player_name=agg.player_name,
            player_id=agg.player_id,
            line=median(agg.lines),
            over_odds=median(agg.over_odds),
            under_odds=median(agg.under_odds),
        )
        for agg in merged
    ]


class PropCache:
    """Aggregated props for every (date, market) pair, built once up front."""

    def __init__(self) -> None:
        self._cache: dict[tuple[str, str], list[AggregatedProp]] = {}
        self._dates: list[str] = []
        self._markets: list[str] = []

    def build(self, store: _PropSource) -> None:
        """Aggregate every prop date of the store, market by market."""
        start = time.perf_counter()
        self._cache = {}
        self._dates = list(store.get_prop_dates())
        markets: set[str] = set()
        total_entries = 0

        for date in self._dates:
            by_market: defaultdict[str, list[PropLine]] = defaultdict(list)
            for prop in store.get_props(date):
                by_market[prop.market_type].append(prop)
            for market, props in by_market.items():
                markets.add(market)
                aggregated = aggregate_props(props)
                self._cache[(date, market)] = aggregated
                total_entries += len(aggregated)

        self._markets = sorted(markets)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        print(
            f"  PropCache: {len(self._cache)} date-market combos, "
            f"{total_entries} player entries ({elapsed_ms}ms)"
        )

    def get(self, date: str, market: str) -> list[AggregatedProp]:
        """Aggregated props for a date and market; empty if none."""
        return self._cache.get((date, market), [])

    def dates(self) -> list[str]:
        """All dates that have props, sorted."""
        return self._dates

    def markets(self) -> list[str]:
        """All markets seen, sorted."""
        return self._markets

    def __len__(self) -> int:
        return len(self._cache)