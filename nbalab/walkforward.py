"""Walk-forward backtest over every prop date, one aggregated line per player."""

from __future__ import annotations

import dataclasses
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from nbalab.models import Bet, PropLine
from nbalab.odds import KalshiCache
from nbalab.player_index import PlayerIndex, PlayerStats
from nbalab.prop_cache import AggregatedProp, PropCache, aggregate_props

STARTING_BANKROLL = 1000.0
MAX_BET_FRACTION = 0.05
MIN_BET_SIZE = 0.50

BetCallback = Callable[[PlayerStats, int, float, float, float, str], Optional[Bet]]


class _PropSource(Protocol):
    def get_prop_dates(self) -> list[str]: ...

    def get_props(self, date: str) -> list[PropLine]: ...


@dataclass
class ExperimentResult:
    """Summary of one backtest run and the bets it settled."""

    total_bets: int = 0
    wins: int = 0
    win_rate: float = 0.0
    roi: float = 0.0
    pnl: float = 0.0
    pvalue: float = 1.0
    bankroll: float = 0.0
    elapsed_seconds: float = 0.0
    bets: list[Bet] = field(default_factory=list)


def _upper_tail(z: float) -> float:
    """One-sided normal p-value P(Z > z)."""
    return 0.5 * math.erfc(z / math.sqrt(2.0))


def _summarize(result: ExperimentResult) -> None:
    if result.total_bets == 0:
        return
    n = float(result.total_bets)
    result.win_rate = result.wins / n

    total_wagered = sum(bet.bet_size for bet in result.bets)
    result.roi = result.pnl / total_wagered if total_wagered > 0 else 0.0

    p0 = 0.5
    se = math.sqrt(p0 * (1.0 - p0) / n)
    pval_binom = _upper_tail((result.win_rate - p0) / se) if se > 1e-9 else 1.0

    pval_ttest = 1.0
    if n >= 5:
        mean_pnl = result.pnl / n
        var_pnl = sum((bet.pnl - mean_pnl) ** 2 for bet in result.bets) / (n - 1.0)
        se_pnl = math.sqrt(var_pnl / n)
        if se_pnl > 1e-9:
            pval_ttest = _upper_tail(mean_pnl / se_pnl)

    result.pvalue = min(pval_binom, pval_ttest)


class WalkforwardRunner:
    """Replays prop dates in order, asking a callback for bets and settling them."""

    def __init__(
        self,
        store: _PropSource,
        index: PlayerIndex,
        kalshi: KalshiCache,
        prop_cache: PropCache | None = None,
    ) -> None:
        self.store = store
        self.index = index
        self.kalshi = kalshi
        self.prop_cache = prop_cache

    def _dates(self) -> list[str]:
        if self.prop_cache is not None:
            return self.prop_cache.dates()
        return self.store.get_prop_dates()

    def _props_for(self, date: str, market: str) -> list[AggregatedProp]:
        if self.prop_cache is not None:
            return self.prop_cache.get(date, market)
        return aggregate_props(p for p in self.store.get_props(date) if p.market_type == market)

    def _find_player(self, prop: AggregatedProp) -> PlayerStats | None:
        player = self.index.get_by_id(prop.player_id) if prop.player_id != 0 else None
        if player is None:
            player = self.index.get_by_name(prop.player_name)
        return player

    def run(self, target_market: str, target_stat: str, callback: BetCallback) -> ExperimentResult:
        """Walk every prop date of ``target_market`` and settle bets on ``target_stat``.

        The callback gets the player, the number of games played before the date,
        the line, the over and under American odds and the date, and returns a Bet
        (sized per 1000 of bankroll) or None.
        """
        start = time.perf_counter()
        result = ExperimentResult(bankroll=STARTING_BANKROLL)

        for date in self._dates():
            for prop in self._props_for(date, target_market):
                player = self._find_player(prop)
                if player is None:
                    continue

                date_idx = player.find_date_index(date)
                if date_idx < 0:
                    continue
                if player.dates[date_idx] == date:
                    date_idx -= 1
                if date_idx < 0:
                    continue

                proposed = callback(
                    player, date_idx + 1, prop.line, prop.over_odds, prop.under_odds, date
                )
                if proposed is None:
                    continue

                bet = dataclasses.replace(proposed)
                bet.bet_size = bet.bet_size * result.bankroll / STARTING_BANKROLL
                bet.bet_size = min(bet.bet_size, MAX_BET_FRACTION * result.bankroll)
                if bet.bet_size < MIN_BET_SIZE:
                    continue

                game_idx = player.find_date_index(date)
                if game_idx < 0 or player.dates[game_idx] != date:
                    continue

                actual = player.get_stat(target_stat)[game_idx]
                bet.actual = actual
                bet.won = actual > bet.line if bet.side == "OVER" else actual < bet.line
                if bet.won:
                    bet.pnl = bet.bet_size * (bet.odds - 1.0)
                    result.wins += 1
                else:
                    bet.pnl = -bet.bet_size

                result.bankroll += bet.pnl
                result.pnl += bet.pnl
                result.total_bets += 1
                result.bets.append(bet)

        _summarize(result)
        result.elapsed_seconds = time.perf_counter() - start
        return result