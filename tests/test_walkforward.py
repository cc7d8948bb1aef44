import pytest

from nbalab.models import Bet, PlayerGame, PropLine
from nbalab.odds import KalshiCache
from nbalab.player_index import PlayerIndex
from nbalab.prop_cache import PropCache
from nbalab.walkforward import ExperimentResult, WalkforwardRunner

PID = 7
NAME = "Test Player"
MARKET = "player_points"


class FakeStore:
    def __init__(self, games, props):
        self.games = games
        self.props = props

    def get_prop_dates(self):
        return sorted(self.props)

    def get_props(self, date):
        return self.props.get(date, [])

    def get_player_games(self, player_id):
        return self.games.get(player_id, [])


def _date(day):
    return f"2024-01-{day:02d}"


def make_store(points, prop_days, lines=(20.0,)):
    games = [
        PlayerGame(player_name=NAME, player_id=PID, game_date=_date(i + 1), pts=p)
        for i, p in enumerate(points)
    ]
    props = {
        _date(day): [
            PropLine(
                date=_date(day),
                player_name=NAME,
                player_id=PID,
                market_type=MARKET,
                line=line,
                over_odds=100.0,
                under_odds=-110.0,
                bookmaker=f"book{i}",
            )
            for i, line in enumerate(lines)
        ]
        for day in prop_days
    }
    return FakeStore({PID: games}, props)


def make_runner(store, use_cache):
    index = PlayerIndex()
    index.build(store)
    cache = None
    if use_cache:
        cache = PropCache()
        cache.build(store)
    return WalkforwardRunner(store, index, KalshiCache(), cache)


def over_bet(size=10.0, odds=2.0, side="OVER"):
    def callback(player, end_idx, line, over_ml, under_ml, date):
        return Bet(date=date, player=player.name, stat="PTS", line=line,
                   side=side, odds=odds, bet_size=size)
    return callback


@pytest.mark.parametrize("use_cache", [True, False])
def test_callback_sees_games_before_date_and_median_line(use_cache):
    store = make_store([10, 12, 14, 16, 25], [5], lines=(20.0, 22.0))
    runner = make_runner(store, use_cache)
    seen = []

    def callback(player, end_idx, line, over_ml, under_ml, date):
        seen.append((player.player_id, end_idx, line, over_ml, under_ml, date))
        return None

    result = runner.run(MARKET, "PTS", callback)
    assert seen == [(PID, 4, 21.0, 100.0, -110.0, _date(5))]
    assert result.total_bets == 0
    assert result.pvalue == 1.0


@pytest.mark.parametrize("use_cache", [True, False])
def test_winning_over_bet_is_settled(use_cache):
    store = make_store([10, 12, 14, 16, 25], [5])
    result = make_runner(store, use_cache).run(MARKET, "PTS", over_bet(10.0, 2.0))
    assert result.total_bets == 1
    assert result.wins == 1
    assert result.win_rate == 1.0
    bet = result.bets[0]
    assert bet.won is True
    assert bet.actual == 25
    assert bet.bet_size == pytest.approx(10.0)
    assert bet.pnl == pytest.approx(bet.bet_size * (bet.odds - 1.0))
    assert result.bankroll == pytest.approx(1000.0 + result.pnl)
    assert 0.0 < result.pvalue < 0.5


def test_losing_under_bet():
    store = make_store([10, 12, 14, 16, 25], [5])
    result = make_runner(store, True).run(MARKET, "PTS", over_bet(10.0, 2.0, side="UNDER"))
    assert result.wins == 0
    assert result.bets[0].won is False
    assert result.bets[0].pnl == pytest.approx(-10.0)
    assert result.roi == pytest.approx(-1.0)


def test_bet_size_is_capped_at_five_percent_of_bankroll():
    store = make_store([10, 12, 14, 16, 25], [5])
    result = make_runner(store, True).run(MARKET, "PTS", over_bet(1000.0))
    assert result.bets[0].bet_size == pytest.approx(0.05 * 1000.0)


def test_tiny_bets_are_skipped():
    store = make_store([10, 12, 14, 16, 25], [5])
    result = make_runner(store, True).run(MARKET, "PTS", over_bet(0.1))
    assert result.total_bets == 0
    assert result.bets == []


def test_no_game_on_prop_date_records_nothing():
    store = make_store([10, 12, 14, 16], [6])
    calls = []

    def callback(player, end_idx, *rest):
        calls.append(end_idx)
        return over_bet()(player, end_idx, *rest)

    result = make_runner(store, True).run(MARKET, "PTS", callback)
    assert calls == [4]
    assert result.total_bets == 0


def test_first_game_date_is_never_offered():
    store = make_store([10, 12], [1])
    calls = []

    def callback(*args):
        calls.append(args)
        return over_bet()(*args)

    result = make_runner(store, True).run(MARKET, "PTS", callback)
    assert calls == []
    assert result.total_bets == 0


def test_other_market_is_ignored():
    store = make_store([10, 12, 14, 16, 25], [5])
    result = make_runner(store, False).run("player_rebounds", "REB", over_bet())
    assert result == ExperimentResult(bankroll=1000.0, elapsed_seconds=result.elapsed_seconds)


def test_consistent_winner_is_significant():
    store = make_store([30] * 10, range(5, 11))
    result = make_runner(store, True).run(MARKET, "PTS", over_bet(10.0, 2.0))
    assert result.total_bets == 6
    assert result.wins == 6
    assert result.pvalue < 0.05
    assert result.bankroll > 1000.0


def test_consistent_loser_is_not_significant():
    store = make_store([5] * 10, range(5, 11))
    result = make_runner(store, True).run(MARKET, "PTS", over_bet(10.0, 2.0))
    assert result.total_bets == 6
    assert result.wins == 0
    assert result.pvalue > 0.5
    assert result.pnl == pytest.approx(sum(b.pnl for b in result.bets))
    assert result.bankroll == pytest.approx(1000.0 + result.pnl)


def test_cached_and_uncached_runs_agree():
    store = make_store([8, 30, 12, 25, 18, 22, 19, 31, 5, 27], range(4, 11), lines=(18.0, 20.0, 21.0))
    a = make_runner(store, True).run(MARKET, "PTS", over_bet(20.0, 1.9))
    b = make_runner(store, False).run(MARKET, "PTS", over_bet(20.0, 1.9))
    assert a.bets == b.bets
    assert a.pvalue == pytest.approx(b.pvalue)