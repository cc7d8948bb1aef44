"""In-memory store of gamelogs, player props and game odds."""

from __future__ import annotations

from collections import defaultdict
from operator import attrgetter
from pathlib import Path

from nbalab.csv_parser import parse_gamelogs, parse_odds, parse_props
from nbalab.models import OddsLine, PlayerGame, PropLine

_by_date = attrgetter("game_date")


class DataStore:
    """Gamelogs indexed by player, props and odds indexed by date."""

    def __init__(self) -> None:
        self._games_by_pid: dict[int, list[PlayerGame]] = {}
        self._games_by_name: dict[str, list[PlayerGame]] = {}
        self._props_by_date: dict[str, list[PropLine]] = {}
        self._odds_by_date: dict[str, list[OddsLine]] = {}
        self._total_games = 0

    def load_all(self, data_dir: str | Path) -> None:
        """Load data_dir/player_gamelog_*.csv, player_props/props_*.csv and odds/odds_*.csv."""
        root = Path(data_dir)

        games = parse_gamelogs(root)
        self._total_games = len(games)
        by_pid: defaultdict[int, list[PlayerGame]] = defaultdict(list)
        by_name: defaultdict[str, list[PlayerGame]] = defaultdict(list)
        for game in games:
            by_pid[game.player_id].append(game)
            by_name[game.player_name].append(game)
        self._games_by_pid = {pid: sorted(g, key=_by_date) for pid, g in by_pid.items()}
        self._games_by_name = {name: sorted(g, key=_by_date) for name, g in by_name.items()}
        print(f"  Gamelogs: {self._total_games} rows, {len(self._games_by_pid)} unique players")

        self._props_by_date = parse_props(root / "player_props")
        total_props = sum(len(rows) for rows in self._props_by_date.values())
        print(f"  Props: {total_props} rows across {len(self._props_by_date)} dates")

        self._odds_by_date = parse_odds(root / "odds")
        total_odds = sum(len(rows) for rows in self._odds_by_date.values())
        print(f"  Odds: {total_odds} rows across {len(self._odds_by_date)} dates")

    def get_player_games(self, player_id: int) -> list[PlayerGame]:
        """Games of a player by id, sorted by date; empty if unknown."""
        return self._games_by_pid.get(player_id, [])

    def get_player_games_by_name(self, name: str) -> list[PlayerGame]:
        """Games of a player by exact name, sorted by date; empty if unknown."""
        return self._games_by_name.get(name, [])

    def get_props(self, date: str) -> list[PropLine]:
        """All prop lines for a date; empty if none."""
        return self._props_by_date.get(date, [])

    def get_prop_dates(self) -> list[str]:
        """All dates that have props, sorted."""
        return list(self._props_by_date)

    def get_odds(self, date: str) -> list[OddsLine]:
        """All game odds lines for a date; empty if none."""
        return self._odds_by_date.get(date, [])

    def num_players(self) -> int:
        return len(self._games_by_pid)

    def num_prop_dates(self) -> int:
        return len(self._props_by_date)

    def num_games(self) -> int:
        return self._total_games