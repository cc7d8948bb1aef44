"""Team game results keyed by date and matchup, built from games_*.csv files."""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from nbalab.csv_parser import safe_double, safe_int


@dataclass
class GameResult:
    """Outcome of one game from one team's perspective (the home team's)."""

    date: str = ""
    game_id: str = ""
    team_abbr: str = ""
    opponent_abbr: str = ""
    is_home: bool = False
    won: bool = False
    pts: int = 0
    opp_pts: int = 0
    margin: int = 0
    plus_minus: float = 0.0
    fgm: int = 0
    fga: int = 0
    fg3m: int = 0
    fg3a: int = 0
    ftm: int = 0
    fta: int = 0
    oreb: int = 0
    dreb: int = 0
    reb: int = 0
    ast: int = 0
    stl: int = 0
    blk: int = 0
    tov: int = 0


_BOX_COLUMNS = {
    "FGM": "fgm", "FGA": "fga", "FG3M": "fg3m", "FG3A": "fg3a",
    "FTM": "ftm", "FTA": "fta", "OREB": "oreb", "DREB": "dreb", "REB": "reb",
    "AST": "ast", "STL": "stl", "BLK": "blk", "TOV": "tov",
}

_REQUIRED = ("TEAM_ABBREVIATION", "GAME_ID", "GAME_DATE", "MATCHUP", "WL", "PTS")


@dataclass
class _TeamLine:
    game_id: str
    date: str
    team_abbr: str
    matchup: str
    won: bool
    pts: int
    plus_minus: float
    box: dict[str, int]


def _split_fields(line: str) -> list[str]:
    """Split on commas; a trailing empty field is dropped."""
    if not line:
        return []
    fields = line.split(",")
    if fields[-1] == "":
        fields.pop()
    return fields


class GameCache:
    """Lookup of game results by (date, home, away) and per-team history."""

    def __init__(self) -> None:
        self._results: dict[tuple[str, str, str], GameResult] = {}
        self._team_games: dict[str, list[GameResult]] = {}

    def build(self, data_dir: str | Path) -> None:
        """Load every games_*.csv in data_dir and index each team's games by date."""
        start = time.perf_counter()
        for path in sorted(Path(data_dir).iterdir()):
            if path.name.startswith("games_") and path.name.endswith(".csv") and path.is_file():
                self.load_file(path)
        self._rebuild_team_index()
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        print(
            f"  GameCache: {len(self._results)} game results, "
            f"{len(self._team_games)} teams ({elapsed_ms}ms)"
        )

    def _rebuild_team_index(self) -> None:
        team_games: defaultdict[str, list[GameResult]] = defaultdict(list)
        for result in self._results.values():
            team_games[result.team_abbr].append(result)
            team_games[result.opponent_abbr].append(result)
        self._team_games = {
            team: sorted(games, key=lambda g: g.date) for team, games in team_games.items()
        }

    def load_file(self, path: str | Path) -> None:
        """Read one team-game CSV and pair home and away rows into results."""
        try:
            handle = open(path, encoding="utf-8", errors="replace")
        except OSError:
            return
        with handle:
            header = _split_fields(handle.readline().rstrip("\r\n"))
            index = {name: i for i, name in enumerate(header)}
            if any(name not in index for name in _REQUIRED):
                return
            min_len = max(index[name] for name in _REQUIRED) + 1
            pm_col = index.get("PLUS_MINUS")
            box_cols = {attr: index[col] for col, attr in _BOX_COLUMNS.items() if col in index}

            by_game: defaultdict[str, list[_TeamLine]] = defaultdict(list)
            for raw in handle:
                line = raw.rstrip("\r\n")
                if not line:
                    continue
                cols = _split_fields(line)
                if len(cols) < min_len:
                    continue
                plus_minus = 0.0
                if pm_col is not None and pm_col < len(cols):
                    plus_minus = safe_double(cols[pm_col])
                team_line = _TeamLine(
                    game_id=cols[index["GAME_ID"]],
                    date=cols[index["GAME_DATE"]],
                    team_abbr=cols[index["TEAM_ABBREVIATION"]],
                    matchup=cols[index["MATCHUP"]],
                    won=cols[index["WL"]] == "W",
                    pts=safe_int(cols[index["PTS"]]),
                    plus_minus=plus_minus,
                    box={
                        attr: safe_int(cols[i]) if i < len(cols) else 0
                        for attr, i in box_cols.items()
                    },
                )
                by_game[team_line.game_id].append(team_line)

        for game_id, teams in by_game.items():
            if len(teams) != 2:
                continue
            home = away = None
            for team in teams:
                if "vs." in team.matchup:
                    home = team
                elif "@" in team.matchup:
                    away = team
            if home is None or away is None:
                continue
            result = GameResult(
                date=home.date,
                game_id=game_id,
                team_abbr=home.team_abbr,
                opponent_abbr=away.team_abbr,
                is_home=True,
                won=home.won,
                pts=home.pts,
                opp_pts=away.pts,
                margin=home.pts - away.pts,
                plus_minus=home.plus_minus,
                **home.box,
            )
            self._results[(home.date, home.team_abbr, away.team_abbr)] = result

    def get(self, date: str, home_abbr: str, away_abbr: str) -> GameResult | None:
        """The result for a home/away pair on a date, or None."""
        return self._results.get((date, home_abbr, away_abbr))

    def get_by_matchup(self, date: str, home_team: str, away_team: str) -> GameResult | None:
        """Same as get, by home and away team abbreviations."""
        return self.get(date, home_team, away_team)

    def team_history(self, team_abbr: str) -> list[GameResult]:
        """All results involving a team, sorted by date; empty if unknown."""
        return self._team_games.get(team_abbr, [])

    def __len__(self) -> int:
        return len(self._results)