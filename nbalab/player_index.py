"""Per-player stat arrays indexed by player id and name."""

from __future__ import annotations

import string
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Protocol

from nbalab.models import PlayerGame, PropLine

_STAT_FIELDS = {
    "pts": "pts",
    "PTS": "pts",
    "reb": "reb",
    "REB": "reb",
    "ast": "ast",
    "AST": "ast",
    "fg3m": "fg3m",
    "FG3M": "fg3m",
    "3pm": "fg3m",
    "threes": "fg3m",
    "stl": "stl",
    "STL": "stl",
    "blk": "blk",
    "BLK": "blk",
    "minutes": "minutes",
    "MIN": "minutes",
}

_NAME_SUFFIXES = (" Jr", " Jr.", " Sr", " II", " III", " IV", " V")
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class _GameSource(Protocol):
    def get_prop_dates(self) -> list[str]: ...

    def get_props(self, date: str) -> list[PropLine]: ...

    def get_player_games(self, player_id: int) -> list[PlayerGame]: ...


def extract_opponent(matchup: str) -> str:
    """The opponent in a matchup: "DEN vs. NYK" gives "NYK", "DEN @ PHX" gives "PHX"."""
    pos = matchup.find("vs.")
    if pos != -1:
        return matchup[pos + 4:].lstrip(" ")
    pos = matchup.find("@")
    if pos != -1:
        return matchup[pos + 1:].lstrip(" ")
    return ""


@dataclass
class PlayerStats:
    """A player's games as parallel, date-sorted arrays."""

    name: str = ""
    player_id: int = 0
    dates: list[str] = field(default_factory=list)
    pts: list[float] = field(default_factory=list)
    reb: list[float] = field(default_factory=list)
    ast: list[float] = field(default_factory=list)
    fg3m: list[float] = field(default_factory=list)
    stl: list[float] = field(default_factory=list)
    blk: list[float] = field(default_factory=list)
    minutes: list[float] = field(default_factory=list)
    teams: list[str] = field(default_factory=list)
    opponents: list[str] = field(default_factory=list)
    is_home: list[bool] = field(default_factory=list)

    def get_stat(self, stat: str) -> list[float]:
        """The value array for a stat name such as "pts", "REB", "3pm" or "MIN"."""
        try:
            return getattr(self, _STAT_FIELDS[stat])
        except KeyError:
            raise ValueError(f"unknown stat {stat!r}") from None

    def find_date_index(self, date: str) -> int:
        """Index of the last game on or before ``date``; -1 if there is none."""
        return bisect_right(self.dates, date) - 1

    def num_games(self) -> int:
        return len(self.dates)

    @classmethod
    def _from_games(cls, name: str, player_id: int, games: list[PlayerGame]) -> PlayerStats:
        stats = cls(name=name, player_id=player_id)
        for game in games:
            stats.dates.append(game.game_date)
            stats.pts.append(game.pts)
            stats.reb.append(game.reb)
            stats.ast.append(game.ast)
            stats.fg3m.append(game.fg3m)
            stats.stl.append(game.stl)
            stats.blk.append(game.blk)
            stats.minutes.append(game.minutes)
            stats.teams.append(game.team)
            stats.opponents.append(extract_opponent(game.matchup))
            stats.is_home.append(game.is_home)
        return stats


class PlayerIndex:
    """Players discovered from the prop lines, with their game histories."""

    def __init__(self) -> None:
        self._by_id: dict[int, PlayerStats] = {}
        self._name_to_id: dict[str, int] = {}
        self._normalized_to_id: dict[str, int] = {}

    def build(self, store: _GameSource) -> None:
        """Index every player that appears with an id in the store's props."""
        self._by_id = {}
        self._name_to_id = {}
        self._normalized_to_id = {}

        discovered: dict[str, int] = {}
        for date in store.get_prop_dates():
            for prop in store.get_props(date):
                if prop.player_id != 0 and prop.player_name not in discovered:
                    discovered[prop.player_name] = prop.player_id

        for name, pid in discovered.items():
            self._name_to_id[name] = pid
            self._normalized_to_id[self.normalize_name(name)] = pid
            if pid in self._by_id:
                continue
            games = store.get_player_games(pid)
            if not games:
                continue
            self._by_id[pid] = PlayerStats._from_games(name, pid, games)

        print(
            f"  PlayerIndex: {len(self._by_id)} players, "
            f"{len(self._name_to_id)} name aliases"
        )

    def get_by_id(self, pid: int) -> PlayerStats | None:
        return self._by_id.get(pid)

    def get_by_name(self, name: str) -> PlayerStats | None:
        """Look up by exact name, then by normalized name."""
        pid = self._name_to_id.get(name)
        if pid is not None:
            return self.get_by_id(pid)
        pid = self._normalized_to_id.get(self.normalize_name(name))
        if pid is not None:
            return self.get_by_id(pid)
        return None

    @staticmethod
    def normalize_name(name: str) -> str:
        """Drop dots and generational suffixes, lowercase ASCII, trim spaces."""
        normalized = name.replace(".", "")
        for suffix in _NAME_SUFFIXES:
            if normalized.endswith(suffix):
                normalized = normalized[: -len(suffix)]
        return normalized.translate(_ASCII_LOWER).strip(" ")

    def all(self) -> dict[int, PlayerStats]:
        """Every indexed player, keyed by id."""
        return self._by_id

    def __len__(self) -> int:
        return len(self._by_id)