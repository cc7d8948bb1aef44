"""Plain records shared across the data, feature and engine layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PlayerGame:
    """One player's box score line for a single game."""

    player_name: str = ""
    player_id: int = 0
    game_date: str = ""  # YYYY-MM-DD
    team: str = ""  # abbreviation, e.g. "DEN"
    matchup: str = ""  # "DEN vs. NYK" or "DEN @ PHX"
    is_home: bool = False
    minutes: float = 0.0
    pts: float = 0.0
    reb: float = 0.0
    ast: float = 0.0
    fg3m: float = 0.0
    stl: float = 0.0
    blk: float = 0.0
    fgm: float = 0.0
    fga: float = 0.0
    ftm: float = 0.0
    fta: float = 0.0
    tov: float = 0.0
    plus_minus: float = 0.0


@dataclass
class PropLine:
    """A single bookmaker's player-prop line."""

    date: str = ""
    player_name: str = ""
    player_id: int = 0
    market_type: str = ""  # "player_points", "player_rebounds", ...
    line: float = 0.0
    over_odds: float = 0.0  # American odds
    under_odds: float = 0.0
    bookmaker: str = ""


@dataclass
class OddsLine:
    """A single bookmaker's game-level line (moneyline, spread or total)."""

    date: str = ""
    home_team: str = ""
    away_team: str = ""
    home_abbr: str = ""
    away_abbr: str = ""
    home_odds: float = 0.0  # American odds
    away_odds: float = 0.0
    market_type: str = ""  # "h2h", "spreads", "totals"
    home_point: float = 0.0
    over_under_point: float = 0.0


@dataclass
class Bet:
    """A wager placed during a backtest and its outcome."""

    date: str = ""
    player: str = ""
    stat: str = ""
    line: float = 0.0
    side: str = ""  # "OVER" or "UNDER"
    odds: float = 0.0  # decimal odds
    bet_size: float = 0.0
    won: bool = False
    pnl: float = 0.0
    actual: float = 0.0