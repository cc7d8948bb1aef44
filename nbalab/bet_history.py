"""Writing a strategy's settled bets as JSON lines."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Iterable, Sequence

from nbalab.models import Bet

_write_lock = threading.Lock()


def _bet_record(bet: Bet) -> dict[str, object]:
    return {
        "date": bet.date,
        "player": bet.player,
        "stat": bet.stat,
        "line": bet.line,
        "side": bet.side,
        "actual": bet.actual,
        "odds": bet.odds,
        "won": bet.won,
        "pnl": bet.pnl,
        "bet_size": bet.bet_size,
    }


def save_bets(name: str, bets: Sequence[Bet] | Iterable[Bet], output_dir: str | Path) -> Path | None:
    """Write ``bets`` to ``output_dir/<name>.jsonl``, replacing any earlier file.

    Nothing is written when there are no bets or no name; the path is returned otherwise.
    """
    bets = list(bets)
    if not bets or not name:
        return None

    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.jsonl"

    with _write_lock, path.open("w", encoding="utf-8") as handle:
        for bet in bets:
            handle.write(json.dumps(_bet_record(bet), sort_keys=True, separators=(",", ":")))
            handle.write("\n")
    return path