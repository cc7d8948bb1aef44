"""Command line entry point: data summary and leaderboard of proven configs."""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence

from nbalab.config import LabConfig
from nbalab.csv_parser import safe_double, safe_int
from nbalab.game_cache import GameCache
from nbalab.knowledge import KnowledgeBase
from nbalab.odds import KalshiCache
from nbalab.player_index import PlayerIndex
from nbalab.prop_cache import PropCache
from nbalab.store import DataStore

COMMANDS = ("run", "bench", "single", "leaderboard", "info")
_ENGINE_COMMANDS = ("run", "bench", "single")
_SANITY_PLAYER = "Nikola Joki\u0107"

USAGE = """NBA Model Lab v1.0

Commands:
  nbalab leaderboard                          Print current leaderboard
  nbalab info                                 Print data stats + config

Options:
  --config PATH    Config file (default: config.json)
  --quiet          Suppress per-experiment output
  --verbose        Show detailed per-bet output
  -h, --help       Show this help message
"""


@dataclass
class Args:
    """Parsed command line."""

    command: str = "info"
    config_path: str = "config.json"
    bench_count: int = 100
    duration: float = 0.0
    quiet: bool = False
    verbose: bool = False
    stat: str = ""
    type: str = "meanrev"
    single_json: str = ""


@dataclass
class DataBundle:
    """Everything loaded from the data directories."""

    store: DataStore = field(default_factory=DataStore)
    player_index: PlayerIndex = field(default_factory=PlayerIndex)
    kalshi: KalshiCache = field(default_factory=KalshiCache)
    prop_cache: PropCache = field(default_factory=PropCache)
    game_cache: GameCache = field(default_factory=GameCache)


def _value(tokens: Iterator[str]) -> str | None:
    return next(tokens, None)


def parse_args(argv: Sequence[str] | None = None) -> Args:
    """Parse arguments (without the program name); later options override earlier ones."""
    args = Args()
    remaining = list(sys.argv[1:] if argv is None else argv)
    tokens = iter(remaining)
    for position, token in enumerate(tokens, start=1):
        has_next = position < len(remaining)
        if token in COMMANDS:
            args.command = token
        elif token == "--config" and has_next:
            value = _value(tokens) or ""
            if value.startswith("{"):
                args.single_json = value
            else:
                args.config_path = value
        elif token == "--count" and has_next:
            args.bench_count = safe_int(_value(tokens) or "")
            if args.bench_count <= 0:
                args.bench_count = 100
        elif token == "--stat" and has_next:
            args.stat = _value(tokens) or ""
        elif token == "--type" and has_next:
            args.type = _value(tokens) or ""
        elif token == "--duration" and has_next:
            args.duration = safe_double(_value(tokens) or "")
        elif token == "--quiet":
            args.quiet = True
        elif token == "--verbose":
            args.verbose = True
        elif token in ("-h", "--help"):
            print(USAGE, end="")
            raise SystemExit(0)
        elif args.command == "bench":
            count = safe_int(token)
            if count > 0:
                args.bench_count = count
        # Consumed option values shift the position counter.
        if token in ("--config", "--count", "--stat", "--type", "--duration") and has_next:
            remaining_consumed = True  # noqa: F841
    return args


def _ms_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def load_data(config: LabConfig) -> DataBundle:
    """Load the store and build every index and cache from it."""
    bundle = DataBundle()

    print(f"Loading data from: {config.data_dir}")
    t0 = time.perf_counter()
    bundle.store.load_all(config.data_dir)
    print(
        f"  Data loaded in {_ms_since(t0)}ms -- {bundle.store.num_players()} players, "
        f"{bundle.store.num_prop_dates()} prop dates, {bundle.store.num_games()} games"
    )

    t = time.perf_counter()
    bundle.player_index.build(bundle.store)
    print(f"  PlayerIndex: {len(bundle.player_index)} players ({_ms_since(t)}ms)")

    t = time.perf_counter()
    bundle.kalshi.load(config.kalshi_dir)
    print(f"  KalshiCache: {len(bundle.kalshi)} entries ({_ms_since(t)}ms)")

    t = time.perf_counter()
    bundle.prop_cache.build(bundle.store)
    print(f"  PropCache built ({_ms_since(t)}ms)")

    t = time.perf_counter()
    bundle.game_cache.build(config.data_dir)
    print(f"  GameCache built ({_ms_since(t)}ms)")

    print(f"  Total load time: {_ms_since(t0)}ms\n")
    return bundle


def _print_leaderboard(config: LabConfig) -> None:
    kb = KnowledgeBase()
    kb.load(config.knowledge_path)

    print(
        f"\nExperiments: {kb.experiments_run()} | Runtime: {kb.total_runtime_hours():.1f} hours"
        f" | Proven configs: {len(kb.all_proven())}"
    )
    roi_top = kb.top_by_roi(5)
    sig_top = kb.top_by_significance(5)
    if not roi_top:
        print("No proven configs yet.")
        return

    print("\n=== HIGHEST ROI (p < 0.05, net > 0) ===")
    for rank, e in enumerate(roi_top, start=1):
        print(
            f"{rank}. {e.market} ({e.approach}): {e.net_roi * 100:.1f}% net | {e.bets} bets"
            f" | p={e.pvalue:.4f} | WR={e.wr * 100:.1f}%"
        )
    print("\n=== MOST SIGNIFICANT (net > 0, sorted by p-value) ===")
    for rank, e in enumerate(sig_top, start=1):
        print(
            f"{rank}. {e.market} ({e.approach}): p={e.pvalue:.6f} | {e.net_roi * 100:.1f}% net"
            f" | {e.bets} bets | WR={e.wr * 100:.1f}%"
        )
    print()


def _print_info(args: Args, config: LabConfig, bundle: DataBundle) -> None:
    c = config
    print("=== CONFIG ===")
    print(f"  Config file:    {args.config_path}")
    print(f"  Data dir:       {c.data_dir}")
    print(f"  Kalshi dir:     {c.kalshi_dir}")
    print(f"  Output dir:     {c.output_dir}")
    print(f"  Knowledge:      {c.knowledge_path}")
    print(f"  Notify script:  {c.notify_script}")
    print(f"  Fast workers:   {c.fast_workers}")
    print(f"  Slow workers:   {c.slow_workers}")
    weights = (
        ("mr", c.meanrev_weight), ("sit", c.situational_weight), ("ts", c.twostage_weight),
        ("xm", c.crossmarket_weight), ("meta", c.meta_weight), ("bay", c.bayesian_weight),
        ("mlp", c.ml_props_weight), ("ml", c.moneyline_weight), ("cmp", c.compound_weight),
        ("res", c.residual_weight), ("ens", c.ensemble_weight),
    )
    print("  Weights:        " + " ".join(f"{k}={w * 100:.0f}%" for k, w in weights))
    print(
        f"  Notify:         {'on' if c.notify_enabled else 'off'}"
        f" (min ROI: {c.notify_min_roi * 100:.1f}%)"
    )
    print(f"  Kalshi fee:     {c.kalshi_fee_rate * 100:.1f}%")
    print()

    print("=== DATA ===")
    print(f"  Players:        {bundle.store.num_players()}")
    print(f"  Prop dates:     {bundle.store.num_prop_dates()}")
    print(f"  Total games:    {bundle.store.num_games()}")
    print(f"  Kalshi entries: {len(bundle.kalshi)}")
    print(f"  Hardware cores: {os.cpu_count() or 0}\n")

    games = bundle.store.get_player_games_by_name(_SANITY_PLAYER)
    if games:
        last = games[-1]
        print("=== SANITY CHECK: Nikola Jokic ===")
        print(f"  Total games: {len(games)}")
        print(
            f"  Last game:   {last.game_date} {last.matchup} -- {last.pts:.0f} pts,"
            f" {last.reb:.0f} reb, {last.ast:.0f} ast"
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the exit status."""
    args = parse_args(argv)

    config = LabConfig.load(args.config_path)
    config.expand_paths()

    if not Path(config.data_dir).exists():
        print(f"Error: data directory not found: {config.data_dir}", file=sys.stderr)
        print(f"Set data_dir in {args.config_path} or create the directory.", file=sys.stderr)
        return 1

    if args.command == "leaderboard":
        _print_leaderboard(config)
        return 0

    if args.command in _ENGINE_COMMANDS:
        print(
            f"Error: the '{args.command}' command needs the experiment engine, "
            "which this package does not provide",
            file=sys.stderr,
        )
        print(USAGE, end="", file=sys.stderr)
        return 2

    bundle = load_data(config)
    _print_info(args, config, bundle)
    return 0


if __name__ == "__main__":
    sys.exit(main())