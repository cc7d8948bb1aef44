# nbalab

Tools for backtesting NBA betting models. The package loads player game
logs, team game results, bookmaker prop lines, game odds and settled
Kalshi prices from CSV files, builds lookup indexes over them, and
replays every prop date in order so that a strategy callback can place
bets using only games played before each date.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Data layout

The data directory (`data_dir` in the config) is read for:

- `player_gamelog_*.csv` — per-player game logs (32- and 70-column layouts)
- `games_*.csv` — team game rows, paired into home/away results
- `player_props/props_*.csv` — player prop lines by bookmaker
- `odds/odds_*.csv` — moneyline, spread and total odds

Settled Kalshi prices (`kalshi_*_settled.csv`) are read from `kalshi_dir`.

## Configuration

`nbalab.config.LabConfig.load(path)` reads a JSON file. Missing keys keep
their defaults; a missing, unreadable or malformed file gives all
defaults. Worker counts are clamped (`fast_workers` at least 1,
`slow_workers` at least 0), and if every strategy weight is zero the
weights are restored to their defaults. `expand_paths()` replaces a
leading `~` with `$HOME` in the path fields, and `save(path)` writes the
config back as JSON.

Recognised keys: `data_dir`, `kalshi_dir`, `output_dir`,
`knowledge_path`, `notify_script`, `models_db_path`, `fast_workers`,
`slow_workers`, the per-strategy `*_weight` values, `notify_enabled`,
`notify_min_roi` and `kalshi_fee_rate`.

## Command line

```
nbalab info [--config config.json]
nbalab leaderboard [--config config.json]
```

Both commands first check that `data_dir` exists and exit with status 1
if it does not.

- `info` (the default) loads all data and prints the configuration, data
  counts and the number of CPU cores.
- `leaderboard` loads the knowledge file and prints the five proven
  configs with the highest net ROI and the five with the lowest p-value.

Options: `--config PATH` (default `config.json`), `-h`/`--help`. The
options `--count`, `--duration`, `--stat`, `--type`, `--quiet` and
`--verbose` are parsed but do not change what `info` or `leaderboard`
print.

## Library use

```python
from nbalab.config import LabConfig
from nbalab.cli import load_data
from nbalab.odds import american_to_decimal

config = LabConfig.load("config.json")
config.expand_paths()
bundle = load_data(config)

print(bundle.store.num_players(), len(bundle.prop_cache))
print(american_to_decimal(150))  # 2.5
```

Main pieces:

- `nbalab.store.DataStore` — game logs by player id and name, props and
  odds by date.
- `nbalab.prop_cache.PropCache` — props per (date, market) with median
  line and odds across bookmakers, name variants merged by player id.
- `nbalab.game_cache.GameCache` — results by (date, home, away) and each
  team's date-sorted history.
- `nbalab.player_index.PlayerIndex` — per-player stat arrays, looked up
  by id, exact name or normalised name.
- `nbalab.z_score` — rolling averages, standard deviations, z-scores, hit
  rates and per-minute rates over the games before an index.
- `nbalab.odds` — `KalshiCache` with exact and interpolated prices,
  `american_to_decimal`, `kalshi_to_decimal` and `resolve`, which falls
  back from Kalshi to the sportsbook moneyline.
- `nbalab.walkforward.WalkforwardRunner` — `run(target_market,
  target_stat, callback)` walks every prop date, sizes each returned
  `Bet` against a running bankroll (starting at 1000, capped at 5% of
  it), settles it against the actual stat and returns an
  `ExperimentResult` with win rate, ROI, P&L and a one-sided p-value.
- `nbalab.knowledge.KnowledgeBase` — JSON store of proven configs and
  run totals, with top-by-ROI and top-by-significance views.
- `nbalab.models_db.ModelsDB` — writes proven configs to a SQLite
  `models` table, replacing an existing row only on better net ROI.
- `nbalab.bet_history.save_bets` — writes bets as JSON lines.
- `nbalab.notify.send` — runs a notification script through the shell
  with the message as its argument.

## What this package does not do

It contains no betting strategies, no random experiment generator and no
parallel experiment runner. The `run`, `bench` and `single` commands are
recognised but only print an error and exit with status 2; to backtest,
write a callback and pass it to `WalkforwardRunner.run`.