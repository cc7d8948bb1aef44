import sqlite3

import pytest

from nbalab.knowledge import ProvenConfig
from nbalab.models_db import ModelsDB, extract_sides, market_to_stat


def _proven(name="cfg_a", net_roi=0.05, market="player_points", config=None):
    return ProvenConfig(
        market=market,
        approach="meanrev",
        name=name,
        roi=net_roi + 0.038,
        net_roi=net_roi,
        pvalue=0.01,
        bets=50,
        wr=0.6,
        config=config if config is not None else {"sides": ["OVER", "UNDER"], "kelly": 0.05},
    )


def _rows(path):
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        return [dict(r) for r in conn.execute("SELECT * FROM models ORDER BY name")]
    finally:
        conn.close()


@pytest.mark.parametrize(
    "market, stat",
    [
        ("player_points", "PTS"),
        ("player_rebounds", "REB"),
        ("player_assists", "AST"),
        ("player_threes", "FG3M"),
        ("player_steals", "STL"),
        ("player_blocks", "BLK"),
        ("h2h", "H2H"),
        ("spreads", "SPREADS"),
        ("totals", "TOTALS"),
    ],
)
def test_market_to_stat_known(market, stat):
    assert market_to_stat(market) == stat


def test_market_to_stat_falls_back_to_uppercase():
    assert market_to_stat("player_turnovers") == "PLAYER_TURNOVERS"


def test_extract_sides_variants():
    assert extract_sides({"sides": ["OVER", "UNDER"]}) == "OVER,UNDER"
    assert extract_sides({"sides": "UNDER"}) == "UNDER"
    assert extract_sides({"config": {"sides": ["OVER"]}}) == "OVER"
    assert extract_sides({"kelly": 0.1}) == "BOTH"
    assert extract_sides(None) == "BOTH"
    assert extract_sides(["OVER"]) == "BOTH"


def test_extract_sides_rejects_non_string_side():
    with pytest.raises(TypeError):
        extract_sides({"sides": ["OVER", 3]})


def test_upsert_inserts_inactive_row(tmp_path):
    path = tmp_path / "models.db"
    with ModelsDB() as db:
        assert db.open(path) is True
        assert db.is_open() is True
        assert db.upsert_model(_proven()) is True
    assert db.is_open() is False

    rows = _rows(path)
    assert len(rows) == 1
    row = rows[0]
    assert row["name"] == "cfg_a"
    assert row["type"] == "meanrev"
    assert row["stat"] == "PTS"
    assert row["sides"] == "OVER,UNDER"
    assert row["is_active"] == 0
    assert row["source"] == "cpp_lab"
    assert row["total_bets"] == 50
    assert row["roi_net"] == pytest.approx(0.05)


def test_upsert_keeps_better_result(tmp_path):
    path = tmp_path / "models.db"
    db = ModelsDB()
    db.open(path)
    db.upsert_model(_proven(net_roi=0.08))
    db.upsert_model(_proven(net_roi=0.02))
    db.close()
    assert _rows(path)[0]["roi_net"] == pytest.approx(0.08)

    db.open(path)
    db.upsert_model(_proven(net_roi=0.12))
    db.close()
    rows = _rows(path)
    assert len(rows) == 1
    assert rows[0]["roi_net"] == pytest.approx(0.12)


def test_config_json_round_trips(tmp_path):
    import json

    path = tmp_path / "models.db"
    config = {"sides": ["OVER"], "min_dev": 0.7, "name": "x"}
    with ModelsDB() as db:
        db.open(path)
        db.upsert_model(_proven(config=config))
    assert json.loads(_rows(path)[0]["config_json"]) == config


def test_upsert_without_open_fails():
    assert ModelsDB().upsert_model(_proven()) is False


def test_open_in_missing_directory_fails(tmp_path):
    db = ModelsDB()
    assert db.open(tmp_path / "missing" / "models.db") is False
    assert db.is_open() is False


def test_open_twice_is_fine(tmp_path):
    db = ModelsDB()
    assert db.open(tmp_path / "a.db") is True
    assert db.open(tmp_path / "a.db") is True
    db.close()
    assert db.is_open() is False