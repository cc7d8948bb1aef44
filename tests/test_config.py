import json

import pytest

from nbalab.config import LabConfig, expand_home


def test_defaults_values_fixed_by_source():
    c = LabConfig.defaults()
    assert c.data_dir == "~/Desktop/nba-modeling/data/raw"
    assert c.models_db_path == "~/claude-code-linux-harness/data/models.db"
    assert (c.fast_workers, c.slow_workers) == (6, 2)
    assert c.kalshi_fee_rate == 0.038
    assert c.notify_enabled is True
    assert c.max_runtime_seconds == 0


def test_load_missing_file_returns_defaults(tmp_path):
    assert LabConfig.load(tmp_path / "none.json") == LabConfig.defaults()


def test_load_malformed_json_returns_defaults(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{not json")
    assert LabConfig.load(p) == LabConfig.defaults()


def test_load_overrides_only_given_fields(tmp_path):
    p = tmp_path / "c.json"
    p.write_text(json.dumps({"data_dir": "/data", "fast_workers": 3,
                             "notify_enabled": False, "meanrev_weight": 0.5}))
    c = LabConfig.load(p)
    d = LabConfig.defaults()
    assert c.data_dir == "/data"
    assert c.fast_workers == 3
    assert c.notify_enabled is False
    assert c.meanrev_weight == 0.5
    assert c.kalshi_dir == d.kalshi_dir
    assert c.situational_weight == d.situational_weight


def test_load_clamps_worker_counts(tmp_path):
    p = tmp_path / "c.json"
    p.write_text(json.dumps({"fast_workers": 0, "slow_workers": -4}))
    c = LabConfig.load(p)
    assert c.fast_workers == 1
    assert c.slow_workers == 0


def test_all_zero_weights_reset_except_four_factors(tmp_path):
    fields = [
        "meanrev_weight", "situational_weight", "twostage_weight", "crossmarket_weight",
        "meta_weight", "bayesian_weight", "ml_props_weight", "moneyline_weight",
        "compound_weight", "residual_weight", "ensemble_weight", "timeseries_weight",
        "neural_weight", "spreads_weight", "totals_weight", "four_factors_weight",
    ]
    p = tmp_path / "c.json"
    p.write_text(json.dumps({f: 0.0 for f in fields}))
    c = LabConfig.load(p)
    d = LabConfig.defaults()
    assert c.meanrev_weight == d.meanrev_weight
    assert c.totals_weight == d.totals_weight
    assert c.four_factors_weight == 0.0


def test_wrong_type_raises(tmp_path):
    p = tmp_path / "c.json"
    p.write_text(json.dumps({"fast_workers": "many"}))
    with pytest.raises(TypeError):
        LabConfig.load(p)


def test_save_then_load_round_trip(tmp_path):
    c = LabConfig.defaults()
    c.output_dir = "/out"
    c.slow_workers = 5
    c.neural_weight = 0.25
    c.notify_min_roi = 0.1
    target = tmp_path / "nested" / "dir" / "config.json"
    c.save(target)
    assert target.read_text().endswith("\n")
    assert LabConfig.load(target) == c


def test_save_omits_runtime_limit(tmp_path):
    target = tmp_path / "c.json"
    LabConfig.defaults().save(target)
    data = json.loads(target.read_text())
    assert "max_runtime_seconds" not in data
    assert data["kalshi_fee_rate"] == 0.038


def test_expand_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    assert expand_home("~/x/y") == "/home/tester/x/y"
    assert expand_home("/abs/path") == "/abs/path"
    assert expand_home("") == ""


def test_expand_home_without_home_env(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    assert expand_home("~/x") == "~/x"


def test_expand_paths_in_place(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    c = LabConfig.defaults()
    c.expand_paths()
    assert c.data_dir == "/home/tester/Desktop/nba-modeling/data/raw"
    assert c.notify_script == "/home/tester/claude-code-linux-harness/notify.sh"
    assert not any(getattr(c, f).startswith("~") for f in (
        "data_dir", "kalshi_dir", "output_dir", "knowledge_path",
        "notify_script", "models_db_path"))