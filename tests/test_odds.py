import pytest

from nbalab.odds import KalshiCache, american_to_decimal, kalshi_to_decimal, resolve

HEADER = "game_date,stat,player,line,yes_price,result,volume,ticker\n"


@pytest.fixture
def cache(tmp_path):
    rows = [
        "2024-01-05,PTS,Nikola Jokic,20.5,0.6,yes,100,TICKER-A",
        "2024-01-05,PTS,Nikola Jokic,22.5,0.4,no,100,TICKER-B",
        "2024-01-05,PTS,Nikola Jokic,24.5,0.2,no,100,TICKER-C",
        "2024-01-05,REB,Nikola Jokic,11.5,0.5,yes,100,TICKER-D",
        "2024-01-05,PTS,,18.5,0.5,yes,100,TICKER-E",
        "2024-01-05,PTS,Jamal Murray,18.5,1.5,yes,100,TICKER-F",
        "",
        "short,row",
    ]
    (tmp_path / "kalshi_nba_settled.csv").write_text(HEADER + "\n".join(rows) + "\n")
    (tmp_path / "kalshi_nba_live.csv").write_text(
        HEADER + "2024-01-05,AST,Nikola Jokic,9.5,0.5,yes,1,T\n"
    )
    kc = KalshiCache()
    kc.load(tmp_path)
    return kc


def test_american_to_decimal_documented_values():
    assert american_to_decimal(150) == pytest.approx(2.5)
    assert american_to_decimal(-150) == pytest.approx(1.667, abs=1e-3)


def test_american_to_decimal_invalid_range():
    assert american_to_decimal(50) == 1.0
    assert american_to_decimal(-99) == 1.0


def test_american_to_decimal_even_money_symmetry():
    assert american_to_decimal(100) == american_to_decimal(-100)


def test_kalshi_to_decimal_complement_invariant():
    price = 0.37
    over = kalshi_to_decimal(price, "OVER")
    under = kalshi_to_decimal(price, "UNDER")
    assert 1 / over + 1 / under == pytest.approx(1.0)
    assert kalshi_to_decimal(price, "over") == over


def test_kalshi_to_decimal_caps():
    assert kalshi_to_decimal(0.0, "OVER") == 100.0
    assert kalshi_to_decimal(1.0, "UNDER") == 100.0


def test_load_counts_valid_matching_rows(cache):
    assert len(cache) == 4


def test_get_exact_and_rounded(cache):
    assert cache.get("2024-01-05", "Nikola Jokic", "PTS", 20.5) == 0.6
    assert cache.get("2024-01-05", "Nikola Jokic", "PTS", 20.54) == 0.6
    assert cache.get("2024-01-05", "Nikola Jokic", "PTS", 21.5) is None


def test_invalid_rows_and_other_files_skipped(cache):
    assert cache.get("2024-01-05", "Jamal Murray", "PTS", 18.5) is None
    assert cache.get("2024-01-05", "Nikola Jokic", "AST", 9.5) is None


def test_interpolate_between_lines(cache):
    mid_low = cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 21.0)
    mid_high = cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 22.0)
    assert 0.4 < mid_high < mid_low < 0.6


def test_interpolate_exact_outside_and_single(cache):
    assert cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 22.5) == 0.4
    assert cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 19.5) is None
    assert cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 26.5) is None
    assert cache.interpolate("2024-01-05", "Nikola Jokic", "REB", 12.5) is None


def test_missing_directory_gives_empty_cache(tmp_path):
    kc = KalshiCache()
    kc.load(tmp_path / "missing")
    assert len(kc) == 0
    assert kc.get("2024-01-05", "Nikola Jokic", "PTS", 20.5) is None


def test_resolve_exact(cache):
    res = resolve(cache, "2024-01-05", "Nikola Jokic", "PTS", 20.5, "UNDER", -110)
    assert res.source == "kalshi"
    assert res.decimal == pytest.approx(kalshi_to_decimal(0.6, "UNDER"))


def test_resolve_interpolated(cache):
    res = resolve(cache, "2024-01-05", "Nikola Jokic", "PTS", 23.5, "OVER", -110)
    interp = cache.interpolate("2024-01-05", "Nikola Jokic", "PTS", 23.5)
    assert res.source == "kalshi_interp"
    assert res.decimal == pytest.approx(kalshi_to_decimal(interp, "OVER"))


def test_resolve_falls_back_to_sportsbook(cache):
    res = resolve(cache, "2024-01-06", "Nikola Jokic", "PTS", 20.5, "OVER", 150)
    assert res.source == "dk"
    assert res.decimal == american_to_decimal(150)