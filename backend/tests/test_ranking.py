from types import SimpleNamespace

from marketoracle.services.ranking_service import rank_week


def row(provider_id, total_points, win_rate=0.5, profit_loss=0.0):
    return SimpleNamespace(provider_id=provider_id, total_points=total_points, win_rate=win_rate, profit_loss=profit_loss)


def test_highest_points_ranks_first():
    ranks = rank_week([row("gpt-4", 40), row("claude", 40), row("gemini", 55)])
    assert ranks["gemini"] == 1
    assert sorted(ranks.values()) == [1, 2, 3]


def test_points_tie_broken_by_win_rate_then_profit():
    ranks = rank_week([row("a", 40, win_rate=0.5), row("b", 40, win_rate=0.75), row("c", 55)])
    assert ranks == {"c": 1, "b": 2, "a": 3}

    ranks = rank_week([row("a", 40, profit_loss=1.0), row("b", 40, profit_loss=3.0)])
    assert ranks == {"b": 1, "a": 2}


def test_exact_tie_falls_back_to_provider_id_and_is_order_independent():
    rows = [row("zeta", 40), row("alpha", 40), row("mid", 55)]
    assert rank_week(rows) == rank_week(list(reversed(rows))) == {"mid": 1, "alpha": 2, "zeta": 3}


def test_negative_points_rank_last():
    ranks = rank_week([row("a", -8), row("b", 0), row("c", 5)])
    assert ranks == {"c": 1, "b": 2, "a": 3}
