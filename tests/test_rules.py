from core.rules import evaluate_rules, has_blocking


def _codes(state):
    return {r.code for r in evaluate_rules(state)}


HEALTHY = {
    "annual_income": 90000,
    "monthly_net_income": 6000,
    "budget_min": 20000,
    "budget_max": 30000,
    "vehicle_price": 28000,
    "max_affordable_price": 45000,
    "total_monthly_cost": 700,
    "apr": 4.5,
    "term_months": 48,
    "down_payment": 5000,
}


def test_healthy_snapshot_has_no_findings():
    assert evaluate_rules(HEALTHY) == []


def test_no_income_is_blocking():
    res = evaluate_rules({**HEALTHY, "annual_income": 0})
    assert "NO_INCOME" in {r.code for r in res}
    assert has_blocking(res)


def test_inverted_budget_is_blocking():
    res = evaluate_rules({**HEALTHY, "budget_min": 40000})
    assert "BUDGET_RANGE_INVERTED" in {r.code for r in res}
    assert has_blocking(res)


def test_price_over_max():
    res = evaluate_rules({**HEALTHY, "vehicle_price": 50000, "down_payment": 10000})
    hit = next(r for r in res if r.code == "PRICE_OVER_MAX")
    assert hit.severity == "warn"
    assert hit.context["limit"] == 45000
    assert not has_blocking(res)


def test_cost_share_warn_and_info():
    assert "COST_SHARE_HIGH" in _codes({**HEALTHY, "total_monthly_cost": 1600})
    codes = _codes({**HEALTHY, "total_monthly_cost": 1300})
    assert "COST_SHARE_ELEVATED" in codes
    assert "COST_SHARE_HIGH" not in codes


def test_subprime_long_term_and_low_down():
    codes = _codes({**HEALTHY, "apr": 12.5, "term_months": 72, "down_payment": 1000})
    assert {"SUBPRIME_APR", "LONG_TERM", "LOW_DOWN_PAYMENT"} <= codes
    assert "SUBPRIME_APR" not in _codes({**HEALTHY, "apr": 8.9})
    assert "LONG_TERM" not in _codes({**HEALTHY, "term_months": 60})


def test_missing_keys_only_flag_income():
    assert _codes({}) == {"NO_INCOME"}
