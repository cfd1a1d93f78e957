import pytest

from drivewise.depreciation import (
    calculate_resale_value,
    calculate_tco,
    compare_buy_vs_lease,
    depreciation_path,
    generate_depreciation_forecast,
)
from drivewise.models import DepreciationFactors

ALL_FACTORS = DepreciationFactors(low_mileage=True, good_condition=True, low_interest=True, low_gas=True)


def _by_year(forecast):
    return {p.year: (p.value, p.lower, p.upper) for p in forecast}


def test_forecast_without_factors():
    points = _by_year(generate_depreciation_forecast(30000))
    assert sorted(points) == [0, 1, 2, 3, 4, 5, 7]
    assert points[0] == (100, 86, 100)
    assert points[3] == (63, 53, 69)
    assert points[5] == (48, 35, 57)
    assert points[7] == (38, 24, 48)


def test_forecast_factors_raise_retention_but_cap_at_100():
    points = _by_year(generate_depreciation_forecast(30000, ALL_FACTORS))
    assert points[0][0] == 100
    assert points[1][0] == 93
    assert points[7][0] == 46
    for value, lower, upper in points.values():
        assert 0 <= lower <= value <= upper <= 100


def test_forecast_rejects_non_positive_price():
    with pytest.raises(ValueError):
        generate_depreciation_forecast(0)


def test_resale_on_known_year():
    resale = calculate_resale_value(30000, 3)
    assert resale.estimated_value == 18900
    assert resale.lower_bound == 15900
    assert resale.upper_bound == 20700
    assert resale.confidence == "High (87%+)"


def test_resale_interpolates_missing_year():
    resale = calculate_resale_value(20000, 6)
    assert resale.estimated_value == 8600
    assert resale.lower_bound == 6000
    assert resale.upper_bound == 10600
    assert resale.confidence == "Lower (60-75%)"


def test_resale_holds_last_point_beyond_curve():
    assert calculate_resale_value(30000, 10).estimated_value == 11400
    assert calculate_resale_value(30000, 4).confidence == "Moderate (75-87%)"
    with pytest.raises(ValueError):
        calculate_resale_value(30000, -1)


def test_tco_zero_rate_reference():
    tco = calculate_tco(30000, 0, 0, 36, 100, 100, 50, 74)
    assert tco.breakdown.payments == 30000
    assert tco.total_paid == 41664
    assert tco.depreciation == 11100
    assert tco.net_cost == 22764
    assert tco.monthly_equivalent == 632
    assert tco.breakdown.taxes_and_fees == 2664


def test_tco_factors_lower_net_cost():
    plain = calculate_tco(30000, 3000, 4.5, 36, 100, 100, 50, 74)
    boosted = calculate_tco(30000, 3000, 4.5, 36, 100, 100, 50, 74, ALL_FACTORS)
    assert boosted.net_cost < plain.net_cost
    assert boosted.total_paid == plain.total_paid


def test_tco_rejects_down_over_price():
    with pytest.raises(ValueError):
        calculate_tco(20000, 25000, 4.5, 36, 100, 100, 50, 74)


def test_depreciation_path_compounds_yearly_rates():
    path = depreciation_path(30000, annual_mileage=0)
    assert len(path) == 11
    assert [p.value for p in path[:3]] == [30000, 24000, 21120]
    assert path[1].lower_bound == 21600
    assert path[1].upper_bound == 26400
    assert all(a.value > b.value for a, b in zip(path, path[1:]))


def test_depreciation_path_mileage_and_model_year():
    path = depreciation_path(30000, annual_mileage=15000, model_year=2024)
    assert path[0].value == 29400
    assert path[0].year == 2024
    assert path[-1].year == 2034


def test_buy_vs_lease_prefers_lease_when_cheaper():
    result = compare_buy_vs_lease(30000, 0, 60, 0, 0, 300, 36)
    assert result.buy.monthly_payment == pytest.approx(500)
    assert result.buy.residual_value == pytest.approx(18000)
    assert result.buy.net_cost == pytest.approx(12000)
    assert result.lease.total_cost == pytest.approx(10800)
    assert result.recommendation == "lease"
    assert result.savings == pytest.approx(1200)


def test_buy_vs_lease_prefers_buy_when_lease_costs_more():
    result = compare_buy_vs_lease(30000, 0, 60, 0, 3000, 500, 36)
    assert result.recommendation == "buy"
    assert result.savings == pytest.approx(9000)


def test_factor_subsets_never_lower_retention():
    base = _by_year(generate_depreciation_forecast(25000))
    names = ["low_mileage", "good_condition", "low_interest", "low_gas"]
    for mask in range(16):
        factors = DepreciationFactors(**{n: bool(mask & (1 << i)) for i, n in enumerate(names)})
        for year, (value, _, _) in _by_year(generate_depreciation_forecast(25000, factors)).items():
            assert base[year][0] <= value <= 100


@pytest.mark.parametrize("price", [18000, 28400, 55000])
def test_resale_matches_forecast_at_year_three(price):
    factors = DepreciationFactors(good_condition=True)
    year3 = _by_year(generate_depreciation_forecast(price, factors))[3][0]
    assert calculate_resale_value(price, 3, factors).estimated_value == round(price * year3 / 100)


def test_buy_vs_lease_rejects_negative_down_payment():
    with pytest.raises(ValueError, match="down_payment"):
        compare_buy_vs_lease(30000, -5000, 60, 0, 0, 300, 36)
