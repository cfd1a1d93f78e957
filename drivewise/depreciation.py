"""Value retention forecasts and ownership cost over a loan term.

Two depreciation models live here and are intentionally kept apart:

* the base retention curve (:func:`generate_depreciation_forecast`) built on
  historical average retention with asymmetric confidence bands, which also
  backs resale lookups and the total cost of ownership;
* the ten year compounding path (:func:`depreciation_path`) used for vehicle
  detail projections, which applies fixed yearly rates and a mileage factor.

They disagree for the same vehicle and are not meant to be reconciled.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .calculators import annuity_payment, check_non_negative, check_positive, round_half_up
from .models import (
    BuyOption,
    BuyVsLeaseResult,
    DepreciationFactors,
    DepreciationPathPoint,
    LeaseOption,
    ResaleValue,
    TCOBreakdown,
    TCOResult,
    ValueProjection,
)
from .presets import (
    BASE_DEPRECIATION_CURVE,
    BUY_DEPRECIATION_RATE,
    BUY_DEPRECIATION_YEARS,
    CONFIDENCE_INTERVALS,
    CONFIDENCE_LABEL_FLOOR,
    CONFIDENCE_LABELS,
    DEFAULT_ANNUAL_MILEAGE,
    DEFAULT_CONFIDENCE_INTERVAL,
    FACTOR_BONUSES,
    LOWER_BOUND_WEIGHT,
    PATH_BAND,
    PATH_EARLY_RATE,
    PATH_FIRST_YEAR_RATE,
    PATH_LATE_RATE,
    PATH_MILEAGE_PENALTY,
    PATH_MILEAGE_PIVOT,
    PATH_YEARS,
    UPPER_BOUND_WEIGHT,
)

logger = logging.getLogger(__name__)


def factor_adjustment(factors: Optional[DepreciationFactors]) -> float:
    """Total retention bonus for the market/vehicle factors that are present."""

    if factors is None:
        return 0.0
    return sum(bonus for name, bonus in FACTOR_BONUSES.items() if getattr(factors, name))


def generate_depreciation_forecast(
    vehicle_price, factors: Optional[DepreciationFactors] = None
) -> List[ValueProjection]:
    """Retention percentages with confidence bands for years 0-5 and 7.

    ``vehicle_price`` does not change the percentages; it is validated so the
    forecast is only ever produced for a real vehicle.
    """

    check_positive(vehicle_price, "vehicle_price")
    bonus = factor_adjustment(factors)
    forecast = []
    for year, retention in BASE_DEPRECIATION_CURVE.items():
        adjusted = min(1.0, retention + bonus)
        ci = CONFIDENCE_INTERVALS.get(year, DEFAULT_CONFIDENCE_INTERVAL)
        lower = max(0.0, adjusted - ci * LOWER_BOUND_WEIGHT)
        upper = min(1.0, adjusted + ci * UPPER_BOUND_WEIGHT)
        forecast.append(
            ValueProjection(
                year=year,
                value=round_half_up(adjusted * 100),
                lower=round_half_up(lower * 100),
                upper=round_half_up(upper * 100),
            )
        )
    return forecast


def _projection_at(forecast: List[ValueProjection], years):
    """(value, lower, upper) percentages at ``years``, interpolated between known points.

    Beyond the last known year the last point is held; there is no
    extrapolation.
    """

    for point in forecast:
        if point.year == years:
            return point.value, point.lower, point.upper
    before = [p for p in forecast if p.year < years]
    after = [p for p in forecast if p.year > years]
    if before and after:
        lo, hi = before[-1], after[0]
        ratio = (years - lo.year) / (hi.year - lo.year)
        return (
            round_half_up(lo.value + (hi.value - lo.value) * ratio),
            round_half_up(lo.lower + (hi.lower - lo.lower) * ratio),
            round_half_up(lo.upper + (hi.upper - lo.upper) * ratio),
        )
    last = forecast[-1]
    return last.value, last.lower, last.upper


def confidence_label(years):
    for ceiling, label in CONFIDENCE_LABELS:
        if years <= ceiling:
            return label
    return CONFIDENCE_LABEL_FLOOR


def calculate_resale_value(vehicle_price, years, factors: Optional[DepreciationFactors] = None) -> ResaleValue:
    """Estimated resale value in dollars after ``years`` of ownership."""

    check_non_negative(years, "years")
    forecast = generate_depreciation_forecast(vehicle_price, factors)
    value, lower, upper = _projection_at(forecast, years)
    return ResaleValue(
        estimated_value=round_half_up(vehicle_price * value / 100),
        lower_bound=round_half_up(vehicle_price * lower / 100),
        upper_bound=round_half_up(vehicle_price * upper / 100),
        confidence=confidence_label(years),
    )


def path_rate(year):
    if year == 0:
        return 0.0
    if year == 1:
        return PATH_FIRST_YEAR_RATE
    if year <= 5:
        return PATH_EARLY_RATE
    return PATH_LATE_RATE


def depreciation_path(
    vehicle_price,
    annual_mileage=DEFAULT_ANNUAL_MILEAGE,
    model_year: Optional[int] = None,
    years=PATH_YEARS,
) -> List[DepreciationPathPoint]:
    """Dollar value for each year 0..``years`` with a +/-10% band.

    Each year compounds that year's rate (20% in year one, 12% through year
    five, 8% afterwards) and the mileage factor ``1 - miles/15000 * 2%``.
    The mileage factor also applies to year zero.  When ``model_year`` is
    given the points are labelled with calendar years.
    """

    check_positive(vehicle_price, "vehicle_price")
    check_non_negative(annual_mileage, "annual_mileage")
    mileage_factor = 1 - (annual_mileage / PATH_MILEAGE_PIVOT) * PATH_MILEAGE_PENALTY
    value = float(vehicle_price)
    points = []
    for year in range(years + 1):
        value = value * (1 - path_rate(year)) * mileage_factor
        points.append(
            DepreciationPathPoint(
                year=(model_year or 0) + year,
                value=round_half_up(value),
                lower_bound=round_half_up(value * (1 - PATH_BAND)),
                upper_bound=round_half_up(value * (1 + PATH_BAND)),
            )
        )
    return points


def calculate_tco(
    vehicle_price,
    down_payment,
    apr,
    term_months,
    monthly_insurance,
    monthly_fuel,
    monthly_maintenance,
    monthly_taxes_fees,
    factors: Optional[DepreciationFactors] = None,
) -> TCOResult:
    """Total cost of ownership over the loan term, net of resale value.

    Out of pocket spending (down payment, loan payments and every recurring
    cost for ``term_months``) less the base-curve resale value at the end of
    the term gives the net cost; dividing by the term gives a monthly
    equivalent.
    """

    check_positive(vehicle_price, "vehicle_price")
    check_non_negative(down_payment, "down_payment")
    if down_payment > vehicle_price:
        raise ValueError("down_payment must not exceed vehicle_price")

    payment = annuity_payment(vehicle_price - down_payment, apr, term_months)
    payments = payment * term_months
    insurance = monthly_insurance * term_months
    fuel = monthly_fuel * term_months
    maintenance = monthly_maintenance * term_months
    taxes_and_fees = monthly_taxes_fees * term_months

    resale = calculate_resale_value(vehicle_price, term_months / 12, factors)
    depreciation = vehicle_price - resale.estimated_value
    total_paid = down_payment + payments + insurance + fuel + maintenance + taxes_and_fees
    net_cost = total_paid - resale.estimated_value
    logger.debug("tco over %s months: paid %.2f, resale %s", term_months, total_paid, resale.estimated_value)

    return TCOResult(
        total_paid=round_half_up(total_paid),
        depreciation=round_half_up(depreciation),
        net_cost=round_half_up(net_cost),
        monthly_equivalent=round_half_up(net_cost / term_months),
        breakdown=TCOBreakdown(
            payments=round_half_up(payments),
            insurance=round_half_up(insurance),
            fuel=round_half_up(fuel),
            maintenance=round_half_up(maintenance),
            taxes_and_fees=round_half_up(taxes_and_fees),
            depreciation=round_half_up(depreciation),
        ),
    )


def compare_buy_vs_lease(
    vehicle_price,
    down_payment,
    loan_term,
    apr,
    lease_down_payment,
    monthly_lease_payment,
    lease_term,
) -> BuyVsLeaseResult:
    """Net cost of financing a purchase against the cash outlay of a lease.

    The purchase keeps a residual value assuming 40% straight-line
    depreciation over five years.  Positive savings (lease costs more) favour
    buying.
    """

    check_positive(vehicle_price, "vehicle_price")
    check_non_negative(down_payment, "down_payment")
    check_non_negative(lease_down_payment, "lease_down_payment")
    check_non_negative(monthly_lease_payment, "monthly_lease_payment")
    check_positive(lease_term, "lease_term")
    if down_payment > vehicle_price:
        raise ValueError("down_payment must not exceed vehicle_price")

    buy_payment = annuity_payment(vehicle_price - down_payment, apr, loan_term)
    buy_total = down_payment + buy_payment * loan_term
    years_owned = loan_term / 12
    residual = vehicle_price - vehicle_price * (BUY_DEPRECIATION_RATE / BUY_DEPRECIATION_YEARS * years_owned)
    buy_net = buy_total - residual

    lease_total = lease_down_payment + monthly_lease_payment * lease_term
    savings = lease_total - buy_net

    return BuyVsLeaseResult(
        buy=BuyOption(
            monthly_payment=buy_payment,
            total_cost=buy_total,
            residual_value=residual,
            net_cost=buy_net,
            down_payment=down_payment,
        ),
        lease=LeaseOption(
            monthly_payment=monthly_lease_payment,
            total_cost=lease_total,
            down_payment=lease_down_payment,
        ),
        savings=abs(savings),
        recommendation="buy" if savings > 0 else "lease",
    )
