from __future__ import annotations

import logging
import math

from .models import CostItem, NetPay, TotalMonthlyCost
from .presets import (
    AFFORDABLE_PRICE_FACTORS,
    AFFORDABLE_PRICE_FLOOR,
    APR_FLOOR,
    APR_TIERS,
    CAN_AFFORD_PAYMENT_RATIO,
    CHART_COLORS,
    CREDIT_BASELINE,
    DEFAULT_ANNUAL_MILEAGE,
    DEFAULT_GAS_PRICE,
    DTI_CEILING,
    FEDERAL_TAX_BRACKETS,
    FICA_RATE,
    INSURANCE_BASE,
    INSURANCE_CREDIT_FLOOR,
    INSURANCE_CREDIT_TIERS,
    INSURANCE_PRICE_BOUNDS,
    INSURANCE_PRICE_PIVOT,
    MAINTENANCE_BASE,
    MAINTENANCE_PRICE_TIERS,
    MAINTENANCE_RELIABILITY_BOUNDS,
    MATCH_EFFICIENCY_MPG,
    MATCH_EFFICIENCY_POINTS,
    MATCH_FINANCED_SHARE,
    MATCH_PAYMENT_FLOOR,
    MATCH_PAYMENT_TIERS,
    MATCH_PRICE_POINTS,
    MATCH_RELIABILITY_POINTS,
    PAYMENT_RATIO_PENALTIES,
    PRICE_RATIO_FLOOR,
    PRICE_RATIO_SCORES,
    RECOMMENDATION_FLOOR,
    RECOMMENDATION_TIERS,
    STANDARD_DEDUCTION,
    TAXES_FEES_FLAT,
    TAXES_FEES_RATE,
    VOLATILITY_BOUNDS,
    VOLATILITY_INCOME_BASE,
)

logger = logging.getLogger(__name__)


def round_half_up(value, digits=0):
    """Round ``value`` with halves going up, as displayed prices expect.

    Python's ``round`` uses banker's rounding, so ``round(29.5)`` and
    ``round(30.5)`` both give 30.  Every figure shown to a shopper (dollar
    amounts, retention percentages, scores) rounds .5 upward instead.
    Returns an ``int`` when ``digits`` is 0.
    """

    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded


def clamp(value, low, high):
    return max(low, min(high, value))


def _tier(value, tiers, floor):
    """Return the payload of the first ``(threshold, payload)`` with value >= threshold."""

    for threshold, payload in tiers:
        if value >= threshold:
            return payload
    return floor


def check_credit_score(credit_score):
    if not 300 <= credit_score <= 850:
        raise ValueError(f"credit_score must be within [300, 850], got {credit_score}")


def check_positive(value, name):
    if value is None or value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def check_non_negative(value, name):
    if value is None or value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")


# ---------------------------------------------------------------------------
# Net pay
# ---------------------------------------------------------------------------


def federal_tax(taxable_income):
    """Progressive federal income tax on ``taxable_income``.

    Income is consumed bracket by bracket from the lowest rate upward; zero or
    negative taxable income owes nothing.
    """

    tax = 0.0
    remaining = taxable_income
    for low, high, rate in FEDERAL_TAX_BRACKETS:
        if remaining <= 0:
            break
        in_bracket = min(remaining, high - low)
        tax += in_bracket * rate
        remaining -= in_bracket
    return tax


def volatility_factor(annual_income):
    """Cushion proxy that grows as income shrinks.

    Zero income has no cushion at all and takes the upper bound.
    """

    low, high = VOLATILITY_BOUNDS
    if annual_income <= 0:
        return high
    return clamp(VOLATILITY_INCOME_BASE / annual_income, low, high)


def calculate_net_pay(annual_income, employment_subsidy=0.0) -> NetPay:
    """Estimate take-home pay after federal tax and payroll withholding.

    The standard deduction lowers taxable income (floored at zero) while the
    FICA-equivalent charge applies to gross income.  ``employment_subsidy``
    (a transportation allowance, for example) is added back untaxed.
    """

    check_non_negative(annual_income, "annual_income")
    check_non_negative(employment_subsidy, "employment_subsidy")
    taxable = max(0.0, annual_income - STANDARD_DEDUCTION)
    fed = federal_tax(taxable)
    fica = annual_income * FICA_RATE
    net = annual_income - fed - fica + employment_subsidy
    return NetPay(
        gross_income=annual_income,
        federal_tax=fed,
        fica_tax=fica,
        net_income=net,
        monthly_net=net / 12,
        volatility_factor=volatility_factor(annual_income),
    )


# ---------------------------------------------------------------------------
# Credit driven figures
# ---------------------------------------------------------------------------


def calculate_apr(credit_score):
    """Typical auto loan APR (percent) for a credit score; tier floors are inclusive."""

    check_credit_score(credit_score)
    return _tier(credit_score, APR_TIERS, APR_FLOOR)


def calculate_affordable_car_price(annual_income, credit_score):
    """Largest sensible vehicle price: annual income scaled by credit tier.

    Excellent credit (750+) supports 70% of income, good (700-749) 50%,
    fair (650-699) 35%, poor (600-649) 25%, and anything lower 15%.
    """

    check_non_negative(annual_income, "annual_income")
    check_credit_score(credit_score)
    return annual_income * _tier(credit_score, AFFORDABLE_PRICE_FACTORS, AFFORDABLE_PRICE_FLOOR)


# ---------------------------------------------------------------------------
# Loan math
# ---------------------------------------------------------------------------


def annuity_payment(principal, apr, term_months):
    """Unrounded level monthly payment for a fully amortizing loan."""

    check_non_negative(principal, "principal")
    check_non_negative(apr, "apr")
    check_positive(term_months, "term_months")
    r = apr / 100 / 12
    if r == 0:
        return principal / term_months
    growth = (1 + r) ** term_months
    return principal * (r * growth) / (growth - 1)


def monthly_payment(principal, apr, term_months):
    """Calculate the fixed monthly payment for a vehicle loan.

    ``principal`` is the financed amount (price minus down payment),
    ``apr`` the annual rate in percent (e.g. ``4.5``) and ``term_months``
    the number of payments.  Interest-bearing payments are rounded to cents;
    a zero-rate loan is simply the principal spread evenly.
    """

    payment = annuity_payment(principal, apr, term_months)
    if apr == 0:
        return payment
    return round_half_up(payment, 2)


# ---------------------------------------------------------------------------
# Recurring cost estimators
# ---------------------------------------------------------------------------


def estimate_insurance(vehicle_price, credit_score):
    """Monthly premium from a $145 base, scaled by vehicle value and credit."""

    check_positive(vehicle_price, "vehicle_price")
    check_credit_score(credit_score)
    price_mult = 1 + ((vehicle_price - INSURANCE_PRICE_PIVOT) / 100000) * 0.3
    price_mult = clamp(price_mult, *INSURANCE_PRICE_BOUNDS)
    credit_mult = _tier(credit_score, INSURANCE_CREDIT_TIERS, INSURANCE_CREDIT_FLOOR)
    return round_half_up(INSURANCE_BASE * price_mult * credit_mult)


def estimate_fuel_cost(mpg_combined, annual_mileage=DEFAULT_ANNUAL_MILEAGE, gas_price=DEFAULT_GAS_PRICE):
    """Monthly fuel spend in dollars and cents."""

    check_positive(mpg_combined, "mpg_combined")
    check_non_negative(annual_mileage, "annual_mileage")
    check_non_negative(gas_price, "gas_price")
    gallons = annual_mileage / mpg_combined
    return round_half_up(gallons * gas_price / 12, 2)


def estimate_maintenance_cost(vehicle_price, reliability):
    """Monthly upkeep: pricier cars cost more, reliable ones less."""

    check_positive(vehicle_price, "vehicle_price")
    if not 1.0 <= reliability <= 5.0:
        raise ValueError(f"reliability must be within [1, 5], got {reliability}")
    monthly = MAINTENANCE_BASE
    for threshold, base in MAINTENANCE_PRICE_TIERS:
        if vehicle_price > threshold:
            monthly = base
            break
    factor = clamp(1 - (reliability - 4.0) * 0.15, *MAINTENANCE_RELIABILITY_BOUNDS)
    return round_half_up(monthly * factor)


def estimate_taxes_and_fees(vehicle_price):
    """Registration and recurring fees, roughly $65/month on an average car."""

    check_positive(vehicle_price, "vehicle_price")
    return round_half_up(vehicle_price * TAXES_FEES_RATE + TAXES_FEES_FLAT)


def calculate_total_monthly_cost(
    vehicle_price,
    down_payment,
    apr,
    term_months,
    credit_score,
    mpg_combined,
    reliability,
    annual_mileage=DEFAULT_ANNUAL_MILEAGE,
) -> TotalMonthlyCost:
    """All-in monthly cost of owning the vehicle."""

    check_non_negative(down_payment, "down_payment")
    if down_payment > vehicle_price:
        raise ValueError("down_payment must not exceed vehicle_price")
    payment = monthly_payment(vehicle_price - down_payment, apr, term_months)
    insurance = estimate_insurance(vehicle_price, credit_score)
    fuel = estimate_fuel_cost(mpg_combined, annual_mileage)
    maintenance = estimate_maintenance_cost(vehicle_price, reliability)
    taxes_and_fees = estimate_taxes_and_fees(vehicle_price)
    total = payment + insurance + fuel + maintenance + taxes_and_fees
    return TotalMonthlyCost(
        payment=payment,
        insurance=insurance,
        fuel=fuel,
        maintenance=maintenance,
        taxes_and_fees=taxes_and_fees,
        total=round_half_up(total),
    )


def cost_breakdown(cost: TotalMonthlyCost):
    """Chart-ready list of the five monthly cost components."""

    values = [
        ("Monthly Payment", cost.payment),
        ("Insurance", cost.insurance),
        ("Fuel", cost.fuel),
        ("Maintenance", cost.maintenance),
        ("Taxes & Fees", cost.taxes_and_fees),
    ]
    return [CostItem(name=name, value=value, color=CHART_COLORS[name]) for name, value in values]


# ---------------------------------------------------------------------------
# Affordability scores
# ---------------------------------------------------------------------------


def price_ratio_score(vehicle_price, max_affordable_price, total_monthly_cost, monthly_net_income):
    """Quick affordability score used by the single-vehicle calculator.

    The vehicle price is compared with the income/credit based maximum and
    mapped onto fixed bands (95/80/60/40/20).  A monthly cost above 25% of
    net income then costs 20 points, above 20% costs 10, never below zero.
    """

    check_positive(vehicle_price, "vehicle_price")
    check_positive(max_affordable_price, "max_affordable_price")
    check_positive(monthly_net_income, "monthly_net_income")
    ratio = vehicle_price / max_affordable_price
    score = PRICE_RATIO_FLOOR
    for ceiling, band_score in PRICE_RATIO_SCORES:
        if ratio <= ceiling:
            score = band_score
            break
    payment_ratio = total_monthly_cost / monthly_net_income
    for ceiling, penalty in PAYMENT_RATIO_PENALTIES:
        if payment_ratio > ceiling:
            score = max(0, score - penalty)
            break
    logger.debug("price ratio %.3f, payment ratio %.3f -> score %s", ratio, payment_ratio, score)
    return score


def can_afford(vehicle_price, max_affordable_price, total_monthly_cost, monthly_net_income):
    return (
        vehicle_price <= max_affordable_price
        and total_monthly_cost < monthly_net_income * CAN_AFFORD_PAYMENT_RATIO
    )


def affordability_recommendation(score, max_affordable_price):
    max_price = f"${round_half_up(max_affordable_price):,}"
    for threshold, template in RECOMMENDATION_TIERS:
        if score >= threshold:
            return template.format(max_price=max_price)
    return RECOMMENDATION_FLOOR.format(max_price=max_price)


def calculate_affordability_score(monthly_income, total_monthly_cost, credit_score, volatility_factor):
    """Debt-to-income based score (0-100) used when ranking vehicles.

    A DTI of 0 starts at 100 and 30% or more starts at 0; credit above 650
    adds a point per 10 points of score (below 650 subtracts), and the
    volatility factor is subtracted as percentage points.
    """

    check_positive(monthly_income, "monthly_income")
    ratio = total_monthly_cost / monthly_income
    score = 100 * (1 - min(1, ratio / DTI_CEILING))
    score += (credit_score - CREDIT_BASELINE) / 10
    score -= volatility_factor * 100
    return clamp(round_half_up(score), 0, 100)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def price_fit_points(vehicle_price, budget_min, budget_max):
    """Full points inside the budget, scaled toward the nearer bound outside it."""

    if budget_min <= vehicle_price <= budget_max:
        return MATCH_PRICE_POINTS
    if vehicle_price < budget_min:
        return MATCH_PRICE_POINTS * (vehicle_price / budget_min)
    return MATCH_PRICE_POINTS * (budget_max / vehicle_price)


def calculate_match_percentage(
    vehicle_price,
    reliability,
    mpg_combined,
    monthly_income,
    budget_min,
    budget_max,
    lease_term,
    credit_score,
):
    """Composite 0-100 fit between a vehicle and a shopper.

    Price fit is worth 40 points, reliability above 4.0 up to 30, the
    estimated payment (90% of price financed) against monthly income up to
    20, and fuel economy up to 10.
    """

    check_positive(vehicle_price, "vehicle_price")
    check_positive(budget_min, "budget_min")
    check_positive(budget_max, "budget_max")
    if budget_min > budget_max:
        raise ValueError("budget_min must not exceed budget_max")

    score = price_fit_points(vehicle_price, budget_min, budget_max)
    score += clamp((reliability - 4.0) / 1.0 * MATCH_RELIABILITY_POINTS, 0, MATCH_RELIABILITY_POINTS)

    payment = monthly_payment(vehicle_price * MATCH_FINANCED_SHARE, calculate_apr(credit_score), lease_term)
    points = MATCH_PAYMENT_FLOOR
    for share, tier_points in MATCH_PAYMENT_TIERS:
        if payment < monthly_income * share:
            points = tier_points
            break
    score += points

    score += min(MATCH_EFFICIENCY_POINTS, mpg_combined / MATCH_EFFICIENCY_MPG * MATCH_EFFICIENCY_POINTS)
    return round_half_up(clamp(score, 0, 100))
