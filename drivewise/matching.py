"""Request-level flows built from the calculators.

Everything here is recomputed per call from explicit inputs; the catalog is
passed in (defaulting to the bundled lineup) and never modified.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .calculators import (
    affordability_recommendation,
    calculate_affordability_score,
    calculate_affordable_car_price,
    calculate_apr,
    calculate_match_percentage,
    calculate_net_pay,
    calculate_total_monthly_cost,
    can_afford,
    cost_breakdown,
    price_ratio_score,
    round_half_up,
)
from .catalog import Catalog, load_catalog
from .models import AffordabilityResult, VehicleData, VehicleMatch
from .presets import (
    DEFAULT_MATCH_LIMIT,
    LOOKUP_MATCH_LIMIT,
    MATCH_DOWN_PAYMENT_SHARE,
    SALARY_FIT_FLOOR,
    SALARY_FIT_TIERS,
    TERM_MATCH,
    TERM_MATCH_DEFAULT,
)

logger = logging.getLogger(__name__)


def calculate_affordability(
    annual_income,
    credit_score,
    employment_subsidy,
    vehicle_price,
    down_payment,
    lease_term,
    mpg_combined,
    reliability,
) -> AffordabilityResult:
    """Score one vehicle against a shopper's income and credit.

    Uses the price-ratio score: the vehicle price against the credit-scaled
    affordable maximum, penalised when the all-in monthly cost eats too much
    of net pay.
    """

    net_pay = calculate_net_pay(annual_income, employment_subsidy)
    apr = calculate_apr(credit_score)
    cost = calculate_total_monthly_cost(
        vehicle_price,
        down_payment,
        apr,
        lease_term,
        credit_score,
        mpg_combined,
        reliability,
    )
    max_price = calculate_affordable_car_price(annual_income, credit_score)
    score = price_ratio_score(vehicle_price, max_price, cost.total, net_pay.monthly_net)
    return AffordabilityResult(
        score=score,
        monthly_net_income=net_pay.monthly_net,
        total_monthly_cost=cost.total,
        breakdown=cost_breakdown(cost),
        budget_utilization=cost.total / net_pay.monthly_net * 100,
        apr=apr,
        can_afford=can_afford(vehicle_price, max_price, cost.total, net_pay.monthly_net),
        recommendation=affordability_recommendation(score, max_price),
    )


def salary_fit(payment, monthly_net):
    for share, fit in SALARY_FIT_TIERS:
        if payment < monthly_net * share:
            return fit
    return SALARY_FIT_FLOOR


def match_vehicle(vehicle: VehicleData, net_pay, apr, credit_score, budget_min, budget_max, lease_term) -> VehicleMatch:
    match = calculate_match_percentage(
        vehicle.msrp,
        vehicle.reliability,
        vehicle.mpg_combined,
        net_pay.monthly_net,
        budget_min,
        budget_max,
        lease_term,
        credit_score,
    )
    cost = calculate_total_monthly_cost(
        vehicle.msrp,
        vehicle.msrp * MATCH_DOWN_PAYMENT_SHARE,
        apr,
        lease_term,
        credit_score,
        vehicle.mpg_combined,
        vehicle.reliability,
    )
    return VehicleMatch(
        vehicle=vehicle,
        match_percentage=match,
        monthly_payment=cost.payment,
        total_monthly_cost=cost,
        affordability_score=calculate_affordability_score(
            net_pay.monthly_net, cost.total, credit_score, net_pay.volatility_factor
        ),
        salary_fit=salary_fit(cost.payment, net_pay.monthly_net),
        reliability_score=round_half_up(vehicle.reliability * 20),
        term_match=TERM_MATCH.get(lease_term, TERM_MATCH_DEFAULT),
    )


def get_matched_vehicles(
    annual_income,
    credit_score,
    employment_subsidy,
    budget_min,
    budget_max,
    lease_term,
    limit=DEFAULT_MATCH_LIMIT,
    catalog: Optional[Catalog] = None,
) -> List[VehicleMatch]:
    """Rank the catalog for a shopper, best match first.

    Ties keep catalog order.  Returns at most ``limit`` matches.
    """

    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if budget_min > budget_max:
        raise ValueError("budget_min must not exceed budget_max")
    vehicles = load_catalog() if catalog is None else catalog
    net_pay = calculate_net_pay(annual_income, employment_subsidy)
    apr = calculate_apr(credit_score)
    matches = [
        match_vehicle(v, net_pay, apr, credit_score, budget_min, budget_max, lease_term)
        for v in vehicles
    ]
    matches.sort(key=lambda m: m.match_percentage, reverse=True)
    logger.debug("ranked %d vehicles at %.1f%% APR", len(matches), apr)
    return matches[:limit]


def find_vehicle_match(
    vehicle_id,
    annual_income,
    credit_score,
    employment_subsidy,
    budget_min,
    budget_max,
    lease_term,
    catalog: Optional[Catalog] = None,
) -> Optional[VehicleMatch]:
    """The match for ``vehicle_id`` if it ranks among the top 20, else ``None``."""

    matches = get_matched_vehicles(
        annual_income,
        credit_score,
        employment_subsidy,
        budget_min,
        budget_max,
        lease_term,
        LOOKUP_MATCH_LIMIT,
        catalog,
    )
    for m in matches:
        if m.vehicle.id == vehicle_id:
            return m
    return None


def select_comparison(
    vehicle_ids: Iterable[str],
    annual_income,
    credit_score,
    employment_subsidy,
    budget_min,
    budget_max,
    lease_term,
    catalog: Optional[Catalog] = None,
) -> List[VehicleMatch]:
    """Matches for 2-5 vehicles to compare side by side, in ranking order."""

    wanted = list(vehicle_ids)
    if not 2 <= len(wanted) <= 5:
        raise ValueError("compare between 2 and 5 vehicles")
    matches = get_matched_vehicles(
        annual_income,
        credit_score,
        employment_subsidy,
        budget_min,
        budget_max,
        lease_term,
        LOOKUP_MATCH_LIMIT,
        catalog,
    )
    selected = [m for m in matches if m.vehicle.id in wanted]
    if len(selected) < 2:
        raise ValueError("At least 2 vehicles required for comparison")
    return selected
