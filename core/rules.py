from __future__ import annotations
from typing import Literal, List, Dict, Any
from pydantic import BaseModel, Field

from drivewise.presets import APR_TIERS

SUBPRIME_APR = APR_TIERS[-1][1]
MAX_COMFORT_TERM = 60
MIN_DOWN_SHARE = 0.10
COST_WARN_SHARE = 0.25
COST_INFO_SHARE = 0.20


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def evaluate_rules(state: dict) -> List[RuleResult]:
    """Advisories over an affordability snapshot.

    ``state`` is a plain dict so the UI can pass whatever it has computed so
    far; missing keys simply skip the checks that need them.
    """
    res: List[RuleResult] = []

    annual_income = float(state.get("annual_income", 0.0))
    monthly_net = float(state.get("monthly_net_income", 0.0))
    budget_min = float(state.get("budget_min", 0.0))
    budget_max = float(state.get("budget_max", 0.0))
    price = float(state.get("vehicle_price", 0.0))
    max_price = float(state.get("max_affordable_price", 0.0))
    total_cost = float(state.get("total_monthly_cost", 0.0))
    apr = float(state.get("apr", 0.0))
    term = int(state.get("term_months", 0))
    down = float(state.get("down_payment", 0.0))

    if annual_income <= 0:
        res.append(
            RuleResult(
                code="NO_INCOME",
                severity="critical",
                message="No income entered; affordability is not meaningful.",
            )
        )

    if budget_min > 0 and budget_max > 0 and budget_min > budget_max:
        res.append(
            RuleResult(
                code="BUDGET_RANGE_INVERTED",
                severity="critical",
                message="Minimum budget exceeds maximum budget.",
                context={"budget_min": budget_min, "budget_max": budget_max},
            )
        )

    if max_price > 0 and price > max_price:
        res.append(
            RuleResult(
                code="PRICE_OVER_MAX",
                severity="warn",
                message="Vehicle price is above the recommended maximum for this income and credit.",
                context={"price": price, "limit": max_price},
            )
        )

    if monthly_net > 0 and total_cost > 0:
        share = total_cost / monthly_net
        if share > COST_WARN_SHARE:
            res.append(
                RuleResult(
                    code="COST_SHARE_HIGH",
                    severity="warn",
                    message="Total monthly vehicle cost exceeds 25% of net income.",
                    context={"actual": round(share * 100, 1), "limit": COST_WARN_SHARE * 100},
                )
            )
        elif share > COST_INFO_SHARE:
            res.append(
                RuleResult(
                    code="COST_SHARE_ELEVATED",
                    severity="info",
                    message="Total monthly vehicle cost is above 20% of net income.",
                    context={"actual": round(share * 100, 1), "limit": COST_INFO_SHARE * 100},
                )
            )

    if apr >= SUBPRIME_APR:
        res.append(
            RuleResult(
                code="SUBPRIME_APR",
                severity="warn",
                message="Subprime financing rate; improving credit first may save substantially.",
                context={"apr": apr},
            )
        )

    if term > MAX_COMFORT_TERM:
        res.append(
            RuleResult(
                code="LONG_TERM",
                severity="info",
                message="Terms beyond 60 months raise total interest and negative-equity risk.",
                context={"term_months": term},
            )
        )

    if price > 0 and down < price * MIN_DOWN_SHARE:
        res.append(
            RuleResult(
                code="LOW_DOWN_PAYMENT",
                severity="info",
                message="Down payment is under 10% of the vehicle price.",
                context={"down_payment": down, "suggested": price * MIN_DOWN_SHARE},
            )
        )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
