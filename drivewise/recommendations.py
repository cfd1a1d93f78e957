"""Recommendation text for matched vehicles.

The engine only needs something that satisfies :class:`RecommendationGenerator`.
:class:`RuleBasedRecommender` builds the text from the match numbers alone and
is always available.  :class:`LLMRecommender` asks an OpenAI-compatible
chat-completions endpoint and drops back to the rule-based text whenever the
call or its reply is unusable, so callers never see a network error.
"""
from __future__ import annotations

import json
import logging
import re
from typing import List, Optional, Protocol, Sequence

import requests
from pydantic import BaseModel, Field, ValidationError

from .config import Settings, get_settings
from .models import VehicleMatch
from .presets import BASE_DEPRECIATION_CURVE

logger = logging.getLogger(__name__)

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
NOT_ENOUGH_TO_COMPARE = "Add more vehicles to compare."


class RecommendationProfile(BaseModel):
    annual_income: float = Field(gt=0)
    credit_score: int = Field(ge=300, le=850)
    lease_term: int = Field(gt=0)
    budget_min: float = Field(gt=0)
    budget_max: float = Field(gt=0)


class RecommendationRequest(BaseModel):
    vehicle_match: VehicleMatch
    user_profile: RecommendationProfile


class AIRecommendation(BaseModel):
    summary: str
    key_points: List[str] = Field(min_length=3, max_length=3)
    financial_insight: str
    reliability_insight: str
    value_insight: str


class RecommendationGenerator(Protocol):
    def generate_recommendation(self, request: RecommendationRequest) -> AIRecommendation: ...

    def generate_comparison(
        self, matches: Sequence[VehicleMatch], profile: RecommendationProfile
    ) -> str: ...


def _num(value) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def _money(value) -> str:
    return f"${_num(value)}"


class RuleBasedRecommender:
    """Deterministic wording built from the match figures."""

    def generate_recommendation(self, request: RecommendationRequest) -> AIRecommendation:
        match = request.vehicle_match
        profile = request.user_profile
        vehicle = match.vehicle
        payment_ratio = match.monthly_payment / (profile.annual_income / 12) * 100
        retention_3y = round(BASE_DEPRECIATION_CURVE[3] * 100)
        total = _money(match.total_monthly_cost.total)

        summary = (
            f"The {vehicle.display_name} is an excellent match for your financial profile, "
            f"with a {match.match_percentage}% compatibility score. This {vehicle.category.lower()} "
            f"fits comfortably within your budget while providing {vehicle.fuel_type.lower()} "
            f"efficiency and Toyota's renowned reliability."
        )
        key_points = [
            f"Monthly payment of {_money(match.monthly_payment)} represents {payment_ratio:.1f}% "
            f"of your income, leaving comfortable room for other expenses and savings",
            f"Exceptional reliability rating of {_num(vehicle.reliability)}/5.0 minimizes unexpected "
            f"maintenance costs over your {profile.lease_term}-month lease term",
            f"Strong resale value with projected {retention_3y}% retention after 3 years, "
            f"protecting your investment for the long term",
        ]

        if match.affordability_score >= 80:
            financial = (
                f"This vehicle is well within your financial comfort zone, with total monthly costs "
                f"of {total} leaving ample budget for savings and other priorities."
            )
        elif match.affordability_score >= 60:
            financial = (
                f"This vehicle represents a significant but manageable monthly commitment at "
                f"{total}, fitting appropriately within your income range."
            )
        else:
            financial = (
                f"While this vehicle is at the upper end of your budget, the monthly cost of "
                f"{total} is still within acceptable financing parameters."
            )

        reliability = (
            f"With an industry-leading reliability score of {_num(vehicle.reliability)}/5.0, this "
            f"Toyota model demonstrates exceptional dependability that will minimize repair costs "
            f"and maximize peace of mind throughout your ownership."
        )
        lead = (
            "The hybrid powertrain provides excellent fuel economy"
            if vehicle.fuel_type == "Hybrid"
            else "This model maintains"
        )
        value = (
            f"{lead} strong resale value typical of Toyota vehicles, with minimal depreciation "
            f"protecting your investment over the {_num(profile.lease_term / 12)}-year term."
        )

        return AIRecommendation(
            summary=summary,
            key_points=key_points,
            financial_insight=financial,
            reliability_insight=reliability,
            value_insight=value,
        )

    def generate_comparison(
        self, matches: Sequence[VehicleMatch], profile: RecommendationProfile
    ) -> str:
        if len(matches) < 2:
            return NOT_ENOUGH_TO_COMPARE
        top = matches[0]
        return (
            f"The {top.vehicle.model} {top.vehicle.trim} offers the best overall value with a "
            f"{top.match_percentage}% match score and monthly payment of "
            f"{_money(top.monthly_payment)}, providing an optimal balance of affordability, "
            f"reliability, and features for your budget."
        )


def recommendation_prompt(request: RecommendationRequest) -> str:
    match = request.vehicle_match
    profile = request.user_profile
    v = match.vehicle
    return f"""You are a financial advisor specializing in automotive purchasing decisions. Analyze this vehicle match for a customer and provide personalized insights.

Vehicle: {v.display_name}
Price: ${v.msrp:,}
Category: {v.category}
Fuel Type: {v.fuel_type}
MPG: {v.mpg} (Combined: {_num(v.mpg_combined)})
Reliability: {_num(v.reliability)}/5.0
Seating: {v.seating}

Customer Profile:
- Annual Income: ${profile.annual_income:,.0f}
- Credit Score: {profile.credit_score}
- Desired Lease Term: {profile.lease_term} months
- Budget Range: ${profile.budget_min:,.0f} - ${profile.budget_max:,.0f}

Financial Analysis:
- Match Percentage: {match.match_percentage}%
- Monthly Payment: {_money(match.monthly_payment)}
- Salary Fit Score: {match.salary_fit}%
- Affordability Score: {match.affordability_score}/100
- Total Monthly Cost: {_money(match.total_monthly_cost.total)}

Please provide:
1. A brief summary (2-3 sentences) explaining why this vehicle is a good match
2. Three key points about this recommendation (focus on financial fit, reliability, and value)
3. A financial insight (1 sentence about affordability and budget fit)
4. A reliability insight (1 sentence about the vehicle's dependability and Toyota's reputation)
5. A value insight (1 sentence about long-term cost and resale value)

Format your response as JSON with this structure:
{{
  "summary": "...",
  "keyPoints": ["point1", "point2", "point3"],
  "financialInsight": "...",
  "reliabilityInsight": "...",
  "valueInsight": "..."
}}"""


def comparison_prompt(matches: Sequence[VehicleMatch], profile: RecommendationProfile) -> str:
    lines = "\n".join(
        f"{i}. {m.vehicle.model} {m.vehicle.trim} - ${m.vehicle.msrp:,}, "
        f"{m.match_percentage}% match, {_money(m.monthly_payment)}/mo"
        for i, m in enumerate(matches, start=1)
    )
    return (
        f"Compare these {len(matches)} Toyota vehicles for a customer and provide a brief "
        f"recommendation (2-3 sentences) on which one offers the best value for their specific "
        f"situation.\n\n"
        f"Customer: ${profile.annual_income:,.0f} annual income, {profile.credit_score} credit score\n\n"
        f"Vehicles:\n{lines}\n\n"
        f"Provide a concise comparison highlighting the best choice and why."
    )


def parse_recommendation(text: str) -> AIRecommendation:
    """Pull the first JSON object out of a model reply.

    Raises ``ValueError`` (including pydantic's ``ValidationError``) when no
    usable object is found.
    """

    found = JSON_OBJECT.search(text or "")
    if not found:
        raise ValueError("no JSON object in reply")
    data = json.loads(found.group(0))
    if not isinstance(data, dict):
        raise ValueError("reply JSON is not an object")
    return AIRecommendation(
        summary=data.get("summary"),
        key_points=data.get("keyPoints"),
        financial_insight=data.get("financialInsight"),
        reliability_insight=data.get("reliabilityInsight"),
        value_insight=data.get("valueInsight"),
    )


class LLMRecommender:
    """Recommendation text from an OpenAI-compatible chat-completions API."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float = 15.0,
        fallback: Optional[RecommendationGenerator] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.fallback = fallback or RuleBasedRecommender()

    def _complete(self, prompt: str) -> str:
        r = requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0.2,
            },
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()["choices"][0]["message"]["content"] or ""

    def generate_recommendation(self, request: RecommendationRequest) -> AIRecommendation:
        try:
            return parse_recommendation(self._complete(recommendation_prompt(request)))
        except (requests.RequestException, ValidationError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("recommendation request failed, using rule-based text: %s", e)
            return self.fallback.generate_recommendation(request)

    def generate_comparison(
        self, matches: Sequence[VehicleMatch], profile: RecommendationProfile
    ) -> str:
        if len(matches) < 2:
            return NOT_ENOUGH_TO_COMPARE
        try:
            text = self._complete(comparison_prompt(matches, profile)).strip()
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("comparison request failed, using rule-based text: %s", e)
            return self.fallback.generate_comparison(matches, profile)
        if not text:
            logger.warning("empty comparison reply, using rule-based text")
            return self.fallback.generate_comparison(matches, profile)
        return text


def get_recommender(settings: Optional[Settings] = None) -> RecommendationGenerator:
    settings = settings or get_settings()
    if not settings.llm_api_key:
        logger.warning("no LLM API key configured, using rule-based recommendations")
        return RuleBasedRecommender()
    return LLMRecommender(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )
