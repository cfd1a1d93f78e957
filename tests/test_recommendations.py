import json

import pytest
import requests

from drivewise import recommendations
from drivewise.config import Settings
from drivewise.matching import find_vehicle_match, select_comparison
from drivewise.recommendations import (
    NOT_ENOUGH_TO_COMPARE,
    LLMRecommender,
    RecommendationProfile,
    RecommendationRequest,
    RuleBasedRecommender,
    get_recommender,
    parse_recommendation,
)

PROFILE = dict(
    annual_income=75000,
    credit_score=720,
    employment_subsidy=0,
    budget_min=25000,
    budget_max=35000,
    lease_term=48,
)
REC_PROFILE = RecommendationProfile(
    annual_income=75000, credit_score=720, lease_term=48, budget_min=25000, budget_max=35000
)

LLM_REPLY = {
    "summary": "A solid pick.",
    "keyPoints": ["one", "two", "three"],
    "financialInsight": "Fits.",
    "reliabilityInsight": "Reliable.",
    "valueInsight": "Holds value.",
}


class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return {"choices": [{"message": {"content": self.content}}]}


def _request(vehicle_id="camry-le", **update):
    match = find_vehicle_match(vehicle_id, **PROFILE)
    if update:
        match = match.model_copy(update=update)
    return RecommendationRequest(vehicle_match=match, user_profile=REC_PROFILE)


def _llm():
    return LLMRecommender(api_key="k", base_url="https://llm.example/v1/", model="m", timeout=1)


def test_rule_based_recommendation_text():
    rec = RuleBasedRecommender().generate_recommendation(_request())
    assert rec.summary.startswith(
        "The 2024 Camry LE is an excellent match for your financial profile, with a 94% compatibility score."
    )
    assert "This sedan fits comfortably" in rec.summary
    assert len(rec.key_points) == 3
    assert "% of your income" in rec.key_points[0]
    assert "48-month lease term" in rec.key_points[1]
    assert "projected 63% retention after 3 years" in rec.key_points[2]
    assert rec.value_insight.startswith("This model maintains strong resale value")
    assert rec.value_insight.endswith("over the 4-year term.")


def test_financial_insight_tiers():
    gen = RuleBasedRecommender()
    high = gen.generate_recommendation(_request(affordability_score=85)).financial_insight
    mid = gen.generate_recommendation(_request(affordability_score=65)).financial_insight
    low = gen.generate_recommendation(_request(affordability_score=10)).financial_insight
    assert high.startswith("This vehicle is well within your financial comfort zone")
    assert mid.startswith("This vehicle represents a significant but manageable")
    assert low.startswith("While this vehicle is at the upper end of your budget")


def test_hybrid_value_insight():
    rec = RuleBasedRecommender().generate_recommendation(_request("camry-hybrid-se"))
    assert rec.value_insight.startswith("The hybrid powertrain provides excellent fuel economy")


def test_rule_based_comparison():
    gen = RuleBasedRecommender()
    matches = select_comparison(["camry-le", "corolla-le"], **PROFILE)
    text = gen.generate_comparison(matches, REC_PROFILE)
    assert text.startswith("The Camry LE offers the best overall value with a 94% match score")
    assert gen.generate_comparison(matches[:1], REC_PROFILE) == NOT_ENOUGH_TO_COMPARE
    assert gen.generate_comparison([], REC_PROFILE) == NOT_ENOUGH_TO_COMPARE


def test_parse_recommendation_extracts_embedded_json():
    text = "Sure! Here you go:\n" + json.dumps(LLM_REPLY) + "\nHope that helps."
    rec = parse_recommendation(text)
    assert rec.summary == "A solid pick."
    assert rec.key_points == ["one", "two", "three"]
    with pytest.raises(ValueError):
        parse_recommendation("no json here")


def test_llm_recommendation_success(monkeypatch):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs["headers"], kwargs["json"], kwargs["timeout"]))
        return FakeResponse("```json\n" + json.dumps(LLM_REPLY) + "\n```")

    monkeypatch.setattr(recommendations.requests, "post", fake_post)
    rec = _llm().generate_recommendation(_request())
    assert rec.value_insight == "Holds value."
    url, headers, payload, timeout = calls[0]
    assert url == "https://llm.example/v1/chat/completions"
    assert headers["Authorization"] == "Bearer k"
    assert payload["model"] == "m"
    assert "2024 Camry LE" in payload["messages"][0]["content"]
    assert timeout == 1


@pytest.mark.parametrize(
    "behaviour",
    ["network", "http", "garbage", "wrong_shape"],
)
def test_llm_recommendation_falls_back(monkeypatch, behaviour):
    def fake_post(*args, **kwargs):
        if behaviour == "network":
            raise requests.ConnectionError("down")
        if behaviour == "http":
            return FakeResponse("", status=500)
        if behaviour == "garbage":
            return FakeResponse("I cannot help with that.")
        return FakeResponse('{"summary": "only this"}')

    monkeypatch.setattr(recommendations.requests, "post", fake_post)
    request = _request()
    rec = _llm().generate_recommendation(request)
    assert rec == RuleBasedRecommender().generate_recommendation(request)


def test_llm_comparison(monkeypatch):
    matches = select_comparison(["camry-le", "corolla-le"], **PROFILE)
    monkeypatch.setattr(
        recommendations.requests, "post", lambda *a, **k: FakeResponse("Pick the Corolla.")
    )
    assert _llm().generate_comparison(matches, REC_PROFILE) == "Pick the Corolla."

    monkeypatch.setattr(recommendations.requests, "post", lambda *a, **k: FakeResponse("  "))
    expected = RuleBasedRecommender().generate_comparison(matches, REC_PROFILE)
    assert _llm().generate_comparison(matches, REC_PROFILE) == expected

    def boom(*a, **k):
        raise requests.Timeout("slow")

    monkeypatch.setattr(recommendations.requests, "post", boom)
    assert _llm().generate_comparison(matches, REC_PROFILE) == expected
    assert _llm().generate_comparison(matches[:1], REC_PROFILE) == NOT_ENOUGH_TO_COMPARE


def test_get_recommender_picks_implementation():
    assert isinstance(get_recommender(Settings(llm_api_key=None)), RuleBasedRecommender)
    llm = get_recommender(Settings(llm_api_key="secret", llm_model="x", llm_timeout=3))
    assert isinstance(llm, LLMRecommender)
    assert llm.model == "x"
    assert llm.timeout == 3
