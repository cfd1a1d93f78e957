from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FinancialProfile(BaseModel):
    annual_income: float = Field(gt=0)
    monthly_income: float = Field(default=0.0, ge=0)
    monthly_expenses: float = Field(default=0.0, ge=0)
    total_savings: float = Field(default=0.0, ge=0)
    credit_score: int = Field(ge=300, le=850)
    employment_subsidy: float = Field(default=0.0, ge=0)
    budget_min: float = Field(gt=0)
    budget_max: float = Field(gt=0)
    lease_term: int = Field(gt=0)
    cashflow_stability: Optional[float] = None
    avg_monthly_cashflow: Optional[float] = None
    cashflow_volatility: Optional[float] = None

    @model_validator(mode="after")
    def _budget_order(self):
        if self.budget_min > self.budget_max:
            raise ValueError("budget_min must not exceed budget_max")
        return self


class UserProfile(BaseModel):
    """Lifestyle answers and driving habits; mileage seeds the cost views, never the scores."""

    age: Optional[int] = None
    is_student: bool = False
    is_first_car: bool = False
    has_home_charging: bool = False
    has_work_charging: bool = False
    climate_condition: Optional[str] = None
    needs_awd: bool = False
    daily_commute_one_way: int = Field(default=20, ge=0, le=200)
    weekend_driving_per_week: int = Field(default=100, ge=0, le=500)
    estimated_annual_mileage: int = Field(default=12000, ge=0, le=50000)


class VehicleData(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    model: str
    trim: str
    year: int
    msrp: int = Field(gt=0)
    image: str = ""
    category: str
    fuel_type: str
    mpg: str
    mpg_combined: float = Field(gt=0)
    seating: int
    reliability: float = Field(ge=1.0, le=5.0)

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.model} {self.trim}"


class DepreciationFactors(BaseModel):
    model_config = ConfigDict(frozen=True)

    low_mileage: bool = False
    good_condition: bool = False
    low_interest: bool = False
    low_gas: bool = False


class NetPay(BaseModel):
    gross_income: float
    federal_tax: float
    fica_tax: float
    net_income: float
    monthly_net: float
    volatility_factor: float


class TotalMonthlyCost(BaseModel):
    payment: float
    insurance: float
    fuel: float
    maintenance: float
    taxes_and_fees: float
    total: float


class CostItem(BaseModel):
    name: str
    value: float
    color: str


class AffordabilityResult(BaseModel):
    score: int = Field(ge=0, le=100)
    monthly_net_income: float
    total_monthly_cost: float
    breakdown: List[CostItem]
    budget_utilization: float
    apr: float
    can_afford: bool
    recommendation: str


class VehicleMatch(BaseModel):
    vehicle: VehicleData
    match_percentage: int = Field(ge=0, le=100)
    monthly_payment: float
    total_monthly_cost: TotalMonthlyCost
    affordability_score: int = Field(ge=0, le=100)
    salary_fit: int
    reliability_score: int
    term_match: int


class ValueProjection(BaseModel):
    year: int
    value: int
    lower: int
    upper: int


class ResaleValue(BaseModel):
    estimated_value: int
    lower_bound: int
    upper_bound: int
    confidence: str


class TCOBreakdown(BaseModel):
    payments: int
    insurance: int
    fuel: int
    maintenance: int
    taxes_and_fees: int
    depreciation: int


class TCOResult(BaseModel):
    total_paid: int
    depreciation: int
    net_cost: int
    monthly_equivalent: int
    breakdown: TCOBreakdown


class DepreciationPathPoint(BaseModel):
    year: int
    value: int
    lower_bound: int
    upper_bound: int


class BuyOption(BaseModel):
    monthly_payment: float
    total_cost: float
    residual_value: float
    net_cost: float
    down_payment: float


class LeaseOption(BaseModel):
    monthly_payment: float
    total_cost: float
    down_payment: float


class BuyVsLeaseResult(BaseModel):
    buy: BuyOption
    lease: LeaseOption
    savings: float
    recommendation: Literal["buy", "lease"]


# ---------------------------------------------------------------------------
# Request models. These mirror the input contract of each engine entry point
# and are what the front end validates user input against.
# ---------------------------------------------------------------------------


class AffordabilityRequest(BaseModel):
    annual_income: float = Field(gt=0)
    credit_score: int = Field(ge=300, le=850)
    employment_subsidy: float = Field(default=0.0, ge=0)
    vehicle_price: float = Field(gt=0)
    down_payment: float = Field(default=0.0, ge=0)
    lease_term: int = Field(default=48, gt=0)
    mpg_combined: float = Field(gt=0)
    reliability: float = Field(ge=1, le=5)


class MatchRequest(BaseModel):
    annual_income: float = Field(gt=0)
    credit_score: int = Field(ge=300, le=850)
    employment_subsidy: float = Field(default=0.0, ge=0)
    budget_min: float = Field(gt=0)
    budget_max: float = Field(gt=0)
    lease_term: int = Field(default=48, gt=0)
    limit: int = Field(default=10, gt=0)

    @model_validator(mode="after")
    def _budget_order(self):
        if self.budget_min > self.budget_max:
            raise ValueError("budget_min must not exceed budget_max")
        return self


class DepreciationRequest(BaseModel):
    vehicle_price: float = Field(gt=0)
    factors: DepreciationFactors = Field(default_factory=DepreciationFactors)


class ResaleRequest(BaseModel):
    vehicle_price: float = Field(gt=0)
    years: float = Field(gt=0)
    factors: DepreciationFactors = Field(default_factory=DepreciationFactors)


class TCORequest(BaseModel):
    vehicle_price: float = Field(gt=0)
    down_payment: float = Field(default=0.0, ge=0)
    term_months: int = Field(default=48, gt=0)
    credit_score: int = Field(ge=300, le=850)
    mpg_combined: float = Field(gt=0)
    reliability: float = Field(ge=1, le=5)
    annual_mileage: float = Field(default=12000, ge=0)
    factors: DepreciationFactors = Field(default_factory=DepreciationFactors)


class BuyVsLeaseRequest(BaseModel):
    vehicle_price: float = Field(gt=0)
    down_payment: float = Field(default=0.0, ge=0)
    loan_term: int = Field(default=60, gt=0)
    apr: float = Field(default=5.9, ge=0)
    lease_down_payment: float = Field(default=0.0, ge=0)
    monthly_lease_payment: float = Field(default=0.0, ge=0)
    lease_term: int = Field(default=36, gt=0)
