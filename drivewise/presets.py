"""Constant tables behind the financing, depreciation and matching formulas."""

import math

# 2024 federal brackets, single filer: (min, max, rate)
FEDERAL_TAX_BRACKETS = [
    (0, 11600, 0.10),
    (11600, 47150, 0.12),
    (47150, 100525, 0.22),
    (100525, 191950, 0.24),
    (191950, 243725, 0.32),
    (243725, 609350, 0.35),
    (609350, math.inf, 0.37),
]
STANDARD_DEDUCTION = 14600
FICA_RATE = 0.0765

# Volatility cushion proxy: VOLATILITY_INCOME_BASE / income, clamped.
VOLATILITY_INCOME_BASE = 50000
VOLATILITY_BOUNDS = (0.05, 0.25)

# Credit score floor -> auto loan APR %, highest tier first.
APR_TIERS = [(720, 4.5), (690, 6.2), (630, 8.9), (580, 12.5)]
APR_FLOOR = 15.9

# Credit score floor -> share of annual income that can go to a car.
AFFORDABLE_PRICE_FACTORS = [(750, 0.7), (700, 0.5), (650, 0.35), (600, 0.25)]
AFFORDABLE_PRICE_FLOOR = 0.15

# price / max affordable price -> score
PRICE_RATIO_SCORES = [(0.70, 95), (0.85, 80), (1.00, 60), (1.15, 40)]
PRICE_RATIO_FLOOR = 20
# monthly cost / monthly net income -> score penalty, checked in order
PAYMENT_RATIO_PENALTIES = [(0.25, 20), (0.20, 10)]
CAN_AFFORD_PAYMENT_RATIO = 0.25

RECOMMENDATION_TIERS = [
    (
        80,
        "Excellent fit! This vehicle is well within your budget. Based on your "
        "income and credit score, you can afford up to {max_price}.",
    ),
    (
        60,
        "Good match. This vehicle fits your budget, though it will be a "
        "significant monthly expense. Maximum recommended budget: {max_price}.",
    ),
    (
        40,
        "Proceed with caution. This vehicle is at or above your recommended "
        "limit of {max_price}.",
    ),
]
RECOMMENDATION_FLOOR = (
    "Consider a less expensive option. This vehicle exceeds your recommended "
    "budget of {max_price} and may strain your finances."
)

# DTI-based score
DTI_CEILING = 0.3
CREDIT_BASELINE = 650

# Cost estimators
INSURANCE_BASE = 145
INSURANCE_PRICE_PIVOT = 30000
INSURANCE_PRICE_BOUNDS = (0.7, 1.5)
INSURANCE_CREDIT_TIERS = [(720, 0.85), (650, 1.0)]
INSURANCE_CREDIT_FLOOR = 1.25

DEFAULT_ANNUAL_MILEAGE = 12000
DEFAULT_GAS_PRICE = 3.50

MAINTENANCE_BASE = 75
# price threshold (exclusive) -> monthly base, highest first
MAINTENANCE_PRICE_TIERS = [(45000, 100), (35000, 85)]
MAINTENANCE_RELIABILITY_BOUNDS = (0.7, 1.3)

TAXES_FEES_RATE = 0.0008
TAXES_FEES_FLAT = 50

# Match ranking weights
MATCH_PRICE_POINTS = 40
MATCH_RELIABILITY_POINTS = 30
MATCH_EFFICIENCY_POINTS = 10
MATCH_EFFICIENCY_MPG = 30
# payment / monthly income (exclusive) -> points
MATCH_PAYMENT_TIERS = [(0.15, 20), (0.20, 15), (0.25, 10)]
MATCH_PAYMENT_FLOOR = 5
MATCH_FINANCED_SHARE = 0.9
MATCH_DOWN_PAYMENT_SHARE = 0.1
DEFAULT_MATCH_LIMIT = 10
LOOKUP_MATCH_LIMIT = 20

SALARY_FIT_TIERS = [(0.15, 95), (0.20, 85)]
SALARY_FIT_FLOOR = 70
TERM_MATCH = {36: 95, 48: 90}
TERM_MATCH_DEFAULT = 85

CHART_COLORS = {
    "Monthly Payment": "hsl(var(--chart-1))",
    "Insurance": "hsl(var(--chart-2))",
    "Fuel": "hsl(var(--chart-3))",
    "Maintenance": "hsl(var(--chart-4))",
    "Taxes & Fees": "hsl(var(--chart-5))",
}

# Average retention by years since purchase (2015-2024 Toyota history).
# Years 6, 8+ have no data point.
BASE_DEPRECIATION_CURVE = {0: 1.00, 1: 0.85, 2: 0.73, 3: 0.63, 4: 0.55, 5: 0.48, 7: 0.38}
CONFIDENCE_INTERVALS = {1: 0.03, 2: 0.04, 3: 0.08, 4: 0.10, 5: 0.11, 7: 0.12}
DEFAULT_CONFIDENCE_INTERVAL = 0.12
# Downside weighted heavier than upside.
LOWER_BOUND_WEIGHT = 1.2
UPPER_BOUND_WEIGHT = 0.8

FACTOR_BONUSES = {
    "low_mileage": 0.03,
    "good_condition": 0.02,
    "low_interest": 0.02,
    "low_gas": 0.01,
}

CONFIDENCE_LABELS = [(3, "High (87%+)"), (5, "Moderate (75-87%)")]
CONFIDENCE_LABEL_FLOOR = "Lower (60-75%)"

# Ten year path: first-year, years 2-5 and later yearly depreciation rates.
PATH_YEARS = 10
PATH_FIRST_YEAR_RATE = 0.20
PATH_EARLY_RATE = 0.12
PATH_LATE_RATE = 0.08
PATH_MILEAGE_PIVOT = 15000
PATH_MILEAGE_PENALTY = 0.02
PATH_BAND = 0.10

# Buy vs lease: straight-line depreciation assumption.
BUY_DEPRECIATION_RATE = 0.40
BUY_DEPRECIATION_YEARS = 5
