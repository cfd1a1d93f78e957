"""Assorted display helpers."""


def credit_tier(score):
    """Human label for a credit score, aligned with the APR tiers."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        return "Unknown"
    if s >= 720:
        return "Excellent"
    if s >= 690:
        return "Good"
    if s >= 630:
        return "Fair"
    if s >= 580:
        return "Poor"
    return "Very poor"


def money(value, digits=0):
    """Format a dollar amount with thousands separators."""
    return f"${value:,.{digits}f}"
