import streamlit as st
from pydantic import ValidationError

from core.rules import evaluate_rules


def render_rule_results(state: dict):
    """Show advisories for an affordability snapshot."""
    results = evaluate_rules(state)
    if not results:
        st.success("No warnings.")
        return results
    for r in results:
        if r.severity == "critical":
            st.error(f"[{r.code}] {r.message}")
        elif r.severity == "warn":
            st.warning(f"[{r.code}] {r.message}")
        else:
            st.info(f"[{r.code}] {r.message}")
    return results


def render_validation_error(e: ValidationError):
    for err in e.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        st.error(f"{field}: {err['msg']}")
