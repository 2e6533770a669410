"""Weighted startup scoring used by admins to compare applications.

Each factor is scored on a 0..100 scale and combined with percentage
weights that must total 100. Inputs can be pre-filled from a startup row
with `inputs_from_startup`; anything the row does not carry keeps its
default.
"""

import math
from typing import Dict, Optional

DEFAULT_WEIGHTS = {
    "founders_experience": 20,
    "team_size": 10,
    "market_size": 15,
    "funding_stage": 15,
    "monthly_revenue": 15,
    "product_stage": 10,
    "pitch_quality": 10,
    "competitive_advantage": 5,
}

DEFAULT_INPUTS = {
    "founders_experience": 0,  # years
    "founders_startups": 0,
    "founders_exits": 0,
    "team_size": 1,
    "market_size": 0,  # TAM in USD
    "funding_stage": "",
    "monthly_revenue": 0,
    "product_stage": "",
    "pitch_quality": 5,  # 1..10
    "competitive_advantage": "",
}

FUNDING_STAGE_SCORES = {
    "pre-seed": 60,
    "seed": 75,
    "series-a": 85,
    "series-b": 90,
    "series-c": 95,
}

PRODUCT_STAGE_SCORES = {
    "idea": 30,
    "prototype": 50,
    "mvp": 70,
    "launched": 100,
}


def total_weight(weights: Dict[str, float]) -> float:
    return sum(weights.values())


def validate_weights(weights: Dict[str, float]) -> bool:
    return total_weight(weights) == 100


def map_funding_stage(instrument: Optional[str]) -> str:
    """Translate an investment instrument into a funding stage key."""
    if not instrument:
        return ""
    lower = instrument.lower()
    if "equity" in lower or "convertible" in lower:
        return "seed"
    return "pre-seed"


def map_product_stage(stage: Optional[str]) -> str:
    if not stage:
        return ""
    lower = stage.lower()
    if "idea" in lower:
        return "idea"
    if "mvp" in lower:
        return "mvp"
    if "scaling" in lower:
        return "launched"
    return "prototype"


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _team_score(size: int) -> float:
    if 3 <= size <= 7:
        return 100
    if size < 3:
        return size / 3 * 70
    return max(30, 100 - (size - 7) * 8)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_startup_score(inputs: Dict, weights: Optional[Dict[str, float]] = None) -> dict:
    """Score a startup; returns `{final_score, breakdown, label}`."""
    data = dict(DEFAULT_INPUTS)
    data.update({k: v for k, v in (inputs or {}).items() if v is not None})
    weights = weights or DEFAULT_WEIGHTS

    breakdown = {
        "founders_experience": min(
            100,
            data["founders_experience"] * 3 + data["founders_startups"] * 15 + data["founders_exits"] * 25,
        ),
        "team_size": _team_score(data["team_size"]),
        "market_size": _clamp((math.log10(data["market_size"]) - 6) * 25) if data["market_size"] > 0 else 0,
        "funding_stage": FUNDING_STAGE_SCORES.get(data["funding_stage"], 50),
        "monthly_revenue": _clamp((math.log10(data["monthly_revenue"]) - 2) * 20) if data["monthly_revenue"] > 0 else 0,
        "product_stage": PRODUCT_STAGE_SCORES.get(data["product_stage"], 0),
        "pitch_quality": data["pitch_quality"] / 10 * 100,
        "competitive_advantage": min(100, len(data["competitive_advantage"] or "") / 200 * 100),
    }
    final = sum(score * weights.get(key, 0) / 100 for key, score in breakdown.items())
    final_score = _round_half_up(final)
    return {"final_score": final_score, "breakdown": breakdown, "label": score_label(final_score)}


def score_label(score: float) -> str:
    if score >= 80:
        return "Excellent Investment Potential"
    if score >= 60:
        return "Good Investment Potential"
    if score >= 40:
        return "Moderate Investment Potential"
    return "Limited Investment Potential"


def inputs_from_startup(startup) -> dict:
    """Pre-fill scoring inputs from the columns a startup row carries."""
    revenue = startup.previous_financial_year_revenue
    return {
        "team_size": startup.team_size or 1,
        "monthly_revenue": revenue / 12 if revenue else 0,
        # capital sought stands in for the market opportunity
        "market_size": startup.capital_seeking or 0,
        "funding_stage": map_funding_stage(startup.investment_instrument),
        "product_stage": map_product_stage(startup.stage),
        "competitive_advantage": startup.uniqueness or "",
    }
