"""
Mapping from ProcessedFormData to the forms backend's submission schema.

The backend uses its own snake_case field names and enum vocabularies.
Unlike :mod:`smeprofile.convert`, unmapped values never pass through here:
each enum falls back to a fixed default so the payload always validates.

    field               default on unmapped
    business size       "small"
    business stage      "growing"
    marketing goal      "increase_brand_awareness"
    social platform     lower-cased input
    challenge           "limited_budget"
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from smeprofile.paths import get_path

BUDGET_CURRENCY = "LKR"
SUBMISSION_SOURCE = "web_form"

BACKEND_BUSINESS_SIZES = {
    "Solo Entrepreneur": "micro",
    "Small Team (2-10 employees)": "small",
    "Medium Business (11-50 employees)": "medium",
    # Backend has no "large" tier
    "Large Business (50+ employees)": "medium",
}

BACKEND_BUSINESS_STAGES = {
    "New Business (0-1 years)": "startup",
    "Growing Business (1-5 years)": "growing",
    "Established Business (5+ years)": "established",
}

BACKEND_MARKETING_GOALS = {
    "Brand Awareness": "increase_brand_awareness",
    "Lead Generation": "generate_leads",
    "Direct Sales": "boost_sales",
    "Customer Retention": "customer_retention",
    "Local Store Visits": "market_expansion",
    "Website Traffic": "improve_customer_engagement",
}

BACKEND_SOCIAL_PLATFORMS = {
    "facebook": "facebook",
    "instagram": "instagram",
    "linkedin": "linkedin",
    "twitter": "twitter",
    "twitter/x": "twitter",
    "tiktok": "tiktok",
    "youtube": "youtube",
    "whatsapp": "whatsapp",
    "whatsapp business": "whatsapp",
}

# Accepts both the display labels and the questionnaire's challenge ids
BACKEND_CHALLENGES = {
    "Limited budget": "limited_budget",
    "limited-budget": "limited_budget",
    "Lack of marketing expertise": "lack_of_expertise",
    "no-strategy": "lack_of_expertise",
    "platform-confusion": "lack_of_expertise",
    "staying-updated": "lack_of_expertise",
    "Time constraints": "time_constraints",
    "time-management": "time_constraints",
    "Measuring ROI": "measuring_roi",
    "measuring-roi": "measuring_roi",
    "Content creation": "content_creation",
    "content-creation": "content_creation",
    "inconsistent-posting": "content_creation",
    "Reaching target audience": "reaching_target_audience",
    "target-audience": "reaching_target_audience",
    "low-reach": "reaching_target_audience",
    # low-conversion and competitor-pressure have no backend counterpart
}

DEFAULT_BUSINESS_SIZE = "small"
DEFAULT_BUSINESS_STAGE = "growing"
DEFAULT_MARKETING_GOAL = "increase_brand_awareness"
DEFAULT_CHALLENGE = "limited_budget"

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def _field(data: Any, path: str, default: Any = None) -> Any:
    value = get_path(data, path)
    return default if value is None else value


def _strings(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None and item != ""]


def map_business_size(size: Any) -> str:
    return BACKEND_BUSINESS_SIZES.get(size, DEFAULT_BUSINESS_SIZE) if isinstance(size, str) else DEFAULT_BUSINESS_SIZE


def map_business_stage(stage: Any) -> str:
    return BACKEND_BUSINESS_STAGES.get(stage, DEFAULT_BUSINESS_STAGE) if isinstance(stage, str) else DEFAULT_BUSINESS_STAGE


def map_marketing_goal(goal: Any) -> str:
    return BACKEND_MARKETING_GOALS.get(goal, DEFAULT_MARKETING_GOAL) if isinstance(goal, str) else DEFAULT_MARKETING_GOAL


def map_social_platform(platform: Any) -> str:
    key = str(platform).strip().lower()
    return BACKEND_SOCIAL_PLATFORMS.get(key, key)


def map_challenge(challenge: Any) -> str:
    return BACKEND_CHALLENGES.get(challenge, DEFAULT_CHALLENGE) if isinstance(challenge, str) else DEFAULT_CHALLENGE


def parse_budget(budget: Any) -> Optional[float]:
    """Parse the first number out of a free-text budget range.

    Thousands separators are dropped before matching, so
    ``"$1,000 - $2,500/month"`` gives ``1000.0``. Returns None when the text
    has no digits; never raises.

    >>> parse_budget("Under $500/month")
    500.0
    >>> parse_budget("no digits here") is None
    True
    """
    if isinstance(budget, (int, float)) and not isinstance(budget, bool):
        return float(budget)
    if not isinstance(budget, str) or not budget:
        return None
    match = _NUMBER.search(budget.replace(",", ""))
    return float(match.group(0)) if match else None


def _seasonal_factors(seasonality: Any) -> str:
    fragments = []
    for item in seasonality if isinstance(seasonality, list) else []:
        if isinstance(item, Mapping):
            fragments.append(f"{item.get('category') or ''}: {', '.join(_strings(item.get('factors')))}")
    return "; ".join(fragments)


def to_backend_payload(processed: Mapping) -> dict:
    """Build the forms backend submission body from ``ProcessedFormData``."""
    business_type = _field(processed, "businessProfile.businessType", default="")
    has_price_changes = bool(_field(processed, "marketSituation.pricingChanges.hasRecentChanges"))
    price_details = _field(processed, "marketSituation.pricingChanges.details", default="")
    platform_experience = _field(processed, "digitalPresence.platformExperience", default={})

    return {
        "business_profile": {
            # The questionnaire has no business name; the type stands in for it
            "business_name": business_type or "Unknown Business",
            "business_type": business_type,
            "business_size": map_business_size(_field(processed, "businessProfile.businessSize")),
            "business_stage": map_business_stage(_field(processed, "businessProfile.businessStage")),
            "location": (
                f"{_field(processed, 'businessProfile.location.city', default='')}, "
                f"{_field(processed, 'businessProfile.location.district', default='')}"
            ),
            "unique_selling_proposition": _field(processed, "businessProfile.uniqueSellingProposition", default=""),
        },
        "budget_resources": {
            "monthly_marketing_budget": parse_budget(_field(processed, "marketingBudget.monthlyBudget", default="")),
            "budget_currency": BUDGET_CURRENCY,
            "team_size": _field(processed, "marketingBudget.teamSize"),
            "has_marketing_experience": bool(_field(processed, "marketingBudget.hasMarketingTeam")),
        },
        "business_goals": {
            "primary_marketing_goal": map_marketing_goal(_field(processed, "businessGoals.primaryGoal")),
            "secondary_marketing_goals": [
                map_marketing_goal(goal) for goal in _strings(_field(processed, "businessGoals.secondaryGoals"))
            ],
        },
        "target_audience": {
            "age_range": _field(processed, "targetMarket.demographics.ageRange", default=""),
            "gender": ", ".join(_strings(_field(processed, "targetMarket.demographics.gender"))),
            "location_demographics": _field(processed, "targetMarket.location", default=""),
            "interests": ", ".join(_strings(_field(processed, "targetMarket.interests"))),
            "buying_behavior": _field(processed, "targetMarket.buyingFrequency", default=""),
        },
        "platforms_preferences": {
            "preferred_platforms": [
                map_social_platform(p) for p in _strings(_field(processed, "digitalPresence.preferredPlatforms"))
            ],
            "current_online_presence": ", ".join(platform_experience) if isinstance(platform_experience, Mapping) else "",
            "has_brand_assets": bool(_field(processed, "digitalPresence.brandAssets.hasLogo")),
            "brand_guidelines": (
                "Available" if _field(processed, "digitalPresence.brandAssets.hasBrandStyle") else "Not available"
            ),
        },
        "current_challenges": {
            "main_challenges": [
                map_challenge(c) for c in _strings(_field(processed, "challenges.currentChallenges"))
            ],
            "specific_obstacles": _field(processed, "challenges.additionalChallenges"),
        },
        "strengths_opportunities": {
            "business_strengths": ", ".join(_strings(_field(processed, "opportunities.strengths"))),
            "market_opportunities": ", ".join(_strings(_field(processed, "opportunities.opportunities"))),
            "growth_areas": _field(processed, "opportunities.additionalNotes"),
        },
        "market_situation": {
            "seasonal_factors": _seasonal_factors(_field(processed, "marketSituation.seasonality")),
            "competition_level": _field(processed, "marketSituation.competitorBehavior", default=""),
            "pricing_strategy": f"Recent changes: {price_details}" if has_price_changes else "Stable pricing",
        },
        "form_language": _field(processed, "metadata.language", default="en"),
        "submission_source": SUBMISSION_SOURCE,
    }
