"""
Adapters between processed profiles and the strategy generator.

The strategy generator expects a flat snake_case SME profile and a set of
trend signals. When the trend service is down, strategy generation still
runs with an empty signal list.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from smeprofile.api import ApiService, BackendError
from smeprofile.backend import BACKEND_BUSINESS_SIZES, DEFAULT_BUSINESS_SIZE
from smeprofile.paths import get_path

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")

DEFAULT_AGE_RANGE = "25-45"
DEFAULT_GENDER = ["all"]
DEFAULT_INCOME_LEVEL = "medium"
DEFAULT_BUSINESS_STAGE = "growing"

# The strategy generator, unlike the forms backend, has a "large" tier
STRATEGY_BUSINESS_SIZES = {**BACKEND_BUSINESS_SIZES, "Large Business (50+ employees)": "large"}


def _get(data: Any, path: str, default: Any = None) -> Any:
    value = get_path(data, path)
    return default if value in (None, "", [], {}) else value


def _list(value: Any) -> list:
    return [item for item in value if item] if isinstance(value, (list, tuple)) else []


def monthly_budget(budget: Any) -> int:
    """Integer budget taken from the first run of digits; 0 when absent."""
    if isinstance(budget, (int, float)) and not isinstance(budget, bool):
        return int(budget)
    if not isinstance(budget, str):
        return 0
    match = _DIGITS.search(budget.replace(",", ""))
    return int(match.group(0)) if match else 0


def to_sme_profile(processed: Mapping) -> dict:
    """Build the strategy generator's SME profile from ``ProcessedFormData``."""
    location = _get(processed, "businessProfile.location.city") or _get(processed, "businessProfile.location.district")
    goals = [_get(processed, "businessGoals.primaryGoal"), *_list(_get(processed, "businessGoals.secondaryGoals"))]
    challenges = [
        *_list(_get(processed, "challenges.currentChallenges")),
        _get(processed, "challenges.additionalChallenges"),
    ]

    return {
        "business_name": _get(processed, "businessProfile.businessType", "Unknown Business"),
        "industry": _get(processed, "businessProfile.industry", "General"),
        "business_size": STRATEGY_BUSINESS_SIZES.get(
            _get(processed, "businessProfile.businessSize"), DEFAULT_BUSINESS_SIZE
        ),
        "location": location or "Sri Lanka",
        "monthly_budget": monthly_budget(_get(processed, "marketingBudget.monthlyBudget")),
        "goals": [goal for goal in goals if goal],
        "target_audience": {
            "age_range": _get(processed, "targetMarket.demographics.ageRange", DEFAULT_AGE_RANGE),
            "gender": _get(processed, "targetMarket.demographics.gender", list(DEFAULT_GENDER)),
            "interests": _list(_get(processed, "targetMarket.interests")),
            "income_level": _get(processed, "targetMarket.demographics.incomeLevel", DEFAULT_INCOME_LEVEL),
        },
        "platform_preferences": _list(_get(processed, "digitalPresence.preferredPlatforms")),
        "current_challenges": [challenge for challenge in challenges if challenge],
        "strengths": _list(_get(processed, "opportunities.strengths")),
        "opportunities": _list(_get(processed, "opportunities.opportunities")),
        "has_marketing_team": bool(_get(processed, "marketingBudget.hasMarketingTeam", False)),
        "team_size": _get(processed, "marketingBudget.teamSize", 0),
        "content_creation_capacity": _list(_get(processed, "marketingBudget.contentCreationCapacity")),
        "business_stage": _get(processed, "businessProfile.businessStage", DEFAULT_BUSINESS_STAGE),
        "unique_selling_proposition": _get(processed, "businessProfile.uniqueSellingProposition", ""),
    }


def empty_trend_data() -> dict:
    return {"signals": [], "metadata": {"note": "Trend Agent not available, using empty signals"}}


def mock_trend_data() -> dict:
    """Fixed sample signals for demos and offline runs."""
    return {
        "signals": [
            {
                "title": "Social media video content trending",
                "category": "content_trend",
                "relevance_score": 75,
                "source": "market_analysis",
            },
            {
                "title": "Local business partnerships gaining traction",
                "category": "strategy_trend",
                "relevance_score": 68,
                "source": "industry_news",
            },
        ],
    }


async def fetch_trends(api: ApiService) -> dict:
    """Fetch live trend signals, or empty ones if the trend service fails."""
    try:
        return await api.get_trends()
    except BackendError as e:
        logger.warning("Trend service unavailable (%s); using empty signals", e)
        return empty_trend_data()
