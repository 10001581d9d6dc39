"""
Shared fixtures for the smeprofile test suite.

All fixtures run offline: the dictionary provider is built with no delay and
HTTP clients are replaced with mocks.
"""

import copy

import pytest

from smeprofile.config import Settings
from smeprofile.translate import DictionaryProvider, TranslationService

# "We serve food" in Sinhala, built from words the offline table knows
SINHALA_PRODUCTS = "අපි ආහාර සේවය කරමු"

ENGLISH_RECORD = {
    "businessprofile": {
        "businessType": "Restaurant",
        "industry": "Food & Beverage",
        "businessSize": "small-team",
        "location": {"city": "Colombo", "district": "Colombo"},
        "businessStage": "growing",
        "productsServices": "Traditional Sri Lankan food",
        "uniqueSellingProposition": "Authentic flavors",
    },
    "targetaudience": {
        "demographics": {"ageRange": "25-45", "gender": ["male", "female"], "incomeLevel": "middle"},
        "location": "Colombo",
        "interests": ["food", "culture"],
        "buyingFrequency": "weekly",
    },
    "businessgoals": {
        "primaryGoal": "brand-awareness",
        "secondaryGoals": ["Lead Generation"],
    },
    "budgetresources": {
        "monthlyBudget": "$1,000 - $2,500/month",
        "hasMarketingTeam": False,
        "teamSize": None,
        "contentCreationCapacity": ["photos"],
    },
    "platformspreferences": {
        "preferredPlatforms": ["Facebook", "Instagram"],
        "platformExperience": {"facebook": "intermediate"},
        "brandAssets": {"hasLogo": True, "hasBrandStyle": False, "brandColors": []},
    },
    "currentchallenges": {
        "challenges": ["limited-budget", "content-creation"],
        "additionalChallenges": "",
    },
    "strengthsopportunities": {
        "strengths": ["Quality food"],
        "opportunities": ["Tourism"],
        "additionalNotes": "",
    },
    "marketsituation": {
        "seasonality": [{"category": "Festivals", "subcategories": ["Christmas"]}],
        "competitorBehavior": "Aggressive discounts",
        "stockAvailability": "always-available",
        "recentPriceChanges": False,
    },
}


@pytest.fixture
def english_record():
    return copy.deepcopy(ENGLISH_RECORD)


@pytest.fixture
def sinhala_record():
    record = copy.deepcopy(ENGLISH_RECORD)
    record["businessprofile"]["productsServices"] = SINHALA_PRODUCTS
    return record


@pytest.fixture
def settings():
    """Offline settings that never read the environment."""
    return Settings(offline_delay=0.0)


@pytest.fixture
def offline_service():
    return TranslationService(
        DictionaryProvider(delay=0),
        fallback_factory=lambda: DictionaryProvider(delay=0),
    )
