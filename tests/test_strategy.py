"""
Tests for the strategy generator adapters.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

from smeprofile.api import BackendError
from smeprofile.convert import convert_to_structured_json
from smeprofile.strategy import (
    empty_trend_data,
    fetch_trends,
    mock_trend_data,
    monthly_budget,
    to_sme_profile,
)

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


class TestToSmeProfile:
    """Test the SME profile sent to the strategy generator."""

    def test_profile_from_processed_data(self, english_record):
        """Test converting a processed English record."""
        profile = to_sme_profile(convert_to_structured_json(english_record, now=NOW))

        assert profile["business_name"] == "Restaurant"
        assert profile["industry"] == "Food & Beverage"
        assert profile["business_size"] == "small"
        assert profile["location"] == "Colombo"
        assert profile["monthly_budget"] == 1000
        assert profile["goals"] == ["Brand Awareness", "Lead Generation"]
        assert profile["target_audience"]["age_range"] == "25-45"
        assert profile["platform_preferences"] == ["Facebook", "Instagram"]
        assert profile["current_challenges"] == ["limited-budget", "content-creation"]
        assert profile["has_marketing_team"] is False
        assert profile["team_size"] == 0

    def test_defaults_for_empty_profile(self):
        """Test defaults for an empty profile."""
        profile = to_sme_profile({})

        assert profile["business_name"] == "Unknown Business"
        assert profile["industry"] == "General"
        assert profile["location"] == "Sri Lanka"
        assert profile["monthly_budget"] == 0
        assert profile["goals"] == []
        assert profile["target_audience"] == {
            "age_range": "25-45",
            "gender": ["all"],
            "interests": [],
            "income_level": "medium",
        }
        assert profile["business_stage"] == "growing"

    def test_large_business_keeps_its_tier(self):
        """Test large businesses stay large."""
        processed = {"businessProfile": {"businessSize": "Large Business (50+ employees)"}}
        assert to_sme_profile(processed)["business_size"] == "large"

    def test_additional_challenge_appended(self):
        """Test free-text challenges are appended."""
        processed = {"challenges": {"currentChallenges": ["no-strategy"], "additionalChallenges": "Staff turnover"}}
        assert to_sme_profile(processed)["current_challenges"] == ["no-strategy", "Staff turnover"]


class TestMonthlyBudget:
    """Test integer budget extraction."""

    def test_range(self):
        """Test the lower bound of a range."""
        assert monthly_budget("50000-100000") == 50000

    def test_thousands_separator(self):
        """Test thousands separators are ignored."""
        assert monthly_budget("$1,000 - $2,500/month") == 1000

    def test_missing(self):
        """Test a missing budget gives zero."""
        assert monthly_budget(None) == 0
        assert monthly_budget("ask me later") == 0


class TestTrendData:
    """Test trend signal helpers."""

    def test_mock_data_has_signals(self):
        """Test the sample trend signals."""
        assert len(mock_trend_data()["signals"]) == 2

    def test_fetch_trends_passes_through(self):
        """Test live trends are returned."""
        api = Mock()
        api.get_trends = AsyncMock(return_value={"signals": [{"title": "x"}]})
        assert asyncio.run(fetch_trends(api)) == {"signals": [{"title": "x"}]}

    def test_fetch_trends_falls_back_to_empty(self):
        """Test a trend service failure gives empty signals."""
        api = Mock()
        api.get_trends = AsyncMock(side_effect=BackendError("Failed to fetch trends: refused"))
        assert asyncio.run(fetch_trends(api)) == empty_trend_data()
