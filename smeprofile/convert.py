"""
Structured JSON conversion for marketing-profile form data.

Turns the loosely-typed, step-keyed record produced by the questionnaire into
the canonical eight-section ``ProcessedFormData`` dict:

    businessProfile, targetMarket, businessGoals, marketingBudget,
    digitalPresence, challenges, opportunities, marketSituation, metadata

Enum-valued answers are mapped to readable labels through the tables below.
Unknown values pass through unchanged unless ``strict_enums`` is set.

The module also builds the plain-text prompt handed to the strategy LLM and
the downloadable JSON export.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, NamedTuple, Optional

from smeprofile.paths import get_path

EXPORT_VERSION = "1.0"

# Canonical section name -> accepted step identifiers
STEP_KEYS = {
    "businessProfile": ("businessprofile", "business-profile"),
    "targetAudience": ("targetaudience", "target-audience"),
    "businessGoals": ("businessgoals", "business-goals"),
    "budgetResources": ("budgetresources", "budget-resources"),
    "platformsPreferences": ("platformspreferences", "platforms-preferences"),
    "currentChallenges": ("currentchallenges", "current-challenges"),
    "strengthsOpportunities": ("strengthsopportunities", "strengths-opportunities"),
    "marketSituation": ("marketsituation", "market-situation"),
}

BUSINESS_SIZES = {
    "solo": "Solo Entrepreneur",
    "small-team": "Small Team (2-10 employees)",
    "medium": "Medium Business (11-50 employees)",
    "large": "Large Business (50+ employees)",
}

BUSINESS_STAGES = {
    "new": "New Business (0-1 years)",
    "growing": "Growing Business (1-5 years)",
    "established": "Established Business (5+ years)",
}

BUYING_FREQUENCIES = {
    "rare": "Rarely (few times per year)",
    "monthly": "Monthly",
    "weekly": "Weekly",
    "daily": "Daily",
}

PRIMARY_GOALS = {
    "brand-awareness": "Brand Awareness",
    "leads": "Lead Generation",
    "sales": "Direct Sales",
    "customer-retention": "Customer Retention",
    "local-visits": "Local Store Visits",
    "online-traffic": "Website Traffic",
}

STOCK_AVAILABILITY = {
    "always-available": "Always Available",
    "seasonal": "Seasonal Availability",
    "limited": "Limited Stock",
    "pre-order": "Pre-order/Made-to-order",
}


class UnmappedValueError(ValueError):
    """Raised in strict mode when an enum answer has no table entry."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Unrecognized value for {field}: {value!r}")


@dataclass
class ConversionOptions:
    """Options for :func:`convert_to_structured_json`.

    Attributes:
        include_metadata: Keep the ``metadata`` block in the output
        remove_empty_fields: Prune None/''/[]/{} values from the output
        strict_enums: Raise UnmappedValueError instead of passing unknown
            enum values through
    """
    include_metadata: bool = True
    remove_empty_fields: bool = True
    strict_enums: bool = False


class ExportedJSON(NamedTuple):
    json: str
    filename: str


def _section(data: Any, key: str) -> dict:
    value = data.get(key) if isinstance(data, Mapping) else None
    return value if isinstance(value, dict) else {}


def _field(data: Any, path: str, default: Any = None) -> Any:
    value = get_path(data, path)
    return default if value is None else value


def _list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _iso_now(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_step_keys(raw: Any) -> dict[str, dict]:
    """Collect the eight form sections under their canonical names.

    Sections may be keyed by canonical name (``businessProfile``), by step id
    with hyphens removed (``businessprofile``) or by step id
    (``business-profile``); the first present dict wins. Missing or non-dict
    sections become ``{}``.
    """
    normalized = {}
    for canonical, aliases in STEP_KEYS.items():
        section = {}
        for key in (canonical, *aliases):
            candidate = _section(raw, key)
            if candidate:
                section = candidate
                break
        normalized[canonical] = section
    return normalized


def map_enum(table: Mapping[str, str], value: Any, field: str = "value", strict: bool = False) -> Any:
    """Translate an enum answer through ``table``.

    Unmapped values pass through unchanged (empty values become ``''``); in
    strict mode an unmapped non-empty value raises UnmappedValueError.
    """
    if not value:
        return ""
    if isinstance(value, str) and value in table:
        return table[value]
    if strict and value not in table.values():
        raise UnmappedValueError(field, value)
    return value


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


# Fixed, ordered completion checklist, addressed on the normalized form
REQUIRED_FIELDS = (
    "businessProfile.businessType",
    "businessProfile.industry",
    "businessProfile.businessSize",
    "targetAudience.demographics.ageRange",
    "businessGoals.primaryGoal",
    "budgetResources.monthlyBudget",
    "platformsPreferences.preferredPlatforms",
)


def missing_required_fields(form: Mapping) -> list[str]:
    """Paths of the required fields that are empty, in checklist order."""
    return [path for path in REQUIRED_FIELDS if not _is_filled(_field(form, path))]


def calculate_completion_rate(form: Mapping) -> int:
    """Percentage (0-100) of required fields that hold a value."""
    filled = len(REQUIRED_FIELDS) - len(missing_required_fields(form))
    return math.floor(100 * filled / len(REQUIRED_FIELDS) + 0.5)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, dict)) and not value)


def remove_empty_fields(value: Any) -> Any:
    """Recursively drop None, '', [] and {} values.

    Children are cleaned before their own emptiness is judged, so a dict whose
    members are all empty disappears in the same pass. ``False`` and ``0`` are
    real answers and are kept. Running this on its own output is a no-op.
    """
    if isinstance(value, list):
        cleaned = (remove_empty_fields(item) for item in value)
        return [item for item in cleaned if not _is_empty(item)]
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            item = remove_empty_fields(item)
            if not _is_empty(item):
                result[key] = item
        return result
    return value


def convert_to_structured_json(
    form_data: Any,
    options: ConversionOptions | None = None,
    now: Optional[datetime] = None,
) -> dict:
    """Convert a raw form record into ``ProcessedFormData``.

    Args:
        form_data: Raw record, step-keyed or already canonical
        options: Conversion options (defaults to ConversionOptions())
        now: Clock override for ``metadata.submissionDate``

    Returns:
        The structured record. ``metadata.language`` and
        ``metadata.translationApplied`` are placeholders that the pipeline
        overwrites.

    Raises:
        UnmappedValueError: In strict mode, on an unknown enum value
    """
    options = options or ConversionOptions()
    strict = options.strict_enums
    form = normalize_step_keys(form_data)

    profile = form["businessProfile"]
    audience = form["targetAudience"]
    goals = form["businessGoals"]
    budget = form["budgetResources"]
    platforms = form["platformsPreferences"]
    challenges = form["currentChallenges"]
    strengths = form["strengthsOpportunities"]
    market = form["marketSituation"]

    processed = {
        "businessProfile": {
            "businessType": profile.get("businessType") or "",
            "industry": profile.get("industry") or "",
            "businessSize": map_enum(BUSINESS_SIZES, profile.get("businessSize"), "businessSize", strict),
            "location": {
                "city": _field(profile, "location.city", default=""),
                "district": _field(profile, "location.district", default=""),
            },
            "businessStage": map_enum(BUSINESS_STAGES, profile.get("businessStage"), "businessStage", strict),
            "productsServices": profile.get("productsServices") or "",
            "uniqueSellingProposition": profile.get("uniqueSellingProposition") or "",
        },
        "targetMarket": {
            "demographics": {
                "ageRange": _field(audience, "demographics.ageRange", default=""),
                "gender": _list(_field(audience, "demographics.gender")),
                "incomeLevel": _field(audience, "demographics.incomeLevel", default=""),
            },
            "location": audience.get("location") or "",
            "interests": _list(audience.get("interests")),
            "buyingFrequency": map_enum(
                BUYING_FREQUENCIES, audience.get("buyingFrequency"), "buyingFrequency", strict
            ),
        },
        "businessGoals": {
            "primaryGoal": map_enum(PRIMARY_GOALS, goals.get("primaryGoal"), "primaryGoal", strict),
            "secondaryGoals": _list(goals.get("secondaryGoals")),
        },
        "marketingBudget": {
            "monthlyBudget": budget.get("monthlyBudget") or "",
            "hasMarketingTeam": bool(budget.get("hasMarketingTeam")),
            "teamSize": budget.get("teamSize"),
            "contentCreationCapacity": _list(budget.get("contentCreationCapacity")),
        },
        "digitalPresence": {
            "preferredPlatforms": _list(platforms.get("preferredPlatforms")),
            "platformExperience": dict(_section(platforms, "platformExperience")),
            "brandAssets": {
                "hasLogo": bool(_field(platforms, "brandAssets.hasLogo")),
                "hasBrandStyle": bool(_field(platforms, "brandAssets.hasBrandStyle")),
                "brandColors": _list(_field(platforms, "brandAssets.brandColors")),
            },
        },
        "challenges": {
            "currentChallenges": _list(challenges.get("challenges")),
            "additionalChallenges": challenges.get("additionalChallenges"),
        },
        "opportunities": {
            "strengths": _list(strengths.get("strengths")),
            "opportunities": _list(strengths.get("opportunities")),
            "additionalNotes": strengths.get("additionalNotes"),
        },
        "marketSituation": {
            "seasonality": [
                {"category": item.get("category"), "factors": _list(item.get("subcategories"))}
                for item in _list(market.get("seasonality"))
                if isinstance(item, Mapping)
            ],
            "seasonalityOther": market.get("seasonalityOther"),
            "competitorBehavior": market.get("competitorBehavior") or "",
            "stockAvailability": map_enum(
                STOCK_AVAILABILITY, market.get("stockAvailability"), "stockAvailability", strict
            ),
            "pricingChanges": {
                "hasRecentChanges": bool(market.get("recentPriceChanges")),
                "details": market.get("priceChangeDetails"),
            },
        },
        "metadata": {
            "submissionDate": _iso_now(now),
            "language": "en",
            "translationApplied": False,
            "completionRate": calculate_completion_rate(form),
        },
    }

    if options.remove_empty_fields:
        processed = remove_empty_fields(processed)

    if not options.include_metadata:
        processed.pop("metadata", None)

    return processed


def _joined(values: Any, empty: str) -> str:
    items = [str(v) for v in _list(values) if _is_filled(v)]
    return ", ".join(items) or empty


def generate_ai_prompt(data: Mapping) -> str:
    """Render ``ProcessedFormData`` as the six-section strategy prompt.

    Works on pruned and partial records: every absent field is written as
    'Not specified' (or 'None' for lists), so this never raises.
    """
    na = "Not specified"

    def field(path: str) -> str:
        value = _field(data, path)
        return str(value) if _is_filled(value) else na

    has_team = bool(_field(data, "marketingBudget.hasMarketingTeam"))
    team = f"Yes ({_field(data, 'marketingBudget.teamSize') or 'size not specified'})" if has_team else "No"

    seasonality = "; ".join(
        f"{item.get('category') or na}: {_joined(item.get('factors'), '')}".rstrip()
        for item in _list(_field(data, "marketSituation.seasonality"))
        if isinstance(item, Mapping)
    ) or na

    sections = [
        "\n".join([
            "Business Overview:",
            f"- Type: {field('businessProfile.businessType')}",
            f"- Industry: {field('businessProfile.industry')}",
            f"- Size: {field('businessProfile.businessSize')}",
            f"- Stage: {field('businessProfile.businessStage')}",
            f"- Location: {field('businessProfile.location.city')}, "
            f"{field('businessProfile.location.district')}",
            f"- Products/Services: {field('businessProfile.productsServices')}",
            f"- USP: {field('businessProfile.uniqueSellingProposition')}",
        ]),
        "\n".join([
            "Target Market:",
            f"- Demographics: {field('targetMarket.demographics.ageRange')}, "
            f"{_joined(_field(data, 'targetMarket.demographics.gender'), na)}, "
            f"{field('targetMarket.demographics.incomeLevel')}",
            f"- Location: {field('targetMarket.location')}",
            f"- Interests: {_joined(_field(data, 'targetMarket.interests'), na)}",
            f"- Buying Frequency: {field('targetMarket.buyingFrequency')}",
        ]),
        "\n".join([
            "Marketing Goals & Budget:",
            f"- Primary Goal: {field('businessGoals.primaryGoal')}",
            f"- Secondary Goals: {_joined(_field(data, 'businessGoals.secondaryGoals'), 'None')}",
            f"- Monthly Budget: {field('marketingBudget.monthlyBudget')}",
            f"- Team: {team}",
        ]),
        "\n".join([
            "Digital Presence:",
            f"- Preferred Platforms: {_joined(_field(data, 'digitalPresence.preferredPlatforms'), 'None selected')}",
            "- Brand Assets: "
            + ("Has Logo" if _field(data, "digitalPresence.brandAssets.hasLogo") else "No Logo")
            + ", "
            + ("Has Brand Style" if _field(data, "digitalPresence.brandAssets.hasBrandStyle") else "No Brand Style"),
        ]),
        "\n".join([
            "Current Situation:",
            f"- Challenges: {_joined(_field(data, 'challenges.currentChallenges'), 'None specified')}",
            f"- Strengths: {_joined(_field(data, 'opportunities.strengths'), 'None specified')}",
            f"- Opportunities: {_joined(_field(data, 'opportunities.opportunities'), 'None specified')}",
        ]),
        "\n".join([
            "Market Context:",
            f"- Seasonality: {seasonality}",
            f"- Competitor Behavior: {field('marketSituation.competitorBehavior')}",
            f"- Stock Availability: {field('marketSituation.stockAvailability')}",
            "- Recent Price Changes: "
            + ("Yes" if _field(data, "marketSituation.pricingChanges.hasRecentChanges") else "No"),
        ]),
    ]
    return "\n\n".join(sections)


def export_as_json(data: Mapping, filename: str | None = None, now: Optional[datetime] = None) -> ExportedJSON:
    """Wrap processed data with export metadata as pretty-printed JSON.

    The default filename is ``marketing-strategy-data-{epoch_ms}.json``.
    """
    moment = now or datetime.now(timezone.utc)
    payload = {
        "exportDate": _iso_now(moment),
        "version": EXPORT_VERSION,
        "data": data,
    }
    return ExportedJSON(
        json=json.dumps(payload, indent=2, ensure_ascii=False),
        filename=filename or f"marketing-strategy-data-{int(moment.timestamp() * 1000)}.json",
    )
