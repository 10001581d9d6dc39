"""
Offline Sinhala -> English dictionary translator.

Used when no translation API is configured and as the fallback when a remote
provider fails. It simulates network latency with a short fixed delay, then
substitutes known phrases and words from a static lookup table.

Matching rules:
- Phrase entries (containing a space) are applied before single words
- Within each group, longer keys are applied first so that a phrase is never
  broken up by one of its own words
- Matching is plain substring replacement (Sinhala has no regex word
  boundaries)

When nothing matches, the input comes back wrapped in a visible marker so
callers can tell it was not translated.
"""

from __future__ import annotations

import asyncio
import logging

from smeprofile.translate.base import TranslationProvider

logger = logging.getLogger(__name__)

FALLBACK_MARKER = "[Offline Translation]"


# Common Sinhala words and phrases seen in SME profile answers (SI->EN)
SINHALA_ENGLISH = {
    # Phrases
    "අපි සාම්ප්‍රදායික ශ්‍රී ලාංකික ආහාර වර්ග සේවය කරමු": "We serve traditional Sri Lankan food varieties",
    "අව්‍යාජ රස සහිත නවීන ප්‍රදර්ශනය": "Authentic flavors with modern presentation",
    "කොළඹ නගර ප්‍රදේශය": "Colombo metropolitan area",
    "ප්‍රතිෂ්ඨිත ආහාරශාලා වලින් තරගකාරිත්වය": "Competition from established restaurants",
    "අව්‍යාජ ශ්‍රී ලාංකික ආහාර කෙරෙහි වැඩිවන උනන්දුව": "Growing interest in authentic Sri Lankan cuisine",
    "සිංහල හා දමිළ අලුත් අවුරුද්ද": "Sinhala and Tamil New Year",
    "අපේ ව්‍යාපාරය කාලයාකුල රටාවන් හේතුවෙන් බලපෑමට ලක්වේ": "Our business is affected by seasonal patterns",
    "සමාජ මාධ්‍ය හරහා වැඩි ක්‍රියාකාරකම් සහ බෙදාහැරීමේ විකල්ප": "Increased social media activities and delivery options",
    "සමාජ මාධ්‍ය": "social media",
    "ශ්‍රී ලාංකික": "Sri Lankan",
    # Mixed-language input (common in real answers)
    "authentic රස සහිත නවීන ප්‍රදර්ශනය": "Authentic flavors with modern presentation",
    "Colombo නගර ප්‍රදේශය": "Colombo metropolitan area",
    "Christmas (දෙසැම්බර්)": "Christmas (December)",
    # Words
    "අපි": "we",
    "අපේ": "our",
    "ආහාර": "food",
    "සේවය": "service",
    "සේවා": "services",
    "කරමු": "do",
    "කොළඹ": "Colombo",
    "නගරය": "city",
    "නගර": "city",
    "ප්‍රදේශය": "area",
    "සාම්ප්‍රදායික": "traditional",
    "ශ්‍රී": "Sri",
    "ලාංකික": "Lankan",
    "අව්‍යාජ": "authentic",
    "රස": "taste",
    "සහිත": "with",
    "නවීන": "modern",
    "ප්‍රදර්ශනය": "presentation",
    "අත්දැකීම්": "experiences",
    "සමග": "with",
    "ප්‍රතිෂ්ඨිත": "established",
    "ආහාරශාලා": "restaurants",
    "තරගකාරිත්වය": "competition",
    "උනන්දුව": "interest",
    "වැඩිවන": "growing",
    "අලුත්": "new",
    "අවුරුද්ද": "year",
    "නත්තල්": "Christmas",
    "අවස්ථා": "occasions",
    "වලදී": "during",
    "වැඩි": "more",
    "භෝජන": "dining",
    "සංස්කෘතිය": "culture",
    "වර්ග": "varieties",
    "හේතුවෙන්": "due to",
    "බලපෑමට": "to impact",
    "ලක්වේ": "is subjected",
    "මාධ්‍ය": "media",
    "හරහා": "through",
    "ක්‍රියාකාරකම්": "activities",
    "බෙදාහැරීමේ": "delivery",
    "විකල්ප": "options",
    "කාලයාකුල": "seasonal",
    "රටාවන්": "patterns",
    "සිංහල": "Sinhala",
    "දමිළ": "Tamil",
    "අප්‍රේල්": "April",
    "දෙසැම්බර්": "December",
    "ව්‍යාපාරය": "business",
    "ව්‍යාපාර": "business",
    "පාරිභෝගිකයින්": "customers",
    "නිෂ්පාදන": "products",
    "මිල": "price",
    "ගුණාත්මක": "quality",
    "සමාජ": "social",
    "සහ": "and",
    "හා": "and",
    "වේ": "become",
}


def _ordered_entries(table: dict[str, str]) -> list[tuple[str, str]]:
    """Phrases first, then words; longest keys first within each group."""
    return sorted(table.items(), key=lambda item: (" " not in item[0], -len(item[0])))


class DictionaryProvider(TranslationProvider):
    """Deterministic offline translator backed by a static lookup table.

    Args:
        delay: Simulated latency in seconds, applied before every call
        table: Replacement SI->EN table (defaults to SINHALA_ENGLISH)
    """

    def __init__(self, delay: float = 0.3, table: dict[str, str] | None = None):
        self.delay = max(0.0, delay)
        self._entries = _ordered_entries(table if table is not None else SINHALA_ENGLISH)

    @property
    def name(self) -> str:
        return "Offline Dictionary"

    async def translate(self, text: str, source: str = "si", target: str = "en") -> str:
        if self.delay:
            await asyncio.sleep(self.delay)

        translated, applied = self.substitute(text)
        if applied:
            logger.debug("Offline translation applied %d entries to %r", len(applied), text[:50])
            return translated

        logger.debug("No dictionary entry matched %r", text[:50])
        return f"{FALLBACK_MARKER} {text}"

    def substitute(self, text: str) -> tuple[str, list[str]]:
        """Apply every matching entry; return the new text and matched keys."""
        result = text
        applied = []
        for source_text, target_text in self._entries:
            if source_text in result:
                result = result.replace(source_text, target_text)
                applied.append(source_text)
        return result, applied
