"""
Sinhala / English language detection for form text.

Detection is character-based: a string counts as Sinhala when more than
10% of its code points fall in the Sinhala Unicode block (U+0D80 to U+0DFF).
Everything else, including empty input, is treated as English.

The record-level helpers walk a nested form record with
:func:`smeprofile.paths.iter_string_leaves`, so the paths they report can be
written back with :func:`smeprofile.paths.set_path`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal

from smeprofile.paths import iter_string_leaves

Language = Literal["si", "en"]
OverallLanguage = Literal["si", "en", "mixed"]

SINHALA_THRESHOLD = 0.10

_SINHALA_CHAR = re.compile(r"[\u0D80-\u0DFF]")


@dataclass(frozen=True)
class TextField:
    """A single string leaf of a form record.

    Attributes:
        path: Location in the record (``a.b[0].c`` syntax)
        text: The original text
        language: Detected language of ``text``
    """
    path: str
    text: str
    language: Language

    def to_dict(self) -> dict:
        return {"path": self.path, "text": self.text, "language": self.language}


def contains_sinhala(text: Any) -> bool:
    """Return True if ``text`` has at least one Sinhala character."""
    if not text or not isinstance(text, str):
        return False
    return _SINHALA_CHAR.search(text) is not None


def detect_language(text: Any) -> Language:
    """Classify ``text`` as ``'si'`` or ``'en'``.

    Never raises: non-strings and empty strings are reported as English.
    """
    if not text or not isinstance(text, str):
        return "en"
    sinhala_chars = len(_SINHALA_CHAR.findall(text))
    return "si" if sinhala_chars / len(text) > SINHALA_THRESHOLD else "en"


def detect_languages_in_form_data(data: Any) -> dict[str, Language]:
    """Map every non-blank string leaf path to its detected language."""
    return {path: detect_language(text) for path, text in iter_string_leaves(data)}


def get_text_fields_for_translation(data: Any) -> list[TextField]:
    """List every non-blank string leaf with its path and language."""
    return [
        TextField(path=path, text=text, language=detect_language(text))
        for path, text in iter_string_leaves(data)
    ]


def overall_language(languages: Iterable[str]) -> OverallLanguage:
    """Aggregate per-field languages: ``mixed`` iff both are present."""
    seen = set(languages)
    if "si" in seen and "en" in seen:
        return "mixed"
    if "si" in seen:
        return "si"
    return "en"
