"""
smeprofile: bilingual intake pipeline for SME marketing profiles.

Takes questionnaire answers written in Sinhala, English or a mix of both,
translates the Sinhala fields to English, and produces a structured profile
ready for strategy generation and backend submission.

Core pieces:
1. Character-based Sinhala/English detection
2. Pluggable translation providers with an offline fallback
3. Structured JSON conversion, AI prompt and backend payload
"""

__version__ = "0.1.0"

from smeprofile.config import Settings
from smeprofile.pipeline import (
    FormDataProcessor,
    ProcessingOptions,
    ProcessingResult,
    ValidationResult,
)

__all__ = [
    "Settings",
    "FormDataProcessor",
    "ProcessingOptions",
    "ProcessingResult",
    "ValidationResult",
]
