"""
Form processing pipeline for smeprofile.

This module orchestrates the complete intake workflow:
1. Normalize step-keyed input into the eight canonical sections
2. Detect the language of every text field
3. Translate Sinhala fields (when enabled and present)
4. Convert to structured ``ProcessedFormData``
5. Stamp language and translation metadata onto the output

``process_and_submit`` continues from there: it builds the AI prompt, checks
backend health and submits the backend payload once.

Design:
- The translation service and the API client are injected; the defaults
  are built from :class:`Settings` once, at construction
- Each stage is timed and recorded as a :class:`StepResult`
- Public entry points never raise; failures are reported on the result
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from smeprofile import backend, convert
from smeprofile.api import ApiService
from smeprofile.config import Settings
from smeprofile.detect import (
    OverallLanguage,
    detect_languages_in_form_data,
    get_text_fields_for_translation,
    overall_language,
)
from smeprofile.strategy import fetch_trends, to_sme_profile
from smeprofile.translate import TranslationResult, TranslationService


@dataclass
class ProcessingOptions:
    """Options for :meth:`FormDataProcessor.process_form_data`."""
    enable_translation: bool = True
    include_metadata: bool = True
    remove_empty_fields: bool = True
    strict_enums: bool = False

    def conversion_options(self) -> convert.ConversionOptions:
        return convert.ConversionOptions(
            include_metadata=self.include_metadata,
            remove_empty_fields=self.remove_empty_fields,
            strict_enums=self.strict_enums,
        )


@dataclass
class ProcessingMetadata:
    """Summary of one pipeline run. Times are in milliseconds."""
    submission_date: str
    detected_language: OverallLanguage = "en"
    translation_applied: bool = False
    translated_fields_count: int = 0
    total_processing_time: int = 0
    completion_rate: int = 0

    def to_dict(self) -> dict:
        return {
            "submissionDate": self.submission_date,
            "detectedLanguage": self.detected_language,
            "translationApplied": self.translation_applied,
            "translatedFieldsCount": self.translated_fields_count,
            "totalProcessingTime": self.total_processing_time,
            "completionRate": self.completion_rate,
        }


@dataclass
class StepResult:
    """Timing and a short outcome note for one pipeline stage."""
    name: str
    duration_ms: float = 0.0
    detail: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "durationMs": round(self.duration_ms, 3), "detail": self.detail}


@dataclass
class ProcessingResult:
    """Result of running the pipeline on one record.

    ``success`` reflects processing only. A failed backend submission leaves
    ``success`` True and sets ``backend_error``.
    """
    success: bool
    data: dict
    processing_metadata: ProcessingMetadata
    translations: list[TranslationResult] = field(default_factory=list)
    original_languages: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    steps: list[StepResult] = field(default_factory=list)
    ai_prompt: Optional[str] = None
    backend_response: Any = None
    backend_error: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize in the camelCase wire shape; unset optionals are omitted."""
        result = {
            "success": self.success,
            "data": self.data,
            "translations": [t.to_dict() for t in self.translations],
            "originalLanguages": dict(self.original_languages),
            "processingMetadata": self.processing_metadata.to_dict(),
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.errors:
            result["errors"] = list(self.errors)
        if self.ai_prompt is not None:
            result["aiPrompt"] = self.ai_prompt
        if self.backend_response is not None:
            result["backendResponse"] = self.backend_response
        if self.backend_error is not None:
            result["backendError"] = self.backend_error
        return result


@dataclass
class ValidationResult:
    is_valid: bool
    missing_fields: list[str]
    completion_rate: int

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "missingFields": list(self.missing_fields),
            "completionRate": self.completion_rate,
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@contextmanager
def _timed(steps: list[StepResult], name: str) -> Iterator[StepResult]:
    step = StepResult(name)
    start = time.perf_counter()
    try:
        yield step
    finally:
        step.duration_ms = (time.perf_counter() - start) * 1000
        steps.append(step)


class FormDataProcessor:
    """Run questionnaire records through detection, translation and conversion.

    Usage:
        processor = FormDataProcessor()
        result = await processor.process_form_data(raw_record)
        if result.success:
            print(processor.generate_ai_prompt(result.data))

    Args:
        translation_service: Service used for Sinhala fields (defaults to
            one built around :func:`create_provider`)
        api: Backend client (defaults to one built from ``settings``)
        settings: Runtime settings (defaults to ``Settings.from_env()``)
        logger: Telemetry sink (defaults to this module's logger)
    """

    def __init__(
        self,
        translation_service: TranslationService | None = None,
        api: ApiService | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self.logger = logger or logging.getLogger(__name__)
        self.translation_service = translation_service or TranslationService.from_settings(
            self.settings, logger=self.logger
        )
        self.api = api or ApiService.from_settings(self.settings)

    async def process_form_data(self, raw: Any, options: ProcessingOptions | None = None) -> ProcessingResult:
        """Run the full processing pipeline on a raw record.

        Args:
            raw: Questionnaire record, step-keyed or canonical
            options: Processing options (defaults to ProcessingOptions())

        Returns:
            ProcessingResult; on any failure ``success`` is False and
            ``errors`` holds the message
        """
        options = options or ProcessingOptions()
        start = time.perf_counter()
        steps: list[StepResult] = []

        try:
            with _timed(steps, "normalize") as step:
                form = convert.normalize_step_keys(raw)
                step.detail = f"{sum(1 for section in form.values() if section)} section(s) present"

            with _timed(steps, "detect") as step:
                languages = detect_languages_in_form_data(form)
                text_fields = get_text_fields_for_translation(form)
                detected = overall_language(f.language for f in text_fields)
                sinhala_count = sum(1 for f in text_fields if f.language == "si")
                step.detail = f"{len(text_fields)} text field(s), {sinhala_count} Sinhala, overall {detected}"
            self.logger.info("Detected language %s (%d Sinhala field(s))", detected, sinhala_count)

            translated = form
            translations: list[TranslationResult] = []
            with _timed(steps, "translate") as step:
                if not options.enable_translation:
                    step.detail = "disabled"
                elif not sinhala_count:
                    step.detail = "no Sinhala fields"
                else:
                    try:
                        translated, translations = await self.translation_service.translate_form_data(
                            form, text_fields
                        )
                        fallbacks = sum(1 for t in translations if t.used_fallback)
                        step.detail = f"{len(translations)} field(s) translated, {fallbacks} via fallback"
                    except Exception as e:
                        self.logger.warning("Translation failed, proceeding with original text: %s", e)
                        step.detail = f"failed: {e}"
            translation_applied = len(translations) > 0

            with _timed(steps, "convert") as step:
                processed = convert.convert_to_structured_json(translated, options.conversion_options())
                step.detail = f"sections: {', '.join(processed)}"

            metadata = processed.get("metadata")
            if isinstance(metadata, dict):
                metadata["language"] = detected
                metadata["translationApplied"] = translation_applied

            total = _elapsed_ms(start)
            result = ProcessingResult(
                success=True,
                data=processed,
                translations=translations,
                original_languages=languages,
                processing_metadata=ProcessingMetadata(
                    submission_date=_now_iso(),
                    detected_language=detected,
                    translation_applied=translation_applied,
                    translated_fields_count=len(translations),
                    total_processing_time=total,
                    completion_rate=convert.calculate_completion_rate(translated),
                ),
                steps=steps,
            )
            self.logger.info(
                "Processed form in %dms: language=%s translated=%d completion=%d%%",
                total, detected, len(translations), result.processing_metadata.completion_rate,
            )
            return result

        except Exception as e:
            self.logger.error("Form data processing failed: %s", e)
            return ProcessingResult(
                success=False,
                data={},
                processing_metadata=ProcessingMetadata(
                    submission_date=_now_iso(),
                    total_processing_time=_elapsed_ms(start),
                ),
                errors=[str(e) or type(e).__name__],
                steps=steps,
            )

    async def process_and_submit(self, raw: Any, options: ProcessingOptions | None = None) -> ProcessingResult:
        """Process ``raw``, build the AI prompt and submit to the backend.

        A processing failure is returned as-is and nothing is submitted. A
        backend failure is recorded in ``backend_error``; the processing
        result stays successful.
        """
        result = await self.process_form_data(raw, options)
        if not result.success:
            return result

        result.ai_prompt = self.generate_ai_prompt(result.data)

        start = time.perf_counter()
        try:
            result.backend_response = await self.send_to_backend(result.data)
            receipt = result.backend_response if isinstance(result.backend_response, dict) else {}
            detail = f"submitted as {receipt.get('id')}"
        except Exception as e:
            self.logger.warning("Backend submission failed: %s", e)
            result.backend_error = str(e) or type(e).__name__
            detail = f"failed: {result.backend_error}"
        result.steps.append(StepResult("submit", (time.perf_counter() - start) * 1000, detail))
        return result

    async def send_to_backend(self, processed: dict) -> Any:
        """Health-check the backend, then submit the payload once.

        Raises:
            BackendError: If either call fails
        """
        payload = self.to_backend_payload(processed)
        self.logger.info("Testing backend connection at %s", self.api.base_url)
        await self.api.test_connection()
        return await self.api.submit_form(payload)

    def validate_form_data(self, raw: Any) -> ValidationResult:
        """Check the required fields of a raw record without processing it."""
        form = convert.normalize_step_keys(raw)
        missing = convert.missing_required_fields(form)
        return ValidationResult(
            is_valid=not missing,
            missing_fields=missing,
            completion_rate=convert.calculate_completion_rate(form),
        )

    def generate_ai_prompt(self, processed: dict) -> str:
        return convert.generate_ai_prompt(processed)

    def export_as_json(self, processed: dict, filename: str | None = None) -> convert.ExportedJSON:
        return convert.export_as_json(processed, filename)

    def to_backend_payload(self, processed: dict) -> dict:
        return backend.to_backend_payload(processed)

    async def generate_strategy(self, processed: dict, trend_data: dict | None = None) -> dict:
        """Request a marketing strategy for a processed profile.

        Without ``trend_data``, live trend signals are fetched; empty signals
        are sent when the trend service does not answer.

        Raises:
            BackendError: If the strategy generator call fails
        """
        trends = trend_data if trend_data is not None else await fetch_trends(self.api)
        return await self.api.generate_strategy(to_sme_profile(processed), trends)
