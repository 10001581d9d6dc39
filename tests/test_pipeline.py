"""
End-to-end tests for the form processing pipeline.

The translation service runs the offline dictionary with no delay and the
backend client is a mock, so nothing touches the network.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from smeprofile.api import BackendError
from smeprofile.detect import contains_sinhala
from smeprofile.pipeline import FormDataProcessor, ProcessingOptions, ValidationResult
from smeprofile.strategy import mock_trend_data
from smeprofile.translate import DictionaryProvider, TranslationService
from smeprofile.translate.base import TranslationProvider


class ExplodingService(TranslationService):
    """Translation service whose form translation always raises."""

    def __init__(self):
        super().__init__(DictionaryProvider(delay=0))

    async def translate_form_data(self, form_data, text_fields):
        raise RuntimeError("translator crashed")


@pytest.fixture
def api():
    api = Mock()
    api.base_url = "http://backend.local"
    api.test_connection = AsyncMock(return_value={"status": "healthy", "database": "connected"})
    api.submit_form = AsyncMock(return_value={"id": "sub-1", "status": "pending"})
    api.get_trends = AsyncMock(return_value={"signals": []})
    api.generate_strategy = AsyncMock(return_value={"success": True, "strategy": {}})
    return api


@pytest.fixture
def processor(offline_service, api, settings):
    return FormDataProcessor(translation_service=offline_service, api=api, settings=settings)


class TestProcessFormData:
    """Test the processing pipeline."""

    def test_english_record(self, processor, english_record):
        """Test processing an English record."""
        result = asyncio.run(processor.process_form_data(english_record))

        assert result.success
        assert result.errors == []
        assert result.translations == []
        meta = result.processing_metadata
        assert meta.detected_language == "en"
        assert not meta.translation_applied
        assert meta.translated_fields_count == 0
        assert meta.completion_rate == 100
        assert result.data["metadata"]["language"] == "en"

    def test_sinhala_field_translated(self, processor, sinhala_record):
        """Test a Sinhala field is translated."""
        result = asyncio.run(processor.process_form_data(sinhala_record))

        assert result.success
        assert result.data["businessProfile"]["productsServices"] == "we food service do"
        assert result.original_languages["businessProfile.productsServices"] == "si"
        assert result.original_languages["businessProfile.industry"] == "en"
        assert len(result.translations) == 1
        assert result.translations[0].provider == "Offline Dictionary"

        meta = result.processing_metadata
        assert meta.detected_language == "mixed"
        assert meta.translation_applied
        assert meta.translated_fields_count == 1
        assert result.data["metadata"]["language"] == "mixed"
        assert result.data["metadata"]["translationApplied"] is True

    def test_sinhala_only_record(self, processor):
        """Test a record with only Sinhala text."""
        record = {"businessprofile": {"productsServices": "අපි ආහාර සේවය කරමු"}}
        result = asyncio.run(processor.process_form_data(record))

        assert result.success
        assert result.processing_metadata.detected_language == "si"
        assert result.processing_metadata.translation_applied
        translated = result.data["businessProfile"]["productsServices"]
        assert not contains_sinhala(translated)

    def test_input_not_mutated(self, processor, sinhala_record):
        """Test the input record is not modified."""
        original = sinhala_record["businessprofile"]["productsServices"]
        asyncio.run(processor.process_form_data(sinhala_record))
        assert sinhala_record["businessprofile"]["productsServices"] == original

    def test_translation_disabled(self, processor, sinhala_record):
        """Test processing with translation disabled."""
        result = asyncio.run(processor.process_form_data(sinhala_record, ProcessingOptions(enable_translation=False)))

        assert result.success
        assert result.data["businessProfile"]["productsServices"] == sinhala_record["businessprofile"]["productsServices"]
        assert result.processing_metadata.detected_language == "mixed"
        assert not result.processing_metadata.translation_applied

    def test_failing_provider_uses_fallback(self, api, settings, sinhala_record):
        """Test a failing provider is replaced by the dictionary."""
        class Down(TranslationProvider):
            @property
            def name(self):
                return "Google Translate"

            async def translate(self, text, source="si", target="en"):
                raise ConnectionError("offline")

        service = TranslationService(Down(), fallback_factory=lambda: DictionaryProvider(delay=0))
        processor = FormDataProcessor(translation_service=service, api=api, settings=settings)
        result = asyncio.run(processor.process_form_data(sinhala_record))

        assert result.success
        assert result.translations[0].provider == "Google Translate (Fallback)"
        assert result.data["businessProfile"]["productsServices"] == "we food service do"

    def test_translation_crash_keeps_original_text(self, api, settings, sinhala_record):
        """Test a crashed translation stage keeps the original text."""
        processor = FormDataProcessor(translation_service=ExplodingService(), api=api, settings=settings)
        result = asyncio.run(processor.process_form_data(sinhala_record))

        assert result.success
        assert not result.processing_metadata.translation_applied
        assert result.data["businessProfile"]["productsServices"] == sinhala_record["businessprofile"]["productsServices"]

    def test_strict_enum_failure_is_reported(self, processor, english_record):
        """Test strict enum failures are reported on the result."""
        english_record["businessprofile"]["businessSize"] = "enormous"
        result = asyncio.run(processor.process_form_data(english_record, ProcessingOptions(strict_enums=True)))

        assert not result.success
        assert result.data == {}
        assert "businessSize" in result.errors[0]
        assert result.processing_metadata.completion_rate == 0
        assert result.processing_metadata.detected_language == "en"

    def test_steps_recorded(self, processor, sinhala_record):
        """Test each stage is timed."""
        result = asyncio.run(processor.process_form_data(sinhala_record))
        assert [step.name for step in result.steps] == ["normalize", "detect", "translate", "convert"]
        assert all(step.duration_ms >= 0 for step in result.steps)

    def test_to_dict_wire_shape(self, processor, sinhala_record):
        """Test result serialization."""
        wire = asyncio.run(processor.process_form_data(sinhala_record)).to_dict()

        assert wire["success"] is True
        assert wire["processingMetadata"]["translatedFieldsCount"] == 1
        assert wire["translations"][0]["originalText"] == sinhala_record["businessprofile"]["productsServices"]
        assert "errors" not in wire
        assert "backendError" not in wire


class TestProcessAndSubmit:
    """Test processing followed by backend submission."""

    def test_successful_submission(self, processor, api, english_record):
        """Test processing and submitting a record."""
        result = asyncio.run(processor.process_and_submit(english_record))

        assert result.success
        assert result.backend_response == {"id": "sub-1", "status": "pending"}
        assert result.backend_error is None
        assert result.ai_prompt.startswith("Business Overview:")
        api.test_connection.assert_awaited_once()
        payload = api.submit_form.await_args.args[0]
        assert payload["business_profile"]["business_size"] == "small"
        assert result.steps[-1].name == "submit"

    def test_backend_failure_is_partial(self, processor, api, english_record):
        """Test a backend failure keeps the processing result."""
        api.test_connection.side_effect = BackendError("Health check failed (503): down", 503)

        result = asyncio.run(processor.process_and_submit(english_record))

        assert result.success
        assert "503" in result.backend_error
        assert result.ai_prompt
        api.submit_form.assert_not_awaited()
        assert result.to_dict()["backendError"] == result.backend_error

    def test_non_object_receipt_is_not_an_error(self, processor, api, english_record):
        """Test a non-object receipt still counts as submitted."""
        api.submit_form.return_value = ["sub-1"]

        result = asyncio.run(processor.process_and_submit(english_record))

        assert result.backend_error is None
        assert result.backend_response == ["sub-1"]
        assert result.steps[-1].detail == "submitted as None"

    def test_processing_failure_skips_submission(self, processor, api, english_record):
        """Test nothing is submitted when processing fails."""
        english_record["businessprofile"]["businessSize"] = "enormous"

        result = asyncio.run(processor.process_and_submit(english_record, ProcessingOptions(strict_enums=True)))

        assert not result.success
        assert result.ai_prompt is None
        api.test_connection.assert_not_awaited()
        api.submit_form.assert_not_awaited()


class TestValidateFormData:
    """Test the synchronous pre-submission check."""

    def test_empty_record(self, processor):
        """Test validating an empty record."""
        validation = processor.validate_form_data({})
        assert validation == ValidationResult(is_valid=False, missing_fields=validation.missing_fields, completion_rate=0)
        assert len(validation.missing_fields) == 7

    def test_complete_record(self, processor, english_record):
        """Test validating a complete record."""
        validation = processor.validate_form_data(english_record)
        assert validation.is_valid
        assert validation.missing_fields == []
        assert validation.completion_rate == 100

    def test_partial_record(self, processor, english_record):
        """Test validating a record without a budget."""
        del english_record["budgetresources"]
        validation = processor.validate_form_data(english_record)
        assert not validation.is_valid
        assert validation.missing_fields == ["budgetResources.monthlyBudget"]
        assert validation.completion_rate == 86
        assert validation.to_dict()["missingFields"] == ["budgetResources.monthlyBudget"]


class TestDelegates:
    """Test prompt, export, payload and strategy helpers."""

    def test_export_and_payload(self, processor, english_record):
        """Test export and payload delegates."""
        data = asyncio.run(processor.process_form_data(english_record)).data
        assert processor.export_as_json(data, "out.json").filename == "out.json"
        assert processor.to_backend_payload(data)["submission_source"] == "web_form"

    def test_generate_strategy(self, processor, api, english_record):
        """Test requesting a strategy with live trends."""
        data = asyncio.run(processor.process_form_data(english_record)).data

        assert asyncio.run(processor.generate_strategy(data)) == {"success": True, "strategy": {}}
        profile, trends = api.generate_strategy.await_args.args
        assert profile["industry"] == "Food & Beverage"
        assert trends == {"signals": []}

    def test_generate_strategy_with_given_trends(self, processor, api, english_record):
        """Test requesting a strategy with supplied trends."""
        data = asyncio.run(processor.process_form_data(english_record)).data

        asyncio.run(processor.generate_strategy(data, mock_trend_data()))

        api.get_trends.assert_not_awaited()
        _, trends = api.generate_strategy.await_args.args
        assert trends == mock_trend_data()
