"""
Command-line interface for smeprofile.

Provides commands for:
- Processing questionnaire answers into a structured profile
- Validating required fields before submission
- Building the strategy prompt
- Submitting to the forms backend
- Requesting a marketing strategy
- Ad-hoc language detection and translation

Usage:
    smeprofile process answers.json --output profile.json
    smeprofile validate answers.json
    smeprofile submit answers.json
    smeprofile strategy answers.json --mock-trends
    smeprofile translate "අපි ආහාර සේවය කරමු"
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from smeprofile import __version__
from smeprofile.api import BackendError
from smeprofile.config import APP_NAME, Settings
from smeprofile.detect import contains_sinhala, detect_language
from smeprofile.pipeline import FormDataProcessor, ProcessingOptions, ProcessingResult
from smeprofile.strategy import mock_trend_data
from smeprofile.translate import TranslationService

app = typer.Typer(
    name=APP_NAME,
    help="smeprofile: bilingual intake pipeline for SME marketing profiles",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"smeprofile v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show pipeline progress logs",
    ),
):
    """smeprofile: process Sinhala/English SME questionnaires."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_record(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/] Could not read {path}: {e}")
        raise typer.Exit(1)


def _print_summary(result: ProcessingResult) -> None:
    meta = result.processing_metadata
    table = Table(title="Processing Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Detected language", meta.detected_language)
    table.add_row("Translation applied", "yes" if meta.translation_applied else "no")
    table.add_row("Translated fields", str(meta.translated_fields_count))
    table.add_row("Completion rate", f"{meta.completion_rate}%")
    table.add_row("Processing time", f"{meta.total_processing_time} ms")
    console.print(table)

    if result.translations:
        translations = Table(title="Translations")
        translations.add_column("Original")
        translations.add_column("Translated")
        translations.add_column("Provider", style="dim")
        for t in result.translations:
            translations.add_row(t.original_text, t.translated_text, t.provider)
        console.print(translations)


def _print_errors(result: ProcessingResult) -> None:
    console.print(f"[red]Processing failed with {len(result.errors)} error(s):[/]")
    for error in result.errors:
        console.print(f"  - {error}")


@app.command()
def process(
    input_file: Path = typer.Argument(..., help="Questionnaire answers (JSON)"),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write the exported profile JSON here",
    ),
    no_translate: bool = typer.Option(
        False, "--no-translate",
        help="Skip translation of Sinhala fields",
    ),
    keep_empty: bool = typer.Option(
        False, "--keep-empty",
        help="Keep empty fields in the output",
    ),
    strict: bool = typer.Option(
        False, "--strict",
        help="Fail on unrecognized enum answers",
    ),
    no_metadata: bool = typer.Option(
        False, "--no-metadata",
        help="Omit the metadata block",
    ),
):
    """Process questionnaire answers into a structured profile."""
    record = _load_record(input_file)
    options = ProcessingOptions(
        enable_translation=not no_translate,
        include_metadata=not no_metadata,
        remove_empty_fields=not keep_empty,
        strict_enums=strict,
    )
    processor = FormDataProcessor(settings=Settings.from_env())
    result = asyncio.run(processor.process_form_data(record, options))

    if not result.success:
        _print_errors(result)
        raise typer.Exit(1)

    _print_summary(result)

    if output_file:
        exported = processor.export_as_json(result.data, output_file.name)
        output_file.write_text(exported.json, encoding="utf-8")
        console.print(f"\n[green]Saved to:[/] {output_file}")
    else:
        console.print_json(data=result.data)


@app.command()
def validate(
    input_file: Path = typer.Argument(..., help="Questionnaire answers (JSON)"),
):
    """Check required fields without processing."""
    record = _load_record(input_file)
    validation = FormDataProcessor(settings=Settings.from_env()).validate_form_data(record)

    console.print(f"Completion rate: [bold]{validation.completion_rate}%[/]")
    if validation.is_valid:
        console.print("[green]✓[/] All required fields are present")
        return

    console.print(f"[yellow]Missing {len(validation.missing_fields)} required field(s):[/]")
    for path in validation.missing_fields:
        console.print(f"  - {path}")
    raise typer.Exit(1)


@app.command()
def prompt(
    input_file: Path = typer.Argument(..., help="Questionnaire answers (JSON)"),
    no_translate: bool = typer.Option(
        False, "--no-translate",
        help="Skip translation of Sinhala fields",
    ),
):
    """Print the strategy prompt for processed answers."""
    record = _load_record(input_file)
    processor = FormDataProcessor(settings=Settings.from_env())
    result = asyncio.run(
        processor.process_form_data(record, ProcessingOptions(enable_translation=not no_translate))
    )
    if not result.success:
        _print_errors(result)
        raise typer.Exit(1)
    console.print(processor.generate_ai_prompt(result.data), markup=False, highlight=False)


@app.command()
def submit(
    input_file: Path = typer.Argument(..., help="Questionnaire answers (JSON)"),
):
    """Process answers and submit them to the forms backend."""
    record = _load_record(input_file)
    processor = FormDataProcessor(settings=Settings.from_env())
    result = asyncio.run(processor.process_and_submit(record))

    if not result.success:
        _print_errors(result)
        raise typer.Exit(1)

    _print_summary(result)

    if result.backend_error:
        console.print(f"[red]Backend submission failed:[/] {result.backend_error}")
        raise typer.Exit(1)

    receipt = result.backend_response if isinstance(result.backend_response, dict) else {}
    console.print(
        f"\n[green]✓[/] Submitted as [cyan]{receipt.get('id')}[/] "
        f"(status: {receipt.get('status', 'unknown')})"
    )


@app.command()
def strategy(
    input_file: Path = typer.Argument(..., help="Questionnaire answers (JSON)"),
    mock_trends: bool = typer.Option(
        False, "--mock-trends",
        help="Use built-in sample trend signals instead of the trend service",
    ),
):
    """Process answers and request a marketing strategy."""
    record = _load_record(input_file)
    processor = FormDataProcessor(settings=Settings.from_env())
    result = asyncio.run(processor.process_form_data(record))
    if not result.success:
        _print_errors(result)
        raise typer.Exit(1)

    trend_data = mock_trend_data() if mock_trends else None
    try:
        generated = asyncio.run(processor.generate_strategy(result.data, trend_data))
    except BackendError as e:
        console.print(f"[red]Strategy generation failed:[/] {e}")
        raise typer.Exit(1)
    console.print_json(data=generated)


@app.command()
def detect(
    text: str = typer.Argument(..., help="Text to classify"),
):
    """Detect whether text is Sinhala or English."""
    language = detect_language(text)
    console.print(f"Language: [bold]{language}[/]")
    if language == "en" and contains_sinhala(text):
        console.print("[dim]Contains some Sinhala characters, below the detection threshold[/]")


@app.command()
def translate(
    text: str = typer.Argument(..., help="Text to translate"),
    source_lang: str = typer.Option(
        "si", "--source", "-s",
        help="Source language code",
    ),
    target_lang: str = typer.Option(
        "en", "--target", "-t",
        help="Target language code",
    ),
):
    """Translate a single text with the configured provider."""
    settings = Settings.from_env()
    service = TranslationService.from_settings(settings)
    result = asyncio.run(service.translate_text(text, source_lang, target_lang))

    console.print(result.translated_text, markup=False, highlight=False)
    style = "yellow" if result.used_fallback else "dim"
    console.print(f"[{style}]Provider: {result.provider}[/]")


@app.command()
def config():
    """Show the effective settings (API key masked)."""
    settings = Settings.from_env()

    table = Table(title="smeprofile Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.to_dict().items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)
    console.print("\n[dim]Priority: Google API key > LibreTranslate > offline dictionary[/]")
