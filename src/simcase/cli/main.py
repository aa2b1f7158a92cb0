"""CLI for simcase: structure / generate / map-parameters commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from simcase.core.config import AppSettings, GenerationConfig, ObservabilityConfig
from simcase.hooks import setup_logging
from simcase.models import Category, StructuredDocument
from simcase.parameters.models import CaseParameters, LearningObjective, ParameterQuestion
from simcase.services.case_service import CaseGenerationOutcome, CaseGenerationService

app = typer.Typer(name="simcase", help="Simulation case generation and structuring")
console = Console()


def _build_settings(
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    test_mode: bool = False,
) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    overrides: dict = {}
    if model:
        overrides["model"] = model
    if api_key:
        overrides["api_key"] = api_key
    if test_mode:
        overrides["test_mode"] = True
    return AppSettings(generation=GenerationConfig(**overrides))


def _configure_logging(verbose: bool) -> None:
    setup_logging(ObservabilityConfig(log_level="DEBUG" if verbose else "WARNING"))


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e}") from e


def _load_list(path: Path) -> list:
    raw = _load_json(path)
    if isinstance(raw, dict) and isinstance(raw.get("questions"), list):
        return raw["questions"]
    if isinstance(raw, list):
        return raw
    raise typer.BadParameter(f"Expected JSON array in {path}")


def _print_document(doc: StructuredDocument) -> None:
    console.print(f"\n[bold]{doc.title}[/bold]")
    if doc.overview.summary:
        console.print(doc.overview.summary)

    table = Table(title="Structured Sections")
    table.add_column("Bucket", style="cyan")
    table.add_column("Typed fields", style="green")
    table.add_column("Dynamic sections", justify="right")

    patient = doc.background.patient
    findings = doc.findings
    instruction = doc.instruction
    typed = {
        Category.OVERVIEW: f"{len(doc.overview.learning_objectives)} objectives",
        Category.BACKGROUND: f"{patient.populated_fields()} patient fields",
        Category.FINDINGS: (
            f"{len(findings.vital_signs)} vitals, {len(findings.physical_exam)} exam, "
            f"{len(findings.lab_results)} labs, {len(findings.clinical_notes)} notes"
        ),
        Category.CARE_PLAN: f"{len(doc.care_plan.progression_scenarios)} scenarios",
        Category.INSTRUCTION: (
            f"{len(instruction.teaching_points)} teaching, "
            f"{len(instruction.debrief_questions)} debrief questions"
        ),
    }
    for category in Category:
        table.add_row(category.value, typed[category], str(len(doc.bucket(category).dynamic_sections)))
    console.print(table)

    abnormal = [v for v in findings.vital_signs if v.is_abnormal]
    if abnormal:
        console.print(
            "[yellow]Abnormal vitals:[/yellow] "
            + ", ".join(f"{v.name} {v.value}{(' ' + v.unit) if v.unit else ''}" for v in abnormal)
        )


def _write_or_print(payload: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(payload, encoding="utf-8")
        console.print(f"[green]Saved to {output}[/green]")
    else:
        console.print_json(payload)


@app.command()
def structure(
    case_file: Path = typer.Argument(..., help="Markdown or text file with a generated case"),
    title: str = typer.Option("", help="Case title; derived from the text when empty"),
    output: Optional[Path] = typer.Option(None, help="Output path for the structured JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Structure a generated case into five topical sections."""
    _configure_logging(verbose)
    service = CaseGenerationService(_build_settings())

    console.print(f"[bold]Loading case from {case_file}[/bold]")
    doc = service.structure(case_file.read_text(encoding="utf-8"), title)

    _print_document(doc)
    if output:
        _write_or_print(doc.model_dump_json(indent=2), output)


@app.command()
def generate(
    params_file: Path = typer.Argument(..., help="JSON file with case parameters"),
    title: Optional[str] = typer.Option(None, help="Override the generated title"),
    output: Optional[Path] = typer.Option(None, help="Output path for the outcome JSON"),
    model: Optional[str] = typer.Option(None, "--model", help="LiteLLM model id"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Provider API key"),
    test_mode: bool = typer.Option(False, "--test-mode", help="Skip the upstream call"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Fail instead of using the fallback case"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Generate a case from parameters and structure it."""
    _configure_logging(verbose)
    service = CaseGenerationService(_build_settings(model, api_key, test_mode))
    params = CaseParameters.model_validate(_load_json(params_file))

    async def _run() -> CaseGenerationOutcome:
        return await service.generate_case(params, title=title, allow_fallback=not no_fallback)

    with console.status("Generating case..."):
        outcome = asyncio.run(_run())

    if outcome.degraded:
        console.print(f"[yellow]{outcome.user_message}[/yellow] Showing a fallback case.")
    else:
        console.print(f"Generated by {outcome.provider} ({outcome.model})")
    _print_document(outcome.document)
    if output:
        _write_or_print(outcome.model_dump_json(indent=2), output)


@app.command("map-parameters")
def map_parameters(
    questions_file: Path = typer.Argument(..., help="JSON file with parameter questions"),
    selections_file: Path = typer.Argument(..., help="JSON object of question id -> option id"),
    objectives_file: Optional[Path] = typer.Option(None, "--objectives", help="JSON file with learning objectives"),
    output: Optional[Path] = typer.Option(None, help="Output path for case parameters JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Map parameter selections to case parameters and vital-sign ranges."""
    _configure_logging(verbose)
    service = CaseGenerationService(_build_settings())

    questions = [ParameterQuestion.model_validate(q) for q in _load_list(questions_file)]
    selections = _load_json(selections_file)
    if not isinstance(selections, dict):
        raise typer.BadParameter(f"Expected JSON object in {selections_file}")
    objectives = []
    if objectives_file:
        objectives = [LearningObjective.model_validate(o) for o in _load_list(objectives_file)]

    params = service.map_parameters(questions, {str(k): str(v) for k, v in selections.items()}, objectives)

    vitals = params.recommended_vital_signs
    table = Table(title="Recommended Vital Signs")
    table.add_column("Vital", style="cyan")
    table.add_column("Range", style="green")
    table.add_row("Heart Rate", f"{vitals.heart_rate.describe()} bpm")
    table.add_row("Respiratory Rate", f"{vitals.respiratory_rate.describe()} /min")
    table.add_row("Blood Pressure", f"{vitals.blood_pressure.describe()} mmHg")
    table.add_row("Temperature", f"{vitals.temperature.describe()} °C")
    table.add_row("Oxygen Saturation", f"{vitals.oxygen_saturation.describe()} %")
    table.add_row("Consciousness", vitals.consciousness)
    console.print(table)

    _write_or_print(params.model_dump_json(indent=2), output)


if __name__ == "__main__":
    app()
