"""Command line helpers for catalog maintenance and the animation core."""
from __future__ import annotations

import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any, List, Optional

import structlog
import typer
import yaml

from anim_guard.choreography import validate_choreography
from anim_guard.evaluate import evaluate_sequence
from anim_guard.models import ChoreographyOverrides
from anim_guard.recommend import recommend_choreography
from anim_plan.planner import plan_sequence
from anim_scene.analyzer import analyze_scene, enrich_scene

from .errors import AnimaticError
from .loader import file_sha256, load_catalog_version, load_registry
from .validators import validate_registry

app = typer.Typer(help="Animatic core utilities")
catalog_app = typer.Typer(help="Reference catalog commands")
scene_app = typer.Typer(help="Scene analysis commands")
sequence_app = typer.Typer(help="Sequence planning commands")
choreography_app = typer.Typer(help="Choreography guardrail commands")
app.add_typer(catalog_app, name="catalog")
app.add_typer(scene_app, name="scene")
app.add_typer(sequence_app, name="sequence")
app.add_typer(choreography_app, name="choreography")

logger = structlog.get_logger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Emit info-level structured logs on stderr"),
) -> None:
    """Route structured logs to stderr so command output stays parseable."""

    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_document(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@catalog_app.command("validate")
def catalog_validate() -> None:
    """Validate the reference catalog and report the result."""

    try:
        registry = load_registry()
        warnings = validate_registry(registry)
    except Exception as exc:  # noqa: BLE001 - broad to surface validation issues
        typer.echo("Catalog validation failed:")
        typer.echo(str(exc))
        logger.info("cli.catalog.validate.failed", error=str(exc))
        raise typer.Exit(code=1) from exc

    for warning in warnings:
        typer.echo(f"- {warning}")
    logger.info("cli.catalog.validate.ok", version=registry.version, warnings=len(warnings))
    typer.echo("Catalog OK")


@catalog_app.command("stats")
def catalog_stats() -> None:
    """Print descriptive statistics about the catalog."""

    registry = load_registry()
    categories: Counter[str] = Counter(entry.category for entry in registry.primitives().values())
    typer.echo(f"version: {load_catalog_version()}")
    typer.echo(f"primitives: {len(registry.primitives())}")
    for category, count in sorted(categories.items()):
        typer.echo(f"primitives[{category}]: {count}")
    typer.echo(f"styles: {len(registry.styles())}")
    typer.echo(f"style packs: {len(registry.style_packs())}")
    typer.echo(f"intents: {len(registry.intents())}")
    typer.echo(f"amplitudes: {len(registry.guardrails.primitive_amplitudes)}")


@scene_app.command("analyze")
def scene_analyze(
    path: Path = typer.Argument(..., exists=True, readable=True, help="Scene JSON or YAML file"),
    enrich: bool = typer.Option(False, "--enrich", help="Print the enriched scene instead of the analysis"),
) -> None:
    """Classify a scene and print its metadata with confidences."""

    registry = load_registry()
    try:
        document = _read_document(path)
        if enrich:
            payload = enrich_scene(document, registry).model_dump(mode="json")
        else:
            payload = analyze_scene(document, registry).to_dict()
    except AnimaticError as exc:
        typer.echo(f"Scene analysis failed: {exc}")
        raise typer.Exit(code=1) from exc
    logger.info("cli.scene.analyzed", path=str(path), sha256=file_sha256(path))
    _echo_json(payload)


@sequence_app.command("plan")
def sequence_plan(
    paths: List[Path] = typer.Argument(..., exists=True, readable=True, help="Scene files in any order"),
    style: str = typer.Option("prestige", "--style", help="Style pack name"),
    analyze: bool = typer.Option(False, "--analyze", help="Analyze scenes that lack metadata first"),
    sequence_id: Optional[str] = typer.Option(None, "--sequence-id"),
) -> None:
    """Plan a sequence manifest from scene files."""

    registry = load_registry()
    try:
        scenes = [_read_document(path) for path in paths]
        if analyze:
            scenes = [enrich_scene(scene, registry) for scene in scenes]
        plan = plan_sequence(scenes, style, registry, sequence_id=sequence_id)
    except AnimaticError as exc:
        typer.echo(f"Sequence planning failed: {exc}")
        raise typer.Exit(code=1) from exc
    _echo_json(plan.model_dump(mode="json"))


@sequence_app.command("evaluate")
def sequence_evaluate(
    path: Path = typer.Argument(..., exists=True, readable=True, help="Plan or manifest JSON/YAML file"),
    scenes: Optional[List[Path]] = typer.Option(None, "--scenes", exists=True, readable=True, help="Analyzed scene files"),
    style: Optional[str] = typer.Option(None, "--style", help="Style pack to score against"),
    min_score: Optional[int] = typer.Option(None, "--min-score", help="Exit 1 when the overall score is lower"),
) -> None:
    """Score a planned sequence on pacing, variety, flow and adherence."""

    registry = load_registry()
    try:
        document = _read_document(path)
        if isinstance(document, dict) and "manifest" in document:
            document = document["manifest"]
        analyzed = [_read_document(scene) for scene in scenes or []]
        result = evaluate_sequence(document, analyzed or None, style, registry)
    except AnimaticError as exc:
        typer.echo(f"Sequence evaluation failed: {exc}")
        raise typer.Exit(code=1) from exc
    _echo_json(result.model_dump(mode="json"))
    if min_score is not None and result.score < min_score:
        raise typer.Exit(code=1)


@choreography_app.command("validate")
def choreography_validate(
    primitive_ids: List[str] = typer.Argument(..., help="Primitive ids to validate"),
    style: str = typer.Option(..., "--style", help="Target personality slug"),
    intent: Optional[str] = typer.Option(None, "--intent"),
    perspective: Optional[float] = typer.Option(None, "--perspective"),
    max_blur: Optional[float] = typer.Option(None, "--max-blur"),
    duration_multiplier: float = typer.Option(1.0, "--duration-multiplier"),
) -> None:
    """Run the choreography guardrails; exit 1 on BLOCK."""

    registry = load_registry()
    try:
        overrides = ChoreographyOverrides(
            perspective=perspective,
            max_blur=max_blur,
            duration_multiplier=duration_multiplier,
        )
        verdict = validate_choreography(primitive_ids, style, registry, intent=intent, overrides=overrides)
    except ValueError as exc:
        typer.echo(f"Choreography validation failed: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(f"verdict: {verdict.verdict}")
    for label, findings in (("blocks", verdict.blocks), ("warnings", verdict.warnings), ("notes", verdict.notes)):
        if findings:
            typer.echo(f"-- {label} --")
            for finding in findings:
                typer.echo(f"- [{finding.code}] {finding.message}")
    if verdict.verdict == "BLOCK":
        raise typer.Exit(code=1)


@choreography_app.command("recommend")
def choreography_recommend(
    intent: str = typer.Argument(..., help="Intent slug"),
    style: Optional[str] = typer.Option(None, "--style"),
    subject_count: Optional[int] = typer.Option(None, "--subjects"),
) -> None:
    """Print recommended primitives and camera behaviour for an intent."""

    registry = load_registry()
    try:
        recommendation = recommend_choreography(intent, registry, style=style, subject_count=subject_count)
    except AnimaticError as exc:
        typer.echo(f"Recommendation failed: {exc}")
        raise typer.Exit(code=1) from exc
    _echo_json(recommendation.to_dict())


if __name__ == "__main__":  # pragma: no cover - manual invocation
    app()
