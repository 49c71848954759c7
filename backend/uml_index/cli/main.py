"""CLI entrypoint for UML Index."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Optional

import typer

from uml_index import dependencies as deps
from uml_index.core.errors import UmlIndexError
from uml_index.core.metrics import metrics_text
from uml_index.ingest.loaders import load_content
from uml_index.models.entities import DiagramRecord

app = typer.Typer(name="umlidx", help="Index PlantUML diagrams embedded in text sources")


def _record_summary(record: DiagramRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "origin": record.origin,
        "diagram_type": record.diagram_type.value,
        "source_sha256": record.source_sha256,
        "created_at": record.created_at,
    }


@app.command()
def index(
    origin: str = typer.Argument(..., help="Origin identifier, e.g. a repository file URL"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read content from this file instead of the origin"),
    show_metrics: bool = typer.Option(False, "--metrics", help="Print Prometheus metrics after the run"),
) -> None:
    """Re-index every diagram found in ORIGIN."""
    settings = deps.get_app_settings()
    try:
        content = load_content(origin, path=file, timeout=settings.fetch_timeout)
        result = deps.get_synchronizer().process(origin, content)
    except UmlIndexError as exc:
        typer.echo(f"Indexing failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result.to_dict(), indent=2))
    if show_metrics:
        typer.echo(metrics_text())


@app.command()
def search(
    q: str = typer.Argument(..., help="Query text"),
    limit: int = typer.Option(10, "--limit", help="Number of results to return"),
) -> None:
    """Full-text search over indexed diagram sources."""
    try:
        search_index = deps.open_search_index()
        try:
            hits = search_index.search(q, limit=limit)
        finally:
            search_index.close()
        records = deps.get_record_store().get_many([int(hit.key) for hit in hits if hit.key.isdigit()])
    except UmlIndexError as exc:
        typer.echo(f"Search failed: {exc}", err=True)
        raise typer.Exit(code=1)
    results = []
    for hit in hits:
        record = records.get(int(hit.key)) if hit.key.isdigit() else None
        item: dict[str, object] = {"key": hit.key, "score": hit.score, "source": hit.document}
        if record is not None:
            item.update(_record_summary(record))
        results.append(item)
    typer.echo(json.dumps(results, indent=2))


@app.command()
def records(origin: str = typer.Argument(..., help="Origin identifier")) -> None:
    """List the records stored for ORIGIN."""
    try:
        found = deps.get_record_store().find_by_origin(origin)
    except UmlIndexError as exc:
        typer.echo(f"Listing failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps([_record_summary(record) for record in found], indent=2))


@app.command()
def export(
    record_id: int = typer.Argument(..., help="Record identifier"),
    out_dir: Path = typer.Argument(..., help="Directory to write the files to"),
) -> None:
    """Write the stored source and renderings of a record to OUT_DIR."""
    try:
        record = deps.get_record_store().get(record_id)
    except UmlIndexError as exc:
        typer.echo(f"Export failed: {exc}", err=True)
        raise typer.Exit(code=1)
    if record is None:
        typer.echo(f"No record with id {record_id}", err=True)
        raise typer.Exit(code=1)
    out_dir = out_dir.expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = f"uml-{record_id}"
    (out_dir / f"{stem}.puml").write_text(record.source, encoding="utf-8")
    (out_dir / f"{stem}.svg").write_text(record.svg, encoding="utf-8")
    (out_dir / f"{stem}.png").write_bytes(base64.b64decode(record.png_base64))
    (out_dir / f"{stem}.txt").write_text(record.ascii, encoding="utf-8")
    typer.echo(json.dumps({"status": "ok", "files": sorted(p.name for p in out_dir.glob(f"{stem}.*"))}))


if __name__ == "__main__":
    app()
