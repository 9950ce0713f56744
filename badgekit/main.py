from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from . import config
from .engine.context import SAMPLE_RECORDS, context_from_dict
from .engine.editor import DragZone, EditorSession
from .engine.pagination import PageFormat, PrintOptions, plan as plan_print
from .engine.presets import blank_template, from_preset, list_presets
from .engine.renderer import RenderMode, render_background
from .engine.repository import import_template, list_templates, load_template, save_template
from .engine.schema import Template
from .models import JobStatus, reset_engine
from .pipeline.qa import check_template
from .pipeline.run import list_jobs, run_jobs, submit_job
from .storage import job_output_dir

app = typer.Typer(help="Badge and ticket template engine")

OUT_OPTION = typer.Option(None, "--out", help="Output directory")
DATA_OPTION = typer.Option(None, "--data", help="JSON file with event/attendee records")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _use_out(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


def _load(slug: str) -> Template:
    try:
        return load_template(slug)
    except LookupError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)


def _read_data(path: Optional[Path]) -> dict:
    if path is None:
        return SAMPLE_RECORDS
    if not path.exists():
        raise typer.BadParameter(f"Data file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _options(page_format: str, copies: int, per_page: Optional[int]) -> dict:
    try:
        PageFormat.parse(page_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    return {"format": page_format, "copies": copies, "badges_per_page": per_page}


def _dump(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def presets() -> None:
    for key in list_presets():
        typer.echo(key)


@app.command()
def new(
    preset: str = typer.Argument(..., help="Preset key"),
    name: Optional[str] = typer.Option(None, "--name", help="Template name"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    try:
        template = from_preset(preset, name=name)
    except LookupError as exc:
        raise typer.BadParameter(str(exc))
    saved = save_template(template)
    typer.echo(saved.id)


@app.command()
def blank(
    name: str = typer.Argument(..., help="Template name"),
    width: float = typer.Option(105.0, "--width", help="Width in mm"),
    height: float = typer.Option(148.0, "--height", help="Height in mm"),
    kind: str = typer.Option("badge", "--kind", help="badge or ticket"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    try:
        template = blank_template(name, width=width, height=height, kind=kind)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    typer.echo(save_template(template).id)


@app.command("import")
def import_(
    path: Path = typer.Argument(..., help="Template JSON file"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    saved = import_template(path)
    typer.echo(f"{saved.id} (version {saved.version})")


@app.command("list")
def list_(
    kind: Optional[str] = typer.Option(None, "--kind", help="Filter by kind"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    records = list_templates(kind)
    if not records:
        typer.echo("No templates")
        return
    for record in records:
        typer.echo(f"{record.slug}\t{record.kind}\tv{record.version}\t{record.name}")


@app.command()
def show(slug: str, out: Optional[Path] = OUT_OPTION) -> None:
    _use_out(out)
    _dump(_load(slug).to_dict())


@app.command()
def render(
    slug: str,
    data: Optional[Path] = DATA_OPTION,
    mode: RenderMode = typer.Option(RenderMode.PREVIEW, "--mode", help="edit or preview"),
    zoom: float = typer.Option(1.0, "--zoom", help="Zoom factor (0.5 - 2.0)"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    session = EditorSession(_load(slug), zoom=zoom)
    context = context_from_dict(_read_data(data))
    zones = session.render(context) if mode is RenderMode.EDIT else session.preview(context)
    _dump(
        {
            "factor": session.factor,
            "background": render_background(session.template, session.factor, context).to_dict(),
            "zones": [zone.to_dict() for zone in zones],
        }
    )


@app.command()
def drag(
    slug: str,
    zone: str,
    dx: float,
    dy: float,
    zoom: float = typer.Option(1.0, "--zoom", help="Zoom factor the pointer moved at"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    session = EditorSession(_load(slug), zoom=zoom)
    try:
        session.apply(DragZone(zone, dx, dy))
    except LookupError as exc:
        raise typer.BadParameter(str(exc))
    if not session.dirty:
        typer.echo("No change")
        return
    saved = session.save(save_template)
    _dump(saved.zone(zone).position.to_dict())


@app.command()
def check(slug: str, data: Optional[Path] = DATA_OPTION, out: Optional[Path] = OUT_OPTION) -> None:
    _use_out(out)
    issues = check_template(_load(slug), context_from_dict(_read_data(data)))
    if not issues:
        typer.echo("OK")
        return
    for issue in issues:
        typer.echo(issue)


@app.command()
def plan(
    slug: str,
    page_format: str = typer.Option("A4", "--format", help="A4, Letter, '85mm x 55mm' or credit-card"),
    copies: int = typer.Option(1, "--copies", help="Number of copies"),
    per_page: Optional[int] = typer.Option(None, "--per-page", help="Override badges per page"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    print_plan = plan_print(_load(slug), PrintOptions.from_dict(_options(page_format, copies, per_page)))
    summary = print_plan.to_dict()
    summary.pop("per_copy_offsets")
    _dump(summary)


@app.command()
def export(
    slug: str,
    data: Optional[Path] = DATA_OPTION,
    page_format: str = typer.Option("A4", "--format", help="A4, Letter, '85mm x 55mm' or credit-card"),
    copies: int = typer.Option(1, "--copies", help="Number of copies"),
    per_page: Optional[int] = typer.Option(None, "--per-page", help="Override badges per page"),
    out: Optional[Path] = OUT_OPTION,
) -> None:
    _use_out(out)
    _load(slug)
    job = submit_job(slug, _read_data(data), _options(page_format, copies, per_page))
    results = run_jobs([job])
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for job_key in results["READY"]:
        typer.echo(str(job_output_dir(job_key)))
    for job_key in results["FAILED"]:
        typer.echo(f"FAILED: {job_key}")


@app.command()
def retry(out: Optional[Path] = OUT_OPTION) -> None:
    _use_out(out)
    jobs = list_jobs([JobStatus.FAILED])
    if not jobs:
        typer.echo("No jobs to retry")
        return
    results = run_jobs(jobs)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")


if __name__ == "__main__":
    app()
