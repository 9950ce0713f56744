"""
Where print job output lives on disk.

A job renders into a staging directory next to its output directory. The
staging directory replaces the output directory only once every artifact is
written, so a job folder never holds a half-finished export. A failed job
keeps just its error log.
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from sqlmodel import select

from . import config
from .models import Artifact, PrintJob, get_session


ARTIFACT_FILES = {
    "pdf": "sheets.pdf",
    "preview": "preview.png",
    "plan": "plan.json",
    "zones": "zones.json",
    "error": "error.log",
}

StagedArtifacts = List[Tuple[str, Path]]


def job_output_dir(job_key: str) -> Path:
    return config.OUT_DIR / job_key


def staging_dir(job_key: str) -> Path:
    """Return an empty staging directory for a job, clearing any leftover run."""
    path = config.OUT_DIR / f"{job_key}.tmp"
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_file(directory: Path, kind: str) -> Path:
    return directory / ARTIFACT_FILES[kind]


def publish_staging(staging: Path, job_key: str, staged: StagedArtifacts) -> StagedArtifacts:
    """Swap the staging directory in as the job's output and remap the paths."""
    final_dir = job_output_dir(job_key)
    if final_dir.exists():
        shutil.rmtree(final_dir)
    staging.replace(final_dir)
    return [(kind, final_dir / path.relative_to(staging)) for kind, path in staged]


def write_error_log(job_key: str, message: str) -> Path:
    directory = job_output_dir(job_key)
    directory.mkdir(parents=True, exist_ok=True)
    path = artifact_file(directory, "error")
    path.write_text(message, encoding="utf-8")
    return path


def record_artifacts(job: PrintJob, artifacts: Iterable[Tuple[str, Path]]) -> None:
    # Paths are stored relative to OUT_DIR so an output folder can be moved.
    with get_session() as session:
        for kind, path in artifacts:
            session.add(
                Artifact(
                    job_id=job.id,
                    type=kind,
                    path=str(path.relative_to(config.OUT_DIR)),
                )
            )
        session.commit()


def job_artifacts(job: PrintJob) -> Dict[str, Path]:
    with get_session() as session:
        rows = session.exec(select(Artifact).where(Artifact.job_id == job.id)).all()
    return {row.type: config.OUT_DIR / row.path for row in rows}
