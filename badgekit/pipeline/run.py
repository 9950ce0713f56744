from __future__ import annotations

import json
import logging
import shutil
import uuid
from typing import Any, Iterable, Optional

from sqlmodel import select

from ..engine.context import context_from_dict
from ..engine.pagination import PrintOptions, build_print_job
from ..engine.repository import load_template
from ..models import JobStatus, PrintJob, get_session, init_db
from ..storage import (
    StagedArtifacts,
    artifact_file,
    publish_staging,
    record_artifacts,
    staging_dir,
    write_error_log,
)
from .render_pdf import render_sheets
from .render_preview import render_preview

logger = logging.getLogger(__name__)


def submit_job(template_slug: str, context: Optional[dict] = None, options: Optional[dict] = None) -> PrintJob:
    """Queue a print job; rendering happens in ``run_jobs``."""
    init_db()
    print_options = PrintOptions.from_dict(options)
    job = PrintJob(
        job_key=f"job-{uuid.uuid4().hex[:12]}",
        template_slug=template_slug,
        format=print_options.format.value,
        copies=print_options.copies,
        options=json.dumps(print_options.to_dict()),
        context=json.dumps(context or {}, ensure_ascii=False),
    )
    with get_session() as session:
        session.add(job)
        session.commit()
        session.refresh(job)
    logger.info("Queued %s for %s (%s x %s)", job.job_key, template_slug, job.copies, job.format)
    return job


def process_job(job: PrintJob) -> tuple[StagedArtifacts, int]:
    temp_dir = staging_dir(job.job_key)
    try:
        template = load_template(job.template_slug)
        context: Any = context_from_dict(json.loads(job.context or "{}"))
        options = PrintOptions.from_dict(json.loads(job.options or "{}"))
        plan, groups = build_print_job(template, context, options)

        artifacts: StagedArtifacts = []
        plan_path = artifact_file(temp_dir, "plan")
        plan_path.write_text(json.dumps(plan.to_dict(), indent=2), encoding="utf-8")
        artifacts.append(("plan", plan_path))

        zones_path = artifact_file(temp_dir, "zones")
        # Every copy resolves identically from one context, so one group is enough.
        first = groups[0][1] if groups else []
        zones_path.write_text(
            json.dumps([zone.to_dict() for zone in first], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        artifacts.append(("zones", zones_path))

        pdf_path = artifact_file(temp_dir, "pdf")
        render_sheets(template, plan, groups, pdf_path, context=context)
        artifacts.append(("pdf", pdf_path))

        preview_path = render_preview(pdf_path, artifact_file(temp_dir, "preview"))
        artifacts.append(("preview", preview_path))
    except Exception:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise

    return publish_staging(temp_dir, job.job_key, artifacts), plan.page_count


def run_jobs(jobs: Iterable[PrintJob]) -> dict[str, list[str]]:
    init_db()
    results: dict[str, list[str]] = {"READY": [], "FAILED": []}
    with get_session() as session:
        for job in jobs:
            artifacts: StagedArtifacts = []
            try:
                artifacts, page_count = process_job(job)
                job.status = JobStatus.READY
                job.page_count = page_count
                job.fail_code = None
                job.fail_detail = None
            except LookupError as exc:
                logger.exception("Print job %s failed", job.job_key)
                job.status = JobStatus.FAILED
                job.fail_code = "NOT_FOUND"
                job.fail_detail = str(exc)
            except Exception as exc:
                logger.exception("Print job %s failed", job.job_key)
                job.status = JobStatus.FAILED
                job.fail_code = "EXPORT_ERROR"
                job.fail_detail = str(exc) or exc.__class__.__name__

            session.add(job)
            session.commit()
            session.refresh(job)

            if job.status == JobStatus.READY:
                record_artifacts(job, artifacts)
                results["READY"].append(job.job_key)
            else:
                write_error_log(job.job_key, f"{job.fail_code}: {job.fail_detail}")
                results["FAILED"].append(job.job_key)
    return results


def list_jobs(statuses: Iterable[JobStatus], template_slug: Optional[str] = None) -> List[PrintJob]:
    init_db()
    with get_session() as session:
        statement = select(PrintJob).where(PrintJob.status.in_(list(statuses)))
        if template_slug:
            statement = statement.where(PrintJob.template_slug == template_slug)
        return list(session.exec(statement.order_by(PrintJob.id)))
