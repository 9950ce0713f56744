from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from badgekit import config
from badgekit.models import PrintJob, get_session, init_db, reset_engine
from badgekit.storage import (
    artifact_file,
    job_artifacts,
    job_output_dir,
    publish_staging,
    record_artifacts,
    staging_dir,
    write_error_log,
)


class StorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.out_dir = Path(self.temp_dir.name)
        config.set_out_dir(self.out_dir)
        reset_engine()
        init_db()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _job(self) -> PrintJob:
        job = PrintJob(job_key="job-abc", template_slug="staff", format="A4", copies=1)
        with get_session() as session:
            session.add(job)
            session.commit()
            session.refresh(job)
        return job

    def test_staging_is_cleared_between_runs(self) -> None:
        staging = staging_dir("job-abc")
        (staging / "leftover.txt").write_text("old", encoding="utf-8")
        staging = staging_dir("job-abc")
        self.assertEqual(staging, self.out_dir / "job-abc.tmp")
        self.assertEqual(list(staging.iterdir()), [])

    def test_publish_replaces_previous_output(self) -> None:
        write_error_log("job-abc", "EXPORT_ERROR: boom")
        staging = staging_dir("job-abc")
        pdf = artifact_file(staging, "pdf")
        pdf.write_bytes(b"%PDF")

        published = publish_staging(staging, "job-abc", [("pdf", pdf)])

        final_dir = job_output_dir("job-abc")
        self.assertEqual(published, [("pdf", final_dir / "sheets.pdf")])
        self.assertTrue((final_dir / "sheets.pdf").exists())
        self.assertFalse((final_dir / "error.log").exists())
        self.assertFalse(staging.exists())

    def test_recorded_artifacts_resolve_under_out_dir(self) -> None:
        job = self._job()
        preview = artifact_file(job_output_dir(job.job_key), "preview")
        record_artifacts(job, [("preview", preview)])
        self.assertEqual(job_artifacts(job), {"preview": self.out_dir / "job-abc" / "preview.png"})


if __name__ == "__main__":
    unittest.main()
