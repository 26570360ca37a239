"""Bounded-parallel batch composition with partial-failure aggregation."""

import json
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Optional

import yaml
from pydantic import BaseModel, Field

from cortexops.common.exceptions import CompositionError
from cortexops.common.models import ProjectArtifact
from cortexops.composer.builder import ProjectBuilder

logger = logging.getLogger(__name__)


class BatchJob(BaseModel):
    """One (selection, environment) pair to compose."""

    name: str
    roles: list[str]
    environment: str = "production"


class BatchError(BaseModel):
    job: str
    error: str
    error_code: Optional[int] = None


class BatchReport(BaseModel):
    """Aggregated outcome of a batch run."""

    succeeded: int = 0
    failed: int = 0
    errors: list[BatchError] = Field(default_factory=list)
    projects: dict[str, ProjectArtifact] = Field(default_factory=dict)


def load_jobs(path: Path, default_environment: str = "production") -> list[BatchJob]:
    """Load jobs from a YAML or JSON file.

    The file holds a list of ``{name, roles, environment}`` mappings, either
    at the top level or under a ``jobs`` key. Missing names default to
    ``job-<n>``, missing environments to ``default_environment``.
    """
    path = Path(path)
    text = path.read_text()
    data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    if isinstance(data, dict):
        data = data.get("jobs", [])
    if not isinstance(data, list):
        raise ValueError(f"Batch file {path} must contain a list of jobs")

    jobs = []
    for index, entry in enumerate(data, start=1):
        entry = dict(entry)
        entry.setdefault("name", f"job-{index}")
        entry.setdefault("environment", default_environment)
        jobs.append(BatchJob(**entry))
    return jobs


class BatchRunner:
    """Runs many compositions on a bounded thread pool.

    Every job is independent and pure, so jobs share the builder freely.
    """

    def __init__(
        self,
        builder: Optional[ProjectBuilder] = None,
        max_workers: int = 4,
        fail_fast: bool = False,
    ):
        self.builder = builder or ProjectBuilder()
        self.max_workers = max(1, max_workers)
        self.fail_fast = fail_fast

    def run(
        self,
        jobs: list[BatchJob],
        on_result: Optional[Callable[[BatchJob, ProjectArtifact], None]] = None,
    ) -> BatchReport:
        """Compose every job.

        Args:
            jobs: Jobs to run
            on_result: Called on the worker thread for each successful job

        Returns:
            BatchReport with success/failure counts and per-job errors

        Raises:
            CompositionError, OSError: When fail_fast is set, the error of the earliest
                submitted job among those that had failed when the batch stopped
        """
        report = BatchReport()
        logger.info(f"Batch started: jobs={len(jobs)}, workers={self.max_workers}")

        def _run(job: BatchJob) -> ProjectArtifact:
            project = self.builder.build(job.roles, job.environment)
            if on_result is not None:
                on_result(job, project)
            return project

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(_run, job): job for job in jobs}

            if self.fail_fast:
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
                for future in pending:
                    future.cancel()
                for future, job in futures.items():
                    if future in done and future.exception() is not None:
                        logger.error(f"Batch aborted on job {job.name}: {future.exception()}")
                        raise future.exception()

            for future, job in futures.items():
                if future.cancelled():
                    continue
                try:
                    report.projects[job.name] = future.result()
                    report.succeeded += 1
                except (CompositionError, OSError) as e:
                    report.failed += 1
                    report.errors.append(
                        BatchError(
                            job=job.name,
                            error=str(e),
                            error_code=getattr(e, "error_code", None),
                        )
                    )
                    logger.warning(f"Batch job failed: job={job.name}, error={e}")

        logger.info(f"Batch completed: succeeded={report.succeeded}, failed={report.failed}")
        return report
