"""Tests for batch composition."""

import json
import threading

import pytest

from cortexops.common.exceptions import UnknownRoleIdError
from cortexops.composer.batch import BatchJob, BatchRunner, load_jobs


class TestLoadJobs:
    """Test batch file loading."""

    def test_yaml_with_jobs_key(self, tmp_path):
        path = tmp_path / "jobs.yml"
        path.write_text(
            "jobs:\n"
            "  - name: edge\n"
            "    roles: [security, web]\n"
            "    environment: staging\n"
            "  - roles: [db]\n"
        )

        jobs = load_jobs(path)

        assert [job.name for job in jobs] == ["edge", "job-2"]
        assert jobs[0].environment == "staging"
        assert jobs[1].environment == "production"

    def test_missing_environment_uses_default(self, tmp_path):
        path = tmp_path / "jobs.yml"
        path.write_text("- name: edge\n  roles: [web]\n- roles: [db]\n  environment: production\n")

        jobs = load_jobs(path, default_environment="staging")

        assert [job.environment for job in jobs] == ["staging", "production"]

    def test_json_top_level_list(self, tmp_path):
        path = tmp_path / "jobs.json"
        path.write_text(json.dumps([{"name": "k8s", "roles": ["kubernetes", "helm"]}]))

        assert load_jobs(path) == [BatchJob(name="k8s", roles=["kubernetes", "helm"])]

    def test_rejects_scalar(self, tmp_path):
        path = tmp_path / "jobs.yml"
        path.write_text("just a string\n")

        with pytest.raises(ValueError):
            load_jobs(path)


class TestBatchRunner:
    """Test BatchRunner.run."""

    def test_all_succeed(self, builder):
        jobs = [
            BatchJob(name="edge", roles=["security", "web"], environment="staging"),
            BatchJob(name="data", roles=["db", "backup"]),
            BatchJob(name="cluster", roles=["eks", "kubernetes"]),
        ]

        report = BatchRunner(builder, max_workers=2).run(jobs)

        assert report.succeeded == 3
        assert report.failed == 0
        assert set(report.projects) == {"edge", "data", "cluster"}
        assert report.projects["data"].role_names == ["db", "backup"]

    def test_partial_failure_is_aggregated(self, builder):
        """Test that one bad job does not abort the others."""
        jobs = [
            BatchJob(name="good", roles=["web"]),
            BatchJob(name="unknown", roles=["mainframe"]),
            BatchJob(name="bad-env", roles=["web"], environment="qa"),
            BatchJob(name="empty", roles=[]),
        ]

        report = BatchRunner(builder, max_workers=4).run(jobs)

        assert report.succeeded == 1
        assert report.failed == 3
        codes = {error.job: error.error_code for error in report.errors}
        assert codes == {"unknown": 6002, "bad-env": 6004, "empty": 6001}
        assert list(report.projects) == ["good"]

    def test_fail_fast_raises(self, builder):
        jobs = [BatchJob(name="unknown", roles=["mainframe"])]

        with pytest.raises(UnknownRoleIdError):
            BatchRunner(builder, fail_fast=True).run(jobs)

    def test_fail_fast_raises_earliest_submitted_failure(self, builder):
        """Test that with one worker the first job's error wins over later ones."""
        jobs = [
            BatchJob(name="unknown", roles=["mainframe"]),
            BatchJob(name="empty", roles=[]),
            BatchJob(name="bad-env", roles=["web"], environment="qa"),
        ]

        with pytest.raises(UnknownRoleIdError):
            BatchRunner(builder, max_workers=1, fail_fast=True).run(jobs)

    def test_fail_fast_propagates_write_errors(self, builder):
        def _write(job, project):
            raise NotADirectoryError(f"cannot write {job.name}")

        with pytest.raises(NotADirectoryError):
            BatchRunner(builder, fail_fast=True).run([BatchJob(name="web", roles=["web"])], on_result=_write)

    def test_on_result_called_per_success(self, builder):
        seen: list[str] = []
        lock = threading.Lock()

        def _collect(job, project):
            with lock:
                seen.append(job.name)

        jobs = [BatchJob(name=f"job-{i}", roles=["security"]) for i in range(5)]
        BatchRunner(builder, max_workers=3).run(jobs, on_result=_collect)

        assert sorted(seen) == [f"job-{i}" for i in range(5)]

    def test_workers_clamped(self, builder):
        assert BatchRunner(builder, max_workers=0).max_workers == 1
