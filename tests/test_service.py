"""Tests for GenerationService collaborators."""

import io
import zipfile

import pytest

from cortexops.common.exceptions import (
    GenerationRecordError,
    QuotaExceededError,
    UnknownRoleIdError,
)
from cortexops.common.models import Environment
from cortexops.composer.service import (
    GENERATION_KIND,
    GenerationService,
    RecordResult,
    generation_summary,
)


class _Quota:
    def __init__(self, allowed: bool):
        self.allowed = allowed
        self.calls: list[str] = []

    def can_generate(self, user_id: str) -> bool:
        self.calls.append(user_id)
        return self.allowed


class _Recorder:
    def __init__(self, result: RecordResult):
        self.result = result
        self.calls: list[tuple] = []

    def record_generation(self, user_id, summary, artifact_bytes, kind):
        self.calls.append((user_id, summary, artifact_bytes, kind))
        return self.result


class TestGenerationService:
    """Test GenerationService.generate."""

    def test_records_generation(self, builder):
        recorder = _Recorder(RecordResult(success=True))
        service = GenerationService(builder, _Quota(True), recorder)

        project = service.generate("user-1", ["web", "db"], "staging")

        assert project.role_names == ["web", "db"]
        user_id, summary, artifact_bytes, kind = recorder.calls[0]
        assert user_id == "user-1"
        assert summary == "Role generation: web, db for staging"
        assert kind == GENERATION_KIND == "roles"
        with zipfile.ZipFile(io.BytesIO(artifact_bytes)) as archive:
            assert "roles/web/tasks/main.yml" in archive.namelist()

    def test_quota_refusal_skips_composition(self, builder):
        recorder = _Recorder(RecordResult(success=True))
        service = GenerationService(builder, _Quota(False), recorder)

        with pytest.raises(QuotaExceededError) as exc_info:
            service.generate("user-2", ["web"], "staging")

        assert exc_info.value.error_code == 6101
        assert recorder.calls == []

    def test_record_failure(self, builder):
        service = GenerationService(
            builder, _Quota(True), _Recorder(RecordResult(success=False, error="db down"))
        )

        with pytest.raises(GenerationRecordError, match="db down"):
            service.generate("user-3", ["web"], "production")

    def test_composition_errors_propagate(self, builder):
        recorder = _Recorder(RecordResult(success=True))
        service = GenerationService(builder, _Quota(True), recorder)

        with pytest.raises(UnknownRoleIdError):
            service.generate("user-4", ["mainframe"], "production")
        assert recorder.calls == []

    def test_default_collaborators(self, builder):
        project = GenerationService(builder).generate("anyone", ["security"], "production")
        assert project.environment is Environment.PRODUCTION

    def test_summary_uses_requested_ids(self):
        assert (
            generation_summary(["nginx", "custom:redis"], Environment.PRODUCTION)
            == "Role generation: nginx, custom:redis for production"
        )
