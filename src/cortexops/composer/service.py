"""Generation service: quota and history collaborators around the builder.

The collaborators are narrow protocols. The composer works the same with the
stub implementations here as with real quota/persistence backends.
"""

import logging
from typing import Iterable, Optional, Protocol

from pydantic import BaseModel

from cortexops.common.exceptions import GenerationRecordError, QuotaExceededError
from cortexops.common.models import Environment, ProjectArtifact
from cortexops.composer.builder import ProjectBuilder
from cortexops.composer.export import to_zip_bytes

logger = logging.getLogger(__name__)

GENERATION_KIND = "roles"


class RecordResult(BaseModel):
    """Outcome reported by a GenerationRecorder."""

    success: bool
    error: Optional[str] = None


class QuotaGate(Protocol):
    def can_generate(self, user_id: str) -> bool: ...


class GenerationRecorder(Protocol):
    def record_generation(
        self, user_id: str, summary: str, artifact_bytes: bytes, kind: str
    ) -> RecordResult: ...


class AllowAllQuota:
    """Quota gate that never refuses."""

    def can_generate(self, user_id: str) -> bool:
        return True


class NullRecorder:
    """Recorder that accepts and discards every generation."""

    def record_generation(
        self, user_id: str, summary: str, artifact_bytes: bytes, kind: str
    ) -> RecordResult:
        return RecordResult(success=True)


def generation_summary(role_ids: list[str], environment: Environment) -> str:
    return f"Role generation: {', '.join(role_ids)} for {environment.value}"


class GenerationService:
    """Checks quota, builds the project and records it."""

    def __init__(
        self,
        builder: Optional[ProjectBuilder] = None,
        quota: Optional[QuotaGate] = None,
        recorder: Optional[GenerationRecorder] = None,
    ):
        self.builder = builder or ProjectBuilder()
        self.quota = quota or AllowAllQuota()
        self.recorder = recorder or NullRecorder()

    def generate(
        self,
        user_id: str,
        selection: Iterable[str],
        environment: Environment | str,
    ) -> ProjectArtifact:
        """Build a project on behalf of a user.

        Raises:
            QuotaExceededError: If the quota gate refuses the user
            GenerationRecordError: If the recorder reports failure
            CompositionError: Any composition failure, unchanged
        """
        if not self.quota.can_generate(user_id):
            logger.info(f"Generation refused by quota: user={user_id}")
            raise QuotaExceededError(user_id)

        selection = list(selection)
        project = self.builder.build(selection, environment)

        summary = generation_summary([entry.role_id for entry in project.plan], project.environment)
        result = self.recorder.record_generation(
            user_id, summary, to_zip_bytes(project), GENERATION_KIND
        )
        if not result.success:
            raise GenerationRecordError(
                result.error or "Failed to record generation", {"user_id": user_id}
            )

        logger.info(f"Generation recorded: user={user_id}, summary='{summary}'")
        return project
