"""Scaffold strategy for explicitly requested custom roles.

``custom:<name>`` produces a complete, conventional role skeleton named
``<name>``: package install, config directory, templated config file,
service management and an HTTP health check.
"""

import logging
import re

from cortexops.common.exceptions import UnknownRoleIdError
from cortexops.common.models import ARTIFACT_NAME_PATTERN, Environment, RoleArtifact
from cortexops.composer.strategy import RoleStrategy

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom:"
SCAFFOLD_KEY = "_scaffold"
SCAFFOLD_CONFIG_TEMPLATE = "service.conf.j2"


def custom_role_name(role_id: str) -> str | None:
    """Return ``<name>`` for ``custom:<name>`` ids, None for anything else."""
    if not role_id.startswith(CUSTOM_PREFIX):
        return None
    return role_id[len(CUSTOM_PREFIX):]


class ScaffoldStrategy(RoleStrategy):
    """Resolves ``custom:<name>`` into a scaffolded role called ``<name>``."""

    tier = "scaffold"

    def matches(self, role_id: str) -> bool:
        return custom_role_name(role_id) is not None

    def resolve(self, role_id: str, environment: Environment) -> RoleArtifact:
        name = custom_role_name(role_id)
        if name is None or len(name) > 50 or not ARTIFACT_NAME_PATTERN.match(name):
            raise UnknownRoleIdError(
                role_id, {"tier": self.tier, "reason": "invalid custom role name"}
            )

        context = {
            "environment": environment.value,
            "role_name": name,
            # Ansible variable names cannot contain dashes
            "role_var": re.sub(r"[^a-z0-9_]", "_", name),
            "tls_enabled": environment.is_production,
            "log_level": "warning" if environment.is_production else "info",
        }
        artifact = self.renderer.render_role(SCAFFOLD_KEY, name, context)

        templates = {
            (f"{name}.conf.j2" if filename == SCAFFOLD_CONFIG_TEMPLATE else filename): content
            for filename, content in artifact.templates.items()
        }
        logger.debug(f"Scaffolded custom role: role_id={role_id}, name={name}")
        return artifact.model_copy(update={"templates": templates})
