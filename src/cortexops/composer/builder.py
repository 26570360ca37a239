"""Project artifact builder: the packaging entry point over the engine."""

import logging
from typing import Iterable, Optional

from cortexops.common.models import Environment, ProjectArtifact
from cortexops.composer.catalog import default_catalog
from cortexops.composer.engine import CompositionEngine

logger = logging.getLogger(__name__)


class ProjectBuilder:
    """Composes a project and attaches the inventory set."""

    def __init__(self, engine: Optional[CompositionEngine] = None):
        self.engine = engine or CompositionEngine(default_catalog())

    def build(
        self,
        selection: Iterable[str],
        environment: Environment | str,
        all_environments: bool = False,
    ) -> ProjectArtifact:
        """Build the exportable project tree.

        Args:
            selection: Role ids in execution order
            environment: Environment the roles and control config target
            all_environments: Also attach inventories for every other environment

        Returns:
            Composed ProjectArtifact
        """
        project = self.engine.compose(selection, environment)
        if not all_environments:
            return project

        inventories = {env: self.engine.inventory_builder(env) for env in Environment}
        logger.debug(f"Attached inventories: {[env.value for env in inventories]}")
        return project.model_copy(update={"inventories": inventories})


def build(
    selection: Iterable[str],
    environment: Environment | str,
    all_environments: bool = False,
) -> ProjectArtifact:
    """Build a project with the process-wide default catalog."""
    return ProjectBuilder().build(selection, environment, all_environments=all_environments)
