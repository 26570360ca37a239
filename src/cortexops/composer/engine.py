"""Composition engine: selection + environment -> ProjectArtifact."""

import logging
from typing import Callable, Iterable, Optional

from cortexops.common.exceptions import DuplicateArtifactNameError, EmptySelectionError
from cortexops.common.models import (
    Environment,
    InventoryArtifact,
    PlannedRole,
    ProjectArtifact,
    RoleArtifact,
)
from cortexops.composer.assembler import PlaybookAssembler
from cortexops.composer.catalog import RoleCatalog
from cortexops.composer.inventory import build_inventory
from cortexops.composer.rendering import TemplateRenderer
from cortexops.composer.router import route_for

logger = logging.getLogger(__name__)

CONTROL_CONFIG_TEMPLATE = "ansible.cfg.j2"
README_TEMPLATE = "README.md.j2"


def normalize_selection(selection: Iterable[str]) -> list[str]:
    """Collapse duplicates to first-occurrence order and drop blank ids.

    Raises:
        EmptySelectionError: If nothing is left
    """
    if isinstance(selection, str):
        selection = [selection]

    normalized: list[str] = []
    for role_id in selection:
        role_id = role_id.strip()
        if role_id and role_id not in normalized:
            normalized.append(role_id)

    if not normalized:
        raise EmptySelectionError()
    return normalized


class CompositionEngine:
    """Resolves a role selection through the catalog and assembles the project.

    Stateless apart from its injected collaborators, so one engine can serve
    concurrent callers.
    """

    def __init__(
        self,
        catalog: RoleCatalog,
        renderer: Optional[TemplateRenderer] = None,
        assembler: Optional[PlaybookAssembler] = None,
        inventory_builder: Callable[[Environment], InventoryArtifact] = build_inventory,
        router: Callable[[str], str] = route_for,
    ):
        self.catalog = catalog
        self.renderer = renderer or catalog.renderer or TemplateRenderer()
        self.assembler = assembler or PlaybookAssembler()
        self.inventory_builder = inventory_builder
        self.router = router

    def control_config(self, environment: Environment) -> str:
        return self.renderer.render(
            CONTROL_CONFIG_TEMPLATE,
            {"inventory_path": f"inventories/{environment.value}/hosts.yml"},
        )

    def readme(self, environment: Environment, plan: list[PlannedRole]) -> str:
        return self.renderer.render(
            README_TEMPLATE,
            {
                "app_name": self.assembler.app_name,
                "environment": environment.value,
                "plan": plan,
            },
        )

    def compose(self, selection: Iterable[str], environment: Environment | str) -> ProjectArtifact:
        """Compose a project from an ordered role selection.

        Args:
            selection: Role ids in the order their phases should run
            environment: "staging" or "production"

        Returns:
            ProjectArtifact with roles, main playbook, control config and
            the inventory of the requested environment

        Raises:
            InvalidEnvironmentError: If environment is not staging/production
            EmptySelectionError: If the selection is empty
            UnknownRoleIdError: If a role id is not in the catalog
            DuplicateArtifactNameError: If two role ids resolve to the same name
        """
        # Both input checks run before any catalog lookup
        environment = Environment.parse(environment)
        role_ids = normalize_selection(selection)

        roles: dict[str, RoleArtifact] = {}
        owners: dict[str, str] = {}
        plan: list[PlannedRole] = []
        for role_id in role_ids:
            artifact = self.catalog.resolve(role_id, environment)
            if artifact.name in roles:
                raise DuplicateArtifactNameError(artifact.name, owners[artifact.name], role_id)

            roles[artifact.name] = artifact
            owners[artifact.name] = role_id
            plan.append(
                PlannedRole(role_id=role_id, name=artifact.name, host_group=self.router(role_id))
            )

        control_config = self.control_config(environment)
        inventory = self.inventory_builder(environment)
        main_playbook = self.assembler.assemble(plan, environment)

        project = ProjectArtifact(
            environment=environment,
            main_playbook=main_playbook,
            control_config=control_config,
            readme=self.readme(environment, plan),
            plan=plan,
            roles=roles,
            inventories={environment: inventory},
        )

        logger.info(
            f"Composed project: environment={environment.value}, "
            f"roles={[entry.name for entry in plan]}"
        )
        return project
