"""
Value models for the role composer.

Every model is frozen once constructed. None of them is persisted between
invocations; a ProjectArtifact only leaves the process through the export
helpers in ``cortexops.composer.export``.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cortexops.common.exceptions import InvalidEnvironmentError

ARTIFACT_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
MAX_ARTIFACT_NAME_LENGTH = 50


class Environment(str, Enum):
    """Deployment context that scales every environment-sensitive default."""

    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: "Environment | str") -> "Environment":
        """Return the Environment for ``value`` or raise InvalidEnvironmentError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidEnvironmentError(value)

    @property
    def is_production(self) -> bool:
        return self is Environment.PRODUCTION


class RoleArtifact(BaseModel):
    """One role's contribution to a generated project.

    Attributes:
        name: Externally visible role name (directory under roles/)
        tasks: tasks/main.yml content, mandatory
        handlers: handlers/main.yml content
        defaults: defaults/main.yml content
        vars: vars/main.yml content
        templates: Jinja2 templates shipped with the role, by filename
        files: Static files shipped with the role, by filename
    """

    model_config = ConfigDict(frozen=True)

    name: str
    tasks: str
    handlers: Optional[str] = None
    defaults: Optional[str] = None
    vars: Optional[str] = None
    templates: dict[str, str] = Field(default_factory=dict)
    files: dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate role name format."""
        if not v:
            raise ValueError("Role name cannot be empty")
        if len(v) > MAX_ARTIFACT_NAME_LENGTH:
            raise ValueError(
                f"Role name must be {MAX_ARTIFACT_NAME_LENGTH} characters or less"
            )
        if not ARTIFACT_NAME_PATTERN.match(v):
            raise ValueError(
                "Role name must start with a lowercase letter or digit and contain "
                "only lowercase letters, digits, dashes and underscores"
            )
        return v

    @field_validator("tasks")
    @classmethod
    def validate_tasks(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Role tasks cannot be empty")
        return v

    def relative_files(self) -> dict[str, str]:
        """Map paths relative to roles/<name>/ to content."""
        structure = {"tasks/main.yml": self.tasks}
        if self.handlers is not None:
            structure["handlers/main.yml"] = self.handlers
        if self.defaults is not None:
            structure["defaults/main.yml"] = self.defaults
        if self.vars is not None:
            structure["vars/main.yml"] = self.vars
        for filename, content in sorted(self.templates.items()):
            structure[f"templates/{filename}"] = content
        for filename, content in sorted(self.files.items()):
            structure[f"files/{filename}"] = content
        return structure


class InventoryArtifact(BaseModel):
    """Static host topology and group variables for one environment."""

    model_config = ConfigDict(frozen=True)

    environment: Environment
    hosts: str
    group_vars: dict[str, str] = Field(default_factory=dict)

    def relative_files(self) -> dict[str, str]:
        """Map paths relative to inventories/<environment>/ to content."""
        structure = {"hosts.yml": self.hosts}
        for group, content in self.group_vars.items():
            structure[f"group_vars/{group}.yml"] = content
        return structure


class PlannedRole(BaseModel):
    """One entry of the execution plan: who asked for it, what it is called, where it runs."""

    model_config = ConfigDict(frozen=True)

    role_id: str
    name: str
    host_group: str


class ProjectArtifact(BaseModel):
    """Fully assembled, exportable Ansible project.

    Attributes:
        environment: Environment the project was composed for
        main_playbook: site.yml content
        control_config: ansible.cfg content
        readme: README.md content
        plan: Ordered (role id, artifact name, host group) entries
        roles: Role artifacts keyed by artifact name, in selection order
        inventories: Inventory artifacts keyed by environment
    """

    model_config = ConfigDict(frozen=True)

    environment: Environment
    main_playbook: str
    control_config: str
    readme: str = ""
    plan: list[PlannedRole] = Field(default_factory=list)
    roles: dict[str, RoleArtifact] = Field(default_factory=dict)
    inventories: dict[Environment, InventoryArtifact] = Field(default_factory=dict)

    @property
    def role_names(self) -> list[str]:
        return [entry.name for entry in self.plan]

    def files(self) -> dict[str, str]:
        """Return the project tree as ``{relative_path: content}``.

        Paths follow the canonical Ansible layout: site.yml and ansible.cfg at
        the root, one directory per role under roles/, one directory per
        environment under inventories/.
        """
        tree = {
            "site.yml": self.main_playbook,
            "ansible.cfg": self.control_config,
        }
        if self.readme:
            tree["README.md"] = self.readme

        for name, role in self.roles.items():
            for rel_path, content in role.relative_files().items():
                tree[f"roles/{name}/{rel_path}"] = content

        for environment in sorted(self.inventories, key=lambda env: env.value):
            inventory = self.inventories[environment]
            for rel_path, content in inventory.relative_files().items():
                tree[f"inventories/{environment.value}/{rel_path}"] = content

        return tree
