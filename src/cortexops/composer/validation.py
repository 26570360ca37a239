"""Well-formedness checks for generated text.

- YAML sections (tasks, handlers, defaults, vars, playbooks, inventories) are
  parsed with ruamel.yaml; duplicate keys count as malformed.
- Role templates are parsed as Jinja2 with Ansible's default delimiters.
- Role files are parsed according to their extension (.json, .yml/.yaml).
"""

import json
import logging
from dataclasses import dataclass
from io import StringIO

from jinja2 import Environment as JinjaEnvironment
from jinja2 import TemplateSyntaxError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from cortexops.common.models import ProjectArtifact, RoleArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """One malformed text blob."""

    path: str
    message: str


class TextValidator:
    """Parses generated text without interpreting it."""

    def __init__(self):
        self._yaml = YAML(typ="safe", pure=True)
        self._jinja = JinjaEnvironment()

    def yaml_error(self, text: str) -> str | None:
        try:
            self._yaml.load(StringIO(text))
        except YAMLError as e:
            return str(e)
        return None

    def is_well_formed(self, text: str) -> bool:
        """Return True if ``text`` parses as YAML."""
        return self.yaml_error(text) is None

    def template_error(self, text: str) -> str | None:
        try:
            self._jinja.parse(text)
        except TemplateSyntaxError as e:
            return f"line {e.lineno}: {e.message}"
        return None

    def validate_template(self, text: str) -> bool:
        """Return True if ``text`` is syntactically valid Jinja2."""
        return self.template_error(text) is None

    def file_error(self, filename: str, text: str) -> str | None:
        if filename.endswith(".json"):
            try:
                json.loads(text)
            except ValueError as e:
                return str(e)
            return None
        if filename.endswith((".yml", ".yaml")):
            return self.yaml_error(text)
        return None

    def validate_role(self, role: RoleArtifact, base: str = "") -> list[ValidationIssue]:
        """Check every text field of a role artifact."""
        base = base or f"roles/{role.name}"
        issues: list[ValidationIssue] = []

        for section in ("tasks", "handlers", "defaults", "vars"):
            text = getattr(role, section)
            if text is None:
                continue
            error = self.yaml_error(text)
            if error:
                issues.append(ValidationIssue(f"{base}/{section}/main.yml", error))

        for filename, text in role.templates.items():
            error = self.template_error(text)
            if error:
                issues.append(ValidationIssue(f"{base}/templates/{filename}", error))

        for filename, text in role.files.items():
            error = self.file_error(filename, text)
            if error:
                issues.append(ValidationIssue(f"{base}/files/{filename}", error))

        return issues

    def validate_project(self, project: ProjectArtifact) -> list[ValidationIssue]:
        """Check the playbook, every role and every inventory of a project."""
        issues: list[ValidationIssue] = []

        error = self.yaml_error(project.main_playbook)
        if error:
            issues.append(ValidationIssue("site.yml", error))

        for role in project.roles.values():
            issues.extend(self.validate_role(role))

        for environment, inventory in project.inventories.items():
            base = f"inventories/{environment.value}"
            for rel_path, text in inventory.relative_files().items():
                error = self.yaml_error(text)
                if error:
                    issues.append(ValidationIssue(f"{base}/{rel_path}", error))

        if issues:
            logger.warning(f"Project validation found {len(issues)} issue(s)")
        return issues
