"""Template rendering for role resources.

Role bodies live as Jinja2 resources under ``templates/``. They are rendered
with bracket delimiters (``[[ var ]]``, ``[% block %]``, ``[# comment #]``) so
that Ansible's own ``{{ }}`` and ``{% %}`` expressions pass through untouched
and are evaluated later, on the managed hosts.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from cortexops.common.exceptions import TemplateRenderError
from cortexops.common.models import RoleArtifact

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

ROLE_SECTIONS = ("tasks", "handlers", "defaults", "vars")


class TemplateRenderer:
    """Renders packaged role resources into RoleArtifacts.

    Resources for a role live under ``roles/<key>/``:
    - tasks/main.yml.j2 (required)
    - handlers/main.yml.j2, defaults/main.yml.j2, vars/main.yml.j2 (optional)
    - templates/<file> and files/<file> (zero or more, emitted under the same filename)
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize renderer.

        Args:
            templates_dir: Path to resource directory
                          (defaults to ./templates relative to this file)
        """
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR

        if not self.templates_dir.exists():
            raise FileNotFoundError(f"Templates directory not found: {self.templates_dir}")

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            block_start_string="[%",
            block_end_string="%]",
            variable_start_string="[[",
            variable_end_string="]]",
            comment_start_string="[#",
            comment_end_string="#]",
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        self._listing = sorted(self.env.list_templates())

        logger.debug(
            f"TemplateRenderer initialized: templates_dir={self.templates_dir}, "
            f"resources={len(self._listing)}"
        )

    def exists(self, template_name: str) -> bool:
        return template_name in self._listing

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a resource with context.

        Args:
            template_name: Resource path relative to the templates directory
            context: Template context variables

        Returns:
            Rendered content

        Raises:
            TemplateRenderError: If the resource is missing or rendering fails
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateRenderError(
                f"Template not found: {template_name}", {"template": template_name}
            ) from e
        except Exception as e:
            raise TemplateRenderError(
                f"Failed to render template {template_name}: {e}", {"template": template_name}
            ) from e

    def list_resources(self, role_key: str, section: str) -> list[str]:
        """List filenames under roles/<role_key>/<section>/ (templates or files)."""
        prefix = f"roles/{role_key}/{section}/"
        return [name[len(prefix):] for name in self._listing if name.startswith(prefix)]

    def render_role(self, role_key: str, name: str, context: dict[str, Any]) -> RoleArtifact:
        """Render every resource of one role into a RoleArtifact.

        Args:
            role_key: Resource directory name under roles/
            name: Artifact name to give the result
            context: Template context variables

        Returns:
            RoleArtifact with all sections that have a resource

        Raises:
            TemplateRenderError: If tasks are missing or any resource fails to render
        """
        base = f"roles/{role_key}"
        sections: dict[str, Optional[str]] = {}
        for section in ROLE_SECTIONS:
            template_name = f"{base}/{section}/main.yml.j2"
            if self.exists(template_name):
                sections[section] = self.render(template_name, context)
            elif section == "tasks":
                raise TemplateRenderError(
                    f"Role resources for '{role_key}' have no tasks", {"role": role_key}
                )
            else:
                sections[section] = None

        templates = {
            filename: self.render(f"{base}/templates/{filename}", context)
            for filename in self.list_resources(role_key, "templates")
        }
        files = {
            filename: self.render(f"{base}/files/{filename}", context)
            for filename in self.list_resources(role_key, "files")
        }

        logger.debug(
            f"Rendered role resources: key={role_key}, name={name}, "
            f"templates={len(templates)}, files={len(files)}"
        )

        return RoleArtifact(name=name, templates=templates, files=files, **sections)
