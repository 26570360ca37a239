"""Role catalog: immutable registry from role id to RoleArtifact.

The catalog is an ordered list of strategies. Specialized container
strategies are asked first, then the custom-role scaffold, then the generic
table. Aliases are folded onto their canonical id before dispatch, so an
alias and its target resolve to the same artifact name.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import BaseModel

from cortexops.common.exceptions import TemplateRenderError, UnknownRoleIdError
from cortexops.common.models import Environment, RoleArtifact
from cortexops.composer.container import CONTAINER_STRATEGIES
from cortexops.composer.generic import GenericStrategy
from cortexops.composer.rendering import TemplateRenderer
from cortexops.composer.scaffold import ScaffoldStrategy
from cortexops.composer.strategy import RoleStrategy

logger = logging.getLogger(__name__)

REGISTRY_FILE = "registry.yaml"


class RoleDescriptor(BaseModel):
    """Display metadata for a catalog role."""

    role_id: str
    title: str
    description: str = ""
    category: str = "Infrastructure"
    tier: str = "generic"


def load_registry(templates_dir: Path) -> dict:
    """Load the role registry from YAML."""
    registry_file = Path(templates_dir) / REGISTRY_FILE
    if not registry_file.exists():
        raise TemplateRenderError(
            f"Role registry not found: {registry_file}", {"path": str(registry_file)}
        )

    with open(registry_file) as f:
        data = yaml.safe_load(f) or {}
    return {"roles": data.get("roles") or {}, "aliases": data.get("aliases") or {}}


class RoleCatalog:
    """Resolves role ids through an ordered list of strategies."""

    def __init__(
        self,
        strategies: Sequence[RoleStrategy],
        aliases: Optional[dict[str, str]] = None,
        descriptors: Optional[dict[str, RoleDescriptor]] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        """Initialize catalog.

        Args:
            strategies: Resolution strategies, highest priority first
            aliases: Alternate role id -> canonical role id
            descriptors: Display metadata by canonical role id
            renderer: Renderer the strategies share, reused for project files
        """
        self._strategies = tuple(strategies)
        self._aliases = dict(aliases or {})
        self._descriptors = dict(descriptors or {})
        self.renderer = renderer

    def canonical_id(self, role_id: str) -> str:
        return self._aliases.get(role_id, role_id)

    def resolve(self, role_id: str, environment: Environment | str) -> RoleArtifact:
        """Resolve one role id for an environment.

        Args:
            role_id: Role id, alias or ``custom:<name>``
            environment: Target environment

        Returns:
            The role's artifact

        Raises:
            InvalidEnvironmentError: If environment is not staging/production
            UnknownRoleIdError: If no strategy matches the role id
        """
        environment = Environment.parse(environment)
        canonical = self.canonical_id(role_id)

        for strategy in self._strategies:
            if strategy.matches(canonical):
                return strategy.resolve(canonical, environment)

        raise UnknownRoleIdError(role_id, {"known": self.role_ids()})

    def is_known(self, role_id: str) -> bool:
        canonical = self.canonical_id(role_id)
        return any(strategy.matches(canonical) for strategy in self._strategies)

    def role_ids(self) -> list[str]:
        """Every fixed role id the catalog resolves, excluding aliases."""
        ids: list[str] = []
        for strategy in self._strategies:
            ids.extend(rid for rid in strategy.role_ids() if rid not in ids)
        return ids

    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def strategy_for(self, role_id: str) -> Optional[RoleStrategy]:
        canonical = self.canonical_id(role_id)
        for strategy in self._strategies:
            if strategy.matches(canonical):
                return strategy
        return None

    def describe(self) -> list[RoleDescriptor]:
        """Descriptors for every fixed role id, in catalog order."""
        return [
            self._descriptors.get(role_id) or RoleDescriptor(role_id=role_id, title=role_id)
            for role_id in self.role_ids()
        ]


def build_catalog(templates_dir: Optional[Path] = None) -> RoleCatalog:
    """Construct the standard catalog from packaged (or overridden) resources."""
    renderer = TemplateRenderer(templates_dir)
    registry = load_registry(renderer.templates_dir)

    descriptors = {
        role_id: RoleDescriptor(role_id=role_id, **meta)
        for role_id, meta in registry["roles"].items()
    }
    generic_ids = [rid for rid, desc in descriptors.items() if desc.tier == "generic"]

    strategies: list[RoleStrategy] = [cls(renderer) for cls in CONTAINER_STRATEGIES]
    strategies.append(ScaffoldStrategy(renderer))
    strategies.append(GenericStrategy(renderer, generic_ids))

    catalog = RoleCatalog(strategies, registry["aliases"], descriptors, renderer=renderer)
    logger.info(
        f"Role catalog built: roles={len(catalog.role_ids())}, "
        f"aliases={len(registry['aliases'])}, templates_dir={renderer.templates_dir}"
    )
    return catalog


@lru_cache(maxsize=None)
def default_catalog(templates_dir: Optional[str] = None) -> RoleCatalog:
    """Process-wide catalog, built once per resource directory."""
    return build_catalog(Path(templates_dir) if templates_dir else None)
