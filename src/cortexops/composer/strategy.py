"""Base class for catalog resolution strategies."""

from abc import ABC, abstractmethod

from cortexops.common.models import Environment, RoleArtifact
from cortexops.composer.rendering import TemplateRenderer


class RoleStrategy(ABC):
    """One entry of the catalog's dispatch list: a predicate plus a resolver.

    The catalog asks each strategy in order whether it ``matches`` a role id
    and lets the first one that does ``resolve`` it.
    """

    tier = "generic"

    def __init__(self, renderer: TemplateRenderer):
        self.renderer = renderer

    @abstractmethod
    def matches(self, role_id: str) -> bool:
        """Return True if this strategy can resolve ``role_id``."""

    @abstractmethod
    def resolve(self, role_id: str, environment: Environment) -> RoleArtifact:
        """Build the artifact for ``role_id`` in ``environment``."""

    def role_ids(self) -> list[str]:
        """Fixed role ids this strategy answers for (empty for pattern-based strategies)."""
        return []
