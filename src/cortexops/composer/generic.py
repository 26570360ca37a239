"""Generic role table.

Generic roles are statically defined resources under ``templates/roles/<id>/``
rendered with an environment profile. The profile is the only thing that
varies between staging and production.
"""

import logging
from typing import Any, Iterable

from cortexops.common.exceptions import UnknownRoleIdError
from cortexops.common.models import Environment, RoleArtifact
from cortexops.composer.rendering import TemplateRenderer
from cortexops.composer.strategy import RoleStrategy

logger = logging.getLogger(__name__)

GENERIC_PROFILES: dict[Environment, dict[str, Any]] = {
    Environment.STAGING: {
        "domain_name": "staging.example.com",
        "firewall_rules": [
            {"rule": "allow", "port": "22", "proto": "tcp", "source": "any"},
            {"rule": "allow", "port": "80", "proto": "tcp", "source": "any"},
            {"rule": "allow", "port": "443", "proto": "tcp", "source": "any"},
            {"rule": "allow", "port": "8080", "proto": "tcp", "source": "any"},
        ],
        "fail2ban_bantime": 600,
        "fail2ban_maxretry": 5,
        "ssl_enabled": False,
        "ssl_certificate": "/etc/ssl/certs/staging-cert.pem",
        "ssl_certificate_key": "/etc/ssl/private/staging-key.pem",
        "backup_retention_days": 3,
        "backup_hour": 2,
        "db_name": "mydb_staging",
        "db_max_connections": 100,
        "db_shared_buffers": "128MB",
        "db_effective_cache_size": "512MB",
        "prometheus_retention_time": "7d",
        "prometheus_scrape_interval": "30s",
        "vault_addr": "http://vault-staging.example.com:8200",
        "vault_tls_enabled": False,
        "instance_type": "t3.micro",
        "instance_count": 1,
        "rollback_keep_points": 3,
    },
    Environment.PRODUCTION: {
        "domain_name": "example.com",
        "firewall_rules": [
            {"rule": "allow", "port": "22", "proto": "tcp", "source": "10.0.0.0/8"},
            {"rule": "allow", "port": "80", "proto": "tcp", "source": "any"},
            {"rule": "allow", "port": "443", "proto": "tcp", "source": "any"},
        ],
        "fail2ban_bantime": 3600,
        "fail2ban_maxretry": 3,
        "ssl_enabled": True,
        "ssl_certificate": "/etc/ssl/certs/prod-cert.pem",
        "ssl_certificate_key": "/etc/ssl/private/prod-key.pem",
        "backup_retention_days": 30,
        "backup_hour": 1,
        "db_name": "mydb_production",
        "db_max_connections": 300,
        "db_shared_buffers": "1GB",
        "db_effective_cache_size": "3GB",
        "prometheus_retention_time": "30d",
        "prometheus_scrape_interval": "15s",
        "vault_addr": "https://vault.example.com:8200",
        "vault_tls_enabled": True,
        "instance_type": "t3.medium",
        "instance_count": 3,
        "rollback_keep_points": 10,
    },
}


def generic_context(environment: Environment) -> dict[str, Any]:
    """Template context shared by every generic role."""
    return {"environment": environment.value, **GENERIC_PROFILES[environment]}


class GenericStrategy(RoleStrategy):
    """Resolves role ids from the static generic table."""

    tier = "generic"

    def __init__(self, renderer: TemplateRenderer, role_ids: Iterable[str]):
        super().__init__(renderer)
        self._role_ids = list(role_ids)

    def matches(self, role_id: str) -> bool:
        return role_id in self._role_ids

    def resolve(self, role_id: str, environment: Environment) -> RoleArtifact:
        if not self.matches(role_id):
            raise UnknownRoleIdError(role_id, {"tier": self.tier})

        artifact = self.renderer.render_role(role_id, role_id, generic_context(environment))
        logger.debug(f"Resolved generic role: role_id={role_id}, environment={environment.value}")
        return artifact

    def role_ids(self) -> list[str]:
        return list(self._role_ids)
