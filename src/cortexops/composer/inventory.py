"""Inventory generation per environment.

The topology (groups and placeholder hosts) and the group variables are
pure functions of the environment, so results are memoized per environment.
"""

import logging
from functools import lru_cache
from typing import Any

import yaml

from cortexops.common.models import Environment, InventoryArtifact

logger = logging.getLogger(__name__)

# group -> (host prefix, subnet) ; host counts vary per environment
HOST_GROUPS: dict[str, tuple[str, int]] = {
    "webservers": ("web", 1),
    "databases": ("db", 2),
    "monitoring": ("monitor", 3),
    "loadbalancers": ("lb", 4),
}

TOPOLOGY: dict[Environment, dict[str, Any]] = {
    Environment.STAGING: {
        "suffix": "staging",
        "network": "10.0",
        "counts": {"webservers": 2, "databases": 1, "monitoring": 1, "loadbalancers": 1},
    },
    Environment.PRODUCTION: {
        "suffix": "prod",
        "network": "172.16",
        "counts": {"webservers": 3, "databases": 2, "monitoring": 1, "loadbalancers": 2},
    },
}

GROUP_VARS: dict[Environment, dict[str, dict[str, Any]]] = {
    Environment.STAGING: {
        "all": {
            "deploy_environment": "staging",
            "ansible_python_interpreter": "/usr/bin/python3",
            "vault_addr": "http://vault-staging.example.com:8200",
            "use_vault": True,
        },
        "webservers": {
            "domain_name": "staging.example.com",
            "ssl_enabled": False,
        },
        "databases": {
            "db_name": "mydb_staging",
            "db_user": "dbuser",
            "backup_retention_days": 3,
        },
        "monitoring": {
            "prometheus_retention_time": "7d",
            "prometheus_scrape_interval": "30s",
            "alert_email": "ops-staging@example.com",
        },
        "loadbalancers": {
            "lb_algorithm": "roundrobin",
            "ssl_enabled": False,
            "hsts_enabled": False,
        },
    },
    Environment.PRODUCTION: {
        "all": {
            "deploy_environment": "production",
            "ansible_python_interpreter": "/usr/bin/python3",
            "vault_addr": "https://vault.example.com:8200",
            "use_vault": True,
        },
        "webservers": {
            "domain_name": "example.com",
            "ssl_enabled": True,
            "ssl_certificate": "/etc/ssl/certs/prod-cert.pem",
            "ssl_certificate_key": "/etc/ssl/private/prod-key.pem",
        },
        "databases": {
            "db_name": "mydb_production",
            "db_user": "dbuser_prod",
            "backup_retention_days": 30,
            "backup_hour": 1,
        },
        "monitoring": {
            "prometheus_retention_time": "30d",
            "prometheus_scrape_interval": "15s",
            "alert_email": "ops@example.com",
        },
        "loadbalancers": {
            "lb_algorithm": "leastconn",
            "ssl_enabled": True,
            "hsts_enabled": True,
            "ssl_certificate": "/etc/ssl/certs/prod-cert.pem",
            "ssl_certificate_key": "/etc/ssl/private/prod-key.pem",
        },
    },
}


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, explicit_start=True, sort_keys=False, default_flow_style=False)


def _hosts_document(environment: Environment) -> dict[str, Any]:
    topology = TOPOLOGY[environment]
    children: dict[str, Any] = {}
    for group, (prefix, subnet) in HOST_GROUPS.items():
        hosts = {}
        for index in range(topology["counts"][group]):
            host_name = f"{prefix}{index + 1:02d}-{topology['suffix']}"
            hosts[host_name] = {
                "ansible_host": f"{topology['network']}.{subnet}.{10 + index}",
                "ansible_user": "ubuntu",
            }
        children[group] = {"hosts": hosts}

    group_vars = GROUP_VARS[environment]
    return {
        "all": {
            "children": children,
            "vars": {
                "deploy_environment": environment.value,
                "domain_name": group_vars["webservers"]["domain_name"],
                "db_name": group_vars["databases"]["db_name"],
                "backup_retention_days": group_vars["databases"]["backup_retention_days"],
            },
        }
    }


@lru_cache(maxsize=None)
def _build_inventory(environment: Environment) -> InventoryArtifact:
    hosts = _dump(_hosts_document(environment))
    group_vars = {group: _dump(values) for group, values in GROUP_VARS[environment].items()}
    logger.debug(
        f"Inventory built: environment={environment.value}, groups={list(group_vars)}"
    )
    return InventoryArtifact(environment=environment, hosts=hosts, group_vars=group_vars)


def build_inventory(environment: Environment | str) -> InventoryArtifact:
    """Build (or return the memoized) inventory for an environment.

    Raises:
        InvalidEnvironmentError: If environment is not staging/production
    """
    return _build_inventory(Environment.parse(environment))
