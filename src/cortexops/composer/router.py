"""Host-group routing for role execution phases."""

from cortexops.composer.scaffold import custom_role_name

DEFAULT_HOST_GROUP = "all"

ROLE_HOST_GROUPS: dict[str, str] = {
    "web": "webservers",
    "nginx": "webservers",
    "db": "databases",
    "postgres": "databases",
    "monitoring": "monitoring",
    "prometheus": "monitoring",
    "vault": "monitoring",
    "backup": "all",
    "security": "all",
    "rollback": "all",
    # Cloud and cluster APIs are driven from the control node
    "aws": "localhost",
    "eks": "localhost",
    "kubernetes": "localhost",
    "k8s": "localhost",
    "helm": "localhost",
    "prometheus-helm": "localhost",
    "cicd": "localhost",
}


def route_for(role_id: str) -> str:
    """Return the inventory group a role's phase targets.

    Total: any id without a routing entry, including unknown ids, goes to
    ``all``. ``custom:<name>`` routes the way ``<name>`` would.
    """
    name = custom_role_name(role_id)
    if name is not None:
        return ROLE_HOST_GROUPS.get(name, DEFAULT_HOST_GROUP)
    return ROLE_HOST_GROUPS.get(role_id, DEFAULT_HOST_GROUP)
