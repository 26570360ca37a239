"""Specialized strategies for the container-orchestration role family.

Provides:
- ContainerCapacity: per-environment sizing profile
- KubernetesStrategy: plain Deployment/Service/Ingress rollout
- HelmStrategy: chart-based release
- PrometheusStackStrategy: kube-prometheus-stack via Helm
- EksStrategy: managed cluster provisioning on AWS
- PipelineTriggerStrategy: GitLab pipeline trigger with gating

Each strategy derives its own capacity and retention parameters from the
environment's ContainerCapacity and exposes the defaults key that carries
its main capacity figure as ``capacity_variable``.
"""

import logging
from dataclasses import dataclass
from typing import Any

from cortexops.common.exceptions import UnknownRoleIdError
from cortexops.common.models import Environment, RoleArtifact
from cortexops.composer.strategy import RoleStrategy

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "myapp"


@dataclass(frozen=True)
class ContainerCapacity:
    """Sizing and policy knobs for one environment."""

    replicas: int
    node_instance_type: str
    node_min: int
    node_max: int
    autoscaling: bool
    prometheus_replicas: int
    prometheus_retention: str
    prometheus_storage: str
    grafana_storage: str
    alertmanager_storage: str
    pod_security_mode: str
    pipeline_gate: str
    runner_concurrency: int
    git_branch: str
    memory_limit: str
    cpu_limit: str


CONTAINER_CAPACITY: dict[Environment, ContainerCapacity] = {
    Environment.STAGING: ContainerCapacity(
        replicas=1,
        node_instance_type="t3.small",
        node_min=1,
        node_max=3,
        autoscaling=False,
        prometheus_replicas=1,
        prometheus_retention="7d",
        prometheus_storage="10Gi",
        grafana_storage="5Gi",
        alertmanager_storage="2Gi",
        pod_security_mode="warn",
        pipeline_gate="advisory",
        runner_concurrency=2,
        git_branch="develop",
        memory_limit="512Mi",
        cpu_limit="200m",
    ),
    Environment.PRODUCTION: ContainerCapacity(
        replicas=3,
        node_instance_type="t3.medium",
        node_min=3,
        node_max=10,
        autoscaling=True,
        prometheus_replicas=2,
        prometheus_retention="30d",
        prometheus_storage="50Gi",
        grafana_storage="10Gi",
        alertmanager_storage="10Gi",
        pod_security_mode="enforce",
        pipeline_gate="blocking",
        runner_concurrency=4,
        git_branch="main",
        memory_limit="1Gi",
        cpu_limit="500m",
    ),
}


class ContainerStrategy(RoleStrategy):
    """Base for strategies that answer exactly one role id."""

    tier = "container"
    role_id: str = ""
    capacity_variable: str = ""

    def matches(self, role_id: str) -> bool:
        return role_id == self.role_id

    def role_ids(self) -> list[str]:
        return [self.role_id]

    def artifact_name(self) -> str:
        return self.role_id

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        """Template context for this role. Subclasses add their own sizing."""
        return {"environment": environment.value}

    def resolve(self, role_id: str, environment: Environment) -> RoleArtifact:
        if not self.matches(role_id):
            raise UnknownRoleIdError(role_id, {"tier": self.tier})

        capacity = CONTAINER_CAPACITY[environment]
        context = self.parameters(capacity, environment)
        artifact = self.renderer.render_role(self.role_id, self.artifact_name(), context)
        logger.debug(
            f"Resolved container role: role_id={role_id}, environment={environment.value}, "
            f"{self.capacity_variable}={context.get(self.capacity_variable)}"
        )
        return artifact


class KubernetesStrategy(ContainerStrategy):
    role_id = "kubernetes"
    capacity_variable = "k8s_replicas"

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        return {
            **super().parameters(capacity, environment),
            "app_name": DEFAULT_APP_NAME,
            "k8s_replicas": capacity.replicas,
            "pod_security_mode": capacity.pod_security_mode,
            "memory_limit": capacity.memory_limit,
            "cpu_limit": capacity.cpu_limit,
        }


class HelmStrategy(ContainerStrategy):
    role_id = "helm"
    capacity_variable = "helm_replica_count"

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        return {
            **super().parameters(capacity, environment),
            "chart_name": DEFAULT_APP_NAME,
            "helm_replica_count": capacity.replicas,
            "autoscaling_enabled": capacity.autoscaling,
            "min_replicas": max(capacity.replicas, 1),
            "max_replicas": capacity.replicas * 4 if capacity.autoscaling else capacity.replicas,
            "memory_limit": capacity.memory_limit,
            "cpu_limit": capacity.cpu_limit,
        }


class PrometheusStackStrategy(ContainerStrategy):
    role_id = "prometheus-helm"
    capacity_variable = "prometheus_replicas"

    # kube-prometheus-stack chart, pinned per environment so staging can run ahead
    CHART_VERSIONS = {
        Environment.STAGING: "55.5.0",
        Environment.PRODUCTION: "54.0.0",
    }

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        return {
            **super().parameters(capacity, environment),
            "prometheus_chart_version": self.CHART_VERSIONS[environment],
            "prometheus_replicas": capacity.prometheus_replicas,
            "prometheus_retention": capacity.prometheus_retention,
            "prometheus_storage": capacity.prometheus_storage,
            "grafana_storage": capacity.grafana_storage,
            "alertmanager_storage": capacity.alertmanager_storage,
        }


class EksStrategy(ContainerStrategy):
    role_id = "eks"
    capacity_variable = "node_desired_size"

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        return {
            **super().parameters(capacity, environment),
            "node_instance_type": capacity.node_instance_type,
            "node_min_size": capacity.node_min,
            "node_max_size": capacity.node_max,
            "node_desired_size": capacity.node_min,
        }


class PipelineTriggerStrategy(ContainerStrategy):
    role_id = "cicd"
    capacity_variable = "runner_concurrency"

    def parameters(self, capacity: ContainerCapacity, environment: Environment) -> dict[str, Any]:
        return {
            **super().parameters(capacity, environment),
            "git_branch": capacity.git_branch,
            "pipeline_gate": capacity.pipeline_gate,
            "runner_concurrency": capacity.runner_concurrency,
        }


CONTAINER_STRATEGIES: tuple[type[ContainerStrategy], ...] = (
    KubernetesStrategy,
    HelmStrategy,
    PrometheusStackStrategy,
    EksStrategy,
    PipelineTriggerStrategy,
)
