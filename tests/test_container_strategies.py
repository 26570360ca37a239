"""Tests for the container-orchestration strategies.

Every container role exposes the defaults key that carries its capacity
figure; production must never be smaller than staging.
"""

import pytest
import yaml

from cortexops.common.models import Environment
from cortexops.composer.container import (
    CONTAINER_CAPACITY,
    CONTAINER_STRATEGIES,
    HelmStrategy,
    PrometheusStackStrategy,
)
from cortexops.composer.rendering import TemplateRenderer

CONTAINER_ROLE_IDS = [cls.role_id for cls in CONTAINER_STRATEGIES]


def _defaults(catalog, role_id: str, environment: Environment) -> dict:
    return yaml.safe_load(catalog.resolve(role_id, environment).defaults)


class TestEnvironmentScaling:
    """Test capacity scaling between staging and production."""

    @pytest.mark.parametrize("role_id", CONTAINER_ROLE_IDS)
    def test_production_capacity_not_below_staging(self, catalog, role_id):
        variable = catalog.strategy_for(role_id).capacity_variable
        staging = _defaults(catalog, role_id, Environment.STAGING)[variable]
        production = _defaults(catalog, role_id, Environment.PRODUCTION)[variable]

        assert isinstance(staging, int)
        assert production >= staging

    def test_some_role_strictly_scales(self, catalog):
        strictly_greater = []
        for role_id in CONTAINER_ROLE_IDS:
            variable = catalog.strategy_for(role_id).capacity_variable
            staging = _defaults(catalog, role_id, Environment.STAGING)[variable]
            production = _defaults(catalog, role_id, Environment.PRODUCTION)[variable]
            if production > staging:
                strictly_greater.append(role_id)

        assert strictly_greater

    def test_kubernetes_replicas(self, catalog):
        assert _defaults(catalog, "kubernetes", Environment.STAGING)["k8s_replicas"] == 1
        assert _defaults(catalog, "k8s", Environment.PRODUCTION)["k8s_replicas"] == 3

    def test_capacity_profiles_are_ordered(self):
        staging = CONTAINER_CAPACITY[Environment.STAGING]
        production = CONTAINER_CAPACITY[Environment.PRODUCTION]

        assert production.replicas > staging.replicas
        assert production.node_max > staging.node_max
        assert production.prometheus_replicas > staging.prometheus_replicas


class TestKubernetes:
    """Test the plain Kubernetes rollout role."""

    def test_pod_security_enforced_in_production(self, catalog):
        artifact = catalog.resolve("kubernetes", Environment.PRODUCTION)

        assert "pod-security.kubernetes.io/enforce" in artifact.tasks
        assert yaml.safe_load(artifact.defaults)["pod_security_mode"] == "enforce"

    def test_pod_security_warns_in_staging(self, catalog):
        artifact = catalog.resolve("kubernetes", Environment.STAGING)

        assert "pod-security.kubernetes.io/warn" in artifact.tasks
        assert "pod-security.kubernetes.io/enforce" not in artifact.tasks

    def test_deployment_template_is_shipped(self, catalog):
        artifact = catalog.resolve("kubernetes", Environment.PRODUCTION)

        assert "deployment.yml.j2" in artifact.templates
        assert "replicas: {{ k8s_replicas }}" in artifact.templates["deployment.yml.j2"]

    def test_resource_limits_scale(self, catalog):
        staging = _defaults(catalog, "kubernetes", Environment.STAGING)
        production = _defaults(catalog, "kubernetes", Environment.PRODUCTION)

        assert staging["memory_limit"] == "512Mi"
        assert production["memory_limit"] == "1Gi"


class TestHelm:
    """Test the Helm release role."""

    def test_autoscaling_only_in_production(self, catalog):
        staging = _defaults(catalog, "helm", Environment.STAGING)
        production = _defaults(catalog, "helm", Environment.PRODUCTION)

        assert staging["helm_autoscaling_enabled"] is False
        assert staging["helm_max_replicas"] == staging["helm_replica_count"]
        assert production["helm_autoscaling_enabled"] is True
        assert production["helm_max_replicas"] == 12

    def test_parameters(self):
        strategy = HelmStrategy(TemplateRenderer())
        params = strategy.parameters(
            CONTAINER_CAPACITY[Environment.PRODUCTION], Environment.PRODUCTION
        )

        assert params["environment"] == "production"
        assert params["min_replicas"] == 3
        assert params["max_replicas"] == 12


class TestPrometheusStack:
    """Test the kube-prometheus-stack role."""

    def test_chart_version_pinned_per_environment(self, catalog):
        staging = _defaults(catalog, "prometheus-helm", Environment.STAGING)
        production = _defaults(catalog, "prometheus-helm", Environment.PRODUCTION)

        assert staging["prometheus_chart_version"] == PrometheusStackStrategy.CHART_VERSIONS[
            Environment.STAGING
        ]
        assert production["prometheus_chart_version"] == "54.0.0"

    def test_retention_and_storage(self, catalog):
        staging = _defaults(catalog, "prometheus-helm", Environment.STAGING)
        production = _defaults(catalog, "prometheus-helm", Environment.PRODUCTION)

        assert staging["prometheus_retention"] == "7d"
        assert production["prometheus_retention"] == "30d"
        assert production["prometheus_storage_size"] == "50Gi"


class TestEks:
    def test_node_group_sizing(self, catalog):
        staging = _defaults(catalog, "eks", Environment.STAGING)
        production = _defaults(catalog, "eks", Environment.PRODUCTION)

        assert staging["node_instance_type"] == "t3.small"
        assert production["node_instance_type"] == "t3.medium"
        assert production["node_min_size"] <= production["node_desired_size"] <= production["node_max_size"]

    def test_trust_policy_file(self, catalog):
        artifact = catalog.resolve("eks", Environment.STAGING)
        assert "eks-trust-policy.json" in artifact.files


class TestPipelineTrigger:
    """Test the CI/CD pipeline trigger role."""

    def test_gate_and_branch(self, catalog):
        staging = _defaults(catalog, "cicd", Environment.STAGING)
        production = _defaults(catalog, "cicd", Environment.PRODUCTION)

        assert staging["pipeline_gate"] == "advisory"
        assert staging["git_branch"] == "develop"
        assert production["pipeline_gate"] == "blocking"
        assert production["git_branch"] == "main"

    def test_pipeline_definition_shipped(self, catalog):
        artifact = catalog.resolve("cicd", Environment.PRODUCTION)
        assert ".gitlab-ci.yml.j2" in artifact.templates
