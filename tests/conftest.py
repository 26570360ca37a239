"""Pytest configuration and shared fixtures for composer tests."""

from pathlib import Path

import pytest

from cortexops.common.models import Environment, ProjectArtifact
from cortexops.composer.builder import ProjectBuilder
from cortexops.composer.catalog import RoleCatalog, default_catalog
from cortexops.composer.engine import CompositionEngine
from cortexops.composer.validation import TextValidator

SCENARIO_SELECTION = ["security", "web", "monitoring"]


@pytest.fixture(scope="session")
def catalog() -> RoleCatalog:
    """Process-wide catalog over the packaged role resources."""
    return default_catalog()


@pytest.fixture
def engine(catalog) -> CompositionEngine:
    return CompositionEngine(catalog)


@pytest.fixture
def builder(engine) -> ProjectBuilder:
    return ProjectBuilder(engine)


@pytest.fixture
def validator() -> TextValidator:
    return TextValidator()


@pytest.fixture
def scenario_project(engine) -> ProjectArtifact:
    """security, web, monitoring composed for production."""
    return engine.compose(SCENARIO_SELECTION, Environment.PRODUCTION)


@pytest.fixture
def custom_templates(tmp_path) -> Path:
    """Minimal resource directory with one generic role called ``hello``."""
    (tmp_path / "registry.yaml").write_text(
        "roles:\n"
        "  hello:\n"
        "    title: Hello\n"
        "    description: Prints a greeting\n"
        "    tier: generic\n"
        "aliases:\n"
        "  hi: hello\n"
    )
    tasks_dir = tmp_path / "roles" / "hello" / "tasks"
    tasks_dir.mkdir(parents=True)
    (tasks_dir / "main.yml.j2").write_text(
        "---\n"
        "- name: Greet [[ environment ]]\n"
        "  ansible.builtin.debug:\n"
        "    msg: \"Hello from {{ inventory_hostname }}\"\n"
    )
    (tmp_path / "ansible.cfg.j2").write_text("[defaults]\ninventory = [[ inventory_path ]]\n")
    (tmp_path / "README.md.j2").write_text("# [[ app_name ]] ([[ environment ]])\n")
    return tmp_path
