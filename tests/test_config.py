"""Tests for configuration loading."""

import pytest

from cortexops.common.config import Config

ENV_VARS = [
    "CORTEXOPS_LOG_LEVEL",
    "CORTEXOPS_ENVIRONMENT",
    "CORTEXOPS_TEMPLATES_DIR",
    "CORTEXOPS_OUTPUT_DIR",
    "CORTEXOPS_BATCH_WORKERS",
    "LOG_LEVEL",
    "DEFAULT_ENVIRONMENT",
    "TEMPLATES_DIR",
    "OUTPUT_DIR",
    "BATCH_MAX_WORKERS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Test Config defaults and overrides."""

    def test_defaults(self):
        config = Config(config_paths=[])

        assert config.LOG_LEVEL == "INFO"
        assert config.DEFAULT_ENVIRONMENT == "production"
        assert config.TEMPLATES_DIR is None
        assert config.BATCH_MAX_WORKERS == 4

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "log_level: DEBUG\n"
            "default_environment: staging\n"
            "output_dir: /tmp/projects\n"
            "batch_max_workers: 8\n"
        )

        config = Config(config_paths=[tmp_path / "absent.yml", path])

        assert config.LOG_LEVEL == "DEBUG"
        assert config.DEFAULT_ENVIRONMENT == "staging"
        assert config.OUTPUT_DIR == "/tmp/projects"
        assert config.BATCH_MAX_WORKERS == 8

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yml"
        path.write_text("default_environment: staging\n")
        monkeypatch.setenv("CORTEXOPS_ENVIRONMENT", "production")
        monkeypatch.setenv("CORTEXOPS_BATCH_WORKERS", "2")

        config = Config(config_paths=[path])

        assert config.DEFAULT_ENVIRONMENT == "production"
        assert config.BATCH_MAX_WORKERS == 2

    def test_invalid_worker_count_ignored(self, monkeypatch):
        monkeypatch.setenv("CORTEXOPS_BATCH_WORKERS", "many")
        assert Config(config_paths=[]).BATCH_MAX_WORKERS == 4

    def test_worker_count_clamped(self, monkeypatch):
        monkeypatch.setenv("CORTEXOPS_BATCH_WORKERS", "0")
        assert Config(config_paths=[]).BATCH_MAX_WORKERS == 1

    def test_malformed_file_is_skipped(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("log_level: [unclosed\n")

        assert Config(config_paths=[path]).LOG_LEVEL == "INFO"
