"""Configuration management using Pydantic Settings.

Loads environment variables from .env file and provides defaults for development.
Also supports settings from a YAML file with CORTEXOPS_* environment variable overrides.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATHS = [
    Path.home() / ".cortexops" / "config.yml",
    Path("/etc/cortexops/config.yml"),
]


class Config(BaseSettings):
    """Application configuration loaded from environment variables.

    All settings have defaults suitable for local use. File settings are read
    from ~/.cortexops/config.yml or /etc/cortexops/config.yml, and CORTEXOPS_*
    environment variables take precedence over both.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    """Python logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    # Composition
    DEFAULT_ENVIRONMENT: str = "production"
    """Environment used when the caller does not name one."""

    TEMPLATES_DIR: Optional[str] = None
    """Override directory for role resources (defaults to the packaged templates)."""

    # Export
    OUTPUT_DIR: str = "ansible-project"
    """Directory generated projects are written to."""

    # Batch generation
    BATCH_MAX_WORKERS: int = 4
    """Upper bound on concurrently composed batch jobs."""

    APP_NAME: str = "CortexOps"
    """Application name for generated headers."""

    def __init__(self, config_paths: Optional[list[Path]] = None, **data) -> None:
        """Initialize config with environment and file-based overrides.

        Args:
            config_paths: YAML files to check, first existing one wins
                          (defaults to user home, then system)
        """
        super().__init__(**data)
        self._load_file_config(CONFIG_PATHS if config_paths is None else config_paths)

    def _load_file_config(self, config_paths: list[Path]) -> None:
        """Load settings from YAML file, then apply CORTEXOPS_* overrides."""
        config_file_path = None
        for path in config_paths:
            if path.exists():
                config_file_path = path
                break

        if config_file_path:
            try:
                with open(config_file_path) as f:
                    file_config = yaml.safe_load(f) or {}
                logger.info(f"Loaded config from {config_file_path}")

                for key in ("LOG_LEVEL", "DEFAULT_ENVIRONMENT", "TEMPLATES_DIR", "OUTPUT_DIR"):
                    if file_config.get(key.lower()):
                        setattr(self, key, str(file_config[key.lower()]))

                if "batch_max_workers" in file_config:
                    self.BATCH_MAX_WORKERS = int(file_config["batch_max_workers"])

            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {config_file_path}: {e}")

        if os.getenv("CORTEXOPS_LOG_LEVEL"):
            self.LOG_LEVEL = os.getenv("CORTEXOPS_LOG_LEVEL")

        if os.getenv("CORTEXOPS_ENVIRONMENT"):
            self.DEFAULT_ENVIRONMENT = os.getenv("CORTEXOPS_ENVIRONMENT")

        if os.getenv("CORTEXOPS_TEMPLATES_DIR"):
            self.TEMPLATES_DIR = os.getenv("CORTEXOPS_TEMPLATES_DIR")

        if os.getenv("CORTEXOPS_OUTPUT_DIR"):
            self.OUTPUT_DIR = os.getenv("CORTEXOPS_OUTPUT_DIR")

        if os.getenv("CORTEXOPS_BATCH_WORKERS"):
            try:
                self.BATCH_MAX_WORKERS = int(os.getenv("CORTEXOPS_BATCH_WORKERS"))
            except ValueError:
                logger.warning(
                    f"Invalid CORTEXOPS_BATCH_WORKERS value: {os.getenv('CORTEXOPS_BATCH_WORKERS')}"
                )

        if self.BATCH_MAX_WORKERS < 1:
            logger.warning(f"BATCH_MAX_WORKERS={self.BATCH_MAX_WORKERS} is below 1, using 1")
            self.BATCH_MAX_WORKERS = 1

        logger.debug(
            f"Config loaded: "
            f"log_level={self.LOG_LEVEL}, "
            f"environment={self.DEFAULT_ENVIRONMENT}, "
            f"output_dir={self.OUTPUT_DIR}, "
            f"batch_workers={self.BATCH_MAX_WORKERS}"
        )
