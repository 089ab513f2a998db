"""
Configuration loader — reads buildgate.yml into a PipelineConfig.

This is the primary entry point for loading pipeline configuration.
It reads YAML, validates against the Pydantic schema, and falls back to
the built-in pipeline when no file exists.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from buildgate.core.config.defaults import INSTALL_PLUGIN_STAGE, default_pipeline
from buildgate.core.models.pipeline import PipelineConfig

logger = logging.getLogger(__name__)

# Default config filename
PIPELINE_CONFIG_FILE = "buildgate.yml"


class ConfigError(Exception):
    """Raised when pipeline configuration is invalid or missing."""


def find_pipeline_file(start_dir: Path | None = None) -> Path | None:
    """Search for buildgate.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to buildgate.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PIPELINE_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_pipeline(path: Path) -> PipelineConfig:
    """Load and validate a pipeline file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading pipeline config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "pipeline" key or be flat
    if "pipeline" in data and isinstance(data["pipeline"], dict):
        data = data["pipeline"]

    try:
        config = PipelineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid pipeline configuration in {path}: {e}") from e

    logger.info(
        "Loaded pipeline '%s' with %d tools and %d stages",
        config.name, len(config.tools), len(config.stages),
    )
    return config


def resolve_pipeline(
    config_path: Path | None = None,
    start_dir: Path | None = None,
    install_plugin: bool = False,
) -> tuple[PipelineConfig, Path | None]:
    """Pick the pipeline to run.

    An explicit ``config_path`` must exist. Otherwise buildgate.yml is
    searched upward from ``start_dir``; if none is found the built-in
    pipeline is returned.

    Args:
        config_path: Explicit pipeline file.
        start_dir: Where to start searching (default: cwd).
        install_plugin: Enable the optional plugin install stage of the
            built-in pipeline. Ignored for file-based pipelines.

    Returns:
        (config, path) — path is None for the built-in pipeline.
    """
    if config_path is None:
        config_path = find_pipeline_file(start_dir)

    if config_path is None:
        logger.debug("No %s found, using built-in pipeline", PIPELINE_CONFIG_FILE)
        return default_pipeline(install_plugin=install_plugin), None

    config = load_pipeline(config_path)
    if install_plugin and config.get_stage(INSTALL_PLUGIN_STAGE.label) is None:
        logger.warning("--install-plugin only applies to the built-in pipeline; ignored")
    return config, config_path


def pipeline_root(config_path: Path | None) -> Path:
    """Directory stages run from: the config file's directory, or cwd."""
    if config_path is None:
        return Path.cwd()
    return config_path.parent.resolve()
