"""
Configuration loader — reads storegen.yml into a GeneratorConfig.

The file is optional: without one, every setting takes its default and
paths are relative to the working directory.  It is found by walking
up from the start directory, so the CLI works from subdirectories.

    domain: sqlite
    sources: [app]
    output: .
    exclude: [migrations]
    fail_on_diagnostics: true
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from storegen.adapters.python_source import DEFAULT_EXCLUDE

logger = logging.getLogger(__name__)

CONFIG_FILE = "storegen.yml"


class ConfigError(Exception):
    """Raised when storegen configuration is invalid or unreadable."""


class GeneratorConfig(BaseModel):
    """Settings for one generate run."""

    domain: str = "sqlite"
    sources: list[str] = Field(default_factory=lambda: ["."])
    output: str = "."
    exclude: list[str] = Field(default_factory=list)
    fail_on_diagnostics: bool = True

    # Directory the relative paths above are resolved against
    base_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    @property
    def output_dir(self) -> Path:
        return (self.base_dir / self.output).resolve()

    @property
    def exclude_patterns(self) -> tuple[str, ...]:
        """Default exclusions plus the configured ones."""
        return DEFAULT_EXCLUDE + tuple(p for p in self.exclude if p not in DEFAULT_EXCLUDE)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for storegen.yml starting from the given directory, walking up.

    Returns:
        Path to storegen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> GeneratorConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to storegen.yml.  If None, searches upward and
              falls back to defaults when nothing is found.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return GeneratorConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

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

    # A single source may be given as a plain string
    if isinstance(data.get("sources"), str):
        data["sources"] = [data["sources"]]

    try:
        config = GeneratorConfig.model_validate({**data, "base_dir": path.parent.resolve()})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config %s (domain=%s, %d source(s))", path, config.domain, len(config.sources))
    return config
