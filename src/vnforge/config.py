"""Configuration management for vnforge."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from vnforge.context.models import ContextConfig
from vnforge.exceptions import ConfigError
from vnforge.scheduler.models import SchedulerConfig

VNFORGE_DIR = ".vnforge"
CONFIG_FILE = "config.json"


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    context: ContextConfig = Field(default_factory=ContextConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .vnforge directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / VNFORGE_DIR).is_dir():
            return current
        current = current.parent
    if (current / VNFORGE_DIR).is_dir():
        return current
    return None


def get_vnforge_dir(root: Path) -> Path:
    """Get the .vnforge directory for a project root."""
    return root / VNFORGE_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .vnforge/config.json."""
    config_path = get_vnforge_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            return ProjectConfig.model_validate(json.loads(config_path.read_text()))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config at {config_path}: {e}") from e
    return ProjectConfig(name=root.name, root_path=str(root))


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .vnforge/config.json."""
    vn_dir = get_vnforge_dir(root)
    vn_dir.mkdir(parents=True, exist_ok=True)
    config_path = vn_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(by_alias=True), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'context.budgets.local').

    Keys are the names written to config.json, so ``context.weights.lambda``
    and ``context.budgets.global`` use their serialized spelling.
    """
    parts = key.split(".")
    data = config.model_dump(by_alias=True)
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {e}") from e
