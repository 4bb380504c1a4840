"""
User configuration persisted between runs.

Stored as JSON in ``~/.securedev.json`` (or wherever ``SECUREDEV_CONFIG``
points). The scan engine itself never reads this; the CLI resolves the
workspace root and the guard's blocking severity from it before scanning.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SECUREDEV_CONFIG"
DEFAULT_CONFIG_NAME = ".securedev.json"

BlockSeverity = Literal["CRITICAL", "HIGH"]


class Config(BaseModel):
    """Persisted settings. Every field is optional; missing means default."""

    workspace_root: Optional[str] = Field(None, description="Directory holding the projects to scan")
    block_on_severity: BlockSeverity = Field(
        "CRITICAL", description="Lowest severity that makes `guard` fail"
    )
    exclude_projects: list[str] = Field(default_factory=list)


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_NAME


def load_config(path: Optional[Path] = None) -> Config:
    """Load the config file; a missing or broken file yields the defaults."""
    path = path or config_path()
    if not path.exists():
        return Config()
    try:
        return Config.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return Config()


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2), encoding="utf-8")
    return path
