"""Project discovery: find scannable projects under a workspace directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

MANIFEST_PATH = Path(".ai") / "handoff" / "MANIFEST.json"
CODE_MARKERS = ("package.json", "go.mod", "requirements.txt", "pyproject.toml", "Cargo.toml")


class ProjectInfo(BaseModel):
    name: str
    project_path: str
    phase: Optional[str] = None
    quick_context: Optional[str] = None
    has_aahp: bool = False


def _read_manifest(path: Path) -> Optional[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Unreadable manifest %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def describe_project(path: Path) -> Optional[ProjectInfo]:
    """ProjectInfo for a directory, or None if it does not look like a project."""
    manifest_file = path / MANIFEST_PATH
    if manifest_file.exists():
        manifest = _read_manifest(manifest_file)
        if manifest is None:
            return ProjectInfo(name=path.name, project_path=str(path))
        last_session = manifest.get("last_session") or {}
        return ProjectInfo(
            name=path.name,
            project_path=str(path),
            phase=last_session.get("phase"),
            quick_context=manifest.get("quick_context"),
            has_aahp=True,
        )

    if any((path / marker).exists() for marker in CODE_MARKERS):
        return ProjectInfo(name=path.name, project_path=str(path))
    return None


def discover_projects(workspace_root: Path, exclude: Iterable[str] = ()) -> list[ProjectInfo]:
    """Projects directly under the workspace root, sorted by name."""
    if not workspace_root.is_dir():
        logger.warning("Workspace root does not exist: %s", workspace_root)
        return []

    excluded = set(exclude)
    try:
        entries = list(workspace_root.iterdir())
    except OSError as e:
        logger.warning("Cannot list workspace %s: %s", workspace_root, e)
        return []

    projects: list[ProjectInfo] = []
    for entry in entries:
        if not entry.is_dir() or entry.name.startswith(".") or entry.name in excluded:
            continue
        info = describe_project(entry)
        if info is not None:
            projects.append(info)
    return sorted(projects, key=lambda p: p.name.lower())
