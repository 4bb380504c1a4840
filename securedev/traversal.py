"""
File system traversal: walk a project tree and collect files to scan.

This module recursively enumerates candidate files under a project root.
Well-known noise directories (dependency caches, build output, VCS metadata)
are pruned by name before recursion, and every remaining entry is checked
against the project's ignore rules using its path relative to the root.

Typical usage:
    from pathlib import Path
    from securedev.ignore_rules import load_ignore_rules
    from securedev.traversal import collect_files

    root = Path("./my_project")
    files = collect_files(root, {".py", ".ts"}, load_ignore_rules(root))

    # Secrets variant: also pick up .env, .env.local, ...
    files = collect_files(root, {".py"}, include_env_files=True)
"""

import logging
from pathlib import Path
from typing import AbstractSet, Callable, Optional

from securedev.ignore_rules import IsIgnored

logger = logging.getLogger(__name__)

# Directories pruned by name regardless of ignore-file content
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset(
    {
        # Dependency trees
        "node_modules",
        "vendor",
        # Build output
        "dist",
        # Version control and agent hand-off metadata
        ".git",
        ".ai",
        # Coverage artifacts
        "coverage",
        # Caches and virtual environments
        "__pycache__",
        ".venv",
        "venv",
    }
)

# Generated files that never hold hand-written secrets
SKIP_FILES: frozenset[str] = frozenset(
    {
        ".aiignore",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
    }
)

ENV_FILE_PREFIX = ".env"


def _never_ignored(rel_path: str) -> bool:
    return False


def should_skip_directory(dir_path: Path, skip_dirs: AbstractSet[str]) -> bool:
    """
    Check if a directory is pruned by name.

    Examples:
        >>> should_skip_directory(Path("node_modules"), DEFAULT_SKIP_DIRS)
        True
        >>> should_skip_directory(Path("src"), DEFAULT_SKIP_DIRS)
        False
    """
    return dir_path.name in skip_dirs


def is_candidate_file(
    path: Path,
    extensions: AbstractSet[str],
    include_env_files: bool = False,
) -> bool:
    """
    Check whether a file should be handed to a scanner.

    Args:
        path: File to check (only the name is inspected).
        extensions: Lower-case extensions to accept, including the dot.
        include_env_files: Also accept any name starting with ``.env``.

    Examples:
        >>> is_candidate_file(Path("app.TS"), {".ts"})
        True
        >>> is_candidate_file(Path(".env.local"), {".ts"}, include_env_files=True)
        True
        >>> is_candidate_file(Path("package-lock.json"), {".json"})
        False
    """
    if path.name in SKIP_FILES:
        return False
    if path.suffix.lower() in extensions:
        return True
    return include_env_files and path.name.startswith(ENV_FILE_PREFIX)


def relative_posix(path: Path, root: Path) -> str:
    """Path relative to root with forward slashes."""
    return path.relative_to(root).as_posix()


def collect_files(
    root: Path,
    extensions: AbstractSet[str],
    is_ignored: Optional[IsIgnored] = None,
    *,
    include_env_files: bool = False,
    skip_dirs: Optional[AbstractSet[str]] = None,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively collect scannable files under ``root``, depth-first.

    Args:
        root: Project root. Relative paths for ignore matching are computed
              against this directory, not the directory being walked.
        extensions: Lower-case file extensions to accept (e.g. {".py", ".ts"}).
        is_ignored: Predicate over root-relative paths; ignored directories
                    are skipped entirely. None disables ignore matching.
        include_env_files: Accept ``.env*`` files whatever their extension.
        skip_dirs: Extra directory names to prune on top of DEFAULT_SKIP_DIRS.
        filter_fn: Optional additional filter on candidate files.

    Returns:
        Absolute paths. Entries of each directory are visited in name order,
        so the result is stable for a given tree.

    Notes:
        - Symlinks are never followed.
        - Unreadable directories (permission denied, vanished mid-walk)
          contribute no files; the walk carries on with their siblings.
        - A missing root yields an empty list rather than an error.
    """
    root = root.resolve()
    pruned = DEFAULT_SKIP_DIRS | frozenset(skip_dirs or ())
    ignored = is_ignored or _never_ignored

    logger.info("Starting traversal from: %s", root)

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        """Recursive helper to walk directory tree."""
        try:
            entries = sorted(current_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)
            return

        for entry in entries:
            if should_skip_directory(entry, pruned):
                continue
            if entry.is_symlink():
                logger.debug("Skipping symlink: %s", entry)
                continue

            rel_path = relative_posix(entry, root)
            if ignored(rel_path):
                logger.debug("Ignored by rules: %s", rel_path)
                continue

            if entry.is_dir():
                _walk_directory(entry)
            elif entry.is_file() and is_candidate_file(entry, extensions, include_env_files):
                if filter_fn is not None and not filter_fn(entry):
                    logger.debug("Filtered out by custom filter: %s", entry)
                    continue
                collected_files.append(entry)

    _walk_directory(root)

    logger.info(
        "Traversal complete: found %d file(s) in %s",
        len(collected_files),
        root,
    )
    return collected_files
