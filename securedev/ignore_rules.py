"""
Ignore rules: compile gitignore-style pattern files into a path predicate.

Only the subset of gitignore syntax that matters for pruning a scan is
supported. Negation lines (``!pattern``) are read and discarded, so a
pattern can never un-ignore a path.

Typical usage:
    from pathlib import Path
    from securedev.ignore_rules import load_ignore_rules

    is_ignored = load_ignore_rules(Path("./my_project"))
    is_ignored("dist/bundle.js")
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterable, Sequence

logger = logging.getLogger(__name__)

# Ignore files read from the project root, in order
IGNORE_FILE_NAMES: tuple[str, ...] = (".gitignore", ".aiignore")

IsIgnored = Callable[[str], bool]

_REGEX_SPECIALS = re.compile(r"[.+^${}()|\[\]\\]")


def pattern_to_regex(raw: str) -> re.Pattern[str]:
    """
    Convert one gitignore-style pattern into a compiled regex.

    A pattern is anchored to the root when it contains a slash anywhere other
    than as its final character; otherwise it may match at any segment
    boundary. The compiled regex also accepts anything below a matched path,
    so ``build`` covers ``build/out/app.js``.

    Examples:
        >>> bool(pattern_to_regex("secrets.txt").search("a/b/secrets.txt"))
        True
        >>> bool(pattern_to_regex("src/gen").search("lib/src/gen"))
        False
    """
    anchored = "/" in (raw[:-1] if raw.endswith("/") else raw)

    body = raw[1:] if raw.startswith("/") else raw
    if body.endswith("/"):
        body = body[:-1]

    body = _REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), body)
    body = body.replace("**", "\x00")
    body = body.replace("*", "[^/]*")
    body = body.replace("\x00", ".*")
    body = body.replace("?", "[^/]")

    if anchored:
        return re.compile(f"^{body}(/.*)?$")
    return re.compile(f"(^|/){body}(/.*)?$")


def parse_ignore_lines(lines: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile every usable line; blanks, comments and negations are skipped."""
    rules: list[re.Pattern[str]] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or stripped.startswith("!"):
            continue
        rules.append(pattern_to_regex(stripped))
    return rules


def parse_ignore_file(path: Path) -> list[re.Pattern[str]]:
    """Compile an ignore file. A missing or unreadable file yields no rules."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Ignore file not readable %s: %s", path, e)
        return []
    return parse_ignore_lines(text.split("\n"))


class IgnoreMatcher:
    """Predicate over project-relative paths built from compiled ignore rules."""

    def __init__(self, rules: Sequence[re.Pattern[str]] = ()) -> None:
        self.rules = tuple(rules)

    @classmethod
    def from_files(cls, paths: Iterable[Path]) -> "IgnoreMatcher":
        rules: list[re.Pattern[str]] = []
        for path in paths:
            rules.extend(parse_ignore_file(path))
        return cls(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __call__(self, rel_path: str) -> bool:
        return self.is_ignored(rel_path)

    def is_ignored(self, rel_path: str) -> bool:
        if not self.rules:
            return False
        normalized = rel_path.replace("\\", "/")
        return any(rule.search(normalized) for rule in self.rules)


def load_ignore_rules(project_root: Path) -> IgnoreMatcher:
    """
    Load ``.gitignore`` and ``.aiignore`` from the project root.

    Returns a matcher that, given a path relative to the project root,
    reports whether it should be left out of the scan.
    """
    matcher = IgnoreMatcher.from_files(project_root / name for name in IGNORE_FILE_NAMES)
    logger.debug("Loaded %d ignore rule(s) for %s", len(matcher), project_root)
    return matcher
