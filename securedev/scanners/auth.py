"""
Auth scanner: HTTP mutation routes that look unauthenticated.

Heuristic only. If no source file mentions anything auth-like but the
project pulls in a server framework, one project-level finding is raised.
Otherwise every POST/PUT/PATCH/DELETE route whose surrounding lines carry
no auth indicator is reported.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from securedev.engine import SourceText, read_source
from securedev.findings.models import Finding, ScannerModule, Severity
from securedev.traversal import collect_files, relative_posix

logger = logging.getLogger(__name__)

AUTH_INDICATORS_RE = re.compile(
    r"auth|guard|protect|middleware|jwt|session|verify|require|authenticated|"
    r"isAuth|checkAuth|passport|bearer|token",
    re.IGNORECASE,
)
SERVER_FRAMEWORK_RE = re.compile(r"(?:express|fastify|@nestjs/core|koa)\b")
MUTATION_ROUTE_RE = re.compile(
    r"(?:router|app|server)\.(post|put|patch|delete)\s*\(\s*['\"`]([^'\"`,]+)['\"`]",
    re.IGNORECASE,
)
HAS_MUTATION_RE = re.compile(r"(router|app|server)\.(post|put|patch|delete)\s*\(", re.IGNORECASE)

AUTH_EXTENSIONS = frozenset({".ts", ".js"})
AUTH_SKIP_DIRS = frozenset({"test", "tests", "__tests__", "spec"})

# Window around a route: two lines above, the route line and five below
CONTEXT_BEFORE = 3
CONTEXT_AFTER = 5

ROUTE_REMEDIATION = (
    "Add authentication middleware to mutation routes. "
    "Example: router.post('/path', authMiddleware, handler)"
)
NO_AUTH_REMEDIATION = (
    "Implement authentication (JWT, sessions, OAuth) before exposing endpoints. "
    "Use middleware like passport.js, @nestjs/jwt, or express-jwt."
)


def _not_a_test_file(path: Path) -> bool:
    return not (path.name.endswith(".test.ts") or path.name.endswith(".spec.ts"))


def find_unprotected_routes(content: str, rel_path: str) -> list[Finding]:
    """Mutation routes in one file with no auth indicator nearby."""
    if not HAS_MUTATION_RE.search(content):
        return []

    source = SourceText.from_content(content)
    findings: list[Finding] = []
    for match in MUTATION_ROUTE_RE.finditer(content):
        method = match.group(1).upper()
        route = match.group(2)
        line_number = source.line_number_at(match.start())

        start = max(0, line_number - CONTEXT_BEFORE)
        end = min(len(source.lines), line_number + CONTEXT_AFTER)
        window = "\n".join(source.lines[start:end])
        if AUTH_INDICATORS_RE.search(window):
            continue

        findings.append(
            Finding(
                module=ScannerModule.AUTH,
                severity=Severity.HIGH,
                title=f"Unprotected {method} route",
                description=f"{rel_path}:{line_number} - Route {route} may lack authentication middleware",
                file=rel_path,
                line=line_number,
                remediation=ROUTE_REMEDIATION,
            )
        )
    return findings


def scan_auth(project_path: str | Path) -> list[Finding]:
    root = Path(project_path).resolve()
    files = collect_files(
        root,
        AUTH_EXTENSIONS,
        skip_dirs=AUTH_SKIP_DIRS,
        filter_fn=_not_a_test_file,
    )

    sources: list[tuple[Path, str]] = []
    for path in files:
        content = read_source(path)
        if content is not None:
            sources.append((path, content))

    if not any(AUTH_INDICATORS_RE.search(content) for _, content in sources):
        if any(SERVER_FRAMEWORK_RE.search(content) for _, content in sources):
            return [
                Finding(
                    module=ScannerModule.AUTH,
                    severity=Severity.HIGH,
                    title="No authentication middleware detected",
                    description=(
                        "This project appears to be an HTTP API/server but has no "
                        "authentication middleware configured."
                    ),
                    remediation=NO_AUTH_REMEDIATION,
                )
            ]
        return []

    findings: list[Finding] = []
    for path, content in sources:
        findings.extend(find_unprotected_routes(content, relative_posix(path, root)))
    logger.info("auth: %d finding(s) in %d file(s)", len(findings), len(sources))
    return findings


async def scan(project_path: str | Path) -> list[Finding]:
    return await asyncio.to_thread(scan_auth, project_path)
