# Insecure coding pattern detection: injection, XSS, dynamic code execution and risky habits.

from __future__ import annotations

import re

from securedev.findings.models import ScannerModule, Severity
from securedev.rules.base import RuleSet, rule
from securedev.suppressions import PATTERN_STAGES, Candidate

MAX_FINDINGS_PER_RULE = 5
SNIPPET_LENGTH = 120

JS = {".ts", ".js"}
JSX = {".ts", ".js", ".tsx", ".jsx"}

PATTERN_RULES = (
    rule(
        "SQL Injection - string concatenation in query",
        r"(?:query|execute|db\.run|sequelize\.query|knex\.raw)\s*\(\s*[`\"'].*?\+\s*(?:req\.|params\.|body\.|query\.)",
        Severity.CRITICAL,
        "Use parameterized queries or prepared statements. Never concatenate user input into SQL.",
        extensions={".ts", ".js", ".py", ".php"},
    ),
    rule(
        "SQL Injection - raw query with template literal",
        r"(?:query|raw|execute)\s*\(`[^`]*\$\{(?:req\.|params\.|body\.|query\.|user\.)",
        Severity.CRITICAL,
        "Use parameterized queries. Template literals with user input in SQL are dangerous.",
        extensions=JS,
    ),
    rule(
        "XSS - dangerouslySetInnerHTML",
        r"dangerouslySetInnerHTML\s*=\s*\{\s*\{\s*__html\s*:",
        Severity.HIGH,
        "Avoid dangerouslySetInnerHTML. If necessary, sanitize with DOMPurify first.",
        extensions={".tsx", ".jsx", ".ts", ".js"},
    ),
    rule(
        "XSS - innerHTML with variable",
        r"\.innerHTML\s*=\s*(?![\"'`]<)",
        Severity.HIGH,
        "Use textContent instead of innerHTML, or sanitize the value with DOMPurify.",
        extensions=JSX,
    ),
    rule(
        "eval() usage",
        r"\beval\s*\(",
        Severity.HIGH,
        "Avoid eval(). Use JSON.parse() for JSON, or safer alternatives.",
        extensions=JS,
    ),
    rule(
        "new Function() usage",
        r"new\s+Function\s*\(",
        Severity.HIGH,
        "Avoid new Function() - it executes arbitrary code similar to eval().",
        extensions=JS,
    ),
    rule(
        "Path traversal - unsanitized path join with user input",
        r"path\.(?:join|resolve)\s*\([^)]*(?:req\.|params\.|body\.|query\.)[^)]*\)",
        Severity.HIGH,
        "Validate and sanitize file paths. Use path.normalize() and verify the result stays "
        "within allowed directories.",
        extensions=JS,
    ),
    rule(
        "Command injection - exec with user input",
        r"(?:exec|execSync|spawn)\s*\([^)]*(?:req\.|params\.|body\.|query\.)[^)]*\)",
        Severity.CRITICAL,
        "Never pass user input to shell commands. Use allowlists and escape inputs if shell "
        "execution is required.",
        extensions=JS,
    ),
    rule(
        "Prototype pollution",
        r"Object\.assign\s*\(\s*(?:req\.|this\.|global\.)",
        Severity.HIGH,
        "Validate object shapes before merging. Use Object.create(null) for prototype-free objects.",
        extensions=JS,
    ),
    rule(
        "Regex DoS (ReDoS) - nested quantifiers",
        r"new RegExp\([^)]*\([^)]*\+[^)]*\)\+",
        Severity.MEDIUM,
        "Avoid nested quantifiers in regular expressions to prevent ReDoS attacks.",
        extensions=JS,
    ),
    rule(
        "Hardcoded localhost/IP in production code",
        r"(?:http://localhost|http://127\.0\.0\.1|http://0\.0\.0\.0)(?!.*(?:dev|test|local))",
        Severity.LOW,
        "Use environment variables for URLs. Hardcoded localhost addresses may cause issues in production.",
        extensions={".ts", ".js", ".py"},
    ),
    rule(
        "console.log with sensitive data patterns",
        r"console\.(?:log|info|debug)\s*\([^)]*(?:password|secret|token|key|credential)[^)]*\)",
        Severity.MEDIUM,
        "Remove logging of sensitive data. Use redaction for debug output.",
        flags=re.IGNORECASE,
        extensions=JS,
    ),
    rule(
        "TODO/FIXME security note",
        r"//\s*(?:TODO|FIXME|HACK|XXX).*(?:security|auth|secret|password|safe|inject)",
        Severity.LOW,
        "Address this security TODO before production deployment.",
        flags=re.IGNORECASE,
        extensions={".ts", ".js", ".py", ".go", ".php"},
        allow_in_comments=True,
    ),
)

PATTERN_EXTENSIONS: frozenset[str] = frozenset(
    ext for r in PATTERN_RULES for ext in (r.extensions or ())
)


def describe_pattern(candidate: Candidate) -> str:
    snippet = candidate.line_text.strip()[:SNIPPET_LENGTH]
    return f"{candidate.rel_path}:{candidate.line_number} - {snippet}"


PATTERNS_RULESET = RuleSet(
    module=ScannerModule.PATTERNS,
    rules=PATTERN_RULES,
    max_findings_per_rule=MAX_FINDINGS_PER_RULE,
    stages=PATTERN_STAGES,
    describe=describe_pattern,
    extensions=PATTERN_EXTENSIONS,
)
