"""Pattern-based secret detection over scanned text records.

Consumes records keyed by ``path`` + ``content``. Checks run on a small
thread pool; findings are sorted by path and position so reports are stable.
"""

from __future__ import annotations

import json
import logging
import re
from bisect import bisect_right
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass

from .file_tree_model import FileRecord

logger = logging.getLogger(__name__)

MAX_CONCURRENT_CHECKS = 5
SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class SecretRule:
    rule_id: str
    description: str
    pattern: re.Pattern[str]
    severity: str = SEVERITY_ERROR


DEFAULT_RULES: tuple[SecretRule, ...] = (
    SecretRule("aws-access-key", "AWS access key id", re.compile(r"\bAKIA[0-9A-Z]{16}\b")),
    SecretRule(
        "private-key",
        "Private key block",
        re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----"),
    ),
    SecretRule("github-token", "GitHub token", re.compile(r"\bgh[pousr]_[0-9A-Za-z]{36}\b")),
    SecretRule("google-api-key", "Google API key", re.compile(r"\bAIza[0-9A-Za-z\-_]{35}\b")),
    SecretRule("slack-token", "Slack token", re.compile(r"\bxox[abposr]-[0-9A-Za-z-]{10,}\b")),
    SecretRule(
        "password-assignment",
        "Password in code",
        re.compile(r"(?i)\b(?:password|passwd|pwd)\s*[:=]\s*['\"][^'\"]{4,}['\"]"),
        SEVERITY_WARNING,
    ),
    SecretRule(
        "api-key-assignment",
        "API key in code",
        re.compile(r"(?i)\b(?:api[_-]?key|api[_-]?secret|secret[_-]?key)\s*[:=]\s*['\"][^'\"]{8,}['\"]"),
        SEVERITY_WARNING,
    ),
)


@dataclass(frozen=True)
class SecretFinding:
    path: str
    line: int
    column: int
    rule_id: str
    message: str
    severity: str
    match: str


def redact(secret: str) -> str:
    """Keep the first four characters and mask the rest."""
    if len(secret) <= 4:
        return "*" * len(secret)
    return secret[:4] + "*" * (len(secret) - 4)


class SecurityChecker:
    """Run every rule over every text record's content."""

    def __init__(self, rules: Iterable[SecretRule] = DEFAULT_RULES, max_workers: int = MAX_CONCURRENT_CHECKS) -> None:
        self.rules = tuple(rules)
        self.max_workers = max(1, max_workers)

    def check_content(self, path: str, content: str) -> list[SecretFinding]:
        findings: list[SecretFinding] = []
        line_starts = [0]
        line_starts.extend(index + 1 for index, ch in enumerate(content) if ch == "\n")
        for rule in self.rules:
            for match in rule.pattern.finditer(content):
                offset = match.start()
                line_index = _line_index(line_starts, offset)
                findings.append(
                    SecretFinding(
                        path=path,
                        line=line_index + 1,
                        column=offset - line_starts[line_index] + 1,
                        rule_id=rule.rule_id,
                        message=f"Potential {rule.description} found",
                        severity=rule.severity,
                        match=redact(match.group(0)),
                    )
                )
        return findings

    def check(self, records: Iterable[FileRecord]) -> list[SecretFinding]:
        """Check text records concurrently and return sorted findings."""
        targets = [
            record
            for record in records
            if not record.is_dir and record.is_text and isinstance(record.content, str) and record.content
        ]
        findings: list[SecretFinding] = []
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="diffdeck-secrets") as pool:
            for result in pool.map(lambda record: self.check_content(record.path, record.content), targets):
                findings.extend(result)
        findings.sort(key=lambda finding: (finding.path, finding.line, finding.column, finding.rule_id))
        logger.debug("Security check found %d findings in %d files", len(findings), len(targets))
        return findings


def _line_index(line_starts: list[int], offset: int) -> int:
    return bisect_right(line_starts, offset) - 1


def create_report(findings: list[SecretFinding], fmt: str = "text") -> str:
    """Render findings as ``text`` or ``json``."""
    if fmt == "json":
        return json.dumps([asdict(finding) for finding in findings], indent=2)
    if fmt != "text":
        raise ValueError(f"unsupported report format: {fmt}")

    out = ["Security Check Report", "=====================", ""]
    if not findings:
        out.append("No security issues found.")
        return "\n".join(out) + "\n"
    for finding in findings:
        out.append(f"File: {finding.path}")
        out.append(f"Line: {finding.line}, Column: {finding.column}")
        out.append(f"Rule: {finding.rule_id}")
        out.append(f"Severity: {finding.severity}")
        out.append(f"Message: {finding.message}")
        out.append(f"Match: {finding.match}")
        out.append("")
    return "\n".join(out) + "\n"


__all__ = [
    "DEFAULT_RULES",
    "SecretFinding",
    "SecretRule",
    "SecurityChecker",
    "create_report",
    "redact",
]
