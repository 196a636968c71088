"""Report aggregation and output adapters (plain text, structured records, JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from cstyleiq.rules.base_rule import RuleViolation, ViolationSeverity

__all__ = ["FileReport", "Report", "build_report", "render_text", "render_records", "render_json"]

_SEVERITY_ORDER = (ViolationSeverity.ERROR, ViolationSeverity.WARNING, ViolationSeverity.INFO)


@dataclass(frozen=True)
class FileReport:
    path: str
    violations: tuple[RuleViolation, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class Report:
    files: tuple[FileReport, ...] = field(default_factory=tuple)

    @property
    def violations(self) -> list[RuleViolation]:
        return [v for f in self.files for v in f.violations]

    @property
    def total(self) -> int:
        return sum(len(f.violations) for f in self.files)

    @property
    def passed(self) -> bool:
        return self.total == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def summary(self) -> dict[str, int]:
        """Violation count per severity, zeros included."""
        counts = {sev.value: 0 for sev in _SEVERITY_ORDER}
        for v in self.violations:
            counts[v.severity.value] += 1
        return counts

    def for_path(self, path: str) -> FileReport | None:
        return next((f for f in self.files if f.path == path), None)


def build_report(results: Mapping[str, Sequence[RuleViolation]]) -> Report:
    """Aggregate per-file violations; files by path, violations by (line, column)."""
    files = []
    for path in sorted(results):
        ordered = sorted(results[path], key=lambda v: (v.line, v.column))
        files.append(FileReport(path=path, violations=tuple(ordered)))
    return Report(files=tuple(files))


def render_text(report: Report) -> list[str]:
    return [
        f"{v.file_path}:{v.line}:{v.column}: [{v.rule_id}] {v.message}"
        for v in report.violations
    ]


def render_records(report: Report) -> list[dict[str, Any]]:
    return [v.to_record() for v in report.violations]


def render_json(report: Report) -> str:
    return json.dumps(
        {"violations": render_records(report), "summary": report.summary()},
        indent=2,
    )
