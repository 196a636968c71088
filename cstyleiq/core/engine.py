"""Orchestration engine – ties discovery, scanning, evaluation and reporting together."""

from __future__ import annotations

import fnmatch
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Iterable

from cstyleiq.config.settings import CStyleIQSettings
from cstyleiq.core.evaluator import FileContext, RuleEvaluator
from cstyleiq.core.registry import RuleRegistry, build_registry
from cstyleiq.core.reporter import Report, build_report
from cstyleiq.core.scanner import SourceScanner, Token, TokenKind
from cstyleiq.rules.base_rule import ConstructKind, RuleViolation

__all__ = ["CStyleIQEngine", "CheckResult"]

logger = logging.getLogger(__name__)


class CheckResult:
    def __init__(self, files: list[str], report: Report) -> None:
        self.files = files
        self.report = report

    @property
    def violations(self) -> list[RuleViolation]:
        return self.report.violations

    @property
    def exit_code(self) -> int:
        return self.report.exit_code


class CStyleIQEngine:
    """Central orchestrator for a checking run."""

    def __init__(self, settings: CStyleIQSettings, root_dir: Path | None = None) -> None:
        self.settings = settings
        self.root_dir = (root_dir or Path.cwd()).resolve()
        self.registry: RuleRegistry = build_registry(settings)
        self.scanner = SourceScanner(header_extensions=tuple(settings.header_extensions))
        self.evaluator = RuleEvaluator(self.registry)

    def _display_path(self, path: Path) -> str:
        resolved = path.resolve()
        try:
            return resolved.relative_to(self.root_dir).as_posix()
        except ValueError:
            return resolved.as_posix()

    def _is_excluded(self, path: Path) -> bool:
        relative = self._display_path(path)
        return any(
            fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(path.name, pattern)
            for pattern in self.settings.exclude_paths
        )

    def discover_files(self, paths: Iterable[Path] | None = None) -> list[Path]:
        """Expand *paths* (default: the root dir) into the sorted list of files to check."""
        extensions = {ext.lower() for ext in self.settings.extensions}
        found: set[Path] = set()
        for raw in paths or [self.root_dir]:
            path = raw if raw.is_absolute() else self.root_dir / raw
            if path.is_dir():
                for candidate in path.rglob("*"):
                    if candidate.is_file() and candidate.suffix.lower() in extensions and not self._is_excluded(candidate):
                        found.add(candidate.resolve())
            elif not self._is_excluded(path):
                # explicit files are kept even when missing so the read failure is reported
                found.add(path.resolve())
        files = sorted(found)
        logger.debug("Discovered %d file(s) under %s", len(files), self.root_dir)
        return files

    def check_text(self, text: str, path: str = "<stdin>") -> list[RuleViolation]:
        return self.evaluator.evaluate(self.scanner.scan(text, path), path)

    def run_text(self, text: str, path: str = "<stdin>") -> CheckResult:
        """Check in-memory source as a one-file run."""
        return CheckResult(files=[path], report=build_report({path: self.check_text(text, path)}))

    def check_file(self, path: Path) -> tuple[str, list[RuleViolation]]:
        display = self._display_path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            return display, self._io_error(display, exc)
        violations = self.check_text(text, display)
        for v in violations:
            if v.rule_id == "scan-error":
                logger.warning("Scan error in %s:%d:%d: %s", display, v.line, v.column, v.message)
        return display, violations

    def _io_error(self, display: str, exc: OSError) -> list[RuleViolation]:
        reason = exc.strerror or exc.__class__.__name__
        token = Token(
            kind=TokenKind.ERROR, text=f"cannot read file: {reason}", line=1, column=1,
            construct=ConstructKind.FILE, attrs=MappingProxyType({"error": "io"}),
        )
        return self.evaluator.evaluate_token(token, FileContext(display))

    def run_check(self, paths: Iterable[Path] | None = None) -> CheckResult:
        files = self.discover_files(paths)
        jobs = max(1, self.settings.jobs)
        if jobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=jobs) as ex:
                produced = list(ex.map(self.check_file, files))
        else:
            produced = [self.check_file(f) for f in files]
        results: dict[str, list[RuleViolation]] = {}
        for display, violations in produced:
            results.setdefault(display, []).extend(violations)
        return CheckResult(files=[display for display, _ in produced], report=build_report(results))
