"""CStyleIQ CLI – Typer multi-command application."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel

from cstyleiq.config.settings import load_settings
from cstyleiq.core.engine import CStyleIQEngine
from cstyleiq.core.reporter import Report, render_json, render_text
from cstyleiq.rules.base_rule import ConfigurationError
from cstyleiq.rules.profiles import profile_names
from cstyleiq.utils.logger import (
    SEVERITY_STYLE, console, create_table, print_error, print_info, print_success, print_violation,
    print_warning,
)

__all__ = ["app"]

_RULE_SET_HELP = f"Convention profile: {'|'.join(profile_names())}"

app = typer.Typer(
    name="cstyleiq",
    help="Convention checker for C naming, brace, include and header-guard rules.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _load_engine(
    config: Path | None,
    project_dir: Path | None,
    rule_set: str | None = None,
    exclude: list[str] | None = None,
    jobs: int | None = None,
) -> CStyleIQEngine:
    root = (project_dir or Path.cwd()).resolve()
    settings = load_settings(config_path=config, search_dir=root)
    if rule_set:
        settings.rule_set = rule_set
    if exclude:
        settings.exclude_paths = [*settings.exclude_paths, *exclude]
    if jobs is not None:
        settings.jobs = max(1, jobs)
    return CStyleIQEngine(settings=settings, root_dir=root)


def _print_summary(report: Report, files: int) -> None:
    summary = report.summary()
    counts = "  ".join(
        f"[{SEVERITY_STYLE[sev]}]{sev.title()}: {count}[/{SEVERITY_STYLE[sev]}]"
        for sev, count in summary.items()
    )
    console.print(Panel(
        f"[bold]Files: {files}[/bold]  [bold]Total: {report.total}[/bold]  {counts}",
        title="📋 Convention Summary", border_style="cyan",
    ))


@app.command()
def check(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to check, or '-' for stdin (default: project dir)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to cstyleiq.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project root directory"),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: text|structured"),
    rule_set: Optional[str] = typer.Option(None, "--rule-set", "-r", help=_RULE_SET_HELP),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Glob pattern to skip (repeatable)"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", help="Files checked in parallel"),
) -> None:
    """Scan C sources and report convention violations."""
    try:
        engine = _load_engine(config, project_dir, rule_set, exclude, jobs)
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        raise typer.Exit(code=2)

    fmt = output_format or engine.settings.output_format
    if fmt not in ("text", "structured"):
        print_error(f"Unknown output format '{fmt}' (expected text or structured).")
        raise typer.Exit(code=2)

    if paths and [str(p) for p in paths] == ["-"]:
        result = engine.run_text(sys.stdin.read())
    else:
        result = engine.run_check(paths or None)
    report = result.report

    if fmt == "structured":
        typer.echo(render_json(report))
        raise typer.Exit(code=result.exit_code)

    if not result.files:
        print_warning(f"No C sources found under {engine.root_dir}.")

    for line, violation in zip(render_text(report), report.violations):
        print_violation(line, violation.severity.value)
    if report.violations:
        console.print()
    _print_summary(report, len(result.files))
    if report.passed:
        print_success("All files follow the conventions.")
    else:
        print_error(f"{report.total} convention violation(s) found.")
    raise typer.Exit(code=result.exit_code)


@app.command()
def rules(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to cstyleiq.yaml"),
    project_dir: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project root directory"),
    rule_set: Optional[str] = typer.Option(None, "--rule-set", "-r", help=_RULE_SET_HELP),
) -> None:
    """List the rules that a check would apply."""
    try:
        engine = _load_engine(config, project_dir, rule_set)
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        raise typer.Exit(code=2)

    rows = [
        [rule.rule_id, rule.target.value, rule.matcher.kind, rule.severity.value, rule.description]
        for rule in engine.registry
    ]
    console.print(create_table(
        f"Rule set: {engine.settings.rule_set}",
        [("Rule", "bold"), ("Target", "cyan"), ("Matcher", "magenta"), ("Severity", ""), ("Description", "")],
        rows,
    ))
    print_info(f"{len(rows)} rule(s) active.")


if __name__ == "__main__":
    app()
