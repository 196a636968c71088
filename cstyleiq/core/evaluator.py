"""Rule evaluator – applies registered rules to a token stream."""

from __future__ import annotations

from typing import Any, Iterable

from cstyleiq.core.registry import MATCHERS, RuleRegistry
from cstyleiq.core.scanner import Token, TokenKind
from cstyleiq.rules.base_rule import RuleViolation

__all__ = ["FileContext", "RuleEvaluator"]


class FileContext:
    """Per-file evaluation state shared by the matchers of one run."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.directives: list[Token] = []
        self._state: dict[str, dict[str, Any]] = {}

    def state(self, rule_id: str) -> dict[str, Any]:
        """Scratch space owned by one rule for the current file."""
        return self._state.setdefault(rule_id, {})


class RuleEvaluator:
    """Walks tokens in source order; for each token, applies its rules in registration order."""

    def __init__(self, registry: RuleRegistry) -> None:
        self.registry = registry

    def evaluate(self, tokens: Iterable[Token], path: str) -> list[RuleViolation]:
        ctx = FileContext(path)
        violations: list[RuleViolation] = []
        for token in tokens:
            if token.kind is TokenKind.DIRECTIVE:
                ctx.directives.append(token)
            violations.extend(self.evaluate_token(token, ctx))
        return violations

    def evaluate_token(self, token: Token, ctx: FileContext) -> list[RuleViolation]:
        if token.construct is None:
            return []
        violations: list[RuleViolation] = []
        for rule in self.registry.rules_for(token.construct):
            if not rule.applies_to(token.attrs):
                continue
            matcher = MATCHERS[rule.matcher.kind]
            for finding in matcher.match(rule, token, ctx):
                violations.append(RuleViolation(
                    rule_id=rule.rule_id,
                    severity=rule.severity,
                    file_path=ctx.path,
                    line=finding.line if finding.line is not None else token.line,
                    column=finding.column if finding.column is not None else token.column,
                    message=rule.render(name=token.name, detail=finding.detail),
                ))
        return violations
