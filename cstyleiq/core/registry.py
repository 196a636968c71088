"""Rule registry – the process-wide, read-only set of enforceable conventions."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError

from cstyleiq.config.settings import CStyleIQSettings, RuleDefinition
from cstyleiq.rules.base_rule import (
    ConfigurationError,
    ConstructKind,
    Matcher,
    MatcherSpec,
    Rule,
    ViolationSeverity,
)
from cstyleiq.rules.naming_rules import NAMING_MATCHERS
from cstyleiq.rules.profiles import BUILTIN_RULES, PROFILES, profile_names
from cstyleiq.rules.structure_rules import STRUCTURE_MATCHERS

__all__ = ["MATCHERS", "RuleRegistry", "build_registry"]

logger = logging.getLogger(__name__)

MATCHERS: dict[str, Matcher] = {**NAMING_MATCHERS, **STRUCTURE_MATCHERS}


def _to_rule(definition: RuleDefinition) -> Rule:
    return Rule(
        rule_id=definition.id,
        target=definition.target,
        matcher=MatcherSpec(kind=definition.matcher, params=dict(definition.params)),
        message=definition.message,
        severity=definition.severity,
        description=definition.description,
        where=dict(definition.where),
    )


class RuleRegistry:
    """Maps rule ids to rules and serves them by construct kind in registration order."""

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self._by_target: dict[ConstructKind, list[Rule]] = {}
        self._frozen = False

    def register(self, rule: Rule) -> None:
        if self._frozen:
            raise ConfigurationError(f"cannot register '{rule.rule_id}': registry is frozen")
        if rule.rule_id in self._rules:
            raise ConfigurationError(f"duplicate rule id '{rule.rule_id}'")
        matcher = MATCHERS.get(rule.matcher.kind)
        if matcher is None:
            raise ConfigurationError(
                f"rule '{rule.rule_id}': unknown matcher '{rule.matcher.kind}' "
                f"(available: {', '.join(sorted(MATCHERS))})"
            )
        try:
            matcher.validate(rule.matcher.params)
        except ConfigurationError as exc:
            raise ConfigurationError(f"rule '{rule.rule_id}': {exc}") from exc
        try:
            rule.render(name="sample", detail="sample")
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigurationError(
                f"rule '{rule.rule_id}': invalid message template {rule.message!r} "
                "(fields: {name}, {construct}, {detail})"
            ) from exc
        self._rules[rule.rule_id] = rule
        self._by_target.setdefault(rule.target, []).append(rule)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def rules_for(self, construct: ConstructKind) -> tuple[Rule, ...]:
        return tuple(self._by_target.get(construct, ()))

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise ConfigurationError(f"unknown rule '{rule_id}'") from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[RuleDefinition | Mapping[str, Any]],
        severity_overrides: Mapping[str, ViolationSeverity] | None = None,
    ) -> RuleRegistry:
        """Build and freeze a registry; the built-in error rules are always present."""
        registry = cls()
        overrides = dict(severity_overrides or {})
        for raw in [*BUILTIN_RULES, *definitions]:
            try:
                definition = raw if isinstance(raw, RuleDefinition) else RuleDefinition.model_validate(raw)
            except ValidationError as exc:
                rule_id = raw.get("id", "<unnamed>") if isinstance(raw, Mapping) else "<unnamed>"
                raise ConfigurationError(f"malformed rule definition '{rule_id}': {exc}") from exc
            rule = _to_rule(definition)
            if rule.rule_id in overrides:
                rule = replace(rule, severity=ViolationSeverity(overrides[rule.rule_id]))
            registry.register(rule)
        unknown = sorted(set(overrides) - set(registry._rules))
        if unknown:
            raise ConfigurationError(f"severity override for unknown rule(s): {', '.join(unknown)}")
        registry.freeze()
        logger.debug("Registered %d rule(s)", len(registry))
        return registry


def build_registry(settings: CStyleIQSettings) -> RuleRegistry:
    """Resolve the configured profile, drop disabled rules and append custom ones."""
    profile = PROFILES.get(settings.rule_set)
    if profile is None:
        raise ConfigurationError(
            f"unknown rule set '{settings.rule_set}' (available: {', '.join(profile_names())})"
        )
    known = {d["id"] for d in profile}
    unknown = sorted(set(settings.disabled_rules) - known)
    if unknown:
        raise ConfigurationError(f"cannot disable unknown rule(s): {', '.join(unknown)}")
    disabled = set(settings.disabled_rules)
    definitions: list[RuleDefinition | Mapping[str, Any]] = [d for d in profile if d["id"] not in disabled]
    definitions.extend(settings.custom_rules)
    return RuleRegistry.from_definitions(definitions, settings.severity_overrides)
