"""Tests for the rule registry and profile resolution."""
from __future__ import annotations
import pytest
from cstyleiq.config.settings import CStyleIQSettings, RuleDefinition
from cstyleiq.core.registry import RuleRegistry, build_registry
from cstyleiq.rules.base_rule import ConfigurationError, ConstructKind, MatcherSpec, Rule, ViolationSeverity
from cstyleiq.rules.profiles import PROFILES, profile_names


def _rule(rule_id: str = "sample", **overrides) -> Rule:
    fields = dict(
        rule_id=rule_id,
        target=ConstructKind.VARIABLE,
        matcher=MatcherSpec("naming", {"case": "lowerCamelCase"}),
        message="{construct} '{name}' {detail}",
    )
    fields.update(overrides)
    return Rule(**fields)


class TestRegister:
    def test_register_and_lookup(self) -> None:
        registry = RuleRegistry()
        registry.register(_rule())
        assert "sample" in registry and len(registry) == 1
        assert registry.get("sample").target is ConstructKind.VARIABLE

    def test_duplicate_id(self) -> None:
        registry = RuleRegistry()
        registry.register(_rule())
        with pytest.raises(ConfigurationError, match="duplicate"):
            registry.register(_rule())

    def test_unknown_matcher(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown matcher"):
            RuleRegistry().register(_rule(matcher=MatcherSpec("spelling")))

    def test_unknown_case_style(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown case style"):
            RuleRegistry().register(_rule(matcher=MatcherSpec("naming", {"case": "kebab-case"})))

    @pytest.mark.parametrize(
        "spec",
        [
            MatcherSpec("brace-placement", {"style": "diagonal"}),
            MatcherSpec("brace-placement", {"owners": ["lambda"]}),
            MatcherSpec("include-order", {"order": ["standard", "project"]}),
            MatcherSpec("header-guard", {"template": "{MISSING}_H"}),
            MatcherSpec("function-order", {"strict": True}),
            MatcherSpec("naming", {"pattern": "([a-z"}),
            MatcherSpec("type-hint", {"string_types": "char"}),
        ],
    )
    def test_invalid_params(self, spec: MatcherSpec) -> None:
        with pytest.raises(ConfigurationError):
            RuleRegistry().register(_rule(matcher=spec))

    def test_bad_message_template(self) -> None:
        with pytest.raises(ConfigurationError, match="message template"):
            RuleRegistry().register(_rule(message="{nmae} is wrong"))

    def test_frozen_registry_rejects_rules(self) -> None:
        registry = RuleRegistry()
        registry.freeze()
        assert registry.frozen
        with pytest.raises(ConfigurationError, match="frozen"):
            registry.register(_rule())

    def test_get_unknown(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown rule"):
            RuleRegistry().get("missing")

    def test_rules_for_keeps_registration_order(self) -> None:
        registry = RuleRegistry()
        registry.register(_rule("b-rule"))
        registry.register(_rule("a-rule"))
        registry.register(_rule("macro-rule", target=ConstructKind.MACRO))
        assert [r.rule_id for r in registry.rules_for(ConstructKind.VARIABLE)] == ["b-rule", "a-rule"]
        assert registry.rules_for(ConstructKind.BRACE) == ()


class TestFromDefinitions:
    def test_builtin_rules_always_present(self) -> None:
        registry = RuleRegistry.from_definitions([])
        assert [r.rule_id for r in registry] == ["scan-error", "io-error"]
        assert registry.frozen

    def test_accepts_dicts_and_models(self) -> None:
        registry = RuleRegistry.from_definitions([
            {"id": "from-dict", "target": "macro", "matcher": "naming"},
            RuleDefinition(id="from-model", target="enum", matcher="naming"),
        ])
        assert "from-dict" in registry and "from-model" in registry

    def test_malformed_definition(self) -> None:
        with pytest.raises(ConfigurationError, match="malformed rule definition 'broken'"):
            RuleRegistry.from_definitions([{"id": "broken", "target": "lambda", "matcher": "naming"}])

    def test_severity_override(self) -> None:
        registry = RuleRegistry.from_definitions(
            [{"id": "macros", "target": "macro", "matcher": "naming"}],
            {"macros": ViolationSeverity.INFO},
        )
        assert registry.get("macros").severity is ViolationSeverity.INFO

    def test_override_for_unknown_rule(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown rule"):
            RuleRegistry.from_definitions([], {"ghost": ViolationSeverity.INFO})


class TestBuildRegistry:
    def test_default_profile(self, registry) -> None:
        ids = [r.rule_id for r in registry]
        assert ids[:2] == ["scan-error", "io-error"]
        assert ids[2:] == [d["id"] for d in PROFILES["default"]]

    def test_profile_names(self) -> None:
        assert profile_names() == ["default", "minimal", "none"]

    def test_none_profile_keeps_builtins(self) -> None:
        assert len(build_registry(CStyleIQSettings(rule_set="none"))) == 2

    def test_unknown_rule_set(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown rule set"):
            build_registry(CStyleIQSettings(rule_set="kernel"))

    def test_unknown_rule_set_lists_profiles(self) -> None:
        with pytest.raises(ConfigurationError, match=r"available: default, minimal, none"):
            build_registry(CStyleIQSettings(rule_set="kernel"))

    def test_disable_rule(self) -> None:
        registry = build_registry(CStyleIQSettings(disabled_rules=["variable-type-hint"]))
        assert "variable-type-hint" not in registry and "variable-naming" in registry

    def test_disable_unknown_rule(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot disable"):
            build_registry(CStyleIQSettings(disabled_rules=["ghost"]))

    def test_custom_rules_appended(self) -> None:
        settings = CStyleIQSettings(customRules=[{"id": "global-prefix", "target": "variable", "matcher": "naming", "params": {"prefix": "g"}}])
        registry = build_registry(settings)
        assert [r.rule_id for r in registry.rules_for(ConstructKind.VARIABLE)][-1] == "global-prefix"

    def test_custom_rule_conflicting_id(self) -> None:
        settings = CStyleIQSettings(customRules=[{"id": "macro-naming", "target": "macro", "matcher": "naming"}])
        with pytest.raises(ConfigurationError, match="duplicate"):
            build_registry(settings)
