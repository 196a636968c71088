"""Tests for configuration loading."""
from __future__ import annotations
from pathlib import Path
import pytest
from cstyleiq.config.settings import CStyleIQSettings, RuleDefinition, load_settings
from cstyleiq.rules.base_rule import ConfigurationError, ConstructKind, ViolationSeverity


class TestRuleDefinition:
    def test_defaults(self) -> None:
        d = RuleDefinition(id="x", target="variable", matcher="naming")
        assert d.target is ConstructKind.VARIABLE and d.severity is ViolationSeverity.ERROR
        assert d.message == "{construct} '{name}' {detail}" and d.params == {} and d.where == {}

    def test_severity_case_insensitive(self) -> None:
        assert RuleDefinition(id="x", target="macro", matcher="naming", severity="warning").severity is ViolationSeverity.WARNING

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValueError):
            RuleDefinition(id="x", target="macro", matcher="naming", colour="red")


class TestCStyleIQSettings:
    def test_defaults(self) -> None:
        s = CStyleIQSettings()
        assert s.rule_set == "default" and s.output_format == "text" and s.jobs == 4
        assert s.extensions == [".c", ".h"] and s.header_extensions == [".h"]
        assert s.exclude_paths == [] and s.disabled_rules == [] and s.custom_rules == []

    def test_snake_and_camel_names(self) -> None:
        assert CStyleIQSettings(rule_set="minimal").rule_set == "minimal"
        assert CStyleIQSettings(ruleSet="none").rule_set == "none"

    def test_severity_overrides_normalised(self) -> None:
        s = CStyleIQSettings(severityOverrides={"macro-naming": "info"})
        assert s.severity_overrides == {"macro-naming": ViolationSeverity.INFO}

    def test_invalid_output_format(self) -> None:
        with pytest.raises(ValueError):
            CStyleIQSettings(output_format="xml")


class TestLoadSettings:
    def test_load_defaults_no_file(self, tmp_path) -> None:
        assert load_settings(search_dir=tmp_path).rule_set == "default"

    def test_load_from_yaml(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text(
            "ruleSet: minimal\n"
            "outputFormat: structured\n"
            "excludePaths:\n  - 'vendor/*'\n"
            "severityOverrides:\n  macro-naming: warning\n"
            "jobs: 2\n"
            "customRules:\n"
            "  - id: global-prefix\n"
            "    target: variable\n"
            "    matcher: naming\n"
            "    params:\n      prefix: g\n"
            "    where:\n      role: global\n"
        )
        s = load_settings(search_dir=tmp_path)
        assert s.rule_set == "minimal" and s.output_format == "structured" and s.jobs == 2
        assert s.exclude_paths == ["vendor/*"]
        assert s.severity_overrides["macro-naming"] is ViolationSeverity.WARNING
        assert s.custom_rules[0].id == "global-prefix" and s.custom_rules[0].where == {"role": "global"}

    def test_explicit_path_takes_precedence(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("ruleSet: none\n")
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("ruleSet: minimal\n")
        assert load_settings(config_path=explicit, search_dir=tmp_path).rule_set == "minimal"

    def test_empty_yaml_returns_defaults(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("")
        assert load_settings(search_dir=tmp_path).rule_set == "default"

    def test_parent_dir_search(self, tmp_path) -> None:
        (tmp_path / ".cstyleiq.yml").write_text("ruleSet: none\n")
        child = tmp_path / "child" / "subdir"
        child.mkdir(parents=True)
        assert load_settings(search_dir=child).rule_set == "none"

    def test_missing_explicit_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(config_path=tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("ruleSet: [unclosed\n")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_settings(search_dir=tmp_path)

    def test_non_mapping_yaml(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(search_dir=tmp_path)

    def test_invalid_values(self, tmp_path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("jobs: 0\n")
        with pytest.raises(ConfigurationError, match="invalid settings"):
            load_settings(search_dir=tmp_path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        (tmp_path / "cstyleiq.yaml").write_text("colour: blue\n")
        with pytest.raises(ConfigurationError):
            load_settings(search_dir=tmp_path)
