"""Naming matchers: case conventions, affixes, verb-led names and type hints."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping

from cstyleiq.rules.base_rule import ConfigurationError, Finding, Matcher, Rule

if TYPE_CHECKING:
    from cstyleiq.core.evaluator import FileContext
    from cstyleiq.core.scanner import Token

__all__ = ["CASE_PATTERNS", "NAMING_MATCHERS", "split_words"]

CASE_PATTERNS: dict[str, re.Pattern[str]] = {
    "UPPER_SNAKE_CASE": re.compile(r"^_*[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*_*$"),
    "PascalCase": re.compile(r"^[A-Z][a-zA-Z0-9]*$"),
    "lowerCamelCase": re.compile(r"^[a-z][a-zA-Z0-9]*$"),
    "snake_case": re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$"),
}

DEFAULT_VERBS: tuple[str, ...] = (
    "get", "do", "make", "calc", "calculate", "compute", "fetch", "retrieve",
    "parse", "execute", "convert", "initialize", "validate", "recv",
)

DEFAULT_GERUND_EXCEPTIONS: tuple[str, ...] = (
    "string", "thing", "ring", "king", "spring", "padding", "setting",
    "ceiling", "heading", "building", "warning", "timing", "mapping",
    "encoding", "ping", "routing", "spacing", "rating", "offering",
    "listing", "binding", "pending", "during", "nothing", "something",
    "anything", "everything", "ending", "wiring", "bearing",
)

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_QUALIFIERS = {"const", "volatile", "static", "register", "extern", "restrict"}


def split_words(name: str) -> list[str]:
    """Split an identifier into lower-case words across camel humps and underscores."""
    return [w.lower() for part in name.split("_") for w in _WORD_RE.findall(part)]


def _strip_affixes(name: str, prefix: str, suffix: str) -> tuple[str, list[str]]:
    problems: list[str] = []
    stem = name
    if prefix:
        if stem.startswith(prefix):
            stem = stem[len(prefix):]
        else:
            problems.append(f"should start with '{prefix}'")
    if suffix:
        if stem.endswith(suffix) and len(stem) > len(suffix):
            stem = stem[: -len(suffix)]
        else:
            problems.append(f"should end with '{suffix}'")
    return stem, problems


def _verb_lead(name: str, verbs: set[str], exceptions: set[str]) -> str | None:
    words = split_words(name)
    if not words:
        return None
    head = words[0]
    if head in verbs:
        return head
    if head.endswith("ing") and len(head) > 4 and head not in exceptions:
        return head
    return None


def match_naming(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    spec = rule.matcher
    name = token.name
    findings: list[Finding] = []

    stem, problems = _strip_affixes(name, spec.param("prefix", ""), spec.param("suffix", ""))
    findings.extend(Finding(p) for p in problems)

    case = spec.param("case")
    if case and stem and not CASE_PATTERNS[case].match(stem):
        findings.append(Finding(f"is not {case}"))

    pattern = spec.param("pattern")
    if pattern and not re.fullmatch(pattern, name):
        findings.append(Finding(f"does not match /{pattern}/"))

    min_length = spec.param("min_length")
    if min_length and len(name) < int(min_length):
        findings.append(Finding(f"is shorter than {min_length} characters"))

    if spec.param("forbid_verb_lead", False):
        verbs = set(spec.param("verbs", DEFAULT_VERBS))
        exceptions = set(spec.param("gerund_exceptions", DEFAULT_GERUND_EXCEPTIONS))
        verb = _verb_lead(name, verbs, exceptions)
        if verb is not None:
            findings.append(Finding(f"starts with the verb '{verb}'; name it after what it holds"))
    return findings


def validate_naming(params: Mapping[str, Any]) -> None:
    case = params.get("case")
    if case is not None and case not in CASE_PATTERNS:
        raise ConfigurationError(
            f"unknown case style '{case}' (expected one of {', '.join(CASE_PATTERNS)})"
        )
    pattern = params.get("pattern")
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(f"invalid pattern '{pattern}': {exc}") from exc
    for key in ("verbs", "gerund_exceptions"):
        value = params.get(key)
        if value is not None and not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"'{key}' must be a list of words")
    min_length = params.get("min_length")
    if min_length is not None and (not isinstance(min_length, int) or min_length < 1):
        raise ConfigurationError("'min_length' must be a positive integer")


def _base_type(token: Token) -> str:
    words = str(token.attrs.get("base_type", "")).split()
    return " ".join(w for w in words if w not in _QUALIFIERS)


def match_type_hint(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    spec = rule.matcher
    string_prefix = spec.param("string_prefix", "str")
    array_suffix = spec.param("array_suffix", "Arr")
    string_types = set(spec.param("string_types", ["char"]))
    name = token.name
    is_array = bool(token.attrs.get("is_array"))
    is_pointer = bool(token.attrs.get("is_pointer"))

    if _base_type(token) in string_types and (is_array or is_pointer):
        if string_prefix and not name.startswith(string_prefix):
            return [Finding(f"holds a string; prefix it with '{string_prefix}'")]
        return []
    if is_array and array_suffix and not name.endswith(array_suffix):
        return [Finding(f"is an array; end it with '{array_suffix}'")]
    return []


def validate_type_hint(params: Mapping[str, Any]) -> None:
    for key in ("string_prefix", "array_suffix"):
        value = params.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(f"'{key}' must be a string")
    string_types = params.get("string_types")
    if string_types is not None and not isinstance(string_types, (list, tuple)):
        raise ConfigurationError("'string_types' must be a list of type names")


NAMING_MATCHERS: dict[str, Matcher] = {
    "naming": Matcher(match_naming, validate_naming),
    "type-hint": Matcher(match_type_hint, validate_type_hint),
}
