"""Rule definition, violation model and error types for the CStyleIQ engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping, NamedTuple

if TYPE_CHECKING:
    from cstyleiq.core.evaluator import FileContext
    from cstyleiq.core.scanner import Token

__all__ = [
    "ConstructKind",
    "ViolationSeverity",
    "MatcherSpec",
    "Rule",
    "RuleViolation",
    "Finding",
    "Matcher",
    "CStyleIQError",
    "ConfigurationError",
    "ScanError",
]


class CStyleIQError(Exception):
    """Base class for all CStyleIQ errors."""


class ConfigurationError(CStyleIQError):
    """Duplicate or malformed rule definitions, or invalid settings."""


class ScanError(CStyleIQError):
    """Malformed lexical input at a given source position."""

    def __init__(self, message: str, line: int, column: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class ConstructKind(str, Enum):
    VARIABLE = "variable"
    FUNCTION = "function"
    MACRO = "macro"
    ENUM = "enum"
    ENUM_CONSTANT = "enum-constant"
    STRUCT = "struct"
    TYPEDEF = "typedef"
    HEADER = "header"
    INCLUDE_ORDER = "include-order"
    BRACE = "brace"
    COMMENT = "comment"
    SCAN = "scan"
    FILE = "file"


class ViolationSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class MatcherSpec:
    """Names a registered matcher and the parameters it is applied with."""

    kind: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)


@dataclass(frozen=True)
class Rule:
    rule_id: str
    target: ConstructKind
    matcher: MatcherSpec
    message: str
    severity: ViolationSeverity = ViolationSeverity.ERROR
    description: str = ""
    where: Mapping[str, Any] = field(default_factory=dict)

    def applies_to(self, attrs: Mapping[str, Any]) -> bool:
        """Return ``True`` when every ``where`` constraint holds for *attrs*.

        A constraint value that is a list or tuple matches any of its members.
        """
        for key, expected in self.where.items():
            actual = attrs.get(key)
            if isinstance(expected, (list, tuple)):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False
        return True

    def render(self, name: str, detail: str) -> str:
        return self.message.format(name=name, construct=self.target.value, detail=detail)


class Finding(NamedTuple):
    """One deviation reported by a matcher; location defaults to the token's."""

    detail: str
    line: int | None = None
    column: int | None = None


class Matcher(NamedTuple):
    """A matcher function paired with the validator for its parameters."""

    match: Callable[[Rule, "Token", "FileContext"], list[Finding]]
    validate: Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class RuleViolation:
    rule_id: str
    severity: ViolationSeverity
    file_path: str
    line: int
    column: int
    message: str

    def to_record(self) -> dict[str, Any]:
        return {
            "path": self.file_path,
            "line": self.line,
            "column": self.column,
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
        }
