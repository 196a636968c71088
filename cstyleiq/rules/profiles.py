"""Built-in rule sets, expressed as rule-definition data."""

from __future__ import annotations

from typing import Any

__all__ = ["PROFILES", "BUILTIN_RULES", "profile_names"]

_NAMED = "{construct} '{name}' {detail}"

BUILTIN_RULES: list[dict[str, Any]] = [
    {
        "id": "scan-error",
        "target": "scan",
        "matcher": "error",
        "message": "{detail}",
        "description": "Malformed lexical input (unterminated literal or comment, unbalanced brace).",
    },
    {
        "id": "io-error",
        "target": "file",
        "matcher": "error",
        "message": "{detail}",
        "description": "The source file could not be read.",
    },
]

_NAMING: list[dict[str, Any]] = [
    {
        "id": "variable-naming",
        "target": "variable",
        "matcher": "naming",
        "params": {"case": "lowerCamelCase", "forbid_verb_lead": True},
        "message": _NAMED,
        "description": "Variables are lowerCamelCase nouns, never verb-led.",
    },
    {
        "id": "function-naming",
        "target": "function",
        "matcher": "naming",
        "params": {"case": "lowerCamelCase"},
        "message": _NAMED,
        "description": "Functions are lowerCamelCase.",
    },
    {
        "id": "macro-naming",
        "target": "macro",
        "matcher": "naming",
        "params": {"case": "UPPER_SNAKE_CASE"},
        "message": _NAMED,
        "description": "Macros are UPPER_SNAKE_CASE.",
    },
    {
        "id": "enum-naming",
        "target": "enum",
        "matcher": "naming",
        "params": {"case": "PascalCase"},
        "message": _NAMED,
        "description": "Enum tags are PascalCase.",
    },
    {
        "id": "enum-constant-naming",
        "target": "enum-constant",
        "matcher": "naming",
        "params": {"case": "UPPER_SNAKE_CASE"},
        "message": _NAMED,
        "description": "Enumerators are UPPER_SNAKE_CASE.",
    },
    {
        "id": "struct-naming",
        "target": "struct",
        "matcher": "naming",
        "params": {"case": "PascalCase"},
        "message": _NAMED,
        "description": "Struct and union tags are PascalCase.",
    },
    {
        "id": "typedef-naming",
        "target": "typedef",
        "matcher": "naming",
        "params": {"case": "PascalCase", "suffix": "_t"},
        "message": _NAMED,
        "description": "Typedef names are PascalCase with a '_t' suffix.",
    },
]

_HINTS: list[dict[str, Any]] = [
    {
        "id": "variable-type-hint",
        "target": "variable",
        "matcher": "type-hint",
        "params": {"string_prefix": "str", "array_suffix": "Arr"},
        "message": _NAMED,
        "severity": "WARNING",
        "description": "String variables start with 'str', other arrays end with 'Arr'.",
        "where": {"role": ["global", "local", "field"]},
    },
]

_STRUCTURE: list[dict[str, Any]] = [
    {
        "id": "function-brace-placement",
        "target": "brace",
        "matcher": "brace-placement",
        "params": {"owners": ["function"], "style": "next-line"},
        "message": "{detail}",
        "description": "A function body's opening brace sits on its own line.",
    },
    {
        "id": "control-brace-placement",
        "target": "brace",
        "matcher": "brace-placement",
        "params": {"owners": ["control", "struct", "union", "enum"], "style": "same-line"},
        "message": "{detail}",
        "severity": "WARNING",
        "description": "Control, struct and enum braces stay on the line of their statement.",
    },
    {
        "id": "include-order",
        "target": "include-order",
        "matcher": "include-order",
        "message": "include '{name}': {detail}",
        "description": "Includes are grouped standard, then third-party, then project headers.",
    },
    {
        "id": "header-guard",
        "target": "header",
        "matcher": "header-guard",
        "params": {"template": "__{STEM}_H__"},
        "message": _NAMED,
        "description": "Headers are wrapped in '#ifndef __NAME_H__' / '#define' / '#endif'.",
    },
]

_ORDERING: list[dict[str, Any]] = [
    {
        "id": "function-order",
        "target": "function",
        "matcher": "function-order",
        "message": _NAMED,
        "severity": "WARNING",
        "description": "Private (static) functions are defined before public ones.",
        "where": {"definition": True},
    },
]

PROFILES: dict[str, list[dict[str, Any]]] = {
    "default": _NAMING + _HINTS + _STRUCTURE + _ORDERING,
    "minimal": _NAMING + [r for r in _STRUCTURE if r["id"] in ("include-order", "header-guard")],
    "none": [],
}


def profile_names() -> list[str]:
    return list(PROFILES)
