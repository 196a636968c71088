"""Structural matchers: brace placement, include order, header guards and function order."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, Mapping

from cstyleiq.rules.base_rule import ConfigurationError, Finding, Matcher, Rule

if TYPE_CHECKING:
    from cstyleiq.core.evaluator import FileContext
    from cstyleiq.core.scanner import Token

__all__ = ["STRUCTURE_MATCHERS", "STANDARD_HEADERS", "expected_guard"]

BRACE_OWNERS = ("function", "struct", "union", "enum", "control", "block", "init")
BRACE_STYLES = ("next-line", "same-line")
INCLUDE_GROUPS = ("standard", "third-party", "project")

STANDARD_HEADERS: frozenset[str] = frozenset({
    "assert.h", "complex.h", "ctype.h", "errno.h", "fenv.h", "float.h",
    "inttypes.h", "iso646.h", "limits.h", "locale.h", "math.h", "setjmp.h",
    "signal.h", "stdalign.h", "stdarg.h", "stdatomic.h", "stdbool.h",
    "stddef.h", "stdint.h", "stdio.h", "stdlib.h", "stdnoreturn.h",
    "string.h", "tgmath.h", "threads.h", "time.h", "uchar.h", "wchar.h",
    "wctype.h",
    # POSIX
    "unistd.h", "fcntl.h", "pthread.h", "dirent.h", "dlfcn.h", "poll.h",
    "sched.h", "semaphore.h", "strings.h", "termios.h", "syslog.h",
})
STANDARD_PREFIXES: tuple[str, ...] = ("sys/", "arpa/", "netinet/", "net/")

DEFAULT_GUARD_TEMPLATE = "__{STEM}_H__"


def match_brace_placement(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    if token.attrs.get("char") != "{":
        return []
    owner = token.attrs.get("owner")
    if owner not in rule.matcher.param("owners", ["function"]):
        return []
    style = rule.matcher.param("style", "next-line")
    if style == "next-line" and not token.attrs.get("line_start"):
        return [Finding(f"opening brace of a {owner} should be on its own line")]
    prev_line = token.attrs.get("prev_line")
    if style == "same-line" and prev_line is not None and prev_line != token.line:
        return [Finding(f"opening brace of a {owner} should stay on the line of its statement")]
    return []


def validate_brace_placement(params: Mapping[str, Any]) -> None:
    style = params.get("style", "next-line")
    if style not in BRACE_STYLES:
        raise ConfigurationError(f"unknown brace style '{style}' (expected {' or '.join(BRACE_STYLES)})")
    owners = params.get("owners", ["function"])
    if not isinstance(owners, (list, tuple)):
        raise ConfigurationError("'owners' must be a list")
    unknown = [o for o in owners if o not in BRACE_OWNERS]
    if unknown:
        raise ConfigurationError(f"unknown brace owner(s): {', '.join(map(str, unknown))}")


def include_group(header: str, system: bool, params: Mapping[str, Any]) -> str:
    if not system:
        return "project"
    standard = set(params.get("standard_headers", STANDARD_HEADERS))
    prefixes = tuple(params.get("standard_prefixes", STANDARD_PREFIXES))
    if header in standard or header.startswith(prefixes):
        return "standard"
    return "third-party"


def match_include_order(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    params = rule.matcher.params
    order = list(params.get("order", INCLUDE_GROUPS))
    header = token.name
    group = include_group(header, bool(token.attrs.get("system")), params)
    rank = order.index(group)
    state = ctx.state(rule.rule_id)
    if rank < state.get("rank", -1):
        return [Finding(f"{group} header included after {state['group']} headers")]
    if rank > state.get("rank", -1):
        state["rank"] = rank
        state["group"] = group
    return []


def validate_include_order(params: Mapping[str, Any]) -> None:
    order = params.get("order", INCLUDE_GROUPS)
    if sorted(order) != sorted(INCLUDE_GROUPS):
        raise ConfigurationError(f"'order' must list each of {', '.join(INCLUDE_GROUPS)} exactly once")
    for key in ("standard_headers", "standard_prefixes"):
        value = params.get(key)
        if value is not None and not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"'{key}' must be a list")


def expected_guard(path: str, template: str = DEFAULT_GUARD_TEMPLATE) -> str:
    """Render the header-guard macro for *path*, e.g. ``app_log.h`` -> ``__APP_LOG_H__``."""
    pure = PurePath(path)
    stem = re.sub(r"\W", "_", pure.stem).upper()
    file = re.sub(r"\W", "_", pure.name).upper()
    return template.format(STEM=stem, FILE=file)


def match_header_guard(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    params = rule.matcher.params
    directives = ctx.directives
    if params.get("allow_pragma_once", False) and any(
        d.attrs.get("directive") == "pragma" and d.attrs.get("argument") == "once" for d in directives
    ):
        return []
    expected = expected_guard(ctx.path, params.get("template", DEFAULT_GUARD_TEMPLATE))
    if not directives or directives[0].attrs.get("directive") != "ifndef":
        return [Finding(f"has no '#ifndef {expected}' header guard", 1, 1)]

    opener = directives[0]
    guard = str(opener.attrs.get("argument", "")).split()[0] if opener.attrs.get("argument") else ""
    define = directives[1] if len(directives) > 1 else None
    define_arg = str(define.attrs.get("argument", "")).split() if define is not None else []
    if define is None or define.attrs.get("directive") != "define" or define_arg[:1] != [guard]:
        return [Finding(f"'#ifndef {guard}' is not followed by '#define {guard}'", opener.line, opener.column)]
    if len(directives) < 3 or directives[-1].attrs.get("directive") != "endif":
        return [Finding("header guard is not closed by a final '#endif'", opener.line, opener.column)]
    if guard != expected:
        return [Finding(f"header guard '{guard}' should be '{expected}'", opener.line, opener.column)]
    return []


def validate_header_guard(params: Mapping[str, Any]) -> None:
    template = params.get("template", DEFAULT_GUARD_TEMPLATE)
    try:
        expected_guard("sample.h", template)
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigurationError(
            f"invalid guard template '{template}' (fields: {{STEM}}, {{FILE}})"
        ) from exc


def match_function_order(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    state = ctx.state(rule.rule_id)
    if token.attrs.get("storage") == "static":
        public = state.get("public")
        if public is not None:
            return [Finding(f"is private but defined after public function '{public}'")]
        return []
    state.setdefault("public", token.name)
    return []


def match_error(rule: Rule, token: Token, ctx: FileContext) -> list[Finding]:
    if token.kind.value != "error":
        return []
    return [Finding(token.text)]


def _no_params(params: Mapping[str, Any]) -> None:
    if params:
        raise ConfigurationError(f"unexpected parameter(s): {', '.join(sorted(params))}")


STRUCTURE_MATCHERS: dict[str, Matcher] = {
    "brace-placement": Matcher(match_brace_placement, validate_brace_placement),
    "include-order": Matcher(match_include_order, validate_include_order),
    "header-guard": Matcher(match_header_guard, validate_header_guard),
    "function-order": Matcher(match_function_order, _no_params),
    "error": Matcher(match_error, _no_params),
}
