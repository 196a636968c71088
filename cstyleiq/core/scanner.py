"""Lexical source scanner – turns C source text into a classified token stream.

The scanner is deliberately lexical: it splits the text into lexemes, groups
them into statements at ``;``, ``{`` and ``}`` boundaries and classifies the
identifiers a statement declares (variable, function, typedef, tag, enum
constant, macro). It never builds a syntax tree and never resolves types.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from cstyleiq.rules.base_rule import ConstructKind, ScanError

__all__ = ["TokenKind", "Token", "TokenStream", "SourceScanner"]

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"[A-Za-z_]\w*")
_NUMBER_RE = re.compile(r"\.?\d[\w.]*")
_DIRECTIVE_RE = re.compile(r"#\s*(\w*)\s*(.*)")
_INCLUDE_RE = re.compile(r"[<\"]([^>\"]+)[>\"]")
_MACRO_NAME_RE = re.compile(r"#\s*define\s+([A-Za-z_]\w*)")

_STORAGE = frozenset({"static", "extern", "register", "auto", "_Thread_local", "inline", "__inline"})
_QUALIFIERS = frozenset({"const", "volatile", "restrict"})
_TYPE_KEYWORDS = frozenset({
    "void", "char", "short", "int", "long", "float", "double",
    "signed", "unsigned", "_Bool", "bool", "_Complex",
})
_TAG_KEYWORDS = frozenset({"struct", "union", "enum"})
_CONTROL_KEYWORDS = frozenset({"if", "else", "for", "while", "do", "switch"})
_STATEMENT_KEYWORDS = _CONTROL_KEYWORDS | frozenset({
    "return", "goto", "case", "default", "break", "continue", "sizeof",
})
_KEYWORDS = _STORAGE | _QUALIFIERS | _TYPE_KEYWORDS | _TAG_KEYWORDS | _STATEMENT_KEYWORDS | {"typedef"}


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    BRACE = "brace"
    DIRECTIVE = "directive"
    COMMENT = "comment"
    STRING = "string"
    EOF = "eof"
    ERROR = "error"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    construct: ConstructKind | None = None
    attrs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def name(self) -> str:
        return str(self.attrs.get("name", self.text))


@dataclass(frozen=True)
class _Lexeme:
    kind: str
    text: str
    line: int
    column: int
    first: bool = False
    raw: str = ""


@dataclass
class _Frame:
    owner: str
    prefix: list[_Lexeme] = field(default_factory=list)
    line: int = 0


def _make_token(
    kind: TokenKind,
    lex: _Lexeme,
    construct: ConstructKind | None = None,
    text: str | None = None,
    **attrs: Any,
) -> Token:
    return Token(
        kind=kind,
        text=lex.text if text is None else text,
        line=lex.line,
        column=lex.column,
        construct=construct,
        attrs=MappingProxyType(attrs),
    )


def _literal_end(line: str, start: int) -> int:
    """Index of the closing quote of the literal opened at *start*, or -1."""
    quote = line[start]
    pos = start + 1
    while pos < len(line):
        ch = line[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == quote:
            return pos
        pos += 1
    return -1


def _strip_comments(text: str) -> tuple[str, int]:
    """Remove comments from a directive line.

    Returns the remaining text and the index of a ``/*`` still open at the end
    of the line, or -1 when every block comment is closed.
    """
    kept: list[str] = []
    start = pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch in "\"'":
            end = _literal_end(text, pos)
            if end < 0:
                break
            pos = end + 1
            continue
        if text.startswith("//", pos):
            kept.append(text[start:pos])
            return "".join(kept).rstrip(), -1
        if text.startswith("/*", pos):
            kept.append(text[start:pos])
            end = text.find("*/", pos + 2)
            if end < 0:
                return "".join(kept).rstrip(), pos
            kept.append(" ")
            start = pos = end + 2
            continue
        pos += 1
    kept.append(text[start:])
    return "".join(kept).rstrip(), -1


def _lex(text: str) -> Iterator[_Lexeme]:
    """Split *text* into raw lexemes, yielding ``error`` lexemes for malformed input."""
    lines = text.splitlines()
    index = 0
    comment: tuple[int, int, list[str]] | None = None
    comment_first = False
    while index < len(lines):
        line = lines[index]
        lineno = index + 1
        if comment is None and line.lstrip().startswith("#"):
            column = len(line) - len(line.lstrip()) + 1
            parts = [line.strip()]
            while parts[-1].endswith("\\") and index + 1 < len(lines):
                index += 1
                parts.append(lines[index].strip())
            joined = " ".join(p.rstrip("\\").strip() for p in parts).strip()
            yield _Lexeme("directive", _strip_comments(joined)[0], lineno, column, True, line)
            last = lines[index]
            open_at = _strip_comments(last)[1]
            if open_at >= 0:
                # the comment runs on past the directive line
                comment = (index + 1, open_at + 1, [last[open_at:] + "\n"])
                comment_first = False
            index += 1
            continue

        pos = 0
        while pos < len(line):
            if comment is not None:
                end = line.find("*/", pos)
                if end < 0:
                    comment[2].append(line[pos:] + "\n")
                    pos = len(line)
                    break
                comment[2].append(line[pos:end + 2])
                start_line, start_col, chunks = comment
                yield _Lexeme("comment", "".join(chunks), start_line, start_col, comment_first)
                comment = None
                pos = end + 2
                continue
            ch = line[pos]
            if ch.isspace():
                pos += 1
                continue
            first = line[:pos].strip() == ""
            if line.startswith("//", pos):
                yield _Lexeme("comment", line[pos:], lineno, pos + 1, first)
                break
            if line.startswith("/*", pos):
                comment = (lineno, pos + 1, ["/*"])
                comment_first = first
                pos += 2
                continue
            if ch in "\"'":
                end = _literal_end(line, pos)
                if end < 0:
                    what = "string" if ch == '"' else "character"
                    yield _Lexeme("error", f"unterminated {what} literal", lineno, pos + 1, first)
                    break
                yield _Lexeme("string" if ch == '"' else "char", line[pos:end + 1], lineno, pos + 1, first)
                pos = end + 1
                continue
            match = _IDENT_RE.match(line, pos)
            if match is None and (ch.isdigit() or ch == "."):
                match = _NUMBER_RE.match(line, pos)
                if match is not None:
                    yield _Lexeme("number", match.group(), lineno, pos + 1, first)
                    pos = match.end()
                    continue
            if match is not None:
                yield _Lexeme("ident", match.group(), lineno, pos + 1, first)
                pos = match.end()
                continue
            yield _Lexeme("punct", ch, lineno, pos + 1, first)
            pos += 1
        index += 1

    if comment is not None:
        yield _Lexeme("error", "unterminated block comment", comment[0], comment[1])


def _split_top_level(lexemes: list[_Lexeme], separator: str = ",") -> list[list[_Lexeme]]:
    parts: list[list[_Lexeme]] = [[]]
    depth = 0
    for lex in lexemes:
        if lex.kind == "punct" and lex.text in "([{":
            depth += 1
        elif lex.kind == "punct" and lex.text in ")]}":
            depth -= 1
        elif lex.kind == "punct" and lex.text == separator and depth == 0:
            parts.append([])
            continue
        parts[-1].append(lex)
    return [p for p in parts if p]


def _index_of(lexemes: list[_Lexeme], text: str) -> int:
    depth = 0
    for i, lex in enumerate(lexemes):
        if lex.kind != "punct":
            continue
        if lex.text == text and depth == 0:
            return i
        if lex.text in "([":
            depth += 1
        elif lex.text in ")]":
            depth -= 1
    return -1


def _closing_paren(lexemes: list[_Lexeme], start: int) -> int:
    """Index of the ``)`` matching the ``(`` at *start*, or ``len(lexemes)``."""
    depth = 0
    for i in range(start, len(lexemes)):
        lex = lexemes[i]
        if lex.kind != "punct":
            continue
        if lex.text == "(":
            depth += 1
        elif lex.text == ")":
            depth -= 1
            if depth == 0:
                return i
    return len(lexemes)


def _parse_declarator(parts: list[_Lexeme]) -> tuple[_Lexeme | None, bool, bool]:
    """Return ``(name, is_pointer, is_array)`` for one declarator."""
    is_pointer = False
    for i, lex in enumerate(parts):
        if lex.kind == "punct" and lex.text == "=":
            break
        if lex.kind == "punct" and lex.text == "*":
            is_pointer = True
            continue
        if lex.kind == "punct" and lex.text == "(":
            # function pointer or parenthesised declarator: (*name)(...)
            inner = parts[i + 1:]
            for j, sub in enumerate(inner):
                if sub.kind == "punct" and sub.text == "*":
                    is_pointer = True
                elif sub.kind == "ident" and sub.text not in _QUALIFIERS:
                    rest = inner[j + 1:]
                    is_array = bool(rest) and rest[0].text == "["
                    return sub, True, is_array
                elif sub.kind == "punct" and sub.text == ")":
                    break
            return None, is_pointer, False
        if lex.kind == "ident" and lex.text in _QUALIFIERS:
            continue
        if lex.kind == "ident":
            rest = parts[i + 1:]
            is_array = bool(rest) and rest[0].kind == "punct" and rest[0].text == "["
            return lex, is_pointer, is_array
        return None, is_pointer, False
    return None, is_pointer, False


class TokenStream:
    """Lazy, finite and restartable sequence of tokens for one source text."""

    def __init__(self, scanner: SourceScanner, text: str, path: str) -> None:
        self._scanner = scanner
        self.text = text
        self.path = path

    def __iter__(self) -> Iterator[Token]:
        return _Classifier(self.path, self._scanner.is_header(self.path)).run(_lex(self.text))


class SourceScanner:
    """Produces token streams for C sources."""

    def __init__(self, header_extensions: tuple[str, ...] = (".h",)) -> None:
        self.header_extensions = tuple(ext.lower() for ext in header_extensions)

    def is_header(self, path: str) -> bool:
        return PurePath(path).suffix.lower() in self.header_extensions

    def scan(self, text: str, path: str = "<stdin>") -> TokenStream:
        return TokenStream(self, text, path)


class _Classifier:
    """Groups lexemes into statements and classifies declared identifiers."""

    def __init__(self, path: str, is_header: bool) -> None:
        self.path = path
        self.is_header = is_header
        self.stack: list[_Frame] = []
        self.stmt: list[_Lexeme] = []
        self.skip = 0
        self.paren = 0
        self.pending: list[Token] = []
        self.last_line: int | None = None
        self.last_seen = 0

    def _in_function(self) -> bool:
        return any(f.owner == "function" for f in self.stack)

    def _top(self) -> str:
        return self.stack[-1].owner if self.stack else "file"

    def _role(self) -> str:
        for frame in reversed(self.stack):
            if frame.owner in ("struct", "union"):
                return "field"
            if frame.owner == "function":
                return "local"
        return "global"

    def _flush(self) -> Iterator[Token]:
        self.pending.sort(key=lambda t: (t.line, t.column))
        yield from self.pending
        self.pending = []

    def _emit_plain(self, lexemes: list[_Lexeme], declared: dict[int, Token] | None = None) -> None:
        declared = declared or {}
        for lex in lexemes:
            if lex.kind != "ident":
                continue
            token = declared.get(id(lex))
            if token is not None:
                self.pending.append(token)
            elif lex.text not in _KEYWORDS:
                self.pending.append(_make_token(TokenKind.IDENTIFIER, lex))

    def _error(self, message: str, line: int, column: int) -> None:
        logger.debug("Scan error in %s:%d:%d: %s", self.path, line, column, message)
        self.pending.append(Token(
            kind=TokenKind.ERROR, text=message, line=line, column=column,
            construct=ConstructKind.SCAN, attrs=MappingProxyType({"error": "scan"}),
        ))

    def run(self, lexemes: Iterator[_Lexeme]) -> Iterator[Token]:
        for lex in lexemes:
            self.last_seen = max(self.last_seen, lex.line)
            try:
                self._feed(lex)
            except ScanError as exc:
                self._error(exc.message, exc.line, exc.column)
            if not self.stmt and self._top() != "init":
                yield from self._flush()
        self._emit_plain(self.stmt[self.skip:])
        self.stmt = []
        for frame in self.stack:
            if frame.owner != "init":
                self._error(f"unclosed brace ({frame.owner}) opened at line {frame.line}", self.last_seen + 1, 1)
                break
        yield from self._flush()
        line = self.last_seen + 1
        construct = ConstructKind.HEADER if self.is_header else ConstructKind.FILE
        name = PurePath(self.path).name
        yield Token(
            kind=TokenKind.EOF, text=name, line=line, column=1, construct=construct,
            attrs=MappingProxyType({"path": self.path, "header": self.is_header}),
        )

    def _feed(self, lex: _Lexeme) -> None:
        if lex.kind == "error":
            # the rest of the line was skipped, so the pending statement is incomplete
            self._emit_plain(self.stmt[self.skip:])
            self.stmt = self.stmt[:self.skip]
            self.paren = 0
            self._error(lex.text, lex.line, lex.column)
            return
        if lex.kind == "comment":
            doc = lex.text.startswith(("/**", "/*!", "///", "//!")) and not lex.text.startswith("/**/")
            self.pending.append(_make_token(TokenKind.COMMENT, lex, ConstructKind.COMMENT, doc=doc))
            return
        if lex.kind == "directive":
            self._on_directive(lex)
            return

        if lex.kind in ("string", "char"):
            if lex.kind == "string":
                self.pending.append(_make_token(TokenKind.STRING, lex))
        is_brace = lex.kind == "punct" and lex.text in "{}"
        if self._top() == "init" and not is_brace:
            if lex.kind == "ident" and lex.text not in _KEYWORDS:
                self.pending.append(_make_token(TokenKind.IDENTIFIER, lex))
            self.last_line = lex.line
            return

        if lex.kind == "punct":
            if lex.text == "{":
                self._on_open(lex)
            elif lex.text == "}":
                self._on_close(lex)
            elif lex.text == ";" and self.paren == 0:
                self._on_statement_end()
            elif lex.text == "," and self.paren == 0 and self._top() == "enum":
                self._on_enum_item()
            else:
                if lex.text == "(":
                    self.paren += 1
                elif lex.text == ")":
                    self.paren = max(0, self.paren - 1)
                self.stmt.append(lex)
        else:
            self.stmt.append(lex)
        self.last_line = lex.line

    def _on_directive(self, lex: _Lexeme) -> None:
        match = _DIRECTIVE_RE.match(lex.text)
        name = match.group(1) if match else ""
        argument = match.group(2).strip() if match else ""
        if name == "include":
            header = _INCLUDE_RE.search(argument)
            if header is None:
                raise ScanError(f"malformed include directive '{lex.text}'", lex.line, lex.column)
            self.pending.append(_make_token(
                TokenKind.DIRECTIVE, lex, ConstructKind.INCLUDE_ORDER,
                directive=name, argument=argument, name=header.group(1),
                system=argument.startswith("<"),
            ))
            return
        self.pending.append(_make_token(TokenKind.DIRECTIVE, lex, directive=name, argument=argument))
        if name == "define":
            macro = _MACRO_NAME_RE.match(lex.text)
            if macro is None:
                raise ScanError("#define without a macro name", lex.line, lex.column)
            offset = lex.raw.find(macro.group(1), lex.raw.find("define") + len("define"))
            column = offset + 1 if offset >= 0 else lex.column
            function_like = lex.text[macro.end():macro.end() + 1] == "("
            self.pending.append(Token(
                kind=TokenKind.IDENTIFIER, text=macro.group(1), line=lex.line, column=column,
                construct=ConstructKind.MACRO,
                attrs=MappingProxyType({"function_like": function_like}),
            ))

    def _brace_token(self, lex: _Lexeme, owner: str, depth: int) -> Token:
        return _make_token(
            TokenKind.BRACE, lex, ConstructKind.BRACE,
            char=lex.text, owner=owner, depth=depth,
            line_start=lex.first, prev_line=self.last_line,
        )

    def _on_open(self, lex: _Lexeme) -> None:
        depth = len(self.stack)
        stmt = self.stmt[self.skip:]
        words = [l.text for l in stmt if l.kind == "ident"]
        has_paren = any(l.kind == "punct" and l.text == "(" for l in stmt)
        has_assign = _index_of(stmt, "=") >= 0

        if self._top() in ("init", "enum") or has_assign:
            self.pending.append(self._brace_token(lex, "init", depth))
            self.stack.append(_Frame("init", line=lex.line))
            return

        tag = next((w for w in words if w in _TAG_KEYWORDS), None)
        if tag is not None and not has_paren:
            owner = tag
            self._classify_tag(stmt, tag)
            self.pending.append(self._brace_token(lex, owner, depth))
            self.stack.append(_Frame(owner, prefix=list(self.stmt), line=lex.line))
        elif has_paren and not self._in_function() and words and words[0] not in _CONTROL_KEYWORDS:
            owner = "function"
            self._classify_function(stmt, definition=True)
            self.pending.append(self._brace_token(lex, owner, depth))
            self.stack.append(_Frame(owner, line=lex.line))
        else:
            owner = "control" if words and words[0] in _CONTROL_KEYWORDS else "block"
            if words and words[0] == "for":
                self._classify_for(stmt)
            else:
                self._emit_plain(stmt)
            self.pending.append(self._brace_token(lex, owner, depth))
            self.stack.append(_Frame(owner, line=lex.line))
        self.stmt = []
        self.skip = 0
        self.paren = 0

    def _on_close(self, lex: _Lexeme) -> None:
        if not self.stack:
            self._emit_plain(self.stmt[self.skip:])
            self.stmt = []
            self.skip = 0
            self.paren = 0
            raise ScanError("unbalanced closing brace", lex.line, lex.column)
        frame = self.stack.pop()
        if frame.owner == "init":
            self.pending.append(self._brace_token(lex, "init", len(self.stack)))
            return
        if frame.owner == "enum":
            self._on_enum_item()
        else:
            self._emit_plain(self.stmt[self.skip:])
        self.pending.append(self._brace_token(lex, frame.owner, len(self.stack)))
        self.paren = 0
        if frame.owner in _TAG_KEYWORDS:
            self.stmt = frame.prefix + [lex]
            self.skip = len(self.stmt)
        else:
            self.stmt = []
            self.skip = 0

    def _on_enum_item(self) -> None:
        item = self.stmt[self.skip:]
        declared: dict[int, Token] = {}
        names = [l for l in item if l.kind == "ident"]
        if names:
            first = names[0]
            declared[id(first)] = _make_token(TokenKind.IDENTIFIER, first, ConstructKind.ENUM_CONSTANT)
        self._emit_plain(item, declared)
        self.stmt = self.stmt[:self.skip]
        self.paren = 0

    def _on_statement_end(self) -> None:
        stmt = self.stmt
        skip = self.skip
        self.stmt = []
        self.skip = 0
        self.paren = 0
        if skip:
            self._classify_after_body(stmt[:skip], stmt[skip:])
            return
        if not stmt:
            return
        words = [l.text for l in stmt if l.kind == "ident"]
        if stmt[0].kind == "ident" and stmt[0].text == "for":
            self._classify_for(stmt)
            return
        if stmt[0].kind != "ident" or stmt[0].text in _STATEMENT_KEYWORDS:
            self._emit_plain(stmt)
            return
        if stmt[0].text == "typedef":
            self._classify_declaration(stmt[1:], ConstructKind.TYPEDEF, stmt)
            return
        paren_at = _index_of(stmt, "(")
        assign_at = _index_of(stmt, "=")
        if paren_at > 0 and (assign_at < 0 or paren_at < assign_at) and self._role() != "local":
            before = stmt[paren_at - 1]
            if before.kind == "ident" and before.text not in _KEYWORDS and len(words) > 1:
                self._classify_function(stmt, definition=False)
                return
        self._classify_declaration(stmt, ConstructKind.VARIABLE, stmt)

    def _classify_tag(self, stmt: list[_Lexeme], tag: str) -> None:
        declared: dict[int, Token] = {}
        for i, lex in enumerate(stmt):
            if lex.kind == "ident" and lex.text == tag and i + 1 < len(stmt) and stmt[i + 1].kind == "ident":
                name = stmt[i + 1]
                construct = ConstructKind.ENUM if tag == "enum" else ConstructKind.STRUCT
                typedef = any(l.text == "typedef" for l in stmt[:i])
                declared[id(name)] = _make_token(
                    TokenKind.IDENTIFIER, name, construct, keyword=tag, typedef=typedef,
                )
                break
        self._emit_plain(stmt, declared)

    def _classify_after_body(self, prefix: list[_Lexeme], rest: list[_Lexeme]) -> None:
        words = [l.text for l in prefix if l.kind == "ident"]
        tag = next((w for w in words if w in _TAG_KEYWORDS), "struct")
        tag_index = words.index(tag) if tag in words else -1
        tag_name = words[tag_index + 1] if 0 <= tag_index < len(words) - 1 else ""
        base_type = f"{tag} {tag_name}".strip()
        construct = ConstructKind.TYPEDEF if "typedef" in words else ConstructKind.VARIABLE
        self._emit_declarators(rest, construct, base_type, storage=self._storage(words))

    @staticmethod
    def _storage(words: list[str]) -> str | None:
        return next((w for w in words if w in _STORAGE), None)

    def _classify_declaration(
        self, lexemes: list[_Lexeme], construct: ConstructKind, stmt: list[_Lexeme],
    ) -> None:
        i = 0
        storage: str | None = None
        base: list[str] = []
        n = len(lexemes)
        while i < n and lexemes[i].kind == "ident" and lexemes[i].text in (_STORAGE | _QUALIFIERS):
            if lexemes[i].text in _STORAGE:
                storage = lexemes[i].text
            i += 1
        if i < n and lexemes[i].kind == "ident" and lexemes[i].text in _TAG_KEYWORDS:
            if i + 1 < n and lexemes[i + 1].kind == "ident":
                base = [lexemes[i].text, lexemes[i + 1].text]
                i += 2
            else:
                self._emit_plain(stmt)
                return
        elif i < n and lexemes[i].kind == "ident" and lexemes[i].text in _TYPE_KEYWORDS:
            while i < n and lexemes[i].kind == "ident" and lexemes[i].text in (_TYPE_KEYWORDS | _QUALIFIERS):
                if lexemes[i].text in _TYPE_KEYWORDS:
                    base.append(lexemes[i].text)
                i += 1
        elif i < n and lexemes[i].kind == "ident" and lexemes[i].text not in _KEYWORDS:
            rest = lexemes[i + 1:]
            significant = [l for l in rest if not (l.kind == "ident" and l.text in _QUALIFIERS)]
            stars = 0
            while stars < len(significant) and significant[stars].text == "*":
                stars += 1
            follow = significant[stars] if stars < len(significant) else None
            if follow is None or (follow.kind != "ident" and not (follow.text == "(" and construct is ConstructKind.TYPEDEF)):
                self._emit_plain(stmt)
                return
            base = [lexemes[i].text]
            i += 1
        else:
            self._emit_plain(stmt)
            return
        while i < n and lexemes[i].kind == "ident" and lexemes[i].text in _QUALIFIERS:
            i += 1
        self._emit_declarators(lexemes[i:], construct, " ".join(base), storage, stmt)

    def _emit_declarators(
        self,
        lexemes: list[_Lexeme],
        construct: ConstructKind,
        base_type: str,
        storage: str | None,
        stmt: list[_Lexeme] | None = None,
    ) -> None:
        declared: dict[int, Token] = {}
        role = self._role()
        for parts in _split_top_level(lexemes):
            name, is_pointer, is_array = _parse_declarator(parts)
            if name is None or name.text in _KEYWORDS:
                continue
            if construct is ConstructKind.TYPEDEF:
                declared[id(name)] = _make_token(
                    TokenKind.IDENTIFIER, name, construct, base_type=base_type,
                    is_pointer=is_pointer, is_array=is_array,
                )
            else:
                declared[id(name)] = _make_token(
                    TokenKind.IDENTIFIER, name, construct, base_type=base_type,
                    is_pointer=is_pointer, is_array=is_array, role=role, storage=storage,
                )
        self._emit_plain(stmt if stmt is not None else lexemes, declared)

    def _classify_function(self, stmt: list[_Lexeme], definition: bool) -> None:
        paren_at = _index_of(stmt, "(")
        declared: dict[int, Token] = {}
        if paren_at <= 0 or stmt[paren_at - 1].kind != "ident":
            self._emit_plain(stmt)
            return
        name = stmt[paren_at - 1]
        close_at = _closing_paren(stmt, paren_at)
        head = [l.text for l in stmt[:paren_at - 1] if l.kind == "ident"]
        if not head:
            # a bare call or macro invocation at file scope, possibly without a ';'
            rest = stmt[close_at + 1:]
            if _index_of(rest, "(") > 0:
                self._emit_plain(stmt[:close_at + 1])
                self._classify_function(rest, definition)
            else:
                self._emit_plain(stmt)
            return
        return_type = " ".join(w for w in head if w not in _STORAGE)
        declared[id(name)] = _make_token(
            TokenKind.IDENTIFIER, name, ConstructKind.FUNCTION,
            storage=self._storage(head), definition=definition,
            return_type=return_type, role="global",
        )
        for param in _split_top_level(stmt[paren_at + 1:close_at]):
            token = self._parameter(param)
            if token is not None:
                declared[id(token[0])] = token[1]
        self._emit_plain(stmt, declared)

    def _classify_for(self, stmt: list[_Lexeme]) -> None:
        """Classify a declaration in the init clause of a ``for`` header."""
        open_at = _index_of(stmt, "(")
        clause: list[_Lexeme] = []
        for lex in stmt[open_at + 1:] if open_at >= 0 else []:
            if lex.kind == "punct" and lex.text == ";":
                break
            clause.append(lex)
        if clause:
            self._classify_declaration(clause, ConstructKind.VARIABLE, stmt)
        else:
            self._emit_plain(stmt)

    @staticmethod
    def _parameter(param: list[_Lexeme]) -> tuple[_Lexeme, Token] | None:
        idents = [l for l in param if l.kind == "ident"]
        if not idents:
            return None
        if any(l.kind == "punct" and l.text == "(" for l in param):
            name, is_pointer, is_array = _parse_declarator(param)
        else:
            candidate = idents[-1]
            before = idents[:-1]
            if (
                not before
                or candidate.text in _KEYWORDS
                or before[-1].text in _TAG_KEYWORDS
                or all(w.text in _QUALIFIERS for w in before)
            ):
                return None
            name = candidate
            is_pointer = any(l.kind == "punct" and l.text == "*" for l in param)
            at = param.index(candidate)
            is_array = at + 1 < len(param) and param[at + 1].text == "["
        if name is None or name.text in _KEYWORDS:
            return None
        base = " ".join(
            w.text for w in idents
            if w is not name and w.text not in _QUALIFIERS and w.text not in _STORAGE
        )
        return name, _make_token(
            TokenKind.IDENTIFIER, name, ConstructKind.VARIABLE,
            base_type=base, is_pointer=is_pointer, is_array=is_array,
            role="parameter", storage=None,
        )
