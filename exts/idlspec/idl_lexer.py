"""WebIDL tokenizer."""

from __future__ import annotations

import re
from dataclasses import dataclass

_TOKEN_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("whitespace", re.compile(r"[\t\n\r ]+")),
    ("comment", re.compile(r"//.*|/\*[\s\S]*?\*/")),
    (
        "decimal",
        re.compile(
            r"-?(?=[0-9]*\.|[0-9]+[eE])"
            r"(?:(?:[0-9]+\.[0-9]*|[0-9]*\.[0-9]+)(?:[Ee][-+]?[0-9]+)?|[0-9]+[Ee][-+]?[0-9]+)"
        ),
    ),
    ("integer", re.compile(r"-?(?:0[Xx][0-9A-Fa-f]+|0[0-7]*|[1-9][0-9]*)")),
    ("identifier", re.compile(r"[_-]?[A-Za-z][0-9A-Z_a-z-]*")),
    ("string", re.compile(r'"[^"]*"')),
    ("ellipsis", re.compile(r"\.\.\.")),
    ("other", re.compile(r"[^\t\n\r 0-9A-Za-z]")),
)


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    value: str
    line: int
    position: int


class IdlSyntaxError(Exception):
    def __init__(
        self, bare_message: str, *, line: int, context: str, source_name: str = ""
    ) -> None:
        self.bare_message = bare_message
        self.line = line
        self.context = context
        self.source_name = source_name
        where = f" in {source_name}" if source_name else ""
        super().__init__(
            f"Syntax error at line {line}{where}: {bare_message}\n{context}"
        )


def _format_context(text: str, line: int, position: int) -> str:
    lines = text.splitlines() or [""]
    index = min(max(line - 1, 0), len(lines) - 1)
    shown = lines[max(0, index - 2) : index + 1]
    line_start = text.rfind("\n", 0, position) + 1
    column = max(position - line_start, 0)
    return "\n".join([*shown, " " * column + "^"])


def tokenize(text: str, source_name: str = "") -> list[Token]:
    tokens: list[Token] = []
    position = 0
    line = 1
    while position < len(text):
        for kind, pattern in _TOKEN_PATTERNS:
            match = pattern.match(text, position)
            if match is None or not match.group(0):
                continue
            value = match.group(0)
            if kind != "whitespace":
                tokens.append(Token(kind, value, line, position))
            line += value.count("\n")
            position = match.end()
            break
        else:
            raise IdlSyntaxError(
                f"Unexpected character {text[position]!r}",
                line=line,
                context=_format_context(text, line, position),
                source_name=source_name,
            )
    tokens.append(Token("eof", "", line, len(text)))
    return tokens
