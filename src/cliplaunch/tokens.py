"""Free-text argument splitting and display quoting.

Both helpers are deliberately small. ``tokenize`` is a convenience for the
"extra args" field, not a shell grammar, and ``shell_quote`` only ever
produces preview text: real invocations pass an argument vector.
"""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(r'(?:[^\s"]+|"[^"]*")+')
_SAFE_TOKEN_RE = re.compile(r"[a-zA-Z0-9_/.\-]+")


def tokenize(raw: str | None) -> list[str]:
    """Split on whitespace, keeping double-quoted spans together.

    >>> tokenize('--filename "my file" --x')
    ['--filename', 'my file', '--x']
    """
    if not raw or not raw.strip():
        return []
    tokens = _TOKEN_RE.findall(raw)
    return [_strip_outer_quotes(token) for token in tokens]


def _strip_outer_quotes(token: str) -> str:
    if token.startswith('"'):
        token = token[1:]
    if token.endswith('"'):
        token = token[:-1]
    return token


def shell_quote(token: str) -> str:
    """Quote a token for human-readable display."""
    if _SAFE_TOKEN_RE.fullmatch(token):
        return token
    escaped = token.replace('"', '\\"')
    return f'"{escaped}"'


def join_for_display(program: str, argv: list[str]) -> str:
    return " ".join([program, *(shell_quote(arg) for arg in argv)])
