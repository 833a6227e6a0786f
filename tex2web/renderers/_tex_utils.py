"""Brace-aware scanning helpers shared by the renderers."""
from __future__ import annotations

import re
from typing import Callable

_WS_RE = re.compile(r"\s*")


def brace_arg(s: str, pos: int) -> tuple[str, int] | None:
    """Return (content, end_pos) of the brace group starting at *pos*.

    Escaped braces (``\\{`` / ``\\}``) do not count towards nesting.  Returns
    ``None`` when *pos* is not an opening brace or the group never closes.
    """
    if pos >= len(s) or s[pos] != "{":
        return None
    depth = 0
    i = pos
    while i < len(s):
        ch = s[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return (s[pos + 1 : i], i + 1)
        i += 1
    return None


def bracket_arg(s: str, pos: int) -> tuple[str, int] | None:
    """Return (content, end_pos) of a ``[...]`` option group starting at *pos*.

    Brackets inside brace groups are skipped, so ``[caption={a[1]}]`` works.
    """
    if pos >= len(s) or s[pos] != "[":
        return None
    i = pos + 1
    while i < len(s):
        ch = s[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            group = brace_arg(s, i)
            if group is None:
                return None
            i = group[1]
            continue
        if ch == "]":
            return (s[pos + 1 : i], i + 1)
        i += 1
    return None


def skip_ws(s: str, pos: int) -> int:
    """Return the index of the first non-whitespace character at or after *pos*."""
    return _WS_RE.match(s, pos).end()


def parse_args(s: str, pos: int, nargs: int, *, optional: bool = False):
    """Parse an optional ``[...]`` group followed by *nargs* brace groups.

    Returns ``(options, args, end_pos)`` or ``None`` when a required group is
    missing or unbalanced.  *options* is ``None`` when absent.
    """
    options = None
    if optional:
        opt = bracket_arg(s, skip_ws(s, pos))
        if opt is not None:
            options, pos = opt
    args: list[str] = []
    for _ in range(nargs):
        group = brace_arg(s, skip_ws(s, pos))
        if group is None:
            return None
        content, pos = group
        args.append(content)
    return options, args, pos


def replace_command(
    text: str,
    name: str,
    nargs: int,
    render: Callable[..., str],
    *,
    optional: bool = False,
) -> str:
    """Rewrite every ``\\name{a1}...{aN}`` in *text* with ``render(a1, ..., aN)``.

    Arguments are rewritten first, so nested uses of the same command resolve
    inside-out.  With *optional* the first positional argument passed to
    *render* is the ``[...]`` option string (or ``None``).  Occurrences whose
    arguments are missing or unbalanced are left untouched.
    """
    pattern = re.compile(r"\\" + re.escape(name) + r"(?![A-Za-z])")
    out: list[str] = []
    pos = 0
    while True:
        m = pattern.search(text, pos)
        if m is None:
            out.append(text[pos:])
            break
        parsed = parse_args(text, m.end(), nargs, optional=optional)
        if parsed is None:
            out.append(text[pos : m.end()])
            pos = m.end()
            continue
        options, args, end = parsed
        args = [replace_command(a, name, nargs, render, optional=optional) for a in args]
        out.append(text[pos : m.start()])
        out.append(render(options, *args) if optional else render(*args))
        pos = end
    return "".join(out)


def replace_group_command(text: str, name: str, render: Callable[[str], str]) -> str:
    """Rewrite declaration groups ``{\\name content}`` with ``render(content)``."""
    pattern = re.compile(r"\{\\" + re.escape(name) + r"(?![A-Za-z])")
    out: list[str] = []
    pos = 0
    while True:
        m = pattern.search(text, pos)
        if m is None:
            out.append(text[pos:])
            break
        group = brace_arg(text, m.start())
        if group is None:
            out.append(text[pos : m.end()])
            pos = m.end()
            continue
        content, end = group
        inner = replace_group_command(content[len(name) + 1 :], name, render)
        out.append(text[pos : m.start()])
        out.append(render(inner.strip()))
        pos = end
    return "".join(out)


def first_command_arg(text: str, name: str) -> tuple[str, int, int] | None:
    """Return ``(argument, start, end)`` of the first ``\\name{...}`` in *text*."""
    pattern = re.compile(r"\\" + re.escape(name) + r"(?![A-Za-z])")
    for m in pattern.finditer(text):
        group = brace_arg(text, skip_ws(text, m.end()))
        if group is not None:
            return group[0], m.start(), group[1]
    return None
