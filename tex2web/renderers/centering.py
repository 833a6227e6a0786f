"""
Two-phase handling of the ``\\centering`` declaration.

Phase 1 (:func:`mark_centering`) runs before any block rewrite: everything a
top-level ``\\centering`` governs, up to the next sectioning command or the
end of the body, is bracketed with sentinels.  Declarations inside figure,
table, list and layout environments are left for those environments, or for
phase 2, to handle.

Phase 2 (:func:`wrap_centered_blocks`) runs after all block and inline
rewrites and wraps any rendered block that directly follows a remaining
``\\centering``.  :func:`resolve_markers` finally turns the bracketed spans
into centering containers.

Sentinels contain NUL characters, which are removed from the source before
the pipeline starts, so they cannot collide with input text.
"""
from __future__ import annotations

import re

from .paragraphs import assemble_paragraphs

CENTER_START = "\x00CENTER_START\x00"
CENTER_END = "\x00CENTER_END\x00"

_CENTERING_RE = re.compile(r"\\centering(?![A-Za-z])\s+")
_BOUNDARY_RE = re.compile(r"\\(?:section|subsection|subsubsection)(?![A-Za-z])|\\end\{document\}")
_SCOPED_ENV_RE = re.compile(
    r"\\(begin|end)\{(figure\*?|table\*?|center|sidebyside|textimage|itemize|enumerate|description)\}"
)

_BLOCK_AFTER_CENTERING_RE = re.compile(
    r"\\centering(?![A-Za-z])\s*("
    r"<img [^>]+>"
    r"|<table[\s\S]*?</table>"
    r"|<figure[\s\S]*?</figure>"
    r'|<div class="table-scroll">[\s\S]*?</div>'
    r"|<pre[\s\S]*?</pre>"
    r"|<blockquote[\s\S]*?</blockquote>"
    r"|<ul[\s\S]*?</ul>"
    r"|<ol[\s\S]*?</ol>"
    r"|<dl[\s\S]*?</dl>"
    r"|<section[\s\S]*?</section>"
    r"|<h([1-6])[^>]*>[\s\S]*?</h\2>"
    r"|<p[\s\S]*?</p>"
    r"|\x00BLOCK\d+\x00"
    r")"
)
_STRAY_CENTERING_RE = re.compile(r"\\centering(?![A-Za-z])\s*")
_MARKED_SPAN_RE = re.compile(
    re.escape(CENTER_START) + r"([\s\S]*?)" + re.escape(CENTER_END)
)


def _environment_spans(text: str) -> list[tuple[int, int]]:
    """Outermost spans of environments that handle ``\\centering`` themselves."""
    spans: list[tuple[int, int]] = []
    stack: list[tuple[str, int]] = []
    for m in _SCOPED_ENV_RE.finditer(text):
        kind, name = m.group(1), m.group(2)
        if kind == "begin":
            stack.append((name, m.start()))
            continue
        for depth in range(len(stack) - 1, -1, -1):
            if stack[depth][0] == name:
                start = stack[depth][1]
                del stack[depth:]
                if not stack:
                    spans.append((start, m.end()))
                break
    return spans


def mark_centering(text: str) -> str:
    """Bracket the scope of every top-level ``\\centering`` with sentinels."""
    spans = _environment_spans(text)

    def inside_environment(pos: int) -> bool:
        return any(start <= pos < end for start, end in spans)

    out: list[str] = []
    pos = 0
    while True:
        m = _CENTERING_RE.search(text, pos)
        while m is not None and inside_environment(m.start()):
            m = _CENTERING_RE.search(text, m.end())
        if m is None:
            out.append(text[pos:])
            break
        boundary = _BOUNDARY_RE.search(text, m.end())
        end = boundary.start() if boundary else len(text)
        out.append(text[pos : m.start()])
        out.append(CENTER_START + text[m.end() : end].strip() + CENTER_END)
        if boundary:
            out.append("\n\n")
        pos = end
    return "".join(out)


def wrap_centered_blocks(text: str) -> str:
    """Wrap each block directly following ``\\centering``, then drop leftover declarations."""
    text = _BLOCK_AFTER_CENTERING_RE.sub(
        lambda m: f'<div class="center">{m.group(1)}</div>', text
    )
    return _STRAY_CENTERING_RE.sub("", text)


def resolve_markers(text: str) -> str:
    """Turn bracketed spans into centering containers and strip stray sentinels."""
    text = _MARKED_SPAN_RE.sub(
        lambda m: f'\n\n<div class="center">{assemble_paragraphs(m.group(1))}</div>\n\n',
        text,
    )
    return text.replace(CENTER_START, "").replace(CENTER_END, "")
