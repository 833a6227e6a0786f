"""
Wrap math spans in marker containers for a client-side typesetter.

The interior of every span is kept verbatim, except that ``\\Vec{`` is
rewritten to ``\\vec{`` (MathJax has no ``\\Vec``); only the container and the
delimiters are emitted:

  \\[...\\], $$...$$            → <div class="math display">\\[...\\]</div>
  \\begin{equation}...          → <div class="math display">\\begin{equation}...</div>
  $...$ (single line)          → <span class="math inline">\\(...\\)</span>

Finished spans are stashed in the render context so that no later pass
(escape unescaping, line breaks, table splitting) can reach their interior.
"""
from __future__ import annotations

import html
import re

from ._context import RenderContext

_DISPLAY_PATTERNS = (
    re.compile(r"(?<!\\)\$\$(.*?)\$\$", re.DOTALL),
    re.compile(r"(?<!\\)\\\[(.*?)\\\]", re.DOTALL),
)
_MATH_ENV_RE = re.compile(
    r"\\begin\{(equation|align|gather|multline|eqnarray)(\*)?\}"
    r"(.*?)"
    r"\\end\{\1\2?\}",
    re.DOTALL,
)
# $...$ but NOT $$...$$ and not an escaped \$
_INLINE_RE = re.compile(r"(?<![\\$])\$(?!\$)([^$\n]+?)(?<!\\)\$")
_VEC_RE = re.compile(r"\\Vec\{")


def find_display_math(text: str) -> list[tuple[int, int, str, bool]]:
    """
    Return ``(start, end, latex, is_environment)`` for every display-math
    block in *text*, sorted by position and non-overlapping.
    """
    raw: list[tuple[int, int, str, bool]] = []
    for pattern in _DISPLAY_PATTERNS:
        for m in pattern.finditer(text):
            raw.append((m.start(), m.end(), m.group(1).strip(), False))
    for m in _MATH_ENV_RE.finditer(text):
        # Keep the whole environment; the typesetter understands it directly.
        raw.append((m.start(), m.end(), m.group(0).strip(), True))

    raw.sort(key=lambda x: x[0])
    result: list[tuple[int, int, str, bool]] = []
    last_end = -1
    for block in raw:
        if block[0] >= last_end:
            result.append(block)
            last_end = block[1]
    return result


def stash_math(text: str, ctx: RenderContext) -> str:
    """Replace every math span in *text* with a stash token."""
    cfg = ctx.config.math
    escape = ctx.config.safety.sanitize

    chunks: list[str] = []
    prev = 0
    for start, end, latex, is_env in find_display_math(text):
        chunks.append(text[prev:start])
        body = _body(latex, escape)
        if not is_env:
            body = f"{cfg.display_open}{body}{cfg.display_close}"
        chunks.append(ctx.stash_block(f'<div class="math display">{body}</div>'))
        prev = end
    chunks.append(text[prev:])
    text = "".join(chunks)

    def _inline(m: re.Match) -> str:
        body = _body(m.group(1), escape)
        return ctx.stash_inline(
            f'<span class="math inline">{cfg.inline_open}{body}{cfg.inline_close}</span>'
        )

    return _INLINE_RE.sub(_inline, text)


def _body(latex: str, escape: bool) -> str:
    latex = _VEC_RE.sub(r"\\vec{", latex)
    return html.escape(latex, quote=False) if escape else latex
