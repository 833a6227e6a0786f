"""Split a rewritten body into paragraphs and wrap the ones that are plain text."""
from __future__ import annotations

import re

from ._context import BLOCK_TOKEN_RE

# Lines holding only whitespace count as blank.
PARAGRAPH_BREAK_RE = re.compile(r"\n(?:[ \t]*\n)+")
_BLOCK_START_RE = re.compile(
    r"^<(h1|h2|h3|h4|h5|h6|ul|ol|dl|table|figure|pre|blockquote|section|nav|div|hr|header)\b"
)


def assemble_paragraphs(body: str) -> str:
    """Return *body* as a sequence of block-level HTML elements.

    Candidates starting with a block tag are emitted as they are; everything
    else becomes ``<p>`` with single newlines collapsed to spaces.  Stashed
    blocks (code, display math) inside a text candidate are lifted out of
    the surrounding paragraph.
    """
    parts: list[str] = []
    for candidate in PARAGRAPH_BREAK_RE.split(body):
        candidate = candidate.strip()
        if not candidate:
            continue
        if _BLOCK_START_RE.match(candidate):
            parts.append(candidate)
            continue
        parts.extend(_wrap_text(candidate))
    return "".join(parts)


def _wrap_text(candidate: str) -> list[str]:
    out: list[str] = []
    pos = 0
    for m in BLOCK_TOKEN_RE.finditer(candidate):
        out.extend(_paragraph(candidate[pos : m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.extend(_paragraph(candidate[pos:]))
    return out


def _paragraph(text: str) -> list[str]:
    text = text.strip()
    if not text:
        return []
    return ["<p>" + text.replace("\n", " ") + "</p>"]
