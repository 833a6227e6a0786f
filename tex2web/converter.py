"""
Main conversion orchestrator: turns LaTeX source into an HTML fragment.

Stage order
-----------
Whole document (``Converter.convert``)
  1. Drop NUL characters, stash code listings, strip comments.
  2. Pull title / author / date out of the preamble, keep the document body.
  3. Expand ``\\maketitle``; reserve a slot for ``\\tableofcontents``.

Body pipeline (``Converter._render``, re-entered by layout environments)
  4. Stash math spans.
  5. Mark ``\\centering`` scopes (phase 1).
  6. Font sizes (scoped, then unscoped), font families.
  7. Single-argument inline commands, colours, links.
  8. Sectioning commands.
  9. Block environments, innermost first.
  10. ``\\includegraphics``.
  11. Line and page breaks, labels, escaped specials.
  12. Centre blocks after leftover ``\\centering`` (phase 2), resolve marked scopes.
  13. Paragraph assembly.

Finally stashed HTML is restored and, if configured, the fragment is
passed through the allowlist sanitizer.
"""
from __future__ import annotations

import re
from typing import Mapping

from .config import Config
from .renderers._context import RenderContext
from .renderers.centering import mark_centering, resolve_markers, wrap_centered_blocks
from .renderers.environments import protect_code, transform_environments
from .renderers.images import render_includegraphics
from .renderers.inline import (
    apply_breaks,
    apply_font_families,
    apply_font_sizes,
    apply_headings,
    apply_inline_commands,
    render_toc,
    unescape_specials,
)
from .renderers.math import stash_math
from .renderers.paragraphs import assemble_paragraphs
from .renderers.preamble import (
    extract_body,
    extract_preamble,
    render_title_block,
    strip_comments,
)
from .sanitizer import sanitize_fragment

_MAKETITLE_RE = re.compile(r"\\maketitle(?![A-Za-z])")
_TOC_RE = re.compile(r"\\tableofcontents(?![A-Za-z])")


class Converter:
    """Converts LaTeX source text into an HTML fragment."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    def convert(self, source: str, images: Mapping[str, str] | None = None) -> str:
        """Convert *source* to HTML, resolving ``\\includegraphics`` against *images*.

        Never raises for malformed markup: unbalanced environments, unknown
        commands and missing images pass through as literal text.
        """
        ctx = RenderContext(config=self.config, images=dict(images or {}), render=self._render)

        text = source.replace("\x00", "")
        text = protect_code(text, ctx)
        if self.config.strip_comments:
            text = strip_comments(text)

        preamble, text = extract_preamble(
            text, locale=self.config.locale, date_format=self.config.date_format
        )
        body = extract_body(text)

        body = _MAKETITLE_RE.sub(
            lambda m: "\n\n" + render_title_block(preamble) + "\n\n", body, count=1
        )
        toc_slot = None
        if _TOC_RE.search(body):
            ctx.toc = []
            token = ctx.stash_block("")
            toc_slot = len(ctx.stash) - 1
            body = _TOC_RE.sub(lambda m: "\n\n" + token + "\n\n", body, count=1)

        body = self._render(body, ctx)
        if toc_slot is not None:
            ctx.stash[toc_slot] = render_toc(ctx.toc or [])

        html = ctx.restore(body)
        if self.config.safety.sanitize:
            html = sanitize_fragment(html)
        return html

    # ------------------------------------------------------------------
    # Body pipeline
    # ------------------------------------------------------------------

    def _render(self, text: str, ctx: RenderContext) -> str:
        """Run the body pipeline on *text*; layout environments call back into it."""
        text = stash_math(text, ctx)
        text = mark_centering(text)

        text = apply_font_sizes(text)
        text = apply_font_families(text)
        text = apply_inline_commands(text)
        text = apply_headings(text, ctx.toc)

        text = transform_environments(text, ctx)
        text = render_includegraphics(text, ctx.images)

        text = apply_breaks(text)
        text = unescape_specials(text)

        text = wrap_centered_blocks(text)
        text = resolve_markers(text)
        return assemble_paragraphs(text)
