"""Per-conversion state shared by the pipeline stages and their recursive calls."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Mapping

from ..config import Config

_BLOCK_TOKEN = "\x00BLOCK{}\x00"
_INLINE_TOKEN = "\x00INLINE{}\x00"
_TOKEN_RE = re.compile(r"\x00(?:BLOCK|INLINE)(\d+)\x00")

# A paragraph candidate that is nothing but a stashed block
BLOCK_TOKEN_RE = re.compile(r"\x00BLOCK\d+\x00")


@dataclass
class RenderContext:
    """State for one ``Converter.convert`` call.

    ``stash`` holds finished HTML (code listings, math) that later passes must
    not touch; it is shared with child contexts so tokens produced inside a
    recursive call are restored once, at the top level.
    """

    config: Config
    images: Mapping[str, str]
    render: Callable[[str, "RenderContext"], str]
    depth: int = 0
    stash: list[str] = field(default_factory=list)
    toc: list[tuple[int, str, str]] | None = None

    def stash_block(self, html: str) -> str:
        """Stash block-level HTML; paragraph assembly never wraps its token."""
        self.stash.append(html)
        return _BLOCK_TOKEN.format(len(self.stash) - 1)

    def stash_inline(self, html: str) -> str:
        self.stash.append(html)
        return _INLINE_TOKEN.format(len(self.stash) - 1)

    def restore(self, text: str) -> str:
        """Replace every stash token in *text* with its HTML.

        Stashed HTML may itself hold tokens (layouts, the table of contents),
        so substitution repeats until none are left.
        """
        while _TOKEN_RE.search(text):
            text = _TOKEN_RE.sub(lambda m: self.stash[int(m.group(1))], text)
        return text

    def child(self) -> "RenderContext":
        return RenderContext(
            config=self.config,
            images=self.images,
            render=self.render,
            depth=self.depth + 1,
            stash=self.stash,
            toc=None,
        )

    def render_nested(self, text: str) -> str:
        """Run the full pipeline on *text* one level deeper."""
        return self.render(text, self.child())
