"""
Convert LaTeX block environments to HTML.

Begin/end markers are paired with a stack, so nested environments of the
same name resolve correctly.  The innermost supported pair is rendered
first and the scan repeats until no supported pair is left; everything
inside an environment has therefore been converted by the time its own
handler runs.  Unknown environments and unbalanced markers stay in the text
as literal LaTeX.

Layout environments (center, sidebyside, textimage) run the whole pipeline on
their content and stash the finished HTML, so an enclosing layout never
re-reads text whose escapes were already resolved.

Code listings are handled separately by :func:`protect_code`, which runs
before comment stripping and stashes the finished ``<pre>`` blocks so no
later pass touches their interior.
"""
from __future__ import annotations

import html
import re
import warnings
from typing import Callable

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ._context import RenderContext
from ._tex_utils import brace_arg, bracket_arg, first_command_arg, parse_args, skip_ws
from .images import collect_images, render_includegraphics
from .paragraphs import PARAGRAPH_BREAK_RE, assemble_paragraphs

_MARKER_RE = re.compile(r"\\(begin|end)\{([A-Za-z]+\*?)\}")
_ITEM_RE = re.compile(r"\\item(?![A-Za-z])")
_BIBITEM_RE = re.compile(r"\\bibitem(?![A-Za-z])")
_ROW_SPLIT_RE = re.compile(r"\\\\(?:\[[^\]]*\])?")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)&")
_RULE_RE = re.compile(r"\\(?:hline|toprule|midrule|bottomrule)(?![A-Za-z])|\\cline\{[^}]*\}")
_LEADING_RULES_RE = re.compile(
    r"\A(?:\s*(?:\\(?:hline|toprule|midrule|bottomrule)(?![A-Za-z])|\\cline\{[^}]*\}))+"
)
_CENTERING_RE = re.compile(r"\\centering(?![A-Za-z])\s*")
_CAPTION_BEFORE_TABLE_RE = re.compile(
    r"\\caption\{([^{}]*(?:\{[^{}]*\}[^{}]*)*)\}\s*(<div class=\"table-scroll\"><table>|<table>)"
)
_LANGUAGE_RE = re.compile(r"language\s*=\s*([^,\]]+)")
_CAPTION_OPT_RE = re.compile(r"caption\s*=\s*")
_CODE_ENV_RE = re.compile(r"\\begin\{(lstlisting|verbatim)\}")
_NEWLINE_RUN_RE = re.compile(r"\s*\n\s*")

_FIGURE_STYLE = "display:flex;flex-wrap:wrap;gap:1em;justify-content:center"

_THEOREM_LABELS: dict[str, str] = {
    "theorem": "Theorem",
    "lemma": "Lemma",
    "proposition": "Proposition",
    "corollary": "Corollary",
    "remark": "Remark",
    "example": "Example",
}


# ---------------------------------------------------------------------------
# Code listings
# ---------------------------------------------------------------------------

def protect_code(text: str, ctx: RenderContext) -> str:
    """Render ``lstlisting`` / ``verbatim`` blocks and replace them with stash tokens.

    A begin marker without a matching end marker is left as it is.
    """
    out: list[str] = []
    pos = 0
    while True:
        m = _CODE_ENV_RE.search(text, pos)
        if m is None:
            out.append(text[pos:])
            break
        name = m.group(1)
        body_start = m.end()
        options = None
        if name == "lstlisting":
            opt = bracket_arg(text, body_start)
            if opt is not None:
                options, body_start = opt
        end_marker = f"\\end{{{name}}}"
        end = text.find(end_marker, body_start)
        if end == -1:
            out.append(text[pos : m.end()])
            pos = m.end()
            continue
        code = text[body_start:end]
        if name == "lstlisting":
            rendered = _render_listing(code, options, ctx)
        else:
            rendered = f"<pre><code>{html.escape(code, quote=False)}</code></pre>"
        out.append(text[pos : m.start()])
        out.append(ctx.stash_block(rendered))
        pos = end + len(end_marker)
    return "".join(out)


def _render_listing(code: str, options: str | None, ctx: RenderContext) -> str:
    language = ""
    caption = ""
    if options:
        m = _LANGUAGE_RE.search(options)
        if m:
            language = m.group(1).strip().lower()
        m = _CAPTION_OPT_RE.search(options)
        if m:
            group = brace_arg(options, m.end())
            caption = group[0] if group else options[m.end() :].split(",")[0].strip()
    code = code.strip()
    cls = f' class="language-{language}"' if language else ""
    figcaption = f"<figcaption>{caption}</figcaption>" if caption else ""
    return (
        f'<figure class="listing">{figcaption}'
        f"<pre><code{cls}>{_highlight(code, language, ctx)}</code></pre></figure>"
    )


def _highlight(code: str, language: str, ctx: RenderContext) -> str:
    """Escape *code*, or colour it with Pygments when highlighting is enabled."""
    if not (ctx.config.code.highlight and language):
        return html.escape(code, quote=False)
    try:
        lexer = get_lexer_by_name(language)
    except ClassNotFound:
        warnings.warn(
            f"No Pygments lexer for language {language!r}; listing left unhighlighted.",
            RuntimeWarning,
            stacklevel=2,
        )
        return html.escape(code, quote=False)
    # Inline styles keep the fragment self-contained.
    formatter = HtmlFormatter(nowrap=True, noclasses=True, style=ctx.config.code.style)
    return highlight(code, lexer, formatter).rstrip("\n")


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------

def find_innermost(text: str, names) -> tuple[str, int, int, int, int] | None:
    """Locate the first closed pair whose name is in *names*.

    Returns ``(name, begin_start, content_start, content_end, end_end)`` or
    ``None``.  An end marker that matches nothing on the stack is ignored;
    one that matches a deeper entry discards the unclosed begins above it.
    """
    stack: list[tuple[str, int, int]] = []
    for m in _MARKER_RE.finditer(text):
        kind, name = m.group(1), m.group(2)
        if kind == "begin":
            stack.append((name, m.start(), m.end()))
            continue
        for depth in range(len(stack) - 1, -1, -1):
            if stack[depth][0] == name:
                _, begin_start, content_start = stack[depth]
                del stack[depth:]
                if name in names:
                    return name, begin_start, content_start, m.start(), m.end()
                break
    return None


def transform_environments(text: str, ctx: RenderContext) -> str:
    """Render every supported environment in *text*, innermost first."""
    while True:
        found = find_innermost(text, _HANDLERS)
        if found is None:
            break
        name, begin_start, content_start, content_end, end_end = found
        rendered = _HANDLERS[name](text[content_start:content_end], ctx)
        text = text[:begin_start] + "\n\n" + rendered + "\n\n" + text[end_end:]
    return attach_table_captions(text)


def attach_table_captions(text: str) -> str:
    """Move a ``\\caption{X}`` directly preceding a rendered table into it."""
    return _CAPTION_BEFORE_TABLE_RE.sub(
        lambda m: f"{m.group(2)}<caption>{m.group(1)}</caption>", text
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _leading_options(content: str) -> tuple[str | None, str]:
    """Split an ``[...]`` option group off the start of *content*."""
    opt = bracket_arg(content, 0)
    if opt is None:
        return None, content
    options, end = opt
    return options, content[end:]


def _leading_args(content: str, nargs: int) -> tuple[list[str], str]:
    """Split *nargs* brace groups off the start of *content* (missing groups are empty)."""
    parsed = parse_args(content, 0, nargs)
    if parsed is None:
        return [""] * nargs, content
    _, args, end = parsed
    return args, content[end:]


def _paragraphs(content: str) -> str:
    """Return *content* as-is when it is one paragraph, else as ``<p>`` blocks."""
    content = content.strip()
    if not PARAGRAPH_BREAK_RE.search(content):
        return content
    return assemble_paragraphs(content)


def _one_line(text: str) -> str:
    return _NEWLINE_RUN_RE.sub(" ", text.strip())


def _abstract(content: str, ctx: RenderContext) -> str:
    return f'<section class="abstract">{assemble_paragraphs(content.strip())}</section>'


def _definition(content: str, ctx: RenderContext) -> str:
    return f'<div class="definition"><strong>Definition.</strong> {_paragraphs(content)}</div>'


def _theorem_like(label: str) -> Callable[[str, RenderContext], str]:
    css = label.lower()

    def _render(content: str, ctx: RenderContext) -> str:
        options, content = _leading_options(content)
        heading = f"{label} ({options.strip()})." if options and options.strip() else f"{label}."
        return f'<div class="{css}"><strong>{heading}</strong> {_paragraphs(content)}</div>'

    return _render


def _proof(content: str, ctx: RenderContext) -> str:
    _, content = _leading_options(content)
    return '<div class="proof"><strong>Proof.</strong> ' + _one_line(content) + "</div>"


def _items(content: str) -> list[str]:
    return [_one_line(item) for item in _ITEM_RE.split(content)[1:]]


def _itemize(content: str, ctx: RenderContext) -> str:
    return "<ul>" + "".join(f"<li>{item}</li>" for item in _items(content)) + "</ul>"


def _enumerate(content: str, ctx: RenderContext) -> str:
    return "<ol>" + "".join(f"<li>{item}</li>" for item in _items(content)) + "</ol>"


def _description(content: str, ctx: RenderContext) -> str:
    parts: list[str] = []
    for item in _ITEM_RE.split(content)[1:]:
        label, rest = _leading_options(item.lstrip())
        parts.append(f"<dt>{(label or '').strip()}</dt><dd>{_one_line(rest)}</dd>")
    return "<dl>" + "".join(parts) + "</dl>"


def _quote(content: str, ctx: RenderContext) -> str:
    return f"<blockquote>{assemble_paragraphs(content.strip())}</blockquote>"


def _bibliography(content: str, ctx: RenderContext) -> str:
    _, content = _leading_args(content, 1)
    entries: list[str] = []
    for entry in _BIBITEM_RE.split(content)[1:]:
        pos = skip_ws(entry, 0)
        opt = bracket_arg(entry, pos)
        if opt is not None:
            pos = skip_ws(entry, opt[1])
        parsed = parse_args(entry, pos, 1)
        if parsed is not None:
            pos = parsed[2]
        entries.append("<li>" + _one_line(entry[pos:]) + "</li>")
    return (
        '<section class="bibliography"><h2>References</h2><ul>'
        + "".join(entries)
        + "</ul></section>"
    )


def _cells(row: str, tag: str) -> str:
    return "".join(f"<{tag}>{c.strip()}</{tag}>" for c in _CELL_SPLIT_RE.split(row))


def _tabular(content: str, ctx: RenderContext) -> str:
    _, content = _leading_args(content, 1)
    rows = [r.strip() for r in _ROW_SPLIT_RE.split(_RULE_RE.sub("", content))]
    return "<table>" + "".join(f"<tr>{_cells(r, 'td')}</tr>" for r in rows if r) + "</table>"


def _tabularx(content: str, ctx: RenderContext) -> str:
    _, content = _leading_args(content, 2)
    segments = [s.strip() for s in _ROW_SPLIT_RE.split(content)]
    rows: list[str] = []
    header_done = False
    for i, segment in enumerate(segments):
        row = _RULE_RE.sub("", _LEADING_RULES_RE.sub("", segment)).strip()
        if not row:
            continue
        tag = "td"
        if not header_done:
            header_done = True
            following = segments[i + 1] if i + 1 < len(segments) else ""
            if _LEADING_RULES_RE.match(following):
                tag = "th"
        rows.append(f"<tr>{_cells(row, tag)}</tr>")
    return '<div class="table-scroll"><table>' + "".join(rows) + "</table></div>"


def _table(content: str, ctx: RenderContext) -> str:
    _, content = _leading_options(content)
    centered = _CENTERING_RE.search(content) is not None
    inner = _CENTERING_RE.sub("", content)
    found = first_command_arg(inner, "caption")
    if found is not None:
        caption, start, end = found
        inner = inner[:start] + inner[end:]
        cap = f"<caption>{caption.strip()}</caption>"
        if "<table>" in inner:
            inner = inner.replace("<table>", "<table>" + cap, 1)
        else:
            inner = f'<div class="caption">{caption.strip()}</div>' + inner
    inner = PARAGRAPH_BREAK_RE.sub("\n", inner.strip())
    return f'<div class="center">{inner}</div>' if centered else inner


def _figure(content: str, ctx: RenderContext) -> str:
    _, content = _leading_options(content)
    imgs = "".join(collect_images(content, ctx.images))
    found = first_command_arg(content, "caption")
    caption = f"<figcaption>{found[0].strip()}</figcaption>" if found else ""
    # No blank lines inside, or paragraph assembly would split the figure.
    lines = [f"  {part}\n" for part in (imgs, caption) if part]
    return f'<figure style="{_FIGURE_STYLE}">\n' + "".join(lines) + "</figure>"


def _nested(text: str, ctx: RenderContext) -> str:
    """Run the whole pipeline on *text* unless the nesting cap is reached."""
    if ctx.depth >= ctx.config.safety.max_depth:
        warnings.warn(
            f"Layout nesting exceeds max_depth={ctx.config.safety.max_depth}; "
            "inner content emitted without further conversion.",
            RuntimeWarning,
            stacklevel=2,
        )
        return text.strip()
    return ctx.render_nested(text.strip())


def _center(content: str, ctx: RenderContext) -> str:
    return ctx.stash_block(f'<div class="center">{_nested(content, ctx)}</div>')


def _split_on(content: str, command: str) -> tuple[str, str]:
    m = re.search(r"\\" + command + r"(?![A-Za-z])", content)
    if m is None:
        return content, ""
    return content[: m.start()], content[m.end() :]


def _sidebyside(content: str, ctx: RenderContext) -> str:
    left, right = _split_on(content, "sidebytext")
    return ctx.stash_block(
        '<div class="sidebyside">'
        f'<div class="sidebyside-left">{_nested(left, ctx)}</div>'
        f'<div class="sidebyside-right">{_nested(right, ctx)}</div>'
        "</div>"
    )


def _textimage(content: str, ctx: RenderContext) -> str:
    text, image = _split_on(content, "imageright")
    width = f"{ctx.config.textimage_width * 100:g}%"
    style = f"width:{width}; max-width:{ctx.config.textimage_max_width}px;"
    image = render_includegraphics(image, ctx.images, forced_style=style)
    return ctx.stash_block(
        '<div class="textimage">'
        f'<div class="textimage-left">{_nested(text, ctx)}</div>'
        f'<div class="textimage-right">{image.strip()}</div>'
        "</div>"
    )


_HANDLERS: dict[str, Callable[[str, RenderContext], str]] = {
    "abstract": _abstract,
    "definition": _definition,
    **{name: _theorem_like(label) for name, label in _THEOREM_LABELS.items()},
    "proof": _proof,
    "itemize": _itemize,
    "enumerate": _enumerate,
    "description": _description,
    "quote": _quote,
    "quotation": _quote,
    "thebibliography": _bibliography,
    "tabular": _tabular,
    "tabularx": _tabularx,
    "table": _table,
    "table*": _table,
    "figure": _figure,
    "figure*": _figure,
    "center": _center,
    "sidebyside": _sidebyside,
    "textimage": _textimage,
}

SUPPORTED_ENVIRONMENTS = frozenset(_HANDLERS)
