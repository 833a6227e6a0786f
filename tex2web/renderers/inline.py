"""
Character-level LaTeX commands → inline HTML.

Rules run in a fixed order; the order is load-bearing:
  1. font sizes, scoped form (``\\Large{x}``, ``{\\Large x}``) before the
     unscoped form (``\\Large rest of line``), which would otherwise swallow
     the braces as plain text
  2. font families (scoped only)
  3. single-argument formatting, colours, boxes, spacing, symbols
  4. hyperlinks, last, so they can see colour spans already produced

Escapes, line breaks and label removal run later in the pipeline (after the
environments that still need ``\\\\`` and ``&``), see ``apply_breaks`` and
``unescape_specials``.
"""
from __future__ import annotations

import re

from ._tex_utils import brace_arg, bracket_arg, replace_command, replace_group_command, skip_ws

FONT_SIZES: dict[str, str] = {
    "tiny": "0.6em",
    "scriptsize": "0.7em",
    "footnotesize": "0.8em",
    "small": "0.9em",
    "normalsize": "1em",
    "large": "1.2em",
    "Large": "1.44em",
    "LARGE": "1.728em",
    "huge": "2.074em",
    "Huge": "2.488em",
}

FONT_FAMILIES: dict[str, str] = {
    "textrm": "serif",
    "textsf": "sans-serif",
    "textnormal": "serif",
    "rmfamily": "serif",
    "sffamily": "sans-serif",
    "ttfamily": "monospace",
}

_SIMPLE_WRAPPERS: dict[str, tuple[str, str]] = {
    "textbf": ("<strong>", "</strong>"),
    "textit": ("<em>", "</em>"),
    "emph": ("<em>", "</em>"),
    "underline": ("<u>", "</u>"),
    "texttt": ("<code>", "</code>"),
    "textsc": ('<span style="font-variant:small-caps">', "</span>"),
}

_SYMBOLS: dict[str, str] = {
    "degree": "°",
    "textdegree": "°",
    "ldots": "…",
    "dots": "…",
    "textbackslash": "&#92;",
    "LaTeX": "LaTeX",
    "TeX": "TeX",
}

_SKIPS: dict[str, str] = {
    "smallskip": "3pt",
    "medskip": "6pt",
    "bigskip": "12pt",
}

_HEADINGS: dict[str, int] = {
    "section": 1,
    "subsection": 2,
    "subsubsection": 3,
    "paragraph": 4,
}

_VSPACE_RE = re.compile(r"\\vspace\*?\{\s*(\d+(?:\.\d*)?|\.\d+)\s*(pt|cm|mm|in)\s*\}")
_SYMBOL_RE = re.compile(
    r"\\(" + "|".join(sorted(_SYMBOLS, key=len, reverse=True)) + r")(?![A-Za-z])(?:\{\})?"
)
_SKIP_RE = re.compile(r"\\(smallskip|medskip|bigskip)(?![A-Za-z])")
_COLOR_SPAN_RE = re.compile(r'^<span style="color:[^>]+>')
_SPECIALS_RE = re.compile(r"\\([&%_#{}$])")
_LINE_BREAK_RE = re.compile(r"\\\\(?:\[[^\]]*\])?(?!\s*&)")
_PAR_RE = re.compile(r"\\par(?![A-Za-z])")
_REF_RE = re.compile(r"\\(?:label|ref|eqref|pageref)\{[^}]*\}")
_CITE_RE = re.compile(r"\\cite(?:\[[^\]]*\])?\{([^}]*)\}")
_HEADING_RE = re.compile(
    r"\\(section|subsection|subsubsection|paragraph)(\*?)(?![A-Za-z])"
)


def apply_font_sizes(text: str) -> str:
    """Rewrite size commands: scoped invocations first, then unscoped ones."""
    for cmd, size in FONT_SIZES.items():
        text = replace_command(text, cmd, 1, lambda x, s=size: _size_span(s, x))
        text = replace_group_command(text, cmd, lambda x, s=size: _size_span(s, x))
    for cmd, size in FONT_SIZES.items():
        text = re.sub(
            r"\\" + cmd + r"(?![A-Za-z])[ \t]*\n?[ \t]*([^\s\\{}][^\n\\{}]*)",
            lambda m, s=size: _size_span(s, m.group(1).rstrip()),
            text,
        )
    return text


def apply_font_families(text: str) -> str:
    """Rewrite scoped family commands (``\\textsf{x}``, ``{\\ttfamily x}``)."""
    for cmd, family in FONT_FAMILIES.items():
        text = replace_command(text, cmd, 1, lambda x, f=family: _family_span(f, x))
        text = replace_group_command(text, cmd, lambda x, f=family: _family_span(f, x))
    return text


def apply_inline_commands(text: str) -> str:
    """Rewrite single-argument formatting, colour and spacing commands, then links."""
    for cmd, (open_tag, close_tag) in _SIMPLE_WRAPPERS.items():
        text = replace_command(text, cmd, 1, lambda x, o=open_tag, c=close_tag: f"{o}{x}{c}")

    text = replace_command(
        text, "textcolor", 2, lambda color, x: f'<span style="color:{color.strip()}">{x}</span>'
    )
    text = replace_command(
        text,
        "colorbox",
        2,
        lambda color, x: f'<span style="background-color:{color.strip()}">{x}</span>',
    )
    text = replace_command(
        text,
        "fcolorbox",
        3,
        lambda border, color, x: (
            f'<span style="border:1px solid {border.strip()}; '
            f'background-color:{color.strip()}">{x}</span>'
        ),
    )
    text = _VSPACE_RE.sub(r'<div style="height:\1\2;"></div>', text)
    text = _SKIP_RE.sub(lambda m: f'<div style="height:{_SKIPS[m.group(1)]};"></div>', text)
    text = _SYMBOL_RE.sub(lambda m: _SYMBOLS[m.group(1)], text)
    text = re.sub(r"\\noindent(?![A-Za-z])\s*", "", text)
    return apply_links(text)


def apply_links(text: str) -> str:
    """Rewrite ``\\href`` and ``\\url``.

    Link text that already starts with a colour span keeps its colour and gets
    an explicit underline so it still reads as a link.
    """
    def _href(url: str, inner: str) -> str:
        url = url.strip()
        if _COLOR_SPAN_RE.match(inner):
            return (
                f'<a href="{url}" target="_blank" '
                f'style="text-decoration:underline;">{inner}</a>'
            )
        return f'<a href="{url}" target="_blank">{inner}</a>'

    text = replace_command(text, "href", 2, _href)
    return replace_command(
        text, "url", 1, lambda u: f'<a href="{u.strip()}" target="_blank">{u.strip()}</a>'
    )


def apply_headings(text: str, toc: list[tuple[int, str, str]] | None = None) -> str:
    """Rewrite sectioning commands to ``<h1>``..``<h4>``, each on its own paragraph.

    When *toc* is a list, each heading gets an ``id`` and is appended to it
    as ``(level, anchor, title)``.
    """
    out: list[str] = []
    pos = 0
    for m in _HEADING_RE.finditer(text):
        if m.start() < pos:
            continue
        arg_pos = skip_ws(text, m.end())
        short = bracket_arg(text, arg_pos)
        if short is not None:
            arg_pos = skip_ws(text, short[1])
        group = brace_arg(text, arg_pos)
        if group is None:
            continue
        title, end = group
        title = title.strip()
        level = _HEADINGS[m.group(1)]
        out.append(text[pos : m.start()])
        if toc is not None:
            anchor = f"sec-{len(toc) + 1}"
            toc.append((level, anchor, title))
            out.append(f'\n\n<h{level} id="{anchor}">{title}</h{level}>\n\n')
        else:
            out.append(f"\n\n<h{level}>{title}</h{level}>\n\n")
        pos = end
    out.append(text[pos:])
    return "".join(out)


def render_toc(toc: list[tuple[int, str, str]]) -> str:
    """Build the contents list; titles get the label removal and unescaping the body gets."""
    items = "".join(
        f'<li class="toc-level-{level}"><a href="#{anchor}">{_toc_title(title)}</a></li>'
        for level, anchor, title in toc
    )
    return f'<nav class="toc"><ul>{items}</ul></nav>' if items else '<nav class="toc"></nav>'


def _toc_title(title: str) -> str:
    return unescape_specials(apply_breaks(title)).strip()


def apply_breaks(text: str) -> str:
    """Paragraph breaks, forced line breaks, page breaks, rules, labels and citations."""
    text = _PAR_RE.sub("\n\n", text)
    text = _LINE_BREAK_RE.sub("<br>", text)
    text = re.sub(r"\\(?:newline|linebreak)(?![A-Za-z])", "<br>", text)
    text = re.sub(r"\\(?:newpage|clearpage)(?![A-Za-z])", '<div class="page-break"></div>', text)
    text = re.sub(r"\\(?:hrule|sectionbreak)(?![A-Za-z])", "<hr />", text)
    text = re.sub(r"\\(?:toprule|midrule|bottomrule)(?![A-Za-z])", "", text)
    text = _REF_RE.sub("", text)
    return _CITE_RE.sub(
        lambda m: "[" + ", ".join(k.strip() for k in m.group(1).split(",")) + "]", text
    )


def unescape_specials(text: str) -> str:
    """Turn escaped specials (``\\&``, ``\\%``, ``\\_``, ``\\#``, ``\\{``, ``\\}``, ``\\$``) into literals."""
    return _SPECIALS_RE.sub(r"\1", text)


def _size_span(size: str, inner: str) -> str:
    return f'<span style="font-size:{size}">{inner}</span>'


def _family_span(family: str, inner: str) -> str:
    return f'<span style="font-family:{family}">{inner}</span>'
