"""
Allowlist sanitizer for converted fragments.

The converter passes unknown LaTeX through literally, so a hostile source can
smuggle raw HTML into the output.  :func:`sanitize_fragment` re-parses the
fragment and keeps only the markup the converter itself produces:

- tags and attributes listed in ``ALLOWED_ATTRS``
- inline styles limited to the CSS properties in ``ALLOWED_CSS_PROPERTIES``
- links to http(s), mail, relative or in-page targets; images from those or
  from base64 image data URIs

Unclosed elements are closed at the end so the fragment can be embedded
safely in a container.
"""
from __future__ import annotations

import html
import re
from html.entities import name2codepoint
from html.parser import HTMLParser

_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_CSS_DECLARATION_RE = re.compile(r"^\s*([a-zA-Z-]+)\s*:\s*(.+?)\s*$", re.DOTALL)
_CSS_FORBIDDEN_RE = re.compile(
    r"url\s*\(|expression\s*\(|javascript:|@import|\\", re.IGNORECASE
)
_DATA_IMAGE_RE = re.compile(
    r"^data:image/(?:png|jpeg|gif|webp|bmp|svg\+xml);base64,[A-Za-z0-9+/=]*$", re.IGNORECASE
)
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
# Browsers skip these when reading a URL scheme.
_URL_IGNORED_RE = re.compile(r"[\x00-\x20\x7f]")

_COMMON = frozenset({"class", "id", "style", "title"})

# tag -> attributes it may carry besides the common ones
ALLOWED_ATTRS: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "target", "rel"}),
    "img": frozenset({"src", "alt", "width", "height"}),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan"}),
    **{
        tag: frozenset()
        for tag in (
            "blockquote", "br", "caption", "code", "dd", "div", "dl", "dt", "em",
            "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "header",
            "hr", "li", "nav", "ol", "p", "pre", "section", "span", "strong", "sub",
            "sup", "table", "tbody", "thead", "tr", "u", "ul",
        )
    },
}
ALLOWED_TAGS = frozenset(ALLOWED_ATTRS)

# Properties used by the inline rules, image options, layouts and highlighted listings.
ALLOWED_CSS_PROPERTIES = frozenset(
    {
        "background-color",
        "border",
        "color",
        "display",
        "flex-wrap",
        "font-family",
        "font-size",
        "font-style",
        "font-variant",
        "font-weight",
        "gap",
        "height",
        "justify-content",
        "max-width",
        "text-align",
        "text-decoration",
        "transform",
        "transform-origin",
        "width",
    }
)

_VOID_TAGS = frozenset({"br", "hr", "img"})
_DROP_WITH_CONTENT = frozenset({"script", "style", "iframe", "object", "embed", "template"})
_LINK_TARGETS = frozenset({"_blank", "_self", "_parent", "_top"})


def sanitize_fragment(fragment: str) -> str:
    """Return *fragment* reduced to the allowlisted markup.

    Disallowed tags are dropped but their text is kept; ``script``, ``style``
    and embedding containers are dropped together with their content.
    """
    parser = _FragmentSanitizer()
    parser.feed(fragment)
    parser.close()
    return parser.result()


class _FragmentSanitizer(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self._out: list[str] = []
        self._open: list[str] = []
        self._skipping = 0

    def result(self) -> str:
        return "".join(self._out) + "".join(f"</{tag}>" for tag in reversed(self._open))

    def handle_starttag(self, tag, attrs):
        if tag in _DROP_WITH_CONTENT:
            self._skipping += 1
            return
        if self._skipping or tag not in ALLOWED_TAGS:
            return
        self._out.append(_render_start(tag, _clean_attrs(tag, attrs)))
        if tag not in _VOID_TAGS:
            self._open.append(tag)

    def handle_startendtag(self, tag, attrs):
        if self._skipping or tag not in ALLOWED_TAGS:
            return
        self._out.append(_render_start(tag, _clean_attrs(tag, attrs)))

    def handle_endtag(self, tag):
        if tag in _DROP_WITH_CONTENT:
            self._skipping = max(0, self._skipping - 1)
            return
        if self._skipping or tag not in self._open:
            return
        # Close anything left open inside this element first.
        while self._open:
            inner = self._open.pop()
            self._out.append(f"</{inner}>")
            if inner == tag:
                break

    def handle_data(self, data):
        if not self._skipping:
            self._out.append(html.escape(data, quote=False))

    def handle_entityref(self, name):
        if self._skipping:
            return
        # A bare ampersand in text arrives here too.
        self._out.append(f"&{name};" if name in name2codepoint else "&amp;" + name)

    def handle_charref(self, name):
        if not self._skipping:
            self._out.append(f"&#{name};")

    def handle_comment(self, data):
        pass


def _clean_attrs(tag: str, attrs: list[tuple[str, str | None]]) -> list[tuple[str, str]]:
    allowed = _COMMON | ALLOWED_ATTRS[tag]
    kept: list[tuple[str, str]] = []
    for name, value in attrs:
        if name not in allowed:
            continue
        value = _CONTROL_CHAR_RE.sub("", value or "")
        if name == "style":
            value = clean_style(value)
        elif name in ("href", "src"):
            value = _clean_url(value, image=name == "src")
        elif name == "target":
            value = value if value.strip().lower() in _LINK_TARGETS else ""
        if value or name == "alt":
            kept.append((name, value))

    if tag == "a" and ("target", "_blank") in kept and not any(n == "rel" for n, _ in kept):
        kept.append(("rel", "noopener noreferrer"))
    return kept


def clean_style(style: str) -> str:
    """Keep only allowlisted, resource-free declarations of an inline style."""
    declarations: list[str] = []
    for chunk in style.split(";"):
        m = _CSS_DECLARATION_RE.match(chunk)
        if m is None:
            continue
        prop, value = m.group(1).lower(), m.group(2)
        if prop in ALLOWED_CSS_PROPERTIES and not _CSS_FORBIDDEN_RE.search(value):
            declarations.append(f"{prop}:{value}")
    return ";".join(declarations)


def _clean_url(url: str, *, image: bool) -> str:
    url = url.strip()
    m = _SCHEME_RE.match(_URL_IGNORED_RE.sub("", url))
    if m is None:
        return url
    scheme = m.group(1).lower()
    if scheme in ("http", "https"):
        return url
    if scheme == "mailto" and not image:
        return url
    if scheme == "data" and image and _DATA_IMAGE_RE.match(url):
        return url
    return ""


def _render_start(tag: str, attrs: list[tuple[str, str]]) -> str:
    rendered = "".join(f' {name}="{html.escape(value)}"' for name, value in attrs)
    return f"<{tag}{rendered}>"
