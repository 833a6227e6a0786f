"""
Rewrite ``\\includegraphics`` into ``<img>`` tags.

Sources are looked up in the caller's image table: exact name first, then the
first key with the same name once file extensions are ignored.  Names that
are not in the table are emitted unchanged as the ``src`` value.
"""
from __future__ import annotations

import html
import re
from typing import Mapping

# The path may run onto the next line before its closing brace.
_INCLUDEGRAPHICS_RE = re.compile(
    r"\\includegraphics(?:\s*\[([^\]]*)\])?\s*\{([\s\S]*?)\n?\s*\}"
)
_EXTENSION_RE = re.compile(r"\.[a-zA-Z0-9]+$")
_NUMBER = r"(\d+(?:\.\d*)?|\.\d+)"
_RELATIVE_WIDTH_RE = re.compile(
    r"width\s*=\s*" + _NUMBER + r"\s*\\(?:linewidth|textwidth|columnwidth)"
)
_ABSOLUTE_WIDTH_RE = re.compile(
    r"(?<![a-z])width\s*=\s*" + _NUMBER + r"\s*(pt|cm|mm|in|px|em)\b"
)
_SCALE_RE = re.compile(r"scale\s*=\s*" + _NUMBER)


def resolve_image(name: str, images: Mapping[str, str] | None) -> str:
    """Return the table entry for *name*, or *name* itself when unresolved."""
    if not images:
        return name
    if name in images:
        return images[name]
    stem = _EXTENSION_RE.sub("", name)
    for key, value in images.items():
        if _EXTENSION_RE.sub("", key) == stem:
            return value
    return name


def image_style(options: str | None) -> str:
    """Build an inline CSS string from an ``\\includegraphics`` option list.

    Options that do not parse are ignored.
    """
    if not options:
        return ""
    parts: list[str] = []
    m = _RELATIVE_WIDTH_RE.search(options)
    if m:
        parts.append(f"width:{_fmt(float(m.group(1)) * 100)}%")
    else:
        m = _ABSOLUTE_WIDTH_RE.search(options)
        if m:
            parts.append(f"width:{_fmt(float(m.group(1)))}{m.group(2)}")
    m = _SCALE_RE.search(options)
    if m:
        parts.append(
            f"transform:scale({_fmt(float(m.group(1)))});"
            "transform-origin:left top;display:inline-block;"
        )
    return ";".join(parts)


def img_tag(src: str, style: str = "") -> str:
    style_attr = f' style="{html.escape(style)}"' if style else ""
    return f'<img src="{html.escape(src)}" alt=""{style_attr}>'


def render_includegraphics(
    text: str,
    images: Mapping[str, str] | None,
    *,
    forced_style: str | None = None,
) -> str:
    """Replace every ``\\includegraphics`` in *text* with an ``<img>`` tag.

    *forced_style*, when given, replaces whatever the options would produce.
    """
    def _sub(m: re.Match) -> str:
        path = re.sub(r"\s+", "", m.group(2))
        style = forced_style if forced_style is not None else image_style(m.group(1))
        return img_tag(resolve_image(path, images), style)

    return _INCLUDEGRAPHICS_RE.sub(_sub, text)


def collect_images(text: str, images: Mapping[str, str] | None) -> list[str]:
    """Return an ``<img>`` tag for each ``\\includegraphics`` in *text*, in order."""
    return [
        img_tag(resolve_image(re.sub(r"\s+", "", m.group(2)), images), image_style(m.group(1)))
        for m in _INCLUDEGRAPHICS_RE.finditer(text)
    ]


def referenced_images(text: str) -> list[str]:
    """Declared paths of every ``\\includegraphics`` in *text*, whitespace removed."""
    return [re.sub(r"\s+", "", m.group(2)) for m in _INCLUDEGRAPHICS_RE.finditer(text)]


def _fmt(value: float) -> str:
    """Format a number without trailing zeros (``50.0`` → ``50``)."""
    return f"{round(value, 4):g}"
