"""
Extract document metadata (title / author / date) and the document body.

``\\title``, ``\\author`` and ``\\date`` are read from their first occurrence
and removed from the source; ``\\date{\\today}`` becomes the current date
formatted for the configured locale.  The body is the text between
``\\begin{document}`` and the nearest ``\\end{document}``, or the whole input
when there is no document environment.
"""
from __future__ import annotations

import datetime as dt
import re
import warnings
from dataclasses import dataclass

from babel.core import UnknownLocaleError
from babel.dates import format_date

from ._tex_utils import first_command_arg

# A URL argument is matched whole so its percent-encoding is kept.
_COMMENT_RE = re.compile(r"(\\(?:href|url)\s*\{[^{}\n]*\})|(?<!\\)%[^\n]*")
_BEGIN_DOCUMENT = "\\begin{document}"
_END_DOCUMENT_RE = re.compile(r"\\end\{document\}")
_TODAY_RE = re.compile(r"\A\s*\\today\s*\Z")


@dataclass
class Preamble:
    title: str = ""
    author: str = ""
    date: str = ""


def strip_comments(text: str) -> str:
    """Drop unescaped LaTeX comments (``%`` to end of line).

    A ``%`` inside the URL argument of ``\\href`` or ``\\url`` is not a comment.
    """
    return _COMMENT_RE.sub(lambda m: m.group(1) or "", text)


def extract_preamble(
    text: str,
    *,
    locale: str = "ru_RU",
    date_format: str = "long",
    today: dt.date | None = None,
) -> tuple[Preamble, str]:
    """Return the metadata found in *text* and *text* with those commands removed."""
    fields: dict[str, str] = {}
    for name in ("title", "author", "date"):
        found = first_command_arg(text, name)
        if found is None:
            fields[name] = ""
            continue
        value, start, end = found
        fields[name] = value.strip()
        text = text[:start] + text[end:]

    if _TODAY_RE.match(fields["date"]):
        fields["date"] = format_today(locale, date_format, today)

    return Preamble(**fields), text


def format_today(locale: str, date_format: str = "long", today: dt.date | None = None) -> str:
    """Format *today* (default: the current date) for *locale*."""
    day = today or dt.date.today()
    try:
        return format_date(day, format=date_format, locale=locale)
    except (UnknownLocaleError, ValueError) as exc:
        warnings.warn(
            f"Cannot format date for locale {locale!r}; using ISO format: {exc}",
            RuntimeWarning,
            stacklevel=2,
        )
        return day.isoformat()


def extract_body(text: str) -> str:
    """Return the content of the ``document`` environment, or *text* itself."""
    i = text.find(_BEGIN_DOCUMENT)
    if i == -1:
        return text
    after = text[i + len(_BEGIN_DOCUMENT):]
    m = _END_DOCUMENT_RE.search(after)
    return after[: m.start()] if m else after


def render_title_block(preamble: Preamble) -> str:
    """HTML emitted for ``\\maketitle``."""
    return (
        '\n<header class="title">\n'
        f"  <h1>{preamble.title}</h1>\n"
        f'  <p class="author">{preamble.author}</p>\n'
        f'  <p class="date">{preamble.date}</p>\n'
        "</header>\n"
    )
