"""
Wrap a converted fragment in a standalone preview page.

The page loads MathJax, configured for the delimiters the converter emits,
and carries the stylesheet for every class the converter produces.
"""
from __future__ import annotations

import html
import json

from .config import MathConfig, PageConfig

# Split into head/tail so we never have to escape CSS/JS braces
_HEAD = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
  <style>
    body {{
      margin: 0;
      padding: 0;
      background: {background};
      font-family: {font_family};
      font-size: {font_size}px;
      line-height: 1.7;
      color: {text_color};
    }}
"""

_STYLES = """\
    #preview {
      width: 75vw;
      max-width: 75vw;
      min-width: 320px;
      margin: 0 auto;
      padding: 48px 56px;
      box-sizing: border-box;
      border-radius: 24px;
      box-shadow: 0 4px 32px #0002;
      overflow: auto;
    }
    #preview * { text-align: left; }
    #preview .center, #preview .center * { text-align: center !important; }
    #preview .center > *, #preview .center img { display: block; margin-left: auto; margin-right: auto; }
    #preview img { max-width: 100%; height: auto; }
    #preview table { width: 100%; border-collapse: collapse; margin: 1em 0; background: #fff; }
    #preview th, #preview td { border: 1.5px solid #999; padding: 0.5em; text-align: center; }
    #preview caption { caption-side: top; font-weight: bold; margin-bottom: .5em; font-size: 1.1em; }
    #preview .table-scroll { overflow-x: auto; }
    #preview h1, #preview h2, #preview h3 { margin: 1em 0 .5em; }
    #preview ul, #preview dl { margin: .5em 0 .5em 1.5em; }
    #preview p { margin: .5em 0; }
    #preview pre { background: #f5f5f5; padding: 1em; overflow: auto; }
    #preview blockquote { border-left: 4px solid #ccc; padding-left: 1em; margin: 1em 0; }
    #preview .proof { border: 1px solid #ccc; padding: 1em; margin: 1em 0; }
    #preview .abstract { font-style: italic; margin: 1em 0; }
    #preview .bibliography ul { list-style-type: none; padding-left: 0; }
    #preview .bibliography li { margin-bottom: .5em; }
    #preview header.title { margin: 1em 0; }
    #preview header.title h1 { margin: 0; font-size: 1.8em; }
    #preview header.title .author, #preview header.title .date { margin: 0.2em 0; color: #555; }
    #preview nav.toc ul { list-style: none; padding: 0; }
    #preview nav.toc li { margin: 0.2em 0; }
    #preview .toc-level-2 { margin-left: 1em; }
    #preview .toc-level-3 { margin-left: 2em; }
    #preview .page-break { page-break-after: always; height: 0; }
    #preview .definition { border: 1px solid #8c8; background: #f8fff8; padding: 1em; margin: 1em 0; }
    #preview .theorem, #preview .lemma, #preview .proposition, #preview .corollary {
      border: 1px solid #88c; background: #f8f8ff; padding: 1em; margin: 1em 0;
    }
    #preview .remark, #preview .example { border-left: 4px solid #88c; padding-left: 1em; margin: 1em 0; }
    #preview figure.listing { margin: 1em 0; }
    #preview figure.listing figcaption { font-style: italic; margin-bottom: .5em; }
    #preview .textimage, #preview .sidebyside { display: flex; gap: 2em; align-items: flex-start; margin: 2em 0; }
    #preview .textimage-left { flex: 1; min-width: 0; }
    #preview .textimage-right { flex: 0 0 auto; max-width: 400px; margin-left: 1em; }
    #preview .textimage-right img { height: auto; border-radius: 8px; display: block; }
    #preview .sidebyside-left { flex: 0 0 auto; max-width: 40%; display: flex; flex-direction: column; }
    #preview .sidebyside-left img { max-width: 100%; height: auto; border-radius: 8px; }
    #preview .sidebyside-right { flex: 1 1 0; min-width: 0; display: flex; flex-direction: column; justify-content: center; }
  </style>
"""

_TAIL = """\
</div>
</body>
</html>
"""


def mathjax_config(math: MathConfig) -> str:
    """Inline script configuring MathJax for the delimiters in *math*."""
    cfg = {
        "tex": {
            "inlineMath": [[math.inline_open, math.inline_close]],
            "displayMath": [[math.display_open, math.display_close]],
        },
        "options": {"processHtmlClass": "math"},
    }
    return f"<script>window.MathJax = {json.dumps(cfg)};</script>"


def build_page(fragment: str, page: PageConfig | None = None, math: MathConfig | None = None) -> str:
    """Return a complete HTML document displaying *fragment*."""
    page = page or PageConfig()
    math = math or MathConfig()
    head = _HEAD.format(
        title=html.escape(page.title),
        background=page.background,
        font_family=page.font_family,
        font_size=int(page.font_size),
        text_color=page.text_color,
    )
    scripts = (
        f"  {mathjax_config(math)}\n"
        f'  <script id="MathJax-script" async src="{html.escape(page.mathjax_url)}"></script>\n'
        "</head>\n<body>\n<div id=\"preview\">\n"
    )
    return head + _STYLES + scripts + fragment + "\n" + _TAIL
