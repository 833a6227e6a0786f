"""
Unit tests for character-level command rewriting.

Tests renderers/inline.py: font sizes and families, formatting wrappers,
colours, links, headings, line breaks and escaped specials.
"""
import pytest

from tex2web.renderers.inline import (
    FONT_SIZES,
    apply_breaks,
    apply_font_families,
    apply_font_sizes,
    apply_headings,
    apply_inline_commands,
    apply_links,
    render_toc,
    unescape_specials,
)


class TestFontSizes:
    """Test scoped and unscoped size commands."""

    @pytest.mark.parametrize("cmd,size", sorted(FONT_SIZES.items()))
    def test_scoped_form(self, cmd, size):
        """``\\cmd{X}`` keeps X intact and leaves no braces behind."""
        out = apply_font_sizes(f"\\{cmd}{{Hello}}")
        assert out == f'<span style="font-size:{size}">Hello</span>'

    def test_scoped_form_not_swallowed_by_unscoped_rule(self):
        out = apply_font_sizes(r"\Large{Title} and more")
        assert out == '<span style="font-size:1.44em">Title</span> and more'

    def test_group_form(self):
        out = apply_font_sizes(r"{\small fine print}")
        assert out == '<span style="font-size:0.9em">fine print</span>'

    def test_unscoped_runs_to_end_of_line(self):
        out = apply_font_sizes("\\huge Big words\nnext line")
        assert out == '<span style="font-size:2.074em">Big words</span>\nnext line'

    def test_unscoped_stops_at_next_command(self):
        out = apply_font_sizes(r"\tiny small \textbf{x}")
        assert out.startswith('<span style="font-size:0.6em">small</span>')
        assert r"\textbf{x}" in out

    def test_case_sensitive_names(self):
        """``\\large`` and ``\\Large`` map to different sizes."""
        assert "1.2em" in apply_font_sizes(r"\large{a}")
        assert "1.728em" in apply_font_sizes(r"\LARGE{a}")


class TestFontFamilies:
    """Test scoped family commands."""

    def test_textsf(self):
        assert apply_font_families(r"\textsf{x}") == '<span style="font-family:sans-serif">x</span>'

    def test_ttfamily_group(self):
        assert apply_font_families(r"{\ttfamily x}") == '<span style="font-family:monospace">x</span>'


class TestInlineCommands:
    """Test formatting wrappers and colour commands."""

    @pytest.mark.parametrize(
        "src,expected",
        [
            (r"\textbf{X}", "<strong>X</strong>"),
            (r"\textit{X}", "<em>X</em>"),
            (r"\emph{X}", "<em>X</em>"),
            (r"\underline{X}", "<u>X</u>"),
            (r"\texttt{X}", "<code>X</code>"),
            (r"\textsc{X}", '<span style="font-variant:small-caps">X</span>'),
        ],
    )
    def test_single_argument_wrappers(self, src, expected):
        out = apply_inline_commands(src)
        assert out == expected
        assert "\\" not in out

    def test_nested_formatting(self):
        out = apply_inline_commands(r"\textbf{a \textit{b} c}")
        assert out == "<strong>a <em>b</em> c</strong>"

    def test_textcolor(self):
        assert apply_inline_commands(r"\textcolor{red}{hot}") == '<span style="color:red">hot</span>'

    def test_colorbox(self):
        out = apply_inline_commands(r"\colorbox{yellow}{note}")
        assert out == '<span style="background-color:yellow">note</span>'

    def test_fcolorbox(self):
        out = apply_inline_commands(r"\fcolorbox{black}{white}{boxed}")
        assert out == '<span style="border:1px solid black; background-color:white">boxed</span>'

    def test_degree(self):
        assert apply_inline_commands(r"90\degree") == "90°"

    def test_textbackslash_is_a_character_reference(self):
        out = apply_inline_commands(r"a\textbackslash\_b")
        assert out == r"a&#92;\_b"
        assert apply_breaks(out) == out

    def test_vspace(self):
        assert apply_inline_commands(r"\vspace{1.5cm}") == '<div style="height:1.5cm;"></div>'

    def test_vspace_unknown_unit_left(self):
        assert apply_inline_commands(r"\vspace{2ex}") == r"\vspace{2ex}"

    def test_unknown_command_passes_through(self):
        assert apply_inline_commands(r"\frobnicate{x}") == r"\frobnicate{x}"


class TestLinks:
    """Test hyperlinks."""

    def test_href(self):
        out = apply_links(r"\href{https://example.com}{site}")
        assert out == '<a href="https://example.com" target="_blank">site</a>'

    def test_href_around_colour_gets_underline(self):
        out = apply_inline_commands(r"\href{https://e.org}{\textcolor{blue}{link}}")
        assert 'style="text-decoration:underline;"' in out
        assert '<span style="color:blue">link</span></a>' in out

    def test_url(self):
        out = apply_links(r"\url{https://e.org}")
        assert out == '<a href="https://e.org" target="_blank">https://e.org</a>'


class TestHeadings:
    """Test sectioning commands."""

    def test_levels(self):
        out = apply_headings(r"\section{A}\subsection*{B}\subsubsection{C}")
        assert out.split() == ["<h1>A</h1>", "<h2>B</h2>", "<h3>C</h3>"]

    def test_heading_is_its_own_paragraph(self):
        assert apply_headings(r"\section{A}Text") == "\n\n<h1>A</h1>\n\nText"

    def test_toc_collects_headings(self):
        toc = []
        out = apply_headings(r"\section{A}\subsection{B}", toc)
        assert '<h1 id="sec-1">A</h1>' in out
        assert toc == [(1, "sec-1", "A"), (2, "sec-2", "B")]
        nav = render_toc(toc)
        assert '<a href="#sec-2">B</a>' in nav
        assert 'class="toc-level-2"' in nav

    def test_empty_toc(self):
        assert render_toc([]) == '<nav class="toc"></nav>'

    def test_toc_title_unescaped_and_label_removed(self):
        toc = []
        apply_headings(r"\section{R\&D\label{s:rd}}", toc)
        assert '<a href="#sec-1">R&D</a>' in render_toc(toc)

    def test_short_title_option_skipped(self):
        assert apply_headings(r"\section[short]{Long}").strip() == "<h1>Long</h1>"

    def test_short_title_option_with_toc(self):
        toc = []
        out = apply_headings(r"\subsection [S] {Long title}", toc)
        assert '<h2 id="sec-1">Long title</h2>' in out
        assert toc == [(2, "sec-1", "Long title")]


class TestBreaks:
    """Test breaks, rules and label removal."""

    def test_double_backslash(self):
        assert apply_breaks(r"a\\b") == "a<br>b"

    def test_par(self):
        assert apply_breaks(r"a\par b") == "a\n\n b"

    def test_newpage(self):
        assert apply_breaks(r"\newpage") == '<div class="page-break"></div>'

    def test_hrule(self):
        assert apply_breaks(r"\hrule") == "<hr />"

    def test_label_removed(self):
        assert apply_breaks(r"Intro\label{sec:intro}") == "Intro"

    def test_cite(self):
        assert apply_breaks(r"see \cite{knuth, lamport}") == "see [knuth, lamport]"


class TestUnescapeSpecials:
    """Test escaped special characters."""

    def test_all_specials(self):
        assert unescape_specials(r"\& \% \_ \# \{ \} \$") == "& % _ # { } $"

    def test_idempotent(self):
        once = unescape_specials(r"5\% of \$10 \& more")
        assert unescape_specials(once) == once
