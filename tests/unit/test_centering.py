"""
Unit tests for the two-phase ``\\centering`` handling.

Tests renderers/centering.py: scope marking, block wrapping and marker
resolution.
"""
import pytest

from tex2web.renderers.centering import (
    CENTER_END,
    CENTER_START,
    mark_centering,
    resolve_markers,
    wrap_centered_blocks,
)


class TestMarkCentering:
    """Test phase 1."""

    def test_scope_runs_to_end(self):
        out = mark_centering("\\centering\nHello world")
        assert out == f"{CENTER_START}Hello world{CENTER_END}"

    def test_scope_stops_at_section(self):
        out = mark_centering("\\centering\nA\n\\section{Next}\nB")
        assert out == f"{CENTER_START}A{CENTER_END}\n\n\\section{{Next}}\nB"

    def test_inside_figure_left_alone(self):
        text = "\\begin{figure}\n\\centering\n\\includegraphics{x}\n\\end{figure}\ntail"
        assert mark_centering(text) == text

    @pytest.mark.parametrize("env", ["itemize", "enumerate", "description"])
    def test_inside_list_left_alone(self, env):
        text = f"\\begin{{{env}}}\\item \\centering x\\end{{{env}}}\nafter"
        assert mark_centering(text) == text

    def test_after_figure_is_marked(self):
        text = "\\begin{table}\\centering x\\end{table}\n\\centering\nafter"
        out = mark_centering(text)
        assert out.startswith("\\begin{table}\\centering x\\end{table}")
        assert out.endswith(f"{CENTER_START}after{CENTER_END}")

    def test_no_directive(self):
        assert mark_centering("plain") == "plain"


class TestWrapCenteredBlocks:
    """Test phase 2."""

    def test_image_wrapped(self):
        out = wrap_centered_blocks('\\centering<img src="a" alt="">')
        assert out == '<div class="center"><img src="a" alt=""></div>'

    def test_every_occurrence_wrapped(self):
        text = "\\centering<table></table> mid \\centering<h2>T</h2>"
        out = wrap_centered_blocks(text)
        assert out == '<div class="center"><table></table></div> mid <div class="center"><h2>T</h2></div>'

    def test_stray_directive_removed(self):
        assert wrap_centered_blocks("text \\centering more") == "text more"


class TestResolveMarkers:
    """Test marker resolution."""

    def test_span_becomes_container_with_paragraphs(self):
        out = resolve_markers(f"{CENTER_START}One\n\nTwo{CENTER_END}")
        assert out.strip() == '<div class="center"><p>One</p><p>Two</p></div>'

    def test_stray_markers_stripped(self):
        assert resolve_markers(f"a{CENTER_START}b") == "ab"
