"""
Shared pytest fixtures and configuration for tex2web tests.

This module provides:
- Configuration fixtures (default, sanitizing)
- A render context wired to a real converter
- Sample documents and image payloads
- Temporary project fixtures (.tex file, .zip archive)
"""
from __future__ import annotations

import base64
import io
import zipfile
from pathlib import Path

import pytest


# ==============================================================================
# Global pytest configuration
# ==============================================================================

def pytest_configure(config):
    """Global pytest configuration - runs once at test session start."""
    import warnings
    warnings.filterwarnings('ignore', category=DeprecationWarning)
    warnings.filterwarnings('ignore', category=PendingDeprecationWarning)


# ==============================================================================
# Configuration fixtures
# ==============================================================================

@pytest.fixture
def default_config():
    """Return default configuration."""
    from tex2web.config import Config
    return Config()


@pytest.fixture
def sanitizing_config():
    """Return configuration with output sanitization enabled."""
    from tex2web.config import Config, SafetyConfig
    return Config(safety=SafetyConfig(sanitize=True))


@pytest.fixture
def converter(default_config):
    """Return a converter using default configuration."""
    from tex2web.converter import Converter
    return Converter(default_config)


@pytest.fixture
def ctx(converter):
    """Return a fresh top-level render context bound to the default converter."""
    from tex2web.renderers._context import RenderContext
    return RenderContext(config=converter.config, images={}, render=converter._render)


# ==============================================================================
# Image fixtures
# ==============================================================================

@pytest.fixture
def png_bytes():
    """Return the bytes of a 2x2 red PNG."""
    from PIL import Image
    buf = io.BytesIO()
    Image.new("RGB", (2, 2), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_data_uri(png_bytes):
    """Return *png_bytes* as a data URI."""
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


# ==============================================================================
# Document fixtures
# ==============================================================================

@pytest.fixture
def article_source():
    """Return a small but complete article exercising most features."""
    return r"""\documentclass{article}
\title{Notes on Groups}
\author{A. Author}
\date{1 May 2024}
\begin{document}
\maketitle

\begin{abstract}
We study groups.
\end{abstract}

\section{Introduction}
A \textbf{group} is a set with an operation % not a ring
and $e \cdot g = g$.

\begin{theorem}[Lagrange]
The order of a subgroup divides the order of the group.
\end{theorem}

\begin{itemize}
\item closure
\item associativity
\item identity
\end{itemize}

\[ |G| = [G:H]\,|H| \]

\end{document}
"""


# ==============================================================================
# Temporary project fixtures
# ==============================================================================

@pytest.fixture
def temp_tex(tmp_path, article_source):
    """Write the sample article to a temporary .tex file and return its path."""
    path = tmp_path / "article.tex"
    path.write_text(article_source, encoding="utf-8")
    return path


@pytest.fixture
def temp_zip(tmp_path, png_bytes):
    """Write a project archive with main.tex, one image and a stale preview."""
    path = tmp_path / "project.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            "main.tex",
            "\\begin{document}\nSee \\includegraphics[width=0.5\\linewidth]{diagram}\n\\end{document}\n",
        )
        archive.writestr("diagram.png", png_bytes)
        archive.writestr("index.html", "<html>old preview</html>")
    return path


@pytest.fixture
def temp_config(tmp_path):
    """Write a small config file and return its path."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("locale: en_US\nsafety:\n  max_depth: 2\n", encoding="utf-8")
    return config_path
