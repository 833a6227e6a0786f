"""Sphinx configuration for the tex2web documentation."""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as pkg_version

project = "tex2web"
author = "tex2web contributors"
copyright = "tex2web contributors"

try:
    release = pkg_version("tex2web")
except PackageNotFoundError:
    release = "0.0.0"
version = release

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

source_suffix = {".md": "markdown", ".rst": "restructuredtext"}
root_doc = "index"
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

# The API pages document the public surface re-exported by ``tex2web``.
autodoc_member_order = "bysource"
autodoc_typehints = "description"
autodoc_default_options = {
    "members": True,
    "undoc-members": False,
}
napoleon_google_docstring = True
napoleon_numpy_docstring = False

myst_enable_extensions = [
    "deflist",
]
myst_heading_anchors = 2

html_theme = "furo"
html_title = f"tex2web {release}"
html_short_title = "tex2web"
html_static_path: list[str] = []
