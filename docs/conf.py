"""Sphinx configuration for ta-client documentation."""

import os
import sys

# -- Path setup ---------------------------------------------------------------
# Add the project root to sys.path so autodoc can find src/
sys.path.insert(0, os.path.abspath(".."))

# -- Project information ------------------------------------------------------
project = "ta-client"
copyright = "2026, TA Client API contributors"
author = "TA Client API contributors"
release = "0.1.0"

# -- General configuration ----------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",  # Google/NumPy-style docstrings
    "sphinx.ext.viewcode",  # [source] links in API docs
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",  # inline type hints in signatures
    "myst_parser",  # parse .md files
]

myst_enable_extensions = [
    "colon_fence",  # ::: directive syntax
    "deflist",  # definition lists
]
myst_heading_anchors = 3

# Autodoc settings
autodoc_default_options = {
    "members": True,
    "undoc-members": True,
    "show-inheritance": True,
    "member-order": "bysource",
}
autodoc_typehints = "description"
autodoc_mock_imports = ["yaml"]

napoleon_google_docstring = True
napoleon_numpy_docstring = True
napoleon_include_init_with_doc = True

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
}

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

master_doc = "index"

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

# -- Options for HTML output ---------------------------------------------------
html_theme = "furo"
html_title = "ta-client"
html_static_path = []

html_theme_options = {
    "sidebar_hide_name": False,
    "navigation_with_keys": True,
}
