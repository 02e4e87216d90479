# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path("../..").resolve()))

project = "mobiusmol"
copyright = f"{datetime.now().year}, mobiusmol developers"
author = "mobiusmol developers"
release = "0.1.0"

extensions = [
  "sphinx.ext.autodoc",
  "sphinx.ext.autosummary",
  "sphinx.ext.napoleon",
  "sphinx.ext.viewcode",
  "sphinx.ext.intersphinx",
  "sphinx.ext.mathjax",
]

autodoc_default_options = {
  "members": True,
  "member-order": "bysource",
  "undoc-members": True,
}
autodoc_typehints = "description"
autosummary_generate = True

napoleon_google_docstring = True
napoleon_numpy_docstring = False

intersphinx_mapping = {
  "python": ("https://docs.python.org/3", None),
  "numpy": ("https://numpy.org/doc/stable/", None),
  "gemmi": ("https://gemmi.readthedocs.io/en/latest/", None),
}

templates_path = ["_templates"]
exclude_patterns = []

html_theme = "alabaster"
html_title = "mobiusmol Documentation"
