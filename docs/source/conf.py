# Configuration file for the Sphinx documentation builder.
#
# This file only contains a selection of the most common options. For a full
# list see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html


# -- Path setup --------------------------------------------------------------

# The package lives two levels up from this directory.

import os
import sys

sys.path.insert(0, os.path.abspath('../../.'))


# -- Project information -----------------------------------------------------

project = 'ahfmesh'
copyright = '2024, m3shware'
author = 'm3shware'

release = '1.0'


# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.intersphinx',
    'sphinx.ext.mathjax',
    'sphinx.ext.napoleon',
    'sphinx.ext.autosummary',
    'sphinx.ext.viewcode',
]

# Link to the python and numpy documentation.
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'numpy': ('https://numpy.org/doc/stable', None),
}

autosummary_generate = True
autosummary_generate_overwrite = True

templates_path = ['_templates']

exclude_patterns = []

toc_object_entries = False


# -- Options for AutoDoc output -------------------------------------------

def skip(app, what, name, obj, skip, options):
    if name == "__init__":
        return True
    # Builder internals and private consistency checks.
    if name.startswith('_') and name != '__array__':
        return True

    return None

def setup(app):
    app.connect("autodoc-skip-member", skip)


# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'

html_static_path = []

html_show_sourcelink = True
