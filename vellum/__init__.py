"""
Vellum - resume document rendering engine

Converts structured resume records into live HTML previews and LaTeX
sources for PDF compilation.

Architecture:
- Templating Context: Resume data model, section renderers, visual template strategies
- Rendering Context: Document assembly, LaTeX preview conversion, PDF compilation
"""

__version__ = "0.1.0"
