"""Pluggable HTML to Markdown conversion engine: node tree, whitespace collapsing, URL handling and a prioritised handler pipeline."""

__version__ = "0.1.0"