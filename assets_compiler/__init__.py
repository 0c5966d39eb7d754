"""Assets Compiler — front-end asset builds for multi-package projects."""

__version__ = "0.1.0"
