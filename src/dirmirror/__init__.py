"""Record a directory tree as indented text and replay it onto another directory."""

__version__ = "0.1.0"
