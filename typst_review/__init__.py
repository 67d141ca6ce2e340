"""Review tool for Typst package pull requests."""

__version__ = "0.1.0"
