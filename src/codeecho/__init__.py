"""codeecho: flatten a GitHub repository into one LLM-ready text document."""

__version__ = "0.1.0"
