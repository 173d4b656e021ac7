"""SpecGen — turns a one-line idea into a developer-ready spec through an LLM interview."""

__version__ = "0.2.0"
