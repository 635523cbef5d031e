"""Fetch mock app reviews and summarize them with a hosted LLM."""

__version__ = "0.1.0"
