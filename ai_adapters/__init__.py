"""Retry-and-normalize adapters for OpenAI- and Anthropic-compatible model APIs."""

__version__ = "0.1.0"
