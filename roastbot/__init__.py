"""Roastbot — GitHub App that roasts pull requests with an LLM."""

__version__ = "0.1.0"
