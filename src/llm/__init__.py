"""
LLM client module for OpenAI-compatible API integration.
"""

from .client import LLMClient, create_client

__all__ = ["LLMClient", "create_client"]
