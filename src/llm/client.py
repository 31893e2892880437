"""
LLM client for OpenAI-compatible APIs (OpenAI, Z.AI/GLM, DeepSeek, etc.).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from openai import OpenAI

# Load .env file if it exists
project_root = Path(__file__).resolve().parents[2]
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)


# Any OpenAI-compatible endpoint: set LLM_BASE_URL + LLM_API_KEY.
LLM_BASE_URL = os.getenv("LLM_BASE_URL")
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o")
LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "30"))

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_EMBEDDING_MODEL = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")

logger = logging.getLogger(__name__)


def _resolve_client_params(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> tuple[str, str, str]:
    """Resolve model, api_key, base_url from args or env (LLM_* when set, else OpenAI)."""
    if (LLM_BASE_URL and LLM_API_KEY) or (base_url and api_key):
        base = base_url or LLM_BASE_URL or ""
        key = api_key or LLM_API_KEY or ""
        if base and key:
            return model_name or LLM_MODEL, key, base
    key = api_key or os.getenv("OPENAI_API_KEY")
    base = base_url or os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)
    return model_name or LLM_MODEL, key or "", base


class LLMClient:
    """OpenAI-compatible chat and embedding client."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = LLM_TIMEOUT_S,
    ):
        self.model_name, key, self.base_url = _resolve_client_params(
            model_name=model_name, api_key=api_key, base_url=base_url
        )
        if not key:
            raise ValueError("API key required. Set LLM_API_KEY (with LLM_BASE_URL) or OPENAI_API_KEY.")
        self.client = OpenAI(base_url=self.base_url, api_key=key, timeout=timeout, max_retries=0)

    def generate_single(
        self,
        prompt: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        top_p: float = 0.9,
        stop: Optional[List[str]] = None,
    ) -> str:
        """
        Generate text for a single prompt.

        One attempt only; API errors propagate to the caller.
        """
        create_kw: dict = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "top_p": top_p,
            # Z.AI supports only one stop word
            "stop": stop[:1] if stop else None,
        }
        # Z.AI: disable thinking so the model returns directly in content
        if "z.ai" in self.base_url.lower():
            create_kw["extra_body"] = {"thinking": {"type": "disabled"}}

        response = self.client.chat.completions.create(**create_kw)
        if not response.choices:
            logger.warning("Empty response from API for model %s", self.model_name)
            return ""
        msg = response.choices[0].message
        text = msg.content or ""
        if not text.strip() and getattr(msg, "reasoning_content", None):
            text = msg.reasoning_content or ""
        if not text.strip():
            logger.warning(
                "Empty content in response (finish_reason=%s)",
                getattr(response.choices[0], "finish_reason", "?"),
            )
        return text.strip()

    def embed(self, texts: Sequence[str], model: str = DEFAULT_EMBEDDING_MODEL) -> List[List[float]]:
        """Embed a batch of texts; order of the result matches the input."""
        response = self.client.embeddings.create(model=model, input=list(texts))
        ordered = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in ordered]


def create_client(
    model_name: Optional[str] = None,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMClient:
    """Create an OpenAI-compatible client from arguments or environment."""
    return LLMClient(model_name=model_name, api_key=api_key, base_url=base_url)
