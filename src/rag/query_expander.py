"""
LLM-backed query expansion for topic search.

Turns one study topic into a handful of related search phrasings. Expansion
is best effort: any failure falls back to the topic alone.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .config import RAGConfig
from .interfaces import TextGenerator

logger = logging.getLogger(__name__)

EXPANSION_PROMPT = """You are an expert in Jewish texts and Torah studies. The user is looking for texts about "{topic}".
Generate 3-5 alternative search queries that would help find relevant passages in Talmudic texts.
Be specific and include related concepts, Hebrew terms, and relevant ideas.
Consider different ways this topic might be discussed in the Talmud.
Return only the list of queries as a numbered list, nothing else.
Keep it short and concise with just relevant keywords, don't include words like "in the Talmud" etc.
Use English."""


class ExpansionParser(Protocol):
    def parse(self, raw: str) -> List[str]:
        ...


_NUMBERED_LINE_RE = re.compile(r"^\d+\.\s*(.+)$")


class NumberedListParser:
    """Keep ``<n>. <text>`` lines; anything else is dropped."""

    def parse(self, raw: str) -> List[str]:
        queries: List[str] = []
        for line in (raw or "").splitlines():
            m = _NUMBERED_LINE_RE.match(line.strip())
            if not m:
                continue
            text = m.group(1).strip()
            if text:
                queries.append(text)
        return queries


@dataclass
class QueryExpander:
    """Expand a topic into related search queries using a text generator."""

    generator: Optional[TextGenerator]
    config: RAGConfig = field(default_factory=RAGConfig)
    parser: ExpansionParser = field(default_factory=NumberedListParser)

    async def expand(self, topic: str, request_id: Optional[str] = None) -> List[str]:
        """
        Return ``[topic, *related_queries]``.

        Never raises: errors and timeouts from the generator degrade to
        ``[topic]``.
        """
        prefix = f"[{request_id}]" if request_id else ""
        if self.generator is None:
            return [topic]
        prompt = EXPANSION_PROMPT.format(topic=topic)
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(
                    self.generator.generate_single,
                    prompt,
                    max_tokens=self.config.expansion_max_tokens,
                    temperature=self.config.expansion_temperature,
                ),
                timeout=self.config.expansion_timeout_s,
            )
            extra = self.parser.parse(raw)
        except asyncio.TimeoutError:
            logger.warning("%s Query expansion timed out after %ss", prefix, self.config.expansion_timeout_s)
            return [topic]
        except Exception as e:
            logger.warning("%s Error expanding query %r: %s", prefix, topic, e)
            return [topic]

        queries = [topic, *extra]
        logger.info("%s Expanded %r to: %s", prefix, topic, ", ".join(queries))
        return queries
