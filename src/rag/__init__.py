"""
RAG (Retrieval-Augmented Generation) module.

Provides topic retrieval over Talmud passages for quiz generation:
- LLM query expansion
- Vector similarity search with metadata filters
- Keyword fallback search
- Bilingual (English/Hebrew) pairing
- Lexical relevance ranking
"""

from .bilingual import pair_bilingual
from .config import RAGConfig
from .errors import ContentStoreError, RetrievalError, VectorSearchError
from .filters import And, Equals, Filter, InSet, build_filter, matches, to_payload
from .interfaces import VectorMatch
from .keyword import KeywordRetriever
from .local_store import LocalTextStore
from .passages import BilingualPassage, ScoredCandidate, TextPassage, load_passages
from .query_expander import NumberedListParser, QueryExpander
from .ranker import dedup_by_reference, rank, score
from .topic_search import TopicSearchPipeline, TopicSearchResult
from .vector import VectorRetriever

__all__ = [
    "And",
    "BilingualPassage",
    "ContentStoreError",
    "Equals",
    "Filter",
    "InSet",
    "KeywordRetriever",
    "LocalTextStore",
    "NumberedListParser",
    "QueryExpander",
    "RAGConfig",
    "RetrievalError",
    "ScoredCandidate",
    "TextPassage",
    "TopicSearchPipeline",
    "TopicSearchResult",
    "VectorMatch",
    "VectorRetriever",
    "VectorSearchError",
    "build_filter",
    "dedup_by_reference",
    "load_passages",
    "matches",
    "pair_bilingual",
    "rank",
    "score",
    "to_payload",
]
