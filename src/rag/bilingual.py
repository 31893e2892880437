"""
Pair English passages with their Hebrew counterparts.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .interfaces import ContentStore
from .passages import BilingualPassage, TextPassage

logger = logging.getLogger(__name__)


async def pair_bilingual(
    store: ContentStore,
    references: Sequence[str],
    request_id: Optional[str] = None,
) -> List[BilingualPassage]:
    """
    Build BilingualPassages for the given references with one batched lookup.

    Output follows the order of ``references``. References without an English
    row are dropped; a missing Hebrew row yields ``content_he=None``. Store
    errors propagate so that "Hebrew unavailable" is never confused with
    "no Hebrew text exists".
    """
    prefix = f"[{request_id}]" if request_id else ""
    refs = list(dict.fromkeys(r for r in references if r))
    if not refs:
        return []

    rows = await store.find_by_references(refs, language=None)

    english: Dict[str, TextPassage] = {}
    hebrew: Dict[str, TextPassage] = {}
    for row in rows:
        bucket = english if row.language == "en" else hebrew if row.language == "he" else None
        if bucket is not None:
            bucket.setdefault(row.reference, row)

    paired: List[BilingualPassage] = []
    for ref in refs:
        en = english.get(ref)
        if en is None:
            continue
        he = hebrew.get(ref)
        paired.append(
            BilingualPassage(
                reference=ref,
                book=en.book,
                section=en.section,
                content_en=en.content,
                content_he=he.content if he is not None else None,
            )
        )

    logger.info(
        "%s Paired %s of %s references (%s with Hebrew)",
        prefix,
        len(paired),
        len(refs),
        sum(1 for p in paired if p.content_he is not None),
    )
    return paired
