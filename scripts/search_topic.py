"""
Run a topic search from the command line.

Usage:
  python -m scripts.search_topic "Shabbat candles" --count 5
  python -m scripts.search_topic "damages" --local data/torah_texts.jsonl --all
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from src.api.deps import build_pipeline


async def run(args: argparse.Namespace) -> int:
    backend = "local" if args.local else "postgres"
    pipeline, backend = build_pipeline(backend=backend, texts_path=Path(args.local) if args.local else None)
    result = await pipeline.retrieve_by_topic(
        args.topic,
        args.user_id,
        requested_count=args.count,
        restrict_to_learned=not args.all,
        request_id="cli",
    )
    print(f"backend={backend} strategy={result.strategy}")
    print(f"queries: {', '.join(result.queries)}")
    if result.vector_error:
        print(f"vector search error: {result.vector_error}")
    if result.empty:
        print("No matching passages.")
        return 1
    for i, sc in enumerate(result.passages, start=1):
        he = "en+he" if sc.passage.content_he else "en"
        snippet = sc.passage.content_en[:120].replace("\n", " ")
        print(f"{i:2d}. {sc.reference:<24} score={sc.relevance_score:<3d} [{he}] {snippet}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Topic search over Talmud passages")
    parser.add_argument("topic", help="Free-text study topic")
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--user-id", default=None, help="User whose learned references restrict the search")
    parser.add_argument("--all", action="store_true", help="Search all passages, not only learned ones")
    parser.add_argument("--local", default=None, help="Path to a JSONL passage export (skips Postgres)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if not args.all and not args.user_id:
        parser.error("--user-id is required unless --all is given")

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
