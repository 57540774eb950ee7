# skinsearch/cli.py
"""
Command-line runner for the skin catalog search.
Runs searches against a snapshot, or serves them over HTTP.

- ``search``: print one ranked page as JSON (same shape as ``GET /search``)
- ``explain``: print the per-signal score breakdown for the matched items
- ``snapshot``: normalise a raw JSON export into a Parquet snapshot
- ``serve``: start the HTTP API over the given snapshot
"""

from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from skinsearch import api
from skinsearch.catalog_build import load_catalog_snapshot, write_catalog_snapshot
from skinsearch.config import CATALOG_SNAPSHOT_PATH, DEFAULT_PAGE_SIZE
from skinsearch.errors import CatalogError
from skinsearch.normalize import normalize_query
from skinsearch.ranking import SearchPage
from skinsearch.retrieval import DataFrameCatalogStore
from skinsearch.scoring import explain_score
from skinsearch.search import SkinSearchEngine


def _page_to_json(result: SearchPage) -> dict:
    return {
        "items": [item.model_dump() for item in result.items],
        "hasMore": result.has_more,
        "total": result.total,
    }


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="skinsearch")
    ap.add_argument("--catalog", type=str, default=str(CATALOG_SNAPSHOT_PATH), help="catalog snapshot path")
    sub = ap.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("search", help="run one search and print the page as JSON")
    sp.add_argument("query", nargs="*", help="free-text query")
    sp.add_argument("--page", type=int, default=1)
    sp.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE)

    ep = sub.add_parser("explain", help="show score breakdown for a query's matches")
    ep.add_argument("query", nargs="*", help="free-text query")
    ep.add_argument("--limit", type=int, default=10)

    np_ = sub.add_parser("snapshot", help="write a normalised Parquet snapshot")
    np_.add_argument("--out", dest="out", type=str, required=True, help="output .parquet path")

    vp = sub.add_parser("serve", help="serve the HTTP API")
    vp.add_argument("--host", type=str, default="0.0.0.0")
    vp.add_argument("--port", type=int, default=8000)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        df = load_catalog_snapshot(Path(args.catalog))
    except CatalogError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    if args.command == "snapshot":
        out = write_catalog_snapshot(df, Path(args.out))
        print(f"Wrote {len(df)} rows to {out}")
        return 0

    engine = SkinSearchEngine(DataFrameCatalogStore(df))

    if args.command == "serve":
        api.install_engine(engine)
        uvicorn.run(api.app, host=args.host, port=args.port)
        return 0

    query = " ".join(args.query)

    try:
        if args.command == "search":
            result = engine.search(query, page=args.page, limit=args.limit)
            print(json.dumps(_page_to_json(result), indent=2, ensure_ascii=False))
            return 0

        result = engine.search(query, page=1, limit=args.limit)
    except CatalogError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    normalized = normalize_query(query)
    for i, item in enumerate(result.items, 1):
        signals = explain_score(item.name, normalized)
        hits = ", ".join(f"{k}={v}" for k, v in signals.items() if v)
        print(f"{i:>3}. {sum(signals.values()):>5}  {item.name}  [{hits}]")
    if result.has_more:
        print(f"... {result.total - len(result.items)} more")
    return 0


if __name__ == "__main__":
    sys.exit(main())
