"""Insert a few example posts into the `posts` table.

Usage: python -m blog_api.seed [--token ACCESS_TOKEN]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import load_settings
from .errors import DataStoreError
from .resolvers import POSTS_TABLE
from .store import StoreClient, SupabaseStore

logger = logging.getLogger(__name__)

SEED_POSTS = [
    {"title": "First Post", "content": "This is the first post", "author": "Author 1"},
    {"title": "Second Post", "content": "This is the second post", "author": "Author 2"},
    {"title": "Third Post", "content": "This is the third post", "author": "Author 3"},
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blog-seed", description="Seed example blog posts")
    parser.add_argument("--token", help="User access token; row-level security usually requires one for inserts")
    return parser


def seed(client: StoreClient) -> int:
    result = client.table(POSTS_TABLE).insert(SEED_POSTS)
    if result.error is not None:
        logger.error(f"Error inserting data: {result.error.message}")
        return 1
    logger.info(f"Data inserted successfully: {len(result.data or [])} rows")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    settings = load_settings()
    store = SupabaseStore(settings.supabase_url, settings.supabase_anon_key, timeout=settings.http_timeout)
    try:
        return seed(store(args.token))
    except DataStoreError as e:
        logger.error(f"Cannot reach the data store: {e}")
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
