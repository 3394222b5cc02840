#!/usr/bin/env python3
"""
Seed an idea store with five demo ideas so the map and similarity alerts
have something to work with.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sparkmap.core import config
from sparkmap.core.dao import count_ideas
from sparkmap.core.db import init_db
from sparkmap.core.errors import EmbeddingServiceError, StoreError
from sparkmap.core.posting import seed_ideas


def main():
    """Insert the demo ideas unless the store already holds ideas."""
    parser = argparse.ArgumentParser(description="Seed sparkmap with demo ideas")
    parser.add_argument("--force", action="store_true",
                        help="Seed even if the store is not empty")
    args = parser.parse_args()

    init_db()

    existing = count_ideas()
    if existing and not args.force:
        print(f"Store already holds {existing} ideas. Use --force to seed anyway.")
        return

    print(f"Seeding demo ideas with the '{config.EMBED_PROVIDER}' embedding provider...")
    try:
        records = seed_ideas()
    except (EmbeddingServiceError, StoreError) as e:
        print(f"ERROR: Seeding failed: {e}")
        sys.exit(1)

    for record in records:
        print(f"✓ {record.id}: {record.author}")
    print(f"Seeded {len(records)} ideas into {config.DB_PATH}")


if __name__ == "__main__":
    main()
