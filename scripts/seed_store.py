from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.catalog.browse import admin_overview, platform_stats
from src.repository.collections import ApplicationRepository, ScholarshipRepository, UserRepository
from src.seed.sample_data import initialize_sample_data, reset_store
from src.store.kv_store import DEFAULT_STORE_DIR, JsonFileStore, KeyValueStore

logger = logging.getLogger("seed_store")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed or reset the scholarship store with demo data.")
    parser.add_argument("--store-dir", type=Path, default=DEFAULT_STORE_DIR)
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Remove every collection and the current session before seeding.",
    )
    parser.add_argument("--summary", action="store_true", help="Print collection counts after seeding.")
    return parser.parse_args(argv)


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return ROOT_DIR / path


def build_summary(store: KeyValueStore) -> dict[str, Any]:
    scholarships = ScholarshipRepository(store).list_all()
    applications = ApplicationRepository(store).list_all()
    users = UserRepository(store).list_all()
    return {
        **platform_stats(scholarships, applications),
        **admin_overview(users, scholarships),
    }


def seed_store(store_dir: Path, *, reset: bool = False) -> dict[str, Any]:
    store = JsonFileStore(_resolve_repo_path(store_dir))
    if reset:
        logger.warning("Resetting store at %s", store.root_dir)
        reset_store(store)
    seeded = initialize_sample_data(store)
    if not seeded:
        logger.info("Store at %s already initialized; seed skipped.", store.root_dir)
    return {"store_dir": str(store.root_dir), "seeded": seeded, "summary": build_summary(store)}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        result = seed_store(args.store_dir, reset=args.reset)
    except ValueError:
        logger.exception("Store at %s holds unreadable data.", args.store_dir)
        return 1

    print(f"Store: {result['store_dir']}")
    print(f"Seeded: {'yes' if result['seeded'] else 'no (already initialized)'}")
    if args.summary:
        for key, value in result["summary"].items():
            print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
