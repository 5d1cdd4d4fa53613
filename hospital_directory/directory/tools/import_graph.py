from __future__ import annotations

# Allow running the script directly (python directory/tools/import_graph.py ...)
# by ensuring the package root is on sys.path. This makes `import directory...`
# work even when executing the file path instead of using `-m`.
import sys
import pathlib

root = pathlib.Path(__file__).resolve().parents[2]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

import argparse
import json
from typing import Any, Dict, List

from directory.cms.graph_loader import parse_hospitals, unwrap_items
from directory.database.mongo_client import MongoGraphSource


def load_records(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return unwrap_items(json.load(f))


def import_graph(mongo: MongoGraphSource, in_path: str) -> int:
    records = load_records(in_path)
    # Store only records that parse, so the snapshot never holds invalid hospitals
    valid_ids = {h.id for h in parse_hospitals(records)}
    kept = [r for r in records if str(r.get("_id") or r.get("id")) in valid_ids]
    stored = mongo.replace_graph(kept)
    print(f"Stored: {stored}, Skipped: {len(records) - len(kept)}")
    return stored


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a hospital graph JSON file into MongoDB")
    parser.add_argument("--in", dest="infile", required=True)
    parser.add_argument("--test-db", action="store_true", help="Use test database (hospital_directory_test)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    mongo = MongoGraphSource(test_db=args.test_db)
    try:
        import_graph(mongo, args.infile)
    finally:
        mongo.close()


if __name__ == "__main__":
    main()
