"""
Seed script for the Lokisa issue repository.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Use a custom seed file: python scripts/seed_db.py --seed ./my_seed.json --apply

Behavior:
  - Loads a JSON list of issues (type, latitude, longitude, address, notes?)
    or falls back to a few built-in Gauteng samples.
  - Creates each issue through the configured repository
    (Firestore, or memory when USE_MOCK_DB=true) so ids, report ids and
    validation match what the API does.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and `USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import os
from typing import List

from lokisa.core.errors import ValidationError
from lokisa.services.municipality_resolver import get_municipality_resolver
from lokisa.services.repository import get_issue_repository
from lokisa.models.geo import Coordinate

SAMPLE_ISSUES = [
    {"type": "streetlight", "latitude": -25.7479, "longitude": 28.2293, "address": "Church Square, Pretoria Central"},
    {"type": "pothole", "latitude": -26.1076, "longitude": 28.0567, "address": "Rivonia Road, Sandton"},
    {"type": "burst-pipe", "latitude": -26.1367, "longitude": 28.2411, "address": "OR Tambo Airport Road, Kempton Park"},
    {"type": "illegal-dumping", "latitude": -25.8601, "longitude": 28.1878, "address": "Lenchen Avenue, Centurion"},
]


def load_seed(path: str) -> List[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_repository(seed: List[dict], apply: bool = False):
    resolver = get_municipality_resolver()
    repository = get_issue_repository() if apply else None

    for item in seed:
        point = Coordinate(latitude=item["latitude"], longitude=item["longitude"])
        info = resolver.info(point)
        print(f"Preparing: {item['type']} at {item['address']} ({info.code})")
        if not apply:
            continue
        try:
            issue = repository.create(item)
            print(f"Wrote: issue {issue.id} report_id={issue.report_id}")
        except ValidationError as e:
            print(f"Failed to write {item.get('address')}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--seed", default=None, help="Path to a JSON list of issues")
    args = parser.parse_args()

    if args.seed:
        if not os.path.exists(args.seed):
            print(f"Seed file not found: {args.seed}")
            return
        seed = load_seed(args.seed)
    else:
        seed = SAMPLE_ISSUES

    write_to_repository(seed, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
