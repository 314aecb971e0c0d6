# Path: scripts/discover_animal.py
# Purpose: CLI tool to run the discovery pipeline on one photo or a simulated identification.
# Layer: scripts.
# Details: Wires settings, storage, and HTTP collaborators through BadgeService.from_settings and prints the outcome.

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, configure_logging
from core.discovery.service import BadgeService
from core.models.domain import AlreadyExists, DiscoveryFailure, DiscoverySuccess


def main() -> int:
    """Discover an animal and report whether a new badge was earned."""

    parser = argparse.ArgumentParser(description="Discover an animal and earn its badge")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--photo", type=Path, help="Photo of the animal to identify")
    source.add_argument("--simulate", type=str, metavar="NAME", help="Skip identification and use this animal name")
    parser.add_argument("--description", type=str, default="", help="Description used with --simulate")
    parser.add_argument("--env-file", type=Path, default=None, help="Optional .env file with ANIMALDEX_* settings")
    args = parser.parse_args()

    settings = AppSettings.from_env(args.env_file)
    configure_logging(settings.log_level)
    service = BadgeService.from_settings(settings)

    if args.photo is not None:
        result = service.discover_animal(args.photo)
    else:
        result = service.simulate_discovery(args.simulate, args.description or f"A {args.simulate}.")

    if isinstance(result, DiscoverySuccess):
        print(f"New badge earned: {result.badge.animal_name} (id={result.badge.id})")
        print(json.dumps(result.badge.to_dict(), indent=2, ensure_ascii=False))
        return 0
    if isinstance(result, AlreadyExists):
        print(f"Already collected: {result.animal_name} (badge id={result.existing_badge.id})")
        return 0
    if isinstance(result, DiscoveryFailure):
        print(f"Discovery failed: {result.message}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
