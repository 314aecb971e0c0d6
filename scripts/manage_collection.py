# Path: scripts/manage_collection.py
# Purpose: CLI tool for inspecting and maintaining the local badge collection.
# Layer: scripts.
# Details: Subcommands list, stats, health, repair, clear, export, and seed operate through BadgeService.

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tqdm import tqdm

from config import AppSettings, configure_logging
from core.discovery.service import BadgeService
from core.models.domain import SampleBadge

SAMPLE_BADGES: List[SampleBadge] = [
    SampleBadge(
        "Red Fox",
        "A small omnivore with a bushy tail, found across the Northern Hemisphere.",
        {"badgeTier": "common", "category": "mammal"},
    ),
    SampleBadge(
        "Barn Owl",
        "A pale nocturnal hunter with a heart-shaped face and silent flight.",
        {"badgeTier": "uncommon", "category": "bird"},
    ),
    SampleBadge(
        "Monarch Butterfly",
        "An orange and black butterfly known for its long seasonal migration.",
        {"badgeTier": "common", "category": "insect"},
    ),
    SampleBadge(
        "Green Sea Turtle",
        "A large herbivorous sea turtle that grazes on seagrass.",
        {"badgeTier": "rare", "category": "reptile"},
    ),
    SampleBadge(
        "Snow Leopard",
        "An elusive big cat of high mountain ranges in Central Asia.",
        {"badgeTier": "legendary", "category": "mammal", "specialIcon": "star"},
    ),
]


def _cmd_list(service: BadgeService, args: argparse.Namespace) -> int:
    badges = service.get_filtered_badges(search=args.search, sort_by=args.sort_by, limit=args.limit)
    for badge in badges:
        print(f"{badge.discovered_at}  {badge.id}  {badge.animal_name}")
    print(f"{len(badges)} badge(s)")
    return 0


def _cmd_stats(service: BadgeService, args: argparse.Namespace) -> int:
    print(json.dumps(asdict(service.get_collection_stats()), indent=2))
    print(json.dumps(asdict(service.storage.get_storage_stats()), indent=2))
    return 0


def _cmd_health(service: BadgeService, args: argparse.Namespace) -> int:
    report = service.check_storage_health()
    print(f"healthy={report.is_healthy} message={report.message}")
    if args.check_api:
        print(f"api_connected={service.check_api_connection()}")
    return 0 if report.is_healthy else 1


def _cmd_repair(service: BadgeService, args: argparse.Namespace) -> int:
    result = service.storage.repair()
    print(result.message)
    return 0


def _cmd_clear(service: BadgeService, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear the collection without --yes", file=sys.stderr)
        return 2
    cleared = service.clear_all_badges()
    print("Collection cleared" if cleared else "Collection could not be fully cleared")
    return 0 if cleared else 1


def _cmd_export(service: BadgeService, args: argparse.Namespace) -> int:
    document = json.dumps(service.export_collection().to_dict(), indent=2, ensure_ascii=False)
    if args.output is None:
        print(document)
    else:
        args.output.write_text(document, encoding="utf-8")
        print(f"Exported collection to {args.output}")
    return 0


def _cmd_seed(service: BadgeService, args: argparse.Namespace) -> int:
    created = 0
    for sample in tqdm(SAMPLE_BADGES, desc="Seeding badges", unit="badge"):
        created += len(service.generate_sample_badges([sample]))
    print(f"Created {created} sample badge(s)")
    return 0


def main() -> int:
    """Dispatch a collection maintenance subcommand."""

    parser = argparse.ArgumentParser(description="Inspect and maintain the Animal Dex badge collection")
    parser.add_argument("--env-file", type=Path, default=None, help="Optional .env file with ANIMALDEX_* settings")
    parser.add_argument("--storage-root", type=Path, default=None, help="Override the badge storage directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List collected badges")
    list_parser.add_argument("--search", type=str, default=None, help="Filter by animal name or description")
    list_parser.add_argument("--sort-by", choices=["date", "name"], default="date", help="Sort key")
    list_parser.add_argument("--limit", type=int, default=None, help="Maximum number of badges to show")
    list_parser.set_defaults(handler=_cmd_list)

    subparsers.add_parser("stats", help="Show collection and storage statistics").set_defaults(handler=_cmd_stats)

    health_parser = subparsers.add_parser("health", help="Check storage health")
    health_parser.add_argument("--check-api", action="store_true", help="Also check the identification endpoint")
    health_parser.set_defaults(handler=_cmd_health)

    subparsers.add_parser("repair", help="Drop index entries whose image is missing").set_defaults(handler=_cmd_repair)

    clear_parser = subparsers.add_parser("clear", help="Delete every badge and the metadata index")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm the deletion")
    clear_parser.set_defaults(handler=_cmd_clear)

    export_parser = subparsers.add_parser("export", help="Export the collection as JSON")
    export_parser.add_argument("--output", type=Path, default=None, help="Write to this file instead of stdout")
    export_parser.set_defaults(handler=_cmd_export)

    subparsers.add_parser("seed", help="Create demo badges for distinct species").set_defaults(handler=_cmd_seed)

    args = parser.parse_args()

    settings = AppSettings.from_env(args.env_file)
    if args.storage_root is not None:
        settings.storage.root = args.storage_root
    configure_logging(settings.log_level)
    service = BadgeService.from_settings(settings)
    return args.handler(service, args)


if __name__ == "__main__":
    sys.exit(main())
