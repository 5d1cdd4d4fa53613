from __future__ import annotations

import argparse
from typing import List

from directory.cms.graph_loader import FileGraphSource
from directory.engine.facets import compute_facets
from directory.engine.filter_state import filters_from_params
from directory.engine.search_engine import SearchEngine
from directory.errors import DirectoryError
from directory.logger import logger
from directory.models.filter_model import FILTER_KEYS, SORT_OPTIONS, VIEWS, FilterState, ProjectionResult
from directory.utils.text_helpers import format_location, use_system_collation


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search the hospital directory")
    parser.add_argument(
        "--source",
        choices=["file", "cms", "mongo"],
        default="file",
        help="Where to load the hospital graph from",
    )
    parser.add_argument("--graph", help="Path to a hospital graph JSON file (with --source file)")
    parser.add_argument(
        "--test-db",
        action="store_true",
        help="Use test database (hospital_directory_test) with --source mongo",
    )
    parser.add_argument("--view", choices=list(VIEWS), default="hospitals")
    parser.add_argument("--sort", choices=list(SORT_OPTIONS), default="all")
    for key in FILTER_KEYS:
        parser.add_argument(
            f"--{key}",
            default=None,
            help=f"Filter by {key} (UUID selects by id, anything else is a text query)",
        )
    parser.add_argument("--facets", action="store_true", help="Also print available filter options")
    return parser.parse_args()


def build_filters(args: argparse.Namespace) -> FilterState:
    params = {key: getattr(args, key) for key in FILTER_KEYS if getattr(args, key)}
    params.update(view=args.view, sortBy=args.sort)
    return filters_from_params(params)


def build_source(args: argparse.Namespace):
    if args.source == "cms":
        from directory.cms.cms_client import CMSClient

        return CMSClient()
    if args.source == "mongo":
        from directory.database.mongo_client import MongoGraphSource

        return MongoGraphSource(test_db=args.test_db)
    if not args.graph:
        raise SystemExit("--graph is required with --source file")
    return FileGraphSource(args.graph)


def format_result(result: ProjectionResult) -> List[str]:
    lines: List[str] = []
    if result.view == "doctors":
        for doctor in result.doctors:
            places = "; ".join(
                f"{loc.hospital_name}{' / ' + loc.branch_name if loc.branch_name else ''}"
                f" ({', '.join(format_location(c) for c in loc.cities) or 'Location not specified'})"
                for loc in doctor.display_locations()
            )
            lines.append(f"{doctor.name} - {places}")
    elif result.view == "treatments":
        for treatment in result.treatments:
            branches = ", ".join(loc.branch_name or loc.hospital_name for loc in treatment.display_locations())
            lines.append(f"{treatment.name} [{treatment.cost}] - {branches}")
    else:
        for branch in result.branches:
            cities = ", ".join(format_location(c) for c in branch.city) or "Location not specified"
            lines.append(f"{branch.hospital_name} / {branch.name} - {cities}")
    return lines


def main() -> None:
    args = parse_args()
    use_system_collation()
    logger.info("Starting search with args: {}", args)

    filters = build_filters(args)
    source = build_source(args)
    engine = SearchEngine(source)

    try:
        result = engine.project(filters.view, filters)
    except DirectoryError as exc:
        logger.error("Could not load hospital graph: {}", exc)
        raise SystemExit(1)
    finally:
        close = getattr(source, "close", None)
        if close:
            close()

    print(f"{result.count} {result.view} found")
    for line in format_result(result):
        print(f"  {line}")

    if args.facets:
        facets = compute_facets(result.view, result.branches, result.doctors, result.treatments)
        for key in FILTER_KEYS:
            names = ", ".join(option.name for option in facets[key])
            print(f"{key}: {names}")


if __name__ == "__main__":  # pragma: no cover
    main()
