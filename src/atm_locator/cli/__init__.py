"""Command-line interface for ATM Locator."""

import sys
import argparse


def _add_common_arguments(parser, with_results=True):
    parser.add_argument(
        "--config",
        help="Path to config.ini file (default: use built-in settings)"
    )
    parser.add_argument(
        "--provider",
        choices=["gebeta", "osrm", "none"],
        help="Routing provider for road distances (overrides config)"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for diagnostics (default: WARNING)"
    )
    parser.add_argument(
        "--log-file",
        help="Also append log records to this file"
    )
    if not with_results:
        return

    parser.add_argument(
        "--catalog",
        help="ATM catalog CSV with id,name,lat,lon columns (default: atms.csv)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Number of ATMs to return (default: 5)"
    )
    parser.add_argument(
        "--no-routing",
        action="store_true",
        help="Skip road-distance refinement, rank by straight-line distance only"
    )
    parser.add_argument(
        "--gpx",
        help="Also export results as GPX waypoints to this file"
    )


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="atm-locator",
        description="Find the nearest ATMs by location or neighbourhood name"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Nearest subcommand
    nearest_parser = subparsers.add_parser(
        "nearest",
        help="Find ATMs nearest to a coordinate"
    )
    nearest_parser.add_argument(
        "--lat",
        type=float,
        required=True,
        help="Latitude of your location"
    )
    nearest_parser.add_argument(
        "--lon",
        type=float,
        required=True,
        help="Longitude of your location"
    )
    _add_common_arguments(nearest_parser)

    # Search subcommand
    search_parser = subparsers.add_parser(
        "search",
        help="Find ATMs around a neighbourhood by name"
    )
    search_parser.add_argument(
        "query",
        nargs="+",
        help='Neighbourhood name, e.g. "Piasa", "Atote", "Arab Sefer"'
    )
    _add_common_arguments(search_parser)

    # Check-routing subcommand
    check_parser = subparsers.add_parser(
        "check-routing",
        help="Test whether the routing service is reachable"
    )
    _add_common_arguments(check_parser, with_results=False)

    # Parse arguments
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Route to appropriate subcommand
    if args.command == "nearest":
        from .locate import run_nearest
        sys.exit(run_nearest(args))
    elif args.command == "search":
        from .locate import run_search
        sys.exit(run_search(args))
    elif args.command == "check-routing":
        from .check import run_check_routing
        sys.exit(run_check_routing(args))


if __name__ == "__main__":
    main()
