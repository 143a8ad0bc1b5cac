"""Nearest and search subcommand implementations."""

from pathlib import Path

from ..core import Config, load_catalog
from ..core.log import setup_logging
from ..exporters import GPXExporter
from ..locator import ATMLocator


def load_config(args):
    """
    Build configuration from the config file and command-line overrides.

    Returns:
        Config, or None if the config could not be loaded
    """
    setup_logging(args.log_level, args.log_file)

    if args.config:
        print(f"Config: {args.config}")
        if not Path(args.config).exists():
            print(f"\n❌ Error: Config file not found: {args.config}")
            return None
    try:
        config = Config(args.config)
    except Exception as e:
        print(f"\n❌ Error loading config: {e}")
        return None

    if args.provider:
        config.routing["provider"] = args.provider
    if getattr(args, "no_routing", False):
        config.routing["provider"] = "none"
    return config


def build_locator(args):
    """
    Load the catalog and build an ATMLocator.

    Returns:
        ATMLocator, or None on error
    """
    config = load_config(args)
    if config is None:
        return None

    catalog_path = args.catalog or config.get_catalog_path()
    try:
        catalog = load_catalog(catalog_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ Error: {e}")
        return None
    print(f"✓ Loaded {len(catalog)} ATMs from {catalog_path}")

    try:
        locator = ATMLocator.from_config(config, catalog)
    except ValueError as e:
        print(f"\n❌ Error: {e}")
        return None

    if locator.ranker.routing_service is None:
        print("Road distances: disabled")
    else:
        print(f"Road distances: {locator.ranker.routing_service.name}")
    return locator


def print_results(results, show_distance=True):
    """Print ranked ATMs."""
    for rank, atm in enumerate(results, start=1):
        print(f"\n#{rank}. {atm.name}")
        if show_distance and atm.distance is not None:
            line = f"   {atm.distance:.2f} km away"
            if atm.duration is not None:
                line += f" (~{atm.duration / 60:.0f} min)"
            if not atm.refined:
                line += " (straight line)"
            print(line)
        print(f"   {atm.lat}, {atm.lon}")
        print(f"   {atm.poi.map_url}")


def export_results(args, results, title):
    if not args.gpx or not results:
        return
    GPXExporter().export_gpx(results, args.gpx, title=title)
    print(f"\n✓ Exported {len(results)} ATMs to {args.gpx}")


def run_nearest(args):
    """
    Find ATMs nearest to a coordinate.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = success, 1 = error, 130 = interrupted)
    """
    print("=" * 60)
    print("ATM Locator")
    print("=" * 60)
    print(f"\nLocation: {args.lat}, {args.lon}")

    locator = build_locator(args)
    if locator is None:
        return 1

    try:
        result = locator.locate_by_coordinates(args.lat, args.lon, limit=args.limit)
    except KeyboardInterrupt:
        print("\n\n⚠ Search interrupted by user")
        return 130

    if not result.found:
        print("\n❌ No ATMs found nearby.")
        return 0

    count = len(result.results)
    print(f"\n📍 Found {count} nearest ATM{'s' if count > 1 else ''}:")
    print_results(result.results)
    export_results(args, result.results, "Nearest ATMs")
    return 0


def run_search(args):
    """
    Find ATMs around the neighbourhood best matching a name.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = success, 1 = error, 130 = interrupted)
    """
    query = " ".join(args.query).strip()

    print("=" * 60)
    print("ATM Locator")
    print("=" * 60)
    print(f"\nSearch: {query}")

    locator = build_locator(args)
    if locator is None:
        return 1

    try:
        result = locator.locate_by_name(query, limit=args.limit)
    except KeyboardInterrupt:
        print("\n\n⚠ Search interrupted by user")
        return 130

    if not result.matches:
        print(f'\n❌ No ATMs found matching "{query}". Please try a different name.')
        return 0

    print("\nBest name matches:")
    for match in result.matches[:5]:
        print(f"  {match.score:.2f}  {match.name}")

    if not result.found:
        print("\n❌ No ATMs found. Please try again.")
        return 0

    count = len(result.results)
    print(f"\n🏧 Found {count} ATM{'s' if count > 1 else ''} near {result.best_match.name}:")
    print_results(result.results)
    export_results(args, result.results, f"ATMs near {query}")
    return 0
