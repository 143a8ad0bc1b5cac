"""Check-routing subcommand implementation."""

from ..core.routing import get_routing_service
from .locate import load_config


def run_check_routing(args):
    """
    Test whether the configured routing service answers.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = reachable, 1 = unreachable or not configured)
    """
    config = load_config(args)
    if config is None:
        return 1

    try:
        service = get_routing_service(config)
    except ValueError as e:
        print(f"\n❌ Error: {e}")
        return 1

    if service is None:
        print("⚠ No routing service configured (set GEBETA_BASE_URL or OSRM_URL)")
        return 1

    print(f"Checking {service.name} at {service.base_url}...")
    if service.check_connection():
        print(f"✓ {service.name} is reachable")
        return 0

    print(f"❌ {service.name} is not reachable, straight-line distances will be used")
    return 1
