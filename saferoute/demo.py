"""End-to-end demo of the flood-aware route planner."""

import asyncio
import json
import logging

from saferoute.config import DATA_DIR, ORS_API_KEY
from saferoute.location import ReplayLocationProvider
from saferoute.orchestrator import RoutePlanner
from saferoute.orchestrator.messages import describe_session
from saferoute.routing import Coordinate

# Configure verbose logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("demo")


def pretty_print(label: str, data: dict | list | str) -> None:
    """Pretty-print a section with a header."""
    print(f"\n{'='*70}")
    print(f"  {label}")
    print(f"{'='*70}")
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)


async def run_demo():
    """Run the full planning demo."""

    print("\n" + "#" * 70)
    print("#  FLOOD-AWARE SAFE ROUTE PLANNER — DEMO")
    print("#  Ramallah study area")
    print("#" * 70)

    # ------------------------------------------------------------------
    # 1. Load hazards
    # ------------------------------------------------------------------
    planner = RoutePlanner.from_data_dir(DATA_DIR)
    logger.info("ORS API: %s", "CONFIGURED" if ORS_API_KEY else "MISSING (routing will fail)")
    pretty_print("HAZARD SEVERITY COUNTS", planner.hazards.severity_counts())

    avoidance = planner.avoidance_geometry()
    count = len(avoidance.polygons) if avoidance else 0
    logger.info("High-risk polygons to avoid: %d", count)

    # ------------------------------------------------------------------
    # 2. Locate the start from a recorded track
    # ------------------------------------------------------------------
    track = ReplayLocationProvider.from_file(DATA_DIR / "demo_track.json", interval_s=0.2)
    session = planner.create_session()
    session = await planner.locate_start(session.id, track)
    logger.info(describe_session(session))

    # ------------------------------------------------------------------
    # 3. Pick the destination and calculate
    # ------------------------------------------------------------------
    session = planner.select_point(session.id, Coordinate(lat=31.92, lon=35.22))
    session = await planner.calculate_route(session.id)
    pretty_print("ROUTE OUTCOME", describe_session(session))
    if session.result:
        pretty_print("GOOGLE MAPS", planner.directions_url(session.id))

    # ------------------------------------------------------------------
    # 4. Replay the drive for proximity warnings
    # ------------------------------------------------------------------
    decisions = await planner.track(session.id, track)
    pretty_print("PROXIMITY CHECKS", [type(d).__name__ for d in decisions])


if __name__ == "__main__":
    asyncio.run(run_demo())
