"""Command-line interface for the flood-aware route planner."""

import asyncio
import json
import logging
import sys

from saferoute.config import DEFAULT_CENTER, LOG_LEVEL
from saferoute.location import StaticLocationProvider
from saferoute.routing import Coordinate, Warn
from .messages import describe_session
from .orchestrator import RoutePlanner
from .session import SessionStateError

HELP = """Commands:
  locate <lat> <lon>   use a device position as the start point
  manual               switch to manual start/end picking
  pick <lat> <lon>     pick a point on the map (start, then end)
  start <lat> <lon>    set the start point
  end <lat> <lon>      set the end point
  clear                remove the end point
  route                calculate the safe route
  pos <lat> <lon>      report a live position (proximity warning)
  gmaps                print a Google Maps directions link
  status               show the session state
  reset                start over
  quit                 exit
"""


def print_header():
    """Print CLI header."""
    print("\n" + "=" * 60)
    print("  FLOOD-AWARE SAFE ROUTE PLANNER")
    print("  Ramallah study area")
    print("=" * 60 + "\n")


def print_route(session) -> None:
    """Print the resolved route summary."""
    print(f"\n{describe_session(session)}")
    if session.result is None:
        return
    print(f"   Classification: {session.classification.value}")
    print(f"   Avoidance used: {'yes' if session.attempted_with_avoidance else 'no'}")
    print(f"   Est. Time: {session.result.duration_s / 60:.0f} minutes")
    for step in session.result.steps[:5]:
        print(f"   • {step['instruction']} ({step['distance_m']:.0f} m)")
    if len(session.result.steps) > 5:
        print(f"   ... and {len(session.result.steps) - 5} more steps")


def _coordinate(args: list[str]) -> Coordinate:
    lat, lon = float(args[0]), float(args[1])
    return Coordinate(lat=lat, lon=lon)


async def handle_command(planner: RoutePlanner, session_id: str, line: str) -> bool:
    """Run one CLI command. Returns False when the user quits."""
    parts = line.split()
    command, args = parts[0].lower(), parts[1:]

    if command in ("quit", "exit", "q"):
        return False

    if command == "locate":
        provider = StaticLocationProvider(_coordinate(args), name="cli")
        session = await planner.locate_start(session_id, provider)
    elif command == "manual":
        session = planner.enable_manual_mode(session_id, "Manual mode requested.")
    elif command == "pick":
        session = planner.select_point(session_id, _coordinate(args))
    elif command == "start":
        session = planner.set_start(session_id, _coordinate(args))
    elif command == "end":
        session = planner.set_end(session_id, _coordinate(args))
    elif command == "clear":
        session = planner.clear_end(session_id)
    elif command == "route":
        print("\nCalculating route...")
        session = await planner.calculate_route(session_id)
        print_route(session)
        return True
    elif command == "pos":
        decision = planner.update_position(session_id, _coordinate(args))
        if isinstance(decision, Warn):
            print(f"⚠️  Warning: within ~{planner.warn_distance_m:.0f} m of a high flood risk area.")
        else:
            print("No warning.")
        return True
    elif command == "gmaps":
        print(planner.directions_url(session_id))
        return True
    elif command == "status":
        session = planner.get_session(session_id)
        print(json.dumps(session.to_dict(), indent=2, default=str))
        return True
    elif command == "reset":
        session = planner.reset(session_id)
    else:
        print(HELP)
        return True

    print(describe_session(session))
    return True


async def interactive_mode(planner: RoutePlanner):
    """Run interactive planning mode."""
    print_header()

    session = planner.create_session()
    print(f"Map center: {DEFAULT_CENTER[0]}, {DEFAULT_CENTER[1]}")
    print(HELP)

    while True:
        try:
            line = input("Plan> ").strip()
            if not line:
                continue
            if not await handle_command(planner, session.id, line):
                print("Goodbye!")
                break
        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except (ValueError, IndexError):
            print("Coordinates must be given as: <lat> <lon>")
        except SessionStateError as e:
            print(f"Error: {e}")


def run_cli():
    """Main CLI entry point."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )

    if "--demo" in sys.argv:
        from saferoute.demo import run_demo
        asyncio.run(run_demo())
        return

    planner = RoutePlanner.from_data_dir()
    asyncio.run(interactive_mode(planner))


if __name__ == "__main__":
    run_cli()
