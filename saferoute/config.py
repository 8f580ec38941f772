"""Centralized configuration for the flood-aware route planner."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_project_root = Path(__file__).parent.parent
load_dotenv(_project_root / ".env")


# API Keys
ORS_API_KEY: str = os.getenv("ORS_API_KEY", "")

# OpenRouteService
ORS_BASE_URL: str = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org/v2/directions")
ORS_PROFILE: str = os.getenv("ORS_PROFILE", "driving-car")
ORS_REQUEST_TIMEOUT_S: float = float(os.getenv("ORS_REQUEST_TIMEOUT_S", "10"))
# Must exceed the socket timeout; an abandoned worker thread blocks until then
ORS_GUARD_TIMEOUT_S: float = max(
    float(os.getenv("ORS_GUARD_TIMEOUT_S", "15")),
    ORS_REQUEST_TIMEOUT_S + 1,
)

# Search radius ORS uses to snap each endpoint onto the road network
SNAP_RADIUS_M: float = float(os.getenv("SNAP_RADIUS_M", "6000"))

# Hazard thresholds (gridcode 1-5, >= HIGH_RISK_MIN is high risk)
HIGH_RISK_MIN: int = int(os.getenv("HIGH_RISK_MIN", "4"))

# Proximity warnings
WARN_COOLDOWN_MS: int = int(os.getenv("WARN_COOLDOWN_MS", "15000"))
WARNING_DISTANCE_M: float = float(os.getenv("WARNING_DISTANCE_M", "120"))

# Geolocation
FIRST_FIX_TIMEOUT_S: float = float(os.getenv("FIRST_FIX_TIMEOUT_S", "10"))
PENDING_GUARD_S: float = float(os.getenv("PENDING_GUARD_S", "12"))

# Data paths
DATA_DIR: Path = Path(os.getenv("SAFEROUTE_DATA_DIR", str(Path(__file__).parent / "data")))
FLOOD_LAYER_FILE: str = os.getenv("FLOOD_LAYER_FILE", "flood.json")

# Initial map view (Ramallah study area)
DEFAULT_CENTER: tuple[float, float] = (31.9038, 35.2034)

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
