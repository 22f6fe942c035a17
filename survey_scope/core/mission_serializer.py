# core/mission_serializer.py

"""QGroundControl ``.plan`` builder for survey legs.

The serializer is a pure function of its inputs. Writing files is left to
the caller (see ``SurveyPlanner.save_plan``).
"""

import itertools
import json
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from pymavlink import mavutil

from survey_scope.core.geometry import Leg, Point

DEFAULT_FIRMWARE_TYPE = mavutil.mavlink.MAV_AUTOPILOT_PX4
DEFAULT_VEHICLE_TYPE = 3

PLAN_FILE_VERSION = 1
MISSION_VERSION = 2
GEOFENCE_VERSION = 2
RALLY_VERSION = 2


@dataclass(frozen=True)
class ExportOptions:
    hover_speed_mps: Optional[float] = None
    firmware_type: int = DEFAULT_FIRMWARE_TYPE
    vehicle_type: int = DEFAULT_VEHICLE_TYPE

    @classmethod
    def from_config(cls, config: dict) -> "ExportOptions":
        export = (config or {}).get("export", {}) or {}
        hover = export.get("hover_speed_mps")
        return cls(
            hover_speed_mps=float(hover) if hover is not None else None,
            firmware_type=int(export.get("firmware_type", DEFAULT_FIRMWARE_TYPE)),
            vehicle_type=int(export.get("vehicle_type", DEFAULT_VEHICLE_TYPE)),
        )


def waypoint_item(jump_id: int, lat: float, lon: float, relative_alt_m: float) -> dict:
    return {
        'AMslAlt': False,
        'autoContinue': True,
        'command': mavutil.mavlink.MAV_CMD_NAV_WAYPOINT,
        'doJumpId': jump_id,
        'frame': mavutil.mavlink.MAV_FRAME_GLOBAL_RELATIVE_ALT,
        'params': [0, 0, 0, 0, lat, lon, relative_alt_m],
        'type': 'SimpleItem',
    }


def camera_trigger_item(jump_id: int, trigger_distance_m: float) -> dict:
    return {
        'autoContinue': True,
        'command': mavutil.mavlink.MAV_CMD_DO_SET_CAM_TRIGG_DIST,
        'doJumpId': jump_id,
        'frame': mavutil.mavlink.MAV_FRAME_GLOBAL,
        'params': [trigger_distance_m, 0, 0, 0, 0, 0, 0],
        'type': 'SimpleItem',
    }


def build_mission_items(legs: Sequence[Leg], relative_alt_m: float, trigger_distance_m: float,
                        ids: Optional[Iterator[int]] = None) -> List[dict]:
    """Trigger-distance command followed by one waypoint per leg point."""
    if ids is None:
        ids = itertools.count(1)
    items = [camera_trigger_item(next(ids), trigger_distance_m)]
    for leg in legs:
        for lat, lon in leg:
            items.append(waypoint_item(next(ids), lat, lon, relative_alt_m))
    return items


def make_plan(legs: Sequence[Leg], home: Point, relative_alt_m: float, trigger_distance_m: float,
              groundspeed_mps: Optional[float] = None, options: Optional[ExportOptions] = None) -> dict:
    """
    Build a QGroundControl plan dictionary.

    Args:
        legs: survey legs in flight order; every point becomes a waypoint
        home: planned home position (lat, lon)
        relative_alt_m: waypoint altitude relative to home
        trigger_distance_m: camera trigger distance
        groundspeed_mps: cruise speed, omitted from the file when None
        options: hover speed and firmware/vehicle identifiers

    Returns: JSON-ready plan dictionary
    """
    options = options or ExportOptions()
    items = build_mission_items(legs, relative_alt_m, trigger_distance_m, itertools.count(1))

    mission = {
        'version': MISSION_VERSION,
        'items': items,
        'plannedHomePosition': [home[0], home[1], 0],
        'firmwareType': options.firmware_type,
        'vehicleType': options.vehicle_type,
    }
    if groundspeed_mps is not None:
        mission['cruiseSpeed'] = groundspeed_mps
    if options.hover_speed_mps is not None:
        mission['hoverSpeed'] = options.hover_speed_mps

    return {
        'fileType': 'Plan',
        'version': PLAN_FILE_VERSION,
        'groundStation': 'QGroundControl',
        'geoFence': {'version': GEOFENCE_VERSION, 'polygons': [], 'circles': []},
        'rallyPoints': {'version': RALLY_VERSION, 'points': []},
        'mission': mission,
    }


def plan_to_json(plan: dict) -> str:
    return json.dumps(plan, indent=2)


def plan_to_waypoints(plan: dict) -> str:
    """
    Render a plan in Mission Planner .waypoints format.

    Format: QGC WPL 110
    index current_wp coord_frame command p1 p2 p3 p4 lat lon alt autocontinue
    Line 0 is the planned home position.
    """
    home_lat, home_lon, home_alt = plan['mission']['plannedHomePosition']
    lines = ["QGC WPL 110",
             f"0\t1\t0\t{mavutil.mavlink.MAV_CMD_NAV_WAYPOINT}\t0\t0\t0\t0\t"
             f"{home_lat:.8f}\t{home_lon:.8f}\t{home_alt:.2f}\t1"]

    for item in plan['mission']['items']:
        p = item['params']
        auto = 1 if item.get('autoContinue', True) else 0
        lines.append(
            f"{item['doJumpId']}\t0\t{item['frame']}\t{item['command']}\t"
            f"{p[0]:.8f}\t{p[1]:.8f}\t{p[2]:.8f}\t{p[3]:.8f}\t"
            f"{p[4]:.8f}\t{p[5]:.8f}\t{p[6]:.2f}\t{auto}"
        )
    return "\n".join(lines) + "\n"
