import argparse
import json
import logging
import os
import sys

import yaml

from survey_scope.core.cameras import CAMERAS
from survey_scope.core.mission_planner import SurveyPlanner


def setup_global_logging(config):
    """Log to the configured file and to the console."""
    log_file_path = config.get("device_options", {}).get("log_file_path", "data/logs/survey_log.txt")

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file_path, mode='a'),
            logging.StreamHandler(),
        ]
    )

    logger = logging.getLogger("SurveyScope.Main")
    logger.info("Survey Scope logging initialized")
    logger.info(f"Log file: {log_file_path}")


def load_config(path=None):
    """Read YAML settings, the packaged config.yaml by default. Returns {} on failure."""
    if path is None:
        base_dir = os.path.dirname(os.path.abspath(__file__))
        path = os.path.join(base_dir, "config.yaml")

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
            print(f"Loaded survey config: {path}")
            return config
    except FileNotFoundError:
        print(f"No config at {path}, using built-in defaults")
        return {}
    except yaml.YAMLError as e:
        print(f"Invalid YAML in {path}: {e}")
        return {}


def load_aoi(path):
    """Read the first polygon ring from a GeoJSON file as (lat, lon) points."""
    with open(path, 'r') as f:
        data = json.load(f)

    geometry = data
    if data.get("type") == "FeatureCollection":
        polygons = [feat.get("geometry") for feat in data.get("features", [])
                    if (feat.get("geometry") or {}).get("type") == "Polygon"]
        if not polygons:
            raise ValueError(f"No Polygon feature in {path}")
        geometry = polygons[0]
    elif data.get("type") == "Feature":
        geometry = data.get("geometry") or {}

    if geometry.get("type") != "Polygon":
        raise ValueError(f"Expected a GeoJSON Polygon in {path}, got {geometry.get('type')}")

    ring = geometry["coordinates"][0]
    return [(float(lat), float(lon)) for lon, lat, *_ in ring]


def parse_home(value):
    try:
        lat, lon = (float(v) for v in value.split(","))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Home must be LAT,LON (got '{value}')") from e
    return lat, lon


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Plan a lawnmower survey and export a QGroundControl .plan")
    parser.add_argument("--aoi", required=True, help="GeoJSON file with the survey polygon")
    parser.add_argument("--out", default="mission.plan", help="Output .plan file")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--home", type=parse_home, default=None, help="Home position as LAT,LON")
    parser.add_argument("--home-at-center", action="store_true", help="Place home at the AOI center")
    parser.add_argument("--camera", choices=sorted(CAMERAS), default=None)
    parser.add_argument("--height", type=float, default=None, help="Height AGL in meters")
    parser.add_argument("--heading", type=float, default=None, help="Flight line heading in degrees")
    parser.add_argument("--overlap", type=float, default=None, help="Forward overlap fraction")
    parser.add_argument("--sidelap", type=float, default=None, help="Side overlap fraction")
    parser.add_argument("--speed", type=float, default=None, help="Groundspeed in m/s")
    parser.add_argument("--battery", type=float, default=None, help="Battery cap in minutes")
    parser.add_argument("--crosshatch", action="store_true")
    parser.add_argument("--auto-segment", action="store_true", help="Split the survey by battery cap")
    parser.add_argument("--segments-dir", default=None, help="Directory for per-segment .plan files")
    parser.add_argument("--waypoints", default=None, help="Also write a QGC WPL 110 .waypoints file")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    config = load_config(args.config)
    setup_global_logging(config)
    logger = logging.getLogger("SurveyScope.Main")

    planner = SurveyPlanner(config)

    overrides = {
        "height_agl_m": args.height,
        "heading_deg": args.heading,
        "overlap": args.overlap,
        "sidelap": args.sidelap,
        "groundspeed_mps": args.speed,
        "battery_cap_min": args.battery,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.crosshatch:
        overrides["crosshatch"] = True
    if args.auto_segment or args.segments_dir:
        overrides["auto_segment"] = True
    if overrides:
        planner.update_parameters(**overrides)
    if args.camera:
        planner.set_camera(args.camera)

    try:
        aoi = load_aoi(args.aoi)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Failed to load AOI from {args.aoi}: {e}")
        return 1

    if args.home is not None:
        planner.set_home(*args.home)

    if not planner.set_aoi(aoi):
        logger.error("AOI is not a valid polygon")
        return 1

    if args.home_at_center:
        lats = [p[0] for p in aoi]
        lons = [p[1] for p in aoi]
        planner.set_home_to_center(((min(lats) + max(lats)) / 2, (min(lons) + max(lons)) / 2))

    for warning in planner.result.warnings:
        logger.warning(warning)

    summary = planner.summary()
    logger.info(f"Legs: {summary['leg_count']}  Photos: {summary['photo_count']}  "
                f"Total: {summary['total_km']:.2f} km  Time: {summary['est_time_min']:.1f} min  "
                f"AOI: {summary['aoi_area_acres']:.2f} ac")
    for i, seg in enumerate(summary['segments']):
        logger.info(f"Segment #{i + 1}: {seg['distance_km']:.2f} km, {seg['time_min']:.1f} min")

    if not planner.save_plan(args.out):
        return 1
    if args.segments_dir:
        stem = os.path.splitext(os.path.basename(args.out))[0]
        planner.save_segment_plans(args.segments_dir, stem)
    if args.waypoints and not planner.save_waypoints(args.waypoints):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
