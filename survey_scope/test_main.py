"""Tests for the command line entry point, config and AOI loading."""

import argparse
import json

import pytest
import yaml

from survey_scope.main import load_aoi, load_config, main, parse_home


def write_geojson(path, ring_latlon, wrap="geometry"):
    geometry = {"type": "Polygon", "coordinates": [[[lon, lat] for lat, lon in ring_latlon]]}
    if wrap == "feature":
        data = {"type": "Feature", "properties": {}, "geometry": geometry}
    elif wrap == "collection":
        data = {"type": "FeatureCollection", "features": [
            {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [0, 0]}},
            {"type": "Feature", "properties": {}, "geometry": geometry},
        ]}
    else:
        data = geometry
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "device_options": {"log_file_path": str(tmp_path / "logs" / "survey.log")},
        "survey": {"height_agl_m": 80, "sidelap": 0.8},
    }))
    return path


@pytest.mark.parametrize("wrap", ["geometry", "feature", "collection"])
def test_load_aoi_swaps_to_lat_lon(tmp_path, square_aoi, wrap):
    path = write_geojson(tmp_path / "aoi.geojson", square_aoi, wrap)
    assert load_aoi(str(path)) == square_aoi


def test_load_aoi_rejects_non_polygon(tmp_path):
    path = tmp_path / "line.geojson"
    path.write_text(json.dumps({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}))
    with pytest.raises(ValueError):
        load_aoi(str(path))


def test_load_config(config_file, tmp_path):
    assert load_config(str(config_file))["survey"]["height_agl_m"] == 80
    assert load_config(str(tmp_path / "missing.yaml")) == {}

    bad = tmp_path / "bad.yaml"
    bad.write_text("survey: [unclosed")
    assert load_config(str(bad)) == {}


def test_packaged_config_loads():
    config = load_config()
    assert config["survey"]["camera"] == "Mavic3T_Wide"
    assert config["export"]["firmware_type"] == 12


def test_parse_home():
    assert parse_home("40.5,-111.25") == (40.5, -111.25)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_home("north")


def test_main_writes_plan(tmp_path, config_file, square_aoi):
    aoi = write_geojson(tmp_path / "aoi.geojson", square_aoi)
    out = tmp_path / "mission.plan"
    wpl = tmp_path / "mission.waypoints"

    code = main(["--aoi", str(aoi), "--out", str(out), "--config", str(config_file),
                 "--home", "40.75,-111.9", "--waypoints", str(wpl)])

    assert code == 0
    plan = json.loads(out.read_text())
    assert plan["mission"]["plannedHomePosition"] == [40.75, -111.9, 0]
    assert plan["mission"]["items"][1]["params"][6] == 80
    assert wpl.read_text().startswith("QGC WPL 110")


def test_main_writes_segment_plans(tmp_path, config_file, center, rectangle):
    aoi = write_geojson(tmp_path / "aoi.geojson", rectangle(center, 400, 300))
    segments_dir = tmp_path / "segments"

    code = main(["--aoi", str(aoi), "--out", str(tmp_path / "survey.plan"), "--config", str(config_file),
                 "--battery", "2", "--segments-dir", str(segments_dir), "--home-at-center"])

    assert code == 0
    written = sorted(p.name for p in segments_dir.iterdir())
    assert len(written) > 1
    assert written[0].startswith("survey_seg")


def test_main_missing_aoi_file(tmp_path, config_file):
    assert main(["--aoi", str(tmp_path / "nope.geojson"), "--config", str(config_file)]) == 1


def test_main_degenerate_aoi(tmp_path, config_file):
    aoi = write_geojson(tmp_path / "aoi.geojson", [(40.0, -111.0), (40.001, -111.0), (40.0, -111.0)])
    out = tmp_path / "mission.plan"
    assert main(["--aoi", str(aoi), "--out", str(out), "--config", str(config_file)]) == 1
    assert not out.exists()
