"""Tests for the SurveyPlanner session (signals, recompute and export)."""

import json
import os

import pytest

from survey_scope.core.mission_planner import DEFAULT_HOME, SurveyPlanner


@pytest.fixture
def planner():
    return SurveyPlanner({})


@pytest.fixture
def received(planner):
    events = {'plan_updated': [], 'home_changed': [], 'plan_saved': [], 'aoi_changed': []}
    planner.plan_updated.connect(lambda summary: events['plan_updated'].append(summary))
    planner.home_changed.connect(lambda lat, lon: events['home_changed'].append((lat, lon)))
    planner.plan_saved.connect(lambda kind, path: events['plan_saved'].append((kind, path)))
    planner.aoi_changed.connect(lambda has_aoi: events['aoi_changed'].append(has_aoi))
    return events


def test_defaults_from_empty_config(planner):
    assert planner.home == DEFAULT_HOME
    assert planner.aoi is None
    assert planner.parameters.height_agl_m == 100
    assert planner.result.legs == []


def test_config_sections_are_used():
    config = {
        'home': {'lat': 10.0, 'lon': 20.0},
        'survey': {'camera': 'Phantom4Pro', 'height_agl_m': 60, 'overlap': 1.5, 'heading_deg': 370},
        'export': {'vehicle_type': 2},
    }
    planner = SurveyPlanner(config)
    assert planner.home == (10.0, 20.0)
    assert planner.parameters.camera.name == 'Phantom 4 Pro'
    assert planner.parameters.height_agl_m == 60
    assert planner.parameters.overlap == 0.95
    assert planner.parameters.heading_deg == 10
    assert planner.export_options.vehicle_type == 2


def test_set_aoi_recomputes_and_emits(planner, received, square_aoi):
    assert planner.set_aoi(square_aoi)

    assert received['aoi_changed'] == [True]
    summary = received['plan_updated'][-1]
    assert summary['leg_count'] == len(planner.result.legs) > 0
    assert summary['has_aoi'] is True
    assert summary['camera'] == 'Mavic 3T Wide'


def test_invalid_aoi_clears(planner, received, square_aoi):
    planner.set_aoi(square_aoi)
    assert not planner.set_aoi(square_aoi[:2])

    assert planner.aoi is None
    assert received['aoi_changed'] == [True, False]
    assert received['plan_updated'][-1]['leg_count'] == 0
    assert received['plan_updated'][-1]['warnings']


def test_set_home_emits(planner, received, square_aoi):
    planner.set_aoi(square_aoi)
    planner.set_home(40.75, -111.9)
    planner.set_home_to_center((40.7608, -111.891))

    assert received['home_changed'] == [(40.75, -111.9), (40.7608, -111.891)]
    assert planner.result.mission_plan['mission']['plannedHomePosition'] == [40.7608, -111.891, 0]


def test_update_parameters(planner, square_aoi):
    planner.set_aoi(square_aoi)
    before = len(planner.result.legs)

    assert planner.update_parameters(sidelap=0.9, heading_deg=-90)
    assert planner.parameters.heading_deg == 270
    assert len(planner.result.legs) > before


def test_update_parameters_rejects_unknown(planner):
    assert not planner.update_parameters(wingspan=3)
    assert not planner.update_parameters(overlap="lots")


def test_set_camera(planner):
    assert planner.set_camera('Mavic3T_Tele')
    assert planner.parameters.camera.focal_length_mm == 162
    assert not planner.set_camera('Hasselblad')


def test_save_plan(planner, received, square_aoi, tmp_path):
    planner.set_aoi(square_aoi)
    out = tmp_path / "plans" / "mission.plan"

    assert planner.save_plan(str(out))
    data = json.loads(out.read_text())
    assert data['fileType'] == 'Plan'
    assert len(data['mission']['items']) == 1 + sum(len(leg) for leg in planner.result.legs)
    assert received['plan_saved'] == [('plan', str(out))]


def test_save_without_legs_fails(planner, tmp_path):
    assert not planner.save_plan(str(tmp_path / "mission.plan"))
    assert not planner.save_waypoints(str(tmp_path / "mission.waypoints"))
    assert not os.path.exists(tmp_path / "mission.plan")


def test_save_segment_plans(planner, center, rectangle, tmp_path):
    planner.update_parameters(auto_segment=True, battery_cap_min=2)
    planner.set_aoi(rectangle(center, 400, 300))

    written = planner.save_segment_plans(str(tmp_path), "survey")
    assert len(written) == len(planner.result.segments) > 1
    assert os.path.basename(written[0]) == "survey_seg1.plan"
    assert not planner.save_plan(str(tmp_path / "x.plan"), segment_index=len(written))


def test_save_waypoints(planner, received, square_aoi, tmp_path):
    planner.set_aoi(square_aoi)
    out = tmp_path / "mission.waypoints"

    assert planner.save_waypoints(str(out))
    assert out.read_text().startswith("QGC WPL 110\n")
    assert received['plan_saved'] == [('waypoints', str(out))]


def test_save_plan_reports_io_errors(planner, square_aoi, tmp_path):
    planner.set_aoi(square_aoi)
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert not planner.save_plan(str(blocker / "mission.plan"))
