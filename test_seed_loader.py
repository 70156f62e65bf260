"""
Tests for seed parsing: plain seed lists, detector output and plan metadata.
"""

import json

import pytest

from room_annotator.business import (
    SeedBox,
    load_seed_file,
    load_seeds,
    parse_bbox_px,
    parse_plan_metadata,
    parse_seed_list,
)
from room_annotator.utils import SeedFormatError


def test_seed_list_with_default_size():
    report = parse_seed_list([
        {'id': 'd1', 'x': 40, 'y': 55, 'width': 20, 'height': 15, 'class': 'bed'},
        {'id': 7, 'x': 10, 'y': 10},
    ])
    assert report.loaded == 2 and report.skipped == 0
    assert report.seeds[0] == SeedBox('d1', 40.0, 55.0, 20.0, 15.0, 'bed')
    assert report.seeds[1] == SeedBox('7', 10.0, 10.0, 10.0, 10.0, None)


def test_seed_list_skips_malformed_entries():
    report = parse_seed_list([
        {'id': 'ok', 'x': 50, 'y': 50},
        {'id': 'no-x', 'y': 50},
        {'id': 'text', 'x': 'left', 'y': 50},
        {'id': 'flat', 'x': 50, 'y': 50, 'width': 0},
        'not a seed',
    ])
    assert report.loaded == 1
    assert report.skipped == 4
    assert len(report.messages) == 4
    assert "'x'" in report.messages[0]


def test_seed_list_must_be_a_list():
    with pytest.raises(SeedFormatError):
        parse_seed_list({'x': 1})


def test_bbox_px_converts_natural_pixels():
    report = parse_bbox_px([
        {'id': 'furniture_1', 'bbox_px': {'min': [100, 50], 'max': [300, 150]}, 'ai_guess': 'desk'},
        {'id': 'broken', 'bbox_px': {'min': [100, 50]}},
    ], natural_width=1000, natural_height=500)
    assert report.loaded == 1 and report.skipped == 1
    seed = report.seeds[0]
    assert (seed.x, seed.y, seed.width, seed.height) == pytest.approx((20, 20, 20, 20))
    assert seed.suggested_label == 'desk'
    assert seed.source_id == 'furniture_1'


def test_plan_metadata_uses_center_and_corners():
    metadata = {'plans': [{
        'revit_data': {'pixel_dimensions': {'width': 1000, 'height': 500}},
        'unreal_data': {'furniture': [
            {'ai_label': 'furniture_7', 'category': 'bed',
             'bbox_corners_px': [[100, 100], [300, 100], [300, 200], [100, 200]],
             'center_px': [210, 150]},
            {'ai_label': 'furniture_8', 'bbox_corners_px': []},
        ]},
    }]}
    report = parse_plan_metadata(metadata)
    assert report.loaded == 1 and report.skipped == 1
    seed = report.seeds[0]
    assert (seed.x, seed.y, seed.width, seed.height) == pytest.approx((21, 30, 20, 20))
    assert (seed.source_id, seed.suggested_label) == ('furniture_7', 'bed')


def test_plan_metadata_without_dimensions():
    with pytest.raises(SeedFormatError):
        parse_plan_metadata({'plans': [{'unreal_data': {'furniture': []}}]})
    with pytest.raises(SeedFormatError):
        parse_plan_metadata({'plans': []})


@pytest.mark.parametrize("plans", [
    {'first': {'revit_data': {}}},
    "plan.json",
    ["plan.json"],
])
def test_malformed_plans_raise_seed_format_error(plans):
    with pytest.raises(SeedFormatError):
        parse_plan_metadata({'plans': plans})


def test_load_seeds_detects_layout():
    assert load_seeds([{'x': 50, 'y': 50}]).loaded == 1
    assert load_seeds({'seeds': [{'x': 50, 'y': 50}]}).loaded == 1
    detector = [{'bbox_px': {'min': [0, 0], 'max': [10, 10]}}]
    assert load_seeds(detector, natural_size=(100, 100)).seeds[0].width == pytest.approx(10)
    with pytest.raises(SeedFormatError):
        load_seeds(detector)
    with pytest.raises(SeedFormatError):
        load_seeds({'unexpected': True})


def test_load_seed_file(tmp_path):
    path = tmp_path / "seeds.json"
    path.write_text(json.dumps([{'id': 'a', 'x': 30, 'y': 40, 'width': 5, 'height': 5}]))
    assert load_seed_file(path).seeds[0].source_id == 'a'

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(SeedFormatError):
        load_seed_file(broken)
