"""
Tests for the command line entry point.
"""

import json
from unittest.mock import Mock

import matplotlib.pyplot as plt
import pytest
from PIL import Image

import room_annotator.__main__ as cli


@pytest.fixture
def no_window(monkeypatch):
    monkeypatch.setattr(cli, 'init_logging', Mock())
    monkeypatch.setattr(cli.plt, 'show', Mock())
    yield
    plt.close('all')


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "room.png"
    Image.new('RGB', (40, 30), color='white').save(path)
    return path


def test_parser_defaults():
    args = cli.build_parser().parse_args(["room.png"])
    assert (args.image, args.seeds, args.config, args.log_level) == ("room.png", None, "default", "WARNING")


def test_prints_finalized_annotations(no_window, image_path, tmp_path, capsys):
    seeds = tmp_path / "seeds.json"
    seeds.write_text(json.dumps([
        {'id': 'furniture_1', 'bbox_px': {'min': [10, 6], 'max': [30, 24]}, 'ai_guess': 'bed'},
    ]))

    assert cli.main([str(image_path), "--seeds", str(seeds), "--config", "touch"]) == 0

    records = json.loads(capsys.readouterr().out)
    assert len(records) == 1
    assert records[0]['origin'] == 'detected'
    assert records[0]['source_reference'] == 'furniture_1'
    assert records[0]['label'] is None
    assert records[0]['geometry']['width'] == pytest.approx(50)
    cli.plt.show.assert_called_once()


def test_missing_image(no_window, tmp_path):
    assert cli.main([str(tmp_path / "missing.png")]) == 1


def test_bad_seed_file(no_window, image_path, tmp_path):
    seeds = tmp_path / "seeds.json"
    seeds.write_text("[")
    assert cli.main([str(image_path), "--seeds", str(seeds)]) == 1
