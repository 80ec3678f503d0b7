"""Tests for the command line runner."""

import json

import pytest

from farm_analytics.presentation.cli import main as cli


@pytest.fixture
def use_farm(monkeypatch, farm):
    monkeypatch.setattr(cli, "load_repository", lambda data_dir: farm)


def test_prints_result(use_farm, capsys):
    """Test a successful command prints the JSON result."""
    cli.main(["costs", "compute-parcel-costs", "--payload", '{"parcel_id": "p1"}'])

    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is True
    assert result["value"]["total"] == pytest.approx(422.5)


def test_writes_output_file(use_farm, tmp_path):
    """Test --output writes the result instead of printing it."""
    target = tmp_path / "result.json"
    cli.main(["productivity", "analyze-crop-productivity", "--payload", '{"crop_id": "c1"}',
              "--output", str(target)])

    result = json.loads(target.read_text(encoding="utf-8"))
    assert result["value"]["metrics"]["total_area"] == pytest.approx(15.0)


def test_failure_exit_codes(use_farm, capsys):
    """Test failed commands exit 1 and bad JSON exits 2."""
    with pytest.raises(SystemExit) as failed:
        cli.main(["costs", "compute-parcel-costs", "--payload", '{"parcel_id": "zz"}'])
    assert failed.value.code == 1
    assert json.loads(capsys.readouterr().out)["error_kind"] == "NotFound"

    with pytest.raises(SystemExit) as bad_json:
        cli.main(["costs", "compute-parcel-costs", "--payload", "{parcel"])
    assert bad_json.value.code == 2


def test_rejects_unknown_kind():
    """Test argparse restricts kinds to the aggregator's commands."""
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["costs", "analyze-trends"])
