import json

import pytest

from densitygrid.common.errors import UnknownRegionError
from densitygrid.grid import density_job


def _write_inputs(tmp_path, sample_frame):
    data_path = tmp_path / "buildings.parquet"
    sample_frame.to_parquet(data_path, index=False)
    output = tmp_path / "output"
    config_path = tmp_path / "local.yaml"
    config_path.write_text(
        f"dataset:\n  buildings_path: {data_path}\noutput:\n  base_path: {output}\n",
        encoding="utf-8",
    )
    return config_path, output


def test_job_writes_requested_regions(tmp_path, sample_frame, capsys):
    config_path, output = _write_inputs(tmp_path, sample_frame)

    density_job.main(["--config", str(config_path), "--region", "sevilla", "--grid-size", "10"])

    with open(output / "sevilla" / "metadata.json", encoding="utf-8") as handle:
        metadata = json.load(handle)
    assert metadata["totalRecords"] == 2
    assert metadata["gridSize"] == 10
    assert not (output / "madrid").exists()
    assert "sevilla: 2 buildings" in capsys.readouterr().out


def test_job_defaults_to_every_region(tmp_path, sample_frame):
    config_path, output = _write_inputs(tmp_path, sample_frame)

    density_job.main(["--config", str(config_path)])

    assert {p.name for p in output.iterdir()} == {"barcelona", "madrid", "sevilla"}


def test_job_rejects_unknown_region_before_loading(tmp_path, sample_frame):
    config_path, output = _write_inputs(tmp_path, sample_frame)

    with pytest.raises(UnknownRegionError):
        density_job.main(["--config", str(config_path), "--region", "atlantis"])
    assert not output.exists()
