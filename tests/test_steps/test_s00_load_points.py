"""Tests for S00: Load points step."""

import json
from pathlib import Path

import numpy as np
import pytest

from slabfit.steps.s00_load_points.config import LoadPointsConfig
from slabfit.steps.s00_load_points.contracts import LoadPointsInput, LoadPointsOutput
from slabfit.steps.s00_load_points.step import LoadPointsStep


class TestLoadPointsStep:
    def test_load_text(self, data_root: Path, two_planes_txt: Path):
        step = LoadPointsStep(config=LoadPointsConfig(), data_root=data_root)
        output = step.execute(LoadPointsInput(source_path=two_planes_txt))

        assert isinstance(output, LoadPointsOutput)
        assert output.num_points == 100
        assert output.has_normals
        assert output.points_path.exists()
        assert output.bbox_min[2] == 0.0
        assert output.bbox_max[0] == pytest.approx(2.0)

        with np.load(output.points_path) as data:
            assert data["positions"].shape == (100, 3)
            assert data["normals"].shape == (100, 3)

        with open(output.metadata_path) as f:
            meta = json.load(f)
        assert meta["num_points"] == 100

    def test_skip_invalid_lines(self, data_root: Path):
        src = data_root / "raw" / "messy.txt"
        src.write_text("0 0 0\nnot a point\n1 0 0\n")
        step = LoadPointsStep(config=LoadPointsConfig(skip_invalid_lines=True), data_root=data_root)
        assert step.execute(LoadPointsInput(source_path=src)).num_points == 2

        strict = LoadPointsStep(config=LoadPointsConfig(), data_root=data_root)
        with pytest.raises(ValueError):
            strict.execute(LoadPointsInput(source_path=src))

    def test_empty_file(self, data_root: Path):
        src = data_root / "raw" / "empty.txt"
        src.write_text("\n")
        step = LoadPointsStep(config=LoadPointsConfig(), data_root=data_root)
        output = step.execute(LoadPointsInput(source_path=src))
        assert output.num_points == 0
        assert output.bbox_min is None

    def test_missing_input(self, data_root: Path):
        step = LoadPointsStep(config=LoadPointsConfig(), data_root=data_root)
        assert not step.validate_inputs(LoadPointsInput(source_path=data_root / "nope.txt"))
        with pytest.raises(ValueError, match="Input validation failed"):
            step.execute(LoadPointsInput(source_path=data_root / "nope.txt"))
