"""Tests for S00: Import sensor cloud step."""

import json
import math
from pathlib import Path

import numpy as np
import pytest
from plyfile import PlyData, PlyElement
from pydantic import ValidationError

from hope.steps.s00_import_cloud.config import ImportCloudConfig
from hope.steps.s00_import_cloud.contracts import ImportCloudInput, ImportCloudOutput
from hope.steps.s00_import_cloud.step import ImportCloudStep, _sensor_transform
from hope.utils.io import read_ply


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_sensor_ply(path: Path, points: np.ndarray, with_colors: bool = True) -> Path:
    """Write a binary PLY like a depth camera driver would dump it."""
    fields = [("x", "f4"), ("y", "f4"), ("z", "f4")]
    if with_colors:
        fields += [("red", "u1"), ("green", "u1"), ("blue", "u1")]
    data = np.empty(len(points), dtype=fields)
    data["x"], data["y"], data["z"] = points[:, 0], points[:, 1], points[:, 2]
    if with_colors:
        data["red"], data["green"], data["blue"] = 10, 20, 30
    PlyData([PlyElement.describe(data, "vertex")], text=False).write(str(path))
    return path


SENSOR_POINTS = np.array([
    [0.0, 0.0, 0.1],   # too close
    [0.1, 0.0, 0.5],
    [0.2, 0.0, 5.0],
    [0.3, 0.0, 9.0],   # too far
    [np.nan, 0.0, 1.0],
])


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestImportCloudConfig:
    def test_defaults(self):
        cfg = ImportCloudConfig()
        assert cfg.frame_id == "base_link"
        assert cfg.filter_depth is False
        assert (cfg.min_depth, cfg.max_depth) == (0.3, 8.0)
        assert _sensor_transform(cfg) is None

    def test_depth_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ImportCloudConfig(min_depth=2.0, max_depth=1.0)

    def test_quaternion_and_roll_pitch_exclusive(self):
        with pytest.raises(ValidationError):
            ImportCloudConfig(rotation_xyzw=[0, 0, 0, 1], roll=0.1)

    def test_translation_length(self):
        with pytest.raises(ValidationError):
            ImportCloudConfig(translation=[0.0, 1.0])

    def test_roll_pitch_transform_selected(self):
        T = _sensor_transform(ImportCloudConfig(pitch=math.pi / 2))
        np.testing.assert_allclose(T[:3, :3] @ [0, 0, 1], [1, 0, 0], atol=1e-12)


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

class TestImportCloudStep:
    def test_validate_missing_file(self, data_root: Path):
        step = ImportCloudStep(config=ImportCloudConfig(), data_root=data_root)
        assert step.validate_inputs(ImportCloudInput(ply_path=data_root / "none.ply")) is False

    def test_validate_wrong_suffix(self, data_root: Path):
        path = data_root / "raw" / "scan.xyz"
        path.write_text("0 0 0\n")
        step = ImportCloudStep(config=ImportCloudConfig(), data_root=data_root)
        assert step.validate_inputs(ImportCloudInput(ply_path=path)) is False

    def test_drops_non_finite_points(self, data_root: Path):
        ply = _make_sensor_ply(data_root / "raw" / "scan.ply", SENSOR_POINTS)
        step = ImportCloudStep(config=ImportCloudConfig(), data_root=data_root)
        output = step.execute(ImportCloudInput(ply_path=ply))

        assert isinstance(output, ImportCloudOutput)
        assert output.num_points == 4
        cloud = read_ply(output.cloud_path)
        assert np.isfinite(cloud.points).all()
        np.testing.assert_array_equal(cloud.colors[0], [10, 20, 30])

    def test_depth_filter(self, data_root: Path):
        ply = _make_sensor_ply(data_root / "raw" / "scan.ply", SENSOR_POINTS)
        cfg = ImportCloudConfig(filter_depth=True, min_depth=0.3, max_depth=8.0)
        output = ImportCloudStep(config=cfg, data_root=data_root).execute(
            ImportCloudInput(ply_path=ply)
        )
        assert output.num_points == 2
        cloud = read_ply(output.cloud_path)
        np.testing.assert_allclose(cloud.points[:, 2], [0.5, 5.0], atol=1e-6)

    def test_transform_to_base_frame(self, data_root: Path):
        pts = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 2.0], [0.5, 0.5, 1.0]])
        ply = _make_sensor_ply(data_root / "raw" / "scan.ply", pts, with_colors=False)
        s = math.sqrt(0.5)
        cfg = ImportCloudConfig(translation=[0.0, 0.0, 1.0], rotation_xyzw=[0.0, 0.0, s, s])
        output = ImportCloudStep(config=cfg, data_root=data_root).execute(
            ImportCloudInput(ply_path=ply)
        )
        cloud = read_ply(output.cloud_path)
        # 90 degrees about z, then lifted by 1m
        np.testing.assert_allclose(cloud.points[0], [0.0, 1.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(cloud.points[1], [0.0, 0.0, 3.0], atol=1e-6)
        assert cloud.colors is None

    def test_metadata_written(self, data_root: Path):
        ply = _make_sensor_ply(data_root / "raw" / "scan.ply", SENSOR_POINTS)
        cfg = ImportCloudConfig(filter_depth=True, roll=0.0, pitch=0.0)
        step = ImportCloudStep(config=cfg, data_root=data_root)
        output = step.execute(ImportCloudInput(ply_path=ply))

        with open(output.metadata_path) as f:
            meta = json.load(f)
        assert meta["num_raw_points"] == 5
        assert meta["num_points"] == 2
        assert meta["depth_filter"] == [0.3, 8.0]
        np.testing.assert_allclose(meta["transform"], np.eye(4), atol=1e-12)
        assert step.last_meta.step_name == "import_cloud"
        assert step.last_meta.params["filter_depth"] is True

    def test_everything_filtered_still_writes_cloud(self, data_root: Path):
        pts = np.array([[0.0, 0.0, 0.05], [0.0, 0.1, 0.1]])
        ply = _make_sensor_ply(data_root / "raw" / "scan.ply", pts)
        cfg = ImportCloudConfig(filter_depth=True)
        output = ImportCloudStep(config=cfg, data_root=data_root).execute(
            ImportCloudInput(ply_path=ply)
        )
        assert output.num_points == 0
        assert output.cloud_path.exists()
