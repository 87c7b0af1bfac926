"""Tests for the PointCloud container and logging setup."""

import logging

import numpy as np
import pytest

from hope.core.cloud import PointCloud
from hope.core.logging import setup_logging


class TestPointCloud:
    def test_from_points(self):
        cloud = PointCloud.from_points([[0, 0, 0], [1, 2, 3]])
        assert len(cloud) == 2
        assert cloud.points.dtype == np.float64
        assert (cloud.width, cloud.height) == (2, 1)
        assert cloud.is_dense
        assert not cloud.is_organized
        assert cloud.frame_id == "base_link"

    def test_not_dense_with_nan(self):
        cloud = PointCloud.from_points([[0, 0, 0], [np.nan, 0, 0]])
        assert not cloud.is_dense

    def test_organized_shape_kept(self):
        cloud = PointCloud(points=np.zeros((6, 3)), width=3, height=2)
        assert cloud.is_organized
        assert (cloud.width, cloud.height) == (3, 2)

    def test_inconsistent_shape_becomes_unorganized(self):
        cloud = PointCloud(points=np.zeros((5, 3)), width=3, height=2)
        assert (cloud.width, cloud.height) == (5, 1)

    def test_color_rows_checked(self):
        with pytest.raises(ValueError):
            PointCloud(points=np.zeros((3, 3)), colors=np.zeros((2, 3)))

    def test_normal_rows_checked(self):
        with pytest.raises(ValueError):
            PointCloud(points=np.zeros((3, 3)), normals=np.zeros((4, 3)))

    def test_empty(self):
        cloud = PointCloud.from_points(np.empty((0, 3)))
        assert cloud.is_empty
        assert len(cloud) == 0

    def test_select_preserves_order_and_attributes(self):
        pts = np.arange(12, dtype=float).reshape(4, 3)
        colors = np.arange(12, dtype=np.uint8).reshape(4, 3)
        cloud = PointCloud.from_points(pts, colors=colors, frame_id="map")
        sub = cloud.select(np.array([3, 1]))
        np.testing.assert_array_equal(sub.points, pts[[3, 1]])
        np.testing.assert_array_equal(sub.colors, colors[[3, 1]])
        assert sub.frame_id == "map"
        assert sub.width == 2

    def test_copy_is_independent(self):
        cloud = PointCloud.from_points(np.zeros((2, 3)))
        dup = cloud.copy()
        dup.points[0, 0] = 5.0
        assert cloud.points[0, 0] == 0.0


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "hope.log"
        setup_logging("DEBUG", log_file=log_file)
        logging.getLogger("hope.test").debug("hello planes")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello planes" in log_file.read_text()
        assert logging.getLogger().level == logging.DEBUG
        setup_logging("WARNING")
