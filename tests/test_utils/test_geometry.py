"""Tests for geometry utilities."""

import math

import numpy as np
import pytest

from hope.utils.geometry import make_transform, qvec2rotmat, roll_pitch_transform, transform_points


class TestQvec2Rotmat:
    def test_identity(self):
        np.testing.assert_allclose(qvec2rotmat([1, 0, 0, 0]), np.eye(3), atol=1e-10)

    def test_unnormalized_input(self):
        np.testing.assert_allclose(qvec2rotmat([2, 0, 0, 0]), np.eye(3), atol=1e-10)

    def test_orthonormal(self):
        R = qvec2rotmat([0.9, 0.1, -0.3, 0.2])
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-10)
        assert np.linalg.det(R) == pytest.approx(1.0)


class TestTransforms:
    def test_make_transform_xyzw_order(self):
        s = math.sqrt(0.5)
        T = make_transform([1.0, 2.0, 3.0], [0.0, 0.0, s, s])
        np.testing.assert_allclose(T[:3, :3] @ [1, 0, 0], [0, 1, 0], atol=1e-10)
        np.testing.assert_allclose(T[:3, 3], [1, 2, 3])
        np.testing.assert_allclose(T[3], [0, 0, 0, 1])

    def test_roll_only(self):
        T = roll_pitch_transform(math.pi / 2, 0.0)
        np.testing.assert_allclose(T[:3, :3] @ [0, 1, 0], [0, 0, 1], atol=1e-10)

    def test_zero_roll_pitch_is_identity(self):
        np.testing.assert_allclose(roll_pitch_transform(0.0, 0.0), np.eye(4))

    def test_transform_points(self):
        T = make_transform([0.0, 0.0, 1.0], [0.0, 0.0, 0.0, 1.0])
        pts = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
        np.testing.assert_allclose(transform_points(pts, T), [[0, 0, 1], [1, 1, 2]])

    def test_tilted_sensor_levels_table(self):
        # A table seen by a camera pitched down: compensating the pitch flattens it
        pitch = 0.3
        xy = np.random.default_rng(0).uniform(-1, 1, (50, 2))
        table = np.column_stack([xy, np.full(50, 0.8)])
        tilted = transform_points(table, np.linalg.inv(roll_pitch_transform(0.0, pitch)))
        assert np.ptp(tilted[:, 2]) > 0.1
        leveled = transform_points(tilted, roll_pitch_transform(0.0, pitch))
        np.testing.assert_allclose(leveled[:, 2], 0.8, atol=1e-10)
