"""3D geometry utilities: rotations and rigid transforms."""

from __future__ import annotations

import numpy as np


def qvec2rotmat(qvec: list[float] | np.ndarray) -> np.ndarray:
    """Convert quaternion (w, x, y, z) to 3x3 rotation matrix."""
    w, x, y, z = np.asarray(qvec, dtype=np.float64) / np.linalg.norm(qvec)
    return np.array([
        [1 - 2*y*y - 2*z*z, 2*x*y - 2*w*z, 2*x*z + 2*w*y],
        [2*x*y + 2*w*z, 1 - 2*x*x - 2*z*z, 2*y*z - 2*w*x],
        [2*x*z - 2*w*y, 2*y*z + 2*w*x, 1 - 2*x*x - 2*y*y],
    ])


def make_transform(
    translation: list[float] | np.ndarray,
    rotation_xyzw: list[float] | np.ndarray,
) -> np.ndarray:
    """Build a 4x4 rigid transform from a translation and an (x, y, z, w) quaternion."""
    qx, qy, qz, qw = rotation_xyzw
    T = np.eye(4)
    T[:3, :3] = qvec2rotmat([qw, qx, qy, qz])
    T[:3, 3] = translation
    return T


def roll_pitch_transform(roll: float, pitch: float) -> np.ndarray:
    """4x4 rotation compensating a sensor's roll (about x) and pitch (about y), radians."""
    cr, sr = np.cos(roll), np.sin(roll)
    cp, sp = np.cos(pitch), np.sin(pitch)
    Rx = np.array([[1, 0, 0], [0, cr, -sr], [0, sr, cr]])
    Ry = np.array([[cp, 0, sp], [0, 1, 0], [-sp, 0, cp]])
    T = np.eye(4)
    T[:3, :3] = Ry @ Rx
    return T


def transform_points(points: np.ndarray, T: np.ndarray) -> np.ndarray:
    """Apply a 4x4 transform to (N, 3) points."""
    points = np.asarray(points, dtype=np.float64)
    return points @ T[:3, :3].T + T[:3, 3]
