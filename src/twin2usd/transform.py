from __future__ import annotations

"""TRS composition into the 4x4 matrix written as ``xformOp:transform``.

USD uses row vectors (``p' = p @ M``), so the rotation block is the transpose
of the usual column-vector rotation matrix and the translation sits in the
last row.
"""

import numpy as np

from .model import Transform

_SNAP_TOLERANCE = 1e-12


def quaternion_to_matrix(quaternion: tuple[float, float, float, float]) -> np.ndarray:
    """Column-vector 3x3 rotation for an (x, y, z, w) quaternion.

    The quaternion is normalized first; a zero-length quaternion is treated
    as no rotation.
    """
    q = np.asarray(quaternion, dtype=np.float64)
    if q.shape != (4,):
        raise ValueError("quaternion must be length 4")
    norm = float(np.linalg.norm(q))
    if norm == 0.0 or not np.isfinite(norm):
        return np.eye(3)
    x, y, z, w = q / norm

    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)],
            [2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)],
            [2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)],
        ],
        dtype=np.float64,
    )


def compose_transform_matrix(transform: Transform) -> np.ndarray:
    """Compose scale, then rotation, then translation into one row-major 4x4."""
    if transform.is_identity:
        return np.eye(4)

    scale = np.diag(np.asarray(transform.scale, dtype=np.float64))
    rotation = quaternion_to_matrix(transform.rotate)

    matrix = np.eye(4)
    matrix[:3, :3] = scale @ rotation.T
    matrix[3, :3] = np.asarray(transform.translate, dtype=np.float64)

    # cos/sin round-off would otherwise print as 6.1e-17 instead of 0
    rounded = np.round(matrix)
    return np.where(np.abs(matrix - rounded) < _SNAP_TOLERANCE, rounded, matrix)


def transform_point(matrix: np.ndarray, point: tuple[float, float, float]) -> np.ndarray:
    """Apply a row-vector 4x4 to a 3D point."""
    homogeneous = np.append(np.asarray(point, dtype=np.float64), 1.0)
    result = homogeneous @ matrix
    return result[:3] / result[3]
