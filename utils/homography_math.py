"""
Homography mathematical utilities.

This module provides the planar projective geometry used by the alignment
pipeline: validation and normalization of 3x3 homographies, point transfer,
reprojection errors, degeneracy checks and the normalized Direct Linear
Transform (DLT).
"""

import itertools
import numpy as np
from typing import Tuple, Optional

from utils.logger_config import get_logger

logger = get_logger(__name__)


class HomographyMath:
    """Mathematical utilities for planar homography calculations."""

    @staticmethod
    def validate_points(points: np.ndarray, points_name: str = "points") -> np.ndarray:
        """
        Validate and convert a point set to an (N, 2) float64 array.

        Args:
            points: Array-like of (x, y) coordinates
            points_name: Name for error messages

        Returns:
            np.ndarray: (N, 2) float64 array

        Raises:
            ValueError: If the point set has the wrong shape or contains NaN/inf
        """
        array = np.asarray(points, dtype=np.float64)
        if array.size == 0:
            return array.reshape(0, 2)

        array = array.reshape(-1, 2) if array.ndim == 3 else array
        if array.ndim != 2 or array.shape[1] != 2:
            raise ValueError(f"{points_name} must have shape (N, 2), got {array.shape}")

        if not np.all(np.isfinite(array)):
            raise ValueError(f"{points_name} contains NaN or infinite values")

        return array

    @staticmethod
    def validate_homography(H: np.ndarray, matrix_name: str = "H") -> bool:
        """
        Validate a homography matrix.

        Args:
            H: 3x3 homography
            matrix_name: Name for error messages

        Returns:
            bool: True if valid

        Raises:
            ValueError: If matrix is not a finite, non-singular 3x3 matrix
        """
        if not isinstance(H, np.ndarray) or H.shape != (3, 3):
            shape = getattr(H, 'shape', None)
            raise ValueError(f"{matrix_name} must be 3x3, got {shape}")

        if not np.all(np.isfinite(H)):
            raise ValueError(f"{matrix_name} contains NaN or infinite values")

        if abs(np.linalg.det(H)) < 1e-12:
            raise ValueError(f"{matrix_name} is singular")

        return True

    @staticmethod
    def normalize_homography(H: np.ndarray) -> np.ndarray:
        """
        Scale a homography so that its bottom-right element equals 1.

        Raises:
            ValueError: If H[2, 2] is zero (transform maps the origin to infinity)
        """
        if abs(H[2, 2]) < 1e-12:
            raise ValueError("Cannot normalize homography with H[2, 2] == 0")
        return H / H[2, 2]

    @staticmethod
    def apply_homography(H: np.ndarray, points: np.ndarray) -> np.ndarray:
        """
        Transfer (N, 2) points through a homography.

        Points mapped to infinity come back as inf.
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        homogeneous = np.hstack([points, np.ones((points.shape[0], 1))])
        projected = homogeneous @ H.T

        w = projected[:, 2:3]
        with np.errstate(divide='ignore', invalid='ignore'):
            result = projected[:, :2] / w
        result[~np.isfinite(result)] = np.inf
        return result

    @staticmethod
    def reprojection_errors(H: np.ndarray, src_points: np.ndarray, dst_points: np.ndarray) -> np.ndarray:
        """Euclidean distance between H(src) and dst for every correspondence."""
        projected = HomographyMath.apply_homography(H, src_points)
        with np.errstate(invalid='ignore'):
            errors = np.linalg.norm(projected - dst_points, axis=1)
        errors[~np.isfinite(errors)] = np.inf
        return errors

    @staticmethod
    def are_collinear(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, tolerance: float = 1e-6) -> bool:
        """
        Check three points for collinearity.

        The twice-signed triangle area is compared against the tolerance scaled
        by the longest side so the test does not depend on image resolution.
        """
        d1 = p2 - p1
        d2 = p3 - p1
        cross = abs(d1[0] * d2[1] - d1[1] * d2[0])
        scale = max(np.linalg.norm(d1), np.linalg.norm(d2), np.linalg.norm(p3 - p2), 1.0)
        return cross <= tolerance * scale * scale

    @staticmethod
    def has_collinear_triplet(points: np.ndarray, tolerance: float = 1e-6) -> bool:
        """Return True if any three of the given points are collinear."""
        for i, j, k in itertools.combinations(range(len(points)), 3):
            if HomographyMath.are_collinear(points[i], points[j], points[k], tolerance):
                return True
        return False

    @staticmethod
    def all_collinear(points: np.ndarray, tolerance: float = 1e-6) -> bool:
        """
        Return True if the whole point set lies on one line (or one point).

        Uses the singular values of the centered point cloud: a degenerate set
        has a second singular value that is negligible relative to the first.
        """
        if len(points) < 3:
            return True
        centered = points - points.mean(axis=0)
        singular_values = np.linalg.svd(centered, compute_uv=False)
        if singular_values[0] < 1e-12:
            return True
        return singular_values[1] / singular_values[0] < tolerance

    @staticmethod
    def hartley_normalization(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute the similarity transform that moves the centroid to the origin
        and scales the mean distance from it to sqrt(2).

        Returns:
            Tuple[np.ndarray, np.ndarray]: (normalized points, 3x3 transform T)
        """
        centroid = points.mean(axis=0)
        mean_distance = np.mean(np.linalg.norm(points - centroid, axis=1))
        scale = np.sqrt(2.0) / mean_distance if mean_distance > 1e-12 else 1.0

        T = np.array([
            [scale, 0.0, -scale * centroid[0]],
            [0.0, scale, -scale * centroid[1]],
            [0.0, 0.0, 1.0]
        ])

        normalized = (points - centroid) * scale
        return normalized, T

    @staticmethod
    def solve_dlt(src_points: np.ndarray, dst_points: np.ndarray) -> Optional[np.ndarray]:
        """
        Estimate a homography with the normalized Direct Linear Transform.

        Works for the minimal four point case and for least squares over any
        larger set.

        Args:
            src_points: (N, 2) source coordinates, N >= 4
            dst_points: (N, 2) destination coordinates

        Returns:
            Optional[np.ndarray]: 3x3 homography with H[2, 2] == 1, or None
            if the system is degenerate
        """
        if len(src_points) < 4 or len(src_points) != len(dst_points):
            return None

        src_norm, T_src = HomographyMath.hartley_normalization(src_points)
        dst_norm, T_dst = HomographyMath.hartley_normalization(dst_points)

        rows = []
        for (x, y), (u, v) in zip(src_norm, dst_norm):
            rows.append([-x, -y, -1.0, 0.0, 0.0, 0.0, u * x, u * y, u])
            rows.append([0.0, 0.0, 0.0, -x, -y, -1.0, v * x, v * y, v])
        A = np.asarray(rows)

        try:
            _, singular_values, Vt = np.linalg.svd(A)
        except np.linalg.LinAlgError:
            return None

        # The minimal system is 8x9 and reports only 8 singular values
        if len(singular_values) < 9:
            singular_values = np.concatenate([singular_values, np.zeros(9 - len(singular_values))])

        # A rank deficiency beyond the expected null space means no unique solution
        if singular_values[7] < 1e-10 * max(singular_values[0], 1e-12):
            return None

        H_norm = Vt[-1].reshape(3, 3)
        H = np.linalg.inv(T_dst) @ H_norm @ T_src

        if not np.all(np.isfinite(H)) or abs(H[2, 2]) < 1e-12:
            return None

        H = H / H[2, 2]
        if abs(np.linalg.det(H)) < 1e-12:
            return None

        return H

    @staticmethod
    def rms(errors: np.ndarray) -> float:
        """Root mean square of a residual vector (0.0 for an empty vector)."""
        if len(errors) == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(errors))))


def format_homography(H: np.ndarray) -> str:
    """
    Render a homography row-major, whitespace separated, one row per line.

    Args:
        H: 3x3 matrix

    Returns:
        str: Text representation
    """
    return "\n".join(" ".join(repr(float(value)) for value in row) for row in np.asarray(H))
