"""
Robust homography estimation from point correspondences.

The estimator fits the projective transform that maps natural image
coordinates onto rendered image coordinates. Two methods are available:

- ``ransac``: seeded random sample consensus on minimal four point samples
  solved with the normalized DLT, followed by a least squares refit on all
  inliers of the best supported model.
- ``opencv``: ``cv2.findHomography`` with its RANSAC implementation.

Any situation where no transform can be determined raises
DegenerateGeometryError instead of returning a placeholder matrix.
"""

import math
import cv2
import numpy as np
from typing import Optional, Tuple

from utils.homography_math import HomographyMath
from utils.logger_config import get_logger
from .alignment_result import HomographyResult
from .parameters import AlignmentParameters
from ..errors import DegenerateGeometryError

logger = get_logger(__name__)

MIN_CORRESPONDENCES = 4
COLLINEARITY_TOLERANCE = 1e-6


class HomographyEstimator:
    """Fits a 3x3 homography under outlier contaminated correspondences."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def estimate(self, src_points: np.ndarray, dst_points: np.ndarray) -> HomographyResult:
        """
        Estimate the homography mapping src_points onto dst_points.

        Args:
            src_points: (N, 2) natural image points
            dst_points: (N, 2) rendered image points

        Returns:
            HomographyResult: Normalized matrix (H[2, 2] == 1) with inlier data

        Raises:
            DegenerateGeometryError: If fewer than four correspondences are
                given, the points are collinear, or no model is supported
        """
        try:
            src = HomographyMath.validate_points(src_points, "src_points")
            dst = HomographyMath.validate_points(dst_points, "dst_points")
        except ValueError as e:
            raise DegenerateGeometryError(str(e)) from e

        if len(src) != len(dst):
            raise DegenerateGeometryError(f"Correspondence count mismatch: "
                                          f"{len(src)} source vs {len(dst)} destination points")

        if len(src) < MIN_CORRESPONDENCES:
            raise DegenerateGeometryError(f"At least {MIN_CORRESPONDENCES} correspondences are "
                                          f"required, got {len(src)}")

        if (HomographyMath.all_collinear(src, COLLINEARITY_TOLERANCE) or
                HomographyMath.all_collinear(dst, COLLINEARITY_TOLERANCE)):
            raise DegenerateGeometryError("Correspondences are collinear")

        if self.parameters.homography_method == 'opencv':
            result = self._estimate_opencv(src, dst)
        else:
            result = self._estimate_ransac(src, dst)

        self.logger.info(f"Homography estimated ({result.method}): {result.num_inliers}/{len(src)} "
                         f"inliers, rms={result.rms_error:.3f}px, iterations={result.iterations}")
        return result

    def _required_iterations(self, inlier_ratio: float, current_limit: int) -> int:
        """
        Number of samples needed to draw one all-inlier sample with the
        configured confidence.
        """
        p_good = inlier_ratio ** MIN_CORRESPONDENCES
        if p_good >= 1.0:
            return 1
        if p_good <= 0.0:
            return current_limit

        numerator = math.log(1.0 - self.parameters.ransac_confidence)
        denominator = math.log(1.0 - p_good)
        if denominator >= 0.0:
            return current_limit
        return min(current_limit, max(1, int(math.ceil(numerator / denominator))))

    def _is_degenerate_sample(self, src_sample: np.ndarray, dst_sample: np.ndarray) -> bool:
        return (HomographyMath.has_collinear_triplet(src_sample, COLLINEARITY_TOLERANCE) or
                HomographyMath.has_collinear_triplet(dst_sample, COLLINEARITY_TOLERANCE))

    def _score(self, H: np.ndarray, src: np.ndarray, dst: np.ndarray) -> Tuple[np.ndarray, float]:
        """Inlier mask and summed inlier error of a model."""
        errors = HomographyMath.reprojection_errors(H, src, dst)
        mask = errors <= self.parameters.ransac_reprojection_threshold
        return mask, float(np.sum(errors[mask]))

    def _estimate_ransac(self, src: np.ndarray, dst: np.ndarray) -> HomographyResult:
        rng = np.random.default_rng(self.parameters.ransac_seed)
        n = len(src)

        best_H = None
        best_mask = None
        best_count = 0
        best_error = np.inf

        max_iterations = self.parameters.ransac_max_iterations
        iterations = 0

        while iterations < max_iterations:
            iterations += 1
            sample = rng.choice(n, MIN_CORRESPONDENCES, replace=False)
            src_sample, dst_sample = src[sample], dst[sample]

            if self._is_degenerate_sample(src_sample, dst_sample):
                continue

            H = HomographyMath.solve_dlt(src_sample, dst_sample)
            if H is None:
                continue

            mask, error = self._score(H, src, dst)
            count = int(np.count_nonzero(mask))

            if count > best_count or (count == best_count and count > 0 and error < best_error):
                best_H, best_mask, best_count, best_error = H, mask, count, error
                max_iterations = self._required_iterations(count / n, max_iterations)

        if best_H is None or best_count < MIN_CORRESPONDENCES:
            raise DegenerateGeometryError(f"No homography supported by at least {MIN_CORRESPONDENCES} "
                                          f"inliers after {iterations} iterations "
                                          f"(best support: {best_count})")

        self.logger.debug(f"RANSAC best minimal model: {best_count}/{n} inliers "
                          f"after {iterations} iterations")

        H_final, mask_final = best_H, best_mask
        H_refit = HomographyMath.solve_dlt(src[best_mask], dst[best_mask])
        if H_refit is not None:
            mask_refit, _ = self._score(H_refit, src, dst)
            if np.count_nonzero(mask_refit) >= best_count:
                H_final, mask_final = H_refit, mask_refit
            else:
                self.logger.debug("Least squares refit lost support, keeping minimal model")
        else:
            self.logger.debug("Least squares refit degenerate, keeping minimal model")

        return self._build_result(H_final, mask_final, src, dst, iterations, 'ransac')

    def _estimate_opencv(self, src: np.ndarray, dst: np.ndarray) -> HomographyResult:
        if self.parameters.ransac_seed is not None:
            cv2.setRNGSeed(int(self.parameters.ransac_seed))

        H, mask = cv2.findHomography(
            src.reshape(-1, 1, 2),
            dst.reshape(-1, 1, 2),
            cv2.RANSAC,
            self.parameters.ransac_reprojection_threshold,
            maxIters=self.parameters.ransac_max_iterations,
            confidence=self.parameters.ransac_confidence
        )

        if H is None or H.size == 0 or mask is None:
            raise DegenerateGeometryError("cv2.findHomography found no supported model")

        inlier_mask = mask.ravel().astype(bool)
        if np.count_nonzero(inlier_mask) < MIN_CORRESPONDENCES:
            raise DegenerateGeometryError("cv2.findHomography returned fewer than "
                                          f"{MIN_CORRESPONDENCES} inliers")

        return self._build_result(H, inlier_mask, src, dst, self.parameters.ransac_max_iterations, 'opencv')

    def _build_result(
        self,
        H: np.ndarray,
        inlier_mask: np.ndarray,
        src: np.ndarray,
        dst: np.ndarray,
        iterations: int,
        method: str
    ) -> HomographyResult:
        try:
            H = HomographyMath.normalize_homography(np.asarray(H, dtype=np.float64))
            HomographyMath.validate_homography(H)
        except ValueError as e:
            raise DegenerateGeometryError(f"Estimated homography is unusable: {e}") from e

        errors = HomographyMath.reprojection_errors(H, src[inlier_mask], dst[inlier_mask])

        return HomographyResult(
            matrix=H,
            inlier_mask=inlier_mask,
            num_inliers=int(np.count_nonzero(inlier_mask)),
            rms_error=HomographyMath.rms(errors),
            iterations=iterations,
            threshold=self.parameters.ransac_reprojection_threshold,
            method=method
        )
