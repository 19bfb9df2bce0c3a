"""
Edge based alignment engine.

This module runs the complete alignment of a rendered reference image and a
photograph of the same object: preprocessing, silhouette masks, edge maps,
contour noise removal, AKAZE features, cross-checked matching, robust
homography estimation and compositing.
"""

import time
import numpy as np
from typing import Callable, Optional

from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger
from utils.visualizer import MatchVisualizer
from .alignment_result import AlignmentResult
from .parameters import AlignmentParameters
from .preprocessor import ImagePreprocessor
from .mask_builder import MaskBuilder
from .edge_extractor import EdgeExtractor
from .contour_filter import ContourFilter
from .feature_extractor import AkazeFeatureExtractor
from .matcher import HammingMatcher
from .homography_estimator import HomographyEstimator
from .compositor import Compositor
from ..errors import AlignmentCancelled, DegenerateGeometryError, PreconditionError

logger = get_logger(__name__)


class EdgeAlignmentEngine:
    """Core engine aligning a natural image to a rendered image."""

    def __init__(
        self,
        parameters: Optional[AlignmentParameters] = None,
        feature_extractor=None,
        matcher: Optional[HammingMatcher] = None,
        estimator: Optional[HomographyEstimator] = None
    ):
        """
        Initialize alignment engine.

        Args:
            parameters: Pipeline parameters (library defaults when omitted)
            feature_extractor: Object with ``detect_and_compute(edge_map)``
                returning a FeatureSet (AKAZE by default)
            matcher: Descriptor matcher
            estimator: Homography estimator
        """
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

        self.preprocessor = ImagePreprocessor(self.parameters)
        self.mask_builder = MaskBuilder(self.parameters)
        self.edge_extractor = EdgeExtractor(self.parameters)
        self.contour_filter = ContourFilter(self.parameters)
        self.feature_extractor = feature_extractor or AkazeFeatureExtractor(self.parameters)
        self.matcher = matcher or HammingMatcher(self.parameters)
        self.estimator = estimator or HomographyEstimator(self.parameters)
        self.compositor = Compositor(self.parameters)

    @staticmethod
    def _check_cancelled(cancel_check: Optional[Callable[[], bool]], stage: str,
                         result: Optional[AlignmentResult]) -> None:
        if cancel_check is not None and cancel_check():
            raise AlignmentCancelled(f"Alignment cancelled before {stage}", partial_result=result)

    @staticmethod
    def _validate_inputs(natural: np.ndarray, rendered: np.ndarray) -> None:
        try:
            ImageProcessor.validate_image(natural, "natural image")
            ImageProcessor.validate_image(rendered, "rendered image")
        except ValueError as e:
            raise PreconditionError(str(e)) from e

    def align(
        self,
        natural: np.ndarray,
        rendered: np.ndarray,
        cancel_check: Optional[Callable[[], bool]] = None
    ) -> AlignmentResult:
        """
        Align the natural image to the rendered image.

        Args:
            natural: Photograph (H, W, 3) BGR uint8
            rendered: Rendered reference (H', W', 3) BGR uint8
            cancel_check: Optional callable polled between stages; returning
                True aborts the run with AlignmentCancelled

        Returns:
            AlignmentResult: Homography and all intermediate buffers

        Raises:
            PreconditionError: If an input image is missing or empty
            DegenerateGeometryError: If no homography can be determined; the
                exception's ``partial_result`` holds the buffers computed so far
            AlignmentCancelled: If cancel_check requested cancellation
        """
        self._validate_inputs(natural, rendered)
        start_time = time.perf_counter()

        self._check_cancelled(cancel_check, "preprocessing", None)
        preprocessed = self.preprocessor.process(natural)
        result = AlignmentResult(natural=preprocessed, rendered=rendered.copy())
        stats = result.statistics

        self._check_cancelled(cancel_check, "edge extraction", result)
        self._extract_edges(result)
        stats['natural_edge_pixels'] = ImageProcessor.count_foreground(result.natural_edge)
        stats['rendered_edge_pixels'] = ImageProcessor.count_foreground(result.rendered_edge)
        self.logger.info(f"Edge maps: natural={stats['natural_edge_pixels']}px, "
                         f"rendered={stats['rendered_edge_pixels']}px")

        self._check_cancelled(cancel_check, "contour filtering", result)
        result.noise_removed_edge, stats['contours_found'], stats['contours_kept'] = \
            self.contour_filter.filter(result.natural_edge)
        self.logger.info(f"Contours kept: {stats['contours_kept']}/{stats['contours_found']}")

        self._check_cancelled(cancel_check, "feature extraction", result)
        result.natural_features = self.feature_extractor.detect_and_compute(result.noise_removed_edge)
        result.rendered_features = self.feature_extractor.detect_and_compute(result.rendered_edge)
        stats['natural_keypoints'] = len(result.natural_features)
        stats['rendered_keypoints'] = len(result.rendered_features)
        self.logger.info(f"Keypoints: natural={stats['natural_keypoints']}, "
                         f"rendered={stats['rendered_keypoints']}")

        self._check_cancelled(cancel_check, "matching", result)
        result.matches = self.matcher.match(result.natural_features, result.rendered_features)
        stats['matches'] = len(result.matches)
        self.logger.info(f"Accepted matches: {stats['matches']}")

        natural_points, rendered_points = HammingMatcher.correspondences(
            result.matches, result.natural_features, result.rendered_features
        )

        self._check_cancelled(cancel_check, "homography estimation", result)
        try:
            result.homography = self.estimator.estimate(natural_points, rendered_points)
        except DegenerateGeometryError as e:
            result.matching_debug = self._draw_matches(result)
            stats['elapsed_seconds'] = time.perf_counter() - start_time
            self.logger.error(f"Homography estimation failed: {e}")
            raise DegenerateGeometryError(e.message, partial_result=result) from e

        stats['inliers'] = result.homography.num_inliers
        stats['rms_error'] = result.homography.rms_error
        result.matching_debug = self._draw_matches(result)

        self._check_cancelled(cancel_check, "compositing", result)
        rendered_size = ImageProcessor.get_image_size(rendered)
        result.warped = self.compositor.warp(preprocessed, result.homography.matrix, rendered_size)
        result.overlay_before = self.compositor.overlay(result.rendered, preprocessed)
        result.overlay_after = self.compositor.overlay(result.rendered, result.warped)

        stats['elapsed_seconds'] = time.perf_counter() - start_time
        self.logger.info(f"Alignment finished in {stats['elapsed_seconds']:.3f}s")
        return result

    def _extract_edges(self, result: AlignmentResult) -> None:
        """Rendered and natural edge maps; the masks live only inside this call."""
        masks = self.mask_builder.build(result.rendered)
        result.rendered_edge = self.edge_extractor.extract_rendered(masks.silhouette)
        result.natural_edge = self.edge_extractor.extract_natural(result.natural, masks)

    def _draw_matches(self, result: AlignmentResult) -> np.ndarray:
        inlier_mask = result.homography.inlier_mask if result.homography is not None else None
        return MatchVisualizer.draw_matches(
            result.noise_removed_edge,
            result.natural_features.keypoints,
            result.rendered_edge,
            result.rendered_features.keypoints,
            [m.to_dmatch() for m in result.matches],
            inlier_mask
        )
