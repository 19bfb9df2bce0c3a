"""
Cross-checked Hamming matching between natural and rendered descriptors.
"""

import cv2
import numpy as np
from typing import List, Optional, Tuple

from utils.logger_config import get_logger
from .alignment_result import FeatureSet, Match
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class HammingMatcher:
    """
    Brute force matcher keeping only mutual nearest neighbours.

    Matches are filtered by a maximum Hamming distance and capped in number.
    The cap is applied in the order the cross-check matching returns
    (query order) unless ``sort_matches`` is set, in which case matches are
    sorted by ascending distance first.
    """

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def cross_check_match(self, query_descriptors: np.ndarray, train_descriptors: np.ndarray) -> List[Match]:
        """
        Mutual nearest neighbour matching by Hamming distance.

        Args:
            query_descriptors: (N, D) uint8 descriptors of the natural image
            train_descriptors: (M, D) uint8 descriptors of the rendered image

        Returns:
            List[Match]: Matches in query order

        Raises:
            ValueError: If descriptor widths or dtypes differ
        """
        if len(query_descriptors) == 0 or len(train_descriptors) == 0:
            return []

        if query_descriptors.shape[1] != train_descriptors.shape[1]:
            raise ValueError(f"Descriptor sizes differ: query={query_descriptors.shape[1]}, "
                             f"train={train_descriptors.shape[1]}")
        if query_descriptors.dtype != np.uint8 or train_descriptors.dtype != np.uint8:
            raise ValueError("Binary descriptors must be uint8")

        bf_matcher = cv2.BFMatcher(cv2.NORM_HAMMING, crossCheck=True)
        dmatches = bf_matcher.match(query_descriptors, train_descriptors)

        return [Match(m.queryIdx, m.trainIdx, float(m.distance)) for m in dmatches]

    def select_matches(self, matches: List[Match]) -> List[Match]:
        """Apply distance threshold, optional sort and the count cap."""
        accepted = [m for m in matches if m.distance < self.parameters.max_match_distance]
        if self.parameters.sort_matches:
            accepted = sorted(accepted, key=lambda m: m.distance)
        return accepted[:self.parameters.max_matches]

    def match(self, natural: FeatureSet, rendered: FeatureSet) -> List[Match]:
        """
        Match natural (query) features against rendered (train) features.

        Args:
            natural: Features of the noise removed natural edge map
            rendered: Features of the rendered edge map

        Returns:
            List[Match]: Accepted matches
        """
        raw_matches = self.cross_check_match(natural.descriptors, rendered.descriptors)
        accepted = self.select_matches(raw_matches)

        self.logger.debug(f"Matching: {len(raw_matches)} cross-checked, {len(accepted)} accepted "
                          f"(distance < {self.parameters.max_match_distance}, "
                          f"cap {self.parameters.max_matches}, sorted={self.parameters.sort_matches})")
        return accepted

    @staticmethod
    def correspondences(
        matches: List[Match],
        natural: FeatureSet,
        rendered: FeatureSet
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Point pairs of the accepted matches.

        Returns:
            Tuple[np.ndarray, np.ndarray]: (natural points, rendered points), each (N, 2)
        """
        if not matches:
            empty = np.empty((0, 2), dtype=np.float64)
            return empty, empty.copy()

        natural_points = natural.points[[m.query_idx for m in matches]]
        rendered_points = rendered.points[[m.train_idx for m in matches]]
        return natural_points, rendered_points
