"""
Keypoint detection and binary description on edge maps.
"""

import cv2
import numpy as np
from typing import Optional

from utils.logger_config import get_logger
from .alignment_result import FeatureSet
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class AkazeFeatureExtractor:
    """
    AKAZE detector/descriptor (nonlinear diffusion scale space, MLDB binary
    descriptors) applied independently to each edge map.
    """

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

        self.akaze = cv2.AKAZE_create(
            threshold=self.parameters.akaze_threshold,
            nOctaves=self.parameters.akaze_octaves,
            nOctaveLayers=self.parameters.akaze_octave_layers
        )

    @property
    def descriptor_size(self) -> int:
        """Descriptor length in bytes."""
        return int(self.akaze.descriptorSize())

    def detect_and_compute(self, edge_map: np.ndarray) -> FeatureSet:
        """
        Detect keypoints and compute one descriptor per keypoint.

        Args:
            edge_map: Single channel edge map

        Returns:
            FeatureSet: Keypoints and descriptors; empty when nothing is found
        """
        keypoints, descriptors = self.akaze.detectAndCompute(edge_map, None)

        if descriptors is None or len(keypoints) == 0:
            self.logger.debug("No keypoints found on edge map")
            return FeatureSet.empty(self.descriptor_size)

        self.logger.debug(f"Detected {len(keypoints)} keypoints, "
                          f"descriptor size {descriptors.shape[1]} bytes")
        return FeatureSet(keypoints=tuple(keypoints), descriptors=descriptors)
