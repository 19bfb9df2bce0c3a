"""
Silhouette masks derived from the rendered image.

Only edges near the rendered object's outline are expected to have a
counterpart in the photograph, so the natural edge map is restricted to a
band between the dilated and the eroded silhouette.
"""

import cv2
import numpy as np
from typing import Optional

from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger
from .alignment_result import MaskSet
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class MaskBuilder:
    """Builds the silhouette mask and its dilated / eroded band limits."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def create_kernel(self) -> np.ndarray:
        """Square all-max structuring element."""
        size = self.parameters.morph_kernel_size
        return np.full((size, size), 255, dtype=np.uint8)

    def build_silhouette(self, rendered: np.ndarray) -> np.ndarray:
        """
        Threshold the rendered image into a single channel silhouette.

        A pixel belongs to the silhouette when any of its channels exceeds
        the silhouette threshold.

        Args:
            rendered: Rendered image (H, W, 3) or (H, W)

        Returns:
            np.ndarray: Binary mask (0 / 255)
        """
        silhouette = np.zeros(rendered.shape[:2], dtype=np.uint8)
        for channel in ImageProcessor.split_channels(rendered):
            _, channel_mask = cv2.threshold(
                channel, self.parameters.silhouette_threshold, 255, cv2.THRESH_BINARY
            )
            silhouette = cv2.bitwise_or(silhouette, channel_mask)
        return silhouette

    def build(self, rendered: np.ndarray) -> MaskSet:
        """
        Build the silhouette, dilated and inverted eroded masks.

        Args:
            rendered: Rendered image

        Returns:
            MaskSet: Masks sized like the rendered image
        """
        kernel = self.create_kernel()

        silhouette = self.build_silhouette(rendered)
        dilated = cv2.dilate(silhouette, kernel)

        eroded = cv2.erode(silhouette, kernel)
        _, eroded_inverted = cv2.threshold(
            eroded, self.parameters.erode_invert_threshold, 255, cv2.THRESH_BINARY_INV
        )

        self.logger.debug(f"Masks built: silhouette={ImageProcessor.count_foreground(silhouette)}px, "
                          f"dilated={ImageProcessor.count_foreground(dilated)}px, "
                          f"eroded interior={ImageProcessor.count_foreground(eroded)}px")

        return MaskSet(silhouette=silhouette, dilated=dilated, eroded_inverted=eroded_inverted)
