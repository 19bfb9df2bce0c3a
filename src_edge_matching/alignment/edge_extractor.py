"""
Edge map extraction for the rendered and the natural image.
"""

import cv2
import numpy as np
from typing import Optional

from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger
from .alignment_result import MaskSet
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class EdgeExtractor:
    """Computes comparable single channel edge maps for both images."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def _canny(self, image: np.ndarray) -> np.ndarray:
        return cv2.Canny(image, self.parameters.canny_threshold1, self.parameters.canny_threshold2)

    def extract_rendered(self, silhouette: np.ndarray) -> np.ndarray:
        """
        Edge map of the rendered image.

        Canny edges of the silhouette, with the external contours redrawn
        thick to close gaps in the outline.

        Args:
            silhouette: Silhouette mask from MaskBuilder

        Returns:
            np.ndarray: Rendered edge map (0 / 255)
        """
        edge = self._canny(silhouette)

        contours, _ = cv2.findContours(edge, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        cv2.drawContours(edge, contours, -1, 255, self.parameters.contour_thickness)

        self.logger.debug(f"Rendered edge: {len(contours)} external contours, "
                          f"{ImageProcessor.count_foreground(edge)} edge pixels")
        return edge

    def extract_natural(self, natural: np.ndarray, masks: MaskSet) -> np.ndarray:
        """
        Edge map of the natural image, restricted to the silhouette band.

        Each color channel is edge detected separately and the results are
        merged, then everything outside the dilated silhouette or inside the
        eroded silhouette is dropped.

        Args:
            natural: Preprocessed natural image
            masks: Masks built from the rendered image

        Returns:
            np.ndarray: Natural edge map (0 / 255)

        When the natural image is sized differently from the rendered one,
        the band masks are resampled (nearest neighbour) to its size.
        """
        dilated, eroded_inverted = masks.dilated, masks.eroded_inverted
        if natural.shape[:2] != dilated.shape[:2]:
            size = (natural.shape[1], natural.shape[0])
            dilated = cv2.resize(dilated, size, interpolation=cv2.INTER_NEAREST)
            eroded_inverted = cv2.resize(eroded_inverted, size, interpolation=cv2.INTER_NEAREST)
            self.logger.warning(f"Natural image size {size} differs from rendered image size "
                                f"{masks.dilated.shape[1::-1]}, band masks resampled")

        edge = np.zeros(natural.shape[:2], dtype=np.uint8)
        for channel in ImageProcessor.split_channels(natural):
            edge = cv2.bitwise_or(edge, self._canny(channel))

        unmasked_pixels = ImageProcessor.count_foreground(edge)

        edge = cv2.bitwise_and(edge, dilated)
        edge = cv2.bitwise_and(edge, eroded_inverted)

        self.logger.debug(f"Natural edge: {unmasked_pixels} edge pixels before masking, "
                          f"{ImageProcessor.count_foreground(edge)} inside the silhouette band")
        return edge
