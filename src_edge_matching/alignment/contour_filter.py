"""
Removal of small contours from the natural edge map.
"""

import cv2
import numpy as np
from typing import List, Optional, Sequence, Tuple

from utils.logger_config import get_logger
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class ContourFilter:
    """Keeps only continuous structural edges of the natural edge map."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def filter_contours(self, contours: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Contours whose area is strictly greater than the minimum area."""
        min_area = self.parameters.min_contour_area
        return [contour for contour in contours if cv2.contourArea(contour) > min_area]

    def filter(self, edge_map: np.ndarray) -> Tuple[np.ndarray, int, int]:
        """
        Redraw the surviving external contours into a fresh edge map.

        Args:
            edge_map: Masked natural edge map

        Returns:
            Tuple containing:
                - np.ndarray: Noise removed edge map of the same size
                - int: Number of contours found
                - int: Number of contours kept
        """
        contours, _ = cv2.findContours(edge_map, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        kept = self.filter_contours(contours)

        cleaned = np.zeros(edge_map.shape[:2], dtype=np.uint8)
        if kept:
            cv2.drawContours(cleaned, kept, -1, 255, self.parameters.contour_thickness)

        self.logger.debug(f"Contour filter: kept {len(kept)}/{len(contours)} contours "
                          f"with area > {self.parameters.min_contour_area}")
        return cleaned, len(contours), len(kept)
