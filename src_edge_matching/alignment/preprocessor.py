"""
Denoising of the photographed (natural) image before edge detection.
"""

import cv2
import numpy as np
from typing import Optional

from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger
from .parameters import AlignmentParameters
from ..errors import PreconditionError

logger = get_logger(__name__)


class ImagePreprocessor:
    """Edge preserving smoothing that removes sensor noise from the natural image."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Apply a bilateral filter to the image.

        Args:
            image: Natural image (H, W, 3) BGR or (H, W) grayscale

        Returns:
            np.ndarray: Smoothed image of the same size and channel count

        Raises:
            PreconditionError: If the image is missing or empty
        """
        try:
            ImageProcessor.validate_image(image, "natural image")
        except ValueError as e:
            raise PreconditionError(str(e)) from e

        smoothed = cv2.bilateralFilter(
            image,
            self.parameters.bilateral_diameter,
            self.parameters.bilateral_sigma_color,
            self.parameters.bilateral_sigma_space
        )

        self.logger.debug(f"Bilateral filter applied: d={self.parameters.bilateral_diameter}, "
                          f"sigmaColor={self.parameters.bilateral_sigma_color}, "
                          f"sigmaSpace={self.parameters.bilateral_sigma_space}")
        return smoothed
