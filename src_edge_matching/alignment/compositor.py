"""
Warping of the natural image into the rendered frame and overlay blending.
"""

import cv2
import numpy as np
from typing import Optional, Tuple

from utils.homography_math import HomographyMath
from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger
from .parameters import AlignmentParameters

logger = get_logger(__name__)


class Compositor:
    """Applies the fitted homography and builds inspection overlays."""

    def __init__(self, parameters: Optional[AlignmentParameters] = None):
        self.parameters = parameters or AlignmentParameters()
        self.logger = get_logger(__name__)

    def warp(self, natural: np.ndarray, H: np.ndarray, output_size: Tuple[int, int]) -> np.ndarray:
        """
        Resample the natural image into the rendered image's frame.

        Args:
            natural: Preprocessed natural image
            H: 3x3 homography natural -> rendered
            output_size: (width, height) of the rendered image

        Returns:
            np.ndarray: Warped image; samples from outside the source are
            filled with the border value
        """
        HomographyMath.validate_homography(H)

        channels = 1 if natural.ndim == 2 else natural.shape[2]
        border_value = (self.parameters.border_value,) * max(channels, 1)

        warped = cv2.warpPerspective(
            natural,
            H,
            tuple(int(v) for v in output_size),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=border_value
        )

        self.logger.debug(f"Warped natural image {ImageProcessor.get_image_size(natural)} into {tuple(output_size)}")
        return warped

    def overlay(self, base: np.ndarray, top: np.ndarray) -> np.ndarray:
        """
        Alpha blend two images in the base image's frame.

        The top image is converted to the base image's channel layout and,
        when sized differently, resized to it.

        Args:
            base: Image whose frame is kept (the rendered image)
            top: Image blended over it

        Returns:
            np.ndarray: Blended image
        """
        if base.ndim == 3:
            top = ImageProcessor.to_color(top)
        elif top.ndim == 3:
            top = cv2.cvtColor(top, cv2.COLOR_BGR2GRAY)

        if top.shape[:2] != base.shape[:2]:
            top = cv2.resize(top, (base.shape[1], base.shape[0]), interpolation=cv2.INTER_LINEAR)

        alpha = self.parameters.overlay_alpha
        return cv2.addWeighted(base, 1.0 - alpha, top, alpha, 0)
