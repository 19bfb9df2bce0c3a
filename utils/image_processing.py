"""
Image processing utilities for the edge matching pipeline.

This module provides the buffer checks and channel conversions shared by the
pipeline stages: validation of raw pixel buffers handed over by the image
decoding collaborator, channel normalization and binary map statistics.
"""

import cv2
import numpy as np
from typing import Tuple, Dict, Any

from utils.logger_config import get_logger

logger = get_logger(__name__)


class ImageProcessor:
    """Handles common image buffer operations for edge based alignment."""

    @staticmethod
    def validate_image(image: np.ndarray, image_name: str = "image") -> bool:
        """
        Validate a raw pixel buffer.

        Args:
            image: Image as numpy array (H, W) or (H, W, 3)
            image_name: Name for error messages

        Returns:
            bool: True if valid

        Raises:
            ValueError: If the buffer is missing, empty or malformed
        """
        if image is None:
            raise ValueError(f"{image_name} is None")

        if not isinstance(image, np.ndarray):
            raise ValueError(f"{image_name} must be a numpy array, got {type(image).__name__}")

        if image.ndim not in (2, 3):
            raise ValueError(f"Invalid {image_name} dimensions: {image.shape}")

        if image.size == 0 or image.shape[0] == 0 or image.shape[1] == 0:
            raise ValueError(f"{image_name} is empty: {image.shape}")

        if image.ndim == 3 and image.shape[2] not in (1, 3):
            raise ValueError(f"{image_name} must have 1 or 3 channels, got {image.shape[2]}")

        if image.dtype != np.uint8:
            raise ValueError(f"{image_name} must be 8-bit, got dtype {image.dtype}")

        return True

    @staticmethod
    def get_image_size(image: np.ndarray) -> Tuple[int, int]:
        """Return (width, height) of an image."""
        return image.shape[1], image.shape[0]

    @staticmethod
    def to_color(image: np.ndarray) -> np.ndarray:
        """
        Return a 3-channel BGR version of the image.

        Args:
            image: Grayscale or color image

        Returns:
            np.ndarray: New BGR image
        """
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        if image.shape[2] == 1:
            return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
        return image.copy()

    @staticmethod
    def split_channels(image: np.ndarray) -> Tuple[np.ndarray, ...]:
        """Split an image into single channel planes (a grayscale image is one plane)."""
        if image.ndim == 2:
            return (image,)
        return tuple(cv2.split(image))

    @staticmethod
    def count_foreground(binary_map: np.ndarray) -> int:
        """Count non-zero pixels of a binary map."""
        return int(cv2.countNonZero(binary_map))

    @staticmethod
    def get_image_info(image: np.ndarray) -> Dict[str, Any]:
        """
        Get summary information about an image.

        Args:
            image: Input image

        Returns:
            Dict[str, Any]: Image information
        """
        if image is None:
            return {'valid': False, 'error': 'Image is None'}

        if image.ndim not in (2, 3):
            return {'valid': False, 'error': f'Invalid image dimensions: {image.shape}'}

        info = {
            'valid': True,
            'shape': list(image.shape),
            'dtype': str(image.dtype),
            'height': int(image.shape[0]),
            'width': int(image.shape[1]),
            'channels': 1 if image.ndim == 2 else int(image.shape[2]),
        }

        if image.size > 0:
            info['min_value'] = float(np.min(image))
            info['max_value'] = float(np.max(image))
            info['mean_value'] = float(np.mean(image))

        return info
