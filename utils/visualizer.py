"""
Visualization utilities for edge based alignment.

This module provides the drawing helpers behind the debug buffers of an
alignment run (match pairing, keypoint markers, projected outlines) and the
saving of those buffers to disk.
"""

import cv2
import numpy as np
from typing import List, Tuple, Dict, Sequence
from pathlib import Path

from utils.image_processing import ImageProcessor
from utils.logger_config import get_logger

logger = get_logger(__name__)


class Colors:
    """Standard colors for visualization."""

    # BGR format for OpenCV
    RED = (0, 0, 255)
    GREEN = (0, 255, 0)
    BLUE = (255, 0, 0)
    YELLOW = (0, 255, 255)
    MAGENTA = (255, 0, 255)
    CYAN = (255, 255, 0)
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)

    INLIER_MATCH = GREEN
    OUTLIER_MATCH = RED
    KEYPOINT = YELLOW
    PROJECTED_OUTLINE = MAGENTA


class MatchVisualizer:
    """Draws keypoints and correspondences between the two edge maps."""

    @staticmethod
    def draw_matches(
        natural_edge: np.ndarray,
        natural_keypoints: Sequence[cv2.KeyPoint],
        rendered_edge: np.ndarray,
        rendered_keypoints: Sequence[cv2.KeyPoint],
        matches: Sequence[cv2.DMatch],
        inlier_mask: np.ndarray = None
    ) -> np.ndarray:
        """
        Side by side composite of the two edge maps with match lines.

        Args:
            natural_edge: Noise removed natural edge map (left)
            natural_keypoints: Keypoints of the natural edge map
            rendered_edge: Rendered edge map (right)
            rendered_keypoints: Keypoints of the rendered edge map
            matches: Accepted matches as cv2.DMatch
            inlier_mask: Optional boolean mask, inliers drawn green and outliers red

        Returns:
            np.ndarray: BGR composite image
        """
        left = ImageProcessor.to_color(natural_edge)
        right = ImageProcessor.to_color(rendered_edge)

        if inlier_mask is None or len(matches) == 0:
            return cv2.drawMatches(left, list(natural_keypoints), right, list(rendered_keypoints),
                                   list(matches), None)

        inlier_matches = [m for m, keep in zip(matches, inlier_mask) if keep]
        outlier_matches = [m for m, keep in zip(matches, inlier_mask) if not keep]

        composite = cv2.drawMatches(
            left, list(natural_keypoints), right, list(rendered_keypoints), outlier_matches, None,
            matchColor=Colors.OUTLIER_MATCH, singlePointColor=Colors.KEYPOINT
        )
        return cv2.drawMatches(
            left, list(natural_keypoints), right, list(rendered_keypoints), inlier_matches, composite,
            matchColor=Colors.INLIER_MATCH,
            flags=cv2.DrawMatchesFlags_DRAW_OVER_OUTIMG | cv2.DrawMatchesFlags_NOT_DRAW_SINGLE_POINTS
        )

    @staticmethod
    def draw_projected_outline(
        image: np.ndarray,
        H: np.ndarray,
        source_size: Tuple[int, int],
        color: Tuple[int, int, int] = Colors.PROJECTED_OUTLINE,
        thickness: int = 2
    ) -> np.ndarray:
        """
        Draw the outline of the natural image frame projected by H.

        Args:
            image: Image in the rendered frame
            H: 3x3 homography natural -> rendered
            source_size: (width, height) of the natural image
            color: BGR line color
            thickness: Line thickness

        Returns:
            np.ndarray: Copy of image with the outline drawn
        """
        width, height = source_size
        corners = np.float32([[0, 0], [width - 1, 0], [width - 1, height - 1], [0, height - 1]])
        projected = cv2.perspectiveTransform(corners.reshape(-1, 1, 2), H)

        img_copy = ImageProcessor.to_color(image)
        cv2.polylines(img_copy, [np.int32(np.round(projected))], True, color, thickness)
        return img_copy


class VisualizationSaver:
    """Handles saving of visualization results."""

    @staticmethod
    def save_visualization(
        image: np.ndarray,
        output_path: Path,
        filename: str,
        quality: int = 95
    ) -> bool:
        """
        Save visualization image to file.

        Args:
            image: Image to save
            output_path: Output directory path
            filename: Output filename
            quality: JPEG quality (if applicable)

        Returns:
            bool: True if successful
        """
        full_path = output_path / filename
        try:
            output_path.mkdir(parents=True, exist_ok=True)

            if full_path.suffix.lower() in ('.jpg', '.jpeg'):
                success = cv2.imwrite(str(full_path), image, [cv2.IMWRITE_JPEG_QUALITY, quality])
            else:
                success = cv2.imwrite(str(full_path), image)

            if not success:
                logger.error(f"OpenCV could not write visualization: {full_path}")
                return False

            logger.info(f"Saved visualization: {full_path}")
            return True

        except (OSError, cv2.error) as e:
            logger.error(f"Failed to save visualization {full_path}: {e}")
            return False

    @staticmethod
    def save_multiple_visualizations(
        images_and_names: List[Tuple[np.ndarray, str]],
        output_path: Path,
        quality: int = 95
    ) -> Dict[str, bool]:
        """
        Save multiple visualization images.

        Args:
            images_and_names: List of (image, filename) tuples
            output_path: Output directory path
            quality: JPEG quality

        Returns:
            Dict[str, bool]: Results for each file
        """
        results = {}

        for image, filename in images_and_names:
            results[filename] = VisualizationSaver.save_visualization(
                image, output_path, filename, quality
            )

        return results
