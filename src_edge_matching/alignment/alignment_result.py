"""
Data structures passed between the edge alignment stages.

The pipeline hands typed values from one stage to the next instead of
sharing buffers, and gathers every intermediate buffer in one
AlignmentResult for inspection by the host harness.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Any

import cv2
import numpy as np


@dataclass
class MaskSet:
    """Masks derived from the rendered image, used only during edge extraction."""

    silhouette: np.ndarray
    dilated: np.ndarray
    eroded_inverted: np.ndarray


@dataclass
class FeatureSet:
    """Keypoints found on one edge map and their binary descriptors."""

    keypoints: Tuple[cv2.KeyPoint, ...]
    descriptors: np.ndarray

    def __len__(self) -> int:
        return len(self.keypoints)

    @property
    def points(self) -> np.ndarray:
        """(N, 2) float64 keypoint positions."""
        if not self.keypoints:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([kp.pt for kp in self.keypoints], dtype=np.float64)

    @classmethod
    def empty(cls, descriptor_size: int = 0) -> 'FeatureSet':
        return cls(keypoints=(), descriptors=np.empty((0, descriptor_size), dtype=np.uint8))


@dataclass(frozen=True)
class Match:
    """Correspondence between a natural (query) and a rendered (train) keypoint."""

    query_idx: int
    train_idx: int
    distance: float

    def to_dmatch(self) -> cv2.DMatch:
        return cv2.DMatch(self.query_idx, self.train_idx, float(self.distance))


@dataclass(frozen=True)
class HomographyResult:
    """Robustly fitted homography mapping natural coordinates to rendered ones."""

    matrix: np.ndarray
    inlier_mask: np.ndarray
    num_inliers: int
    rms_error: float
    iterations: int
    threshold: float
    method: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matrix': self.matrix.tolist(),
            'num_inliers': int(self.num_inliers),
            'num_correspondences': int(len(self.inlier_mask)),
            'rms_error': float(self.rms_error),
            'iterations': int(self.iterations),
            'threshold': float(self.threshold),
            'method': self.method
        }


@dataclass
class AlignmentResult:
    """
    Every buffer produced by one alignment run.

    Fields after the inputs are filled stage by stage; when a run fails the
    fields of stages that did not run stay None.
    """

    # Inputs after preprocessing
    natural: np.ndarray
    rendered: np.ndarray

    # Edge maps
    natural_edge: Optional[np.ndarray] = None
    rendered_edge: Optional[np.ndarray] = None
    noise_removed_edge: Optional[np.ndarray] = None

    # Features and matches
    natural_features: Optional[FeatureSet] = None
    rendered_features: Optional[FeatureSet] = None
    matches: List[Match] = field(default_factory=list)
    matching_debug: Optional[np.ndarray] = None

    # Geometry and composites
    homography: Optional[HomographyResult] = None
    warped: Optional[np.ndarray] = None
    overlay_before: Optional[np.ndarray] = None
    overlay_after: Optional[np.ndarray] = None

    # Stage statistics for logging and metadata
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.homography is not None

    def debug_images(self) -> Dict[str, np.ndarray]:
        """Intermediate buffers available for display or saving, keyed by name."""
        candidates = {
            'natural': self.natural,
            'rendered': self.rendered,
            'natural_edge': self.natural_edge,
            'rendered_edge': self.rendered_edge,
            'noise_removed_contour': self.noise_removed_edge,
            'matching_debug': self.matching_debug,
            'result': self.warped,
            'overlay_before': self.overlay_before,
            'overlay_after': self.overlay_after,
        }
        return {name: image for name, image in candidates.items() if image is not None}
