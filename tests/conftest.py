from __future__ import annotations

import cv2
import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from src_edge_matching.alignment.alignment_result import FeatureSet
from utils.homography_math import HomographyMath

# Descriptor width of AKAZE's full MLDB descriptor (486 bits)
DESCRIPTOR_BYTES = 61

OBJECT_POLYGON = np.array([[40, 30], [120, 40], [135, 110], [70, 130], [30, 90]], dtype=np.int32)


class PairedFeatureExtractor:
    """Feature extractor returning fixed feature sets.

    The alignment engine describes the natural edge map first and the
    rendered edge map second, so calls alternate between the two sets.
    """

    def __init__(self, natural: FeatureSet, rendered: FeatureSet):
        self.natural = natural
        self.rendered = rendered
        self.calls = 0

    def detect_and_compute(self, edge_map):
        self.calls += 1
        return self.natural if self.calls % 2 == 1 else self.rendered


def make_feature_set(points, descriptors) -> FeatureSet:
    keypoints = tuple(cv2.KeyPoint(float(x), float(y), 7.0) for x, y in points)
    return FeatureSet(keypoints=keypoints, descriptors=np.asarray(descriptors, dtype=np.uint8))


@pytest.fixture
def rendered_image():
    """Rendered reference: one bright polygon on black."""
    image = np.zeros((160, 170, 3), dtype=np.uint8)
    cv2.fillPoly(image, [OBJECT_POLYGON], (220, 200, 180))
    return image


@pytest.fixture
def natural_image():
    """Photograph of the same object on a noisy gray background."""
    rng = np.random.default_rng(3)
    image = np.full((160, 170, 3), 70, dtype=np.uint8)
    cv2.fillPoly(image, [OBJECT_POLYGON + np.array([3, -2], dtype=np.int32)], (170, 150, 130))
    noise = rng.integers(-8, 9, size=image.shape)
    return np.clip(image.astype(np.int16) + noise, 0, 255).astype(np.uint8)


@pytest.fixture
def known_homography():
    return np.array([
        [1.05, 0.04, 6.0],
        [-0.03, 0.97, -4.0],
        [1.0e-4, -5.0e-5, 1.0]
    ])


@pytest.fixture
def natural_points():
    return np.array([
        [20.0, 30.0], [150.0, 25.0], [160.0, 140.0], [30.0, 150.0],
        [95.0, 55.0], [65.0, 118.0], [128.0, 92.0], [48.0, 72.0]
    ])


@pytest.fixture
def paired_extractor(known_homography, natural_points):
    """Natural and rendered features related by the known homography, identical descriptors."""
    rng = np.random.default_rng(11)
    descriptors = rng.integers(0, 256, size=(len(natural_points), DESCRIPTOR_BYTES), dtype=np.uint8)
    rendered_points = HomographyMath.apply_homography(known_homography, natural_points)
    return PairedFeatureExtractor(
        make_feature_set(natural_points, descriptors),
        make_feature_set(rendered_points, descriptors.copy())
    )


@pytest.fixture
def feature_set_factory():
    return make_feature_set


@pytest.fixture
def paired_extractor_factory():
    """Build a PairedFeatureExtractor for arbitrary point pairs with shared random descriptors."""
    def factory(natural_pts, rendered_pts, seed=11):
        rng = np.random.default_rng(seed)
        descriptors = rng.integers(0, 256, size=(len(natural_pts), DESCRIPTOR_BYTES), dtype=np.uint8)
        return PairedFeatureExtractor(
            make_feature_set(natural_pts, descriptors),
            make_feature_set(rendered_pts, descriptors.copy())
        )
    return factory
