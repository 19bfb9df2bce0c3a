import numpy as np
import pytest

from src_edge_matching.alignment import AlignmentParameters, EdgeAlignmentEngine
from src_edge_matching.errors import (
    AlignmentCancelled,
    AlignmentError,
    DegenerateGeometryError,
    PreconditionError,
)
from utils.homography_math import HomographyMath


def test_align_recovers_homography_from_matched_features(
        natural_image, rendered_image, paired_extractor, known_homography, natural_points):
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0), feature_extractor=paired_extractor)

    result = engine.align(natural_image, rendered_image)

    assert result.succeeded
    assert result.homography.matrix[2, 2] == pytest.approx(1.0)
    assert result.homography.num_inliers == len(natural_points)

    expected = HomographyMath.apply_homography(known_homography, natural_points)
    projected = HomographyMath.apply_homography(result.homography.matrix, natural_points)
    assert np.max(np.linalg.norm(projected - expected, axis=1)) < 1.0


def test_align_fills_every_buffer(natural_image, rendered_image, paired_extractor):
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0), feature_extractor=paired_extractor)

    result = engine.align(natural_image, rendered_image)

    height, width = rendered_image.shape[:2]
    assert result.warped.shape == rendered_image.shape
    assert result.overlay_before.shape == rendered_image.shape
    assert result.overlay_after.shape == rendered_image.shape
    assert result.natural_edge.shape == (height, width)
    assert result.noise_removed_edge.shape == (height, width)
    assert result.matching_debug.ndim == 3
    assert set(result.debug_images()) == {
        'natural', 'rendered', 'natural_edge', 'rendered_edge', 'noise_removed_contour',
        'matching_debug', 'result', 'overlay_before', 'overlay_after'
    }


def test_align_records_statistics(natural_image, rendered_image, paired_extractor, natural_points):
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0), feature_extractor=paired_extractor)

    stats = engine.align(natural_image, rendered_image).statistics

    assert stats['natural_keypoints'] == len(natural_points)
    assert stats['rendered_keypoints'] == len(natural_points)
    assert stats['matches'] == len(natural_points)
    assert stats['inliers'] == len(natural_points)
    assert stats['contours_kept'] <= stats['contours_found']
    assert stats['elapsed_seconds'] >= 0.0


def test_black_images_fail_with_partial_result():
    black = np.zeros((120, 120, 3), dtype=np.uint8)
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0))

    with pytest.raises(DegenerateGeometryError) as excinfo:
        engine.align(black, black.copy())

    partial = excinfo.value.partial_result
    assert partial is not None
    assert not partial.succeeded
    assert not np.any(partial.natural_edge)
    assert not np.any(partial.rendered_edge)
    assert not np.any(partial.noise_removed_edge)
    assert len(partial.natural_features) == 0
    assert partial.matches == []
    assert partial.matching_debug is not None
    assert partial.warped is None


@pytest.mark.parametrize("bad_input", [
    None,
    np.zeros((0, 0, 3), dtype=np.uint8),
    np.zeros((20, 20, 3), dtype=np.float32),
])
def test_invalid_input_raises_precondition_error(rendered_image, bad_input):
    engine = EdgeAlignmentEngine()

    with pytest.raises(PreconditionError):
        engine.align(bad_input, rendered_image)

    with pytest.raises(ValueError):
        engine.align(rendered_image, bad_input)


def test_cancel_before_start_has_no_partial_result(natural_image, rendered_image):
    engine = EdgeAlignmentEngine()

    with pytest.raises(AlignmentCancelled) as excinfo:
        engine.align(natural_image, rendered_image, cancel_check=lambda: True)

    assert excinfo.value.partial_result is None
    assert isinstance(excinfo.value, AlignmentError)


def test_cancel_between_stages_keeps_finished_buffers(natural_image, rendered_image):
    polls = []

    def cancel_on_third_poll():
        polls.append(True)
        return len(polls) >= 3

    engine = EdgeAlignmentEngine()

    with pytest.raises(AlignmentCancelled) as excinfo:
        engine.align(natural_image, rendered_image, cancel_check=cancel_on_third_poll)

    partial = excinfo.value.partial_result
    assert partial.natural_edge is not None
    assert partial.rendered_edge is not None
    assert partial.noise_removed_edge is None
    assert partial.homography is None


def test_four_square_corners_map_exactly(natural_image, rendered_image, paired_extractor_factory):
    square = np.array([[30.0, 30.0], [130.0, 30.0], [130.0, 130.0], [30.0, 130.0]])
    homography = np.array([
        [0.9, 0.1, 12.0],
        [-0.05, 1.1, -6.0],
        [2.0e-4, 1.0e-4, 1.0]
    ])
    target = HomographyMath.apply_homography(homography, square)
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0),
                                 feature_extractor=paired_extractor_factory(square, target))

    result = engine.align(natural_image, rendered_image)

    assert result.homography.num_inliers == 4
    projected = HomographyMath.apply_homography(result.homography.matrix, square)
    assert np.max(np.linalg.norm(projected - target, axis=1)) < 1.0


def test_identical_images_keep_rendered_frame(rendered_image):
    engine = EdgeAlignmentEngine(AlignmentParameters(ransac_seed=0))

    try:
        result = engine.align(rendered_image, rendered_image.copy())
    except DegenerateGeometryError as error:
        result = error.partial_result
        assert result is not None
        assert result.warped is None
    else:
        assert result.succeeded
        assert np.all(np.isfinite(result.homography.matrix))
        assert result.warped.shape == rendered_image.shape

    height, width = rendered_image.shape[:2]
    assert result.natural_edge.shape == (height, width)
    assert result.rendered_edge.shape == (height, width)
    assert np.any(result.rendered_edge)
