import numpy as np
import pytest

from utils.homography_math import HomographyMath, format_homography


def test_format_homography_is_row_major_text():
    H = np.array([[1.0, 0.5, -3.25], [0.0, 2.0, 4.0], [0.001, 0.0, 1.0]])

    assert format_homography(H) == "1.0 0.5 -3.25\n0.0 2.0 4.0\n0.001 0.0 1.0"


def test_format_homography_keeps_full_precision():
    text = format_homography(np.eye(3) / 3.0)

    assert float(text.split()[0]) == 1.0 / 3.0


def test_apply_homography_divides_by_w():
    H = np.diag([2.0, 2.0, 2.0])
    points = np.array([[1.0, 2.0], [3.0, -4.0]])

    np.testing.assert_allclose(HomographyMath.apply_homography(H, points), points)


def test_points_mapped_to_infinity_give_infinite_error():
    H = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]])
    errors = HomographyMath.reprojection_errors(H, np.array([[0.0, 5.0], [2.0, 2.0]]), np.zeros((2, 2)))

    assert np.isinf(errors[0])
    assert np.isfinite(errors[1])


def test_validate_points_accepts_opencv_layout():
    points = np.arange(8, dtype=np.float32).reshape(-1, 1, 2)

    validated = HomographyMath.validate_points(points)

    assert validated.shape == (4, 2)
    assert validated.dtype == np.float64


def test_validate_points_rejects_nan():
    with pytest.raises(ValueError):
        HomographyMath.validate_points(np.array([[0.0, np.nan]]))


def test_collinearity_checks():
    line = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [5.0, 5.0]])
    square = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0]])

    assert HomographyMath.all_collinear(line)
    assert not HomographyMath.all_collinear(square)
    assert HomographyMath.has_collinear_triplet(np.vstack([square[:3], [[5.0, 0.0]]]))
    assert not HomographyMath.has_collinear_triplet(square)


def test_solve_dlt_rejects_degenerate_sample():
    src = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])

    assert HomographyMath.solve_dlt(src, src) is None


def test_solve_dlt_least_squares_translation():
    src = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0], [5.0, 3.0]])

    H = HomographyMath.solve_dlt(src, src + [4.0, -2.0])

    np.testing.assert_allclose(H, [[1, 0, 4], [0, 1, -2], [0, 0, 1]], atol=1e-9)


def test_rms_of_empty_vector_is_zero():
    assert HomographyMath.rms(np.array([])) == 0.0
    assert HomographyMath.rms(np.array([3.0, 4.0])) == pytest.approx(np.sqrt(12.5))
