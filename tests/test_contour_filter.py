import cv2
import numpy as np

from src_edge_matching.alignment import AlignmentParameters, ContourFilter


def _contour(points):
    return np.array(points, dtype=np.int32).reshape(-1, 1, 2)


def test_only_contours_larger_than_min_area_survive():
    contour_filter = ContourFilter()
    exactly_min = _contour([[0, 0], [30, 0], [30, 1], [0, 1]])
    above_min = _contour([[0, 0], [31, 0], [31, 1], [0, 1]])
    tiny = _contour([[0, 0], [2, 0], [2, 2]])

    kept = contour_filter.filter_contours([exactly_min, above_min, tiny])

    assert len(kept) == 1
    assert kept[0] is above_min


def test_filter_redraws_kept_contours_only():
    edge_map = np.zeros((60, 80), dtype=np.uint8)
    # 30x2 px blob: contour area 29
    cv2.rectangle(edge_map, (5, 5), (34, 6), 255, thickness=-1)
    # 32x2 px blob: contour area 31
    cv2.rectangle(edge_map, (5, 40), (36, 41), 255, thickness=-1)

    cleaned, found, kept = ContourFilter().filter(edge_map)

    assert (found, kept) == (2, 1)
    assert cleaned.shape == edge_map.shape
    assert not np.any(cleaned[:20, :])
    assert np.any(cleaned[38:44, 5:37])


def test_kept_contours_are_drawn_thick():
    edge_map = np.zeros((60, 60), dtype=np.uint8)
    cv2.rectangle(edge_map, (10, 10), (49, 49), 255, thickness=1)

    cleaned, _, kept = ContourFilter(AlignmentParameters(contour_thickness=3)).filter(edge_map)

    assert kept == 1
    assert cleaned[30, 9] == 255
    assert cleaned[30, 11] == 255
    assert cleaned[30, 30] == 0


def test_empty_edge_map_stays_empty():
    cleaned, found, kept = ContourFilter().filter(np.zeros((30, 30), dtype=np.uint8))

    assert (found, kept) == (0, 0)
    assert not np.any(cleaned)
