import json

import numpy as np
import pandas as pd
import pytest

from src_edge_matching.alignment import AlignmentFileManager, AlignmentResult, HomographyResult, Match
from src_edge_matching.alignment.file_manager import CORRESPONDENCE_COLUMNS


@pytest.fixture
def partial_result(feature_set_factory):
    descriptors = np.zeros((3, 61), dtype=np.uint8)
    image = np.full((40, 50, 3), 90, dtype=np.uint8)
    edge = np.zeros((40, 50), dtype=np.uint8)
    return AlignmentResult(
        natural=image,
        rendered=image.copy(),
        natural_edge=edge,
        rendered_edge=edge.copy(),
        noise_removed_edge=edge.copy(),
        natural_features=feature_set_factory([[1, 1], [10, 5], [20, 30]], descriptors),
        rendered_features=feature_set_factory([[2, 1], [11, 5], [45, 2]], descriptors),
        matches=[Match(0, 0, 3.0), Match(1, 1, 12.0), Match(2, 2, 40.0)]
    )


@pytest.fixture
def complete_result(partial_result):
    translation = np.array([[1.0, 0.0, 1.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    partial_result.homography = HomographyResult(
        matrix=translation,
        inlier_mask=np.array([True, True, False]),
        num_inliers=2,
        rms_error=0.0,
        iterations=1,
        threshold=3.0,
        method='ransac'
    )
    partial_result.warped = partial_result.natural.copy()
    return partial_result


def test_correspondence_table(complete_result, tmp_path):
    table = AlignmentFileManager(tmp_path).build_correspondence_table(complete_result)

    assert list(table.columns) == CORRESPONDENCE_COLUMNS
    assert table['inlier'].tolist() == [True, True, False]
    np.testing.assert_allclose(table['reprojection_error'][:2], [0.0, 0.0], atol=1e-12)
    assert table['reprojection_error'][2] > 3.0


def test_correspondence_table_without_homography(partial_result, tmp_path):
    table = AlignmentFileManager(tmp_path).build_correspondence_table(partial_result)

    assert len(table) == 3
    assert not table['inlier'].any()
    assert table['reprojection_error'].isna().all()


def test_save_complete_result(complete_result, tmp_path):
    manager = AlignmentFileManager(tmp_path / "out", tmp_path / "temp")

    results = manager.save_alignment_results(complete_result, "set_1", "case_a", {'status': 'ok'}, 100.0)

    case_dir = tmp_path / "out" / "aligned" / "set_1" / "case_a"
    assert (case_dir / "homography_case_a.csv").exists()
    assert (case_dir / "homography_case_a.txt").read_text().startswith("1.0 0.0 1.0\n")
    assert (case_dir / "natural_case_a.png").exists()
    assert (case_dir / "result_case_a.png").exists()
    assert (case_dir / "projected_outline_case_a.png").exists()
    assert (case_dir / "match_statistics_case_a.png").exists()
    assert (tmp_path / "temp" / "aligned" / "set_1" / "case_a" / "correspondences_case_a.csv").exists()

    saved = pd.read_csv(case_dir / "correspondences_case_a.csv")
    assert saved['distance'].tolist() == [3.0, 12.0, 40.0]

    metadata = json.loads((case_dir / "alignment_metadata_case_a.json").read_text())
    assert metadata == {'status': 'ok'}

    assert all(all(category.values()) for category in results.values())
    assert manager.get_processing_statistics()['failed_operations'] == 0


def test_save_partial_result_skips_missing_outputs(partial_result, tmp_path):
    manager = AlignmentFileManager(tmp_path)

    manager.save_alignment_results(partial_result, "set_1", "case_b", {'status': 'failed'}, 100.0)

    case_dir = tmp_path / "aligned" / "set_1" / "case_b"
    assert not (case_dir / "homography_case_b.csv").exists()
    assert not (case_dir / "result_case_b.png").exists()
    assert (case_dir / "natural_edge_case_b.png").exists()
    assert (case_dir / "correspondences_case_b.csv").exists()
