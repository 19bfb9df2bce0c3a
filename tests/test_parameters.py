import pytest

from src_edge_matching.alignment import AlignmentParameters


def test_defaults():
    parameters = AlignmentParameters()

    assert parameters.bilateral_diameter == 9
    assert parameters.morph_kernel_size == 21
    assert (parameters.canny_threshold1, parameters.canny_threshold2) == (50.0, 50.0)
    assert parameters.min_contour_area == 30.0
    assert parameters.max_match_distance == 100.0
    assert parameters.max_matches == 100
    assert parameters.sort_matches is False
    assert parameters.homography_method == 'ransac'
    assert parameters.ransac_reprojection_threshold == 3.0


def test_from_dict_ignores_unrelated_keys():
    parameters = AlignmentParameters.from_dict({
        'max_matches': 40,
        'save_path_result': 'result/x',
        'case_name': 'x'
    })

    assert parameters.max_matches == 40


@pytest.mark.parametrize("raw, expected", [("True", True), ("False", False), (True, True)])
def test_from_dict_reads_boolean_strings(raw, expected):
    assert AlignmentParameters.from_dict({'sort_matches': raw}).sort_matches is expected


def test_to_dict_round_trips():
    parameters = AlignmentParameters(ransac_seed=5, overlay_alpha=0.25)

    assert AlignmentParameters.from_dict(parameters.to_dict()) == parameters


@pytest.mark.parametrize("overrides", [
    {'max_matches': 0},
    {'morph_kernel_size': 0},
    {'homography_method': 'lmeds'},
    {'ransac_confidence': 1.0},
    {'overlay_alpha': 1.5},
    {'min_contour_area': -1},
])
def test_invalid_values_raise(overrides):
    with pytest.raises(ValueError):
        AlignmentParameters(**overrides)


def test_parameters_are_immutable():
    with pytest.raises(AttributeError):
        AlignmentParameters().max_matches = 5


@pytest.mark.parametrize("raw", ["true", "1", "yes", ""])
def test_from_dict_rejects_other_boolean_strings(raw):
    with pytest.raises(ValueError, match="sort_matches"):
        AlignmentParameters.from_dict({'sort_matches': raw})
