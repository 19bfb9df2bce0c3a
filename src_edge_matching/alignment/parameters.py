"""
Tunable parameters of the edge alignment pipeline.

All thresholds of the pipeline are named here with the values the tool has
always used, so a configuration file can override any of them.
"""

from dataclasses import dataclass, fields, asdict
from typing import Dict, Any, Optional


HOMOGRAPHY_METHODS = ('ransac', 'opencv')


@dataclass(frozen=True)
class AlignmentParameters:
    """Parameters for every stage of the edge alignment pipeline."""

    # Image preprocessor (bilateral filter)
    bilateral_diameter: int = 9
    bilateral_sigma_color: float = 150.0
    bilateral_sigma_space: float = 150.0

    # Mask builder
    silhouette_threshold: int = 1
    morph_kernel_size: int = 21
    erode_invert_threshold: int = 128

    # Edge extractor
    canny_threshold1: float = 50.0
    canny_threshold2: float = 50.0
    contour_thickness: int = 3

    # Contour filter
    min_contour_area: float = 30.0

    # Feature extractor (AKAZE)
    akaze_threshold: float = 0.001
    akaze_octaves: int = 4
    akaze_octave_layers: int = 4

    # Matcher
    max_match_distance: float = 100.0
    max_matches: int = 100
    sort_matches: bool = False

    # Homography estimator
    homography_method: str = 'ransac'
    ransac_reprojection_threshold: float = 3.0
    ransac_max_iterations: int = 2000
    ransac_confidence: float = 0.995
    ransac_seed: Optional[int] = None

    # Compositor
    overlay_alpha: float = 0.5
    border_value: int = 0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate parameter values.

        Raises:
            ValueError: If any parameter is out of range
        """
        if self.bilateral_diameter <= 0:
            raise ValueError(f"bilateral_diameter must be positive, got {self.bilateral_diameter}")
        if self.bilateral_sigma_color <= 0 or self.bilateral_sigma_space <= 0:
            raise ValueError("bilateral sigmas must be positive")
        if not 0 <= self.silhouette_threshold < 255:
            raise ValueError(f"silhouette_threshold must be in [0, 255), got {self.silhouette_threshold}")
        if self.morph_kernel_size <= 0:
            raise ValueError(f"morph_kernel_size must be positive, got {self.morph_kernel_size}")
        if not 0 <= self.erode_invert_threshold <= 255:
            raise ValueError(f"erode_invert_threshold must be in [0, 255], got {self.erode_invert_threshold}")
        if self.canny_threshold1 < 0 or self.canny_threshold2 < 0:
            raise ValueError("canny thresholds must be non-negative")
        if self.contour_thickness <= 0:
            raise ValueError(f"contour_thickness must be positive, got {self.contour_thickness}")
        if self.min_contour_area < 0:
            raise ValueError(f"min_contour_area must be non-negative, got {self.min_contour_area}")
        if self.akaze_threshold <= 0:
            raise ValueError(f"akaze_threshold must be positive, got {self.akaze_threshold}")
        if self.akaze_octaves <= 0 or self.akaze_octave_layers <= 0:
            raise ValueError("akaze octaves and octave layers must be positive")
        if self.max_match_distance <= 0:
            raise ValueError(f"max_match_distance must be positive, got {self.max_match_distance}")
        if self.max_matches <= 0:
            raise ValueError(f"max_matches must be positive, got {self.max_matches}")
        if self.homography_method not in HOMOGRAPHY_METHODS:
            raise ValueError(f"homography_method must be one of {HOMOGRAPHY_METHODS}, "
                             f"got {self.homography_method!r}")
        if self.ransac_reprojection_threshold <= 0:
            raise ValueError("ransac_reprojection_threshold must be positive")
        if self.ransac_max_iterations <= 0:
            raise ValueError(f"ransac_max_iterations must be positive, got {self.ransac_max_iterations}")
        if not 0 < self.ransac_confidence < 1:
            raise ValueError(f"ransac_confidence must be in (0, 1), got {self.ransac_confidence}")
        if not 0 <= self.overlay_alpha <= 1:
            raise ValueError(f"overlay_alpha must be in [0, 1], got {self.overlay_alpha}")
        if not 0 <= self.border_value <= 255:
            raise ValueError(f"border_value must be in [0, 255], got {self.border_value}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'AlignmentParameters':
        """
        Build parameters from a mapping, ignoring keys that are not parameters.

        Boolean flags accept the "True"/"False" strings used in the JSON
        configuration files.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            if key not in known:
                continue
            if key == 'sort_matches' and isinstance(value, str):
                if value not in ("True", "False"):
                    raise ValueError(f"sort_matches must be \"True\" or \"False\", got {value!r}")
                value = value == "True"
            kwargs[key] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Return parameters as a plain dictionary (for metadata)."""
        return asdict(self)
