"""
Edge based alignment module.

This module contains the pipeline stages that align a rendered reference
image to a photograph: masks, edge maps, contour filtering, AKAZE features,
cross-checked matching, robust homography estimation and compositing.
"""

from .parameters import AlignmentParameters
from .alignment_result import AlignmentResult, FeatureSet, HomographyResult, Match, MaskSet
from .preprocessor import ImagePreprocessor
from .mask_builder import MaskBuilder
from .edge_extractor import EdgeExtractor
from .contour_filter import ContourFilter
from .feature_extractor import AkazeFeatureExtractor
from .matcher import HammingMatcher
from .homography_estimator import HomographyEstimator
from .compositor import Compositor
from .engine import EdgeAlignmentEngine
from .file_manager import AlignmentFileManager

__all__ = [
    'AlignmentParameters',
    'AlignmentResult',
    'FeatureSet',
    'HomographyResult',
    'Match',
    'MaskSet',
    'ImagePreprocessor',
    'MaskBuilder',
    'EdgeExtractor',
    'ContourFilter',
    'AkazeFeatureExtractor',
    'HammingMatcher',
    'HomographyEstimator',
    'Compositor',
    'EdgeAlignmentEngine',
    'AlignmentFileManager'
]
