"""
Exception hierarchy for edge based alignment.

Empty intermediate states (no edges, no keypoints, no matches) are valid
results and never raise; only precondition violations, a homography that
cannot be determined and cooperative cancellation surface as errors.
"""

from typing import Any, Optional


class AlignmentError(Exception):
    """Base class for alignment failures."""

    def __init__(self, message: str, partial_result: Optional[Any] = None):
        self.message = message
        # Intermediate buffers computed before the failure, for diagnostics
        self.partial_result = partial_result
        super().__init__(message)


class PreconditionError(AlignmentError, ValueError):
    """Missing, empty or malformed input image. Fatal for the run."""


class DegenerateGeometryError(AlignmentError):
    """No usable homography: too few correspondences or no supported model."""


class AlignmentCancelled(AlignmentError):
    """The run was cancelled between two pipeline stages."""
