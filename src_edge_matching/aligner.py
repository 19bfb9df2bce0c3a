"""
Batch edge alignment.

This module runs the edge alignment engine over every case folder of the
configured image set folder. A case folder holds one natural photograph and
one rendered image; for each case the homography is printed and all results
are saved.
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Dict, Any, Tuple

from .base import BaseProcessor
from .alignment.engine import EdgeAlignmentEngine
from .alignment.alignment_result import AlignmentResult
from .alignment.file_manager import AlignmentFileManager
from .errors import AlignmentError, PreconditionError

from utils.file_operations import MetadataSaver
from utils.homography_math import format_homography
from utils.image_processing import ImageProcessor


class EdgeAligner(BaseProcessor):
    """
    Main alignment coordinator class.

    Loads each natural/rendered image pair, runs the EdgeAlignmentEngine and
    hands the results to the AlignmentFileManager.
    """

    def __init__(self, config):
        """
        Initialize aligner with configuration.

        Args:
            config: Configuration object with alignment parameters
        """
        super().__init__(config, "alignment")

        self.parameters = self.config.get_alignment_parameters()
        self.engine = EdgeAlignmentEngine(self.parameters)
        self.file_manager = AlignmentFileManager(self.output_folder, self.temp_folder)

        self.natural_image_name = getattr(self.config, 'natural_image_name', 'natural.png')
        self.rendered_image_name = getattr(self.config, 'rendered_image_name', 'rendered.png')

        self._setup_input_folder()

        self.logger.info("EdgeAligner initialized")

    def _setup_input_folder(self) -> None:
        """Setup input folder path specific to alignment."""
        self.input_folder = self.root / Path(self.config.image_set_folder)

    def _get_processor_specific_config(self) -> Dict[str, Any]:
        """Get alignment-specific configuration parameters."""
        return {
            'natural_image_name': self.natural_image_name,
            'rendered_image_name': self.rendered_image_name,
            'parameters': self.parameters.to_dict()
        }

    def create_alignments(self) -> Dict[str, Any]:
        """
        Main entry point for processing all image sets.

        Returns:
            Dict[str, Any]: Summary with processed and failed cases
        """
        summary = self.process_all_sets()
        summary['save_statistics'] = self.file_manager.get_processing_statistics()
        self.logger.info(f"Save statistics: {summary['save_statistics']}")
        return summary

    def _load_image_pair(self, case_folder: Path) -> Tuple[np.ndarray, np.ndarray]:
        """
        Load natural and rendered images of one case.

        Raises:
            PreconditionError: If an image is missing or cannot be decoded
        """
        natural_path = case_folder / self.natural_image_name
        rendered_path = case_folder / self.rendered_image_name

        natural = cv2.imread(str(natural_path), cv2.IMREAD_COLOR)
        rendered = cv2.imread(str(rendered_path), cv2.IMREAD_COLOR)

        if natural is None:
            raise PreconditionError(f"Failed to load natural image: {natural_path}")
        if rendered is None:
            raise PreconditionError(f"Failed to load rendered image: {rendered_path}")

        self.logger.debug(f"Loaded natural {ImageProcessor.get_image_info(natural)}")
        self.logger.debug(f"Loaded rendered {ImageProcessor.get_image_info(rendered)}")
        return natural, rendered

    def _execute_processing_pipeline(self, case_folder: Path) -> Dict[str, Any]:
        """
        Run the alignment of one case.

        A failed alignment still saves the intermediate buffers computed
        before the failure, then re-raises.

        Args:
            case_folder: Path to the case folder

        Returns:
            Dict[str, Any]: Processing results
        """
        natural, rendered = self._load_image_pair(case_folder)

        try:
            result = self.engine.align(natural, rendered)
        except AlignmentError as e:
            if e.partial_result is not None:
                self._save_result(e.partial_result, natural, rendered, status='failed', error=str(e))
            raise

        print(format_homography(result.homography.matrix))

        return {
            'result': result,
            'natural': natural,
            'rendered': rendered
        }

    def _save_processing_results(self, processing_results: Dict[str, Any],
                                 set_name: str, case_name: str) -> None:
        """
        Save alignment results using the file manager.

        Args:
            processing_results: Results from alignment processing
            set_name: Name of the image set
            case_name: Name of the case
        """
        self._save_result(processing_results['result'], processing_results['natural'],
                          processing_results['rendered'], status='succeeded')

    def _save_result(self, result: AlignmentResult, natural: np.ndarray, rendered: np.ndarray,
                     status: str, error: str = None) -> None:
        set_name = self.current_case_info['set_name']
        case_name = self.current_case_info['case_name']

        alignment_info = {
            'status': status,
            'error': error,
            'statistics': result.statistics,
            'homography': result.homography.to_dict() if result.homography is not None else None
        }
        metadata = self._create_comprehensive_metadata(alignment_info)
        metadata['images'] = MetadataSaver.create_processing_metadata(
            ImageProcessor.get_image_size(natural),
            ImageProcessor.get_image_size(rendered),
            self.parameters.to_dict(),
            "alignment_v1.0"
        )

        self.file_manager.save_alignment_results(
            result, set_name, case_name, metadata, self.parameters.max_match_distance
        )
