"""
File management for edge alignment results.

Output layout per case (``<save_path_result>/aligned/<set>/<case>/``):
- homography_<case>.csv / .txt: fitted matrix (CSV and row-major text)
- correspondences_<case>.csv: accepted matches with point coordinates
- <buffer>_<case>.png: every intermediate image of the run
- projected_outline_<case>.png: natural image frame projected onto the rendered image
- match_statistics_<case>.png: distance / reprojection error chart
- alignment_metadata_<case>.json: parameters, counts and errors
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, Any, Optional

from utils.chart_generator import MatchChartGenerator
from utils.file_operations import DataSaver
from utils.homography_math import HomographyMath, format_homography
from utils.image_processing import ImageProcessor
from utils.visualizer import MatchVisualizer, VisualizationSaver
from .alignment_result import AlignmentResult
from .matcher import HammingMatcher
from ..base import BaseFileManager

CORRESPONDENCE_COLUMNS = [
    'query_idx', 'train_idx', 'distance',
    'natural_x', 'natural_y', 'rendered_x', 'rendered_y',
    'reprojection_error', 'inlier'
]


class AlignmentFileManager(BaseFileManager):
    """Manages file operations for alignment results."""

    def __init__(self, base_output_path: Path, base_temp_path: Optional[Path] = None):
        """
        Initialize alignment file manager.

        Args:
            base_output_path: Base path for output files
            base_temp_path: Base path for temporary files (optional)
        """
        super().__init__(base_output_path, base_temp_path, "aligned")

    def get_folder_name(self) -> str:
        """Get the specific folder name for alignment results."""
        return "aligned"

    def build_correspondence_table(self, result: AlignmentResult) -> pd.DataFrame:
        """
        Tabulate the accepted matches of a run.

        Args:
            result: Alignment result (complete or partial)

        Returns:
            pd.DataFrame: One row per accepted match
        """
        if not result.matches or result.natural_features is None or result.rendered_features is None:
            return pd.DataFrame(columns=CORRESPONDENCE_COLUMNS)

        natural_points, rendered_points = HammingMatcher.correspondences(
            result.matches, result.natural_features, result.rendered_features
        )

        if result.homography is not None:
            errors = HomographyMath.reprojection_errors(result.homography.matrix, natural_points, rendered_points)
            inliers = result.homography.inlier_mask
        else:
            errors = np.full(len(result.matches), np.nan)
            inliers = np.zeros(len(result.matches), dtype=bool)

        return pd.DataFrame({
            'query_idx': [m.query_idx for m in result.matches],
            'train_idx': [m.train_idx for m in result.matches],
            'distance': [m.distance for m in result.matches],
            'natural_x': natural_points[:, 0],
            'natural_y': natural_points[:, 1],
            'rendered_x': rendered_points[:, 0],
            'rendered_y': rendered_points[:, 1],
            'reprojection_error': errors,
            'inlier': inliers
        }, columns=CORRESPONDENCE_COLUMNS)

    def save_homography(self, result: AlignmentResult, output_paths: Dict[str, Path],
                        case_name: str) -> Dict[str, bool]:
        """Save the homography as CSV and as row-major text."""
        results = {}
        if result.homography is None:
            return results

        matrix = result.homography.matrix
        for location_name, path in output_paths.items():
            results[f'{location_name}_csv'] = self.record_operation(
                DataSaver.save_matrix(matrix, path, f'homography_{case_name}')
            )
            results[f'{location_name}_txt'] = self.record_operation(
                DataSaver.save_text(format_homography(matrix), path, f'homography_{case_name}.txt')
            )
        return results

    def save_correspondences(self, result: AlignmentResult, output_paths: Dict[str, Path],
                             case_name: str) -> Dict[str, bool]:
        """Save the correspondence table as CSV."""
        table = self.build_correspondence_table(result)
        filename = f'correspondences_{case_name}.csv'

        results = {}
        for location_name, path in output_paths.items():
            file_path = path / filename
            try:
                table.to_csv(file_path, index=False)
                self.logger.debug(f"Saved correspondences to: {file_path}")
                results[location_name] = self.record_operation(True)
            except OSError as e:
                self.logger.error(f"Failed to save correspondences to {file_path}: {e}")
                results[location_name] = self.record_operation(False)
        return results

    def save_debug_images(self, result: AlignmentResult, output_path: Path,
                          case_name: str) -> Dict[str, bool]:
        """Save every available intermediate buffer as PNG."""
        images_and_names = [
            (image, f'{name}_{case_name}.png') for name, image in result.debug_images().items()
        ]
        if result.homography is not None:
            outline = MatchVisualizer.draw_projected_outline(
                result.rendered, result.homography.matrix, ImageProcessor.get_image_size(result.natural)
            )
            images_and_names.append((outline, f'projected_outline_{case_name}.png'))

        results = VisualizationSaver.save_multiple_visualizations(images_and_names, output_path)
        for success in results.values():
            self.record_operation(success)
        return results

    def save_match_chart(self, result: AlignmentResult, output_path: Path, case_name: str,
                         max_distance: float) -> Dict[str, bool]:
        """Save the match statistics chart."""
        distances = np.array([m.distance for m in result.matches], dtype=np.float64)

        errors = None
        inlier_mask = None
        threshold = None
        if result.homography is not None:
            table = self.build_correspondence_table(result)
            errors = table['reprojection_error'].to_numpy(dtype=np.float64)
            inlier_mask = table['inlier'].to_numpy(dtype=bool)
            threshold = result.homography.threshold

        chart = MatchChartGenerator(output_path)
        saved = chart.create_match_chart(distances, max_distance, errors, inlier_mask, threshold,
                                         photo_name=f'match_statistics_{case_name}')
        return {'match_chart': self.record_operation(saved is not None)}

    def save_alignment_results(
        self,
        result: AlignmentResult,
        set_name: str,
        case_name: str,
        metadata: Dict[str, Any],
        max_distance: float
    ) -> Dict[str, Dict[str, bool]]:
        """
        Save all results of one case.

        Works for partial results of failed runs as well; only what the run
        produced is written.

        Args:
            result: Alignment result
            set_name: Name of the image set
            case_name: Name of the case
            metadata: Metadata to store as JSON
            max_distance: Matcher distance threshold, for the chart

        Returns:
            Dict[str, Dict[str, bool]]: Save results by category
        """
        output_paths = self.setup_output_directories(set_name, case_name)
        output_path = output_paths['output']

        results = {
            'homography': self.save_homography(result, output_paths, case_name),
            'correspondences': self.save_correspondences(result, output_paths, case_name),
            'images': self.save_debug_images(result, output_path, case_name),
            'chart': self.save_match_chart(result, output_path, case_name, max_distance),
            'metadata': self.save_metadata(metadata, {'output': output_path}, case_name,
                                           filename_prefix="alignment_metadata"),
        }

        self.log_save_results(case_name, results)
        return results
