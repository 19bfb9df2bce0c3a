"""
Base file management utilities for edge matching results.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional
from abc import ABC, abstractmethod

from utils.file_operations import PathManager, MetadataSaver
from utils.logger_config import get_logger


class BaseFileManager(ABC):
    """
    Base class for result file management.

    Provides common functionality for:
    - Directory structure setup per set and case
    - Metadata saving
    - Save statistics

    Subclasses implement the result specific save operations.
    """

    def __init__(self, base_output_path: Path, base_temp_path: Optional[Path] = None,
                 folder_name: str = ""):
        """
        Initialize base file manager.

        Args:
            base_output_path: Base path for output files
            base_temp_path: Base path for temporary files (optional)
            folder_name: Specific folder name for this processing type
        """
        self.base_output_path = Path(base_output_path)
        self.base_temp_path = Path(base_temp_path) if base_temp_path else None
        self.folder_name = folder_name
        self.logger: logging.Logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        self.processing_stats = {
            'total_operations': 0,
            'successful_operations': 0,
            'failed_operations': 0
        }

    def setup_output_directories(self, set_name: str, case_name: str) -> Dict[str, Path]:
        """
        Set up output directory structure for one case.

        Args:
            set_name: Name of the image set
            case_name: Name of the case (natural/rendered pair)

        Returns:
            Dict[str, Path]: Dictionary containing output and temp paths
        """
        output_case_folder = self.base_output_path / self.folder_name / set_name / case_name
        PathManager.ensure_directory_exists(output_case_folder)

        paths = {'output': output_case_folder}

        if self.base_temp_path:
            temp_case_folder = self.base_temp_path / self.folder_name / set_name / case_name
            PathManager.ensure_directory_exists(temp_case_folder, clear_if_exists=True)
            paths['temp'] = temp_case_folder

        self.logger.info(f"Set up directories for {set_name}/{case_name}")
        return paths

    def record_operation(self, success: bool) -> bool:
        """Count one save operation and pass its result through."""
        self.processing_stats['total_operations'] += 1
        if success:
            self.processing_stats['successful_operations'] += 1
        else:
            self.processing_stats['failed_operations'] += 1
        return success

    def save_metadata(self, metadata: Dict[str, Any], output_paths: Dict[str, Path],
                      case_name: str, filename_prefix: str = "metadata") -> Dict[str, bool]:
        """
        Save metadata to JSON files in all specified paths.

        Args:
            metadata: Metadata dictionary to save
            output_paths: Dictionary of output paths
            case_name: Name of the case
            filename_prefix: Prefix for the metadata filename

        Returns:
            Dict[str, bool]: Save results for each location
        """
        results = {}
        filename = f'{filename_prefix}_{case_name}.json'

        for location_name, path in output_paths.items():
            success = self.record_operation(MetadataSaver.save_json_metadata(metadata, path, filename))
            results[f'{location_name}_metadata'] = success

            if not success:
                self.logger.error(f"Failed to save metadata to {location_name}: {path / filename}")

        return results

    def log_save_results(self, case_name: str, results: Dict[str, Dict[str, bool]]) -> None:
        """
        Log summary of save operation results.

        Args:
            case_name: Name of the processed case
            results: Dictionary of save results by category
        """
        total_operations = sum(len(category_results) for category_results in results.values())
        successful_operations = sum(
            sum(1 for success in category_results.values() if success)
            for category_results in results.values()
        )

        self.logger.info(f"Save results for {case_name}: "
                         f"{successful_operations}/{total_operations} operations successful")

        for category, category_results in results.items():
            failed_ops = [op for op, success in category_results.items() if not success]
            if failed_ops:
                self.logger.warning(f"Failed {category} operations: {failed_ops}")

    def get_processing_statistics(self) -> Dict[str, Any]:
        """Current save statistics with success rate."""
        stats = self.processing_stats.copy()
        total = stats['total_operations']
        stats['success_rate'] = stats['successful_operations'] / total if total > 0 else 0
        return stats

    @abstractmethod
    def get_folder_name(self) -> str:
        """
        Get the specific folder name for this file manager type.

        Returns:
            str: Folder name for this processing type
        """
        pass
