"""
Base processor class for edge matching batch runs.

This module provides the folder walking, per-case error isolation and
metadata assembly shared by batch processors.
"""

import datetime
from pathlib import Path
from typing import Dict, Any, List
from abc import ABC, abstractmethod

from utils.file_operations import PathManager
from utils.logger_config import get_logger


class BaseProcessor(ABC):
    """
    Base class for batch processing of image cases.

    Provides common functionality for:
    - Configuration management
    - Path setup and validation
    - Iteration over 'set_*' folders and their case folders
    - Error handling and logging per case

    Subclasses implement the per-case processing and saving.
    """

    def __init__(self, config, processing_type: str):
        """
        Initialize base processor.

        Args:
            config: Configuration object with processing parameters
            processing_type: Type of processing (e.g., 'alignment')
        """
        self.config = config
        self.processing_type = processing_type
        self.root = Path(getattr(self.config, 'root_path', Path.cwd()))
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        self.current_case_info = {}
        self.processed_cases: List[str] = []
        self.failed_cases: List[str] = []

        self.input_folder = None
        self.output_folder = None
        self.temp_folder = None
        self._setup_base_paths()

        self.logger.info(f"{self.__class__.__name__} initialized for {processing_type} processing")

    def _setup_base_paths(self) -> None:
        """Initialize base folder paths from configuration."""
        self.output_folder = self.root / Path(self.config.save_path_result)
        self.temp_folder = self.root / Path(self.config.save_path_temp)

        self.logger.info("Base paths configured:")
        self.logger.info(f"  Output folder: {self.output_folder}")
        self.logger.info(f"  Temp folder: {self.temp_folder}")

    def process_all_sets(self) -> Dict[str, Any]:
        """
        Main entry point for processing all image sets.

        Returns:
            Dict[str, Any]: Summary with processed and failed case names
        """
        self.logger.info(f"Starting to process all image sets for {self.processing_type}")

        try:
            set_folders = self._validate_input_structure()
        except ValueError as e:
            self.logger.error(str(e))
            return self.get_summary()

        for set_folder in set_folders:
            self._process_set(set_folder)

        self.logger.info(f"All image sets processed for {self.processing_type}: "
                         f"{len(self.processed_cases)} succeeded, {len(self.failed_cases)} failed")
        return self.get_summary()

    def _validate_input_structure(self) -> List[Path]:
        """
        Validate input directory structure and return set folders.

        Raises:
            ValueError: If input structure is invalid
        """
        if not self.input_folder:
            raise ValueError("Input folder not configured")

        return PathManager.find_set_folders(self.input_folder)

    def _process_set(self, set_folder: Path) -> None:
        """
        Process every case folder of one set; a failing case does not stop the set.

        Args:
            set_folder: Path to the set folder
        """
        set_name = set_folder.name
        self.logger.info(f"Processing set: {set_name}")

        case_folders = PathManager.list_case_folders(set_folder)

        if not case_folders:
            self.logger.warning(f"No case directories found in {set_name}")
            return

        for case_folder in case_folders:
            case_id = f"{set_name}/{case_folder.name}"
            try:
                self._process_case(set_name, case_folder)
                self.processed_cases.append(case_id)
            except Exception as e:
                self.logger.error(f"Failed to process case {case_id}: {e}")
                self.failed_cases.append(case_id)
                continue

        self.logger.info(f"Set {set_name} processed")

    def _process_case(self, set_name: str, case_folder: Path) -> None:
        """
        Process a single case through the complete processing pipeline.

        Args:
            set_name: Name of the image set
            case_folder: Path to the case folder
        """
        case_name = case_folder.name
        self.logger.info(f"Processing case: {set_name}/{case_name}")

        self.current_case_info = {
            'set_name': set_name,
            'case_name': case_name,
            'case_folder': str(case_folder),
            'timestamp': datetime.datetime.now().isoformat(),
            'processing_type': self.processing_type
        }

        processing_results = self._execute_processing_pipeline(case_folder)
        self._save_processing_results(processing_results, set_name, case_name)

        self.logger.info(f"Successfully processed {set_name}/{case_name}")

    def _create_comprehensive_metadata(self, processing_results: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create metadata for one processed case.

        Args:
            processing_results: Results from processing operations

        Returns:
            Dict[str, Any]: Metadata
        """
        return {
            'case_info': self.current_case_info,
            'processing_version': f'{self.processing_type}_processor_v1.0',
            'configuration': self._get_processor_specific_config(),
            'processing_results': processing_results
        }

    def get_summary(self) -> Dict[str, Any]:
        return {
            'processing_type': self.processing_type,
            'processed_cases': list(self.processed_cases),
            'failed_cases': list(self.failed_cases)
        }

    @abstractmethod
    def _setup_input_folder(self) -> None:
        """Setup input folder path specific to processor type."""
        pass

    @abstractmethod
    def _execute_processing_pipeline(self, case_folder: Path) -> Dict[str, Any]:
        """
        Execute the main processing pipeline for a single case.

        Args:
            case_folder: Path to the case folder

        Returns:
            Dict[str, Any]: Processing results
        """
        pass

    @abstractmethod
    def _save_processing_results(self, processing_results: Dict[str, Any],
                                 set_name: str, case_name: str) -> None:
        """
        Save processing results using the appropriate file manager.

        Args:
            processing_results: Results from processing
            set_name: Name of the image set
            case_name: Name of the case
        """
        pass

    @abstractmethod
    def _get_processor_specific_config(self) -> Dict[str, Any]:
        """
        Get processor-specific configuration parameters.

        Returns:
            Dict[str, Any]: Processor-specific configuration
        """
        pass
