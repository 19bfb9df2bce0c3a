"""
File operation utilities for the edge matching toolkit.

Covers the image set folder layout (``<root>/set_*/<case>/``), writing
matrices, text and JSON, and the image pair metadata stored with every case.
"""

import json
import numpy as np
from typing import Dict, Any, List, Tuple
from pathlib import Path
import shutil

from utils.logger_config import get_logger

logger = get_logger(__name__)


def _json_default(value: Any) -> Any:
    """Convert numpy values that json cannot serialize on its own."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class PathManager:
    """Folder helpers for the set/case layout."""

    @staticmethod
    def ensure_directory_exists(path: Path, clear_if_exists: bool = False) -> Path:
        """
        Create a directory (and parents); with clear_if_exists, start from an empty one.

        Returns:
            Path: The directory
        """
        if clear_if_exists and path.exists():
            shutil.rmtree(path)

        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ready: {path}")
        return path

    @staticmethod
    def find_set_folders(input_path: Path) -> List[Path]:
        """
        Image set folders below the input path.

        Args:
            input_path: Image set folder from the configuration

        Returns:
            List[Path]: 'set_*' directories in name order

        Raises:
            ValueError: If the input path is missing or holds no set folder
        """
        if not input_path.is_dir():
            raise ValueError(f"Image set folder not found: {input_path}")

        set_folders = sorted(p for p in input_path.glob('set_*') if p.is_dir())
        if not set_folders:
            raise ValueError(f"No 'set_*' folders in {input_path}")

        logger.info(f"{len(set_folders)} set folder(s) in {input_path}")
        return set_folders

    @staticmethod
    def list_case_folders(set_folder: Path) -> List[Path]:
        """Case directories of a set in name order."""
        return sorted(p for p in set_folder.iterdir() if p.is_dir())


class DataSaver:
    """Writes result data to disk; every method reports success as a bool."""

    @staticmethod
    def save_matrix(matrix: np.ndarray, output_path: Path, stem: str) -> bool:
        """
        Write a 2D array as comma separated values at full double precision.

        Args:
            matrix: Array to write
            output_path: Target directory
            stem: File name without the .csv extension
        """
        full_path = output_path / f"{stem}.csv"
        try:
            output_path.mkdir(parents=True, exist_ok=True)
            np.savetxt(full_path, np.atleast_2d(matrix), delimiter=',', fmt='%.17g')
        except (OSError, ValueError) as e:
            logger.error(f"Could not write {full_path}: {e}")
            return False

        logger.debug(f"Wrote {full_path}")
        return True

    @staticmethod
    def save_text(text: str, output_path: Path, filename: str) -> bool:
        """Write text (plus a trailing newline) to output_path / filename."""
        full_path = output_path / filename
        try:
            output_path.mkdir(parents=True, exist_ok=True)
            full_path.write_text(text + "\n", encoding='utf-8')
        except OSError as e:
            logger.error(f"Could not write {full_path}: {e}")
            return False

        logger.debug(f"Wrote {full_path}")
        return True

    @staticmethod
    def save_json_data(data: Dict[str, Any], output_path: Path, stem: str, indent: int = 2) -> bool:
        """
        Write a mapping as JSON; numpy scalars and arrays are converted.

        Args:
            data: Mapping to write
            output_path: Target directory
            stem: File name without the .json extension
            indent: JSON indentation
        """
        full_path = output_path / f"{stem}.json"
        try:
            output_path.mkdir(parents=True, exist_ok=True)
            with open(full_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=indent, default=_json_default)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not write {full_path}: {e}")
            return False

        logger.debug(f"Wrote {full_path}")
        return True


class MetadataSaver:
    """Image pair metadata stored next to the alignment results."""

    @staticmethod
    def create_processing_metadata(
        natural_size: Tuple[int, int],
        rendered_size: Tuple[int, int],
        processing_params: Dict[str, Any],
        version: str = "v1.0"
    ) -> Dict[str, Any]:
        """
        Describe the image pair of one run.

        Args:
            natural_size: (width, height) of the natural image
            rendered_size: (width, height) of the rendered image
            processing_params: Pipeline parameters of the run
            version: Version identifier

        Returns:
            Dict[str, Any]: Metadata dictionary
        """
        return {
            "version": version,
            "natural_size": list(natural_size),
            "rendered_size": list(rendered_size),
            "same_size": tuple(natural_size) == tuple(rendered_size),
            "scale_to_rendered": {
                "x": rendered_size[0] / natural_size[0],
                "y": rendered_size[1] / natural_size[1]
            },
            "processing_params": processing_params
        }

    @staticmethod
    def save_json_metadata(metadata: Dict[str, Any], output_path: Path, filename: str) -> bool:
        """Write metadata to output_path / filename (a .json name)."""
        return DataSaver.save_json_data(metadata, output_path, Path(filename).stem)
