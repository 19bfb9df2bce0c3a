"""
Base classes for the edge matching batch processing.

This package provides the base processor that walks case folders and the
base file manager that lays out and records result files.
"""

from .file_manager import BaseFileManager
from .processor import BaseProcessor

__all__ = ['BaseFileManager', 'BaseProcessor']
