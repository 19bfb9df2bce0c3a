"""
Unified logging configuration for the edge matching toolkit.

Every module obtains its logger through ``get_logger`` so that pipeline
stages, the batch processor and the file managers share one handler set
and one message format.
"""

import logging
import sys
from typing import Optional
from pathlib import Path


class LoggerConfig:
    """Centralized logger configuration manager."""

    _configured = False
    _root_logger_name = 'edge_matching_toolkit'
    _default_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    @classmethod
    def setup_root_logger(
        cls,
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[Path] = None
    ) -> logging.Logger:
        """
        Setup the toolkit root logger.

        Args:
            level: Logging level (default: INFO)
            format_string: Custom format string (optional)
            log_file: Optional file path for logging to file

        Returns:
            logging.Logger: Configured root logger
        """
        if cls._configured:
            return logging.getLogger(cls._root_logger_name)

        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        formatter = logging.Formatter(format_string or cls._default_format)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Handlers live on the toolkit root only
        root_logger.propagate = False

        cls._configured = True

        root_logger.info(f"Root logger configured: level={logging.getLevelName(level)}")
        if log_file:
            root_logger.info(f"Logging to file: {log_file}")

        return root_logger

    @classmethod
    def add_file_handler(cls, log_file: Path) -> None:
        """
        Attach a file handler to an already configured root logger.

        Args:
            log_file: Destination of the log file
        """
        root_logger = cls.setup_root_logger()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(root_logger.level)
        file_handler.setFormatter(logging.Formatter(cls._default_format))
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging to file: {log_file}")

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a child logger of the toolkit root logger.

        Args:
            name: Logger name (typically __name__ from calling module)

        Returns:
            logging.Logger: Configured logger
        """
        if not cls._configured:
            cls.setup_root_logger()

        logger = logging.getLogger(f"{cls._root_logger_name}.{name}")
        logger.propagate = True

        return logger

    @classmethod
    def set_level(cls, level: int) -> None:
        """
        Change the logging level for all toolkit loggers.

        Args:
            level: New logging level
        """
        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)

        for handler in root_logger.handlers:
            handler.setLevel(level)

        root_logger.info(f"Logging level changed to: {logging.getLevelName(level)}")

    @classmethod
    def configure_for_run(cls, level_name: str, log_dir: Optional[Path] = None,
                          log_name: str = "edge_matching.log") -> None:
        """
        Apply the logging settings of a batch run.

        Args:
            level_name: Level from the configuration ("DEBUG", "INFO", ...);
                unknown names fall back to INFO
            log_dir: Result folder that receives a copy of the log, if given
            log_name: Log file name inside log_dir
        """
        level = logging.getLevelName(str(level_name).upper())
        if not isinstance(level, int):
            level = logging.INFO

        cls.setup_root_logger(level=level)
        cls.set_level(level)
        if log_dir is not None:
            cls.add_file_handler(Path(log_dir) / log_name)

    @classmethod
    def is_configured(cls) -> bool:
        """Check if the root logger has been configured."""
        return cls._configured


def get_logger(name: str) -> logging.Logger:
    """Convenience wrapper around ``LoggerConfig.get_logger``."""
    return LoggerConfig.get_logger(name)
