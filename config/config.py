import json
from typing import Dict, Any
import os
import shutil

from src_edge_matching.alignment.parameters import AlignmentParameters
from utils.logger_config import get_logger

logger = get_logger(__name__)


class Config:
    def __init__(self, config_path: str, result_root: str = "result"):
        self.result_root = result_root
        self.config_data = self._load_config(config_path)
        self._check_folder(self.config_data["save_path_temp"], is_temp=True)
        self._check_folder(self.config_data["save_path_result"])
        self._init_alignment_defaults()
        self._validate_alignment_config()

    def _load_config(self, config_path: str) -> Dict[str, Any]:
        with open(config_path, 'r', encoding='utf-8') as config_file:
            config_data = json.load(config_file)

        for key in ("image_set_folder", "save_path_temp", "save_path_result"):
            if key not in config_data:
                raise ValueError(f"Missing required configuration key: {key}")

        # Process string formatting for paths that contain {case_name}
        self._process_string_formatting(config_data)
        return config_data

    def _process_string_formatting(self, config_data: Dict[str, Any]) -> None:
        """Process string formatting in config values, replacing {case_name} with actual value."""
        case_name = config_data.get("case_name", "")

        for key, value in config_data.items():
            if isinstance(value, str) and "{case_name}" in value:
                try:
                    config_data[key] = value.format(case_name=case_name)
                except (KeyError, ValueError, IndexError) as e:
                    # Keep the unformatted value
                    logger.warning(f"Could not format value for key '{key}': {e}")

    def _init_alignment_defaults(self) -> None:
        """Initialize default parameters for the alignment pipeline.

        Values present in the config file take precedence over these
        defaults.
        """
        defaults = AlignmentParameters().to_dict()
        defaults.update({
            "natural_image_name": "natural.png",
            "rendered_image_name": "rendered.png",
            "log_level": "INFO"
        })

        for k, v in defaults.items():
            self.config_data.setdefault(k, v)

    def _validate_alignment_config(self) -> None:
        """Validate alignment parameters; raises ValueError on invalid values."""
        AlignmentParameters.from_dict(self.config_data)

        if self.config_data.get("sort_matches") in ("True", True):
            logger.info("Matches are sorted by distance before the count cap")

    def get_alignment_parameters(self) -> AlignmentParameters:
        """Alignment parameters with config overrides applied."""
        return AlignmentParameters.from_dict(self.config_data)

    def _check_folder(self, folder_name, is_temp=False):
        counter = 1
        new_path = f"{self.result_root}/{folder_name}"
        # check the folder is exist or not
        if is_temp:
            if not os.path.exists(new_path):
                os.makedirs(new_path, exist_ok=True)
            else:
                # empty the folder and create the new one
                shutil.rmtree(new_path)
                os.makedirs(new_path)
            self.config_data["save_path_temp"] = new_path
        else:
            while os.path.exists(new_path):
                new_path = f"{self.result_root}/{folder_name}({counter})"
                counter += 1
            os.makedirs(new_path)
            self.config_data["save_path_result"] = new_path

    def __getattr__(self, name: str) -> Any:
        if name != "config_data" and name in self.config_data:
            return self.config_data[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")
