from pathlib import Path

import matplotlib
matplotlib.use("Agg")

from config.config import Config
from src_edge_matching.edge_matching import EdgeMatching
from utils.logger_config import LoggerConfig


def load_config(config_path: str) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path (str): Path to the configuration JSON file.

    Returns:
        Config: Loaded configuration object.
    """
    return Config(config_path)


def process_edge_matching(config: Config) -> dict:
    """
    Align every natural/rendered image pair found under the configured image set folder.

    Args:
        config (Config): Configuration object containing processing parameters.

    Returns:
        dict: Summary of processed and failed cases.
    """
    matcher = EdgeMatching(config)
    return matcher.create_alignment()


def main() -> None:
    """
    Main function to execute the edge matching pipeline.
    """
    config_file = "config/config_edge_matching.json"

    config = load_config(config_file)
    LoggerConfig.configure_for_run(config.log_level, Path(config.save_path_result))
    summary = process_edge_matching(config)

    if summary['failed_cases']:
        print(f"Failed cases: {', '.join(summary['failed_cases'])}")
    print("Processing completed successfully")


if __name__ == "__main__":
    main()
