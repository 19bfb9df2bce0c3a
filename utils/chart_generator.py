"""
Diagnostic charts for an alignment run.

Saves a two panel figure: the Hamming distance histogram of the accepted
matches and the reprojection error of every correspondence under the fitted
homography, with the RANSAC threshold marked.
"""

import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from typing import Optional

from utils.logger_config import get_logger

logger = get_logger(__name__)


class MatchChartGenerator:
    def __init__(self, save_path_result: Path, figsize=(12, 5), dpi: int = 100):
        # output frame
        self.figsize = figsize
        self.dpi = dpi
        self.save_path_result = Path(save_path_result)

    def create_match_chart(
        self,
        distances: np.ndarray,
        max_distance: float,
        reprojection_errors: Optional[np.ndarray] = None,
        inlier_mask: Optional[np.ndarray] = None,
        threshold: Optional[float] = None,
        photo_name: str = "match_statistics"
    ) -> Optional[Path]:
        """
        Draw and save the match statistics chart.

        Args:
            distances: Hamming distances of the accepted matches
            max_distance: Distance threshold used by the matcher
            reprojection_errors: Per-correspondence error under the homography
            inlier_mask: Inlier flags of the correspondences
            threshold: RANSAC reprojection threshold
            photo_name: Output file stem

        Returns:
            Optional[Path]: Saved file path, None when saving failed
        """
        fig, (ax_dist, ax_err) = plt.subplots(1, 2, figsize=self.figsize, dpi=self.dpi)

        # left: descriptor distances
        bins = np.linspace(0, max_distance, 21)
        ax_dist.hist(distances, bins=bins, color='tab:blue', edgecolor='black')
        ax_dist.axvline(max_distance, color='red', linestyle='--', label='max distance')
        ax_dist.set_title(f'Match distances (n={len(distances)})')
        ax_dist.set_xlabel('Hamming distance')
        ax_dist.set_ylabel('Count')
        ax_dist.legend()

        # right: reprojection errors
        if reprojection_errors is not None and len(reprojection_errors) > 0:
            index = np.arange(len(reprojection_errors))
            finite = np.isfinite(reprojection_errors)
            mask = np.zeros(len(reprojection_errors), dtype=bool) if inlier_mask is None else inlier_mask
            ax_err.scatter(index[finite & mask], reprojection_errors[finite & mask],
                           c='tab:green', s=12, label='inlier')
            ax_err.scatter(index[finite & ~mask], reprojection_errors[finite & ~mask],
                           c='tab:red', s=12, label='outlier')
            if threshold is not None:
                ax_err.axhline(threshold, color='black', linestyle='--', label='threshold')
            ax_err.set_yscale('symlog')
            ax_err.legend()
        else:
            ax_err.text(0.5, 0.5, 'no homography', ha='center', va='center', transform=ax_err.transAxes)
        ax_err.set_title('Reprojection error')
        ax_err.set_xlabel('Match index')
        ax_err.set_ylabel('Error (px)')
        ax_err.grid(True)

        output_file = self.save_path_result / f'{photo_name}.png'
        try:
            self.save_path_result.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_file, bbox_inches='tight', pad_inches=0.3)
            logger.info(f"Saved chart: {output_file}")
            return output_file
        except OSError as e:
            logger.error(f"Failed to save chart {output_file}: {e}")
            return None
        finally:
            plt.close(fig)
