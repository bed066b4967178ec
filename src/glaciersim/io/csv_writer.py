"""CSV output writer."""

from typing import TYPE_CHECKING
from pathlib import Path
import logging

if TYPE_CHECKING:
    from glaciersim.core.results import SimulationResults

logger = logging.getLogger(__name__)


def write_csv(
    results: "SimulationResults",
    filepath: str | Path,
    float_format: str = "%.6f",
) -> None:
    """
    Write simulation results to CSV file.

    Parameters
    ----------
    results : SimulationResults
        Simulation results to export.
    filepath : str or Path
        Output file path.
    float_format : str, optional
        Float format string. Default is "%.6f".
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Writing CSV to: {filepath}")

    df = results.to_dataframe()
    df.insert(0, "glacier", results.glacier.name)

    df.to_csv(filepath, index=False, float_format=float_format)

    logger.info(f"CSV written: {len(df)} rows, years {df['year'].iloc[0]}-{df['year'].iloc[-1]}")
