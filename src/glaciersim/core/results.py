"""
Simulation results container with export functionality.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from pathlib import Path
import logging
import numpy as np
from numpy.typing import NDArray

from glaciersim.core.scoring import TerminalSummary
from glaciersim.core.state import Glacier

logger = logging.getLogger(__name__)


@dataclass
class SimulationResults:
    """
    Container for one headless glacier session.

    Index 0 of every array is the initial state; each later index is the
    state at the end of one simulated year. The rate arrays hold NaN at
    index 0.

    Attributes
    ----------
    year : NDArray
        Calendar year.
    thickness : NDArray
        Ice thickness (m).
    area : NDArray
        Surface area (km²).
    stability : NDArray
        Structural integrity (0-100).
    volume : NDArray
        thickness × area.
    health : NDArray
        Display health score (0-100).
    effective_temp : NDArray
        Effective air temperature offset applied during the year (°C).
    melt_rate : NDArray
        Melt applied during the year (m).
    accumulation : NDArray
        Snow accumulation applied during the year (m).
    glacier : Glacier
        Scenario that was played.
    outcome : str, optional
        ``None`` if the session was still going when the run stopped.
    cause : str, optional
        Terminal predicate that fired, if any.
    terminal_summary : TerminalSummary
        Score, grade and final readings.
    model_params : dict
        Parameters of the model that produced the run.
    environment : dict
        Environmental factors in effect at the end of the run.
    """

    year: NDArray[np.int64]
    thickness: NDArray[np.float64]
    area: NDArray[np.float64]
    stability: NDArray[np.float64]
    volume: NDArray[np.float64]
    health: NDArray[np.float64]
    effective_temp: NDArray[np.float64]
    melt_rate: NDArray[np.float64]
    accumulation: NDArray[np.float64]
    glacier: Glacier
    outcome: Optional[str] = None
    cause: Optional[str] = None
    terminal_summary: Optional[TerminalSummary] = None
    model_params: Dict[str, Any] = field(default_factory=dict)
    environment: Dict[str, float] = field(default_factory=dict)

    @property
    def years_survived(self) -> int:
        return int(self.year[-1] - self.year[0])

    @property
    def collapsed(self) -> bool:
        return self.outcome == "collapsed"

    @property
    def net_balance(self) -> NDArray[np.float64]:
        """Accumulation minus melt per year (m)."""
        return self.accumulation - self.melt_rate

    @property
    def mass_ratio(self) -> NDArray[np.float64]:
        """Volume relative to the initial volume."""
        return self.volume / self.volume[0]

    @property
    def score(self) -> int:
        return self.terminal_summary.score if self.terminal_summary else 0

    @property
    def grade(self) -> str:
        return self.terminal_summary.grade if self.terminal_summary else "D"

    def summary(self) -> Dict[str, Any]:
        """Generate summary statistics."""
        return {
            "glacier": self.glacier.name,
            "outcome": self.outcome or "survived",
            "cause": self.cause,
            "year_start": int(self.year[0]),
            "year_end": int(self.year[-1]),
            "years_survived": self.years_survived,
            "final_thickness": float(self.thickness[-1]),
            "final_area": float(self.area[-1]),
            "final_stability": float(self.stability[-1]),
            "final_volume": float(self.volume[-1]),
            "final_health": float(self.health[-1]),
            "min_thickness": float(np.min(self.thickness)),
            "mass_retained_pct": float(self.mass_ratio[-1] * 100),
            "score": self.score,
            "grade": self.grade,
        }

    def to_dataframe(self):
        """Convert results to a pandas DataFrame, one row per year."""
        import pandas as pd

        return pd.DataFrame({
            "year": self.year,
            "thickness_m": self.thickness,
            "area_km2": self.area,
            "stability_pct": self.stability,
            "volume": self.volume,
            "health": self.health,
            "effective_temp_c": self.effective_temp,
            "melt_rate_m": self.melt_rate,
            "accumulation_m": self.accumulation,
            "net_balance_m": self.net_balance,
        })

    def to_csv(
        self,
        filepath: str | Path,
        float_format: str = "%.6f",
    ) -> None:
        """
        Export results to CSV file.

        Parameters
        ----------
        filepath : str or Path
            Output file path.
        float_format : str, optional
            Float format string. Default is "%.6f".
        """
        from glaciersim.io.csv_writer import write_csv
        write_csv(self, filepath, float_format)

    def to_png(
        self,
        filepath: str | Path,
        dpi: int = 200,
    ) -> None:
        """
        Create time series plot.

        Parameters
        ----------
        filepath : str or Path
            Output file path.
        dpi : int, optional
            Output resolution. Default is 200.
        """
        from glaciersim.visualization.timeseries import create_timeseries_plot
        create_timeseries_plot(self, filepath, dpi)

    def __repr__(self) -> str:
        status = (self.outcome or "running").upper()
        return (
            f"SimulationResults(glacier='{self.glacier.name}', "
            f"years={int(self.year[0])}-{int(self.year[-1])}, "
            f"final_thickness={self.thickness[-1]:.1f}, "
            f"final_stability={self.stability[-1]:.0f}, "
            f"score={self.score}, status={status})"
        )
