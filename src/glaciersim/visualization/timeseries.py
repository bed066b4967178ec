"""
Time series visualization of a glacier session.
"""

from typing import TYPE_CHECKING
from pathlib import Path
import logging
import numpy as np
import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from glaciersim.core.results import SimulationResults

logger = logging.getLogger(__name__)


OUTCOME_COLORS = {
    "SURVIVED": "#00FF88",
    "RUNNING": "#FFDD00",
    "COLLAPSED": "#FF4444",
}


def create_timeseries_plot(
    results: "SimulationResults",
    filepath: str | Path,
    dpi: int = 200,
) -> None:
    """
    Generate the session trend chart.

    Creates a 4-panel plot showing:
    - Ice thickness with the area-retreat threshold
    - Stability and health
    - Melt versus accumulation, with effective temperature
    - Summary statistics and outcome

    Parameters
    ----------
    results : SimulationResults
        Simulation results to visualize.
    filepath : str or Path
        Output PNG file path.
    dpi : int, optional
        Resolution. Default is 200.
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Creating time series plot: {filepath}")

    glacier = results.glacier
    year = results.year
    retreat_level = glacier.initial_thickness * 0.5

    plt.style.use("dark_background")
    fig = plt.figure(figsize=(14, 11))
    fig.patch.set_facecolor("#050510")

    gs = fig.add_gridspec(4, 1, height_ratios=[1.3, 1, 1, 0.45], hspace=0.25)

    def style_axis(ax):
        ax.set_facecolor("#0a0a15")
        ax.grid(True, alpha=0.12, color="white", linestyle="-", linewidth=0.4)
        ax.tick_params(colors="white", labelsize=9)
        ax.set_xlim([year[0], max(year[-1], year[0] + 1)])
        for spine in ax.spines.values():
            spine.set_color("#333355")
            spine.set_linewidth(0.5)

    # === PANEL 1: Thickness ===
    ax1 = fig.add_subplot(gs[0])
    style_axis(ax1)

    ax1.plot(year, results.thickness, color="#00E5FF", lw=2.5, label="Ice thickness")
    ax1.fill_between(year, results.thickness, 0, alpha=0.2, color="#00E5FF")
    ax1.axhline(retreat_level, color="#FFAA00", alpha=0.8, linestyle="--", lw=1.5,
                label=f"Area retreat below {retreat_level:.0f} m")
    ax1.set_ylabel("Thickness (m)", fontsize=10, color="white")
    ax1.legend(loc="upper right", fontsize=8, framealpha=0.4)

    ax1b = ax1.twinx()
    ax1b.plot(year, results.area, color="#AAAAAA", lw=1, alpha=0.6, linestyle="--")
    ax1b.set_ylabel("Area (km²)", fontsize=9, color="#888888")
    ax1b.tick_params(colors="#666666", labelsize=8)

    # === PANEL 2: Stability and health ===
    ax2 = fig.add_subplot(gs[1])
    style_axis(ax2)

    ax2.plot(year, results.stability, color="white", lw=2, label="Stability")
    ax2.plot(year, results.health, color="#00FF88", lw=1.5, alpha=0.8, label="Health")
    ax2.axhspan(0, 25, alpha=0.12, color="#FF0000")
    ax2.set_ylim([0, 105])
    ax2.set_ylabel("Percent", fontsize=10, color="white")
    ax2.legend(loc="lower left", fontsize=8, framealpha=0.4)

    # === PANEL 3: Mass balance ===
    ax3 = fig.add_subplot(gs[2])
    style_axis(ax3)

    ax3.plot(year[1:], results.accumulation[1:], color="#88CCFF", lw=2, label="Accumulation")
    ax3.plot(year[1:], results.melt_rate[1:], color="#FF6B35", lw=2, label="Melt")
    ax3.fill_between(
        year[1:], results.accumulation[1:], results.melt_rate[1:],
        where=results.melt_rate[1:] > results.accumulation[1:],
        alpha=0.3, color="#FF0000", interpolate=True,
    )
    ax3.set_ylabel("m / year", fontsize=10, color="white")
    ax3.set_xlabel("Year", fontsize=11, color="white")
    ax3.legend(loc="upper left", fontsize=8, framealpha=0.4)

    ax3b = ax3.twinx()
    ax3b.plot(year[1:], results.effective_temp[1:], color="#FF3388", lw=1, alpha=0.5, linestyle=":")
    ax3b.set_ylabel("Effective temp (°C)", fontsize=9, color="#888888")
    ax3b.tick_params(colors="#666666", labelsize=8)

    # === PANEL 4: Summary ===
    ax4 = fig.add_subplot(gs[3])
    ax4.set_facecolor("#0a0a15")
    ax4.axis("off")

    summary = results.summary()
    status = (results.outcome or "running").upper()
    status_color = OUTCOME_COLORS.get(status, "#FFFFFF")

    ax4.text(
        0.5, 0.7, f"{status}  |  Score {summary['score']}  |  Grade {summary['grade']}",
        transform=ax4.transAxes, fontsize=13, color=status_color,
        ha="center", fontweight="bold",
    )

    stats_text = (
        f"Years: {summary['years_survived']}  |  "
        f"Final thickness: {summary['final_thickness']:.1f} m  |  "
        f"Final stability: {summary['final_stability']:.0f}%  |  "
        f"Mass retained: {summary['mass_retained_pct']:.1f}%"
    )
    ax4.text(
        0.5, 0.2, stats_text,
        transform=ax4.transAxes, fontsize=10, color="#CCCCCC",
        ha="center", family="monospace",
    )

    fig.suptitle(
        f"{glacier.name}\nSensitivity {glacier.temperature_sensitivity:g}  |  "
        f"{int(np.min(year))}-{int(np.max(year))}",
        fontsize=16, color="white", fontweight="bold", y=0.98,
    )

    plt.savefig(
        filepath, dpi=dpi, facecolor="#050510",
        edgecolor="none", bbox_inches="tight",
    )
    plt.close()

    logger.info(f"Time series plot saved: {filepath}")
