"""Visualization functions for glaciersim."""

from glaciersim.visualization.timeseries import create_timeseries_plot

__all__ = [
    "create_timeseries_plot",
]
