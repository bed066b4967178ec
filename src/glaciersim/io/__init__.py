"""Input/Output operations for glaciersim."""

from glaciersim.io.inputs import load_glaciers_csv, load_schedule_csv
from glaciersim.io.csv_writer import write_csv
from glaciersim.io.leaderboard import Leaderboard

__all__ = [
    "load_glaciers_csv",
    "load_schedule_csv",
    "write_csv",
    "Leaderboard",
]
