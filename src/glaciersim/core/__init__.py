"""Core simulation components."""

from glaciersim.core.state import (
    EnvironmentalInputs,
    Glacier,
    GlacierBaseline,
    PhysicalState,
)
from glaciersim.core.dynamics import advance, compute_health
from glaciersim.core.controller import SimulationController, SimulationRecord, HistoryEntry
from glaciersim.core.scoring import score, grade, Grade, TerminalSummary
from glaciersim.core.results import SimulationResults
from glaciersim.core.model import GlacierModel

__all__ = [
    "EnvironmentalInputs",
    "Glacier",
    "GlacierBaseline",
    "PhysicalState",
    "advance",
    "compute_health",
    "SimulationController",
    "SimulationRecord",
    "HistoryEntry",
    "score",
    "grade",
    "Grade",
    "TerminalSummary",
    "SimulationResults",
    "GlacierModel",
]
