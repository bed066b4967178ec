"""
glaciersim - Interactive Glacier Survival Toy Model

A deterministic, tunable glacier model: pick a glacier, adjust
temperature, snowfall, emissions and ocean temperature, and watch
thickness, area and stability evolve year by year until the ice
collapses or the player walks away.
"""

__version__ = "0.1.0"

from glaciersim.core.state import (
    EnvironmentalInputs,
    Glacier,
    GlacierBaseline,
    PhysicalState,
    ENVIRONMENT_RANGES,
    DEFAULT_ENVIRONMENT,
)
from glaciersim.core.dynamics import (
    advance,
    effective_temperature,
    melt_rate,
    accumulation,
    compute_health,
)
from glaciersim.core.controller import SimulationController, SimulationRecord, HistoryEntry
from glaciersim.core.scoring import score, grade, Grade, TerminalSummary
from glaciersim.core.model import GlacierModel
from glaciersim.core.results import SimulationResults
from glaciersim.scenarios import GLACIERS, get_glacier, list_glaciers

__all__ = [
    "__version__",
    "EnvironmentalInputs",
    "Glacier",
    "GlacierBaseline",
    "PhysicalState",
    "ENVIRONMENT_RANGES",
    "DEFAULT_ENVIRONMENT",
    "advance",
    "effective_temperature",
    "melt_rate",
    "accumulation",
    "compute_health",
    "SimulationController",
    "SimulationRecord",
    "HistoryEntry",
    "score",
    "grade",
    "Grade",
    "TerminalSummary",
    "GlacierModel",
    "SimulationResults",
    "GLACIERS",
    "get_glacier",
    "list_glaciers",
]
