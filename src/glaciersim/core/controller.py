"""
Stateful driver for one interactive simulation session.

The controller owns the PhysicalState / EnvironmentalInputs /
SimulationRecord triple, advances it one year per tick, detects the
terminal predicates and keeps a bounded rolling history for charting.

Ticks are either driven by the host (call :meth:`tick`) or by the
controller's own periodic clock, an ``asyncio.Task`` scheduled by
:meth:`start` when an event loop is running and cancelled by :meth:`pause`.
"""

from typing import Any, Dict, List, Optional
from collections import deque
from dataclasses import dataclass, field
import asyncio
import logging

from glaciersim.core.dynamics import advance, compute_health, effective_temperature
from glaciersim.core.scoring import TerminalSummary
from glaciersim.core.state import (
    EnvironmentalInputs,
    Glacier,
    GlacierBaseline,
    PhysicalState,
)

logger = logging.getLogger(__name__)


DEFAULT_EPOCH = 2024
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_TICK_INTERVAL = 1.0

OUTCOME_COLLAPSED = "collapsed"
OUTCOME_SURVIVED = "survived"


@dataclass(frozen=True)
class HistoryEntry:
    """One point of the trend chart."""

    year: int
    thickness: float
    temp: float


@dataclass
class SimulationRecord:
    """
    Session bookkeeping.

    Attributes
    ----------
    year : int
        Current calendar year; starts at the epoch, +1 per tick.
    running : bool
        Whether ticks currently advance the simulation.
    terminal : bool
        Absorbing end state; no further evolution once set.
    outcome : str, optional
        ``None`` while playing, ``"collapsed"`` on melt/collapse,
        ``"survived"`` when a year limit is reached.
    cause : str, optional
        Which terminal predicate fired: ``"melted"`` or ``"collapsed"``.
    health : float
        Display-only blend of stability and retained mass.
    history : deque of HistoryEntry
        Most recent entries, oldest evicted first.
    """

    year: int
    history: deque
    running: bool = False
    terminal: bool = False
    outcome: Optional[str] = None
    cause: Optional[str] = None
    health: float = 100.0

    @property
    def status(self) -> str:
        if self.terminal:
            return "terminal"
        return "running" if self.running else "idle"


class SimulationController:
    """
    Drives a glacier through simulated years.

    Parameters
    ----------
    epoch : int, optional
        Calendar year of the first state. Default is 2024.
    history_limit : int, optional
        Maximum number of history entries kept. Default is 50.
    tick_interval : float, optional
        Wall-clock seconds between clock ticks. ``None`` disables the
        clock entirely (host-driven ticks). Default is 1.0.
    max_years : int, optional
        Number of years after which the session ends as survived.
        ``None`` (default) means only melt/collapse end a session.
    """

    def __init__(
        self,
        epoch: int = DEFAULT_EPOCH,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        tick_interval: Optional[float] = DEFAULT_TICK_INTERVAL,
        max_years: Optional[int] = None,
    ):
        if history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {history_limit}")
        if tick_interval is not None and tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        if max_years is not None and max_years < 1:
            raise ValueError(f"max_years must be at least 1, got {max_years}")

        self.epoch = epoch
        self.history_limit = history_limit
        self.tick_interval = tick_interval
        self.max_years = max_years

        self.glacier: Optional[Glacier] = None
        self.baseline: Optional[GlacierBaseline] = None
        self.state: Optional[PhysicalState] = None
        self.environment = EnvironmentalInputs()
        self.record: Optional[SimulationRecord] = None

        self._clock_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SimulationController":
        """Build a controller from the ``simulation`` section of a config."""
        sim = config.get("simulation", {})
        return cls(
            epoch=sim.get("epoch", DEFAULT_EPOCH),
            history_limit=sim.get("history_limit", DEFAULT_HISTORY_LIMIT),
            tick_interval=sim.get("tick_interval", DEFAULT_TICK_INTERVAL),
            max_years=sim.get("max_years"),
        )

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def initialize(self, glacier: Glacier) -> SimulationRecord:
        """
        Load a glacier scenario and reset the session.

        The glacier's own readings become the starting PhysicalState; a
        copy of its thickness, area and sensitivity becomes the baseline.

        Raises
        ------
        ValueError
            If the glacier data is invalid.
        """
        glacier.validate()
        self._cancel_clock()

        self.glacier = glacier
        self.baseline = glacier.baseline()
        self.state = glacier.initial_state()
        self.environment = EnvironmentalInputs()

        history = deque(maxlen=self.history_limit)
        history.append(HistoryEntry(year=self.epoch, thickness=self.state.thickness, temp=0.0))
        self.record = SimulationRecord(year=self.epoch, history=history)

        logger.info(
            f"Initialized '{glacier.name}': thickness={self.state.thickness:.1f} m, "
            f"area={self.state.area:.1f} km², stability={self.state.stability:.0f}, "
            f"sensitivity={self.baseline.temperature_sensitivity}"
        )
        return self.record

    def start(self) -> None:
        """Resume ticking. No-op when already running or terminal."""
        record = self._require_record()
        if record.running or record.terminal:
            return
        record.running = True
        logger.debug(f"Simulation started at year {record.year}")
        self._schedule_clock()

    def pause(self) -> None:
        """Stop ticking. No-op when not running."""
        record = self._require_record()
        if not record.running:
            return
        record.running = False
        self._cancel_clock()
        logger.debug(f"Simulation paused at year {record.year}")

    def set_environment_factor(self, key: str, value: float) -> float:
        """
        Overwrite one environmental factor.

        Returns the stored value, which is clamped into the factor's range.
        """
        stored = self.environment.set(key, value)
        logger.debug(f"Environment {key} set to {stored}")
        return stored

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance one simulated year.

        Returns
        -------
        bool
            True if the state advanced, False if the tick was a no-op
            (paused, terminal or not initialized).
        """
        record = self.record
        if record is None or not record.running or record.terminal:
            return False

        new_state = advance(self.state, self.environment, self.baseline)
        temp = effective_temperature(self.environment)

        is_melted = new_state.thickness <= 0 or new_state.area <= 0
        is_collapsed = new_state.stability <= 0

        self.state = new_state
        record.health = compute_health(new_state, self.baseline)
        record.history.append(
            HistoryEntry(year=record.year + 1, thickness=new_state.thickness, temp=temp)
        )
        record.year += 1

        if is_melted or is_collapsed:
            record.cause = "melted" if is_melted else "collapsed"
            self._terminate(OUTCOME_COLLAPSED)
        elif self.max_years is not None and self.years_elapsed >= self.max_years:
            self._terminate(OUTCOME_SURVIVED)

        return True

    def _terminate(self, outcome: str) -> None:
        record = self.record
        record.terminal = True
        record.running = False
        record.outcome = outcome
        logger.info(
            f"Simulation ended in year {record.year}: {outcome}"
            + (f" ({record.cause})" if record.cause else "")
        )

    # -------------------------------------------------------------------------
    # Periodic clock
    # -------------------------------------------------------------------------

    def _schedule_clock(self) -> None:
        if self.tick_interval is None or self._clock_task is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, ticks are host-driven")
            return
        self._clock_task = loop.create_task(self._run_clock())

    def _cancel_clock(self) -> None:
        task = self._clock_task
        self._clock_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run_clock(self) -> None:
        record = self.record
        while record.running and not record.terminal:
            await asyncio.sleep(self.tick_interval)
            # A pause during the sleep must not let a stale tick through
            if record is not self.record or not record.running:
                break
            self.tick()
        if self._clock_task is asyncio.current_task():
            self._clock_task = None

    async def wait(self) -> None:
        """Wait for the clock to stop (pause or terminal)."""
        task = self._clock_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    @property
    def clock_active(self) -> bool:
        return self._clock_task is not None and not self._clock_task.done()

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def years_elapsed(self) -> int:
        return self._require_record().year - self.epoch

    @property
    def history(self) -> List[HistoryEntry]:
        return list(self._require_record().history)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the current session state for renderers."""
        record = self._require_record()
        return {
            "glacier": self.glacier.name,
            "year": record.year,
            "status": record.status,
            "running": record.running,
            "terminal": record.terminal,
            "outcome": record.outcome,
            "cause": record.cause,
            "health": record.health,
            "state": self.state.to_dict(),
            "environment": self.environment.to_dict(),
            "history": [
                {"year": e.year, "thickness": e.thickness, "temp": e.temp}
                for e in record.history
            ],
        }

    def summary(self) -> TerminalSummary:
        """
        Summary of the session for scoring and the results view.

        A session that has not collapsed is reported as survived (the
        player leaving is the survival path when no year limit is set).
        """
        record = self._require_record()
        return TerminalSummary.build(
            glacier_name=self.glacier.name,
            outcome=record.outcome or OUTCOME_SURVIVED,
            year=record.year,
            epoch=self.epoch,
            final_volume=self.state.volume,
            final_stability=self.state.stability,
            final_thickness=self.state.thickness,
        )

    def _require_record(self) -> SimulationRecord:
        if self.record is None:
            raise RuntimeError("Simulation not initialized, call initialize() first")
        return self.record

    def __repr__(self) -> str:
        if self.record is None:
            return "SimulationController(uninitialized)"
        return (
            f"SimulationController(glacier='{self.glacier.name}', year={self.record.year}, "
            f"status={self.record.status}, thickness={self.state.thickness:.1f})"
        )
