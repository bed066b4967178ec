"""
Headless batch runs of the glacier simulation.
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging
import numpy as np
from tqdm import tqdm

from glaciersim.core.controller import SimulationController
from glaciersim.core.dynamics import compute_rates
from glaciersim.core.results import SimulationResults
from glaciersim.core.state import ENVIRONMENT_RANGES, Glacier
from glaciersim.scenarios import get_glacier
from glaciersim.utils.logging import (
    start_step,
    end_step,
    log_error,
    log_calculation_issue,
)

logger = logging.getLogger(__name__)


Schedule = Dict[int, Dict[str, float]]


class GlacierModel:
    """
    Runs complete sessions without a clock, one tick per loop iteration.

    The controller used for each run is the same one an interactive host
    would use, so batch results match interactive play year for year.

    Parameters
    ----------
    epoch : int, optional
        Calendar year of the first state. Default is 2024.
    history_limit : int, optional
        Rolling history size of the underlying controller. Default is 50.
    max_years : int, optional
        Year limit after which a session counts as survived. Default None.
    """

    def __init__(
        self,
        epoch: int = 2024,
        history_limit: int = 50,
        max_years: Optional[int] = None,
    ):
        self.params = {
            "epoch": epoch,
            "history_limit": history_limit,
            "max_years": max_years,
        }
        logger.info(f"Initialized GlacierModel with params: {self.params}")

    @classmethod
    def from_config(cls, config: Dict) -> "GlacierModel":
        sim = config.get("simulation", {})
        return cls(
            epoch=sim.get("epoch", 2024),
            history_limit=sim.get("history_limit", 50),
            max_years=sim.get("max_years"),
        )

    def _new_controller(self) -> SimulationController:
        return SimulationController(
            epoch=self.params["epoch"],
            history_limit=self.params["history_limit"],
            tick_interval=None,
            max_years=self.params["max_years"],
        )

    def run(
        self,
        glacier: Glacier | str,
        environment: Optional[Dict[str, float]] = None,
        schedule: Optional[Schedule] = None,
        years: int = 100,
        show_progress: bool = True,
    ) -> SimulationResults:
        """
        Run one session until it ends or ``years`` ticks have elapsed.

        Parameters
        ----------
        glacier : Glacier or str
            Glacier record, or the key of a built-in glacier.
        environment : dict, optional
            Initial environmental factors (missing keys stay neutral).
        schedule : dict, optional
            Mapping of calendar year to factor changes applied at the
            start of that year.
        years : int
            Maximum number of ticks. Default 100.
        show_progress : bool
            Show a progress bar. Default True.

        Returns
        -------
        SimulationResults
            Full trajectory plus terminal summary.
        """
        if years < 1:
            raise ValueError(f"years must be at least 1, got {years}")

        # =====================================================================
        # STEP 1: Setup
        # =====================================================================
        start_step("Setup session")

        try:
            if isinstance(glacier, str):
                glacier = get_glacier(glacier)

            controller = self._new_controller()
            controller.initialize(glacier)
            if environment:
                for key, value in environment.items():
                    controller.set_environment_factor(key, value)
            schedule = schedule or {}

            logger.info(f"Running '{glacier.name}' for up to {years} years")
            logger.debug(f"Initial environment: {controller.environment.to_dict()}")

            end_step(success=True)

        except Exception as e:
            log_error(e, "Setup session")
            end_step(success=False)
            raise

        # =====================================================================
        # STEP 2: Tick loop
        # =====================================================================
        start_step("Tick loop")

        try:
            state = controller.state
            rows = {
                "year": [controller.record.year],
                "thickness": [state.thickness],
                "area": [state.area],
                "stability": [state.stability],
                "volume": [state.volume],
                "health": [controller.record.health],
                "effective_temp": [np.nan],
                "melt_rate": [np.nan],
                "accumulation": [np.nan],
            }

            controller.start()
            for _ in tqdm(range(years), desc=glacier.name, disable=not show_progress):
                changes = schedule.get(controller.record.year)
                if changes:
                    logger.debug(f"Year {controller.record.year}: applying {changes}")
                    for key, value in changes.items():
                        controller.set_environment_factor(key, value)

                rates = compute_rates(controller.environment, controller.baseline)
                controller.tick()

                state = controller.state
                rows["year"].append(controller.record.year)
                rows["thickness"].append(state.thickness)
                rows["area"].append(state.area)
                rows["stability"].append(state.stability)
                rows["volume"].append(state.volume)
                rows["health"].append(controller.record.health)
                for key, value in rates.items():
                    rows[key].append(value)

                if controller.record.terminal:
                    break
            controller.pause()

            arrays = {key: np.asarray(values, dtype=np.float64) for key, values in rows.items()}
            self._validate_trajectory(arrays)

            end_step(success=True)

        except Exception as e:
            log_error(e, "Tick loop")
            end_step(success=False)
            raise

        # =====================================================================
        # STEP 3: Build results
        # =====================================================================
        start_step("Building results object")

        try:
            record = controller.record
            results = SimulationResults(
                year=arrays["year"].astype(np.int64),
                thickness=arrays["thickness"],
                area=arrays["area"],
                stability=arrays["stability"],
                volume=arrays["volume"],
                health=arrays["health"],
                effective_temp=arrays["effective_temp"],
                melt_rate=arrays["melt_rate"],
                accumulation=arrays["accumulation"],
                glacier=glacier,
                outcome=record.outcome,
                cause=record.cause,
                terminal_summary=controller.summary(),
                model_params=dict(self.params),
                environment=controller.environment.to_dict(),
            )

            logger.info(f"Session complete: {results!r}")
            end_step(success=True)

        except Exception as e:
            log_error(e, "Building results object")
            end_step(success=False)
            raise

        return results

    def _validate_trajectory(self, arrays: Dict[str, np.ndarray]) -> None:
        """Flag non-finite values or broken invariants in a trajectory."""
        issues = []

        for key in ("thickness", "area", "stability", "volume"):
            bad = int(np.sum(~np.isfinite(arrays[key])))
            if bad:
                issues.append(f"{bad} non-finite {key} values")

        mismatch = np.abs(arrays["volume"] - arrays["thickness"] * arrays["area"])
        if np.nanmax(mismatch) > 1e-6 * max(1.0, float(np.nanmax(arrays["volume"]))):
            issues.append("volume differs from thickness × area")

        if np.any(np.diff(arrays["area"]) > 0):
            issues.append("area increased")

        if issues:
            log_calculation_issue(
                "Trajectory validation",
                "; ".join(issues),
                {"n_points": len(arrays["year"])},
            )

    def sweep(
        self,
        glacier: Glacier | str,
        factor: str,
        values: Iterable[float],
        environment: Optional[Dict[str, float]] = None,
        years: int = 100,
        show_progress: bool = True,
    ) -> List[Tuple[float, Optional[SimulationResults]]]:
        """
        Run one session per value of a single environmental factor.

        Parameters
        ----------
        glacier : Glacier or str
            Glacier to run.
        factor : str
            Environmental factor to vary.
        values : iterable of float
            Values of the factor to test.
        environment : dict, optional
            Other factors held fixed across the sweep.
        years : int
            Maximum ticks per run.
        show_progress : bool
            Show a progress bar over the sweep.

        Returns
        -------
        list
            (value, SimulationResults) pairs; failed runs carry None.
        """
        if factor not in ENVIRONMENT_RANGES:
            raise KeyError(f"Unknown environment factor '{factor}'. Available: {list(ENVIRONMENT_RANGES)}")

        start_step(f"Sweep {factor}")

        try:
            values = list(values)
            results_list = []

            for i, value in enumerate(tqdm(values, desc=f"Sweep {factor}", disable=not show_progress)):
                logger.debug(f"Sweep sample {i + 1}/{len(values)}: {factor}={value}")
                env = dict(environment or {})
                env[factor] = value

                try:
                    results = self.run(glacier, environment=env, years=years, show_progress=False)
                    results_list.append((value, results))
                except Exception as e:
                    log_error(e, f"Sweep sample {factor}={value}")
                    results_list.append((value, None))

            end_step(success=True)
            return results_list

        except Exception as e:
            log_error(e, f"Sweep {factor}")
            end_step(success=False)
            raise

    def __repr__(self) -> str:
        return (f"GlacierModel(epoch={self.params['epoch']}, "
                f"history_limit={self.params['history_limit']}, "
                f"max_years={self.params['max_years']})")
