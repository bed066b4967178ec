"""
State records for the glacier simulation.

Three records describe one simulation session:

    GlacierBaseline      immutable initial readings (ratio/threshold checks)
    PhysicalState        current thickness, area, stability (volume derived)
    EnvironmentalInputs  the control vector the player manipulates

A Glacier is the scenario record handed over by the glacier source; it is
validated once and split into a baseline and a starting PhysicalState.
"""

from typing import Dict, Optional, Tuple
from dataclasses import dataclass, field, fields
import logging
import math

logger = logging.getLogger(__name__)


# Valid (min, max) range for each environmental control
ENVIRONMENT_RANGES: Dict[str, Tuple[float, float]] = {
    "global_temp": (-5.0, 5.0),   # °C offset
    "snowfall": (0.0, 2.0),       # multiplier, 1 = baseline
    "emissions": (0.0, 2.0),      # multiplier, 1 = baseline
    "ocean_temp": (-2.0, 2.0),    # °C offset
}

DEFAULT_ENVIRONMENT: Dict[str, float] = {
    "global_temp": 0.0,
    "snowfall": 1.0,
    "emissions": 1.0,
    "ocean_temp": 0.0,
}

SENSITIVITY_RANGE: Tuple[float, float] = (1.0, 10.0)
STABILITY_RANGE: Tuple[float, float] = (0.0, 100.0)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return min(high, max(low, value))


@dataclass(frozen=True)
class GlacierBaseline:
    """
    Immutable initial readings of a glacier scenario.

    Attributes
    ----------
    initial_thickness : float
        Ice thickness at load time (m, > 0).
    initial_area : float
        Surface area at load time (km², > 0).
    temperature_sensitivity : float
        Melt response to warming, in [1, 10].
    """

    initial_thickness: float
    initial_area: float
    temperature_sensitivity: float

    @property
    def initial_volume(self) -> float:
        return self.initial_thickness * self.initial_area


@dataclass(frozen=True)
class PhysicalState:
    """
    Measurable condition of a glacier at one observation point.

    Volume is never stored; it is always ``thickness * area``.
    """

    thickness: float
    area: float
    stability: float

    @property
    def volume(self) -> float:
        """Ice volume (thickness × area)."""
        return self.thickness * self.area

    def clamped(self) -> "PhysicalState":
        """Return a copy with every field forced into its valid range."""
        return PhysicalState(
            thickness=max(0.0, self.thickness),
            area=max(0.0, self.area),
            stability=clamp(self.stability, *STABILITY_RANGE),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "thickness": self.thickness,
            "area": self.area,
            "stability": self.stability,
            "volume": self.volume,
        }


@dataclass
class EnvironmentalInputs:
    """
    User-controlled environment vector.

    Every write goes through :meth:`set`, which clamps the value into
    ``ENVIRONMENT_RANGES``. Constructing with out-of-range values clamps
    them as well.
    """

    global_temp: float = 0.0
    snowfall: float = 1.0
    emissions: float = 1.0
    ocean_temp: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            low, high = ENVIRONMENT_RANGES[f.name]
            setattr(self, f.name, clamp(float(getattr(self, f.name)), low, high))

    def set(self, key: str, value: float) -> float:
        """
        Overwrite one environmental factor, clamped to its valid range.

        Parameters
        ----------
        key : str
            One of ``global_temp``, ``snowfall``, ``emissions``, ``ocean_temp``.
        value : float
            Requested value.

        Returns
        -------
        float
            The value actually stored.

        Raises
        ------
        KeyError
            If key is not an environmental factor.
        """
        if key not in ENVIRONMENT_RANGES:
            raise KeyError(
                f"Unknown environment factor '{key}'. "
                f"Available: {list(ENVIRONMENT_RANGES)}"
            )
        low, high = ENVIRONMENT_RANGES[key]
        stored = clamp(float(value), low, high)
        if stored != value:
            logger.warning(f"{key}={value} outside [{low}, {high}], clamped to {stored}")
        setattr(self, key, stored)
        return stored

    def update(self, values: Dict[str, float]) -> None:
        """Set several factors at once."""
        for key, value in values.items():
            self.set(key, value)

    def copy(self) -> "EnvironmentalInputs":
        return EnvironmentalInputs(**self.to_dict())

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Glacier:
    """
    Glacier scenario as supplied by the glacier source.

    Attributes
    ----------
    name : str
        Display name.
    initial_thickness : float
        Ice thickness (m).
    initial_area : float
        Surface area (km²).
    initial_stability : float
        Starting structural integrity (0-100).
    temperature_sensitivity : float
        1-10 scale, higher melts faster.
    description : str, optional
        Flavor text shown on selection.
    """

    name: str
    initial_thickness: float
    initial_area: float
    initial_stability: float = 100.0
    temperature_sensitivity: float = 5.0
    description: Optional[str] = field(default=None, compare=False)

    def validate(self) -> None:
        """
        Reject data that would produce degenerate physical states.

        Raises
        ------
        ValueError
            If any value is non-finite or outside its valid domain.
        """
        numeric = {
            "initial_thickness": self.initial_thickness,
            "initial_area": self.initial_area,
            "initial_stability": self.initial_stability,
            "temperature_sensitivity": self.temperature_sensitivity,
        }
        for key, value in numeric.items():
            if value is None or not math.isfinite(value):
                raise ValueError(f"Glacier '{self.name}': {key} must be finite, got {value}")

        if self.initial_thickness <= 0:
            raise ValueError(
                f"Glacier '{self.name}': initial_thickness must be positive, "
                f"got {self.initial_thickness}"
            )
        if self.initial_area <= 0:
            raise ValueError(
                f"Glacier '{self.name}': initial_area must be positive, got {self.initial_area}"
            )
        low, high = SENSITIVITY_RANGE
        if not low <= self.temperature_sensitivity <= high:
            raise ValueError(
                f"Glacier '{self.name}': temperature_sensitivity must be in [{low}, {high}], "
                f"got {self.temperature_sensitivity}"
            )
        low, high = STABILITY_RANGE
        if not low <= self.initial_stability <= high:
            raise ValueError(
                f"Glacier '{self.name}': initial_stability must be in [{low}, {high}], "
                f"got {self.initial_stability}"
            )

    def baseline(self) -> GlacierBaseline:
        return GlacierBaseline(
            initial_thickness=float(self.initial_thickness),
            initial_area=float(self.initial_area),
            temperature_sensitivity=float(self.temperature_sensitivity),
        )

    def initial_state(self) -> PhysicalState:
        return PhysicalState(
            thickness=float(self.initial_thickness),
            area=float(self.initial_area),
            stability=float(self.initial_stability),
        )
