"""
Per-year state transition for the glacier toy model.

One tick advances the glacier by one simulated year:

    T_eff   = T_global + (E - 1) * 0.1
    melt    = max(0, (T_eff + 0.8 * T_ocean + 2) * S / 5)
    accum   = snowfall * 5 * max(0.1, 1 - 0.1 * T_eff)
    H'      = max(0, H + accum - melt)
    A'      = 0.99 * A   if H' < 0.5 * H_0   else A
    stab'   = clamp(stab - 2[melt > accum] - 1[T_ocean > 1] + 1[accum > melt], 0, 100)

Where S is the glacier's temperature sensitivity (1-10) and H_0 its
initial thickness. This is a tunable game model, not glaciology: the
constants below set the balance, not physical reality.
"""

from typing import Dict

from glaciersim.core.state import (
    EnvironmentalInputs,
    GlacierBaseline,
    PhysicalState,
    clamp,
)


# Emissions act as a slow amplifier on the direct temperature control
EMISSION_WARMING = 0.1
# Ambient melt at zero temperature offset (m/year at sensitivity 5)
BASE_MELT = 2.0
OCEAN_WEIGHT = 0.8
SENSITIVITY_NORM = 5.0
# Accumulation at snowfall 1 and zero warming (m/year)
BASE_ACCUMULATION = 5.0
INHIBITION_PER_DEGREE = 0.1
MIN_INHIBITION = 0.1
# Area retreats once thickness falls below this fraction of the initial value
AREA_SHRINK_THRESHOLD = 0.5
AREA_SHRINK_RATE = 0.99
# Stability adjustments per year
STABILITY_MELT_PENALTY = 2.0
STABILITY_OCEAN_PENALTY = 1.0
STABILITY_OCEAN_LIMIT = 1.0
STABILITY_RECOVERY = 1.0


def effective_temperature(env: EnvironmentalInputs) -> float:
    """Air temperature offset including the emissions amplifier (°C)."""
    return env.global_temp + (env.emissions - 1) * EMISSION_WARMING


def melt_rate(env: EnvironmentalInputs, baseline: GlacierBaseline) -> float:
    """
    Annual thickness loss to melting (m/year).

    Parameters
    ----------
    env : EnvironmentalInputs
        Current environment.
    baseline : GlacierBaseline
        Glacier baseline (for temperature sensitivity).

    Returns
    -------
    float
        Non-negative melt rate.
    """
    sensitivity_factor = baseline.temperature_sensitivity / SENSITIVITY_NORM
    forcing = effective_temperature(env) + env.ocean_temp * OCEAN_WEIGHT + BASE_MELT
    return max(0.0, forcing * sensitivity_factor)


def accumulation(env: EnvironmentalInputs) -> float:
    """
    Annual thickness gain from snowfall (m/year).

    Warmer air turns snow to rain; the inhibition factor is floored at
    10% effectiveness.
    """
    inhibition = max(MIN_INHIBITION, 1 - effective_temperature(env) * INHIBITION_PER_DEGREE)
    return env.snowfall * BASE_ACCUMULATION * inhibition


def compute_rates(env: EnvironmentalInputs, baseline: GlacierBaseline) -> Dict[str, float]:
    """Return the intermediate quantities of one tick."""
    return {
        "effective_temp": effective_temperature(env),
        "melt_rate": melt_rate(env, baseline),
        "accumulation": accumulation(env),
    }


def advance(
    state: PhysicalState,
    env: EnvironmentalInputs,
    baseline: GlacierBaseline,
) -> PhysicalState:
    """
    Advance the glacier by one simulated year.

    Pure and deterministic: the inputs are not modified and no randomness
    is involved. Inputs are assumed to be inside their valid ranges.

    Parameters
    ----------
    state : PhysicalState
        State at the start of the year.
    env : EnvironmentalInputs
        Environment applied for the whole year.
    baseline : GlacierBaseline
        Immutable initial readings of the glacier.

    Returns
    -------
    PhysicalState
        State at the end of the year, clamped into valid ranges.
    """
    melt = melt_rate(env, baseline)
    accum = accumulation(env)

    new_thickness = max(0.0, state.thickness + accum - melt)

    # Area never grows
    new_area = state.area
    if new_thickness < baseline.initial_thickness * AREA_SHRINK_THRESHOLD:
        new_area = state.area * AREA_SHRINK_RATE

    stability_change = 0.0
    if melt > accum:
        stability_change -= STABILITY_MELT_PENALTY
    if env.ocean_temp > STABILITY_OCEAN_LIMIT:
        stability_change -= STABILITY_OCEAN_PENALTY
    if accum > melt:
        stability_change += STABILITY_RECOVERY

    return PhysicalState(
        thickness=new_thickness,
        area=max(0.0, new_area),
        stability=clamp(state.stability + stability_change, 0.0, 100.0),
    )


def compute_health(state: PhysicalState, baseline: GlacierBaseline) -> float:
    """
    Display-only health score (0-100).

    Blends stability (40%) with retained ice mass relative to the
    baseline volume (60%). Has no effect on the physical model.
    """
    initial_volume = baseline.initial_volume
    mass_ratio = state.volume / initial_volume if initial_volume > 0 else 0.0
    return clamp(state.stability * 0.4 + mass_ratio * 100 * 0.6, 0.0, 100.0)
