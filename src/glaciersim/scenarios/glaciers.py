"""
Built-in glacier scenarios offered on the selection screen.

Each scenario trades ice reserves against sensitivity:
- Titanus Glacies: huge but sensitive
- Fortress Peak: small but stable
- Equinox Fields: balanced, good for beginners
"""

from typing import Dict, List

from glaciersim.core.state import Glacier


GLACIERS: Dict[str, Glacier] = {
    "titanus": Glacier(
        name="Titanus Glacies",
        initial_thickness=2000,
        initial_area=500,
        initial_stability=100,
        temperature_sensitivity=8,
        description=(
            "A massive, ancient glacier. Thick ice but highly sensitive to "
            "temperature changes due to its location."
        ),
    ),
    "fortress": Glacier(
        name="Fortress Peak",
        initial_thickness=800,
        initial_area=150,
        initial_stability=100,
        temperature_sensitivity=4,
        description=(
            "Small, compact glacier in a high-altitude valley. Very stable but "
            "has low volume reserves."
        ),
    ),
    "equinox": Glacier(
        name="Equinox Fields",
        initial_thickness=1200,
        initial_area=300,
        initial_stability=100,
        temperature_sensitivity=6,
        description=(
            "A balanced glacier with moderate thickness and sensitivity. "
            "Good for beginners."
        ),
    ),
}


def _normalize(key: str) -> str:
    return key.lower().replace("-", "").replace("_", "").replace(" ", "")


def get_glacier(key: str) -> Glacier:
    """
    Get a built-in glacier by key or name.

    Parameters
    ----------
    key : str
        Scenario key (e.g. "titanus") or display name
        (e.g. "Fortress Peak"), case and separators ignored.

    Returns
    -------
    Glacier
        Glacier scenario.

    Raises
    ------
    KeyError
        If no glacier matches.
    """
    key_norm = _normalize(key)

    if key_norm in GLACIERS:
        return GLACIERS[key_norm]

    # Try display names and short aliases
    key_map = {_normalize(g.name): k for k, g in GLACIERS.items()}
    key_map.update({
        "titan": "titanus",
        "fortress": "fortress",
        "peak": "fortress",
        "equinox": "equinox",
        "balanced": "equinox",
    })

    if key_norm in key_map:
        return GLACIERS[key_map[key_norm]]

    available = list(GLACIERS.keys())
    raise KeyError(f"Unknown glacier '{key}'. Available: {available}")


def list_glaciers() -> List[str]:
    """
    List available glacier keys.

    Returns
    -------
    List[str]
        List of glacier identifiers.
    """
    return list(GLACIERS.keys())
