"""
Loading functions for custom glaciers and environment schedules.
"""

from typing import Dict, List
from pathlib import Path
import logging
import math

from glaciersim.core.state import ENVIRONMENT_RANGES, Glacier

logger = logging.getLogger(__name__)


# Accepted column names, first match wins
GLACIER_COLUMNS = {
    "name": ["name", "glacier"],
    "initial_thickness": ["initial_thickness", "thickness", "ice_thickness"],
    "initial_area": ["initial_area", "area", "surface_area"],
    "initial_stability": ["initial_stability", "stability"],
    "temperature_sensitivity": ["temperature_sensitivity", "sensitivity", "temp_sensitivity"],
    "description": ["description"],
}


def _find_column(columns: List[str], candidates: List[str]) -> str | None:
    lowered = {c.lower().strip(): c for c in columns}
    for name in candidates:
        if name in lowered:
            return lowered[name]
    return None


def load_glaciers_csv(
    filepath: str | Path,
    delimiter: str = ",",
) -> Dict[str, Glacier]:
    """
    Load glacier scenarios from CSV file.

    Expected columns: name, thickness (m), area (km²), and optionally
    stability (default 100), sensitivity (default 5), description.

    Parameters
    ----------
    filepath : str or Path
        Path to CSV file.
    delimiter : str, optional
        Column delimiter. Default is ",".

    Returns
    -------
    dict
        Glaciers keyed by lower-cased name, each validated.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If a required column is missing or a row is invalid.

    Examples
    --------
    >>> glaciers = load_glaciers_csv("my_glaciers.csv")
    >>> controller.initialize(glaciers["aletsch"])
    """
    import pandas as pd

    filepath = Path(filepath)
    logger.info(f"Loading glaciers from CSV: {filepath}")

    if not filepath.exists():
        raise FileNotFoundError(f"Glacier file not found: {filepath}")

    df = pd.read_csv(filepath, delimiter=delimiter, comment="#")
    columns = list(df.columns)

    resolved = {}
    for field_name, candidates in GLACIER_COLUMNS.items():
        column = _find_column(columns, candidates)
        if column is None and field_name in ("name", "initial_thickness", "initial_area"):
            raise ValueError(f"Glacier file {filepath} is missing a '{candidates[0]}' column")
        resolved[field_name] = column

    glaciers = {}
    for row_number, row in enumerate(df.to_dict("records"), start=1):
        kwargs = {}
        for field_name, column in resolved.items():
            if column is None:
                continue
            value = row[column]
            if field_name == "description":
                if isinstance(value, str):
                    kwargs[field_name] = value
                continue
            if field_name != "name":
                value = float(value)
                if math.isnan(value) and field_name in ("initial_stability", "temperature_sensitivity"):
                    continue
            kwargs[field_name] = value

        glacier = Glacier(**kwargs)
        try:
            glacier.validate()
        except ValueError as e:
            raise ValueError(f"{filepath}, row {row_number}: {e}") from e
        glaciers[str(glacier.name).lower()] = glacier

    logger.info(f"Loaded {len(glaciers)} glaciers")
    return glaciers


def load_schedule_csv(
    filepath: str | Path,
    year_col: str = "year",
    delimiter: str = ",",
) -> Dict[int, Dict[str, float]]:
    """
    Load an environment schedule from CSV file.

    Each row sets one or more environmental factors at the start of the
    given calendar year. Empty cells leave the factor unchanged.

    Parameters
    ----------
    filepath : str or Path
        Path to CSV file with a year column and any of global_temp,
        snowfall, emissions, ocean_temp.
    year_col : str, optional
        Name of the year column. Default is "year".
    delimiter : str, optional
        Column delimiter. Default is ",".

    Returns
    -------
    dict
        Mapping of year to factor changes.
    """
    import pandas as pd

    filepath = Path(filepath)
    logger.info(f"Loading schedule from CSV: {filepath}")

    if not filepath.exists():
        raise FileNotFoundError(f"Schedule file not found: {filepath}")

    df = pd.read_csv(filepath, delimiter=delimiter, comment="#")
    df.columns = [c.lower().strip() for c in df.columns]

    if year_col not in df.columns:
        raise ValueError(f"Schedule file {filepath} has no '{year_col}' column")

    factor_cols = [c for c in df.columns if c in ENVIRONMENT_RANGES]
    unknown = [c for c in df.columns if c != year_col and c not in ENVIRONMENT_RANGES]
    if unknown:
        logger.warning(f"Ignoring unknown schedule columns: {unknown}")
    if not factor_cols:
        raise ValueError(f"Schedule file {filepath} has no environment factor columns")

    schedule: Dict[int, Dict[str, float]] = {}
    for row in df.to_dict("records"):
        year = int(row[year_col])
        changes = {
            col: float(row[col]) for col in factor_cols
            if not pd.isna(row[col])
        }
        if changes:
            schedule.setdefault(year, {}).update(changes)

    logger.info(f"Loaded schedule with {len(schedule)} entries")
    if schedule:
        logger.debug(f"Schedule years: {min(schedule)} - {max(schedule)}")

    return schedule
