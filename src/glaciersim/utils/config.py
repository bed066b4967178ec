"""Configuration management for glaciersim."""

from typing import Dict, Any, Optional
from pathlib import Path
import copy
import logging
import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "scenarios": {
        "default": "equinox",
        "available": ["titanus", "fortress", "equinox"],
    },
    # Custom glacier CSV - when set, its glaciers are offered alongside the built-ins
    "glacier_file": None,
    "simulation": {
        "epoch": 2024,
        "tick_interval": 1.0,   # seconds per simulated year in real-time play
        "history_limit": 50,
        "max_years": None,      # None: only melt/collapse end a session
        "default_years": 100,   # tick budget for headless runs
    },
    "environment": {
        "global_temp": 0.0,
        "snowfall": 1.0,
        "emissions": 1.0,
        "ocean_temp": 0.0,
    },
    "outputs": {
        "formats": ["csv", "png"],
        "base_dir": "./outputs",
    },
    "logging": {
        "level": "INFO",
        "log_dir": "./logs",
        "format_style": "detailed",
    },
    "visualization": {
        "timeseries_dpi": 200,
    },
}


def load_config(
    config_path: Optional[str | Path] = None,
    create_default: bool = True,
) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to config file. Defaults to ~/.glaciersim/config.yaml
    create_default : bool, optional
        Create default config if not found. Default is True.

    Returns
    -------
    dict
        Configuration dictionary.
    """
    if config_path is None:
        config_path = Path.home() / ".glaciersim" / "config.yaml"
    else:
        config_path = Path(config_path)

    if config_path.exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            user_config = {}

        config = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)

        _check_simulation_section(config["simulation"])

        # Resolve relative glacier_file against the config file location
        if config.get("glacier_file"):
            glacier_path = Path(config["glacier_file"])
            if not glacier_path.is_absolute():
                config["glacier_file"] = str(config_path.parent / glacier_path)

        return config

    if create_default:
        save_config(DEFAULT_CONFIG, config_path)

    return copy.deepcopy(DEFAULT_CONFIG)


def save_config(
    config: Dict[str, Any],
    config_path: Optional[str | Path] = None,
) -> None:
    """
    Save configuration to YAML file.

    Parameters
    ----------
    config : dict
        Configuration dictionary.
    config_path : str or Path, optional
        Path to config file. Defaults to ~/.glaciersim/config.yaml
    """
    if config_path is None:
        config_path = Path.home() / ".glaciersim" / "config.yaml"
    else:
        config_path = Path(config_path)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Config saved to: {config_path}")


def _check_simulation_section(sim: Dict[str, Any]) -> None:
    """Raise ValueError for simulation settings the controller cannot use."""
    if int(sim["history_limit"]) < 1:
        raise ValueError(f"simulation.history_limit must be at least 1, got {sim['history_limit']}")
    if sim["tick_interval"] is not None and float(sim["tick_interval"]) <= 0:
        raise ValueError(f"simulation.tick_interval must be positive, got {sim['tick_interval']}")
    if sim["max_years"] is not None and int(sim["max_years"]) < 1:
        raise ValueError(f"simulation.max_years must be at least 1, got {sim['max_years']}")


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
