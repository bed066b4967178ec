"""
Logging setup for glaciersim plus nested step timing.

Batch runs report progress as named steps (setup, tick loop, results).
A sweep wraps one such run per sample, so steps nest and the timing
summary only lists the outermost ones.
"""

import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Optional, Dict, Any, List

PACKAGE_LOGGER = "glaciersim"

# (format, datefmt) per config ``logging.format_style``
LOG_FORMATS = {
    "detailed": ("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", "%Y-%m-%d %H:%M:%S"),
    "simple": ("%(levelname)s: %(message)s", None),
}

_timing_logger: Optional["TimingLogger"] = None


class TimingLogger:
    """Wall-clock durations of (possibly nested) named steps."""

    def __init__(self):
        self.steps: List[Dict[str, Any]] = []
        self._open: List[Dict[str, Any]] = []
        self.start_time: float = time.time()

    @property
    def current_step(self) -> Optional[Dict[str, Any]]:
        return self._open[-1] if self._open else None

    def start_step(self, name: str) -> None:
        self._open.append({"name": name, "depth": len(self._open), "start": time.time()})

    def end_step(self, success: bool = True) -> float:
        """Close the innermost open step; 0.0 if none is open."""
        if not self._open:
            return 0.0
        step = self._open.pop()
        step["duration"] = time.time() - step["start"]
        step["success"] = success
        self.steps.append(step)
        return step["duration"]

    def top_level_steps(self) -> List[Dict[str, Any]]:
        return [step for step in self.steps if step["depth"] == 0]

    def get_summary(self) -> str:
        rows = [
            f"  {'✓' if step['success'] else '✗'} {step['name']}: {step['duration']:.2f}s"
            for step in self.top_level_steps()
        ]
        rule = "─" * 60
        return "\n".join([
            "",
            rule,
            "  Step timings",
            rule,
            *rows,
            rule,
            f"  Total: {time.time() - self.start_time:.2f}s",
        ])


def get_timing_logger() -> Optional[TimingLogger]:
    return _timing_logger


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    experiment_name: Optional[str] = None,
    format_style: str = "detailed",
) -> logging.Logger:
    """
    Configure the package logger and reset step timing.

    Parameters
    ----------
    level : str
        Console log level (DEBUG, INFO, WARNING, ERROR).
    log_dir : str, optional
        Directory for ``<experiment_name>.log``, which always records
        DEBUG. No file is written when None.
    experiment_name : str, optional
        Log file stem. Defaults to the package name.
    format_style : str
        One of :data:`LOG_FORMATS`.

    Returns
    -------
    logging.Logger
        The configured package logger.

    Raises
    ------
    ValueError
        If ``format_style`` is unknown.
    """
    global _timing_logger

    if format_style not in LOG_FORMATS:
        raise ValueError(f"Unknown log format '{format_style}'. Available: {list(LOG_FORMATS)}")
    fmt, datefmt = LOG_FORMATS[format_style]
    formatter = logging.Formatter(fmt, datefmt=datefmt)
    console_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    logger.addHandler(console)
    logger.setLevel(console_level)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / f"{experiment_name or PACKAGE_LOGGER}.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        # Let DEBUG records reach the file even when the console is quieter
        logger.setLevel(logging.DEBUG)

    _timing_logger = TimingLogger()
    return logger


def start_step(name: str) -> None:
    logging.getLogger(PACKAGE_LOGGER).debug(f"Starting: {name}")
    if _timing_logger:
        _timing_logger.start_step(name)


def end_step(success: bool = True) -> float:
    duration = _timing_logger.end_step(success) if _timing_logger else 0.0
    logging.getLogger(PACKAGE_LOGGER).debug(
        f"Step {'completed' if success else 'FAILED'} in {duration:.3f}s"
    )
    return duration


def log_error(error: Exception, context: str = "") -> None:
    """Log an error line, with the traceback at DEBUG."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.error(f"ERROR in {context}: {type(error).__name__}: {error}")
    logger.debug(traceback.format_exc())


def log_calculation_issue(issue_type: str, description: str, details: Dict[str, Any]) -> None:
    """Warn about a suspicious value (NaN, broken invariant) in a trajectory."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.warning(f"Calculation issue [{issue_type}]: {description}")
    if details:
        logger.debug(f"  Details: {details}")
