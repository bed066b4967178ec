"""Pytest configuration."""
import logging
import pytest

from glaciersim import Glacier, SimulationController


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("glaciersim")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []


@pytest.fixture
def glacier():
    """Neutral-sensitivity glacier, stability room to move both ways."""
    return Glacier(
        name="Test Glacier",
        initial_thickness=1000,
        initial_area=100,
        initial_stability=50,
        temperature_sensitivity=5,
    )


@pytest.fixture
def thin_glacier():
    """Collapses within three years under maximum forcing."""
    return Glacier(
        name="Thin Glacier",
        initial_thickness=50,
        initial_area=10,
        initial_stability=100,
        temperature_sensitivity=10,
    )


@pytest.fixture
def controller(glacier):
    c = SimulationController(tick_interval=None)
    c.initialize(glacier)
    return c
