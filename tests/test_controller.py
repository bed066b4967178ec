"""Tests for the session controller."""

import asyncio
import pytest

from glaciersim import Glacier, SimulationController


COLLAPSE_ENV = {"global_temp": 5, "snowfall": 0, "emissions": 2, "ocean_temp": 2}


def run_to_end(controller, limit=1000):
    controller.start()
    for _ in range(limit):
        if not controller.tick():
            break


class TestInitialize:
    def test_initial_record(self, controller, glacier):
        record = controller.record
        assert record.year == 2024
        assert record.status == "idle"
        assert record.outcome is None
        assert record.health == 100
        assert len(record.history) == 1
        assert record.history[0].thickness == glacier.initial_thickness
        assert controller.environment.to_dict() == {
            "global_temp": 0.0, "snowfall": 1.0, "emissions": 1.0, "ocean_temp": 0.0,
        }

    def test_state_seeded_from_glacier(self, controller):
        assert controller.state.thickness == 1000
        assert controller.state.area == 100
        assert controller.state.stability == 50
        assert controller.state.volume == 100000
        assert controller.baseline.initial_thickness == 1000

    @pytest.mark.parametrize("kwargs, message", [
        ({"initial_thickness": 0}, "initial_thickness"),
        ({"initial_area": -5}, "initial_area"),
        ({"temperature_sensitivity": 11}, "temperature_sensitivity"),
        ({"initial_stability": 120}, "initial_stability"),
        ({"initial_thickness": float("nan")}, "finite"),
    ])
    def test_rejects_invalid_glacier(self, kwargs, message):
        params = dict(name="Bad", initial_thickness=100, initial_area=10,
                      initial_stability=100, temperature_sensitivity=5)
        params.update(kwargs)
        with pytest.raises(ValueError, match=message):
            SimulationController(tick_interval=None).initialize(Glacier(**params))

    def test_requires_initialize(self):
        with pytest.raises(RuntimeError):
            SimulationController(tick_interval=None).start()

    def test_rejects_bad_settings(self):
        with pytest.raises(ValueError):
            SimulationController(history_limit=0)
        with pytest.raises(ValueError):
            SimulationController(tick_interval=0)


class TestTick:
    def test_paused_tick_is_noop(self, controller):
        before = controller.state
        assert controller.tick() is False
        assert controller.state == before
        assert controller.record.year == 2024

    def test_neutral_tick(self, controller):
        controller.start()
        assert controller.tick() is True
        assert controller.record.year == 2025
        assert controller.state.thickness == pytest.approx(1003)
        assert controller.state.stability == 51
        assert controller.record.health == pytest.approx(51 * 0.4 + 100.3 * 0.6)
        last = controller.history[-1]
        assert (last.year, last.thickness, last.temp) == (2025, pytest.approx(1003), 0.0)

    def test_start_pause_idempotent(self, controller):
        controller.pause()
        assert controller.record.status == "idle"
        controller.start()
        controller.start()
        assert controller.record.status == "running"
        controller.pause()
        controller.pause()
        assert controller.record.status == "idle"

    def test_history_entry_records_effective_temp(self, controller):
        controller.set_environment_factor("global_temp", 1.0)
        controller.set_environment_factor("emissions", 2.0)
        controller.start()
        controller.tick()
        assert controller.history[-1].temp == pytest.approx(1.1)

    def test_history_bounded(self, controller):
        controller.start()
        for _ in range(120):
            controller.tick()
        history = controller.history
        assert len(history) == 50
        assert [e.year for e in history] == list(range(2095, 2145))


class TestEnvironment:
    def test_values_clamped(self, controller):
        assert controller.set_environment_factor("global_temp", 9) == 5.0
        assert controller.set_environment_factor("snowfall", -1) == 0.0
        assert controller.environment.global_temp == 5.0

    def test_unknown_factor(self, controller):
        with pytest.raises(KeyError):
            controller.set_environment_factor("wind", 1.0)


class TestTermination:
    def test_collapse_scenario(self, thin_glacier):
        controller = SimulationController(tick_interval=None)
        controller.initialize(thin_glacier)
        for key, value in COLLAPSE_ENV.items():
            controller.set_environment_factor(key, value)

        run_to_end(controller)

        record = controller.record
        assert record.terminal
        assert not record.running
        assert record.outcome == "collapsed"
        assert record.cause == "melted"
        assert record.year == 2027
        assert controller.state.thickness == 0.0

    def test_stability_collapse(self):
        glacier = Glacier(name="Brittle", initial_thickness=5000, initial_area=100,
                          initial_stability=4, temperature_sensitivity=5)
        controller = SimulationController(tick_interval=None)
        controller.initialize(glacier)
        controller.set_environment_factor("global_temp", 5)
        run_to_end(controller)
        # -2 per year from 4
        assert controller.record.year == 2026
        assert controller.record.cause == "collapsed"
        assert controller.record.outcome == "collapsed"

    def test_terminal_is_absorbing(self, thin_glacier):
        controller = SimulationController(tick_interval=None)
        controller.initialize(thin_glacier)
        for key, value in COLLAPSE_ENV.items():
            controller.set_environment_factor(key, value)
        run_to_end(controller)

        frozen = controller.state
        year = controller.record.year
        controller.start()
        assert controller.record.running is False
        assert controller.tick() is False
        assert controller.state == frozen
        assert controller.record.year == year

    def test_max_years_survival(self, glacier):
        controller = SimulationController(tick_interval=None, max_years=3)
        controller.initialize(glacier)
        run_to_end(controller)
        assert controller.record.outcome == "survived"
        assert controller.record.cause is None
        assert controller.years_elapsed == 3


class TestSummary:
    def test_unfinished_session_counts_as_survived(self, controller):
        controller.start()
        for _ in range(10):
            controller.tick()
        summary = controller.summary()
        assert summary.outcome == "survived"
        assert summary.years_survived == 10
        assert summary.final_volume == pytest.approx(controller.state.volume)

    def test_snapshot(self, controller):
        snap = controller.snapshot()
        assert snap["glacier"] == "Test Glacier"
        assert snap["status"] == "idle"
        assert snap["state"]["volume"] == 100000
        assert snap["history"] == [{"year": 2024, "thickness": 1000.0, "temp": 0.0}]
        snap["history"].clear()
        assert len(controller.history) == 1


class TestClock:
    def test_no_loop_means_host_driven(self, glacier):
        controller = SimulationController(tick_interval=0.01)
        controller.initialize(glacier)
        controller.start()
        assert not controller.clock_active
        assert controller.tick() is True

    def test_clock_ticks_and_pause_stops_it(self, glacier):
        async def scenario():
            controller = SimulationController(tick_interval=0.01)
            controller.initialize(glacier)
            controller.start()
            assert controller.clock_active
            await asyncio.sleep(0.1)
            controller.pause()
            paused_year = controller.record.year
            await asyncio.sleep(0.05)
            return controller, paused_year

        controller, paused_year = asyncio.run(scenario())
        assert paused_year > 2024
        assert controller.record.year == paused_year
        assert not controller.clock_active

    def test_resume_does_not_replay(self, glacier):
        async def scenario():
            controller = SimulationController(tick_interval=0.02)
            controller.initialize(glacier)
            controller.start()
            controller.pause()
            await asyncio.sleep(0.1)
            year_after_pause = controller.record.year
            controller.start()
            await asyncio.sleep(0.005)
            year_after_resume = controller.record.year
            controller.pause()
            return year_after_pause, year_after_resume

        after_pause, after_resume = asyncio.run(scenario())
        assert after_pause == 2024
        assert after_resume == 2024

    def test_clock_stops_on_terminal(self, thin_glacier):
        async def scenario():
            controller = SimulationController(tick_interval=0.001)
            controller.initialize(thin_glacier)
            for key, value in COLLAPSE_ENV.items():
                controller.set_environment_factor(key, value)
            controller.start()
            await asyncio.wait_for(controller.wait(), timeout=5)
            return controller

        controller = asyncio.run(scenario())
        assert controller.record.terminal
        assert controller.record.year == 2027
        assert not controller.clock_active
