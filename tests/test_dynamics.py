"""Tests for the per-year state transition."""

import pytest
import numpy as np

from glaciersim import (
    EnvironmentalInputs,
    GlacierBaseline,
    PhysicalState,
    advance,
    accumulation,
    compute_health,
    effective_temperature,
    melt_rate,
)


@pytest.fixture
def baseline():
    return GlacierBaseline(initial_thickness=1000, initial_area=100, temperature_sensitivity=5)


@pytest.fixture
def state():
    return PhysicalState(thickness=1000, area=100, stability=50)


class TestRates:
    def test_emissions_amplify_temperature(self):
        env = EnvironmentalInputs(global_temp=1.0, emissions=2.0)
        assert effective_temperature(env) == pytest.approx(1.1)

    def test_neutral_rates(self, baseline):
        env = EnvironmentalInputs()
        assert melt_rate(env, baseline) == pytest.approx(2.0)
        assert accumulation(env) == pytest.approx(5.0)

    def test_maximum_forcing_rates(self):
        baseline = GlacierBaseline(initial_thickness=50, initial_area=10, temperature_sensitivity=10)
        env = EnvironmentalInputs(global_temp=5, snowfall=0, emissions=2, ocean_temp=2)
        assert melt_rate(env, baseline) == pytest.approx(17.4)
        assert accumulation(env) == 0.0

    def test_melt_never_negative(self, baseline):
        env = EnvironmentalInputs(global_temp=-5, ocean_temp=-2)
        assert melt_rate(env, baseline) == 0.0
        # colder air boosts accumulation: inhibition 1.5
        assert accumulation(env) == pytest.approx(7.5)

    def test_warm_air_inhibits_snow(self):
        env = EnvironmentalInputs(global_temp=5, emissions=2)
        assert accumulation(env) == pytest.approx(5 * 0.49)


class TestAdvance:
    def test_neutral_environment_grows_glacier(self, state, baseline):
        new = advance(state, EnvironmentalInputs(), baseline)
        assert new.thickness == pytest.approx(1003)
        assert new.area == 100
        assert new.stability == 51
        assert new.volume == pytest.approx(1003 * 100)

    def test_inputs_untouched(self, state, baseline):
        env = EnvironmentalInputs(global_temp=2)
        before = env.to_dict()
        advance(state, env, baseline)
        assert env.to_dict() == before
        assert state == PhysicalState(thickness=1000, area=100, stability=50)

    def test_area_shrinks_below_half_thickness(self, baseline):
        thin = PhysicalState(thickness=400, area=100, stability=50)
        new = advance(thin, EnvironmentalInputs(), baseline)
        assert new.area == pytest.approx(99)

    def test_area_kept_above_half_thickness(self, baseline):
        thick = PhysicalState(thickness=600, area=100, stability=50)
        new = advance(thick, EnvironmentalInputs(global_temp=5), baseline)
        assert new.area == 100

    def test_melt_dominant_costs_stability(self, state, baseline):
        new = advance(state, EnvironmentalInputs(global_temp=5), baseline)
        # melt 7, accumulation 2.5
        assert new.thickness == pytest.approx(995.5)
        assert new.stability == 48

    def test_ocean_penalty_stacks(self, state, baseline):
        # melt 3.2 < accumulation 5: +1 recovery, -1 warm ocean
        new = advance(state, EnvironmentalInputs(ocean_temp=1.5), baseline)
        assert new.stability == 50

        new = advance(state, EnvironmentalInputs(global_temp=5, ocean_temp=2), baseline)
        assert new.stability == 47

    def test_stability_clamped(self, baseline):
        full = PhysicalState(thickness=1000, area=100, stability=100)
        assert advance(full, EnvironmentalInputs(), baseline).stability == 100

        empty = PhysicalState(thickness=1000, area=100, stability=1)
        assert advance(empty, EnvironmentalInputs(global_temp=5, ocean_temp=2), baseline).stability == 0

    def test_thickness_floored_at_zero(self):
        baseline = GlacierBaseline(initial_thickness=50, initial_area=10, temperature_sensitivity=10)
        state = PhysicalState(thickness=10, area=10, stability=100)
        env = EnvironmentalInputs(global_temp=5, snowfall=0, emissions=2, ocean_temp=2)
        new = advance(state, env, baseline)
        assert new.thickness == 0.0
        assert new.volume == 0.0

    def test_bounds_hold_for_random_environments(self, baseline):
        rng = np.random.default_rng(7)
        state = PhysicalState(thickness=1000, area=100, stability=50)
        for _ in range(500):
            env = EnvironmentalInputs(
                global_temp=rng.uniform(-5, 5),
                snowfall=rng.uniform(0, 2),
                emissions=rng.uniform(0, 2),
                ocean_temp=rng.uniform(-2, 2),
            )
            new = advance(state, env, baseline)
            assert new.thickness >= 0
            assert 0 <= new.area <= state.area
            assert 0 <= new.stability <= 100
            assert new.volume == pytest.approx(new.thickness * new.area)
            state = new


class TestHealth:
    def test_blends_stability_and_mass(self, baseline):
        state = PhysicalState(thickness=1003, area=100, stability=51)
        assert compute_health(state, baseline) == pytest.approx(51 * 0.4 + 100.3 * 0.6)

    def test_clamped_to_100(self, baseline):
        state = PhysicalState(thickness=3000, area=100, stability=100)
        assert compute_health(state, baseline) == 100
