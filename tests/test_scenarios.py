"""Tests for built-in glacier scenarios."""

import pytest

from glaciersim import GLACIERS, get_glacier, list_glaciers


class TestGlaciers:
    def test_all_glaciers_exist(self):
        assert list_glaciers() == ["titanus", "fortress", "equinox"]

    def test_all_valid(self):
        for glacier in GLACIERS.values():
            glacier.validate()

    @pytest.mark.parametrize("key", ["fortress", "Fortress Peak", "fortress-peak", "PEAK"])
    def test_lookup_aliases(self, key):
        assert get_glacier(key).name == "Fortress Peak"

    def test_titanus_stats(self):
        titan = get_glacier("titan")
        assert titan.initial_thickness == 2000
        assert titan.initial_area == 500
        assert titan.temperature_sensitivity == 8

    def test_unknown(self):
        with pytest.raises(KeyError, match="Available"):
            get_glacier("atlantis")
