"""Unit tests for the turbofan spool model."""

import random

import pytest

from aircore.systems.engine.spool import spool_toward, update_engines


class TestSpoolToward:
    """Test rate-limited N1 changes."""

    def test_spool_up_rate_limited(self):
        assert spool_toward(50.0, 100.0, 0.1) == pytest.approx(50.5)

    def test_spool_down_rate_limited(self):
        assert spool_toward(50.0, 0.0, 0.1) == pytest.approx(49.5)

    def test_reaches_close_target(self):
        assert spool_toward(50.0, 50.2, 0.1) == pytest.approx(50.2)

    def test_clamped(self):
        assert spool_toward(99.9, 150.0, 1.0) == pytest.approx(100.0)
        assert spool_toward(0.1, -50.0, 1.0) == pytest.approx(0.0)


class TestUpdateEngines:
    """Test engine parameters and fuel burn."""

    @pytest.fixture
    def rng(self):
        return random.Random(42)

    def test_n2_follows_n1(self, rng):
        engines = update_engines([85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 0.1, rng)
        for n1, n2 in zip(engines.n1, engines.n2):
            assert n2 == pytest.approx(1.12 * n1)

    def test_egt_formula_with_jitter(self, rng):
        engines = update_engines([80.0, 80.0], [80.0, 80.0], 25000.0, 20000.0, 0.1, rng)
        for n1, egt in zip(engines.n1, engines.egt):
            expected = 600.0 + 3.0 * n1 + 10.0 * (35000.0 - 25000.0) / 1000.0
            assert abs(egt - expected) <= 2.0

    def test_target_jitter_bounded(self, rng):
        engines = update_engines([85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 1.0, rng)
        for n1 in engines.n1:
            assert abs(n1 - 85.0) <= 0.2

    def test_fuel_burn(self, rng):
        engines = update_engines([85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 1.0, rng)
        expected = 0.01 * sum(engines.n1)
        assert engines.fuel_burned == pytest.approx(expected)
        assert engines.fuel == pytest.approx(20000.0 - expected)

    def test_fuel_flow_in_kg_per_hour(self, rng):
        engines = update_engines([85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 0.1, rng)
        for n1, flow in zip(engines.n1, engines.fuel_flow):
            assert flow == pytest.approx(36.0 * n1)

    def test_fuel_never_negative(self, rng):
        engines = update_engines([85.0, 85.0], [85.0, 85.0], 35000.0, 0.05, 1.0, rng)
        assert engines.fuel == 0.0
        assert engines.fuel_burned == pytest.approx(0.05)

    def test_failed_engine_spools_down(self, rng):
        engines = update_engines(
            [85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 1.0, rng, failed=[True, False]
        )
        assert engines.n1[0] == pytest.approx(80.0)
        assert engines.n1[1] == pytest.approx(85.0, abs=0.2)

    def test_failed_engine_burns_no_fuel(self, rng):
        engines = update_engines(
            [85.0, 85.0], [85.0, 85.0], 35000.0, 20000.0, 1.0, rng, failed=[True, False]
        )
        assert engines.fuel_flow[0] == 0.0
        assert engines.fuel_burned == pytest.approx(0.01 * engines.n1[1])

    def test_flameout_respects_spool_rate(self, rng):
        n1 = [90.0, 90.0]
        for _ in range(50):
            engines = update_engines(n1, [90.0, 90.0], 30000.0, 20000.0, 0.1, rng, [True, True])
            for before, after in zip(n1, engines.n1):
                assert 0.0 <= before - after <= 5.0 * 0.1 + 1e-9
            n1 = list(engines.n1)

    def test_engines_wind_down_without_fuel(self, rng):
        engines = update_engines([85.0, 85.0], [95.0, 95.0], 35000.0, 0.0, 0.1, rng)
        assert engines.n1 == pytest.approx((84.5, 84.5))
        assert engines.fuel == 0.0
        assert engines.fuel_burned == 0.0

    def test_spool_rate_limit_holds_for_any_target(self, rng):
        dt = 0.1
        n1 = [50.0, 50.0]
        fuel = 20000.0
        for _ in range(500):
            targets = [rng.uniform(-20.0, 120.0), rng.uniform(-20.0, 120.0)]
            engines = update_engines(n1, targets, 30000.0, fuel, dt, rng)
            for before, after in zip(n1, engines.n1):
                assert abs(after - before) <= 5.0 * dt + 1e-9
                assert 0.0 <= after <= 100.0
            assert engines.fuel <= fuel
            n1 = list(engines.n1)
            fuel = engines.fuel
