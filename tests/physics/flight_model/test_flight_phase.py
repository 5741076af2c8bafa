"""Unit tests for flight phase detection."""

import pytest

from aircore.physics.flight_model.flight_phase import FlightPhase, detect_flight_phase


class TestDetectFlightPhase:
    """Test phase classification."""

    @pytest.mark.parametrize(
        ("altitude", "airspeed", "vertical_speed", "n1", "expected"),
        [
            (0.0, 0.0, 0.0, 20.0, FlightPhase.PARKED),
            (0.0, 15.0, 0.0, 30.0, FlightPhase.TAXI),
            (300.0, 150.0, 2000.0, 90.0, FlightPhase.TAKEOFF),
            (5000.0, 250.0, 1500.0, 90.0, FlightPhase.CLIMB),
            (30000.0, 210.0, 1200.0, 90.0, FlightPhase.CLIMB),
            (35000.0, 210.0, 0.0, 85.0, FlightPhase.CRUISE),
            (20000.0, 250.0, -1500.0, 60.0, FlightPhase.DESCENT),
            (800.0, 150.0, -700.0, 50.0, FlightPhase.APPROACH),
        ],
    )
    def test_phases(self, altitude, airspeed, vertical_speed, n1, expected):
        assert detect_flight_phase(altitude, airspeed, vertical_speed, n1) == expected

    def test_crash_overrides_everything(self):
        assert detect_flight_phase(35000.0, 210.0, 0.0, 85.0, has_crashed=True) == (
            FlightPhase.CRASHED
        )

    def test_low_power_climb_is_not_takeoff(self):
        assert detect_flight_phase(300.0, 150.0, 2000.0, 40.0) == FlightPhase.CLIMB
