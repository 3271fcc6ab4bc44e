"""Tests for bistatic delay-Doppler geometry"""
import math
import pytest

from adsb2dd.models import Position, UpstreamSnapshot
from adsb2dd.services.geometry import (
    SPEED_OF_LIGHT, WGS84_A, WGS84_E2,
    aircraft_delay_doppler, aircraft_kinematics, bistatic_delay_doppler,
    convert_snapshot, enu_to_ecef_velocity, geodetic_to_ecef
)

FC = 100e6


class TestGeodeticToEcef:
    """Tests for WGS-84 coordinate conversion"""

    def test_equator_prime_meridian(self):
        x, y, z = geodetic_to_ecef(0, 0, 0)
        assert x == pytest.approx(WGS84_A)
        assert y == pytest.approx(0, abs=1e-6)
        assert z == pytest.approx(0, abs=1e-6)

    def test_equator_altitude(self):
        x, y, z = geodetic_to_ecef(0, 90, 1000)
        assert x == pytest.approx(0, abs=1e-6)
        assert y == pytest.approx(WGS84_A + 1000)

    def test_north_pole(self):
        x, y, z = geodetic_to_ecef(90, 0, 0)
        semi_minor = WGS84_A * math.sqrt(1 - WGS84_E2)
        assert x == pytest.approx(0, abs=1e-6)
        assert z == pytest.approx(semi_minor, abs=1e-3)

    def test_altitude_along_normal(self):
        """Raising altitude moves the point exactly that far"""
        low = geodetic_to_ecef(47.9, -121.9, 0)
        high = geodetic_to_ecef(47.9, -121.9, 1234.5)
        assert math.dist(low, high) == pytest.approx(1234.5, abs=1e-6)


class TestEnuRotation:
    """Tests for ENU to ECEF velocity rotation"""

    def test_axes_at_origin(self):
        assert enu_to_ecef_velocity(0, 0, 1, 0, 0) == pytest.approx((0, 1, 0))
        assert enu_to_ecef_velocity(0, 0, 0, 1, 0) == pytest.approx((0, 0, 1))
        assert enu_to_ecef_velocity(0, 0, 0, 0, 1) == pytest.approx((1, 0, 0))

    def test_magnitude_preserved(self):
        v = enu_to_ecef_velocity(47.9, -121.9, 120.0, -80.0, 5.0)
        assert math.sqrt(sum(c * c for c in v)) == pytest.approx(math.sqrt(120 ** 2 + 80 ** 2 + 5 ** 2))


class TestBistaticDelayDoppler:
    """Tests for the core bistatic equations"""

    def test_symmetric_geometry_closing(self):
        """Target above the baseline midpoint moving toward the baseline"""
        rx, tx = (0.0, 0.0, 0.0), (2000.0, 0.0, 0.0)
        target, velocity = (1000.0, 1000.0, 0.0), (0.0, -100.0, 0.0)

        delay, bistatic_range, range_rate, doppler = bistatic_delay_doppler(rx, tx, target, velocity, FC)

        leg = math.sqrt(2) * 1000
        assert bistatic_range == pytest.approx(2 * leg)
        assert delay == pytest.approx(2 * leg / SPEED_OF_LIGHT)
        assert range_rate == pytest.approx(-2 * 100 / math.sqrt(2))
        assert doppler == pytest.approx(2 * 100 / math.sqrt(2) * FC / SPEED_OF_LIGHT)
        assert doppler > 0

    def test_receding_target_negative_doppler(self):
        rx, tx = (0.0, 0.0, 0.0), (2000.0, 0.0, 0.0)
        _, _, range_rate, doppler = bistatic_delay_doppler(
            rx, tx, (1000.0, 1000.0, 0.0), (0.0, 100.0, 0.0), FC
        )
        assert range_rate > 0
        assert doppler < 0

    def test_tangential_motion_zero_doppler(self):
        """Motion along the bistatic ellipse tangent produces no Doppler"""
        rx, tx = (0.0, 0.0, 0.0), (2000.0, 0.0, 0.0)
        _, _, range_rate, doppler = bistatic_delay_doppler(
            rx, tx, (1000.0, 1000.0, 0.0), (50.0, 0.0, 0.0), FC
        )
        assert range_rate == pytest.approx(0, abs=1e-9)
        assert doppler == pytest.approx(0, abs=1e-9)

    def test_monostatic_reduces_to_radar_equation(self):
        site = (0.0, 0.0, 0.0)
        target, velocity = (3000.0, 4000.0, 0.0), (-30.0, -40.0, 0.0)

        delay, bistatic_range, range_rate, doppler = bistatic_delay_doppler(site, site, target, velocity, FC)

        assert bistatic_range == pytest.approx(2 * 5000)
        assert delay == pytest.approx(2 * 5000 / SPEED_OF_LIGHT)
        assert range_rate == pytest.approx(-2 * 50)
        assert doppler == pytest.approx(2 * 50 * FC / SPEED_OF_LIGHT)

    def test_target_on_receiver_degenerate_leg(self):
        """A target at the receiver contributes only the transmitter leg"""
        rx, tx = (0.0, 0.0, 0.0), (1000.0, 0.0, 0.0)
        delay, bistatic_range, range_rate, doppler = bistatic_delay_doppler(
            rx, tx, rx, (10.0, 0.0, 0.0), FC
        )
        assert bistatic_range == pytest.approx(1000)
        assert range_rate == pytest.approx(-10)
        assert math.isfinite(doppler)

    def test_target_on_both_sites(self):
        site = (5.0, 5.0, 5.0)
        delay, bistatic_range, range_rate, doppler = bistatic_delay_doppler(
            site, site, site, (10.0, 10.0, 10.0), FC
        )
        assert (delay, bistatic_range, range_rate, doppler) == (0.0, 0.0, 0.0, 0.0)


class TestAircraftKinematics:
    """Tests for tar1090 record parsing"""

    def test_prefers_geometric_altitude(self):
        position, _ = aircraft_kinematics(
            {"lat": 1, "lon": 2, "alt_baro": 1000, "alt_geom": 2000, "gs": 0, "track": 0}
        )
        assert position.alt == pytest.approx(2000 * 0.3048)

    def test_ground_altitude(self):
        position, _ = aircraft_kinematics(
            {"lat": 1, "lon": 2, "alt_baro": "ground", "gs": 10, "track": 0}
        )
        assert position.alt == 0

    def test_velocity_components(self):
        _, (east, north, up) = aircraft_kinematics(
            {"lat": 1, "lon": 2, "alt_baro": 1000, "gs": 100, "track": 90, "baro_rate": 600}
        )
        assert east == pytest.approx(100 * 1852 / 3600)
        assert north == pytest.approx(0, abs=1e-9)
        assert up == pytest.approx(600 * 0.3048 / 60)

    def test_missing_vertical_rate_is_level(self):
        _, (_, _, up) = aircraft_kinematics({"lat": 1, "lon": 2, "alt_baro": 1000, "gs": 100, "track": 0})
        assert up == 0

    @pytest.mark.parametrize("missing", ["lat", "lon", "alt_baro", "gs", "track"])
    def test_missing_required_field(self, missing):
        ac = {"lat": 1, "lon": 2, "alt_baro": 1000, "gs": 100, "track": 0}
        del ac[missing]
        assert aircraft_kinematics(ac) is None


class TestAircraftDelayDoppler:
    """Tests for per-aircraft conversion"""

    def test_colocated_sites_vertical_descent(self):
        """Monostatic check with a target straight overhead"""
        site = Position(47.9377, -121.9687, 0.0)
        ac = {
            "hex": "A12345", "flight": "TEST1  ",
            "lat": site.lat, "lon": site.lon, "alt_geom": 10000,
            "gs": 0, "track": 0, "geom_rate": -1000,
        }

        dd = aircraft_delay_doppler(site, site, FC, ac)

        height = 10000 * 0.3048
        descent = 1000 * 0.3048 / 60
        assert dd.hex == "a12345"
        assert dd.flight == "TEST1"
        assert dd.bistatic_range == pytest.approx(2 * height, abs=1e-3)
        assert dd.delay == pytest.approx(2 * height / SPEED_OF_LIGHT)
        assert dd.range_rate == pytest.approx(-2 * descent, abs=1e-6)
        assert dd.doppler == pytest.approx(2 * descent * FC / SPEED_OF_LIGHT, abs=1e-6)

    def test_missing_hex(self):
        site = Position(0, 0, 0)
        assert aircraft_delay_doppler(site, site, FC, {"lat": 1, "lon": 1, "alt_baro": 1, "gs": 1, "track": 1}) is None

    def test_blank_flight(self):
        site = Position(0, 0, 0)
        dd = aircraft_delay_doppler(
            site, site, FC, {"hex": "abc123", "flight": "   ", "lat": 1, "lon": 1, "alt_baro": 1, "gs": 1, "track": 1}
        )
        assert dd.flight is None


class TestConvertSnapshot:
    """Tests for whole-snapshot conversion"""

    def test_omits_incomplete_aircraft(self, sample_aircraft_data):
        snapshot = UpstreamSnapshot(now=sample_aircraft_data["now"], aircraft=sample_aircraft_data["aircraft"])
        rx, tx = Position(47.9377, -121.9687, 100), Position(47.6205, -122.3493, 250)

        output = convert_snapshot(rx, tx, FC, snapshot)

        assert output.timestamp == sample_aircraft_data["now"]
        assert set(output.aircraft) == {"a12345", "ae1234"}
        assert output.aircraft["a12345"].flight == "UAL123"

    def test_non_dict_entries_skipped(self):
        site = Position(0, 0, 0)
        snapshot = UpstreamSnapshot(now=1.0, aircraft=["junk", None, 5])
        output = convert_snapshot(site, site, FC, snapshot)
        assert output.aircraft == {}

    def test_output_dict_shape(self, sample_aircraft_data):
        snapshot = UpstreamSnapshot(now=10.5, aircraft=sample_aircraft_data["aircraft"][:1])
        site = Position(47.9377, -121.9687, 100)

        data = convert_snapshot(site, site, FC, snapshot).to_dict()

        assert data["timestamp"] == 10.5
        entry = data["aircraft"]["a12345"]
        assert set(entry) == {"flight", "delay", "bistatic_range", "range_rate", "doppler"}
