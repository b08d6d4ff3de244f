import math

import numpy as np
import pytest

from ekfcal.gps_init import (
    WGS84_A,
    GpsInitializer,
    affine_angle,
    average_vectors,
    ecef_to_enu,
    ecef_to_lla,
    enu_to_lla,
    kabsch_2d,
    lla_to_ecef,
    maximum_distance,
)
from ekfcal.types import GpsInitType

REF_LLA = np.array([40.0, -105.0, 1600.0])
ENU_POINTS = [
    np.array([0.0, 0.0, 0.0]),
    np.array([60.0, 10.0, 0.5]),
    np.array([120.0, 80.0, 1.0]),
    np.array([20.0, 140.0, -0.5]),
]


def test_equator_prime_meridian_is_semi_major_axis():
    assert np.allclose(lla_to_ecef([0.0, 0.0, 0.0]), [WGS84_A, 0.0, 0.0])


@pytest.mark.parametrize(
    "lla", [[0.0, 0.0, 0.0], [40.0, -105.0, 1600.0], [-33.9, 151.2, 50.0], [89.0, 10.0, 0.0]]
)
def test_lla_ecef_round_trip(lla):
    assert np.allclose(ecef_to_lla(lla_to_ecef(lla)), lla, atol=1e-6)


def test_enu_of_reference_is_zero():
    assert np.allclose(ecef_to_enu(lla_to_ecef(REF_LLA), REF_LLA), np.zeros(3), atol=1e-6)


def test_enu_lla_round_trip():
    enu = np.array([120.0, -45.0, 3.0])
    lla = enu_to_lla(enu, REF_LLA)
    assert np.allclose(ecef_to_enu(lla_to_ecef(lla), REF_LLA), enu, atol=1e-5)


def test_point_to_the_north_has_positive_north_component():
    north = REF_LLA + np.array([0.001, 0.0, 0.0])
    enu = ecef_to_enu(lla_to_ecef(north), REF_LLA)
    assert enu[1] > 0.0
    assert abs(enu[0]) < 1e-3


def test_average_of_identical_vectors():
    vec = np.array([1.5, -2.0, 7.0])
    assert np.allclose(average_vectors([vec, vec, vec]), vec)


def test_average_of_nothing_raises():
    with pytest.raises(ValueError):
        average_vectors([])


def test_maximum_distance():
    points = [np.zeros(3), np.array([3.0, 4.0, 0.0]), np.array([1.0, 1.0, 0.0])]
    assert maximum_distance(points) == pytest.approx(5.0)


def test_maximum_distance_single_point():
    assert maximum_distance([np.ones(3)]) == 0.0


def test_kabsch_recovers_rotation_and_translation():
    angle = 0.3
    rot = np.array(
        [[math.cos(angle), -math.sin(angle), 0.0], [math.sin(angle), math.cos(angle), 0.0], [0, 0, 1]]
    )
    shift = np.array([5.0, -2.0, 1.0])
    points_b = [np.array(p) for p in ([0, 0, 0], [10, 0, 1], [3, 7, 0], [-4, 2, 2])]
    points_a = [rot @ p + shift for p in points_b]
    result = kabsch_2d(points_a, points_b)
    assert result.success
    assert affine_angle(result.transform) == pytest.approx(angle)
    assert np.allclose(result.transform[:3, 3], shift)
    assert result.pos_stddev == pytest.approx(0.0, abs=1e-9)


def test_kabsch_needs_two_points():
    result = kabsch_2d([np.zeros(3)], [np.zeros(3)])
    assert result.success is False


def _lla_points():
    return [enu_to_lla(enu, REF_LLA) for enu in ENU_POINTS]


def test_baseline_initialization_recovers_reference():
    init = GpsInitializer(GpsInitType.BASELINE_DIST, baseline_dist=50.0)
    outcomes = [
        init.add_measurement(float(i), lla, enu)
        for i, (lla, enu) in enumerate(zip(_lla_points(), ENU_POINTS))
    ]
    assert outcomes[:3] == [None, None, None]
    reference = outcomes[3]
    assert reference is not None
    assert np.allclose(reference.lla[:2], REF_LLA[:2], atol=1e-5)
    assert reference.lla[2] == pytest.approx(REF_LLA[2], abs=0.1)
    assert reference.ang_l_to_g == pytest.approx(0.0, abs=1e-4)
    assert len(init.times) == 4


def test_baseline_not_reached():
    init = GpsInitializer(GpsInitType.BASELINE_DIST, baseline_dist=1e6)
    results = [init.add_measurement(0.0, lla, enu) for lla, enu in zip(_lla_points(), ENU_POINTS)]
    assert all(r is None for r in results)


def test_constant_type_never_initializes():
    init = GpsInitializer(GpsInitType.CONSTANT)
    results = [init.add_measurement(0.0, lla, enu) for lla, enu in zip(_lla_points(), ENU_POINTS)]
    assert all(r is None for r in results)


def test_error_threshold_initialization():
    init = GpsInitializer(GpsInitType.ERROR_THRESHOLD, pos_thresh=0.1, ang_thresh=0.1)
    xyz = [p.copy() for p in ENU_POINTS]
    xyz[1] = xyz[1] + np.array([0.01, 0.0, 0.0])
    results = [init.add_measurement(0.0, lla, p) for lla, p in zip(_lla_points(), xyz)]
    assert results[-1] is not None
    assert np.allclose(results[-1].lla[:2], REF_LLA[:2], atol=1e-5)


def test_error_threshold_rejects_noisy_data():
    init = GpsInitializer(GpsInitType.ERROR_THRESHOLD, pos_thresh=0.1, ang_thresh=0.1)
    xyz = [p.copy() for p in ENU_POINTS]
    xyz[2] = xyz[2] + np.array([15.0, -10.0, 0.0])
    results = [init.add_measurement(0.0, lla, p) for lla, p in zip(_lla_points(), xyz)]
    assert results[-1] is None