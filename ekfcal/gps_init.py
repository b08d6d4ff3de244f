"""Geodetic conversions and alignment of the local frame to GPS fixes."""

from __future__ import annotations

import math
from typing import NamedTuple, Optional

import numpy as np

from .types import GpsInitType

WGS84_A = 6378137.0
WGS84_F = 1.0 / 298.257223563
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)

_MIN_INIT_MEASUREMENTS = 4


def _vec3(vector) -> np.ndarray:
    return np.asarray(vector, dtype=float).reshape(3)


def _enu_rotation(ref_lla) -> np.ndarray:
    lat = math.radians(float(ref_lla[0]))
    lon = math.radians(float(ref_lla[1]))
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)
    return np.array(
        [
            [-sin_lon, cos_lon, 0.0],
            [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
            [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
        ]
    )


def lla_to_ecef(lla) -> np.ndarray:
    """Latitude and longitude in degrees, altitude in metres, to WGS84 ECEF."""
    lat_deg, lon_deg, alt = _vec3(lla)
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    sin_lat = math.sin(lat)
    n = WGS84_A / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
    return np.array(
        [
            (n + alt) * math.cos(lat) * math.cos(lon),
            (n + alt) * math.cos(lat) * math.sin(lon),
            (n * (1.0 - WGS84_E2) + alt) * sin_lat,
        ]
    )


def ecef_to_lla(ecef) -> np.ndarray:
    """WGS84 ECEF to latitude and longitude in degrees and altitude in metres."""
    x, y, z = _vec3(ecef)
    p = math.hypot(x, y)
    lon = math.atan2(y, x)
    lat = math.atan2(z, p * (1.0 - WGS84_E2))
    alt = 0.0
    for _ in range(20):
        sin_lat = math.sin(lat)
        n = WGS84_A / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
        alt = p * math.cos(lat) + (z + WGS84_E2 * n * sin_lat) * sin_lat - n
        new_lat = math.atan2(z, p * (1.0 - WGS84_E2 * n / (n + alt)))
        if abs(new_lat - lat) < 1e-14:
            lat = new_lat
            break
        lat = new_lat
    sin_lat = math.sin(lat)
    n = WGS84_A / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)
    alt = p * math.cos(lat) + (z + WGS84_E2 * n * sin_lat) * sin_lat - n
    return np.array([math.degrees(lat), math.degrees(lon), alt])


def ecef_to_enu(ecef, ref_lla) -> np.ndarray:
    """East-north-up offset of an ECEF point from a reference LLA position."""
    ref_lla = _vec3(ref_lla)
    return _enu_rotation(ref_lla) @ (_vec3(ecef) - lla_to_ecef(ref_lla))


def enu_to_lla(enu, ref_lla) -> np.ndarray:
    """LLA position of an east-north-up offset from a reference LLA position."""
    ref_lla = _vec3(ref_lla)
    ecef = _enu_rotation(ref_lla).T @ _vec3(enu) + lla_to_ecef(ref_lla)
    return ecef_to_lla(ecef)


def average_vectors(vectors) -> np.ndarray:
    """Element-wise mean of a sequence of vectors."""
    array = np.asarray(list(vectors), dtype=float)
    if array.size == 0:
        raise ValueError("cannot average an empty sequence of vectors")
    return array.mean(axis=0)


def maximum_distance(points) -> float:
    """Largest distance between any two points; zero for fewer than two."""
    array = np.asarray(list(points), dtype=float)
    if array.shape[0] < 2:
        return 0.0
    diffs = array[:, None, :] - array[None, :, :]
    return float(np.sqrt((diffs ** 2).sum(axis=-1)).max())


class KabschResult(NamedTuple):
    """Outcome of a planar point-set alignment."""

    success: bool
    transform: np.ndarray
    pos_stddev: float
    ang_stddev: float


def kabsch_2d(points_a, points_b) -> KabschResult:
    """Find the rotation about z and translation that carry ``points_b`` onto ``points_a``.

    The transform is a 4x4 homogeneous matrix with ``a ≈ T @ [b, 1]``.
    ``pos_stddev`` is the RMS residual and ``ang_stddev`` that residual
    relative to the RMS horizontal spread of ``points_b``.
    """
    a = np.asarray(list(points_a), dtype=float).reshape(-1, 3)
    b = np.asarray(list(points_b), dtype=float).reshape(-1, 3)
    identity = np.eye(4)
    if a.shape != b.shape or a.shape[0] < 2:
        return KabschResult(False, identity, 0.0, 0.0)

    centroid_a = a.mean(axis=0)
    centroid_b = b.mean(axis=0)
    a2 = (a - centroid_a)[:, :2]
    b2 = (b - centroid_b)[:, :2]
    h = b2.T @ a2
    u, s, vt = np.linalg.svd(h)
    if s[0] == 0.0:
        return KabschResult(False, identity, 0.0, 0.0)
    rot2 = vt.T @ u.T
    if np.linalg.det(rot2) < 0.0:
        vt[-1, :] *= -1.0
        rot2 = vt.T @ u.T

    rotation = np.eye(3)
    rotation[:2, :2] = rot2
    translation = centroid_a - rotation @ centroid_b

    transform = np.eye(4)
    transform[:3, :3] = rotation
    transform[:3, 3] = translation

    residual = a - (b @ rotation.T + translation)
    pos_stddev = float(np.sqrt(np.mean(np.sum(residual ** 2, axis=1))))
    spread = float(np.sqrt(np.mean(np.sum(b2 ** 2, axis=1))))
    ang_stddev = pos_stddev / spread
    return KabschResult(True, transform, pos_stddev, ang_stddev)


def affine_angle(transform) -> float:
    """Rotation about z of a homogeneous transform, in radians."""
    matrix = np.asarray(transform, dtype=float)
    return math.atan2(matrix[1, 0], matrix[0, 0])


class GpsReference(NamedTuple):
    """Local frame origin in LLA and its heading relative to the GPS frame."""

    lla: np.ndarray
    ang_l_to_g: float


class GpsInitializer:
    """Collects GPS fixes with matching local positions until the local frame can be anchored."""

    def __init__(
        self,
        init_type: GpsInitType = GpsInitType.CONSTANT,
        baseline_dist: float = 100.0,
        pos_thresh: float = 0.1,
        ang_thresh: float = 0.1,
    ) -> None:
        self.init_type = GpsInitType(init_type)
        self.baseline_dist = baseline_dist
        self.pos_thresh = pos_thresh
        self.ang_thresh = ang_thresh
        self.times: list[float] = []
        self.ecef_points: list[np.ndarray] = []
        self.xyz_points: list[np.ndarray] = []

    def add_measurement(self, time: float, gps_lla, pos_b_in_l) -> Optional[GpsReference]:
        """Record a fix; return the local frame reference once the criteria are met."""
        self.times.append(float(time))
        self.ecef_points.append(lla_to_ecef(gps_lla))
        self.xyz_points.append(_vec3(pos_b_in_l).copy())

        if len(self.times) < _MIN_INIT_MEASUREMENTS:
            return None

        init_ref_lla = ecef_to_lla(average_vectors(self.ecef_points))
        enu_points = [ecef_to_enu(ecef, init_ref_lla) for ecef in self.ecef_points]
        result = kabsch_2d(self.xyz_points, enu_points)
        max_distance = maximum_distance(enu_points)

        baseline_met = (
            self.init_type == GpsInitType.BASELINE_DIST and max_distance > self.baseline_dist
        )
        error_met = (
            self.init_type == GpsInitType.ERROR_THRESHOLD
            and result.success
            and result.pos_stddev < self.pos_thresh
            and result.ang_stddev != 0.0
            and result.ang_stddev < math.tan(self.ang_thresh)
        )
        if not (baseline_met or error_met):
            return None

        delta_ref_enu = result.transform[:3, 3]
        reference_lla = enu_to_lla(-delta_ref_enu, init_ref_lla)
        return GpsReference(reference_lla, affine_angle(result.transform))