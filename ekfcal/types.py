"""State containers for the calibration filter and their vector forms."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np

from .quaternion import Quaternion

BODY_STATE_SIZE = 9
IMU_EXTRINSIC_STATE_SIZE = 6
IMU_INTRINSIC_STATE_SIZE = 6
GPS_EXTRINSIC_STATE_SIZE = 3
CAM_EXTRINSIC_STATE_SIZE = 6
FID_EXTRINSIC_STATE_SIZE = 6
AUG_STATE_SIZE = 6


class SensorType(enum.Enum):
    IMU = 0
    Camera = 1
    Tracker = 2
    GPS = 3


class AugmentationType(enum.IntEnum):
    """How camera frames are turned into augmented states."""

    ALL = 0
    PRIMARY = 1
    TIME = 2
    ERROR = 3


class GpsInitType(enum.IntEnum):
    """How the local frame is anchored to the GPS frame."""

    CONSTANT = 0
    BASELINE_DIST = 1
    ERROR_THRESHOLD = 2


def _zeros3() -> np.ndarray:
    return np.zeros(3)


def _vec3(vector) -> np.ndarray:
    return np.asarray(vector, dtype=float).reshape(3)


class _Cursor:
    """Reads consecutive segments out of a flat state vector."""

    def __init__(self, vector) -> None:
        self._vector = np.asarray(vector, dtype=float).reshape(-1)
        self._position = 0

    def take(self, count: int) -> np.ndarray:
        end = self._position + count
        if end > self._vector.size:
            raise ValueError(
                f"state vector of length {self._vector.size} is too short "
                f"(needed at least {end})"
            )
        segment = self._vector[self._position:end]
        self._position = end
        return segment


@dataclass(eq=False)
class Intrinsics:
    """Pinhole camera intrinsics with radial and tangential distortion."""

    f_x: float = 0.01
    f_y: float = 0.01
    k_1: float = 0.0
    k_2: float = 0.0
    p_1: float = 0.0
    p_2: float = 0.0
    width: float = 1920.0
    height: float = 1080.0
    pixel_size: float = 5.0e-6

    def to_camera_matrix(self) -> np.ndarray:
        matrix = np.zeros((3, 3))
        matrix[0, 0] = self.f_x / self.pixel_size
        matrix[1, 1] = self.f_y / self.pixel_size
        matrix[0, 2] = self.width / 2
        matrix[1, 2] = self.height / 2
        matrix[2, 2] = 1.0
        return matrix

    def to_distortion_vector(self) -> np.ndarray:
        return np.array([self.k_1, self.k_2, self.p_1, self.p_2], dtype=float)


@dataclass(eq=False)
class BodyState:
    """Body position, velocity and orientation in the local frame."""

    pos_b_in_l: np.ndarray = field(default_factory=_zeros3)
    vel_b_in_l: np.ndarray = field(default_factory=_zeros3)
    ang_b_to_l: Quaternion = field(default_factory=Quaternion.identity)
    size: int = BODY_STATE_SIZE
    index: int = -1

    def to_vector(self) -> np.ndarray:
        return np.concatenate(
            [
                _vec3(self.pos_b_in_l),
                _vec3(self.vel_b_in_l),
                self.ang_b_to_l.to_rotation_vector(),
            ]
        )

    def set_state(self, state) -> None:
        cursor = _Cursor(state)
        self.pos_b_in_l = cursor.take(3).copy()
        self.vel_b_in_l = cursor.take(3).copy()
        self.ang_b_to_l = Quaternion.from_rotation_vector(cursor.take(3))

    def _add_segments(self, cursor: _Cursor) -> None:
        self.pos_b_in_l = _vec3(self.pos_b_in_l) + cursor.take(3)
        self.vel_b_in_l = _vec3(self.vel_b_in_l) + cursor.take(3)
        self.ang_b_to_l = self.ang_b_to_l * Quaternion.from_rotation_vector(cursor.take(3))

    def __iadd__(self, other):
        if isinstance(other, BodyState):
            self.pos_b_in_l = _vec3(self.pos_b_in_l) + _vec3(other.pos_b_in_l)
            self.vel_b_in_l = _vec3(self.vel_b_in_l) + _vec3(other.vel_b_in_l)
            self.ang_b_to_l = other.ang_b_to_l * self.ang_b_to_l
            return self
        self._add_segments(_Cursor(other))
        return self


@dataclass(eq=False)
class ImuState:
    """IMU extrinsic pose and intrinsic biases, each optionally estimated."""

    pos_stability: float = 1e-9
    ang_stability: float = 1e-9
    acc_bias_stability: float = 1e-9
    omg_bias_stability: float = 1e-9
    pos_i_in_b: np.ndarray = field(default_factory=_zeros3)
    ang_i_to_b: Quaternion = field(default_factory=Quaternion.identity)
    acc_bias: np.ndarray = field(default_factory=_zeros3)
    omg_bias: np.ndarray = field(default_factory=_zeros3)
    is_extrinsic: bool = False
    is_intrinsic: bool = False
    index: int = -1
    index_intrinsic: int = -1
    index_extrinsic: int = -1

    @property
    def size(self) -> int:
        size = 0
        if self.is_extrinsic:
            size += IMU_EXTRINSIC_STATE_SIZE
        if self.is_intrinsic:
            size += IMU_INTRINSIC_STATE_SIZE
        return size

    def to_vector(self) -> np.ndarray:
        parts = []
        if self.is_extrinsic:
            parts += [_vec3(self.pos_i_in_b), self.ang_i_to_b.to_rotation_vector()]
        if self.is_intrinsic:
            parts += [_vec3(self.acc_bias), _vec3(self.omg_bias)]
        return np.concatenate(parts) if parts else np.zeros(0)

    def _add_segments(self, cursor: _Cursor) -> None:
        if self.is_extrinsic:
            self.pos_i_in_b = _vec3(self.pos_i_in_b) + cursor.take(3)
            self.ang_i_to_b = self.ang_i_to_b * Quaternion.from_rotation_vector(cursor.take(3))
        if self.is_intrinsic:
            self.acc_bias = _vec3(self.acc_bias) + cursor.take(3)
            self.omg_bias = _vec3(self.omg_bias) + cursor.take(3)

    def __iadd__(self, vector):
        self._add_segments(_Cursor(vector))
        return self


@dataclass(eq=False)
class GpsState:
    """GPS antenna lever arm in the body frame."""

    pos_a_in_b: np.ndarray = field(default_factory=_zeros3)
    pos_stability: float = 1e-9
    is_extrinsic: bool = False
    index: int = -1

    @property
    def size(self) -> int:
        return GPS_EXTRINSIC_STATE_SIZE if self.is_extrinsic else 0

    def to_vector(self) -> np.ndarray:
        return _vec3(self.pos_a_in_b).copy()


@dataclass(eq=False)
class AugState:
    """Body pose cloned at the time of a camera frame."""

    frame_id: int = -1
    time: float = 0.0
    pos_b_in_l: np.ndarray = field(default_factory=_zeros3)
    ang_b_to_l: Quaternion = field(default_factory=Quaternion.identity)
    size: int = AUG_STATE_SIZE
    index: int = -1
    alpha: float = 0.0

    def to_vector(self) -> np.ndarray:
        return np.concatenate([_vec3(self.pos_b_in_l), self.ang_b_to_l.to_rotation_vector()])


@dataclass(eq=False)
class CamState:
    """Camera extrinsic pose, intrinsics and frame rate."""

    pos_stability: float = 1e-9
    ang_stability: float = 1e-9
    pos_c_in_b: np.ndarray = field(default_factory=_zeros3)
    ang_c_to_b: Quaternion = field(default_factory=Quaternion.identity)
    intrinsics: Intrinsics = field(default_factory=Intrinsics)
    rate: float = 1.0
    is_extrinsic: bool = False
    index: int = -1

    @property
    def size(self) -> int:
        return CAM_EXTRINSIC_STATE_SIZE if self.is_extrinsic else 0

    def to_vector(self) -> np.ndarray:
        return np.concatenate([_vec3(self.pos_c_in_b), self.ang_c_to_b.to_rotation_vector()])


@dataclass(eq=False)
class FidState:
    """Fiducial board pose in the local frame."""

    frame_id: int = -1
    pos_f_in_l: np.ndarray = field(default_factory=_zeros3)
    ang_f_to_l: Quaternion = field(default_factory=Quaternion.identity)
    pos_stability: float = 1e-9
    ang_stability: float = 1e-9
    is_extrinsic: bool = False
    index: int = -1
    id: int = 0

    @property
    def size(self) -> int:
        return FID_EXTRINSIC_STATE_SIZE if self.is_extrinsic else 0

    def to_vector(self) -> np.ndarray:
        if not self.is_extrinsic:
            return np.zeros(0)
        return np.concatenate([_vec3(self.pos_f_in_l), self.ang_f_to_l.to_rotation_vector()])


def _by_key(mapping: dict):
    return (mapping[key] for key in sorted(mapping))


@dataclass(eq=False)
class State:
    """Full filter state: body, sensors, fiducials and augmented frames."""

    body_state: BodyState = field(default_factory=BodyState)
    imu_states: dict = field(default_factory=dict)
    gps_states: dict = field(default_factory=dict)
    cam_states: dict = field(default_factory=dict)
    fid_states: dict = field(default_factory=dict)
    aug_states: dict = field(default_factory=dict)

    def state_size(self) -> int:
        size = BODY_STATE_SIZE
        size += sum(imu.size for imu in self.imu_states.values())
        size += sum(gps.size for gps in self.gps_states.values())
        size += sum(cam.size for cam in self.cam_states.values())
        size += sum(fid.size for fid in self.fid_states.values())
        size += sum(AUG_STATE_SIZE * len(augs) for augs in self.aug_states.values())
        return size

    def to_vector(self) -> np.ndarray:
        parts = [self.body_state.to_vector()]
        parts += [imu.to_vector() for imu in _by_key(self.imu_states) if imu.size]
        parts += [gps.to_vector() for gps in _by_key(self.gps_states) if gps.is_extrinsic]
        parts += [cam.to_vector() for cam in _by_key(self.cam_states) if cam.is_extrinsic]
        parts += [fid.to_vector() for fid in _by_key(self.fid_states) if fid.is_extrinsic]
        parts += [aug.to_vector() for augs in _by_key(self.aug_states) for aug in augs]
        return np.concatenate(parts)

    def _add_state(self, other: State) -> None:
        self.body_state += other.body_state
        for imu_id, imu in self.imu_states.items():
            delta = other.imu_states.get(imu_id)
            if delta is None:
                continue
            imu.pos_i_in_b = _vec3(imu.pos_i_in_b) + _vec3(delta.pos_i_in_b)
            imu.ang_i_to_b = delta.ang_i_to_b * imu.ang_i_to_b
            imu.acc_bias = _vec3(imu.acc_bias) + _vec3(delta.acc_bias)
            imu.omg_bias = _vec3(imu.omg_bias) + _vec3(delta.omg_bias)
        for gps_id, gps in self.gps_states.items():
            delta = other.gps_states.get(gps_id)
            if delta is not None:
                gps.pos_a_in_b = _vec3(gps.pos_a_in_b) + _vec3(delta.pos_a_in_b)
        for cam_id, cam in self.cam_states.items():
            delta = other.cam_states.get(cam_id)
            if delta is not None:
                cam.pos_c_in_b = _vec3(cam.pos_c_in_b) + _vec3(delta.pos_c_in_b)
                cam.ang_c_to_b = delta.ang_c_to_b * cam.ang_c_to_b
        for fid_id, fid in self.fid_states.items():
            delta = other.fid_states.get(fid_id)
            if delta is not None:
                fid.pos_f_in_l = _vec3(fid.pos_f_in_l) + _vec3(delta.pos_f_in_l)
                fid.ang_f_to_l = delta.ang_f_to_l * fid.ang_f_to_l
        for aug_id, augs in self.aug_states.items():
            for aug, delta in zip(augs, other.aug_states.get(aug_id, [])):
                aug.pos_b_in_l = _vec3(aug.pos_b_in_l) + _vec3(delta.pos_b_in_l)
                aug.ang_b_to_l = delta.ang_b_to_l * aug.ang_b_to_l

    def _add_vector(self, vector) -> None:
        cursor = _Cursor(vector)
        self.body_state._add_segments(cursor)
        for imu in _by_key(self.imu_states):
            imu._add_segments(cursor)
        for gps in _by_key(self.gps_states):
            if gps.is_extrinsic:
                gps.pos_a_in_b = _vec3(gps.pos_a_in_b) + cursor.take(3)
        for cam in _by_key(self.cam_states):
            if cam.is_extrinsic:
                _add_cam_segments(cam, cursor)
        for fid in _by_key(self.fid_states):
            if fid.is_extrinsic:
                fid.pos_f_in_l = _vec3(fid.pos_f_in_l) + cursor.take(3)
                fid.ang_f_to_l = fid.ang_f_to_l * Quaternion.from_rotation_vector(cursor.take(3))
        for augs in _by_key(self.aug_states):
            for aug in augs:
                _add_aug_segments(aug, cursor)

    def __iadd__(self, other):
        if isinstance(other, State):
            self._add_state(other)
        else:
            self._add_vector(other)
        return self


def _add_cam_segments(cam: CamState, cursor: _Cursor) -> None:
    cam.pos_c_in_b = _vec3(cam.pos_c_in_b) + cursor.take(3)
    cam.ang_c_to_b = cam.ang_c_to_b * Quaternion.from_rotation_vector(cursor.take(3))


def _add_aug_segments(aug: AugState, cursor: _Cursor) -> None:
    aug.pos_b_in_l = _vec3(aug.pos_b_in_l) + cursor.take(3)
    aug.ang_b_to_l = aug.ang_b_to_l * Quaternion.from_rotation_vector(cursor.take(3))


def add_to_imu_states(imu_states: dict, vector) -> dict:
    """Apply an error-state vector to IMU states in key order; returns the mapping."""
    cursor = _Cursor(vector)
    for imu in _by_key(imu_states):
        imu._add_segments(cursor)
    return imu_states


def add_to_cam_states(cam_states: dict, vector) -> dict:
    """Apply an error-state vector to camera states in key order; returns the mapping."""
    cursor = _Cursor(vector)
    for cam in _by_key(cam_states):
        _add_cam_segments(cam, cursor)
    return cam_states


def add_to_aug_states(aug_states: list, vector) -> list:
    """Apply an error-state vector to a list of augmented states; returns the list."""
    cursor = _Cursor(vector)
    for aug in aug_states:
        _add_aug_segments(aug, cursor)
    return aug_states