"""Unit quaternions for 3D orientation."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

_EPSILON = float(np.finfo(float).eps)


def _as_vector3(vector) -> np.ndarray:
    array = np.asarray(vector, dtype=float).reshape(-1)
    if array.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {array.shape}")
    return array


@dataclass(frozen=True)
class Quaternion:
    """Quaternion stored as scalar part ``w`` and vector part ``(x, y, z)``."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> Quaternion:
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis, angle: float) -> Quaternion:
        """Rotation of ``angle`` radians about ``axis``."""
        axis = _as_vector3(axis)
        length = float(np.linalg.norm(axis))
        if length == 0.0:
            raise ValueError("rotation axis must be non-zero")
        half = 0.5 * float(angle)
        scaled = axis / length * math.sin(half)
        return cls(math.cos(half), *map(float, scaled))

    @classmethod
    def from_rotation_vector(cls, rot_vec) -> Quaternion:
        """Rotation whose axis is ``rot_vec`` and whose angle is its length."""
        rot_vec = _as_vector3(rot_vec)
        angle = float(np.linalg.norm(rot_vec))
        if angle == 0.0:
            return cls.identity()
        return cls.from_axis_angle(rot_vec / angle, angle)

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.array([self.w, self.x, self.y, self.z], dtype=dtype or float)

    @property
    def vec(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def norm(self) -> float:
        return math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)

    def normalized(self) -> Quaternion:
        n = self.norm()
        if n == 0.0:
            raise ValueError("cannot normalize a zero quaternion")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def inverse(self) -> Quaternion:
        """Conjugate divided by the squared norm."""
        n2 = self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2
        if n2 == 0.0:
            raise ValueError("a zero quaternion has no inverse")
        return Quaternion(self.w / n2, -self.x / n2, -self.y / n2, -self.z / n2)

    def to_rotation_vector(self) -> np.ndarray:
        """Axis scaled by angle, with the angle in [0, pi]."""
        vec = self.vec
        n = float(np.linalg.norm(vec))
        if n == 0.0:
            return np.zeros(3)
        angle = 2.0 * math.atan2(n, abs(self.w))
        axis = vec / n
        if self.w < 0.0:
            axis = -axis
        return axis * angle

    def to_rotation_matrix(self) -> np.ndarray:
        w, x, y, z = self.w, self.x, self.y, self.z
        return np.array(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
                [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
                [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
            ]
        )

    def rotate(self, vector) -> np.ndarray:
        """Rotate a 3-vector by this (unit) quaternion."""
        return self.to_rotation_matrix() @ _as_vector3(vector)

    def slerp(self, alpha: float, other: Quaternion) -> Quaternion:
        """Spherical linear interpolation from self (alpha=0) to other (alpha=1)."""
        d = float(np.dot(np.asarray(self), np.asarray(other)))
        abs_d = abs(d)
        if abs_d >= 1.0 - _EPSILON:
            scale0 = 1.0 - alpha
            scale1 = alpha
        else:
            theta = math.acos(abs_d)
            sin_theta = math.sin(theta)
            scale0 = math.sin((1.0 - alpha) * theta) / sin_theta
            scale1 = math.sin(alpha * theta) / sin_theta
        if d < 0.0:
            scale1 = -scale1
        coeffs = scale0 * np.asarray(self) + scale1 * np.asarray(other)
        return Quaternion(*map(float, coeffs))

    def __mul__(self, other):
        if isinstance(other, Quaternion):
            w1, x1, y1, z1 = self.w, self.x, self.y, self.z
            w2, x2, y2, z2 = other.w, other.x, other.y, other.z
            return Quaternion(
                w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
                w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
                w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
                w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            )
        try:
            vector = _as_vector3(other)
        except (TypeError, ValueError):
            return NotImplemented
        return self.rotate(vector)