import math

import numpy as np
import pytest

from ekfcal.quaternion import Quaternion


def test_identity_leaves_vector_unchanged():
    v = np.array([0.3, -1.2, 2.5])
    assert np.allclose(Quaternion.identity().rotate(v), v)


def test_quarter_turn_about_z_maps_x_to_y():
    q = Quaternion.from_axis_angle([0.0, 0.0, 1.0], math.pi / 2)
    assert np.allclose(q * np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])


@pytest.mark.parametrize(
    "rot_vec",
    [[0.1, 0.2, -0.3], [1.0, 0.0, 0.0], [-0.5, 2.0, 0.7], [0.0, 0.0, 3.0]],
)
def test_rotation_vector_round_trip(rot_vec):
    q = Quaternion.from_rotation_vector(rot_vec)
    assert np.allclose(q.to_rotation_vector(), rot_vec)


def test_zero_rotation_vector_gives_identity():
    q = Quaternion.from_rotation_vector([0.0, 0.0, 0.0])
    assert np.allclose(np.asarray(q), [1.0, 0.0, 0.0, 0.0])


def test_zero_axis_is_rejected():
    with pytest.raises(ValueError):
        Quaternion.from_axis_angle([0.0, 0.0, 0.0], 1.0)


def test_product_with_inverse_is_identity():
    q = Quaternion.from_rotation_vector([0.4, -0.2, 0.9])
    product = q * q.inverse()
    assert np.allclose(np.asarray(product), [1.0, 0.0, 0.0, 0.0])


def test_inverse_of_zero_raises():
    with pytest.raises(ValueError):
        Quaternion(0.0, 0.0, 0.0, 0.0).inverse()


def test_rotation_matrix_is_orthonormal():
    r = Quaternion.from_rotation_vector([0.7, 0.1, -0.4]).to_rotation_matrix()
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.isclose(np.linalg.det(r), 1.0)


def test_rotate_matches_rotation_matrix():
    q = Quaternion.from_rotation_vector([-0.3, 0.5, 0.2])
    v = np.array([1.0, 2.0, 3.0])
    assert np.allclose(q.rotate(v), q.to_rotation_matrix() @ v)


def test_composition_matches_successive_rotation():
    q1 = Quaternion.from_rotation_vector([0.2, 0.0, 0.5])
    q2 = Quaternion.from_rotation_vector([-0.1, 0.8, 0.0])
    v = np.array([0.5, -0.5, 1.5])
    assert np.allclose((q1 * q2) * v, q1 * (q2 * v))


def test_normalized_has_unit_norm():
    q = Quaternion(2.0, 1.0, -1.0, 0.5).normalized()
    assert math.isclose(q.norm(), 1.0)


def test_slerp_endpoints():
    q0 = Quaternion.from_rotation_vector([0.1, 0.2, 0.3])
    q1 = Quaternion.from_rotation_vector([-0.4, 0.5, 0.1])
    start = q0.slerp(0.0, q1)
    end = q0.slerp(1.0, q1)
    assert np.allclose(np.asarray(start), np.asarray(q0))
    assert np.allclose(np.asarray(end), np.asarray(q1))


def test_slerp_midpoint_squared_is_full_rotation():
    target = Quaternion.from_rotation_vector([0.0, 1.2, 0.0])
    half = Quaternion.identity().slerp(0.5, target)
    assert np.allclose((half * half).to_rotation_vector(), [0.0, 1.2, 0.0])


def test_slerp_of_equal_quaternions_is_unchanged():
    q = Quaternion.from_rotation_vector([0.3, 0.3, 0.3])
    result = q.slerp(0.37, q)
    assert np.allclose(result.to_rotation_vector(), [0.3, 0.3, 0.3])


def test_multiplying_by_unsupported_type_fails():
    with pytest.raises(TypeError):
        Quaternion.identity() * "abc"