"""Tests for the transforms module."""

import hypothesis
import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

import jax_kintree  # noqa: F401  (enables float64)
from jax_kintree.transforms import se3, so3

# Use hypothesis profile for CI
hypothesis.settings.register_profile("ci", max_examples=10, deadline=None)


def _random_transform(seed):
    key1, key2 = jax.random.split(jax.random.PRNGKey(seed))
    p = jax.random.uniform(key1, (3,), minval=-2.0, maxval=2.0)
    R = so3.exp(jax.random.uniform(key2, (3,), minval=-2.0, maxval=2.0))
    return se3.from_position_and_rotation(p, R)


# SO(3) Lie Group Tests
def test_so3_exp_identity():
    """Test SO(3) exp with zero vector gives exactly the identity."""
    R = so3.exp(jnp.zeros(3))
    np.testing.assert_array_equal(R, jnp.eye(3))


def test_so3_exp_quarter_turn_about_z():
    R = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    expected = jnp.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    np.testing.assert_allclose(R, expected, atol=1e-12)


def test_so3_multiply():
    """Test SO(3) multiplication."""
    R1 = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    R2 = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))

    R_combined = so3.multiply(R1, R2)
    expected = so3.exp(jnp.array([0.0, 0.0, jnp.pi]))

    np.testing.assert_allclose(R_combined, expected, rtol=1e-6, atol=1e-6)


def test_so3_inverse():
    """Test SO(3) inverse."""
    R = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    I = so3.multiply(R, so3.inverse(R))
    np.testing.assert_allclose(I, jnp.eye(3), rtol=1e-6, atol=1e-6)


def test_so3_apply():
    """Test SO(3) apply function."""
    R = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    v_rotated = so3.apply(R, jnp.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(v_rotated, jnp.array([0.0, 1.0, 0.0]), rtol=1e-6, atol=1e-6)


def test_so3_skew_symmetric():
    """Test skew-symmetric matrix function."""
    v = jnp.array([1.0, 2.0, 3.0])
    K = so3.skew_symmetric(v)

    expected = jnp.array([[0.0, -3.0, 2.0], [3.0, 0.0, -1.0], [-2.0, 1.0, 0.0]])
    np.testing.assert_allclose(K, expected, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(K, -K.T, rtol=1e-6, atol=1e-6)

    # skew(a) @ b is the cross product
    b = jnp.array([-0.5, 0.25, 2.0])
    np.testing.assert_allclose(K @ b, jnp.cross(v, b), atol=1e-12)


def test_so3_from_rpy_single_axes():
    np.testing.assert_allclose(
        so3.from_rpy(jnp.array([jnp.pi / 2, 0.0, 0.0])) @ jnp.array([0.0, 1.0, 0.0]),
        jnp.array([0.0, 0.0, 1.0]),
        atol=1e-12,
    )
    np.testing.assert_allclose(
        so3.from_rpy(jnp.array([0.0, 0.0, jnp.pi / 2])) @ jnp.array([1.0, 0.0, 0.0]),
        jnp.array([0.0, 1.0, 0.0]),
        atol=1e-12,
    )


def test_so3_from_rpy_is_z_y_x_composition():
    roll, pitch, yaw = 0.3, -0.7, 1.1
    expected = (
        so3.exp(jnp.array([0.0, 0.0, yaw]))
        @ so3.exp(jnp.array([0.0, pitch, 0.0]))
        @ so3.exp(jnp.array([roll, 0.0, 0.0]))
    )
    np.testing.assert_allclose(so3.from_rpy(jnp.array([roll, pitch, yaw])), expected, atol=1e-12)


def test_so3_jit_compatibility():
    """Test SO(3) functions are JIT compatible."""
    jitted_exp = jax.jit(so3.exp)
    jitted_rpy = jax.jit(so3.from_rpy)

    axis_angle = jnp.array([0.1, 0.2, 0.3])
    np.testing.assert_allclose(jitted_exp(axis_angle), so3.exp(axis_angle), atol=1e-12)
    np.testing.assert_allclose(jitted_rpy(axis_angle), so3.from_rpy(axis_angle), atol=1e-12)


# SE(3) Lie Group Tests
def test_se3_from_position_and_rotation():
    """Test SE(3) construction from position and rotation."""
    T = se3.from_position_and_rotation(jnp.array([1.0, 2.0, 3.0]), jnp.eye(3))

    expected = jnp.array([[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 2.0], [0.0, 0.0, 1.0, 3.0], [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(T, expected, rtol=1e-6, atol=1e-6)


def test_se3_from_xyz_rpy():
    T = se3.from_xyz_rpy(jnp.array([0.5, 0.0, -1.0]), jnp.array([0.0, 0.0, jnp.pi / 2]))
    np.testing.assert_allclose(se3.get_position(T), jnp.array([0.5, 0.0, -1.0]))
    np.testing.assert_allclose(
        se3.get_rotation(T), so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2])), atol=1e-12
    )


def test_se3_exp_identity():
    """Test SE(3) exp with zero twist gives exactly the identity."""
    T = se3.exp(jnp.zeros(6))
    np.testing.assert_array_equal(T, jnp.eye(4))


def test_se3_pure_rotation():
    """Test SE(3) with pure rotation (no translation)."""
    T = se3.exp(jnp.array([0.1, 0.2, 0.3, 0.0, 0.0, 0.0]))

    np.testing.assert_allclose(se3.get_position(T), jnp.zeros(3), rtol=1e-6, atol=1e-6)
    R_expected = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    np.testing.assert_allclose(se3.get_rotation(T), R_expected, rtol=1e-6, atol=1e-6)


def test_se3_pure_translation():
    """Test SE(3) with pure translation (no rotation)."""
    T = se3.exp(jnp.array([0.0, 0.0, 0.0, 1.0, 2.0, 3.0]))

    np.testing.assert_allclose(se3.get_rotation(T), jnp.eye(3), rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(se3.get_position(T), jnp.array([1.0, 2.0, 3.0]), rtol=1e-6, atol=1e-6)


def test_se3_exp_rotation_about_offset_axis():
    """Half a turn about the z axis through (1, 0, 0) moves the origin to (2, 0, 0)."""
    w = jnp.array([0.0, 0.0, 1.0])
    q = jnp.array([1.0, 0.0, 0.0])
    twist = jnp.concatenate([w, -jnp.cross(w, q)])

    T = se3.exp(twist * jnp.pi)

    np.testing.assert_allclose(se3.apply(T, jnp.zeros(3)), jnp.array([2.0, 0.0, 0.0]), atol=1e-12)
    # Points on the axis stay put
    np.testing.assert_allclose(se3.apply(T, jnp.array([1.0, 0.0, 5.0])), jnp.array([1.0, 0.0, 5.0]), atol=1e-12)


def test_se3_exp_matches_series_for_small_twist():
    twist = jnp.array([1e-8, -2e-8, 3e-8, 0.1, 0.2, 0.3])
    T = se3.exp(twist)
    xi = se3.hat(twist)
    np.testing.assert_allclose(T, jnp.eye(4) + xi + xi @ xi / 2.0, atol=1e-12)


def test_se3_multiply():
    """Test SE(3) multiplication."""
    T1 = se3.exp(jnp.array([0.0, 0.0, 0.0, 1.0, 0.0, 0.0]))
    T2 = se3.exp(jnp.array([0.0, 0.0, 0.0, 0.0, 1.0, 0.0]))

    T_combined = se3.multiply(T1, T2)
    np.testing.assert_allclose(se3.get_position(T_combined), jnp.array([1.0, 1.0, 0.0]), rtol=1e-6, atol=1e-6)


def test_se3_inverse():
    """Test SE(3) inverse."""
    T = se3.exp(jnp.array([0.05, 0.1, 0.15, 0.1, 0.2, 0.3]))
    I = se3.multiply(T, se3.inverse(T))
    np.testing.assert_allclose(I, jnp.eye(4), rtol=1e-6, atol=1e-6)


def test_se3_apply_multiple_points():
    """Test SE(3) apply function with multiple points."""
    T = se3.exp(jnp.array([0.0, 0.0, 0.0, 1.0, 2.0, 3.0]))
    points = jnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    transformed = se3.apply(T, points)
    np.testing.assert_allclose(transformed, points + jnp.array([1.0, 2.0, 3.0]), rtol=1e-6, atol=1e-6)


def test_se3_hat():
    xi = se3.hat(jnp.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
    np.testing.assert_allclose(xi[:3, :3], so3.skew_symmetric(jnp.array([1.0, 2.0, 3.0])))
    np.testing.assert_allclose(xi[:3, 3], jnp.array([4.0, 5.0, 6.0]))
    np.testing.assert_array_equal(xi[3], jnp.zeros(4))


def test_se3_adjoint_block_structure():
    """Test SE(3) adjoint computation."""
    T = se3.exp(jnp.array([0.05, 0.1, 0.15, 0.1, 0.2, 0.3]))
    Ad_T = se3.adjoint(T)

    assert Ad_T.shape == (6, 6)

    R = se3.get_rotation(T)
    t_skew = so3.skew_symmetric(se3.get_position(T))

    np.testing.assert_allclose(Ad_T[:3, :3], R, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[:3, 3:], jnp.zeros((3, 3)), rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[3:, :3], t_skew @ R, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(Ad_T[3:, 3:], R, rtol=1e-6, atol=1e-6)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None, max_examples=20)
def test_se3_adjoint_conjugation_property(seed):
    """Ad(T) xi is the twist whose matrix is T hat(xi) T^-1."""
    T = _random_transform(seed)
    twist = jax.random.normal(jax.random.PRNGKey(seed + 1000), (6,))

    lhs = se3.hat(se3.act(T, twist))
    rhs = T @ se3.hat(twist) @ se3.inverse(T)
    np.testing.assert_allclose(lhs, rhs, atol=1e-10)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None, max_examples=20)
def test_se3_exp_commutes_with_conjugation(seed):
    """exp(Ad(T) xi) == T exp(xi) T^-1."""
    T = _random_transform(seed)
    twist = jax.random.uniform(jax.random.PRNGKey(seed + 2000), (6,), minval=-1.0, maxval=1.0)

    np.testing.assert_allclose(
        se3.exp(se3.act(T, twist)),
        T @ se3.exp(twist) @ se3.inverse(T),
        atol=1e-10,
    )


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None, max_examples=20)
def test_transform_inverse_property(seed):
    """Test that T * T^-1 = Identity."""
    T = _random_transform(seed)
    points = jax.random.uniform(jax.random.PRNGKey(seed + 3000), (10, 3), minval=-10.0, maxval=10.0)

    back_to_original = se3.apply(se3.inverse(T), se3.apply(T, points))
    np.testing.assert_allclose(back_to_original, points, rtol=1e-9, atol=1e-9)


def test_se3_batch_operations():
    """Test SE(3) operations work with batched inputs."""
    batch_size = 5
    twists = jax.random.uniform(jax.random.PRNGKey(123), (batch_size, 6), minval=-1.0, maxval=1.0)

    T_batch = se3.exp(twists)
    assert T_batch.shape == (batch_size, 4, 4)
    for i in range(batch_size):
        np.testing.assert_allclose(T_batch[i], se3.exp(twists[i]), atol=1e-12)

    Ad_batch = se3.adjoint(T_batch)
    assert Ad_batch.shape == (batch_size, 6, 6)
    np.testing.assert_allclose(se3.act(T_batch, twists)[2], Ad_batch[2] @ twists[2], atol=1e-12)


def test_se3_jit_compatibility():
    """Test SE(3) functions are JIT compatible."""
    twist = jnp.array([0.05, 0.1, 0.15, 0.1, 0.2, 0.3])

    T = jax.jit(se3.exp)(twist)
    np.testing.assert_allclose(T, se3.exp(twist), atol=1e-12)

    Ad = jax.jit(se3.adjoint)(T)
    np.testing.assert_allclose(Ad, se3.adjoint(T), atol=1e-12)
