"""SE(3) and se(3) Lie group operations in JAX.

This module implements SE(3) rigid body transforms using homogeneous matrices
and 6D twist vectors. Twists are ordered angular part first,
``[wx, wy, wz, vx, vy, vz]``, which is the ordering the spatial inertia
``[I, 0; 0, m*I3]`` of a rigid body is written in. All functions are pure,
JIT-able, and operate on JAX arrays.
"""


import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def identity(dtype=float) -> Array:
    """The identity transform as a (4, 4) matrix."""
    return jnp.eye(4, dtype=dtype)


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def from_xyz_rpy(xyz: Array, rpy: Array) -> Array:
    """
    Construct SE(3) transform from a URDF-style position and roll-pitch-yaw.

    Args:
        xyz: (3,) translation
        rpy: (3,) roll, pitch, yaw in radians

    Returns:
        (4, 4) homogeneous transformation matrix
    """
    xyz = jnp.asarray(xyz, dtype=float)
    return from_position_and_rotation(xyz, so3.from_rpy(rpy))


def exp(twist: Array) -> Array:
    """
    SE(3) exponential map: convert twist to transformation matrix.

    This function is numerically stable, using Taylor series approximations
    for small angles to avoid division by zero. The zero twist maps exactly
    to the identity.

    Args:
        twist: (..., 6) array of twists [wx, wy, wz, vx, vy, vz].
               The first 3 elements are angular, last 3 are linear.

    Returns:
        (..., 4, 4) array of transformation matrices.
    """
    w, v = twist[..., :3], twist[..., 3:]
    angle = jnp.linalg.norm(w, axis=-1, keepdims=True)

    R = so3.exp(w)

    angle_sq = angle * angle
    is_small_angle = angle < 1e-6
    safe_angle = jnp.where(is_small_angle, 1.0, angle)
    safe_angle_sq = safe_angle * safe_angle

    # Coefficient A = (1 - cos(theta)) / theta^2
    # Taylor expansion for small theta: A ≈ 1/2 - theta^2/24
    A = jnp.where(is_small_angle, 0.5 - angle_sq / 24.0, (1.0 - jnp.cos(safe_angle)) / safe_angle_sq)

    # Coefficient B = (theta - sin(theta)) / theta^3
    # Taylor expansion for small theta: B ≈ 1/6 - theta^2/120
    B = jnp.where(
        is_small_angle,
        1.0 / 6.0 - angle_sq / 120.0,
        (safe_angle - jnp.sin(safe_angle)) / (safe_angle_sq * safe_angle),
    )

    K = so3.skew_symmetric(w)
    K_sq = jnp.matmul(K, K)

    I = jnp.eye(3, dtype=twist.dtype)
    I = jnp.broadcast_to(I, K.shape)

    # V = I + A*K + B*K^2
    V = I + A[..., None] * K + B[..., None] * K_sq

    t = jnp.einsum("...ij,...j->...i", V, v)

    return from_position_and_rotation(t, R)


def hat(twist: Array) -> Array:
    """
    Lift a (..., 6) twist to its (..., 4, 4) se(3) matrix [[skew(w), v], [0, 0]].
    """
    w, v = twist[..., :3], twist[..., 3:]
    batch_shape = twist.shape[:-1]

    xi = jnp.zeros(batch_shape + (4, 4), dtype=twist.dtype)
    xi = xi.at[..., :3, :3].set(so3.skew_symmetric(w))
    xi = xi.at[..., :3, 3].set(v)
    return xi


def multiply(T1: Array, T2: Array) -> Array:
    """
    Compose two SE(3) transformation matrices.

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    Uses the block structure for efficient computation:
    T^-1 = [[R^T, -R^T @ t], [0, 1]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R = T[..., :3, :3]
    t = T[..., :3, 3]

    R_inv = jnp.swapaxes(R, -1, -2)
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, t)

    return from_position_and_rotation(t_inv, R_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply SE(3) transformation to points.

    Args:
        T: (..., 4, 4) transformation matrix
        points: (..., 3) or (..., N, 3) points to transform

    Returns:
        (..., 3) or (..., N, 3) transformed points
    """
    ones = jnp.ones_like(points[..., 0:1])
    points_h = jnp.concatenate([points, ones], axis=-1)

    transformed_h = jnp.einsum("...ij,...j->...i", T, points_h)

    return transformed_h[..., :3]


def get_position(T: Array) -> Array:
    """Extract the (..., 3) position from a transformation matrix."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Extract the (..., 3, 3) rotation from a transformation matrix."""
    return T[..., :3, :3]


def adjoint(T: Array) -> Array:
    """
    Compute the adjoint matrix of SE(3) transformation.

    The adjoint matrix transports twists between coordinate frames. For
    angular-first twists it is [[R, 0], [[t]_x R, R]].

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 6, 6) adjoint matrix
    """
    R = T[..., :3, :3]
    t = T[..., :3, 3]

    t_skew = so3.skew_symmetric(t)
    zeros = jnp.zeros_like(R)

    top = jnp.concatenate([R, zeros], axis=-1)
    bottom = jnp.concatenate([jnp.matmul(t_skew, R), R], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)


def act(T: Array, twist: Array) -> Array:
    """
    Adjoint action of T on a twist: Ad(T) @ twist.

    Args:
        T: (..., 4, 4) transformation matrix
        twist: (..., 6) twist expressed in the frame T maps from

    Returns:
        (..., 6) the same twist expressed in the frame T maps into
    """
    return jnp.einsum("...ij,...j->...i", adjoint(T), twist)
