"""SO(3) and so(3) Lie group operations in JAX.

This module implements the rotational half of the rigid-body algebra used by
the kinematic tree: rotation matrices, axis-angle vectors and the roll-pitch-yaw
convention used by URDF origins. All functions are pure, JIT-able, and operate
on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def exp(log_r: Array) -> Array:
    """
    SO(3) exponential map: convert axis-angle vector to rotation matrix.

    Implements Rodrigues' formula to convert a 3D axis-angle vector (so(3))
    to a rotation matrix (SO(3)). A zero vector maps exactly to the identity.

    Args:
        log_r: (..., 3) array of axis-angle vectors

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle = jnp.linalg.norm(log_r, axis=-1, keepdims=True)

    # Taylor expansion below 1e-8, full Rodrigues otherwise
    small_angle = angle < 1e-8
    cos_angle = jnp.where(small_angle, 1.0 - 0.5 * angle**2, jnp.cos(angle))
    sin_angle = jnp.where(small_angle, angle - angle**3 / 6.0, jnp.sin(angle))

    safe_angle = jnp.where(small_angle, 1.0, angle)
    axis = jnp.where(small_angle, log_r, log_r / safe_angle)

    K = skew_symmetric(axis)

    # Rodrigues formula: R = I + sin(θ) * K + (1 - cos(θ)) * K²
    I = jnp.eye(3, dtype=log_r.dtype)
    I = jnp.broadcast_to(I, log_r.shape[:-1] + (3, 3))

    R = (I +
         sin_angle[..., None] * K +
         (1.0 - cos_angle)[..., None] * jnp.matmul(K, K))

    return R


def from_rpy(rpy: Array) -> Array:
    """
    Convert roll-pitch-yaw angles to a rotation matrix.

    Uses the fixed-axis convention of URDF: R = Rz(yaw) @ Ry(pitch) @ Rx(roll).

    Args:
        rpy: (3,) array of [roll, pitch, yaw] angles in radians

    Returns:
        (3, 3) rotation matrix
    """
    rpy = jnp.asarray(rpy, dtype=float)
    roll, pitch, yaw = rpy[0], rpy[1], rpy[2]

    zero = jnp.zeros_like(roll)
    one = jnp.ones_like(roll)

    R_x = jnp.array([
        [one, zero, zero],
        [zero, jnp.cos(roll), -jnp.sin(roll)],
        [zero, jnp.sin(roll), jnp.cos(roll)]
    ])

    R_y = jnp.array([
        [jnp.cos(pitch), zero, jnp.sin(pitch)],
        [zero, one, zero],
        [-jnp.sin(pitch), zero, jnp.cos(pitch)]
    ])

    R_z = jnp.array([
        [jnp.cos(yaw), -jnp.sin(yaw), zero],
        [jnp.sin(yaw), jnp.cos(yaw), zero],
        [zero, zero, one]
    ])

    return R_z @ R_y @ R_x


def multiply(R1: Array, R2: Array) -> Array:
    """Compose two rotations, R1 @ R2."""
    return jnp.matmul(R1, R2)


def inverse(R: Array) -> Array:
    """Inverse of a rotation matrix (its transpose)."""
    return jnp.swapaxes(R, -1, -2)


def apply(R: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        R: (..., 3, 3) rotation matrix
        v: (..., 3) or (..., N, 3) vector(s) to rotate

    Returns:
        (..., 3) or (..., N, 3) rotated vector(s)
    """
    if v.ndim == R.ndim - 1:
        return jnp.einsum('...ij,...j->...i', R, v)
    else:
        return jnp.einsum('...ij,...nj->...ni', R, v)


def skew_symmetric(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric matrix, so that skew(a) @ b == a x b.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)
