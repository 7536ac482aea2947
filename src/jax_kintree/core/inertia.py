"""Spatial inertia of a link expressed in the link's own body frame."""

import jax.numpy as jnp
from jax import Array

from jax_kintree.core.description import Inertial
from jax_kintree.transforms import se3


def naive_spatial_inertia(inertia: Array, mass) -> Array:
    """Block-diagonal (6, 6) spatial inertia [inertia, 0; 0, mass * I3].

    Valid in the frame the rotational inertia is given about.
    """
    G = jnp.zeros((6, 6))
    G = G.at[:3, :3].set(jnp.asarray(inertia, dtype=float))
    G = G.at[3:, 3:].set(mass * jnp.eye(3))
    return G


def to_body_spatial_inertia(inertial_frame: Array, inertia: Array, mass) -> Array:
    """Re-express a spatial inertia from the inertial frame in the body frame.

    Generalizes the parallel-axis theorem to an arbitrary offset and rotation
    between the two frames: G_b = Ad(b_T_i^-1)^T G_i Ad(b_T_i^-1).

    Args:
        inertial_frame: (4, 4) pose of the inertial frame in the body frame.
        inertia: (3, 3) rotational inertia about the inertial frame.
        mass: Body mass.

    Returns:
        (6, 6) symmetric spatial inertia in the body frame.
    """
    G_i = naive_spatial_inertia(inertia, mass)
    Ad = se3.adjoint(se3.inverse(inertial_frame))
    G_b = Ad.T @ G_i @ Ad
    # Round-off can break exact symmetry of the congruence product.
    return 0.5 * (G_b + G_b.T)


def link_spatial_inertia(inertial: Inertial) -> Array:
    return to_body_spatial_inertia(inertial.origin.to_matrix(), inertial.inertia, inertial.mass)
