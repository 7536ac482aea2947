"""Joint kinds and the motion screw each kind contributes.

A joint's motion screw is the se(3) twist, expressed in the joint (child link)
frame, generated by a unit change of the joint value.
"""

import enum
import logging

import jax.numpy as jnp
import numpy as np
from jax import Array

from jax_kintree.errors import DegenerateAxis

logger = logging.getLogger(__name__)


class JointKind(enum.Enum):
    FIXED = "fixed"
    REVOLUTE = "revolute"
    CONTINUOUS = "continuous"
    PRISMATIC = "prismatic"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> "JointKind":
        """Map a URDF joint type attribute to a kind; unrecognized types are OTHER."""
        try:
            return cls(name.lower())
        except (ValueError, AttributeError):
            return cls.OTHER

    @property
    def is_actuated(self) -> bool:
        return self in (JointKind.REVOLUTE, JointKind.CONTINUOUS, JointKind.PRISMATIC)


def unit_axis(axis, joint_name: str = "") -> np.ndarray:
    """Normalize a joint axis, rejecting zero-length and non-finite vectors."""
    axis = np.asarray(axis, dtype=float).reshape(3)
    # Scale by the largest component so tiny axes do not underflow when squared
    scale = np.max(np.abs(axis))
    if not np.isfinite(scale) or scale == 0.0:
        raise DegenerateAxis(joint_name, axis)
    axis = axis / scale
    return axis / np.linalg.norm(axis)


def motion_screw(kind: JointKind, axis, joint_name: str = "") -> Array:
    """Compute the (6,) motion screw [w, v] of a joint.

    Args:
        kind: The joint kind.
        axis: The joint axis as declared in the description; need not be unit.
        joint_name: Used in error and log messages only.

    Returns:
        Angular-only twist for revolute and continuous joints, linear-only twist
        for prismatic joints, and the zero twist for fixed joints. Any other kind
        is treated as fixed.

    Raises:
        DegenerateAxis: if a moving joint's axis cannot be normalized.
    """
    if kind in (JointKind.REVOLUTE, JointKind.CONTINUOUS):
        return jnp.concatenate([jnp.asarray(unit_axis(axis, joint_name)), jnp.zeros(3)])

    if kind == JointKind.PRISMATIC:
        return jnp.concatenate([jnp.zeros(3), jnp.asarray(unit_axis(axis, joint_name))])

    if kind == JointKind.OTHER:
        logger.warning("Joint '%s' has an unsupported type; treating it as fixed", joint_name)

    return jnp.zeros(6)
