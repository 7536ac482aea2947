"""Functional forward kinematics and space Jacobian over a built tree.

These functions take the joint configuration as an array instead of reading the
tree's stored joint values, so they can be JIT-compiled and differentiated with
respect to ``q``. The tree only supplies its static structure.
"""

from typing import Dict

import jax
import jax.numpy as jnp
from jax import Array

from .core import KinematicTree
from .transforms import se3


def _check_configuration(tree: KinematicTree, q: Array) -> None:
    num_dof = len(tree.actuated_joint_names)
    if q.shape != (num_dof,):
        raise ValueError(f"Expected joint configuration of shape ({num_dof},), got {q.shape}")


def forward_kinematics(tree: KinematicTree, q: Array) -> Dict[str, Array]:
    """Compute forward kinematics for all links in the tree.

    Args:
        tree: KinematicTree providing the link structure
        q: Joint values of shape (num_dof,), ordered as ``tree.actuated_joint_names``

    Returns:
        Dictionary mapping link names to their 4x4 SE(3) global poses
    """
    world_transforms = forward_kinematics_world(tree, q)
    return {name: world_transforms[i] for i, name in enumerate(tree.link_names)}


def forward_kinematics_world(tree: KinematicTree, q: Array) -> Array:
    """FK returning an array of global poses indexed by link id.

    Args:
        tree: KinematicTree providing the link structure
        q: Joint values of shape (num_dof,), ordered as ``tree.actuated_joint_names``

    Returns:
        Array of shape (num_links, 4, 4) with global poses for all links
    """
    q = jnp.asarray(q, dtype=float)
    _check_configuration(tree, q)

    num_links = tree.num_links
    links = tree.links

    parent_indices = jnp.array(
        [i if p is None else p for i, p in enumerate(tree.topology.parent_of)], dtype=jnp.int32
    )
    zero_poses = jnp.stack([node.parent_relative_pose for node in links])
    screws = jnp.stack([node.local_motion_screw for node in links])
    actuated_links = jnp.array(
        [tree.joint_link_id(name) for name in tree.actuated_joint_names], dtype=jnp.int32
    )

    # Scatter actuated values into a per-link vector; other links stay at zero.
    q_full = jnp.zeros(num_links, dtype=q.dtype).at[actuated_links].set(q)

    world_transforms = jnp.broadcast_to(jnp.identity(4), (num_links, 4, 4))
    world_transforms = world_transforms.at[tree.root].set(tree.base_pose)

    def scan_body(carry, i):
        """Processes link `i` using its parent's global pose from `carry`."""
        T_world_to_parent = carry[parent_indices[i]]

        T_joint_motion = se3.exp(screws[i] * q_full[i])
        T_parent_to_child = zero_poses[i] @ T_joint_motion

        carry = carry.at[i].set(T_world_to_parent @ T_parent_to_child)
        return carry, None

    # The root is the base case; every other link is visited after its parent.
    non_root = jnp.array(tree.traversal_order[1:], dtype=jnp.int32)
    final_transforms, _ = jax.lax.scan(scan_body, world_transforms, non_root)

    return final_transforms


def space_jacobian(tree: KinematicTree, q: Array, link_name: str) -> Array:
    """Compute the 6D space Jacobian of a link w.r.t. the actuated joints.

    Column k is the base-frame motion screw of actuated joint k when that joint
    lies on the path from the root to the link, and zero otherwise.

    Args:
        tree: KinematicTree providing the link structure
        q: Joint values of shape (num_dof,), ordered as ``tree.actuated_joint_names``
        link_name: Name of the target link

    Returns:
        6x(num_dof) Jacobian mapping joint velocities to the link's spatial
        velocity [w, v] in the base frame
    """
    target = tree.link_id(link_name)

    path = set()
    node = target
    while node is not None:
        path.add(node)
        node = tree.parent(node)

    world_transforms = forward_kinematics_world(tree, q)

    columns = []
    for name in tree.actuated_joint_names:
        link_id = tree.joint_link_id(name)
        if link_id not in path:
            columns.append(jnp.zeros(6))
            continue
        joint = tree.link(link_id)
        T_world_to_joint = world_transforms[tree.parent(link_id)] @ joint.parent_relative_pose
        columns.append(se3.act(T_world_to_joint, joint.local_motion_screw))

    if not columns:
        return jnp.zeros((6, 0))
    return jnp.stack(columns, axis=1)
