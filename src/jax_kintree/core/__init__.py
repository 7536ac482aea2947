"""Core kinematic tree construction.

Description indexing, link topology and traversal order, joint motion screws,
spatial inertia, and the kinematic tree with its pose propagation.
"""

from .description import (
    Inertial,
    JointDescription,
    LinkDescription,
    Pose,
    RobotDescription,
    index_description,
)
from .inertia import link_spatial_inertia, naive_spatial_inertia, to_body_spatial_inertia
from .joint_model import JointKind, motion_screw
from .kinematic_tree import KinematicTree, build_from_description, propagate_poses
from .link_node import JointSpec, LinkNode
from .topology import Topology, build_topology, traversal_order

__all__ = [
    "Inertial",
    "JointDescription",
    "JointKind",
    "JointSpec",
    "KinematicTree",
    "LinkDescription",
    "LinkNode",
    "Pose",
    "RobotDescription",
    "Topology",
    "build_from_description",
    "build_topology",
    "index_description",
    "link_spatial_inertia",
    "motion_screw",
    "naive_spatial_inertia",
    "propagate_poses",
    "to_body_spatial_inertia",
    "traversal_order",
]
