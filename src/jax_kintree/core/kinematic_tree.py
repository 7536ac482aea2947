"""The kinematic tree: links, their topology, and pose propagation.

A tree is built once from a ``RobotDescription``. Its structure (topology,
traversal order, root, leaves) never changes afterwards; joint values can be
updated by name, and every update re-propagates poses and motion screws over
the whole tree in traversal order.

Updates are not thread-safe: callers must serialize ``set_joint_values`` and
``recompute`` against each other and against readers of link poses.
"""

import logging
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

import jax.numpy as jnp
from jax import Array

from jax_kintree.errors import UnknownJointName, UnknownLinkName
from jax_kintree.transforms import se3

from .description import IndexedLink, RobotDescription, index_description
from .inertia import link_spatial_inertia
from .joint_model import motion_screw
from .link_node import JointSpec, LinkNode
from .topology import Topology, build_topology, traversal_order

logger = logging.getLogger(__name__)


def propagate_poses(
    links: Sequence[LinkNode],
    topology: Topology,
    order: Sequence[int],
    base_pose: Optional[Array] = None,
) -> List[LinkNode]:
    """Compute global poses and global motion screws for every link.

    Each link's pose is its parent's global pose composed with the joint's zero
    pose and the exponential of the joint screw scaled by the joint value. The
    joint screw is then carried into the base frame by the adjoint of the link's
    global pose.

    Args:
        links: Link nodes indexed by link id.
        topology: Parent/child relations between link ids.
        order: Link ids, each appearing after its parent.
        base_pose: (4, 4) global pose of the root; identity if omitted.

    Returns:
        New link nodes, indexed by link id, with ``global_pose`` and
        ``global_motion_screw`` filled in.
    """
    if base_pose is None:
        base_pose = se3.identity()

    updated = list(links)
    for link_id in order:
        node = updated[link_id]
        parent_id = topology.parent_of[link_id]

        if parent_id is None:
            global_pose = base_pose
        else:
            joint_motion = se3.exp(node.local_motion_screw * node.joint_value)
            relative_pose = se3.multiply(node.parent_relative_pose, joint_motion)
            global_pose = se3.multiply(updated[parent_id].global_pose, relative_pose)

        updated[link_id] = node.replace(
            global_pose=global_pose,
            global_motion_screw=se3.act(global_pose, node.local_motion_screw),
        )

    return updated


def _make_link_node(entry: IndexedLink) -> LinkNode:
    joint = entry.joint
    inertial = entry.link.inertial

    if joint is None:
        spec = None
        screw = jnp.zeros(6)
        zero_pose = se3.identity()
    else:
        zero_pose = joint.origin.to_matrix()
        spec = JointSpec(
            name=joint.name,
            kind=joint.kind,
            axis=jnp.asarray(joint.axis, dtype=float),
            origin=zero_pose,
        )
        screw = motion_screw(joint.kind, joint.axis, joint.name)

    return LinkNode(
        id=entry.id,
        name=entry.link.name,
        joint=spec,
        joint_value=jnp.asarray(0.0),
        local_motion_screw=screw,
        global_motion_screw=jnp.zeros(6),
        parent_relative_pose=zero_pose,
        global_pose=se3.identity(),
        mass=jnp.asarray(inertial.mass, dtype=float),
        inertia=jnp.asarray(inertial.inertia, dtype=float),
        inertial_frame=inertial.origin.to_matrix(),
        spatial_inertia=link_spatial_inertia(inertial),
    )


class KinematicTree:
    """A robot as a rooted tree of links with their current poses.

    Use ``build_from_description`` rather than constructing this directly.
    """

    def __init__(
        self,
        links: Sequence[LinkNode],
        topology: Topology,
        order: Sequence[int],
        base_pose: Optional[Array] = None,
    ):
        self._links = list(links)
        self._topology = topology
        self._order = tuple(order)
        self._base_pose = se3.identity() if base_pose is None else jnp.asarray(base_pose, dtype=float)

        self._link_ids: Dict[str, int] = {node.name: node.id for node in self._links}
        self._joint_link_ids: Dict[str, int] = {
            node.joint.name: node.id for node in self._links if node.joint is not None
        }

        self.recompute()

    # Structure
    @property
    def topology(self) -> Topology:
        return self._topology

    @property
    def root(self) -> int:
        return self._topology.root

    @property
    def leaves(self) -> FrozenSet[int]:
        return self._topology.leaves

    @property
    def traversal_order(self) -> Tuple[int, ...]:
        return self._order

    @property
    def num_links(self) -> int:
        return len(self._links)

    @property
    def base_pose(self) -> Array:
        return self._base_pose

    @property
    def links(self) -> Tuple[LinkNode, ...]:
        return tuple(self._links)

    @property
    def link_names(self) -> Tuple[str, ...]:
        return tuple(node.name for node in self._links)

    @property
    def joint_names(self) -> Tuple[str, ...]:
        """Names of all joints, in link id order of their child links."""
        return tuple(self._joint_link_ids)

    @property
    def actuated_joint_names(self) -> Tuple[str, ...]:
        return tuple(
            node.joint.name for node in self._links
            if node.joint is not None and node.joint.kind.is_actuated
        )

    def parent(self, link_id: int) -> Optional[int]:
        self._check_id(link_id)
        return self._topology.parent_of[link_id]

    def children(self, link_id: int) -> Tuple[int, ...]:
        self._check_id(link_id)
        return self._topology.children_of[link_id]

    def link(self, link_id: int) -> LinkNode:
        self._check_id(link_id)
        return self._links[link_id]

    def link_id(self, name: str) -> int:
        try:
            return self._link_ids[name]
        except KeyError:
            raise UnknownLinkName(name) from None

    def link_by_name(self, name: str) -> LinkNode:
        return self._links[self.link_id(name)]

    def joint_link_id(self, joint_name: str) -> int:
        """Id of the link a joint attaches to its parent."""
        try:
            return self._joint_link_ids[joint_name]
        except KeyError:
            raise UnknownJointName([joint_name]) from None

    # Configuration
    @property
    def joint_values(self) -> Dict[str, float]:
        return {
            name: float(self._links[link_id].joint_value)
            for name, link_id in self._joint_link_ids.items()
        }

    def global_pose(self, link_id: int) -> Array:
        return self.link(link_id).global_pose

    def global_poses(self) -> Array:
        """(num_links, 4, 4) global poses in link id order."""
        return jnp.stack([node.global_pose for node in self._links])

    def set_joint_values(self, values: Mapping[str, float]) -> None:
        """Assign joint values by joint name and re-propagate the whole tree.

        The update is all-or-nothing: if any name is unknown or any value
        is not a scalar, nothing changes.

        Raises:
            UnknownJointName: if ``values`` names a joint not in the tree.
            ValueError: if a value is not a scalar.
        """
        unknown = [name for name in values if name not in self._joint_link_ids]
        if unknown:
            raise UnknownJointName(unknown)

        converted = {}
        for name, value in values.items():
            value = jnp.asarray(value, dtype=float)
            if value.ndim != 0:
                raise ValueError(f"Joint '{name}' takes a scalar value, got shape {value.shape}")
            converted[name] = value
        for name, value in converted.items():
            link_id = self._joint_link_ids[name]
            self._links[link_id] = self._links[link_id].replace(joint_value=value)

        self.recompute()

    def recompute(self) -> None:
        """Recompute every global pose and global motion screw."""
        self._links = propagate_poses(self._links, self._topology, self._order, self._base_pose)
        logger.debug("Propagated poses over %d links", len(self._links))

    def _check_id(self, link_id: int) -> None:
        if not 0 <= link_id < len(self._links):
            raise IndexError(f"Link id {link_id} out of range for {len(self._links)} links")

    def __repr__(self) -> str:
        return (
            f"KinematicTree(links={len(self._links)}, root='{self._links[self.root].name}', "
            f"joints={len(self._joint_link_ids)})"
        )


def build_from_description(
    description: RobotDescription, base_pose: Optional[Array] = None
) -> KinematicTree:
    """Build a kinematic tree from a parsed robot description.

    Args:
        description: Links and joints cross-referenced by name.
        base_pose: Optional (4, 4) pose of the root link; identity by default.

    Returns:
        The tree, with every link's pose propagated at zero joint values.

    Raises:
        MalformedDescription: if the description is not a single rooted tree.
        DegenerateAxis: if a moving joint's axis cannot be normalized.
        UnreachableLink: if the link graph is inconsistent.
    """
    indexed = index_description(description)
    topology = build_topology(indexed)
    order = traversal_order(topology)

    links: List[Optional[LinkNode]] = [None] * len(indexed)
    for entry in indexed.values():
        links[entry.id] = _make_link_node(entry)

    return KinematicTree(links, topology, order, base_pose=base_pose)
