"""Per-link records of a kinematic tree.

Both records are immutable ``flax.struct`` dataclasses and therefore JAX
PyTrees. The tree updates a link's configuration-dependent fields by replacing
the node with ``node.replace(...)``.
"""

from typing import Optional

from flax import struct
from jax import Array

from .joint_model import JointKind


@struct.dataclass
class JointSpec:
    """The joint attaching a link to its parent.

    Attributes:
        name: Joint name, used to address joint values.
        kind: Joint kind; decides the motion screw.
        axis: (3,) axis as declared in the description.
        origin: (4, 4) child frame relative to the parent frame at zero value.
    """
    name: str = struct.field(pytree_node=False)
    kind: JointKind = struct.field(pytree_node=False)
    axis: Array
    origin: Array


@struct.dataclass
class LinkNode:
    """A rigid link and everything the tree knows about it.

    Attributes:
        id: Dense link id, the link's index in the tree.
        name: Link name.
        joint: Joint to the parent link, ``None`` for the root.
        joint_value: Current value of ``joint`` (angle or displacement).
        local_motion_screw: (6,) twist of the joint in the link frame.
        global_motion_screw: (6,) the same twist expressed in the base frame
            at the current configuration.
        parent_relative_pose: (4, 4) link frame in the parent frame at zero
            joint value.
        global_pose: (4, 4) link frame in the base frame at the current
            configuration.
        mass: Link mass.
        inertia: (3, 3) rotational inertia about the inertial frame.
        inertial_frame: (4, 4) inertial frame in the link frame.
        spatial_inertia: (6, 6) spatial inertia in the link frame.
    """
    id: int = struct.field(pytree_node=False)
    name: str = struct.field(pytree_node=False)
    joint: Optional[JointSpec]
    joint_value: Array
    local_motion_screw: Array
    global_motion_screw: Array
    parent_relative_pose: Array
    global_pose: Array
    mass: Array
    inertia: Array
    inertial_frame: Array
    spatial_inertia: Array

    @property
    def joint_name(self) -> Optional[str]:
        return self.joint.name if self.joint is not None else None
