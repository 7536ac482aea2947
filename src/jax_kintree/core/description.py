"""Plain robot description records and their flat, id-indexed view.

A parser (see ``jax_kintree.io``) produces a ``RobotDescription``: links and
joints cross-referenced by name. ``index_description`` assigns every link a
dense integer id (its position in the description) and pairs it with the single
joint that attaches it to its parent.
"""

import dataclasses
import logging
from typing import Dict, NamedTuple, Optional, Tuple

import numpy as np

from jax_kintree.core.joint_model import JointKind
from jax_kintree.errors import MalformedDescription
from jax_kintree.transforms import se3

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Pose:
    """A rigid transform given as a translation and roll-pitch-yaw angles."""

    xyz: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def to_matrix(self):
        return se3.from_xyz_rpy(np.asarray(self.xyz), np.asarray(self.rpy))


@dataclasses.dataclass(frozen=True, eq=False)
class Inertial:
    """Mass properties of a link, defined about the link's inertial frame.

    Attributes:
        mass: Link mass.
        inertia: (3, 3) rotational inertia tensor about the inertial frame.
        origin: Pose of the inertial frame relative to the link frame.
    """

    mass: float = 0.0
    inertia: np.ndarray = dataclasses.field(default_factory=lambda: np.zeros((3, 3)))
    origin: Pose = dataclasses.field(default_factory=Pose)

    @classmethod
    def from_components(cls, mass, ixx, ixy, ixz, iyy, iyz, izz, origin: Pose = Pose()) -> "Inertial":
        inertia = np.array([
            [ixx, ixy, ixz],
            [ixy, iyy, iyz],
            [ixz, iyz, izz],
        ], dtype=float)
        return cls(mass=float(mass), inertia=inertia, origin=origin)


@dataclasses.dataclass(frozen=True)
class LinkDescription:
    name: str
    inertial: Inertial = dataclasses.field(default_factory=Inertial)


@dataclasses.dataclass(frozen=True)
class JointDescription:
    """A joint connecting ``parent`` to ``child``, both given by link name.

    ``origin`` is the child frame relative to the parent frame at zero joint value.
    """

    name: str
    kind: JointKind
    parent: str
    child: str
    axis: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    origin: Pose = dataclasses.field(default_factory=Pose)


@dataclasses.dataclass(frozen=True)
class RobotDescription:
    name: str
    links: Tuple[LinkDescription, ...]
    joints: Tuple[JointDescription, ...]


class IndexedLink(NamedTuple):
    """A link together with the joint to its parent (``None`` for the root)."""

    id: int
    link: LinkDescription
    joint: Optional[JointDescription]
    parent_id: Optional[int]


def index_description(description: RobotDescription) -> Dict[str, IndexedLink]:
    """Assign link ids and attach each link to its parent joint.

    Args:
        description: A parsed robot description.

    Returns:
        Mapping from link name to ``IndexedLink``, ordered by link id. Exactly
        one entry (the root) has ``joint is None``.

    Raises:
        MalformedDescription: on duplicate names, dangling link references, a
            link with two parent joints, or a missing or ambiguous root.
    """
    if not description.links:
        raise MalformedDescription("Robot description has no links")

    link_ids: Dict[str, int] = {}
    for i, link in enumerate(description.links):
        if link.name in link_ids:
            raise MalformedDescription(f"Duplicate link name '{link.name}'")
        link_ids[link.name] = i

    joint_names = set()
    joint_by_child: Dict[str, JointDescription] = {}
    for joint in description.joints:
        if joint.name in joint_names:
            raise MalformedDescription(f"Duplicate joint name '{joint.name}'")
        joint_names.add(joint.name)

        for role, link_name in (("parent", joint.parent), ("child", joint.child)):
            if link_name not in link_ids:
                raise MalformedDescription(
                    f"Joint '{joint.name}' references unknown {role} link '{link_name}'"
                )
        if joint.parent == joint.child:
            raise MalformedDescription(f"Joint '{joint.name}' connects link '{joint.child}' to itself")

        if joint.child in joint_by_child:
            raise MalformedDescription(
                f"Link '{joint.child}' is the child of both joint "
                f"'{joint_by_child[joint.child].name}' and joint '{joint.name}'"
            )
        joint_by_child[joint.child] = joint

    roots = [link.name for link in description.links if link.name not in joint_by_child]
    if len(roots) != 1:
        raise MalformedDescription(f"Expected exactly one root link, found: {roots}")

    indexed: Dict[str, IndexedLink] = {}
    for link in description.links:
        joint = joint_by_child.get(link.name)
        parent_id = link_ids[joint.parent] if joint is not None else None
        indexed[link.name] = IndexedLink(link_ids[link.name], link, joint, parent_id)

    logger.debug(
        "Indexed %d links and %d joints of '%s', root link '%s'",
        len(indexed), len(joint_by_child), description.name, roots[0],
    )
    return indexed
