"""Exceptions raised while building and configuring a kinematic tree."""

from typing import Iterable, Sequence


class KinematicTreeError(ValueError):
    """Base class for all kinematic tree errors."""


class BuildError(KinematicTreeError):
    """A robot description could not be turned into a kinematic tree.

    Build errors are fatal: no partially built tree is ever returned.
    """


class MalformedDescription(BuildError):
    """Links and joints do not describe a single rooted tree."""


class DegenerateAxis(BuildError):
    """A moving joint declares an axis with zero or non-finite norm."""

    def __init__(self, joint_name: str, axis: Sequence[float]):
        self.joint_name = joint_name
        self.axis = tuple(float(a) for a in axis)
        super().__init__(
            f"Joint '{joint_name}' has a degenerate axis {list(self.axis)}"
        )


class UnreachableLink(BuildError):
    """Some links were not visited when walking the graph from its root."""

    def __init__(self, link_ids: Iterable[int]):
        self.link_ids = tuple(sorted(link_ids))
        super().__init__(f"Links not reachable from the root: {list(self.link_ids)}")


class UnknownJointName(KinematicTreeError, LookupError):
    """A joint value update names joints that are not part of the tree."""

    def __init__(self, names: Iterable[str]):
        self.names = tuple(sorted(names))
        super().__init__(f"Unknown joint name(s): {list(self.names)}")


class UnknownLinkName(KinematicTreeError, LookupError):
    """A lookup names a link that is not part of the tree."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Link '{name}' not found in kinematic tree")
