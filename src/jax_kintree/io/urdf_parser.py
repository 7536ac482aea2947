"""URDF parser producing robot descriptions and kinematic trees.

This module reads URDF text with lxml into the plain ``RobotDescription``
records the tree builder consumes, and can fetch the text from a local file or
an http(s) URL first.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import requests
from jax import Array
from lxml import etree

from jax_kintree.core.description import (
    Inertial,
    JointDescription,
    LinkDescription,
    Pose,
    RobotDescription,
)
from jax_kintree.core.joint_model import JointKind
from jax_kintree.core.kinematic_tree import KinematicTree, build_from_description
from jax_kintree.errors import MalformedDescription

logger = logging.getLogger(__name__)

URDF_SUFFIXES = (".urdf", ".URDF")


def is_urdf_file(source: Union[str, Path]) -> bool:
    """True if ``source`` is an existing file with a .urdf suffix."""
    path = Path(source)
    return path.is_file() and str(path).endswith(URDF_SUFFIXES)


def is_urdf_url(source: str) -> bool:
    """True if ``source`` is an http(s) URL naming a .urdf document."""
    source = str(source)
    return source.startswith(("http://", "https://")) and source.endswith(URDF_SUFFIXES)


def read_urdf_url(url: str, timeout: float = 30.0) -> str:
    """Download URDF text.

    Raises:
        requests.HTTPError: if the server answers with an error status.
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.text


def load_urdf(source: Union[str, Path], base_pose: Optional[Array] = None) -> KinematicTree:
    """Load a URDF file or URL and build its kinematic tree.

    Args:
        source: Path to a local .urdf file, or an http(s) URL ending in .urdf.
        base_pose: Optional (4, 4) global pose of the root link.

    Returns:
        KinematicTree: the built tree at zero joint values.
    """
    if is_urdf_file(source):
        logger.debug("Loading URDF from file %s", source)
        description = parse_urdf_file(source)
    elif is_urdf_url(str(source)):
        logger.debug("Loading URDF from %s", source)
        description = parse_urdf_string(read_urdf_url(str(source)))
    else:
        raise ValueError(f"'{source}' is neither a URDF file nor a URDF web URL")

    return build_from_description(description, base_pose=base_pose)


def parse_urdf_file(path: Union[str, Path]) -> RobotDescription:
    tree = etree.parse(str(path))
    return _parse_robot(tree.getroot())


def parse_urdf_string(text: Union[str, bytes]) -> RobotDescription:
    """Parse URDF text into a ``RobotDescription``."""
    if isinstance(text, str):
        # lxml rejects str input that carries an encoding declaration
        text = text.encode("utf-8")
    return _parse_robot(etree.fromstring(text))


def _parse_robot(root) -> RobotDescription:
    if root.tag != "robot":
        raise MalformedDescription(f"Expected a <robot> root element, found <{root.tag}>")

    # Direct children only: <transmission> and <gazebo> blocks nest their own
    # <joint>/<link> references.
    links = tuple(_parse_link(elem) for elem in root.findall("link"))
    joints = tuple(_parse_joint(elem) for elem in root.findall("joint"))

    return RobotDescription(name=root.get("name", ""), links=links, joints=joints)


def _parse_link(link_elem) -> LinkDescription:
    name = _required(link_elem, "name")

    inertial_elem = link_elem.find("inertial")
    if inertial_elem is None:
        return LinkDescription(name=name)

    mass_elem = inertial_elem.find("mass")
    mass = float(mass_elem.get("value", "0")) if mass_elem is not None else 0.0

    inertia_elem = inertial_elem.find("inertia")
    components = {key: 0.0 for key in ("ixx", "ixy", "ixz", "iyy", "iyz", "izz")}
    if inertia_elem is not None:
        for key in components:
            components[key] = float(inertia_elem.get(key, "0"))

    inertial = Inertial.from_components(
        mass, origin=_parse_origin(inertial_elem.find("origin")), **components
    )
    return LinkDescription(name=name, inertial=inertial)


def _parse_joint(joint_elem) -> JointDescription:
    name = _required(joint_elem, "name")
    joint_type = _required(joint_elem, "type")

    parent_elem = joint_elem.find("parent")
    child_elem = joint_elem.find("child")
    if parent_elem is None or child_elem is None:
        raise MalformedDescription(f"Joint '{name}' must name both a parent and a child link")

    axis_elem = joint_elem.find("axis")
    axis_xyz = axis_elem.get("xyz", "1 0 0") if axis_elem is not None else "1 0 0"

    return JointDescription(
        name=name,
        kind=JointKind.from_name(joint_type),
        parent=_required(parent_elem, "link"),
        child=_required(child_elem, "link"),
        axis=_parse_vector(axis_xyz, f"axis of joint '{name}'"),
        origin=_parse_origin(joint_elem.find("origin")),
    )


def _parse_origin(origin_elem) -> Pose:
    if origin_elem is None:
        return Pose()
    return Pose(
        xyz=_parse_vector(origin_elem.get("xyz", "0 0 0"), "origin xyz"),
        rpy=_parse_vector(origin_elem.get("rpy", "0 0 0"), "origin rpy"),
    )


def _parse_vector(text: str, what: str) -> Tuple[float, float, float]:
    values = text.split()
    if len(values) != 3:
        raise MalformedDescription(f"Expected 3 numbers for {what}, got '{text}'")
    x, y, z = (float(v) for v in values)
    return x, y, z


def _required(elem, attribute: str) -> str:
    value = elem.get(attribute)
    if value is None:
        raise MalformedDescription(f"<{elem.tag}> element is missing the '{attribute}' attribute")
    return value
