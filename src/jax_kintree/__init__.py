"""
JAX Kintree: kinematic trees of rigid links for robotics.

This library turns a robot description into a rooted tree of links with
per-link poses, joint motion screws, and body-frame spatial inertias, and
provides JIT-compilable forward kinematics and Jacobians over that tree.
"""

import logging

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import io
from .core import KinematicTree, build_from_description
from .errors import (
    BuildError,
    DegenerateAxis,
    KinematicTreeError,
    MalformedDescription,
    UnknownJointName,
    UnknownLinkName,
    UnreachableLink,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "BuildError",
    "DegenerateAxis",
    "KinematicTree",
    "KinematicTreeError",
    "MalformedDescription",
    "UnknownJointName",
    "UnknownLinkName",
    "UnreachableLink",
    "build_from_description",
    "core",
    "io",
    "transforms",
]
