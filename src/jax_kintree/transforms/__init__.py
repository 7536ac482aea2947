"""
Rigid-body transform algebra used by the kinematic tree.

This module provides pure, JIT-compilable implementations of:
- SO(3) rotations (so3 module)
- SE(3) rigid body transforms and se(3) twists (se3 module)
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
