"""Loading robot descriptions from URDF files and URLs.

This module parses URDF into plain ``RobotDescription`` records and builds
kinematic trees from them.
"""

from .urdf_parser import load_urdf, parse_urdf_file, parse_urdf_string

__all__ = ["load_urdf", "parse_urdf_file", "parse_urdf_string"]
