"""
工具层 (Utils Layer)
"""

from .quaternion_utils import (
    quaternion_to_rotation_matrix,
    wxyz_to_xyzw,
    xyzw_to_wxyz
)

__all__ = [
    'quaternion_to_rotation_matrix',
    'wxyz_to_xyzw',
    'xyzw_to_wxyz'
]
