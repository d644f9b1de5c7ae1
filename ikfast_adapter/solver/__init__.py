"""
求解层 (Solver Layer)
坐标系偏移缓存、解的过滤与去重、种子选择，以及数值参考求解器
"""

from .frame_offsets import FrameOffsets, FrameOffsetCache
from .solution_filter import DEFAULT_TOLERANCE, JointLimits, is_equal, is_in_list
from .seed_selector import joint_distance, closest_joint_pose
from .ik_core import (
    build_ik_chain,
    compute_jacobian,
    compute_error_vector
)
from .solve_ik import solve_dls, DlsKinematicsSolver

__all__ = [
    'FrameOffsets',
    'FrameOffsetCache',
    'DEFAULT_TOLERANCE',
    'JointLimits',
    'is_equal',
    'is_in_list',
    'joint_distance',
    'closest_joint_pose',
    'build_ik_chain',
    'compute_jacobian',
    'compute_error_vector',
    'solve_dls',
    'DlsKinematicsSolver'
]
