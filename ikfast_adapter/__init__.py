"""
ikfast_adapter
运动规划客户端与外部解析 IK/FK 求解器之间的运动学适配层
"""

from .errors import ConfigurationError, UnknownFrameError, SolverCapabilityFailure
from .config import AdapterConfig, load_config, DEFAULT_BASE_FRAME, DEFAULT_TIP_FRAME
from .model import RigidTransform, KinematicState, KinematicsSolver, JointTreeState
from .solver import FrameOffsets, FrameOffsetCache, JointLimits, DlsKinematicsSolver
from .adapter import IkFastStateAdapter

__all__ = [
    'ConfigurationError',
    'UnknownFrameError',
    'SolverCapabilityFailure',
    'AdapterConfig',
    'load_config',
    'DEFAULT_BASE_FRAME',
    'DEFAULT_TIP_FRAME',
    'RigidTransform',
    'KinematicState',
    'KinematicsSolver',
    'JointTreeState',
    'FrameOffsets',
    'FrameOffsetCache',
    'JointLimits',
    'DlsKinematicsSolver',
    'IkFastStateAdapter'
]
