"""
模型层 (Model Layer)
刚体变换、关节树，以及运动学状态/外部求解器的接口

- RigidTransform: 刚体变换（旋转 + 平移）
- JointNode / FixedJoint / RevoluteJoint / PrismaticJoint: 关节树节点
- KinematicState / KinematicsSolver: 注入适配器的协作方接口
- JointTreeState: 基于关节树的运动学状态
"""

from .transform import RigidTransform
from .joint import (
    JointNode,
    FixedJoint,
    RevoluteJoint,
    PrismaticJoint
)
from .interfaces import KinematicState, KinematicsSolver
from .joint_tree import JointTreeState

__all__ = [
    'RigidTransform',
    'JointNode',
    'FixedJoint',
    'RevoluteJoint',
    'PrismaticJoint',
    'KinematicState',
    'KinematicsSolver',
    'JointTreeState'
]
