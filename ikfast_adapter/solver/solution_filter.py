"""
关节解过滤：关节限位合法性判断与基于容差的去重
"""
import numpy as np
from typing import Iterable, List, Optional, Sequence, Tuple

from ..model.joint import JointNode

# 去重/限位容差的默认值，对所有关节使用同一个绝对值
DEFAULT_TOLERANCE = 1e-6


def is_equal(v1: Sequence[float], v2: Sequence[float], tol: float = DEFAULT_TOLERANCE) -> bool:
    """
    逐关节比较两个关节配置，长度相同且每个分量之差的绝对值都小于 tol 时相等

    注意：旋转关节（弧度）与移动关节（米）共用同一个绝对容差
    """
    if len(v1) != len(v2):
        return False
    return bool(np.all(np.abs(np.asarray(v1, dtype=np.float64) - np.asarray(v2, dtype=np.float64)) < tol))


def is_in_list(v: Sequence[float], solutions: Iterable[Sequence[float]], tol: float = DEFAULT_TOLERANCE) -> bool:
    return any(is_equal(v, other, tol) for other in solutions)


class JointLimits:
    """
    运动链的关节限位，长度即自由度 (DOF)
    """

    def __init__(self, bounds: Sequence[Optional[Tuple[float, float]]], tolerance: float = DEFAULT_TOLERANCE):
        """
        :param bounds: 每个关节的 (min, max)，None 表示无约束
        :param tolerance: 限位检查时允许越界的量
        """
        self.bounds: List[Optional[Tuple[float, float]]] = []
        for bound in bounds:
            if bound is not None:
                lo, hi = float(bound[0]), float(bound[1])
                if lo > hi:
                    raise ValueError(f"Invalid joint bound: {bound}")
                bound = (lo, hi)
            self.bounds.append(bound)
        self.tolerance = tolerance

    @classmethod
    def from_joints(cls, joints: Sequence[JointNode], tolerance: float = DEFAULT_TOLERANCE) -> 'JointLimits':
        return cls([getattr(joint, 'limits', None) for joint in joints], tolerance)

    @classmethod
    def unbounded(cls, dof: int, tolerance: float = DEFAULT_TOLERANCE) -> 'JointLimits':
        return cls([None] * dof, tolerance)

    @property
    def dof(self) -> int:
        return len(self.bounds)

    def is_valid(self, joints: Sequence[float]) -> bool:
        """长度等于 DOF，且每个关节都在限位内"""
        if len(joints) != self.dof:
            return False
        for value, bound in zip(joints, self.bounds):
            if not np.isfinite(value):
                return False
            if bound is None:
                continue
            if value < bound[0] - self.tolerance or value > bound[1] + self.tolerance:
                return False
        return True

    def __len__(self):
        return self.dof

    def __repr__(self):
        return f"<JointLimits: {self.bounds}>"
