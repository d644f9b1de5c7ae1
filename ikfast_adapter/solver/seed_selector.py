"""
种子选择：在候选解中找到与目标关节配置 L1 距离最近的一个
"""
from typing import Sequence


def joint_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """关节空间 L1 距离；不做角度回绕，也不加权"""
    return float(sum(abs(bi - ai) for ai, bi in zip(a, b)))


def closest_joint_pose(target: Sequence[float], candidates: Sequence[Sequence[float]]) -> int:
    """
    :param target: 目标关节配置（通常为种子）
    :param candidates: 候选解，不能为空
    :return: 距离最小的候选解下标；距离相同时取第一个
    """
    if len(candidates) == 0:
        raise ValueError("closest_joint_pose requires at least one candidate")

    closest = 0
    lowest_cost = float('inf')
    for i, candidate in enumerate(candidates):
        if len(candidate) != len(target):
            raise ValueError(f"Candidate {i} has {len(candidate)} joints, expected {len(target)}")
        cost = joint_distance(target, candidate)
        if cost < lowest_cost:
            closest = i
            lowest_cost = cost
    return closest
