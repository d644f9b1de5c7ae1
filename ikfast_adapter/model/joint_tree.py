"""
基于关节树的运动学状态
"""
import logging
import numpy as np
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import UnknownFrameError
from .interfaces import KinematicState
from .joint import JointNode, FixedJoint
from .transform import RigidTransform

logger = logging.getLogger(__name__)


class JointTreeState(KinematicState):
    """
    以关节树作为坐标系图的运动学状态提供方。

    每个节点名即一个坐标系，根节点坐标系即模型坐标系。
    通过 set_joint_positions 修改关节状态后会刷新全树变换并通知所有监听者。
    """

    def __init__(self, root: JointNode, joint_map: Optional[Dict[str, JointNode]] = None):
        """
        :param root: 关节树的根节点
        :param joint_map: 关节名称到节点的映射，None 时从 root 遍历生成
        """
        self.root = root
        if joint_map is None:
            joint_map = {node.name: node for node in root.iter_subtree()}
        self.joint_map = joint_map
        self._listeners: List[Callable[[KinematicState], None]] = []
        self.root.update_global_transform()

    @property
    def model_frame(self) -> str:
        return self.root.name

    @property
    def active_joint_names(self) -> List[str]:
        return [name for name, node in self.joint_map.items() if node.get_dof() > 0]

    def transform_of(self, frame: str) -> RigidTransform:
        node = self.joint_map.get(frame)
        if node is None:
            raise UnknownFrameError(frame)
        return RigidTransform.from_matrix(node.global_transform)

    def is_frame_known(self, frame: str) -> bool:
        return frame in self.joint_map

    def add_listener(self, callback: Callable[[KinematicState], None]):
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[KinematicState], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def chain(self, base_frame: str, tip_frame: str) -> List[JointNode]:
        """
        base_frame 到 tip_frame 路径上（不含 base 本身）的可动关节，按从基座到末端的顺序
        """
        from ..solver.ik_core import build_ik_chain

        for frame in (base_frame, tip_frame):
            if frame not in self.joint_map:
                raise UnknownFrameError(frame)
        return build_ik_chain(self.joint_map[base_frame], self.joint_map[tip_frame])

    def chain_limits(self, base_frame: str, tip_frame: str, tolerance: Optional[float] = None):
        """
        base_frame 到 tip_frame 之间可动关节的限位

        :param tolerance: 限位容差，None 时使用默认容差
        :return: JointLimits
        """
        from ..solver.solution_filter import DEFAULT_TOLERANCE, JointLimits

        if tolerance is None:
            tolerance = DEFAULT_TOLERANCE
        return JointLimits.from_joints(self.chain(base_frame, tip_frame), tolerance)

    def joint_positions(self, names: Optional[Sequence[str]] = None) -> np.ndarray:
        if names is None:
            names = self.active_joint_names
        return np.array([self._movable(name).q for name in names], dtype=np.float64)

    def set_joint_positions(self, values: Sequence[float], names: Optional[Sequence[str]] = None):
        """
        修改关节状态，刷新全树变换并通知监听者

        :param values: 关节值
        :param names: 关节名称，None 表示按 active_joint_names 的顺序
        """
        if names is None:
            names = self.active_joint_names
        if len(values) != len(names):
            raise ValueError(f"Expected {len(names)} joint values, got {len(values)}")

        for name, value in zip(names, values):
            self._movable(name).q = float(value)
        self.root.update_global_transform()

        for callback in list(self._listeners):
            callback(self)

    def _movable(self, name: str) -> JointNode:
        node = self.joint_map.get(name)
        if node is None:
            raise UnknownFrameError(name)
        if isinstance(node, FixedJoint):
            raise ValueError(f"Joint '{name}' is fixed and has no position")
        return node
