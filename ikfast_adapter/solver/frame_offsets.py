"""
坐标系偏移缓存 (Frame Offset Cache)

客户端使用 world 坐标系和 TCP 坐标系，外部求解器只理解自己的基座/末端坐标系。
两组坐标系之间的变换依赖关节状态，每次状态变化后都必须重新计算。
缓存不是线程安全的：重新计算与 IK/FK 查询并发时需要调用方自行串行化。
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError
from ..model.interfaces import KinematicState
from ..model.transform import RigidTransform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameOffsets:
    """
    world_to_base: 求解器基座坐标系在 world 下的位姿
    tool_to_tip: 求解器末端坐标系在 TCP 坐标系下的位姿
    逆变换由属性实时计算，不单独保存
    """
    world_to_base: RigidTransform
    tool_to_tip: RigidTransform
    base_frame: str
    tip_frame: str

    @property
    def world_to_base_inv(self) -> RigidTransform:
        return self.world_to_base.inverse()

    @property
    def tool_to_tip_inv(self) -> RigidTransform:
        return self.tool_to_tip.inverse()

    def to_solver(self, pose_in_world: RigidTransform) -> RigidTransform:
        """world 下的 TCP 位姿 -> 求解器基座下的末端位姿"""
        return self.world_to_base_inv @ pose_in_world @ self.tool_to_tip

    def to_world(self, pose_in_base: RigidTransform) -> RigidTransform:
        """求解器基座下的末端位姿 -> world 下的 TCP 位姿"""
        return self.world_to_base @ pose_in_base @ self.tool_to_tip_inv


class FrameOffsetCache:
    """持有最近一次成功计算的 FrameOffsets"""

    def __init__(self, base_frame: str, tip_frame: str):
        """
        :param base_frame: 求解器原生基座坐标系
        :param tip_frame: 求解器原生末端坐标系
        """
        self.base_frame = base_frame
        self.tip_frame = tip_frame
        self._offsets: Optional[FrameOffsets] = None

    @property
    def is_valid(self) -> bool:
        return self._offsets is not None

    @property
    def offsets(self) -> FrameOffsets:
        if self._offsets is None:
            raise ConfigurationError("Frame offsets have not been computed; initialize the adapter first")
        return self._offsets

    def invalidate(self):
        self._offsets = None

    def recompute(self, state: KinematicState, world_frame: str, tool_frame: str) -> FrameOffsets:
        """
        根据当前运动学状态重新计算偏移；任一坐标系未知时抛出 ConfigurationError，已缓存的值保持不变

        :param state: 运动学状态
        :param world_frame: 客户端 world 坐标系
        :param tool_frame: 客户端 TCP 坐标系
        :return: 新的 FrameOffsets
        """
        for role, frame in (('world', world_frame), ('tool', tool_frame),
                            ('solver base', self.base_frame), ('solver tip', self.tip_frame)):
            if not state.is_frame_known(frame):
                logger.error("Cannot find transformation to %s frame '%s'", role, frame)
                raise ConfigurationError(f"Cannot find transformation to {role} frame '{frame}'")

        world_to_root = state.transform_of(world_frame).inverse()
        tool_to_tip = state.transform_of(tool_frame).inverse() @ state.transform_of(self.tip_frame)
        world_to_base = world_to_root @ state.transform_of(self.base_frame)

        self._offsets = FrameOffsets(world_to_base, tool_to_tip, self.base_frame, self.tip_frame)
        logger.debug("Recomputed frame offsets for solver base '%s' and tip '%s'", self.base_frame, self.tip_frame)
        return self._offsets
