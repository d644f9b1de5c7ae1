"""
IKFast 风格的运动学适配器

位于运动规划客户端与外部解析求解器之间：
- 维护 world/TCP 坐标系与求解器原生基座/末端坐标系之间的偏移缓存
- 以多个种子驱动外部求解器，枚举、过滤并去重所有合法的逆解
- 单解请求时选出与种子 L1 距离最近的解
- 正解结果转换回 world 坐标系

所有操作都是同步阻塞的。同一个适配器实例不是线程安全的：状态变化触发的重新计算
与 IK/FK 查询并发时需要外部串行化，或者每个工作线程持有独立的适配器和求解器。
外部求解器调用没有超时，求解器挂起会阻塞调用方。
"""
import logging
import numpy as np
from typing import List, Optional, Sequence

from .config import AdapterConfig
from .errors import ConfigurationError, SolverCapabilityFailure
from .model.interfaces import KinematicState, KinematicsSolver
from .model.transform import RigidTransform
from .solver.frame_offsets import FrameOffsetCache, FrameOffsets
from .solver.seed_selector import closest_joint_pose
from .solver.solution_filter import JointLimits, is_in_list

logger = logging.getLogger(__name__)


class IkFastStateAdapter:
    """
    IK/FK 适配器，偏移缓存由实例独占
    """

    def __init__(self, state: KinematicState, solver: KinematicsSolver,
                 joint_limits: JointLimits, config: Optional[AdapterConfig] = None):
        """
        :param state: 运动学状态提供方
        :param solver: 外部求解器
        :param joint_limits: 运动链的关节限位，长度即 DOF
        :param config: 适配器配置，None 表示全部使用默认值
        """
        self.state = state
        self.solver = solver
        self.config = config if config is not None else AdapterConfig()
        self.joint_limits = JointLimits(joint_limits.bounds, self.config.tolerance)
        self.world_frame: Optional[str] = None
        self.tcp_frame: Optional[str] = None
        self._cache: Optional[FrameOffsetCache] = None
        self._seed_states: List[np.ndarray] = []
        self.set_seed_states(self.config.seed_states)

    @property
    def dof(self) -> int:
        return self.joint_limits.dof

    @property
    def tolerance(self) -> float:
        return self.config.tolerance

    @property
    def offsets(self) -> FrameOffsets:
        """:raises ConfigurationError: 尚未成功初始化"""
        return self._require_cache().offsets

    @property
    def seed_states(self) -> List[np.ndarray]:
        return [seed.copy() for seed in self._seed_states]

    def set_seed_states(self, seeds: Sequence[Sequence[float]]):
        """设置默认种子集合，每个种子长度必须等于 DOF"""
        self._seed_states = [self._as_joints(seed, 'seed') for seed in seeds]

    def initialize(self, world_frame: str, tcp_frame: str) -> FrameOffsets:
        """
        解析求解器原生坐标系，计算偏移缓存并注册状态变化回调

        :param world_frame: 客户端 world 坐标系
        :param tcp_frame: 客户端 TCP 坐标系
        :raises ConfigurationError: 任一坐标系在运动学状态中未知，适配器保持不可用
        """
        base_frame = self.config.resolved_base_frame()
        tip_frame = self.config.resolved_tip_frame()
        if tip_frame != self.solver.tip_frame:
            logger.warning("Configured solver tip frame '%s' differs from the solver's own tip frame '%s'",
                           tip_frame, self.solver.tip_frame)

        cache = FrameOffsetCache(base_frame, tip_frame)
        offsets = cache.recompute(self.state, world_frame, tcp_frame)

        if self._cache is not None:
            self.state.remove_listener(self.on_state_changed)
        self.world_frame = world_frame
        self.tcp_frame = tcp_frame
        self._cache = cache
        self.state.add_listener(self.on_state_changed)

        logger.info("IkFastStateAdapter: initialized with IKFast tool frame '%s' and base frame '%s'.",
                    tip_frame, base_frame)
        return offsets

    def on_state_changed(self, state: Optional[KinematicState] = None) -> FrameOffsets:
        """
        运动学状态变化后重新计算偏移缓存；运动学状态提供方必须在每次关节状态变化后调用

        :param state: 新的运动学状态，None 表示沿用当前状态对象；
                      传入新对象时监听随之迁移到新对象上
        """
        cache = self._require_cache()
        if state is None or state is self.state:
            return cache.recompute(self.state, self.world_frame, self.tcp_frame)

        # 新状态重算成功后才切换，失败时仍挂在旧状态上
        offsets = cache.recompute(state, self.world_frame, self.tcp_frame)
        self.state.remove_listener(self.on_state_changed)
        self.state = state
        self.state.add_listener(self.on_state_changed)
        return offsets

    def is_valid(self, joints: Sequence[float]) -> bool:
        return self.joint_limits.is_valid(joints)

    def solve_all_ik(self, pose: RigidTransform,
                     seeds: Optional[Sequence[Sequence[float]]] = None) -> List[np.ndarray]:
        """
        枚举目标位姿的所有合法逆解

        :param pose: world 坐标系下的 TCP 目标位姿
        :param seeds: 种子集合；None 表示使用默认种子集合，为空时使用全零种子
        :return: 去重后的解列表，按种子顺序稳定；为空表示无解
        """
        offsets = self._require_cache().offsets
        solver_pose = offsets.to_solver(pose)

        if seeds is None:
            seed_states = self._seed_states
        else:
            seed_states = [self._as_joints(seed, 'seed') for seed in seeds]
        if not seed_states:
            seed_states = [np.zeros(self.dof)]

        joint_poses: List[np.ndarray] = []
        for seed in seed_states:
            try:
                candidates = self.solver.all_solutions_near(solver_pose, seed)
            except SolverCapabilityFailure as e:
                logger.debug("Solver failed for seed %s: %s", seed.tolist(), e)
                continue

            for candidate in candidates:
                candidate = np.asarray(candidate, dtype=np.float64)
                if self.is_valid(candidate) and not is_in_list(candidate, joint_poses, self.tolerance):
                    joint_poses.append(candidate)

        return joint_poses

    def solve_ik(self, pose: RigidTransform, seed: Sequence[float]) -> Optional[np.ndarray]:
        """
        求解与种子最接近的逆解

        :param pose: world 坐标系下的 TCP 目标位姿
        :param seed: 种子关节配置，必须提供
        :return: 与 seed 的 L1 距离最小的解；无解时返回 None
        """
        seed = self._as_joints(seed, 'seed')
        joint_poses = self.solve_all_ik(pose, [seed] + self._seed_states)
        if not joint_poses:
            return None
        return joint_poses[closest_joint_pose(seed, joint_poses)]

    def solve_fk(self, joints: Sequence[float]) -> Optional[RigidTransform]:
        """
        :param joints: 关节配置
        :return: world 坐标系下的 TCP 位姿；关节非法或求解器失败时返回 None
        """
        offsets = self._require_cache().offsets
        if not self.is_valid(joints):
            return None

        try:
            pose = self.solver.forward_kinematics(np.asarray(joints, dtype=np.float64))
        except SolverCapabilityFailure as e:
            logger.debug("Solver FK failed for %s: %s", list(joints), e)
            return None
        if pose is None:
            return None
        return offsets.to_world(pose)

    def _require_cache(self) -> FrameOffsetCache:
        if self._cache is None:
            raise ConfigurationError("IkFastStateAdapter used before a successful initialize()")
        return self._cache

    def _as_joints(self, joints: Sequence[float], what: str) -> np.ndarray:
        joints = np.asarray(joints, dtype=np.float64)
        if joints.shape != (self.dof,):
            raise ValueError(f"Expected {what} of length {self.dof}, got shape {joints.shape}")
        return joints
