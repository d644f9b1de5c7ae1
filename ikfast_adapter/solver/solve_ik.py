"""
参考求解器实现
使用阻尼最小二乘法 (Damped Least Squares, DLS) 在自己持有的关节树上迭代求解
"""
import logging
import numpy as np
from typing import Dict, List, Optional, Sequence
from typing_extensions import override

from ..errors import SolverCapabilityFailure
from ..model.interfaces import KinematicsSolver
from ..model.joint import JointNode
from ..model.transform import RigidTransform
from .ik_core import (
    build_ik_chain, 
    compute_jacobian, 
    compute_error_vector
)

logger = logging.getLogger(__name__)


def solve_dls(
    root: JointNode,
    effector: JointNode,
    target_transform: np.ndarray,
    ik_chain: List[JointNode],
    max_iterations: int = 100,
    position_tolerance: float = 1e-3,
    orientation_tolerance: float = 1e-1,
    damping: float = 0.0001,
    enable_line_search: bool = True,
    line_search_alpha: float = 1.0,  
    line_search_alpha_min: float = 1e-2
) -> bool:
    """
    使用阻尼最小二乘法 (DLS) 从链的当前状态出发求解IK

    :param root: 关节树的根节点（用于刷新全树变换）
    :param effector: 末端节点
    :param target_transform: 目标变换矩阵（4x4，根坐标系下）
    :param ik_chain: 从基座到末端顺序的IK链
    :param max_iterations: 最大迭代次数
    :param position_tolerance: 位置收敛容差（单位：米）
    :param orientation_tolerance: 姿态收敛容差（单位：弧度）
    :param damping: 阻尼系数λ
    :param enable_line_search: 是否启用线搜索
    :param line_search_alpha: 线搜索初始步长
    :param line_search_alpha_min: 线搜索最小步长；若步长小于该值仍无法改进，则停止迭代
    :return: True表示成功收敛，False表示失败（关节状态回滚到迭代中的最优状态）
    """
    identity_6x6 = np.identity(6, dtype=np.float64)
    root.update_global_transform()

    def restore(states):
        for node, q in zip(ik_chain, states):
            node.q = q
        root.update_global_transform()

    for iteration in range(max(max_iterations, 1)):
        # 线搜索启用时每轮迭代保证误差减小，故而这里保存的就是当前最优状态
        best_states = [node.q for node in ik_chain]

        delta_x = compute_error_vector(effector.global_transform, target_transform)
        current_error_norm = np.linalg.norm(delta_x)

        # 收敛检查
        if np.linalg.norm(delta_x[:3]) < position_tolerance and np.linalg.norm(delta_x[3:]) < orientation_tolerance:
            return True

        J = compute_jacobian(ik_chain, effector.global_transform[:3, 3])

        # A = J * J^T + λ * I,  A * β = ΔX
        A = J @ J.T + damping * identity_6x6
        try:
            beta = np.linalg.solve(A, delta_x)
        except np.linalg.LinAlgError:
            # 矩阵奇异或接近奇异，使用最小二乘求解
            try:
                beta = np.linalg.lstsq(A, delta_x, rcond=None)[0]
            except np.linalg.LinAlgError:
                restore(best_states)
                return False

        # Δq = J.T * β
        delta_q = J.T @ beta

        if enable_line_search:
            alpha = line_search_alpha
            while True:
                # 回滚到探测起点后应用测试增量
                for i, node in enumerate(ik_chain):
                    node.q = best_states[i]
                    node.apply_delta(alpha * delta_q[i])
                root.update_global_transform()

                new_delta_x = compute_error_vector(effector.global_transform, target_transform)
                if np.linalg.norm(new_delta_x) < current_error_norm:
                    break

                alpha = alpha / 2.0
                if alpha < line_search_alpha_min:
                    # 很小的步长也无法改进：目标不可达或已陷入局部最优
                    restore(best_states)
                    return False
        else:
            # 奇异附近 delta_q 可能很大，限制最大步长为1.0
            delta_q_norm = np.linalg.norm(delta_q)
            if delta_q_norm > 1.0:
                delta_q = delta_q / delta_q_norm

            for i, node in enumerate(ik_chain):
                node.apply_delta(delta_q[i])
            root.update_global_transform()

    return False


class DlsKinematicsSolver(KinematicsSolver):
    """
    基于关节树的数值求解器，实现外部求解器接口。

    每个种子最多返回一个收敛解，因此需要多个种子才能覆盖不同的解分支。
    求解器持有并修改自己的关节树，不能与运动学状态共用同一棵树。
    """

    def __init__(self, root: JointNode, base_frame: str, tip_frame: str,
                 joint_map: Optional[Dict[str, JointNode]] = None,
                 max_iterations: int = 100,
                 position_tolerance: float = 1e-5,
                 orientation_tolerance: float = 1e-5,
                 damping: float = 0.0001,
                 enable_line_search: bool = True):
        """
        :param root: 求解器私有关节树的根节点
        :param base_frame: 求解器原生基座坐标系
        :param tip_frame: 求解器原生末端坐标系
        :param joint_map: 关节名称到节点的映射，None 时从 root 遍历生成
        """
        if joint_map is None:
            joint_map = {node.name: node for node in root.iter_subtree()}
        for frame in (base_frame, tip_frame):
            if frame not in joint_map:
                raise ValueError(f"Frame '{frame}' not found in solver joint tree")

        self.root = root
        self.base = joint_map[base_frame]
        self.tip = joint_map[tip_frame]
        self.ik_chain = build_ik_chain(self.base, self.tip)
        self.params = {
            'max_iterations': max_iterations,
            'position_tolerance': position_tolerance,
            'orientation_tolerance': orientation_tolerance,
            'damping': damping,
            'enable_line_search': enable_line_search,
        }
        self.root.update_global_transform()

    @property
    def dof(self) -> int:
        return len(self.ik_chain)

    @property
    @override
    def tip_frame(self) -> str:
        return self.tip.name

    @property
    def base_frame(self) -> str:
        return self.base.name

    @override
    def all_solutions_near(self, pose: RigidTransform, seed: Sequence[float]) -> List[np.ndarray]:
        if len(seed) != self.dof:
            raise SolverCapabilityFailure(f"Expected seed of length {self.dof}, got {len(seed)}")

        self._set_positions(seed)
        target_transform = self.base.global_transform @ pose.as_matrix()
        if not solve_dls(self.root, self.tip, target_transform, self.ik_chain, **self.params):
            logger.debug("DLS did not converge from seed %s", list(seed))
            return []
        return [np.array([node.q for node in self.ik_chain], dtype=np.float64)]

    @override
    def forward_kinematics(self, joints: Sequence[float]) -> Optional[RigidTransform]:
        if len(joints) != self.dof:
            logger.debug("FK called with %d joint values, chain has %d", len(joints), self.dof)
            return None

        self._set_positions(joints)
        return RigidTransform.from_matrix(np.linalg.inv(self.base.global_transform) @ self.tip.global_transform)

    def _set_positions(self, joints: Sequence[float]):
        for node, q in zip(self.ik_chain, joints):
            node.q = float(q)
        self.root.update_global_transform()
