"""
数值 IK 核心算法：IK 链构建、雅可比矩阵、位姿误差
"""
import numpy as np
from scipy.spatial.transform import Rotation as R
from typing import List
from ..model.joint import JointNode


def build_ik_chain(root: JointNode, effector: JointNode) -> List[JointNode]:
    """
    构建IK Chain：从链的基座节点(root)到末端节点(effector)路径上的所有可动关节的有序列表。
    root 不一定是全局树的根节点，可以用来定义短链。
    root 本身的坐标系被视为链的基座坐标系，因此不加入链；FixedJoint 同样被跳过。
    
    :param root: 这条IK链的基座节点
    :param effector: 末端节点
    :return: IK Chain列表，仅包含1-DoF节点（RevoluteJoint或PrismaticJoint）
    """
    # 路径查找：从effector开始向上搜索直到root
    path: List[JointNode] = []
    current = effector
    while current is not None:
        path.append(current)
        if current is root:
            break
        current = current.parent
    
    if path[-1] is not root:
        raise ValueError(f"Cannot find path from {root.name} to {effector.name}")
    
    # 反转路径，使其从root到effector的顺序，并去掉root本身
    path.reverse()
    return [node for node in path[1:] if node.get_dof() > 0]


def compute_jacobian(ik_chain: List[JointNode], end_effector_pos: np.ndarray) -> np.ndarray:
    """
    构建雅可比矩阵 J (6xN)
    
    :param ik_chain: IK Chain（仅包含1-DoF节点）
    :param end_effector_pos: 末端执行器当前在根坐标系中的位置（3x1向量）
    :return: 6xN 雅可比矩阵
    """
    jacobian = np.zeros((6, len(ik_chain)), dtype=np.float64)
    
    for col_idx, node in enumerate(ik_chain):
        if node.get_dof() != 1:
            raise ValueError(f"Unexpected DoF: {node.get_dof()} for node {node.name}")
        jacobian[:, col_idx] = node.compute_jacobian_column(end_effector_pos)
    
    return jacobian


def compute_error_vector(current_transform: np.ndarray, 
                        target_transform: np.ndarray) -> np.ndarray:
    """
    计算当前末端姿态和目标姿态之间的 6x1 误差向量 (delta_x)
    
    :param current_transform: 末端执行器当前的 4x4 变换矩阵
    :param target_transform: 目标 4x4 变换矩阵（与 current_transform 同一坐标系）
    :return: 6x1 的误差向量 [delta_p (3x1), delta_r (3x1)]
    """
    # 位置误差 (delta_p)
    delta_p = target_transform[:3, 3] - current_transform[:3, 3]
    
    # 姿态误差 (delta_r): R_error = R_target * R_current^(-1)，转换为轴-角向量
    R_error_mat = target_transform[:3, :3] @ current_transform[:3, :3].T
    delta_r = R.from_matrix(R_error_mat).as_rotvec()
    
    return np.concatenate([delta_p, delta_r])
