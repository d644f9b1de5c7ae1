"""
关节类层次结构实现
关节树同时充当坐标系图：每个节点的名称即一个坐标系，global_transform 为该坐标系在根坐标系下的位姿
"""
import logging
import numpy as np
from abc import ABC, abstractmethod
from typing_extensions import override
from typing import Optional, Tuple, List

from ..utils import quaternion_to_rotation_matrix

logger = logging.getLogger(__name__)


class JointNode(ABC):
    """
    所有关节类型的抽象基类，定义求解器接口。
    """
    
    def __init__(self, name: str, offset: np.ndarray):
        """
        初始化关节节点
        
        :param name: 关节名称（同时作为坐标系名称）
        :param offset: 相对父级的静态位移 (Vec3)
        """
        self.name = name
        self.parent: Optional['JointNode'] = None
        self.children: List['JointNode'] = []
        self.local_offset: np.ndarray = np.asarray(offset, dtype=np.float64) 
        self.global_transform: np.ndarray = np.identity(4, dtype=np.float64)
    
    def add_child(self, child: 'JointNode'):
        """添加子节点"""
        child.parent = self
        self.children.append(child)
    
    @abstractmethod
    def get_local_matrix(self) -> np.ndarray:
        """
        根据当前内部变量计算局部变换矩阵。
        
        :return: 4x4 局部变换矩阵
        """
        pass
    
    @abstractmethod
    def compute_jacobian_column(self, end_effector_pos: np.ndarray) -> np.ndarray:
        """
        计算并返回该关节对应的雅可比列向量 (6x1)。
        
        :param end_effector_pos: 末端执行器当前在根坐标系中的位置 (3x1 向量)
        :return: 6x1 列向量，前3个元素为线速度贡献，后3个元素为角速度贡献
        """
        pass
    
    @abstractmethod
    def apply_delta(self, delta_q: float):
        """
        接收求解器增量，更新内部变量，执行约束检查。
        
        :param delta_q: 关节变量的增量（弧度或米）
        """
        pass
    
    @abstractmethod
    def get_dof(self) -> int:
        """
        返回自由度数量 (0 或 1)。
        """
        pass
    
    def update_global_transform(self):
        """
        递归更新此关节及其所有子关节的 global_transform。
        """
        local_transform = self.get_local_matrix()
        
        if self.parent is None:
            self.global_transform = local_transform
        else:
            # global = parent_global @ local
            self.global_transform = self.parent.global_transform @ local_transform
        
        for child in self.children:
            child.update_global_transform()
    
    def iter_subtree(self):
        """深度优先遍历以本节点为根的子树"""
        yield self
        for child in self.children:
            yield from child.iter_subtree()
    
    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.name}>"


class _SingleAxisJoint(JointNode):
    """单轴 1 自由度关节的公共部分：轴、关节变量、约束"""

    def __init__(self, name: str, offset: np.ndarray, axis: np.ndarray,
                 limits: Optional[Tuple[float, float]] = None):
        super().__init__(name, offset)
        self.axis = np.asarray(axis, dtype=np.float64)
        axis_norm = np.linalg.norm(self.axis)
        if axis_norm > 1e-6:
            self.axis = self.axis / axis_norm
        else:
            raise ValueError(f"Axis vector is not a unit vector and too small to be normalized: {self.axis}")
        self.q: float = 0.0
        if limits is not None and limits[0] > limits[1]:
            raise ValueError(f"Invalid limits for joint {name}: {limits}")
        self.limits: Optional[Tuple[float, float]] = limits

    def world_axis(self) -> np.ndarray:
        """关节轴在根坐标系下的方向（单位向量）"""
        z_i = self.global_transform[:3, :3] @ self.axis
        z_i_norm = np.linalg.norm(z_i)
        if z_i_norm > 1e-6:
            return z_i / z_i_norm
        raise ValueError(f"Axis vector is not a unit vector and too small to be normalized: {z_i}")

    def apply_delta(self, delta_q: float):
        """更新关节变量，执行约束检查"""
        self.q += delta_q
        if self.limits is not None:
            min_val, max_val = self.limits
            self.q = float(np.clip(self.q, min_val, max_val))

    def get_dof(self) -> int:
        return 1


class RevoluteJoint(_SingleAxisJoint):
    """
    旋转关节 - 绕固定轴旋转的铰链，q 单位为弧度
    """
    
    def get_local_matrix(self) -> np.ndarray:
        """生成绕 axis 旋转 q 的矩阵，平移为 local_offset"""
        local_transform = np.identity(4, dtype=np.float64)

        # 先计算四元数 [w, x, y, z]，然后通过四元数得到R_mat
        half_theta = self.q / 2.0
        xyz = self.axis * np.sin(half_theta)
        quat = np.array([np.cos(half_theta), xyz[0], xyz[1], xyz[2]])

        local_transform[:3, :3] = quaternion_to_rotation_matrix(quat)
        local_transform[:3, 3] = self.local_offset
        return local_transform
    
    def compute_jacobian_column(self, end_effector_pos: np.ndarray) -> np.ndarray:
        """
        计算雅可比列向量: J_i = [z_i cross (p_end - p_i), z_i]^T
        所有变量必须处于根坐标系下
        """
        z_i = self.world_axis()
        p_i = self.global_transform[:3, 3]
        
        # 线速度贡献: z_i cross (p_end - p_i)；角速度贡献: z_i
        J_v = np.cross(z_i, end_effector_pos - p_i)
        return np.concatenate([J_v, z_i])


class PrismaticJoint(_SingleAxisJoint):
    """
    移动关节 - 沿固定轴滑动的滑块，q 单位为米
    """
    
    def get_local_matrix(self) -> np.ndarray:
        """生成沿 axis 平移 q 的矩阵: T = [I | offset + q * axis]"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, 3] = self.local_offset + self.q * self.axis
        return local_transform
    
    def compute_jacobian_column(self, end_effector_pos: np.ndarray) -> np.ndarray:
        """
        计算雅可比列向量: J_i = [z_i, 0]^T
        """
        # 移动关节不产生旋转
        return np.concatenate([self.world_axis(), np.zeros(3)])


class FixedJoint(JointNode):
    """
    固定关节 - 无变量的结构连接，用于表示固定的偏移(包括位置和姿态)
    例如 base_link、tool0、TCP 等坐标系
    """
    
    def __init__(self, name: str, offset: np.ndarray, quaternion: Optional[np.ndarray] = None):
        """
        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3)
        :param quaternion: 本地旋转（四元数，格式为[w, x, y, z]），None 表示无旋转
        """
        super().__init__(name, offset)
        if quaternion is None:
            self.quaternion = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
        else:
            self.quaternion = np.array(quaternion, dtype=np.float64)
            norm = np.linalg.norm(self.quaternion)
            if norm > 1e-6:
                self.quaternion /= norm
            else:
                raise ValueError(f"Quaternion norm too small: {self.quaternion}")

    @override
    def get_local_matrix(self) -> np.ndarray:
        """先旋转，再平移"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, :3] = quaternion_to_rotation_matrix(self.quaternion)
        local_transform[:3, 3] = self.local_offset
        return local_transform

    @override
    def compute_jacobian_column(self, end_effector_pos: np.ndarray) -> np.ndarray:
        # 返回零向量仍可继续求解，只记录警告
        logger.warning("FixedJoint %s should not take part in the Jacobian; check the IK chain", self.name)
        return np.zeros(6)
    
    @override
    def apply_delta(self, delta_q: float):
        pass

    @override
    def get_dof(self) -> int:
        return 0
