"""
刚体变换 (Pose Algebra)
旋转 + 平移，支持复合与求逆
"""
import numpy as np
from scipy.spatial.transform import Rotation as R
from typing import Optional, Tuple, Union

from ..utils import wxyz_to_xyzw, xyzw_to_wxyz

# 旋转矩阵正交性/行列式检查的容差
ROTATION_TOLERANCE = 1e-6


class RigidTransform:
    """
    三维刚体变换，不可变值类型。

    复合使用 ``a @ b``，语义与 4x4 齐次矩阵相乘一致：
    若 a 为 A->B 的位姿，b 为 B->C 的位姿，则 a @ b 为 A->C 的位姿。
    """

    __slots__ = ('_rotation', '_translation')

    def __init__(self, rotation: Optional[R] = None, translation: Optional[np.ndarray] = None):
        """
        :param rotation: scipy Rotation，None 表示无旋转
        :param translation: 平移 (Vec3)，None 表示零平移
        """
        self._rotation = rotation if rotation is not None else R.identity()
        if translation is None:
            translation = np.zeros(3)
        translation = np.array(translation, dtype=np.float64)
        if translation.shape != (3,):
            raise ValueError(f"Translation must be a 3-element vector, got shape {translation.shape}")
        self._translation = translation

    @classmethod
    def identity(cls) -> 'RigidTransform':
        return cls()

    @classmethod
    def from_matrix(cls, matrix: Union[np.ndarray, list]) -> 'RigidTransform':
        """
        从 4x4 齐次矩阵构建，旋转块必须是行列式为 +1 的正交矩阵

        :param matrix: 4x4 齐次变换矩阵
        :return: RigidTransform
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Transform matrix must be 4x4, got shape {matrix.shape}")
        if not np.allclose(matrix[3], [0.0, 0.0, 0.0, 1.0], atol=ROTATION_TOLERANCE):
            raise ValueError(f"Bottom row of a rigid transform must be [0, 0, 0, 1], got {matrix[3]}")

        rot = matrix[:3, :3]
        if not np.allclose(rot @ rot.T, np.identity(3), atol=ROTATION_TOLERANCE):
            raise ValueError("Rotation block is not orthonormal")
        if abs(np.linalg.det(rot) - 1.0) > ROTATION_TOLERANCE:
            raise ValueError(f"Rotation block determinant must be +1, got {np.linalg.det(rot)}")

        return cls(R.from_matrix(rot), matrix[:3, 3])

    @classmethod
    def from_pos_quat(cls, position, quaternion) -> 'RigidTransform':
        """
        :param position: 位置 [x, y, z]
        :param quaternion: 四元数 [w, x, y, z]
        """
        quaternion = np.asarray(quaternion, dtype=np.float64)
        if np.linalg.norm(quaternion) < 1e-10:
            raise ValueError(f"Quaternion norm too small: {quaternion}")
        return cls(R.from_quat(wxyz_to_xyzw(quaternion)), position)

    @classmethod
    def from_pos_euler(cls, position, euler, degrees: bool = False) -> 'RigidTransform':
        """内旋 XYZ 欧拉角"""
        return cls(R.from_euler('XYZ', euler, degrees=degrees), position)

    @property
    def rotation(self) -> R:
        return self._rotation

    @property
    def translation(self) -> np.ndarray:
        """返回副本，修改返回值不影响变换本身"""
        return self._translation.copy()

    def as_matrix(self) -> np.ndarray:
        matrix = np.identity(4, dtype=np.float64)
        matrix[:3, :3] = self._rotation.as_matrix()
        matrix[:3, 3] = self._translation
        return matrix

    def as_pos_quat(self) -> Tuple[np.ndarray, np.ndarray]:
        """:return: (位置, 四元数 [w, x, y, z])"""
        return self._translation.copy(), xyzw_to_wxyz(self._rotation.as_quat())

    def inverse(self) -> 'RigidTransform':
        rot_inv = self._rotation.inv()
        return RigidTransform(rot_inv, -rot_inv.apply(self._translation))

    def __matmul__(self, other: 'RigidTransform') -> 'RigidTransform':
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return RigidTransform(self._rotation * other._rotation,
                              self._rotation.apply(other._translation) + self._translation)

    def transform_point(self, point) -> np.ndarray:
        return self._rotation.apply(np.asarray(point, dtype=np.float64)) + self._translation

    def is_close(self, other: 'RigidTransform',
                 position_tolerance: float = 1e-4,
                 angle_tolerance: float = 1e-4) -> bool:
        """
        位置差的模长与相对旋转角均在容差内时认为相等

        :param position_tolerance: 位置容差（米）
        :param angle_tolerance: 角度容差（弧度）
        """
        position_error = np.linalg.norm(self._translation - other._translation)
        angle_error = (self._rotation.inv() * other._rotation).magnitude()
        return bool(position_error <= position_tolerance and angle_error <= angle_tolerance)

    def __repr__(self):
        pos, quat = self.as_pos_quat()
        return f"<RigidTransform: pos={pos.tolist()}, quat_wxyz={quat.tolist()}>"
