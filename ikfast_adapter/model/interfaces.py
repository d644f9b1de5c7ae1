"""
协作方接口

适配器不依赖任何具体的宿主框架，运动学状态与外部求解器都通过以下抽象类注入。

线程模型：所有调用均为同步阻塞调用。同一个求解器句柄只保证可被顺序重复调用，
需要并行求解时每个线程应持有独立的求解器实例。
"""
import numpy as np
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .transform import RigidTransform


class KinematicState(ABC):
    """
    运动学状态提供方：维护当前关节状态下的坐标系图
    """

    @abstractmethod
    def transform_of(self, frame: str) -> RigidTransform:
        """
        返回坐标系在模型根坐标系下的位姿

        :param frame: 坐标系名称
        :raises UnknownFrameError: 坐标系不存在
        """
        pass

    @abstractmethod
    def is_frame_known(self, frame: str) -> bool:
        pass

    @abstractmethod
    def add_listener(self, callback: Callable[['KinematicState'], None]):
        """注册状态变化回调；关节状态改变后以状态对象自身为参数调用"""
        pass

    @abstractmethod
    def remove_listener(self, callback: Callable[['KinematicState'], None]):
        pass


class KinematicsSolver(ABC):
    """
    外部解析求解器：只理解自己的基座坐标系与末端坐标系
    """

    @property
    @abstractmethod
    def tip_frame(self) -> str:
        """求解器原生末端坐标系名称"""
        pass

    @abstractmethod
    def all_solutions_near(self, pose: RigidTransform, seed: Sequence[float]) -> List[np.ndarray]:
        """
        求解目标位姿在种子附近的所有关节解

        :param pose: 末端在求解器基座坐标系下的目标位姿
        :param seed: 种子关节配置
        :return: 关节解列表，可以为空
        :raises SolverCapabilityFailure: 求解器内部错误
        """
        pass

    @abstractmethod
    def forward_kinematics(self, joints: Sequence[float]) -> Optional[RigidTransform]:
        """
        :param joints: 关节配置
        :return: 末端在求解器基座坐标系下的位姿；失败时返回 None
        :raises SolverCapabilityFailure: 求解器内部错误
        """
        pass
