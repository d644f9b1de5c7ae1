"""
适配器配置

求解器原生坐标系可以按运动组单独配置；未配置时使用默认值并记录警告。
"""
import json
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .solver.solution_filter import DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)

DEFAULT_BASE_FRAME = "base_link"
DEFAULT_TIP_FRAME = "tool0"


@dataclass
class AdapterConfig:
    """
    :param base_frame: 求解器原生基座坐标系，None 表示使用 DEFAULT_BASE_FRAME
    :param tip_frame: 求解器原生末端坐标系，None 表示使用 DEFAULT_TIP_FRAME
    :param tolerance: 去重与限位检查的绝对容差
    :param seed_states: 默认种子集合
    """
    base_frame: Optional[str] = None
    tip_frame: Optional[str] = None
    tolerance: float = DEFAULT_TOLERANCE
    seed_states: List[np.ndarray] = field(default_factory=list)

    def __post_init__(self):
        if self.tolerance <= 0.0:
            raise ValueError(f"Tolerance must be positive, got {self.tolerance}")
        self.seed_states = [np.asarray(seed, dtype=np.float64) for seed in self.seed_states]

    def resolved_base_frame(self) -> str:
        if not self.base_frame:
            logger.warning("ikfast_base_frame not defined, using default '%s'", DEFAULT_BASE_FRAME)
            return DEFAULT_BASE_FRAME
        return self.base_frame

    def resolved_tip_frame(self) -> str:
        if not self.tip_frame:
            logger.warning("ikfast_tool_frame not defined, using default '%s'", DEFAULT_TIP_FRAME)
            return DEFAULT_TIP_FRAME
        return self.tip_frame

    @classmethod
    def from_dict(cls, data: Dict[str, Any], group_name: Optional[str] = None) -> 'AdapterConfig':
        """
        :param data: 配置字典，键为 ikfast_base_frame / ikfast_tool_frame / tolerance / seed_states
        :param group_name: 运动组名称；data 中存在同名子字典时使用该子字典
        """
        if group_name is not None and isinstance(data.get(group_name), dict):
            data = data[group_name]
        return cls(
            base_frame=data.get('ikfast_base_frame'),
            tip_frame=data.get('ikfast_tool_frame'),
            tolerance=float(data.get('tolerance', DEFAULT_TOLERANCE)),
            seed_states=data.get('seed_states', []) or []
        )


def load_config(json_path: str, group_name: Optional[str] = None) -> AdapterConfig:
    """从 JSON 文件加载适配器配置"""
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return AdapterConfig.from_dict(data, group_name)
