"""
异常类型

- ConfigurationError: 求解器原生坐标系等配置无法在当前运动学状态中解析，或在初始化成功之前调用 IK/FK
- UnknownFrameError: 运动学状态中不存在所请求的坐标系
- SolverCapabilityFailure: 外部求解器自身报告失败（输入非法、内部错误）

“无解”和“关节配置非法”不是异常，分别以空列表和 None 返回。
"""


class ConfigurationError(Exception):
    """坐标系配置错误，适配器在修正之前不可用"""


class UnknownFrameError(KeyError):
    """运动学状态中找不到指定坐标系"""

    def __init__(self, frame: str):
        super().__init__(frame)
        self.frame = frame

    def __str__(self):
        return f"Unknown frame '{self.frame}'"


class SolverCapabilityFailure(RuntimeError):
    """外部求解器报告失败"""
