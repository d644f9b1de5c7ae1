import json
import math
import numpy as np
import pytest

from ikfast_adapter import (
    AdapterConfig,
    IkFastStateAdapter,
    JointLimits,
    KinematicState,
    KinematicsSolver,
    RigidTransform,
    UnknownFrameError,
)


def wrap_angle(x):
    return (x + math.pi) % (2.0 * math.pi) - math.pi


class StaticState(KinematicState):
    """固定坐标系表，set_frame 模拟关节状态变化"""

    def __init__(self, frames):
        self.frames = dict(frames)
        self.listeners = []

    def transform_of(self, frame):
        if frame not in self.frames:
            raise UnknownFrameError(frame)
        return self.frames[frame]

    def is_frame_known(self, frame):
        return frame in self.frames

    def add_listener(self, callback):
        if callback not in self.listeners:
            self.listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def set_frame(self, frame, pose):
        self.frames[frame] = pose
        for callback in list(self.listeners):
            callback(self)


class CartesianSolver(KinematicsSolver):
    """
    闭式 6 自由度求解器：q[0:3] 为平移，q[3:6] 为内旋 XYZ 欧拉角。
    每个位姿有两个欧拉角分支，都会返回。
    """

    def __init__(self, tip_frame="tool0"):
        self._tip_frame = tip_frame
        self.seeds = []

    @property
    def tip_frame(self):
        return self._tip_frame

    def all_solutions_near(self, pose, seed):
        self.seeds.append(np.array(seed, dtype=float))
        a, b, c = pose.rotation.as_euler('XYZ')
        pos = list(pose.translation)
        branches = [
            [a, b, c],
            [wrap_angle(a + math.pi), wrap_angle(math.pi - b), wrap_angle(c + math.pi)],
        ]
        return [np.array(pos + branch) for branch in branches]

    def forward_kinematics(self, joints):
        if len(joints) != 6:
            return None
        return RigidTransform.from_pos_euler(joints[:3], joints[3:])


class ScriptedSolver(KinematicsSolver):
    """按调用顺序返回预设候选解；列表项为异常时抛出"""

    def __init__(self, responses, fk_result=None, tip_frame="tool0"):
        self.responses = list(responses)
        self.fk_result = fk_result
        self._tip_frame = tip_frame
        self.poses = []
        self.seeds = []

    @property
    def tip_frame(self):
        return self._tip_frame

    def all_solutions_near(self, pose, seed):
        self.poses.append(pose)
        self.seeds.append(np.array(seed, dtype=float))
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return [np.array(q, dtype=float) for q in response]

    def forward_kinematics(self, joints):
        if isinstance(self.fk_result, Exception):
            raise self.fk_result
        return self.fk_result


CARTESIAN_LIMITS = [None, None, None, (-math.pi, math.pi), (-math.pi, math.pi), (-math.pi, math.pi)]


@pytest.fixture
def frames():
    world = RigidTransform.from_pos_euler([0.0, 0.0, -0.5], [0.0, 0.0, 0.0])
    base = RigidTransform.from_pos_euler([0.1, 0.0, 0.2], [0.0, 0.0, math.pi / 2])
    tool0 = RigidTransform.from_pos_euler([0.4, 0.3, 0.9], [0.3, -0.2, 0.1])
    tcp = tool0 @ RigidTransform.from_pos_euler([0.0, 0.0, 0.12], [math.pi / 2, 0.0, 0.0])
    return {
        'root': RigidTransform.identity(),
        'world': world,
        'base_link': base,
        'tool0': tool0,
        'tcp': tcp,
    }


@pytest.fixture
def state(frames):
    return StaticState(frames)


@pytest.fixture
def cartesian_solver():
    return CartesianSolver()


@pytest.fixture
def adapter(state, cartesian_solver):
    adapter = IkFastStateAdapter(state, cartesian_solver, JointLimits(CARTESIAN_LIMITS),
                                 AdapterConfig(base_frame='base_link', tip_frame='tool0'))
    adapter.initialize('world', 'tcp')
    return adapter


SKELETON = {
    "root_name": "world",
    "joints": [
        {"name": "world", "type": "fixed", "offset": [0.0, 0.0, 0.0]},
        {"name": "base_link", "type": "fixed", "parent": "world", "offset": [0.0, 0.0, 0.1]},
        {"name": "j1", "type": "revolute", "parent": "base_link", "offset": [0.0, 0.0, 0.1],
         "axis": [0, 0, 1], "limits": [-3.1, 3.1]},
        {"name": "j2", "type": "revolute", "parent": "j1", "offset": [0.0, 0.0, 0.2],
         "axis": [0, 1, 0], "limits": [-2.0, 2.0]},
        {"name": "j3", "type": "revolute", "parent": "j2", "offset": [0.0, 0.0, 0.3],
         "axis": [0, 1, 0], "limits": [-2.5, 2.5]},
        {"name": "j4", "type": "revolute", "parent": "j3", "offset": [0.0, 0.0, 0.25],
         "axis": [0, 0, 1], "limits": [-3.1, 3.1]},
        {"name": "j5", "type": "revolute", "parent": "j4", "offset": [0.0, 0.0, 0.0],
         "axis": [0, 1, 0], "limits": [-2.0, 2.0]},
        {"name": "j6", "type": "revolute", "parent": "j5", "offset": [0.0, 0.0, 0.1],
         "axis": [0, 0, 1], "limits": [-3.1, 3.1]},
        {"name": "tool0", "type": "fixed", "parent": "j6", "offset": [0.0, 0.0, 0.05]},
        {"name": "tcp", "type": "fixed", "parent": "tool0", "offset": [0.0, 0.0, 0.1],
         "quaternion": [0.7071067811865476, 0.7071067811865476, 0.0, 0.0]}
    ]
}

# 远离奇异位形的关节配置
ARM_Q = [0.2, 0.4, 0.6, 0.3, 0.5, 0.1]


@pytest.fixture
def skeleton_path(tmp_path):
    path = tmp_path / "skeleton.json"
    path.write_text(json.dumps(SKELETON), encoding='utf-8')
    return str(path)
