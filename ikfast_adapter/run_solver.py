"""
批量求解入口：读取 config.json，对 targets.json 中的每个目标位姿枚举所有逆解并导出
"""
import json
import logging
import os
import sys
import time
from typing import Dict, List, Optional

from .adapter import IkFastStateAdapter
from .config import AdapterConfig
from .data_io import load_skeleton, load_targets, euler_to_transform, export_results
from .errors import ConfigurationError
from .model.joint_tree import JointTreeState
from .model.transform import RigidTransform
from .solver.solve_ik import DlsKinematicsSolver


def _resolve(path: Optional[str], base_dir: str) -> Optional[str]:
    if path is None or os.path.isabs(path):
        return path
    return os.path.join(base_dir, path)


def build_adapter(skeleton_path: str, adapter_config: AdapterConfig,
                  world_frame: str, tcp_frame: str,
                  solver_params: Optional[Dict] = None) -> IkFastStateAdapter:
    """
    由同一份骨架分别构建运动学状态与求解器私有关节树，并初始化适配器

    :raises ConfigurationError: 坐标系无法解析
    """
    root, joint_map = load_skeleton(skeleton_path)
    state = JointTreeState(root, joint_map)

    base_frame = adapter_config.resolved_base_frame()
    tip_frame = adapter_config.resolved_tip_frame()
    for frame in (base_frame, tip_frame):
        if not state.is_frame_known(frame):
            raise ConfigurationError(f"Cannot find transformation to frame '{frame}'")

    solver_root, solver_map = load_skeleton(skeleton_path)
    solver = DlsKinematicsSolver(solver_root, base_frame, tip_frame, solver_map, **(solver_params or {}))

    limits = state.chain_limits(base_frame, tip_frame, adapter_config.tolerance)
    config = AdapterConfig(base_frame, tip_frame, adapter_config.tolerance, adapter_config.seed_states)
    adapter = IkFastStateAdapter(state, solver, limits, config)
    adapter.initialize(world_frame, tcp_frame)
    return adapter


def run_solver(config_path="config.json") -> Optional[List[Dict]]:
    # 1. 加载配置
    if not os.path.exists(config_path):
        print(f"❌ 找不到配置文件: {config_path}")
        return None

    with open(config_path, 'r', encoding='utf-8') as f:
        config = json.load(f)

    print("----------- IKFast Adapter Headless -----------")
    print(f"配置加载: {config_path}")

    base_dir = os.path.dirname(os.path.abspath(config_path))
    skeleton_path = _resolve(config.get('skeleton_path'), base_dir)
    targets_path = _resolve(config.get('targets_path'), base_dir)
    output_path = _resolve(config.get('output_path', 'results.json'), base_dir)
    world_frame = config.get('world_frame', 'world')
    tcp_frame = config.get('tcp_frame', 'tool0')

    adapter_config = AdapterConfig.from_dict(config, config.get('group_name'))

    # 求解器参数
    solver_params = {
        'max_iterations': config.get('max_iterations', 100),
        'position_tolerance': config.get('position_tolerance', 1e-5),
        'orientation_tolerance': config.get('orientation_tolerance', 1e-5),
        'damping': config.get('damping', 0.0001),
        'enable_line_search': config.get('enable_line_search', True),
    }

    # 2. 加载骨架并初始化适配器
    print(f"正在加载骨架: {skeleton_path} ...")
    try:
        adapter = build_adapter(skeleton_path, adapter_config, world_frame, tcp_frame, solver_params)
    except (OSError, ValueError, KeyError, ConfigurationError) as e:
        print(f"❌ 适配器初始化失败: {e}")
        return None
    print(f"运动链自由度: {adapter.dof}")

    # 3. 加载目标位姿
    print(f"正在加载目标位姿: {targets_path} ...")
    try:
        targets = load_targets(targets_path)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ 目标位姿加载失败: {e}")
        return None
    print(f"目标加载成功，共 {len(targets)} 个")

    # 4. 开始求解
    results = []
    start_time = time.time()
    for i, target in enumerate(targets):
        sys.stdout.write(f"\r进度: {i + 1}/{len(targets)}")
        sys.stdout.flush()

        pose = RigidTransform.from_matrix(euler_to_transform(target['pos'], target['euler']))
        results.append({'frame': target['frame'], 'solutions': adapter.solve_all_ik(pose)})
    print()

    solved = sum(1 for item in results if item['solutions'])
    print(f"求解完成，耗时: {time.time() - start_time:.2f} 秒，{solved}/{len(results)} 个目标有解")

    # 5. 导出结果
    print(f"正在导出到: {output_path} ...")
    export_results(results, output_path)
    print("✅ 任务完成！")
    return results


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if len(sys.argv) > 1:
        result = run_solver(sys.argv[1])
    else:
        result = run_solver()
    sys.exit(0 if result is not None else 1)


if __name__ == "__main__":
    main()
