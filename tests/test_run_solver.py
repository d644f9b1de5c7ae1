import json

from ikfast_adapter import JointTreeState
from ikfast_adapter.data_io import load_skeleton
from ikfast_adapter.run_solver import run_solver


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


def test_run_solver_exports_results(tmp_path, skeleton_path):
    root, joint_map = load_skeleton(skeleton_path)
    tcp = JointTreeState(root, joint_map).transform_of('tcp')

    write_json(tmp_path / "targets.json", [
        {"frame": 2, "pos": [5.0, 5.0, 5.0], "euler": [0.0, 0.0, 0.0]},
        {"frame": 1, "pos": tcp.translation.tolist(),
         "euler": tcp.rotation.as_euler('XYZ', degrees=True).tolist()},
    ])
    config_path = write_json(tmp_path / "config.json", {
        "skeleton_path": skeleton_path,
        "targets_path": "targets.json",
        "output_path": "out/results.json",
        "world_frame": "world",
        "tcp_frame": "tcp",
        "group_name": "arm",
        "arm": {"ikfast_base_frame": "base_link", "ikfast_tool_frame": "tool0"},
        "max_iterations": 20
    })

    results = run_solver(config_path)
    assert [item['frame'] for item in results] == [1, 2]
    assert len(results[0]['solutions']) == 1
    assert results[1]['solutions'] == []

    output = json.loads((tmp_path / "out" / "results.json").read_text(encoding='utf-8'))
    assert [item['success'] for item in output['results']] == [True, False]
    assert len(output['results'][0]['solutions'][0]) == 6


def test_run_solver_missing_config(tmp_path):
    assert run_solver(str(tmp_path / "missing.json")) is None


def test_run_solver_bad_frame(tmp_path, skeleton_path):
    config_path = write_json(tmp_path / "config.json", {
        "skeleton_path": skeleton_path,
        "targets_path": "targets.json",
        "ikfast_base_frame": "base_lnk",
        "ikfast_tool_frame": "tool0",
        "tcp_frame": "tcp"
    })
    assert run_solver(config_path) is None
