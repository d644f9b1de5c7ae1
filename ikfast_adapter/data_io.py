"""
数据交换功能实现：骨架、目标位姿与求解结果的 JSON 读写
"""
import json
import os
import numpy as np
from typing import Dict, List, Tuple
from scipy.spatial.transform import Rotation as R
from .model.joint import JointNode, RevoluteJoint, PrismaticJoint, FixedJoint


def load_skeleton(json_path: str) -> Tuple[JointNode, Dict[str, JointNode]]:
    """
    从skeleton.json加载运动学描述，构建关节树
    
    :param json_path: skeleton.json文件路径
    :return: (root节点, 关节名称到节点的映射字典)
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    
    root_name = data['root_name']
    joints_data = data['joints']
    
    joint_map: Dict[str, JointNode] = {}
    
    for joint_data in joints_data:
        name = joint_data['name']
        joint_type = joint_data['type']
        offset = np.array(joint_data.get('offset', [0.0, 0.0, 0.0]), dtype=np.float64)
        if name in joint_map:
            raise ValueError(f"Duplicate joint name: {name}")
        
        if joint_type == 'fixed':
            quat = None
            if joint_data.get('quaternion') is not None:
                quat = np.array(joint_data['quaternion'], dtype=np.float64)
            joint = FixedJoint(name, offset, quat)
        elif joint_type in ('revolute', 'prismatic'):
            axis = np.array(joint_data['axis'], dtype=np.float64)
            limits = None
            if joint_data.get('limits') is not None:
                limits = tuple(joint_data['limits'])
            joint_cls = RevoluteJoint if joint_type == 'revolute' else PrismaticJoint
            joint = joint_cls(name, offset, axis, limits)
        else:
            raise ValueError(f"Unknown joint type: {joint_type}")
        
        joint_map[name] = joint
    
    # 建立父子关系
    for joint_data in joints_data:
        name = joint_data['name']
        parent_name = joint_data.get('parent')
        
        if parent_name is not None:
            if parent_name not in joint_map:
                raise ValueError(f"Parent '{parent_name}' not found for joint '{name}'")
            joint_map[parent_name].add_child(joint_map[name])
    
    if root_name not in joint_map:
        raise ValueError(f"Root node '{root_name}' not found")
    root = joint_map[root_name]
    
    initialize_zero_pose(root)
    
    return root, joint_map


def initialize_zero_pose(root: JointNode):
    """所有可动关节置零并刷新变换"""
    for node in root.iter_subtree():
        if node.get_dof() > 0:
            node.q = 0.0
    root.update_global_transform()


def load_targets(json_path: str) -> List[Dict]:
    """
    从targets.json加载目标位姿
    
    :param json_path: targets.json文件路径
    :return: 目标列表，每个元素为 {"frame": int, "pos": [x,y,z], "euler": [x,y,z]}，按 frame 排序
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    
    targets = []
    for item in data:
        targets.append({
            'frame': int(item['frame']),
            'pos': np.array(item['pos'], dtype=np.float64),
            'euler': np.array(item.get('euler', [0.0, 0.0, 0.0]), dtype=np.float64)  # 度
        })
    
    targets.sort(key=lambda t: t['frame'])
    return targets


def euler_to_transform(pos: np.ndarray, euler_deg: np.ndarray) -> np.ndarray:
    """
    将位置和欧拉角（度，内旋XYZ顺序）转换为4x4变换矩阵
    
    :param pos: 位置 [x, y, z]（米）
    :param euler_deg: 欧拉角 [x, y, z]（度，XYZ顺序）
    :return: 4x4变换矩阵
    """
    transform = np.identity(4, dtype=np.float64)
    transform[:3, :3] = R.from_euler('XYZ', euler_deg, degrees=True).as_matrix()
    transform[:3, 3] = pos
    return transform


def export_results(results: List[Dict], output_path: str):
    """
    导出求解结果 JSON

    :param results: 每个元素为 {"frame": int, "solutions": [[q...], ...]}
    :param output_path: 输出文件路径
    """
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

    output = {
        'results': [
            {
                'frame': int(item['frame']),
                'success': len(item['solutions']) > 0,
                'solutions': [[float(v) for v in q] for q in item['solutions']]
            }
            for item in results
        ]
    }
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
