import math
import numpy as np
import pytest

from ikfast_adapter import RigidTransform


def test_compose_matches_matrix_product():
    a = RigidTransform.from_pos_euler([0.1, 0.2, 0.3], [0.4, -0.2, 1.0])
    b = RigidTransform.from_pos_euler([-0.5, 0.0, 0.7], [0.0, 0.3, -0.6])
    np.testing.assert_allclose((a @ b).as_matrix(), a.as_matrix() @ b.as_matrix(), atol=1e-12)


def test_inverse_cancels():
    a = RigidTransform.from_pos_euler([0.1, 0.2, 0.3], [0.4, -0.2, 1.0])
    assert (a @ a.inverse()).is_close(RigidTransform.identity(), 1e-12, 1e-12)
    assert (a.inverse() @ a).is_close(RigidTransform.identity(), 1e-12, 1e-12)


def test_matrix_round_trip():
    matrix = RigidTransform.from_pos_euler([1.0, -2.0, 0.5], [0.0, 0.0, math.pi / 3]).as_matrix()
    np.testing.assert_allclose(RigidTransform.from_matrix(matrix).as_matrix(), matrix, atol=1e-12)


def test_pos_quat_uses_wxyz():
    pose = RigidTransform.from_pos_quat([1.0, 2.0, 3.0], [math.cos(math.pi / 4), 0.0, 0.0, math.sin(math.pi / 4)])
    np.testing.assert_allclose(pose.transform_point([1.0, 0.0, 0.0]), [1.0, 3.0, 3.0], atol=1e-12)
    pos, quat = pose.as_pos_quat()
    np.testing.assert_allclose(pos, [1.0, 2.0, 3.0])
    np.testing.assert_allclose(quat, [math.cos(math.pi / 4), 0.0, 0.0, math.sin(math.pi / 4)], atol=1e-12)


def test_from_matrix_rejects_scaled_rotation():
    matrix = np.identity(4)
    matrix[:3, :3] *= 2.0
    with pytest.raises(ValueError):
        RigidTransform.from_matrix(matrix)


def test_from_matrix_rejects_reflection():
    matrix = np.diag([1.0, 1.0, -1.0, 1.0])
    with pytest.raises(ValueError):
        RigidTransform.from_matrix(matrix)


def test_from_matrix_rejects_bad_shape():
    with pytest.raises(ValueError):
        RigidTransform.from_matrix(np.identity(3))


def test_translation_returns_copy():
    pose = RigidTransform.from_pos_euler([1.0, 2.0, 3.0], [0.0, 0.0, 0.0])
    pose.translation[0] = 5.0
    np.testing.assert_allclose(pose.translation, [1.0, 2.0, 3.0])


def test_compose_and_invert_with_shared_translation():
    # 由另一个变换的平移构造，复合与求逆都不能受存储数组属性影响
    a = RigidTransform.from_pos_euler([0.1, 0.2, 0.3], [0.4, -0.2, 1.0])
    b = RigidTransform(a.rotation, a.translation)
    inv = b.inverse()
    assert (b @ inv).is_close(RigidTransform.identity(), 1e-12, 1e-12)
    np.testing.assert_allclose(b.transform_point([0.0, 0.0, 0.0]), [0.1, 0.2, 0.3], atol=1e-12)


def test_is_close_tolerances():
    a = RigidTransform.identity()
    b = RigidTransform.from_pos_euler([0.0, 0.0, 1e-3], [0.0, 0.0, 0.0])
    assert not a.is_close(b)
    assert a.is_close(b, position_tolerance=1e-2)
    c = RigidTransform.from_pos_euler([0.0, 0.0, 0.0], [0.0, 0.0, 1e-2])
    assert not a.is_close(c)
    assert a.is_close(c, angle_tolerance=2e-2)
