import pytest

from ikfast_adapter import ConfigurationError, RigidTransform
from ikfast_adapter.solver import FrameOffsetCache


def test_recompute_composes_frames(state, frames):
    cache = FrameOffsetCache('base_link', 'tool0')
    offsets = cache.recompute(state, 'world', 'tcp')

    expected_tool_to_tip = frames['tcp'].inverse() @ frames['tool0']
    expected_world_to_base = frames['world'].inverse() @ frames['base_link']
    assert offsets.tool_to_tip.is_close(expected_tool_to_tip, 1e-12, 1e-12)
    assert offsets.world_to_base.is_close(expected_world_to_base, 1e-12, 1e-12)
    assert offsets.base_frame == 'base_link'
    assert offsets.tip_frame == 'tool0'
    assert cache.is_valid


def test_inverses_are_derived(state):
    offsets = FrameOffsetCache('base_link', 'tool0').recompute(state, 'world', 'tcp')
    assert (offsets.world_to_base @ offsets.world_to_base_inv).is_close(RigidTransform.identity(), 1e-12, 1e-12)
    assert (offsets.tool_to_tip @ offsets.tool_to_tip_inv).is_close(RigidTransform.identity(), 1e-12, 1e-12)


def test_to_solver_and_back(state):
    offsets = FrameOffsetCache('base_link', 'tool0').recompute(state, 'world', 'tcp')
    pose = RigidTransform.from_pos_euler([0.3, -0.1, 0.6], [0.2, 0.1, -0.4])
    assert offsets.to_world(offsets.to_solver(pose)).is_close(pose, 1e-12, 1e-12)


def test_tcp_pose_maps_to_tip_pose_in_base(state, frames):
    # TCP 在 world 下的位姿，换算后应等于 tool0 在 base_link 下的位姿
    offsets = FrameOffsetCache('base_link', 'tool0').recompute(state, 'world', 'tcp')
    tcp_in_world = frames['world'].inverse() @ frames['tcp']
    tip_in_base = frames['base_link'].inverse() @ frames['tool0']
    assert offsets.to_solver(tcp_in_world).is_close(tip_in_base, 1e-12, 1e-12)


def test_offsets_before_recompute_raise():
    cache = FrameOffsetCache('base_link', 'tool0')
    assert not cache.is_valid
    with pytest.raises(ConfigurationError):
        cache.offsets


@pytest.mark.parametrize('base_frame, tip_frame', [('base_lnk', 'tool0'), ('base_link', 'tool9')])
def test_unknown_solver_frame_keeps_cache(state, base_frame, tip_frame):
    cache = FrameOffsetCache('base_link', 'tool0')
    good = cache.recompute(state, 'world', 'tcp')

    cache.base_frame = base_frame
    cache.tip_frame = tip_frame
    with pytest.raises(ConfigurationError):
        cache.recompute(state, 'world', 'tcp')
    assert cache.offsets is good


def test_unknown_client_frame(state):
    with pytest.raises(ConfigurationError):
        FrameOffsetCache('base_link', 'tool0').recompute(state, 'map', 'tcp')


def test_invalidate(state):
    cache = FrameOffsetCache('base_link', 'tool0')
    cache.recompute(state, 'world', 'tcp')
    cache.invalidate()
    with pytest.raises(ConfigurationError):
        cache.offsets
