#!/usr/bin/env python3
"""
Animator and scene adapters: completion happens exactly once, frame-driven
progress follows the easing curve.
"""

import math

import numpy as np

from cubesim import FrameAnimator, InstantAnimator, MemoryScene, RotationRequest, ease_in_out_back
from cubesim.geometry import AXIS_Y, axis_angle_quaternion, identity_quaternion


def make_request(duration=0.5, on_complete=None):
    return RotationRequest(move=None, axis=AXIS_Y, angle=-math.pi / 2, cubelets=[],
                           duration=duration, _on_complete=on_complete)


def test_ease_in_out_back_endpoints():
    assert ease_in_out_back(0.0) == 0.0
    assert math.isclose(ease_in_out_back(0.5), 0.5)
    assert math.isclose(ease_in_out_back(1.0), 1.0)
    assert ease_in_out_back(0.1) < 0.0  # overshoot backwards at the start
    assert ease_in_out_back(0.9) > 1.0


def test_request_completes_once():
    calls = []
    request = make_request(on_complete=lambda r: calls.append('engine'))
    request.add_done_callback(lambda r: calls.append('waiter'))
    request.complete()
    request.complete()
    assert calls == ['engine', 'waiter']
    late = []
    request.add_done_callback(lambda r: late.append(r))
    assert late == [request]


def test_request_quaternions():
    request = make_request()
    assert np.allclose(request.start_quaternion, identity_quaternion())
    assert np.allclose(request.end_quaternion, axis_angle_quaternion(AXIS_Y, -math.pi / 2))
    assert np.allclose(request.interpolated_quaternion(1.0), request.end_quaternion)
    assert np.allclose(request.interpolated_quaternion(0.0), identity_quaternion())


def test_instant_animator():
    request = make_request()
    InstantAnimator().start(request)
    assert request.completed


def test_frame_animator_ticks_to_completion():
    animator = FrameAnimator()
    request = make_request(duration=0.5)
    animator.start(request)
    frame = animator.tick(0.25)
    assert frame is not None
    assert math.isclose(animator.progress, 0.5)
    assert not request.completed
    animator.tick(0.25)
    assert request.completed
    assert animator.active is None
    assert animator.tick(0.1) is None


def test_frame_animator_zero_duration():
    animator = FrameAnimator()
    request = make_request(duration=0.0)
    animator.start(request)
    animator.tick(0.0)
    assert request.completed


def test_memory_scene():
    scene = MemoryScene()
    node = object()
    scene.add(node)
    assert len(scene) == 1
    scene.remove(node)
    scene.remove(node)
    assert len(scene) == 0
