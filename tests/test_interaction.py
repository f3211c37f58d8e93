"""Tests for camera control, pointer input and the frame loop."""

import asyncio
import math

import pytest

from cellmate.interaction import (
    MAX_DISTANCE,
    MIN_DISTANCE,
    POLAR_EPSILON,
    FrameLoop,
    InteractionController,
    OrbitCamera,
)
from cellmate.scene import build


class TestOrbitCamera:
    def test_starts_at_five_five_five(self):
        camera = OrbitCamera.looking_from((5.0, 5.0, 5.0))
        assert camera.position == pytest.approx((5.0, 5.0, 5.0))
        assert camera.distance == pytest.approx(math.sqrt(75))
        assert camera.fov == 60.0

    def test_polar_never_inverts(self):
        camera = OrbitCamera.looking_from((5.0, 5.0, 5.0))
        camera.rotate(0.0, 100.0)
        assert camera.polar == pytest.approx(POLAR_EPSILON)
        camera.rotate(0.0, -100.0)
        assert camera.polar == pytest.approx(math.pi - POLAR_EPSILON)

    def test_dolly_is_clamped(self):
        camera = OrbitCamera.looking_from((0.0, 0.0, 5.0))
        camera.dolly(1000.0)
        assert camera.distance == MAX_DISTANCE
        camera.dolly(0.0001)
        assert camera.distance == MIN_DISTANCE

    def test_pan_moves_target_sideways(self):
        camera = OrbitCamera.looking_from((0.0, 0.0, 5.0))
        camera.pan(1.0, 0.0)
        assert camera.target == pytest.approx((1.0, 0.0, 0.0))
        assert camera.distance == pytest.approx(5.0)


class TestInteractionController:
    def test_drag_is_applied_once_per_tick(self):
        controller = InteractionController()
        start = controller.camera.azimuth
        controller.drag(100.0, 0.0)
        controller.drag(100.0, 0.0)

        controller.tick(build("DNA"), 0.0)
        moved = controller.camera.azimuth
        assert moved < start

        controller.tick(build("DNA"), 0.1)
        assert controller.camera.azimuth == moved

    def test_scroll_down_zooms_out_and_up_zooms_in(self):
        controller = InteractionController()
        start = controller.camera.distance
        controller.scroll(100.0)
        controller.apply_input()
        assert controller.camera.distance > start
        controller.scroll(-200.0)
        controller.apply_input()
        assert controller.camera.distance < start

    def test_extreme_drag_keeps_polar_in_range(self):
        controller = InteractionController()
        controller.drag(0.0, 1e6)
        frame = controller.tick(build("Cell"), 1.0)
        assert 0.0 < frame.camera["polar"] < math.pi

    def test_rotation_depends_on_elapsed_not_tick_count(self):
        scene = build("DNA")
        many, once = InteractionController(), InteractionController()
        for step in range(1, 61):
            frame = many.tick(scene, step / 60)
        single = once.tick(scene, 1.0)
        assert frame.group_rotation == pytest.approx(single.group_rotation)
        assert frame.primitive_rotation == pytest.approx(single.primitive_rotation)


class TestFrameLoop:
    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self):
        ticks = []
        loop = FrameLoop(lambda: ticks.append(1), interval=0.001)

        async with loop:
            assert loop.running
            await asyncio.sleep(0.05)

        assert not loop.running
        count = len(ticks)
        assert count > 1
        await asyncio.sleep(0.02)
        assert len(ticks) == count

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        loop = FrameLoop(lambda: None, interval=0.01)
        first = loop.start()
        assert loop.start() is first
        await loop.stop()
        assert first.cancelled()

    @pytest.mark.asyncio
    async def test_stop_without_start_is_harmless(self):
        loop = FrameLoop(lambda: None)
        await loop.stop()
        assert not loop.running


class TestExtremeInput:
    def test_huge_scroll_is_capped(self):
        controller = InteractionController()
        controller.scroll(1e8)
        frame = controller.tick(build("DNA"), 0.0)
        assert frame.camera["distance"] == MAX_DISTANCE

    def test_non_finite_deltas_are_dropped(self):
        controller = InteractionController()
        azimuth = controller.camera.azimuth
        controller.drag(1e308, 0.0)
        controller.drag(1e308, 0.0)
        controller.drag(float("nan"), float("-inf"))
        controller.scroll(float("inf"))
        frame = controller.tick(build("DNA"), 0.0)
        assert all(math.isfinite(c) for c in frame.camera["position"])
        assert math.isfinite(controller.camera.azimuth)
        assert controller.camera.azimuth != azimuth


class TestFrameLoopErrors:
    @pytest.mark.asyncio
    async def test_failing_tick_is_reported_and_loop_keeps_running(self):
        errors = []
        ticks = []

        def tick():
            ticks.append(1)
            if len(ticks) == 1:
                raise OverflowError("bad frame")

        loop = FrameLoop(tick, interval=0.001, on_error=errors.append)
        async with loop:
            await asyncio.sleep(0.05)
            assert loop.running

        assert len(errors) == 1 and isinstance(errors[0], OverflowError)
        assert len(ticks) > 1
