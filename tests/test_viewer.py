"""Tests for the viewer shell."""

import asyncio

import pytest

from cellmate.scene import Variant, build
from cellmate.viewer import INTERACTION_HINT, MoleculeViewer


def test_buttons_and_info_follow_selection(clock):
    viewer = MoleculeViewer(clock=clock)
    assert [b["label"] for b in viewer.buttons] == ["DNA", "Protein", "Cell"]
    assert [b["active"] for b in viewer.buttons] == [True, False, False]
    assert viewer.info == {
        "title": "DNA Structure",
        "description": "Double helix structure showing base pairs",
        "hint": INTERACTION_HINT,
    }

    info = viewer.select("Protein")
    assert info["title"] == "Protein Structure"
    assert [b["active"] for b in viewer.buttons] == [False, True, False]


def test_unknown_selection_shows_dna(clock):
    viewer = MoleculeViewer(clock=clock)
    viewer.select("Cell")
    viewer.select("Chloroplast")
    assert viewer.variant is Variant.DNA
    assert viewer.scene == build("DNA")


def test_frame_uses_time_since_scene_mount(clock):
    viewer = MoleculeViewer(clock=clock)
    clock.advance(10.0)
    assert viewer.render_frame().group_rotation[1] == pytest.approx(2.0)

    viewer.select("Cell")
    assert viewer.frame is None
    clock.advance(4.0)
    frame = viewer.render_frame()
    assert frame.elapsed == pytest.approx(4.0)
    assert frame.group_rotation[1] == pytest.approx(0.2)


def test_camera_survives_variant_switch(clock):
    viewer = MoleculeViewer(clock=clock)
    viewer.scroll(500.0)
    viewer.render_frame()
    distance = viewer.interaction.camera.distance
    viewer.select("Protein")
    assert viewer.render_frame().camera["distance"] == pytest.approx(distance)


def test_renderer_errors_are_reported_not_raised(clock, diagnostics):
    viewer = MoleculeViewer(clock=clock, diagnostics=diagnostics)
    frames = []

    def broken(frame):
        raise ValueError("canvas lost")

    viewer.on_render(broken)
    viewer.on_render(frames.append)
    viewer.render_frame()

    assert len(frames) == 1
    assert diagnostics.events[0][0] == "frame-callback-failure"


def test_unsubscribed_renderer_is_not_called(clock):
    viewer = MoleculeViewer(clock=clock)
    frames = []
    unsubscribe = viewer.on_render(frames.append)
    unsubscribe()
    viewer.render_frame()
    assert frames == []


@pytest.mark.asyncio
async def test_mounted_viewer_renders_until_unmounted():
    viewer = MoleculeViewer(frame_interval=0.001)
    frames = []
    viewer.on_render(frames.append)

    async with viewer.mounted():
        await asyncio.sleep(0.05)
        assert viewer.loop.running

    assert not viewer.loop.running
    assert frames
    assert frames[-1].elapsed >= frames[0].elapsed


@pytest.mark.asyncio
async def test_extreme_pointer_input_does_not_stop_mounted_viewer(diagnostics):
    viewer = MoleculeViewer(frame_interval=0.001, diagnostics=diagnostics)

    async with viewer.mounted():
        viewer.scroll(1e8)
        await asyncio.sleep(0.02)
        viewer.drag(1e308, 0.0)
        viewer.drag(1e308, 0.0)
        await asyncio.sleep(0.02)
        assert viewer.loop.running
        assert viewer.frame is not None

    assert diagnostics.events == []


@pytest.mark.asyncio
async def test_failing_tick_is_reported_while_mounted(diagnostics, monkeypatch):
    viewer = MoleculeViewer(frame_interval=0.001, diagnostics=diagnostics)
    calls = []
    original = viewer.interaction.tick

    def flaky_tick(scene, elapsed):
        calls.append(elapsed)
        if len(calls) == 1:
            raise ValueError("math domain error")
        return original(scene, elapsed)

    monkeypatch.setattr(viewer.interaction, "tick", flaky_tick)
    async with viewer.mounted():
        await asyncio.sleep(0.05)
        assert viewer.loop.running

    assert diagnostics.events[0][0] == "frame-callback-failure"
    assert len(calls) > 1
