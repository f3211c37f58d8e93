"""Orbit camera, pointer input and the per-frame scheduled task."""

from __future__ import annotations as _annotations

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from cellmate.scene import SceneDescription, Vec3

ROTATE_SPEED = 2 * math.pi / 800  # radians per pointer pixel
PAN_SPEED = 0.001  # world units per pixel, per unit of orbit distance
ZOOM_BASE = 1 / 0.95  # distance factor per 100 units of scroll
POLAR_EPSILON = 0.01
MIN_DISTANCE = 1.0
MAX_DISTANCE = 50.0
MAX_POINTER_DELTA = 10_000.0  # per tick, in pixels or scroll units


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _accumulate(total: float, delta: float) -> float:
    """Add a pointer delta, dropping non-finite values and capping the sum."""
    if not math.isfinite(delta):
        return total
    return _clamp(total + delta, -MAX_POINTER_DELTA, MAX_POINTER_DELTA)


@dataclass
class OrbitCamera:
    """Spherical camera around a target, y up.

    Azimuth is measured about y from the +z axis; polar from +y.
    """

    distance: float
    azimuth: float
    polar: float
    target: Vec3 = (0.0, 0.0, 0.0)
    fov: float = 60.0

    @classmethod
    def looking_from(cls, position: Vec3, target: Vec3 = (0.0, 0.0, 0.0), fov: float = 60.0) -> "OrbitCamera":
        dx, dy, dz = (p - t for p, t in zip(position, target))
        distance = math.sqrt(dx * dx + dy * dy + dz * dz)
        polar = math.acos(_clamp(dy / distance, -1.0, 1.0)) if distance else math.pi / 2
        return cls(distance=distance, azimuth=math.atan2(dx, dz), polar=polar, target=target, fov=fov)

    @property
    def position(self) -> Vec3:
        sin_polar = math.sin(self.polar)
        tx, ty, tz = self.target
        return (
            tx + self.distance * sin_polar * math.sin(self.azimuth),
            ty + self.distance * math.cos(self.polar),
            tz + self.distance * sin_polar * math.cos(self.azimuth),
        )

    def rotate(self, d_azimuth: float, d_polar: float) -> None:
        self.azimuth -= d_azimuth
        self.polar = _clamp(self.polar - d_polar, POLAR_EPSILON, math.pi - POLAR_EPSILON)

    def dolly(self, factor: float) -> None:
        self.distance = _clamp(self.distance * factor, MIN_DISTANCE, MAX_DISTANCE)

    def pan(self, right: float, up: float) -> None:
        # screen-space right and up vectors for the current orientation
        rx, rz = math.cos(self.azimuth), -math.sin(self.azimuth)
        cos_polar, sin_polar = math.cos(self.polar), math.sin(self.polar)
        ux = -cos_polar * math.sin(self.azimuth)
        uy = sin_polar
        uz = -cos_polar * math.cos(self.azimuth)
        tx, ty, tz = self.target
        self.target = (tx + right * rx + up * ux, ty + up * uy, tz + right * rz + up * uz)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": list(self.position),
            "target": list(self.target),
            "distance": self.distance,
            "azimuth": self.azimuth,
            "polar": self.polar,
            "fov": self.fov,
        }


@dataclass
class PointerInput:
    """Pointer deltas accumulated between two ticks."""

    drag_x: float = 0.0
    drag_y: float = 0.0
    scroll: float = 0.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    @property
    def empty(self) -> bool:
        return not (self.drag_x or self.drag_y or self.scroll or self.pan_x or self.pan_y)


@dataclass(frozen=True)
class Frame:
    elapsed: float
    group_rotation: Vec3
    primitive_rotation: Vec3
    camera: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elapsed": self.elapsed,
            "group_rotation": list(self.group_rotation),
            "primitive_rotation": list(self.primitive_rotation),
            "camera": self.camera,
        }


class InteractionController:
    """Binds pointer input to the camera and computes scene transforms."""

    def __init__(self, camera: Optional[OrbitCamera] = None):
        self.camera = camera or OrbitCamera.looking_from((5.0, 5.0, 5.0))
        self.input = PointerInput()

    def drag(self, dx: float, dy: float) -> None:
        self.input.drag_x = _accumulate(self.input.drag_x, dx)
        self.input.drag_y = _accumulate(self.input.drag_y, dy)

    def scroll(self, delta: float) -> None:
        self.input.scroll = _accumulate(self.input.scroll, delta)

    def pan(self, dx: float, dy: float) -> None:
        self.input.pan_x = _accumulate(self.input.pan_x, dx)
        self.input.pan_y = _accumulate(self.input.pan_y, dy)

    def apply_input(self) -> None:
        pointer, self.input = self.input, PointerInput()
        if pointer.empty:
            return
        self.camera.rotate(pointer.drag_x * ROTATE_SPEED, pointer.drag_y * ROTATE_SPEED)
        if pointer.scroll:
            self.camera.dolly(ZOOM_BASE ** (pointer.scroll / 100.0))
        if pointer.pan_x or pointer.pan_y:
            scale = PAN_SPEED * self.camera.distance
            self.camera.pan(-pointer.pan_x * scale, pointer.pan_y * scale)

    def tick(self, scene: SceneDescription, elapsed: float) -> Frame:
        """Advance one frame; rotations depend on elapsed time, not frame count."""
        self.apply_input()
        return Frame(
            elapsed=elapsed,
            group_rotation=scene.motion.group_rotation(elapsed),
            primitive_rotation=scene.motion.primitive_rotation(elapsed),
            camera=self.camera.to_dict(),
        )


class FrameLoop:
    """Calls ``tick`` once per interval until stopped.

    The task is acquired with ``start()`` (or ``async with``) and cancelled
    with ``stop()``; it never ends on its own. A tick that raises is handed
    to ``on_error`` and the next tick runs as scheduled.
    """

    def __init__(
        self,
        tick: Callable[[], Any],
        interval: float = 1 / 60,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._tick = tick
        self.interval = interval
        self.on_error = on_error
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            try:
                self._tick()
            except Exception as exc:
                if self.on_error is None:
                    raise
                self.on_error(exc)
            await asyncio.sleep(self.interval)

    async def __aenter__(self) -> "FrameLoop":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
