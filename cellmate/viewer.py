"""Viewer shell: variant buttons, info panel and the mounted frame loop."""

from __future__ import annotations as _annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Union

from cellmate.diagnostics import Diagnostics
from cellmate.interaction import FrameLoop, Frame, InteractionController
from cellmate.scene import SceneDescription, SceneRegistry, Variant

INTERACTION_HINT = "Click and drag to rotate • Scroll to zoom"

Renderer = Callable[[Frame], None]


class MoleculeViewer:
    def __init__(
        self,
        registry: Optional[SceneRegistry] = None,
        interaction: Optional[InteractionController] = None,
        frame_interval: float = 1 / 60,
        clock: Callable[[], float] = time.monotonic,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.registry = registry or SceneRegistry()
        self.interaction = interaction or InteractionController()
        self.clock = clock
        self.diagnostics = diagnostics or Diagnostics()
        self.loop = FrameLoop(self.render_frame, frame_interval, on_error=self.diagnostics.frame_callback_failure)
        self.frame: Optional[Frame] = None
        self._renderers: List[Renderer] = []
        self._scene_started_at = clock()

    @property
    def variant(self) -> Variant:
        return self.registry.variant

    @property
    def scene(self) -> SceneDescription:
        return self.registry.scene

    @property
    def buttons(self) -> List[Dict[str, Any]]:
        return [{"label": v.value, "active": v is self.variant} for v in self.registry.variants]

    @property
    def info(self) -> Dict[str, str]:
        return {
            "title": self.scene.title,
            "description": self.scene.description,
            "hint": INTERACTION_HINT,
        }

    def select(self, variant: Union[Variant, str, None]) -> Dict[str, str]:
        """Switch variants; scene transforms restart, the camera is kept."""
        self.registry.select(variant)
        self._scene_started_at = self.clock()
        self.frame = None
        return self.info

    def drag(self, dx: float, dy: float) -> None:
        self.interaction.drag(dx, dy)

    def scroll(self, delta: float) -> None:
        self.interaction.scroll(delta)

    def pan(self, dx: float, dy: float) -> None:
        self.interaction.pan(dx, dy)

    def on_render(self, renderer: Renderer) -> Callable[[], None]:
        self._renderers.append(renderer)

        def unsubscribe() -> None:
            if renderer in self._renderers:
                self._renderers.remove(renderer)

        return unsubscribe

    def render_frame(self) -> Frame:
        """One tick: compute transforms, apply pointer input, redraw."""
        elapsed = self.clock() - self._scene_started_at
        self.frame = self.interaction.tick(self.scene, elapsed)
        for renderer in list(self._renderers):
            try:
                renderer(self.frame)
            except Exception as exc:
                self.diagnostics.frame_callback_failure(exc)
        return self.frame

    @asynccontextmanager
    async def mounted(self) -> AsyncIterator["MoleculeViewer"]:
        """Run the frame loop for as long as the viewer is mounted."""
        self._scene_started_at = self.clock()
        async with self.loop:
            yield self
