"""Continuous render loop.

Ticks on the event loop at a fixed frame rate, standing in for the host's
frame-presentation callback. Each frame expires spawn effects, pulses the
spheres, advances the orbit auto-rotation and sets the background color.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from datetime import datetime

from feedscape.scene.backend import SceneBackend
from feedscape.scene.camera import PerspectiveCamera

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float, float], None]


def lerp_color(a: int, b: int, t: float) -> int:
    """Linear interpolation between two 0xRRGGBB colors."""
    t = min(1.0, max(0.0, t))
    channels = []
    for shift in (16, 8, 0):
        ca = (a >> shift) & 0xFF
        cb = (b >> shift) & 0xFF
        channels.append(round(ca + (cb - ca) * t))
    return (channels[0] << 16) | (channels[1] << 8) | channels[2]


def background_for_hour(hour: float, night: int, day: int) -> int:
    """Night at midnight, day at noon."""
    return lerp_color(night, day, math.sin((hour / 24) * math.pi))


class RenderLoop:
    """Per-frame scene updates driven by an asyncio task."""

    def __init__(
        self,
        scene: SceneBackend,
        camera: PerspectiveCamera,
        fps: float = 60.0,
        auto_rotate: bool = True,
        auto_rotate_speed: float = 0.5,
        pulse_amplitude: float = 0.1,
        night_color: int = 0x001A33,
        day_color: int = 0x001A33,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.scene = scene
        self.camera = camera
        self.fps = fps
        self.auto_rotate = auto_rotate
        self.auto_rotate_speed = auto_rotate_speed
        self.pulse_amplitude = pulse_amplitude
        self.night_color = night_color
        self.day_color = day_color
        self.clock = clock
        self.wall_clock = wall_clock

        self.frames = 0
        self._interacting = False
        self._last_frame: float | None = None
        self._task: asyncio.Task | None = None
        self._callbacks: list[FrameCallback] = []

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def rotating(self) -> bool:
        return self.auto_rotate and not self._interacting

    def add_frame_callback(self, callback: FrameCallback) -> None:
        """Call ``callback(now, dt)`` after every frame."""
        self._callbacks.append(callback)

    def begin_interaction(self) -> None:
        """User grabbed the orbit controls; pause auto-rotation."""
        self._interacting = True

    def end_interaction(self) -> None:
        self._interacting = False

    def resize(self, width: int, height: int) -> None:
        self.camera.resize(width, height)
        logger.debug(f"Viewport resized to {width}x{height}")

    def frame(self, now: float | None = None) -> None:
        """Advance one frame."""
        now = self.clock() if now is None else now
        dt = 0.0 if self._last_frame is None else max(0.0, now - self._last_frame)
        self._last_frame = now

        self.scene.expire_effects(now)

        # Pulse: 1 + amplitude * sin(t + x), t in seconds
        t = self.wall_clock()
        for obj in self.scene.objects():
            self.scene.set_scale(obj.entity_id, 1 + self.pulse_amplitude * math.sin(t + obj.position.x))

        if self.rotating and dt > 0:
            # Orbit-controls rate: one turn per 60 s at speed 1
            self.camera.orbit(2 * math.pi / 60 * self.auto_rotate_speed * dt)

        hour = datetime.fromtimestamp(t).hour
        self.scene.set_background(background_for_hour(hour, self.night_color, self.day_color))

        self.frames += 1
        for callback in self._callbacks:
            callback(now, dt)

    async def run(self) -> None:
        """Render until cancelled."""
        interval = 1.0 / self.fps
        logger.info(f"Render loop started at {self.fps:g} fps")
        try:
            while True:
                self.frame()
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info(f"Render loop stopped after {self.frames} frames")
            raise

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
