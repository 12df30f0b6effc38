"""Live 3D scene: primitives, camera, synchronizer, picker and render loop."""

from feedscape.scene.backend import InMemoryScene, SceneBackend
from feedscape.scene.camera import PerspectiveCamera
from feedscape.scene.objects import HoverState, LineObject, SceneObject, SpawnEffect, Tooltip
from feedscape.scene.picker import Highlighter, PointerPicker, intersect_spheres
from feedscape.scene.render_loop import RenderLoop
from feedscape.scene.synchronizer import (
    EdgeStyle,
    EffectConfig,
    ReconcileResult,
    SceneSynchronizer,
)

__all__ = [
    "SceneBackend",
    "InMemoryScene",
    "PerspectiveCamera",
    "SceneObject",
    "LineObject",
    "SpawnEffect",
    "Tooltip",
    "HoverState",
    "Highlighter",
    "PointerPicker",
    "intersect_spheres",
    "RenderLoop",
    "SceneSynchronizer",
    "ReconcileResult",
    "EdgeStyle",
    "EffectConfig",
]
