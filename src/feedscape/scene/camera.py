"""Perspective camera with orbit rotation and picking rays."""

import math

import numpy as np

from feedscape.graph.models import Vector3


class PerspectiveCamera:
    """
    A perspective camera looking at ``target``.

    Produces the same picking ray as a three.js raycaster set from the camera:
    origin at the eye, direction through the NDC point on the near plane.
    """

    def __init__(
        self,
        fov: float = 75.0,
        aspect: float = 16 / 9,
        near: float = 0.1,
        far: float = 1000.0,
        position: Vector3 = Vector3(0.0, 0.0, 200.0),
        target: Vector3 = Vector3(0.0, 0.0, 0.0),
        up: Vector3 = Vector3(0.0, 1.0, 0.0),
        width: int = 1280,
        height: int = 720,
    ) -> None:
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = np.asarray(position, dtype=float)
        self.target = np.asarray(target, dtype=float)
        self.up = np.asarray(up, dtype=float)
        self.width = width
        self.height = height
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        """Track the viewport size; aspect follows it."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid viewport size: {width}x{height}")
        self.width = width
        self.height = height
        self.aspect = width / height

    def to_ndc(self, x: float, y: float) -> tuple[float, float]:
        """Pixel coordinates (origin top-left) to normalized device coordinates."""
        return (x / self.width) * 2 - 1, -(y / self.height) * 2 + 1

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Camera forward, right and up unit vectors."""
        forward = self.target - self.position
        forward = forward / np.linalg.norm(forward)
        right = np.cross(forward, self.up)
        right = right / np.linalg.norm(right)
        true_up = np.cross(right, forward)
        return forward, right, true_up

    def ray_from_ndc(self, ndc_x: float, ndc_y: float) -> tuple[np.ndarray, np.ndarray]:
        """Ray (origin, unit direction) through an NDC point."""
        forward, right, true_up = self.basis()
        half_height = math.tan(math.radians(self.fov) / 2)
        direction = (
            forward
            + ndc_x * half_height * self.aspect * right
            + ndc_y * half_height * true_up
        )
        return self.position.copy(), direction / np.linalg.norm(direction)

    def orbit(self, angle: float) -> None:
        """Rotate the eye around the target about the world Y axis."""
        offset = self.position - self.target
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        x = offset[0] * cos_a + offset[2] * sin_a
        z = -offset[0] * sin_a + offset[2] * cos_a
        self.position = self.target + np.array([x, offset[1], z])

    def to_dict(self) -> dict:
        return {
            "fov": self.fov,
            "aspect": self.aspect,
            "near": self.near,
            "far": self.far,
            "position": self.position.tolist(),
            "target": self.target.tolist(),
            "width": self.width,
            "height": self.height,
        }
