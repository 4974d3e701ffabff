"""
Waveguide — Mesh Tessellator

Revolves per-azimuth profiles around the Z axis and stitches each pair of
angularly adjacent profiles into triangles. The last profile wraps to the
first so the revolution closes.

For profile i, next profile i+1 (mod N) and axial samples j, j+1:
    A = (cur[j],   next[j], cur[j+1])
    B = (cur[j+1], next[j], next[j+1])
Winding is counter-clockwise seen from outside, so (v1−v0)×(v2−v0)
points away from the axis along the flaring wall.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np

from ..exceptions import ConfigurationError, GeometryError
from .models import GeneratrixModel
from .profile import Profile, generate_profile

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Mesh:
    """Unindexed triangle soup with per-face unit normals."""
    triangles: np.ndarray = field(default_factory=lambda: np.zeros((0, 3, 3)))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))

    def __len__(self) -> int:
        return len(self.triangles)

    @property
    def vertices(self) -> np.ndarray:
        """(3T, 3) vertex array, three per triangle."""
        return self.triangles.reshape(-1, 3)


def triangle_normals(triangles: np.ndarray) -> np.ndarray:
    """Unit normals from (v1 − v0) × (v2 − v0); degenerate faces get zeros."""
    u = triangles[:, 1] - triangles[:, 0]
    v = triangles[:, 2] - triangles[:, 0]
    n = np.cross(u, v)
    norm = np.linalg.norm(n, axis=1, keepdims=True)
    return np.divide(n, norm, out=np.zeros_like(n), where=norm > 0)


def azimuth_positions(azimuth_steps: int) -> np.ndarray:
    """Evenly spaced azimuths over [0, 2π)."""
    return 2.0 * np.pi * np.arange(azimuth_steps) / azimuth_steps


def stitch_profiles(profiles: Sequence[Profile]) -> Mesh:
    """Stitch angularly ordered profiles of equal point count into a closed mesh."""
    if not profiles:
        raise ConfigurationError("No profiles to stitch")
    counts = {len(p) for p in profiles}
    if len(counts) != 1:
        raise GeometryError(
            "All profiles must have the same number of points to be stitched",
            {'point_counts': sorted(counts)})

    # (N_azimuth, M_axial, 3)
    grid = np.stack([p.to_cartesian() for p in profiles])
    cur = grid
    nxt = np.roll(grid, -1, axis=0)

    tri_a = np.stack([cur[:, :-1], nxt[:, :-1], cur[:, 1:]], axis=2)
    tri_b = np.stack([cur[:, 1:], nxt[:, :-1], nxt[:, 1:]], axis=2)
    # Interleave so each quad emits A then B, profile-major
    triangles = np.stack([tri_a, tri_b], axis=2).reshape(-1, 3, 3)

    return Mesh(triangles=triangles, normals=triangle_normals(triangles))


def generate_profiles(model: GeneratrixModel, length: float, azimuth_steps: int,
                      axial_steps_or_step_length: Union[int, float]) -> List[Profile]:
    """One profile per azimuth, in increasing θ order."""
    if azimuth_steps < 1:
        raise ConfigurationError(f"azimuth_steps must be >= 1, got {azimuth_steps}",
                                 {'azimuth_steps': azimuth_steps})
    return [generate_profile(model, length, theta, axial_steps_or_step_length)
            for theta in azimuth_positions(azimuth_steps)]


def generate_mesh(model: GeneratrixModel, length: float, azimuth_steps: int,
                  axial_steps_or_step_length: Union[int, float]) -> Mesh:
    """
    Generate the full horn surface.

    `axial_steps_or_step_length` is the per-profile sample count for
    superellipse models, or the axial step length for clothoid models.
    """
    profiles = generate_profiles(model, length, azimuth_steps, axial_steps_or_step_length)
    mesh = stitch_profiles(profiles)
    logger.debug(f"Mesh '{model.name}': {azimuth_steps} azimuths x {len(profiles[0])} "
                 f"axial points -> {len(mesh)} triangles")
    return mesh
