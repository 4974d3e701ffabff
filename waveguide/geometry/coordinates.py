"""
Waveguide — Coordinate Conversion

Cylindrical (r, θ, z) samples of a horn wall and their Cartesian form.
The horn axis is the Cartesian Z axis; θ is measured from +X towards +Y.
"""

import numpy as np
from dataclasses import dataclass


@dataclass(frozen=True)
class CartesianPoint:
    """3D point in Cartesian coordinates."""
    x: float
    y: float
    z: float

    @classmethod
    def from_cylindrical(cls, r: float, theta: float, z: float) -> 'CartesianPoint':
        """Convert from cylindrical coordinates, theta in radians."""
        return cls(x=r * np.cos(theta), y=r * np.sin(theta), z=z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])


@dataclass(frozen=True)
class ProfilePoint:
    """One sample along a generatrix at a fixed azimuth."""
    z: float          # axial position
    r: float          # radial distance from axis
    theta: float      # azimuth, constant along one profile

    def to_cartesian(self) -> CartesianPoint:
        return CartesianPoint.from_cylindrical(self.r, self.theta, self.z)


def cylindrical_to_cartesian(r, theta, z) -> np.ndarray:
    """
    Vectorised conversion of cylindrical samples.
    Inputs broadcast against each other; returns an (..., 3) array.
    """
    r = np.asarray(r, dtype=float)
    theta = np.asarray(theta, dtype=float)
    z = np.asarray(z, dtype=float)
    r, theta, z = np.broadcast_arrays(r, theta, z)
    return np.stack([r * np.cos(theta), r * np.sin(theta), z], axis=-1)
