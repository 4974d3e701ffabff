"""
Waveguide — Profile Generator

Samples a generatrix model along z at one fixed azimuth:
  - fixed resolution: `resolution` equally spaced samples over [0, L]
  - fixed step: constant axial step, then the clothoid mouth tail
  - fixed curve length: horn length searched so the wall is a given length
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np

from ..exceptions import ConfigurationError, ConvergenceError, GeometryError
from .coordinates import ProfilePoint, cylindrical_to_cartesian
from .models import ClothoidTermination, GeneratrixModel

logger = logging.getLogger(__name__)

# Slack on length/step before rounding the sample count up
_STEP_COUNT_SLACK = 1e-6


@dataclass(eq=False)
class Profile:
    """
    One generatrix at azimuth `theta`, as parallel z/r arrays.
    z is monotonic over the spheroid section; a clothoid tail may curl
    back towards the throat (mouth rollback).
    """
    z: np.ndarray
    r: np.ndarray
    theta: float

    def __post_init__(self):
        self.z = np.asarray(self.z, dtype=float)
        self.r = np.asarray(self.r, dtype=float)
        self.theta = float(self.theta)
        if self.z.ndim != 1 or self.z.shape != self.r.shape:
            raise GeometryError("Profile z and r must be 1-D arrays of equal length",
                                {'z_shape': self.z.shape, 'r_shape': self.r.shape})
        if len(self.z) < 2:
            raise GeometryError(f"A profile needs at least 2 points, got {len(self.z)}")

    def __len__(self) -> int:
        return len(self.z)

    def __getitem__(self, idx: int) -> ProfilePoint:
        return ProfilePoint(z=float(self.z[idx]), r=float(self.r[idx]), theta=self.theta)

    def __iter__(self) -> Iterator[ProfilePoint]:
        for i in range(len(self)):
            yield self[i]

    @property
    def points(self) -> np.ndarray:
        """(N, 2) array of (z, r) pairs."""
        return np.column_stack([self.z, self.r])

    def to_cartesian(self) -> np.ndarray:
        """(N, 3) Cartesian vertices of this profile."""
        return cylindrical_to_cartesian(self.r, self.theta, self.z)

    def end_tangent_angle(self) -> float:
        """Tangent angle atan2(Δr, Δz) of the last segment."""
        return float(np.arctan2(self.r[-1] - self.r[-2], self.z[-1] - self.z[-2]))

    def curve_length(self) -> float:
        """Polyline arc length of the generatrix in the (z, r) plane."""
        return float(np.sum(np.hypot(np.diff(self.z), np.diff(self.r))))


def _check_radii(r: np.ndarray, model: GeneratrixModel, theta: float):
    if not np.all(np.isfinite(r)) or np.any(r < 0):
        bad = int(np.count_nonzero(~np.isfinite(r) | (r < 0)))
        raise ConfigurationError(
            f"Model '{model.name}' produced {bad} non-finite or negative radii at theta={theta:.4f}",
            {'theta': theta, 'bad_samples': bad})


def generate_profile_fixed_resolution(model: GeneratrixModel, length: float, theta: float,
                                      resolution: int) -> Profile:
    """Sample `resolution` points over z ∈ [0, length]."""
    if resolution < 2:
        raise ConfigurationError(f"resolution must be >= 2, got {resolution}",
                                 {'resolution': resolution})
    z = np.linspace(0.0, length, resolution)
    r = model.radial_distance(z, theta, length)
    _check_radii(r, model, theta)
    return Profile(z=z, r=r, theta=theta)


def add_clothoid_termination(profile: Profile, clothoid: ClothoidTermination,
                             step_length: float) -> Profile:
    """
    Append an Euler-spiral tail to `profile`.

    The tail starts at the profile's last point along the tangent of its
    last segment and advances by `step_length` per step while the tangent
    angle grows with the square of the arc length.
    """
    if not step_length > 0:
        raise ConfigurationError(f"step_length must be positive, got {step_length}")
    initial_angle = profile.end_tangent_angle()
    n_steps = clothoid.step_count(step_length)

    arc = np.arange(n_steps) * step_length
    angles = clothoid.curvature_angle(arc, initial_angle)
    z_tail = profile.z[-1] + np.cumsum(step_length * np.cos(angles))
    r_tail = profile.r[-1] + np.cumsum(step_length * np.sin(angles))

    logger.debug(f"Clothoid tail: {n_steps} steps from tangent {np.degrees(initial_angle):.2f} deg")
    return Profile(z=np.concatenate([profile.z, z_tail]),
                   r=np.concatenate([profile.r, r_tail]),
                   theta=profile.theta)


def generate_profile_fixed_step(model: GeneratrixModel, length: float, theta: float,
                                step_length: float) -> Profile:
    """
    Sample z at constant `step_length` (last sample clamped to `length`),
    then append the model's clothoid tail, if any.
    """
    if not step_length > 0:
        raise ConfigurationError(f"step_length must be positive, got {step_length}",
                                 {'step_length': step_length})
    if not length > 0:
        raise ConfigurationError(f"Horn length must be positive, got {length}",
                                 {'length': length})

    count = int(np.ceil(length / step_length - _STEP_COUNT_SLACK)) + 1
    z = np.minimum(np.arange(count) * step_length, length)
    r = model.radial_distance(z, theta, length)
    _check_radii(r, model, theta)
    profile = Profile(z=z, r=r, theta=theta)

    if model.clothoid is not None:
        profile = add_clothoid_termination(profile, model.clothoid, step_length)
        _check_radii(profile.r, model, theta)
    return profile


def generate_profile(model: GeneratrixModel, length: float, theta: float,
                     resolution_or_step: Union[int, float]) -> Profile:
    """
    Generate the generatrix at azimuth `theta`.

    Clothoid models take an axial step length; the others an integer
    sample count.
    """
    if model.is_clothoid:
        return generate_profile_fixed_step(model, length, theta, float(resolution_or_step))
    if isinstance(resolution_or_step, bool) or \
            not isinstance(resolution_or_step, (int, np.integer)):
        raise ConfigurationError(
            f"Model '{model.name}' needs an integer resolution, got {resolution_or_step!r}")
    return generate_profile_fixed_resolution(model, length, theta, int(resolution_or_step))


def generate_profile_fixed_curve_length(model: GeneratrixModel, curve_length: float,
                                        theta: float, resolution: int,
                                        tol: float = 1e-6, max_iter: int = 200) -> Profile:
    """
    Find the horn length whose profile at `theta` has arc length
    `curve_length`, by bisection over (0, curve_length].
    """
    if model.is_clothoid:
        raise ConfigurationError("Fixed curve length search applies to superellipse models only")
    if not curve_length > 0:
        raise ConfigurationError(f"curve_length must be positive, got {curve_length}")

    lo, hi = 0.0, curve_length
    profile = generate_profile_fixed_resolution(model, hi, theta, resolution)
    residual = profile.curve_length() - curve_length
    if residual < -tol:
        raise ConvergenceError(
            f"Target curve length {curve_length} not bracketed", iterations=0, residual=residual)

    for iteration in range(1, max_iter + 1):
        if abs(residual) <= tol:
            logger.debug(f"Curve length converged in {iteration - 1} iterations "
                         f"(L={profile.z[-1]:.6f})")
            return profile
        mid = 0.5 * (lo + hi)
        profile = generate_profile_fixed_resolution(model, mid, theta, resolution)
        residual = profile.curve_length() - curve_length
        if residual < 0:
            lo = mid
        else:
            hi = mid

    if abs(residual) <= tol:
        return profile
    raise ConvergenceError(
        f"Curve length search did not converge after {max_iter} iterations",
        iterations=max_iter, residual=residual)
