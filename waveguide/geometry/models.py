"""
Waveguide — Oblate-Spheroid Generatrix Models

Radius functions r(z, θ, L) of the OSWG horn family. Every variant shares
the generalised oblate-spheroid law

    r_os(z) = sqrt((k·r0)² + 2·k·r0·z·tan(α0) + (z·tan α)²) + r0·(1 − k)

and differs only in two pluggable policies:

  - the angle rule, giving tan α at azimuth θ either directly
    (axisymmetric, ellipsoidal, rectangular) or by back-solving a target
    mouth radius (rectangular morph);
  - the mouth termination, either the superellipse flare
        s·L/q · (1 − (1 − (z·q/L)^n)^(1/n))
    added to r_os, or a clothoid tail appended to the sampled profile.

Reference: Geddes, "Waveguides for Loudspeakers"; ATH OS-SE formulation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# |cos θ| or |sin θ| below this leaves the corresponding wall unconstrained
_AXIS_EPS = 1e-12

# Relative slack on the z ∈ [0, L] domain check
_Z_REL_TOL = 1e-9


def _rectangular_bound(h_extent: float, v_extent: float, theta: float) -> float:
    """
    Binding constraint of two planar walls: min(h/|cos θ|, v/|sin θ|).
    Exactly axis-aligned azimuths only see the facing wall.
    """
    c = abs(np.cos(theta))
    s = abs(np.sin(theta))
    h_term = h_extent / c if c > _AXIS_EPS else np.inf
    v_term = v_extent / s if s > _AXIS_EPS else np.inf
    return float(min(h_term, v_term))


# --- Angle rules ---

class AnglePolicy(ABC):
    """Direct coverage-angle rule: tan(α) at azimuth θ."""

    @abstractmethod
    def tan_alpha(self, theta: float, length: float) -> float:
        ...


@dataclass(frozen=True)
class AxisymmetricAngle(AnglePolicy):
    """Single half-angle, no azimuthal dependence."""
    alpha: float

    def tan_alpha(self, theta: float, length: float) -> float:
        return float(np.tan(self.alpha))


@dataclass(frozen=True)
class EllipticalAngle(AnglePolicy):
    """Elliptical interpolation between horizontal and vertical half-angles."""
    alpha_h: float
    alpha_v: float

    def tan_alpha(self, theta: float, length: float) -> float:
        h_axis = np.tan(self.alpha_h)
        v_axis = np.tan(self.alpha_v)
        return float(h_axis * v_axis /
                     np.sqrt((h_axis * np.cos(theta))**2 + (v_axis * np.sin(theta))**2))


@dataclass(frozen=True)
class RectangularAngle(AnglePolicy):
    """Rectangular aperture with fixed horizontal/vertical half-angles."""
    alpha_h: float
    alpha_v: float

    def tan_alpha(self, theta: float, length: float) -> float:
        return _rectangular_bound(np.tan(self.alpha_h), np.tan(self.alpha_v), theta)


class MorphTarget(ABC):
    """Morphing rule: mouth radius the profile must reach at z = L."""

    @abstractmethod
    def target_radius(self, theta: float, length: float) -> float:
        ...


@dataclass(frozen=True)
class RectangularMorphTarget(MorphTarget):
    """Rectangular mouth of half-width tan(αh)·L and half-height tan(αv)·L."""
    alpha_h: float
    alpha_v: float

    def target_radius(self, theta: float, length: float) -> float:
        return _rectangular_bound(np.tan(self.alpha_h) * length,
                                  np.tan(self.alpha_v) * length, theta)


# --- Mouth terminations ---

@dataclass(frozen=True)
class SuperellipseTermination:
    """Superellipse flare added to the spheroid law near the mouth."""
    s: float = 0.7
    q: float = 0.997
    n: float = 6.0

    def __post_init__(self):
        if self.q <= 0 or self.n <= 0:
            raise ConfigurationError(
                f"Superellipse termination needs q > 0 and n > 0 (q={self.q}, n={self.n})",
                {'q': self.q, 'n': self.n})

    def distance(self, z, length: float):
        base = np.asarray(z, dtype=float) * self.q / length
        # q > 1 drives the inner term negative near the mouth; NaN is rejected by callers
        with np.errstate(invalid='ignore'):
            return self.s * length / self.q * (1.0 - (1.0 - base**self.n)**(1.0 / self.n))


@dataclass(frozen=True)
class ClothoidTermination:
    """Euler-spiral mouth tail: curvature grows linearly with arc length."""
    term_length: float
    term_end_radius: float

    def __post_init__(self):
        if self.term_length <= 0 or self.term_end_radius <= 0:
            raise ConfigurationError(
                "Clothoid termination needs positive term_length and term_end_radius",
                {'term_length': self.term_length, 'term_end_radius': self.term_end_radius})

    def step_count(self, step_length: float) -> int:
        """Number of tail steps, rounded half away from zero."""
        return int(np.floor(self.term_length / step_length + 0.5))

    def curvature_angle(self, arc_length: float, initial_angle: float) -> float:
        """Tangent angle after `arc_length` along the spiral."""
        return initial_angle + arc_length**2 / (2.0 * self.term_length * self.term_end_radius)


# --- Model ---

@dataclass(frozen=True)
class GeneratrixModel:
    """
    Immutable OSWG generatrix. Exactly one of `angle` / `morph` must be
    set, and at most one of `termination` / `clothoid`.
    """
    k: float
    r_init: float
    alpha_init: float
    angle: Optional[AnglePolicy] = None
    morph: Optional[MorphTarget] = None
    termination: Optional[SuperellipseTermination] = None
    clothoid: Optional[ClothoidTermination] = None
    name: str = ""

    def __post_init__(self):
        if (self.angle is None) == (self.morph is None):
            raise ConfigurationError(
                "Exactly one of a direct angle rule or a morph target must be defined",
                {'angle': self.angle, 'morph': self.morph})
        if self.termination is not None and self.clothoid is not None:
            raise ConfigurationError(
                "A model takes either a superellipse or a clothoid termination, not both")
        if self.r_init <= 0:
            raise ConfigurationError(f"r_init must be positive, got {self.r_init}",
                                     {'r_init': self.r_init})

    @property
    def is_clothoid(self) -> bool:
        return self.clothoid is not None

    def generalized_os_distance(self, z, tan_alpha: float):
        a = (self.k * self.r_init)**2
        b = 2.0 * self.k * self.r_init * z * np.tan(self.alpha_init)
        c = (z * tan_alpha)**2
        return np.sqrt(a + b + c) + self.r_init * (1.0 - self.k)

    def termination_distance(self, z, length: float):
        if self.termination is None:
            return np.zeros_like(np.asarray(z, dtype=float))
        return self.termination.distance(z, length)

    def tan_alpha(self, theta: float, length: float) -> float:
        """Coverage angle rule, back-solving the morph target when needed."""
        if self.angle is not None:
            return self.angle.tan_alpha(theta, length)

        target = self.morph.target_radius(theta, length)
        # Literal inversion at z = L; see DESIGN.md for the termination term
        offset = target - float(self.termination_distance(length, length)) \
            - self.r_init * (1.0 - self.k)
        radicand = (offset**2
                    - (self.k * self.r_init)**2
                    - 2.0 * self.k * self.r_init * length * np.tan(self.alpha_init))
        if not radicand >= 0.0:
            raise ConfigurationError(
                f"Morph target {target:.3f} is unreachable at L={length:.3f} "
                f"(theta={theta:.4f} rad)",
                {'theta': theta, 'length': length, 'target': target, 'radicand': radicand})
        return float(np.sqrt(radicand) / length)

    def radial_distance(self, z, theta: float, length: float):
        """Wall radius at axial position(s) z, azimuth theta, horn length L."""
        if not length > 0:
            raise ConfigurationError(f"Horn length must be positive, got {length}",
                                     {'length': length})
        z_arr = np.asarray(z, dtype=float)
        tol = _Z_REL_TOL * length
        if np.any(z_arr < -tol) or np.any(z_arr > length + tol) or np.any(np.isnan(z_arr)):
            raise ConfigurationError(
                f"z must lie in [0, {length}]",
                {'z_min': float(np.min(z_arr)), 'z_max': float(np.max(z_arr)), 'length': length})
        z_arr = np.clip(z_arr, 0.0, length)

        tan_alpha = self.tan_alpha(theta, length)
        r = self.generalized_os_distance(z_arr, tan_alpha) + self.termination_distance(z_arr, length)
        if np.ndim(z) == 0:
            return float(r)
        return r


class GeneratrixModelBuilder:
    """
    Step-by-step construction of a GeneratrixModel.

    build() rejects the configuration unless exactly one angle rule
    (direct angle or morph target) and at most one termination are set.
    """

    def __init__(self, k: float = 1.0, r_init: float = 25.4, alpha_init: float = np.radians(1.0)):
        self._k = k
        self._r_init = r_init
        self._alpha_init = alpha_init
        self._angle = None
        self._morph = None
        self._termination = None
        self._clothoid = None
        self._name = ""

    def named(self, name: str) -> 'GeneratrixModelBuilder':
        self._name = name
        return self

    def with_angle(self, policy: AnglePolicy) -> 'GeneratrixModelBuilder':
        if self._angle is not None:
            raise ConfigurationError("Angle rule already defined")
        self._angle = policy
        return self

    def with_morph_target(self, target: MorphTarget) -> 'GeneratrixModelBuilder':
        if self._morph is not None:
            raise ConfigurationError("Morph target already defined")
        self._morph = target
        return self

    def with_superellipse_termination(self, s: float, q: float, n: float) -> 'GeneratrixModelBuilder':
        self._termination = SuperellipseTermination(s=s, q=q, n=n)
        return self

    def with_clothoid_termination(self, term_length: float,
                                  term_end_radius: float) -> 'GeneratrixModelBuilder':
        self._clothoid = ClothoidTermination(term_length=term_length,
                                             term_end_radius=term_end_radius)
        return self

    def build(self) -> GeneratrixModel:
        if self._angle is None and self._morph is None:
            raise ConfigurationError("Either an angle rule or a morph target must be defined")
        if self._angle is not None and self._morph is not None:
            raise ConfigurationError("Angle rule and morph target are mutually exclusive")
        model = GeneratrixModel(
            k=self._k, r_init=self._r_init, alpha_init=self._alpha_init,
            angle=self._angle, morph=self._morph,
            termination=self._termination, clothoid=self._clothoid,
            name=self._name,
        )
        logger.debug(f"Built generatrix model '{model.name}'")
        return model


# --- Named variants ---

def axisymmetric(k, r_init, alpha_init, s, q, n, alpha, name="axisymmetric") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_angle(AxisymmetricAngle(alpha))
            .with_superellipse_termination(s, q, n)
            .build())


def ellipsoidal(k, r_init, alpha_init, s, q, n, alpha_h, alpha_v,
                name="ellipsoidal") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_angle(EllipticalAngle(alpha_h, alpha_v))
            .with_superellipse_termination(s, q, n)
            .build())


def rectangular(k, r_init, alpha_init, s, q, n, alpha_h, alpha_v,
                name="rectangular") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_angle(RectangularAngle(alpha_h, alpha_v))
            .with_superellipse_termination(s, q, n)
            .build())


def rectangular_morph(k, r_init, alpha_init, s, q, n, alpha_h, alpha_v,
                      name="rectangular_morph") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_morph_target(RectangularMorphTarget(alpha_h, alpha_v))
            .with_superellipse_termination(s, q, n)
            .build())


def axisymmetric_clothoid(k, r_init, alpha_init, term_length, term_end_radius, alpha,
                          name="axisymmetric_clothoid") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_angle(AxisymmetricAngle(alpha))
            .with_clothoid_termination(term_length, term_end_radius)
            .build())


def rectangular_clothoid(k, r_init, alpha_init, term_length, term_end_radius, alpha_h, alpha_v,
                         name="rectangular_clothoid") -> GeneratrixModel:
    return (GeneratrixModelBuilder(k, r_init, alpha_init).named(name)
            .with_angle(RectangularAngle(alpha_h, alpha_v))
            .with_clothoid_termination(term_length, term_end_radius)
            .build())
