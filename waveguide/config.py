"""
Waveguide — Horn Parameter Configuration

User-facing horn and mesh parameters (lengths in mm, angles in degrees),
the built-in horn presets, YAML loading, and conversion into
GeneratrixModel instances (radians).
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Dict, Optional, Tuple, Union

import numpy as np
import yaml

from .exceptions import ConfigurationError
from .geometry import models
from .geometry.models import GeneratrixModel

logger = logging.getLogger(__name__)


@dataclass
class HornParams:
    """Input parameters for one horn generatrix."""
    name: str = "ellipsoidal"
    model_type: str = "ellipsoidal"     # see MODEL_TYPES

    # Throat
    k: float = 1.0                      # spheroid expansion factor
    r_init_mm: float = 25.4             # throat radius
    alpha_init_deg: float = 1.0         # throat launch half-angle

    # Superellipse mouth termination
    s: float = 0.7
    q: float = 0.997
    n: float = 6.0

    # Coverage half-angles
    alpha_deg: float = 45.0             # axisymmetric only
    alpha_h_deg: float = 45.0
    alpha_v_deg: float = 30.0

    # Clothoid mouth termination
    term_length_mm: float = 200.0
    term_end_radius_mm: float = 60.0

    # Per-horn override of MeshParams.azimuth_steps
    azimuth_steps: Optional[int] = None


@dataclass
class MeshParams:
    """Sampling parameters shared by all horns of a run."""
    length_mm: float = 200.0
    azimuth_steps: int = 36             # 10° resolution
    axial_steps: int = 50               # superellipse models
    step_length_mm: float = 4.0         # clothoid models

    def axial_argument(self, model: GeneratrixModel) -> Union[int, float]:
        """Axial sampling argument expected by generate_mesh for `model`."""
        return self.step_length_mm if model.is_clothoid else self.axial_steps

    def azimuth_steps_for(self, params: "HornParams") -> int:
        """Profiles per revolution for one horn; a per-horn value wins."""
        return params.azimuth_steps or self.azimuth_steps


def _build_axisymmetric(p: HornParams) -> GeneratrixModel:
    return models.axisymmetric(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                               p.s, p.q, p.n, np.radians(p.alpha_deg), name=p.name)


def _build_ellipsoidal(p: HornParams) -> GeneratrixModel:
    return models.ellipsoidal(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                              p.s, p.q, p.n,
                              np.radians(p.alpha_h_deg), np.radians(p.alpha_v_deg), name=p.name)


def _build_rectangular(p: HornParams) -> GeneratrixModel:
    return models.rectangular(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                              p.s, p.q, p.n,
                              np.radians(p.alpha_h_deg), np.radians(p.alpha_v_deg), name=p.name)


def _build_rectangular_morph(p: HornParams) -> GeneratrixModel:
    return models.rectangular_morph(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                                    p.s, p.q, p.n,
                                    np.radians(p.alpha_h_deg), np.radians(p.alpha_v_deg),
                                    name=p.name)


def _build_axisymmetric_clothoid(p: HornParams) -> GeneratrixModel:
    return models.axisymmetric_clothoid(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                                        p.term_length_mm, p.term_end_radius_mm,
                                        np.radians(p.alpha_deg), name=p.name)


def _build_rectangular_clothoid(p: HornParams) -> GeneratrixModel:
    return models.rectangular_clothoid(p.k, p.r_init_mm, np.radians(p.alpha_init_deg),
                                       p.term_length_mm, p.term_end_radius_mm,
                                       np.radians(p.alpha_h_deg), np.radians(p.alpha_v_deg),
                                       name=p.name)


_MODEL_BUILDERS = {
    'axisymmetric': _build_axisymmetric,
    'ellipsoidal': _build_ellipsoidal,
    'rectangular': _build_rectangular,
    'rectangular_morph': _build_rectangular_morph,
    'axisymmetric_clothoid': _build_axisymmetric_clothoid,
    'rectangular_clothoid': _build_rectangular_clothoid,
}

MODEL_TYPES = tuple(_MODEL_BUILDERS)


# Presets matching the reference horn set
DEFAULT_HORNS = {
    'ellipsoidal': HornParams(name="ellipsoidal", model_type="ellipsoidal"),
    'axisymmetric': HornParams(name="axisymmetric", model_type="axisymmetric", alpha_deg=45.0),
    'rectangular_alpha': HornParams(name="rectangular_alpha", model_type="rectangular"),
    'rectangular_morph': HornParams(name="rectangular_morph", model_type="rectangular_morph"),
    'axi_clothoid': HornParams(
        name="axi_clothoid", model_type="axisymmetric_clothoid",
        term_length_mm=200.0, term_end_radius_mm=60.0, alpha_deg=45.0,
        azimuth_steps=72,
    ),
    'rect_clothoid': HornParams(
        name="rect_clothoid", model_type="rectangular_clothoid",
        term_length_mm=180.0, term_end_radius_mm=50.0,
    ),
}


def build_model(params: HornParams) -> GeneratrixModel:
    """Convert user-facing horn parameters into a GeneratrixModel."""
    builder = _MODEL_BUILDERS.get(params.model_type)
    if builder is None:
        raise ConfigurationError(
            f"Unknown model type '{params.model_type}' for horn '{params.name}'",
            {'model_type': params.model_type, 'known': list(MODEL_TYPES)})
    return builder(params)


def _apply_fields(target, values: dict, section: str):
    known = {f.name for f in fields(target)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{section}': {', '.join(unknown)}",
                                 {'section': section, 'unknown': unknown})
    return replace(target, **values)


def load_horns(config_path: Optional[str] = None) -> Tuple[Dict[str, HornParams], MeshParams]:
    """
    Load horn presets and mesh parameters from a YAML file, or return the
    built-in defaults when no path is given.

    Expected layout:
        mesh:
          length_mm: 200
        horns:
          my_horn:
            model_type: ellipsoidal
            alpha_h_deg: 50
    """
    if not config_path:
        return {key: replace(p) for key, p in DEFAULT_HORNS.items()}, MeshParams()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    mesh = _apply_fields(MeshParams(), data.get('mesh') or {}, 'mesh')

    horns = {}
    for key, props in (data.get('horns') or {}).items():
        props = dict(props or {})
        props.setdefault('name', key)
        horns[key] = _apply_fields(HornParams(), props, f"horns.{key}")

    if not horns:
        raise ConfigurationError(f"No horns defined in {config_path}")

    logger.info(f"Loaded {len(horns)} horn definitions from {config_path}")
    return horns, mesh
