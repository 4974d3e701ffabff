"""
Waveguide — STL Export Module

Converts tessellated horn surfaces into trimesh meshes and writes them
as binary STL. Vertices are kept unmerged and the normals computed by the
tessellator are written as-is.

Also drives the batch export of every configured horn preset.
"""

import logging
import os
from typing import Dict, Optional

import numpy as np
import trimesh

from ..config import HornParams, MeshParams, build_model, load_horns
from ..exceptions import ConfigurationError
from .csv_export import export_profile_csv
from ..geometry.mesh import Mesh, generate_mesh
from ..geometry.profile import generate_profile

logger = logging.getLogger(__name__)


def mesh_to_trimesh(mesh: Mesh) -> trimesh.Trimesh:
    """Triangle soup -> Trimesh, three private vertices per face."""
    n_faces = len(mesh)
    vertices = mesh.vertices
    faces = np.arange(3 * n_faces).reshape(-1, 3)
    return trimesh.Trimesh(vertices=vertices, faces=faces,
                           face_normals=mesh.normals, process=False)


def export_mesh_stl(mesh: Mesh, filepath: str) -> str:
    """Write `mesh` as binary STL and return the path."""
    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)
    mesh_to_trimesh(mesh).export(filepath, file_type='stl')
    logger.info(f"STL exported: {filepath} ({len(mesh)} triangles)")
    return filepath


def export_horn(params: HornParams, mesh_params: MeshParams, output_dir: str,
                profile_csv: bool = False) -> Dict[str, str]:
    """Mesh one horn preset; optionally dump its θ = 0 profile as CSV."""
    model = build_model(params)
    axial = mesh_params.axial_argument(model)
    azimuth_steps = mesh_params.azimuth_steps_for(params)

    exported = {}
    if profile_csv:
        profile = generate_profile(model, mesh_params.length_mm, 0.0, axial)
        path = os.path.join(output_dir, f"{params.name}_profile.csv")
        exported[f"{params.name}_profile"] = export_profile_csv(profile, path)

    mesh = generate_mesh(model, mesh_params.length_mm, azimuth_steps, axial)
    path = os.path.join(output_dir, f"{params.name}.stl")
    exported[params.name] = export_mesh_stl(mesh, path)
    return exported


def export_presets(output_dir: str = "exports",
                   config_path: Optional[str] = None,
                   names: Optional[list] = None,
                   mesh_params: Optional[MeshParams] = None,
                   profile_csv: bool = True,
                   verbose: bool = True) -> Dict[str, str]:
    """
    Export every configured horn (or the subset `names`) as STL.

    Returns dict of {name: filepath}.
    """
    horns, loaded_mesh = load_horns(config_path)
    mesh_params = mesh_params or loaded_mesh
    if names:
        missing = [n for n in names if n not in horns]
        if missing:
            raise ConfigurationError(f"Unknown horn(s): {', '.join(missing)}",
                                     {'known': sorted(horns)})
        horns = {n: horns[n] for n in names}

    os.makedirs(output_dir, exist_ok=True)
    if verbose:
        print(f"\n  Waveguide STL Export")
        print(f"  Output: {os.path.abspath(output_dir)}")
        print(f"  Length: {mesh_params.length_mm} mm, "
              f"{mesh_params.azimuth_steps} segments/revolution (unless set per horn)\n")

    exported = {}
    for key, params in horns.items():
        if verbose:
            print(f"  Exporting {key} ({mesh_params.azimuth_steps_for(params)} segments)...", end=" ")
        files = export_horn(params, mesh_params, output_dir, profile_csv=profile_csv)
        exported.update(files)
        if verbose:
            print(f"✓ {os.path.getsize(files[params.name]) / 1024:.0f} KB")

    return exported
