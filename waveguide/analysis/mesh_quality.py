"""
Waveguide — Mesh Quality Checker

Sanity gate run on a tessellated horn before export: flags non-finite
vertices, collapsed triangles, sliver triangles and faces whose normal
points towards the horn axis.

Faces facing the axis are expected on a rolled-back clothoid mouth, so
they are reported as a warning only.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..geometry.mesh import Mesh


@dataclass
class MeshQualityReport:
    """Results of a mesh quality check."""
    is_safe: bool = False
    triangles: int = 0

    non_finite_vertices: int = 0

    # Faces with area below the degenerate threshold
    degenerate_faces: int = 0
    degenerate_ok: bool = False

    # Longest edge / shortest altitude
    max_aspect_ratio: float = 0.0
    aspect_ratio_ok: bool = False

    # Normal · radial direction < 0
    inward_faces: int = 0

    min_radius: float = 0.0
    max_radius: float = 0.0

    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        status = "SAFE" if self.is_safe else "UNSAFE"
        lines = [
            f"Mesh Quality: {status}",
            f"  Triangles: {self.triangles:,}  Radius: {self.min_radius:.2f} .. {self.max_radius:.2f}",
            f"  Degenerate faces: {self.degenerate_faces} {'OK' if self.degenerate_ok else 'FAIL'}",
            f"  Aspect ratio: max={self.max_aspect_ratio:.1f} {'OK' if self.aspect_ratio_ok else 'FAIL'}",
            f"  Inward-facing faces: {self.inward_faces}",
        ]
        for w in self.warnings:
            lines.append(f"  WARNING: {w}")
        for e in self.errors:
            lines.append(f"  ERROR: {e}")
        return "\n".join(lines)


THRESHOLDS_STRICT = {
    'min_area': 1e-9,
    'max_degenerate_faces': 0,
    'max_aspect_ratio': 200.0,
}
THRESHOLDS_RELAXED = {
    'min_area': 1e-12,
    'max_degenerate_faces': 10,
    'max_aspect_ratio': 1000.0,
}


def check_mesh_quality(mesh: Mesh, thresholds: Optional[dict] = None) -> MeshQualityReport:
    """Check a horn mesh against `thresholds` (strict by default)."""
    report = MeshQualityReport()
    thr = thresholds or THRESHOLDS_STRICT

    tris = np.asarray(mesh.triangles, dtype=float)
    report.triangles = len(tris)
    if report.triangles == 0:
        report.errors.append("Mesh has no triangles")
        return report

    finite = np.isfinite(tris).all(axis=2)
    report.non_finite_vertices = int(np.count_nonzero(~finite))
    if report.non_finite_vertices:
        report.errors.append(f"{report.non_finite_vertices} non-finite vertices")
        return report

    edges = np.stack([tris[:, 1] - tris[:, 0],
                      tris[:, 2] - tris[:, 1],
                      tris[:, 0] - tris[:, 2]], axis=1)
    edge_len = np.linalg.norm(edges, axis=2)
    area = 0.5 * np.linalg.norm(np.cross(edges[:, 0], -edges[:, 2]), axis=1)

    degenerate = area < thr.get('min_area', 1e-9)
    report.degenerate_faces = int(np.count_nonzero(degenerate))
    report.degenerate_ok = report.degenerate_faces <= thr.get('max_degenerate_faces', 0)

    longest = edge_len.max(axis=1)
    healthy = ~degenerate
    if np.any(healthy):
        # Aspect = longest edge / altitude onto it
        altitude = 2.0 * area[healthy] / longest[healthy]
        report.max_aspect_ratio = float(np.max(longest[healthy] / altitude))
    report.aspect_ratio_ok = report.max_aspect_ratio <= thr.get('max_aspect_ratio', 200.0)

    radial = tris.mean(axis=1)
    radial[:, 2] = 0.0
    outward = np.einsum('ij,ij->i', mesh.normals, radial)
    report.inward_faces = int(np.count_nonzero(outward[healthy] < 0))

    r = np.hypot(tris[..., 0], tris[..., 1])
    report.min_radius = float(r.min())
    report.max_radius = float(r.max())

    if report.inward_faces:
        report.warnings.append(f"{report.inward_faces} faces point towards the axis "
                               f"(mouth rollback or flipped winding)")
    if report.degenerate_faces and report.degenerate_ok:
        report.warnings.append(f"{report.degenerate_faces} degenerate faces within tolerance")

    report.is_safe = report.degenerate_ok and report.aspect_ratio_ok
    return report
