"""
Waveguide — OSWG Horn Geometry Generator
Main entry point: meshes horn presets and exports STL/CSV.

Usage:
    python app.py                              # Export all built-in presets
    python app.py --horn ellipsoidal --check   # One horn + mesh quality report
    python app.py --config config/horns.yaml   # Horns from a YAML file
    python app.py --length 300 --azimuth-steps 72 --output exports/hires
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from waveguide.analysis.mesh_quality import check_mesh_quality
from waveguide.config import build_model, load_horns
from waveguide.exceptions import ConfigurationError, WaveguideError
from waveguide.export.stl_export import export_presets
from waveguide.geometry.mesh import generate_mesh
from waveguide.logging_config import setup_logging


def run_quality_check(horns, mesh_params):
    """Print a mesh quality report for each horn."""
    print("\n" + "="*60)
    print("  Mesh Quality")
    print("="*60)
    for key, params in horns.items():
        model = build_model(params)
        mesh = generate_mesh(model, mesh_params.length_mm,
                             mesh_params.azimuth_steps_for(params),
                             mesh_params.axial_argument(model))
        report = check_mesh_quality(mesh)
        print(f"\n  [{key}]")
        print("  " + report.summary().replace("\n", "\n  "))


def main(argv=None):
    parser = argparse.ArgumentParser(description='OSWG horn waveguide geometry generator')
    parser.add_argument('--config', type=str, metavar='YAML', help='Horn definitions file')
    parser.add_argument('--horn', action='append', metavar='NAME',
                        help='Only export this horn (repeatable)')
    parser.add_argument('--length', type=float, help='Horn length (mm)')
    parser.add_argument('--azimuth-steps', type=int, help='Profiles per revolution')
    parser.add_argument('--axial-steps', type=int, help='Samples per profile (superellipse models)')
    parser.add_argument('--step-length', type=float, help='Axial step (mm, clothoid models)')
    parser.add_argument('--output', type=str, default='exports', help='Output directory')
    parser.add_argument('--no-profile-csv', action='store_true',
                        help='Skip the theta=0 profile CSV per horn')
    parser.add_argument('--check', action='store_true', help='Print mesh quality reports')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--log-file', type=str, help='Also write logs to this file')

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    try:
        horns, mesh_params = load_horns(args.config)
        if args.length is not None:
            mesh_params.length_mm = args.length
        if args.azimuth_steps is not None:
            if args.azimuth_steps < 3:
                raise ConfigurationError(
                    f"--azimuth-steps must be >= 3 for a closed horn, got {args.azimuth_steps}",
                    {"azimuth_steps": args.azimuth_steps})
            mesh_params.azimuth_steps = args.azimuth_steps
        if args.axial_steps is not None:
            mesh_params.axial_steps = args.axial_steps
        if args.step_length is not None:
            mesh_params.step_length_mm = args.step_length

        exported = export_presets(
            output_dir=args.output,
            config_path=args.config,
            names=args.horn,
            mesh_params=mesh_params,
            profile_csv=not args.no_profile_csv,
            verbose=True,
        )

        if args.check:
            selected = {n: horns[n] for n in args.horn} if args.horn else horns
            run_quality_check(selected, mesh_params)
    except WaveguideError as e:
        print(f"\n  ERROR: {e}", file=sys.stderr)
        if e.details:
            print(f"  Details: {e.details}", file=sys.stderr)
        return 1

    print(f"\n  Files exported:")
    for name, fpath in exported.items():
        print(f"    {name:28s} → {fpath}")
    print("\n  Successfully exported waveguide data")
    return 0


if __name__ == "__main__":
    sys.exit(main())
