"""
Waveguide — Exceptions

Error hierarchy for the horn geometry core. Every failure is raised
immediately to the caller; geometry is never clamped or patched silently.
"""


class WaveguideError(Exception):
    """Base exception for all waveguide errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(WaveguideError):
    """Invalid, incomplete or contradictory model/mesh parameters."""
    pass


class GeometryError(WaveguideError):
    """Profiles or meshes that cannot be stitched or evaluated."""
    pass


class ConvergenceError(WaveguideError):
    """Iterative profile search failed to converge."""

    def __init__(self, message: str, iterations: int = None, residual: float = None):
        super().__init__(message, {
            'iterations': iterations,
            'residual': residual
        })
        self.iterations = iterations
        self.residual = residual
