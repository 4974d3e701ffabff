"""
Waveguide — Profile CSV Export

Writes one generatrix as a table of cylindrical (z, r, theta) samples
with their Cartesian (x, y) projection, for inspection and plotting.
"""

import logging
import os

import pandas as pd

from ..geometry.profile import Profile

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = ['z', 'r', 'theta', 'x', 'y']


def profile_to_dataframe(profile: Profile) -> pd.DataFrame:
    """One row per profile sample."""
    xyz = profile.to_cartesian()
    return pd.DataFrame({
        'z': profile.z,
        'r': profile.r,
        'theta': profile.theta,
        'x': xyz[:, 0],
        'y': xyz[:, 1],
    }, columns=PROFILE_COLUMNS)


def export_profile_csv(profile: Profile, filepath: str) -> str:
    """Write `profile` to `filepath` and return the path."""
    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)
    profile_to_dataframe(profile).to_csv(filepath, index=False)
    logger.info(f"Profile exported: {filepath} ({len(profile)} points)")
    return filepath
