"""
Per-slice scattering term of the SSNP method.

For a refractive-index perturbation n on a background n0 the slice of
thickness dz couples the field into its axial derivative with strength

    (2 pi res_z / n0)^2 * dz * n * (2 n0 + n)

i.e. k0^2 ((n0 + n)^2 - n0^2) dz in grid units.
"""

import numpy as np


def scatter_factor(n, res_z, dz, n0):
    """Elementwise scattering factor of a refractive-index perturbation.

    Parameters
    ----------
    n : array_like
        Refractive-index deviation from the background, any shape.
    res_z : float
        Axial sampling pitch (in wavelengths of the background medium).
    dz : float
        Slice thickness.
    n0 : float
        Background refractive index.

    Returns
    -------
    factor : ndarray, same shape as ``n``, float32
    """
    n = np.asarray(n, dtype=np.float32)
    res_z, dz, n0 = (np.float64(np.float32(v)) for v in (res_z, dz, n0))
    factor = np.float32((2 * np.pi * res_z / n0) ** 2 * dz)
    return factor * n * (np.float32(2) * np.float32(n0) + n)
