"""
Split-step non-paraxial (SSNP) diffraction step.

Advances a forward/backward field pair, given in the spatial-frequency
domain, through a homogeneous slice of thickness dz.  Each frequency
sample is multiplied by the 2x2 transfer matrix

    P = eva * [[cos(kz dz),        sin(kz dz) / kz],
               [-sin(kz dz) * kz,  cos(kz dz)     ]]

with kz = 2 pi res_z gamma, the analytic solution of the coupled
first-order system for the field and its axial derivative.
"""

import logging

import numpy as np

from .utils import c_gamma, infer_grid_shape

logger = logging.getLogger(__name__)

DIVISION_EPS = 1e-8      # keeps sin(kz dz) / kz finite at kz == 0
EVANESCENT_CENTER = 0.2  # direction cosine at which the damping exponent vanishes
EVANESCENT_SLOPE = 5.0


def diffract(uf, ub, res, dz):
    """Propagate a field pair through one slice of thickness dz.

    Parameters
    ----------
    uf : array_like, shape (B, size)
        Forward component, a batch of row-major flattened 2-D spectra.
    ub : array_like, shape (B, size)
        Backward component, same shape as ``uf``.
    res : sequence of float
        Resolution triple (res_x, res_y, res_z).
    dz : float
        Slice thickness.

    Returns
    -------
    uf_new, ub_new : ndarray, shape (B, size), complex128
        Propagated forward and backward components.

    Raises
    ------
    ValueError
        If ``uf`` and ``ub`` are not 2-D arrays of identical shape, or if
        ``res`` does not hold three values.
    """
    uf = np.asarray(uf, dtype=np.complex128)
    ub = np.asarray(ub, dtype=np.complex128)
    if uf.ndim != 2 or ub.ndim != 2:
        raise ValueError(
            f"uf and ub must be 2-D (batch, size) arrays, got {uf.ndim}-D and {ub.ndim}-D"
        )
    if uf.shape != ub.shape:
        raise ValueError(f"uf and ub shapes differ: {uf.shape} vs {ub.shape}")
    res = np.asarray(res, dtype=np.float32)
    if res.shape != (3,):
        raise ValueError(f"res must hold exactly 3 values, got shape {res.shape}")
    dz = np.float32(dz)

    size = uf.shape[1]
    shape = infer_grid_shape(size)
    logger.debug("diffract: %d samples laid out as %s, batch %d", size, shape, uf.shape[0])

    cgamma = c_gamma(res, shape)

    # single-precision kz and damping, widened for the trig below
    kz = (np.complex64(2 * np.pi * np.float64(res[2])) * cgamma).astype(np.complex128)
    eva = np.exp(
        np.minimum(
            np.abs(cgamma - np.complex64(EVANESCENT_CENTER)) * np.float32(EVANESCENT_SLOPE),
            np.float32(0.0),
        )
    ).astype(np.complex128)

    kz_dz = kz * np.float64(dz)
    cos_kz = np.cos(kz_dz)
    sin_kz = np.sin(kz_dz)
    p00 = cos_kz * eva
    p01 = sin_kz / (kz + DIVISION_EPS) * eva
    p10 = -sin_kz * kz * eva
    p11 = cos_kz * eva

    # (1, size) coefficients broadcast over the batch axis
    uf_new = p00 * uf + p01 * ub
    ub_new = p10 * uf + p11 * ub
    return uf_new, ub_new
