"""
Split-step non-paraxial (SSNP) optical wave propagation.

Single-slice building blocks: the spatial-frequency grid, the diffraction
step acting on a forward/backward field pair, and the per-slice
scattering term of a refractive-index perturbation.
"""

from .propagation import diffract
from .scatter import scatter_factor
from .utils import c_gamma, infer_grid_shape, make_grid, near_0

__all__ = [
    "diffract",
    "scatter_factor",
    "c_gamma",
    "infer_grid_shape",
    "make_grid",
    "near_0",
]
