"""
Grid construction for the split-step non-paraxial propagator.

Frequency axes are built in single precision and stay in the unshifted
(FFT) ordering, so the grids line up with ``np.fft.fft2`` output without
any ``fftshift``.
"""

import numpy as np

SQRT_EPS = 1e-8  # floor under the direction-cosine square root


def make_grid(N, dx):
    """Create centered coordinate grids.

    Parameters
    ----------
    N : int
        Number of grid points along each axis.
    dx : float
        Grid spacing.

    Returns
    -------
    X, Y : ndarray
        2-D coordinate arrays centered at zero.
    """
    x = (np.arange(N) - N / 2) * dx
    X, Y = np.meshgrid(x, x)
    return X, Y


def near_0(size):
    """Centered, wrapped index ramp in [-0.5, 0.5).

    value[i] = frac(i / size + 0.5) - 0.5

    Index 0 maps to 0 and the upper half of the axis wraps to negative
    values, as in a discrete-Fourier frequency ordering.

    Parameters
    ----------
    size : int
        Number of samples, must be positive (not checked).

    Returns
    -------
    ramp : ndarray, shape (size,), float32
    """
    i = np.arange(size, dtype=np.float32)
    return np.fmod(i / np.float32(size) + np.float32(0.5), np.float32(1.0)) - np.float32(0.5)


def infer_grid_shape(size):
    """Near-square factorization (size_alpha, size_beta) of a flattened grid.

    Both dimensions start at floor(sqrt(size)); the second grows until the
    product reaches ``size``, and whenever it overshoots the first grows
    by one and the second is reset to ``size // first``.
    """
    size_alpha = size_beta = int(np.sqrt(size))
    while size_alpha * size_beta != size:
        size_beta += 1
        if size_alpha * size_beta > size:
            size_alpha += 1
            size_beta = size // size_alpha
    return size_alpha, size_beta


def c_gamma(res, shape):
    """Axial direction cosines for every transverse spatial frequency.

    gamma = sqrt(max(1 - (alpha^2 + beta^2), SQRT_EPS))

    The alpha axis (length ``shape[0]``) is normalized by ``res[1]`` and the
    beta axis (length ``shape[1]``) by ``res[0]``.

    Parameters
    ----------
    res : sequence of float
        Resolution triple (res_x, res_y, res_z); only the first two are used.
    shape : sequence of int
        (size_alpha, size_beta), both positive (not checked).

    Returns
    -------
    cgamma : ndarray, shape (1, size_alpha * size_beta), complex64
        Row-major flattened grid with a leading singleton batch axis so it
        broadcasts against a batch of fields.
    """
    res = np.asarray(res, dtype=np.float32)
    if res.size < 2:
        raise ValueError(f"res must hold at least 2 values, got {res.size}")
    if len(shape) != 2:
        raise ValueError(f"shape must hold exactly 2 values, got {len(shape)}")
    size_alpha, size_beta = (int(s) for s in shape)

    c_alpha = near_0(size_alpha) / res[1]
    c_beta = near_0(size_beta) / res[0]

    # squares summed in double, then rounded once to single precision
    c_alpha = c_alpha.astype(np.float64)
    c_beta = c_beta.astype(np.float64)
    val = (1.0 - (c_alpha[:, np.newaxis] ** 2 + c_beta[np.newaxis, :] ** 2)).astype(np.float32)
    cgamma = np.sqrt(np.maximum(val, np.float32(SQRT_EPS)))
    return cgamma.reshape(1, size_alpha * size_beta).astype(np.complex64)
