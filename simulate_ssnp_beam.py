"""
Gaussian beam through a weakly scattering bead, split-step non-paraxial.

Drives the single-slice operators of the ``ssnp`` package over a stack of
axial slices: each slice diffracts the forward/backward pair in the
spatial-frequency domain and then applies the scattering term of the
local refractive-index perturbation in real space.

Physical model
--------------
* Source   : Gaussian beam at its waist, lambda = 532 nm in vacuum
* Medium   : water background, n0 = 1.33
* Sample   : sphere of index contrast dn centered in the volume

Units
-----
The resolution triple is the pixel pitch in wavelengths of the background
medium, res = (dx, dy, dz) * n0 / lambda, and the slice thickness passed to
the operators is in units of the axial pitch.

Usage
-----
    python simulate_ssnp_beam.py --N 128 --num_slices 96 --output ssnp_demo.png
"""

import argparse

import numpy as np

from ssnp import c_gamma, diffract, infer_grid_shape, make_grid, scatter_factor


# ===========================================================================
#  Physical constants & system parameters
# ===========================================================================
WAVELENGTH = 532e-9           # vacuum wavelength 532 nm
N0 = 1.33                     # background index (water)
PIXEL = 100e-9                # transverse and axial sampling pitch 100 nm
BEAD_RADIUS = 2e-6            # sphere radius 2 um
BEAD_DN = 0.05                # index contrast of the sphere
BEAM_WAIST = 3e-6             # Gaussian waist 3 um


def resolution(pixel=PIXEL, wavelength=WAVELENGTH, n0=N0):
    """Resolution triple (res_x, res_y, res_z) in medium wavelengths."""
    r = pixel * n0 / wavelength
    return np.array([r, r, r], dtype=np.float32)


# ===========================================================================
#  Source & sample
# ===========================================================================

def gaussian_beam(X, Y, w0):
    """Initial Gaussian beam field at z = 0.

    U(rho) = exp(-rho^2 / w0^2)

    (unit peak amplitude, no curvature at the waist)
    """
    rho2 = X ** 2 + Y ** 2
    return np.exp(-rho2 / w0 ** 2)


def spherical_bead(X, Y, z, radius=BEAD_RADIUS, dn=BEAD_DN):
    """Refractive-index perturbation of a sphere centered at the origin.

    Parameters
    ----------
    X, Y : ndarray (N, N)
        Transverse coordinates (m).
    z : ndarray (Nz,)
        Axial slice positions (m).
    radius : float
        Sphere radius (m).
    dn : float
        Index contrast inside the sphere.

    Returns
    -------
    n : ndarray (Nz, N, N), float32
        Index deviation from the background, one map per slice.
    """
    rho2 = X ** 2 + Y ** 2
    inside = rho2[np.newaxis, :, :] + z[:, np.newaxis, np.newaxis] ** 2 <= radius ** 2
    return np.where(inside, dn, 0.0).astype(np.float32)


# ===========================================================================
#  Core simulation
# ===========================================================================

def initial_fields(u0, res):
    """Forward/backward spectra of a purely forward-travelling field.

    uf = FFT(u0),  ub = i kz uf  with  kz = 2 pi res_z gamma

    Parameters
    ----------
    u0 : ndarray (N, M)
        Complex field in real space.
    res : sequence of float
        Resolution triple.

    Returns
    -------
    uf, ub : ndarray (N, M), complex128
        Spectra in FFT ordering.
    """
    kz = 2 * np.pi * np.float64(res[2]) * c_gamma(res, u0.shape).reshape(u0.shape)
    uf = np.fft.fft2(u0.astype(np.complex128))
    ub = 1j * kz * uf
    return uf, ub


def propagate_through_sample(u0, n_stack, res, dz=1.0, n0=N0):
    """Split-step non-paraxial propagation through a stack of index slices.

    Parameters
    ----------
    u0 : ndarray (N, M)
        Initial complex field in real space.  (N, M) must be the layout
        ``diffract`` infers for N * M samples, e.g. any square grid.
    n_stack : ndarray (Nz, N, M)
        Index deviation from ``n0`` for every slice.
    res : sequence of float
        Resolution triple.
    dz : float
        Slice thickness in units of the axial pitch.
    n0 : float
        Background refractive index.

    Returns
    -------
    u : ndarray (N, M)
        Complex field after the last slice.
    ud : ndarray (N, M)
        Its axial derivative.

    Raises
    ------
    ValueError
        If ``u0.shape`` differs from ``infer_grid_shape(u0.size)``.
    """
    shape = u0.shape
    if infer_grid_shape(u0.size) != shape:
        raise ValueError(
            f"field shape {shape} does not match the {infer_grid_shape(u0.size)} "
            f"layout diffract uses for {u0.size} samples"
        )
    uf, ub = initial_fields(u0, res)

    for n_slice in n_stack:
        # Diffract one slice in frequency space
        uf, ub = diffract(uf.reshape(1, -1), ub.reshape(1, -1), res, dz)
        u = np.fft.ifft2(uf.reshape(shape))
        ud = np.fft.ifft2(ub.reshape(shape))
        # Scatter from the slice's index perturbation
        ud = ud - scatter_factor(n_slice, res[2], dz, n0) * u
        uf = np.fft.fft2(u)
        ub = np.fft.fft2(ud)

    return np.fft.ifft2(uf), np.fft.ifft2(ub)


def simulate_bead(N=128, num_slices=96, pixel=PIXEL, wavelength=WAVELENGTH,
                  n0=N0, radius=BEAD_RADIUS, dn=BEAD_DN, w0=BEAM_WAIST):
    """Run one Gaussian-beam-through-bead simulation.

    Returns
    -------
    result : dict with keys
        'input_intensity'  : (N, N) intensity of the source field
        'output_intensity' : (N, N) intensity after the last slice
        'index_xz'         : (num_slices, N) central cut through the sample
        'params'           : dict of simulation parameters
    """
    res = resolution(pixel, wavelength, n0)
    X, Y = make_grid(N, pixel)
    z = (np.arange(num_slices) - num_slices / 2) * pixel

    u0 = gaussian_beam(X, Y, w0)
    n_stack = spherical_bead(X, Y, z, radius, dn)
    u, _ = propagate_through_sample(u0, n_stack, res, dz=1.0, n0=n0)

    I_in = np.abs(u0) ** 2
    I_out = np.abs(u) ** 2
    params = {
        'N': N,
        'num_slices': num_slices,
        'pixel': pixel,
        'wavelength': wavelength,
        'n0': n0,
        'radius': radius,
        'dn': dn,
        'w0': w0,
        'res': res,
        'power_in': I_in.sum(),
        'power_out': I_out.sum(),
    }
    return {
        'input_intensity': I_in,
        'output_intensity': I_out,
        'index_xz': n_stack[:, N // 2, :],
        'params': params,
    }


# ===========================================================================
#  CLI
# ===========================================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Propagate a Gaussian beam through a spherical bead with SSNP.',
    )
    parser.add_argument('--N', type=int, default=128,
                        help='Grid size (pixels)')
    parser.add_argument('--num_slices', type=int, default=96,
                        help='Number of axial slices')
    parser.add_argument('--pixel', type=float, default=PIXEL,
                        help='Sampling pitch (m)')
    parser.add_argument('--wavelength', type=float, default=WAVELENGTH,
                        help='Vacuum wavelength (m)')
    parser.add_argument('--n0', type=float, default=N0,
                        help='Background refractive index')
    parser.add_argument('--radius', type=float, default=BEAD_RADIUS,
                        help='Bead radius (m)')
    parser.add_argument('--dn', type=float, default=BEAD_DN,
                        help='Bead index contrast')
    parser.add_argument('--w0', type=float, default=BEAM_WAIST,
                        help='Gaussian beam waist (m)')
    parser.add_argument('--output', type=str, default='ssnp_demo.png',
                        help='Output figure path')
    return parser.parse_args(argv)


def main():
    """Run a single demonstration simulation and plot results."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    args = parse_args()

    print("=" * 60)
    print("SSNP Gaussian Beam / Bead Simulation")
    print("=" * 60)

    result = simulate_bead(
        N=args.N, num_slices=args.num_slices, pixel=args.pixel,
        wavelength=args.wavelength, n0=args.n0, radius=args.radius,
        dn=args.dn, w0=args.w0,
    )
    p = result['params']

    print(f"  Grid size            : {p['N']} x {p['N']}")
    print(f"  Slices               : {p['num_slices']}")
    print(f"  Pixel pitch          : {p['pixel']*1e9:.1f} nm")
    print(f"  Wavelength (vacuum)  : {p['wavelength']*1e9:.1f} nm")
    print(f"  Background index     : {p['n0']:.3f}")
    print(f"  Resolution (lambda)  : {p['res'][0]:.4f}")
    print(f"  Bead radius          : {p['radius']*1e6:.2f} um")
    print(f"  Bead contrast        : {p['dn']:.3f}")
    print(f"  Power in / out       : {p['power_in']:.4e} / {p['power_out']:.4e}")
    print("=" * 60)

    # --- Plot ---
    half = p['N'] * p['pixel'] / 2 * 1e6
    depth = p['num_slices'] * p['pixel'] / 2 * 1e6
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    im0 = axes[0].imshow(result['input_intensity'], cmap='hot',
                         extent=[-half, half, -half, half])
    axes[0].set_title('Input Intensity')
    axes[0].set_xlabel('x (um)')
    axes[0].set_ylabel('y (um)')
    plt.colorbar(im0, ax=axes[0], shrink=0.8)

    im1 = axes[1].imshow(result['output_intensity'], cmap='hot',
                         extent=[-half, half, -half, half])
    axes[1].set_title('Output Intensity')
    axes[1].set_xlabel('x (um)')
    axes[1].set_ylabel('y (um)')
    plt.colorbar(im1, ax=axes[1], shrink=0.8)

    im2 = axes[2].imshow(result['index_xz'], cmap='viridis',
                         extent=[-half, half, depth, -depth])
    axes[2].set_title('Index Perturbation (xz)')
    axes[2].set_xlabel('x (um)')
    axes[2].set_ylabel('z (um)')
    plt.colorbar(im2, ax=axes[2], shrink=0.8)

    plt.tight_layout()
    plt.savefig(args.output, dpi=150)
    print(f"Figure saved to {args.output}")


if __name__ == '__main__':
    main()
