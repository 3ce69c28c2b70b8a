import numpy as np
import numpy.testing as npt
import pytest

from simulate_ssnp_beam import (
    gaussian_beam,
    initial_fields,
    parse_args,
    propagate_through_sample,
    resolution,
    simulate_bead,
    spherical_bead,
)
from ssnp import c_gamma, make_grid


def test_resolution_in_medium_wavelengths():
    res = resolution(pixel=100e-9, wavelength=500e-9, n0=1.5)
    npt.assert_allclose(res, [0.3, 0.3, 0.3], rtol=1e-6)
    assert res.dtype == np.float32


def test_spherical_bead_stack():
    X, Y = make_grid(16, 0.1)
    z = (np.arange(10) - 5) * 0.1
    n = spherical_bead(X, Y, z, radius=0.35, dn=0.02)
    assert n.shape == (10, 16, 16)
    assert n.dtype == np.float32
    assert n[5, 8, 8] == np.float32(0.02)
    assert n[0, 8, 8] == 0.0
    assert n[5, 0, 0] == 0.0


def test_initial_fields_forward_wave():
    X, Y = make_grid(16, 0.1)
    u0 = gaussian_beam(X, Y, 0.4)
    res = [0.25, 0.25, 0.25]
    uf, ub = initial_fields(u0, res)
    npt.assert_allclose(uf, np.fft.fft2(u0))
    kz = 2 * np.pi * 0.25 * c_gamma(res, (16, 16)).reshape(16, 16)
    npt.assert_allclose(ub, 1j * kz * uf, rtol=1e-6)


def test_free_space_propagation_conserves_power():
    X, Y = make_grid(32, 100e-9)
    u0 = gaussian_beam(X, Y, 0.8e-6)
    n_stack = np.zeros((6, 32, 32), dtype=np.float32)
    res = resolution()
    u, ud = propagate_through_sample(u0, n_stack, res)
    assert u.shape == ud.shape == (32, 32)
    npt.assert_allclose(np.sum(np.abs(u) ** 2), np.sum(np.abs(u0) ** 2), rtol=1e-4)


def test_free_space_zero_thickness_returns_source():
    X, Y = make_grid(16, 100e-9)
    u0 = gaussian_beam(X, Y, 0.5e-6)
    n_stack = np.full((3, 16, 16), 0.05, dtype=np.float32)
    u, _ = propagate_through_sample(u0, n_stack, resolution(), dz=0.0)
    npt.assert_allclose(u, u0, atol=1e-12)


def test_simulate_bead_smoke():
    result = simulate_bead(N=32, num_slices=8, radius=0.4e-6, w0=0.8e-6)
    assert result['input_intensity'].shape == (32, 32)
    assert result['output_intensity'].shape == (32, 32)
    assert result['index_xz'].shape == (8, 32)
    assert np.all(np.isfinite(result['output_intensity']))
    assert result['params']['power_out'] > 0


def test_parse_args_defaults():
    args = parse_args([])
    assert args.N == 128
    assert args.num_slices == 96
    assert args.output == 'ssnp_demo.png'


def test_rejects_field_layout_diffract_cannot_infer():
    # 64 samples are laid out as (8, 8) by diffract, not (4, 16)
    u0 = np.ones((4, 16), dtype=np.complex128)
    n_stack = np.zeros((2, 4, 16), dtype=np.float32)
    with pytest.raises(ValueError, match="does not match"):
        propagate_through_sample(u0, n_stack, resolution())


def test_accepts_non_square_field_with_inferred_layout():
    # 6 samples are laid out as (2, 3), so a (2, 3) field is consistent
    u0 = np.arange(6, dtype=np.complex128).reshape(2, 3)
    n_stack = np.zeros((1, 2, 3), dtype=np.float32)
    u, ud = propagate_through_sample(u0, n_stack, resolution(), dz=0.0)
    npt.assert_allclose(u, u0, atol=1e-12)
    assert ud.shape == (2, 3)
