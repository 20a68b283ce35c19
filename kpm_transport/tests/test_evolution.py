"""
Test Chebyshev-Bessel time evolution
"""

import warnings
import numpy as np
import pytest
from scipy.linalg import expm

from kpm_transport.core.hamiltonian import SparseHamiltonian
from kpm_transport.core.model import create_chain_model
from kpm_transport.solvers.evolution import (
    evolve, evolvex, evolve_label, evolvex_label,
    BesselTruncationWarning, EvolutionNotConvergedError
)


def count_calls(monkeypatch, obj, name):
    """Record every call of obj.name, still delegating to it."""
    calls = []
    original = getattr(obj, name)

    def wrapper(*args, **kwargs):
        calls.append(args)
        return original(*args, **kwargs)

    monkeypatch.setattr(obj, name, wrapper)
    return calls


@pytest.fixture
def dense_setup(random_hermitian):
    H_dense, x, energy_max = random_hermitian
    return H_dense, x, energy_max, SparseHamiltonian.from_matrices(H_dense, x, energy_max)


class TestLabels:
    """Phase routing of each order."""

    def test_evolve_labels(self):
        assert [evolve_label(m, 1) for m in range(8)] == [1, 3, 2, 4, 1, 3, 2, 4]
        assert [evolve_label(m, -1) for m in range(8)] == [1, 4, 2, 3, 1, 4, 2, 3]

    def test_evolvex_labels(self):
        assert [evolvex_label(m, 1) for m in range(8)] == [1, 3, 2, 4, 1, 3, 2, 4]
        assert [evolvex_label(m, -1) for m in range(8)] == [2, 3, 1, 4, 2, 3, 1, 4]


class TestEvolve:
    """Plain evolution U(t)|psi>."""

    @pytest.mark.parametrize("t", [0.3, 2.0, 15.0])
    def test_matches_expm(self, dense_setup, random_state, t):
        H_dense, _, energy_max, H = dense_setup
        forward = evolve(H, 1, t * energy_max, random_state)
        backward = evolve(H, -1, t * energy_max, random_state)
        np.testing.assert_allclose(forward, expm(-1j * H_dense * t) @ random_state, atol=1e-10)
        np.testing.assert_allclose(backward, expm(1j * H_dense * t) @ random_state, atol=1e-10)

    def test_round_trip(self, rng):
        model = create_chain_model(40, energy_max=2.5)
        H = SparseHamiltonian.from_model(model, use_gpu=False)
        psi = model.initialize_state()
        tau = 25.0
        back = evolve(H, -1, tau, evolve(H, 1, tau, psi))
        np.testing.assert_allclose(back, psi, atol=1e-10)

    @pytest.mark.parametrize("tau", [0.1, 1.0, 10.0, 80.0])
    def test_norm_preserved(self, dense_setup, random_state, tau):
        *_, H = dense_setup
        out = evolve(H, 1, tau, random_state)
        assert np.linalg.norm(out) == pytest.approx(1.0, abs=1e-10)

    def test_zero_time_is_identity(self, dense_setup, random_state, monkeypatch):
        *_, H = dense_setup
        calls = count_calls(monkeypatch, H, "kernel_polynomial")
        out = evolve(H, 1, 0.0, random_state)
        np.testing.assert_allclose(out, random_state, atol=1e-15)
        assert out is not random_state
        # J_2(0) = 0 ends the series before any recursion step
        assert calls == []

    def test_input_not_modified(self, dense_setup, random_state):
        *_, H = dense_setup
        before = random_state.copy()
        evolve(H, 1, 3.0, random_state)
        np.testing.assert_array_equal(random_state, before)

    def test_invalid_direction(self, dense_setup, random_state):
        *_, H = dense_setup
        with pytest.raises(ValueError):
            evolve(H, 0, 1.0, random_state)


class TestEvolvex:
    """Commutator evolution [X, U(t)]|psi>."""

    @pytest.mark.parametrize("t", [0.5, 4.0])
    def test_forward_matches_dense(self, dense_setup, random_state, t):
        H_dense, x, energy_max, H = dense_setup
        U = expm(-1j * H_dense * t)
        X = np.diag(x)
        expected = (X @ U - U @ X) @ random_state
        out = evolvex(H, 1, t * energy_max, random_state)
        np.testing.assert_allclose(out, expected, atol=1e-10)

    @pytest.mark.parametrize("t", [0.5, 4.0])
    def test_backward_matches_dense(self, dense_setup, random_state, t):
        H_dense, x, energy_max, H = dense_setup
        U_back = expm(1j * H_dense * t)
        X = np.diag(x)
        expected = (U_back @ X - X @ U_back) @ random_state
        out = evolvex(H, -1, t * energy_max, random_state)
        np.testing.assert_allclose(out, expected, atol=1e-10)

    def test_zero_time_is_zero(self, dense_setup, random_state, monkeypatch):
        *_, H = dense_setup
        calls = count_calls(monkeypatch, H, "kernel_polynomial")
        out = evolvex(H, 1, 0.0, random_state)
        np.testing.assert_allclose(out, 0.0, atol=1e-15)
        assert calls == []

    def test_constant_position_gives_zero(self, random_hermitian, random_state):
        H_dense, _, energy_max = random_hermitian
        H = SparseHamiltonian.from_matrices(H_dense, np.full(6, 3.0), energy_max)
        out = evolvex(H, 1, 5.0, random_state)
        np.testing.assert_allclose(out, 0.0, atol=1e-12)


class TestTruncation:
    """Iteration cap reporting."""

    def test_cap_warns(self, dense_setup, random_state):
        *_, H = dense_setup
        with pytest.warns(BesselTruncationWarning):
            evolve(H, 1, 30.0, random_state, max_iterations=5)
        with pytest.warns(BesselTruncationWarning):
            evolvex(H, 1, 30.0, random_state, max_iterations=5)

    def test_cap_strict_raises(self, dense_setup, random_state):
        *_, H = dense_setup
        with pytest.raises(EvolutionNotConvergedError):
            evolve(H, -1, 30.0, random_state, max_iterations=5, strict=True)
        with pytest.raises(EvolutionNotConvergedError):
            evolvex(H, -1, 30.0, random_state, max_iterations=5, strict=True)

    def test_no_warning_when_converged(self, dense_setup, random_state):
        *_, H = dense_setup
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            evolve(H, 1, 30.0, random_state)
