"""
Chebyshev Moments, Damping and Summation
========================================

Kernel Polynomial Method building blocks.

  mu_m  = <left| T_m(H~) |right>           (three-term recursion)
  g_k   = Jackson kernel factors
  f(x)  = 2/(pi V) [g_0 mu_0 + 2 sum_m g_m mu_m T_m(x)] / (sqrt(1-x^2) E_max)

T_0 = 1, T_1 = x, T_m = 2x T_{m-1} - T_{m-2}

Reference:
  Z. Fan, A. Uppstu, T. Siro, A. Harju, Comput. Phys. Commun. 185, 28 (2014)
"""

import numpy as np


def find_moments(H, state_right, state_left, number_of_moments: int) -> np.ndarray:
    """
    Chebyshev moments mu_m = <left| T_m(H~) |right>, m = 0..M-1.

    Args:
        H: SparseHamiltonian (scaled)
        state_right: State the polynomials act on
        state_left: Reference state (conjugated in the inner product)
        number_of_moments: M

    Returns:
        Complex moments on the host, shape (M,)
    """
    M = int(number_of_moments)
    if M < 1:
        raise ValueError(f"number_of_moments must be >= 1, got {M}")

    xp = H.xp
    moments = np.zeros(M, dtype=np.complex128)

    state_0 = state_right
    moments[0] = complex(xp.vdot(state_left, state_0))
    if M == 1:
        return moments

    state_1 = H.apply(state_0)
    moments[1] = complex(xp.vdot(state_left, state_1))

    for m in range(2, M):
        state_2 = H.kernel_polynomial(state_0, state_1)
        moments[m] = complex(xp.vdot(state_left, state_2))
        # rotate roles: (m-2, m-1) <- (m-1, m)
        state_0, state_1 = state_1, state_2

    return moments


def jackson_kernel(number_of_moments: int) -> np.ndarray:
    """
    Jackson damping factors g_k, k = 0..M-1.

    g_k = (1 - k/(M+1)) cos(k pi/(M+1)) + sin(k pi/(M+1)) cot(pi/(M+1)) / (M+1)
    """
    M = int(number_of_moments)
    if M < 1:
        raise ValueError(f"number_of_moments must be >= 1, got {M}")
    a = 1.0 / (M + 1.0)
    k = np.arange(M, dtype=np.float64)
    return (1.0 - k * a) * np.cos(np.pi * k * a) + np.sin(np.pi * k * a) * a / np.tan(np.pi * a)


def apply_damping(moments: np.ndarray) -> np.ndarray:
    """Multiply moment k by g_k (real and imaginary parts alike)."""
    moments = np.asarray(moments)
    return moments * jackson_kernel(moments.size)


def chebyshev_summation(moments: np.ndarray,
                        energies: np.ndarray,
                        energy_max: float,
                        volume: float) -> np.ndarray:
    """
    Reconstruct a correlation function on the energy grid.

    Only the real part of the moments contributes. The grid must lie
    strictly inside (-E_max, E_max).

    Args:
        moments: Damped moments, shape (M,)
        energies: Energy grid (unscaled)
        energy_max: Spectral scaling factor
        volume: System volume

    Returns:
        Real curve, shape (len(energies),)
    """
    mu = np.real(np.asarray(moments))
    x = np.asarray(energies, dtype=np.float64) / energy_max

    chebyshev_0 = np.ones_like(x)
    chebyshev_1 = x
    total = mu[0] * chebyshev_0
    if mu.size > 1:
        total = total + 2.0 * mu[1] * chebyshev_1

    for m in range(2, mu.size):
        chebyshev_2 = 2.0 * x * chebyshev_1 - chebyshev_0
        total = total + 2.0 * mu[m] * chebyshev_2
        chebyshev_0, chebyshev_1 = chebyshev_1, chebyshev_2

    weight = 1.0 / (np.sqrt(1.0 - x * x) * energy_max)
    return total * weight * 2.0 / (np.pi * volume)
