"""
Chebyshev-Bessel Time Evolution
===============================

U(t) = exp(-i H t) expanded in Chebyshev polynomials of H~ = H / E_max:

  U(direction * t) |psi> = J_0(tau) |psi>
                         + 2 sum_{m>=1} (-i direction)^m J_m(tau) T_m(H~) |psi>

with tau = t * E_max and J_m the Bessel function of the first kind.

The phase (-i direction)^m cycles with period 4, so each order is routed
to one of four labels:

  label 1: +1    label 2: -1    label 3: -i    label 4: +i

evolvex carries the commutator [X, T_m(H~)] |psi> alongside T_m(H~) |psi>:

  [X, T_m] = 2 [X, H~] T_{m-1} + 2 H~ [X, T_{m-1}] - [X, T_{m-2}]

and returns [X, U(t)] |psi> (direction = +1) or [U(-t), X] |psi>
(direction = -1). The extra sign of the backward commutator shifts the
label table by one order relative to evolve.

The series is truncated once |J_m(tau)| < 1e-15.

Reference:
  Z. Fan, A. Uppstu, T. Siro, A. Harju, Comput. Phys. Commun. 185, 28 (2014)
"""

import warnings
from scipy.special import jv

BESSEL_TOLERANCE = 1.0e-15
MAX_ITERATIONS = 1000000

# label -> phase applied to 2 J_m(tau) T_m(H~) |psi>
LABEL_FACTORS = {1: 1.0, 2: -1.0, 3: -1.0j, 4: 1.0j}


class BesselTruncationWarning(RuntimeWarning):
    """Evolution series hit the iteration cap before the Bessel tolerance."""


class EvolutionNotConvergedError(RuntimeError):
    """Raised instead of BesselTruncationWarning in strict mode."""


def _check_direction(direction: int):
    if direction not in (1, -1):
        raise ValueError(f"direction must be +1 or -1, got {direction}")


def evolve_label(m: int, direction: int) -> int:
    """Accumulation label of order m for the plain expansion."""
    r = m % 4
    if r == 0:
        return 1
    if r == 2:
        return 2
    if (r == 1 and direction == 1) or (r == 3 and direction == -1):
        return 3
    return 4


def evolvex_label(m: int, direction: int) -> int:
    """Accumulation label of order m for the commutator expansion."""
    r = m % 4
    if r == 1:
        return 3
    if r == 3:
        return 4
    if (r == 0 and direction == 1) or (r == 2 and direction == -1):
        return 1
    return 2


def _not_converged(name: str, tau: float, max_iterations: int, strict: bool):
    message = (f"{name}: |J_m({tau:g})| did not drop below {BESSEL_TOLERANCE:g} "
               f"within {max_iterations} orders; result is truncated")
    if strict:
        raise EvolutionNotConvergedError(message)
    warnings.warn(message, BesselTruncationWarning, stacklevel=3)


def evolve(H, direction: int, time_step_scaled: float, state,
           max_iterations: int = MAX_ITERATIONS, strict: bool = False):
    """
    U(direction * t) |state> with tau = t * E_max.

    Args:
        H: SparseHamiltonian (scaled)
        direction: +1 forward, -1 backward
        time_step_scaled: tau
        state: Input state (not modified)
        max_iterations: Cap on the recursion order
        strict: Raise EvolutionNotConvergedError when the cap is hit

    Returns:
        Evolved state (new array)
    """
    _check_direction(direction)
    tau = float(time_step_scaled)

    state_0 = state
    state_1 = H.apply(state_0)

    # orders 0 and 1
    bessel_0 = jv(0, tau)
    bessel_1 = jv(1, tau)
    result = bessel_0 * state_0 + LABEL_FACTORS[evolve_label(1, direction)] * (2.0 * bessel_1) * state_1

    m = 2
    while True:
        bessel_m = jv(m, tau)
        if abs(bessel_m) < BESSEL_TOLERANCE:
            break
        if m > max_iterations:
            _not_converged('evolve', tau, max_iterations, strict)
            break

        state_2 = H.kernel_polynomial(state_0, state_1)
        result += LABEL_FACTORS[evolve_label(m, direction)] * (2.0 * bessel_m) * state_2

        state_0, state_1 = state_1, state_2
        m += 1

    return result


def evolvex(H, direction: int, time_step_scaled: float, state,
            max_iterations: int = MAX_ITERATIONS, strict: bool = False):
    """
    [X, U(t)] |state> for direction = +1, [U(-t), X] |state> for -1.

    Args:
        H: SparseHamiltonian (scaled)
        direction: +1 forward, -1 backward
        time_step_scaled: tau
        state: Input state (not modified)
        max_iterations: Cap on the recursion order
        strict: Raise EvolutionNotConvergedError when the cap is hit

    Returns:
        Commutator state (new array)
    """
    _check_direction(direction)
    tau = float(time_step_scaled)
    xp = H.xp

    # [X, T_0] |psi> = 0,  [X, T_1] |psi> = [X, H~] |psi>
    state_0 = state
    state_0x = xp.zeros_like(state)
    state_1 = H.apply(state_0)
    state_1x = H.apply_commutator(state_0)

    bessel_1 = jv(1, tau)
    result = LABEL_FACTORS[evolvex_label(1, direction)] * (2.0 * bessel_1) * state_1x

    m = 2
    while True:
        bessel_m = jv(m, tau)
        if abs(bessel_m) < BESSEL_TOLERANCE:
            break
        if m > max_iterations:
            _not_converged('evolvex', tau, max_iterations, strict)
            break

        state_2 = H.kernel_polynomial(state_0, state_1)
        state_2x = (2.0 * H.apply_commutator(state_1)
                    + H.kernel_polynomial(state_0x, state_1x))
        result += LABEL_FACTORS[evolvex_label(m, direction)] * (2.0 * bessel_m) * state_2x

        state_0, state_1 = state_1, state_2
        state_0x, state_1x = state_1x, state_2x
        m += 1

    return result
