"""
Correlation Functions: DOS, VAC, MSD
====================================

Drivers combining the moment engine, Jackson damping, Chebyshev
summation and Chebyshev-Bessel evolution.

  DOS(E)     from <phi| T_m(H~) |phi>
  VAC(E, t)  from <V U(-t) phi| T_m(H~) |U(-t) V phi>
  MSD(E, t)  from <[X, U(t)] phi| T_m(H~) |[X, U(t)] phi>

VAC and MSD states are evolved once per correlation step and reused
for the next step, so each step costs one (or two) evolution calls.
"""

import numpy as np
from typing import Optional, List
from dataclasses import dataclass, field

from .chebyshev import find_moments, apply_damping, chebyshev_summation
from .evolution import evolve, evolvex, MAX_ITERATIONS


@dataclass
class CorrelationResult:
    """One observable for one random vector."""
    name: str
    energies: np.ndarray
    values: np.ndarray                  # (n_time_steps, n_energy_points)
    times: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    def __repr__(self):
        return (f"CorrelationResult({self.name}, rows={self.values.shape[0]}, "
                f"energies={self.values.shape[1]})")


def _curve(model, H, state_right, state_left) -> np.ndarray:
    """Moments -> damping -> summation for one pair of states."""
    moments = find_moments(H, state_right, state_left, model.number_of_moments)
    moments = apply_damping(moments)
    return chebyshev_summation(moments, model.energy, model.energy_max, model.volume)


def find_dos(model, H, random_state) -> CorrelationResult:
    """Density of states from one random vector."""
    state = H.asarray(random_state)
    dos = _curve(model, H, state, state)
    return CorrelationResult(name='dos', energies=model.energy, values=dos[np.newaxis, :])


def find_vac(model, H, random_state,
             max_iterations: int = MAX_ITERATIONS,
             strict: bool = False,
             verbose: bool = False) -> CorrelationResult:
    """
    Velocity autocorrelation at every correlation time step.

    state_left starts as |phi>, state_right as V|phi>; both are evolved
    backward by time_step[m] between rows.
    """
    n_steps = model.number_of_steps_correlation
    vac = np.zeros((n_steps, model.number_of_energy_points))

    state_left = H.asarray(random_state)
    state_right = H.apply_current(state_left)

    for m in range(n_steps):
        state_left_copy = H.apply_current(state_left)
        vac[m] = _curve(model, H, state_right, state_left_copy)

        if m < n_steps - 1:
            time_step_scaled = model.time_step[m] * model.energy_max
            state_left = evolve(H, -1, time_step_scaled, state_left,
                                max_iterations=max_iterations, strict=strict)
            state_right = evolve(H, -1, time_step_scaled, state_right,
                                 max_iterations=max_iterations, strict=strict)

        if verbose:
            print(f"   VAC step {m + 1}/{n_steps}")

    return CorrelationResult(name='vac', energies=model.energy, values=vac,
                             times=model.correlation_times)


def find_msd(model, H, random_state,
             max_iterations: int = MAX_ITERATIONS,
             strict: bool = False,
             verbose: bool = False) -> CorrelationResult:
    """
    Mean-square displacement at every correlation time step.

    Keeps U^m|phi> and [X, U^m]|phi>; one step uses
      [X, U^{m+1}] = [X, U] U^m + U [X, U^m]
    so earlier steps are never recomputed.
    """
    n_steps = model.number_of_steps_correlation
    msd = np.zeros((n_steps, model.number_of_energy_points))

    state = H.asarray(random_state)
    state_x = H.xp.zeros_like(state)

    for m in range(n_steps):
        time_step_scaled = model.time_step[m] * model.energy_max

        state_copy = evolvex(H, 1, time_step_scaled, state,
                             max_iterations=max_iterations, strict=strict)
        state_x = evolve(H, 1, time_step_scaled, state_x,
                         max_iterations=max_iterations, strict=strict)
        state_x += state_copy

        if m < n_steps - 1:
            state = evolve(H, 1, time_step_scaled, state,
                           max_iterations=max_iterations, strict=strict)

        msd[m] = _curve(model, H, state_x, state_x)

        if verbose:
            print(f"   MSD step {m + 1}/{n_steps}")

    times = np.cumsum(model.time_step)
    return CorrelationResult(name='msd', energies=model.energy, values=msd, times=times)


def average_results(results: List[CorrelationResult]) -> Optional[CorrelationResult]:
    """Average curves over random vectors."""
    if not results:
        return None
    values = np.mean([r.values for r in results], axis=0)
    first = results[0]
    return CorrelationResult(name=first.name, energies=first.energies,
                             values=values, times=first.times)
