"""
KPM Transport Solvers
=====================

Modules:
  - chebyshev: Moments, Jackson damping, Chebyshev summation
  - evolution: Chebyshev-Bessel time evolution (evolve, evolvex)
  - correlation: DOS, VAC and MSD drivers
  - transport: Multi-vector runner with file output
"""

from .chebyshev import (
    find_moments,
    jackson_kernel,
    apply_damping,
    chebyshev_summation,
)

from .evolution import (
    evolve,
    evolvex,
    evolve_label,
    evolvex_label,
    BesselTruncationWarning,
    EvolutionNotConvergedError,
    BESSEL_TOLERANCE,
    MAX_ITERATIONS,
)

from .correlation import (
    CorrelationResult,
    find_dos,
    find_vac,
    find_msd,
    average_results,
)

from .transport import (
    TransportSolver,
    SolverConfig,
    TransportResult,
    OutputError,
    append_rows,
    OUTPUT_FILES,
)


__all__ = [
    'find_moments',
    'jackson_kernel',
    'apply_damping',
    'chebyshev_summation',
    'evolve',
    'evolvex',
    'evolve_label',
    'evolvex_label',
    'BesselTruncationWarning',
    'EvolutionNotConvergedError',
    'BESSEL_TOLERANCE',
    'MAX_ITERATIONS',
    'CorrelationResult',
    'find_dos',
    'find_vac',
    'find_msd',
    'average_results',
    'TransportSolver',
    'SolverConfig',
    'TransportResult',
    'OutputError',
    'append_rows',
    'OUTPUT_FILES',
]
