"""
KPM Transport
=============

Linear-scaling quantum transport for tight-binding lattices using the
Kernel Polynomial Method and a Chebyshev-Bessel expansion of the
time-evolution operator.

Observables:
  DOS  density of states
  VAC  velocity autocorrelation
  MSD  mean-square displacement

Structure:
  kpm_transport/
  ├── core/
  │   ├── model.py          # Lattice model + input loader
  │   └── hamiltonian.py    # Scaled sparse H, [X, H], current
  ├── solvers/
  │   ├── chebyshev.py      # Moments, damping, summation
  │   ├── evolution.py      # evolve / evolvex
  │   ├── correlation.py    # DOS, VAC, MSD drivers
  │   └── transport.py      # Multi-vector runner + output files
  ├── cli/                  # Command-line interface
  └── tests/

Reference:
  Z. Fan, A. Uppstu, T. Siro, A. Harju, Comput. Phys. Commun. 185, 28 (2014)
"""

__version__ = "0.1.0"

# =============================================================================
# Core Components
# =============================================================================

from .core.model import (
    Model,
    ModelParameters,
    ModelError,
    create_chain_model,
)

from .core.hamiltonian import (
    SparseHamiltonian,
    HAS_CUPY,
)

# =============================================================================
# Solvers
# =============================================================================

from .solvers.chebyshev import (
    find_moments,
    jackson_kernel,
    apply_damping,
    chebyshev_summation,
)

from .solvers.evolution import (
    evolve,
    evolvex,
    BesselTruncationWarning,
    EvolutionNotConvergedError,
)

from .solvers.correlation import (
    CorrelationResult,
    find_dos,
    find_vac,
    find_msd,
)

from .solvers.transport import (
    TransportSolver,
    SolverConfig,
    TransportResult,
    OutputError,
)


__all__ = [
    '__version__',

    # Core
    'Model',
    'ModelParameters',
    'ModelError',
    'create_chain_model',
    'SparseHamiltonian',
    'HAS_CUPY',

    # Chebyshev
    'find_moments',
    'jackson_kernel',
    'apply_damping',
    'chebyshev_summation',

    # Evolution
    'evolve',
    'evolvex',
    'BesselTruncationWarning',
    'EvolutionNotConvergedError',

    # Drivers
    'CorrelationResult',
    'find_dos',
    'find_vac',
    'find_msd',

    # Runner
    'TransportSolver',
    'SolverConfig',
    'TransportResult',
    'OutputError',
]
