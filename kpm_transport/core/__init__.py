"""
KPM Transport Core Components
=============================

Modules:
  - model: Lattice model, input directory loader, chain factory
  - hamiltonian: Scaled sparse Hamiltonian, commutator and current
"""

from .model import (
    Model,
    ModelParameters,
    ModelError,
    parse_parameters,
    create_chain_model,
)

from .hamiltonian import (
    SparseHamiltonian,
    HAS_CUPY,
)


__all__ = [
    'Model',
    'ModelParameters',
    'ModelError',
    'parse_parameters',
    'create_chain_model',
    'SparseHamiltonian',
    'HAS_CUPY',
]
