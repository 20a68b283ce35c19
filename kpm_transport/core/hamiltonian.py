"""
Sparse Hamiltonian for KPM Transport
====================================

Scaled tight-binding Hamiltonian H~ = H / E_max in CSR format.

Operators:
  apply              H~ |psi>
  apply_commutator   [X, H~] |psi>
  apply_current      V |psi>,  V = i[H, X]  (unscaled, velocity units)
  kernel_polynomial  2 H~ |prev1> - |prev2>

Matrix elements for a pair (i, j) with x_j - x_i = xx_ij:
  H~_ij        = t_ij / E_max
  [X, H~]_ij   = -xx_ij * H~_ij
  V_ij         = i * xx_ij * t_ij

Features:
  - CuPy + SciPy automatic backend selection
  - All operators return new arrays (inputs are never modified)
"""

import numpy as np
import scipy.sparse as sp
from typing import Optional

# GPU support (optional)
try:
    import cupy as cp
    import cupyx.scipy.sparse as csp
    HAS_CUPY = True
except ImportError:
    cp = np
    csp = sp
    HAS_CUPY = False

from .model import Model


class SparseHamiltonian:
    """
    Scaled sparse Hamiltonian with position commutator and current operator.

    Example:
        >>> model = Model.from_directory('examples/chain')
        >>> H = SparseHamiltonian.from_model(model, use_gpu=False)
        >>> phi = H.asarray(model.initialize_state())
        >>> H_phi = H.apply(phi)
    """

    def __init__(self,
                 H_scaled,
                 commutator_scaled,
                 current,
                 energy_max: float,
                 use_gpu: bool = True,
                 verbose: bool = False):
        """
        Args:
            H_scaled: H / E_max as sparse matrix
            commutator_scaled: [X, H / E_max] as sparse matrix
            current: Velocity operator i[H, X] as sparse matrix
            energy_max: Spectral scaling factor
            use_gpu: Use GPU acceleration if available
            verbose: Print backend information
        """
        self.energy_max = float(energy_max)
        self.use_gpu = use_gpu and HAS_CUPY
        self.dim = H_scaled.shape[0]

        # Backend selection
        if self.use_gpu:
            self.xp = cp
            self.sparse = csp
        else:
            self.xp = np
            self.sparse = sp

        self.H = self._to_backend(H_scaled)
        self.C = self._to_backend(commutator_scaled)
        self.V = self._to_backend(current)

        if verbose:
            print(f"🚀 SparseHamiltonian: N={self.dim:,}, nnz={self.H.nnz:,}")
            print(f"   Backend: {'GPU (CuPy)' if self.use_gpu else 'CPU (SciPy)'}")

    def _to_backend(self, matrix):
        matrix = sp.csr_matrix(matrix, dtype=np.complex128)
        if self.use_gpu:
            return csp.csr_matrix(matrix)
        return matrix

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_model(cls, model: Model, use_gpu: bool = True,
                   verbose: bool = False) -> 'SparseHamiltonian':
        """Assemble H~, [X, H~] and V from the model's neighbor list."""
        n = model.number_of_atoms
        e_max = model.energy_max
        rows = model.pair_rows()
        cols = model.neighbor_list
        hop = model.hopping
        xx = model.position_differences()

        hop_matrix = sp.csr_matrix((hop, (rows, cols)), shape=(n, n), dtype=np.complex128)
        H = (hop_matrix + sp.diags(model.potential.astype(np.complex128))) / e_max
        C = sp.csr_matrix((-xx * hop / e_max, (rows, cols)), shape=(n, n), dtype=np.complex128)
        V = sp.csr_matrix((1j * xx * hop, (rows, cols)), shape=(n, n), dtype=np.complex128)

        return cls(H, C, V, e_max, use_gpu=use_gpu, verbose=verbose)

    @classmethod
    def from_matrices(cls, H, x: Optional[np.ndarray] = None, energy_max: float = 1.0,
                      use_gpu: bool = False) -> 'SparseHamiltonian':
        """
        Build from an unscaled (dense or sparse) Hamiltonian and positions.

        Without positions the commutator and current are zero operators.
        """
        H = sp.csr_matrix(H, dtype=np.complex128)
        n = H.shape[0]
        if x is None:
            zero = sp.csr_matrix((n, n), dtype=np.complex128)
            return cls(H / energy_max, zero, zero, energy_max, use_gpu=use_gpu)

        X = sp.diags(np.asarray(x, dtype=np.complex128))
        commutator = (X @ H - H @ X) / energy_max
        current = 1j * (H @ X - X @ H)
        return cls(H / energy_max, commutator, current, energy_max, use_gpu=use_gpu)

    # =========================================================================
    # Operators
    # =========================================================================

    def asarray(self, state):
        """Move a host state onto the active backend as complex128."""
        return self.xp.asarray(state, dtype=self.xp.complex128)

    def apply(self, state):
        """H~ |state>"""
        return self.H @ state

    def apply_commutator(self, state):
        """[X, H~] |state>"""
        return self.C @ state

    def apply_current(self, state):
        """V |state>"""
        return self.V @ state

    def kernel_polynomial(self, state_0, state_1):
        """One Chebyshev step: 2 H~ |state_1> - |state_0>"""
        return 2.0 * (self.H @ state_1) - state_0

    def is_hermitian(self, atol: float = 1e-12) -> bool:
        """Check H~ = H~^dagger."""
        diff = self.H - self.H.conj().T
        if diff.nnz == 0:
            return True
        return float(abs(diff).max()) < atol

    def __repr__(self) -> str:
        backend = 'GPU' if self.use_gpu else 'CPU'
        return f"SparseHamiltonian(N={self.dim}, nnz={self.H.nnz}, E_max={self.energy_max}, {backend})"
