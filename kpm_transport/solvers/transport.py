"""
Transport Solver
================

Runs DOS, VAC and MSD over all random vectors of a model and appends
the curves to dos.out, vac.out and msd.out.

Output format: one row per curve (DOS) or per correlation step
(VAC, MSD), values separated by single spaces, newline terminated.
Rows from successive random vectors are appended; averaging is done
afterwards (see TransportResult.mean).
"""

import time
import numpy as np
from pathlib import Path
from typing import Optional, Dict, List, Union
from dataclasses import dataclass, field

from ..core.model import Model
from ..core.hamiltonian import SparseHamiltonian
from .correlation import (
    CorrelationResult, find_dos, find_vac, find_msd, average_results
)
from .evolution import MAX_ITERATIONS


OUTPUT_FILES = {
    'dos': 'dos.out',
    'vac': 'vac.out',
    'msd': 'msd.out',
}


class OutputError(OSError):
    """An output file could not be opened or written."""


def append_rows(path: Union[str, Path], rows: np.ndarray):
    """Append rows of floats, space separated, one line per row."""
    path = Path(path)
    rows = np.atleast_2d(rows)
    try:
        with open(path, 'a') as f:
            for row in rows:
                f.write(' '.join(f"{v:.15e}" for v in row))
                f.write('\n')
    except OSError as e:
        raise OutputError(f"Cannot write {path}: {e}") from e


@dataclass
class SolverConfig:
    """Transport run settings"""
    output_dir: Optional[Path] = None   # None: keep results in memory only
    use_gpu: bool = True
    strict: bool = False                # raise when the evolution series is capped
    max_iterations: int = MAX_ITERATIONS
    verbose: bool = True


@dataclass
class TransportResult:
    """Results for all random vectors"""
    dos: List[CorrelationResult] = field(default_factory=list)
    vac: List[CorrelationResult] = field(default_factory=list)
    msd: List[CorrelationResult] = field(default_factory=list)
    wall_time: float = 0.0

    def mean(self, name: str) -> Optional[CorrelationResult]:
        """Average of one observable over random vectors."""
        return average_results(getattr(self, name))

    def summary(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in OUTPUT_FILES}


class TransportSolver:
    """
    Linear-scaling quantum transport via KPM.

    Example:
        >>> model = Model.from_directory('examples/chain')
        >>> solver = TransportSolver(model, SolverConfig(output_dir=Path('.')))
        >>> result = solver.run()
        >>> dos = result.mean('dos')
    """

    def __init__(self, model: Model, config: Optional[SolverConfig] = None,
                 hamiltonian: Optional[SparseHamiltonian] = None):
        self.model = model
        self.config = config or SolverConfig()
        self.H = hamiltonian or SparseHamiltonian.from_model(
            model, use_gpu=self.config.use_gpu, verbose=self.config.verbose)

    def _write(self, result: CorrelationResult):
        if self.config.output_dir is None:
            return
        append_rows(Path(self.config.output_dir) / OUTPUT_FILES[result.name], result.values)

    def run_vector(self, random_state, result: TransportResult):
        """All requested observables for one random vector."""
        cfg = self.config
        params = self.model.params
        kwargs = dict(max_iterations=cfg.max_iterations, strict=cfg.strict)

        dos = find_dos(self.model, self.H, random_state)
        self._write(dos)
        result.dos.append(dos)

        if params.calculate_vac:
            vac = find_vac(self.model, self.H, random_state, verbose=cfg.verbose, **kwargs)
            self._write(vac)
            result.vac.append(vac)

        if params.calculate_msd:
            msd = find_msd(self.model, self.H, random_state, verbose=cfg.verbose, **kwargs)
            self._write(msd)
            result.msd.append(msd)

    def run(self) -> TransportResult:
        """Loop over random vectors."""
        cfg = self.config
        n_vectors = self.model.params.number_of_random_vectors
        result = TransportResult()

        if cfg.output_dir is not None:
            out = Path(cfg.output_dir)
            if not out.is_dir():
                raise OutputError(f"Output directory does not exist: {out}")

        if cfg.verbose:
            print(f"⏱️ KPM transport: {n_vectors} random vector(s)")
            print(f"   Observables: DOS"
                  f"{', VAC' if self.model.params.calculate_vac else ''}"
                  f"{', MSD' if self.model.params.calculate_msd else ''}")

        t0_wall = time.time()

        for i in range(n_vectors):
            random_state = self.model.initialize_state()
            self.run_vector(random_state, result)

            if cfg.verbose:
                elapsed = time.time() - t0_wall
                print(f"   Random vector {i + 1}/{n_vectors}: t={elapsed:.2f}s")

        result.wall_time = time.time() - t0_wall

        if cfg.verbose:
            print(f"   ✅ Done in {result.wall_time:.2f}s")

        return result
