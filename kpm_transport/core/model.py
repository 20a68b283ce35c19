"""
Lattice Model for KPM Transport
===============================

Tight-binding model definition loaded from an input directory.

Input files (whitespace separated):
  para.in        keyword/value parameters and flags
  energy.in      Ne, then Ne energies
  time_step.in   Nt, then Nt correlation time steps (VAC/MSD only)
  neighbor.in    N max_neighbor, then per atom: count j1 j2 ...
  position.in    box volume, then N x-coordinates
  potential.in   N on-site energies (optional, default 0)
  hopping.in     one line per pair: real [imag] (optional, default -1)

The neighbor list is stored in CSR form (``neighbor_offset``,
``neighbor_list``) so that the Hamiltonian can be assembled directly
into a ``scipy.sparse.csr_matrix``.
"""

import numpy as np
from pathlib import Path
from typing import Optional, Union, List
from dataclasses import dataclass, field


DEFAULT_HOPPING = -1.0


class ModelError(ValueError):
    """Malformed or inconsistent model input."""


@dataclass
class ModelParameters:
    """Parameters read from para.in"""
    number_of_moments: int = 1000
    energy_max: float = 10.0
    number_of_random_vectors: int = 1
    calculate_vac: bool = False
    calculate_msd: bool = False
    seed: Optional[int] = None

    @property
    def requires_time(self) -> bool:
        """VAC and MSD need correlation time steps."""
        return self.calculate_vac or self.calculate_msd

    def validate(self):
        """Raise ModelError for values the solvers cannot run with."""
        if self.number_of_moments < 1:
            raise ModelError(f"number_of_moments must be >= 1, got {self.number_of_moments}")
        if not self.energy_max > 0:
            raise ModelError(f"energy_max must be positive, got {self.energy_max}")
        if self.number_of_random_vectors < 1:
            raise ModelError(
                f"number_of_random_vectors must be >= 1, got {self.number_of_random_vectors}")


# =============================================================================
# File Helpers
# =============================================================================

def _read_tokens(path: Path) -> List[str]:
    """Read all whitespace separated tokens, skipping # comments."""
    try:
        text = path.read_text()
    except OSError as e:
        raise ModelError(f"Cannot read {path}: {e}") from e
    tokens = []
    for line in text.splitlines():
        tokens.extend(line.split('#', 1)[0].split())
    return tokens


def _read_counted(path: Path) -> np.ndarray:
    """Read a file of the form 'n v_1 ... v_n'."""
    tokens = _read_tokens(path)
    if not tokens:
        raise ModelError(f"{path.name} is empty")
    try:
        n = int(tokens[0])
        values = np.array([float(v) for v in tokens[1:]], dtype=np.float64)
    except ValueError as e:
        raise ModelError(f"{path.name}: {e}") from e
    if n < 1:
        raise ModelError(f"{path.name}: count must be positive, got {n}")
    if values.size != n:
        raise ModelError(f"{path.name}: expected {n} values, found {values.size}")
    return values


def parse_parameters(path: Union[str, Path]) -> ModelParameters:
    """
    Parse para.in.

    Each non-empty line is either a bare flag (calculate_vac, calculate_msd)
    or a keyword followed by one value.
    """
    path = Path(path)
    try:
        lines = path.read_text().splitlines()
    except OSError as e:
        raise ModelError(f"Cannot read {path}: {e}") from e

    params = ModelParameters()
    converters = {
        'number_of_moments': int,
        'energy_max': float,
        'number_of_random_vectors': int,
        'seed': int,
    }

    for lineno, raw in enumerate(lines, start=1):
        words = raw.split('#', 1)[0].split()
        if not words:
            continue
        key = words[0]
        if key in ('calculate_vac', 'calculate_msd'):
            if len(words) != 1:
                raise ModelError(f"para.in:{lineno}: '{key}' takes no value")
            setattr(params, key, True)
        elif key in converters:
            if len(words) != 2:
                raise ModelError(f"para.in:{lineno}: '{key}' needs exactly one value")
            try:
                setattr(params, key, converters[key](words[1]))
            except ValueError as e:
                raise ModelError(f"para.in:{lineno}: {e}") from e
        else:
            raise ModelError(f"para.in:{lineno}: unknown keyword '{key}'")

    params.validate()
    return params


# =============================================================================
# Model
# =============================================================================

@dataclass(eq=False)
class Model:
    """
    Tight-binding model in real space.

    Attributes:
        params: Run parameters (moments, energy_max, flags)
        energy: Energy grid (unscaled)
        time_step: Correlation time steps (unscaled, may be empty)
        neighbor_offset: CSR row pointer into neighbor_list, shape (N+1,)
        neighbor_list: Neighbor indices, one entry per pair
        hopping: Complex hopping per pair
        potential: On-site energies, shape (N,)
        x: Positions along the transport direction, shape (N,)
        box: Periodic box length (<= 0 disables the minimum image)
        volume: System volume used to normalize observables
    """
    params: ModelParameters
    energy: np.ndarray
    neighbor_offset: np.ndarray
    neighbor_list: np.ndarray
    x: np.ndarray
    volume: float
    box: float = 0.0
    hopping: Optional[np.ndarray] = None
    potential: Optional[np.ndarray] = None
    time_step: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        n = self.number_of_atoms
        self.params.validate()
        self.energy = np.asarray(self.energy, dtype=np.float64)
        self.x = np.asarray(self.x, dtype=np.float64)
        self.time_step = np.asarray(self.time_step, dtype=np.float64)
        self.neighbor_offset = np.asarray(self.neighbor_offset, dtype=np.int64)
        self.neighbor_list = np.asarray(self.neighbor_list, dtype=np.int64)

        if self.hopping is None:
            self.hopping = np.full(self.number_of_pairs, DEFAULT_HOPPING, dtype=np.complex128)
        else:
            self.hopping = np.asarray(self.hopping, dtype=np.complex128)
        if self.potential is None:
            self.potential = np.zeros(n, dtype=np.float64)
        else:
            self.potential = np.asarray(self.potential, dtype=np.float64)

        if self.x.size != n:
            raise ModelError(f"expected {n} positions, got {self.x.size}")
        if self.potential.size != n:
            raise ModelError(f"expected {n} potential values, got {self.potential.size}")
        if self.hopping.size != self.number_of_pairs:
            raise ModelError(
                f"expected {self.number_of_pairs} hopping values, got {self.hopping.size}")
        if self.number_of_pairs and (self.neighbor_list.min() < 0
                                     or self.neighbor_list.max() >= n):
            raise ModelError("neighbor index out of range")
        if self.volume <= 0:
            raise ModelError("volume must be positive")
        if self.params.requires_time and self.time_step.size == 0:
            raise ModelError("VAC/MSD requested but no time steps given")

        self._rng = np.random.default_rng(self.params.seed)

    # -------------------------------------------------------------------------
    # Sizes
    # -------------------------------------------------------------------------

    @property
    def number_of_atoms(self) -> int:
        return len(self.neighbor_offset) - 1

    @property
    def number_of_pairs(self) -> int:
        return len(self.neighbor_list)

    @property
    def number_of_energy_points(self) -> int:
        return len(self.energy)

    @property
    def number_of_steps_correlation(self) -> int:
        return len(self.time_step)

    @property
    def number_of_moments(self) -> int:
        return self.params.number_of_moments

    @property
    def energy_max(self) -> float:
        return self.params.energy_max

    @property
    def correlation_times(self) -> np.ndarray:
        """Correlation time at each VAC/MSD row: 0, dt_0, dt_0 + dt_1, ..."""
        if self.time_step.size == 0:
            return np.zeros(0)
        return np.concatenate(([0.0], np.cumsum(self.time_step[:-1])))

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def pair_rows(self) -> np.ndarray:
        """Row index i of every pair (i, j)."""
        counts = np.diff(self.neighbor_offset)
        return np.repeat(np.arange(self.number_of_atoms), counts)

    def position_differences(self) -> np.ndarray:
        """x_j - x_i for every pair, minimum image when box > 0."""
        rows = self.pair_rows()
        xx = self.x[self.neighbor_list] - self.x[rows]
        if self.box > 0:
            xx = xx - self.box * np.round(xx / self.box)
        return xx

    # -------------------------------------------------------------------------
    # Random state
    # -------------------------------------------------------------------------

    def initialize_state(self) -> np.ndarray:
        """
        Random-phase state phi_i = exp(i theta_i), theta_i ~ U[0, 2pi).

        Successive calls draw new phases from the model's generator.
        """
        phase = self._rng.uniform(0.0, 2.0 * np.pi, self.number_of_atoms)
        return np.exp(1j * phase)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_neighbors(cls, params: ModelParameters, energy, neighbors: List[List[int]],
                       x, volume: float, **kwargs) -> 'Model':
        """Build a model from a per-atom list of neighbor indices."""
        counts = [len(nb) for nb in neighbors]
        offset = np.concatenate(([0], np.cumsum(counts))).astype(np.int64)
        flat = np.array([j for nb in neighbors for j in nb], dtype=np.int64)
        return cls(params=params, energy=energy, neighbor_offset=offset,
                   neighbor_list=flat, x=x, volume=volume, **kwargs)

    @classmethod
    def from_directory(cls, input_dir: Union[str, Path], dos_only: bool = False,
                       verbose: bool = False) -> 'Model':
        """
        Load a model from an input directory.

        With dos_only the VAC/MSD flags are cleared and time_step.in is skipped.
        """
        d = Path(input_dir)
        if not d.is_dir():
            raise ModelError(f"Input directory not found: {d}")

        params = parse_parameters(d / 'para.in')
        if dos_only:
            params.calculate_vac = False
            params.calculate_msd = False
        energy = _read_counted(d / 'energy.in')

        time_step = np.zeros(0)
        if params.requires_time:
            time_step = _read_counted(d / 'time_step.in')

        neighbors = _read_neighbors(d / 'neighbor.in')
        n_atoms = len(neighbors)

        box, volume, x = _read_positions(d / 'position.in', n_atoms)

        potential = None
        if (d / 'potential.in').exists():
            potential = _read_values(d / 'potential.in', n_atoms)

        hopping = None
        if (d / 'hopping.in').exists():
            hopping = _read_hopping(d / 'hopping.in', sum(len(nb) for nb in neighbors))

        model = cls.from_neighbors(params, energy, neighbors, x, volume, box=box,
                                   hopping=hopping, potential=potential,
                                   time_step=time_step)

        if verbose:
            print(f"📂 Model loaded from {d}")
            print(f"   Atoms: {model.number_of_atoms:,}, pairs: {model.number_of_pairs:,}")
            print(f"   Moments: {model.number_of_moments}, E_max: {model.energy_max}")
            print(f"   Energy points: {model.number_of_energy_points}, "
                  f"correlation steps: {model.number_of_steps_correlation}")
        return model

    def __repr__(self) -> str:
        return (f"Model(N={self.number_of_atoms}, pairs={self.number_of_pairs}, "
                f"M={self.number_of_moments}, Ne={self.number_of_energy_points}, "
                f"Nt={self.number_of_steps_correlation})")


def _read_neighbors(path: Path) -> List[List[int]]:
    try:
        lines = [l.split('#', 1)[0].split() for l in path.read_text().splitlines()]
    except OSError as e:
        raise ModelError(f"Cannot read {path}: {e}") from e
    lines = [l for l in lines if l]
    if not lines or len(lines[0]) != 2:
        raise ModelError("neighbor.in: first line must be 'N max_neighbor'")

    try:
        n_atoms, max_neighbor = int(lines[0][0]), int(lines[0][1])
        rows = [[int(v) for v in l] for l in lines[1:]]
    except ValueError as e:
        raise ModelError(f"neighbor.in: {e}") from e

    if len(rows) != n_atoms:
        raise ModelError(f"neighbor.in: expected {n_atoms} atom lines, found {len(rows)}")

    neighbors = []
    for i, row in enumerate(rows):
        count, nb = row[0], row[1:]
        if count != len(nb):
            raise ModelError(f"neighbor.in: atom {i} lists {len(nb)} neighbors, declared {count}")
        if count > max_neighbor:
            raise ModelError(f"neighbor.in: atom {i} exceeds max_neighbor={max_neighbor}")
        neighbors.append(nb)
    return neighbors


def _read_positions(path: Path, n_atoms: int):
    tokens = _read_tokens(path)
    try:
        values = [float(v) for v in tokens]
    except ValueError as e:
        raise ModelError(f"position.in: {e}") from e
    if len(values) != n_atoms + 2:
        raise ModelError(f"position.in: expected box, volume and {n_atoms} positions")
    return values[0], values[1], np.array(values[2:])


def _read_values(path: Path, n: int) -> np.ndarray:
    tokens = _read_tokens(path)
    try:
        values = np.array([float(v) for v in tokens], dtype=np.float64)
    except ValueError as e:
        raise ModelError(f"{path.name}: {e}") from e
    if values.size != n:
        raise ModelError(f"{path.name}: expected {n} values, found {values.size}")
    return values


def _read_hopping(path: Path, n_pairs: int) -> np.ndarray:
    try:
        lines = [l.split('#', 1)[0].split() for l in path.read_text().splitlines()]
    except OSError as e:
        raise ModelError(f"Cannot read {path}: {e}") from e
    lines = [l for l in lines if l]
    if len(lines) != n_pairs:
        raise ModelError(f"hopping.in: expected {n_pairs} lines, found {len(lines)}")

    hopping = np.empty(n_pairs, dtype=np.complex128)
    for k, words in enumerate(lines):
        if len(words) not in (1, 2):
            raise ModelError(f"hopping.in:{k + 1}: expected 'real [imag]'")
        try:
            re = float(words[0])
            im = float(words[1]) if len(words) == 2 else 0.0
        except ValueError as e:
            raise ModelError(f"hopping.in:{k + 1}: {e}") from e
        hopping[k] = re + 1j * im
    return hopping


# =============================================================================
# Factory Functions
# =============================================================================

def create_chain_model(L: int,
                       hopping: float = -1.0,
                       energy_max: float = 2.5,
                       number_of_moments: int = 200,
                       energies: Optional[np.ndarray] = None,
                       time_step: Optional[np.ndarray] = None,
                       periodic: bool = True,
                       number_of_random_vectors: int = 1,
                       seed: Optional[int] = None) -> Model:
    """
    Uniform 1D chain with unit lattice spacing.

    VAC and MSD are enabled when time steps are given.
    """
    if periodic:
        neighbors = [[(i - 1) % L, (i + 1) % L] for i in range(L)]
    else:
        neighbors = [[j for j in (i - 1, i + 1) if 0 <= j < L] for i in range(L)]

    if energies is None:
        energies = np.linspace(-0.9, 0.9, 37) * energy_max
    has_time = time_step is not None and len(time_step) > 0

    params = ModelParameters(
        number_of_moments=number_of_moments,
        energy_max=energy_max,
        number_of_random_vectors=number_of_random_vectors,
        calculate_vac=has_time,
        calculate_msd=has_time,
        seed=seed,
    )
    n_pairs = sum(len(nb) for nb in neighbors)
    return Model.from_neighbors(
        params, energies, neighbors,
        x=np.arange(L, dtype=np.float64),
        volume=float(L),
        box=float(L) if periodic else 0.0,
        hopping=np.full(n_pairs, hopping, dtype=np.complex128),
        time_step=time_step if has_time else np.zeros(0),
    )
