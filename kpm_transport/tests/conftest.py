"""
KPM Transport Test Configuration
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_hermitian(rng):
    """Dense 6x6 Hermitian matrix, positions and a safe E_max."""
    A = rng.normal(size=(6, 6)) + 1j * rng.normal(size=(6, 6))
    H = 0.5 * (A + A.conj().T)
    energy_max = 1.1 * np.max(np.abs(np.linalg.eigvalsh(H)))
    x = np.arange(6, dtype=np.float64) - 2.5
    return H, x, energy_max


@pytest.fixture
def random_state(rng):
    """Normalized random complex state of length 6."""
    psi = rng.normal(size=6) + 1j * rng.normal(size=6)
    return psi / np.linalg.norm(psi)


@pytest.fixture
def open_chain():
    """12-site open chain with three correlation steps."""
    from kpm_transport.core.model import create_chain_model
    return create_chain_model(12, periodic=False, number_of_moments=64,
                              time_step=np.array([0.5, 0.7, 0.4]), seed=7)


def write_input_dir(path: Path, para: str, n_atoms: int = 4, time_steps=(1.0, 1.0),
                    hopping: bool = False, potential: bool = False) -> Path:
    """Periodic ring of n_atoms sites written as an input directory."""
    path.mkdir(parents=True, exist_ok=True)
    (path / 'para.in').write_text(para)
    (path / 'energy.in').write_text("3\n-1.0\n0.0\n1.0\n")
    (path / 'time_step.in').write_text(
        f"{len(time_steps)}\n" + "\n".join(str(t) for t in time_steps) + "\n")

    lines = [f"{n_atoms} 2"]
    for i in range(n_atoms):
        lines.append(f"2 {(i - 1) % n_atoms} {(i + 1) % n_atoms}")
    (path / 'neighbor.in').write_text("\n".join(lines) + "\n")

    positions = [f"{float(n_atoms)} {float(n_atoms)}"] + [str(float(i)) for i in range(n_atoms)]
    (path / 'position.in').write_text("\n".join(positions) + "\n")

    if potential:
        (path / 'potential.in').write_text("\n".join("0.1" for _ in range(n_atoms)) + "\n")
    if hopping:
        (path / 'hopping.in').write_text("\n".join("-1.0 0.0" for _ in range(2 * n_atoms)) + "\n")
    return path


@pytest.fixture
def input_dir(tmp_path):
    para = "number_of_moments 32\nenergy_max 3.0\nnumber_of_random_vectors 2\nseed 11\n" \
           "calculate_vac\ncalculate_msd\n"
    return write_input_dir(tmp_path / 'ring', para)


def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "gpu: marks tests that require GPU"
    )
