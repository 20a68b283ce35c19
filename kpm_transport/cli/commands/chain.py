"""
Chain Command
=============

DOS, VAC and MSD of a uniform periodic 1D chain built in memory.

Usage:
    kpm-transport chain -L 1000 -M 400 --steps 10 --dt 1.0
"""

import typer
import numpy as np
from typing import Optional
from pathlib import Path

from ..utils import (
    print_banner, print_section, print_key_value,
    save_json, error_exit, result_summary
)


def chain(
    sites: int = typer.Option(1000, "-L", "--sites", help="Number of lattice sites"),
    moments: int = typer.Option(400, "-M", "--moments", help="Number of Chebyshev moments"),
    t_hop: float = typer.Option(1.0, "-t", help="Hopping parameter"),
    steps: int = typer.Option(0, "--steps", help="Correlation steps (0: DOS only)"),
    dt: float = typer.Option(1.0, "--dt", help="Correlation time step"),
    vectors: int = typer.Option(1, "-R", "--vectors", help="Number of random vectors"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output JSON file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """
    KPM transport for a uniform 1D chain (bandwidth 4t).

    Example:
        kpm-transport chain -L 1000 -M 400 --steps 10
    """
    from kpm_transport.core.model import create_chain_model, ModelError
    from kpm_transport.solvers.transport import TransportSolver, SolverConfig

    print_banner()

    energy_max = 2.5 * abs(t_hop)
    time_step = np.full(steps, dt) if steps > 0 else None
    try:
        model = create_chain_model(sites, hopping=-t_hop, energy_max=energy_max,
                                   number_of_moments=moments, time_step=time_step,
                                   number_of_random_vectors=vectors, seed=seed)
    except ModelError as e:
        error_exit(f"Invalid chain: {e}", "Hopping, moments, vectors and sites must be positive")

    print_section("Chain", "⛓️")
    print_key_value("Sites (L)", sites)
    print_key_value("Hopping", t_hop)
    print_key_value("Moments", moments)
    print_key_value("Correlation steps", steps)

    solver = TransportSolver(model, SolverConfig(use_gpu=False, verbose=verbose))
    result = solver.run()

    print_section("Results", "📊")
    dos = result.mean('dos')
    center = int(np.argmin(np.abs(dos.energies)))
    print_key_value("DOS(E≈0)", f"{dos.values[0, center]:.4f}")
    print_key_value("Exact DOS(E=0)", f"{1.0 / (np.pi * abs(t_hop)):.4f}")
    if steps > 0:
        msd = result.mean('msd')
        print_key_value("MSD(E≈0, t_max)", f"{msd.values[-1, center]:.4f}")
    print_key_value("Wall time", f"{result.wall_time:.2f}s")

    if output:
        save_json(result_summary(result), output)

    typer.echo("\n✅ Done!")
