"""
DOS Command
===========

Density of states only for a model stored in an input directory.
VAC/MSD flags in para.in are ignored, so time_step.in is not needed
when only the DOS is wanted.

Usage:
    kpm-transport dos examples/chain --output-dir results/
"""

import typer
import numpy as np
from typing import Optional
from pathlib import Path

from ..utils import (
    print_banner, print_section, print_key_value,
    save_json, error_exit, result_summary
)


def dos(
    input_dir: Path = typer.Argument(..., help="Directory with para.in, energy.in, ..."),
    output_dir: Optional[Path] = typer.Option(None, "-d", "--output-dir",
                                              help="Where to append dos.out (default: INPUT_DIR)"),
    gpu: bool = typer.Option(True, "--gpu/--cpu", help="Use CuPy when available"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output JSON summary"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """
    Density of states of an input directory.

    Example:
        kpm-transport dos examples/chain -d results/
    """
    from kpm_transport.core.model import Model, ModelError
    from kpm_transport.solvers.transport import TransportSolver, SolverConfig, OutputError

    print_banner()

    try:
        model = Model.from_directory(input_dir, dos_only=True, verbose=verbose)
    except ModelError as e:
        error_exit(f"Invalid input: {e}", "See 'kpm-transport info' for the file layout")

    output_dir = output_dir or input_dir

    print_section("Model", "🧱")
    print_key_value("Atoms", f"{model.number_of_atoms:,}")
    print_key_value("Moments", model.number_of_moments)
    print_key_value("Energy points", model.number_of_energy_points)
    print_key_value("Random vectors", model.params.number_of_random_vectors)

    config = SolverConfig(output_dir=output_dir, use_gpu=gpu, verbose=verbose)
    try:
        result = TransportSolver(model, config).run()
    except OutputError as e:
        error_exit(str(e))

    mean = result.mean('dos')
    peak = int(np.argmax(mean.values[0]))

    print_section("Results", "📊")
    print_key_value("Curves", len(result.dos))
    print_key_value("Peak DOS", f"{mean.values[0, peak]:.4f} at E={mean.energies[peak]:.4f}")
    print_key_value("Written", Path(output_dir) / 'dos.out')

    if output:
        save_json(result_summary(result), output)

    typer.echo("\n✅ Done!")
