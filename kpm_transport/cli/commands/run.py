"""
Run Command
===========

Compute DOS (and VAC / MSD when requested in para.in) for a model
stored in an input directory. Rows are appended to dos.out, vac.out
and msd.out in the output directory.

Usage:
    kpm-transport run examples/chain --output-dir results/
"""

import warnings
import typer
from typing import Optional
from pathlib import Path

from ..utils import (
    print_banner, print_section, print_key_value,
    save_json, error_exit, result_summary
)


def run(
    input_dir: Path = typer.Argument(..., help="Directory with para.in, energy.in, ..."),
    output_dir: Optional[Path] = typer.Option(None, "-d", "--output-dir",
                                              help="Where to append *.out files (default: INPUT_DIR)"),
    gpu: bool = typer.Option(True, "--gpu/--cpu", help="Use CuPy when available"),
    strict: bool = typer.Option(False, "--strict", help="Fail if an evolution series is capped"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output JSON summary"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """
    Run KPM transport for an input directory.

    Example:
        kpm-transport run examples/chain -d results/
    """
    from kpm_transport.core.model import Model, ModelError
    from kpm_transport.solvers.transport import TransportSolver, SolverConfig, OutputError
    from kpm_transport.solvers.evolution import EvolutionNotConvergedError

    print_banner()

    try:
        model = Model.from_directory(input_dir, verbose=verbose)
    except ModelError as e:
        error_exit(f"Invalid input: {e}", "See 'kpm-transport info' for the file layout")

    output_dir = output_dir or input_dir

    print_section("Model", "🧱")
    print_key_value("Atoms", f"{model.number_of_atoms:,}")
    print_key_value("Moments", model.number_of_moments)
    print_key_value("E_max", model.energy_max)
    print_key_value("Energy points", model.number_of_energy_points)
    print_key_value("Correlation steps", model.number_of_steps_correlation)
    print_key_value("Random vectors", model.params.number_of_random_vectors)
    print_key_value("Output", output_dir)

    config = SolverConfig(output_dir=output_dir, use_gpu=gpu, strict=strict, verbose=verbose)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = TransportSolver(model, config).run()
        except OutputError as e:
            error_exit(str(e))
        except EvolutionNotConvergedError as e:
            error_exit(str(e), "Reduce the time steps or raise max_iterations")

    for w in caught:
        typer.echo(f"⚠️  {w.message}", err=True)

    print_section("Results", "📊")
    for name, count in result.summary().items():
        if count:
            print_key_value(name.upper(), f"{count} curve set(s)")
    print_key_value("Wall time", f"{result.wall_time:.2f}s")

    if output:
        save_json(result_summary(result), output)

    typer.echo("\n✅ Done!")
